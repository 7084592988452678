"""Filter compiler.

Turns a `FilterContract` into a `QueryPlan`. Within each scope includes are
compiled first, then where, then orderBy; emitters that build joins before
predicates rely on that order.
"""

import hashlib
from typing import Any, Optional

from crossrepo.constants import DIRECTION_MAP, ROOT_ALIAS, Direction
from crossrepo.exceptions import InvalidOrderDirection
from crossrepo.schema import FilterContract
from crossrepo.settings import settings

from .parser import parse_value
from .plan import OrderClause, QueryPlan
from .predicates import Condition
from .whitelist import WhitelistGuard

__all__ = ("FilterCompiler", "compile_contract", "parse_direction", "filter_compiler")


def parse_direction(value: Any, field: Optional[str] = None) -> Direction:
    """Normalize an order direction string ("asc", "DESC", ...) to `Direction`."""
    if isinstance(value, Direction):
        return value
    direction = DIRECTION_MAP.get(str(value).strip().lower()) if value is not None else None
    if direction is None:
        raise InvalidOrderDirection("Order direction must be 'asc' or 'desc'", field=field, value=value)
    return direction


class FilterCompiler:
    """Compile filter contracts into query plans.

    Include aliases are derived from the parent alias, the include's position
    among its siblings and the relation name, so compiling the same contract
    twice gives the same aliases and two sibling includes never share one.
    """

    def __init__(self, digest_length: Optional[int] = None, uppercase: bool = True) -> None:
        self.digest_length = digest_length or settings.ALIAS_DIGEST_LENGTH
        self.uppercase = uppercase

    def make_alias(self, parent_alias: str, index: int, relation: str) -> str:
        seed = f"{parent_alias}/{index}:{relation}".encode("utf-8")
        digest = hashlib.sha1(seed).hexdigest()[: self.digest_length]
        alias = f"{relation}_{digest}"
        return alias.upper() if self.uppercase else alias

    def compile(
        self,
        options: Any = None,
        alias: str = ROOT_ALIAS,
        guard: Optional[WhitelistGuard] = None,
    ) -> QueryPlan:
        """Compile repository options into a root QueryPlan.

        Args:
            options: FilterContract, dict or None
            alias: Alias of the root scope
            guard: Whitelist applied first when the contract is external

        Returns:
            Root QueryPlan

        Raises:
            FilterFieldNotAllowed: External contract filters by a non-whitelisted field
            IncludeNotAllowed: External contract includes a non-whitelisted relation
            InvalidFilterValue: A where value or order direction is malformed
        """
        contract = FilterContract.from_any(options)
        if guard is not None and not contract.is_internal_request:
            guard.validate(contract)
        return self._compile_scope(contract, alias, None, ())

    def _compile_scope(self, contract: FilterContract, alias: str, relation: Optional[str], path: tuple) -> QueryPlan:
        includes = tuple(
            self._compile_scope(
                include,
                self.make_alias(alias, index, include.relation),
                include.relation,
                path + (include.relation,),
            )
            for index, include in enumerate(contract.includes or ())
        )
        conditions = tuple(
            Condition(field, parse_value(value, field=field)) for field, value in (contract.where or {}).items()
        )
        ordering = tuple(
            OrderClause(field, parse_direction(direction, field=field))
            for field, direction in (contract.order_by or {}).items()
        )
        return QueryPlan(
            alias=alias,
            relation=relation,
            path=path,
            includes=includes,
            conditions=conditions,
            ordering=ordering,
        )


filter_compiler = FilterCompiler()


def compile_contract(options: Any = None, alias: str = ROOT_ALIAS, guard: Optional[WhitelistGuard] = None) -> QueryPlan:
    """Compile with the module-level compiler."""
    return filter_compiler.compile(options, alias=alias, guard=guard)
