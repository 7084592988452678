"""Compiled query plans.

A `QueryPlan` is one scope (the root model or an included relation) with its
conditions, ordering and nested include scopes. Plans are immutable; helpers
return new plans.
"""

from dataclasses import dataclass, field, replace
from typing import Iterator, Optional, Tuple

from crossrepo.constants import Direction

from .predicates import Condition

__all__ = ("OrderClause", "QueryPlan")


@dataclass(frozen=True)
class OrderClause:
    field: str
    direction: Direction = Direction.ASC

    @property
    def descending(self) -> bool:
        return self.direction == Direction.DESC


@dataclass(frozen=True)
class QueryPlan:
    """Compiled scope.

    Attributes:
        alias: Scope alias (root alias or generated include alias)
        relation: Relation name for include scopes, None at the root
        path: Relation names from the root down to this scope
        includes: Nested include scopes, in contract order
        conditions: ANDed conditions on this scope's fields
        ordering: Order clauses on this scope's fields
    """

    alias: str
    relation: Optional[str] = None
    path: Tuple[str, ...] = ()
    includes: Tuple["QueryPlan", ...] = ()
    conditions: Tuple[Condition, ...] = ()
    ordering: Tuple[OrderClause, ...] = field(default=())

    @property
    def is_root(self) -> bool:
        return self.relation is None

    @property
    def dotted_path(self) -> str:
        return ".".join(self.path)

    def prepend(self, condition: Condition) -> "QueryPlan":
        """Return a copy with `condition` placed before the existing conditions."""
        return replace(self, conditions=(condition,) + self.conditions)

    def without_includes(self) -> "QueryPlan":
        return replace(self, includes=())

    def walk(self) -> Iterator["QueryPlan"]:
        """Yield this scope and every nested include scope, depth first."""
        yield self
        for include in self.includes:
            yield from include.walk()

    def shape(self) -> tuple:
        """Structure of the plan with aliases left out."""
        return (
            self.relation,
            self.path,
            self.conditions,
            self.ordering,
            tuple(include.shape() for include in self.includes),
        )
