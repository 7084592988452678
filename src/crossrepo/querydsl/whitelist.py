"""Whitelist guard for caller-supplied filter contracts."""

from typing import Iterable, Optional

from crossrepo.exceptions import FilterFieldNotAllowed, IncludeNotAllowed
from crossrepo.logger import Logger
from crossrepo.schema import FilterContract

__all__ = ("WhitelistGuard",)


class WhitelistGuard:
    """Allow-list of filterable fields and includable relations.

    Where keys must appear in `wheres` and include relations in `relations`,
    at every nesting level. Names are matched bare: a `company` include inside
    `owner` needs `company` in `relations`.
    """

    def __init__(self, wheres: Optional[Iterable[str]] = None, relations: Optional[Iterable[str]] = None) -> None:
        self.wheres = frozenset(wheres or ())
        self.relations = frozenset(relations or ())
        self.logger = Logger(self.__class__.__name__)

    def validate(self, contract: FilterContract) -> None:
        """Raise on the first field or relation outside the allow-lists.

        Runs over the whole contract before anything is compiled, so a
        rejected contract never produces a query.
        """
        self._validate_scope(contract)

    def allow_filter(self, field: str) -> None:
        if field not in self.wheres:
            self.logger.warning("Rejected filter field %s", field)
            raise FilterFieldNotAllowed(field)

    def allow_include(self, relation: str) -> None:
        if relation not in self.relations:
            self.logger.warning("Rejected include %s", relation)
            raise IncludeNotAllowed(relation)

    def _validate_scope(self, contract: FilterContract) -> None:
        for field in contract.where or {}:
            self.allow_filter(field)
        for include in contract.includes or ():
            self.allow_include(include.relation)
            self._validate_scope(include)
