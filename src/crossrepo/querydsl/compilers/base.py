"""Base emitter interface.

Defines the abstract contract all backend-specific emitters must follow.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict

from crossrepo.exceptions import InvalidFilterValue

from ..plan import QueryPlan
from ..predicates import Predicate

__all__ = ("BaseEmitter",)


class BaseEmitter(ABC):
    """Abstract base class for query plan emitters.

    Subclasses map each universal operator to a handler name in `_OP_MAP`
    and implement `emit` and `to_expr`.
    """

    _OP_MAP: Dict[str, str] = {}

    @abstractmethod
    def emit(self, plan: QueryPlan, *args: Any, **kwargs: Any) -> Any:
        """
        Convert a QueryPlan into the backend-native query.
        - SqlQuery for the relational backend
        - MongoQuery for the document store
        - where/order/include dict for the schema-first ORM
        - chained builder calls for the active-record ORM
        """
        raise NotImplementedError

    @abstractmethod
    def to_expr(self, plan: QueryPlan) -> str:
        """Convert a QueryPlan into a string expression for debugging."""
        raise NotImplementedError

    def _handler(self, field: str, predicate: Predicate) -> Callable[..., Any]:
        name = self._OP_MAP.get(predicate.op)
        if name is None:
            raise InvalidFilterValue(
                f"Operator {predicate.op} is not supported. Supported: {', '.join(sorted(self._OP_MAP.keys()))}",
                field=field,
                emitter=self.__class__.__name__,
            )
        return getattr(self, name)
