"""Active-record emitter.

Drives a chainable query builder (Lucid/Eloquent style). Each condition
becomes one builder call; each include becomes an eager-load directive whose
callback applies the include's own scope to the related query.

Builder methods may mutate and return `self` or return a new builder; the
emitter always continues with the returned value.
"""

from typing import Any, Callable, Protocol, Sequence, Tuple

from ..plan import QueryPlan
from ..predicates import Op, Predicate
from .base import BaseEmitter
from .utils import escape_like, normalize_plan_input

__all__ = (
    "ActiveRecordQuery",
    "ActiveRecordEmitter",
    "activerecord_emitter",
)


class ActiveRecordQuery(Protocol):
    """Query builder calls the emitter relies on."""

    def where(self, field: str, value: Any) -> "ActiveRecordQuery": ...

    def where_not(self, field: str, value: Any) -> "ActiveRecordQuery": ...

    def where_in(self, field: str, values: Sequence[Any]) -> "ActiveRecordQuery": ...

    def where_not_in(self, field: str, values: Sequence[Any]) -> "ActiveRecordQuery": ...

    def where_between(self, field: str, bounds: Tuple[Any, Any]) -> "ActiveRecordQuery": ...

    def where_null(self, field: str) -> "ActiveRecordQuery": ...

    def where_not_null(self, field: str) -> "ActiveRecordQuery": ...

    def where_ilike(self, field: str, pattern: str) -> "ActiveRecordQuery": ...

    def order_by(self, field: str, direction: str) -> "ActiveRecordQuery": ...

    def preload(
        self, relation: str, callback: Callable[["ActiveRecordQuery"], "ActiveRecordQuery"]
    ) -> "ActiveRecordQuery": ...


class ActiveRecordEmitter(BaseEmitter):
    """Apply query plans to active-record query builders."""

    _OP_MAP = {
        Op.EQ: "_eq",
        Op.NE: "_ne",
        Op.IN: "_in",
        Op.NIN: "_nin",
        Op.RANGE: "_range",
        Op.NULL: "_null",
        Op.NOT_NULL: "_not_null",
        Op.CONTAINS: "_contains",
    }

    def emit(self, plan: Any, query: ActiveRecordQuery, conditions: bool = True) -> ActiveRecordQuery:
        """Apply includes, conditions and ordering of `plan` to `query`.

        Args:
            plan: QueryPlan, contract or dict
            query: Builder returned by the model's `query()`
            conditions: False to apply includes and ordering only

        Returns:
            The resulting builder
        """
        plan = normalize_plan_input(plan)
        for include in plan.includes:
            query = query.preload(include.relation, self._scope_callback(include))
        if conditions:
            query = self.emit_conditions(plan, query)
        for clause in plan.ordering:
            query = query.order_by(clause.field, clause.direction.value)
        return query

    def emit_conditions(self, plan: QueryPlan, query: ActiveRecordQuery) -> ActiveRecordQuery:
        for condition in plan.conditions:
            query = self._handler(condition.field, condition.predicate)(query, condition.field, condition.predicate)
        return query

    def to_expr(self, plan: QueryPlan) -> str:
        recorder = _CallRecorder()
        self.emit(plan, recorder)
        return ".".join(recorder.calls)

    def _scope_callback(self, scope: QueryPlan) -> Callable[[ActiveRecordQuery], ActiveRecordQuery]:
        def apply(related: ActiveRecordQuery) -> ActiveRecordQuery:
            return self.emit(scope, related)

        return apply

    def _eq(self, query: ActiveRecordQuery, field: str, predicate: Predicate) -> ActiveRecordQuery:
        return query.where(field, predicate.value)

    def _ne(self, query: ActiveRecordQuery, field: str, predicate: Predicate) -> ActiveRecordQuery:
        return query.where_not(field, predicate.value)

    def _in(self, query: ActiveRecordQuery, field: str, predicate: Predicate) -> ActiveRecordQuery:
        return query.where_in(field, list(predicate.value))

    def _nin(self, query: ActiveRecordQuery, field: str, predicate: Predicate) -> ActiveRecordQuery:
        return query.where_not_in(field, list(predicate.value))

    def _range(self, query: ActiveRecordQuery, field: str, predicate: Predicate) -> ActiveRecordQuery:
        return query.where_between(field, predicate.bounds)

    def _null(self, query: ActiveRecordQuery, field: str, predicate: Predicate) -> ActiveRecordQuery:
        return query.where_null(field)

    def _not_null(self, query: ActiveRecordQuery, field: str, predicate: Predicate) -> ActiveRecordQuery:
        return query.where_not_null(field)

    def _contains(self, query: ActiveRecordQuery, field: str, predicate: Predicate) -> ActiveRecordQuery:
        return query.where_ilike(field, f"%{escape_like(predicate.value)}%")


class _CallRecorder:
    """Builder stand-in that records calls for `to_expr`."""

    def __init__(self) -> None:
        self.calls: list = []

    def __getattr__(self, name: str) -> Callable[..., "_CallRecorder"]:
        def record(*args: Any) -> "_CallRecorder":
            if name == "preload":
                relation, callback = args
                nested = _CallRecorder()
                callback(nested)
                self.calls.append(f"preload({relation!r}, [{'.'.join(nested.calls)}])")
            else:
                self.calls.append(f"{name}({', '.join(repr(arg) for arg in args)})")
            return self

        return record


activerecord_emitter = ActiveRecordEmitter()
