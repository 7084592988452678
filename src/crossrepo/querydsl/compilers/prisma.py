"""Prisma Client Python emitter.

Transforms query plans into the keyword arguments accepted by Prisma model
actions (`find_many`, `find_first`, `count`):

- `where`: structured where object (`in`, `not_in`, `gte`/`lte`, `contains`, `not`)
- `order`: list of `{field: "asc" | "desc"}`
- `include`: nested include objects carrying their own `where`, `order_by`
  and `include`
"""

from typing import Any, Dict, List

from ..plan import QueryPlan
from ..predicates import Op, Predicate
from .base import BaseEmitter
from .utils import merge_conditions, normalize_plan_input

__all__ = (
    "PrismaEmitter",
    "prisma_emitter",
)


class PrismaEmitter(BaseEmitter):
    """Emit Prisma where/order/include arguments from query plans."""

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

    def emit(self, plan: Any) -> Dict[str, Any]:
        """Return find arguments; keys with nothing to say are left out."""
        plan = normalize_plan_input(plan)
        query: Dict[str, Any] = {}
        include = self.emit_include(plan)
        if include:
            query["include"] = include
        where = self.emit_where(plan)
        if where:
            query["where"] = where
        order = self.emit_order(plan)
        if order:
            query["order"] = order
        return query

    def to_expr(self, plan: QueryPlan) -> str:
        return str(self.emit(plan))

    def emit_where(self, plan: QueryPlan) -> Dict[str, Any]:
        items = [
            (condition.field, self._handler(condition.field, condition.predicate)(condition.predicate))
            for condition in plan.conditions
        ]
        return merge_conditions(items, "AND")

    def emit_order(self, plan: QueryPlan) -> List[Dict[str, str]]:
        return [{clause.field: clause.direction.value} for clause in plan.ordering]

    def emit_include(self, plan: QueryPlan) -> Dict[str, Any]:
        include: Dict[str, Any] = {}
        for scope in plan.includes:
            nested: Dict[str, Any] = {}
            nested_include = self.emit_include(scope)
            if nested_include:
                nested["include"] = nested_include
            where = self.emit_where(scope)
            if where:
                nested["where"] = where
            order = self.emit_order(scope)
            if order:
                nested["order_by"] = order
            include[scope.relation] = nested or True
        return include

    def _eq(self, predicate: Predicate) -> Any:
        return predicate.value

    def _ne(self, predicate: Predicate) -> Dict[str, Any]:
        return {"not": predicate.value}

    def _in(self, predicate: Predicate) -> Dict[str, Any]:
        return {"in": list(predicate.value)}

    def _nin(self, predicate: Predicate) -> Dict[str, Any]:
        return {"not_in": list(predicate.value)}

    def _range(self, predicate: Predicate) -> Dict[str, Any]:
        lo, hi = predicate.bounds
        return {"gte": lo, "lte": hi}

    def _null(self, predicate: Predicate) -> None:
        return None

    def _not_null(self, predicate: Predicate) -> Dict[str, Any]:
        return {"not": None}

    def _contains(self, predicate: Predicate) -> Dict[str, Any]:
        return {"contains": predicate.value, "mode": "insensitive"}


prisma_emitter = PrismaEmitter()
