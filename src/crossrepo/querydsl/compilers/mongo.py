"""MongoDB emitter.

Transforms query plans into MongoDB filter documents, sort specs and
population directives.

MongoDB supports:
- Comparison: $eq (implicit), $ne, $gte, $lte
- Membership: $in, $nin
- Null checks: `None` and `{"$ne": None}`
- Case-insensitive substring via $regex with the `i` option

Includes need no alias: each becomes a `Populate` directive named by the
relation, resolved by the repository with one extra query per relation.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

from ..plan import QueryPlan
from ..predicates import Op, Predicate
from .base import BaseEmitter
from .utils import merge_conditions, normalize_plan_input

__all__ = (
    "MongoEmitter",
    "MongoQuery",
    "Populate",
    "mongo_emitter",
)


@dataclass(frozen=True)
class Populate:
    relation: str
    query: "MongoQuery"


@dataclass(frozen=True)
class MongoQuery:
    filter: Dict[str, Any] = field(default_factory=dict)
    sort: List[Tuple[str, int]] = field(default_factory=list)
    populate: List[Populate] = field(default_factory=list)


class MongoEmitter(BaseEmitter):
    """Emit MongoDB query documents from query plans."""

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

    def emit(self, plan: Any) -> MongoQuery:
        """Convert a QueryPlan, contract or dict into a MongoQuery."""
        plan = normalize_plan_input(plan)
        populate = [Populate(include.relation, self.emit(include)) for include in plan.includes]
        items = [
            (condition.field, self._handler(condition.field, condition.predicate)(condition.predicate))
            for condition in plan.conditions
        ]
        sort = [(clause.field, -1 if clause.descending else 1) for clause in plan.ordering]
        return MongoQuery(filter=merge_conditions(items, "$and"), sort=sort, populate=populate)

    def to_expr(self, plan: QueryPlan) -> str:
        query = self.emit(plan)
        return str({"filter": query.filter, "sort": query.sort, "populate": [p.relation for p in query.populate]})

    def _eq(self, predicate: Predicate) -> Any:
        return predicate.value

    def _ne(self, predicate: Predicate) -> Dict[str, Any]:
        return {"$ne": predicate.value}

    def _in(self, predicate: Predicate) -> Dict[str, Any]:
        return {"$in": list(predicate.value)}

    def _nin(self, predicate: Predicate) -> Dict[str, Any]:
        return {"$nin": list(predicate.value)}

    def _range(self, predicate: Predicate) -> Dict[str, Any]:
        lo, hi = predicate.bounds
        return {"$gte": lo, "$lte": hi}

    def _null(self, predicate: Predicate) -> None:
        return None

    def _not_null(self, predicate: Predicate) -> Dict[str, Any]:
        return {"$ne": None}

    def _contains(self, predicate: Predicate) -> Dict[str, Any]:
        return {"$regex": re.escape(predicate.value), "$options": "i"}


mongo_emitter = MongoEmitter()
