"""Concrete repository for active-record ORMs.

The bound model is a model class exposing `query()` (a chainable builder),
`create(**payload)`, and instances with `save()` / `delete()`. The builder
terminals `first()`, `all()` and `count()` may be sync or async.
"""

import inspect
from typing import Any, List, Optional

from crossrepo.abc import RepositoryAdapter
from crossrepo.querydsl.compilers.activerecord import ActiveRecordEmitter, activerecord_emitter
from crossrepo.querydsl.plan import QueryPlan
from crossrepo.schema import PaginationSpec
from crossrepo.types import Payload


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class ActiveRecordRepository(RepositoryAdapter):
    """Repository over one active-record model class."""

    emitter: ActiveRecordEmitter = activerecord_emitter

    def query(self, plan: QueryPlan) -> Any:
        return self.emitter.emit(plan, self.model.query())

    async def _fetch_one(self, plan: QueryPlan) -> Any:
        return await _resolve(self.query(plan).first())

    async def _fetch_many(self, plan: QueryPlan, pagination: Optional[PaginationSpec]) -> List[Any]:
        query = self.query(plan)
        if pagination is not None:
            query = query.offset(pagination.offset).limit(pagination.limit)
        return list(await _resolve(query.all()))

    async def _count(self, plan: QueryPlan) -> int:
        query = self.emitter.emit_conditions(plan, self.model.query())
        return int(await _resolve(query.count()))

    async def _insert(self, payload: Payload) -> Any:
        return await _resolve(self.model.create(**payload))

    async def _save(self, model: Any, payload: Payload) -> Any:
        self._apply(model, payload)
        await _resolve(model.save())
        return model

    async def _remove(self, model: Any) -> None:
        await _resolve(model.delete())
