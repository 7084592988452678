"""Concrete repository for Prisma Client Python.

The bound model is a Prisma model delegate (`prisma.user`, `prisma.post`),
whose async actions take the keyword arguments produced by the Prisma emitter.
"""

from typing import Any, Dict, List, Optional

from crossrepo.abc import RepositoryAdapter
from crossrepo.querydsl.compilers.prisma import PrismaEmitter, prisma_emitter
from crossrepo.querydsl.plan import QueryPlan
from crossrepo.schema import PaginationSpec
from crossrepo.types import Payload
from crossrepo.utils import get_field


class PrismaRepository(RepositoryAdapter):
    """Repository over one Prisma model delegate."""

    emitter: PrismaEmitter = prisma_emitter

    @property
    def delegate(self) -> Any:
        return self.model

    def _arguments(self, plan: QueryPlan) -> Dict[str, Any]:
        return self.emitter.emit(plan)

    def _unique(self, model: Any) -> Dict[str, Any]:
        return {self.primary_key: get_field(model, self.primary_key)}

    async def _fetch_one(self, plan: QueryPlan) -> Any:
        return await self.delegate.find_first(**self._arguments(plan))

    async def _fetch_many(self, plan: QueryPlan, pagination: Optional[PaginationSpec]) -> List[Any]:
        arguments = self._arguments(plan)
        if pagination is not None:
            arguments.update(skip=pagination.offset, take=pagination.limit)
        return await self.delegate.find_many(**arguments)

    async def _count(self, plan: QueryPlan) -> int:
        where = self.emitter.emit_where(plan)
        return await self.delegate.count(where=where) if where else await self.delegate.count()

    async def _insert(self, payload: Payload) -> Any:
        return await self.delegate.create(data=payload)

    async def _save(self, model: Any, payload: Payload) -> Any:
        if not payload:
            return model
        updated = await self.delegate.update(where=self._unique(model), data=payload)
        # Prisma models are immutable pydantic objects; prefer the returned copy
        return updated if updated is not None else model

    async def _remove(self, model: Any) -> None:
        await self.delegate.delete(where=self._unique(model))
