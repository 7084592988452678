"""Abstract repository adapter.

`RepositoryAdapter` holds the CRUD flow shared by every backend: options are
whitelisted and compiled into a `QueryPlan`, id lookups are prepended to the
plan, and update/delete resolve ids to live models before persisting.
Backends implement the storage primitives on top of their emitter.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from .constants import ROOT_ALIAS
from .exceptions import AlreadyDeleted, InvalidIdentifierFormat, NotFound
from .logger import Logger
from .pagination import paginate
from .querydsl.compiler import FilterCompiler, filter_compiler
from .querydsl.plan import QueryPlan
from .querydsl.predicates import Condition, Predicate
from .querydsl.whitelist import WhitelistGuard
from .schema import ListResult, PaginatedResult, PaginationSpec
from .settings import settings
from .types import ModelId, Options, Payload
from .utils import apply_payload, extract_id, get_field, is_identifier, utcnow


class RepositoryAdapter(ABC):
    """Uniform CRUD surface over one bound storage model.

    Configuration is injected through the constructor; class attributes act
    as defaults so subclasses can also declare them statically.

    Attributes:
        model: Bound storage model (table name, collection, ORM delegate or class)
        wheres: Fields external requests may filter by
        relations: Relations external requests may include
        primary_key: Key used for id lookups
        soft_delete_field: Field set by soft deletes
    """

    wheres: Sequence[str] = ()
    relations: Sequence[str] = ()
    primary_key: str = "id"
    soft_delete_field: str = settings.SOFT_DELETE_FIELD
    root_alias: str = ROOT_ALIAS
    compiler: FilterCompiler = filter_compiler

    def __init__(
        self,
        model: Any = None,
        *,
        wheres: Optional[Iterable[str]] = None,
        relations: Optional[Iterable[str]] = None,
        soft_delete_field: Optional[str] = None,
    ) -> None:
        self.model: Any = None
        if wheres is not None:
            self.wheres = tuple(wheres)
        if relations is not None:
            self.relations = tuple(relations)
        if soft_delete_field is not None:
            self.soft_delete_field = soft_delete_field
        self.logger = Logger(self.__class__.__name__)
        if model is not None:
            self.bind(model)

    def bind(self, model: Any) -> "RepositoryAdapter":
        """Bind the storage model this repository reads and writes."""
        self.model = model
        return self

    @property
    def guard(self) -> WhitelistGuard:
        return WhitelistGuard(self.wheres, self.relations)

    # ------------------------------------------------------------------
    # Compilation helpers
    # ------------------------------------------------------------------

    def build_plan(self, options: Options = None) -> QueryPlan:
        """Whitelist (external requests only) and compile options.

        Raises:
            FilterFieldNotAllowed: External request filters outside `wheres`
            IncludeNotAllowed: External request includes outside `relations`
            InvalidFilterValue: Malformed where value or order direction
        """
        return self.compiler.compile(options, alias=self.root_alias, guard=self.guard)

    def validate_id(self, model_id: Any) -> Any:
        """Return the id in the backend's native key type.

        Raises:
            InvalidIdentifierFormat: If the id cannot be a key for this backend
        """
        if not is_identifier(model_id):
            raise InvalidIdentifierFormat("Identifier must be a string or integer", model_id=model_id)
        return model_id

    def is_id(self, value: Any) -> bool:
        """True when `value` is an id rather than a model instance."""
        return is_identifier(value)

    def id_condition(self, model_id: Any) -> Condition:
        return Condition(self.primary_key, Predicate.eq(self.validate_id(model_id)))

    # ------------------------------------------------------------------
    # Storage primitives
    # ------------------------------------------------------------------

    @abstractmethod
    async def _fetch_one(self, plan: QueryPlan) -> Any:
        """Return the first model matching the plan, or None."""
        raise NotImplementedError

    @abstractmethod
    async def _fetch_many(self, plan: QueryPlan, pagination: Optional[PaginationSpec]) -> List[Any]:
        """Return matching models, windowed when pagination is given."""
        raise NotImplementedError

    @abstractmethod
    async def _count(self, plan: QueryPlan) -> int:
        """Count models matching the plan."""
        raise NotImplementedError

    @abstractmethod
    async def _insert(self, payload: Payload) -> Any:
        raise NotImplementedError

    @abstractmethod
    async def _save(self, model: Any, payload: Payload) -> Any:
        """Persist payload fields onto an existing model and return it."""
        raise NotImplementedError

    @abstractmethod
    async def _remove(self, model: Any) -> None:
        raise NotImplementedError

    # ------------------------------------------------------------------
    # CRUD surface
    # ------------------------------------------------------------------

    async def get_one(self, id: Optional[ModelId] = None, options: Options = None) -> Any:
        """Retrieve one model.

        Args:
            id: Primary key; its equality check precedes all other filters
            options: Filter contract

        Returns:
            The model found or None
        """
        id_condition = self.id_condition(id) if id is not None else None
        plan = self.build_plan(options)
        if id_condition is not None:
            plan = plan.prepend(id_condition)
        self.logger.event("get_one", id=id)
        return await self._fetch_one(plan)

    async def get_all(
        self,
        pagination: Union[PaginationSpec, Dict[str, Any], None] = None,
        options: Options = None,
    ) -> Union[PaginatedResult, ListResult]:
        """Retrieve matching models.

        Rows and the total are fetched by two independent queries.

        Args:
            pagination: Zero-based page and limit; omitted fields use defaults
            options: Filter contract

        Returns:
            PaginatedResult when paginated, otherwise ListResult
        """
        plan = self.build_plan(options)
        pagination = PaginationSpec.from_any(pagination)
        data = await self._fetch_many(plan, pagination)
        total = await self._count(plan)
        if pagination is None:
            self.logger.event("get_all", total=total)
            return ListResult(data=data, total=total)
        self.logger.event("get_all", page=pagination.page, limit=pagination.limit, total=total)
        return paginate(data, total, pagination)

    async def store_one(self, payload: Payload) -> Any:
        """Create one model from the payload."""
        model = await self._insert(dict(payload))
        self.logger.event("store_one", id=extract_id(model))
        return model

    async def resolve(self, id_or_model: Any, operation: str) -> Any:
        """Turn an id into a live model; models pass through.

        Raises:
            NotFound: If the id matches nothing
        """
        model = await self.get_one(id_or_model) if self.is_id(id_or_model) else id_or_model
        if model is None:
            raise NotFound(f"The model id has not been found to {operation}.", model_id=id_or_model)
        return model

    async def update_one(self, id_or_model: Any, payload: Payload) -> Any:
        """Merge payload fields onto a model and persist it.

        Raises:
            NotFound: If an id was given and matches nothing
        """
        model = await self.resolve(id_or_model, "update")
        self.logger.event("update_one", id=extract_id(model), fields=sorted(payload))
        return await self._save(model, dict(payload))

    async def delete_one(self, id_or_model: Any, soft: bool = True) -> Any:
        """Soft or hard delete a model.

        Args:
            id_or_model: Id or model to delete
            soft: Set the soft-delete marker instead of removing the record

        Returns:
            The soft-deleted model, or None after a hard delete

        Raises:
            NotFound: If an id was given and matches nothing
            AlreadyDeleted: If a soft delete targets an already soft-deleted model
        """
        model = await self.resolve(id_or_model, "delete")
        if soft:
            if get_field(model, self.soft_delete_field):
                raise AlreadyDeleted("The model id has been already deleted.", model_id=extract_id(model))
            return await self.update_one(model, {self.soft_delete_field: utcnow()})
        await self._remove(model)
        self.logger.event("delete_one", id=extract_id(model), soft=False)
        return None

    def _apply(self, model: Any, payload: Payload) -> Any:
        return apply_payload(model, payload)
