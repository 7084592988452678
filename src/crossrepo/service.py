"""CRUD service over a repository and a resource.

Services translate a missing model into `NotFound("NOT_FOUND_<NAME>")` and
return JSON projections instead of storage models.
"""

from typing import Any, Dict, Optional, Type, Union

from .abc import RepositoryAdapter
from .exceptions import NotFound
from .logger import Logger
from .resource import Resource
from .schema import FilterContract, PaginationSpec
from .types import ModelId, Options, Payload


class CrudService:
    """Service exposing find/create/update/delete as JSON projections.

    Attributes:
        repository: Repository the service delegates to
        resource: Resource class projecting models to dicts
        resource_name: Name used in not-found messages when the bound model has none
        default_options: Options used when a call passes none
    """

    resource_name: str = "model"

    def __init__(
        self,
        repository: RepositoryAdapter,
        resource: Type[Resource] = Resource,
        *,
        resource_name: Optional[str] = None,
        default_options: Options = None,
    ) -> None:
        self.repository = repository
        self.resource = resource
        if resource_name is not None:
            self.resource_name = resource_name
        self.default_options = FilterContract.from_any(default_options)
        self.logger = Logger(self.__class__.__name__)

    def get_resource_name(self) -> str:
        """Upper-cased name of the bound model, falling back to `resource_name`."""
        model = self.repository.model
        name = ""
        if isinstance(model, str):
            name = model
        elif isinstance(model, type):
            name = model.__name__
        elif model is not None:
            name = getattr(model, "name", "") or ""
        if not isinstance(name, str) or not name or name.upper() in ("DICT", "OBJECT"):
            name = self.resource_name
        return name.upper()

    def _options(self, options: Options) -> Options:
        return self.default_options if options is None else options

    async def find_one_instance(self, id: ModelId, options: Options = None) -> Any:
        """Return the storage model for `id`.

        Raises:
            NotFound: If no model matches
        """
        model = await self.repository.get_one(id, self._options(options))
        if model is None:
            raise NotFound(f"NOT_FOUND_{self.get_resource_name()}", model_id=id)
        return model

    async def find_all(
        self,
        pagination: Union[PaginationSpec, Dict[str, Any], None] = None,
        options: Options = None,
    ) -> Dict[str, Any]:
        result = await self.repository.get_all(pagination, self._options(options))
        response: Dict[str, Any] = {"data": self.resource.to_array(result.data)}
        if hasattr(result, "meta"):
            response["meta"] = result.meta.model_dump()
            response["links"] = result.links.model_dump()
        else:
            response["total"] = result.total
        return response

    async def find_one(self, id: ModelId, options: Options = None) -> Optional[Dict[str, Any]]:
        return self.resource.to_json(await self.find_one_instance(id, options))

    async def create_one(self, payload: Payload) -> Optional[Dict[str, Any]]:
        return self.resource.to_json(await self.repository.store_one(payload))

    async def update_one(self, id: ModelId, payload: Payload) -> Optional[Dict[str, Any]]:
        model = await self.find_one_instance(id)
        return self.resource.to_json(await self.repository.update_one(model, payload))

    async def delete_one(self, id: ModelId, soft: bool = True) -> Optional[Dict[str, Any]]:
        model = await self.find_one_instance(id)
        deleted = await self.repository.delete_one(model, soft)
        self.logger.event("delete_one", resource=self.get_resource_name(), id=id, soft=soft)
        return self.resource.to_json(deleted)
