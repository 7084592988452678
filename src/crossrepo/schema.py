"""Pydantic schemas for repository requests and responses."""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ValidationError
from .settings import settings


class FilterContract(BaseModel):
    """Generic filter/order/include request understood by every repository.

    Keys are accepted in snake_case or camelCase (`orderBy`, `isInternalRequest`).
    Contracts are frozen; compilers and emitters never modify them.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    where: Optional[Dict[str, Any]] = Field(None, description="Field to encoded value mapping.")
    order_by: Optional[Dict[str, str]] = Field(None, alias="orderBy", description="Field to direction mapping.")
    includes: Optional[List["IncludeSpec"]] = Field(None, description="Relations to join/populate.")
    is_internal_request: bool = Field(
        True,
        alias="isInternalRequest",
        description="False for caller-supplied contracts that must pass the whitelist.",
    )

    @field_validator("includes", mode="before")
    @classmethod
    def expand_relation_names(cls, value: Any) -> Any:
        # "owner" is shorthand for {"relation": "owner"}
        if isinstance(value, (list, tuple)):
            return [{"relation": item} if isinstance(item, str) else item for item in value]
        return value

    @classmethod
    def from_any(cls, options: Union["FilterContract", Dict[str, Any], None] = None) -> "FilterContract":
        """Normalize repository options into a FilterContract.

        Args:
            options: FilterContract, plain mapping or None

        Returns:
            FilterContract instance (an empty internal contract for None)

        Raises:
            ValidationError: If options is of an unsupported type
        """
        if options is None:
            return cls()
        if isinstance(options, FilterContract):
            return options
        if isinstance(options, dict):
            return cls.model_validate(options)
        raise ValidationError("Options must be a FilterContract or dict", received=type(options).__name__)

    @property
    def is_empty(self) -> bool:
        return not (self.where or self.order_by or self.includes)


class IncludeSpec(FilterContract):
    """One relation to include, carrying its own nested where/orderBy/includes."""

    relation: str = Field(..., min_length=1, description="Relation name on the parent model.")


FilterContract.model_rebuild()
IncludeSpec.model_rebuild()


class PaginationSpec(BaseModel):
    """Zero-based page and page size."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    page: int = Field(0, ge=0)
    limit: int = Field(default_factory=lambda: settings.DEFAULT_PAGE_LIMIT, ge=1)
    resource_url: Optional[str] = Field(None, alias="resourceUrl")

    @field_validator("page", "limit", mode="before")
    @classmethod
    def fill_missing(cls, value: Any, info: ValidationInfo) -> Any:
        # Explicit None behaves like an omitted field; a zero limit means "default size"
        if value is None:
            return 0 if info.field_name == "page" else settings.DEFAULT_PAGE_LIMIT
        if info.field_name == "limit" and value in (0, "0"):
            return settings.DEFAULT_PAGE_LIMIT
        return value

    @property
    def offset(self) -> int:
        return self.page * self.limit

    @classmethod
    def from_any(cls, pagination: Union["PaginationSpec", Dict[str, Any], None]) -> Optional["PaginationSpec"]:
        if pagination is None or isinstance(pagination, PaginationSpec):
            return pagination
        if isinstance(pagination, dict):
            try:
                return cls.model_validate(pagination)
            except PydanticValidationError as e:
                raise ValidationError(
                    "Invalid pagination",
                    fields=[".".join(str(part) for part in error["loc"]) for error in e.errors()],
                    original_error=str(e),
                ) from e
        raise ValidationError("Pagination must be a PaginationSpec or dict", received=type(pagination).__name__)


class PaginationMeta(BaseModel):
    item_count: int
    total_items: int
    items_per_page: int
    total_pages: int
    current_page: int


class PaginationLinks(BaseModel):
    first: str = ""
    previous: str = ""
    next: str = ""
    last: str = ""


class PaginatedResult(BaseModel):
    """Page of models with pagination meta and navigation links."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    data: List[Any] = Field(default_factory=list)
    meta: PaginationMeta
    links: PaginationLinks = Field(default_factory=PaginationLinks)

    @property
    def total(self) -> int:
        return self.meta.total_items


class ListResult(BaseModel):
    """Unpaginated result: every matching model plus the total count."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    data: List[Any] = Field(default_factory=list)
    total: int = 0
