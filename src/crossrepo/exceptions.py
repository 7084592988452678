"""Custom exceptions for CrossRepo library.

This module defines all custom exceptions used throughout the library for
consistent error handling and clear error messaging.
"""

from typing import Any, Dict


# Base exception
class CrossRepoError(Exception):
    """Base exception for all CrossRepo errors.

    Attributes:
        message: Error message
        details: Additional error context as key-value pairs
    """

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        """Initialize exception with message and additional details.

        Args:
            message: Human-readable error message
            **kwargs: Additional context (e.g., model_id, field, relation)
        """
        self.message = message
        self.details: Dict[str, Any] = kwargs
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the complete error message with details."""
        if not self.details:
            return self.message

        details_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
        if self.message:
            return f"{self.message} ({details_str})"
        return details_str

    def __repr__(self) -> str:
        """Return detailed representation of the exception."""
        return f"{self.__class__.__name__}(message={self.message!r}, details={self.details!r})"


# Model lifecycle exceptions
class NotFound(CrossRepoError):
    """Raised when an id cannot be resolved to a live model.

    Example:
        >>> raise NotFound("The model id has not been found to update.", model_id="42")
    """


class AlreadyDeleted(CrossRepoError):
    """Raised when soft deleting a model whose soft-delete marker is already set.

    Example:
        >>> raise AlreadyDeleted("The model id has been already deleted.", model_id="42")
    """


# Validation exceptions
class ValidationError(CrossRepoError):
    """Raised when caller input cannot be interpreted.

    Example:
        >>> raise ValidationError("Invalid request", field="where")
    """


class InvalidFilterValue(ValidationError):
    """Raised when an encoded filter value is empty or malformed.

    Example:
        >>> raise InvalidFilterValue("Where cannot be empty, use 'null' as string", field="name")
    """


class InvalidOrderDirection(InvalidFilterValue):
    """Raised when an order direction is neither asc nor desc.

    Example:
        >>> raise InvalidOrderDirection("Unknown order direction", field="createdAt", value="up")
    """


class InvalidIdentifierFormat(ValidationError):
    """Raised when an id does not match the backend's native key format.

    Example:
        >>> raise InvalidIdentifierFormat("NOT_VALID_OBJECT_ID", model_id="abc")
    """


# Access exceptions
class AccessError(CrossRepoError):
    """Base exception for whitelist violations on external requests."""


class FilterFieldNotAllowed(AccessError):
    """Raised when an external request filters by a field outside the allow-list.

    Example:
        >>> raise FilterFieldNotAllowed("age")
    """

    def __init__(self, field: str, **kwargs: Any) -> None:
        self.field = field
        super().__init__(f"It is not possible to filter by {field}", field=field, **kwargs)


class IncludeNotAllowed(AccessError):
    """Raised when an external request includes a relation outside the allow-list.

    Example:
        >>> raise IncludeNotAllowed("owner")
    """

    def __init__(self, relation: str, **kwargs: Any) -> None:
        self.relation = relation
        super().__init__(f"It is not possible to include {relation} relation", relation=relation, **kwargs)


# Configuration exceptions
class ConfigurationError(CrossRepoError):
    """Raised when configuration is invalid or missing.

    Example:
        >>> raise ConfigurationError("Invalid configuration", setting="table", value=None)
    """


class MissingConfigError(ConfigurationError):
    """Raised when required configuration values are not set.

    Example:
        >>> raise MissingConfigError("Configuration not set", config_key="PGSQL_DBNAME")
    """


class UnknownRelationError(ConfigurationError):
    """Raised when an emitter has no join metadata for a requested relation.

    Example:
        >>> raise UnknownRelationError("Relation is not configured", relation="owner", table="posts")
    """


# Connection exceptions
class ConnectionError(CrossRepoError):
    """Raised when a backend connection cannot be established.

    Example:
        >>> raise ConnectionError("PostgreSQL connection failed", host="localhost", port="5432")
    """
