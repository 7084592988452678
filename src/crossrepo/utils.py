"""Utility functions for crossrepo.

Shared helpers for reading and writing fields on the models repositories
return, which are dicts for SQL/Mongo and objects for ORM backends.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Mapping, MutableMapping

_ID_KEYS = ("id", "_id", "pk")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def is_identifier(value: Any) -> bool:
    """True for a bare id (str/int) as opposed to a model instance."""
    return isinstance(value, (str, int)) and not isinstance(value, bool)


def get_field(model: Any, name: str, default: Any = None) -> Any:
    """Read a field from a mapping or an attribute-style model."""
    if isinstance(model, Mapping):
        return model.get(name, default)
    return getattr(model, name, default)


def set_field(model: Any, name: str, value: Any) -> None:
    """Write a field on a mapping or an attribute-style model."""
    if isinstance(model, MutableMapping):
        model[name] = value
    else:
        setattr(model, name, value)


def apply_payload(model: Any, payload: Mapping[str, Any]) -> Any:
    """Merge payload fields onto the model one by one and return it."""
    for key, value in payload.items():
        set_field(model, key, value)
    return model


def extract_id(model: Any) -> Any:
    """Extract the primary key from a model supporting id, _id or pk fields."""
    for key in _ID_KEYS:
        value = get_field(model, key)
        if value is not None:
            return value
    return None


def to_plain_dict(model: Any) -> Dict[str, Any]:
    """Return a shallow dict view of a mapping, pydantic model or plain object."""
    if model is None:
        return {}
    if isinstance(model, Mapping):
        return dict(model)
    if hasattr(model, "model_dump") and callable(model.model_dump):
        return model.model_dump()
    return {key: value for key, value in vars(model).items() if not key.startswith("_")}
