"""JSON projection of repository models."""

import json
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence

from .utils import to_plain_dict


def _default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if hasattr(value, "model_dump"):
        return value.model_dump()
    if hasattr(value, "__dict__"):
        return to_plain_dict(value)
    return str(value)


class Resource:
    """Turns models into JSON-compatible dicts.

    Subclasses override `blueprint` to pick and rename fields; falsy fields
    are dropped from the result.

    Example:
        >>> class UserResource(Resource):
        ...     @classmethod
        ...     def blueprint(cls, model):
        ...         return {"id": model["id"], "name": model["name"]}
    """

    @classmethod
    def blueprint(cls, model: Any) -> Dict[str, Any]:
        return to_plain_dict(model)

    @classmethod
    def to_json(cls, model: Any) -> Optional[Dict[str, Any]]:
        if not model:
            return None
        blueprint = {key: value for key, value in cls.blueprint(model).items() if value}
        # ObjectId, datetime and nested models become plain JSON values
        return json.loads(json.dumps(blueprint, default=_default))

    @classmethod
    def to_array(cls, models: Optional[Sequence[Any]]) -> Optional[List[Optional[Dict[str, Any]]]]:
        if models is None:
            return None
        return [cls.to_json(model) for model in models]
