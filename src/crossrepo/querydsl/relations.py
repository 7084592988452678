"""Join metadata for emitters that resolve relations themselves."""

from dataclasses import dataclass, field
from typing import Mapping

__all__ = ("Relation",)


@dataclass(frozen=True)
class Relation:
    """How a relation name maps onto another table or collection.

    The join condition is `target.foreign_key = parent.local_key`, which
    covers both directions:

    - belongs-to: `Relation("users", local_key="owner_id", foreign_key="id")`
    - has-many: `Relation("comments", local_key="id", foreign_key="post_id", many=True)`

    Attributes:
        target: Table (SQL) or collection (Mongo) holding the related rows
        local_key: Column on the parent scope
        foreign_key: Column on the target
        many: Whether the relation yields a list
        relations: Relations of the target, for nested includes
    """

    target: str
    local_key: str = "id"
    foreign_key: str = "id"
    many: bool = False
    relations: Mapping[str, "Relation"] = field(default_factory=dict)
