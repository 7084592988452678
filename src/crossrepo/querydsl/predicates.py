"""Backend-neutral predicates.

A `Predicate` is the canonical form of one filter condition. Every encoded
where value compiles to exactly one predicate; emitters translate predicates
into their engine's vocabulary.
"""

from dataclasses import dataclass
from typing import Any, Iterable, Tuple

__all__ = ("Op", "Predicate", "Condition")


class Op:
    """Universal predicate operators."""

    EQ = "$eq"
    # Reserved: the value grammar never produces it, emitters still support it
    NE = "$ne"
    IN = "$in"
    NIN = "$nin"
    RANGE = "$range"
    NULL = "$null"
    NOT_NULL = "$notnull"
    CONTAINS = "$contains"

    ALL = frozenset({EQ, NE, IN, NIN, RANGE, NULL, NOT_NULL, CONTAINS})


@dataclass(frozen=True)
class Predicate:
    """One canonical condition: an operator plus its operand.

    - `RANGE` carries a `(lo, hi)` tuple, inclusive on both ends.
    - `IN` / `NIN` carry a tuple of members.
    - `NULL` / `NOT_NULL` carry no operand.
    - `CONTAINS` carries the substring, matched case-insensitively.
    """

    op: str
    value: Any = None

    @classmethod
    def eq(cls, value: Any) -> "Predicate":
        return cls(Op.EQ, value)

    @classmethod
    def ne(cls, value: Any) -> "Predicate":
        return cls(Op.NE, value)

    @classmethod
    def in_(cls, values: Iterable[Any]) -> "Predicate":
        return cls(Op.IN, tuple(values))

    @classmethod
    def nin(cls, values: Iterable[Any]) -> "Predicate":
        return cls(Op.NIN, tuple(values))

    @classmethod
    def range(cls, lo: Any, hi: Any) -> "Predicate":
        return cls(Op.RANGE, (lo, hi))

    @classmethod
    def is_null(cls) -> "Predicate":
        return cls(Op.NULL)

    @classmethod
    def is_not_null(cls) -> "Predicate":
        return cls(Op.NOT_NULL)

    @classmethod
    def contains(cls, substring: str) -> "Predicate":
        return cls(Op.CONTAINS, substring)

    @property
    def bounds(self) -> Tuple[Any, Any]:
        if self.op != Op.RANGE:
            raise TypeError(f"{self.op} predicate has no bounds")
        return self.value

    def to_dict(self) -> dict:
        """Universal dict form, e.g. `{"$in": ["a", "b"]}`."""
        if self.op in (Op.NULL, Op.NOT_NULL):
            return {self.op: True}
        if self.op in (Op.IN, Op.NIN, Op.RANGE):
            return {self.op: list(self.value)}
        return {self.op: self.value}


@dataclass(frozen=True)
class Condition:
    """A predicate bound to a field of one scope."""

    field: str
    predicate: Predicate
