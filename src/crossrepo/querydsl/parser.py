"""Encoded value parser.

Where values arrive as plain literals, sequences or punctuated strings:

- `["a", "b"]`  membership
- `"null"` / `"!null"`  null checks
- `"5->10"`  inclusive range
- `"a,b,c"` / `"!a,b,c"`  membership / negated membership
- `"%foo%"`  case-insensitive contains
- anything else  equality

The checks run in that fixed order, so `"a->b,c"` is a range from `a` to `b,c`.
"""

from typing import Any, Optional

from crossrepo.constants import (
    CONTAINS_MARKER,
    LIST_SEPARATOR,
    NEGATION_MARKER,
    NOT_NULL_TOKEN,
    NULL_TOKEN,
    RANGE_SEPARATOR,
)
from crossrepo.exceptions import InvalidFilterValue

from .predicates import Predicate

__all__ = ("parse_value",)


def _parse_range(value: str, field: Optional[str]) -> Predicate:
    lo, hi = value.split(RANGE_SEPARATOR, 1)
    lo, hi = lo.strip(), hi.strip()
    if not lo or not hi:
        raise InvalidFilterValue("Range needs both bounds, e.g. '5->10'", field=field, value=value)
    return Predicate.range(lo, hi)


def _parse_list(value: str, field: Optional[str]) -> Predicate:
    tokens = [token.strip() for token in value.split(LIST_SEPARATOR)]
    negate = bool(tokens) and tokens[0].startswith(NEGATION_MARKER)
    if negate:
        tokens[0] = tokens[0][len(NEGATION_MARKER) :].strip()
    tokens = [token for token in tokens if token]
    if not tokens:
        raise InvalidFilterValue("List filter has no values", field=field, value=value)
    return Predicate.nin(tokens) if negate else Predicate.in_(tokens)


def _parse_contains(value: str, field: Optional[str]) -> Predicate:
    remainder = value.replace(CONTAINS_MARKER, "")
    if not remainder:
        raise InvalidFilterValue("Contains filter has no text", field=field, value=value)
    return Predicate.contains(remainder)


def parse_value(value: Any, field: Optional[str] = None) -> Predicate:
    """Decode one encoded where value into its canonical predicate.

    Args:
        value: Literal, sequence of literals or punctuated string
        field: Field name, only used for error context

    Returns:
        The single Predicate the value encodes

    Raises:
        InvalidFilterValue: If the value is None, blank or malformed

    Examples:
        >>> parse_value("5->10")
        Predicate(op='$range', value=('5', '10'))
        >>> parse_value("!a,b")
        Predicate(op='$nin', value=('a', 'b'))
    """
    if value is None:
        raise InvalidFilterValue("Where cannot be None, use 'null' as string", field=field)

    if isinstance(value, (list, tuple, set, frozenset)):
        return Predicate.in_(value)

    if not isinstance(value, str):
        return Predicate.eq(value)

    if not value.strip():
        raise InvalidFilterValue("Where cannot be empty, use 'null' as string", field=field, value=value)
    if value == NULL_TOKEN:
        return Predicate.is_null()
    if value == NOT_NULL_TOKEN:
        return Predicate.is_not_null()
    if RANGE_SEPARATOR in value:
        return _parse_range(value, field)
    if LIST_SEPARATOR in value:
        return _parse_list(value, field)
    if CONTAINS_MARKER in value:
        return _parse_contains(value, field)
    return Predicate.eq(value)
