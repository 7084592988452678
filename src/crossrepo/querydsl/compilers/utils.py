"""Compiler utility functions.

Provides helpers for normalizing emitter input, quoting identifiers,
escaping LIKE patterns and formatting SQL values for debug output.
"""

from typing import Any, List, Tuple, Union

from crossrepo.constants import ROOT_ALIAS

from ..compiler import compile_contract
from ..plan import QueryPlan


def normalize_plan_input(plan: Any, alias: str = ROOT_ALIAS) -> QueryPlan:
    """Normalize a QueryPlan, FilterContract, dict or None to a QueryPlan.

    Contracts are compiled as internal requests; callers that need the
    whitelist compile with a guard before reaching an emitter.

    Raises:
        TypeError: If input is none of the accepted types
    """
    if isinstance(plan, QueryPlan):
        return plan
    if plan is None or isinstance(plan, dict) or hasattr(plan, "model_dump"):
        return compile_contract(plan, alias=alias)
    raise TypeError(f"plan must be a QueryPlan, FilterContract or dict, got {type(plan).__name__}")


def quote_identifier(name: str) -> str:
    """Quote an SQL identifier with double quotes, doubling embedded quotes."""
    return '"' + name.replace('"', '""') + '"'


def qualify(alias: str, column: str) -> str:
    """Return `"alias"."column"`."""
    return f"{quote_identifier(alias)}.{quote_identifier(column)}"


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so the value matches literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def format_value_sql(v: Union[None, str, int, float, List[Any], Tuple[Any, ...]]) -> str:
    """Format Python value for SQL literal embedding in debug output.

    Queries sent to the database always use bound parameters.
    """
    if v is None:
        return "NULL"
    if isinstance(v, bool):
        return "TRUE" if v else "FALSE"
    if isinstance(v, str):
        return "'" + v.replace("'", "''") + "'"
    if isinstance(v, (list, tuple)):
        inner = ", ".join(format_value_sql(x) for x in v)
        return f"({inner})"
    return str(v)


def merge_conditions(items: List[Tuple[str, Any]], and_key: str) -> dict:
    """Build a field mapping, falling back to an AND list on repeated fields.

    Document and ORM where objects are keyed by field, so a field filtered
    twice (an id lookup plus a caller filter on `id`) needs an explicit AND.
    """
    fields = [field for field, _ in items]
    if len(set(fields)) == len(fields):
        return dict(items)
    return {and_key: [{field: value} for field, value in items]}
