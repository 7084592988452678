"""PostgreSQL emitter.

Transforms query plans into parameterized SELECT statements.

- Conditions become ANDed boolean clauses with psycopg2 `%(pN)s` placeholders
- `In` / `NotIn` become `IN` / `NOT IN` over a bound tuple
- `Contains` becomes `ILIKE '%value%'` with LIKE wildcards escaped
- Includes become LEFT JOINs under their generated alias; nested conditions
  and ordering are qualified by that alias
- Joined rows are selected with `to_jsonb` and folded back into nested dicts
- With a to-many join, LIMIT/OFFSET move into a subquery over distinct root
  keys so the page counts root models, not joined rows
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from crossrepo.constants import Direction
from crossrepo.exceptions import UnknownRelationError

from ..plan import QueryPlan
from ..predicates import Condition, Op, Predicate
from ..relations import Relation
from .base import BaseEmitter
from .utils import escape_like, format_value_sql, normalize_plan_input, qualify, quote_identifier

__all__ = (
    "SqlEmitter",
    "SqlQuery",
    "IncludeColumn",
    "sql_emitter",
)


@dataclass(frozen=True)
class IncludeColumn:
    """A joined relation selected as one JSON column labelled by its path."""

    path: Tuple[str, ...]
    many: bool = False

    @property
    def label(self) -> str:
        return ".".join(self.path)


@dataclass
class SqlQuery:
    """SELECT statement under construction for one root table."""

    table: str
    alias: str
    primary_key: str = "id"
    joins: List[str] = field(default_factory=list)
    clauses: List[str] = field(default_factory=list)
    params: Dict[str, Any] = field(default_factory=dict)
    order: List[str] = field(default_factory=list)
    window_order: List[str] = field(default_factory=list)
    include_columns: List[IncludeColumn] = field(default_factory=list)
    include_selects: List[str] = field(default_factory=list)

    @property
    def fans_out(self) -> bool:
        """True when a to-many join can repeat root rows."""
        return any(column.many for column in self.include_columns)

    def bind(self, value: Any) -> str:
        """Register a parameter and return its placeholder."""
        name = f"p{len(self.params)}"
        self.params[name] = value
        return f"%({name})s"

    def add_order(self, ident: str, direction: Direction) -> None:
        """Order rows by `ident`; root keys in a window follow its MIN/MAX per root."""
        keyword = direction.value.upper()
        aggregate = "MIN" if direction is Direction.ASC else "MAX"
        self.order.append(f"{ident} {keyword}")
        self.window_order.append(f"{aggregate}({ident}) {keyword}")

    def _from_sql(self, *extra_clauses: str) -> str:
        parts = [f"FROM {quote_identifier(self.table)} AS {quote_identifier(self.alias)}"]
        parts.extend(self.joins)
        clauses = self.clauses + list(extra_clauses)
        if clauses:
            parts.append("WHERE " + " AND ".join(clauses))
        return " ".join(parts)

    @staticmethod
    def _paging_sql(params: Dict[str, Any], limit: Optional[int], offset: Optional[int]) -> str:
        sql = ""
        if limit is not None:
            params["limit"] = limit
            sql += " LIMIT %(limit)s"
        if offset:
            params["offset"] = offset
            sql += " OFFSET %(offset)s"
        return sql

    def _window_clause(self, params: Dict[str, Any], limit: Optional[int], offset: Optional[int]) -> str:
        pk = qualify(self.alias, self.primary_key)
        order = ", ".join(self.window_order + [f"{pk} ASC"])
        window = f"SELECT {pk} {self._from_sql()} GROUP BY {pk} ORDER BY {order}"
        return f"{pk} IN ({window}{self._paging_sql(params, limit, offset)})"

    def to_sql(self, limit: Optional[int] = None, offset: Optional[int] = None) -> Tuple[str, Dict[str, Any]]:
        """Return the row query and its parameters.

        When a to-many join is present, `limit` and `offset` select a window of
        distinct root keys and every joined row of those roots is returned.
        """
        params = dict(self.params)
        columns = [f"{quote_identifier(self.alias)}.*"] + self.include_selects
        windowed = self.fans_out and (limit is not None or bool(offset))
        if windowed:
            from_sql = self._from_sql(self._window_clause(params, limit, offset))
        else:
            from_sql = self._from_sql()
        sql = f"SELECT {', '.join(columns)} {from_sql}"
        if self.order:
            sql += " ORDER BY " + ", ".join(self.order)
        if not windowed:
            sql += self._paging_sql(params, limit, offset)
        return sql, params

    def to_count_sql(self) -> Tuple[str, Dict[str, Any]]:
        """Return the count query (distinct root keys) and its parameters."""
        pk = qualify(self.alias, self.primary_key)
        return f'SELECT COUNT(DISTINCT {pk}) AS "total" {self._from_sql()}', dict(self.params)

    def hydrate(self, rows: Iterable[Mapping[str, Any]]) -> List[Dict[str, Any]]:
        """Fold joined JSON columns back into nested dicts, one per root row."""
        if not self.include_columns:
            return [dict(row) for row in rows]

        models: Dict[Any, Dict[str, Any]] = {}
        for raw in rows:
            row = dict(raw)
            related = {column.label: row.pop(column.label, None) for column in self.include_columns}
            model = models.setdefault(row.get(self.primary_key), row)
            current: Dict[str, Any] = {"": model}
            for column in self.include_columns:
                parent = current.get(".".join(column.path[:-1]))
                name = column.path[-1]
                value = related[column.label]
                if parent is None:
                    current[column.label] = None
                    continue
                if column.many:
                    items = parent.setdefault(name, [])
                    if value is not None and value not in items:
                        items.append(value)
                    current[column.label] = items[items.index(value)] if value is not None else None
                else:
                    if parent.get(name) is None:
                        parent[name] = value
                    current[column.label] = parent[name]
        return list(models.values())


class SqlEmitter(BaseEmitter):
    """Emit parameterized PostgreSQL from query plans."""

    _OP_MAP = {
        Op.EQ: "_eq",
        Op.NE: "_ne",
        Op.IN: "_in",
        Op.NIN: "_nin",
        Op.RANGE: "_range",
        Op.NULL: "_null",
        Op.NOT_NULL: "_not_null",
        Op.CONTAINS: "_contains",
    }

    def emit(
        self,
        plan: Any,
        table: str,
        relations: Optional[Mapping[str, Relation]] = None,
        primary_key: str = "id",
    ) -> SqlQuery:
        """Build the SELECT for `table` from a plan.

        Args:
            plan: QueryPlan (or contract/dict compiled with `table` as root alias)
            table: Root table name
            relations: Join metadata by relation name
            primary_key: Root primary key column

        Returns:
            SqlQuery ready for `to_sql` / `to_count_sql`

        Raises:
            UnknownRelationError: If an include has no join metadata
        """
        plan = normalize_plan_input(plan, alias=table)
        query = SqlQuery(table=table, alias=plan.alias, primary_key=primary_key)
        self._emit_scope(plan, relations or {}, query)
        # Root ordering takes precedence over included scopes
        for scope in plan.walk():
            for clause in scope.ordering:
                query.add_order(qualify(scope.alias, clause.field), clause.direction)
        return query

    def to_expr(self, plan: QueryPlan, table: Optional[str] = None, relations: Optional[Mapping[str, Relation]] = None) -> str:
        """Render the row query with parameters inlined, for logs and debugging."""
        query = self.emit(plan, table or plan.alias, relations)
        sql, params = query.to_sql()
        return sql % {name: format_value_sql(value) for name, value in params.items()}

    def _emit_scope(self, plan: QueryPlan, relations: Mapping[str, Relation], query: SqlQuery) -> None:
        for include in plan.includes:
            relation = relations.get(include.relation)
            if relation is None:
                raise UnknownRelationError(
                    "Relation is not configured", relation=include.relation, table=query.table
                )
            query.joins.append(
                f"LEFT JOIN {quote_identifier(relation.target)} AS {quote_identifier(include.alias)} "
                f"ON {qualify(include.alias, relation.foreign_key)} = {qualify(plan.alias, relation.local_key)}"
            )
            column = IncludeColumn(path=include.path, many=relation.many)
            query.include_columns.append(column)
            query.include_selects.append(
                f"CASE WHEN {qualify(include.alias, relation.foreign_key)} IS NULL THEN NULL "
                f"ELSE to_jsonb({quote_identifier(include.alias)}) END AS {quote_identifier(column.label)}"
            )
            self._emit_scope(include, relation.relations, query)

        for condition in plan.conditions:
            query.clauses.append(self.emit_condition(plan.alias, condition, query))

    def emit_condition(self, alias: str, condition: Condition, query: SqlQuery) -> str:
        ident = qualify(alias, condition.field)
        return self._handler(condition.field, condition.predicate)(ident, condition.predicate, query)

    def _eq(self, ident: str, predicate: Predicate, query: SqlQuery) -> str:
        return f"{ident} = {query.bind(predicate.value)}"

    def _ne(self, ident: str, predicate: Predicate, query: SqlQuery) -> str:
        return f"{ident} != {query.bind(predicate.value)}"

    def _in(self, ident: str, predicate: Predicate, query: SqlQuery) -> str:
        if not predicate.value:
            return "FALSE"
        return f"{ident} IN {query.bind(tuple(predicate.value))}"

    def _nin(self, ident: str, predicate: Predicate, query: SqlQuery) -> str:
        if not predicate.value:
            return "TRUE"
        return f"{ident} NOT IN {query.bind(tuple(predicate.value))}"

    def _range(self, ident: str, predicate: Predicate, query: SqlQuery) -> str:
        lo, hi = predicate.bounds
        return f"{ident} BETWEEN {query.bind(lo)} AND {query.bind(hi)}"

    def _null(self, ident: str, predicate: Predicate, query: SqlQuery) -> str:
        return f"{ident} IS NULL"

    def _not_null(self, ident: str, predicate: Predicate, query: SqlQuery) -> str:
        return f"{ident} IS NOT NULL"

    def _contains(self, ident: str, predicate: Predicate, query: SqlQuery) -> str:
        return f"{ident} ILIKE {query.bind('%' + escape_like(predicate.value) + '%')}"


sql_emitter = SqlEmitter()
