"""Concrete repository for PostgreSQL.

Rows are plain dicts read through a RealDictCursor. psycopg2 is blocking, so
every statement runs in a worker thread via `asyncio.to_thread`.

Key Features:
    - Lazy connection initialization from settings, in autocommit mode
    - WHERE/ORDER BY/LEFT JOIN built by the SQL emitter with bound parameters
    - Included relations hydrated into nested dicts
    - INSERT/UPDATE ... RETURNING * so callers get the stored row back
"""

import asyncio
from typing import Any, Dict, List, Mapping, Optional, Tuple

import psycopg2
import psycopg2.extras

from crossrepo.abc import RepositoryAdapter
from crossrepo.exceptions import ConnectionError, MissingConfigError
from crossrepo.querydsl.compilers.sql import SqlEmitter, SqlQuery, sql_emitter
from crossrepo.querydsl.compilers.utils import quote_identifier
from crossrepo.querydsl.plan import QueryPlan
from crossrepo.querydsl.relations import Relation
from crossrepo.schema import PaginationSpec
from crossrepo.settings import settings as api_settings
from crossrepo.types import Payload


class SqlRepository(RepositoryAdapter):
    """Repository over one PostgreSQL table.

    Attributes:
        model: Table name
        joins: Join metadata for each includable relation
        emitter: SQL emitter used to build statements
    """

    emitter: SqlEmitter = sql_emitter
    joins: Mapping[str, Relation] = {}

    def __init__(
        self,
        model: Optional[str] = None,
        *,
        joins: Optional[Mapping[str, Relation]] = None,
        client: Any = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(model, **kwargs)
        if joins is not None:
            self.joins = dict(joins)
        if client is not None:
            client.autocommit = True
        self._client = client

    @property
    def client(self) -> Any:
        """Lazily initialize and return the PostgreSQL connection.

        Raises:
            MissingConfigError: If PGSQL_DBNAME is not set
            ConnectionError: If the server refuses the connection
        """
        if self._client is None:
            dbname = api_settings.PGSQL_DBNAME
            if not dbname:
                raise MissingConfigError(
                    "PGSQL_DBNAME is not set",
                    config_key="PGSQL_DBNAME",
                    adapter="PostgreSQL",
                    hint="Add PGSQL_DBNAME to your .env or pass a connection as client=",
                )
            try:
                self._client = psycopg2.connect(
                    dbname=dbname,
                    user=api_settings.PGSQL_USER,
                    password=api_settings.PGSQL_PASSWORD,
                    host=api_settings.PGSQL_HOST,
                    port=api_settings.PGSQL_PORT,
                )
                self._client.autocommit = True
            except psycopg2.OperationalError as e:
                raise ConnectionError(
                    "PostgreSQL connection failed",
                    database=dbname,
                    host=api_settings.PGSQL_HOST,
                    port=api_settings.PGSQL_PORT,
                    original_error=str(e),
                ) from e
            self.logger.message("PostgreSQL connection established (db=%s).", dbname)
        return self._client

    @property
    def table(self) -> str:
        return self.model

    # ------------------------------------------------------------------
    # Statement execution
    # ------------------------------------------------------------------

    def _execute_sync(self, sql: str, params: Mapping[str, Any], fetch: str) -> Any:
        # Autocommit connection: each statement is its own transaction
        with self.client.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cursor:
            cursor.execute(sql, params)
            if fetch == "all":
                return cursor.fetchall()
            if fetch == "one":
                return cursor.fetchone()
            return cursor.rowcount

    async def execute(self, sql: str, params: Optional[Mapping[str, Any]] = None, fetch: str = "all") -> Any:
        """Run one statement off the event loop.

        Args:
            sql: Statement with pyformat placeholders
            params: Bound parameters
            fetch: "all" for rows, "one" for a single row, "none" for the row count
        """
        self.logger.debug("SQL %s params=%r", sql, params)
        return await asyncio.to_thread(self._execute_sync, sql, dict(params or {}), fetch)

    def _select(self, plan: QueryPlan) -> SqlQuery:
        return self.emitter.emit(plan, self.table, self.joins, self.primary_key)

    # ------------------------------------------------------------------
    # Storage primitives
    # ------------------------------------------------------------------

    async def _fetch_one(self, plan: QueryPlan) -> Optional[Dict[str, Any]]:
        query = self._select(plan)
        sql, params = query.to_sql(limit=1)
        models = query.hydrate(await self.execute(sql, params))
        return models[0] if models else None

    async def _fetch_many(self, plan: QueryPlan, pagination: Optional[PaginationSpec]) -> List[Dict[str, Any]]:
        query = self._select(plan)
        if pagination is None:
            sql, params = query.to_sql()
        else:
            sql, params = query.to_sql(limit=pagination.limit, offset=pagination.offset)
        return query.hydrate(await self.execute(sql, params))

    async def _count(self, plan: QueryPlan) -> int:
        sql, params = self._select(plan).to_count_sql()
        row = await self.execute(sql, params, fetch="one")
        return int(row["total"]) if row else 0

    async def _insert(self, payload: Payload) -> Dict[str, Any]:
        table = quote_identifier(self.table)
        if not payload:
            row = await self.execute(f"INSERT INTO {table} DEFAULT VALUES RETURNING *", fetch="one")
            return dict(row)
        columns, placeholders, params = self._assignments(payload)
        sql = f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({', '.join(placeholders)}) RETURNING *"
        return dict(await self.execute(sql, params, fetch="one"))

    async def _save(self, model: Dict[str, Any], payload: Payload) -> Dict[str, Any]:
        self._apply(model, payload)
        if not payload:
            return model
        columns, placeholders, params = self._assignments(payload)
        params["pk"] = model[self.primary_key]
        sets = ", ".join(f"{column} = {placeholder}" for column, placeholder in zip(columns, placeholders))
        sql = (
            f"UPDATE {quote_identifier(self.table)} SET {sets} "
            f"WHERE {quote_identifier(self.primary_key)} = %(pk)s RETURNING *"
        )
        row = await self.execute(sql, params, fetch="one")
        if row:
            # Keep hydrated relations; refresh stored columns
            model.update(row)
        return model

    async def _remove(self, model: Dict[str, Any]) -> None:
        sql = f"DELETE FROM {quote_identifier(self.table)} WHERE {quote_identifier(self.primary_key)} = %(pk)s"
        await self.execute(sql, {"pk": model[self.primary_key]}, fetch="none")

    @staticmethod
    def _assignments(payload: Payload) -> Tuple[List[str], List[str], Dict[str, Any]]:
        columns, placeholders, params = [], [], {}
        for index, (key, value) in enumerate(payload.items()):
            columns.append(quote_identifier(key))
            placeholders.append(f"%(v{index})s")
            params[f"v{index}"] = value
        return columns, placeholders, params
