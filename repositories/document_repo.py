# ============================================================================
# DOCUMENT REPOSITORY BASE
# ============================================================================
# STATUS: Core - Shared CRUD for document tables
# PURPOSE: JSONB document persistence for pydantic models
# CREATED: 18 OCT 2026
# ============================================================================
"""
Document Repository Base

Every table has the shape produced by core.schema.DocumentTableDDL:

    id BIGSERIAL | <scalar query columns> | document JSONB

The document holds the whole model except ``id`` and computed fields; the
scalar columns are copies of the fields named in ``__sql_columns__`` and are
rewritten on every insert/update so lookups stay consistent.

Single-record read-modify-write helpers run inside a transaction with
SELECT ... FOR UPDATE. Nothing here spans more than one record type.
"""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Generic, List, Optional, Sequence, Type, TypeVar

from psycopg import AsyncConnection, sql
from psycopg.rows import dict_row
from psycopg.types.json import Json
from psycopg_pool import AsyncConnectionPool
from pydantic import BaseModel

from infrastructure.base_repository import BaseRepository

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


class DocumentRepository(BaseRepository, Generic[M]):
    """Base repository for one document table."""

    model: Type[M]
    table: sql.Identifier
    entity_name: str = "document"

    def __init__(self, pool: AsyncConnectionPool):
        super().__init__()
        self.pool = pool

    # ========================================================================
    # ROW MAPPING
    # ========================================================================

    def _document(self, entity: M) -> Dict[str, Any]:
        exclude = {"id", *type(entity).model_computed_fields}
        return entity.model_dump(mode="json", exclude=exclude)

    def _columns(self, entity: M) -> Dict[str, Any]:
        """Scalar column values mirrored from the model."""
        values = {}
        for column in self.model.__sql_columns__:
            value = getattr(entity, column)
            values[column] = value.value if isinstance(value, Enum) else value
        return values

    def _row_to_model(self, row: Dict[str, Any]) -> M:
        return self.model.model_validate({**(row["document"] or {}), "id": row["id"]})

    # ========================================================================
    # WRITES
    # ========================================================================

    async def insert_in(self, conn: AsyncConnection, entity: M) -> M:
        """
        Insert using an existing connection (caller controls the transaction).

        Sets ``entity.id`` to the generated id.
        """
        columns = self._columns(entity)
        names = list(columns) + ["document"]
        params = {**columns, "document": Json(self._document(entity))}

        result = await conn.execute(
            sql.SQL("INSERT INTO {} ({}) VALUES ({}) RETURNING id").format(
                self.table,
                sql.SQL(", ").join(sql.Identifier(n) for n in names),
                sql.SQL(", ").join(sql.Placeholder(n) for n in names),
            ),
            params,
        )
        row = await result.fetchone()
        entity.id = row[0]
        return entity

    async def insert(self, entity: M) -> M:
        """Insert a new record and return it with its id set."""
        with self._error_context(f"{self.entity_name} insert"):
            async with self.pool.connection() as conn:
                await self.insert_in(conn, entity)
        logger.info(f"Inserted {self.entity_name} {entity.id}")
        return entity

    async def _update_in(self, conn: AsyncConnection, entity: M) -> bool:
        columns = self._columns(entity)
        params = {**columns, "document": Json(self._document(entity)), "id": entity.id}
        result = await conn.execute(
            sql.SQL("UPDATE {} SET {}, document = %(document)s WHERE id = %(id)s").format(
                self.table,
                sql.SQL(", ").join(
                    sql.SQL("{} = {}").format(sql.Identifier(c), sql.Placeholder(c))
                    for c in columns
                ),
            ),
            params,
        )
        return result.rowcount > 0

    async def update(self, entity: M) -> bool:
        """
        Overwrite an existing record.

        Returns:
            True if a row was updated, False if the id does not exist
        """
        if entity.id is None:
            raise ValueError(f"Cannot update {self.entity_name} without an id")

        with self._error_context(f"{self.entity_name} update", entity.id):
            async with self.pool.connection() as conn:
                updated = await self._update_in(conn, entity)

        if not updated:
            logger.warning(f"Update found no {self.entity_name} with id {entity.id}")
        return updated

    async def update_locked(self, entity_id: int, mutate: Callable[[M], bool]) -> Optional[M]:
        """
        Load one record FOR UPDATE, apply ``mutate`` and persist if it reports a change.

        ``mutate`` returns True when it changed the entity. The whole
        read-modify-write is one transaction scoped to this record.

        Returns:
            The (possibly unchanged) entity, or None if it does not exist
        """
        with self._error_context(f"{self.entity_name} locked update", entity_id):
            async with self.pool.connection() as conn:
                async with conn.transaction():
                    async with conn.cursor(row_factory=dict_row) as cur:
                        await cur.execute(
                            sql.SQL("SELECT * FROM {} WHERE id = %s FOR UPDATE").format(self.table),
                            (entity_id,),
                        )
                        row = await cur.fetchone()
                    if row is None:
                        return None

                    entity = self._row_to_model(row)
                    if mutate(entity):
                        await self._update_in(conn, entity)
                    return entity

    async def set_deleted(self, entity_id: int, deleted: bool) -> Optional[M]:
        """Flip the deleted flag; no write when it already matches."""

        def _apply(entity: M) -> bool:
            if entity.deleted == deleted:
                return False
            entity.deleted = deleted
            return True

        return await self.update_locked(entity_id, _apply)

    async def delete(self, entity_id: int) -> bool:
        """Permanently delete a record. Returns True if a row was removed."""
        with self._error_context(f"{self.entity_name} delete", entity_id):
            async with self.pool.connection() as conn:
                result = await conn.execute(
                    sql.SQL("DELETE FROM {} WHERE id = %s").format(self.table),
                    (entity_id,),
                )
                deleted = result.rowcount > 0

        self._log_operation(deleted, f"Deleted {self.entity_name}", entity_id)
        return deleted

    # ========================================================================
    # READS
    # ========================================================================

    async def get(self, entity_id: int) -> Optional[M]:
        """Get a record by id, or None."""
        with self._error_context(f"{self.entity_name} lookup", entity_id):
            async with self.pool.connection() as conn:
                async with conn.cursor(row_factory=dict_row) as cur:
                    await cur.execute(
                        sql.SQL("SELECT * FROM {} WHERE id = %s").format(self.table),
                        (entity_id,),
                    )
                    row = await cur.fetchone()

        return self._row_to_model(row) if row else None

    @staticmethod
    def _where(conditions: Sequence[sql.Composable]) -> sql.Composable:
        if not conditions:
            return sql.SQL("")
        return sql.SQL(" WHERE ") + sql.SQL(" AND ").join(conditions)

    async def _select(
        self,
        conditions: Sequence[sql.Composable] = (),
        params: Sequence[Any] = (),
        order_by: str = "id",
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[M]:
        query = sql.SQL("SELECT * FROM {}{} ORDER BY {} {}").format(
            self.table,
            self._where(conditions),
            sql.Identifier(order_by),
            sql.SQL("DESC" if descending else "ASC"),
        )
        args = list(params)
        if limit is not None:
            query = query + sql.SQL(" LIMIT %s")
            args.append(limit)

        with self._error_context(f"{self.entity_name} select"):
            async with self.pool.connection() as conn:
                async with conn.cursor(row_factory=dict_row) as cur:
                    await cur.execute(query, args)
                    rows = await cur.fetchall()

        return [self._row_to_model(row) for row in rows]

    async def _count(
        self,
        conditions: Sequence[sql.Composable] = (),
        params: Sequence[Any] = (),
    ) -> int:
        query = sql.SQL("SELECT count(*) FROM {}{}").format(self.table, self._where(conditions))

        with self._error_context(f"{self.entity_name} count"):
            async with self.pool.connection() as conn:
                result = await conn.execute(query, list(params))
                row = await result.fetchone()

        return int(row[0])


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


__all__ = ["DocumentRepository", "utcnow"]
