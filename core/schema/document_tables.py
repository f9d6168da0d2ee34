# ============================================================================
# DOCUMENT TABLE DDL GENERATOR
# ============================================================================
# STATUS: Core - DDL generation from Pydantic models
# PURPOSE: Generate PostgreSQL CREATE statements for document tables
# CREATED: 18 OCT 2026
# EXPORTS: DocumentTableDDL, DOCUMENT_MODELS
# DEPENDENCIES: pydantic, psycopg
# ============================================================================
"""
Pydantic to PostgreSQL Document Table Generator.

The store is used schema-less: every persisted model lives in a table with

    id          BIGSERIAL PRIMARY KEY
    <scalar>    one column per entry in __sql_columns__ (query keys only)
    document    JSONB NOT NULL (the whole model, minus id)

There are deliberately no FOREIGN KEY constraints and no cascades. The
scalar columns exist only so the narrow count/lookup queries used by the
deletion and versioning services can be indexed.

Model Metadata Convention:
    - __sql_table__: Table name
    - __sql_columns__: Dict of {column: postgres type}, mirrored from the document
    - __sql_indexes__: List of (index_name, [columns])

Usage:
    generator = DocumentTableDDL(schema_name="cws")
    for stmt in generator.generate_all():
        cursor.execute(stmt)
"""

import logging
from typing import Dict, List, Type

from pydantic import BaseModel
from psycopg import sql

from core.models import Workflow, Job, WorkspaceFile, InputWorkspaceFileLink

logger = logging.getLogger(__name__)


# Creation order only matters for readability; there are no FKs.
DOCUMENT_MODELS: List[Type[BaseModel]] = [
    Workflow,
    Job,
    WorkspaceFile,
    InputWorkspaceFileLink,
]


class DocumentTableDDL:
    """Build CREATE SCHEMA / TABLE / INDEX statements for document tables."""

    def __init__(self, schema_name: str = "cws"):
        self.schema_name = schema_name

    @staticmethod
    def get_model_metadata(model: Type[BaseModel]) -> Dict[str, object]:
        """
        Extract table metadata from a model.

        Raises:
            ValueError: If the model does not declare __sql_table__
        """
        table = getattr(model, "__sql_table__", None)
        if not table:
            raise ValueError(f"Model {model.__name__} missing __sql_table__ attribute")
        return {
            "table": table,
            "columns": dict(getattr(model, "__sql_columns__", {})),
            "indexes": list(getattr(model, "__sql_indexes__", [])),
        }

    def generate_schema(self) -> sql.Composed:
        return sql.SQL("CREATE SCHEMA IF NOT EXISTS {}").format(sql.Identifier(self.schema_name))

    def generate_table(self, model: Type[BaseModel]) -> sql.Composed:
        """CREATE TABLE IF NOT EXISTS for one document model."""
        meta = self.get_model_metadata(model)
        logger.debug(f"Generating table {self.schema_name}.{meta['table']} from {model.__name__}")

        columns = [sql.SQL("id BIGSERIAL PRIMARY KEY")]
        for column, pg_type in meta["columns"].items():
            columns.append(sql.SQL("{} {}").format(sql.Identifier(column), sql.SQL(pg_type)))
        columns.append(sql.SQL("document JSONB NOT NULL DEFAULT '{}'"))

        return sql.SQL("CREATE TABLE IF NOT EXISTS {} (\n    {}\n)").format(
            sql.Identifier(self.schema_name, meta["table"]),
            sql.SQL(",\n    ").join(columns),
        )

    def generate_indexes(self, model: Type[BaseModel]) -> List[sql.Composed]:
        meta = self.get_model_metadata(model)
        statements = []
        for index_name, index_columns in meta["indexes"]:
            unknown = [c for c in index_columns if c not in meta["columns"]]
            if unknown:
                raise ValueError(
                    f"Index {index_name} on {meta['table']} references undeclared columns: {unknown}"
                )
            statements.append(
                sql.SQL("CREATE INDEX IF NOT EXISTS {} ON {} ({})").format(
                    sql.Identifier(index_name),
                    sql.Identifier(self.schema_name, meta["table"]),
                    sql.SQL(", ").join(sql.Identifier(c) for c in index_columns),
                )
            )
        return statements

    def generate_all(self) -> List[sql.Composed]:
        """Schema, then every table followed by its indexes."""
        statements: List[sql.Composed] = [self.generate_schema()]
        for model in DOCUMENT_MODELS:
            statements.append(self.generate_table(model))
            statements.extend(self.generate_indexes(model))
        logger.info(
            f"Generated {len(statements)} DDL statements for schema {self.schema_name}"
        )
        return statements


__all__ = ["DocumentTableDDL", "DOCUMENT_MODELS"]
