# ============================================================================
# SCHEMA MODULE
# ============================================================================
# STATUS: Core - Schema generation from Pydantic models
# PURPOSE: Generate PostgreSQL document-table DDL from Pydantic models
# CREATED: 18 OCT 2026
# ============================================================================

from core.schema.document_tables import DocumentTableDDL, DOCUMENT_MODELS

__all__ = [
    "DocumentTableDDL",
    "DOCUMENT_MODELS",
]
