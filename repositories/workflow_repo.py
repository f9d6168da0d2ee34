# ============================================================================
# WORKFLOW REPOSITORY
# ============================================================================
# STATUS: Core - Workflow persistence
# PURPOSE: Database access for the workflows document table
# CREATED: 18 OCT 2026
# ============================================================================
"""
Workflow Repository

Workflows are never updated in place by the versioning path (a fork is a
new insert). The only in-place writes are the single-record deleted flag
and blob key updates.
"""

import logging
from typing import List, Optional

from psycopg import sql

from core.models import Workflow
from .database import TABLE_WORKFLOWS
from .document_repo import DocumentRepository

logger = logging.getLogger(__name__)


class WorkflowRepository(DocumentRepository[Workflow]):
    """Repository for Workflow entities."""

    model = Workflow
    table = TABLE_WORKFLOWS
    entity_name = "workflow"

    async def set_blob_key(self, workflow_id: int, blob_key: Optional[str]) -> Optional[Workflow]:
        """Replace the artifact key; no write when it already matches."""

        def _apply(workflow: Workflow) -> bool:
            if workflow.blob_key == blob_key:
                return False
            workflow.blob_key = blob_key
            return True

        return await self.update_locked(workflow_id, _apply)

    async def list(self, show_deleted: bool = False) -> List[Workflow]:
        """All workflows, newest first."""
        conditions = []
        if not show_deleted:
            conditions.append(sql.SQL("deleted IS NOT TRUE"))
        return await self._select(conditions, order_by="create_date", descending=True)
