# ============================================================================
# WORKSPACE FILE REPOSITORY
# ============================================================================
# STATUS: Core - WorkspaceFile persistence
# PURPOSE: Database access for the workspace_files document table
# CREATED: 18 OCT 2026
# ============================================================================
"""
WorkspaceFile Repository

CRUD operations for stored artifacts plus the source-job lookup used by
the Job delete guard.
"""

import logging
from typing import List, Optional

from psycopg import sql

from core.models import WorkspaceFile
from .database import TABLE_WORKSPACE_FILES
from .document_repo import DocumentRepository, utcnow

logger = logging.getLogger(__name__)


class WorkspaceFileRepository(DocumentRepository[WorkspaceFile]):
    """Repository for WorkspaceFile entities."""

    model = WorkspaceFile
    table = TABLE_WORKSPACE_FILES
    entity_name = "workspace file"

    async def insert(self, workspace_file: WorkspaceFile) -> WorkspaceFile:
        if workspace_file.create_date is None:
            workspace_file.create_date = utcnow()
        return await super().insert(workspace_file)

    async def find_by_source_job_id(self, job_id: int) -> List[WorkspaceFile]:
        """
        WorkspaceFiles produced by ``job_id``, deleted ones included.

        More than one result is a data inconsistency; callers decide.
        """
        files = await self._select([sql.SQL("source_job_id = %s")], [job_id])
        if len(files) > 1:
            logger.warning(f"Job {job_id} is the source of {len(files)} workspace files")
        return files

    async def list(
        self,
        owner: Optional[str] = None,
        show_deleted: bool = False,
    ) -> List[WorkspaceFile]:
        conditions = []
        params = []
        if owner is not None:
            conditions.append(sql.SQL("owner = %s"))
            params.append(owner)
        if not show_deleted:
            conditions.append(sql.SQL("deleted IS NOT TRUE"))
        return await self._select(conditions, params, order_by="create_date", descending=True)
