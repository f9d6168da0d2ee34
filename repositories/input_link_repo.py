# ============================================================================
# INPUT WORKSPACE FILE LINK REPOSITORY
# ============================================================================
# STATUS: Core - Job input link persistence
# PURPOSE: Database access for the input_workspace_file_links table
# CREATED: 18 OCT 2026
# ============================================================================
"""
InputWorkspaceFileLink Repository

Links are written and removed alongside their Job (see JobRepository.insert
and JobRepository.delete) and read by the WorkspaceFile delete guard.
"""

from psycopg import AsyncConnection, sql

from core.models import InputWorkspaceFileLink
from .database import TABLE_INPUT_LINKS
from .document_repo import DocumentRepository


class InputWorkspaceFileLinkRepository(DocumentRepository[InputWorkspaceFileLink]):
    """Repository for InputWorkspaceFileLink entities."""

    model = InputWorkspaceFileLink
    table = TABLE_INPUT_LINKS
    entity_name = "input link"

    async def count_by_workspace_file_id(self, workspace_file_id: int) -> int:
        """Number of links naming this WorkspaceFile as a Job input, soft-deleted Jobs included."""
        return await self._count([sql.SQL("workspace_file_id = %s")], [workspace_file_id])

    async def delete_by_job_id_in(self, conn: AsyncConnection, job_id: int) -> int:
        """Remove a Job's links using the caller's connection/transaction."""
        result = await conn.execute(
            sql.SQL("DELETE FROM {} WHERE job_id = %s").format(self.table),
            (job_id,),
        )
        return result.rowcount
