# ============================================================================
# JOB REPOSITORY
# ============================================================================
# STATUS: Core - Job CRUD operations
# PURPOSE: Database access for the jobs document table
# CREATED: 18 OCT 2026
# ============================================================================
"""
Job Repository

CRUD operations for Jobs. Inserting a Job also records one
InputWorkspaceFileLink per workspace-id parameter, in the same transaction.
"""

import logging
from typing import Iterable, List, Optional, Tuple

from psycopg import sql
from psycopg_pool import AsyncConnectionPool

from core.contracts import JobStatus
from core.models import InputWorkspaceFileLink, Job
from .database import TABLE_JOBS, TABLE_WORKFLOWS
from .document_repo import DocumentRepository, utcnow
from .input_link_repo import InputWorkspaceFileLinkRepository

logger = logging.getLogger(__name__)


class JobRepository(DocumentRepository[Job]):
    """Repository for Job entities."""

    model = Job
    table = TABLE_JOBS
    entity_name = "job"

    def __init__(self, pool: AsyncConnectionPool):
        super().__init__(pool)
        self.links = InputWorkspaceFileLinkRepository(pool)

    async def _workflow_exists(self, workflow_id: int) -> bool:
        with self._error_context("workflow existence check", workflow_id):
            async with self.pool.connection() as conn:
                result = await conn.execute(
                    sql.SQL("SELECT 1 FROM {} WHERE id = %s").format(TABLE_WORKFLOWS),
                    (workflow_id,),
                )
                row = await result.fetchone()
        return row is not None

    @staticmethod
    def _input_links(job: Job) -> List[InputWorkspaceFileLink]:
        """Links for the job's workspace-id parameters; unparseable ids are skipped."""
        links = []
        for param in job.workspace_parameters():
            try:
                workspace_file_id = int(param.value)
            except (TypeError, ValueError):
                logger.warning(
                    f"Job {job.id} parameter {param.name} has non-numeric "
                    f"WorkspaceFile id {param.value!r}; no input link recorded"
                )
                continue
            links.append(
                InputWorkspaceFileLink(
                    job_id=job.id,
                    workspace_file_id=workspace_file_id,
                    parameter_name=param.name,
                )
            )
        return links

    async def insert(self, job: Job, skip_workflow_check: bool = False) -> Job:
        """
        Persist a new Job and its input links.

        Args:
            job: Job to insert (validation errors, if any, are not persisted)
            skip_workflow_check: Do not require the Job's Workflow to exist

        Raises:
            ValueError: If the Workflow check runs and the Workflow is missing
        """
        if not skip_workflow_check:
            if job.workflow_id is None or job.workflow_id <= 0:
                raise ValueError("Job Workflow id must be set to a positive value")
            if not await self._workflow_exists(job.workflow_id):
                raise ValueError(f"Unable to load Workflow for Job with id: {job.workflow_id}")

        if job.create_date is None:
            job.create_date = utcnow()

        with self._error_context("job insert"):
            async with self.pool.connection() as conn:
                async with conn.transaction():
                    await self.insert_in(conn, job)
                    links = self._input_links(job)
                    for link in links:
                        await self.links.insert_in(conn, link)

        logger.info(
            f"Created job {job.id} for workflow {job.workflow_id} "
            f"({len(links)} input links)"
        )
        return job

    async def delete(self, job_id: int) -> bool:
        """Permanently delete a Job and its input links in one transaction."""
        with self._error_context("job delete", job_id):
            async with self.pool.connection() as conn:
                async with conn.transaction():
                    link_count = await self.links.delete_by_job_id_in(conn, job_id)
                    result = await conn.execute(
                        sql.SQL("DELETE FROM {} WHERE id = %s").format(self.table),
                        (job_id,),
                    )
                    deleted = result.rowcount > 0

        self._log_operation(deleted, "Deleted job", job_id, {"input_links": link_count})
        return deleted

    async def get_for_user(self, job_id: int, user: str) -> Optional[Job]:
        """Get a job only if ``user`` owns it."""
        jobs = await self._select([sql.SQL("id = %s"), sql.SQL("owner = %s")], [job_id, user])
        return jobs[0] if jobs else None

    def _filters(
        self,
        owner: Optional[str],
        statuses: Optional[Iterable[JobStatus]],
        not_submitted_to_scheduler: bool,
        show_deleted: bool,
    ) -> Tuple[list, list]:
        conditions = []
        params = []
        if owner is not None:
            conditions.append(sql.SQL("owner = %s"))
            params.append(owner)
        if statuses:
            conditions.append(sql.SQL("status = ANY(%s)"))
            params.append([JobStatus(s).value for s in statuses])
        if not_submitted_to_scheduler:
            conditions.append(sql.SQL("submitted_to_scheduler IS NOT TRUE"))
        if not show_deleted:
            conditions.append(sql.SQL("deleted IS NOT TRUE"))
        return conditions, params

    async def list(
        self,
        owner: Optional[str] = None,
        statuses: Optional[Iterable[JobStatus]] = None,
        not_submitted_to_scheduler: bool = False,
        show_deleted: bool = False,
        omit_parameters: bool = False,
        limit: Optional[int] = None,
    ) -> List[Job]:
        """List jobs, newest first."""
        conditions, params = self._filters(owner, statuses, not_submitted_to_scheduler, show_deleted)
        jobs = await self._select(
            conditions, params, order_by="create_date", descending=True, limit=limit
        )
        if omit_parameters:
            for job in jobs:
                job.parameters = []
        return jobs

    async def count(
        self,
        owner: Optional[str] = None,
        statuses: Optional[Iterable[JobStatus]] = None,
        not_submitted_to_scheduler: bool = False,
        show_deleted: bool = False,
    ) -> int:
        conditions, params = self._filters(owner, statuses, not_submitted_to_scheduler, show_deleted)
        return await self._count(conditions, params)

    async def count_by_workflow_id(self, workflow_id: int) -> int:
        """Jobs run under ``workflow_id``, soft-deleted ones included."""
        return await self._count([sql.SQL("workflow_id = %s")], [workflow_id])
