# ============================================================================
# DELETION SERVICE
# ============================================================================
# STATUS: Core - Integrity-guarded deletes
# PURPOSE: Delete Jobs, Workflows and WorkspaceFiles without orphaning references
# CREATED: 18 OCT 2026
# ============================================================================
"""
Deletion Service

The store has no foreign keys, so every delete checks the other record
types first and refuses when something still depends on the target:

    Job            -> its single output WorkspaceFile must be deletable first
    Workflow       -> no Job may reference it
    WorkspaceFile  -> not the output of an existing Job, not a Job input

Refusals are returned as DeleteReport(successful=False, reason=...), never
raised. All checks happen before the first write. Repository failures
(RepositoryError) propagate.

``permanent=True`` removes records; ``permanent=False`` flips the deleted
flag, which is idempotent.
"""

from typing import Optional

from core.logging import get_logger, log_audit, log_context
from core.models import DeleteReport
from infrastructure import BlobRepository
from repositories import (
    InputWorkspaceFileLinkRepository,
    JobRepository,
    WorkspaceFileRepository,
)
from .workflow_service import WorkflowService

logger = get_logger(__name__)


class DeletionService:
    """Integrity-guarded deletes for Jobs, Workflows and WorkspaceFiles."""

    def __init__(
        self,
        workflow_service: WorkflowService,
        job_repo: JobRepository,
        workspace_file_repo: WorkspaceFileRepository,
        input_link_repo: InputWorkspaceFileLinkRepository,
        blob_repo: Optional[BlobRepository] = None,
    ):
        self.workflow_service = workflow_service
        self.workflow_repo = workflow_service.workflow_repo
        self.job_repo = job_repo
        self.workspace_file_repo = workspace_file_repo
        self.input_link_repo = input_link_repo
        self.blob_repo = blob_repo

    # ========================================================================
    # JOB
    # ========================================================================

    async def delete_job(self, job_id: int, permanent: bool = False) -> DeleteReport:
        """
        Delete a Job after deleting its output WorkspaceFile, if any.

        The output file's own source-job check is skipped since that source
        is the Job being deleted.
        """
        with log_context(job_id=job_id, operation="delete_job"):
            logger.info(f"Checking if its possible to delete job {job_id}")

            job = await self.job_repo.get(job_id)
            if job is None:
                return self._refuse(job_id, "Job not found")

            outputs = await self.workspace_file_repo.find_by_source_job_id(job_id)
            if len(outputs) > 1:
                return self._refuse(
                    job_id,
                    f"Found {len(outputs)} WorkspaceFiles as output for Job, but expected 1",
                )

            if outputs:
                output = outputs[0]
                report = await self.delete_workspace_file(
                    output.id, permanent=permanent, ignore_source_job=True
                )
                if not report.successful:
                    return self._refuse(
                        job_id,
                        f"Unable to delete Workspace File ({output.id}) : {report.reason}",
                    )

            if permanent:
                await self.job_repo.delete(job_id)
            else:
                await self.job_repo.set_deleted(job_id, True)

            log_audit("job_deleted", {"permanent": permanent, "output_file_deleted": bool(outputs)})
            return DeleteReport.succeeded(job_id)

    # ========================================================================
    # WORKFLOW
    # ========================================================================

    async def delete_workflow(self, workflow_id: int, permanent: bool = False) -> DeleteReport:
        """
        Delete a Workflow no Job has run under.

        A permanent delete also removes the uploaded artifact; a missing
        artifact or a failed artifact delete is logged, not fatal.
        """
        with log_context(workflow_id=workflow_id, operation="delete_workflow"):
            logger.info(f"Checking if its possible to delete workflow {workflow_id}")

            job_count = await self.job_repo.count_by_workflow_id(workflow_id)
            if job_count > 0:
                return self._refuse(
                    workflow_id, f"Cannot delete {job_count} job(s) have been run under workflow"
                )

            workflow = await self.workflow_repo.get(workflow_id)
            if workflow is None:
                return self._refuse(workflow_id, "Workflow not found")

            if permanent:
                if workflow.blob_key:
                    self._delete_artifact(workflow.blob_key)
                await self.workflow_repo.delete(workflow_id)
            else:
                await self.workflow_service.update_deleted(workflow_id, True)

            log_audit("workflow_deleted", {"permanent": permanent, "blob_key": workflow.blob_key})
            return DeleteReport.succeeded(workflow_id)

    def _delete_artifact(self, blob_key: str) -> None:
        if self.blob_repo is None:
            logger.warning(f"No blob store configured; artifact {blob_key} left in place")
            return

        logger.info(f"Blob key found {blob_key}  Deleting from blob store")
        info = self.blob_repo.get_blob_properties(blob_key)
        if info is None:
            logger.warning(f"No blob info found for {blob_key}")
        else:
            logger.info(f"Found artifact {info.get('name')} ({info.get('size')} bytes)")

        if not self.blob_repo.delete_blob(blob_key):
            logger.warning(f"Artifact {blob_key} was not deleted")

    # ========================================================================
    # WORKSPACE FILE
    # ========================================================================

    async def delete_workspace_file(
        self,
        workspace_file_id: int,
        permanent: bool = False,
        ignore_source_job: bool = False,
    ) -> DeleteReport:
        """
        Delete a WorkspaceFile that no Job consumes as input.

        Args:
            workspace_file_id: File to delete
            permanent: Remove the record instead of flagging it deleted
            ignore_source_job: Skip the "output of an existing Job" check
        """
        with log_context(workspace_file_id=workspace_file_id, operation="delete_workspace_file"):
            workspace_file = await self.workspace_file_repo.get(workspace_file_id)
            if workspace_file is None:
                return self._refuse(workspace_file_id, "WorkspaceFile not found")

            if workspace_file.source_job_id is not None and not ignore_source_job:
                source_job = await self.job_repo.get(workspace_file.source_job_id)
                if source_job is not None:
                    return self._refuse(
                        workspace_file_id,
                        f"Cannot delete WorkspaceFile it is output of job "
                        f"({source_job.id} {source_job.name})",
                    )
                logger.warning(
                    f"Source job {workspace_file.source_job_id} of workspace file "
                    f"{workspace_file_id} no longer exists"
                )

            link_count = await self.input_link_repo.count_by_workspace_file_id(workspace_file_id)
            if link_count > 0:
                return self._refuse(
                    workspace_file_id, f"Found WorkspaceFile is linked to {link_count} Job(s)"
                )

            if permanent:
                await self.workspace_file_repo.delete(workspace_file_id)
            else:
                await self.workspace_file_repo.set_deleted(workspace_file_id, True)

            log_audit("workspace_file_deleted", {"permanent": permanent})
            return DeleteReport.succeeded(workspace_file_id)

    @staticmethod
    def _refuse(entity_id: Optional[int], reason: str) -> DeleteReport:
        logger.info(f"Delete of {entity_id} refused: {reason}")
        return DeleteReport.refused(entity_id, reason)


__all__ = ["DeletionService"]
