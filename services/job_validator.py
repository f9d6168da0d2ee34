# ============================================================================
# JOB VALIDATOR
# ============================================================================
# STATUS: Core - Job validation orchestration
# PURPOSE: Check a Job's parameters against its pinned Workflow
# CREATED: 18 OCT 2026
# ============================================================================
"""
Job Validator

Orchestrates the checks run on a Job before it is saved or submitted:

1. Null-name pass            (always runs)
2. Duplicate-name pass       (always runs)
3. Load the pinned Workflow  (through WorkflowService, so dropdown lists are
                             refreshed for the user; on failure: job-level
                             error, stop here)
4. ParameterLinker           (unmatched / missing required / defaults)
5. ParameterValidator        (per linked pair)
6. WorkspaceFile existence   (only when a WorkspaceFile repository is wired in)

Everything found is collected in a JobValidationResult. Invalid input is
data, not an exception; only a missing Job or an unreachable store raises.

Usage:
    validator = JobValidator(WorkflowService(workflow_repo, fetcher), workspace_file_repo)
    result = await validator.validate(job, user="alice")
    if result.has_errors:
        ...
"""

from typing import Optional, Set

from core.logging import get_logger, log_context
from core.models import Job, JobValidationResult, Parameter, ParameterWithError, Workflow
from repositories import WorkspaceFileRepository
from .parameter_linker import ParameterLinker
from .parameter_validator import ParameterValidator
from .workflow_service import WorkflowService

logger = get_logger(__name__)

NULL_NAME = "Parameter name cannot be null"
DUPLICATE = "Duplicate parameter"


class JobValidator:
    """Validate Jobs against their Workflows."""

    def __init__(
        self,
        workflow_service: WorkflowService,
        workspace_file_repo: Optional[WorkspaceFileRepository] = None,
        linker: Optional[ParameterLinker] = None,
        validator: Optional[ParameterValidator] = None,
    ):
        self.workflow_service = workflow_service
        self.workflow_repo = workflow_service.workflow_repo
        self.workspace_file_repo = workspace_file_repo
        self.linker = linker or ParameterLinker()
        self.validator = validator or ParameterValidator()

    async def validate(self, job: Job, user: Optional[str] = None) -> JobValidationResult:
        """
        Validate ``job``. The job itself is not modified.

        Raises:
            ValueError: If job is None
            RepositoryError: If the Workflow could not be read from the store
        """
        if job is None:
            raise ValueError("Job cannot be None")

        result = JobValidationResult(job=job)

        with log_context(job_id=job.id, workflow_id=job.workflow_id, user=user, operation="validate_job"):
            self._check_null_names(job, result)
            self._check_duplicates(job, result)

            workflow = await self._load_workflow(job, user, result)
            if workflow is None:
                logger.info(f"Validation stopped: {result.error}")
                return result

            linked = self.linker.link(job, workflow)
            for error in linked.errors:
                result.add(error)
            result.defaults = [Parameter(name=slot.name, value=slot.value) for slot in linked.defaults]

            for slot, param in linked.pairs():
                reason = self.validator.validate(slot, param.value)
                if reason is not None:
                    logger.info(f"Validation error {param.as_string()} {reason}")
                    result.add(ParameterWithError.for_parameter(param, reason))

            if self.workspace_file_repo is not None:
                await self._check_workspace_files(job, result)

            if result.has_errors:
                logger.info(f"Job has {len(result.parameters_with_errors)} parameter errors")

        return result

    @staticmethod
    def _check_null_names(job: Job, result: JobValidationResult) -> None:
        for param in job.parameters:
            if param.name is None:
                result.add(ParameterWithError.for_parameter(param, NULL_NAME))

    @staticmethod
    def _check_duplicates(job: Job, result: JobValidationResult) -> None:
        seen: Set[str] = set()
        for param in job.parameters:
            if param.name is None:
                continue
            if param.name in seen:
                result.add(ParameterWithError.for_parameter(param, DUPLICATE))
            seen.add(param.name)

    async def _load_workflow(
        self, job: Job, user: Optional[str], result: JobValidationResult
    ) -> Optional[Workflow]:
        if job.workflow_id is None or job.workflow_id <= 0:
            result.error = f"Unable to load Workflow: invalid Workflow id {job.workflow_id}"
            return None

        workflow = await self.workflow_service.get_workflow(job.workflow_id, user)
        if workflow is None:
            result.error = f"Unable to load Workflow with id: {job.workflow_id}"
        return workflow

    async def _check_workspace_files(self, job: Job, result: JobValidationResult) -> None:
        for param in job.workspace_parameters():
            try:
                workspace_file_id = int(param.value)
            except (TypeError, ValueError):
                result.add(ParameterWithError.for_parameter(param, "Invalid WorkspaceFile id"))
                continue

            if await self.workspace_file_repo.get(workspace_file_id) is None:
                result.add(
                    ParameterWithError.for_parameter(param, f"WorkspaceFile {workspace_file_id} not found")
                )


__all__ = ["JobValidator", "NULL_NAME", "DUPLICATE"]
