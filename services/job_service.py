# ============================================================================
# JOB SERVICE
# ============================================================================
# STATUS: Core - Job lifecycle management
# PURPOSE: Create, look up and submit Jobs
# CREATED: 18 OCT 2026
# ============================================================================
"""
Job Service

Manages job lifecycle:
- Create a Job (validated, persisted even when it carries parameter errors)
- Look up / list Jobs
- Submit a clean Job to the external scheduler
- Record the running / completed / failed status the scheduler reports

Submission is the only place validation errors block anything: a Job with
errors stays PENDING and the errors are returned to the caller.
"""

from abc import ABC, abstractmethod
from typing import Iterable, List, Optional, Tuple

from core.contracts import JobStatus
from core.logging import get_logger, log_audit, log_context
from core.models import Job, JobValidationResult, Parameter
from repositories import JobRepository, WorkspaceFileRepository
from .job_validator import JobValidator

logger = get_logger(__name__)


class JobScheduler(ABC):
    """External execution backend a Job is handed to."""

    @abstractmethod
    async def submit(self, job: Job) -> str:
        """
        Submit a rendered Job (workspace-file parameters resolved to paths).

        Returns:
            The scheduler's id for the submitted job
        """


class JobService:
    """Service for job lifecycle management."""

    def __init__(
        self,
        job_repo: JobRepository,
        job_validator: JobValidator,
        workspace_file_repo: WorkspaceFileRepository,
        scheduler: Optional[JobScheduler] = None,
    ):
        """
        Initialize job service.

        Args:
            job_repo: Job persistence
            job_validator: Validation run on create and on submit
            workspace_file_repo: Resolves workspace-file parameters to paths
            scheduler: Default scheduler for submit_job
        """
        self.job_repo = job_repo
        self.job_validator = job_validator
        self.workspace_file_repo = workspace_file_repo
        self.scheduler = scheduler

    async def create_job(self, job: Job, user: Optional[str] = None) -> Tuple[Job, JobValidationResult]:
        """
        Validate and persist a new Job.

        Parameter errors do not block persistence; they are returned.

        Raises:
            ValueError: If job is None or its Workflow cannot be loaded
        """
        if job is None:
            raise ValueError("Job cannot be None")

        if job.owner is None:
            job.owner = user
        job.status = JobStatus.PENDING

        with log_context(workflow_id=job.workflow_id, user=user, operation="create_job"):
            result = await self.job_validator.validate(job, user)
            if result.error is not None:
                raise ValueError(result.error)

            # Workflow was just loaded by the validator
            await self.job_repo.insert(job, skip_workflow_check=True)

            if result.has_errors:
                logger.info(
                    f"Created job {job.id} with {len(result.parameters_with_errors)} parameter errors"
                )
        return job, result

    async def get_job(self, job_id: int, user: Optional[str] = None) -> Optional[Job]:
        """Get a job by id; when ``user`` is given, only if they own it."""
        if user is not None:
            return await self.job_repo.get_for_user(job_id, user)
        return await self.job_repo.get(job_id)

    async def list_jobs(
        self,
        owner: Optional[str] = None,
        statuses: Optional[Iterable[JobStatus]] = None,
        not_submitted_to_scheduler: bool = False,
        show_deleted: bool = False,
        omit_parameters: bool = False,
    ) -> List[Job]:
        return await self.job_repo.list(
            owner=owner,
            statuses=statuses,
            not_submitted_to_scheduler=not_submitted_to_scheduler,
            show_deleted=show_deleted,
            omit_parameters=omit_parameters,
        )

    async def count_jobs(
        self,
        owner: Optional[str] = None,
        statuses: Optional[Iterable[JobStatus]] = None,
        not_submitted_to_scheduler: bool = False,
        show_deleted: bool = False,
    ) -> int:
        return await self.job_repo.count(
            owner=owner,
            statuses=statuses,
            not_submitted_to_scheduler=not_submitted_to_scheduler,
            show_deleted=show_deleted,
        )

    async def resolve_workspace_paths(self, job: Job, defaults: Optional[List[Parameter]] = None) -> Job:
        """
        Copy of ``job`` with workspace-id parameter values replaced by file paths.

        ``defaults`` (unfilled slots with a default value) are appended to
        the copy. Unresolvable files are reported in the copy's ``error``.
        """
        rendered = job.model_copy(deep=True)
        if defaults:
            rendered.parameters.extend(p.model_copy() for p in defaults)
        problems = []

        for param in rendered.workspace_parameters():
            try:
                workspace_file_id = int(param.value)
            except (TypeError, ValueError):
                problems.append(f"Invalid WorkspaceFile id for parameter {param.name}: {param.value!r}")
                continue

            workspace_file = await self.workspace_file_repo.get(workspace_file_id)
            if workspace_file is None:
                problems.append(f"WorkspaceFile {workspace_file_id} not found")
            elif not workspace_file.path:
                problems.append(f"WorkspaceFile {workspace_file_id} has no path")
            else:
                param.value = workspace_file.path

        if problems:
            rendered.error = "; ".join(problems)
        return rendered

    async def submit_job(
        self,
        job_id: int,
        user: Optional[str] = None,
        scheduler: Optional[JobScheduler] = None,
    ) -> Tuple[Job, JobValidationResult]:
        """
        Re-validate a PENDING Job and hand it to the scheduler.

        Returns:
            (job, result). When ``result.has_errors`` the Job was not submitted
            and is unchanged.

        Raises:
            ValueError: If there is no scheduler, the Job is not found, or it
                was already submitted
        """
        scheduler = scheduler or self.scheduler
        if scheduler is None:
            raise ValueError("No scheduler configured for job submission")

        with log_context(job_id=job_id, user=user, operation="submit_job"):
            job = await self.get_job(job_id, user)
            if job is None:
                raise ValueError(f"Job not found: {job_id}")
            if job.submitted_to_scheduler or job.status != JobStatus.PENDING:
                raise ValueError(f"Job {job_id} was already submitted (status '{job.status.value}')")

            result = await self.job_validator.validate(job, user)
            if result.has_errors:
                logger.info(f"Job {job_id} not submitted: validation errors")
                return job, result

            rendered = await self.resolve_workspace_paths(job, result.defaults)
            if rendered.error is not None:
                result.error = rendered.error
                logger.info(f"Job {job_id} not submitted: {rendered.error}")
                return job, result

            scheduler_job_id = await scheduler.submit(rendered)
            job.mark_submitted(scheduler_job_id)
            await self.job_repo.update(job)

            log_audit("job_submitted", {"scheduler_job_id": scheduler_job_id})
            logger.info(f"Submitted job {job_id} as {scheduler_job_id}")
            return job, result

    async def update_status(
        self,
        job_id: int,
        status: JobStatus,
        error: Optional[str] = None,
        detailed_error: Optional[str] = None,
    ) -> Job:
        """
        Record a status reported by the scheduler (running, completed, failed).

        Reporting the current status again is a no-op. Submission goes
        through submit_job only.

        Raises:
            ValueError: If the Job is not found or the transition is invalid
        """
        status = JobStatus(status)

        with log_context(job_id=job_id, operation="update_job_status"):
            job = await self.job_repo.get(job_id)
            if job is None:
                raise ValueError(f"Job not found: {job_id}")

            if job.status == status:
                logger.debug(f"Job {job_id} already '{status.value}'")
                return job

            previous = job.status
            if status == JobStatus.RUNNING:
                job.mark_started()
            elif status == JobStatus.COMPLETED:
                job.mark_completed()
            elif status == JobStatus.FAILED:
                job.mark_failed(error, detailed_error)
            elif status == JobStatus.SUBMITTED:
                raise ValueError(f"Job {job_id} must be submitted through submit_job")
            else:
                raise ValueError(
                    f"Cannot transition job {job_id} from '{previous.value}' to '{status.value}'"
                )

            await self.job_repo.update(job)

            log_audit(
                "job_status_changed",
                {"from": previous.value, "to": status.value, "error": job.error},
            )
            logger.info(f"Job {job_id} {previous.value} -> {status.value}")
            return job


__all__ = ["JobService", "JobScheduler"]
