# ============================================================================
# JOB MODEL
# ============================================================================
# STATUS: Core model - Job instance (workflow instantiation)
# PURPOSE: Track one instantiation of a Workflow with concrete values
# CREATED: 18 OCT 2026
# EXPORTS: Job, Parameter, ParameterWithError
# DEPENDENCIES: pydantic
# ============================================================================
"""
Job Model

A Job (a.k.a. Task) is one instantiation of a Workflow. It pins the
Workflow by id - not "latest" - so later forks of that Workflow never
change what an existing Job runs.

Validation errors are data, not exceptions: ``parameters_with_errors`` and
``error`` describe problems, but never block persistence. The errors list
is transient and is never written to the store.
"""

from datetime import datetime, timezone
from typing import ClassVar, Dict, List, Optional

from pydantic import BaseModel, Field, computed_field

from core.contracts import JobStatus


class Parameter(BaseModel):
    """
    A name/value pair supplied for a Job.

    When ``is_workspace_id`` is set the value is the id of a WorkspaceFile,
    not a literal.
    """
    name: Optional[str] = None
    value: Optional[str] = None
    is_workspace_id: bool = False

    def as_string(self) -> str:
        return f"name={self.name}, value={self.value}, is_workspace_id={self.is_workspace_id}"


class ParameterWithError(BaseModel):
    """
    A Parameter (or just a name, for missing required parameters) paired
    with a human readable error.
    """
    name: Optional[str] = None
    parameter: Optional[Parameter] = None
    error: str

    @classmethod
    def for_parameter(cls, parameter: Parameter, error: str) -> "ParameterWithError":
        return cls(name=parameter.name, parameter=parameter, error=error)

    @classmethod
    def for_name(cls, name: Optional[str], error: str) -> "ParameterWithError":
        return cls(name=name, parameter=None, error=error)


class Job(BaseModel):
    """
    A job instance - one instantiation of a Workflow.

    Maps to: cws.jobs (document table)

    Lifecycle:
        1. Created with status=PENDING, validated (errors attached, not rejected)
        2. Submitted to the external scheduler (scheduler_job_id recorded)
        3. Runs, reaches COMPLETED or FAILED
        4. Soft-deleted (deleted flag) or hard-deleted once its output
           WorkspaceFile, if any, could be deleted
    """

    # =========================================================================
    # DOCUMENT TABLE METADATA (Used by DocumentTableDDL)
    # =========================================================================
    __sql_table__: ClassVar[str] = "jobs"
    __sql_columns__: ClassVar[Dict[str, str]] = {
        "owner": "VARCHAR(256)",
        "workflow_id": "BIGINT",
        "status": "VARCHAR(32)",
        "submitted_to_scheduler": "BOOLEAN",
        "deleted": "BOOLEAN",
        "create_date": "TIMESTAMPTZ",
    }
    __sql_indexes__: ClassVar[List[tuple]] = [
        ("idx_jobs_workflow", ["workflow_id"]),
        ("idx_jobs_owner", ["owner"]),
        ("idx_jobs_status", ["status"]),
        ("idx_jobs_deleted", ["deleted"]),
    ]

    id: Optional[int] = None
    name: Optional[str] = Field(default=None, max_length=256)
    owner: Optional[str] = Field(default=None, max_length=256)

    # Pinned Workflow snapshot reference
    workflow_id: Optional[int] = None

    parameters: List[Parameter] = Field(default_factory=list)

    status: JobStatus = Field(default=JobStatus.PENDING)
    error: Optional[str] = None
    detailed_error: Optional[str] = None

    # Timestamps
    create_date: Optional[datetime] = None
    submit_date: Optional[datetime] = None
    start_date: Optional[datetime] = None
    finish_date: Optional[datetime] = None

    # Scheduler bookkeeping
    scheduler_job_id: Optional[str] = None
    submitted_to_scheduler: bool = False

    deleted: bool = False

    # Transient validation annotations (never persisted)
    parameters_with_errors: List[ParameterWithError] = Field(default_factory=list, exclude=True)

    model_config = {"frozen": False}

    @computed_field
    @property
    def is_terminal(self) -> bool:
        """Check if job is in a terminal state."""
        return self.status.is_terminal()

    def workspace_parameters(self) -> List[Parameter]:
        """Parameters whose value is a WorkspaceFile id."""
        return [p for p in self.parameters if p.is_workspace_id]

    # =========================================================================
    # STATE TRANSITIONS
    # =========================================================================

    def can_transition_to(self, new_status: JobStatus) -> bool:
        """Check if transition to new status is valid."""
        if self.status == new_status:
            return True

        allowed = {
            JobStatus.PENDING: [JobStatus.SUBMITTED],
            JobStatus.SUBMITTED: [JobStatus.RUNNING, JobStatus.COMPLETED, JobStatus.FAILED],
            JobStatus.RUNNING: [JobStatus.COMPLETED, JobStatus.FAILED],
            JobStatus.COMPLETED: [],
            JobStatus.FAILED: [],
        }
        return new_status in allowed.get(self.status, [])

    def _require_transition(self, new_status: JobStatus) -> None:
        if not self.can_transition_to(new_status):
            raise ValueError(
                f"Cannot transition job {self.id} from '{self.status.value}' "
                f"to '{new_status.value}'"
            )

    def mark_submitted(self, scheduler_job_id: str) -> None:
        """Record hand-off to the external scheduler."""
        if self.status != JobStatus.PENDING:
            raise ValueError(
                f"Cannot submit job {self.id} from state '{self.status.value}' "
                f"(must be '{JobStatus.PENDING.value}')"
            )
        self.status = JobStatus.SUBMITTED
        self.scheduler_job_id = scheduler_job_id
        self.submitted_to_scheduler = True
        self.submit_date = datetime.now(timezone.utc)

    def mark_started(self) -> None:
        """Scheduler reported the job running."""
        self._require_transition(JobStatus.RUNNING)
        if self.status == JobStatus.RUNNING:
            return
        self.status = JobStatus.RUNNING
        self.start_date = datetime.now(timezone.utc)

    def mark_completed(self) -> None:
        self._require_transition(JobStatus.COMPLETED)
        if self.status == JobStatus.COMPLETED:
            return
        self.status = JobStatus.COMPLETED
        self.finish_date = datetime.now(timezone.utc)

    def mark_failed(self, error: str, detailed_error: Optional[str] = None) -> None:
        """Record failure; ``error`` is truncated to 2000 characters."""
        self._require_transition(JobStatus.FAILED)
        self.error = error[:2000] if error else "Job failed"
        if detailed_error is not None:
            self.detailed_error = detailed_error
        if self.status == JobStatus.FAILED:
            return
        self.status = JobStatus.FAILED
        self.finish_date = datetime.now(timezone.utc)


__all__ = ["Job", "Parameter", "ParameterWithError"]
