# ============================================================================
# OPERATION REPORTS
# ============================================================================
# STATUS: Core model - Outcomes returned by services
# PURPOSE: Delete reports and job validation results
# CREATED: 18 OCT 2026
# EXPORTS: DeleteReport, JobValidationResult
# DEPENDENCIES: pydantic, dataclasses
# ============================================================================
"""
Operation Reports

Refusals and validation failures are ordinary return values, not
exceptions. A caller inspects these to decide what to do next.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from pydantic import BaseModel

from core.models.job import Job, Parameter, ParameterWithError


class DeleteReport(BaseModel):
    """Outcome of a guarded delete. ``reason`` is None on success."""
    id: Optional[int] = None
    successful: bool = False
    reason: Optional[str] = "Unknown"

    @classmethod
    def refused(cls, entity_id: Optional[int], reason: str) -> "DeleteReport":
        return cls(id=entity_id, successful=False, reason=reason)

    @classmethod
    def succeeded(cls, entity_id: Optional[int]) -> "DeleteReport":
        return cls(id=entity_id, successful=True, reason=None)


@dataclass
class JobValidationResult:
    """
    Result of validating a Job against its Workflow.

    Collects all errors - reports every problem at once rather than
    failing on the first and making the caller fix them one at a time.
    ``job`` is the instance that was validated; it is not modified.
    ``defaults`` holds a Parameter for every unfilled slot that has a
    default value, for the rendered Job to run with.
    """
    job: Job
    parameters_with_errors: List[ParameterWithError] = field(default_factory=list)
    error: Optional[str] = None
    defaults: List[Parameter] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return self.error is not None or len(self.parameters_with_errors) > 0

    def add(self, error: ParameterWithError) -> None:
        self.parameters_with_errors.append(error)

    def errors_for(self, name: Optional[str]) -> List[str]:
        """Error strings recorded against parameter ``name``."""
        return [e.error for e in self.parameters_with_errors if e.name == name]

    def annotated_job(self) -> Job:
        """Copy of the job with the errors attached."""
        annotated = self.job.model_copy(deep=True)
        annotated.parameters_with_errors = list(self.parameters_with_errors)
        if self.error is not None:
            annotated.error = self.error
        return annotated


__all__ = ["DeleteReport", "JobValidationResult"]
