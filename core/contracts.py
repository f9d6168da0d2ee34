# ============================================================================
# BASE CONTRACTS & ENUMS
# ============================================================================
# STATUS: Foundation - Core enums shared by models, repositories and services
# PURPOSE: Job lifecycle states and parameter validation types
# CREATED: 18 OCT 2026
# EXPORTS: JobStatus, ValidationType
# DEPENDENCIES: enum
# ============================================================================
"""
Base contracts for the workflow service.

These enums cross every boundary:
- Document store (stored as their string value)
- Python (internal processing)
"""

from enum import Enum
from typing import Optional


# ============================================================================
# STATUS ENUMS
# ============================================================================

class JobStatus(str, Enum):
    """
    Job lifecycle states.

    State transitions:
        PENDING -> SUBMITTED -> RUNNING -> COMPLETED
                                        -> FAILED

    Validation never moves a job between these states; it only produces
    errors that a caller inspects before allowing PENDING -> SUBMITTED.
    """
    PENDING = "pending"          # Created, not yet handed to the scheduler
    SUBMITTED = "submitted"      # Accepted by the external scheduler
    RUNNING = "running"          # Scheduler reports the job as running
    COMPLETED = "completed"      # Finished successfully
    FAILED = "failed"            # Finished with error

    def is_terminal(self) -> bool:
        """Check if this is a terminal state (no further transitions)."""
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


class ValidationType(str, Enum):
    """
    Validation rule attached to a WorkflowParameter.

    Stored on the parameter as a plain string so records written with an
    unknown rule still load; use ``parse`` to map a stored value.
    """
    NONE = "none"
    STRING = "string"
    DIGITS = "digits"
    NUMBER = "number"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["ValidationType"]:
        """
        Map a stored string to a ValidationType (case-insensitive).

        Returns None for an unset value and raises ValueError for an
        unrecognized one.
        """
        if value is None or value.strip() == "":
            return None
        return cls(value.strip().lower())


__all__ = ["JobStatus", "ValidationType"]
