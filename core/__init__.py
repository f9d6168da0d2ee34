# ============================================================================
# CORE MODULE
# ============================================================================
# STATUS: Core module initialization
# PURPOSE: Export core contracts, models, and schema utilities
# CREATED: 18 OCT 2026
# ============================================================================

from core.contracts import JobStatus, ValidationType
from core.models import (
    Workflow,
    WorkflowParameter,
    Job,
    Parameter,
    ParameterWithError,
    WorkspaceFile,
    InputWorkspaceFileLink,
    DeleteReport,
    JobValidationResult,
)
from core.schema import DocumentTableDDL

__all__ = [
    # Enums
    "JobStatus",
    "ValidationType",
    # Models
    "Workflow",
    "WorkflowParameter",
    "Job",
    "Parameter",
    "ParameterWithError",
    "WorkspaceFile",
    "InputWorkspaceFileLink",
    "DeleteReport",
    "JobValidationResult",
    # Schema
    "DocumentTableDDL",
]
