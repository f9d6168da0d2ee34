# ============================================================================
# MODELS MODULE
# ============================================================================
# STATUS: Model exports
# PURPOSE: Central export point for all Pydantic models
# CREATED: 18 OCT 2026
# ============================================================================
"""
Models Module - Central Export Point

All Pydantic models for the workflow service.
Persisted models declare their document table via __sql_* ClassVar
attributes, read by core.schema.DocumentTableDDL.
"""

from core.models.workflow import DROPDOWN_TYPE, Workflow, WorkflowParameter
from core.models.job import Job, Parameter, ParameterWithError
from core.models.workspace_file import WorkspaceFile, InputWorkspaceFileLink
from core.models.reports import DeleteReport, JobValidationResult

__all__ = [
    # Workflow
    "Workflow",
    "WorkflowParameter",
    "DROPDOWN_TYPE",
    # Job
    "Job",
    "Parameter",
    "ParameterWithError",
    # Workspace files
    "WorkspaceFile",
    "InputWorkspaceFileLink",
    # Reports
    "DeleteReport",
    "JobValidationResult",
]
