# ============================================================================
# SERVICES MODULE
# ============================================================================
# STATUS: Core - Business logic layer
# PURPOSE: Validation, versioning, guarded deletes and job lifecycle
# CREATED: 18 OCT 2026
# ============================================================================
"""
Services Module

Business logic for the workflow service.
Services receive their repositories by constructor injection.

Usage:
    from services import JobValidator, WorkflowService

    workflow_service = WorkflowService(WorkflowRepository(pool))
    workflow = await workflow_service.insert(workflow)
"""

from .parameter_linker import ParameterLinker, LinkResult
from .parameter_validator import ParameterValidator
from .job_validator import JobValidator
from .workflow_service import WorkflowService, parse_workflow_id
from .deletion_service import DeletionService
from .job_service import JobService, JobScheduler

__all__ = [
    "ParameterLinker",
    "LinkResult",
    "ParameterValidator",
    "JobValidator",
    "WorkflowService",
    "parse_workflow_id",
    "DeletionService",
    "JobService",
    "JobScheduler",
]
