# ============================================================================
# REPOSITORIES MODULE
# ============================================================================
# STATUS: Core - Database access layer
# PURPOSE: CRUD operations for workflow service entities
# CREATED: 18 OCT 2026
# ============================================================================
"""
Repositories Module

Provides database access for Workflows, Jobs, WorkspaceFiles and input links.
Uses psycopg3 async with connection pooling.

Usage:
    from repositories import DatabasePool, JobRepository

    async with DatabasePool() as pool:
        job_repo = JobRepository(pool)
        job = await job_repo.get(job_id)
"""

from .database import get_pool, close_pool, DatabasePool, get_connection_string
from .document_repo import DocumentRepository
from .workflow_repo import WorkflowRepository
from .job_repo import JobRepository
from .workspace_file_repo import WorkspaceFileRepository
from .input_link_repo import InputWorkspaceFileLinkRepository

__all__ = [
    "get_pool",
    "close_pool",
    "DatabasePool",
    "get_connection_string",
    "DocumentRepository",
    "WorkflowRepository",
    "JobRepository",
    "WorkspaceFileRepository",
    "InputWorkspaceFileLinkRepository",
]
