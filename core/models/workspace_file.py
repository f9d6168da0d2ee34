# ============================================================================
# WORKSPACE FILE MODELS
# ============================================================================
# STATUS: Core model - Stored artifacts and their consumers
# PURPOSE: WorkspaceFile (job output / input) and InputWorkspaceFileLink
# CREATED: 18 OCT 2026
# EXPORTS: WorkspaceFile, InputWorkspaceFileLink
# DEPENDENCIES: pydantic
# ============================================================================
"""
WorkspaceFile Models

A WorkspaceFile is a stored artifact. Relationships are kept by id only:

    Job --(source_job_id, at most one)--> WorkspaceFile
    WorkspaceFile <--(InputWorkspaceFileLink, zero or more)-- Job

The store has no foreign keys, so every reference here is application
enforced (see services.deletion_service).
"""

from datetime import datetime, timezone
from typing import ClassVar, Dict, List, Optional

from pydantic import BaseModel, Field, computed_field


class WorkspaceFile(BaseModel):
    """
    A stored output/input artifact.

    Maps to: cws.workspace_files (document table)
    """

    __sql_table__: ClassVar[str] = "workspace_files"
    __sql_columns__: ClassVar[Dict[str, str]] = {
        "owner": "VARCHAR(256)",
        "source_job_id": "BIGINT",
        "deleted": "BOOLEAN",
        "create_date": "TIMESTAMPTZ",
    }
    __sql_indexes__: ClassVar[List[tuple]] = [
        ("idx_workspace_files_source_job", ["source_job_id"]),
        ("idx_workspace_files_owner", ["owner"]),
        ("idx_workspace_files_deleted", ["deleted"]),
    ]

    id: Optional[int] = None
    name: Optional[str] = Field(default=None, max_length=512)
    description: Optional[str] = None
    owner: Optional[str] = Field(default=None, max_length=256)
    type: Optional[str] = None
    path: Optional[str] = Field(default=None, description="Location readable by the scheduler")
    size: Optional[int] = Field(default=None, ge=0)
    md5: Optional[str] = Field(default=None, max_length=32)

    # The Job that produced this file (at most one)
    source_job_id: Optional[int] = None

    blob_key: Optional[str] = None
    create_date: Optional[datetime] = None
    deleted: bool = False

    model_config = {"frozen": False}

    @computed_field
    @property
    def is_job_output(self) -> bool:
        return self.source_job_id is not None


class InputWorkspaceFileLink(BaseModel):
    """
    Join record: Job ``job_id`` consumes WorkspaceFile ``workspace_file_id``
    as the value of parameter ``parameter_name``.

    Maps to: cws.input_workspace_file_links (document table)
    """

    __sql_table__: ClassVar[str] = "input_workspace_file_links"
    __sql_columns__: ClassVar[Dict[str, str]] = {
        "job_id": "BIGINT",
        "workspace_file_id": "BIGINT",
        "parameter_name": "VARCHAR(256)",
    }
    __sql_indexes__: ClassVar[List[tuple]] = [
        ("idx_input_links_workspace_file", ["workspace_file_id"]),
        ("idx_input_links_job", ["job_id"]),
    ]

    id: Optional[int] = None
    job_id: int
    workspace_file_id: int
    parameter_name: Optional[str] = None
    create_date: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = {"frozen": False}


__all__ = ["WorkspaceFile", "InputWorkspaceFileLink"]
