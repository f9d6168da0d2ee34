# ============================================================================
# WORKFLOW MODEL
# ============================================================================
# STATUS: Core model - Versioned, parameterized job template
# PURPOSE: Workflow template and its declared parameter slots
# CREATED: 18 OCT 2026
# EXPORTS: Workflow, WorkflowParameter
# DEPENDENCIES: pydantic
# ============================================================================
"""
Workflow Models

A Workflow is the template of a runnable program. It declares:
- An ordered list of WorkflowParameter slots (the parameter contract)
- A version number, incremented along the parent chain
- An optional uploaded artifact (blob key)

Versioning is append-only. Re-inserting a Workflow with an existing id
creates a new record whose parent_id points at the old one; the old record
is never modified, so Jobs pinned to it keep working.
"""

from datetime import datetime
from typing import ClassVar, Dict, List, Optional

from pydantic import BaseModel, Field, computed_field

from core.contracts import ValidationType

DROPDOWN_TYPE = "dropdown"


class WorkflowParameter(BaseModel):
    """
    One declared parameter slot on a Workflow (ParameterSchema).

    ``name`` is unique within a Workflow and is the key instance
    Parameters are matched on. Owned exclusively by its Workflow.
    """
    name: Optional[str] = Field(default=None, max_length=256)
    display_name: Optional[str] = None
    type: Optional[str] = Field(default=None, description="Widget type: text, file, dropdown, ...")
    value: Optional[str] = Field(
        default=None,
        description="Default value; for dropdowns, where the value list comes from",
    )
    help: Optional[str] = None
    is_required: bool = False
    is_advanced: bool = False

    # Validation
    validation_type: Optional[str] = Field(
        default=None,
        description="One of none|string|digits|number (stored as text)",
    )
    validation_help: Optional[str] = None
    validation_regex: Optional[str] = None
    min_value: Optional[float] = Field(default=None, description="Inclusive lower bound")
    max_value: Optional[float] = Field(default=None, description="Inclusive upper bound")
    max_length: Optional[int] = Field(default=None, ge=0)
    max_file_size: Optional[int] = Field(default=None, ge=0)

    delimiter_value: Optional[str] = None
    value_map: Optional[Dict[str, str]] = Field(
        default=None,
        description="Enumerated values for dropdown parameters (value -> label)",
    )

    model_config = {"frozen": False}

    def parsed_validation_type(self) -> Optional[ValidationType]:
        """Stored validation_type as an enum (raises ValueError if unknown)."""
        return ValidationType.parse(self.validation_type)

    @property
    def is_value_source(self) -> bool:
        """True for a dropdown whose ``value`` is the URL of its value list."""
        if (self.type or "").lower() != DROPDOWN_TYPE:
            return False
        value = (self.value or "").strip().lower()
        return value.startswith("http://") or value.startswith("https://")

    @property
    def has_default(self) -> bool:
        # A value-list URL is not something a Job can run with
        if self.is_value_source:
            return False
        return self.value is not None and self.value != ""


class Workflow(BaseModel):
    """
    A versioned, parameterized job template.

    Maps to: cws.workflows (document table)

    Lifecycle:
        1. Inserted fresh with version=1 and no parent
        2. Re-inserted with its own id -> forked: new id, parent_id=old id,
           version=old.version + 1
        3. Soft-deleted (deleted flag) or hard-deleted, both only while no
           Job references it
    """

    # =========================================================================
    # DOCUMENT TABLE METADATA (Used by DocumentTableDDL)
    # =========================================================================
    __sql_table__: ClassVar[str] = "workflows"
    __sql_columns__: ClassVar[Dict[str, str]] = {
        "name": "VARCHAR(256)",
        "owner": "VARCHAR(256)",
        "version": "INTEGER",
        "parent_id": "BIGINT",
        "deleted": "BOOLEAN",
        "create_date": "TIMESTAMPTZ",
    }
    __sql_indexes__: ClassVar[List[tuple]] = [
        ("idx_workflows_parent", ["parent_id"]),
        ("idx_workflows_deleted", ["deleted"]),
        ("idx_workflows_name", ["name"]),
    ]

    id: Optional[int] = Field(default=None, description="Unset until first persisted")
    name: Optional[str] = Field(default=None, max_length=256)
    description: Optional[str] = None
    release_notes: Optional[str] = None
    owner: Optional[str] = Field(default=None, max_length=256)
    version: int = Field(default=1, description="Starts at 1, parent.version + 1 on fork")
    create_date: Optional[datetime] = None
    deleted: bool = False
    parameters: List[WorkflowParameter] = Field(default_factory=list)

    # Explicit parent reference; resolved on demand through the repository
    parent_id: Optional[int] = Field(default=None, description="Previous version of this Workflow")

    blob_key: Optional[str] = Field(default=None, description="Uploaded workflow artifact")

    model_config = {"frozen": False}

    @computed_field
    @property
    def is_fork(self) -> bool:
        """True if this Workflow was created from an earlier version."""
        return self.parent_id is not None

    def parameter_names(self) -> List[Optional[str]]:
        return [p.name for p in self.parameters]


__all__ = ["Workflow", "WorkflowParameter", "DROPDOWN_TYPE"]
