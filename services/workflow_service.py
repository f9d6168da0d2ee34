# ============================================================================
# WORKFLOW SERVICE
# ============================================================================
# STATUS: Core - Workflow versioning and lookup
# PURPOSE: Insert/fork Workflows, flag updates, definition files
# CREATED: 18 OCT 2026
# ============================================================================
"""
Workflow Service

Workflow history is append-only. Inserting a Workflow that carries an
existing id does not overwrite that record: it forks a new one with

    parent_id = old id
    version   = old.version + 1
    id        = freshly assigned

so Jobs pinned to the old id keep running exactly what they were created
against. Two concurrent forks of the same id both succeed and produce
sibling versions; there is no cross-record lock.

Workflow definitions can also be authored as YAML files (load_definition),
then inserted like any other Workflow. A Workflow's runnable artifact is
uploaded to blob storage with upload_artifact.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Union

import yaml

from core.logging import get_logger, log_audit, log_context
from core.models import Workflow, WorkflowParameter
from infrastructure import BlobRepository, DropdownFetcher
from repositories import WorkflowRepository

logger = get_logger(__name__)


def parse_workflow_id(value: Union[int, str, None]) -> int:
    """
    Parse a Workflow id supplied by a caller.

    Raises:
        ValueError: If the value is not a positive integer
    """
    try:
        workflow_id = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid Workflow id: {value!r}")
    if workflow_id <= 0:
        raise ValueError(f"Workflow id must be positive: {workflow_id}")
    return workflow_id


class WorkflowService:
    """Service for Workflow versioning and lookup."""

    def __init__(
        self,
        workflow_repo: WorkflowRepository,
        dropdown_fetcher: Optional[DropdownFetcher] = None,
        blob_repo: Optional[BlobRepository] = None,
    ):
        """
        Initialize workflow service.

        Args:
            workflow_repo: Workflow persistence
            dropdown_fetcher: Optional refresher for dropdown value lists
            blob_repo: Artifact store used by upload_artifact
        """
        self.workflow_repo = workflow_repo
        self.dropdown_fetcher = dropdown_fetcher
        self.blob_repo = blob_repo

    # ========================================================================
    # VERSIONING
    # ========================================================================

    async def insert(self, workflow: Workflow) -> Workflow:
        """
        Persist a Workflow, forking a new version if it carries an existing id.

        Args:
            workflow: Workflow to insert (updated in place and returned)

        Returns:
            The persisted Workflow with its new id

        Raises:
            ValueError: If workflow is None, has duplicate parameter names,
                or names an id that does not exist
        """
        if workflow is None:
            raise ValueError("Workflow cannot be None")

        self._check_parameter_names(workflow.parameters)

        if workflow.create_date is None:
            workflow.create_date = datetime.now(timezone.utc)
        if workflow.version <= 0:
            workflow.version = 1

        with log_context(workflow_id=workflow.id, operation="insert_workflow"):
            if workflow.id is not None and workflow.id > 0:
                parent = await self.workflow_repo.get(workflow.id)
                if parent is None:
                    raise ValueError(f"Unable to load parent Workflow with id: {workflow.id}")

                workflow.id = None
                workflow.parent_id = parent.id
                workflow.version = parent.version + 1
            else:
                workflow.id = None

            await self.workflow_repo.insert(workflow)

            if workflow.parent_id is not None:
                log_audit(
                    "workflow_forked",
                    {"new_id": workflow.id, "parent_id": workflow.parent_id, "version": workflow.version},
                )
            logger.info(f"Inserted workflow {workflow.id} '{workflow.name}' v{workflow.version}")

        return workflow

    @staticmethod
    def _check_parameter_names(parameters: List[WorkflowParameter]) -> None:
        seen: Set[str] = set()
        for param in parameters:
            if param.name is None:
                continue
            if param.name in seen:
                raise ValueError(f"Duplicate WorkflowParameter name: {param.name}")
            seen.add(param.name)

    async def get_version_chain(self, workflow_id: Union[int, str]) -> List[Workflow]:
        """
        The Workflow and its ancestors, newest first.

        Stops at the root, at a missing parent, or on a cycle.
        """
        chain: List[Workflow] = []
        visited: Set[int] = set()
        current_id: Optional[int] = parse_workflow_id(workflow_id)

        while current_id is not None and current_id not in visited:
            visited.add(current_id)
            workflow = await self.workflow_repo.get(current_id)
            if workflow is None:
                if chain:
                    logger.warning(f"Parent workflow {current_id} of {chain[-1].id} is missing")
                break
            chain.append(workflow)
            current_id = workflow.parent_id

        return chain

    # ========================================================================
    # LOOKUP
    # ========================================================================

    async def get_workflow(
        self,
        workflow_id: Union[int, str],
        user: Optional[str] = None,
    ) -> Optional[Workflow]:
        """
        Load a Workflow and refresh its dropdown value lists for ``user``.

        Raises:
            ValueError: If workflow_id is not a positive integer
        """
        workflow = await self.workflow_repo.get(parse_workflow_id(workflow_id))
        if workflow is None:
            return None

        if self.dropdown_fetcher is not None:
            for param in workflow.parameters:
                await self.dropdown_fetcher.fetch_and_update(param, user)
        return workflow

    async def list_workflows(
        self,
        omit_parameters: bool = False,
        show_deleted: bool = False,
    ) -> List[Workflow]:
        workflows = await self.workflow_repo.list(show_deleted=show_deleted)
        if omit_parameters:
            for workflow in workflows:
                workflow.parameters = []
        return workflows

    # ========================================================================
    # SINGLE-RECORD UPDATES
    # ========================================================================

    async def update_deleted(self, workflow_id: Union[int, str], deleted: bool) -> Workflow:
        """
        Set the deleted flag (no write if unchanged).

        Raises:
            ValueError: If the Workflow does not exist
        """
        parsed_id = parse_workflow_id(workflow_id)
        workflow = await self.workflow_repo.set_deleted(parsed_id, deleted)
        if workflow is None:
            raise ValueError(f"There was a problem updating the workflow {parsed_id}: not found")
        return workflow

    async def update_blob_key(self, workflow_id: Union[int, str], blob_key: Optional[str]) -> Workflow:
        """
        Set the uploaded artifact key (no write if unchanged).

        Raises:
            ValueError: If the Workflow does not exist
        """
        parsed_id = parse_workflow_id(workflow_id)
        workflow = await self.workflow_repo.set_blob_key(parsed_id, blob_key)
        if workflow is None:
            raise ValueError(f"There was a problem updating the workflow {parsed_id}: not found")
        return workflow

    # ========================================================================
    # ARTIFACTS
    # ========================================================================

    async def upload_artifact(
        self,
        workflow_id: Union[int, str],
        data: bytes,
        filename: str,
        content_type: str = "application/octet-stream",
    ) -> Workflow:
        """
        Upload the Workflow's artifact and record its blob key.

        The key is ``workflows/<id>/<filename>``. A previous artifact stored
        under another key is removed (best-effort) once the new key is saved.

        Raises:
            ValueError: If no blob store is configured, the filename is empty,
                or the Workflow does not exist
        """
        if self.blob_repo is None:
            raise ValueError("No blob store configured for workflow artifacts")

        parsed_id = parse_workflow_id(workflow_id)
        name = Path(filename or "").name
        if not name:
            raise ValueError("Artifact filename cannot be empty")

        with log_context(workflow_id=parsed_id, operation="upload_artifact"):
            workflow = await self.workflow_repo.get(parsed_id)
            if workflow is None:
                raise ValueError(f"Unable to load Workflow with id: {parsed_id}")

            blob_key = f"workflows/{parsed_id}/{name}"
            summary = self.blob_repo.upload_blob(blob_key, data, content_type=content_type)
            updated = await self.update_blob_key(parsed_id, blob_key)

            previous = workflow.blob_key
            if previous and previous != blob_key:
                if not self.blob_repo.delete_blob(previous):
                    logger.warning(f"Previous artifact {previous} was not deleted")

            log_audit(
                "workflow_artifact_uploaded",
                {"blob_key": blob_key, "size": summary["size"], "replaced": previous},
            )
            return updated

    # ========================================================================
    # DEFINITION FILES
    # ========================================================================

    def load_definition(self, path: Union[str, Path]) -> Workflow:
        """
        Load an unsaved Workflow from a YAML definition file.

        ``parameters`` may be a list of mappings, or a mapping keyed by
        parameter name (order preserved).

        Raises:
            ValueError: If the file is not a valid definition
        """
        path = Path(path)
        with open(path) as f:
            data = yaml.safe_load(f)

        if not isinstance(data, dict):
            raise ValueError(f"Invalid workflow definition in {path}: expected a mapping")

        data["parameters"] = self._parameters_from_yaml(data.get("parameters"), path)
        workflow = Workflow.model_validate(data)
        self._check_parameter_names(workflow.parameters)

        logger.info(
            f"Loaded workflow definition '{workflow.name}' from {path} "
            f"({len(workflow.parameters)} parameters)"
        )
        return workflow

    @staticmethod
    def _parameters_from_yaml(raw: Any, path: Path) -> List[Dict[str, Any]]:
        if raw is None:
            return []
        if isinstance(raw, list):
            return raw
        if isinstance(raw, dict):
            params = []
            for name, attrs in raw.items():
                params.append({**(attrs or {}), "name": name})
            return params
        raise ValueError(f"Invalid workflow definition in {path}: parameters must be a list or mapping")


__all__ = ["WorkflowService", "parse_workflow_id"]
