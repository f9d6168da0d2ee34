# ============================================================================
# DELETION SERVICE TESTS
# ============================================================================
# STATUS: Tests - Integrity-guarded deletes
# PURPOSE: Verify DeletionService refusals and cascades with mocked repos
# CREATED: 18 OCT 2026
# ============================================================================
"""
DeletionService Tests

Unit tests with mocked repos. Every refusal must happen before any write,
so most tests also assert that no delete/set_deleted call was made.

Run with:
    pytest tests/test_deletion_service.py -v
"""

import asyncio
import pytest
from unittest.mock import AsyncMock, MagicMock

from core.models import Job, Workflow, WorkspaceFile
from infrastructure import RepositoryError
from services.deletion_service import DeletionService
from services.workflow_service import WorkflowService


# ============================================================================
# HELPERS
# ============================================================================

def _make_job(job_id=1, name="assemble"):
    return Job(id=job_id, name=name, workflow_id=5)


def _make_file(file_id=20, source_job_id=None):
    return WorkspaceFile(id=file_id, name="out.tar", path=f"/ws/{file_id}", source_job_id=source_job_id)


def _make_workflow(workflow_id=5, blob_key=None):
    return Workflow(id=workflow_id, name="align", blob_key=blob_key)


def _build_service(with_blobs=False):
    """Build a DeletionService with every repository mocked."""
    workflow_repo = AsyncMock()
    svc = DeletionService(
        WorkflowService(workflow_repo),
        job_repo=AsyncMock(),
        workspace_file_repo=AsyncMock(),
        input_link_repo=AsyncMock(),
        blob_repo=MagicMock() if with_blobs else None,
    )
    svc.job_repo.count_by_workflow_id.return_value = 0
    svc.input_link_repo.count_by_workspace_file_id.return_value = 0
    svc.workspace_file_repo.find_by_source_job_id.return_value = []
    return svc


def _assert_no_writes(svc):
    for repo in (svc.job_repo, svc.workspace_file_repo, svc.workflow_repo):
        repo.delete.assert_not_awaited()
        repo.set_deleted.assert_not_awaited()


# ============================================================================
# JOB
# ============================================================================

class TestDeleteJob:

    def test_job_without_output(self):
        svc = _build_service()
        svc.job_repo.get.return_value = _make_job()

        report = asyncio.run(svc.delete_job(1, permanent=True))

        assert report.successful is True
        assert report.reason is None
        svc.job_repo.delete.assert_awaited_once_with(1)

    def test_soft_delete_cascades_to_output(self):
        svc = _build_service()
        svc.job_repo.get.return_value = _make_job()
        output = _make_file(file_id=20, source_job_id=1)
        svc.workspace_file_repo.find_by_source_job_id.return_value = [output]
        svc.workspace_file_repo.get.return_value = output

        report = asyncio.run(svc.delete_job(1, permanent=False))

        assert report.successful is True
        svc.workspace_file_repo.set_deleted.assert_awaited_once_with(20, True)
        svc.job_repo.set_deleted.assert_awaited_once_with(1, True)
        svc.job_repo.delete.assert_not_awaited()

    def test_output_source_check_skipped(self):
        """The job being deleted must not block deletion of its own output."""
        svc = _build_service()
        svc.job_repo.get.return_value = _make_job()
        output = _make_file(source_job_id=1)
        svc.workspace_file_repo.find_by_source_job_id.return_value = [output]
        svc.workspace_file_repo.get.return_value = output

        asyncio.run(svc.delete_job(1, permanent=True))

        svc.job_repo.get.assert_awaited_once_with(1)
        svc.workspace_file_repo.delete.assert_awaited_once_with(20)

    def test_soft_delete_already_deleted_job(self):
        svc = _build_service()
        job = _make_job()
        job.deleted = True
        svc.job_repo.get.return_value = job
        svc.job_repo.set_deleted.return_value = job

        first = asyncio.run(svc.delete_job(1))
        second = asyncio.run(svc.delete_job(1))

        assert (first.successful, first.reason) == (True, None)
        assert (second.successful, second.reason) == (True, None)
        svc.job_repo.delete.assert_not_awaited()

    def test_missing_job(self):
        svc = _build_service()
        svc.job_repo.get.return_value = None

        report = asyncio.run(svc.delete_job(1))

        assert report.successful is False
        assert report.reason == "Job not found"
        _assert_no_writes(svc)

    def test_multiple_outputs_refused(self):
        svc = _build_service()
        svc.job_repo.get.return_value = _make_job()
        svc.workspace_file_repo.find_by_source_job_id.return_value = [
            _make_file(20, 1), _make_file(21, 1),
        ]

        report = asyncio.run(svc.delete_job(1, permanent=True))

        assert report.successful is False
        assert report.reason == "Found 2 WorkspaceFiles as output for Job, but expected 1"
        _assert_no_writes(svc)

    def test_output_in_use_blocks_job(self):
        svc = _build_service()
        svc.job_repo.get.return_value = _make_job()
        output = _make_file(file_id=20, source_job_id=1)
        svc.workspace_file_repo.find_by_source_job_id.return_value = [output]
        svc.workspace_file_repo.get.return_value = output
        svc.input_link_repo.count_by_workspace_file_id.return_value = 2

        report = asyncio.run(svc.delete_job(1, permanent=True))

        assert report.successful is False
        assert report.reason == (
            "Unable to delete Workspace File (20) : Found WorkspaceFile is linked to 2 Job(s)"
        )
        _assert_no_writes(svc)

    def test_repository_error_propagates(self):
        svc = _build_service()
        svc.job_repo.get.side_effect = RepositoryError("db down", "job get", 1)

        with pytest.raises(RepositoryError):
            asyncio.run(svc.delete_job(1))


# ============================================================================
# WORKFLOW
# ============================================================================

class TestDeleteWorkflow:

    def test_refused_when_jobs_exist(self):
        svc = _build_service()
        svc.job_repo.count_by_workflow_id.return_value = 3

        report = asyncio.run(svc.delete_workflow(5, permanent=True))

        assert report.successful is False
        assert report.reason == "Cannot delete 3 job(s) have been run under workflow"
        _assert_no_writes(svc)

    def test_missing_workflow(self):
        svc = _build_service()
        svc.workflow_repo.get.return_value = None

        report = asyncio.run(svc.delete_workflow(5))

        assert report.reason == "Workflow not found"

    def test_soft_delete(self):
        svc = _build_service()
        svc.workflow_repo.get.return_value = _make_workflow()
        svc.workflow_repo.set_deleted.return_value = _make_workflow()

        report = asyncio.run(svc.delete_workflow(5))

        assert report.successful is True
        svc.workflow_repo.set_deleted.assert_awaited_once_with(5, True)
        svc.workflow_repo.delete.assert_not_awaited()

    def test_soft_delete_twice_is_fine(self):
        svc = _build_service()
        svc.workflow_repo.get.return_value = _make_workflow()
        svc.workflow_repo.set_deleted.return_value = _make_workflow()

        first = asyncio.run(svc.delete_workflow(5))
        second = asyncio.run(svc.delete_workflow(5))

        assert first.successful and second.successful

    def test_permanent_deletes_artifact(self):
        svc = _build_service(with_blobs=True)
        svc.workflow_repo.get.return_value = _make_workflow(blob_key="wf/5.zip")
        svc.blob_repo.get_blob_properties.return_value = {"name": "wf/5.zip", "size": 10}
        svc.blob_repo.delete_blob.return_value = True

        report = asyncio.run(svc.delete_workflow(5, permanent=True))

        assert report.successful is True
        svc.blob_repo.delete_blob.assert_called_once_with("wf/5.zip")
        svc.workflow_repo.delete.assert_awaited_once_with(5)

    def test_missing_artifact_not_fatal(self):
        svc = _build_service(with_blobs=True)
        svc.workflow_repo.get.return_value = _make_workflow(blob_key="wf/5.zip")
        svc.blob_repo.get_blob_properties.return_value = None
        svc.blob_repo.delete_blob.return_value = False

        report = asyncio.run(svc.delete_workflow(5, permanent=True))

        assert report.successful is True
        svc.workflow_repo.delete.assert_awaited_once_with(5)

    def test_no_blob_key_skips_store(self):
        svc = _build_service(with_blobs=True)
        svc.workflow_repo.get.return_value = _make_workflow()

        asyncio.run(svc.delete_workflow(5, permanent=True))

        svc.blob_repo.delete_blob.assert_not_called()

    def test_no_blob_store_configured(self):
        svc = _build_service()
        svc.workflow_repo.get.return_value = _make_workflow(blob_key="wf/5.zip")

        report = asyncio.run(svc.delete_workflow(5, permanent=True))

        assert report.successful is True


# ============================================================================
# WORKSPACE FILE
# ============================================================================

class TestDeleteWorkspaceFile:

    def test_free_file(self):
        svc = _build_service()
        svc.workspace_file_repo.get.return_value = _make_file()

        report = asyncio.run(svc.delete_workspace_file(20, permanent=True))

        assert report.successful is True
        svc.workspace_file_repo.delete.assert_awaited_once_with(20)

    def test_soft_delete_already_deleted_file(self):
        svc = _build_service()
        wsf = _make_file()
        wsf.deleted = True
        svc.workspace_file_repo.get.return_value = wsf
        svc.workspace_file_repo.set_deleted.return_value = wsf

        first = asyncio.run(svc.delete_workspace_file(20))
        second = asyncio.run(svc.delete_workspace_file(20))

        assert (first.successful, first.reason) == (True, None)
        assert (second.successful, second.reason) == (True, None)
        assert svc.workspace_file_repo.set_deleted.await_count == 2

    def test_missing_file(self):
        svc = _build_service()
        svc.workspace_file_repo.get.return_value = None

        report = asyncio.run(svc.delete_workspace_file(20))

        assert report.reason == "WorkspaceFile not found"

    def test_output_of_existing_job_refused(self):
        svc = _build_service()
        svc.workspace_file_repo.get.return_value = _make_file(source_job_id=1)
        svc.job_repo.get.return_value = _make_job(job_id=1, name="assemble")

        report = asyncio.run(svc.delete_workspace_file(20, permanent=True))

        assert report.successful is False
        assert "1" in report.reason and "assemble" in report.reason
        assert report.reason == "Cannot delete WorkspaceFile it is output of job (1 assemble)"
        _assert_no_writes(svc)

    def test_output_of_vanished_job_proceeds(self):
        svc = _build_service()
        svc.workspace_file_repo.get.return_value = _make_file(source_job_id=1)
        svc.job_repo.get.return_value = None

        report = asyncio.run(svc.delete_workspace_file(20, permanent=False))

        assert report.successful is True
        svc.workspace_file_repo.set_deleted.assert_awaited_once_with(20, True)

    def test_ignore_source_job_skips_lookup(self):
        svc = _build_service()
        svc.workspace_file_repo.get.return_value = _make_file(source_job_id=1)

        report = asyncio.run(svc.delete_workspace_file(20, ignore_source_job=True))

        assert report.successful is True
        svc.job_repo.get.assert_not_awaited()

    def test_linked_input_refused(self):
        svc = _build_service()
        svc.workspace_file_repo.get.return_value = _make_file()
        svc.input_link_repo.count_by_workspace_file_id.return_value = 1

        report = asyncio.run(svc.delete_workspace_file(20, permanent=True))

        assert report.reason == "Found WorkspaceFile is linked to 1 Job(s)"
        _assert_no_writes(svc)
