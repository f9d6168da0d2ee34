# ============================================================================
# REPOSITORY TESTS
# ============================================================================
# STATUS: Tests - Document row mapping and pre-insert checks
# PURPOSE: Verify repository logic that runs without a database
# CREATED: 18 OCT 2026
# ============================================================================
"""
Repository Tests

Covers row mapping, input link derivation, Job insert preconditions and
the Job delete that removes input links.
The pool is a MagicMock, or a small fake that records the SQL it is given.

Run with:
    pytest tests/test_repositories.py -v
"""

import asyncio
from contextlib import asynccontextmanager
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from psycopg import sql

from core.contracts import JobStatus
from core.models import Job, Parameter, Workflow, WorkflowParameter
from repositories import (
    InputWorkspaceFileLinkRepository,
    JobRepository,
    WorkflowRepository,
    WorkspaceFileRepository,
)


def _render(conditions) -> str:
    return sql.SQL(" AND ").join(conditions).as_string(None)


# ============================================================================
# ROW MAPPING
# ============================================================================

class TestRowMapping:

    def test_document_excludes_id_and_computed(self):
        repo = WorkflowRepository(MagicMock())
        wf = Workflow(id=9, name="align", parent_id=3, version=2)

        document = repo._document(wf)

        assert "id" not in document
        assert "is_fork" not in document
        assert document["parent_id"] == 3

    def test_job_document_drops_transient_errors(self):
        repo = JobRepository(MagicMock())
        document = repo._document(Job(id=1, workflow_id=2))

        assert "parameters_with_errors" not in document
        assert "is_terminal" not in document
        assert document["status"] == "pending"

    def test_columns_use_enum_values(self):
        repo = JobRepository(MagicMock())
        columns = repo._columns(Job(workflow_id=2, status=JobStatus.RUNNING, owner="alice"))

        assert columns["status"] == "running"
        assert columns["workflow_id"] == 2
        assert set(columns) == set(Job.__sql_columns__)

    def test_row_to_model_takes_id_from_row(self):
        repo = WorkflowRepository(MagicMock())
        row = {
            "id": 12,
            "document": {
                "name": "align",
                "version": 4,
                "parameters": [{"name": "reads", "is_required": True}],
            },
        }

        wf = repo._row_to_model(row)

        assert wf.id == 12
        assert wf.version == 4
        assert wf.parameters[0] == WorkflowParameter(name="reads", is_required=True)


# ============================================================================
# JOB INSERT
# ============================================================================

class TestJobInsert:

    def test_input_links_from_workspace_parameters(self):
        job = Job(
            id=5,
            workflow_id=1,
            parameters=[
                Parameter(name="reads", value="20", is_workspace_id=True),
                Parameter(name="threads", value="4"),
                Parameter(name="ref", value="not-an-id", is_workspace_id=True),
            ],
        )

        links = JobRepository._input_links(job)

        assert [(l.job_id, l.workspace_file_id, l.parameter_name) for l in links] == [(5, 20, "reads")]

    @pytest.mark.parametrize("workflow_id", [None, 0])
    def test_insert_requires_workflow_id(self, workflow_id):
        repo = JobRepository(MagicMock())

        with pytest.raises(ValueError, match="must be set to a positive value"):
            asyncio.run(repo.insert(Job(workflow_id=workflow_id)))

    def test_insert_requires_existing_workflow(self):
        repo = JobRepository(MagicMock())

        with patch.object(repo, "_workflow_exists", AsyncMock(return_value=False)):
            with pytest.raises(ValueError, match="Unable to load Workflow for Job with id: 3"):
                asyncio.run(repo.insert(Job(workflow_id=3)))

        repo.pool.connection.assert_not_called()


# ============================================================================
# FILTERS
# ============================================================================

class TestJobFilters:

    def test_default_hides_deleted(self):
        conditions, params = JobRepository(MagicMock())._filters(None, None, False, False)
        assert _render(conditions) == "deleted IS NOT TRUE"
        assert params == []

    def test_all_filters(self):
        conditions, params = JobRepository(MagicMock())._filters(
            "alice", [JobStatus.PENDING, "running"], True, True
        )
        rendered = _render(conditions)

        assert "owner = %s" in rendered
        assert "status = ANY(%s)" in rendered
        assert "submitted_to_scheduler IS NOT TRUE" in rendered
        assert "deleted" not in rendered.replace("submitted_to_scheduler", "")
        assert params == ["alice", ["pending", "running"]]


# ============================================================================
# JOB DELETE
# ============================================================================

class _FakeResult:

    def __init__(self, rowcount, row):
        self.rowcount = rowcount
        self._row = row

    async def fetchone(self):
        return self._row


class _FakeCursor:
    """Dict-row cursor over the connection's preset ``row``."""

    def __init__(self, conn):
        self.conn = conn

    async def execute(self, query, params=None):
        self.conn.executed.append((query.as_string(None), params))

    async def fetchone(self):
        return self.conn.row


class _FakeConnection:
    """
    Records executed SQL; every statement affects ``rowcount`` rows.

    ``row`` is what a cursor (or a statement result) fetches.
    """

    def __init__(self, rowcount=1, row=None):
        self.rowcount = rowcount
        self.row = row
        self.executed = []

    async def execute(self, query, params=None):
        self.executed.append((query.as_string(None), params))
        return _FakeResult(self.rowcount, self.row)

    @asynccontextmanager
    async def cursor(self, row_factory=None):
        yield _FakeCursor(self)

    @asynccontextmanager
    async def transaction(self):
        yield


class _FakePool:

    def __init__(self, conn):
        self.conn = conn

    @asynccontextmanager
    async def connection(self):
        yield self.conn


class TestJobDelete:

    def test_links_removed_with_job(self):
        conn = _FakeConnection(rowcount=1)
        repo = JobRepository(_FakePool(conn))

        assert asyncio.run(repo.delete(5)) is True

        statements = [q for q, _ in conn.executed]
        assert statements[0].startswith('DELETE FROM "cws"."input_workspace_file_links"')
        assert statements[1].startswith('DELETE FROM "cws"."jobs"')
        assert all(params == (5,) for _, params in conn.executed)

    def test_missing_job(self):
        repo = JobRepository(_FakePool(_FakeConnection(rowcount=0)))
        assert asyncio.run(repo.delete(5)) is False


# ============================================================================
# SOFT DELETE
# ============================================================================

def _file_row(deleted):
    return {"id": 7, "document": {"name": "out.tar", "source_job_id": 5, "deleted": deleted}}


class TestSetDeleted:

    def test_already_deleted_is_not_written(self):
        conn = _FakeConnection(row=_file_row(True))
        repo = WorkspaceFileRepository(_FakePool(conn))

        wsf = asyncio.run(repo.set_deleted(7, True))

        assert wsf.deleted is True
        assert [q for q, _ in conn.executed] == [
            'SELECT * FROM "cws"."workspace_files" WHERE id = %s FOR UPDATE'
        ]

    def test_flag_change_is_written_in_same_transaction(self):
        conn = _FakeConnection(row=_file_row(False))
        repo = WorkspaceFileRepository(_FakePool(conn))

        wsf = asyncio.run(repo.set_deleted(7, True))

        assert wsf.deleted is True
        statements = [q for q, _ in conn.executed]
        assert statements[0].endswith("FOR UPDATE")
        assert statements[1].startswith('UPDATE "cws"."workspace_files" SET')
        params = conn.executed[1][1]
        assert params["deleted"] is True
        assert params["id"] == 7

    def test_soft_deleted_job_twice(self):
        row = {"id": 5, "document": {"workflow_id": 1, "deleted": True}}
        conn = _FakeConnection(row=row)
        repo = JobRepository(_FakePool(conn))

        job = asyncio.run(repo.set_deleted(5, True))

        assert job.deleted is True
        assert len(conn.executed) == 1

    def test_missing_record(self):
        conn = _FakeConnection(row=None)
        repo = WorkspaceFileRepository(_FakePool(conn))

        assert asyncio.run(repo.set_deleted(7, True)) is None
        assert len(conn.executed) == 1


# ============================================================================
# INPUT LINKS
# ============================================================================

class TestInputLinkCount:

    def test_counts_every_link_to_the_file(self):
        conn = _FakeConnection(row=(2,))
        repo = InputWorkspaceFileLinkRepository(_FakePool(conn))

        assert asyncio.run(repo.count_by_workspace_file_id(9)) == 2
        assert conn.executed == [
            ('SELECT count(*) FROM "cws"."input_workspace_file_links" WHERE workspace_file_id = %s', [9])
        ]
