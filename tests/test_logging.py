# ============================================================================
# LOGGING TESTS
# ============================================================================
# STATUS: Tests - Context logging and audit events
# PURPOSE: Verify log_context nesting, formatters and log_audit
# CREATED: 18 OCT 2026
# ============================================================================
"""
Logging Tests

Run with:
    pytest tests/test_logging.py -v
"""

import json
import logging

from core.logging import (
    HumanFormatter,
    StructuredFormatter,
    get_current_context,
    get_logger,
    log_audit,
    log_context,
)


def _record(message="hello"):
    return logging.LogRecord("cws.test", logging.INFO, __file__, 1, message, None, None)


class TestLogContext:

    def test_nested_context_inherits(self):
        with log_context(workflow_id=7, user="alice"):
            with log_context(job_id=3, operation="validate_job"):
                ctx = get_current_context()
                assert ctx.workflow_id == 7
                assert ctx.job_id == 3
                assert ctx.user == "alice"
            assert get_current_context().job_id is None
        assert get_current_context().to_dict() == {}

    def test_human_formatter_shows_ids(self):
        with log_context(job_id=3, workflow_id=7):
            line = HumanFormatter().format(_record())
        assert "[job=3, workflow=7]" in line
        assert line.endswith("cws.test [job=3, workflow=7]: hello")

    def test_structured_formatter_is_json(self):
        with log_context(workspace_file_id=20, operation="delete_workspace_file"):
            payload = json.loads(StructuredFormatter().format(_record("gone")))
        assert payload["message"] == "gone"
        assert payload["context"] == {"workspace_file_id": 20, "operation": "delete_workspace_file"}


class TestAudit:

    def test_audit_event_carries_context(self, caplog):
        with caplog.at_level(logging.INFO, logger="audit"):
            with log_context(job_id=5, operation="delete_job"):
                log_audit("job_deleted", {"permanent": True})

        record = next(r for r in caplog.records if r.name == "audit")
        assert record.getMessage() == "AUDIT: job_deleted"
        assert record.extra["event"] == "job_deleted"
        assert record.extra["job_id"] == 5
        assert record.extra["data"] == {"permanent": True}

    def test_context_logger_attaches_context(self, caplog):
        logger = get_logger("cws.test")
        with caplog.at_level(logging.INFO, logger="cws.test"):
            with log_context(workflow_id=9):
                logger.info("loaded")

        record = caplog.records[-1]
        assert record.extra == {"workflow_id": 9}
