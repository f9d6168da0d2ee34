# ============================================================================
# PARAMETER LINKER TESTS
# ============================================================================
# STATUS: Tests - Parameter to WorkflowParameter matching
# PURPOSE: Verify matching, unmatched and missing-required reporting
# CREATED: 18 OCT 2026
# ============================================================================
"""
ParameterLinker Tests

Run with:
    pytest tests/test_parameter_linker.py -v
"""

import pytest

from core.models import Job, Parameter, Workflow, WorkflowParameter
from services.parameter_linker import NO_MATCH, REQUIRED_NOT_FOUND, ParameterLinker


# ============================================================================
# HELPERS
# ============================================================================

def _make_workflow(*slots):
    return Workflow(id=1, name="wf", parameters=list(slots))


def _make_job(*params):
    return Job(id=10, workflow_id=1, parameters=[Parameter(name=n, value=v) for n, v in params])


def _error_strings(result):
    return [(e.name, e.error) for e in result.errors]


# ============================================================================
# MATCHING
# ============================================================================

class TestLinking:

    def test_all_names_match(self):
        wf = _make_workflow(WorkflowParameter(name="a"), WorkflowParameter(name="b"))
        job = _make_job(("a", "1"), ("b", "2"))

        result = ParameterLinker().link(job, wf)

        assert result.errors == []
        assert set(result.links) == {"a", "b"}
        assert result.parameter_for("b").value == "2"

    def test_match_is_case_sensitive(self):
        wf = _make_workflow(WorkflowParameter(name="Alpha"))
        job = _make_job(("alpha", "1"))

        result = ParameterLinker().link(job, wf)

        assert _error_strings(result) == [("alpha", NO_MATCH)]
        assert result.links == {}

    def test_unmatched_parameter_recorded(self):
        wf = _make_workflow(WorkflowParameter(name="a"))
        job = _make_job(("a", "1"), ("zzz", "2"))

        result = ParameterLinker().link(job, wf)

        assert _error_strings(result) == [("zzz", NO_MATCH)]
        assert result.errors[0].parameter.value == "2"

    def test_each_slot_matches_once(self):
        wf = _make_workflow(WorkflowParameter(name="a"))
        job = _make_job(("a", "first"), ("a", "second"))

        result = ParameterLinker().link(job, wf)

        assert result.parameter_for("a").value == "first"
        assert _error_strings(result) == [("a", NO_MATCH)]
        assert result.errors[0].parameter.value == "second"

    def test_null_name_never_matches(self):
        wf = _make_workflow(WorkflowParameter(name="a"))
        job = Job(workflow_id=1, parameters=[Parameter(name=None, value="x")])

        result = ParameterLinker().link(job, wf)

        assert _error_strings(result) == [(None, NO_MATCH)]

    def test_workflow_slots_not_mutated(self):
        wf = _make_workflow(WorkflowParameter(name="a"), WorkflowParameter(name="b"))
        ParameterLinker().link(_make_job(("a", "1")), wf)
        assert wf.parameter_names() == ["a", "b"]

    def test_pairs_follow_job_order(self):
        wf = _make_workflow(WorkflowParameter(name="a"), WorkflowParameter(name="b"))
        job = _make_job(("b", "2"), ("a", "1"))

        pairs = ParameterLinker().link(job, wf).pairs()

        assert [(slot.name, p.value) for slot, p in pairs] == [("b", "2"), ("a", "1")]


# ============================================================================
# REQUIRED SLOTS
# ============================================================================

class TestRequiredSlots:

    def test_missing_required_reported_once_by_name(self):
        wf = _make_workflow(
            WorkflowParameter(name="a"),
            WorkflowParameter(name="req", is_required=True),
        )
        result = ParameterLinker().link(_make_job(("a", "1")), wf)

        assert _error_strings(result) == [("req", REQUIRED_NOT_FOUND)]
        assert result.errors[0].parameter is None

    def test_missing_required_with_default_is_fine(self):
        wf = _make_workflow(WorkflowParameter(name="req", is_required=True, value="42"))
        result = ParameterLinker().link(_make_job(), wf)
        assert result.errors == []

    def test_missing_advanced_optional_is_fine(self):
        """Only is_required drives the check; is_advanced is display-only."""
        wf = _make_workflow(WorkflowParameter(name="adv", is_advanced=True))
        result = ParameterLinker().link(_make_job(), wf)
        assert result.errors == []

    def test_empty_workflow_still_reports_unmatched(self):
        wf = _make_workflow()
        result = ParameterLinker().link(_make_job(("x", "5")), wf)

        assert result.links == {}
        assert _error_strings(result) == [("x", NO_MATCH)]


class TestPreconditions:

    def test_none_job_raises(self):
        with pytest.raises(ValueError, match="Job cannot be None"):
            ParameterLinker().link(None, _make_workflow())

    def test_none_workflow_raises(self):
        with pytest.raises(ValueError, match="Workflow cannot be None"):
            ParameterLinker().link(_make_job(), None)


# ============================================================================
# DEFAULTS
# ============================================================================

class TestDefaults:

    def test_unfilled_slot_with_default_returned(self):
        wf = _make_workflow(
            WorkflowParameter(name="reads", is_required=True),
            WorkflowParameter(name="threads", value="4"),
            WorkflowParameter(name="label"),
        )
        result = ParameterLinker().link(_make_job(("reads", "20")), wf)

        assert result.errors == []
        assert [slot.name for slot in result.defaults] == ["threads"]

    def test_filled_slot_default_unused(self):
        wf = _make_workflow(WorkflowParameter(name="threads", value="4"))
        result = ParameterLinker().link(_make_job(("threads", "8")), wf)

        assert result.defaults == []
        assert result.parameter_for("threads").value == "8"

    def test_dropdown_list_url_is_not_a_default(self):
        wf = _make_workflow(
            WorkflowParameter(
                name="dataset",
                type="dropdown",
                value="https://lists.example.org/datasets",
                is_required=True,
            ),
        )
        result = ParameterLinker().link(_make_job(("other", "1")), wf)

        assert _error_strings(result) == [("other", NO_MATCH), ("dataset", REQUIRED_NOT_FOUND)]
        assert result.defaults == []

    def test_dropdown_plain_value_is_a_default(self):
        wf = _make_workflow(
            WorkflowParameter(name="genome", type="Dropdown", value="hg38", is_required=True),
        )
        result = ParameterLinker().link(_make_job(), wf)

        assert result.errors == []
        assert [slot.value for slot in result.defaults] == ["hg38"]
