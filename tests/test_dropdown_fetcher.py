# ============================================================================
# DROPDOWN FETCHER TESTS
# ============================================================================
# STATUS: Tests - Dropdown value list refresh
# PURPOSE: Verify DropdownFetcher against httpx.MockTransport
# CREATED: 18 OCT 2026
# ============================================================================
"""
DropdownFetcher Tests

HTTP is served by httpx.MockTransport; nothing leaves the process.

Run with:
    pytest tests/test_dropdown_fetcher.py -v
"""

import asyncio

import httpx
import pytest

from core.config import reset_defaults
from core.models import WorkflowParameter
from infrastructure.dropdown import DropdownFetcher, parse_value_list


@pytest.fixture(autouse=True)
def _fresh_defaults():
    reset_defaults()
    yield
    reset_defaults()


def _dropdown(url="https://lists.example.org/genomes"):
    return WorkflowParameter(name="genome", type="dropdown", value=url, value_map={"old": "Old"})


def _fetcher(handler):
    return DropdownFetcher(transport=httpx.MockTransport(handler))


class TestParseValueList:

    def test_pairs_and_bare_keys(self):
        body = "hg38=Human GRCh38\n\n# comment\nmm10\n  dm6 = Fly  \n"
        assert parse_value_list(body) == {
            "hg38": "Human GRCh38",
            "mm10": "mm10",
            "dm6": "Fly",
        }

    def test_custom_separator(self):
        assert parse_value_list("a|Alpha", separator="|") == {"a": "Alpha"}


class TestFetchAndUpdate:

    def test_replaces_value_map(self):
        seen = {}

        def handler(request):
            seen["user"] = request.url.params.get("user")
            return httpx.Response(200, text="hg38=Human\nmm10=Mouse\n")

        param = _dropdown()
        updated = asyncio.run(_fetcher(handler).fetch_and_update(param, user="alice"))

        assert updated is True
        assert param.value_map == {"hg38": "Human", "mm10": "Mouse"}
        assert seen["user"] == "alice"

    def test_server_error_keeps_old_map(self):
        param = _dropdown()

        updated = asyncio.run(
            _fetcher(lambda request: httpx.Response(500)).fetch_and_update(param)
        )

        assert updated is False
        assert param.value_map == {"old": "Old"}

    def test_connection_error_keeps_old_map(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        param = _dropdown()
        assert asyncio.run(_fetcher(handler).fetch_and_update(param)) is False
        assert param.value_map == {"old": "Old"}

    def test_non_dropdown_not_fetched(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, text="x")

        param = WorkflowParameter(name="threads", type="text", value="https://example.org")
        assert asyncio.run(_fetcher(handler).fetch_and_update(param)) is False
        assert calls == []

    def test_literal_value_not_fetched(self):
        assert DropdownFetcher.is_fetchable(_dropdown(url="hg38")) is False
        assert DropdownFetcher.is_fetchable(_dropdown(url="HTTP://lists/x")) is True

    def test_disabled_by_env(self, monkeypatch):
        monkeypatch.setenv("CWS_DROPDOWN_FETCH", "false")
        reset_defaults()

        fetcher = _fetcher(lambda request: httpx.Response(200, text="a=b"))
        param = _dropdown()

        assert asyncio.run(fetcher.fetch_and_update(param)) is False
        assert param.value_map == {"old": "Old"}
