# ============================================================================
# DROPDOWN VALUE FETCHER
# ============================================================================
# STATUS: Infrastructure - HTTP client for dropdown value lists
# PURPOSE: Refresh WorkflowParameter.value_map from a remote value list
# CREATED: 18 OCT 2026
# ============================================================================
"""
Dropdown Value Fetcher

A dropdown WorkflowParameter may name a URL in its ``value`` field instead
of carrying a fixed value map. Each time the Workflow is loaded for a user,
the list is fetched and ``value_map`` replaced.

Response body format, one entry per line:

    key=label
    key            (label defaults to the key)

Blank lines and lines starting with ``#`` are ignored. Fetch failures are
logged and leave the parameter untouched; a Workflow must stay loadable when
a value list host is down.
"""

import logging
from typing import Dict, Optional

import httpx

from core.config import get_defaults
from core.models import WorkflowParameter

logger = logging.getLogger(__name__)


def parse_value_list(body: str, separator: str = "=") -> Dict[str, str]:
    """Parse a fetched value list into an ordered value -> label map."""
    values: Dict[str, str] = {}
    for raw in body.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, label = line.partition(separator)
        key = key.strip()
        if not key:
            continue
        values[key] = label.strip() if sep else key
    return values


class DropdownFetcher:
    """
    Async httpx client that refreshes dropdown parameter value maps.

    Args:
        timeout: Request timeout in seconds (default from CWS_DROPDOWN_TIMEOUT_SECONDS)
        transport: Optional httpx transport (tests pass httpx.MockTransport)
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        defaults = get_defaults().dropdown
        self.enabled = defaults.enabled
        self.separator = defaults.line_separator
        self._timeout = httpx.Timeout(timeout or defaults.timeout_seconds)
        self._transport = transport

    @staticmethod
    def is_fetchable(parameter: WorkflowParameter) -> bool:
        return parameter.is_value_source

    async def fetch_and_update(self, parameter: WorkflowParameter, user: Optional[str] = None) -> bool:
        """
        Refresh ``parameter.value_map`` in place.

        Returns:
            True if the value map was replaced
        """
        if not self.enabled or not self.is_fetchable(parameter):
            return False

        url = parameter.value.strip()
        params = {"user": user} if user else None

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await client.get(url, params=params)
                resp.raise_for_status()
        except httpx.TimeoutException as e:
            logger.warning(f"Dropdown fetch timed out for parameter {parameter.name}: {url}: {e}")
            return False
        except httpx.HTTPError as e:
            logger.warning(f"Dropdown fetch failed for parameter {parameter.name}: {url}: {e}")
            return False

        parameter.value_map = parse_value_list(resp.text, self.separator)
        logger.debug(
            f"Refreshed dropdown {parameter.name} with {len(parameter.value_map)} values"
        )
        return True


__all__ = ["DropdownFetcher", "parse_value_list"]
