# ============================================================================
# CONFIGURATION DEFAULTS
# ============================================================================
# STATUS: Core - Default configuration values
# PURPOSE: Centralized defaults for the store, blob artifacts and dropdowns
# CREATED: 18 OCT 2026
# ============================================================================
"""
Configuration Defaults

Provides defaults for the document store, workflow artifact storage and
dropdown value fetching. Each can be overridden via environment variables.

Design:
- Immutable dataclasses for defaults
- Environment variable overrides
- Type-safe access
"""

import os
from dataclasses import dataclass, field
from typing import Optional


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class DatabaseDefaults:
    """
    Defaults for the PostgreSQL document store.

    Connection details themselves come from DATABASE_URL / POSTGRES_*
    (see repositories.database.get_connection_string).
    """
    schema_name: str = "cws"
    pool_min_size: int = 2
    pool_max_size: int = 10

    @classmethod
    def from_env(cls) -> "DatabaseDefaults":
        """Create from environment variables."""
        return cls(
            schema_name=os.getenv("CWS_DB_SCHEMA", "cws"),
            pool_min_size=int(os.getenv("CWS_DB_POOL_MIN", 2)),
            pool_max_size=int(os.getenv("CWS_DB_POOL_MAX", 10)),
        )


@dataclass(frozen=True)
class BlobDefaults:
    """
    Defaults for uploaded workflow artifacts.

    A Workflow's blob_key is a blob name inside ``container``.
    """
    account_name: Optional[str] = None
    container: str = "workflows"

    @classmethod
    def from_env(cls) -> "BlobDefaults":
        """Create from environment variables."""
        return cls(
            account_name=os.getenv("CWS_BLOB_ACCOUNT"),
            container=os.getenv("CWS_BLOB_CONTAINER", "workflows"),
        )


@dataclass(frozen=True)
class DropdownDefaults:
    """
    Defaults for refreshing dropdown WorkflowParameter value lists.
    """
    enabled: bool = True
    timeout_seconds: float = 10.0
    # Separates value from label on each line of a fetched value list
    line_separator: str = "="

    @classmethod
    def from_env(cls) -> "DropdownDefaults":
        """Create from environment variables."""
        return cls(
            enabled=_env_bool("CWS_DROPDOWN_FETCH", True),
            timeout_seconds=float(os.getenv("CWS_DROPDOWN_TIMEOUT_SECONDS", 10.0)),
        )


# ============================================================================
# GLOBAL DEFAULTS INSTANCE
# ============================================================================

@dataclass
class Defaults:
    """Container for all default configurations."""
    database: DatabaseDefaults = field(default_factory=DatabaseDefaults)
    blob: BlobDefaults = field(default_factory=BlobDefaults)
    dropdown: DropdownDefaults = field(default_factory=DropdownDefaults)

    @classmethod
    def from_env(cls) -> "Defaults":
        """Create all defaults from environment variables."""
        return cls(
            database=DatabaseDefaults.from_env(),
            blob=BlobDefaults.from_env(),
            dropdown=DropdownDefaults.from_env(),
        )


_defaults: Optional[Defaults] = None


def get_defaults() -> Defaults:
    """Get global defaults instance."""
    global _defaults
    if _defaults is None:
        _defaults = Defaults.from_env()
    return _defaults


def reset_defaults() -> None:
    """Reset defaults (for testing)."""
    global _defaults
    _defaults = None


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "DatabaseDefaults",
    "BlobDefaults",
    "DropdownDefaults",
    "Defaults",
    "get_defaults",
    "reset_defaults",
]
