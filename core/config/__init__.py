# ============================================================================
# CONFIGURATION MODULE
# ============================================================================
# STATUS: Core - Configuration and defaults
# PURPOSE: Centralized configuration management
# CREATED: 18 OCT 2026
# ============================================================================
"""
Configuration Module

Provides centralized configuration and defaults for the workflow service.
"""

from core.config.defaults import (
    DatabaseDefaults,
    BlobDefaults,
    DropdownDefaults,
    Defaults,
    get_defaults,
    reset_defaults,
)

__all__ = [
    "DatabaseDefaults",
    "BlobDefaults",
    "DropdownDefaults",
    "Defaults",
    "get_defaults",
    "reset_defaults",
]
