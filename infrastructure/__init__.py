# ============================================================================
# INFRASTRUCTURE MODULE
# ============================================================================
# STATUS: Infrastructure - Database, storage and external fetch operations
# PURPOSE: Schema deployment, blob artifacts, dropdown value lists
# CREATED: 18 OCT 2026
# ============================================================================
"""
Infrastructure module for the workflow service.

Provides:
- BaseRepository / RepositoryError: error wrapping shared by all repositories
- DatabaseInitializer: Bootstrap the document schema from Pydantic models
- BlobRepository: Azure Blob Storage for uploaded workflow artifacts
- DropdownFetcher: Refresh dropdown parameter value lists over HTTP

Usage:
    from infrastructure import DatabaseInitializer, BlobRepository

    result = DatabaseInitializer().initialize_all(dry_run=True)

    repo = BlobRepository(account_name="cwsartifacts")
    info = repo.get_blob_properties("wf/42/bundle.zip")
"""

from infrastructure.base_repository import (
    BaseRepository,
    RepositoryError,
)
from infrastructure.database_initializer import (
    DatabaseInitializer,
    InitializationResult,
    StepResult,
    initialize_database,
)
from infrastructure.storage import (
    BlobRepository,
    get_blob_repository,
)
from infrastructure.dropdown import (
    DropdownFetcher,
    parse_value_list,
)

__all__ = [
    # Repository base
    'BaseRepository',
    'RepositoryError',
    # Database Initialization
    'DatabaseInitializer',
    'InitializationResult',
    'StepResult',
    'initialize_database',
    # Blob Storage
    'BlobRepository',
    'get_blob_repository',
    # Dropdowns
    'DropdownFetcher',
    'parse_value_list',
]
