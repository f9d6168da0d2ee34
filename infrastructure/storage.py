# ============================================================================
# BLOB STORAGE INFRASTRUCTURE
# ============================================================================
# STATUS: Infrastructure - Azure Blob Storage operations
# PURPOSE: Uploaded workflow artifacts (Workflow.blob_key)
# CREATED: 18 OCT 2026
# ============================================================================
"""
Blob Storage Infrastructure

Provides BlobRepository, the artifact store behind ``Workflow.blob_key``:
- upload_blob: Store an uploaded workflow artifact
- get_blob_properties: Look up artifact info (None if missing)
- blob_exists: Check if an artifact exists
- delete_blob: Best-effort delete (False if it could not be deleted)

Uses DefaultAzureCredential for authentication (works with Managed Identity).
All artifacts live in a single container (CWS_BLOB_CONTAINER).
"""

import os
import logging
import threading
from typing import Any, Dict, Optional

from core.config import get_defaults
from infrastructure.base_repository import BaseRepository

logger = logging.getLogger(__name__)


# ============================================================================
# BLOB REPOSITORY
# ============================================================================

class BlobRepository(BaseRepository):
    """
    Azure Blob Storage repository for workflow artifacts.

    Usage:
        repo = BlobRepository(account_name="cwsartifacts", container="workflows")

        info = repo.get_blob_properties("wf/42/bundle.zip")
        if info is not None:
            repo.delete_blob("wf/42/bundle.zip")
    """

    def __init__(self, account_name: Optional[str] = None, container: Optional[str] = None):
        super().__init__()
        defaults = get_defaults().blob
        self.account_name = account_name or defaults.account_name
        self.container = container or defaults.container

        if not self.account_name:
            raise ValueError(
                "BlobRepository requires an account_name. "
                "Pass one explicitly or set CWS_BLOB_ACCOUNT."
            )

        # Lazy initialization of Azure clients
        self._blob_service = None
        self._container_client = None
        self._credential = None
        self._client_lock = threading.Lock()

        logger.info(
            f"BlobRepository initialized for account: {self.account_name}, "
            f"container: {self.container}"
        )

    # ========================================================================
    # AZURE CLIENT INITIALIZATION
    # ========================================================================

    def _get_credential(self):
        """Get Azure credential (lazy initialization)."""
        if self._credential is None:
            try:
                # User-Assigned Managed Identity
                client_id = os.environ.get("AZURE_CLIENT_ID")

                if client_id:
                    from azure.identity import ManagedIdentityCredential
                    self._credential = ManagedIdentityCredential(client_id=client_id)
                    logger.debug("ManagedIdentityCredential initialized with client_id")
                else:
                    from azure.identity import DefaultAzureCredential
                    self._credential = DefaultAzureCredential()
                    logger.debug("DefaultAzureCredential initialized")
            except ImportError:
                raise ImportError(
                    "azure-identity package required. "
                    "Install with: pip install azure-identity"
                )
        return self._credential

    def _get_blob_service(self):
        """Get BlobServiceClient (lazy initialization)."""
        if self._blob_service is None:
            try:
                from azure.storage.blob import BlobServiceClient
                account_url = f"https://{self.account_name}.blob.core.windows.net"
                self._blob_service = BlobServiceClient(
                    account_url=account_url,
                    credential=self._get_credential(),
                )
                logger.debug(f"BlobServiceClient initialized for {account_url}")
            except ImportError:
                raise ImportError(
                    "azure-storage-blob package required. "
                    "Install with: pip install azure-storage-blob"
                )
        return self._blob_service

    def _get_container_client(self):
        """Get the cached container client (double-checked locking)."""
        if self._container_client is not None:
            return self._container_client

        with self._client_lock:
            if self._container_client is None:
                self._container_client = self._get_blob_service().get_container_client(
                    self.container
                )
                logger.debug(f"Created container client for: {self.container}")
        return self._container_client

    def _get_blob_client(self, blob_key: str):
        return self._get_container_client().get_blob_client(blob_key)

    # ========================================================================
    # ARTIFACT OPERATIONS
    # ========================================================================

    def upload_blob(
        self,
        blob_key: str,
        data: bytes,
        content_type: str = "application/octet-stream",
        overwrite: bool = True,
    ) -> Dict[str, Any]:
        """Upload an artifact. Returns a summary dict with the etag."""
        from azure.storage.blob import ContentSettings

        with self._error_context("blob upload", blob_key):
            result = self._get_blob_client(blob_key).upload_blob(
                data,
                overwrite=overwrite,
                content_settings=ContentSettings(content_type=content_type),
            )

        logger.info(f"Uploaded blob: {self.container}/{blob_key} ({len(data)} bytes)")
        return {
            "container": self.container,
            "blob_key": blob_key,
            "size": len(data),
            "etag": result.get("etag"),
        }

    def get_blob_properties(self, blob_key: str) -> Optional[Dict[str, Any]]:
        """
        Get artifact properties (size, content type, etc.).

        Returns:
            Property dict, or None if the blob does not exist

        Raises:
            RepositoryError: On any storage failure other than "not found"
        """
        from azure.core.exceptions import ResourceNotFoundError

        with self._error_context("blob properties lookup", blob_key):
            try:
                props = self._get_blob_client(blob_key).get_blob_properties()
            except ResourceNotFoundError:
                return None

        return {
            "name": blob_key,
            "size": props.size,
            "content_type": props.content_settings.content_type,
            "last_modified": props.last_modified.isoformat() if props.last_modified else None,
            "etag": props.etag,
            "metadata": dict(props.metadata) if props.metadata else {},
        }

    def blob_exists(self, blob_key: str) -> bool:
        """Check if an artifact exists."""
        return self.get_blob_properties(blob_key) is not None

    def delete_blob(self, blob_key: str) -> bool:
        """Delete an artifact. Returns True if deleted, False otherwise."""
        try:
            self._get_blob_client(blob_key).delete_blob()
            logger.info(f"Deleted blob: {self.container}/{blob_key}")
            return True
        except Exception as e:
            logger.warning(f"Failed to delete blob {self.container}/{blob_key}: {e}")
            return False


# ============================================================================
# CONVENIENCE FUNCTIONS
# ============================================================================

_blob_repository: Optional[BlobRepository] = None


def get_blob_repository() -> BlobRepository:
    """Get the BlobRepository configured from CWS_BLOB_* settings."""
    global _blob_repository
    if _blob_repository is None:
        _blob_repository = BlobRepository()
    return _blob_repository


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "BlobRepository",
    "get_blob_repository",
]
