"""
Vault Sync - Publish Obsidian notes to a static blog

Pulls publishable notes out of an Obsidian vault and writes site-ready
markdown with support for:
- Incremental sync driven by a timestamp in each post's frontmatter
- Wikilink conversion
- Callout rendering
- Image embed resolution and asset copying
- Machine translation of posts into additional languages
"""

__version__ = "0.1.0"

from vault_sync.core.models import (
    CleanupResult,
    ImageReference,
    ParsedDocument,
    PublishableDocument,
    SyncCheckResult,
    SyncReason,
    SyncResult,
)
from vault_sync.core.discovery import VaultDiscovery
from vault_sync.core.processor import ContentProcessor, PublishedIndex
from vault_sync.core.sync import SyncReconciler

__all__ = [
    "CleanupResult",
    "ImageReference",
    "ParsedDocument",
    "PublishableDocument",
    "SyncCheckResult",
    "SyncReason",
    "SyncResult",
    "VaultDiscovery",
    "ContentProcessor",
    "PublishedIndex",
    "SyncReconciler",
]
