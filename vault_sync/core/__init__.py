"""Core components for Vault Sync."""

from vault_sync.core.models import (
    CleanupResult,
    ImageReference,
    ParsedDocument,
    PostFile,
    PublishableDocument,
    SkippedDocument,
    SyncCheckResult,
    SyncReason,
    SyncResult,
)
from vault_sync.core.discovery import VaultDiscovery, filter_publishable, is_publishable, parse_document
from vault_sync.core.processor import ContentProcessor, PublishedIndex
from vault_sync.core.slug import generate_slug
from vault_sync.core.sync import SyncReconciler, check_should_sync, cleanup_unused_images

__all__ = [
    "CleanupResult",
    "ImageReference",
    "ParsedDocument",
    "PostFile",
    "PublishableDocument",
    "SkippedDocument",
    "SyncCheckResult",
    "SyncReason",
    "SyncResult",
    "VaultDiscovery",
    "filter_publishable",
    "is_publishable",
    "parse_document",
    "ContentProcessor",
    "PublishedIndex",
    "generate_slug",
    "SyncReconciler",
    "check_should_sync",
    "cleanup_unused_images",
]
