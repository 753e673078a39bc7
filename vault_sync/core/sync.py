"""Sync reconciler: keeps the posts and assets directories in step with the vault."""

import datetime
import logging
import os
import re
import shutil
import tempfile
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set

import yaml

from vault_sync.core.discovery import VaultDiscovery, is_publishable, split_frontmatter
from vault_sync.core.images import find_image_file, find_image_references
from vault_sync.core.models import (
    CleanupResult,
    ParsedDocument,
    PublishableDocument,
    SkippedDocument,
    SyncCheckResult,
    SyncReason,
    SyncResult,
)
from vault_sync.core.processor import ContentProcessor, PublishedIndex, protect_code_blocks
from vault_sync.core.slug import split_translation_stem
from vault_sync.transforms.frontmatter import (
    SYNC_TIMESTAMP_KEY,
    build_output,
    generate_frontmatter,
    parse_local_datetime,
)

logger = logging.getLogger(__name__)

# Image references as they appear in synced posts
IMG_TAG_PATTERN = re.compile(r'<img[^>]+src="/assets/([^"]+)"[^>]*>')
MD_IMAGE_PATTERN = re.compile(r'!\[[^\]]*\]\(/assets/([^)]+)\)')


def _last_sync_time(value) -> Optional[datetime.datetime]:
    """Interpret a stored sync timestamp; None if it is not usable."""
    if isinstance(value, datetime.datetime):
        return value
    if isinstance(value, datetime.date):
        return datetime.datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        try:
            return parse_local_datetime(value)
        except ValueError:
            return None
    return None


def check_should_sync(doc: ParsedDocument, output_dir: Path) -> SyncCheckResult:
    """Decide whether a document's output file needs to be (re)written.

    Compares the source modification time with the ``publish_sync_at``
    timestamp stored in the existing output file.

    Args:
        doc: Parsed source document
        output_dir: Directory holding the synced posts

    Returns:
        SyncCheckResult with the decision and its reason
    """
    if not is_publishable(doc):
        return SyncCheckResult(False, SyncReason.NOT_PUBLISHABLE)

    output_path = Path(output_dir) / f"{doc.slug}.md"
    if not output_path.exists():
        return SyncCheckResult(True, SyncReason.NEW_FILE)

    try:
        data, _ = split_frontmatter(output_path.read_text(encoding='utf-8'))
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        logger.debug("Could not read %s: %s", output_path, e)
        return SyncCheckResult(True, SyncReason.READ_ERROR)

    stored = data.get(SYNC_TIMESTAMP_KEY)
    if not stored:
        return SyncCheckResult(True, SyncReason.NO_SYNC_TIMESTAMP)

    last_sync = _last_sync_time(stored)
    if last_sync is None:
        return SyncCheckResult(True, SyncReason.INVALID_SYNC_TIMESTAMP)

    try:
        modified_after = doc.modified > last_sync
    except TypeError:
        # naive vs aware datetimes
        return SyncCheckResult(True, SyncReason.INVALID_SYNC_TIMESTAMP)

    reason = SyncReason.MODIFIED_AFTER_SYNC if modified_after else SyncReason.UP_TO_DATE
    return SyncCheckResult(modified_after, reason, last_sync)


def write_atomic(path: Path, text: str) -> None:
    """Write a text file through a temporary file and a rename."""
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            f.write(text)
        os.chmod(tmp_name, 0o644)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise


def _referenced_assets(content: str, slug: str) -> Set[str]:
    """Filenames under /assets/<slug>/ referenced by a post's content."""
    used: Set[str] = set()
    for pattern in (IMG_TAG_PATTERN, MD_IMAGE_PATTERN):
        for match in pattern.finditer(content):
            parts = match.group(1).split('/')
            if len(parts) == 2 and parts[0] == slug:
                used.add(parts[1])
    return used


def cleanup_unused_images(posts_dir: Path, asset_dir: Path) -> CleanupResult:
    """Delete asset files and folders no synced post refers to.

    Asset folders are named after post slugs. A folder with no matching post
    is removed outright; otherwise only files its post does not reference
    are removed, and the folder too if nothing is left.

    Args:
        posts_dir: Directory holding the synced posts
        asset_dir: Asset root with one folder per slug

    Returns:
        CleanupResult listing what was removed
    """
    result = CleanupResult()
    posts_dir = Path(posts_dir)
    asset_dir = Path(asset_dir)

    if not asset_dir.exists():
        return result

    used_images: Dict[str, Set[str]] = {}
    unreadable: Set[str] = set()
    post_files = sorted(posts_dir.glob('*.md')) if posts_dir.exists() else []
    for post_file in post_files:
        slug = post_file.stem
        try:
            content = post_file.read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            # assets of a post we cannot read are left alone
            logger.debug("Could not read %s: %s", post_file, e)
            unreadable.add(slug)
            continue
        used = _referenced_assets(content, slug)
        if used:
            used_images[slug] = used

    valid_slugs = {p.stem for p in post_files}

    for sub_dir in sorted(p for p in asset_dir.iterdir() if p.is_dir()):
        if sub_dir.name not in valid_slugs:
            shutil.rmtree(sub_dir)
            result.removed_dirs.append(sub_dir.name)
            logger.debug("Removed asset folder of unpublished post: %s", sub_dir.name)
            continue

        if sub_dir.name in unreadable:
            continue

        used = used_images.get(sub_dir.name, set())
        for entry in sorted(sub_dir.iterdir()):
            if entry.name in used:
                continue
            if entry.is_dir():
                shutil.rmtree(entry)
            else:
                entry.unlink()
            result.removed_images.append(f"{sub_dir.name}/{entry.name}")
            logger.debug("Removed unused asset: %s/%s", sub_dir.name, entry.name)

        if not any(sub_dir.iterdir()):
            sub_dir.rmdir()
            result.removed_dirs.append(sub_dir.name)

    return result


class SyncReconciler:
    """Runs one sync pass from a vault to the site's content directories.

    Nothing is kept between runs except the files themselves: each synced post
    records its sync time in its frontmatter, which drives the next run's
    incremental decisions.
    """

    def __init__(
        self,
        source_path: Path,
        output_dir: Path,
        asset_dir: Path,
        exclude_tags: Optional[Iterable[str]] = None,
    ):
        """Initialize SyncReconciler.

        Args:
            source_path: Vault root
            output_dir: Directory receiving ``<slug>.md`` posts
            asset_dir: Directory receiving ``<slug>/<image>`` assets
            exclude_tags: Tags stripped from generated frontmatter
        """
        self.source_path = Path(source_path)
        self.output_dir = Path(output_dir)
        self.asset_dir = Path(asset_dir)
        self.exclude_tags = list(exclude_tags or [])

    def sync(self) -> SyncResult:
        """Synchronize the vault into the output directories.

        Returns:
            SyncResult with synced, skipped and removed documents, content
            warnings and the asset cleanup report
        """
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.asset_dir.mkdir(parents=True, exist_ok=True)

        result = SyncResult()
        publishable, result.unparsed = VaultDiscovery(self.source_path).discover_publishable()
        for path in result.unparsed:
            logger.debug("Skipped unparseable note: %s", path)

        checks = {doc.slug: check_should_sync(doc, self.output_dir) for doc in publishable}
        to_sync = [doc for doc in publishable if checks[doc.slug].should_sync]
        result.skipped = [
            SkippedDocument(doc, checks[doc.slug])
            for doc in publishable
            if not checks[doc.slug].should_sync
        ]
        for skipped in result.skipped:
            logger.debug("Skipping %s: %s", skipped.doc.title, skipped.sync_info.reason.value)

        result.removed = self._remove_stale_posts({doc.slug for doc in publishable})

        processor = ContentProcessor(PublishedIndex.from_documents(publishable), self.source_path)
        for doc in to_sync:
            processed, warnings = processor.process(doc)
            self._save_document(processed)
            result.warnings.extend(warnings)
            self._copy_images(doc)
            logger.debug("Synced %s (%s)", doc.title, checks[doc.slug].reason.value)
        result.synced = to_sync

        result.cleanup = cleanup_unused_images(self.output_dir, self.asset_dir)
        return result

    def _remove_stale_posts(self, published_slugs: Set[str]) -> List[str]:
        """Delete posts whose source is gone or no longer publishable.

        Translations are kept as long as their source slug is published.
        """
        removed: List[str] = []
        for post_file in sorted(self.output_dir.glob('*.md')):
            slug = post_file.stem
            if slug in published_slugs:
                continue
            source_slug, lang = split_translation_stem(slug)
            if lang is not None and source_slug in published_slugs:
                continue
            post_file.unlink()
            removed.append(slug)
            logger.debug("Removed post: %s", slug)
        return removed

    def _save_document(self, doc: PublishableDocument) -> Path:
        fm = generate_frontmatter(doc, self.exclude_tags)
        output_path = self.output_dir / f"{doc.slug}.md"
        write_atomic(output_path, build_output(fm, doc.processed_content))
        return output_path

    def _copy_images(self, doc: ParsedDocument) -> List[Path]:
        """Copy the images a note embeds into its asset folder."""
        images = find_image_references(protect_code_blocks(doc.content).content)
        if not images:
            return []

        doc_asset_dir = self.asset_dir / doc.slug
        doc_asset_dir.mkdir(parents=True, exist_ok=True)

        copied: List[Path] = []
        for image in images:
            src = find_image_file(image.filename, doc.file_path, self.source_path)
            if src is None:
                continue
            dest = doc_asset_dir / image.filename
            dest.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(src, dest)
            copied.append(dest)
            logger.debug("Copied %s -> %s", src, dest)
        return copied
