"""Data models for Vault Sync."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class ParsedDocument:
    """One source note, parsed once per sync run.

    ``content`` is the body with the frontmatter block stripped.
    """
    slug: str
    title: str
    date: datetime
    modified: datetime
    content: str
    frontmatter: Dict[str, Any]
    file_path: Path


@dataclass(frozen=True)
class PublishableDocument(ParsedDocument):
    """A ParsedDocument together with its transformed body."""
    processed_content: str = ""

    @classmethod
    def from_parsed(cls, doc: ParsedDocument, processed_content: str) -> "PublishableDocument":
        return cls(
            slug=doc.slug,
            title=doc.title,
            date=doc.date,
            modified=doc.modified,
            content=doc.content,
            frontmatter=doc.frontmatter,
            file_path=doc.file_path,
            processed_content=processed_content,
        )


@dataclass(frozen=True)
class ImageReference:
    """An ``![[filename]]`` or ``![[filename|width]]`` embed."""
    filename: str
    width: Optional[int] = None


class SyncReason(str, Enum):
    """Why a publishable document was (or was not) written this run."""
    NEW_FILE = "new file"
    NO_SYNC_TIMESTAMP = "no sync timestamp"
    INVALID_SYNC_TIMESTAMP = "invalid sync timestamp format"
    MODIFIED_AFTER_SYNC = "modified after sync"
    UP_TO_DATE = "up to date"
    READ_ERROR = "error reading existing file"
    NOT_PUBLISHABLE = "not publishable"


@dataclass
class SyncCheckResult:
    should_sync: bool
    reason: SyncReason
    last_sync_time: Optional[datetime] = None


@dataclass
class SkippedDocument:
    doc: ParsedDocument
    sync_info: SyncCheckResult


@dataclass
class CleanupResult:
    """Audit trail of an unused-asset cleanup pass.

    ``removed_images`` holds ``<slug>/<filename>`` entries, ``removed_dirs``
    holds slug directory names.
    """
    removed_images: List[str] = field(default_factory=list)
    removed_dirs: List[str] = field(default_factory=list)


@dataclass
class SyncResult:
    """Result of a sync run."""
    synced: List[ParsedDocument] = field(default_factory=list)
    skipped: List[SkippedDocument] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    cleanup: CleanupResult = field(default_factory=CleanupResult)
    unparsed: List[Path] = field(default_factory=list)


@dataclass
class PostFile:
    """A synced output post as seen by the translation pass.

    ``lang`` is set only for translation files; ``detected_lang`` only for
    source posts.
    """
    slug: str
    file_path: Path
    frontmatter: Dict[str, Any]
    content: str
    lang: Optional[str] = None
    detected_lang: Optional[str] = None


@dataclass
class TranslationTask:
    source: PostFile
    target_lang: str


@dataclass
class TranslationOutcome:
    """Translated body plus optional translated title and summary."""
    content: str
    title: Optional[str] = None
    summary: Optional[str] = None


@dataclass
class TranslateReport:
    """Tally of a translation pass."""
    translated: List[Path] = field(default_factory=list)
    failures: List[str] = field(default_factory=list)

    @property
    def success_count(self) -> int:
        return len(self.translated)

    @property
    def error_count(self) -> int:
        return len(self.failures)
