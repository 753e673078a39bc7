"""Vault discovery module for finding and parsing source notes."""

import datetime
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from vault_sync.core.models import ParsedDocument
from vault_sync.core.slug import generate_slug

logger = logging.getLogger(__name__)

FRONTMATTER_PATTERN = re.compile(r'\A---[ \t]*\r?\n(.*?)^---[ \t]*(?:\r?\n|\Z)', re.DOTALL | re.MULTILINE)


def split_frontmatter(raw: str) -> Tuple[Dict[str, Any], str]:
    """Split a markdown file into its YAML frontmatter and body.

    Args:
        raw: Full file content

    Returns:
        Tuple of (frontmatter dict, body). The dict is empty when the file
        has no frontmatter block.

    Raises:
        yaml.YAMLError: If the frontmatter block is not valid YAML
    """
    match = FRONTMATTER_PATTERN.match(raw)
    if not match:
        return {}, raw

    data = yaml.safe_load(match.group(1))
    if not isinstance(data, dict):
        data = {}
    return data, raw[match.end():]


def to_datetime(value: Any) -> datetime.datetime:
    """Coerce a frontmatter date value into a datetime.

    Raises:
        ValueError: If a string value is not an ISO 8601 date
    """
    if isinstance(value, datetime.datetime):
        return value
    if isinstance(value, datetime.date):
        return datetime.datetime(value.year, value.month, value.day)
    return datetime.datetime.fromisoformat(str(value).strip())


def _birth_time(stat) -> datetime.datetime:
    # st_birthtime is missing on most Linux filesystems
    return datetime.datetime.fromtimestamp(getattr(stat, 'st_birthtime', stat.st_ctime))


def parse_document(file_path: Path) -> Optional[ParsedDocument]:
    """Parse a source note.

    The effective date is ``date`` from the frontmatter, else ``created``,
    else the file's birth time.

    Args:
        file_path: Path to the markdown file

    Returns:
        ParsedDocument, or None if the file cannot be read or parsed
    """
    file_path = Path(file_path)
    try:
        raw = file_path.read_text(encoding='utf-8')
        frontmatter, content = split_frontmatter(raw)

        raw_title = frontmatter.get('title')
        title = str(raw_title) if raw_title else file_path.stem
        slug = generate_slug(file_path, str(raw_title) if raw_title else None)

        stat = file_path.stat()
        modified = datetime.datetime.fromtimestamp(stat.st_mtime)

        if frontmatter.get('date'):
            date = to_datetime(frontmatter['date'])
        elif frontmatter.get('created'):
            date = to_datetime(frontmatter['created'])
        else:
            date = _birth_time(stat)

        return ParsedDocument(
            slug=slug,
            title=title,
            date=date,
            modified=modified,
            content=content,
            frontmatter=frontmatter,
            file_path=file_path.resolve(),
        )
    except (OSError, UnicodeDecodeError, yaml.YAMLError, ValueError) as e:
        logger.debug("Failed to parse %s: %s", file_path, e)
        return None


def is_publishable(doc: ParsedDocument) -> bool:
    """Only ``publish: true`` or ``publish: "true"`` counts."""
    publish = doc.frontmatter.get('publish')
    return publish is True or publish == "true"


def filter_publishable(docs: List[ParsedDocument]) -> List[ParsedDocument]:
    return [doc for doc in docs if is_publishable(doc)]


class VaultDiscovery:
    """Discovers and parses markdown notes under a source root."""

    def __init__(self, source_path: Path):
        """Initialize VaultDiscovery.

        Args:
            source_path: Root directory of the vault
        """
        self.source_path = Path(source_path)

    def find_markdown_files(self) -> List[Path]:
        """Recursively list ``.md`` files, skipping dot-prefixed entries.

        Returns:
            Paths in directory-walk order (entries sorted by name).
        Directories that cannot be listed are skipped.
        """
        files: List[Path] = []

        def walk(current: Path) -> None:
            try:
                entries = sorted(current.iterdir(), key=lambda p: p.name)
            except OSError as e:
                logger.debug("Skipping unreadable directory %s: %s", current, e)
                return

            for entry in entries:
                if entry.name.startswith('.'):
                    continue
                if entry.is_dir():
                    walk(entry)
                elif entry.suffix == '.md':
                    files.append(entry)

        walk(self.source_path)
        return files

    def discover_all(self) -> Tuple[List[ParsedDocument], List[Path]]:
        """Parse every markdown file in the vault.

        Returns:
            Tuple of (parsed documents, paths that failed to parse)
        """
        docs: List[ParsedDocument] = []
        unparsed: List[Path] = []
        for path in self.find_markdown_files():
            doc = parse_document(path)
            if doc is None:
                unparsed.append(path)
            else:
                docs.append(doc)
        return docs, unparsed

    def discover_publishable(self) -> Tuple[List[ParsedDocument], List[Path]]:
        """Like discover_all, but keeps only publishable documents."""
        docs, unparsed = self.discover_all()
        return filter_publishable(docs), unparsed
