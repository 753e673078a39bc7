"""Content processor for transforming Obsidian notes into site markdown."""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from vault_sync.core.images import process_images
from vault_sync.core.models import ParsedDocument, PublishableDocument
from vault_sync.transforms.callouts import process_callouts

logger = logging.getLogger(__name__)

FENCED_CODE_PATTERN = re.compile(r'```.*?```', re.DOTALL)
INLINE_CODE_PATTERN = re.compile(r'`[^`\n]+`')

# Pattern for wikilinks: [[target]] or [[target|display]], but not ![[embed]]
WIKILINK_PATTERN = re.compile(r'(?<!!)\[\[([^\]|]+)(?:\|([^\]]+))?\]\]')


@dataclass
class PublishedIndex:
    """Maps titles, slugs and aliases to published documents.

    Lookups are exact. Later documents overwrite earlier ones on key
    collisions.
    """

    entries: Dict[str, ParsedDocument] = field(default_factory=dict)

    @classmethod
    def from_documents(cls, docs: Iterable[ParsedDocument]) -> "PublishedIndex":
        """Build an index from the run's publishable documents."""
        entries: Dict[str, ParsedDocument] = {}

        for doc in docs:
            entries[doc.title] = doc
            entries[doc.slug] = doc
            aliases = doc.frontmatter.get('aliases') or []
            if isinstance(aliases, str):
                aliases = [aliases]
            for alias in aliases:
                entries[str(alias)] = doc

        return cls(entries)

    def get(self, reference: str) -> Optional[ParsedDocument]:
        return self.entries.get(reference)

    def __contains__(self, reference: str) -> bool:
        return reference in self.entries

    def __len__(self) -> int:
        return len(self.entries)


@dataclass
class ShieldedContent:
    """Content with code spans swapped out for placeholder tokens."""

    content: str
    blocks: Dict[str, str]

    def restore(self, content: str) -> str:
        for placeholder, original in self.blocks.items():
            content = content.replace(placeholder, original, 1)
        return content


def protect_code_blocks(content: str) -> ShieldedContent:
    """Replace fenced blocks, then inline code spans, with placeholders."""
    blocks: Dict[str, str] = {}

    def shield(kind: str):
        def replace(match: re.Match) -> str:
            placeholder = f"\x00{kind}_{len(blocks)}\x00"
            blocks[placeholder] = match.group(0)
            return placeholder
        return replace

    result = FENCED_CODE_PATTERN.sub(shield('CODE_BLOCK'), content)
    result = INLINE_CODE_PATTERN.sub(shield('INLINE_CODE'), result)
    return ShieldedContent(result, blocks)


def process_wikilinks(
    content: str,
    published_index: PublishedIndex,
    current_doc: ParsedDocument,
) -> Tuple[str, List[str]]:
    """Convert wikilinks to anchors pointing at published posts.

    Links to documents that are not in the index are reduced to their
    display text and reported.

    Args:
        content: Note content
        published_index: Index of the run's publishable documents
        current_doc: The document being processed, for warning attribution

    Returns:
        Tuple of (transformed content, warnings)
    """
    warnings: List[str] = []

    def replace_link(match: re.Match) -> str:
        target = match.group(1)
        display = match.group(2) or target
        target_doc = published_index.get(target)

        if target_doc is not None:
            return f'<a href="/posts/{target_doc.slug}">{display}</a>'

        warning = f'[{current_doc.title}] Link target "{target}" is not a published document.'
        logger.debug(warning)
        warnings.append(warning)
        return display

    return WIKILINK_PATTERN.sub(replace_link, content), warnings


class ContentProcessor:
    """Processes note bodies for publishing.

    Handles, in order:
    - Code shielding (nothing inside code spans is rewritten)
    - Wikilink to anchor conversion
    - Image embed resolution and rewriting (only with a source path)
    - Callout rendering
    """

    def __init__(self, published_index: PublishedIndex, source_path: Optional[Path] = None):
        """Initialize ContentProcessor.

        Args:
            published_index: Index used to resolve wikilinks
            source_path: Vault root used to resolve images. Without it image
                embeds are left as written.
        """
        self.published_index = published_index
        self.source_path = Path(source_path) if source_path is not None else None

    def process(self, doc: ParsedDocument) -> Tuple[PublishableDocument, List[str]]:
        """Run the transform pipeline over a document body.

        Args:
            doc: The parsed source document

        Returns:
            Tuple of (PublishableDocument, warnings)
        """
        shielded = protect_code_blocks(doc.content)
        content = shielded.content
        warnings: List[str] = []

        content, link_warnings = process_wikilinks(content, self.published_index, doc)
        warnings.extend(link_warnings)

        if self.source_path is not None:
            content, image_warnings = process_images(content, doc, self.source_path)
            warnings.extend(image_warnings)

        content = process_callouts(content)
        content = shielded.restore(content)

        return PublishableDocument.from_parsed(doc, content), warnings
