"""Image embed handling: reference extraction, file lookup and path rewriting."""

import logging
import re
from pathlib import Path
from typing import List, Optional, Set, Tuple

from vault_sync.core.models import ImageReference, ParsedDocument

logger = logging.getLogger(__name__)

# Pattern for image embeds: ![[image.png]] or ![[image.png|300]]
IMAGE_EMBED_PATTERN = re.compile(r'!\[\[([^\]|]+)(?:\|(\d+))?\]\]')

# Folders under the source root searched, in order, before a full walk
ROOT_IMAGE_DIRS = ('attachments', 'images', 'assets')


def find_image_references(content: str) -> List[ImageReference]:
    """Extract image embeds, one entry per filename (first width wins).

    Args:
        content: Note body

    Returns:
        ImageReferences in order of first appearance
    """
    images: List[ImageReference] = []
    seen: Set[str] = set()

    for match in IMAGE_EMBED_PATTERN.finditer(content):
        filename = match.group(1)
        if filename in seen:
            continue
        width = int(match.group(2)) if match.group(2) else None
        images.append(ImageReference(filename=filename, width=width))
        seen.add(filename)

    return images


def _search_file_in_dir(directory: Path, target: str) -> Optional[Path]:
    """Depth-first search for a file named ``target``, skipping dot entries."""
    if not directory.is_dir():
        return None

    try:
        entries = sorted(directory.iterdir(), key=lambda p: p.name)
    except OSError:
        return None

    for entry in entries:
        if entry.name.startswith('.'):
            continue
        if entry.is_dir():
            found = _search_file_in_dir(entry, target)
            if found:
                return found
        elif entry.name == target:
            return entry

    return None


def candidate_paths(filename: str, doc_path: Path, source_path: Path) -> List[Path]:
    """Prioritized locations checked for an embedded image."""
    doc_path = Path(doc_path)
    source_path = Path(source_path)
    doc_name = doc_path.stem
    doc_dir = doc_path.parent

    return [
        doc_dir / 'assets' / doc_name / filename,
        doc_dir / filename,
        source_path / 'assets' / doc_name / filename,
        *(source_path / d / filename for d in ROOT_IMAGE_DIRS),
    ]


def find_image_file(filename: str, doc_path: Path, source_path: Path) -> Optional[Path]:
    """Resolve an embedded image filename to a file in the vault.

    Checks the note's own asset folder and directory, then the common vault
    attachment folders, then walks the whole source root.

    Args:
        filename: Filename as written in the embed
        doc_path: Path to the note containing the embed
        source_path: Vault root

    Returns:
        Path to the image, or None if not found
    """
    for path in candidate_paths(filename, doc_path, source_path):
        if path.is_file():
            return path

    return _search_file_in_dir(Path(source_path), filename)


def transform_image_paths(content: str, slug: str) -> str:
    """Rewrite image embeds to site asset URLs.

    Width-qualified embeds become a ``<figure>`` wrapped ``<img>``; both
    forms are surrounded by blank lines so they render as blocks.
    """
    def replace_image(match: re.Match) -> str:
        filename = match.group(1)
        width = match.group(2)
        src = f"/assets/{slug}/{filename}"
        if width and int(width):
            return f'\n\n<figure><img src="{src}" alt="{filename}" width="{int(width)}" /></figure>\n\n'
        return f"\n\n![{filename}]({src})\n\n"

    return IMAGE_EMBED_PATTERN.sub(replace_image, content)


def process_images(content: str, doc: ParsedDocument, source_path: Path) -> Tuple[str, List[str]]:
    """Check every embed resolves and rewrite embed syntax.

    Missing images only produce a warning; the embed is rewritten either way.

    Returns:
        Tuple of (transformed content, warnings)
    """
    warnings: List[str] = []

    for image in find_image_references(content):
        if find_image_file(image.filename, doc.file_path, source_path) is None:
            warning = f'[{doc.title}] Image "{image.filename}" not found.'
            logger.debug(warning)
            warnings.append(warning)

    return transform_image_paths(content, doc.slug), warnings
