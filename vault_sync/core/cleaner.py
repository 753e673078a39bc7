"""Removal of all synced content, for a fresh sync."""

import logging
import re
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

MARKDOWN_PATTERN = re.compile(r'\.md$')


@dataclass
class CleanResult:
    posts: int = 0
    assets: int = 0


def clean_directory(directory: Path, pattern: Optional[re.Pattern] = None) -> int:
    """Delete the entries of a directory.

    Dot-prefixed entries such as ``.gitkeep`` are kept.

    Args:
        directory: Directory to empty
        pattern: Only delete entries whose name matches

    Returns:
        Number of entries removed
    """
    directory = Path(directory)
    if not directory.exists():
        return 0

    count = 0
    for entry in sorted(directory.iterdir()):
        if entry.name.startswith('.'):
            continue
        if pattern is not None and not pattern.search(entry.name):
            continue
        if entry.is_dir():
            shutil.rmtree(entry)
        else:
            entry.unlink()
        logger.debug("Removed %s", entry)
        count += 1

    return count


def clean(posts_dir: Path, asset_dir: Path) -> CleanResult:
    """Remove synced posts and copied assets."""
    return CleanResult(
        posts=clean_directory(posts_dir, MARKDOWN_PATTERN),
        assets=clean_directory(asset_dir),
    )
