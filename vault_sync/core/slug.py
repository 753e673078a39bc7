"""Slug generation for output filenames and URLs."""

import re
from pathlib import Path
from typing import Optional, Tuple, Union

# Anything that is not ASCII alnum, a Hangul syllable, whitespace or a hyphen
_STRIP_PATTERN = re.compile(r'[^a-z0-9\uAC00-\uD7A3\s-]')
_WHITESPACE_PATTERN = re.compile(r'\s+')
_HYPHENS_PATTERN = re.compile(r'-+')

# Translated posts are saved as <slug>_<lang>.md
TRANSLATION_STEM_PATTERN = re.compile(r'^(.+)_([a-z]{2})$')


def split_translation_stem(stem: str) -> Tuple[str, Optional[str]]:
    """Split an output filename stem into (slug, lang).

    ``lang`` is None for stems without a two-letter language suffix.
    """
    match = TRANSLATION_STEM_PATTERN.match(stem)
    if match:
        return match.group(1), match.group(2)
    return stem, None


def generate_slug(file_path: Union[str, Path], title: Optional[str] = None) -> str:
    """Derive a lowercase, hyphen-separated slug.

    The title is preferred; the filename without its extension is used when
    no title is given. Scripts other than Latin and Hangul are dropped, so
    the result may be empty.

    Args:
        file_path: Path of the source note
        title: Optional title from the note's frontmatter

    Returns:
        Slug string (possibly empty)
    """
    name = title or Path(file_path).stem
    slug = _STRIP_PATTERN.sub('', str(name).lower())
    slug = _WHITESPACE_PATTERN.sub('-', slug)
    slug = _HYPHENS_PATTERN.sub('-', slug)
    return slug.strip('-')
