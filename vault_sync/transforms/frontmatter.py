"""Frontmatter generation for synced and translated posts.

Blocks are serialized with PyYAML, keeping key order. The sync and
translation timestamps are always emitted double-quoted::

    publish_sync_at: "2024-01-15 09:30:00"

The sync reconciler reads that value back to decide whether a note changed
since it was last written.
"""

import datetime
import re
from typing import Any, Dict, Iterable, List, Optional

import yaml

from vault_sync.core.models import PublishableDocument
from vault_sync.transforms.callouts import extract_summary_from_callout
from vault_sync.translate.detect import detect_language

SYNC_TIMESTAMP_KEY = 'publish_sync_at'
TRANSLATE_TIMESTAMP_KEY = 'translate_sync_at'

_TIMESTAMP_SEPARATORS = re.compile(r'[- :]')


class QuotedString(str):
    """A string always emitted in double-quoted style."""


class FrontmatterDumper(yaml.SafeDumper):
    pass


def _represent_quoted(dumper: yaml.SafeDumper, data: QuotedString) -> yaml.ScalarNode:
    return dumper.represent_scalar('tag:yaml.org,2002:str', str(data), style='"')


FrontmatterDumper.add_representer(QuotedString, _represent_quoted)


def format_local_datetime(value: datetime.datetime) -> str:
    """Format as ``YYYY-MM-DD HH:mm:ss``, zero-padded."""
    return (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d} "
        f"{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
    )


def parse_local_datetime(value: str) -> datetime.datetime:
    """Parse a timestamp written by format_local_datetime.

    Raises:
        ValueError: If the value does not have exactly six numeric fields or
            they do not form a valid date and time
    """
    parts = _TIMESTAMP_SEPARATORS.split(value.strip())
    if len(parts) != 6:
        raise ValueError(f"Invalid local timestamp: {value!r}")
    year, month, day, hour, minute, second = (int(p) for p in parts)
    return datetime.datetime(year, month, day, hour, minute, second)


def publish_date(value: datetime.datetime) -> datetime.date:
    """Date-only value; aware datetimes are converted to UTC first."""
    if value.tzinfo is not None:
        value = value.astimezone(datetime.timezone.utc)
    return value.date()


def as_string_list(value: Any) -> List[str]:
    """Normalize a frontmatter list field given as a list or a single string."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value]
    return [str(value)]


def filter_excluded_tags(tags: List[str], exclude_tags: Optional[Iterable[str]]) -> List[str]:
    """Drop tags listed in ``exclude_tags``, keeping the original order."""
    if not exclude_tags:
        return list(tags)
    excluded = set(exclude_tags)
    return [tag for tag in tags if tag not in excluded]


def dump_frontmatter(fm: Dict[str, Any]) -> str:
    """Serialize a mapping as a ``---`` delimited frontmatter block."""
    body = yaml.dump(
        fm,
        Dumper=FrontmatterDumper,
        default_flow_style=False,
        allow_unicode=True,
        sort_keys=False,
    )
    return f"---\n{body}---"


def generate_frontmatter(
    doc: PublishableDocument,
    exclude_tags: Optional[Iterable[str]] = None,
    now: Optional[datetime.datetime] = None,
) -> str:
    """Build the frontmatter block for a synced post.

    Always includes title, date, lang, ``publish: true`` and a fresh sync
    timestamp. Tags (minus excluded ones), summary and aliases are added
    when present. A manual ``summary`` wins over one taken from a SUMMARY
    callout.

    Args:
        doc: Processed document
        exclude_tags: Tags never written to the output
        now: Sync time, defaults to the current local time

    Returns:
        The frontmatter block including both ``---`` delimiters
    """
    sync_at = format_local_datetime(now or datetime.datetime.now())

    fm: Dict[str, Any] = {
        'title': str(doc.title),
        'date': publish_date(doc.date),
        'lang': str(doc.frontmatter.get('lang') or detect_language(doc.content)),
        'publish': True,
        SYNC_TIMESTAMP_KEY: QuotedString(sync_at),
    }

    tags = filter_excluded_tags(as_string_list(doc.frontmatter.get('tags')), exclude_tags)
    if tags:
        fm['tags'] = tags

    summary = doc.frontmatter.get('summary')
    if summary is None:
        summary = extract_summary_from_callout(doc.content)
    if summary:
        fm['summary'] = QuotedString(summary)

    aliases = as_string_list(doc.frontmatter.get('aliases'))
    if aliases:
        fm['aliases'] = aliases

    return dump_frontmatter(fm)


def generate_translated_frontmatter(
    original: Dict[str, Any],
    target_lang: str,
    source_slug: str,
    translated_title: Optional[str] = None,
    translated_summary: Optional[str] = None,
    now: Optional[datetime.datetime] = None,
) -> str:
    """Build the frontmatter block for a translated post.

    Starts from the source post's frontmatter, swaps in the translated title
    and summary (or description), records where the translation came from
    and drops the sync timestamp so the file is never mistaken for a synced
    source post. Keys with no value are left out.
    """
    fm: Dict[str, Any] = {key: value for key, value in original.items() if value is not None}

    if translated_title:
        fm['title'] = translated_title
    if translated_summary:
        if 'summary' in fm:
            fm['summary'] = translated_summary
        elif 'description' in fm:
            fm['description'] = translated_summary

    fm['lang'] = target_lang
    fm['translated_from'] = source_slug
    fm[TRANSLATE_TIMESTAMP_KEY] = QuotedString(format_local_datetime(now or datetime.datetime.now()))
    fm.pop(SYNC_TIMESTAMP_KEY, None)

    return dump_frontmatter(fm)


def build_output(frontmatter_block: str, body: str) -> str:
    """Join a frontmatter block and a body into a full markdown file."""
    return f"{frontmatter_block}\n\n{body}"
