"""Callout rendering for Obsidian-style admonitions.

A callout is a blockquote whose first line carries a ``[!TYPE]`` marker::

    > [!NOTE] Optional title
    > Body line one
    > Body line two

Rendered callouts are plain HTML blocks, so the downstream markdown renderer
still formats the body (an empty line separates the body from the tags).
"""

import re
from typing import List, Optional

CALLOUT_START_PATTERN = re.compile(r'^>\s*\[!(\w+)\](?:\s+(.*))?$', re.ASCII)


def render_callout(callout_type: str, title: str, content_lines: List[str]) -> str:
    """Render one callout block as HTML."""
    content = '\n'.join(content_lines).strip()
    return (
        f'<div class="callout callout-{callout_type}">\n'
        f'<div class="callout-title">{title}</div>\n'
        f'<div class="callout-content">\n'
        f'\n'
        f'{content}\n'
        f'\n'
        f'</div>\n'
        f'</div>'
    )


def process_callouts(content: str) -> str:
    """Replace every callout in ``content`` with its rendered HTML.

    A callout ends at the first line without a ``>`` prefix or at the next
    callout marker. Callouts do not nest. Plain blockquotes are untouched.
    """
    result: List[str] = []
    callout_type: Optional[str] = None
    title = ''
    body: List[str] = []

    for line in content.split('\n'):
        match = CALLOUT_START_PATTERN.match(line)

        if match:
            if callout_type is not None:
                result.append(render_callout(callout_type, title, body))
                body = []
            callout_type = match.group(1).lower()
            title = match.group(2) or callout_type.upper()
        elif callout_type is not None:
            if line.startswith('>'):
                body.append(line[1:].strip())
            else:
                result.append(render_callout(callout_type, title, body))
                callout_type = None
                title = ''
                body = []
                result.append(line)
        else:
            result.append(line)

    if callout_type is not None:
        result.append(render_callout(callout_type, title, body))

    return '\n'.join(result)


def extract_summary_from_callout(content: str) -> Optional[str]:
    """Return the body of the first SUMMARY callout joined into one line.

    The type match is case-insensitive. Collection stops at the next callout
    marker or the first line that is not part of the blockquote.

    Returns:
        Summary text, or None if there is no non-empty SUMMARY callout
    """
    in_summary = False
    summary: List[str] = []

    for line in content.split('\n'):
        match = CALLOUT_START_PATTERN.match(line)

        if match:
            if match.group(1).lower() == 'summary':
                in_summary = True
                continue
            if in_summary:
                break
        elif in_summary:
            if line.startswith('>'):
                summary.append(line[1:].strip())
            else:
                break

    result = ' '.join(summary).strip()
    return result or None
