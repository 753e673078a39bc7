"""Script-ratio language detection for post bodies.

Markup, code and URLs are stripped first so that English code samples in a
Korean post do not tip the result. Detection only distinguishes the scripts
this blog is written in: ko, ja, zh and en (the fallback).
"""

import re

_CLEANUP_STEPS = (
    (re.compile(r'```.*?```', re.DOTALL), ''),
    (re.compile(r'`[^`]+`'), ''),
    (re.compile(r'\[([^\]]+)\]\([^)]+\)'), r'\1'),
    (re.compile(r'!\[\[.*?\]\]'), ''),
    (re.compile(r'\[\[.*?\]\]'), ''),
    (re.compile(r'#+\s*'), ''),
    (re.compile(r'[*_~`#>\-|]'), ''),
    (re.compile(r'https?://\S+'), ''),
    (re.compile(r'\s+'), ' '),
)

KOREAN_CHARS = re.compile(r'[\uAC00-\uD7AF\u1100-\u11FF\u3130-\u318F]')
JAPANESE_CHARS = re.compile(r'[\u3040-\u309F\u30A0-\u30FF]')
CJK_IDEOGRAPHS = re.compile(r'[\u4E00-\u9FFF]')
LATIN_CHARS = re.compile(r'[a-zA-Z]')

DEFAULT_LANGUAGE = 'en'


def clean_text(text: str) -> str:
    for pattern, replacement in _CLEANUP_STEPS:
        text = pattern.sub(replacement, text)
    return text.strip()


def detect_language(text: str) -> str:
    """Guess the language code of a markdown text.

    Returns:
        One of ``ko``, ``ja``, ``zh`` or ``en``
    """
    cleaned = clean_text(text)
    if not cleaned:
        return DEFAULT_LANGUAGE

    total = len(cleaned)
    korean = len(KOREAN_CHARS.findall(cleaned)) / total
    japanese = len(JAPANESE_CHARS.findall(cleaned)) / total
    cjk = len(CJK_IDEOGRAPHS.findall(cleaned)) / total
    latin = len(LATIN_CHARS.findall(cleaned)) / total

    if korean > 0.1:
        return 'ko'
    if japanese > 0.05:
        return 'ja'
    # Japanese text is often rich in kanji, so require almost no kana for zh
    if cjk > 0.1 and japanese < 0.01:
        return 'zh'
    if latin > 0.3:
        return 'en'
    return DEFAULT_LANGUAGE
