"""Translation pass over synced posts.

Runs after sync, on the posts directory only. Source posts are ``<slug>.md``
files (or ``<slug>_<default-lang>.md``); translations are written next to
them as ``<slug>_<lang>.md``.
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set

import yaml

from vault_sync.core.discovery import split_frontmatter
from vault_sync.core.models import PostFile, TranslateReport, TranslationOutcome, TranslationTask
from vault_sync.core.slug import split_translation_stem
from vault_sync.core.sync import write_atomic
from vault_sync.transforms.frontmatter import build_output, generate_translated_frontmatter
from vault_sync.translate.base import TranslationError, Translator
from vault_sync.translate.detect import detect_language

logger = logging.getLogger(__name__)


def parse_post_file(file_path: Path) -> Optional[PostFile]:
    """Read a synced post and classify it as a source or a translation.

    Translations are recognized by a ``_<lang>`` filename suffix, or by a
    ``translated_from`` field with a ``lang``. For source posts the language
    is the frontmatter ``lang`` if set, else detected from the body.

    Returns:
        PostFile, or None if the file cannot be read or parsed
    """
    file_path = Path(file_path)
    try:
        frontmatter, content = split_frontmatter(file_path.read_text(encoding='utf-8'))
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        logger.debug("Failed to parse %s: %s", file_path, e)
        return None

    slug, lang = split_translation_stem(file_path.stem)
    if lang is not None:
        return PostFile(slug=slug, file_path=file_path, frontmatter=frontmatter, content=content, lang=lang)

    if frontmatter.get('translated_from') and frontmatter.get('lang'):
        return PostFile(
            slug=str(frontmatter['translated_from']),
            file_path=file_path,
            frontmatter=frontmatter,
            content=content,
            lang=str(frontmatter['lang']),
        )

    detected = frontmatter.get('lang') or detect_language(content)
    return PostFile(
        slug=slug,
        file_path=file_path,
        frontmatter=frontmatter,
        content=content,
        detected_lang=str(detected),
    )


def find_posts_to_translate(
    posts: List[PostFile],
    default_lang: str,
    target_langs: Iterable[str],
    force: bool = False,
    slug: Optional[str] = None,
) -> List[TranslationTask]:
    """Work out which (post, target language) pairs need translating.

    A pair is skipped when the target is the post's own language, or when
    a translation already exists and ``force`` is not set.

    Args:
        posts: All parsed posts in the posts directory
        default_lang: The blog's default locale
        target_langs: Languages to translate into
        force: Retranslate pairs that already have a translation
        slug: Only consider the source post with this slug

    Returns:
        TranslationTasks in post order, then target language order
    """
    target_langs = list(target_langs)
    sources = [p for p in posts if not p.lang or p.lang == default_lang]

    existing: Dict[str, Set[str]] = {}
    for post in posts:
        if post.lang and post.lang != default_lang:
            existing.setdefault(post.slug, set()).add(post.lang)

    tasks: List[TranslationTask] = []
    for source in sources:
        if slug and source.slug != slug:
            continue

        source_lang = source.detected_lang or default_lang
        for target_lang in target_langs:
            if target_lang == source_lang:
                continue
            if force or target_lang not in existing.get(source.slug, set()):
                tasks.append(TranslationTask(source, target_lang))

    return tasks


class TranslationOrchestrator:
    """Fills in missing translations of synced posts, one pair at a time."""

    def __init__(
        self,
        posts_dir: Path,
        translator: Translator,
        default_lang: str,
        target_langs: Iterable[str],
    ):
        """Initialize TranslationOrchestrator.

        Args:
            posts_dir: Directory holding the synced posts
            translator: Backend used for every pair in this session
            default_lang: The blog's default locale
            target_langs: Languages to translate into
        """
        self.posts_dir = Path(posts_dir)
        self.translator = translator
        self.default_lang = default_lang
        self.target_langs = list(target_langs)

    def load_posts(self) -> List[PostFile]:
        posts = []
        for path in sorted(self.posts_dir.glob('*.md')):
            post = parse_post_file(path)
            if post is not None:
                posts.append(post)
        return posts

    def plan(self, force: bool = False, slug: Optional[str] = None) -> List[TranslationTask]:
        return find_posts_to_translate(self.load_posts(), self.default_lang, self.target_langs, force, slug)

    def translate_post(self, source: PostFile, target_lang: str) -> TranslationOutcome:
        """Translate a post's body, and its title and summary when present."""
        source_lang = source.detected_lang or self.default_lang
        logger.info("Using %s, source language %s", self.translator.name, source_lang)

        outcome = TranslationOutcome(
            content=self.translator.translate(source.content, source_lang, target_lang),
        )

        title = source.frontmatter.get('title')
        if title:
            outcome.title = self.translator.translate(str(title), source_lang, target_lang)

        summary = source.frontmatter.get('summary') or source.frontmatter.get('description')
        if summary:
            outcome.summary = self.translator.translate(str(summary), source_lang, target_lang)

        return outcome

    def save_translated_post(self, source: PostFile, outcome: TranslationOutcome, target_lang: str) -> Path:
        fm = generate_translated_frontmatter(
            source.frontmatter,
            target_lang,
            source.slug,
            translated_title=outcome.title,
            translated_summary=outcome.summary,
        )
        output_path = self.posts_dir / f"{source.slug}_{target_lang}.md"
        write_atomic(output_path, build_output(fm, outcome.content))
        return output_path

    def run(self, force: bool = False, slug: Optional[str] = None) -> TranslateReport:
        """Translate every pair that needs it.

        A failed pair is logged and counted; nothing is written for it and
        the remaining pairs still run.

        Args:
            force: Retranslate existing translations
            slug: Only translate the post with this slug

        Returns:
            TranslateReport with written paths and failure messages
        """
        return self.run_tasks(self.plan(force=force, slug=slug))

    def run_tasks(self, tasks: List[TranslationTask]) -> TranslateReport:
        report = TranslateReport()

        for task in tasks:
            logger.info("Translating: %s -> %s", task.source.slug, task.target_lang)
            try:
                outcome = self.translate_post(task.source, task.target_lang)
                output_path = self.save_translated_post(task.source, outcome, task.target_lang)
            except (TranslationError, OSError) as e:
                message = f"{task.source.slug} -> {task.target_lang}: {e}"
                logger.error("Failed: %s", message)
                report.failures.append(message)
                continue

            logger.info("Saved: %s", output_path.name)
            report.translated.append(output_path)

        return report
