"""Translation backends and backend selection."""

import os
import re
from typing import Optional

from vault_sync.config import TranslateSettings
from vault_sync.translate.base import TranslationError, Translator
from vault_sync.translate.detect import detect_language
from vault_sync.translate.google_free import GoogleFreeTranslator
from vault_sync.translate.llm import PROVIDERS, LLMTranslator

ENV_REFERENCE_PATTERN = re.compile(r'^\$\{(\w+)\}$')


def resolve_env_var(value: Optional[str]) -> Optional[str]:
    """Expand a ``${NAME}`` value from the environment; other values pass through."""
    if not value:
        return None
    match = ENV_REFERENCE_PATTERN.match(value)
    if match:
        return os.environ.get(match.group(1)) or None
    return value


def create_translator(settings: Optional[TranslateSettings] = None) -> Translator:
    """Pick the LLM backend when provider, key and model are all set.

    Falls back to the free Google backend otherwise.

    Raises:
        ValueError: If the configured provider is not supported
    """
    if settings is None:
        return GoogleFreeTranslator()

    api_key = resolve_env_var(settings.api_key)
    if settings.provider and api_key and settings.model:
        return LLMTranslator(settings.provider, api_key, settings.model)

    return GoogleFreeTranslator()


__all__ = [
    "GoogleFreeTranslator",
    "LLMTranslator",
    "PROVIDERS",
    "TranslationError",
    "Translator",
    "create_translator",
    "detect_language",
    "resolve_env_var",
]
