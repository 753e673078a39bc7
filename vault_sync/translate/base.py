"""Translator interface shared by all translation backends."""

from abc import ABC, abstractmethod


class TranslationError(Exception):
    """A backend failed to translate a text."""


class Translator(ABC):
    """A translation backend.

    Implementations are stateless between calls: each call receives the
    full text and both language codes.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable backend name."""

    @abstractmethod
    def translate(self, text: str, source_lang: str, target_lang: str) -> str:
        """Translate ``text`` from ``source_lang`` to ``target_lang``.

        Raises:
            TranslationError: If the backend call fails or returns an
                unusable response
        """
