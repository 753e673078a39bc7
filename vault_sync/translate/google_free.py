"""Google Translate through the free ``translate_a/single`` endpoint.

No API key is needed, but the endpoint is unofficial and rate limited.
"""

from typing import Any, Optional

import requests

from vault_sync.translate.base import TranslationError, Translator

GOOGLE_TRANSLATE_URL = "https://translate.googleapis.com/translate_a/single"

LANGUAGE_CODES = {
    "ko": "ko",
    "en": "en",
    "ja": "ja",
    "zh": "zh-CN",
    "zh-cn": "zh-CN",
    "zh-tw": "zh-TW",
}


class GoogleFreeTranslator(Translator):
    """Free Google Translate client.

    Usage:
        translator = GoogleFreeTranslator()
        translator.translate("Hello world", "en", "ko")
    """

    def __init__(self, timeout: Optional[float] = 120):
        self.timeout = timeout

    @property
    def name(self) -> str:
        return "Google Translate (Free)"

    def translate(self, text: str, source_lang: str, target_lang: str) -> str:
        params = {
            "client": "gtx",
            "sl": self.normalize_language_code(source_lang),
            "tl": self.normalize_language_code(target_lang),
            "dt": "t",
        }

        try:
            response = requests.post(
                GOOGLE_TRANSLATE_URL,
                params=params,
                data={"q": text},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise TranslationError(f"Google Translate request failed: {e}") from e

        if not response.ok:
            raise TranslationError(
                f"Google Translate API error: {response.status_code} - {response.text[:200]}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise TranslationError("Invalid response from Google Translate") from e

        return self.parse_response(data)

    @staticmethod
    def normalize_language_code(lang: str) -> str:
        return LANGUAGE_CODES.get(lang.lower(), lang)

    @staticmethod
    def parse_response(data: Any) -> str:
        """Join the translated segments of a ``translate_a/single`` response.

        The first element of the response is a list of segments, each a list
        whose first item is the translated text.
        """
        if not isinstance(data, list) or not data or not isinstance(data[0], list):
            raise TranslationError("Invalid response from Google Translate")

        return "".join(
            segment[0]
            for segment in data[0]
            if isinstance(segment, list) and segment and segment[0]
        )
