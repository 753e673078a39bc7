"""LLM-backed translation over the providers' HTTP APIs.

Each provider is a ``Provider`` strategy owning its request format and its
response format. Adding a provider means adding a subclass and registering
it in ``PROVIDERS``.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import requests

from vault_sync.translate.base import TranslationError, Translator

LANGUAGE_NAMES = {
    "ko": "Korean",
    "en": "English",
    "ja": "Japanese",
    "zh": "Chinese",
    "zh-cn": "Simplified Chinese",
    "zh-tw": "Traditional Chinese",
    "es": "Spanish",
    "fr": "French",
    "de": "German",
}

SYSTEM_PROMPT = """You are a professional translator. Translate the following markdown content from {source} to {target}.

Rules:
1. Preserve all markdown syntax (headers, links, code blocks, etc.)
2. Preserve all frontmatter YAML as-is (do not translate)
3. Keep technical terms, code, URLs, and file paths unchanged
4. Maintain the same tone and style
5. Output ONLY the translated text, no explanations"""


def language_name(code: str) -> str:
    return LANGUAGE_NAMES.get(code.lower(), code)


@dataclass
class LLMRequest:
    url: str
    headers: Dict[str, str]
    body: Dict[str, Any]
    params: Dict[str, str] = field(default_factory=dict)


class Provider(ABC):
    """Request builder and response extractor for one LLM API."""

    display_name: str = ""

    @abstractmethod
    def build_request(self, api_key: str, model: str, system_prompt: str, text: str) -> LLMRequest:
        ...

    @abstractmethod
    def extract_text(self, data: Any) -> str:
        """Pull the completion text out of a decoded JSON response.

        Raises:
            KeyError, IndexError, TypeError: On an unexpected shape
        """


class OpenAIProvider(Provider):
    display_name = "OpenAI"

    def build_request(self, api_key: str, model: str, system_prompt: str, text: str) -> LLMRequest:
        return LLMRequest(
            url="https://api.openai.com/v1/chat/completions",
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {api_key}",
            },
            body={
                "model": model,
                "messages": [
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": text},
                ],
                "temperature": 0.3,
            },
        )

    def extract_text(self, data: Any) -> str:
        return data["choices"][0]["message"]["content"]


class AnthropicProvider(Provider):
    display_name = "Anthropic"

    def build_request(self, api_key: str, model: str, system_prompt: str, text: str) -> LLMRequest:
        return LLMRequest(
            url="https://api.anthropic.com/v1/messages",
            headers={
                "Content-Type": "application/json",
                "x-api-key": api_key,
                "anthropic-version": "2023-06-01",
            },
            body={
                "model": model,
                "max_tokens": 8192,
                "system": system_prompt,
                "messages": [{"role": "user", "content": text}],
            },
        )

    def extract_text(self, data: Any) -> str:
        return data["content"][0]["text"]


class GoogleAIProvider(Provider):
    display_name = "Google AI"

    def build_request(self, api_key: str, model: str, system_prompt: str, text: str) -> LLMRequest:
        return LLMRequest(
            url=f"https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent",
            headers={"Content-Type": "application/json"},
            params={"key": api_key},
            body={
                "contents": [{"parts": [{"text": f"{system_prompt}\n\n{text}"}]}],
                "generationConfig": {"temperature": 0.3},
            },
        )

    def extract_text(self, data: Any) -> str:
        return data["candidates"][0]["content"]["parts"][0]["text"]


PROVIDERS: Dict[str, Provider] = {
    "openai": OpenAIProvider(),
    "anthropic": AnthropicProvider(),
    "google": GoogleAIProvider(),
}


class LLMTranslator(Translator):
    """Translator that prompts a chat model to translate markdown.

    Usage:
        translator = LLMTranslator("anthropic", api_key, "claude-sonnet-4-5")
        translator.translate(markdown, "ko", "en")
    """

    def __init__(self, provider: str, api_key: str, model: str, timeout: Optional[float] = 120):
        """Initialize LLMTranslator.

        Args:
            provider: One of the keys of PROVIDERS
            api_key: Provider API key
            model: Provider model identifier
            timeout: Request timeout in seconds

        Raises:
            ValueError: If the provider is unknown
        """
        if provider not in PROVIDERS:
            raise ValueError(f"Unknown provider: {provider}")
        self.provider_id = provider
        self.provider = PROVIDERS[provider]
        self.api_key = api_key
        self.model = model
        self.timeout = timeout

    @property
    def name(self) -> str:
        return f"{self.provider.display_name} ({self.model})"

    def translate(self, text: str, source_lang: str, target_lang: str) -> str:
        if not text.strip():
            return text

        system_prompt = SYSTEM_PROMPT.format(
            source=language_name(source_lang),
            target=language_name(target_lang),
        )
        request = self.provider.build_request(self.api_key, self.model, system_prompt, text)

        try:
            response = requests.post(
                request.url,
                headers=request.headers,
                params=request.params or None,
                json=request.body,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise TranslationError(f"{self.provider_id} request failed: {e}") from e

        if not response.ok:
            raise TranslationError(f"{self.provider_id} API error: {response.status_code} - {response.text}")

        try:
            translated = self.provider.extract_text(response.json())
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise TranslationError(f"Unexpected {self.provider_id} response: {e}") from e

        if not isinstance(translated, str) or not translated.strip():
            raise TranslationError(f"{self.provider_id} returned an empty translation")
        return translated
