"""Summary: Generative model provider abstraction and implementations.

Importance: Centralizes LLM access so analysis can swap or lose its model without code changes.
Alternatives: Call provider SDKs directly inside the analyzer.
"""

from __future__ import annotations

import json
import logging
import time
import urllib.error
import urllib.parse
import urllib.request
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from timesherpa.config import AppConfig


logger = logging.getLogger(__name__)


class AiConfigurationError(ValueError):
    """Summary: Raised when a provider is missing required configuration.

    Importance: Fails fast before any network call is attempted.
    Alternatives: Let the provider endpoint reject the request.
    """


class AiProviderError(RuntimeError):
    """Summary: Raised when a provider request fails or returns an unusable payload.

    Importance: Gives callers one exception type to recover from.
    Alternatives: Propagate urllib and JSON errors directly.
    """


class AiProvider(ABC):
    """Summary: Abstract interface for AI text generation.

    Importance: Allows switching between local and cloud LLMs without refactors.
    Alternatives: Use a single vendor SDK and accept lock-in risk.
    """

    @abstractmethod
    def generate_text(self, prompt: str, purpose: str) -> tuple[str, int]:
        """Summary: Generate a response for a prompt.

        Importance: Returns raw text plus latency; callers parse and validate the text.
        Alternatives: Return provider-specific response objects directly.
        """


@dataclass
class MockAiProvider(AiProvider):
    """Summary: Deterministic AI provider for local testing.

    Importance: Enables offline workflows and repeatable tests.
    Alternatives: Use a small local LLM for all development tasks.
    """

    responses: dict[str, str] = field(default_factory=dict)

    def generate_text(self, prompt: str, purpose: str) -> tuple[str, int]:
        """Summary: Return a canned response for the purpose, or echo the prompt.

        Importance: The echo is not JSON, which exercises the deterministic fallback path.
        Alternatives: Use fixture-based responses loaded from files.
        """

        started = time.time()
        response = self.responses.get(purpose, f"[mock:{purpose}] {prompt[:240]}")
        latency_ms = int((time.time() - started) * 1000)
        return response, latency_ms


class GeminiProvider(AiProvider):
    """Summary: AI provider using the Gemini generateContent REST API.

    Importance: Default cloud model for calendar analysis.
    Alternatives: Use the google-generativeai SDK.
    """

    def __init__(self, api_key: str | None, model: str, base_url: str, timeout: int = 60) -> None:
        """Summary: Initialize the Gemini provider.

        Importance: A missing key is tolerated here and reported on first use.
        Alternatives: Refuse to construct the provider without a key.
        """

        self._api_key = api_key
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    def generate_text(self, prompt: str, purpose: str) -> tuple[str, int]:
        """Summary: Generate text using Gemini generateContent.

        Importance: Returns the concatenated text parts of the first candidate.
        Alternatives: Use streaming responses.
        """

        if not self._api_key:
            raise AiConfigurationError("GEMINI_API_KEY environment variable is not set")
        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {"temperature": 0.2},
        }
        model = urllib.parse.quote(self._model, safe="")
        request = urllib.request.Request(
            url=f"{self._base_url}/models/{model}:generateContent",
            data=json.dumps(payload).encode("utf-8"),
            headers={
                "Content-Type": "application/json",
                "x-goog-api-key": self._api_key,
            },
            method="POST",
        )
        started = time.time()
        try:
            with urllib.request.urlopen(request, timeout=self._timeout) as response:
                raw = json.loads(response.read().decode("utf-8"))
        except urllib.error.HTTPError as exc:
            error_body = exc.read().decode("utf-8", errors="replace")
            raise AiProviderError(f"Gemini request failed: {error_body or exc.reason}") from exc
        except (urllib.error.URLError, TimeoutError, json.JSONDecodeError) as exc:
            raise AiProviderError(f"Gemini request failed: {exc}") from exc
        latency_ms = int((time.time() - started) * 1000)
        logger.info("Gemini %s response received in %sms.", purpose, latency_ms)
        return _gemini_text(raw), latency_ms


def _gemini_text(raw: dict) -> str:
    """Summary: Extract text from a Gemini response payload.

    Importance: Blocked or empty candidates surface as provider errors.
    Alternatives: Return an empty string and let parsing fail later.
    """

    candidates = raw.get("candidates") or []
    if not candidates:
        raise AiProviderError("Gemini returned no candidates")
    parts = (candidates[0].get("content") or {}).get("parts") or []
    text = "".join(part.get("text", "") for part in parts)
    if not text:
        raise AiProviderError("Gemini returned an empty response")
    return text


class OllamaProvider(AiProvider):
    """Summary: AI provider that targets a local Ollama server.

    Importance: Supports privacy-sensitive workflows on local hardware.
    Alternatives: Use llama.cpp directly with a Python binding.
    """

    def __init__(self, base_url: str, model: str, timeout: int = 60) -> None:
        self._base_url = base_url.rstrip("/")
        self._model = model
        self._timeout = timeout

    def generate_text(self, prompt: str, purpose: str) -> tuple[str, int]:
        """Summary: Generate text using the Ollama HTTP API.

        Importance: Enables local inference for calendar analysis.
        Alternatives: Use Ollama's CLI and parse its output.
        """

        payload = json.dumps({"model": self._model, "prompt": prompt, "stream": False})
        request = urllib.request.Request(
            url=f"{self._base_url}/api/generate",
            data=payload.encode("utf-8"),
            headers={"Content-Type": "application/json"},
            method="POST",
        )
        started = time.time()
        try:
            with urllib.request.urlopen(request, timeout=self._timeout) as response:
                raw = json.loads(response.read().decode("utf-8"))
        except (urllib.error.URLError, TimeoutError, json.JSONDecodeError) as exc:
            raise AiProviderError(f"Ollama request failed: {exc}") from exc
        latency_ms = int((time.time() - started) * 1000)
        return raw.get("response", ""), latency_ms


@dataclass(frozen=True)
class AiProviderFactory:
    """Summary: Factory for selecting AI providers from configuration.

    Importance: Keeps provider selection logic centralized.
    Alternatives: Wire providers manually at the application entrypoint.
    """

    config: AppConfig

    def build(self) -> AiProvider:
        """Summary: Construct the configured AI provider.

        Importance: Ensures consistent provider selection across services.
        Alternatives: Use dependency injection frameworks.
        """

        if self.config.ai_provider == "gemini":
            return GeminiProvider(
                self.config.gemini_api_key,
                self.config.gemini_model,
                self.config.gemini_base_url,
            )
        if self.config.ai_provider == "ollama":
            return OllamaProvider(self.config.ollama_url, self.config.ollama_model)
        return MockAiProvider()

    @property
    def model_name(self) -> str:
        if self.config.ai_provider == "gemini":
            return self.config.gemini_model
        if self.config.ai_provider == "ollama":
            return self.config.ollama_model
        return "mock"


def estimate_tokens(text: str) -> int:
    """Summary: Estimate tokens from text length.

    Importance: Provides a rough metric for AI usage logging.
    Alternatives: Use provider token counters or tiktoken.
    """

    return max(1, len(text) // 4)
