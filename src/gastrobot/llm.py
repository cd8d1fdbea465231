"""LLM integration via LiteLLM."""

import logging
import os
from typing import Any

import litellm

from gastrobot.config import settings

logger = logging.getLogger(__name__)

# Suppress LiteLLM's verbose logging
litellm.suppress_debug_info = True


class LLMError(Exception):
    """Raised when an LLM operation fails."""


class LLMClient:
    """Thin wrapper over LiteLLM chat completions.

    Built once at process start and injected into the service. A
    missing API key is a startup failure: the constructor raises
    instead of deferring the error to the first chat turn.
    """

    _KEY_TO_MODEL = {
        "MISTRAL_API_KEY": "mistral/mistral-large-latest",
        "ANTHROPIC_API_KEY": "anthropic/claude-sonnet-4-20250514",
        "OPENAI_API_KEY": "gpt-4o",
        "GOOGLE_API_KEY": "gemini/gemini-2.0-flash",
    }

    def __init__(self, model: str | None = None, timeout: float | None = None) -> None:
        """Initialize LLM client.

        Args:
            model: LiteLLM model string. If None, auto-detects from
                   the first available API key.
            timeout: Seconds allowed per completion. Defaults to settings.llm_timeout.

        Raises:
            LLMError: If no provider API key is configured.
        """
        if not self.available:
            raise LLMError(
                "No LLM API key found. Set one of: "
                + ", ".join(self._KEY_TO_MODEL.keys())
            )
        self._model = model or self._detect_model()
        self._timeout = timeout or settings.llm_timeout

    @property
    def model(self) -> str:
        return self._model

    @property
    def timeout(self) -> float:
        return self._timeout

    @property
    def available(self) -> bool:
        """Check if any LLM provider is configured."""
        return any(os.environ.get(key) for key in self._KEY_TO_MODEL)

    def complete(
        self,
        user_message: str,
        system_prompt: str,
        temperature: float = 0.0,
        max_tokens: int = 1024,
    ) -> Any:
        """Send a system + user exchange and return the raw message content.

        The content is returned as the provider shaped it: usually a
        string, sometimes a list of content fragments.

        Raises:
            LLMError: If the request fails or the response has no message.
        """
        try:
            response = litellm.completion(
                model=self._model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_message},
                ],
                temperature=temperature,
                max_tokens=max_tokens,
                timeout=self._timeout,
            )
        except Exception as e:
            raise LLMError(f"LLM request failed ({self._model}): {e}") from e

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, KeyError, TypeError) as e:
            raise LLMError(f"Malformed LLM response ({self._model}): {e}") from e
        if content is None:
            raise LLMError(f"No response content from {self._model}")
        return content

    def _detect_model(self) -> str:
        """Auto-detect the best available model from environment keys.

        Only called once ``available`` holds, so a key is always found.
        """
        key, model = next(
            (k, m) for k, m in self._KEY_TO_MODEL.items() if os.environ.get(k)
        )
        logger.info("Auto-detected LLM provider: %s → %s", key, model)
        return model
