"""Text generation through an OpenAI-compatible chat completion API (Groq by default)."""

import logging

from openai import OpenAI, OpenAIError

from config import GROQ_API_KEY, GROQ_BASE_URL, HTTP_TIMEOUT, LLM_MODEL

logger = logging.getLogger(__name__)


class GenerationError(Exception):
    """Raised when an article cannot be generated or saved."""


class LLMClient:
    """Chat completion client, constructed per invocation and passed in explicitly."""

    def __init__(
        self,
        api_key: str = GROQ_API_KEY,
        base_url: str = GROQ_BASE_URL,
        model: str = LLM_MODEL,
        client: OpenAI | None = None,
    ) -> None:
        self.model = model
        self._client = client or OpenAI(api_key=api_key, base_url=base_url, timeout=HTTP_TIMEOUT)
        self._calls = 0

    def complete(self, prompt: str, temperature: float = 0.7, max_tokens: int = 4000) -> str:
        """Single-turn completion. Returns the stripped message text ("" when empty)."""
        try:
            response = self._client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except OpenAIError as e:
            logger.error("LLM call failed: %s", e)
            raise GenerationError(f"LLM call failed: {e}") from e

        self._calls += 1
        if not response.choices:
            return ""
        return (response.choices[0].message.content or "").strip()

    @property
    def calls(self) -> int:
        return self._calls
