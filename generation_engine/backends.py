"""Generative text backends (OpenAI and Anthropic).

Every backend exposes one coroutine, ``complete(system_prompt, user_prompt,
max_tokens, temperature) -> str``, and reports failure only through
:class:`~trendwise.errors.BackendUnavailable` or
:class:`~trendwise.errors.BackendTimeout`.
"""
from __future__ import annotations

import logging
from typing import Any, Protocol, Sequence

import anthropic
import openai

from trendwise.errors import BackendError, BackendTimeout, BackendUnavailable

logger = logging.getLogger(__name__)


class TextBackend(Protocol):
    name: str

    async def complete(self, system_prompt: str, user_prompt: str, max_tokens: int, temperature: float) -> str:
        ...


class OpenAIBackend:
    """Chat completions via the official ``openai`` async client."""

    name = "openai"

    def __init__(self, api_key: str | None, model: str = "gpt-4o-mini", client: Any = None, timeout: float = 120.0):
        self.model = model
        self.client = client or openai.AsyncOpenAI(api_key=api_key, timeout=timeout)

    async def complete(self, system_prompt: str, user_prompt: str, max_tokens: int, temperature: float) -> str:
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                max_tokens=max_tokens,
                temperature=temperature,
                presence_penalty=0.1,
                frequency_penalty=0.1,
            )
        except openai.APITimeoutError as e:
            raise BackendTimeout(f"OpenAI request timed out: {e}") from e
        except openai.OpenAIError as e:
            raise BackendUnavailable(f"OpenAI API call failed: {e}") from e
        if not response.choices:
            raise BackendUnavailable("OpenAI returned no choices")
        return response.choices[0].message.content or ""


class AnthropicBackend:
    """Messages API via the official ``anthropic`` async client."""

    name = "claude"

    def __init__(self, api_key: str | None, model: str = "claude-3-5-haiku-latest", client: Any = None, timeout: float = 120.0):
        self.model = model
        self.client = client or anthropic.AsyncAnthropic(api_key=api_key, timeout=timeout)

    async def complete(self, system_prompt: str, user_prompt: str, max_tokens: int, temperature: float) -> str:
        try:
            response = await self.client.messages.create(
                model=self.model,
                system=system_prompt,
                max_tokens=max_tokens,
                temperature=temperature,
                messages=[{"role": "user", "content": user_prompt}],
            )
        except anthropic.APITimeoutError as e:
            raise BackendTimeout(f"Claude request timed out: {e}") from e
        except anthropic.AnthropicError as e:
            raise BackendUnavailable(f"Claude API call failed: {e}") from e
        return "".join(getattr(block, "text", "") for block in response.content)


class FallbackBackend:
    """Try the preferred backend first, then the others in order."""

    name = "fallback"

    def __init__(self, backends: Sequence[TextBackend]):
        self.backends = list(backends)

    async def complete(self, system_prompt: str, user_prompt: str, max_tokens: int, temperature: float) -> str:
        if not self.backends:
            raise BackendUnavailable("No generative backend configured (set OPENAI_API_KEY or ANTHROPIC_API_KEY)")
        last_error: BackendError | None = None
        for backend in self.backends:
            try:
                text = await backend.complete(system_prompt, user_prompt, max_tokens, temperature)
            except BackendError as e:
                logger.warning(f"{backend.name} backend failed: {e}")
                last_error = e
                continue
            if text and text.strip():
                return text
            logger.warning(f"{backend.name} backend returned an empty response")
        if last_error is not None:
            raise last_error
        return ""


def build_backend(
    openai_api_key: str | None = None,
    anthropic_api_key: str | None = None,
    preferred: str = "openai",
    openai_model: str = "gpt-4o-mini",
    anthropic_model: str = "claude-3-5-haiku-latest",
) -> FallbackBackend:
    """Assemble the configured backends, preferred first."""
    available: dict[str, TextBackend] = {}
    if openai_api_key:
        available["openai"] = OpenAIBackend(openai_api_key, openai_model)
        logger.info("OpenAI client initialized")
    if anthropic_api_key:
        available["claude"] = AnthropicBackend(anthropic_api_key, anthropic_model)
        logger.info("Claude client initialized")

    order = [preferred] + [name for name in ("openai", "claude") if name != preferred]
    return FallbackBackend([available[name] for name in order if name in available])
