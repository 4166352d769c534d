import asyncio
from types import SimpleNamespace

import httpx
import openai
import pytest

from generation_engine.backends import AnthropicBackend, FallbackBackend, OpenAIBackend, build_backend
from trendwise.errors import BackendTimeout, BackendUnavailable


class StubBackend:
    def __init__(self, name, reply=None, error=None):
        self.name = name
        self.reply = reply
        self.error = error
        self.calls = 0

    async def complete(self, system_prompt, user_prompt, max_tokens, temperature):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.reply


def _run(backend):
    return asyncio.run(backend.complete("system", "user", 10, 0.5))


def test_fallback_uses_next_backend_on_error() -> None:
    first = StubBackend("openai", error=BackendUnavailable("quota"))
    second = StubBackend("claude", reply="hello")

    assert _run(FallbackBackend([first, second])) == "hello"
    assert first.calls == 1 and second.calls == 1


def test_fallback_skips_empty_replies() -> None:
    assert _run(FallbackBackend([StubBackend("a", reply="  "), StubBackend("b", reply="text")])) == "text"


def test_fallback_raises_last_error() -> None:
    backend = FallbackBackend([StubBackend("a", error=BackendUnavailable("a")), StubBackend("b", error=BackendTimeout("b"))])
    with pytest.raises(BackendTimeout):
        _run(backend)


def test_no_backends_configured() -> None:
    with pytest.raises(BackendUnavailable):
        _run(build_backend())


def test_build_backend_orders_preferred_first() -> None:
    backend = build_backend(openai_api_key="sk-test", anthropic_api_key="ak-test", preferred="claude")
    assert [b.name for b in backend.backends] == ["claude", "openai"]


def _openai_client(create):
    return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))


def test_openai_backend_returns_message_content() -> None:
    seen = {}

    async def create(**kwargs):
        seen.update(kwargs)
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content="answer"))])

    backend = OpenAIBackend(None, model="gpt-test", client=_openai_client(create))

    assert _run(backend) == "answer"
    assert seen["model"] == "gpt-test"
    assert seen["messages"][0] == {"role": "system", "content": "system"}


def test_openai_timeout_maps_to_backend_timeout() -> None:
    async def create(**kwargs):
        raise openai.APITimeoutError(request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions"))

    with pytest.raises(BackendTimeout):
        _run(OpenAIBackend(None, client=_openai_client(create)))


def test_anthropic_backend_joins_text_blocks() -> None:
    async def create(**kwargs):
        assert kwargs["system"] == "system"
        return SimpleNamespace(content=[SimpleNamespace(text="Hello "), SimpleNamespace(text="world")])

    client = SimpleNamespace(messages=SimpleNamespace(create=create))
    assert _run(AnthropicBackend(None, client=client)) == "Hello world"


def test_openai_empty_choices_is_unavailable() -> None:
    async def create(**kwargs):
        return SimpleNamespace(choices=[])

    with pytest.raises(BackendUnavailable):
        _run(OpenAIBackend(None, client=_openai_client(create)))
