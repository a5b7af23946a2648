import asyncio
from types import SimpleNamespace
import pytest

from medscribe import llm
from medscribe.config import Settings
from medscribe.errors import ProviderError
from medscribe.llm import GeminiProvider, StubProvider, build_provider


class _NoQuickText:
    """Response whose .text accessor raises, as the SDK does when parts are missing."""

    def __init__(self, parts, finish_reason=1):
        self.candidates = [SimpleNamespace(
            content=SimpleNamespace(parts=[SimpleNamespace(text=t) for t in parts]),
            finish_reason=finish_reason,
        )]

    @property
    def text(self):
        raise ValueError("response has no quick text accessor")


def _fake_model(response=None, exc=None, seen=None):
    class FakeModel:
        def __init__(self, model_id, system_instruction=None):
            if seen is not None:
                seen.update(model_id=model_id, system=system_instruction)

        def generate_content(self, contents, generation_config=None):
            if seen is not None:
                seen.update(contents=contents, generation_config=generation_config)
            if exc is not None:
                raise exc
            return response
    return FakeModel


@pytest.fixture
def provider(monkeypatch):
    monkeypatch.setattr(llm.genai, "configure", lambda **kw: None)
    return GeminiProvider(Settings(gemini_api_key="k-test"))


def _complete(p):
    return asyncio.run(p.complete("sys", "user prompt", "gemini-test"))


def test_quick_text_is_returned(provider, monkeypatch):
    seen = {}
    monkeypatch.setattr(llm.genai, "GenerativeModel", _fake_model(SimpleNamespace(text="done"), seen=seen))
    assert _complete(provider) == "done"
    assert seen["model_id"] == "gemini-test"
    assert seen["system"] == "sys"
    assert seen["contents"] == ["user prompt"]
    assert seen["generation_config"] is not None


def test_falls_back_to_candidate_parts(provider, monkeypatch):
    resp = _NoQuickText(["[BEGIN_JSON]{}", "[END_JSON]"])
    monkeypatch.setattr(llm.genai, "GenerativeModel", _fake_model(resp))
    assert _complete(provider) == "[BEGIN_JSON]{}[END_JSON]"


def test_blocked_response_raises_provider_error(provider, monkeypatch):
    monkeypatch.setattr(llm.genai, "GenerativeModel", _fake_model(_NoQuickText([], finish_reason=3)))
    with pytest.raises(ProviderError, match="finish_reason=3"):
        _complete(provider)


def test_no_candidates_raises_provider_error(provider, monkeypatch):
    resp = SimpleNamespace(text="", candidates=[])
    monkeypatch.setattr(llm.genai, "GenerativeModel", _fake_model(resp))
    with pytest.raises(ProviderError):
        _complete(provider)


def test_sdk_exception_is_wrapped(provider, monkeypatch):
    monkeypatch.setattr(llm.genai, "GenerativeModel", _fake_model(exc=RuntimeError("503 unavailable")))
    with pytest.raises(ProviderError, match="Gemini call failed") as info:
        _complete(provider)
    assert isinstance(info.value.__cause__, RuntimeError)


def test_gemini_provider_needs_key():
    with pytest.raises(ValueError):
        GeminiProvider(Settings())


def test_build_provider_with_key_is_gemini(monkeypatch):
    keys = []
    monkeypatch.setattr(llm.genai, "configure", lambda **kw: keys.append(kw["api_key"]))
    assert isinstance(build_provider(Settings(gemini_api_key="k-1")), GeminiProvider)
    assert keys == ["k-1"]


def test_stub_provider_custom_text():
    assert asyncio.run(StubProvider("canned").complete("s", "u", "m")) == "canned"
