import pytest
from fastapi.testclient import TestClient

from medscribe.config import Settings
from medscribe.main import create_app


class RecordingProvider:
    """Returns a fixed completion and remembers what it was asked."""
    name = "recording"

    def __init__(self, text: str):
        self.text = text
        self.calls = []

    async def complete(self, system_prompt, user_prompt, model_id):
        self.calls.append((system_prompt, user_prompt, model_id))
        return self.text


class FailingProvider:
    name = "failing"

    def __init__(self, exc: Exception):
        self.exc = exc
        self.calls = 0

    async def complete(self, system_prompt, user_prompt, model_id):
        self.calls += 1
        raise self.exc


STRUCTURED_COMPLETION = (
    "[BEGIN_JSON]\n{\"diagnosis\": \"hypertension\"}\n[END_JSON]\n"
    "[BEGIN_SUMMARY]\nBP elevated, started on amlodipine.\n[END_SUMMARY]"
)


@pytest.fixture
def settings():
    return Settings(model_name="test-model")


@pytest.fixture
def make_client(settings):
    def _make(provider, **overrides):
        s = settings.model_copy(update=overrides) if overrides else settings
        return TestClient(create_app(settings=s, provider=provider))
    return _make
