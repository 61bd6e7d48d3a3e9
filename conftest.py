from typing import Any

import pytest
from fastapi.testclient import TestClient

from backend.app import create_app
from storygen.generator import StoryGenerator

CONFIG_VARS = (
    "AZURE_OPENAI_ENDPOINT",
    "AZURE_OPENAI_API_KEY",
    "OPENAI_API_VERSION",
    "AZURE_OPENAI_DEPLOYMENT",
    "LLM_PROVIDER_FORMAT",
    "LLM_TIMEOUT",
    "GENERATION_TIMEOUT",
)


class StubLLM:
    """Records every call; returns `response`, or raises it if it is an exception."""

    def __init__(self, response: Any = None) -> None:
        self.response = response
        self.calls: list[dict[str, Any]] = []

    async def __call__(self, prompt: str, schema: dict, schema_name: str) -> Any:
        self.calls.append({"prompt": prompt, "schema": schema, "schema_name": schema_name})
        if isinstance(self.response, BaseException):
            raise self.response
        return self.response

    @property
    def prompt(self) -> str:
        """Prompt of the most recent call."""
        return self.calls[-1]["prompt"]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's shell/.env settings out of tests."""
    for var in CONFIG_VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def story_data() -> dict[str, Any]:
    return {
        "title": "T",
        "genre": "Adventure",
        "story": "...",
        "wordCount": 550,
        "themes": ["courage"],
    }


@pytest.fixture
def stub_llm(story_data) -> StubLLM:
    return StubLLM(story_data)


@pytest.fixture
def make_client():
    """Build a TestClient whose generator talks to the given LLM."""
    def _make(llm, timeout: float | None = None) -> TestClient:
        return TestClient(create_app(generator=StoryGenerator(llm, timeout=timeout)))
    return _make


@pytest.fixture
def client(make_client, stub_llm) -> TestClient:
    return make_client(stub_llm)
