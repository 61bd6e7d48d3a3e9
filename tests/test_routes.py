"""Tests for POST /api/generate — defaults, envelopes, error shaping."""

import pytest

from backend.routes.generate import DEFAULT_STYLE, DEFAULT_TOPIC, apply_defaults
from conftest import StubLLM
from storygen.llm import ProviderError, StaticLLM

URL = "/api/generate"


# ── apply_defaults ───────────────────────────────────────────


def test_defaults_for_empty_body():
    assert apply_defaults({}) == {
        "topic": "a brave explorer on an alien planet",
        "style": "adventure",
        "length": "medium",
    }


def test_falsy_values_replaced():
    fields = apply_defaults({"topic": "", "style": None, "length": ""})
    assert fields["topic"] == DEFAULT_TOPIC
    assert fields["style"] == DEFAULT_STYLE
    assert fields["length"] == "medium"


def test_given_values_kept():
    fields = apply_defaults({"topic": "pirates", "style": "comedy", "length": "short"})
    assert fields == {"topic": "pirates", "style": "comedy", "length": "short"}


@pytest.mark.parametrize("length", ["epic", "LONG", 3, ["short"], {"a": 1}])
def test_unknown_length_falls_back_to_medium(length):
    assert apply_defaults({"length": length})["length"] == "medium"


# ── End-to-end ───────────────────────────────────────────────


def test_success_envelope(client, stub_llm, story_data):
    resp = client.post(URL, json={
        "topic": "a brave explorer on an alien planet",
        "style": "adventure",
        "length": "medium",
    })
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/json"
    assert resp.json() == {"success": True, "data": story_data}
    assert len(stub_llm.calls) == 1


def test_empty_body_uses_defaults(client, stub_llm):
    resp = client.post(URL, json={})
    assert resp.status_code == 200
    prompt = stub_llm.prompt
    assert "adventure" in prompt
    assert "a brave explorer on an alien planet" in prompt
    assert "500-700" in prompt


def test_malformed_body_treated_as_empty(client, stub_llm):
    resp = client.post(URL, content=b"{not json", headers={"Content-Type": "application/json"})
    assert resp.status_code == 200
    assert DEFAULT_TOPIC in stub_llm.prompt


def test_missing_body_treated_as_empty(client, stub_llm):
    resp = client.post(URL)
    assert resp.status_code == 200
    assert DEFAULT_TOPIC in stub_llm.prompt


def test_non_object_body_treated_as_empty(client, stub_llm):
    resp = client.post(URL, json=["pirates"])
    assert resp.status_code == 200
    assert DEFAULT_TOPIC in stub_llm.prompt


def test_invalid_length_generates_medium(client, stub_llm):
    resp = client.post(URL, json={"topic": "a heist", "length": "epic"})
    assert resp.status_code == 200
    assert "500-700" in stub_llm.prompt
    assert "epic" not in stub_llm.prompt


def test_long_length(client, stub_llm):
    client.post(URL, json={"topic": "a heist", "length": "long"})
    assert "1000-1500" in stub_llm.prompt


def test_topic_passed_verbatim(client, stub_llm):
    topic = "Tom & Jerry's <great> \"escape\""
    client.post(URL, json={"topic": topic})
    assert topic in stub_llm.prompt


def test_provider_error_returns_500(make_client):
    client = make_client(StubLLM(ProviderError("LLM backend returned HTTP 401")))
    resp = client.post(URL, json={})
    assert resp.status_code == 500
    assert resp.headers["content-type"] == "application/json"
    assert resp.json() == {"success": False, "error": "LLM backend returned HTTP 401"}


def test_no_output_returns_500(make_client):
    resp = make_client(StubLLM(None)).post(URL, json={})
    assert resp.status_code == 500
    assert resp.json() == {"success": False, "error": "Failed to generate story"}


def test_incomplete_output_returns_500(make_client, story_data):
    del story_data["themes"]
    resp = make_client(StaticLLM(story_data)).post(URL, json={})
    assert resp.status_code == 500
    assert resp.json()["error"] == "Failed to generate story"


def test_non_string_topic_returns_500(client, stub_llm):
    resp = client.post(URL, json={"topic": 42})
    assert resp.status_code == 500
    body = resp.json()
    assert body["success"] is False
    assert "topic" in body["error"]
    assert stub_llm.calls == []


def test_empty_error_message_replaced(make_client):
    resp = make_client(StubLLM(RuntimeError())).post(URL, json={})
    assert resp.status_code == 500
    assert resp.json()["error"] == "Unknown error occurred"


def test_extra_output_keys_not_returned(make_client, story_data):
    resp = make_client(StaticLLM({**story_data, "internal": True})).post(URL, json={})
    assert resp.json()["data"] == story_data


def test_only_post_allowed(client):
    assert client.get(URL).status_code == 405
