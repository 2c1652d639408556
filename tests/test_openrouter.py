"""Tests for the OpenRouter transport."""

import asyncio
import json
import random

import httpx
import pytest

from interview_prep.backends.openrouter import (
    BACKOFF_CAP,
    OpenRouterClient,
    backoff_delay,
    extract_content,
)
from interview_prep.config import OpenRouterConfig
from interview_prep.errors import TransportError
from interview_prep.generator import generate_answer
from interview_prep.keys import CredentialPool
from interview_prep.models import Message

CONVERSATION = [Message("system", "Respond with JSON only."), Message("user", "Hi")]


def _completion(content):
    return {
        "id": "gen-1",
        "object": "chat.completion",
        "created": 1700000000,
        "model": "google/gemini-2.0-flash-001",
        "choices": [
            {
                "index": 0,
                "finish_reason": "stop",
                "message": {"role": "assistant", "content": content},
            }
        ],
    }


class Recorder:
    """Replays queued responses and records every request."""

    def __init__(self, responses):
        self.responses = list(responses)
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        status, body = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        return httpx.Response(status, json=body)

    @property
    def keys(self):
        return [r.headers["Authorization"] for r in self.requests]


def _make_client(recorder, keys=("k1", "k2", "k3")):
    sleeps = []

    async def fake_sleep(seconds):
        sleeps.append(seconds)

    http_client = httpx.AsyncClient(transport=httpx.MockTransport(recorder))
    client = OpenRouterClient(
        CredentialPool(list(keys), rng=random.Random(0)),
        OpenRouterConfig(),
        http_client=http_client,
        sleep=fake_sleep,
        rng=random.Random(0),
    )
    return client, sleeps


def _send(client, **kwargs):
    async def _run():
        try:
            return await client.send(CONVERSATION, **kwargs)
        finally:
            await client.aclose()

    return asyncio.run(_run())


def test_successful_request_body():
    recorder = Recorder([(200, _completion('[{"a": 1}]'))])
    client, sleeps = _make_client(recorder)

    assert _send(client) == '[{"a": 1}]'
    assert sleeps == []

    body = json.loads(recorder.requests[0].content)
    assert body["model"] == "google/gemini-2.0-flash-001"
    assert body["messages"] == [
        {"role": "system", "content": "Respond with JSON only."},
        {"role": "user", "content": "Hi"},
    ]
    assert body["temperature"] == 0.3
    assert body["top_p"] == 0.7
    assert body["max_tokens"] == 8000
    assert body["stream"] is False
    assert recorder.requests[0].url.path.endswith("/chat/completions")
    assert recorder.requests[0].headers["X-Title"] == "Interview Prep AI"
    assert recorder.keys[0] in {"Bearer k1", "Bearer k2", "Bearer k3"}


def test_server_errors_exhaust_retries():
    recorder = Recorder([(500, {"error": {"message": "upstream down"}})])
    client, sleeps = _make_client(recorder)

    with pytest.raises(TransportError, match="after 3 attempts") as excinfo:
        _send(client)

    assert len(recorder.requests) == 3
    assert excinfo.value.cause is not None
    assert len(sleeps) == 2
    assert 1.0 <= sleeps[0] < 2.0
    assert 2.0 <= sleeps[1] < 3.0
    assert sleeps == sorted(sleeps)


def test_generate_answer_surfaces_exhausted_retries():
    recorder = Recorder([(500, {"error": {"message": "upstream down"}})])
    client, sleeps = _make_client(recorder)

    async def _run():
        try:
            return await generate_answer("What is a closure?", "Dev", "", "technical", client)
        finally:
            await client.aclose()

    with pytest.raises(TransportError, match="after 3 attempts"):
        asyncio.run(_run())

    assert len(recorder.requests) == 3
    assert len(sleeps) == 2
    assert sleeps == sorted(sleeps)


def test_rate_limit_then_success_rotates_key():
    recorder = Recorder(
        [
            (429, {"error": {"message": "slow down"}}),
            (200, _completion("answer text")),
        ]
    )
    client, sleeps = _make_client(recorder)

    assert _send(client) == "answer text"
    assert len(recorder.requests) == 2
    assert recorder.keys[0] != recorder.keys[1]
    assert len(sleeps) == 1


def test_client_error_fails_fast():
    recorder = Recorder([(400, {"error": {"message": "bad request"}})])
    client, sleeps = _make_client(recorder)

    with pytest.raises(TransportError, match="status 400"):
        _send(client)
    assert len(recorder.requests) == 1
    assert sleeps == []


def test_bad_credential_is_retried_with_another_key():
    recorder = Recorder(
        [
            (401, {"error": {"message": "invalid key"}}),
            (200, _completion("ok")),
        ]
    )
    client, _ = _make_client(recorder)

    assert _send(client) == "ok"
    assert recorder.keys[0] != recorder.keys[1]


def test_truncated_response_is_retried():
    recorder = Recorder(
        [
            (200, _completion('```json\n[{"question": "x",')),
            (200, _completion('[{"question": "x"}]')),
        ]
    )
    client, _ = _make_client(recorder)

    assert _send(client) == '[{"question": "x"}]'
    assert len(recorder.requests) == 2


def test_missing_choices_is_retried():
    recorder = Recorder(
        [
            (200, {"id": "gen-1", "object": "chat.completion", "created": 0, "model": "m", "choices": []}),
            (200, _completion("fine")),
        ]
    )
    client, _ = _make_client(recorder)

    assert _send(client) == "fine"


def test_custom_retry_budget():
    recorder = Recorder([(503, {"error": {"message": "unavailable"}})])
    client, sleeps = _make_client(recorder)

    with pytest.raises(TransportError):
        _send(client, max_retries=5)
    assert len(recorder.requests) == 5
    assert len(sleeps) == 4
    assert all(s <= BACKOFF_CAP for s in sleeps)


def test_backoff_delay_bounds():
    rng = random.Random(1)
    for attempt in range(6):
        delay = backoff_delay(attempt, rng)
        base = 2**attempt
        assert min(base, BACKOFF_CAP) <= delay <= min(base + 1, BACKOFF_CAP)


def test_extract_content_rejects_missing_message():
    class Empty:
        choices = []

    with pytest.raises(Exception, match="Invalid response format"):
        extract_content(Empty())


def test_from_config_without_keys(monkeypatch):
    monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)
    monkeypatch.delenv("OPENROUTER_API_KEYS", raising=False)
    with pytest.raises(TransportError, match="No OpenRouter API keys"):
        OpenRouterClient.from_config(OpenRouterConfig())
