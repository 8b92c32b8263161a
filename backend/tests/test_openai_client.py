"""Completion client tests: payload shape and CompletionFailure mapping.

The OpenAI endpoint is replaced with an httpx.MockTransport.
"""

import os
import sys

# Ensure the backend package is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import asyncio
import json

import httpx
import pytest

from app.errors import CompletionFailure
from app.services.openai_client import CompletionConfig, OpenAICompletionClient

CONFIG = CompletionConfig(api_key="sk-test", model="gpt-test", temperature=0.3, timeout=5.0)


def _completion_body(content):
    return {
        "choices": [{"message": {"role": "assistant", "content": content}}],
        "usage": {"prompt_tokens": 10, "completion_tokens": 20, "total_tokens": 30},
    }


def _client(handler, config=CONFIG):
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return OpenAICompletionClient(config, http_client=http_client)


def _complete(client, system="system prompt", user="an idea", stage="market"):
    return asyncio.run(client.complete(system, user, stage=stage))


class TestSuccess:
    def test_returns_raw_text_unsanitized(self):
        raw = '```json\n{"a": 1}\n```'
        client = _client(lambda request: httpx.Response(200, json=_completion_body(raw)))
        assert _complete(client) == raw

    def test_payload_uses_config(self):
        seen = {}

        def handler(request):
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=_completion_body("{}"))

        _complete(_client(handler), system="SYS", user="IDEA")

        body = seen["body"]
        assert seen["auth"] == "Bearer sk-test"
        assert body["model"] == "gpt-test"
        assert body["temperature"] == 0.3
        assert body["messages"] == [
            {"role": "system", "content": "SYS"},
            {"role": "user", "content": "IDEA"},
        ]
        assert body["response_format"] == {"type": "json_object"}

    def test_json_mode_can_be_disabled(self):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=_completion_body("{}"))

        config = CompletionConfig(api_key="sk-test", json_mode=False)
        _complete(_client(handler, config))
        assert "response_format" not in seen["body"]


class TestFailures:
    def test_non_200_raises_with_stage(self):
        client = _client(lambda request: httpx.Response(500, text="upstream exploded"))
        with pytest.raises(CompletionFailure) as exc_info:
            _complete(client, stage="roadmap")
        assert exc_info.value.stage == "roadmap"
        assert "HTTP 500" in exc_info.value.message

    def test_timeout_raises(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(CompletionFailure, match="timed out"):
            _complete(_client(handler))

    def test_transport_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(CompletionFailure, match="Transport error"):
            _complete(_client(handler))

    def test_empty_content_raises(self):
        client = _client(lambda request: httpx.Response(200, json=_completion_body("   ")))
        with pytest.raises(CompletionFailure, match="Empty"):
            _complete(client)

    def test_malformed_body_raises(self):
        client = _client(lambda request: httpx.Response(200, json={"unexpected": True}))
        with pytest.raises(CompletionFailure, match="Malformed"):
            _complete(client)

    def test_missing_api_key_makes_no_request(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json=_completion_body("{}"))

        client = _client(handler, CompletionConfig(api_key=""))
        with pytest.raises(CompletionFailure, match="OPENAI_API_KEY"):
            _complete(client, stage="sprint")
        assert calls == []

    @pytest.mark.parametrize("system,user", [("", "idea"), ("sys", ""), ("sys", "   ")])
    def test_empty_prompts_rejected(self, system, user):
        client = _client(lambda request: httpx.Response(200, json=_completion_body("{}")))
        with pytest.raises(ValueError):
            _complete(client, system=system, user=user)


class TestConfig:
    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
        monkeypatch.setenv("OPENAI_MODEL", "gpt-env")
        monkeypatch.setenv("OPENAI_TEMPERATURE", "0.1")
        monkeypatch.setenv("OPENAI_REQUEST_TIMEOUT", "12")
        config = CompletionConfig.from_env()
        assert config.api_key == "sk-env"
        assert config.model == "gpt-env"
        assert config.temperature == 0.1
        assert config.timeout == 12.0

    def test_defaults(self, monkeypatch):
        for key in ("OPENAI_MODEL", "OPENAI_TEMPERATURE", "OPENAI_REQUEST_TIMEOUT"):
            monkeypatch.delenv(key, raising=False)
        monkeypatch.setenv("OPENAI_TEMPERATURE", "not-a-number")
        config = CompletionConfig.from_env()
        assert config.model == "gpt-4.1"
        assert config.temperature == 0.3
        assert config.timeout == 40.0
