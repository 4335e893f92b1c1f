import asyncio
from types import SimpleNamespace

import httpx
import openai
import pytest

import config
from conftest import answer_all
from llm_client import LLMClient
from session_manager import SessionManager
from states import GenerationState
from templates import GENERATION_FAILED_MESSAGE
from wizard import GenerationFailed


def _response(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


@pytest.fixture
def client():
    return LLMClient(api_key="sk-test", base_url="http://localhost:9/v1", model="test/model")


def _patch_create(monkeypatch, client, handler):
    calls = []

    async def fake_create(**kwargs):
        calls.append(kwargs)
        return handler()

    monkeypatch.setattr(client.client.chat.completions, "create", fake_create)
    return calls


def test_generate_website_sends_single_user_message(monkeypatch, client):
    calls = _patch_create(monkeypatch, client, lambda: _response("<html>ok</html>"))

    html = asyncio.run(client.generate_website("Build a bakery site"))

    assert html == "<html>ok</html>"
    assert calls == [{
        "model": "test/model",
        "messages": [{"role": "user", "content": "Build a bakery site"}],
        "max_tokens": config.LLM_MAX_TOKENS,
        "temperature": config.LLM_TEMPERATURE,
    }]


def test_api_error_becomes_generation_failed(monkeypatch, client):
    def fail():
        request = httpx.Request("POST", "http://localhost:9/v1/chat/completions")
        raise openai.APIConnectionError(request=request)

    calls = _patch_create(monkeypatch, client, fail)

    with pytest.raises(GenerationFailed):
        asyncio.run(client.generate_website("prompt"))
    assert len(calls) == 1


@pytest.mark.parametrize("response", [
    SimpleNamespace(choices=[]),
    SimpleNamespace(choices=None),
    _response(None),
    _response("  "),
])
def test_malformed_response_becomes_generation_failed(monkeypatch, client, response):
    _patch_create(monkeypatch, client, lambda: response)

    with pytest.raises(GenerationFailed):
        asyncio.run(client.generate_website("prompt"))


def _client_with_body(body: bytes) -> LLMClient:
    transport = httpx.MockTransport(
        lambda request: httpx.Response(200, content=body, headers={"content-type": "application/json"})
    )
    return LLMClient(
        api_key="sk-test",
        base_url="http://localhost:9/v1",
        model="test/model",
        http_client=httpx.AsyncClient(transport=transport),
    )


def test_non_json_body_becomes_generation_failed():
    client = _client_with_body(b"not json at all")

    with pytest.raises(GenerationFailed):
        asyncio.run(client.generate_website("prompt"))


def test_non_json_body_moves_session_to_failed():
    manager = SessionManager()
    answer_all(lambda key, value: manager.submit_answer(7, key, value))
    request = manager.get_session(7).request

    token, frozen = manager.begin_generation(7)
    session = asyncio.run(
        manager.finish_generation(7, token, frozen, _client_with_body(b"not json at all"))
    )

    assert session.generation_state == GenerationState.FAILED
    assert session.request == request
    assert session.events[-1].content == GENERATION_FAILED_MESSAGE


def test_client_identifies_the_app(client):
    headers = client.client.default_headers

    assert headers["X-Title"] == config.APP_TITLE
    assert headers["HTTP-Referer"] == config.APP_URL
