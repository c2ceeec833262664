import json

import pytest
import requests
import responses

from mbop.llm import (
    CompletionHistory,
    CompletionResponse,
    ConfigError,
    Message,
    Models,
    OpenAIClient,
    OpenAIConfig,
)

BASE = "http://localhost:9999/v1"


@pytest.fixture
def client():
    return OpenAIClient(OpenAIConfig(base_url=BASE, auth_token="token"))


def test_create_starts_with_empty_system_message():
    history = CompletionHistory.create("gpt-3.5-turbo")
    assert history.model == "gpt-3.5-turbo"
    assert history.messages == [Message(role="system", content="")]


def test_add_and_remove_latest():
    history = CompletionHistory.create("m")
    history.add(Message("user", "hi"))
    assert len(history.messages) == 2
    history.remove_latest()
    assert history.messages == [Message("system", "")]


def test_remove_latest_on_empty_raises():
    with pytest.raises(IndexError):
        CompletionHistory("m").remove_latest()


def test_format_history_and_latest():
    history = CompletionHistory("m", [Message("user", "a"), Message("assistant", "b")])
    assert history.format_history() == "Role: user\nContent: a\n\nRole: assistant\nContent: b\n\n"
    assert history.format_latest() == "Role: assistant\nContent: b\n\n"


def test_to_request():
    history = CompletionHistory("m", [Message("user", "q")])
    assert history.to_request() == {
        "model": "m",
        "messages": [{"role": "user", "content": "q"}],
        "max_tokens": 8192,
        "temperature": 0.1,
    }


def test_config_from_env():
    config = OpenAIConfig.from_env({"OPENAI_BASE_URL": BASE, "OPENAI_AUTH_TOKEN": "token"})
    assert config == OpenAIConfig(base_url=BASE, auth_token="token")


def test_config_missing_base_url():
    with pytest.raises(ConfigError, match="OPENAI_BASE_URL"):
        OpenAIConfig.from_env({"OPENAI_AUTH_TOKEN": "token"})


def test_config_missing_token():
    with pytest.raises(ConfigError, match="OPENAI_AUTH_TOKEN"):
        OpenAIConfig.from_env({"OPENAI_BASE_URL": BASE})


def test_client_from_env(monkeypatch):
    monkeypatch.setenv("OPENAI_BASE_URL", BASE)
    monkeypatch.setenv("OPENAI_AUTH_TOKEN", "token")
    assert OpenAIClient.from_env().config.base_url == BASE


def test_models_from_dict():
    models = Models.from_dict(
        {"object": "list", "data": [{"id": "m1", "object": "model", "created": 5, "owned_by": "org"}]}
    )
    assert models.object == "list"
    assert [m.id for m in models.data] == ["m1"]
    assert models.data[0].owned_by == "org"


def test_completion_response_without_choices_has_no_content():
    with pytest.raises(ValueError):
        CompletionResponse.from_dict({"id": "x"}).content


def test_get_models_sends_bearer(client):
    with responses.RequestsMock() as rsps:
        rsps.get(BASE + "/models", json={"object": "list", "data": [{"id": "m1"}, {"id": "m2"}]})
        models = client.get_models()
        assert [m.id for m in models.data] == ["m1", "m2"]
        assert rsps.calls[0].request.headers["Authorization"] == "Bearer token"


def test_test_connection_raises_when_unreachable(client):
    with responses.RequestsMock() as rsps:
        rsps.get(BASE + "/models", body=requests.ConnectionError("down"))
        with pytest.raises(requests.ConnectionError):
            client.test_connection()


def test_get_completion(client):
    with responses.RequestsMock() as rsps:
        rsps.post(
            BASE + "/chat/completions",
            json={
                "id": "c1",
                "model": "m",
                "choices": [
                    {"index": 0, "message": {"role": "assistant", "content": "hello"}, "finish_reason": "stop"}
                ],
                "usage": {"prompt_tokens": 1, "completion_tokens": 2, "total_tokens": 3},
            },
        )
        history = CompletionHistory("m", [Message("user", "hi")])
        content, response = client.get_completion(history)
        assert content == "hello"
        assert response.id == "c1"
        assert response.finish_reasons == ("stop",)
        sent = json.loads(rsps.calls[0].request.body)
        assert sent == history.to_request()


def test_get_completion_without_choices_raises(client):
    with responses.RequestsMock() as rsps:
        rsps.post(BASE + "/chat/completions", json={"error": {"message": "bad"}})
        with pytest.raises(ValueError):
            client.get_completion(CompletionHistory("m"))


def test_get_completion_invalid_json_raises(client):
    with responses.RequestsMock() as rsps:
        rsps.post(BASE + "/chat/completions", body="not json")
        with pytest.raises(ValueError):
            client.get_completion(CompletionHistory("m"))