"""Chat-completion client for an OpenAI-compatible HTTP API."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from typing import Any, Mapping

import requests

log = logging.getLogger(__name__)

MAX_TOKENS = 8192
TEMPERATURE = 0.1


class ConfigError(Exception):
    """A required setting is missing."""


@dataclass
class Message:
    role: str
    content: str


def _message_from_dict(data: Mapping[str, Any]) -> Message:
    return Message(role=data.get("role") or "", content=data.get("content") or "")


@dataclass
class CompletionHistory:
    """The model to ask and the conversation so far."""

    model: str
    messages: list[Message] = field(default_factory=list)

    @classmethod
    def create(cls, model: str) -> CompletionHistory:
        """Start a history holding one empty system message."""
        history = cls(model=model)
        history.add(Message(role="system", content=""))
        return history

    def add(self, message: Message) -> None:
        self.messages.append(message)

    def remove_latest(self) -> None:
        if not self.messages:
            raise IndexError("history is empty")
        self.messages.pop()

    @staticmethod
    def _format(message: Message) -> str:
        return f"Role: {message.role}\nContent: {message.content}\n\n"

    def format_history(self) -> str:
        return "".join(self._format(message) for message in self.messages)

    def format_latest(self) -> str:
        if not self.messages:
            raise IndexError("history is empty")
        return self._format(self.messages[-1])

    def to_request(self) -> dict[str, Any]:
        """Build the request body for the chat-completions endpoint."""
        return {
            "model": self.model,
            "messages": [asdict(message) for message in self.messages],
            "max_tokens": MAX_TOKENS,
            "temperature": TEMPERATURE,
        }


@dataclass(frozen=True)
class Model:
    id: str
    object: str = ""
    created: int = 0
    owned_by: str = ""


@dataclass(frozen=True)
class Models:
    object: str = ""
    data: tuple[Model, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Models:
        if not isinstance(data, Mapping):
            raise ValueError("models response is not a JSON object")
        return cls(
            object=data.get("object") or "",
            data=tuple(
                Model(
                    id=item.get("id") or "",
                    object=item.get("object") or "",
                    created=item.get("created") or 0,
                    owned_by=item.get("owned_by") or "",
                )
                for item in data.get("data") or ()
            ),
        )


@dataclass(frozen=True)
class CompletionResponse:
    id: str = ""
    object: str = ""
    created: int = 0
    model: str = ""
    system_fingerprint: str = ""
    choices: tuple[Message, ...] = ()
    finish_reasons: tuple[str, ...] = ()
    usage: Mapping[str, int] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CompletionResponse:
        if not isinstance(data, Mapping):
            raise ValueError("completion response is not a JSON object")
        choices = sorted(data.get("choices") or (), key=lambda c: c.get("index") or 0)
        return cls(
            id=data.get("id") or "",
            object=data.get("object") or "",
            created=data.get("created") or 0,
            model=data.get("model") or "",
            system_fingerprint=data.get("system_fingerprint") or "",
            choices=tuple(_message_from_dict(c.get("message") or {}) for c in choices),
            finish_reasons=tuple(c.get("finish_reason") or "" for c in choices),
            usage=dict(data.get("usage") or {}),
        )

    @property
    def content(self) -> str:
        """Content of the first choice."""
        if not self.choices:
            raise ValueError("completion response holds no choices")
        return self.choices[0].content


@dataclass(frozen=True)
class OpenAIConfig:
    base_url: str
    auth_token: str

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> OpenAIConfig:
        """Read OPENAI_BASE_URL and OPENAI_AUTH_TOKEN from the environment."""
        env = os.environ if environ is None else environ
        if "OPENAI_BASE_URL" not in env:
            raise ConfigError("env variable OPENAI_BASE_URL required")
        if "OPENAI_AUTH_TOKEN" not in env:
            raise ConfigError("env variable OPENAI_AUTH_TOKEN required")
        return cls(base_url=env["OPENAI_BASE_URL"], auth_token=env["OPENAI_AUTH_TOKEN"])


class OpenAIClient:
    """Talks to the models and chat-completions endpoints."""

    def __init__(self, config: OpenAIConfig, session: requests.Session | None = None):
        self.config = config
        self.session = session or requests.Session()

    @classmethod
    def from_env(cls) -> OpenAIClient:
        return cls(OpenAIConfig.from_env())

    @property
    def _headers(self) -> dict[str, str]:
        return {"Authorization": "Bearer " + self.config.auth_token}

    def _get(self, url: str) -> Any:
        try:
            response = self.session.get(url, headers=self._headers)
        except requests.RequestException:
            log.error("failed to get response from %s", url)
            raise
        return json.loads(response.text)

    def _post(self, url: str, body: Any) -> Any:
        try:
            response = self.session.post(url, data=json.dumps(body), headers=self._headers)
        except requests.RequestException:
            log.error("failed to get response from %s", url)
            raise
        return json.loads(response.text)

    def get_models(self) -> Models:
        return Models.from_dict(self._get(self.config.base_url + "/models"))

    def test_connection(self) -> None:
        """Raise if the models endpoint cannot be reached."""
        self.get_models()

    def get_completion(self, history: CompletionHistory) -> tuple[str, CompletionResponse]:
        """Ask for a completion; return the first choice's content and the whole response."""
        data = self._post(self.config.base_url + "/chat/completions", history.to_request())
        response = CompletionResponse.from_dict(data)
        return response.content, response