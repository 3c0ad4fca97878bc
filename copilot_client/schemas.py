"""
copilot_client/schemas.py

Typed payloads exchanged with the Copilot API.

Request bodies are plain dicts (built in api/builder.py). Responses are parsed
into frozen dataclasses here; every parser raises DeserializeError when the
JSON does not have the expected shape, so callers never see KeyError/TypeError.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Mapping

from .errors import DeserializeError, InvalidRequestError

Role = Literal["system", "user", "assistant"]
ROLES: tuple[str, ...] = ("system", "user", "assistant")


# ── Helpers ───────────────────────────────────────────────────────────────────

def _require(data: Any, key: str, kind: type | tuple[type, ...], where: str) -> Any:
    if not isinstance(data, dict):
        raise DeserializeError(f"{where}: expected an object, got {type(data).__name__}")
    if key not in data:
        raise DeserializeError(f"{where}: missing field '{key}'")
    value = data[key]
    # bool is an int subclass; never accept it where a number is expected
    if isinstance(value, bool) and bool not in (kind if isinstance(kind, tuple) else (kind,)):
        raise DeserializeError(f"{where}: field '{key}' has type bool")
    if not isinstance(value, kind):
        raise DeserializeError(f"{where}: field '{key}' has type {type(value).__name__}")
    return value


def _optional(data: dict, key: str, kind: type | tuple[type, ...], where: str) -> Any:
    if data.get(key) is None:
        return None
    return _require(data, key, kind, where)


# ── Credentials ───────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Credential:
    """Bearer token plus the name of the source that produced it."""

    token: str = field(repr=False)
    source: str = "explicit"

    def __str__(self) -> str:
        return f"<credential from {self.source}>"


# ── Session token ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class CopilotToken:
    token: str = field(repr=False)
    expires_at: int

    @classmethod
    def from_dict(cls, data: Any) -> "CopilotToken":
        return cls(
            token=_require(data, "token", str, "token response"),
            expires_at=_require(data, "expires_at", int, "token response"),
        )


# ── Catalog ───────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Model:
    id: str
    name: str
    version: str | None = None
    tokenizer: str | None = None
    max_input_tokens: int | None = None
    max_output_tokens: int | None = None

    @classmethod
    def from_dict(cls, data: Any) -> "Model":
        where = "model"
        model_id = _require(data, "id", str, where)
        where = f"model '{model_id}'"
        return cls(
            id=model_id,
            name=_require(data, "name", str, where),
            version=_optional(data, "version", str, where),
            tokenizer=_optional(data, "tokenizer", str, where),
            max_input_tokens=_optional(data, "max_input_tokens", int, where),
            max_output_tokens=_optional(data, "max_output_tokens", int, where),
        )


@dataclass(frozen=True)
class Agent:
    id: str
    name: str
    description: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> "Agent":
        agent_id = _require(data, "id", str, "agent")
        where = f"agent '{agent_id}'"
        return cls(
            id=agent_id,
            name=_require(data, "name", str, where),
            description=_optional(data, "description", str, where),
        )


def parse_models(data: Any) -> list[Model]:
    """GET /models returns {"data": [...]}."""
    return [Model.from_dict(m) for m in _require(data, "data", list, "models response")]


def parse_agents(data: Any) -> list[Agent]:
    """GET /agents returns {"agents": [...]}."""
    return [Agent.from_dict(a) for a in _require(data, "agents", list, "agents response")]


# ── Chat ──────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Message:
    role: Role
    content: str

    @classmethod
    def coerce(cls, value: "Message | Mapping[str, Any]") -> "Message":
        """Accept a Message or a {"role": ..., "content": ...} mapping."""
        if isinstance(value, Message):
            msg = value
        elif isinstance(value, Mapping):
            role, content = value.get("role"), value.get("content")
            if not isinstance(role, str) or not isinstance(content, str):
                raise InvalidRequestError("message needs string 'role' and 'content'")
            msg = cls(role=role, content=content)
        else:
            raise InvalidRequestError(f"unsupported message type: {type(value).__name__}")
        if msg.role not in ROLES:
            raise InvalidRequestError(
                f"unsupported role '{msg.role}' (expected one of {', '.join(ROLES)})"
            )
        return msg

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}

    @classmethod
    def from_dict(cls, data: Any) -> "Message":
        return cls(
            role=_require(data, "role", str, "message"),
            content=_require(data, "content", str, "message"),
        )


@dataclass(frozen=True)
class TokenUsage:
    total_tokens: int


@dataclass(frozen=True)
class ChatChoice:
    message: Message
    finish_reason: str | None = None
    usage: TokenUsage | None = None

    @classmethod
    def from_dict(cls, data: Any) -> "ChatChoice":
        message = Message.from_dict(_require(data, "message", dict, "choice"))
        usage = _optional(data, "usage", dict, "choice")
        if usage is not None:
            usage = TokenUsage(_require(usage, "total_tokens", int, "usage"))
        return cls(
            message=message,
            finish_reason=_optional(data, "finish_reason", str, "choice"),
            usage=usage,
        )


@dataclass(frozen=True)
class ChatResponse:
    choices: tuple[ChatChoice, ...]

    @property
    def content(self) -> str:
        """Content of the first choice, or '' when the service returned none."""
        return self.choices[0].message.content if self.choices else ""

    @classmethod
    def from_dict(cls, data: Any) -> "ChatResponse":
        choices = _require(data, "choices", list, "chat response")
        return cls(choices=tuple(ChatChoice.from_dict(c) for c in choices))


# ── Embeddings ────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Embedding:
    index: int
    embedding: list[float]

    @classmethod
    def from_dict(cls, data: Any) -> "Embedding":
        vector = _require(data, "embedding", list, "embedding")
        if not all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in vector):
            raise DeserializeError("embedding: vector must contain only numbers")
        return cls(
            index=_require(data, "index", int, "embedding"),
            embedding=[float(v) for v in vector],
        )


def parse_embeddings(data: Any, expected: int) -> list[Embedding]:
    """
    POST /embeddings returns {"data": [{"index": i, "embedding": [...]}, ...]}.
    Results are returned in input order; the count must match the inputs.
    """
    items = [Embedding.from_dict(e) for e in _require(data, "data", list, "embeddings response")]
    if len(items) != expected:
        raise DeserializeError(f"embeddings response: expected {expected} items, got {len(items)}")
    items.sort(key=lambda e: e.index)
    if [e.index for e in items] != list(range(expected)):
        raise DeserializeError("embeddings response: indices do not cover the inputs")
    return items
