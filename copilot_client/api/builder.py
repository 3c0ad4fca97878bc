"""
Request bodies for POST /chat/completions and POST /embeddings.

Everything here is pure: preconditions are checked and bodies are built
before the transport is touched, so a rejected request never reaches the
network.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from ..config.loader import ClientSettings
from ..errors import InvalidRequestError, ModelNotFoundError
from ..schemas import Message
from .catalog import ModelCatalog

CHAT_PATH = "/chat/completions"
EMBEDDINGS_PATH = "/embeddings"


def build_chat_request(
    messages: Iterable[Message | Mapping[str, Any]],
    model_id: str,
    catalog: ModelCatalog | None,
    settings: ClientSettings | None = None,
) -> dict[str, Any]:
    """
    Validate and build a chat-completion body.

    Raises:
        InvalidRequestError: empty message list or unsupported role
        ModelNotFoundError: model_id is not in the catalog (or there is none)
    """
    s = settings or ClientSettings()
    msgs = [Message.coerce(m) for m in messages]
    if not msgs:
        raise InvalidRequestError("messages must not be empty")

    if catalog is None:
        raise ModelNotFoundError(model_id)
    if model_id not in catalog:
        raise ModelNotFoundError(model_id, catalog.ids())

    body: dict[str, Any] = {
        "model": model_id,
        "messages": [m.to_dict() for m in msgs],
        "n": s.n,
        "top_p": s.top_p,
        "stream": False,
        "temperature": s.temperature,
    }
    if s.max_tokens is not None:
        body["max_tokens"] = s.max_tokens
    return body


def build_embedding_request(
    inputs: Iterable[str],
    settings: ClientSettings | None = None,
) -> dict[str, Any]:
    """Validate and build an embeddings body (one vector per input)."""
    s = settings or ClientSettings()
    if isinstance(inputs, str):
        raise InvalidRequestError("inputs must be a list of strings, not a single string")
    items = list(inputs)
    if not items:
        raise InvalidRequestError("inputs must not be empty")
    if not all(isinstance(i, str) for i in items):
        raise InvalidRequestError("every input must be a string")

    return {
        "dimensions": s.embedding_dimensions,
        "input": items,
        "model": s.embedding_model,
    }
