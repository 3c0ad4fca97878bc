"""
copilot_client/client.py

Public facade: token resolution -> (session-token exchange) -> model catalog
-> request building -> transport.

The credential and the catalog are fixed when the client is constructed.
Every public coroutine performs at most one HTTP round trip.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

import httpx

from .api.builder import CHAT_PATH, EMBEDDINGS_PATH, build_chat_request, build_embedding_request
from .api.catalog import ModelCatalog, fetch_agents, fetch_models
from .api.transport import TransportClient
from .config.loader import ClientSettings, get_settings
from .config.token import TokenResolver
from .schemas import (
    Agent,
    ChatResponse,
    Credential,
    Embedding,
    Message,
    Model,
    parse_embeddings,
)

logger = logging.getLogger(__name__)


class CopilotClient:
    def __init__(
        self,
        credential: Credential | str,
        editor_version: str | None = None,
        *,
        settings: ClientSettings | None = None,
        catalog: ModelCatalog | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        """
        credential: Copilot bearer token (Credential or raw string)
        editor_version: sent as Editor-Version; overrides settings.editor_version
        catalog: prefetched models (and agents); chat requests are refused without one
        http_client: shared httpx.AsyncClient (closed by the caller)
        """
        if isinstance(credential, str):
            credential = Credential(token=credential)
        self._credential = credential
        self.settings = (settings or ClientSettings()).with_overrides(editor_version=editor_version)
        self.catalog = catalog
        self._transport = TransportClient(self.settings, http_client)

    # ── Constructors ────────────────────────────────────────────────────────

    @classmethod
    async def from_env(
        cls,
        editor_version: str | None = None,
        *,
        token: str | None = None,
        exchange_token: bool = True,
        settings: ClientSettings | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> "CopilotClient":
        """
        Resolve the GitHub token (explicit > env var > config files) and,
        unless exchange_token=False, trade it for a Copilot session token.
        """
        settings = (settings or get_settings()).with_overrides(editor_version=editor_version)
        github_token = TokenResolver.default(token=token, env_var=settings.token_env_var).resolve()

        client = cls(github_token, settings=settings, http_client=http_client)
        if exchange_token:
            try:
                session = await client._transport.exchange_token(github_token)
            except BaseException:
                await client.aclose()
                raise
            client._credential = Credential(token=session.token, source="copilot session")
            logger.debug("Copilot session token expires at %d", session.expires_at)
        return client

    @classmethod
    async def from_env_with_models(
        cls,
        editor_version: str | None = None,
        **kwargs: Any,
    ) -> "CopilotClient":
        """Like from_env(), then prefetch the model and agent catalog."""
        client = await cls.from_env(editor_version, **kwargs)
        try:
            client.catalog = await ModelCatalog.fetch(
                client._transport, client._credential, include_agents=True
            )
        except BaseException:
            await client.aclose()
            raise
        logger.debug("Catalog loaded: %r", client.catalog)
        return client

    # ── Properties ──────────────────────────────────────────────────────────

    @property
    def credential(self) -> Credential:
        return self._credential

    @property
    def editor_version(self) -> str:
        return self.settings.editor_version

    # ── Catalog ─────────────────────────────────────────────────────────────

    async def get_models(self) -> list[Model]:
        """Cached catalog when prefetched; otherwise one GET /models (not cached)."""
        if self.catalog is not None:
            return list(self.catalog.models)
        return await fetch_models(self._transport, self._credential)

    async def get_agents(self) -> list[Agent]:
        """Cached agents when the catalog holds them; otherwise one GET /agents."""
        if self.catalog is not None and self.catalog.agents is not None:
            return list(self.catalog.agents)
        return await fetch_agents(self._transport, self._credential)

    # ── Completions ─────────────────────────────────────────────────────────

    async def chat_completion(
        self,
        messages: Iterable[Message | Mapping[str, Any]],
        model_id: str,
    ) -> ChatResponse:
        body = build_chat_request(messages, model_id, self.catalog, self.settings)
        data = await self._transport.post_json(CHAT_PATH, self._credential, body)
        return ChatResponse.from_dict(data)

    async def get_embeddings(self, inputs: Iterable[str]) -> list[Embedding]:
        body = build_embedding_request(inputs, self.settings)
        data = await self._transport.post_json(EMBEDDINGS_PATH, self._credential, body)
        return parse_embeddings(data, expected=len(body["input"]))

    # ── Lifecycle ───────────────────────────────────────────────────────────

    async def aclose(self) -> None:
        await self._transport.aclose()

    async def __aenter__(self) -> "CopilotClient":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()
