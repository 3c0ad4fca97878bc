"""
copilot_client/api/transport.py

HTTP transport for the Copilot API.

One method call is one HTTP round trip. Failures are mapped onto the client's
error types and propagated; nothing is retried and nothing is logged above
DEBUG level (callers decide how to report errors).

  httpx.HTTPError / non-2xx status  -> HttpError
  body is not JSON                  -> DeserializeError
  header value cannot be encoded    -> OtherError
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..config.loader import ClientSettings
from ..errors import DeserializeError, HttpError, OtherError
from ..schemas import CopilotToken, Credential

logger = logging.getLogger(__name__)

_BODY_EXCERPT = 200


def _check_header_value(name: str, value: str) -> str:
    if not value.isascii() or "\r" in value or "\n" in value:
        raise OtherError(f"Invalid value for header '{name}'")
    return value


class TransportClient:
    def __init__(
        self,
        settings: ClientSettings | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        """
        settings: endpoints and identifying headers (defaults if None)
        http_client: shared httpx.AsyncClient; when omitted one is created
            and closed by aclose()
        """
        self.settings = settings or ClientSettings()
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient()

    # ── Headers / URLs ──────────────────────────────────────────────────────

    def url(self, path: str) -> str:
        return f"{self.settings.api_base_url.rstrip('/')}/{path.lstrip('/')}"

    def headers(self, credential: Credential) -> dict[str, str]:
        s = self.settings
        headers = {
            "Authorization": f"Bearer {credential.token}",
            "Editor-Version": s.editor_version,
            "Editor-Plugin-Version": s.plugin_version,
            "Copilot-Integration-Id": s.integration_id,
            "User-Agent": s.user_agent,
            "Accept": "application/json",
        }
        return {k: _check_header_value(k, v) for k, v in headers.items()}

    # ── Requests ────────────────────────────────────────────────────────────

    async def _request_json(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: Any = None,
    ) -> Any:
        logger.debug("%s %s", method, url)
        try:
            response = await self._http.request(method, url, headers=headers, json=body)
        except httpx.HTTPError as e:
            raise HttpError(f"{method} {url} failed: {type(e).__name__}: {e}") from e

        logger.debug("%s %s -> %d", method, url, response.status_code)
        if not response.is_success:
            excerpt = response.text[:_BODY_EXCERPT]
            raise HttpError(
                f"{method} {url} returned HTTP {response.status_code}: {excerpt}",
                status_code=response.status_code,
                body=excerpt,
            )

        try:
            return response.json()
        except ValueError as e:
            raise DeserializeError(f"{method} {url} returned a non-JSON body: {e}") from e

    async def get_json(self, path: str, credential: Credential) -> Any:
        return await self._request_json("GET", self.url(path), self.headers(credential))

    async def post_json(self, path: str, credential: Credential, body: dict[str, Any]) -> Any:
        return await self._request_json("POST", self.url(path), self.headers(credential), body)

    async def exchange_token(self, github_token: Credential) -> CopilotToken:
        """
        Trade a GitHub OAuth token for a short-lived Copilot session token.
        Uses the `token` auth scheme, not `Bearer`.
        """
        headers = {
            "Authorization": f"token {github_token.token}",
            "User-Agent": self.settings.user_agent,
            "Accept": "application/json",
        }
        headers = {k: _check_header_value(k, v) for k, v in headers.items()}
        data = await self._request_json("GET", self.settings.token_url, headers)
        return CopilotToken.from_dict(data)

    # ── Lifecycle ───────────────────────────────────────────────────────────

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()
