"""
copilot_client/config/token.py

GitHub token lookup as an ordered chain of token sources.

Each source implements `lookup() -> str | None`. TokenResolver walks the chain
and returns the first non-empty token; later sources are never consulted.
A source that cannot read or parse its input returns None instead of raising,
so a broken hosts.json never hides a valid apps.json.

Default chain:
  1. explicit token passed by the caller
  2. GITHUB_TOKEN environment variable
  3. <config dir>/github-copilot/hosts.json
  4. <config dir>/github-copilot/apps.json
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Protocol, Sequence

from ..errors import TokenNotFoundError
from ..schemas import Credential
from .paths import get_token_file_paths

logger = logging.getLogger(__name__)

TOKEN_HOST_MARKER = "github.com"
TOKEN_FIELD = "oauth_token"


class TokenSource(Protocol):
    name: str

    def lookup(self) -> str | None: ...


# ── Sources ───────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ExplicitTokenSource:
    value: str | None
    name: str = "explicit token"

    def lookup(self) -> str | None:
        return (self.value or "").strip() or None


@dataclass(frozen=True)
class EnvTokenSource:
    var: str = "GITHUB_TOKEN"
    environ: Mapping[str, str] | None = None

    @property
    def name(self) -> str:
        return f"${self.var}"

    def lookup(self) -> str | None:
        env = os.environ if self.environ is None else self.environ
        value = env.get(self.var, "").strip()
        return value or None


@dataclass(frozen=True)
class ConfigFileTokenSource:
    """
    A Copilot editor-plugin credential file: a JSON object keyed by host,
    e.g. {"github.com": {"user": "...", "oauth_token": "gho_..."}}.
    The first key containing "github.com" with a string oauth_token wins.
    """

    path: Path

    @property
    def name(self) -> str:
        return str(self.path)

    def lookup(self) -> str | None:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            logger.debug("Skipping unreadable token file %s: %s", self.path, e)
            return None
        if not isinstance(data, dict):
            logger.debug("Skipping token file %s: root is not an object", self.path)
            return None

        for key, value in data.items():
            if TOKEN_HOST_MARKER not in key or not isinstance(value, dict):
                continue
            token = value.get(TOKEN_FIELD)
            if isinstance(token, str) and token.strip():
                return token.strip()
        return None


# ── Resolver ──────────────────────────────────────────────────────────────────

class TokenResolver:
    def __init__(self, sources: Sequence[TokenSource]):
        self.sources = list(sources)

    @classmethod
    def default(
        cls,
        token: str | None = None,
        env_var: str = "GITHUB_TOKEN",
        environ: Mapping[str, str] | None = None,
        platform: str | None = None,
    ) -> "TokenResolver":
        sources: list[TokenSource] = [
            ExplicitTokenSource(token),
            EnvTokenSource(env_var, environ),
        ]
        sources += [ConfigFileTokenSource(p) for p in get_token_file_paths(environ, platform)]
        return cls(sources)

    def resolve(self) -> Credential:
        """Return the first token found, or raise TokenNotFoundError."""
        for source in self.sources:
            token = source.lookup()
            if token:
                logger.debug("GitHub token found in %s", source.name)
                return Credential(token=token, source=source.name)
        raise TokenNotFoundError([s.name for s in self.sources])


def resolve_github_token(
    token: str | None = None,
    env_var: str = "GITHUB_TOKEN",
) -> Credential:
    """Resolve a GitHub token using the default source chain."""
    return TokenResolver.default(token=token, env_var=env_var).resolve()
