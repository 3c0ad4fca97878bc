from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields, replace
from typing import Any

import yaml

from ..errors import ConfigError
from .validator import validate_settings


CONFIG_ENV_VAR = "COPILOT_CLIENT_CONFIG"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClientSettings:
    """Client settings; every field has a working default."""

    editor_version: str = "Neovim/0.9.0"
    api_base_url: str = "https://api.githubcopilot.com"
    token_url: str = "https://api.github.com/copilot_internal/v2/token"
    plugin_version: str = "CopilotChat.nvim/*"
    integration_id: str = "vscode-chat"
    user_agent: str = "CopilotChat.nvim"

    # chat defaults
    temperature: float = 0.5
    top_p: float = 1.0
    n: int = 1
    max_tokens: int | None = None

    # embeddings
    embedding_model: str = "text-embedding-3-small"
    embedding_dimensions: int = 512

    token_env_var: str = "GITHUB_TOKEN"

    def with_overrides(self, **overrides: Any) -> "ClientSettings":
        """Return a copy with the non-None overrides applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def get_config_path() -> str | None:
    """
    Resolve the settings path from the environment, if one is set.
    """
    return os.environ.get(CONFIG_ENV_VAR) or None


def _load_raw_settings(path: str) -> dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError as e:
        raise ConfigError(f"Settings file not found: {path}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read settings file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"YAML parsing error in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Settings root must be a mapping, got {type(data).__name__}")

    return data


def get_settings(path: str | None = None) -> ClientSettings:
    """
    Public helper for loading client settings.

    - Uses `path`, else COPILOT_CLIENT_CONFIG, else built-in defaults.
    - Validates the YAML before building the settings object.
    - Raises ConfigError on a missing/invalid file (never exits the process).
    """
    cfg_path = path or get_config_path()
    if not cfg_path:
        return ClientSettings()

    cfg = _load_raw_settings(cfg_path)
    validate_settings(cfg, cfg_path)

    known = {f.name for f in fields(ClientSettings)}
    settings = ClientSettings(**{k: v for k, v in cfg.items() if k in known})
    logger.debug("Loaded settings from %s", cfg_path)
    return settings
