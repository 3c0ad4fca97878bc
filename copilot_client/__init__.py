"""
Top-level package for the GitHub Copilot API client.

This package hosts:
- GitHub token lookup (explicit value, environment, editor-plugin config files)
- settings loading and validation
- the model/agent catalog, request builders and HTTP transport
- the CopilotClient facade and the `copilot-client` CLI
"""

from .api.catalog import ModelCatalog
from .client import CopilotClient
from .config.loader import ClientSettings, get_settings
from .config.token import TokenResolver, resolve_github_token
from .errors import (
    ConfigError,
    CopilotError,
    DeserializeError,
    HttpError,
    InvalidRequestError,
    ModelNotFoundError,
    OtherError,
    TokenNotFoundError,
)
from .schemas import (
    Agent,
    ChatChoice,
    ChatResponse,
    CopilotToken,
    Credential,
    Embedding,
    Message,
    Model,
    TokenUsage,
)

__all__ = [
    "CopilotClient",
    "ModelCatalog",
    "ClientSettings",
    "get_settings",
    "TokenResolver",
    "resolve_github_token",
    "ConfigError",
    "CopilotError",
    "DeserializeError",
    "HttpError",
    "InvalidRequestError",
    "ModelNotFoundError",
    "OtherError",
    "TokenNotFoundError",
    "Agent",
    "ChatChoice",
    "ChatResponse",
    "CopilotToken",
    "Credential",
    "Embedding",
    "Message",
    "Model",
    "TokenUsage",
]
