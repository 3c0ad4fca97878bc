from .loader import CONFIG_ENV_VAR, ClientSettings, get_settings
from .paths import get_config_dir, get_token_file_paths
from .token import (
    ConfigFileTokenSource,
    EnvTokenSource,
    ExplicitTokenSource,
    TokenResolver,
    TokenSource,
    resolve_github_token,
)
from .validator import ConfigValidationError, validate_settings

__all__ = [
    "CONFIG_ENV_VAR",
    "ClientSettings",
    "get_settings",
    "get_config_dir",
    "get_token_file_paths",
    "ConfigFileTokenSource",
    "EnvTokenSource",
    "ExplicitTokenSource",
    "TokenResolver",
    "TokenSource",
    "resolve_github_token",
    "ConfigValidationError",
    "validate_settings",
]
