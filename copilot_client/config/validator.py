"""
YAML settings validator for the client configuration file.

Validates value types and flags unknown keys.
"""

from __future__ import annotations

import logging
from typing import Any

from ..errors import ConfigError


logger = logging.getLogger(__name__)


STRING_KEYS = (
    "editor_version",
    "api_base_url",
    "token_url",
    "plugin_version",
    "integration_id",
    "user_agent",
    "embedding_model",
    "token_env_var",
)
NUMBER_KEYS = ("temperature", "top_p")
POSITIVE_INT_KEYS = ("n", "embedding_dimensions")
OPTIONAL_POSITIVE_INT_KEYS = ("max_tokens",)


class ConfigValidationError(ConfigError):
    """Raised when settings validation fails."""

    def __init__(self, message: str, errors: list[str]):
        self.errors = errors
        super().__init__(message)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_settings(cfg: dict[str, Any], config_path: str = "<settings>") -> None:
    """
    Validate a settings mapping loaded from YAML.

    Every problem is collected first; warnings (unknown keys) are logged,
    errors are logged and then raised together.

    Args:
        cfg: The loaded settings dictionary
        config_path: Path to the settings file (for error messages)

    Raises:
        ConfigValidationError: If validation fails
    """
    errors = []
    warnings = []

    # ── Check root structure ────────────────────────────────────────────────
    if not isinstance(cfg, dict):
        errors.append(f"Settings root must be a mapping, got {type(cfg).__name__}")
        cfg = {}

    known = set(STRING_KEYS + NUMBER_KEYS + POSITIVE_INT_KEYS + OPTIONAL_POSITIVE_INT_KEYS)
    for key in cfg:
        if key not in known:
            warnings.append(
                f"Unknown setting '{key}'. Valid settings: {', '.join(sorted(known))}"
            )

    # ── Strings ─────────────────────────────────────────────────────────────
    for key in STRING_KEYS:
        if key in cfg:
            value = cfg[key]
            if not isinstance(value, str):
                errors.append(f"'{key}' must be a string, got {type(value).__name__}")
            elif not value.strip():
                errors.append(f"'{key}' must not be empty")

    for key in ("api_base_url", "token_url"):
        value = cfg.get(key)
        if isinstance(value, str) and not value.startswith(("https://", "http://")):
            errors.append(f"'{key}' must be an http(s) URL, got '{value}'")

    # ── Numbers ─────────────────────────────────────────────────────────────
    for key in NUMBER_KEYS:
        if key in cfg:
            value = cfg[key]
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                errors.append(f"'{key}' must be a number, got {type(value).__name__}")
            elif value < 0:
                errors.append(f"'{key}' must not be negative, got {value}")

    for key in POSITIVE_INT_KEYS:
        if key in cfg:
            value = cfg[key]
            if not _is_int(value) or value < 1:
                errors.append(f"'{key}' must be a positive integer, got {value!r}")

    for key in OPTIONAL_POSITIVE_INT_KEYS:
        if cfg.get(key) is not None:
            value = cfg[key]
            if not _is_int(value) or value < 1:
                errors.append(f"'{key}' must be a positive integer or null, got {value!r}")

    # ── Log warnings ────────────────────────────────────────────────────────
    for warning in warnings:
        logger.warning("Settings warning: %s", warning)

    # ── Log errors and raise if any ─────────────────────────────────────────
    if errors:
        logger.error("SETTINGS VALIDATION FAILED (%s)", config_path)
        for i, error in enumerate(errors, 1):
            logger.error("[%d] %s", i, error)
        raise ConfigValidationError(
            f"Settings validation failed with {len(errors)} error(s): {'; '.join(errors)}",
            errors,
        )
