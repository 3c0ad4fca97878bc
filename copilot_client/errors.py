from __future__ import annotations

from typing import Tuple


class CopilotError(Exception):
    """Base error for every failure raised by the client."""


class TokenNotFoundError(CopilotError):
    def __init__(self, tried: list[str] | None = None):
        self.tried = list(tried or [])
        detail = f" (tried: {', '.join(self.tried)})" if self.tried else ""
        super().__init__(f"Failed to find GitHub token{detail}")


class ModelNotFoundError(CopilotError):
    def __init__(self, model_id: str, available: list[str] | None = None):
        self.model_id = model_id
        self.available = list(available or [])
        super().__init__(f"Model '{model_id}' is not in the model catalog")


class HttpError(CopilotError):
    """Non-success status code or transport-level failure."""

    def __init__(self, message: str, status_code: int | None = None, body: str = ""):
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class DeserializeError(CopilotError):
    """Response body did not match the expected schema."""


class OtherError(CopilotError):
    pass


class InvalidRequestError(OtherError):
    pass


class ConfigError(OtherError):
    pass


def parse_error_message(error: Exception) -> str:
    """
    Map raw exceptions into short, human-readable messages.
    Used by the CLI instead of printing tracebacks.
    """
    s, t = str(error), type(error).__name__
    if isinstance(error, TokenNotFoundError):
        return f"❌ No Token: {s}. Set GITHUB_TOKEN or sign in with a Copilot editor plugin."
    if isinstance(error, ModelNotFoundError):
        return f"❌ Unknown Model: {s}."
    if isinstance(error, HttpError):
        if error.status_code == 401:
            return "❌ Authentication Error: Invalid or expired token."
        if error.status_code == 403:
            return "❌ Forbidden: This account cannot use the requested resource."
        if error.status_code == 404:
            return "❌ Not Found: The requested resource was not found."
        if error.status_code == 429:
            return "⚠️ Rate Limited: The service is temporarily rate-limited. Please retry shortly."
        if error.status_code is None:
            return f"❌ Connection Error: {s.split(chr(10))[0][:100]}"
        return f"❌ HTTP {error.status_code}: {s.split(chr(10))[0][:100]}"
    if isinstance(error, DeserializeError):
        return f"❌ Unexpected Response: {s.split(chr(10))[0][:100]}"
    return f"❌ {t}: {s.split(chr(10))[0][:100]}"


def exit_code_for(error: Exception) -> int:
    if isinstance(error, (TokenNotFoundError, ConfigError)):
        return 2
    return 1


def error_messages(error: Exception) -> Tuple[str, int]:
    """
    Convenience helper returning (message, exit_code).
    """
    return parse_error_message(error), exit_code_for(error)
