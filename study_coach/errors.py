"""Errors surfaced by the request handlers."""
from __future__ import annotations


class StudyCoachError(Exception):
    """Base error; ``details`` is the diagnostic text sent back to the client."""

    def __init__(self, message: str, details: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details if details is not None else message


class ValidationError(StudyCoachError):
    """Missing or malformed request input. Maps to HTTP 400."""


class GatewayError(StudyCoachError):
    """The Gemini call failed (network, auth, quota, empty output). Maps to HTTP 500."""

    def __init__(self, message: str, raw: str = "") -> None:
        super().__init__(message, details=f"{message}: {raw}" if raw else message)
        self.raw = raw


class DecodeError(StudyCoachError):
    """Gemini returned text that is not the JSON we asked for. Maps to HTTP 500."""

    def __init__(self, message: str, text: str) -> None:
        super().__init__(message, details=f"{message} Raw response: {text[:4000]}")
        self.text = text
