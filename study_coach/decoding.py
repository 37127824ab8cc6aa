from __future__ import annotations

import json
import logging
import typing as t

from .errors import DecodeError
from .models import ShapeError

logger = logging.getLogger(__name__)

T = t.TypeVar("T")


def decode_json(text: str) -> t.Any:
    """Strict parse of the model text. No fence stripping or repair."""
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError) as e:
        logger.error("Failed to parse JSON from Gemini: %s", e)
        raise DecodeError("Gemini did not return valid JSON.", text if isinstance(text, str) else repr(text)) from e


def decode_as(text: str, from_dict: t.Callable[[t.Any], T]) -> T:
    value = decode_json(text)
    try:
        return from_dict(value)
    except ShapeError as e:
        logger.error("Gemini JSON has an unexpected shape: %s", e)
        raise DecodeError(f"Gemini returned JSON with an unexpected shape: {e}.", text) from e
