from __future__ import annotations

import base64
import json
import logging
import typing as t
import urllib.error
import urllib.parse
import urllib.request

from .config import Settings
from .errors import GatewayError
from .prompts import Prompt, PromptSegment

JsonDict = dict[str, t.Any]

logger = logging.getLogger(__name__)


class GeminiClient:
    """Makes exactly one ``generateContent`` call per request and returns the model text."""

    def __init__(self, settings: Settings) -> None:
        self.api_key = settings.gemini_api_key
        self.model = settings.gemini_model
        self.base_url = settings.gemini_base_url.rstrip("/")
        self.timeout_s = settings.gemini_timeout_s

    @staticmethod
    def _part(segment: PromptSegment) -> JsonDict:
        if segment.is_document:
            return {
                "inline_data": {
                    "mime_type": segment.mime_type or "application/octet-stream",
                    "data": base64.b64encode(t.cast(bytes, segment.data)).decode("ascii"),
                }
            }
        return {"text": segment.text or ""}

    def build_payload(self, prompt: Prompt) -> JsonDict:
        return {
            "contents": [{"role": "user", "parts": [self._part(s) for s in prompt.segments]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseJsonSchema": prompt.schema,
            },
        }

    def _url(self) -> str:
        return f"{self.base_url}/models/{urllib.parse.quote(self.model)}:generateContent"

    def generate(self, prompt: Prompt) -> str:
        if not self.api_key:
            raise GatewayError("Gemini API key is not configured", "Set GEMINI_API_KEY and restart the server.")

        req = urllib.request.Request(
            self._url(),
            data=json.dumps(self.build_payload(prompt), ensure_ascii=False).encode("utf-8"),
            headers={"Content-Type": "application/json", "x-goog-api-key": self.api_key},
            method="POST",
        )
        logger.info("Calling Gemini model=%s feature=%s segments=%d", self.model, prompt.feature, len(prompt.segments))

        try:
            with urllib.request.urlopen(req, timeout=self.timeout_s) as resp:
                raw = resp.read().decode("utf-8")
        except urllib.error.HTTPError as e:
            try:
                body = e.read().decode("utf-8")
            except Exception:
                body = ""
            raise GatewayError(f"Gemini HTTPError {e.code}", body or str(e)) from e
        except urllib.error.URLError as e:
            raise GatewayError("Could not reach Gemini", str(e.reason)) from e
        except (TimeoutError, OSError) as e:
            raise GatewayError("Gemini request failed", str(e)) from e

        return self._extract_text(raw)

    @staticmethod
    def _extract_text(raw: str) -> str:
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise GatewayError("Gemini returned a malformed response envelope", raw[:1000]) from e
        if not isinstance(data, dict):
            raise GatewayError("Gemini returned a malformed response envelope", raw[:1000])

        candidates = data.get("candidates") or []
        if not candidates:
            feedback = data.get("promptFeedback")
            raise GatewayError("Gemini returned no candidates", json.dumps(feedback) if feedback else raw[:1000])

        if not isinstance(candidates, list) or not isinstance(candidates[0], dict):
            raise GatewayError("Gemini returned a malformed response envelope", raw[:1000])

        content = candidates[0].get("content") or {}
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list):
            parts = []
        text_parts = [p["text"] for p in parts if isinstance(p, dict) and isinstance(p.get("text"), str) and p["text"]]
        if not text_parts:
            finish_reason = candidates[0].get("finishReason")
            raise GatewayError("Gemini returned no text", f"Finish reason: {finish_reason}")
        return "".join(t.cast(list[str], text_parts))
