import base64
import io
import json
import unittest
import urllib.error
from unittest.mock import MagicMock, patch

from study_coach.config import Settings
from study_coach.errors import GatewayError
from study_coach.gemini_client import GeminiClient
from study_coach.prompts import build_parse_prompt, build_practice_prompt


def _response(body):
    resp = MagicMock()
    resp.read.return_value = (body if isinstance(body, str) else json.dumps(body)).encode("utf-8")
    cm = MagicMock()
    cm.__enter__.return_value = resp
    cm.__exit__.return_value = False
    return cm


def _envelope(*texts):
    return {"candidates": [{"content": {"parts": [{"text": t} for t in texts]}, "finishReason": "STOP"}]}


class TestGeminiClient(unittest.TestCase):
    def setUp(self):
        self.settings = Settings(gemini_api_key="secret", gemini_model="gemini-2.5-flash", gemini_timeout_s=5)
        self.client = GeminiClient(self.settings)

    @patch("study_coach.gemini_client.urllib.request.urlopen")
    def test_returns_text_verbatim(self, urlopen):
        urlopen.return_value = _response(_envelope('{"topic": ', '"graphs"}'))

        text = self.client.generate(build_practice_prompt(topic="graphs"))

        self.assertEqual(text, '{"topic": "graphs"}')
        urlopen.assert_called_once()
        req = urlopen.call_args[0][0]
        self.assertEqual(urlopen.call_args[1]["timeout"], 5)
        self.assertTrue(req.full_url.endswith("/models/gemini-2.5-flash:generateContent"))
        self.assertEqual(req.get_header("X-goog-api-key"), "secret")
        self.assertNotIn("secret", req.full_url)

    @patch("study_coach.gemini_client.urllib.request.urlopen")
    def test_payload_carries_schema_and_inline_document(self, urlopen):
        urlopen.return_value = _response(_envelope("{}"))
        prompt = build_parse_prompt(document=b"%PDF-1.7 bytes")

        self.client.generate(prompt)

        payload = json.loads(urlopen.call_args[0][0].data.decode("utf-8"))
        config = payload["generationConfig"]
        self.assertEqual(config["responseMimeType"], "application/json")
        self.assertEqual(config["responseJsonSchema"], prompt.schema)
        parts = payload["contents"][0]["parts"]
        self.assertEqual(parts[0]["text"], prompt.segments[0].text)
        self.assertEqual(parts[1]["inline_data"]["mime_type"], "application/pdf")
        self.assertEqual(base64.b64decode(parts[1]["inline_data"]["data"]), b"%PDF-1.7 bytes")

    @patch("study_coach.gemini_client.urllib.request.urlopen")
    def test_missing_key_fails_without_calling_out(self, urlopen):
        client = GeminiClient(Settings(gemini_api_key=None))

        with self.assertRaises(GatewayError):
            client.generate(build_practice_prompt(topic="graphs"))
        urlopen.assert_not_called()

    @patch("study_coach.gemini_client.urllib.request.urlopen")
    def test_http_error_is_not_retried(self, urlopen):
        urlopen.side_effect = urllib.error.HTTPError(
            "https://example.invalid", 429, "Too Many Requests", {}, io.BytesIO(b'{"error": {"status": "RESOURCE_EXHAUSTED"}}')
        )

        with self.assertRaises(GatewayError) as cm:
            self.client.generate(build_practice_prompt(topic="graphs"))

        self.assertEqual(urlopen.call_count, 1)
        self.assertIn("429", cm.exception.details)
        self.assertIn("RESOURCE_EXHAUSTED", cm.exception.details)

    @patch("study_coach.gemini_client.urllib.request.urlopen")
    def test_network_error(self, urlopen):
        urlopen.side_effect = urllib.error.URLError("name resolution failed")

        with self.assertRaises(GatewayError) as cm:
            self.client.generate(build_practice_prompt(topic="graphs"))
        self.assertIn("name resolution failed", cm.exception.details)

    @patch("study_coach.gemini_client.urllib.request.urlopen")
    def test_bad_envelopes(self, urlopen):
        cases = {
            "not json": "<html>bad gateway</html>",
            "no candidates": {"promptFeedback": {"blockReason": "SAFETY"}},
            "no text": {"candidates": [{"content": {"parts": []}, "finishReason": "MAX_TOKENS"}]},
        }
        for name, body in cases.items():
            with self.subTest(case=name):
                urlopen.return_value = _response(body)
                with self.assertRaises(GatewayError):
                    self.client.generate(build_practice_prompt(topic="graphs"))

    @patch("study_coach.gemini_client.urllib.request.urlopen")
    def test_malformed_candidates_are_gateway_errors(self, urlopen):
        cases = {
            "candidates object": {"candidates": {"a": 1}},
            "candidate string": {"candidates": ["x"]},
            "content string": {"candidates": [{"content": "hello"}]},
            "parts object": {"candidates": [{"content": {"parts": {"text": "hi"}}}]},
        }
        for name, body in cases.items():
            with self.subTest(case=name):
                urlopen.return_value = _response(body)
                with self.assertRaises(GatewayError) as cm:
                    self.client.generate(build_practice_prompt(topic="graphs"))
                self.assertIn("Gemini returned", cm.exception.message)


if __name__ == "__main__":
    unittest.main()
