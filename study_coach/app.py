from __future__ import annotations

import logging
import os
import typing as t

from flask import Flask, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from .config import Settings, configure_logging, load_dotenv
from .decoding import decode_as
from .errors import StudyCoachError, ValidationError
from .file_utils import PDF_MIME_TYPE, FileUtils
from .gemini_client import GeminiClient
from .models import AssignmentTracker, PracticeSet, StudyPlan, SyllabusRecord
from .prompts import Prompt, build_prompt

logger = logging.getLogger(__name__)

PUBLIC_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "public")

FAILURE_MESSAGES = {
    "parse": "Failed to parse syllabus",
    "plan": "Failed to generate plan",
    "practice": "Failed to generate questions",
    "tracker": "Failed to analyze assignments",
}

API_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]


class Gateway(t.Protocol):
    def generate(self, prompt: Prompt) -> str: ...


def _json_body() -> dict[str, t.Any]:
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def create_app(
    settings: Settings | None = None,
    *,
    gateway: Gateway | None = None,
    public_dir: str = PUBLIC_DIR,
) -> Flask:
    settings = settings or Settings.from_env()
    gateway = gateway or GeminiClient(settings)
    file_utils = FileUtils(settings.upload_dir)

    server = Flask(__name__, static_folder=public_dir, static_url_path="")
    server.config["MAX_CONTENT_LENGTH"] = settings.max_content_length
    server.config["PORT"] = settings.port
    CORS(server, resources={r"/api/*": {"origins": "*"}})

    logger.info("GEMINI_API_KEY present? %s", settings.gemini_configured)
    if not settings.gemini_configured:
        logger.warning("GEMINI_API_KEY is not set; API calls will fail until it is configured.")

    def run(feature: str, build: t.Callable[[], Prompt], from_dict: t.Callable[[t.Any], t.Any]):
        failure = FAILURE_MESSAGES[feature]
        try:
            prompt = build()
            text = gateway.generate(prompt)
            result = decode_as(text, from_dict)
        except ValidationError as e:
            logger.info("Rejected %s request: %s", feature, e.message)
            return jsonify({"error": e.message}), 400
        except HTTPException:
            raise
        except StudyCoachError as e:
            logger.error("%s: %s", failure, e.details)
            return jsonify({"error": failure, "details": e.details}), 500
        except Exception as e:
            logger.exception(failure)
            return jsonify({"error": failure, "details": str(e)}), 500
        return jsonify(result.to_dict()), 200

    @server.route("/api/health", methods=["GET"])
    def health():
        return jsonify({
            "status": "ok",
            "model": settings.gemini_model,
            "gemini_configured": settings.gemini_configured,
        })

    @server.route("/api/syllabus/parse", methods=["POST"])
    def parse_syllabus():
        def build() -> Prompt:
            text = request.form.get("text", "")
            document, file_text = file_utils.document_from_upload(request.files.get("syllabus"))
            if file_text:
                text = "\n\n".join(s for s in (file_text.strip(), text.strip()) if s)
            return build_prompt("parse", text=text, document=document, document_mime_type=PDF_MIME_TYPE)

        return run("parse", build, SyllabusRecord.from_dict)

    @server.route("/api/syllabus/plan", methods=["POST"])
    def generate_plan():
        payload = _json_body()
        return run(
            "plan",
            lambda: build_prompt(
                "plan",
                syllabus=payload.get("syllabus"),
                start_date=payload.get("startDate"),
                exam_date=payload.get("examDate"),
                hours_per_week=payload.get("hoursPerWeek"),
                difficulty=payload.get("difficulty"),
            ),
            StudyPlan.from_dict,
        )

    @server.route("/api/questions", methods=["POST"])
    def generate_questions():
        payload = _json_body()
        return run(
            "practice",
            lambda: build_prompt("practice", topic=payload.get("topic"), difficulty=payload.get("difficulty")),
            PracticeSet.from_dict,
        )

    @server.route("/api/tracker/analyze", methods=["POST"])
    def analyze_tracker():
        payload = _json_body()
        return run(
            "tracker",
            lambda: build_prompt("tracker", raw_text=payload.get("rawText"), hours_today=payload.get("hoursToday")),
            AssignmentTracker.from_dict,
        )

    @server.route("/api", methods=API_METHODS)
    @server.route("/api/<path:path>", methods=API_METHODS)
    def api_not_found(path: str = ""):
        return jsonify({"error": "API route not found"}), 404

    @server.route("/")
    def index():
        return server.send_static_file("index.html")

    @server.errorhandler(413)
    def too_large(error):
        return jsonify({"error": f"File too large. Max upload is {settings.max_upload_mb}MB."}), 413

    return server


def server_from_env(env_file: str = ".env") -> Flask:
    load_dotenv(env_file)
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    return create_app(settings)


def main() -> None:
    server = server_from_env()
    port = server.config["PORT"]
    logger.info("Server running on http://localhost:%d", port)
    server.run(port=port)


if __name__ == "__main__":
    main()
