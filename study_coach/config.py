"""Process configuration.

Settings are read once at startup and handed to the pieces that need them:

  - ``load_dotenv()`` copies key=value pairs from a ``.env`` file into
    ``os.environ`` without overriding what is already set.
  - ``Settings.from_env()`` builds the immutable settings object.

The dotenv parser intentionally avoids external dependencies so it works in
a fresh venv.
"""
from __future__ import annotations

import dataclasses
import logging
import os
import tempfile
import typing as t

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _parse_dotenv(path: str) -> dict[str, str]:
    pairs: dict[str, str] = {}
    try:
        with open(path, "r", encoding="utf-8") as fh:
            for raw in fh:
                line = raw.strip()
                if not line or line.startswith("#"):
                    continue
                if line.startswith("export "):
                    line = line[len("export "):]
                if "=" not in line:
                    continue
                key, val = line.split("=", 1)
                key = key.strip()
                val = val.strip()
                if len(val) >= 2 and val[0] == val[-1] and val[0] in ("\"", "'"):
                    val = val[1:-1]
                pairs[key] = val
    except FileNotFoundError:
        return {}
    return pairs


def load_dotenv(path: str = ".env", override: bool = False) -> None:
    """Load key=value pairs from `path` into os.environ.

    Args:
        path: path to .env file (default: .env)
        override: if True, overwrite existing environment variables
    """
    for k, v in _parse_dotenv(path).items():
        if override or k not in os.environ:
            os.environ[k] = v


def _env_float(env: t.Mapping[str, str], name: str, default: float) -> float:
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def _env_int(env: t.Mapping[str, str], name: str, default: int) -> int:
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


@dataclasses.dataclass(frozen=True)
class Settings:
    gemini_api_key: str | None = None
    gemini_model: str = DEFAULT_MODEL
    gemini_base_url: str = DEFAULT_BASE_URL
    gemini_timeout_s: float = 120.0
    port: int = 3000
    upload_dir: str = os.path.join(tempfile.gettempdir(), "study_coach_uploads")
    max_upload_mb: int = 25
    log_level: str = "INFO"

    @property
    def gemini_configured(self) -> bool:
        return bool(self.gemini_api_key)

    @property
    def max_content_length(self) -> int:
        return self.max_upload_mb * 1024 * 1024

    @staticmethod
    def from_env(env: t.Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if env is None else env
        defaults = Settings()
        return Settings(
            gemini_api_key=(env.get("GEMINI_API_KEY") or env.get("GOOGLE_API_KEY") or "").strip() or None,
            gemini_model=(env.get("GEMINI_MODEL") or "").strip() or defaults.gemini_model,
            gemini_base_url=((env.get("GEMINI_BASE_URL") or "").strip() or defaults.gemini_base_url).rstrip("/"),
            gemini_timeout_s=_env_float(env, "GEMINI_TIMEOUT_S", defaults.gemini_timeout_s),
            port=_env_int(env, "PORT", defaults.port),
            upload_dir=(env.get("UPLOAD_DIR") or "").strip() or defaults.upload_dir,
            max_upload_mb=_env_int(env, "MAX_UPLOAD_MB", defaults.max_upload_mb),
            log_level=((env.get("LOG_LEVEL") or "").strip() or defaults.log_level).upper(),
        )


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    root.setLevel(level)
    if not any(getattr(h, "_study_coach", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._study_coach = True  # type: ignore[attr-defined]
        root.addHandler(handler)
