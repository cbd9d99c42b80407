import logging
import os
import secrets

from dotenv import load_dotenv

from errors import ConfigError

load_dotenv()

DEFAULT_IMAGE_MODEL = "gemini-2.5-flash-image-preview"

IMAGE_MODEL = os.environ.get("GEMINI_IMAGE_MODEL", DEFAULT_IMAGE_MODEL)
TIMEOUT_MS = int(os.environ.get("GEMINI_TIMEOUT_MS", "300000"))
SECRET_KEY = os.environ.get("FLASK_SECRET_KEY") or secrets.token_hex(32)
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
HOST = os.environ.get("HOST", "127.0.0.1")
PORT = int(os.environ.get("PORT", "5000"))
MAX_SESSIONS = int(os.environ.get("MAX_SESSIONS", "1000"))


def require_api_key():
    """Return GEMINI_API_KEY, failing startup when it is missing."""
    api_key = os.environ.get("GEMINI_API_KEY", "").strip()
    if not api_key:
        raise ConfigError("GEMINI_API_KEY environment variable is not set")
    return api_key


def setup_logging(level=None):
    logging.basicConfig(
        level=getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
