"""Configuration for NewTox."""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from a .env file when present.
load_dotenv()

OUTPUT_ROOT = Path("output")

REWRITE_API_URL = os.getenv("NEWTOX_API_URL", "http://localhost:4000/api/rewrite")

REWRITE_TIMEOUT_S = float(os.getenv("NEWTOX_API_TIMEOUT", "30"))

OPENAI_MODEL = "gpt-4o-mini"

# Delay before the single re-scan of a page that showed no headlines.
RETRY_DELAY_MS = min(max(int(os.getenv("NEWTOX_RETRY_DELAY_MS", "1000")), 800), 1200)

DEFAULT_PROFILE = os.getenv("NEWTOX_PROFILE", "strict").lower()

PREFERENCES_PATH = Path(os.getenv("NEWTOX_PREFERENCES", "profiles/default/preferences.json"))

DEFAULT_BROWSER = os.getenv("NEWTOX_BROWSER", "chromium").lower()


def get_openai_api_key() -> str | None:
    """Return the OpenAI API key or None when it is not configured."""
    return os.getenv("OPENAI_API_KEY") or None
