"""
Tutor Chat v1.0: Configuration
All environment variables and constants. Single source of truth.
No other file reads os.environ directly.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent

# Load .env file if present
load_dotenv(BASE_DIR / ".env")

# ─── Backend ─────────────────────────────────────────────────────────────────
LOCAL_API_BASE = "http://localhost:5000/api"
PRODUCTION_API_BASE = "https://wofa-ai-backend.onrender.com/api"

TUTOR_ENV = os.getenv("TUTOR_ENV", "production")
API_BASE = os.getenv(
    "TUTOR_API_BASE",
    LOCAL_API_BASE if TUTOR_ENV == "local" else PRODUCTION_API_BASE,
)
CHAT_ENDPOINT = "/chat"
REQUEST_TIMEOUT_SECONDS = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "60"))

# ─── Rendering ───────────────────────────────────────────────────────────────
RENDER_STEP_MS = int(os.getenv("RENDER_STEP_MS", "12"))  # per revealed unit
ASSISTANT_NAME = os.getenv("ASSISTANT_NAME", "WOFA AI")

# ─── Speech ──────────────────────────────────────────────────────────────────
SPEECH_LANGUAGE = os.getenv("SPEECH_LANGUAGE", "en-US")
SPEECH_RATE = float(os.getenv("SPEECH_RATE", "0.95"))
SPEECH_PITCH = float(os.getenv("SPEECH_PITCH", "1.0"))

# ─── Persistence ─────────────────────────────────────────────────────────────
STORE_PATH = Path(os.getenv("TUTOR_STORE_PATH", str(Path.home() / ".tutor_chat" / "store.json")))
TOKEN = os.getenv("TUTOR_TOKEN", "")  # seeds the store when login happened elsewhere

# ─── Logging ─────────────────────────────────────────────────────────────────
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
