"""Application configuration. Load from environment."""

import os

from dotenv import load_dotenv

load_dotenv()

DEFAULT_UPLOAD_CHUNK_SIZE = 256 * 1024
DEFAULT_HTTP_TIMEOUT = 30.0


def get_firebase_project_id() -> str:
    """Return FIREBASE_PROJECT_ID from environment. Raises if missing."""
    project_id = os.environ.get("FIREBASE_PROJECT_ID")
    if not project_id:
        raise RuntimeError("FIREBASE_PROJECT_ID environment variable is required")
    return project_id


def get_firebase_api_key() -> str | None:
    """API key opzionale, inviata come query param `key` a Firestore."""
    return os.environ.get("FIREBASE_API_KEY") or None


def get_storage_bucket() -> str:
    """Return FIREBASE_STORAGE_BUCKET from environment. Raises if missing."""
    bucket = os.environ.get("FIREBASE_STORAGE_BUCKET")
    if not bucket:
        raise RuntimeError("FIREBASE_STORAGE_BUCKET environment variable is required")
    return bucket


def get_firestore_emulator_host() -> str | None:
    return os.environ.get("FIRESTORE_EMULATOR_HOST") or None


def get_storage_emulator_host() -> str | None:
    return os.environ.get("FIREBASE_STORAGE_EMULATOR_HOST") or None


def get_upload_chunk_size() -> int:
    """Dimensione dei chunk per l'upload resumable (byte, minimo 1)."""
    raw = os.environ.get("UPLOAD_CHUNK_SIZE")
    if not raw:
        return DEFAULT_UPLOAD_CHUNK_SIZE
    try:
        return max(1, int(raw))
    except ValueError:
        raise RuntimeError(f"UPLOAD_CHUNK_SIZE must be an integer, got {raw!r}")


def get_http_timeout() -> float:
    raw = os.environ.get("HTTP_TIMEOUT")
    if not raw:
        return DEFAULT_HTTP_TIMEOUT
    try:
        return float(raw)
    except ValueError:
        raise RuntimeError(f"HTTP_TIMEOUT must be a number, got {raw!r}")


def load_on_startup() -> bool:
    """Se False l'app non carica le collezioni all'avvio (utile in sviluppo)."""
    raw = os.environ.get("CATALOG_LOAD_ON_STARTUP", "true")
    return raw.strip().lower() not in ("0", "false", "no", "off")
