# config.py
import os
from dotenv import load_dotenv

# Load environment variables from .env file.
load_dotenv()

_CONFIG = None

SECRET_KEYS = ("ANTHROPIC_API_KEY",)


def _parse_origins(value):
    """Allowed origins: a comma-separated list, or * for any."""
    origins = [o.strip() for o in value.split(",") if o.strip()]
    if not origins or "*" in origins:
        return "*"
    return origins


def load_config():
    """
    Loads configuration from environment variables and returns a dictionary.
    """
    try:
        max_upload_mb = int(float(os.getenv("MAX_UPLOAD_MB", 10)))
    except ValueError:
        # Fallback to default if parsing fails
        max_upload_mb = 10

    config = {
        # General Settings
        "DEBUG_MODE": os.getenv("DEBUG_MODE", "False").lower() == "true",
        "OUTPUT_DIR": os.getenv("OUTPUT_DIR", os.getenv("STORAGE_DIR", "storage")),
        "DB_FILENAME": os.getenv("DB_FILENAME", "entries.db"),

        # Web Server Settings
        "HOST": os.getenv("HOST", "0.0.0.0"),
        "PORT": int(os.getenv("PORT", 4000)),
        "MAX_UPLOAD_MB": max_upload_mb,
        "CORS_ORIGINS": _parse_origins(os.getenv("CORS_ORIGINS", "*")),

        # Classification Provider Settings
        "ANTHROPIC_API_KEY": os.getenv("ANTHROPIC_API_KEY", "").strip(),
        "ANTHROPIC_MODEL": os.getenv("ANTHROPIC_MODEL", "claude-opus-4-5"),
        "ANTHROPIC_API_URL": os.getenv(
            "ANTHROPIC_API_URL", "https://api.anthropic.com/v1/messages"
        ),
        "ANTHROPIC_VERSION": os.getenv("ANTHROPIC_VERSION", "2023-06-01"),
        "CLASSIFIER_MAX_TOKENS": int(os.getenv("CLASSIFIER_MAX_TOKENS", 512)),
        "CLASSIFIER_TIMEOUT": float(os.getenv("CLASSIFIER_TIMEOUT", 60)),
        "CLASSIFIER_RETRY_BACKOFF": float(os.getenv("CLASSIFIER_RETRY_BACKOFF", 1.0)),

        # Trash Settings
        "PURGE_INTERVAL_SECONDS": float(os.getenv("PURGE_INTERVAL_SECONDS", 600)),
    }
    return config


def get_config():
    """Returns the process-wide configuration, loading it on first use."""
    global _CONFIG
    if _CONFIG is None:
        _CONFIG = load_config()
    return _CONFIG


def masked_config(config=None):
    """Returns a copy of the configuration that is safe to log."""
    config = dict(config or get_config())
    for key in SECRET_KEYS:
        if config.get(key):
            config[key] = "*****"
    return config


if __name__ == "__main__":
    # For testing purposes, print the configuration
    from pprint import pprint

    pprint(masked_config(load_config()))
