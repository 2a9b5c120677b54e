"""Environment variable parsing with safe fallbacks."""

import os


def get_float_env(name: str, default: float) -> float:
    """Parse float env var with safe fallback."""
    try:
        return float(os.getenv(name, str(default)))
    except (TypeError, ValueError):
        return default


def get_str_env(name: str, default: str) -> str:
    """Read env var; unset or blank falls back to the default."""
    value = os.getenv(name, "").strip()
    return value or default
