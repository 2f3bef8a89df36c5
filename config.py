from pathlib import Path
import os

from business_parameters import AI

# Define project root (where this file is located)
ROOT_DIR = Path(__file__).parent.resolve()

# Define standard data directories
DATA_DIR = ROOT_DIR / "data"
SAMPLES_DIR = DATA_DIR / "samples"

API_KEY_NAME = "OPENAI_API_KEY"


def get_secret(name: str, default=None):
    """
    Look up a setting from the environment, then from Streamlit secrets.

    Streamlit raises when no secrets.toml exists, which is the normal case
    for local runs, so a missing secrets file falls through to the default.
    """
    value = os.environ.get(name)
    if value:
        return value

    import streamlit as st
    try:
        return st.secrets[name]
    except (KeyError, FileNotFoundError):
        return default
    except Exception as e:
        # StreamlitSecretNotFoundError's base class differs across versions
        if "secret" in type(e).__name__.lower():
            return default
        raise


def get_api_key() -> str:
    """Return the AI provider key, or an empty string when not configured."""
    return get_secret(API_KEY_NAME, "") or ""


def get_text_model() -> str:
    return get_secret("SMARTBIZ_TEXT_MODEL", AI["TEXT_MODEL"])


def get_image_model() -> str:
    return get_secret("SMARTBIZ_IMAGE_MODEL", AI["IMAGE_MODEL"])


def get_ai_timeout() -> float:
    """Request timeout in seconds; unparseable values fall back to the default."""
    raw = get_secret("SMARTBIZ_AI_TIMEOUT", AI["TIMEOUT_SECONDS"])
    try:
        return float(raw)
    except (TypeError, ValueError):
        print(f"[WARN] Ignoring invalid SMARTBIZ_AI_TIMEOUT={raw!r}")
        return float(AI["TIMEOUT_SECONDS"])


def get_data_path(filename: str, required: bool = True) -> Path:
    """
    Locate a data file in standard directories.
    Checks SAMPLES_DIR, then DATA_DIR.

    Args:
        filename: Name of the file to find
        required: If True, raises FileNotFoundError when not found.
                  If False, returns None when not found.

    Returns the resolved Path if found.
    """
    # 1. Check samples folder
    sample_path = SAMPLES_DIR / filename
    if sample_path.exists():
        return sample_path

    # 2. Check data folder
    data_path = DATA_DIR / filename
    if data_path.exists():
        return data_path

    # If not found in any location
    if required:
        raise FileNotFoundError(f"Could not find {filename} in {SAMPLES_DIR} or {DATA_DIR}")
    else:
        return None
