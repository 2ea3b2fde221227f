"""Shared fixtures for the OCR feedback parser tests."""

import pytest
from PIL import Image

from ocr_feedback_parser.config.config_manager import ConfigManager
from ocr_feedback_parser.models.feedback_data import SessionContext

CONFIG_VARS = (
    "GOOGLE_VISION_API_KEY",
    "GOOGLE_VISION_ACCESS_TOKEN",
    "GOOGLE_VISION_API_URL",
    "MAX_RETRIES",
    "RETRY_DELAY",
    "REQUEST_TIMEOUT",
    "MAX_FILE_SIZE_MB",
    "SUPPORTED_FORMATS",
    "LOG_LEVEL",
    "MIN_BODY_LENGTH",
    "DEDUP_PREFIX_LENGTH",
    "STRICT_MODE",
    "DEFAULT_AUTHOR",
)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every config variable; anything loaded from a .env is undone afterwards."""
    for name in CONFIG_VARS:
        # setenv first so monkeypatch restores the original state on teardown
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    return monkeypatch


@pytest.fixture
def missing_env_file(tmp_path):
    return str(tmp_path / "missing.env")


@pytest.fixture
def config(clean_env, missing_env_file) -> ConfigManager:
    return ConfigManager(env_file=missing_env_file)


@pytest.fixture
def vision_config(clean_env, missing_env_file) -> ConfigManager:
    clean_env.setenv("GOOGLE_VISION_API_KEY", "AIzaTestKey0123456789")
    clean_env.setenv("RETRY_DELAY", "0")
    return ConfigManager(env_file=missing_env_file)


@pytest.fixture
def context() -> SessionContext:
    return SessionContext(
        candidate_id="C-042",
        module_id="ethics",
        session_type="lecture",
        author="Trainer A",
    )


@pytest.fixture
def make_png(tmp_path):
    def _make(name: str = "sheet.png"):
        path = tmp_path / name
        Image.new("RGB", (40, 20), color="white").save(path, format="PNG")
        return path
    return _make
