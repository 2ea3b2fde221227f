"""Tests for ocr_feedback_parser.config.config_manager."""

import pytest

from ocr_feedback_parser.config.config_manager import ConfigManager, ConfigurationError


class TestDefaults:
    def test_default_values(self, config: ConfigManager) -> None:
        assert config.get_api_url() == "https://vision.googleapis.com/v1/images:annotate"
        assert config.get_max_retries() == 3
        assert config.get_retry_delay() == 1.0
        assert config.get_request_timeout() == 30
        assert config.get_max_file_size_mb() == 10
        assert config.get_supported_formats() == ["txt", "png", "jpg", "jpeg", "webp", "pdf"]
        assert config.get_log_level() == "INFO"
        assert config.get_default_author() == "Anonymous"
        assert config.is_strict_mode() is False

    def test_default_parser_settings(self, config: ConfigManager) -> None:
        settings = config.get_parser_settings()
        assert settings.min_body_length == 4
        assert settings.dedup_prefix_length == 20
        assert settings.strict is False

    def test_no_credentials(self, config: ConfigManager) -> None:
        assert config.has_vision_credentials() is False
        assert config.get_auth_method() == "Not Configured"
        assert config.validate_api_key() is False
        with pytest.raises(ConfigurationError):
            config.get_vision_credentials()


class TestEnvironment:
    def test_overrides(self, clean_env, missing_env_file) -> None:
        clean_env.setenv("MAX_RETRIES", "5")
        clean_env.setenv("RETRY_DELAY", "0.5")
        clean_env.setenv("SUPPORTED_FORMATS", " TXT, .png ,")
        clean_env.setenv("LOG_LEVEL", "debug")
        clean_env.setenv("MIN_BODY_LENGTH", "2")
        clean_env.setenv("STRICT_MODE", "yes")
        config = ConfigManager(env_file=missing_env_file)

        assert config.get_max_retries() == 5
        assert config.get_retry_delay() == 0.5
        assert config.get_supported_formats() == ["txt", "png"]
        assert config.get_log_level() == "DEBUG"
        assert config.is_strict_mode() is True
        assert config.get_parser_settings().min_body_length == 2

    def test_strict_override(self, clean_env, missing_env_file) -> None:
        clean_env.setenv("STRICT_MODE", "true")
        config = ConfigManager(env_file=missing_env_file)
        assert config.get_parser_settings(strict=False).strict is False
        assert config.get_parser_settings().strict is True

    @pytest.mark.parametrize("name,value", [
        ("MAX_RETRIES", "three"),
        ("REQUEST_TIMEOUT", "1.5"),
        ("MIN_BODY_LENGTH", "0"),
        ("DEDUP_PREFIX_LENGTH", "-1"),
    ])
    def test_invalid_numbers(self, clean_env, missing_env_file, name, value) -> None:
        clean_env.setenv(name, value)
        with pytest.raises(ConfigurationError):
            ConfigManager(env_file=missing_env_file)

    def test_loads_env_file(self, clean_env, tmp_path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("GOOGLE_VISION_API_KEY=AIzaFromDotEnv12345\nDEFAULT_AUTHOR=Coach K\n")
        config = ConfigManager(env_file=str(env_file))
        assert config.get_auth_method() == "API Key"
        assert config.get_default_author() == "Coach K"


class TestCredentials:
    def test_api_key(self, clean_env, missing_env_file) -> None:
        clean_env.setenv("GOOGLE_VISION_API_KEY", "AIzaTestKey0123456789")
        config = ConfigManager(env_file=missing_env_file)
        assert config.get_vision_credentials() == ("API Key", "AIzaTestKey0123456789")
        assert config.validate_api_key() is True

    def test_access_token_preferred(self, clean_env, missing_env_file) -> None:
        clean_env.setenv("GOOGLE_VISION_API_KEY", "AIzaTestKey0123456789")
        clean_env.setenv("GOOGLE_VISION_ACCESS_TOKEN", "ya29.token-value-123")
        config = ConfigManager(env_file=missing_env_file)
        assert config.get_auth_method() == "Access Token"
        assert config.get_vision_credentials()[1] == "ya29.token-value-123"

    @pytest.mark.parametrize("value", ["short", "your_api_key"])
    def test_placeholder_or_short_key_rejected(self, clean_env, missing_env_file, value) -> None:
        clean_env.setenv("GOOGLE_VISION_API_KEY", value)
        config = ConfigManager(env_file=missing_env_file)
        assert config.validate_api_key() is False

    def test_secrets_masked(self, clean_env, missing_env_file) -> None:
        clean_env.setenv("GOOGLE_VISION_API_KEY", "AIzaTestKey0123456789")
        config = ConfigManager(env_file=missing_env_file)
        masked = config.get_all_config()["GOOGLE_VISION_API_KEY"]
        assert masked == "AIza...6789"
        assert config.get_vision_credentials()[1] == "AIzaTestKey0123456789"
