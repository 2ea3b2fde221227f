"""
Configuration manager for OCR feedback parser system.
"""
import os
from typing import Optional, Tuple

from dotenv import load_dotenv

from ..parsing.parser import ParserSettings


class ConfigurationError(Exception):
    """Exception raised for configuration-related errors."""
    pass


class ConfigManager:
    """
    Manages environment variables and system configuration for the OCR feedback parser.
    """

    def __init__(self, env_file: Optional[str] = None):
        """
        Initialize configuration manager.

        Args:
            env_file: Optional path to .env file to load
        """
        if env_file:
            load_dotenv(env_file)
        else:
            load_dotenv()  # Load from default .env file if present

        self._config = {}
        self._load_config()

    def _load_config(self) -> None:
        """Load and validate all configuration values."""
        # Credentials are only needed once an image has to be OCR'd
        credential_vars = [
            'GOOGLE_VISION_API_KEY',
            'GOOGLE_VISION_ACCESS_TOKEN'
        ]

        # Optional environment variables with defaults
        optional_vars = {
            'GOOGLE_VISION_API_URL': 'https://vision.googleapis.com/v1/images:annotate',
            'MAX_RETRIES': '3',
            'RETRY_DELAY': '1',
            'REQUEST_TIMEOUT': '30',
            'MAX_FILE_SIZE_MB': '10',
            'SUPPORTED_FORMATS': 'txt,png,jpg,jpeg,webp,pdf',
            'LOG_LEVEL': 'INFO',
            'MIN_BODY_LENGTH': '4',
            'DEDUP_PREFIX_LENGTH': '20',
            'STRICT_MODE': 'false',
            'DEFAULT_AUTHOR': 'Anonymous'
        }

        for var_name in credential_vars:
            value = os.getenv(var_name, '').strip()
            self._config[var_name] = value or None

        for var_name, default_value in optional_vars.items():
            self._config[var_name] = os.getenv(var_name, default_value)

        self._config['LOG_LEVEL'] = self._config['LOG_LEVEL'].upper()
        self._config['STRICT_MODE'] = str(self._config['STRICT_MODE']).strip().lower() in ('true', '1', 'yes')

        # Validate and convert numeric values
        self._validate_numeric_configs()

    def _validate_numeric_configs(self) -> None:
        """Validate and convert numeric configuration values."""
        numeric_configs = {
            'MAX_RETRIES': int,
            'RETRY_DELAY': float,
            'REQUEST_TIMEOUT': int,
            'MAX_FILE_SIZE_MB': int,
            'MIN_BODY_LENGTH': int,
            'DEDUP_PREFIX_LENGTH': int
        }

        for config_name, config_type in numeric_configs.items():
            try:
                self._config[config_name] = config_type(self._config[config_name])
            except ValueError as e:
                raise ConfigurationError(
                    f"Invalid value for {config_name}: {self._config[config_name]}. "
                    f"Expected {config_type.__name__}."
                ) from e

        for config_name in ('MIN_BODY_LENGTH', 'DEDUP_PREFIX_LENGTH'):
            if self._config[config_name] < 1:
                raise ConfigurationError(
                    f"Invalid value for {config_name}: {self._config[config_name]}. Must be at least 1."
                )

    def has_vision_credentials(self) -> bool:
        """Check whether any Google Vision credential is configured."""
        return bool(self._config['GOOGLE_VISION_API_KEY'] or self._config['GOOGLE_VISION_ACCESS_TOKEN'])

    def get_auth_method(self) -> str:
        """
        Get the authentication method used for Google Vision requests.

        Returns:
            str: "Access Token", "API Key" or "Not Configured"
        """
        if self._config['GOOGLE_VISION_ACCESS_TOKEN']:
            return 'Access Token'
        if self._config['GOOGLE_VISION_API_KEY']:
            return 'API Key'
        return 'Not Configured'

    def get_vision_credentials(self) -> Tuple[str, str]:
        """
        Get the Google Vision credential and its kind.

        Returns:
            Tuple of (auth_method, credential)

        Raises:
            ConfigurationError: If neither an API key nor an access token is set
        """
        if self._config['GOOGLE_VISION_ACCESS_TOKEN']:
            return 'Access Token', self._config['GOOGLE_VISION_ACCESS_TOKEN']
        if self._config['GOOGLE_VISION_API_KEY']:
            return 'API Key', self._config['GOOGLE_VISION_API_KEY']
        raise ConfigurationError(
            "Google Vision API not configured. Set GOOGLE_VISION_API_KEY or "
            "GOOGLE_VISION_ACCESS_TOKEN in your .env file or environment."
        )

    def get_api_url(self) -> str:
        """
        Get the Google Vision annotate endpoint.

        Returns:
            str: Endpoint URL
        """
        return self._config['GOOGLE_VISION_API_URL']

    def get_max_retries(self) -> int:
        """
        Get the maximum number of API request retries.

        Returns:
            int: Maximum retry attempts
        """
        return self._config['MAX_RETRIES']

    def get_retry_delay(self) -> float:
        """
        Get the base delay for retry attempts in seconds.

        Returns:
            float: Base retry delay in seconds
        """
        return self._config['RETRY_DELAY']

    def get_request_timeout(self) -> int:
        """
        Get the API request timeout in seconds.

        Returns:
            int: Request timeout in seconds
        """
        return self._config['REQUEST_TIMEOUT']

    def get_max_file_size_mb(self) -> int:
        """
        Get the maximum allowed input file size in megabytes.

        Returns:
            int: Maximum file size in MB
        """
        return self._config['MAX_FILE_SIZE_MB']

    def get_supported_formats(self) -> list[str]:
        """
        Get the list of supported file formats.

        Returns:
            list[str]: List of supported file extensions (lowercase, no dot)
        """
        formats_str = self._config['SUPPORTED_FORMATS']
        return [fmt.strip().lower().lstrip('.') for fmt in formats_str.split(',') if fmt.strip()]

    def get_log_level(self) -> str:
        """
        Get the logging level.

        Returns:
            str: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        """
        return self._config['LOG_LEVEL']

    def get_default_author(self) -> str:
        return self._config['DEFAULT_AUTHOR']

    def is_strict_mode(self) -> bool:
        return self._config['STRICT_MODE']

    def get_parser_settings(self, strict: Optional[bool] = None) -> ParserSettings:
        """
        Build parser settings from configuration.

        Args:
            strict: Override for STRICT_MODE (e.g. from a CLI flag)

        Returns:
            ParserSettings
        """
        return ParserSettings(
            min_body_length=self._config['MIN_BODY_LENGTH'],
            dedup_prefix_length=self._config['DEDUP_PREFIX_LENGTH'],
            strict=self.is_strict_mode() if strict is None else strict
        )

    def validate_api_key(self) -> bool:
        """
        Validate that the configured Vision credential looks usable.

        Returns:
            bool: True if a credential appears valid, False otherwise
        """
        if not self.has_vision_credentials():
            return False

        _, credential = self.get_vision_credentials()

        # Basic validation - check if it's not empty and has reasonable length
        if len(credential.strip()) < 10:
            return False

        # Check for common placeholder values
        placeholder_values = ['your_api_key', 'api_key_here', 'replace_me', 'xxx']
        if credential.lower() in placeholder_values:
            return False

        return True

    def get_all_config(self) -> dict:
        """
        Get all configuration values (excluding sensitive data).

        Returns:
            dict: All configuration values with credentials masked
        """
        config_copy = self._config.copy()
        # Mask sensitive information
        for key in ('GOOGLE_VISION_API_KEY', 'GOOGLE_VISION_ACCESS_TOKEN'):
            secret = config_copy.get(key)
            if secret:
                config_copy[key] = f"{secret[:4]}...{secret[-4:]}" if len(secret) > 8 else "***"

        return config_copy
