"""
Configuration management for OCR feedback parser system.
"""
from .config_manager import ConfigManager, ConfigurationError

__all__ = ['ConfigManager', 'ConfigurationError']
