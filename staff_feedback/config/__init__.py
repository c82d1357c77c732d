"""
Configuration management for the staff feedback form.
"""
from .config_manager import ConfigManager, ConfigurationError

__all__ = ['ConfigManager', 'ConfigurationError']
