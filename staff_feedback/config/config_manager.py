"""
Configuration manager for the staff feedback form.
"""
import os
from typing import Optional
from dotenv import load_dotenv


class ConfigurationError(Exception):
    """Exception raised for configuration-related errors."""
    pass


class ConfigManager:
    """
    Manages environment variables and system configuration for the staff feedback form.
    """

    MIRROR_BACKENDS = ('excel', 'webhook', 'none')

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
        """Load and validate all required configuration values."""
        # Required environment variables
        required_vars = {
            'SUPABASE_URL': 'Base URL of the Supabase project holding staff and feedback tables',
            'SUPABASE_KEY': 'Supabase API key used for the REST interface'
        }

        # Optional environment variables with defaults
        optional_vars = {
            'STAFF_TABLE': 'dados_professores',
            'FEEDBACK_TABLE': 'feedback_professores',
            'REQUEST_TIMEOUT': '30',
            'MIRROR_BACKEND': 'excel',
            'MIRROR_WORKBOOK': 'output/feedback_mirror.xlsx',
            'MIRROR_WEBHOOK_URL': '',
            'MIRROR_TIMEOUT': '10',
            'REQUIRE_AUTH': 'false',
            'LOGIN_URL': '',
            'ANONYMOUS_USER_ID': 'anonymous',
            'ANONYMOUS_USER_NAME': 'Anonymous',
            'FLASK_SECRET_KEY': '',
            'FORM_SESSION_LIMIT': '500',
            'FORM_SESSION_TTL': '3600',
            'LOG_LEVEL': 'INFO'
        }

        # Load required variables
        for var_name, description in required_vars.items():
            value = os.getenv(var_name)
            if not value:
                raise ConfigurationError(
                    f"Required environment variable '{var_name}' is not set. "
                    f"This variable is needed for: {description}"
                )
            self._config[var_name] = value.strip()

        # Load optional variables with defaults
        for var_name, default_value in optional_vars.items():
            self._config[var_name] = os.getenv(var_name, default_value).strip()

        self._validate_numeric_configs()
        self._validate_mirror_config()

    def _validate_numeric_configs(self) -> None:
        """Validate and convert numeric configuration values."""
        numeric_configs = {
            'REQUEST_TIMEOUT': float,
            'MIRROR_TIMEOUT': float,
            'FORM_SESSION_LIMIT': int,
            'FORM_SESSION_TTL': float
        }

        for config_name, config_type in numeric_configs.items():
            try:
                self._config[config_name] = config_type(self._config[config_name])
            except ValueError as e:
                raise ConfigurationError(
                    f"Invalid value for {config_name}: {self._config[config_name]}. "
                    f"Expected {config_type.__name__}."
                ) from e

    def _validate_mirror_config(self) -> None:
        """Check the spreadsheet mirror backend and its required settings."""
        backend = self._config['MIRROR_BACKEND'].lower()
        if backend not in self.MIRROR_BACKENDS:
            raise ConfigurationError(
                f"Invalid value for MIRROR_BACKEND: {backend}. "
                f"Expected one of: {', '.join(self.MIRROR_BACKENDS)}"
            )
        if backend == 'webhook' and not self._config['MIRROR_WEBHOOK_URL']:
            raise ConfigurationError(
                "MIRROR_BACKEND is 'webhook' but MIRROR_WEBHOOK_URL is not set"
            )
        self._config['MIRROR_BACKEND'] = backend

    def get_supabase_url(self) -> str:
        """
        Get the Supabase project URL without a trailing slash.

        Returns:
            str: Base URL of the Supabase project
        """
        return self._config['SUPABASE_URL'].rstrip('/')

    def get_supabase_key(self) -> str:
        """Get the Supabase API key."""
        return self._config['SUPABASE_KEY']

    def get_staff_table(self) -> str:
        """Get the name of the table holding staff records."""
        return self._config['STAFF_TABLE']

    def get_feedback_table(self) -> str:
        """Get the name of the table receiving feedback rows."""
        return self._config['FEEDBACK_TABLE']

    def get_request_timeout(self) -> float:
        """
        Get the store request timeout in seconds.

        Returns:
            float: Request timeout in seconds
        """
        return self._config['REQUEST_TIMEOUT']

    def get_mirror_backend(self) -> str:
        """
        Get the spreadsheet mirror backend.

        Returns:
            str: One of 'excel', 'webhook' or 'none'
        """
        return self._config['MIRROR_BACKEND']

    def get_mirror_workbook(self) -> str:
        """Get the path of the Excel workbook used as mirror."""
        return self._config['MIRROR_WORKBOOK']

    def get_mirror_webhook_url(self) -> str:
        """Get the URL rows are posted to when the webhook mirror is used."""
        return self._config['MIRROR_WEBHOOK_URL']

    def get_mirror_timeout(self) -> float:
        return self._config['MIRROR_TIMEOUT']

    def is_auth_required(self) -> bool:
        """
        Check whether submissions require an authenticated session.

        Returns:
            bool: True when REQUIRE_AUTH is set to a truthy value
        """
        return self._config['REQUIRE_AUTH'].lower() in ('1', 'true', 'yes', 'on')

    def get_login_url(self) -> str:
        return self._config['LOGIN_URL']

    def get_form_session_limit(self) -> int:
        """
        Get the number of open forms kept in memory.

        Returns:
            int: Maximum forms held; the least recently used is evicted first
        """
        return self._config['FORM_SESSION_LIMIT']

    def get_form_session_ttl(self) -> float:
        """Get the idle time in seconds after which an open form is discarded."""
        return self._config['FORM_SESSION_TTL']

    def get_anonymous_identity(self) -> tuple:
        """
        Get the identity recorded when nobody is signed in.

        Returns:
            tuple: (user_id, display_name)
        """
        return self._config['ANONYMOUS_USER_ID'], self._config['ANONYMOUS_USER_NAME']

    def get_secret_key(self) -> str:
        """
        Get the Flask session secret, generating a random one when unset.

        Returns:
            str: Secret key for signing session cookies
        """
        if not self._config['FLASK_SECRET_KEY']:
            self._config['FLASK_SECRET_KEY'] = os.urandom(24).hex()
        return self._config['FLASK_SECRET_KEY']

    def get_log_level(self) -> str:
        """
        Get the logging level.

        Returns:
            str: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        """
        return self._config['LOG_LEVEL']

    def get_all_config(self) -> dict:
        """
        Get all configuration values (excluding sensitive data).

        Returns:
            dict: All configuration values with secrets masked
        """
        config_copy = self._config.copy()
        # Mask sensitive information
        for secret_name in ('SUPABASE_KEY', 'FLASK_SECRET_KEY'):
            secret = config_copy.get(secret_name)
            if secret:
                config_copy[secret_name] = f"{secret[:4]}...{secret[-4:]}" if len(secret) > 8 else "***"

        return config_copy
