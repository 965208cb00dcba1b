"""
=============================================
Configuration management for the query builder.
=============================================

Loads configuration from environment variables (.env file) and provides
a centralized Config singleton for application-wide access.

The configuration system covers:
- Database connection settings used to build the default executor
- Logging settings used by core.logger.setup_logging()

A full DATABASE_URL always takes precedence over the individual
POSTGRES_* parts, which makes it easy to point the builder at SQLite
or any other SQLAlchemy-supported backend.

Example:
    >>> from core.config import config
    >>>
    >>> # Database connection
    >>> url = config.get_connection_string()
    >>>
    >>> # Access individual settings
    >>> print(f"Host: {config.db_host}, Port: {config.db_port}")
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from urllib.parse import quote_plus

from dotenv import load_dotenv

# Load environment variables from .env file
env_path = Path(__file__).parent.parent / '.env'
load_dotenv(dotenv_path=env_path)


def _env_flag(name: str, default: bool) -> bool:
    """Read a boolean flag from the environment."""
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


@dataclass
class DatabaseConfig:
    """Database configuration settings.

    Attributes:
        driver: SQLAlchemy driver name (e.g. postgresql, sqlite)
        host: Database server hostname or IP address
        port: Database server port number
        user: Database username
        password: Database password
        database: Database name
        url: Full connection URL; overrides all other fields when set
    """

    driver: str
    host: str
    port: int
    user: str
    password: str
    database: str
    url: Optional[str] = None

    def get_connection_string(self) -> str:
        """Get the SQLAlchemy connection string.

        Returns:
            DATABASE_URL when configured, otherwise a URL assembled from
            the individual settings with the password URL-quoted
        """
        if self.url:
            return self.url
        return (
            f"{self.driver}://{self.user}:{quote_plus(self.password)}"
            f"@{self.host}:{self.port}/{self.database}"
        )


@dataclass
class LoggingConfig:
    """Logging configuration settings.

    Attributes:
        level: Root log level (DEBUG/INFO/WARNING/ERROR/CRITICAL)
        log_file: Optional log file name; no file output when unset
        use_colors: Use the colored console formatter
    """

    level: str
    log_file: Optional[str]
    use_colors: bool


class Config:
    """Centralized configuration manager.

    Attributes:
        db: DatabaseConfig instance with database connection settings
        logging: LoggingConfig instance with logging settings

    Example:
        >>> config = Config()
        >>> url = config.get_connection_string()
        >>> print(f"Connecting to {config.db_host}:{config.db_port}")
    """

    def __init__(self):
        """Initialize configuration from environment variables."""
        self.db = DatabaseConfig(
            driver=os.getenv('DB_DRIVER', 'postgresql'),
            host=os.getenv('POSTGRES_HOST', 'localhost'),
            port=int(os.getenv('POSTGRES_PORT', '5432')),
            user=os.getenv('POSTGRES_USER', 'postgres'),
            password=os.getenv('POSTGRES_PASSWORD', ''),
            database=os.getenv('POSTGRES_DB', 'postgres'),
            url=os.getenv('DATABASE_URL') or None
        )

        self.logging = LoggingConfig(
            level=os.getenv('LOG_LEVEL', 'INFO'),
            log_file=os.getenv('LOG_FILE') or None,
            use_colors=_env_flag('LOG_COLORS', True)
        )

    @property
    def db_host(self) -> str:
        """Get database server hostname."""
        return self.db.host

    @property
    def db_port(self) -> int:
        """Get database server port number."""
        return self.db.port

    @property
    def db_user(self) -> str:
        """Get database username."""
        return self.db.user

    @property
    def db_password(self) -> str:
        """Get database password."""
        return self.db.password

    @property
    def db_name(self) -> str:
        """Get database name."""
        return self.db.database

    @property
    def log_level(self) -> str:
        """Get configured log level."""
        return self.logging.level

    def get_connection_string(self) -> str:
        """Get database connection string.

        Returns:
            SQLAlchemy-compatible connection string
        """
        return self.db.get_connection_string()


# Global configuration instance
config = Config()
