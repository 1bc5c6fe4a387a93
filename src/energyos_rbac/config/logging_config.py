"""Centralized logging configuration for energyos-rbac.

Provides consistent, configurable logging with environment-based control
over verbosity and log levels.
"""

import logging
import logging.config
import os
from enum import Enum


class LogLevel(str, Enum):
    """Supported log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogVerbosity(str, Enum):
    """Log verbosity modes."""
    QUIET = "QUIET"      # Only errors and critical
    NORMAL = "NORMAL"    # Standard logging (warnings and above)
    VERBOSE = "VERBOSE"  # Info level logging
    DEBUG = "DEBUG"      # Full debug logging


class LogFormat(str, Enum):
    """Log format options."""
    SIMPLE = "simple"
    DETAILED = "detailed"
    JSON = "json"


def get_log_level_from_verbosity(verbosity: str) -> str:
    """Map verbosity mode to log level."""
    verbosity_map = {
        LogVerbosity.QUIET: LogLevel.ERROR.value,
        LogVerbosity.NORMAL: LogLevel.WARNING.value,
        LogVerbosity.VERBOSE: LogLevel.INFO.value,
        LogVerbosity.DEBUG: LogLevel.DEBUG.value,
    }
    try:
        return verbosity_map[LogVerbosity(verbosity.upper())]
    except ValueError:
        return LogLevel.WARNING.value


class LoggingConfig:
    """Centralized logging configuration manager."""

    # Decision path logs every denial at DEBUG; keep it quiet unless asked
    ACCESS_MODULES = [
        "energyos_rbac.features.permissions.services.access_service",
    ]

    # Modules that should only log errors
    ERROR_ONLY_MODULES = [
        "asyncpg",
        "asyncio",
        "httpx",
        "httpcore",
    ]

    @classmethod
    def build_config(cls) -> dict:
        """Build a ``logging.config.dictConfig`` mapping from environment variables."""
        log_verbosity = os.getenv("LOG_VERBOSITY", "NORMAL").upper()
        log_format = os.getenv("LOG_FORMAT", LogFormat.SIMPLE.value).lower()
        enable_access_logging = os.getenv("ENABLE_ACCESS_LOGGING", "false").lower() == "true"

        # An explicit LOG_LEVEL wins over the verbosity mode
        explicit_level = os.getenv("LOG_LEVEL")
        if explicit_level and explicit_level.upper() in LogLevel.__members__:
            effective_log_level = explicit_level.upper()
        else:
            effective_log_level = get_log_level_from_verbosity(log_verbosity)

        if log_format == LogFormat.JSON.value:
            format_string = '{"time":"%(asctime)s","level":"%(levelname)s","module":"%(name)s","message":"%(message)s"}'
        elif log_format == LogFormat.DETAILED.value:
            format_string = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"
        else:
            format_string = "%(asctime)s - %(levelname)s - %(message)s"

        logging_config = {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": format_string,
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "level": effective_log_level,
                    "formatter": "default",
                    "stream": "ext://sys.stdout",
                },
            },
            "loggers": {
                "energyos_rbac": {
                    "level": effective_log_level,
                    "handlers": ["console"],
                    "propagate": False,
                },
            },
        }

        for module in cls.ERROR_ONLY_MODULES:
            logging_config["loggers"][module] = {
                "level": "ERROR",
                "handlers": ["console"],
                "propagate": False,
            }

        if not enable_access_logging:
            for module in cls.ACCESS_MODULES:
                logging_config["loggers"][module] = {
                    "level": "INFO" if effective_log_level == "DEBUG" else effective_log_level,
                    "handlers": ["console"],
                    "propagate": False,
                }

        return logging_config

    @classmethod
    def configure(cls) -> None:
        """Configure logging based on environment variables."""
        config = cls.build_config()
        logging.config.dictConfig(config)

        logger = logging.getLogger(__name__)
        logger.debug(
            f"Logging configured: level={config['loggers']['energyos_rbac']['level']}"
        )

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """Get a logger for the given module name."""
        return logging.getLogger(name)

    @classmethod
    def set_module_level(cls, module_name: str, level: str) -> None:
        """Set log level for a specific module.

        Args:
            module_name: Name of the module
            level: Log level to set
        """
        logging.getLogger(module_name).setLevel(getattr(logging, level.upper()))


def setup_logging() -> None:
    """Setup logging configuration from environment variables.

    This is the main entry point for configuring logging in the hosting
    service. It should be called once at application startup.
    """
    LoggingConfig.configure()


def get_logger(name: str) -> logging.Logger:
    """Get a configured logger.

    Args:
        name: Module name (usually __name__)

    Returns:
        Configured logger instance
    """
    return LoggingConfig.get_logger(name)
