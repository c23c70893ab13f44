"""
Logging setup for Orthros.

One loguru logger for the whole package, with two optional sinks:
- stderr, for humans (off in machine mode)
- a rotating file under .orthros/logs/ (opt-in)

The level and file sink come from the `logging` section of the user config
once it is loaded; environment variables override it.
"""

import os
import sys
from typing import Optional

from loguru import logger

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan> - <level>{message}</level>"
)

_logging_configured = False


def _env_flag(name: str) -> Optional[bool]:
    value = os.getenv(name)
    if value is None:
        return None
    return value.lower() in ("1", "true", "yes")


def setup_logging(level=None, suppress_console=None, enable_file_logging=None, force=False):
    """
    Configure the global logger.

    Args:
        level: Minimum level for both sinks. None reads ORTHROS_LOG_LEVEL,
            defaulting to INFO.
        suppress_console: Drop the stderr sink. None reads ORTHROS_MACHINE_MODE.
        enable_file_logging: Add the rotating file sink. None reads
            ORTHROS_FILE_LOGGING.
        force: Reconfigure even if logging was already set up.
    """
    global _logging_configured

    if _logging_configured and not force:
        return
    _logging_configured = True

    logger.remove()
    requested = level or os.getenv("ORTHROS_LOG_LEVEL") or "INFO"
    level = str(requested).upper()
    unknown_level = level not in LOG_LEVELS
    if unknown_level:
        level = "INFO"

    if suppress_console is None:
        suppress_console = bool(_env_flag("ORTHROS_MACHINE_MODE"))
    if not suppress_console:
        logger.add(sys.stderr, level=level, format=CONSOLE_FORMAT, colorize=True)

    if enable_file_logging is None:
        enable_file_logging = bool(_env_flag("ORTHROS_FILE_LOGGING"))
    if enable_file_logging:
        from orthros.paths import get_paths
        paths = get_paths()
        paths.ensure_dirs()
        logger.add(
            paths.logs_dir / "orthros.log",
            level=level,
            rotation="10 MB",
            retention="7 days",
            catch=True,
        )

    if unknown_level:
        logger.warning(f"Unknown log level '{requested}', using INFO")


def configure_from_config(config, verbose: bool = False, suppress_console: Optional[bool] = None) -> None:
    """
    Reconfigure logging from the `logging` section of a UserConfig.

    Environment variables win over config values; `verbose` forces DEBUG
    on stderr.

    Args:
        config: Loaded UserConfig (anything with a dot-key `get`)
        verbose: Log DEBUG and above to stderr
        suppress_console: Drop the stderr sink (machine mode)
    """
    level = os.getenv("ORTHROS_LOG_LEVEL") or config.get("logging.level", "INFO")
    file_logging = _env_flag("ORTHROS_FILE_LOGGING")
    if file_logging is None:
        file_logging = bool(config.get("logging.file", False))

    if verbose:
        level, suppress_console = "DEBUG", False

    setup_logging(
        level=level,
        suppress_console=suppress_console,
        enable_file_logging=file_logging,
        force=True,
    )


# Configure the logger on import (will check env vars for machine mode)
setup_logging()
