"""Configuration validation service."""

import os
import shlex
import shutil
from typing import Optional

from zpool_influxdb.config.settings import Settings
from zpool_influxdb.logging_config import get_logger

logger = get_logger(__name__)


class ConfigurationError(Exception):
    """Raised when configuration validation fails."""

    def __init__(self, message: str, suggestion: Optional[str] = None):
        """
        Initialize configuration error.

        Args:
            message: Error message
            suggestion: Optional suggestion for fixing the issue
        """
        self.message = message
        self.suggestion = suggestion
        full_message = message
        if suggestion:
            full_message = f"{message}\n\nSuggestion: {suggestion}"
        super().__init__(full_message)


def validate_configuration(settings: Settings) -> None:
    """
    Validate exporter configuration on startup.

    Performs validation of:
    - Pool source (document file or command)
    - Log file directory

    Raises:
        ConfigurationError: If any validation fails
    """
    logger.debug("Validating configuration...")

    errors = []

    try:
        validate_source_config(settings)
        logger.debug("Pool source configuration validated")
    except ConfigurationError as e:
        errors.append(str(e))

    try:
        validate_log_file(settings)
        logger.debug("Log file configuration validated")
    except ConfigurationError as e:
        errors.append(str(e))

    if errors:
        error_message = "Configuration validation failed:\n\n" + "\n\n".join(
            f"  * {error}" for error in errors
        )
        raise ConfigurationError(
            error_message,
            suggestion="Please review the errors above and fix the configuration before starting.",
        )

    logger.debug("Configuration validation passed")


def validate_source_config(settings: Settings) -> None:
    """
    Validate that exactly one usable pool source is configured.

    Raises:
        ConfigurationError: If the source configuration is invalid
    """
    if settings.source_file is None and not settings.source_command:
        raise ConfigurationError(
            "No pool source configured",
            suggestion=(
                "Pass --source-file PATH or --source-command CMD,\n"
                "or set ZPOOL_INFLUXDB_SOURCE_FILE / ZPOOL_INFLUXDB_SOURCE_COMMAND"
            ),
        )

    if settings.source_file is not None:
        path = settings.source_file
        if not path.is_file():
            raise ConfigurationError(
                f"Pool document '{path}' does not exist",
                suggestion="Check the path or generate the document before starting",
            )
        if not os.access(path, os.R_OK):
            raise ConfigurationError(
                f"Pool document '{path}' is not readable",
                suggestion=f"Fix permissions with: chmod 644 {path}",
            )

    if settings.source_command:
        try:
            args = shlex.split(settings.source_command)
        except ValueError as e:
            raise ConfigurationError(
                f"Cannot parse source command '{settings.source_command}': {e}",
                suggestion="Check the quoting of the command",
            ) from e
        if not args or shutil.which(args[0]) is None:
            program = args[0] if args else ""
            raise ConfigurationError(
                f"Source command '{program}' not found",
                suggestion="Use an absolute path or make sure the command is on PATH",
            )


def validate_log_file(settings: Settings) -> None:
    """
    Validate the log file directory is writable.

    Raises:
        ConfigurationError: If the log directory is invalid
    """
    if settings.log_file is None:
        return

    log_dir = settings.log_file.parent
    if not log_dir.exists():
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
            logger.info("Created log directory: %s", log_dir)
        except (OSError, PermissionError) as e:
            raise ConfigurationError(
                f"Cannot create log directory '{log_dir}': {e}",
                suggestion=(
                    f"Create the directory manually: mkdir -p {log_dir}\n"
                    f"Or set ZPOOL_INFLUXDB_LOG_FILE to a writable path"
                ),
            ) from e

    if not os.access(log_dir, os.W_OK):
        raise ConfigurationError(
            f"Log directory '{log_dir}' is not writable",
            suggestion=(
                f"Fix permissions with: chmod 755 {log_dir}\n"
                f"Or change ownership: chown -R $(id -u):$(id -g) {log_dir}"
            ),
        )
