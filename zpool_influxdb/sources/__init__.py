"""Pool introspection sources."""

from zpool_influxdb.config import Settings
from zpool_influxdb.errors import SourceUnavailableError
from zpool_influxdb.sources.base import PoolHandle, PoolSource
from zpool_influxdb.sources.command_source import CommandPoolSource
from zpool_influxdb.sources.document import load_document, parse_pool
from zpool_influxdb.sources.file_source import DocumentPoolHandle, FilePoolSource


def create_source(settings: Settings) -> PoolSource:
    """
    Build the pool source configured in ``settings``.

    Raises:
        SourceUnavailableError: If no source is configured or it cannot be used
    """
    if settings.source_file is not None:
        return FilePoolSource(settings.source_file)
    if settings.source_command:
        return CommandPoolSource(settings.source_command, timeout=settings.source_timeout_seconds)
    raise SourceUnavailableError(
        "No pool source configured. Use --source-file or --source-command, "
        "or set ZPOOL_INFLUXDB_SOURCE_FILE / ZPOOL_INFLUXDB_SOURCE_COMMAND"
    )


__all__ = [
    "CommandPoolSource",
    "DocumentPoolHandle",
    "FilePoolSource",
    "PoolHandle",
    "PoolSource",
    "create_source",
    "load_document",
    "parse_pool",
]
