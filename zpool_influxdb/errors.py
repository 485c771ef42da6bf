"""Exception hierarchy for the exporter.

Every error carries a numeric ``code`` that becomes the process exit status
when it aborts a pool's sampling pass.
"""

from typing import Optional

# Exit codes, compatible with the C zpool_influxdb tool
EXIT_OK = 0
EXIT_REFRESH_FAILED = 1
EXIT_NO_VDEV_TREE = 2
EXIT_MISSING_STAT = 3
EXIT_HISTOGRAM_SHAPE = 4
EXIT_NO_EXTENDED_STATS = 6
EXIT_NO_SAMPLE = 8


class ZpoolInfluxError(Exception):
    """Base class for all exporter errors."""

    code = 1

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class StatsExtractionError(ZpoolInfluxError):
    """A record could not be built from a node's statistics."""

    code = EXIT_MISSING_STAT


class MissingStatError(StatsExtractionError):
    """A required counter, gauge or histogram is absent from a vdev."""

    def __init__(self, stat_name: str, code: int = EXIT_MISSING_STAT):
        super().__init__(f"can't get {stat_name}", code=code)
        self.stat_name = stat_name


class HistogramShapeError(StatsExtractionError):
    """Histogram arrays of one set differ in length."""

    code = EXIT_HISTOGRAM_SHAPE


class MissingVdevTreeError(StatsExtractionError):
    """The pool configuration has no vdev tree."""

    code = EXIT_NO_VDEV_TREE


class PoolRefreshError(ZpoolInfluxError):
    """Refreshing a pool's live statistics failed."""

    code = EXIT_REFRESH_FAILED


class SourceUnavailableError(ZpoolInfluxError):
    """The pool introspection source cannot be used at all."""

    code = 1
