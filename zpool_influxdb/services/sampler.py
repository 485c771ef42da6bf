"""Sampling pass: one snapshot per pool, every measurement in a fixed order."""

import sys
import time
from typing import Callable, Iterable, List, Optional, TextIO, Tuple

from zpool_influxdb.config import Settings
from zpool_influxdb.errors import (
    EXIT_NO_SAMPLE,
    EXIT_OK,
    MissingStatError,
    MissingVdevTreeError,
    PoolRefreshError,
    StatsExtractionError,
)
from zpool_influxdb.logging_config import get_logger
from zpool_influxdb.models import PoolSnapshot
from zpool_influxdb.services.line_protocol import LineProtocolFormatter
from zpool_influxdb.services.pool_state import StateNamer, zpool_state_to_name
from zpool_influxdb.services.stat_visitors import (
    LatencyHistogramVisitor,
    PoolSummaryVisitor,
    ScanStatusVisitor,
    SizeHistogramVisitor,
    StatVisitor,
    TopLevelQueueVisitor,
    VdevQueueVisitor,
)
from zpool_influxdb.services.tree_walker import walk_tree
from zpool_influxdb.sources.base import PoolHandle, PoolSource

logger = get_logger(__name__)

# (visitor, descend into children)
Stage = Tuple[StatVisitor, bool]


class Sampler:
    """Writes the line protocol records of every pool of a source.

    Note: a broken pool can make the source hang indefinitely; there is no
    timeout at this level.
    """

    def __init__(
        self,
        settings: Settings,
        stream: Optional[TextIO] = None,
        clock: Callable[[], int] = time.time_ns,
        state_namer: StateNamer = zpool_state_to_name,
    ):
        self.settings = settings
        self.stream = stream if stream is not None else sys.stdout
        self.clock = clock
        self.state_namer = state_namer
        self.formatter = LineProtocolFormatter(support_uint64=settings.support_uint64)

    def stages(self, snapshot: PoolSnapshot) -> List[Stage]:
        """Visitors of one pool, in emission order."""
        stages: List[Stage] = [
            (PoolSummaryVisitor(self.state_namer), False),
            (ScanStatusVisitor(snapshot.scan), False),
            (TopLevelQueueVisitor(), False),
        ]
        if not self.settings.no_histograms:
            sum_buckets = self.settings.sum_histogram_buckets
            include_trim = self.settings.include_trim
            stages.extend(
                [
                    (LatencyHistogramVisitor(sum_buckets, include_trim), True),
                    (SizeHistogramVisitor(sum_buckets, include_trim), True),
                    (VdevQueueVisitor(), False),
                ]
            )
        return stages

    def sample_pool(self, handle: PoolHandle) -> int:
        """
        Sample one pool and write its records.

        Returns:
            0 on success, otherwise the code of the error that aborted the pool
        """
        pool_filter = self.settings.pool_name
        if pool_filter is not None and handle.name != pool_filter:
            logger.debug(f"Skipping pool {handle.name}")
            return EXIT_OK

        try:
            handle.refresh()
        except PoolRefreshError as e:
            logger.error(f"Cannot refresh stats for pool {handle.name}: {e}")
            return e.code

        timestamp = self.clock()
        snapshot = handle.get_snapshot()

        root = snapshot.vdev_tree
        try:
            if root is None:
                raise MissingVdevTreeError(f"pool {snapshot.name} has no vdev tree")
            if root.stats is None:
                raise MissingStatError("vdev_stats")
        except StatsExtractionError as e:
            logger.error(f"Cannot read pool {snapshot.name}: {e}")
            return e.code

        # if any stage fails, skip the rest
        for visitor, descend in self.stages(snapshot):
            try:
                records = list(
                    walk_tree(
                        visitor,
                        root,
                        snapshot.name,
                        None,
                        timestamp,
                        descend=descend,
                        max_depth=self.settings.max_tree_depth,
                    )
                )
            except StatsExtractionError as e:
                logger.error(f"{visitor.measurement} failed for pool {snapshot.name}: {e}")
                return e.code
            self.formatter.write(records, self.stream)
        return EXIT_OK

    def sample(self, source: PoolSource) -> int:
        """
        Run one sampling pass over every pool of ``source``.

        A failing pool does not stop the other pools.

        Returns:
            0 if every pool succeeded, otherwise the first error code
        """
        result = EXIT_OK
        try:
            for handle in source.iter_pools():
                with handle:
                    code = self.sample_pool(handle)
                if code != EXIT_OK and result == EXIT_OK:
                    result = code
        except PoolRefreshError as e:
            logger.error(f"Cannot enumerate pools: {e}")
            if result == EXIT_OK:
                result = e.code
        return result

    def run_execd(self, source: PoolSource, lines: Iterable[str]) -> int:
        """
        Resident mode: one sampling pass per input line, until input ends.

        Returns:
            Result of the last pass, or 8 when no line was received
        """
        result = EXIT_NO_SAMPLE
        for _ in lines:
            result = self.sample(source)
            self.stream.flush()
        return result
