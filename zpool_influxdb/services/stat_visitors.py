"""Stat visitors: turn one vdev node into metric records.

Each visitor produces the records of one measurement for a single node of the
vdev tree. Visitors are either applied to the root only or driven over the
tree by :func:`zpool_influxdb.services.tree_walker.walk_tree`.

A visitor returns a complete list of records or raises; it never returns a
partially built record.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from zpool_influxdb.errors import EXIT_NO_EXTENDED_STATS, MissingStatError
from zpool_influxdb.models import DeviceNode, ExtendedStats, MetricRecord, ScanState, VdevStats
from zpool_influxdb.services.histogram import (
    MIN_LATENCY_INDEX,
    MIN_SIZE_INDEX,
    HistogramSeries,
    HistogramSet,
    latency_bucket_label,
    reduce_histograms,
    size_bucket_label,
)
from zpool_influxdb.services.pool_state import StateNamer, zpool_state_to_name
from zpool_influxdb.services.scan_progress import ScanProgressCalculator
from zpool_influxdb.services.vdev_naming import vdev_tags

POOL_MEASUREMENT = "zpool_stats"
SCAN_MEASUREMENT = "zpool_scan_stats"
VDEV_MEASUREMENT = "zpool_vdev_stats"
POOL_LATENCY_MEASUREMENT = "zpool_latency"
POOL_QUEUE_MEASUREMENT = "zpool_vdev_queue"
POOL_IO_SIZE_MEASUREMENT = "zpool_io_size"

LATENCY_SERIES = [
    HistogramSeries("vdev_tot_r_lat_histo", "total_read"),
    HistogramSeries("vdev_tot_w_lat_histo", "total_write"),
    HistogramSeries("vdev_disk_r_lat_histo", "disk_read"),
    HistogramSeries("vdev_disk_w_lat_histo", "disk_write"),
    HistogramSeries("vdev_sync_r_lat_histo", "sync_read"),
    HistogramSeries("vdev_sync_w_lat_histo", "sync_write"),
    HistogramSeries("vdev_async_r_lat_histo", "async_read"),
    HistogramSeries("vdev_async_w_lat_histo", "async_write"),
    HistogramSeries("vdev_scrub_histo", "scrub"),
]
LATENCY_TRIM_SERIES = [HistogramSeries("vdev_trim_histo", "trim")]

SIZE_SERIES = [
    HistogramSeries("vdev_sync_ind_r_histo", "sync_read_ind"),
    HistogramSeries("vdev_sync_ind_w_histo", "sync_write_ind"),
    HistogramSeries("vdev_async_ind_r_histo", "async_read_ind"),
    HistogramSeries("vdev_async_ind_w_histo", "async_write_ind"),
    HistogramSeries("vdev_ind_scrub_histo", "scrub_read_ind"),
    HistogramSeries("vdev_sync_agg_r_histo", "sync_read_agg"),
    HistogramSeries("vdev_sync_agg_w_histo", "sync_write_agg"),
    HistogramSeries("vdev_async_agg_r_histo", "async_read_agg"),
    HistogramSeries("vdev_async_agg_w_histo", "async_write_agg"),
    HistogramSeries("vdev_agg_scrub_histo", "scrub_read_agg"),
]
SIZE_TRIM_SERIES = [
    HistogramSeries("vdev_ind_trim_histo", "trim_write_ind"),
    HistogramSeries("vdev_agg_trim_histo", "trim_write_agg"),
]

# ZIO scheduler queue gauges: (extended stats name, short name)
QUEUE_GAUGES = [
    ("vdev_sync_r_active_queue", "sync_r_active"),
    ("vdev_sync_w_active_queue", "sync_w_active"),
    ("vdev_async_r_active_queue", "async_r_active"),
    ("vdev_async_w_active_queue", "async_w_active"),
    ("vdev_async_scrub_active_queue", "async_scrub_active"),
    ("vdev_sync_r_pend_queue", "sync_r_pend"),
    ("vdev_sync_w_pend_queue", "sync_w_pend"),
    ("vdev_async_r_pend_queue", "async_r_pend"),
    ("vdev_async_w_pend_queue", "async_w_pend"),
    ("vdev_async_scrub_pend_queue", "async_scrub_pend"),
]


def require_extended_stats(node: DeviceNode) -> ExtendedStats:
    """Extended stats of ``node``, or MissingStatError (code 6)."""
    if node.extended_stats is None:
        raise MissingStatError("vdev_stats_ex", code=EXIT_NO_EXTENDED_STATS)
    return node.extended_stats


def require_stats(node: DeviceNode) -> VdevStats:
    """Counter block of ``node``, or MissingStatError (code 3)."""
    if node.stats is None:
        raise MissingStatError("vdev_stats")
    return node.stats


class StatVisitor(ABC):
    """Produces the records of one measurement for a vdev node."""

    measurement: str = ""

    @abstractmethod
    def produce(
        self,
        node: DeviceNode,
        pool_name: str,
        parent_name: Optional[str],
        timestamp: int,
    ) -> List[MetricRecord]:
        """
        Build the records for ``node``.

        Args:
            node: vdev being visited
            pool_name: Unescaped pool name
            parent_name: Structural name of the parent vdev, None at the root
            timestamp: Sample time in nanoseconds since the epoch

        Raises:
            StatsExtractionError: If a required statistic is missing
        """


class PoolSummaryVisitor(StatVisitor):
    """Pool capacity, I/O and error counters, from the root vdev."""

    measurement = POOL_MEASUREMENT

    def __init__(self, state_namer: StateNamer = zpool_state_to_name):
        self.state_namer = state_namer

    def produce(self, node, pool_name, parent_name, timestamp):
        vs = require_stats(node)
        return [
            MetricRecord(
                measurement=self.measurement,
                tags=[("name", pool_name), ("state", self.state_namer(vs.state, vs.aux))],
                fields=[
                    ("alloc", vs.alloc),
                    ("free", vs.free),
                    ("size", vs.space),
                    ("read_bytes", vs.read_bytes),
                    ("read_errors", vs.read_errors),
                    ("read_ops", vs.read_ops),
                    ("write_bytes", vs.write_bytes),
                    ("write_errors", vs.write_errors),
                    ("write_ops", vs.write_ops),
                    ("checksum_errors", vs.checksum_errors),
                    ("fragmentation", vs.fragmentation),
                ],
                timestamp=timestamp,
            )
        ]


class ScanStatusVisitor(StatVisitor):
    """Scrub/resilver progress of the pool.

    Produces nothing when the pool has no valid scan data.
    """

    measurement = SCAN_MEASUREMENT

    def __init__(
        self,
        scan: Optional[ScanState],
        calculator: Optional[ScanProgressCalculator] = None,
    ):
        self.scan = scan
        self.calculator = calculator or ScanProgressCalculator()

    def produce(self, node, pool_name, parent_name, timestamp):
        progress = self.calculator.calculate(self.scan, timestamp // 1_000_000_000)
        if progress is None:
            return []
        return [
            MetricRecord(
                measurement=self.measurement,
                tags=[
                    ("function", progress.function.tag),
                    ("name", pool_name),
                    ("state", progress.state.tag),
                ],
                fields=progress.fields(),
                timestamp=timestamp,
            )
        ]


class QueueVisitor(StatVisitor):
    """ZIO scheduler queue depths of a vdev.

    Queue stats are gauges that change very rapidly, so any point-in-time
    value is quickly obsolete. Only the top-level vdevs are worth reporting.
    """

    measurement = POOL_QUEUE_MEASUREMENT
    field_suffix = ""

    def tags(self, node: DeviceNode, pool_name: str, parent_name: Optional[str]):
        return [("name", pool_name)] + vdev_tags(node, parent_name)

    def produce(self, node, pool_name, parent_name, timestamp):
        gauges = require_extended_stats(node).gauges
        fields = []
        for stat_name, short_name in QUEUE_GAUGES:
            if stat_name not in gauges:
                raise MissingStatError(stat_name)
            fields.append((short_name + self.field_suffix, gauges[stat_name]))
        return [
            MetricRecord(
                measurement=self.measurement,
                tags=self.tags(node, pool_name, parent_name),
                fields=fields,
                timestamp=timestamp,
            )
        ]


class VdevQueueVisitor(QueueVisitor):
    """Per-vdev queue depths, walked without descending."""


class TopLevelQueueVisitor(QueueVisitor):
    """Pool-wide queue depths, reported against the root vdev."""

    measurement = VDEV_MEASUREMENT
    field_suffix = "_queue"

    def tags(self, node, pool_name, parent_name):
        return [("name", pool_name), ("vdev", "root")]


class HistogramVisitor(StatVisitor):
    """Reduced histogram rows of a vdev, one record per bucket.

    In many cases the pool-wide view obscures the top-level vdevs; a log,
    special or cache device can behave very differently from the data vdevs,
    so histograms are reported for every vdev in the tree.
    """

    floor_index: int = 0
    base_series: Sequence[HistogramSeries] = ()
    trim_series: Sequence[HistogramSeries] = ()

    def __init__(self, sum_buckets: bool = False, include_trim: bool = True):
        self.sum_buckets = sum_buckets
        self.series = list(self.base_series)
        if include_trim:
            self.series.extend(self.trim_series)

    @abstractmethod
    def bucket_label(self, row) -> str:
        """Boundary label of a reduced bucket row."""

    def produce(self, node, pool_name, parent_name, timestamp):
        ex = require_extended_stats(node)
        histograms = HistogramSet.from_stats(ex.histograms, self.series)
        desc = vdev_tags(node, parent_name)

        records = []
        for row in reduce_histograms(histograms, self.floor_index, self.sum_buckets):
            records.append(
                MetricRecord(
                    measurement=self.measurement,
                    tags=[("le", self.bucket_label(row)), ("name", pool_name)] + desc,
                    fields=list(row.values),
                    timestamp=timestamp,
                )
            )
        return records


class LatencyHistogramVisitor(HistogramVisitor):
    """Latency histograms: ZIO scheduler classes plus disk latency."""

    measurement = POOL_LATENCY_MEASUREMENT
    floor_index = MIN_LATENCY_INDEX
    base_series = LATENCY_SERIES
    trim_series = LATENCY_TRIM_SERIES

    def bucket_label(self, row):
        return latency_bucket_label(row)


class SizeHistogramVisitor(HistogramVisitor):
    """Request size histograms, independent (ind) and aggregated (agg)."""

    measurement = POOL_IO_SIZE_MEASUREMENT
    floor_index = MIN_SIZE_INDEX
    base_series = SIZE_SERIES
    trim_series = SIZE_TRIM_SERIES

    def bucket_label(self, row):
        return size_bucket_label(row)
