"""Statistics extraction, aggregation and formatting services."""

from zpool_influxdb.services.histogram import HistogramSet, reduce_histograms
from zpool_influxdb.services.line_protocol import LineProtocolFormatter, escape_string
from zpool_influxdb.services.sampler import Sampler
from zpool_influxdb.services.scan_progress import ScanProgress, ScanProgressCalculator
from zpool_influxdb.services.tree_walker import walk_tree
from zpool_influxdb.services.vdev_naming import vdev_name, vdev_tags

__all__ = [
    "HistogramSet",
    "LineProtocolFormatter",
    "Sampler",
    "ScanProgress",
    "ScanProgressCalculator",
    "escape_string",
    "reduce_histograms",
    "vdev_name",
    "vdev_tags",
    "walk_tree",
]
