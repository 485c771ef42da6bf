"""Core data models for zpool-influxdb."""

from zpool_influxdb.models.device import UINT64_MAX, DeviceNode, ExtendedStats, VdevStats
from zpool_influxdb.models.metric import FieldValue, MetricRecord
from zpool_influxdb.models.pool import PoolSnapshot
from zpool_influxdb.models.scan import ScanFunction, ScanState, ScanStateValue

__all__ = [
    "UINT64_MAX",
    "DeviceNode",
    "ExtendedStats",
    "VdevStats",
    "FieldValue",
    "MetricRecord",
    "PoolSnapshot",
    "ScanFunction",
    "ScanState",
    "ScanStateValue",
]
