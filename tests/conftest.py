"""Pytest configuration and shared fixtures."""

import io
import json
from typing import Dict, List

import pytest

from zpool_influxdb.config import Settings, reset_settings
from zpool_influxdb.models import DeviceNode, ScanState
from zpool_influxdb.services.stat_visitors import (
    LATENCY_SERIES,
    LATENCY_TRIM_SERIES,
    QUEUE_GAUGES,
    SIZE_SERIES,
    SIZE_TRIM_SERIES,
)

HISTOGRAM_LENGTH = 16
SAMPLE_TIMESTAMP = 1_700_000_000_123_456_789


def build_extended_stats(length: int = HISTOGRAM_LENGTH, scale: int = 1) -> Dict:
    """Flat vdev_stats_ex mapping with every histogram and queue gauge."""
    stats: Dict = {}
    all_series = LATENCY_SERIES + LATENCY_TRIM_SERIES + SIZE_SERIES + SIZE_TRIM_SERIES
    for offset, series in enumerate(all_series):
        stats[series.stat_name] = [(bucket + offset) * scale for bucket in range(length)]
    for offset, (stat_name, _) in enumerate(QUEUE_GAUGES):
        stats[stat_name] = offset * scale
    return stats


def build_vdev_stats(alloc: int = 1024, space: int = 4096) -> Dict:
    """vdev_stats mapping of a healthy vdev."""
    return {
        "state": 7,
        "aux": 0,
        "alloc": alloc,
        "space": space,
        "read_bytes": 100,
        "write_bytes": 200,
        "read_ops": 10,
        "write_ops": 20,
        "read_errors": 1,
        "write_errors": 2,
        "checksum_errors": 3,
        "fragmentation": 4,
    }


def build_tree_data() -> Dict:
    """root -> mirror-0 -> (disk-0, disk-1), root -> disk-1 (log)."""
    return {
        "type": "root",
        "id": 0,
        "vdev_stats": build_vdev_stats(),
        "vdev_stats_ex": build_extended_stats(),
        "children": [
            {
                "type": "mirror",
                "id": 0,
                "vdev_stats": build_vdev_stats(),
                "vdev_stats_ex": build_extended_stats(),
                "children": [
                    {
                        "type": "disk",
                        "id": 0,
                        "path": "/dev/disk/by-id/ata 1",
                        "vdev_stats": build_vdev_stats(),
                        "vdev_stats_ex": build_extended_stats(),
                    },
                    {
                        "type": "disk",
                        "id": 1,
                        "path": "/dev/sdb1",
                        "vdev_stats": build_vdev_stats(),
                        "vdev_stats_ex": build_extended_stats(),
                    },
                ],
            },
            {
                "type": "disk",
                "id": 1,
                "path": "/dev/nvme0n1",
                "vdev_stats": build_vdev_stats(),
                "vdev_stats_ex": build_extended_stats(),
            },
        ],
    }


def build_scan_data(**overrides) -> Dict:
    """scan_stats mapping of a finished scrub."""
    data = {
        "func": 1,
        "state": 2,
        "start_time": 1_699_990_000,
        "end_time": 1_699_999_000,
        "to_examine": 1000,
        "examined": 1000,
        "to_process": 1000,
        "processed": 1000,
        "errors": 0,
        "pass_exam": 1000,
        "pass_start": 1_699_990_000,
    }
    data.update(overrides)
    return data


def lines_of(stream: io.StringIO) -> List[str]:
    return stream.getvalue().splitlines()


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch, tmp_path):
    """Isolate tests from cached settings, config files and environment."""
    import os

    for key in list(os.environ):
        if key.startswith("ZPOOL_INFLUXDB_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def settings() -> Settings:
    """Default settings."""
    return Settings()


@pytest.fixture
def sample_tree() -> DeviceNode:
    """A small vdev tree with full statistics on every node."""
    return DeviceNode.model_validate(build_tree_data())


@pytest.fixture
def sample_scan() -> ScanState:
    return ScanState.model_validate(build_scan_data())


@pytest.fixture
def sample_document() -> Dict:
    """Pool document with two pools."""
    return {
        "pools": {
            "tank": {"vdev_tree": build_tree_data(), "scan_stats": build_scan_data()},
            "backup pool": {"vdev_tree": build_tree_data()},
        }
    }


@pytest.fixture
def document_file(tmp_path, sample_document):
    """The sample document written as JSON."""
    path = tmp_path / "pools.json"
    path.write_text(json.dumps(sample_document), encoding="utf-8")
    return path
