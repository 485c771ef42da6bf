"""Unit tests for the stat visitors."""

import pytest
from conftest import SAMPLE_TIMESTAMP, build_extended_stats, build_scan_data

from zpool_influxdb.errors import MissingStatError
from zpool_influxdb.models import DeviceNode, ScanState
from zpool_influxdb.services.stat_visitors import (
    HistogramVisitor,
    LatencyHistogramVisitor,
    PoolSummaryVisitor,
    ScanStatusVisitor,
    SizeHistogramVisitor,
    TopLevelQueueVisitor,
    VdevQueueVisitor,
)


class TestPoolSummaryVisitor:
    """Test suite for PoolSummaryVisitor."""

    def test_summary_record(self, sample_tree):
        """Test tags and field order of the pool summary."""
        [record] = PoolSummaryVisitor().produce(sample_tree, "tank", None, SAMPLE_TIMESTAMP)

        assert record.measurement == "zpool_stats"
        assert record.tags == [("name", "tank"), ("state", "ONLINE")]
        assert [name for name, _ in record.fields] == [
            "alloc",
            "free",
            "size",
            "read_bytes",
            "read_errors",
            "read_ops",
            "write_bytes",
            "write_errors",
            "write_ops",
            "checksum_errors",
            "fragmentation",
        ]
        assert record.field("free") == 4096 - 1024
        assert record.timestamp == SAMPLE_TIMESTAMP

    def test_state_lookup_is_injected(self, sample_tree):
        """Test that the state name comes from the supplied lookup."""
        calls = []

        def namer(state, aux):
            calls.append((state, aux))
            return "CUSTOM"

        [record] = PoolSummaryVisitor(namer).produce(sample_tree, "tank", None, 1)
        assert record.tag("state") == "CUSTOM"
        assert calls == [(7, 0)]

    def test_missing_stats(self):
        """Test that a root without counters is a missing-data error."""
        with pytest.raises(MissingStatError) as exc_info:
            PoolSummaryVisitor().produce(DeviceNode(type="root"), "tank", None, 1)
        assert exc_info.value.code == 3


class TestScanStatusVisitor:
    """Test suite for ScanStatusVisitor."""

    def test_scan_record(self, sample_tree, sample_scan):
        """Test tags of the scan record."""
        [record] = ScanStatusVisitor(sample_scan).produce(
            sample_tree, "tank", None, SAMPLE_TIMESTAMP
        )
        assert record.measurement == "zpool_scan_stats"
        assert record.tags == [("function", "scrub"), ("name", "tank"), ("state", "finished")]
        assert record.field("pct_done") == 100.0

    def test_no_scan_record(self, sample_tree):
        """Test that no record is produced without valid scan data."""
        assert ScanStatusVisitor(None).produce(sample_tree, "tank", None, 1) == []
        bogus = ScanState.model_validate(build_scan_data(state=9))
        assert ScanStatusVisitor(bogus).produce(sample_tree, "tank", None, 1) == []

    def test_now_derived_from_timestamp(self, sample_tree):
        """Test that the scan clock is the sample timestamp in seconds."""
        scan = ScanState.model_validate(
            build_scan_data(state=1, pass_start=1_699_999_990, pass_exam=1000, examined=1000)
        )
        [record] = ScanStatusVisitor(scan).produce(
            sample_tree, "tank", None, 1_700_000_000 * 1_000_000_000
        )
        assert record.field("rate") == 100


class TestQueueVisitors:
    """Test suite for the queue depth visitors."""

    def test_top_level_queue(self, sample_tree):
        """Test the pool-wide queue record."""
        [record] = TopLevelQueueVisitor().produce(sample_tree, "tank", None, 1)
        assert record.measurement == "zpool_vdev_stats"
        assert record.tags == [("name", "tank"), ("vdev", "root")]
        names = [name for name, _ in record.fields]
        assert len(names) == 10
        assert names[0] == "sync_r_active_queue"
        assert names[-1] == "async_scrub_pend_queue"

    def test_vdev_queue_tags(self, sample_tree):
        """Test the per-vdev queue record of a leaf."""
        leaf = sample_tree.children[1]
        [record] = VdevQueueVisitor().produce(leaf, "tank", "root", 1)
        assert record.measurement == "zpool_vdev_queue"
        assert record.tags == [("name", "tank"), ("path", "/dev/nvme0n1"), ("vdev", "root/disk-1")]
        assert [name for name, _ in record.fields][:2] == ["sync_r_active", "sync_w_active"]

    def test_missing_gauge(self):
        """Test that a missing gauge aborts the record."""
        stats = build_extended_stats()
        del stats["vdev_async_w_pend_queue"]
        node = DeviceNode.model_validate({"type": "root", "vdev_stats_ex": stats})
        with pytest.raises(MissingStatError) as exc_info:
            VdevQueueVisitor().produce(node, "tank", None, 1)
        assert exc_info.value.stat_name == "vdev_async_w_pend_queue"

    def test_missing_extended_stats(self):
        """Test that a node without extended stats fails with code 6."""
        with pytest.raises(MissingStatError) as exc_info:
            TopLevelQueueVisitor().produce(DeviceNode(type="root"), "tank", None, 1)
        assert exc_info.value.code == 6


class TestHistogramVisitors:
    """Test suite for the latency and size histogram visitors."""

    def test_base_class_is_abstract(self):
        """Test that a histogram visitor needs a bucket label."""
        with pytest.raises(TypeError):
            HistogramVisitor()

    def test_latency_rows(self, sample_tree):
        """Test that 16 latency buckets give six records, the last +Inf."""
        records = LatencyHistogramVisitor().produce(sample_tree, "tank", None, 1)
        assert len(records) == 6
        assert [r.tag("le") for r in records][-1] == "+Inf"
        assert records[0].tags == [("le", "0.000001"), ("name", "tank"), ("vdev", "root")]
        assert [name for name, _ in records[0].fields] == [
            "total_read",
            "total_write",
            "disk_read",
            "disk_write",
            "sync_read",
            "sync_write",
            "async_read",
            "async_write",
            "scrub",
            "trim",
        ]

    def test_latency_without_trim(self, sample_tree):
        """Test that trim series can be left out."""
        records = LatencyHistogramVisitor(include_trim=False).produce(sample_tree, "tank", None, 1)
        assert "trim" not in [name for name, _ in records[0].fields]
        assert len(records[0].fields) == 9

    def test_latency_delta_values(self, sample_tree):
        """Test the folded floor bucket and raw counts in delta mode."""
        records = LatencyHistogramVisitor().produce(sample_tree, "tank", None, 1)
        # total_read buckets are 0..15
        assert [r.field("total_read") for r in records] == [sum(range(11)), 11, 12, 13, 14, 15]

    def test_latency_cumulative_values(self, sample_tree):
        """Test running totals in cumulative mode."""
        records = LatencyHistogramVisitor(sum_buckets=True).produce(sample_tree, "tank", None, 1)
        assert [r.field("total_read") for r in records] == [
            sum(range(n + 1)) for n in range(10, 16)
        ]

    def test_size_rows(self, sample_tree):
        """Test size histogram labels, tags and fields of a leaf vdev."""
        leaf = sample_tree.children[0].children[0]
        records = SizeHistogramVisitor().produce(leaf, "tank", "root/mirror-0", 1)
        assert len(records) == 16 - 9
        assert records[0].tags == [
            ("le", "512"),
            ("name", "tank"),
            ("path", "/dev/disk/by-id/ata 1"),
            ("vdev", "root/mirror-0/disk-0"),
        ]
        assert records[-1].tag("le") == "+Inf"
        assert len(records[0].fields) == 12

    def test_missing_histogram(self):
        """Test that a missing histogram yields no records at all."""
        stats = build_extended_stats()
        del stats["vdev_scrub_histo"]
        node = DeviceNode.model_validate({"type": "root", "vdev_stats_ex": stats})
        with pytest.raises(MissingStatError) as exc_info:
            LatencyHistogramVisitor().produce(node, "tank", None, 1)
        assert exc_info.value.stat_name == "vdev_scrub_histo"
