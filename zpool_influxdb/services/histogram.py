"""Histogram bucket reduction.

vdev latency and request-size histograms are arrays of uint64 counters where
bucket ``i`` counts observations up to ``2**i`` (nanoseconds or bytes). The
low buckets are too fine-grained to be useful, so everything below a floor
index is folded into the floor bucket. Above the floor, buckets are reported
either as running totals (cumulative) or as raw per-bucket counts.
"""

from dataclasses import dataclass
from typing import Dict, Iterator, List, Mapping, Sequence, Tuple

from zpool_influxdb.errors import HistogramShapeError, MissingStatError
from zpool_influxdb.models import UINT64_MAX

# minimum latency index 10 = 1024ns
MIN_LATENCY_INDEX = 10
# minimum size index 9 = 512 bytes
MIN_SIZE_INDEX = 9

INF_LABEL = "+Inf"


@dataclass(frozen=True)
class HistogramSeries:
    """Maps an extended-stats histogram name to its output field name."""

    stat_name: str
    field_name: str


@dataclass(frozen=True)
class BucketRow:
    """One reduced histogram bucket."""

    index: int
    is_last: bool
    values: Tuple[Tuple[str, int], ...]


class HistogramSet:
    """Named, ordered histogram arrays that all share one length."""

    def __init__(self, arrays: Mapping[str, Sequence[int]]):
        lengths = {name: len(values) for name, values in arrays.items()}
        if len(set(lengths.values())) > 1:
            raise HistogramShapeError(f"histogram arrays differ in length: {lengths}")
        self.arrays: Dict[str, List[int]] = {name: list(values) for name, values in arrays.items()}
        self.length = next(iter(lengths.values()), 0)

    @classmethod
    def from_stats(
        cls, histograms: Mapping[str, Sequence[int]], series: Sequence[HistogramSeries]
    ) -> "HistogramSet":
        """Pick ``series`` out of an extended-stats histogram map.

        Raises:
            MissingStatError: If any of the series is not present
            HistogramShapeError: If the arrays differ in length
        """
        arrays: Dict[str, Sequence[int]] = {}
        for s in series:
            if s.stat_name not in histograms:
                raise MissingStatError(s.stat_name)
            arrays[s.field_name] = histograms[s.stat_name]
        return cls(arrays)


def reduce_histograms(
    histograms: HistogramSet, floor_index: int, sum_buckets: bool = False
) -> Iterator[BucketRow]:
    """Reduce a histogram set into rows for buckets ``floor_index`` and above.

    Buckets below the floor are summed into the floor bucket. Past the floor
    each row holds the running total when ``sum_buckets`` is set, or the raw
    bucket count otherwise. An array of length L yields ``L - floor_index``
    rows (none when L <= floor_index); the last row has ``is_last`` set.
    Only the floor row carries the folded-in lower buckets; in delta mode the
    row after it already reports its raw count.
    """
    end = histograms.length - 1
    sums = {name: 0 for name in histograms.arrays}

    for bucket in range(histograms.length):
        if bucket < floor_index:
            for name, values in histograms.arrays.items():
                sums[name] = (sums[name] + values[bucket]) & UINT64_MAX
            continue

        for name, values in histograms.arrays.items():
            if bucket <= floor_index or sum_buckets:
                sums[name] = (sums[name] + values[bucket]) & UINT64_MAX
            else:
                sums[name] = values[bucket]

        yield BucketRow(
            index=bucket,
            is_last=bucket == end,
            values=tuple(sums.items()),
        )


def latency_bucket_label(row: BucketRow) -> str:
    """Upper bound of a latency bucket in seconds."""
    if row.is_last:
        return INF_LABEL
    return f"{(1 << row.index) * 1e-9:.6f}"


def size_bucket_label(row: BucketRow) -> str:
    """Upper bound of a request-size bucket in bytes."""
    if row.is_last:
        return INF_LABEL
    return str(1 << row.index)
