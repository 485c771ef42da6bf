"""Scrub/resilver progress calculation.

Mirrors the progress figures of ``zpool status``, in a form suitable for
long-term tracking. All arithmetic is unsigned 64-bit integer arithmetic
(integer division, wraparound on underflow) to match the kernel counters.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from zpool_influxdb.logging_config import get_logger
from zpool_influxdb.models import UINT64_MAX, FieldValue, ScanFunction, ScanState, ScanStateValue

logger = get_logger(__name__)


@dataclass(frozen=True)
class ScanProgress:
    """Derived scan figures for one pool."""

    function: ScanFunction
    state: ScanStateValue
    end_ts: int
    errors: int
    examined: int
    pass_examined: int
    pause_ts: int
    paused_t: int
    pct_done: float
    processed: int
    rate: int
    remaining_t: int
    start_ts: int
    to_examine: int
    to_process: int

    def fields(self) -> List[Tuple[str, FieldValue]]:
        """Output fields in their fixed emission order."""
        return [
            ("end_ts", self.end_ts),
            ("errors", self.errors),
            ("examined", self.examined),
            ("pass_examined", self.pass_examined),
            ("pause_ts", self.pause_ts),
            ("paused_t", self.paused_t),
            ("pct_done", self.pct_done),
            ("processed", self.processed),
            ("rate", self.rate),
            ("remaining_t", self.remaining_t),
            ("start_ts", self.start_ts),
            ("to_examine", self.to_examine),
            ("to_process", self.to_process),
        ]


class ScanProgressCalculator:
    """Computes percent done, rate and remaining time of a scan."""

    @staticmethod
    def parse_enums(scan: ScanState) -> Optional[Tuple[ScanStateValue, ScanFunction]]:
        """Return the scan state and function, or None if either is out of range."""
        try:
            return ScanStateValue(scan.state), ScanFunction(scan.function)
        except ValueError:
            return None

    def calculate(self, scan: Optional[ScanState], now: int) -> Optional[ScanProgress]:
        """
        Derive the progress figures of ``scan`` at wall-clock time ``now``.

        Args:
            scan: Raw scan counters, or None when the pool has no scan data
            now: Current time in epoch seconds

        Returns:
            ScanProgress, or None when there is no usable scan data
        """
        if scan is None:
            return None
        enums = self.parse_enums(scan)
        if enums is None:
            logger.debug(
                f"Ignoring scan stats with state={scan.state} function={scan.function}"
            )
            return None
        state, function = enums

        # overall progress
        examined = scan.examined or 1
        pct_done = 0.0
        if scan.to_examine > 0:
            pct_done = 100.0 * examined / scan.to_examine

        paused_time = scan.paused_duration

        # calculations for this pass
        if state == ScanStateValue.SCANNING:
            elapsed = now - scan.pass_start - paused_time
            elapsed = elapsed if elapsed > 0 else 1
            pass_exam = scan.pass_exam or 1
            rate = pass_exam // elapsed
            rate = rate if rate > 0 else 1
            # items examined so far, not items remaining, divided by rate
            remaining_time = (scan.to_examine - examined // rate) & UINT64_MAX
        else:
            elapsed = scan.end_time - scan.pass_start - paused_time
            elapsed = elapsed if elapsed > 0 else 1
            pass_exam = scan.pass_exam or 1
            rate = pass_exam // elapsed
            remaining_time = 0
        rate = rate or 1

        return ScanProgress(
            function=function,
            state=state,
            end_ts=scan.end_time,
            errors=scan.errors,
            examined=examined,
            pass_examined=pass_exam,
            pause_ts=scan.pause_timestamp,
            paused_t=paused_time,
            pct_done=pct_done,
            processed=scan.processed,
            rate=rate,
            remaining_t=remaining_time,
            start_ts=scan.start_time,
            to_examine=scan.to_examine,
            to_process=scan.to_process,
        )
