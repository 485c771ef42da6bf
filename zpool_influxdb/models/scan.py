"""Scan (scrub/resilver) state model."""

from enum import IntEnum

from pydantic import AliasChoices, BaseModel, Field

from zpool_influxdb.models.device import UINT64_MAX


class ScanStateValue(IntEnum):
    """State of a pool scan (``dsl_scan_state_t``)."""

    NONE = 0
    SCANNING = 1
    FINISHED = 2
    CANCELED = 3

    @property
    def tag(self) -> str:
        return self.name.lower()


class ScanFunction(IntEnum):
    """Kind of pool scan."""

    NONE = 0
    SCRUB = 1
    RESILVER = 2
    REBUILD = 3
    OTHER = 4

    @property
    def tag(self) -> str:
        return _FUNCTION_TAGS[self]


_FUNCTION_TAGS = {
    ScanFunction.NONE: "none_requested",
    ScanFunction.SCRUB: "scrub",
    ScanFunction.RESILVER: "resilver",
    ScanFunction.REBUILD: "rebuild",
    ScanFunction.OTHER: "scan",
}


class ScanState(BaseModel):
    """Raw scan counters of a pool (``pool_scan_stat_t``).

    ``state`` and ``function`` are kept as plain integers: values outside the
    known enums are legal input and mean "no scan data".
    """

    state: int = Field(default=0, description="ScanStateValue")
    function: int = Field(
        default=0, validation_alias=AliasChoices("function", "func"), description="ScanFunction"
    )
    start_time: int = Field(default=0, ge=0, le=UINT64_MAX, description="Scan start, epoch seconds")
    end_time: int = Field(default=0, ge=0, le=UINT64_MAX, description="Scan end, epoch seconds")
    to_examine: int = Field(default=0, ge=0, le=UINT64_MAX, description="Total bytes to scan")
    examined: int = Field(default=0, ge=0, le=UINT64_MAX, description="Bytes scanned so far")
    to_process: int = Field(default=0, ge=0, le=UINT64_MAX)
    processed: int = Field(default=0, ge=0, le=UINT64_MAX)
    errors: int = Field(default=0, ge=0, le=UINT64_MAX)
    pass_exam: int = Field(
        default=0, ge=0, le=UINT64_MAX, description="Bytes examined in the current pass"
    )
    pass_start: int = Field(
        default=0, ge=0, le=UINT64_MAX, description="Start of the current pass, epoch seconds"
    )
    pause_timestamp: int = Field(
        default=0,
        ge=0,
        le=UINT64_MAX,
        validation_alias=AliasChoices("pause_timestamp", "pass_scrub_pause"),
    )
    paused_duration: int = Field(
        default=0,
        ge=0,
        le=UINT64_MAX,
        validation_alias=AliasChoices("paused_duration", "pass_scrub_spent_paused"),
    )

    class Config:
        """Pydantic configuration."""

        json_schema_extra = {
            "example": {
                "state": 1,
                "function": 1,
                "start_time": 1700000000,
                "to_examine": 1000000,
                "examined": 500000,
                "pass_exam": 500000,
                "pass_start": 1700000000,
            }
        }
