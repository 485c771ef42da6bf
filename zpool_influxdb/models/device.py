"""Device (vdev) tree models."""

from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, Field, model_validator

UINT64_MAX = (1 << 64) - 1


class VdevStats(BaseModel):
    """Fixed-layout counter block of a vdev (``vdev_stat_t``)."""

    state: int = Field(default=0, ge=0, description="vdev_state_t value")
    aux: int = Field(default=0, ge=0, description="vdev_aux_t value")
    alloc: int = Field(default=0, ge=0, le=UINT64_MAX, description="Allocated space in bytes")
    space: int = Field(default=0, ge=0, le=UINT64_MAX, description="Total capacity in bytes")
    read_bytes: int = Field(default=0, ge=0, le=UINT64_MAX)
    write_bytes: int = Field(default=0, ge=0, le=UINT64_MAX)
    read_ops: int = Field(default=0, ge=0, le=UINT64_MAX)
    write_ops: int = Field(default=0, ge=0, le=UINT64_MAX)
    read_errors: int = Field(default=0, ge=0, le=UINT64_MAX)
    write_errors: int = Field(default=0, ge=0, le=UINT64_MAX)
    checksum_errors: int = Field(default=0, ge=0, le=UINT64_MAX)
    fragmentation: int = Field(default=0, ge=0, le=UINT64_MAX, description="Fragmentation percent")

    @property
    def free(self) -> int:
        """Free space, computed with unsigned 64-bit wraparound."""
        return (self.space - self.alloc) & UINT64_MAX

    class Config:
        """Pydantic configuration."""

        json_schema_extra = {
            "example": {
                "state": 7,
                "aux": 0,
                "alloc": 1073741824,
                "space": 4294967296,
                "read_bytes": 52428800,
                "write_bytes": 104857600,
                "read_ops": 1200,
                "write_ops": 3400,
                "checksum_errors": 0,
                "fragmentation": 3,
            }
        }


class ExtendedStats(BaseModel):
    """Extended vdev statistics: histogram arrays and queue-depth gauges.

    Accepts either the split form (``histograms`` / ``gauges``) or the flat
    ``vdev_stats_ex`` mapping, where list values are histograms and scalar
    values are gauges.
    """

    histograms: Dict[str, List[int]] = Field(default_factory=dict)
    gauges: Dict[str, int] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def split_flat_mapping(cls, data: Any) -> Any:
        if not isinstance(data, dict) or set(data) <= {"histograms", "gauges"}:
            return data
        histograms = {k: v for k, v in data.items() if isinstance(v, (list, tuple))}
        gauges = {k: v for k, v in data.items() if not isinstance(v, (list, tuple))}
        return {"histograms": histograms, "gauges": gauges}


class DeviceNode(BaseModel):
    """A node of a pool's vdev tree."""

    type: str = Field(default="unknown", description="vdev type (root, mirror, raidz, disk, ...)")
    id: Optional[int] = Field(default=None, ge=0, le=UINT64_MAX, description="vdev id")
    path: Optional[str] = Field(default=None, description="Device path, usually on leaves only")
    children: List["DeviceNode"] = Field(default_factory=list)
    stats: Optional[VdevStats] = Field(
        default=None, validation_alias=AliasChoices("stats", "vdev_stats")
    )
    extended_stats: Optional[ExtendedStats] = Field(
        default=None, validation_alias=AliasChoices("extended_stats", "vdev_stats_ex")
    )

    class Config:
        """Pydantic configuration."""

        json_schema_extra = {
            "example": {
                "type": "mirror",
                "id": 0,
                "children": [
                    {"type": "disk", "id": 0, "path": "/dev/sda1"},
                    {"type": "disk", "id": 1, "path": "/dev/sdb1"},
                ],
            }
        }
