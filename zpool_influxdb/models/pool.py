"""Point-in-time pool snapshot model."""

from typing import Optional

from pydantic import AliasChoices, BaseModel, Field

from zpool_influxdb.models.device import DeviceNode
from zpool_influxdb.models.scan import ScanState


class PoolSnapshot(BaseModel):
    """Configuration tree and scan state of one pool at one instant."""

    name: str = Field(..., description="Pool name, unescaped")
    vdev_tree: Optional[DeviceNode] = Field(default=None, description="Root vdev")
    scan: Optional[ScanState] = Field(
        default=None, validation_alias=AliasChoices("scan", "scan_stats")
    )
