"""vdev state naming, as printed by ``zpool status``."""

from enum import IntEnum
from typing import Callable


class VdevState(IntEnum):
    """``vdev_state_t``"""

    UNKNOWN = 0
    CLOSED = 1
    OFFLINE = 2
    REMOVED = 3
    CANT_OPEN = 4
    FAULTED = 5
    DEGRADED = 6
    HEALTHY = 7


class VdevAux(IntEnum):
    """``vdev_aux_t`` values that influence the state name."""

    NONE = 0
    OPEN_FAILED = 1
    CORRUPT_DATA = 2
    NO_REPLICAS = 3
    BAD_GUID_SUM = 4
    TOO_SMALL = 5
    BAD_LABEL = 6
    VERSION_NEWER = 7
    VERSION_OLDER = 8
    UNSUP_FEAT = 9
    SPARED = 10
    ERR_EXCEEDED = 11
    IO_FAILURE = 12
    BAD_LOG = 13
    EXTERNAL = 14
    SPLIT_POOL = 15


StateNamer = Callable[[int, int], str]


def zpool_state_to_name(state: int, aux: int) -> str:
    """Human-readable name of a (vdev state, vdev aux) pair."""
    if state in (VdevState.CLOSED, VdevState.OFFLINE):
        return "OFFLINE"
    if state == VdevState.REMOVED:
        return "REMOVED"
    if state == VdevState.CANT_OPEN:
        if aux in (VdevAux.CORRUPT_DATA, VdevAux.BAD_LOG):
            return "FAULTED"
        if aux == VdevAux.SPLIT_POOL:
            return "SPLIT"
        return "UNAVAIL"
    if state == VdevState.FAULTED:
        return "FAULTED"
    if state == VdevState.DEGRADED:
        return "DEGRADED"
    if state == VdevState.HEALTHY:
        return "ONLINE"
    return "UNKNOWN"
