"""Recursive vdev tree walk."""

from typing import Iterator, Optional

from zpool_influxdb.errors import StatsExtractionError
from zpool_influxdb.logging_config import get_logger
from zpool_influxdb.models import DeviceNode, MetricRecord
from zpool_influxdb.services.stat_visitors import StatVisitor
from zpool_influxdb.services.vdev_naming import vdev_name

logger = get_logger(__name__)

DEFAULT_MAX_DEPTH = 64


def walk_tree(
    visitor: StatVisitor,
    node: DeviceNode,
    pool_name: str,
    parent_name: Optional[str],
    timestamp: int,
    descend: bool = True,
    max_depth: int = DEFAULT_MAX_DEPTH,
    _depth: int = 0,
) -> Iterator[MetricRecord]:
    """
    Apply ``visitor`` to ``node`` and, when ``descend`` is set, to its subtree.

    Nodes are visited in pre-order. Each child receives this node's
    structural name as its parent name. An error from ``node`` itself
    propagates before any child is visited; an error inside a child's subtree
    is logged and the walk goes on with the next sibling.

    Raises:
        StatsExtractionError: If the visitor fails on ``node``
    """
    records = visitor.produce(node, pool_name, parent_name, timestamp)
    yield from records

    if not descend or not node.children:
        return
    if _depth + 1 >= max_depth:
        logger.warning(
            f"Not descending below {vdev_name(node, parent_name)} in pool {pool_name}: "
            f"vdev tree deeper than {max_depth}"
        )
        return

    name = vdev_name(node, parent_name)
    for child in node.children:
        try:
            # materialize so a failing child emits nothing
            child_records = list(
                walk_tree(
                    visitor,
                    child,
                    pool_name,
                    name,
                    timestamp,
                    descend=descend,
                    max_depth=max_depth,
                    _depth=_depth + 1,
                )
            )
        except StatsExtractionError as e:
            logger.warning(
                f"Skipping {vdev_name(child, name)} in pool {pool_name} "
                f"for {visitor.measurement}: {e}"
            )
            continue
        yield from child_records
