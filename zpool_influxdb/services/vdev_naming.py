"""vdev naming for tags.

Names follow the hierarchy printed by ``zpool status``: the root vdev is
named by its type, every other vdev ``<parent>/<type>-<id>``.
"""

from typing import List, Optional, Tuple

from zpool_influxdb.models import UINT64_MAX, DeviceNode


def vdev_name(node: DeviceNode, parent_name: Optional[str] = None) -> str:
    """Structural name of ``node``, used as the parent name of its children."""
    if parent_name is None:
        return node.type
    vdev_id = node.id if node.id is not None else UINT64_MAX
    return f"{parent_name}/{node.type}-{vdev_id}"


def vdev_tags(node: DeviceNode, parent_name: Optional[str] = None) -> List[Tuple[str, str]]:
    """Tag pairs describing ``node``.

    The hierarchical name is always present. Leaf vdevs usually also have a
    device path, which comes first. A devid would be nicer than the path, but
    it is not guaranteed to exist on Linux.
    """
    tags = []
    if node.path is not None:
        tags.append(("path", node.path))
    tags.append(("vdev", vdev_name(node, parent_name)))
    return tags
