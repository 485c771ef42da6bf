"""Pool configuration documents.

A document is the pool configuration of a system, as dumped from the libzfs
nvlists, in JSON or YAML::

    pools:
      tank:
        vdev_tree:
          type: root
          id: 0
          vdev_stats: {state: 7, aux: 0, alloc: 1024, space: 4096, ...}
          vdev_stats_ex:
            vdev_tot_r_lat_histo: [0, 0, 12, ...]
            vdev_sync_r_active_queue: 0
            ...
          children:
            - type: mirror
              id: 0
              children: [...]
        scan_stats: {func: 1, state: 2, examined: 1024, ...}

``pools`` may also be a list of mappings that carry a ``name`` key.
"""

from typing import Any, List, Tuple

import yaml  # type: ignore[import-untyped]
from pydantic import ValidationError

from zpool_influxdb.errors import PoolRefreshError
from zpool_influxdb.models import PoolSnapshot

# one pool entry as found in the document, checked only when the pool is refreshed
RawPool = Any


def load_document(text: str, origin: str = "<document>") -> List[Tuple[str, RawPool]]:
    """
    Split a document into ``(pool name, raw pool entry)`` pairs.

    Pool entries are not inspected here, so a malformed entry only fails its
    own pool.

    Raises:
        PoolRefreshError: If the text is not a valid pool document
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise PoolRefreshError(f"Error parsing pool document {origin}: {exc}") from exc

    if data is None:
        return []
    if not isinstance(data, dict) or "pools" not in data:
        raise PoolRefreshError(f"Pool document {origin} has no 'pools' key")

    pools = data["pools"] or {}
    if isinstance(pools, dict):
        items = list(pools.items())
    elif isinstance(pools, list):
        items = []
        for entry in pools:
            if not isinstance(entry, dict) or "name" not in entry:
                raise PoolRefreshError(f"Pool entry without a name in {origin}")
            items.append((entry["name"], entry))
    else:
        raise PoolRefreshError(f"'pools' in {origin} must be a mapping or a list")

    return [(str(name), raw) for name, raw in items]


def parse_pool(name: str, raw: RawPool) -> PoolSnapshot:
    """
    Validate one pool's raw mapping into a PoolSnapshot.

    Raises:
        PoolRefreshError: If the mapping does not describe a valid pool
    """
    if not isinstance(raw, dict):
        raise PoolRefreshError(f"Pool {name!r} is not a mapping")
    data = dict(raw)
    data["name"] = name
    try:
        return PoolSnapshot.model_validate(data)
    except ValidationError as exc:
        raise PoolRefreshError(f"Invalid statistics for pool {name}: {exc}") from exc
