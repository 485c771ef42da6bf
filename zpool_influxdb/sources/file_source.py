"""Pool source backed by a configuration document on disk."""

from pathlib import Path
from typing import Iterator, Optional

from zpool_influxdb.errors import PoolRefreshError, SourceUnavailableError
from zpool_influxdb.logging_config import get_logger
from zpool_influxdb.models import PoolSnapshot
from zpool_influxdb.sources.base import PoolHandle, PoolSource
from zpool_influxdb.sources.document import RawPool, load_document, parse_pool

logger = get_logger(__name__)


class DocumentPoolHandle(PoolHandle):
    """Handle over one pool entry of an already loaded document."""

    def __init__(self, name: str, raw: RawPool):
        super().__init__(name)
        self._raw = raw
        self._snapshot: Optional[PoolSnapshot] = None

    def refresh(self) -> None:
        self._snapshot = parse_pool(self.name, self._raw)

    def get_snapshot(self) -> PoolSnapshot:
        if self._snapshot is None:
            self.refresh()
        assert self._snapshot is not None
        return self._snapshot

    def close(self) -> None:
        self._raw = {}
        self._snapshot = None


class FilePoolSource(PoolSource):
    """Reads the document file anew on every enumeration."""

    def __init__(self, path: Path):
        self.path = Path(path)
        if not self.path.is_file():
            raise SourceUnavailableError(f"Pool document not found: {self.path}")

    def iter_pools(self) -> Iterator[PoolHandle]:
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise PoolRefreshError(f"Cannot read pool document {self.path}: {exc}") from exc

        pools = load_document(text, origin=str(self.path))
        logger.debug(f"Loaded {len(pools)} pools from {self.path}")
        for name, raw in pools:
            yield DocumentPoolHandle(name, raw)
