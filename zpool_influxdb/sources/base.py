"""Pool introspection source interface."""

from abc import ABC, abstractmethod
from typing import Iterator

from zpool_influxdb.models import PoolSnapshot


class PoolHandle(ABC):
    """An open pool: refresh its statistics, then read its configuration."""

    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    def refresh(self) -> None:
        """
        Refresh the pool's live statistics.

        Raises:
            PoolRefreshError: If the statistics cannot be refreshed
        """

    @abstractmethod
    def get_snapshot(self) -> PoolSnapshot:
        """Configuration tree and scan state as of the last refresh."""

    def close(self) -> None:
        """Release the handle."""

    def __enter__(self) -> "PoolHandle":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class PoolSource(ABC):
    """Enumerates the pools of a system."""

    @abstractmethod
    def iter_pools(self) -> Iterator[PoolHandle]:
        """Yield a handle per pool; callers close each handle."""

    def close(self) -> None:
        """Tear down the introspection session."""

    def __enter__(self) -> "PoolSource":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
