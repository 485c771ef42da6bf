"""Pool source backed by an external command printing a pool document."""

import shlex
import shutil
import subprocess
from typing import Iterator, List, Union

from zpool_influxdb.errors import PoolRefreshError, SourceUnavailableError
from zpool_influxdb.logging_config import get_logger
from zpool_influxdb.sources.base import PoolHandle, PoolSource
from zpool_influxdb.sources.document import load_document
from zpool_influxdb.sources.file_source import DocumentPoolHandle

logger = get_logger(__name__)


class CommandPoolSource(PoolSource):
    """Runs a command once per enumeration and parses its stdout.

    A hung command blocks the sample until ``timeout`` expires.
    """

    def __init__(self, command: Union[str, List[str]], timeout: float = 30.0):
        self.args = shlex.split(command) if isinstance(command, str) else list(command)
        if not self.args:
            raise SourceUnavailableError("Empty pool source command")
        if shutil.which(self.args[0]) is None:
            raise SourceUnavailableError(
                f"Pool source command not found: {self.args[0]}"
            )
        self.timeout = timeout

    def run(self) -> str:
        """
        Run the command and return its stdout.

        Raises:
            PoolRefreshError: If the command fails, times out or cannot start
        """
        try:
            result = subprocess.run(
                self.args,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise PoolRefreshError(
                f"Pool source command timed out after {self.timeout}s: {shlex.join(self.args)}"
            ) from exc
        except OSError as exc:
            raise PoolRefreshError(f"Cannot run pool source command: {exc}") from exc

        if result.returncode != 0:
            stderr = result.stderr.strip()
            raise PoolRefreshError(
                f"Pool source command exited with {result.returncode}: {stderr}"
            )
        return result.stdout

    def iter_pools(self) -> Iterator[PoolHandle]:
        pools = load_document(self.run(), origin=self.args[0])
        logger.debug(f"Command {self.args[0]} reported {len(pools)} pools")
        for name, raw in pools:
            yield DocumentPoolHandle(name, raw)
