"""Offline-first load resolution.

The local cache is authoritative whenever it holds confirmed loads. The
remote API is only consulted to fill an empty cache while online, and its
result is never merged with local data.
"""

import asyncio
import enum
import logging
from typing import Callable, List, Optional, Sequence

from ..config import Config
from ..exceptions import NoDataError, RemoteTimeoutError, SourceUnavailableError
from ..models.schema import RawRecord
from ..normalization.normalizer import resolve_status
from .sources import LocalSource, RemoteSource

logger = logging.getLogger(__name__)


class Source(enum.Enum):
    """Which source's data a resolution call uses."""

    LOCAL = "local"
    REMOTE = "remote"


def choose_source(local_records: Sequence[RawRecord], online: bool) -> Source:
    """
    Resolution policy.

    Args:
        local_records: Confirmed loads found in the local cache
        online: Whether the network is reported reachable

    Returns:
        Source.REMOTE only when the cache is empty and the network is up
    """
    if not local_records and online:
        return Source.REMOTE
    return Source.LOCAL


def is_confirmed(record: RawRecord) -> bool:
    """Drafts and loads still waiting for upload are not exportable."""
    return resolve_status(record) not in Config.EXCLUDED_STATUSES


class LoadResolver:
    """
    Selects the authoritative load set for one export scope.

    Local and remote failures are logged and treated as empty results;
    only an empty outcome from both is reported, as NoDataError.
    """

    def __init__(
        self,
        local: LocalSource,
        remote: Optional[RemoteSource] = None,
        is_online: Callable[[], bool] = lambda: True,
        timeout: float = Config.REMOTE_TIMEOUT_SECONDS,
    ):
        """
        Initialize the resolver.

        Args:
            local: Local cache source
            remote: Remote API source (None disables the fallback)
            is_online: Connectivity probe
            timeout: Hard bound on the remote query, in seconds
        """
        self.local = local
        self.remote = remote
        self.is_online = is_online
        self.timeout = timeout
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    async def _local_loads(self, project_id: Optional[str]) -> List[RawRecord]:
        try:
            records = await self.local.get_loads(project_id)
        except Exception as e:
            # an unreadable cache counts as empty
            self.logger.warning(f"Local source unavailable: {e}")
            return []
        return [r for r in records if is_confirmed(r)]

    async def _fetch_remote(self, project_id: Optional[str]) -> List[RawRecord]:
        # wait_for cancels the pending request once the bound is hit
        try:
            return await asyncio.wait_for(self.remote.fetch_loads(project_id), self.timeout)
        except asyncio.TimeoutError as e:
            raise RemoteTimeoutError(f"Remote source timed out after {self.timeout:g}s") from e

    async def _remote_loads(self, project_id: Optional[str]) -> List[RawRecord]:
        if self.remote is None:
            return []
        try:
            return await self._fetch_remote(project_id)
        except SourceUnavailableError as e:
            self.logger.warning(f"Remote source unavailable: {e}")
        except Exception as e:
            self.logger.warning(f"Remote source failed: {e}")
        return []

    async def resolve(self, project_id: Optional[str] = None) -> List[RawRecord]:
        """
        Resolve loads for a project, or for all projects when None.

        Args:
            project_id: Optional project scope

        Returns:
            Non-empty list of raw records

        Raises:
            NoDataError: If neither source produced any loads
        """
        loads = await self._local_loads(project_id)
        self.logger.debug(f"Local source returned {len(loads)} confirmed loads")

        online = False
        if not loads and self.remote is not None:
            online = await asyncio.to_thread(self.is_online)

        if choose_source(loads, online) is Source.REMOTE:
            remote_loads = await self._remote_loads(project_id)
            if remote_loads:
                self.logger.info(f"Using {len(remote_loads)} loads from remote source")
                loads = remote_loads

        if not loads:
            raise NoDataError()

        return loads
