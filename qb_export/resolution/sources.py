"""Load sources.

The local source reads the offline cache dumped by the DivertScan client;
the remote source queries the DivertScan API over HTTP. Both raise
SourceUnavailableError on failure and leave the fallback decision to the
resolver.
"""

import asyncio
import logging
import socket
from pathlib import Path
from typing import Any, List, Optional, Protocol
from urllib.parse import urlsplit

import httpx

from ..config import Config
from ..exceptions import SourceUnavailableError
from ..models.schema import RawRecord
from ..normalization.normalizer import resolve_project_id
from ..utils.io_handler import IOHandler

logger = logging.getLogger(__name__)

# Store names written by the client, newest first
LOCAL_STORE_NAMES = ('loads', 'scans')


class LocalSource(Protocol):
    """Anything that can list cached loads for a scope."""

    async def get_loads(self, project_id: Optional[str] = None) -> List[RawRecord]:
        ...


class RemoteSource(Protocol):
    """Anything that can fetch confirmed loads from the server."""

    async def fetch_loads(self, project_id: Optional[str] = None) -> List[RawRecord]:
        ...


def filter_by_project(records: List[RawRecord], project_id: Optional[str]) -> List[RawRecord]:
    """Keep records of one project; ``None`` keeps everything."""
    if project_id is None:
        return list(records)
    return [r for r in records if resolve_project_id(r) == str(project_id)]


def extract_records(payload: Any, store_names=('loads',)) -> List[RawRecord]:
    """
    Pull the record list out of a JSON payload.

    Accepts a bare array or an object holding the array under one of
    ``store_names``. Non-object entries are dropped.
    """
    if isinstance(payload, dict):
        for name in store_names:
            if isinstance(payload.get(name), list):
                payload = payload[name]
                break
        else:
            return []

    if not isinstance(payload, list):
        return []

    return [r for r in payload if isinstance(r, dict)]


class JsonFileLocalSource:
    """
    Local cache backed by a JSON export of the client's store.

    The file holds either a bare array of loads or an object with a
    ``loads`` store (a ``scans`` store on older clients).
    """

    def __init__(self, path: Path, io_handler: Optional[IOHandler] = None):
        self.path = Path(path)
        self.io_handler = io_handler or IOHandler()
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def _read(self) -> Any:
        try:
            return self.io_handler.read_json(self.path)
        except (OSError, ValueError) as e:
            raise SourceUnavailableError(f"Failed to read local cache: {e}") from e

    async def get_loads(self, project_id: Optional[str] = None) -> List[RawRecord]:
        payload = await asyncio.to_thread(self._read)
        records = extract_records(payload, LOCAL_STORE_NAMES)
        records = filter_by_project(records, project_id)
        self.logger.info(f"Read {len(records)} cached loads from {self.path}")
        return records


class InMemoryLocalSource:
    """Local source over an in-process list, used for embedding and tests."""

    def __init__(self, records: Optional[List[RawRecord]] = None):
        self.records = list(records or [])

    async def get_loads(self, project_id: Optional[str] = None) -> List[RawRecord]:
        return filter_by_project(self.records, project_id)


class RemoteLoadSource:
    """
    DivertScan API client.

    Queries ``GET /api/loads?status=confirmed[&project_id=...]``. The
    response body is ``{"loads": [...]}`` or a bare array.
    """

    def __init__(
        self,
        base_url: str = Config.REMOTE_BASE_URL,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the remote source.

        Args:
            base_url: API root, e.g. https://divertscan.example.com
            client: Optional preconfigured client (tests pass one with a
                mock transport)
        """
        self.base_url = base_url.rstrip('/')
        self.client = client
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    async def _get(self, client: httpx.AsyncClient, params: dict) -> httpx.Response:
        return await client.get(
            f"{self.base_url}{Config.REMOTE_LOADS_PATH}",
            params=params,
            headers={'Content-Type': 'application/json'},
        )

    async def fetch_loads(self, project_id: Optional[str] = None) -> List[RawRecord]:
        params = {'status': 'confirmed'}
        if project_id is not None:
            params['project_id'] = str(project_id)

        try:
            if self.client is not None:
                response = await self._get(self.client, params)
            else:
                async with httpx.AsyncClient(timeout=Config.REMOTE_TIMEOUT_SECONDS) as client:
                    response = await self._get(client, params)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            raise SourceUnavailableError(f"API error {e.response.status_code}") from e
        except (httpx.HTTPError, ValueError) as e:
            raise SourceUnavailableError(f"API request failed: {e}") from e

        records = extract_records(payload)
        self.logger.info(f"Fetched {len(records)} loads from {self.base_url}")
        return records


def tcp_probe(base_url: str = Config.REMOTE_BASE_URL,
              timeout: float = Config.PROBE_TIMEOUT_SECONDS) -> bool:
    """
    Report whether the remote host accepts TCP connections.

    Args:
        base_url: API root whose host/port is probed
        timeout: Connect timeout in seconds

    Returns:
        True when a connection could be opened
    """
    parts = urlsplit(base_url)
    host = parts.hostname
    if not host:
        return False
    port = parts.port or (443 if parts.scheme == 'https' else 80)

    try:
        with socket.create_connection((host, port), timeout=timeout):
            return True
    except OSError as e:
        logger.info(f"Network unavailable ({host}:{port}): {e}")
        return False
