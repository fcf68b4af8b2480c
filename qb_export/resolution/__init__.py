"""Load resolution across the local cache and the remote API."""

from .resolver import LoadResolver, Source, choose_source
from .sources import InMemoryLocalSource, JsonFileLocalSource, RemoteLoadSource

__all__ = [
    "LoadResolver",
    "Source",
    "choose_source",
    "InMemoryLocalSource",
    "JsonFileLocalSource",
    "RemoteLoadSource",
]
