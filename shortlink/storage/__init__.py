"""Storage layer for short links, QR artifacts and clicks."""

from .base import ClickRecorderBase, QrArtifactStoreBase, ShortLinkStoreBase
from .cache import RedisLinkCache
from .memory import InMemoryClickRecorder, InMemoryQrArtifactStore, InMemoryShortLinkStore
from .questdb import QuestDBClickRecorder, QuestDBClient, QuestDBShortLinkStore
from .redis_store import RedisQrArtifactStore

__all__ = [
    "ShortLinkStoreBase",
    "QrArtifactStoreBase",
    "ClickRecorderBase",
    "InMemoryShortLinkStore",
    "InMemoryQrArtifactStore",
    "InMemoryClickRecorder",
    "QuestDBClient",
    "QuestDBShortLinkStore",
    "QuestDBClickRecorder",
    "RedisLinkCache",
    "RedisQrArtifactStore",
]
