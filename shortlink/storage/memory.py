"""In-process storage backends.

Plain dicts are enough here: every operation completes without awaiting in
between, so on a single event loop each one is atomic. Artifacts are stored
as immutable ``bytes`` objects, so a reader never sees a partial image.
"""

import logging
from collections import defaultdict
from typing import Dict, List, Optional

from ..models import ClickEvent, LinkRecord
from .base import ClickRecorderBase, QrArtifactStoreBase, ShortLinkStoreBase


class InMemoryShortLinkStore(ShortLinkStoreBase):
    """Short link records kept in a dict."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self._records: Dict[str, LinkRecord] = {}

    async def find(self, identifier: str) -> Optional[LinkRecord]:
        return self._records.get(identifier)

    async def save(self, record: LinkRecord) -> bool:
        if record.identifier in self._records:
            self.logger.warning(f"Identifier already exists: {record.identifier}")
            return False
        self._records[record.identifier] = record
        return True

    async def exists(self, identifier: str) -> bool:
        return identifier in self._records

    async def delete(self, identifier: str) -> bool:
        record = self._records.get(identifier)
        if record is None or record.deleted:
            return False
        self._records[identifier] = record.mark_deleted()
        return True


class InMemoryQrArtifactStore(QrArtifactStoreBase):
    """QR images kept in a dict."""

    def __init__(self):
        self._artifacts: Dict[str, bytes] = {}

    async def put(self, identifier: str, image: bytes) -> None:
        self._artifacts[identifier] = bytes(image)

    async def get(self, identifier: str) -> Optional[bytes]:
        return self._artifacts.get(identifier)

    async def delete(self, identifier: str) -> bool:
        return self._artifacts.pop(identifier, None) is not None


class InMemoryClickRecorder(ClickRecorderBase):
    """Click events appended to per-identifier lists."""

    def __init__(self):
        self._events: Dict[str, List[ClickEvent]] = defaultdict(list)

    async def record(self, event: ClickEvent) -> None:
        self._events[event.identifier].append(event)

    async def count(self, identifier: str) -> int:
        return len(self._events.get(identifier, ()))

    def events(self, identifier: str) -> List[ClickEvent]:
        """Recorded events for an identifier, oldest first."""
        return list(self._events.get(identifier, ()))
