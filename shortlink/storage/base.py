"""Abstract storage capabilities consumed by the short link core."""

from abc import ABC, abstractmethod
from typing import Optional

from ..models import ClickEvent, LinkRecord


class ShortLinkStoreBase(ABC):
    """Durable mapping from identifier to :class:`LinkRecord`.

    Implementations must give read-after-write visibility within a process.
    Driver errors are raised as :class:`shortlink.errors.StorageError`.
    """

    @abstractmethod
    async def find(self, identifier: str) -> Optional[LinkRecord]:
        """Get the record for an identifier.

        Args:
            identifier: The identifier to lookup

        Returns:
            The record (possibly a deleted tombstone) or None if never created
        """
        pass

    @abstractmethod
    async def save(self, record: LinkRecord) -> bool:
        """Store a new record.

        Args:
            record: The record to store

        Returns:
            True if stored, False if the identifier is already taken
        """
        pass

    @abstractmethod
    async def exists(self, identifier: str) -> bool:
        """Check if an identifier has been used (deleted records included)."""
        pass

    @abstractmethod
    async def delete(self, identifier: str) -> bool:
        """Logically delete a record.

        Returns:
            True if a live record was deleted, False otherwise
        """
        pass

    async def health_check(self) -> bool:
        """Check if the store is healthy."""
        return True

    async def close(self) -> None:
        """Release connections."""
        pass


class QrArtifactStoreBase(ABC):
    """Mapping from identifier to generated QR image bytes.

    ``put`` must be atomic with respect to ``get``: readers see either no
    artifact or the complete bytes.
    """

    @abstractmethod
    async def put(self, identifier: str, image: bytes) -> None:
        """Store the image bytes for an identifier."""
        pass

    @abstractmethod
    async def get(self, identifier: str) -> Optional[bytes]:
        """Get the image bytes for an identifier, or None."""
        pass

    @abstractmethod
    async def delete(self, identifier: str) -> bool:
        """Drop the artifact for an identifier."""
        pass

    async def health_check(self) -> bool:
        """Check if the store is healthy."""
        return True

    async def close(self) -> None:
        """Release connections."""
        pass


class ClickRecorderBase(ABC):
    """Append-only sink for click events."""

    @abstractmethod
    async def record(self, event: ClickEvent) -> None:
        """Append a click event."""
        pass

    @abstractmethod
    async def count(self, identifier: str) -> int:
        """Number of clicks recorded for an identifier."""
        pass

    async def health_check(self) -> bool:
        """Check if the sink is healthy."""
        return True

    async def close(self) -> None:
        """Release connections."""
        pass
