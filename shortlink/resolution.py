"""Short identifier resolution."""

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Optional

from .errors import NotFound
from .models import LinkRecord
from .storage.base import ShortLinkStoreBase
from .storage.cache import RedisLinkCache


class RedirectMode(IntEnum):
    """HTTP status codes a short link may redirect with."""

    MOVED_PERMANENTLY = 301
    FOUND = 302
    TEMPORARY_REDIRECT = 307
    PERMANENT_REDIRECT = 308


@dataclass(frozen=True)
class Redirection:
    target: str
    mode: RedirectMode


@dataclass(frozen=True)
class RedirectPolicy:
    """Chooses the redirect mode from a link's state."""

    safe_mode: RedirectMode = RedirectMode.TEMPORARY_REDIRECT
    unsafe_mode: RedirectMode = RedirectMode.FOUND

    @classmethod
    def from_statuses(cls, safe_status: int, unsafe_status: int) -> "RedirectPolicy":
        """Build a policy from configured HTTP status codes.

        Raises:
            ValueError: If a status is not a redirect status
        """
        return cls(safe_mode=RedirectMode(safe_status), unsafe_mode=RedirectMode(unsafe_status))

    def mode_for(self, record: LinkRecord) -> RedirectMode:
        """Redirect mode for a record, from its ``safe`` flag."""
        return self.safe_mode if record.safe else self.unsafe_mode


class LinkResolutionService:
    """Maps identifiers to redirections.

    Resolution has no side effects; callers record clicks only after a
    successful resolve.
    """

    def __init__(
        self,
        links: ShortLinkStoreBase,
        policy: Optional[RedirectPolicy] = None,
        cache: Optional[RedisLinkCache] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize resolution service.

        Args:
            links: Short link store
            policy: Redirect policy (307 for safe links, 302 otherwise, if omitted)
            cache: Optional Redis cache in front of the store
            logger: Optional logger
        """
        self.links = links
        self.policy = policy or RedirectPolicy()
        self.cache = cache
        self.logger = logger or logging.getLogger(__name__)

    async def resolve(self, identifier: str) -> Redirection:
        """Resolve an identifier.

        Raises:
            NotFound: If the identifier is empty, unknown or deleted
        """
        record = await self.lookup(identifier)
        if record is None or record.deleted:
            self.logger.warning(f"Short link not found: {identifier}")
            raise NotFound(identifier)
        return Redirection(target=record.target, mode=self.policy.mode_for(record))

    async def lookup(self, identifier: str) -> Optional[LinkRecord]:
        """Get the record for an identifier, cache first.

        A cache miss is filled only if the key is still empty, so a read that
        raced a deletion cannot replace the tombstone written by ``forget``.

        Args:
            identifier: Short link identifier

        Returns:
            The record (possibly a tombstone) or None
        """
        if not identifier:
            return None

        if self.cache:
            cached = await self.cache.get(identifier)
            if cached:
                self.logger.debug(f"Cache hit for {identifier}")
                return cached

        record = await self.links.find(identifier)
        if record is not None and not record.deleted and self.cache:
            await self.cache.set(record, only_if_absent=True)
        return record

    async def forget(self, record: LinkRecord) -> None:
        """Cache the tombstone of a deleted record.

        Called after the store delete; overwrites whatever is cached.
        """
        if self.cache:
            await self.cache.set(record.mark_deleted())
