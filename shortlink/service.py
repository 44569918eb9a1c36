"""Short link service: creation flow and orchestration of the core services."""

import asyncio
import logging
from typing import Any, Dict, Optional, Set

from .common.validators import is_valid_identifier, is_valid_url
from .errors import IdentifierTaken, NotFound
from .models import ClickEvent, LinkProperties, LinkRecord
from .qr_service import QrIssuanceService
from .resolution import LinkResolutionService, Redirection
from .shortcode import IdentifierGenerator
from .storage.base import ClickRecorderBase, QrArtifactStoreBase, ShortLinkStoreBase


class ShortLinkService:
    """Service layer tying the stores, resolution and QR issuance together."""

    def __init__(
        self,
        links: ShortLinkStoreBase,
        artifacts: QrArtifactStoreBase,
        clicks: ClickRecorderBase,
        resolver: Optional[LinkResolutionService] = None,
        qr: Optional[QrIssuanceService] = None,
        identifier_generator: Optional[IdentifierGenerator] = None,
        logger: Optional[logging.Logger] = None,
        enable_custom_identifiers: bool = True,
        max_collision_retries: int = 5,
    ):
        """Initialize short link service.

        Args:
            links: Short link store
            artifacts: QR artifact store
            clicks: Click sink
            resolver: Resolution service (built on ``links`` if omitted)
            qr: QR issuance service (built on ``links``/``artifacts`` if omitted)
            identifier_generator: Identifier generation capability
            logger: Optional logger
            enable_custom_identifiers: Whether callers may choose identifiers
            max_collision_retries: Random attempts after a hash collision
        """
        self.logger = logger or logging.getLogger(__name__)
        self.links = links
        self.artifacts = artifacts
        self.clicks = clicks
        self.resolver = resolver or LinkResolutionService(links, logger=self.logger)
        self.qr = qr or QrIssuanceService(links, artifacts, logger=self.logger)
        self.generator = identifier_generator or IdentifierGenerator()
        self.enable_custom_identifiers = enable_custom_identifiers
        self.max_collision_retries = max_collision_retries
        self._background: Set[asyncio.Task] = set()

    async def create_short_link(
        self,
        url: str,
        qr: bool = False,
        sponsor: Optional[str] = None,
        ip: Optional[str] = None,
        owner: Optional[str] = None,
        country: Optional[str] = None,
        safe: bool = True,
        custom_identifier: Optional[str] = None,
    ) -> LinkRecord:
        """Create a short link and, if asked, start its QR generation.

        Args:
            url: Target URL
            qr: Generate a QR code for the link
            sponsor: Optional sponsor
            ip: Creator IP
            owner: Optional owner
            country: Optional country code
            safe: Whether the target is flagged safe
            custom_identifier: Caller-chosen identifier

        Returns:
            The stored record

        Raises:
            ValueError: If the URL or custom identifier is invalid
            IdentifierTaken: If the custom identifier already exists
        """
        is_valid, error = is_valid_url(url)
        if not is_valid:
            raise ValueError(f"Invalid URL: {error}")

        if custom_identifier:
            if not self.enable_custom_identifiers:
                raise ValueError("Custom identifiers are not enabled")

            is_valid, error = is_valid_identifier(custom_identifier)
            if not is_valid:
                raise ValueError(f"Invalid identifier: {error}")

            if await self.links.exists(custom_identifier):
                raise IdentifierTaken(custom_identifier)

            identifier = custom_identifier
        else:
            identifier = await self._generate_unique_identifier(url)

        record = LinkRecord(
            identifier=identifier,
            target=url,
            properties=LinkProperties(
                ip=ip,
                sponsor=sponsor,
                safe=safe,
                owner=owner,
                country=country,
                qr_requested=qr,
            ),
        )
        if not await self.links.save(record):
            raise IdentifierTaken(identifier)

        self.logger.info(f"Created short link: {identifier} -> {url}", extra={"identifier": identifier})

        if qr:
            await self.qr.schedule(url, identifier)

        return record

    async def redirect(self, identifier: str, ip: Optional[str] = None) -> Redirection:
        """Resolve an identifier and record the click.

        Args:
            identifier: Short link identifier
            ip: Originating client IP, stored with the click

        Returns:
            Target URL and redirect mode

        Raises:
            NotFound: If the identifier does not resolve; no click is recorded
        """
        redirection = await self.resolver.resolve(identifier)
        self._fire_and_forget(self.clicks.record(ClickEvent(identifier=identifier, ip=ip)))
        return redirection

    async def get_qr(self, identifier: str) -> bytes:
        """PNG bytes of the QR code for an identifier.

        Args:
            identifier: Short link identifier

        Returns:
            PNG image bytes

        Raises:
            NotFound: If the link is unknown, deleted or has no QR code
            NotReady: If generation is still running after the wait timeout
        """
        return await self.qr.get(identifier)

    async def get_link_info(self, identifier: str) -> Dict[str, Any]:
        """Describe a live short link.

        Args:
            identifier: Short link identifier

        Returns:
            Record fields plus ``clicks`` and ``qr_ready``

        Raises:
            NotFound: If the identifier is unknown or deleted
        """
        record = await self.resolver.lookup(identifier)
        if record is None or record.deleted:
            raise NotFound(identifier)

        qr_ready = record.qr_requested and await self.artifacts.get(identifier) is not None
        return {
            **record.to_dict(),
            "clicks": await self.clicks.count(identifier),
            "qr_ready": qr_ready,
        }

    async def delete_short_link(self, identifier: str) -> bool:
        """Logically delete a short link and drop its QR code.

        The tombstone is cached after the store delete, so resolutions that
        read the live record earlier cannot bring it back into the cache. A
        QR generation still running drops its own artifact when it finishes.

        Args:
            identifier: Short link identifier

        Returns:
            True if a live link was deleted
        """
        deleted = await self.links.delete(identifier)
        if deleted:
            tombstone = await self.links.find(identifier)
            if tombstone is not None:
                await self.resolver.forget(tombstone)
            await self.artifacts.delete(identifier)
            self.logger.info(f"Deleted short link: {identifier}", extra={"identifier": identifier})
        return deleted

    async def health_check(self) -> Dict[str, bool]:
        """Check every backend.

        Returns:
            Per-backend status plus ``overall``; a disabled cache counts as healthy
        """
        database = await self.links.health_check()
        artifacts = await self.artifacts.health_check()
        clicks = await self.clicks.health_check()
        cache = await self.resolver.cache.ping() if self.resolver.cache else True

        return {
            "database": database,
            "artifacts": artifacts,
            "clicks": clicks,
            "cache": cache,
            "overall": database and artifacts and clicks and cache,
        }

    async def drain(self) -> None:
        """Wait for pending click recordings and QR generations.

        Failures of background work are logged by the tasks themselves and
        are not raised here.
        """
        if self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)
        await self.qr.drain()

    async def close(self) -> None:
        """Drain background work and close connections."""
        await self.drain()
        await self.links.close()
        await self.artifacts.close()
        await self.clicks.close()
        if self.resolver.cache:
            await self.resolver.cache.close()

    def _fire_and_forget(self, coro) -> None:
        task = asyncio.create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background_done)

    def _background_done(self, task: asyncio.Task) -> None:
        self._background.discard(task)
        if not task.cancelled() and task.exception() is not None:
            self.logger.error(f"Background task failed: {task.exception()}")

    async def _generate_unique_identifier(self, url: str) -> str:
        """Deterministic identifier first, then random ones on collision.

        Raises:
            ValueError: If no free identifier is found
        """
        identifier = self.generator.from_url(url)
        if not await self.links.exists(identifier):
            return identifier

        for attempt in range(self.max_collision_retries):
            identifier = self.generator.random()
            if not await self.links.exists(identifier):
                self.logger.debug(f"Generated identifier after {attempt + 1} attempts: {identifier}")
                return identifier

        identifier = self.generator.from_uuid(length=self.generator.default_length + 2)
        if not await self.links.exists(identifier):
            return identifier

        raise ValueError("Unable to generate unique identifier after multiple attempts")
