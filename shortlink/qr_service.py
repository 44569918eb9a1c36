"""QR code issuance: single-flight generation and guarded retrieval."""

import asyncio
import logging
import time
from typing import Callable, Optional

from .errors import NotFound, NotReady
from .models import LinkRecord
from .qr import QrEncoder
from .singleflight import SingleFlight
from .storage.base import QrArtifactStoreBase, ShortLinkStoreBase


class QrIssuanceService:
    """Generates and serves the QR code of a short link.

    An artifact exists for an identifier only once a generation for it has
    completed. Generation for one identifier runs at most once at a time and
    never re-encodes a stored artifact.
    """

    def __init__(
        self,
        links: ShortLinkStoreBase,
        artifacts: QrArtifactStoreBase,
        encoder: Optional[Callable[[str], bytes]] = None,
        wait_timeout_seconds: float = 5.0,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize QR issuance service.

        Args:
            links: Short link store used to validate identifiers
            artifacts: Store for generated images
            encoder: Callable turning a URL into PNG bytes
            wait_timeout_seconds: How long ``get`` waits for a running generation
            logger: Optional logger
        """
        self.links = links
        self.artifacts = artifacts
        self.encoder = encoder or QrEncoder()
        self.wait_timeout_seconds = wait_timeout_seconds
        self.logger = logger or logging.getLogger(__name__)
        self.flights = SingleFlight(logger=self.logger)

    async def generate(self, url: str, identifier: str) -> None:
        """Generate and store the QR code for an identifier.

        Concurrent calls for the same identifier share one encode. A call
        made after the artifact exists is a no-op.

        Raises:
            NotFound: If the identifier does not exist
            EncodingFailure: If the encoder rejects the URL
        """
        record = await self._live_record(identifier)
        if await self.artifacts.get(identifier) is not None:
            self.logger.debug(f"QR code already stored for {identifier}")
            return
        await self.flights.do(identifier, lambda: self._encode_and_store(self._target(record, url), identifier))

    async def schedule(self, url: str, identifier: str) -> asyncio.Task:
        """Start generation without waiting for it.

        Raises:
            NotFound: If the identifier does not exist
        """
        record = await self._live_record(identifier)
        task = self.flights.start(identifier, lambda: self._encode_and_store(self._target(record, url), identifier))
        task.add_done_callback(lambda t: self._log_failure(identifier, t))
        return task

    async def get(self, identifier: str) -> bytes:
        """Return the stored QR code for an identifier.

        A missing artifact is waited for up to ``wait_timeout_seconds``. If no
        generation is running (the trigger was lost), one is started from the
        stored target.

        Raises:
            NotFound: If the identifier does not exist or no QR code was requested
            NotReady: If generation did not finish in time
            EncodingFailure: If the generation this call waited on failed
        """
        record = await self._live_record(identifier)
        if not record.qr_requested:
            raise NotFound(identifier)

        image = await self.artifacts.get(identifier)
        if image is not None:
            return image

        if not self.flights.in_flight(identifier):
            self.logger.warning(
                f"No QR generation running for {identifier}, starting one", extra={"identifier": identifier}
            )
        task = self.flights.start(identifier, lambda: self._encode_and_store(record.target, identifier))

        started = time.monotonic()
        done, _ = await asyncio.wait({task}, timeout=self.wait_timeout_seconds)
        # A flight cancelled from outside (loop shutdown) is not this caller's failure.
        if not done or task.cancelled():
            raise NotReady(identifier, waited=time.monotonic() - started)
        task.result()

        image = await self.artifacts.get(identifier)
        if image is None:
            raise NotReady(identifier, waited=time.monotonic() - started)
        return image

    async def drain(self) -> None:
        """Wait for running generations."""
        await self.flights.drain()

    async def _live_record(self, identifier: str) -> LinkRecord:
        record = await self.links.find(identifier) if identifier else None
        if record is None or record.deleted:
            raise NotFound(identifier)
        return record

    def _target(self, record: LinkRecord, url: str) -> str:
        if url != record.target:
            self.logger.warning(
                f"QR requested for {record.identifier} with {url!r}, "
                f"encoding stored target {record.target!r}"
            )
        return record.target

    async def _encode_and_store(self, url: str, identifier: str) -> bytes:
        # A flight that starts right after another one finished sees its result.
        existing = await self.artifacts.get(identifier)
        if existing is not None:
            return existing

        image = await asyncio.to_thread(self.encoder, url)
        await self.artifacts.put(identifier, image)

        # The link may have been deleted while encoding; its artifact must not outlive it.
        record = await self.links.find(identifier)
        if record is None or record.deleted:
            await self.artifacts.delete(identifier)
            self.logger.info(
                f"Short link {identifier} deleted during QR generation, artifact dropped",
                extra={"identifier": identifier},
            )
            raise NotFound(identifier)

        self.logger.info(f"QR code generated for {identifier} ({len(image)} bytes)", extra={"identifier": identifier})
        return image

    def _log_failure(self, identifier: str, task: asyncio.Task) -> None:
        if task.cancelled():
            self.logger.warning(f"QR generation for {identifier} was cancelled", extra={"identifier": identifier})
        elif isinstance(task.exception(), NotFound):
            self.logger.info(f"QR generation for {identifier} abandoned: link is gone", extra={"identifier": identifier})
        elif task.exception() is not None:
            self.logger.error(
                f"QR generation for {identifier} failed: {task.exception()}", extra={"identifier": identifier}
            )
