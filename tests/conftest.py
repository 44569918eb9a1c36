"""Pytest configuration and fixtures."""

import threading
import time

import pytest
from httpx import ASGITransport, AsyncClient

from config import Config
from shortlink.common.logging_config import setup_logging
from shortlink.qr import QrEncoder
from shortlink.qr_service import QrIssuanceService
from shortlink.resolution import LinkResolutionService
from shortlink.service import ShortLinkService
from shortlink.shortcode import IdentifierGenerator
from shortlink.storage.memory import (
    InMemoryClickRecorder,
    InMemoryQrArtifactStore,
    InMemoryShortLinkStore,
)
from web_app import create_app


class CountingEncoder:
    """QR encoder double that counts encodes and can be slowed down."""

    def __init__(self, delay: float = 0.0, fail_with: Exception = None):
        self.delay = delay
        self.fail_with = fail_with
        self.calls = 0
        self.urls = []
        self._lock = threading.Lock()
        self._encoder = QrEncoder(box_size=2, border=1)

    def __call__(self, url: str) -> bytes:
        with self._lock:
            self.calls += 1
            self.urls.append(url)
        if self.delay:
            time.sleep(self.delay)
        if self.fail_with is not None:
            raise self.fail_with
        return self._encoder.encode(url)


@pytest.fixture
def logger():
    """Create test logger."""
    return setup_logging(level="DEBUG")


@pytest.fixture
def links(logger):
    return InMemoryShortLinkStore(logger=logger)


@pytest.fixture
def artifacts():
    return InMemoryQrArtifactStore()


@pytest.fixture
def clicks():
    return InMemoryClickRecorder()


@pytest.fixture
def make_encoder():
    return CountingEncoder


@pytest.fixture
def encoder():
    return CountingEncoder()


@pytest.fixture
def qr_service(links, artifacts, encoder, logger):
    return QrIssuanceService(links, artifacts, encoder=encoder, wait_timeout_seconds=2.0, logger=logger)


@pytest.fixture
def resolver(links, logger):
    return LinkResolutionService(links, logger=logger)


@pytest.fixture
def make_service(links, artifacts, clicks, resolver, logger):
    """Build a service around the shared stores with a chosen encoder."""
    def _make(encoder=None, wait_timeout_seconds: float = 2.0) -> ShortLinkService:
        qr = QrIssuanceService(
            links,
            artifacts,
            encoder=encoder or CountingEncoder(),
            wait_timeout_seconds=wait_timeout_seconds,
            logger=logger,
        )
        return ShortLinkService(
            links=links,
            artifacts=artifacts,
            clicks=clicks,
            resolver=resolver,
            qr=qr,
            identifier_generator=IdentifierGenerator(default_length=6),
            logger=logger,
        )

    return _make


@pytest.fixture
async def service(make_service, encoder):
    """Create service instance."""
    svc = make_service(encoder=encoder)
    yield svc
    await svc.close()


@pytest.fixture
def config():
    return Config(base_url="http://testserver")


@pytest.fixture
def app(service, config):
    """Create test FastAPI app."""
    return create_app(service_instance=service, config=config)


@pytest.fixture
async def client(app):
    """Create test client."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac


@pytest.fixture
def sample_urls():
    """Sample URLs for testing."""
    return [
        "http://example.com",
        "https://github.com/user/repo",
        "https://stackoverflow.com/questions/123456",
    ]
