"""Tests for service layer."""

import pytest

from shortlink.errors import IdentifierTaken, NotFound
from shortlink.qr import PNG_SIGNATURE
from shortlink.resolution import RedirectMode


@pytest.mark.asyncio
class TestShortLinkService:
    """Test short link service."""

    async def test_create_short_link(self, service, sample_urls):
        record = await service.create_short_link(sample_urls[0], sponsor="acme", ip="10.0.0.1")

        assert record.target == sample_urls[0]
        assert record.properties.sponsor == "acme"
        assert record.properties.ip == "10.0.0.1"
        assert record.safe
        assert not record.qr_requested

    async def test_create_with_custom_identifier(self, service, sample_urls):
        record = await service.create_short_link(sample_urls[0], custom_identifier="test123")

        assert record.identifier == "test123"

    async def test_create_duplicate_custom_identifier(self, service, sample_urls):
        await service.create_short_link(sample_urls[0], custom_identifier="duplicate")

        with pytest.raises(IdentifierTaken, match="already exists"):
            await service.create_short_link(sample_urls[1], custom_identifier="duplicate")

    async def test_reserved_custom_identifier(self, service, sample_urls):
        with pytest.raises(ValueError, match="reserved"):
            await service.create_short_link(sample_urls[0], custom_identifier="index")

    async def test_same_url_twice_gets_distinct_identifiers(self, service, sample_urls):
        first = await service.create_short_link(sample_urls[0])
        second = await service.create_short_link(sample_urls[0])

        assert first.identifier != second.identifier

    async def test_invalid_url(self, service):
        with pytest.raises(ValueError, match="Invalid URL"):
            await service.create_short_link("not-a-url")

    async def test_create_with_qr_generates_once(self, service, encoder, sample_urls):
        record = await service.create_short_link(sample_urls[0], qr=True)

        image = await service.get_qr(record.identifier)

        assert image.startswith(PNG_SIGNATURE)
        assert encoder.calls == 1

    async def test_qr_not_requested(self, service, sample_urls):
        record = await service.create_short_link(sample_urls[0], qr=False)

        with pytest.raises(NotFound):
            await service.get_qr(record.identifier)

    async def test_redirect_records_click(self, service, clicks, sample_urls):
        record = await service.create_short_link(sample_urls[0])

        redirection = await service.redirect(record.identifier, ip="192.0.2.7")
        await service.drain()

        assert redirection.target == sample_urls[0]
        assert redirection.mode == RedirectMode.TEMPORARY_REDIRECT
        events = clicks.events(record.identifier)
        assert [e.ip for e in events] == ["192.0.2.7"]

    async def test_failed_redirect_records_nothing(self, service, clicks):
        with pytest.raises(NotFound):
            await service.redirect("nothere", ip="192.0.2.7")
        await service.drain()

        assert await clicks.count("nothere") == 0

    async def test_unsafe_link_redirect_mode(self, service, sample_urls):
        record = await service.create_short_link(sample_urls[0], safe=False)

        redirection = await service.redirect(record.identifier)

        assert redirection.mode == RedirectMode.FOUND

    async def test_get_link_info(self, service, sample_urls):
        record = await service.create_short_link(sample_urls[0], qr=True)
        await service.redirect(record.identifier)
        await service.drain()

        info = await service.get_link_info(record.identifier)

        assert info["identifier"] == record.identifier
        assert info["target"] == sample_urls[0]
        assert info["clicks"] == 1
        assert info["qr_ready"] is True

    async def test_get_link_info_not_found(self, service):
        with pytest.raises(NotFound):
            await service.get_link_info("nothere")

    async def test_delete_short_link(self, service, artifacts, sample_urls):
        record = await service.create_short_link(sample_urls[0], qr=True)
        await service.drain()

        assert await service.delete_short_link(record.identifier)
        assert not await service.delete_short_link(record.identifier)

        with pytest.raises(NotFound):
            await service.redirect(record.identifier)
        with pytest.raises(NotFound):
            await service.get_qr(record.identifier)
        assert await artifacts.get(record.identifier) is None

    async def test_delete_while_qr_generating(self, make_service, make_encoder, artifacts, sample_urls):
        service = make_service(encoder=make_encoder(delay=0.2))
        record = await service.create_short_link(sample_urls[0], qr=True)

        assert await service.delete_short_link(record.identifier)
        await service.drain()

        assert await artifacts.get(record.identifier) is None
        with pytest.raises(NotFound):
            await service.get_qr(record.identifier)

    async def test_deleted_identifier_is_not_reused(self, service, sample_urls):
        await service.create_short_link(sample_urls[0], custom_identifier="gone1")
        await service.delete_short_link("gone1")

        with pytest.raises(IdentifierTaken):
            await service.create_short_link(sample_urls[1], custom_identifier="gone1")

    async def test_health_check(self, service):
        health = await service.health_check()

        assert health == {
            "database": True,
            "artifacts": True,
            "clicks": True,
            "cache": True,
            "overall": True,
        }


@pytest.mark.asyncio
async def test_example_scenario(service, sample_urls):
    """abc123 -> http://example.com with a QR code, then redirect."""
    url = sample_urls[0]
    record = await service.create_short_link(url, qr=True, custom_identifier="abc123")
    await service.qr.generate(url, record.identifier)

    image = await service.get_qr("abc123")
    redirection = await service.redirect("abc123")

    assert image.startswith(PNG_SIGNATURE)
    assert redirection.target == "http://example.com"
    assert redirection.mode == RedirectMode.TEMPORARY_REDIRECT
