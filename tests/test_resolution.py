"""Tests for identifier resolution."""

import asyncio

import pytest

from shortlink.errors import NotFound
from shortlink.models import LinkProperties, LinkRecord
from shortlink.resolution import LinkResolutionService, RedirectMode, RedirectPolicy
from shortlink.service import ShortLinkService
from shortlink.storage.memory import InMemoryShortLinkStore


class FakeLinkCache:
    """Dict-backed stand-in for RedisLinkCache."""

    def __init__(self):
        self.records = {}

    async def get(self, identifier):
        return self.records.get(identifier)

    async def set(self, record, ttl=None, only_if_absent=False):
        if only_if_absent and record.identifier in self.records:
            return False
        self.records[record.identifier] = record
        return True

    async def delete(self, identifier):
        return self.records.pop(identifier, None) is not None


class GatedLinkStore(InMemoryShortLinkStore):
    """Store whose next ``find`` parks after reading until released."""

    def __init__(self):
        super().__init__()
        self.hold_next_find = False
        self.parked = asyncio.Event()
        self.release = asyncio.Event()

    async def find(self, identifier):
        record = await super().find(identifier)
        if self.hold_next_find:
            self.hold_next_find = False
            self.parked.set()
            await self.release.wait()
        return record


@pytest.mark.asyncio
class TestLinkResolutionService:
    """Test link resolution."""

    async def test_unknown_identifier(self, resolver):
        with pytest.raises(NotFound):
            await resolver.resolve("nothere")

    async def test_empty_identifier(self, resolver):
        with pytest.raises(NotFound):
            await resolver.resolve("")

    async def test_safe_link_default_mode(self, resolver, links):
        await links.save(LinkRecord(identifier="abc123", target="http://example.com"))

        redirection = await resolver.resolve("abc123")

        assert redirection.target == "http://example.com"
        assert redirection.mode == RedirectMode.TEMPORARY_REDIRECT

    async def test_unsafe_link_default_mode(self, resolver, links):
        await links.save(LinkRecord(
            identifier="abc123",
            target="http://example.com",
            properties=LinkProperties(safe=False),
        ))

        redirection = await resolver.resolve("abc123")

        assert redirection.mode == RedirectMode.FOUND

    async def test_policy_is_pluggable(self, links):
        resolver = LinkResolutionService(
            links, policy=RedirectPolicy.from_statuses(301, 307)
        )
        await links.save(LinkRecord(identifier="safe1", target="http://example.com/s"))
        await links.save(LinkRecord(
            identifier="unsafe1",
            target="http://example.com/u",
            properties=LinkProperties(safe=False),
        ))

        assert (await resolver.resolve("safe1")).mode == 301
        assert (await resolver.resolve("unsafe1")).mode == 307

    async def test_deleted_link(self, resolver, links):
        await links.save(LinkRecord(identifier="abc123", target="http://example.com"))
        await links.delete("abc123")

        with pytest.raises(NotFound):
            await resolver.resolve("abc123")

    async def test_resolution_uses_cache(self, links):
        cache = FakeLinkCache()
        resolver = LinkResolutionService(links, cache=cache)
        await links.save(LinkRecord(identifier="abc123", target="http://example.com"))

        await resolver.resolve("abc123")
        assert "abc123" in cache.records

        await links.delete("abc123")
        await resolver.forget(await links.find("abc123"))

        assert cache.records["abc123"].deleted
        with pytest.raises(NotFound):
            await resolver.resolve("abc123")

    async def test_stale_read_does_not_revive_deleted_link(self, artifacts, clicks):
        links = GatedLinkStore()
        cache = FakeLinkCache()
        resolver = LinkResolutionService(links, cache=cache)
        service = ShortLinkService(links=links, artifacts=artifacts, clicks=clicks, resolver=resolver)
        await links.save(LinkRecord(identifier="abc123", target="http://example.com"))

        links.hold_next_find = True
        stale = asyncio.create_task(resolver.resolve("abc123"))
        await links.parked.wait()

        assert await service.delete_short_link("abc123")
        links.release.set()
        assert (await stale).target == "http://example.com"

        assert cache.records["abc123"].deleted
        with pytest.raises(NotFound):
            await resolver.resolve("abc123")


def test_invalid_redirect_status():
    with pytest.raises(ValueError):
        RedirectPolicy.from_statuses(200, 302)
