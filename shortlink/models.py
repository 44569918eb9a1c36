"""Data models for short links, QR artifacts and clicks."""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Optional


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_timestamp(value) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


@dataclass(frozen=True)
class LinkProperties:
    """Metadata captured when a short link is created."""

    ip: Optional[str] = None
    sponsor: Optional[str] = None
    safe: bool = True
    owner: Optional[str] = None
    country: Optional[str] = None
    qr_requested: bool = False


@dataclass(frozen=True)
class LinkRecord:
    """A short link: identifier, target URL and creation properties.

    Records are immutable. ``qr_requested`` is fixed at creation time and the
    only later change is a logical delete, which produces a new record.
    """

    identifier: str
    target: str
    properties: LinkProperties = field(default_factory=LinkProperties)
    created_at: datetime = field(default_factory=_utcnow)
    deleted: bool = False

    @property
    def qr_requested(self) -> bool:
        return self.properties.qr_requested

    @property
    def safe(self) -> bool:
        return self.properties.safe

    def mark_deleted(self) -> "LinkRecord":
        """Return a tombstone copy of this record."""
        return replace(self, deleted=True)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        props = self.properties
        return {
            "identifier": self.identifier,
            "target": self.target,
            "ip": props.ip,
            "sponsor": props.sponsor,
            "safe": props.safe,
            "owner": props.owner,
            "country": props.country,
            "qr_requested": props.qr_requested,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "deleted": self.deleted,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LinkRecord":
        """Create from dictionary (as produced by ``to_dict`` or a DB row)."""
        created_at = _parse_timestamp(data.get("created_at")) or _utcnow()
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return cls(
            identifier=data["identifier"],
            target=data["target"],
            properties=LinkProperties(
                ip=data.get("ip"),
                sponsor=data.get("sponsor"),
                safe=bool(data.get("safe", True)),
                owner=data.get("owner"),
                country=data.get("country"),
                qr_requested=bool(data.get("qr_requested", False)),
            ),
            created_at=created_at,
            deleted=bool(data.get("deleted", False)),
        )


@dataclass(frozen=True)
class ClickEvent:
    """One successful redirect."""

    identifier: str
    ip: Optional[str] = None
    created_at: datetime = field(default_factory=_utcnow)
