"""Short link redirection with QR code issuance."""

from .errors import EncodingFailure, IdentifierTaken, NotFound, NotReady, ShortLinkError, StorageError
from .models import ClickEvent, LinkProperties, LinkRecord
from .qr import QrEncoder
from .qr_service import QrIssuanceService
from .resolution import LinkResolutionService, RedirectMode, RedirectPolicy, Redirection
from .service import ShortLinkService
from .shortcode import IdentifierGenerator

__all__ = [
    "ShortLinkError",
    "NotFound",
    "NotReady",
    "EncodingFailure",
    "StorageError",
    "IdentifierTaken",
    "LinkRecord",
    "LinkProperties",
    "ClickEvent",
    "QrEncoder",
    "QrIssuanceService",
    "LinkResolutionService",
    "RedirectMode",
    "RedirectPolicy",
    "Redirection",
    "ShortLinkService",
    "IdentifierGenerator",
]
