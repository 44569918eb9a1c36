"""Exception taxonomy for the short link core."""


class ShortLinkError(Exception):
    """Base class for errors raised by the short link core."""


class NotFound(ShortLinkError):
    """Identifier is unknown, deleted, or has no QR code to disclose."""

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f"Short link '{identifier}' not found")


class NotReady(ShortLinkError):
    """QR code was requested but generation has not completed yet."""

    def __init__(self, identifier: str, waited: float = 0.0):
        self.identifier = identifier
        self.waited = waited
        super().__init__(
            f"QR code for '{identifier}' is not ready (waited {waited:.2f}s)"
        )


class EncodingFailure(ShortLinkError):
    """QR encoder could not produce an image for a URL."""

    def __init__(self, url: str, reason: str = ""):
        self.url = url
        self.reason = reason
        message = f"Cannot encode QR code for '{url}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class StorageError(ShortLinkError):
    """A storage backend failed (I/O, connectivity, driver error)."""


class IdentifierTaken(ValueError):
    """Requested identifier already belongs to another link."""

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f"Identifier '{identifier}' already exists")
