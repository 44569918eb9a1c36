"""Links to the redirect and QR endpoints of a short link."""


def build_short_url(identifier: str, base_url: str, path_prefix: str = "") -> str:
    """Build the public redirect URL of a short link.

    Args:
        identifier: The short link identifier
        base_url: Base URL (e.g., https://example.com)
        path_prefix: Optional path prefix (e.g., /s)

    Returns:
        Complete short URL
    """
    base = base_url.rstrip("/")
    prefix = path_prefix.strip("/")

    if prefix:
        return f"{base}/{prefix}/{identifier}"
    return f"{base}/{identifier}"


def build_qr_url(identifier: str, base_url: str, path_prefix: str = "") -> str:
    """Build the URL serving the QR image of a short link.

    Args:
        identifier: The short link identifier
        base_url: Base URL (e.g., https://example.com)
        path_prefix: Optional path prefix (e.g., /s)

    Returns:
        URL ending in /qr
    """
    return f"{build_short_url(identifier, base_url, path_prefix)}/qr"
