"""Common utilities."""

from .validators import is_valid_url, is_valid_identifier
from .headers import extract_forwarded_headers, build_base_url, client_ip
from .url_builder import build_short_url, build_qr_url
from .logging_config import setup_logging

__all__ = [
    "is_valid_url",
    "is_valid_identifier",
    "extract_forwarded_headers",
    "build_base_url",
    "client_ip",
    "build_short_url",
    "build_qr_url",
    "setup_logging",
]
