"""Tests for common utilities."""

import json
import logging

from shortlink.common.logging_config import JsonFormatter, setup_logging
from shortlink.common.headers import build_base_url, client_ip, extract_forwarded_headers
from shortlink.common.url_builder import build_qr_url, build_short_url
from shortlink.common.validators import is_valid_identifier, is_valid_url


class TestValidators:
    """Test validation utilities."""

    def test_valid_urls(self):
        valid, _ = is_valid_url("https://example.com")
        assert valid

        valid, _ = is_valid_url("http://example.com/path")
        assert valid

        valid, _ = is_valid_url("https://sub.example.com:8080/path?query=value")
        assert valid

    def test_invalid_urls(self):
        valid, error = is_valid_url("")
        assert not valid
        assert "required" in error.lower()

        valid, error = is_valid_url("not-a-url")
        assert not valid

        valid, error = is_valid_url("ftp://example.com")
        assert not valid
        assert "http" in error.lower()

        valid, error = is_valid_url("https://example.com/" + "a" * 2048)
        assert not valid
        assert "too long" in error

    def test_valid_identifiers(self):
        for identifier in ("abc123", "test-code", "test_code"):
            valid, _ = is_valid_identifier(identifier)
            assert valid, identifier

    def test_invalid_identifiers(self):
        valid, error = is_valid_identifier("abc")
        assert not valid
        assert "at least" in error.lower()

        valid, error = is_valid_identifier("a" * 25)
        assert not valid
        assert "at most" in error.lower()

        valid, error = is_valid_identifier("abc@123")
        assert not valid

        valid, error = is_valid_identifier("index")
        assert not valid
        assert "reserved" in error.lower()


class TestHeaders:
    """Test header utilities."""

    def test_extract_forwarded_headers(self):
        headers = {
            "X-Forwarded-Proto": "https",
            "X-Forwarded-Host": "example.com",
            "X-Forwarded-For": "1.2.3.4",
        }

        result = extract_forwarded_headers(headers)
        assert result["forwarded_proto"] == "https"
        assert result["forwarded_host"] == "example.com"
        assert result["forwarded_for"] == "1.2.3.4"

    def test_client_ip_prefers_first_forwarded_address(self):
        headers = {"X-Forwarded-For": "203.0.113.9, 10.0.0.1"}

        assert client_ip(headers, peer="127.0.0.1") == "203.0.113.9"

    def test_client_ip_falls_back_to_peer(self):
        assert client_ip({}, peer="127.0.0.1") == "127.0.0.1"
        assert client_ip({}) is None

    def test_build_base_url_from_headers(self):
        headers = {
            "X-Forwarded-Proto": "https",
            "X-Forwarded-Host": "example.com",
        }

        assert build_base_url(headers=headers, fallback_base_url="http://localhost:9200") == "https://example.com"

    def test_build_base_url_fallback(self):
        assert build_base_url(headers={}, fallback_base_url="http://localhost:9200/") == "http://localhost:9200"


class TestURLBuilder:
    """Test URL building utilities."""

    def test_build_short_url_no_prefix(self):
        url = build_short_url(identifier="abc123", base_url="https://example.com")
        assert url == "https://example.com/abc123"

    def test_build_short_url_with_prefix(self):
        url = build_short_url(identifier="abc123", base_url="https://example.com/", path_prefix="/s")
        assert url == "https://example.com/s/abc123"

    def test_build_qr_url(self):
        url = build_qr_url(identifier="abc123", base_url="https://example.com", path_prefix="s")
        assert url == "https://example.com/s/abc123/qr"


class TestLogging:
    """Test logging setup."""

    def test_json_formatter_escapes_and_tags_identifier(self):
        record = logging.LogRecord(
            name="shortlink.qr_service",
            level=logging.INFO,
            pathname=__file__,
            lineno=1,
            msg='QR code generated for "abc123"',
            args=(),
            exc_info=None,
        )
        record.identifier = "abc123"

        entry = json.loads(JsonFormatter().format(record))

        assert entry["message"] == 'QR code generated for "abc123"'
        assert entry["identifier"] == "abc123"
        assert entry["level"] == "INFO"

    def test_setup_logging_covers_component_loggers(self):
        logger = setup_logging(level="WARNING", json_format=True)

        assert logger.name == "shortlink"
        assert logger.level == logging.WARNING
        assert isinstance(logger.handlers[0].formatter, JsonFormatter)
        assert logging.getLogger("web_app").handlers == logger.handlers
