"""Pydantic schemas for API requests and responses."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class ShortLinkRequest(BaseModel):
    """Request to create a short link."""

    url: str = Field(..., description="The target URL", min_length=1, max_length=2048)
    sponsor: Optional[str] = Field(None, description="Optional sponsor")
    qr: bool = Field(False, description="Generate a QR code for the short link")
    custom_identifier: Optional[str] = Field(
        None, description="Optional custom identifier", min_length=4, max_length=20
    )

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("URL must start with http:// or https://")
        return v

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"url": "https://example.com/very/long/path", "qr": True},
                {"url": "https://github.com/user/repo", "custom_identifier": "myrepo"},
            ]
        }
    }


class LinkPropertiesOut(BaseModel):
    safe: bool
    qr: Optional[str] = Field(None, description="URL of the QR code image, if requested")


class ShortLinkResponse(BaseModel):
    """Response after creating a short link."""

    identifier: str = Field(..., description="The short link identifier")
    url: str = Field(..., description="The complete short URL")
    target: str = Field(..., description="The target URL")
    properties: LinkPropertiesOut

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "identifier": "abc123",
                    "url": "https://short.link/abc123",
                    "target": "https://example.com/very/long/path",
                    "properties": {"safe": True, "qr": "https://short.link/abc123/qr"},
                }
            ]
        }
    }


class LinkInfoResponse(BaseModel):
    """Stored information about a short link."""

    identifier: str
    target: str
    created_at: datetime
    safe: bool
    sponsor: Optional[str] = None
    owner: Optional[str] = None
    country: Optional[str] = None
    qr_requested: bool
    qr_ready: bool
    clicks: int


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Overall status")
    database: str = Field(..., description="Short link store status")
    artifacts: str = Field(..., description="QR artifact store status")
    clicks: str = Field(..., description="Click sink status")
    cache: str = Field(..., description="Link cache status")
    timestamp: datetime = Field(..., description="Check timestamp")


class ErrorResponse(BaseModel):
    """Error response."""

    detail: str = Field(..., description="Error message")
