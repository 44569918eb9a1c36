"""API routes implementation."""

from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException, Request, Response, status

from shortlink.common.headers import build_base_url
from shortlink.common.url_builder import build_qr_url, build_short_url
from shortlink.errors import IdentifierTaken, NotFound, StorageError

from .schemas import (
    ErrorResponse,
    HealthResponse,
    LinkInfoResponse,
    LinkPropertiesOut,
    ShortLinkRequest,
    ShortLinkResponse,
)

router = APIRouter()


def _base_url(request: Request) -> str:
    return build_base_url(
        headers=dict(request.headers),
        fallback_base_url=request.app.state.config.base_url,
        request_scheme=request.url.scheme,
        request_host=request.headers.get("host"),
    )


@router.post(
    "/link",
    response_model=ShortLinkResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid request"},
        409: {"model": ErrorResponse, "description": "Identifier already exists"},
        503: {"model": ErrorResponse, "description": "Storage unavailable"},
    },
    summary="Create short link",
    description="Create a short link. Optionally request a QR code and a custom identifier.",
)
async def create_link(request: Request, response: Response, body: ShortLinkRequest):
    """Create a short link."""
    service = request.app.state.service
    config = request.app.state.config

    try:
        record = await service.create_short_link(
            url=body.url,
            qr=body.qr,
            sponsor=body.sponsor,
            ip=getattr(request.state, "client_ip", None),
            custom_identifier=body.custom_identifier,
        )
    except IdentifierTaken as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

    base_url = _base_url(request)
    short_url = build_short_url(record.identifier, base_url, config.path_prefix)
    qr_url = build_qr_url(record.identifier, base_url, config.path_prefix) if record.qr_requested else None

    response.headers["Location"] = short_url
    return ShortLinkResponse(
        identifier=record.identifier,
        url=short_url,
        target=record.target,
        properties=LinkPropertiesOut(safe=record.safe, qr=qr_url),
    )


@router.get(
    "/link/{identifier}",
    response_model=LinkInfoResponse,
    responses={404: {"model": ErrorResponse, "description": "Identifier not found"}},
    summary="Get short link information",
)
async def get_link_info(request: Request, identifier: str):
    """Get information about a short link, including its click count."""
    service = request.app.state.service

    try:
        info = await service.get_link_info(identifier)
    except NotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

    return LinkInfoResponse(**info)


@router.delete(
    "/link/{identifier}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse, "description": "Identifier not found"}},
    summary="Delete short link",
)
async def delete_link(request: Request, identifier: str):
    """Logically delete a short link; it stops resolving immediately."""
    service = request.app.state.service

    try:
        deleted = await service.delete_short_link(identifier)
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Short link '{identifier}' not found",
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
)
async def health_check(request: Request):
    """Health check endpoint for load balancers and monitoring."""
    health = await request.app.state.service.health_check()

    def label(ok: bool) -> str:
        return "healthy" if ok else "unhealthy"

    return HealthResponse(
        status=label(health["overall"]),
        database=label(health["database"]),
        artifacts=label(health["artifacts"]),
        clicks=label(health["clicks"]),
        cache=label(health["cache"]),
        timestamp=datetime.now(timezone.utc),
    )
