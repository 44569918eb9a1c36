"""Public short link routes: redirect and QR image."""

from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import RedirectResponse, Response

from shortlink.errors import EncodingFailure, NotFound, NotReady, StorageError

router = APIRouter()

QR_MEDIA_TYPE = "image/png"


@router.get("/{identifier}/qr", include_in_schema=False)
async def get_qr(request: Request, identifier: str):
    """Serve the QR code of a short link as PNG."""
    service = request.app.state.service

    try:
        image = await service.get_qr(identifier)
    except NotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except NotReady as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e),
            headers={"Retry-After": "1"},
        )
    except EncodingFailure as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

    return Response(content=image, media_type=QR_MEDIA_TYPE)


@router.get("/{identifier}", include_in_schema=False)
async def redirect_to_target(request: Request, identifier: str):
    """Redirect to the target URL and record the click."""
    service = request.app.state.service

    try:
        redirection = await service.redirect(
            identifier,
            ip=getattr(request.state, "client_ip", None),
        )
    except NotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

    return RedirectResponse(url=redirection.target, status_code=int(redirection.mode))
