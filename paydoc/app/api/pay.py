"""
Pay document HTTP routes.

This is the presentation collaborator of the document core: it passes raw
form strings in and hands back either the encoded `.pay` file under its
suggested filename, or a field-keyed error map.
"""

import logging
from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile
from fastapi.responses import JSONResponse, Response

from paydoc.app.checks.expiry import default_expiry_local
from paydoc.app.config import PaydocSettings, get_settings
from paydoc.app.registry.presets import ASSET_PRESETS
from paydoc.app.schemas.pay_document import PAY_MEDIA_TYPE
from paydoc.app.schemas.validation import RawPayFields
from paydoc.app.services.builder import PayDocumentBuilder, PayDocumentBuildError
from paydoc.app.services.codec import PayDocumentDecodeError, decode, suggested_filename

logger = logging.getLogger("paydoc.api")

router = APIRouter(tags=["Pay Documents"])

ACCEPTED_UPLOAD_TYPES = {
    PAY_MEDIA_TYPE,
    "application/json",
    "application/octet-stream",
}

# =============================================================================
# Dependency providers
# =============================================================================


def get_builder(request: Request) -> PayDocumentBuilder:
    builder = getattr(request.app.state, "builder", None)
    if builder is None:
        raise RuntimeError("builder not initialized")
    return builder


# =============================================================================
# POST /pay
# =============================================================================


@router.post(
    "/pay",
    summary="Create a .pay document from raw form fields",
    response_class=Response,
    responses={
        200: {
            "content": {PAY_MEDIA_TYPE: {}},
            "description": "Encoded pay document",
        },
        422: {"description": "One or more fields were rejected"},
    },
)
async def create_pay_document(
    fields: RawPayFields,
    builder: Annotated[PayDocumentBuilder, Depends(get_builder)],
    settings: Annotated[PaydocSettings, Depends(get_settings)],
) -> Response:
    try:
        outcome = await builder.create(fields, tz=settings.expiry_zone())
    except PayDocumentBuildError as exc:
        logger.exception("pay document build failed")
        raise HTTPException(
            status_code=500,
            detail="Pay document could not be created. Retry the request.",
        ) from exc

    if not outcome.ok:
        logger.info(
            "pay document rejected fields=%s",
            sorted(outcome.report.errors),
        )
        return JSONResponse(
            status_code=422,
            content={"errors": outcome.report.error_map()},
        )

    return Response(
        content=outcome.encoded,
        media_type=PAY_MEDIA_TYPE,
        headers={
            "Content-Disposition": f'attachment; filename="{outcome.filename}"',
            "X-Pay-Jti": outcome.document.payload.jti,
        },
    )


# =============================================================================
# POST /pay/inspect
# =============================================================================


@router.post(
    "/pay/inspect",
    summary="Decode and validate an uploaded .pay document",
)
async def inspect_pay_document(
    settings: Annotated[PaydocSettings, Depends(get_settings)],
    file: UploadFile = File(..., description="Encoded .pay document"),
) -> JSONResponse:
    if file.content_type not in ACCEPTED_UPLOAD_TYPES:
        raise HTTPException(
            status_code=415,
            detail=f"Unsupported content type: {file.content_type}",
        )

    data = await file.read()

    if not data:
        raise HTTPException(
            status_code=400,
            detail="Uploaded document is empty",
        )

    if len(data) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=413,
            detail=(
                f"Document exceeds maximum allowed size of "
                f"{settings.max_upload_bytes} bytes"
            ),
        )

    try:
        doc = decode(data)
    except PayDocumentDecodeError as exc:
        raise HTTPException(
            status_code=422,
            detail=str(exc),
        ) from exc

    exp = doc.payload.exp_datetime()
    return JSONResponse(
        content={
            "document": doc.to_wire_dict(),
            "filename": suggested_filename(doc),
            "expired": exp is not None and exp <= datetime.now(timezone.utc),
        }
    )


# =============================================================================
# GET /presets
# =============================================================================


@router.get(
    "/presets",
    summary="Asset/network presets and form defaults",
)
def get_presets(
    settings: Annotated[PaydocSettings, Depends(get_settings)],
) -> JSONResponse:
    now = datetime.now(timezone.utc)
    return JSONResponse(
        content={
            "defaults": {
                "asset": settings.default_asset,
                "network": settings.default_network,
                "exp": default_expiry_local(
                    now,
                    hours=settings.default_expiry_hours,
                    tz=settings.expiry_zone(),
                ),
            },
            "assets": {
                ticker: preset.model_dump(exclude={"asset"})
                for ticker, preset in ASSET_PRESETS.items()
            },
        }
    )
