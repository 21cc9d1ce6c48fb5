"""Download endpoints for the visible rows."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status

from catalog_view.api.dependencies.session import get_catalog_session
from catalog_view.services.catalog_session import CatalogSession
from catalog_view.services.export_projector import ExportError, ExportPayload

logger = logging.getLogger(__name__)

router = APIRouter()


def _download(payload: ExportPayload) -> Response:
    return Response(
        content=payload.content,
        media_type=payload.media_type,
        headers={"Content-Disposition": f'attachment; filename="{payload.filename}"'},
    )


@router.get("/xlsx", summary="Export visible rows as a spreadsheet")
async def export_xlsx(
    session: CatalogSession = Depends(get_catalog_session),
) -> Response:
    try:
        return _download(session.export_spreadsheet())
    except Exception as e:
        logger.error(f"Spreadsheet export failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to export spreadsheet",
        ) from e


@router.get("/pdf", summary="Export visible rows as a PDF table")
async def export_pdf(
    session: CatalogSession = Depends(get_catalog_session),
) -> Response:
    try:
        return _download(session.export_pdf())
    except ExportError as e:
        logger.error(f"PDF export unavailable: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e),
        ) from e
    except Exception as e:
        logger.error(f"PDF export failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to export PDF",
        ) from e
