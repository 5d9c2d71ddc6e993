"""
Router for session endpoints.

Handles:
- Session lifecycle
- File upload and preview derivation
- Parse requests and hover updates
- Preview geometry, rendered views and raw results
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, HTTPException, Query, Response, UploadFile, status
from fastapi.responses import JSONResponse

from ..config import Settings, get_settings
from ..errors import FormLensError, error_status_code
from ..models import (
    HoverRequest,
    PreviewOverlay,
    SessionSnapshot,
    SessionView,
    Size,
)
from ..services.upload import validate_upload
from ..session import Session, SessionNotFoundError, SessionStore, get_session_store
from ..ui.inspector import render_inspector
from ..ui.preview import render_preview

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions", tags=["sessions"])


def _get_session(
    session_id: str,
    store: SessionStore = Depends(get_session_store),
) -> Session:
    try:
        return store.get(session_id)
    except SessionNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Session {session_id} not found",
        )


def _error_response(error: FormLensError, session: Session) -> JSONResponse:
    """Report a failed action together with the session state it left behind."""
    return JSONResponse(
        status_code=error_status_code(error),
        content={
            "detail": str(error),
            "session": session.snapshot().model_dump(mode="json"),
        },
    )


def _container(
    container_width: float = Query(0.0, ge=0.0, description="Container width in pixels"),
    container_height: float = Query(0.0, ge=0.0, description="Container height in pixels"),
) -> Size:
    return Size(width=container_width, height=container_height)


@router.post("", response_model=SessionSnapshot, status_code=status.HTTP_201_CREATED)
async def create_session(
    store: SessionStore = Depends(get_session_store),
) -> SessionSnapshot:
    """Start a new session in the idle state."""
    return store.create().snapshot()


@router.get("/{session_id}", response_model=SessionSnapshot)
async def get_session(session: Session = Depends(_get_session)) -> SessionSnapshot:
    return session.snapshot()


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(
    session_id: str,
    store: SessionStore = Depends(get_session_store),
) -> Response:
    try:
        store.delete(session_id)
    except SessionNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Session {session_id} not found",
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{session_id}/file", response_model=SessionSnapshot)
async def upload_file(
    file: Annotated[UploadFile, File(description="Image or PDF to inspect")],
    session: Session = Depends(_get_session),
    settings: Settings = Depends(get_settings),
):
    """
    Select a file for the session.

    Rejected MIME types leave the current selection untouched; accepted
    files reset results and derive a new preview.
    """
    try:
        content = await file.read()
    finally:
        await file.close()

    try:
        upload = validate_upload(
            file.filename,
            file.content_type,
            content,
            max_bytes=settings.max_upload_bytes,
        )
    except FormLensError as e:
        session.reject_upload(e)
        return _error_response(e, session)

    try:
        return await session.select_file(upload)
    except FormLensError as e:
        return _error_response(e, session)


@router.post("/{session_id}/parse", response_model=SessionSnapshot)
async def parse_document(session: Session = Depends(_get_session)):
    """
    Parse the selected file.

    Returns the current snapshot without sending a request when a parse is
    already in flight.
    """
    try:
        return await session.parse()
    except FormLensError as e:
        return _error_response(e, session)


@router.put("/{session_id}/hover", response_model=SessionSnapshot)
async def set_hover(
    request: HoverRequest,
    session: Session = Depends(_get_session),
) -> SessionSnapshot:
    return session.set_hover(request.index)


@router.get("/{session_id}/preview")
async def get_preview(session: Session = Depends(_get_session)) -> Response:
    """Return the preview raster (PNG for PDFs, original bytes for images)."""
    if session.preview is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Preview not available for this session",
        )
    return Response(
        content=session.preview.content,
        media_type=session.preview.info.mime_type,
        headers={"Cache-Control": "no-store"},
    )


@router.get("/{session_id}/overlay", response_model=PreviewOverlay)
async def get_overlay(
    session: Session = Depends(_get_session),
    container: Size = Depends(_container),
) -> PreviewOverlay:
    """Letterboxed display rectangle and field boxes for a container size."""
    return session.overlay(container)


@router.get("/{session_id}/view", response_model=SessionView)
async def get_view(
    session: Session = Depends(_get_session),
    container: Size = Depends(_container),
) -> SessionView:
    """Rendered preview stack and inspector markup."""
    overlay = session.overlay(container)
    image_url = None
    if session.preview is not None:
        image_url = f"/sessions/{session.id}/preview?generation={session.generation}"
    return SessionView(
        session=session.snapshot(),
        overlay=overlay,
        preview_html=render_preview(image_url, overlay, show_boxes=session.results is not None),
        inspector_html=render_inspector(session.results, session.hovered_index),
    )


@router.get("/{session_id}/results")
async def get_results(session: Session = Depends(_get_session)) -> list[dict]:
    """Extracted fields in their wire shape."""
    if session.results is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No results for this session",
        )
    return [field.model_dump(mode="json") for field in session.results]
