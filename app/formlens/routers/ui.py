"""
Router serving the single-page UI.
"""

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

from ..ui.page import render_page

router = APIRouter(prefix="", tags=["ui"])


@router.get("/", response_class=HTMLResponse)
async def index() -> HTMLResponse:
    """Upload surface, preview and inspector."""
    return HTMLResponse(render_page())
