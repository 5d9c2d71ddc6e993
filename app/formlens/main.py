"""
FastAPI application for the form extraction preview.

Provides endpoints for:
- Uploading an image or PDF and deriving its preview
- Extracting form fields with an AI model
- Overlay geometry and inspector views for the extracted fields
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from . import __version__
from .config import get_settings
from .errors import FormLensError, error_status_code
from .models import HealthResponse
from .routers import sessions, ui
from .session import get_session_store

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    logger.info("Starting Form Lens...")
    if get_settings().debug:
        logging.getLogger().setLevel(logging.DEBUG)
    get_session_store()
    logger.info("Services initialized successfully")
    yield
    logger.info("Shutting down Form Lens...")


app = FastAPI(
    title="Form Lens",
    description="Extract form fields from images and PDFs and inspect them over a document preview",
    version=__version__,
    lifespan=lifespan,
)


# =============================================================================
# Health Endpoints
# =============================================================================


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(status="healthy", version=__version__)


# =============================================================================
# Include Routers
# =============================================================================

app.include_router(ui.router)
app.include_router(sessions.router)


# =============================================================================
# Exception Handlers
# =============================================================================


@app.exception_handler(FormLensError)
async def form_lens_error_handler(request: Request, exc: FormLensError):
    """Handle errors raised outside a session action."""
    return JSONResponse(
        status_code=error_status_code(exc),
        content={"detail": str(exc)},
    )
