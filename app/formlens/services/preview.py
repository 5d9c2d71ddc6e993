"""
Preview derivation and file payload encoding.

PDFs are rasterized to a PNG of their first page; accepted image types are
displayed as uploaded and only opened to read their natural size.
"""

import base64
import io
import logging

from PIL import Image, UnidentifiedImageError
from pydantic import BaseModel

from ..errors import PreviewError, ReadError
from ..models import PreviewInfo
from .pdf_service import PdfRenderer

logger = logging.getLogger(__name__)

PDF_MIME_TYPE = "application/pdf"


class PreviewImage(BaseModel):
    """Displayable raster plus its natural size."""

    content: bytes
    info: PreviewInfo

    def data_uri(self) -> str:
        encoded = base64.b64encode(self.content).decode("ascii")
        return f"data:{self.info.mime_type};base64,{encoded}"


def _render_pdf_preview(file_bytes: bytes, renderer: PdfRenderer | None) -> PreviewImage:
    if renderer is None:
        raise PreviewError(
            "Error generating PDF preview: PDF rendering is not available."
        )
    try:
        image = renderer.render_first_page(file_bytes)
        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
    except Exception as e:
        logger.error("PDF preview failed: %s", e)
        raise PreviewError(f"Error generating PDF preview: {e}") from e

    return PreviewImage(
        content=buffer.getvalue(),
        info=PreviewInfo(
            mime_type="image/png",
            width=image.width,
            height=image.height,
            rendered_from_pdf=True,
        ),
    )


def _read_image_preview(file_bytes: bytes, mime_type: str) -> PreviewImage:
    try:
        with Image.open(io.BytesIO(file_bytes)) as image:
            width, height = image.size
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        logger.error("Could not open image for preview: %s", e)
        raise ReadError(f"Failed to read file: {e}") from e

    return PreviewImage(
        content=file_bytes,
        info=PreviewInfo(mime_type=mime_type, width=width, height=height),
    )


def derive_preview(
    file_bytes: bytes,
    mime_type: str,
    pdf_renderer: PdfRenderer | None = None,
) -> PreviewImage:
    """
    Derive the displayable preview for an uploaded file.

    Args:
        file_bytes: Raw file content.
        mime_type: Declared content type (already validated).
        pdf_renderer: Capability used for PDFs; None disables PDF previews.

    Returns:
        PreviewImage with the raster bytes and natural size.

    Raises:
        PreviewError: If the PDF cannot be rasterized.
        ReadError: If the file is empty or the image cannot be decoded.
    """
    if not file_bytes:
        raise ReadError("Failed to read file.")

    if mime_type == PDF_MIME_TYPE:
        preview = _render_pdf_preview(file_bytes, pdf_renderer)
    else:
        preview = _read_image_preview(file_bytes, mime_type)

    logger.info(
        "Derived preview (%s, %dx%d)",
        preview.info.mime_type,
        preview.info.width,
        preview.info.height,
    )
    return preview


def encode_payload(file_bytes: bytes) -> str:
    """
    Base64-encode a file for the extraction request.

    Raises:
        ReadError: If there is nothing to encode.
    """
    if not file_bytes:
        raise ReadError("Could not read the file correctly.")
    return base64.b64encode(file_bytes).decode("ascii")
