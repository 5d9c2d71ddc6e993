"""
PDF preview rendering using pdf2image (poppler).

Rasterizes the first page of a PDF into a PIL Image for the preview.
"""

import logging
from typing import BinaryIO, Protocol

from PIL import Image

from ..errors import PreviewError

logger = logging.getLogger(__name__)

# PDF user space is 72 points per inch; scale 1.0 renders one pixel per point
POINTS_PER_INCH = 72


class PDFConversionError(PreviewError):
    """Raised when PDF rasterization fails."""

    pass


class PdfRenderer(Protocol):
    """Capability to rasterize page 1 of a PDF."""

    def render_first_page(self, file_bytes: bytes | BinaryIO) -> Image.Image:
        ...


class PDFService:
    """
    Renders PDF pages to images.

    Uses pdf2image (backed by poppler). Only page 1 is ever rendered.
    """

    def __init__(self, scale: float = 1.5, image_format: str = "PNG"):
        """
        Initialize the PDF service.

        Args:
            scale: Upscaling factor relative to the page's point size.
            image_format: Raster format pdf2image renders to.
        """
        if scale <= 0:
            raise ValueError("scale must be positive")
        self.scale = scale
        self.image_format = image_format

    @property
    def dpi(self) -> int:
        """Render resolution equivalent to the configured scale."""
        return round(POINTS_PER_INCH * self.scale)

    def render_first_page(self, file_bytes: bytes | BinaryIO) -> Image.Image:
        """
        Rasterize page 1 at the configured scale.

        Args:
            file_bytes: PDF file as bytes or file-like object.

        Returns:
            PIL Image of the first page.

        Raises:
            PDFConversionError: If conversion fails for any reason.
        """
        try:
            from pdf2image import convert_from_bytes
            from pdf2image.exceptions import (
                PDFInfoNotInstalledError,
                PDFPageCountError,
                PDFSyntaxError,
            )
        except ImportError as e:
            logger.error("pdf2image not installed: %s", e)
            raise PDFConversionError(
                "pdf2image library not installed. Run: pip install pdf2image"
            ) from e

        if hasattr(file_bytes, "read"):
            pdf_bytes = file_bytes.read()
        else:
            pdf_bytes = file_bytes

        if not pdf_bytes:
            raise PDFConversionError("Empty PDF file provided")

        if not pdf_bytes[:4] == b"%PDF":
            raise PDFConversionError(
                "Invalid PDF file: does not start with PDF header"
            )

        try:
            logger.info("Rendering PDF page 1 (scale=%.2f, dpi=%d)", self.scale, self.dpi)

            images = convert_from_bytes(
                pdf_bytes,
                dpi=self.dpi,
                fmt=self.image_format.lower(),
                first_page=1,
                last_page=1,
            )

        except PDFInfoNotInstalledError as e:
            logger.error("Poppler not installed: %s", e)
            raise PDFConversionError(
                "Poppler not installed. Install poppler-utils: "
                "brew install poppler (macOS) or apt-get install poppler-utils (Linux)"
            ) from e

        except PDFPageCountError as e:
            logger.error("Could not get PDF page count: %s", e)
            raise PDFConversionError(
                f"Could not determine PDF page count: {e}"
            ) from e

        except PDFSyntaxError as e:
            logger.error("PDF syntax error: %s", e)
            raise PDFConversionError(f"Invalid or corrupted PDF file: {e}") from e

        except Exception as e:
            logger.exception("Unexpected error during PDF rendering")
            raise PDFConversionError(f"PDF rendering failed: {e}") from e

        if not images:
            raise PDFConversionError("No pages found in PDF")

        logger.info("Rendered page 1 at %dx%d", images[0].width, images[0].height)
        return images[0]
