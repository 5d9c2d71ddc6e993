"""
Preview geometry: contain-fit letterboxing and normalized box mapping.

The overlay layer is positioned over the letterboxed image rectangle, and
every field box is placed inside it in percent, so box placement only
depends on the normalized 0-1000 coordinates.
"""

import logging
from collections.abc import Sequence

from ..models import (
    BOX_SCALE,
    DisplayRect,
    ExtractedField,
    OverlayBox,
    PreviewOverlay,
    Size,
)

logger = logging.getLogger(__name__)

# Only the first page is ever rasterized
RENDERED_PAGE = 1


def compute_display_rect(container: Size, image: Size) -> DisplayRect | None:
    """
    Fit the image inside the container, preserving its aspect ratio.

    The image fills one axis fully and the slack on the other axis is
    split evenly on both sides.

    Args:
        container: Container size in pixels.
        image: Natural image size in pixels.

    Returns:
        The display rectangle, or None when either size is zero/unknown.
    """
    if not container.is_known or not image.is_known:
        return None

    container_ratio = container.width / container.height
    image_ratio = image.width / image.height

    if container_ratio > image_ratio:
        # Height-constrained
        scaled_height = container.height
        scaled_width = scaled_height * image_ratio
    else:
        # Width-constrained
        scaled_width = container.width
        scaled_height = scaled_width / image_ratio

    return DisplayRect(
        offset_x=(container.width - scaled_width) / 2,
        offset_y=(container.height - scaled_height) / 2,
        width=scaled_width,
        height=scaled_height,
    )


def box_to_percent(box: Sequence[float]) -> tuple[float, float, float, float]:
    """Map [x0, y0, x1, y1] on the 0-1000 axis to (left, top, width, height) percent."""
    x0, y0, x1, y1 = box
    return (
        x0 / BOX_SCALE * 100,
        y0 / BOX_SCALE * 100,
        (x1 - x0) / BOX_SCALE * 100,
        (y1 - y0) / BOX_SCALE * 100,
    )


def _overlay_box(index: int, field: ExtractedField, highlighted: bool) -> OverlayBox:
    left, top, width, height = box_to_percent(field.box)
    return OverlayBox(
        index=index,
        left=left,
        top=top,
        width=width,
        height=height,
        highlighted=highlighted,
    )


def build_overlay(
    container: Size,
    image: Size,
    fields: Sequence[ExtractedField] | None,
    hovered_index: int | None = None,
    page_number: int = RENDERED_PAGE,
) -> PreviewOverlay:
    """
    Compute the overlay for the rendered page.

    Boxes of fields on other pages are skipped. The hovered field, when it
    sits on the rendered page, is appended once more as a highlighted box
    so it draws above any overlapping box.
    """
    display = compute_display_rect(container, image)
    overlay = PreviewOverlay(
        container=container,
        image=image,
        display=display,
        page_number=page_number,
    )
    if display is None or not fields:
        return overlay

    overlay.boxes = [
        _overlay_box(index, field, highlighted=False)
        for index, field in enumerate(fields)
        if field.page_number == page_number
    ]

    if hovered_index is not None and 0 <= hovered_index < len(fields):
        hovered = fields[hovered_index]
        if hovered.page_number == page_number:
            overlay.boxes.append(_overlay_box(hovered_index, hovered, highlighted=True))

    logger.debug(
        "Overlay for page %d: %d box(es), display=%s",
        page_number,
        len(overlay.boxes),
        display,
    )
    return overlay
