"""
Preview stack markup: document raster with absolutely positioned boxes.
"""

import html

from ..models import OverlayBox, PreviewOverlay

PLACEHOLDER = "Document preview will appear here"


def _box_style(box: OverlayBox) -> str:
    return (
        f"left: {box.left:.4f}%; top: {box.top:.4f}%; "
        f"width: {box.width:.4f}%; height: {box.height:.4f}%;"
    )


def overlay_style(overlay: PreviewOverlay) -> str:
    """Position the overlay layer over the letterboxed image, or hide it."""
    display = overlay.display
    if display is None:
        return "display: none;"
    return (
        f"position: absolute; left: {display.offset_x:.2f}px; top: {display.offset_y:.2f}px; "
        f"width: {display.width:.2f}px; height: {display.height:.2f}px;"
    )


def render_box(box: OverlayBox) -> str:
    css = "field-box highlighted" if box.highlighted else "field-box"
    return f'<div class="{css}" data-index="{box.index}" style="{_box_style(box)}"></div>'


def render_preview(
    image_url: str | None,
    overlay: PreviewOverlay,
    show_boxes: bool = True,
) -> str:
    """
    Render the preview stack.

    Args:
        image_url: Where the browser loads the preview raster; None for no preview.
        overlay: Geometry computed for the current container size.
        show_boxes: False until results exist.
    """
    if image_url is None:
        return f'<div class="preview-placeholder"><p>{PLACEHOLDER}</p></div>'

    layer = ""
    if show_boxes:
        boxes = "".join(render_box(box) for box in overlay.boxes)
        layer = f'<div class="overlay" style="{overlay_style(overlay)}">{boxes}</div>'

    return (
        '<div class="preview-stack">'
        f'<img class="preview-image" src="{html.escape(image_url)}" alt="Document preview">'
        f"{layer}"
        "</div>"
    )
