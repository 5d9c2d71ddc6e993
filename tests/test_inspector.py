"""Tests for inspector and preview markup."""

from app.formlens.models import (
    DisplayRect,
    ExtractedField,
    OverlayBox,
    PreviewOverlay,
    Size,
)
from app.formlens.ui.inspector import PLACEHOLDER, render_field, render_inspector
from app.formlens.ui.page import render_page
from app.formlens.ui.preview import overlay_style, render_preview


def make_field(value, field_type="text", label="Name", page_number=1) -> ExtractedField:
    return ExtractedField.model_validate(
        {
            "field_type": field_type,
            "label": label,
            "value": value,
            "box": [100, 200, 300, 250],
            "page_number": page_number,
        }
    )


class TestRenderInspector:
    """Tests for the JSON-like result tree."""

    def test_placeholder_before_results(self):
        assert PLACEHOLDER in render_inspector(None)

    def test_empty_results(self):
        markup = render_inspector([])
        assert PLACEHOLDER not in markup
        assert "field-block" not in markup

    def test_field_block_lists_all_keys(self):
        markup = render_field(0, make_field("John"), last=True)
        for key in ("field_type", "label", "value", "box", "page_number"):
            assert f'"{key}"' in markup
        assert 'data-index="0"' in markup
        assert "[100, 200, 300, 250]" in markup

    def test_table_rendered_as_grid(self):
        markup = render_field(
            0, make_field([["Item", "Qty"], ["Pen", "2"]], field_type="table"), last=True
        )
        assert "<th>Item</th><th>Qty</th>" in markup
        assert "<td>Pen</td><td>2</td>" in markup

    def test_malformed_table_marker(self):
        markup = render_field(0, make_field(["a", "b"], field_type="table"), last=True)
        assert "(Malformed Table)" in markup
        assert "json-malformed" in markup

    def test_checked_and_unchecked_styles(self):
        checked = render_field(0, make_field("checked", field_type="checkbox"), last=True)
        unchecked = render_field(0, make_field("unchecked", field_type="checkbox"), last=True)
        assert 'class="json-status json-true"' in checked
        assert 'class="json-status json-false"' in unchecked

    def test_boolean_styles(self):
        assert "json-bool json-true" in render_field(0, make_field(True), last=True)
        assert "json-bool json-false" in render_field(0, make_field(False), last=True)

    def test_text_checked_is_plain_string(self):
        markup = render_field(0, make_field("checked"), last=True)
        assert "json-status" not in markup
        assert "json-string" in markup

    def test_null_label_and_value(self):
        markup = render_field(0, make_field(None, label=None), last=True)
        assert markup.count("json-null") == 2

    def test_text_is_escaped(self):
        markup = render_field(0, make_field("<b>x</b>"), last=True)
        assert "<b>" not in markup
        assert "&lt;b&gt;" in markup

    def test_hovered_block_marked(self):
        fields = [make_field("a"), make_field("b")]
        markup = render_inspector(fields, hovered_index=1)
        assert markup.count("field-block hovered") == 1
        assert '<div class="field-block hovered" data-index="1">' in markup


class TestRenderPreview:
    """Tests for the preview stack."""

    def test_placeholder_without_image(self):
        overlay = PreviewOverlay(container=Size(), image=Size())
        assert "Document preview will appear here" in render_preview(None, overlay)

    def test_overlay_hidden_when_size_unknown(self):
        overlay = PreviewOverlay(container=Size(width=800, height=400), image=Size())
        assert overlay_style(overlay) == "display: none;"

    def test_boxes_positioned_in_percent(self):
        overlay = PreviewOverlay(
            container=Size(width=800, height=400),
            image=Size(width=1000, height=500),
            display=DisplayRect(offset_x=0, offset_y=0, width=800, height=400),
            boxes=[OverlayBox(index=0, left=10, top=20, width=20, height=5)],
        )
        markup = render_preview("/preview.png", overlay)
        assert 'src="/preview.png"' in markup
        assert "left: 10.0000%; top: 20.0000%;" in markup
        assert "width: 800.00px; height: 400.00px;" in markup

    def test_boxes_omitted_before_results(self):
        overlay = PreviewOverlay(
            container=Size(width=800, height=400),
            image=Size(width=1000, height=500),
            display=DisplayRect(offset_x=0, offset_y=0, width=800, height=400),
        )
        markup = render_preview("/preview.png", overlay, show_boxes=False)
        assert "overlay" not in markup
        assert "preview-image" in markup

    def test_highlighted_box(self):
        overlay = PreviewOverlay(
            container=Size(width=800, height=400),
            image=Size(width=1000, height=500),
            display=DisplayRect(offset_x=0, offset_y=0, width=800, height=400),
            boxes=[OverlayBox(index=3, left=1, top=1, width=1, height=1, highlighted=True)],
        )
        assert 'class="field-box highlighted" data-index="3"' in render_preview("/p", overlay)


class TestRenderPage:
    """Tests for the application page."""

    def test_page_has_controls(self):
        page = render_page()
        assert "<title>Form Lens</title>" in page
        assert 'id="parse"' in page
        assert 'id="preview"' in page
        assert 'id="inspector"' in page
        assert "application/pdf" in page
