"""
JSON-shaped inspector markup for the extracted field list.

Each field block carries its result index in data-index so the page
script can report hover enter/leave back to the session.
"""

import html
from collections.abc import Sequence

from ..models import (
    BooleanValue,
    ExtractedField,
    MalformedTableValue,
    NullValue,
    StatusValue,
    TableValue,
    TextValue,
)

PLACEHOLDER = "Extracted data will be shown here..."


def _string(text: str) -> str:
    return f'<span class="json-string">"{html.escape(text)}"</span>'


def _null() -> str:
    return '<span class="json-null">null</span>'


def _punct(text: str) -> str:
    return f'<span class="json-punct">{html.escape(text)}</span>'


def _format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def render_table(value: TableValue) -> str:
    """Render a table value as a grid with the first row as header."""
    header = "".join(f"<th>{html.escape(cell)}</th>" for cell in value.header)
    body = "".join(
        "<tr>" + "".join(f"<td>{html.escape(cell)}</td>" for cell in row) + "</tr>"
        for row in value.body
    )
    return (
        '<div class="json-table-wrap"><table class="json-table">'
        f"<thead><tr>{header}</tr></thead><tbody>{body}</tbody>"
        "</table></div>"
    )


def render_value(value) -> str:
    if isinstance(value, TableValue):
        return render_table(value)
    if isinstance(value, MalformedTableValue):
        return '<span class="json-malformed">(Malformed Table)</span>'
    if isinstance(value, BooleanValue):
        css = "json-true" if value.flag else "json-false"
        return f'<span class="json-bool {css}">{"true" if value.flag else "false"}</span>'
    if isinstance(value, StatusValue):
        css = "json-true" if value.is_checked else "json-false"
        return f'<span class="json-status {css}">"{value.status}"</span>'
    if isinstance(value, NullValue):
        return _null()
    if isinstance(value, TextValue):
        return _string(value.text)
    raise TypeError(f"Unknown field value: {type(value).__name__}")


def render_field(index: int, field: ExtractedField, last: bool, hovered: bool = False) -> str:
    """Render one field block with all five attributes."""
    label = _null() if field.label is None else _string(field.label)
    box = ", ".join(_format_number(c) for c in field.box)
    rows = [
        f'<div><span class="json-key">"field_type"</span>: {_string(field.field_type.value)},</div>',
        f'<div><span class="json-key">"label"</span>: {label},</div>',
        f'<div><span class="json-key">"value"</span>: {render_value(field.value)},</div>',
        f'<div><span class="json-key">"box"</span>: <span class="json-box">[{box}]</span>,</div>',
        f'<div><span class="json-key">"page_number"</span>: <span class="json-number">{field.page_number}</span></div>',
    ]
    css = "field-block hovered" if hovered else "field-block"
    return (
        f'<div class="{css}" data-index="{index}">'
        f'{_punct("{")}<div class="json-indent">{"".join(rows)}</div>{_punct("}")}'
        f'{"" if last else _punct(",")}'
        "</div>"
    )


def render_inspector(
    fields: Sequence[ExtractedField] | None,
    hovered_index: int | None = None,
) -> str:
    """
    Render the result list as a JSON-like tree.

    Returns a placeholder when there are no results yet.
    """
    if fields is None:
        return f'<div class="inspector-placeholder">{PLACEHOLDER}</div>'

    blocks = "".join(
        render_field(index, field, last=index == len(fields) - 1, hovered=index == hovered_index)
        for index, field in enumerate(fields)
    )
    return f'<pre class="inspector">{_punct("[")}{blocks}{_punct("]")}</pre>'
