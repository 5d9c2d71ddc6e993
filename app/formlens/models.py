"""
Pydantic models for the form extraction preview.

Defines the extracted field shape, the value variants decided at
ingestion, preview geometry, and session snapshots returned by the API.
"""

import math
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)

# Normalized axis used by every bounding box, independent of pixel size
BOX_SCALE = 1000.0


class FieldType(str, Enum):
    """Kinds of form element the model may report."""

    TEXT = "text"
    CHECKBOX = "checkbox"
    TABLE = "table"
    SIGNATURE = "signature"
    SELECTION_MARK = "selectionMark"


# =============================================================================
# Field Values
# =============================================================================


class TextValue(BaseModel):
    """Plain string content of a text field or signature."""

    kind: Literal["text"] = "text"
    text: str

    def to_raw(self) -> Any:
        return self.text


class StatusValue(BaseModel):
    """Checked state of a checkbox or selection mark."""

    kind: Literal["status"] = "status"
    status: Literal["checked", "unchecked"]

    @property
    def is_checked(self) -> bool:
        return self.status == "checked"

    def to_raw(self) -> Any:
        return self.status


class TableValue(BaseModel):
    """
    Rectangular grid of cell strings.

    The first row is the header when rendered as a table.
    """

    kind: Literal["table"] = "table"
    rows: list[list[str]] = Field(..., min_length=1)

    @property
    def header(self) -> list[str]:
        return self.rows[0]

    @property
    def body(self) -> list[list[str]]:
        return self.rows[1:]

    def to_raw(self) -> Any:
        return [list(row) for row in self.rows]


class BooleanValue(BaseModel):
    """A JSON boolean returned in place of a status string."""

    kind: Literal["boolean"] = "boolean"
    flag: bool

    def to_raw(self) -> Any:
        return self.flag


class MalformedTableValue(BaseModel):
    """An array value that is not a list of rows."""

    kind: Literal["malformed_table"] = "malformed_table"
    items: list[Any] = Field(default_factory=list)

    def to_raw(self) -> Any:
        return list(self.items)


class NullValue(BaseModel):
    """No value was extracted."""

    kind: Literal["null"] = "null"

    def to_raw(self) -> Any:
        return None


FieldValue = Annotated[
    Union[
        TextValue,
        StatusValue,
        TableValue,
        BooleanValue,
        MalformedTableValue,
        NullValue,
    ],
    Field(discriminator="kind"),
]

_VALUE_MODELS = (
    TextValue,
    StatusValue,
    TableValue,
    BooleanValue,
    MalformedTableValue,
    NullValue,
)

_STATUS_FIELD_TYPES = {FieldType.CHECKBOX.value, FieldType.SELECTION_MARK.value}


def _cell_text(cell: Any) -> str:
    if cell is None:
        return ""
    if isinstance(cell, bool):
        return "true" if cell else "false"
    return str(cell)


def classify_value(raw: Any, field_type: Any = None) -> Any:
    """
    Decide the value variant for a raw JSON value.

    Status strings are only recognized for checkbox and selection mark
    fields; a text field that literally reads "checked" stays text.

    Raises:
        ValueError: If the value is a JSON object or another unsupported shape.
    """
    if isinstance(raw, _VALUE_MODELS):
        return raw
    if raw is None:
        return NullValue()
    if isinstance(raw, bool):
        return BooleanValue(flag=raw)
    if isinstance(raw, list):
        if raw and all(isinstance(row, list) for row in raw):
            return TableValue(rows=[[_cell_text(cell) for cell in row] for row in raw])
        return MalformedTableValue(items=raw)
    if isinstance(raw, str):
        type_name = getattr(field_type, "value", field_type)
        if not isinstance(type_name, str):
            type_name = None
        status = raw.strip().lower()
        if type_name in _STATUS_FIELD_TYPES and status in ("checked", "unchecked"):
            return StatusValue(status=status)
        return TextValue(text=raw)
    if isinstance(raw, (int, float)):
        return TextValue(text=str(raw))
    raise ValueError(f"Unsupported value shape: {type(raw).__name__}")


# =============================================================================
# Extracted Field
# =============================================================================


class ExtractedField(BaseModel):
    """
    One form element recognized in a document.

    Attributes:
        field_type: Kind of element.
        label: Visible label or closest description, if any.
        value: Extracted content, classified once at ingestion.
        box: [x0, y0, x1, y1] on the 0-1000 normalized axis.
        page_number: 1-based page; plain images always report 1.
    """

    model_config = ConfigDict(frozen=True)

    field_type: FieldType
    label: str | None = None
    value: FieldValue
    box: tuple[float, float, float, float]
    page_number: int = Field(default=1, ge=1)

    @model_validator(mode="before")
    @classmethod
    def classify_raw_item(cls, data: Any) -> Any:
        """Classify the raw value and default a missing page number to 1."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        data["value"] = classify_value(data.get("value"), data.get("field_type"))
        if not data.get("page_number"):
            data["page_number"] = 1
        return data

    @field_validator("box")
    @classmethod
    def normalize_box(
        cls, v: tuple[float, float, float, float]
    ) -> tuple[float, float, float, float]:
        """Clamp coordinates into 0-1000 and order corners top-left first."""
        if not all(math.isfinite(c) for c in v):
            raise ValueError("box coordinates must be finite numbers")
        x0, y0, x1, y1 = (min(max(float(c), 0.0), BOX_SCALE) for c in v)
        return (min(x0, x1), min(y0, y1), max(x0, x1), max(y0, y1))

    @field_serializer("value")
    def serialize_value(self, value: Any) -> Any:
        return value.to_raw()

    @field_serializer("box")
    def serialize_box(self, box: tuple[float, float, float, float]) -> list[float | int]:
        return [int(c) if float(c).is_integer() else c for c in box]


# =============================================================================
# Preview Geometry
# =============================================================================


class Size(BaseModel):
    """Pixel dimensions; zero means unknown."""

    width: float = Field(default=0.0, ge=0.0)
    height: float = Field(default=0.0, ge=0.0)

    @property
    def is_known(self) -> bool:
        return self.width > 0 and self.height > 0


class DisplayRect(BaseModel):
    """Letterboxed image rectangle inside the container, in pixels."""

    offset_x: float
    offset_y: float
    width: float
    height: float


class OverlayBox(BaseModel):
    """A field box in percent of the display rectangle."""

    index: int = Field(..., ge=0, description="Position in the result list")
    left: float
    top: float
    width: float
    height: float
    highlighted: bool = False


class PreviewOverlay(BaseModel):
    """Everything needed to draw highlight boxes over the preview."""

    container: Size
    image: Size
    display: DisplayRect | None = Field(
        default=None,
        description="None when either size is unknown; the overlay is suppressed",
    )
    page_number: int = Field(default=1, ge=1)
    boxes: list[OverlayBox] = Field(default_factory=list)


# =============================================================================
# Session Models
# =============================================================================


class SessionStatus(str, Enum):
    """Orchestrator states."""

    IDLE = "idle"
    FILE_PICKED = "file_picked"
    READY = "ready"
    PARSING = "parsing"
    DONE = "done"
    ERROR = "error"


class PreviewInfo(BaseModel):
    """Metadata of the derived preview raster."""

    mime_type: str = Field(..., description="Content type of the preview bytes")
    width: int = Field(..., ge=0, description="Natural width in pixels")
    height: int = Field(..., ge=0, description="Natural height in pixels")
    rendered_from_pdf: bool = Field(default=False)


class SessionSnapshot(BaseModel):
    """Read-only view of a session's state."""

    id: str = Field(..., description="Session ID")
    status: SessionStatus
    filename: str | None = None
    mime_type: str | None = None
    is_loading: bool = False
    can_parse: bool = False
    error: str | None = None
    preview: PreviewInfo | None = None
    results: list[ExtractedField] | None = None
    hovered_index: int | None = None


class HoverRequest(BaseModel):
    """Request body for setting or clearing the hovered field."""

    index: int | None = Field(
        default=None,
        description="Result index under the pointer, or null when the pointer left",
    )


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(default="healthy")
    version: str = Field(default="1.0.0")


class SessionView(BaseModel):
    """Rendered preview stack and inspector for the current container size."""

    session: SessionSnapshot
    overlay: PreviewOverlay
    preview_html: str
    inspector_html: str
