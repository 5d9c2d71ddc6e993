"""
Form field extraction using OpenAI vision models.

Sends a document (image or PDF) with a fixed instruction prompt and parses
the reply into ExtractedField instances. One request per parse: no retries,
no streaming.
"""

import asyncio
import json
import logging
import re
from typing import Any

from pydantic import ValidationError

from ..errors import FormatError, ServiceError
from ..models import ExtractedField

logger = logging.getLogger(__name__)

PDF_MIME_TYPE = "application/pdf"

INVALID_JSON_MESSAGE = (
    "The AI returned data in an invalid JSON format. "
    "Please try a different document or try again."
)
NON_ARRAY_MESSAGE = (
    "The AI returned data in a non-array format. "
    "Please try a different document or try again."
)
SERVICE_ERROR_PREFIX = "An error occurred while communicating with the AI"


# =============================================================================
# Extraction Prompt
# =============================================================================

EXTRACTION_PROMPT = """You are a document parser specialized in PDFs and image-based forms with arbitrary layouts.

Extract every recognized form element from the provided document: text fields, tables, checkboxes, signatures and selection marks.

For each element, output a JSON object with exactly these keys:

"field_type": one of 'text', 'checkbox', 'table', 'signature', 'selectionMark'.

"label": the visible label, prompt or closest description of the field, or null if there is none. For 'checkbox' and 'selectionMark' elements that belong to a group, combine the group's question (if any), the text of this option, and a list of all options in the group, for example: "Reason for Contact: Technical Support (Options: Sales, Technical Support, Billing)".

"value": the extracted content. Text fields and signatures use the string value. Checkboxes and selection marks use 'checked' or 'unchecked'. Tables use a two-dimensional array of cell strings whose first row is the header row.

"box": the bounding box [x0, y0, x1, y1] with (x0, y0) the top-left and (x1, y1) the bottom-right corner, normalized to a 0-1000 scale on both axes regardless of the document's pixel size.

"page_number": the 1-based page where the field appears. Single-page documents such as images always use 1.

Do not omit any recognized field. The output format must not depend on whether the input is a PDF or an image, other than the page number.

Return a single flat JSON array of these objects and nothing else. If no fields are recognized, return an empty array [].
Do not add explanations, extra keys, metadata or markdown formatting outside the array.

Example:
[
  {"field_type": "text", "label": "First Name", "value": "John", "box": [49, 122, 200, 143], "page_number": 1},
  {"field_type": "checkbox", "label": "Agreement", "value": "checked", "box": [212, 167, 220, 178], "page_number": 1},
  {"field_type": "table", "label": "Order Details", "value": [["Item", "Quantity", "Price"], ["Pen", "2", "$3"]], "box": [300, 250, 500, 320], "page_number": 2}
]"""


# =============================================================================
# Helper Functions
# =============================================================================

_CODE_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)


def _strip_code_fences(text: str) -> str:
    """Remove a surrounding ```json fence if the model added one."""
    text = text.strip()
    match = _CODE_FENCE.match(text)
    return match.group(1).strip() if match else text


def _build_document_part(base64_data: str, mime_type: str) -> dict[str, Any]:
    """Build the content part carrying the document itself."""
    data_uri = f"data:{mime_type};base64,{base64_data}"
    if mime_type == PDF_MIME_TYPE:
        return {
            "type": "file",
            "file": {"filename": "document.pdf", "file_data": data_uri},
        }
    return {
        "type": "image_url",
        "image_url": {"url": data_uri, "detail": "high"},
    }


def parse_extraction_response(text: str | None) -> list[ExtractedField]:
    """
    Parse the model's reply into extracted fields.

    An empty reply means nothing was recognized and yields an empty list.
    Items that do not fit the field shape are dropped with a warning.

    Args:
        text: Raw message content returned by the model.

    Returns:
        List of ExtractedField, page_number defaulted to 1 where missing.

    Raises:
        FormatError: If the reply is not valid JSON or not a JSON array.
    """
    body = _strip_code_fences(text or "")
    if not body:
        logger.warning("AI returned an empty response, returning empty result")
        return []

    try:
        parsed = json.loads(body)
    except json.JSONDecodeError as e:
        logger.error("Failed to parse extraction response: %s", body[:500])
        raise FormatError(INVALID_JSON_MESSAGE) from e

    if not isinstance(parsed, list):
        logger.error("Extraction response is a %s, expected an array", type(parsed).__name__)
        raise FormatError(NON_ARRAY_MESSAGE)

    fields: list[ExtractedField] = []
    for position, item in enumerate(parsed):
        try:
            fields.append(ExtractedField.model_validate(item))
        except ValidationError as e:
            logger.warning(
                "Dropping item %d from extraction response: %s",
                position,
                e.errors(include_url=False),
            )
        except (TypeError, ValueError) as e:
            logger.warning("Dropping item %d from extraction response: %s", position, e)

    logger.info("Parsed %d field(s) from %d item(s)", len(fields), len(parsed))
    return fields


# =============================================================================
# Extraction Client
# =============================================================================


class ExtractionClient:
    """
    Client for the hosted extraction model.

    The OpenAI client is created lazily from the API key, so a missing or
    invalid key only surfaces on the first parse. Pass `client` to
    substitute a test double.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "gpt-4.1",
        client: Any = None,
    ):
        """
        Initialize the extraction client.

        Args:
            api_key: OpenAI API key.
            model: OpenAI model to use (must accept images and PDF files).
            client: Pre-built OpenAI-compatible client.
        """
        self.api_key = api_key
        self.model = model
        self._client = client

    @property
    def client(self):
        """Lazy-load the OpenAI client."""
        if self._client is None:
            if not self.api_key:
                raise ServiceError(
                    "OpenAI API key not provided. Set OPENAI_API_KEY environment variable."
                )
            from openai import OpenAI

            self._client = OpenAI(api_key=self.api_key)
        return self._client

    def _request_completion(self, base64_data: str, mime_type: str) -> str | None:
        """Send the blocking chat completion request and return the message text."""
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {
                    "role": "user",
                    "content": [
                        _build_document_part(base64_data, mime_type),
                        {"type": "text", "text": EXTRACTION_PROMPT},
                    ],
                },
            ],
        )
        return response.choices[0].message.content

    async def parse_document(
        self, base64_data: str, mime_type: str
    ) -> list[ExtractedField]:
        """
        Extract all recognized form elements from a document.

        Args:
            base64_data: Base64-encoded file content.
            mime_type: MIME type of the file (e.g. 'application/pdf', 'image/png').

        Returns:
            Flat list of extracted fields; empty when nothing was recognized.

        Raises:
            FormatError: If the reply is not a JSON array.
            ServiceError: If the request itself fails.
        """
        logger.info("Requesting extraction (%s, model=%s)", mime_type, self.model)
        try:
            text = await asyncio.to_thread(
                self._request_completion, base64_data, mime_type
            )
        except Exception as e:
            logger.exception("Error calling extraction service")
            raise ServiceError(f"{SERVICE_ERROR_PREFIX}: {e}") from e

        return parse_extraction_response(text)


# =============================================================================
# Singleton Factory
# =============================================================================

_extraction_client: ExtractionClient | None = None


def get_extraction_client() -> ExtractionClient:
    """Get or create the extraction client from settings."""
    global _extraction_client
    if _extraction_client is None:
        from ..config import get_settings

        settings = get_settings()
        _extraction_client = ExtractionClient(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
        )
    return _extraction_client
