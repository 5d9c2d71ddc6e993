"""
Upload validation.

Checks the declared MIME type of a picked or dropped file against the
accepted set before it reaches the session.
"""

import logging

from pydantic import BaseModel, Field

from ..errors import InputValidationError, ReadError

logger = logging.getLogger(__name__)

ACCEPTED_MIME_TYPES: tuple[str, ...] = (
    "image/jpeg",
    "image/png",
    "image/webp",
    "image/gif",
    "application/pdf",
)


class UploadedFile(BaseModel):
    """A validated upload ready to hand to the session."""

    filename: str = Field(..., description="Display name of the file")
    mime_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


def accepted_subtypes(mime_types: tuple[str, ...] = ACCEPTED_MIME_TYPES) -> list[str]:
    """Subtypes shown to the user, e.g. ["jpeg", "png", ...]."""
    return [mime.split("/", 1)[-1] for mime in mime_types]


def invalid_type_message(mime_types: tuple[str, ...] = ACCEPTED_MIME_TYPES) -> str:
    return f"Invalid file type. Please upload one of: {', '.join(accepted_subtypes(mime_types))}"


def validate_mime_type(
    mime_type: str | None,
    mime_types: tuple[str, ...] = ACCEPTED_MIME_TYPES,
) -> str:
    """
    Check a declared MIME type against the accepted set.

    Parameters such as "; charset=..." are ignored.

    Raises:
        InputValidationError: If the type is missing or not accepted.
    """
    base_type = (mime_type or "").split(";", 1)[0].strip().lower()
    if base_type not in mime_types:
        logger.info("Rejected upload with type %r", mime_type)
        raise InputValidationError(invalid_type_message(mime_types))
    return base_type


def validate_upload(
    filename: str | None,
    mime_type: str | None,
    content: bytes,
    max_bytes: int | None = None,
) -> UploadedFile:
    """
    Validate an upload and wrap it for the session.

    Raises:
        InputValidationError: If the MIME type is not accepted.
        ReadError: If the file is empty or larger than max_bytes.
    """
    base_type = validate_mime_type(mime_type)

    if not content:
        raise ReadError("Failed to read file.")
    if max_bytes is not None and len(content) > max_bytes:
        raise ReadError(
            f"File is too large ({len(content)} bytes). Maximum size is {max_bytes} bytes."
        )

    upload = UploadedFile(
        filename=filename or "document",
        mime_type=base_type,
        content=content,
    )
    logger.info("Accepted upload: %s (%s, %d bytes)", upload.filename, base_type, upload.size)
    return upload
