"""
Exceptions raised by session operations.

Every error is terminal for the current action only: the session records
its message in the error slot and stays usable.
"""


class FormLensError(Exception):
    """Base class for errors surfaced to the user."""

    pass


class InputValidationError(FormLensError):
    """Raised when an upload is rejected or a parse is requested without a file."""

    pass


class PreviewError(FormLensError):
    """Raised when the preview raster cannot be produced."""

    pass


class ReadError(FormLensError):
    """Raised when an uploaded file cannot be read."""

    pass


class FormatError(FormLensError):
    """Raised when the extraction response is not a JSON array."""

    pass


class ServiceError(FormLensError):
    """Raised when the extraction service call fails."""

    pass


_STATUS_CODES: dict[type[FormLensError], int] = {
    InputValidationError: 400,
    PreviewError: 422,
    ReadError: 422,
    FormatError: 502,
    ServiceError: 503,
}


def error_status_code(error: FormLensError) -> int:
    """HTTP status code reported for an error."""
    for error_type, code in _STATUS_CODES.items():
        if isinstance(error, error_type):
            return code
    return 500
