"""
Session orchestration.

A Session owns the state of one user session: the selected file, its
preview, the extraction results, loading and error flags, and the hovered
field. Other components receive this state read-only and report events
back through Session methods.
"""

import asyncio
import logging
import uuid

from .errors import FormLensError, InputValidationError, ReadError, ServiceError
from .models import (
    ExtractedField,
    PreviewOverlay,
    SessionSnapshot,
    SessionStatus,
    Size,
)
from .services.extraction import SERVICE_ERROR_PREFIX, ExtractionClient
from .services.geometry import build_overlay
from .services.pdf_service import PdfRenderer
from .services.preview import PreviewImage, derive_preview, encode_payload
from .services.upload import UploadedFile

logger = logging.getLogger(__name__)


class Session:
    """
    State machine for one user session.

    idle -> file_picked -> ready -> parsing -> done | error

    Every file selection bumps a generation counter; a preview that
    resolves after a newer selection is discarded.
    """

    def __init__(
        self,
        extraction_client: ExtractionClient,
        pdf_renderer: PdfRenderer | None = None,
        session_id: str | None = None,
    ):
        self.id = session_id or str(uuid.uuid4())
        self._extraction_client = extraction_client
        self._pdf_renderer = pdf_renderer
        self._generation = 0

        self.status = SessionStatus.IDLE
        self.file: UploadedFile | None = None
        self.preview: PreviewImage | None = None
        self.results: list[ExtractedField] | None = None
        self.is_loading = False
        self.error: str | None = None
        self.hovered_index: int | None = None

    @property
    def generation(self) -> int:
        """Number of file selections so far."""
        return self._generation

    @property
    def can_parse(self) -> bool:
        return self.file is not None and not self.is_loading

    def _fail(self, error: FormLensError) -> None:
        self.error = str(error)
        self.is_loading = False
        self.status = SessionStatus.ERROR
        logger.info("Session %s failed: %s", self.id, self.error)

    def reject_upload(self, error: FormLensError) -> None:
        """Record a rejected upload without touching the current file."""
        self.error = str(error)
        logger.info("Session %s rejected upload: %s", self.id, self.error)

    async def select_file(self, upload: UploadedFile) -> SessionSnapshot:
        """
        Select a new file and derive its preview.

        Clears previous results, preview and error. Uploads are refused
        while a parse is in flight.

        Raises:
            InputValidationError: If a parse is running.
            PreviewError: If the PDF could not be rasterized (file cleared).
            ReadError: If the file could not be decoded (file cleared).
        """
        if self.is_loading:
            error = InputValidationError("Please wait for the current parse to finish.")
            self.reject_upload(error)
            raise error

        self._generation += 1
        generation = self._generation

        self.file = upload
        self.preview = None
        self.results = None
        self.error = None
        self.hovered_index = None
        self.status = SessionStatus.FILE_PICKED
        logger.info("Session %s selected %s (%s)", self.id, upload.filename, upload.mime_type)

        try:
            preview = await asyncio.to_thread(
                derive_preview, upload.content, upload.mime_type, self._pdf_renderer
            )
        except FormLensError as e:
            if generation != self._generation:
                logger.info("Session %s discarded stale preview failure", self.id)
                return self.snapshot()
            self.file = None
            self._fail(e)
            raise
        except Exception as e:
            if generation != self._generation:
                logger.info("Session %s discarded stale preview failure", self.id)
                return self.snapshot()
            logger.exception("Session %s: unexpected preview failure", self.id)
            error = ReadError(f"Failed to read file: {e}")
            self.file = None
            self._fail(error)
            raise error from e

        if generation != self._generation:
            logger.info("Session %s discarded stale preview", self.id)
            return self.snapshot()

        self.preview = preview
        if self.status == SessionStatus.FILE_PICKED:
            self.status = SessionStatus.READY
        return self.snapshot()

    async def parse(self) -> SessionSnapshot:
        """
        Send the selected file to the extraction service.

        A call while a parse is already in flight does nothing.

        Raises:
            InputValidationError: If no file is selected.
            ReadError: If the file cannot be encoded.
            FormatError: If the service reply is not a JSON array.
            ServiceError: If the service call fails.
        """
        if self.is_loading:
            logger.info("Session %s: parse already in flight, ignoring", self.id)
            return self.snapshot()

        if self.file is None:
            error = InputValidationError("Please select a file first.")
            self._fail(error)
            raise error

        upload = self.file
        self.is_loading = True
        self.error = None
        self.results = None
        self.hovered_index = None
        self.status = SessionStatus.PARSING

        try:
            payload = encode_payload(upload.content)
            results = await self._extraction_client.parse_document(payload, upload.mime_type)
        except FormLensError as e:
            self._fail(e)
            raise
        except Exception as e:
            logger.exception("Session %s: unexpected parse failure", self.id)
            error = ServiceError(f"{SERVICE_ERROR_PREFIX}: {e}")
            self._fail(error)
            raise error from e

        self.results = results
        self.error = None
        self.is_loading = False
        self.status = SessionStatus.DONE
        logger.info("Session %s parsed %d field(s)", self.id, len(results))
        return self.snapshot()

    def set_hover(self, index: int | None) -> SessionSnapshot:
        """Set the hovered field by result index; None or an unknown index clears it."""
        if index is None or not self.results or not 0 <= index < len(self.results):
            self.hovered_index = None
        else:
            self.hovered_index = index
        return self.snapshot()

    @property
    def hovered_field(self) -> ExtractedField | None:
        if self.hovered_index is None or not self.results:
            return None
        return self.results[self.hovered_index]

    def overlay(self, container: Size) -> PreviewOverlay:
        """Compute the preview overlay for a container of the given size."""
        if self.preview is None:
            image = Size()
        else:
            image = Size(width=self.preview.info.width, height=self.preview.info.height)
        return build_overlay(container, image, self.results, self.hovered_index)

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            id=self.id,
            status=self.status,
            filename=self.file.filename if self.file else None,
            mime_type=self.file.mime_type if self.file else None,
            is_loading=self.is_loading,
            can_parse=self.can_parse,
            error=self.error,
            preview=self.preview.info if self.preview else None,
            results=self.results,
            hovered_index=self.hovered_index,
        )


class SessionNotFoundError(KeyError):
    """Raised when a session ID is unknown."""

    pass


class SessionStore:
    """In-memory sessions for the lifetime of the process."""

    def __init__(
        self,
        extraction_client: ExtractionClient,
        pdf_renderer: PdfRenderer | None = None,
    ):
        self.extraction_client = extraction_client
        self.pdf_renderer = pdf_renderer
        self._sessions: dict[str, Session] = {}

    def create(self) -> Session:
        session = Session(self.extraction_client, self.pdf_renderer)
        self._sessions[session.id] = session
        logger.info("Created session %s", session.id)
        return session

    def get(self, session_id: str) -> Session:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise SessionNotFoundError(session_id) from None

    def delete(self, session_id: str) -> None:
        if self._sessions.pop(session_id, None) is None:
            raise SessionNotFoundError(session_id)
        logger.info("Deleted session %s", session_id)

    def __len__(self) -> int:
        return len(self._sessions)


# =============================================================================
# Singleton Factory
# =============================================================================

_session_store: SessionStore | None = None


def get_session_store() -> SessionStore:
    """Get or create the session store singleton."""
    global _session_store
    if _session_store is None:
        from .config import get_settings
        from .services.extraction import get_extraction_client
        from .services.pdf_service import PDFService

        settings = get_settings()
        _session_store = SessionStore(
            extraction_client=get_extraction_client(),
            pdf_renderer=PDFService(scale=settings.pdf_preview_scale),
        )
    return _session_store
