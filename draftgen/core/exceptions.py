"""Error taxonomy for the draft-generation pipeline.

Every error raised below the API layer derives from ``DraftServiceError``.
Each class fixes the machine-readable ``code`` and HTTP ``status_code`` that
the exception handlers in ``draftgen.main`` use to build the JSON envelope;
nothing below the API layer constructs HTTP responses itself.
"""

from typing import Any


class DraftServiceError(Exception):
    """Base class for all pipeline errors.

    Attributes:
        code: Stable error code exposed to clients.
        status_code: HTTP status used by the API layer.
        message: Human-readable message.
        details: Optional structured payload for the client.
        retryable: Whether retrying the same call may succeed.
        public: Whether ``message`` may be shown to the client verbatim.
    """

    code: str = "INTERNAL_ERROR"
    status_code: int = 500
    retryable: bool = False
    public: bool = True

    def __init__(self, message: str, details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(DraftServiceError):
    """Submitted variables failed validation.

    ``details`` is the full list of ``{field, code, message}`` dicts.
    """

    code = "VALIDATION_ERROR"
    status_code = 400

    def __init__(self, errors: list[dict[str, str]], message: str = "Invalid variables") -> None:
        super().__init__(message, details=errors)
        self.errors = errors


class AuthenticationError(DraftServiceError):
    """Caller identity is missing or could not be verified."""

    code = "AUTH_REQUIRED"
    status_code = 401


class QuotaExceededError(DraftServiceError):
    """The caller has used every draft allowed for the current period."""

    code = "DRAFT_LIMIT_EXCEEDED"
    status_code = 402

    def __init__(self, used: int, limit: int) -> None:
        super().__init__("Draft limit exceeded", details={"used": used, "limit": limit})
        self.used = used
        self.limit = limit


class NotFoundError(DraftServiceError):
    """Requested resource is missing or inactive."""

    code = "NOT_FOUND"
    status_code = 404


class DocumentGenerationError(DraftServiceError):
    """Template could not be loaded or rendered.

    The underlying exception is chained as ``__cause__``.
    """

    code = "DOCUMENT_GENERATION_ERROR"
    status_code = 500
    public = False


class StorageError(DraftServiceError):
    """Blob or record storage failed; the whole call may be retried."""

    code = "STORAGE_ERROR"
    status_code = 503
    retryable = True
    public = False
