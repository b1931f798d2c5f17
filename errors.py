"""
Field Journal Error Taxonomy.

Every error raised by core/ and pipeline/ derives from FieldJournalError and
carries the HTTP status the web layer answers with.

- Client-facing (returned verbatim): ValidationError, NotFound, Conflict, Expired
- Internal (logged, answered generically): UpstreamError, StorageError
"""


class FieldJournalError(Exception):
    """Base class for all application errors."""

    status_code = 500
    client_facing = False
    public_message = "Internal error"

    def __init__(self, message: str = None):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message


class ValidationError(FieldJournalError):
    """Malformed or absent input."""

    status_code = 400
    client_facing = True
    public_message = "Invalid request"


class InvalidImage(ValidationError):
    """Empty payload or bytes that are not an image."""

    public_message = "Invalid image"


class NotFound(FieldJournalError):
    """Unknown id/token, or a token pointing to a soft-deleted entry."""

    status_code = 404
    client_facing = True
    public_message = "Entry not found"


class NotPublic(NotFound):
    """Public listing requested while the collection is private."""

    public_message = "Collection not public"


class Conflict(FieldJournalError):
    """Restore attempted on an entry that is not deleted."""

    status_code = 409
    client_facing = True
    public_message = "Entry not deleted"


class Expired(FieldJournalError):
    """Restore attempted after the grace period."""

    status_code = 410
    client_facing = True
    public_message = "Restore window expired"


class UpstreamError(FieldJournalError):
    """Classification provider failure."""

    status_code = 502
    public_message = "Classification service unavailable"


class ProviderUnavailable(UpstreamError):
    """Provider unreachable after the single retry."""


class MalformedResponse(UpstreamError):
    """Provider answered with something that cannot be parsed into a result."""


class StorageError(FieldJournalError):
    """Persistence or blob I/O failure."""

    status_code = 500
    public_message = "Internal storage error"
