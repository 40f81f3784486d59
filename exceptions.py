"""Error taxonomy shared by the wizard, the generation proxy and the stores."""
from typing import Optional


class ThumbnailWizardError(RuntimeError):
    """Base exception for the application."""
    pass


class ValidationError(ThumbnailWizardError):
    """
    A required field is missing before a step advance or a generation call.

    Attributes:
        message_key: i18n key for the user-visible message.
        field: Name of the session field that failed validation, if any.
    """
    def __init__(self, message: str, message_key: Optional[str] = None, field: Optional[str] = None):
        super().__init__(message)
        self.message_key = message_key
        self.field = field


class UpstreamError(ThumbnailWizardError):
    """An external collaborator (object storage, model API) failed."""
    pass


class StorageError(UpstreamError):
    """Listing, reading or uploading objects failed."""
    pass


class GenerationError(UpstreamError):
    """
    The model API call failed.

    Attributes:
        status_code: HTTP status returned by the API, None for network errors.
    """
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class PersistenceError(ThumbnailWizardError):
    """Writing a record to the database failed."""
    pass


class AuthError(ThumbnailWizardError):
    """Invalid credentials or missing/expired token."""

    def __init__(self, message: str, message_key: Optional[str] = None):
        super().__init__(message)
        self.message_key = message_key
