"""Core custom exceptions for upload validation."""


class UploadValidationError(Exception):
    """Base exception for a failed upload check.

    Carries the human-readable ``reason`` reported to the caller and a short
    machine-readable ``code`` naming the kind of failure.
    """

    code = "upload_invalid"

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class NoUploadError(UploadValidationError):
    """No file was submitted under the field handle."""

    code = "no_upload"


class PlatformUploadError(UploadValidationError):
    """The transport reported a failure while receiving a file."""

    code = "upload_error"


class UnknownUploadError(PlatformUploadError):
    """The transport reported an error code outside the known set."""


class InvalidTypeError(UploadValidationError):
    """The file's resolved MIME type or type category is not allowed."""

    code = "invalid_type"


class InvalidExtensionError(UploadValidationError):
    """The declared filename extension is not allowed."""

    code = "invalid_extension"


class ConfigurationError(Exception):
    """Exception for configuration-related errors (e.g., unusable temporary directory)."""
