"""Domain exceptions for business rule violations."""


class DomainError(Exception):
    """Base exception for domain layer."""


class ValidationError(DomainError):
    """Raised when input validation fails."""


class InfrastructureError(DomainError):
    """Raised when infrastructure operations fail (storage, network, etc.)."""


# ---------------------------------------------------------------------------
# Upload decoding and validation
# ---------------------------------------------------------------------------


class MultipartUploadError(ValidationError):
    """Base class for failures detected while reading a multipart upload."""


class MalformedContentTypeError(MultipartUploadError):
    """Raised when the Content-Type header is missing or not a multipart form."""


class MalformedBodyError(MultipartUploadError):
    """Raised when the multipart body is truncated or a part cannot be parsed."""


class MissingArtifactError(MultipartUploadError):
    """Raised when the upload ends without a file section."""

    def __init__(self, message: str = "Request does not contain artifact") -> None:
        super().__init__(message)


class SizeRequiredBeforeFileError(MultipartUploadError):
    """Raised when the file section arrives without a valid size before it."""

    def __init__(
        self,
        message: str = (
            "No size provided before the file part of the message or the size value is wrong."
        ),
    ) -> None:
        super().__init__(message)


class InvalidFilePositionError(MultipartUploadError):
    """Raised when the final section of the upload is not a proper file part."""

    def __init__(
        self,
        message: str = "The last part of the multipart/form-data message should be a file.",
    ) -> None:
        super().__init__(message)


class TrailingDataAfterFileError(InvalidFilePositionError):
    """Raised when another section follows the file section."""

    def __init__(
        self,
        message: str = (
            "The last part of the multipart/form-data message should be a file. "
            "Unexpected part after the file."
        ),
    ) -> None:
        super().__init__(message)


# ---------------------------------------------------------------------------
# Generation engine
# ---------------------------------------------------------------------------


class GenerationError(DomainError):
    """Base class for business failures reported by the generation engine."""


class ArtifactNotUniqueError(GenerationError):
    """Raised when an artifact with the same identity already exists."""


class ArtifactFileTooLargeError(GenerationError):
    """Raised when the artifact file exceeds the accepted size."""


class ArtifactParsingFailedError(GenerationError):
    """Raised when the artifact file content cannot be parsed."""
