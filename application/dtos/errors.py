from enum import StrEnum


class ErrorCategory(StrEnum):
    """Closed set of failure kinds the API knows how to report."""

    MALFORMED_CONTENT_TYPE = "malformed_content_type"
    MALFORMED_BODY = "malformed_body"
    MISSING_ARTIFACT = "missing_artifact"
    SIZE_REQUIRED = "size_required"
    INVALID_FILE_POSITION = "invalid_file_position"
    TRAILING_DATA = "trailing_data"
    ARTIFACT_NOT_UNIQUE = "artifact_not_unique"
    ARTIFACT_TOO_LARGE = "artifact_too_large"
    ARTIFACT_PARSING_FAILED = "artifact_parsing_failed"
    INTERNAL = "internal"


class AppError:
    """Represents different categories of application errors."""

    def __init__(self, category: ErrorCategory, message: str) -> None:
        self.category = category
        self.message = message

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"AppError(category={self.category.value!r}, message={self.message!r})"
