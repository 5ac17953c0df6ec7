from fastapi import HTTPException, status

from application.dtos.errors import AppError, ErrorCategory

INTERNAL_ERROR_MESSAGE = "internal error"

# Status and public message per category; a None message passes the error's own text through.
ERROR_RESPONSES: dict[ErrorCategory, tuple[int, str | None]] = {
    ErrorCategory.MALFORMED_CONTENT_TYPE: (status.HTTP_400_BAD_REQUEST, None),
    ErrorCategory.MALFORMED_BODY: (status.HTTP_400_BAD_REQUEST, None),
    ErrorCategory.MISSING_ARTIFACT: (
        status.HTTP_400_BAD_REQUEST,
        "Request does not contain artifact",
    ),
    ErrorCategory.SIZE_REQUIRED: (
        status.HTTP_400_BAD_REQUEST,
        "No size provided before the file part of the message or the size value is wrong.",
    ),
    ErrorCategory.INVALID_FILE_POSITION: (
        status.HTTP_400_BAD_REQUEST,
        "The last part of the multipart/form-data message should be a file.",
    ),
    ErrorCategory.TRAILING_DATA: (
        status.HTTP_400_BAD_REQUEST,
        "The last part of the multipart/form-data message should be a file. "
        "Unexpected part after the file.",
    ),
    ErrorCategory.ARTIFACT_NOT_UNIQUE: (
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "Artifact not unique",
    ),
    ErrorCategory.ARTIFACT_TOO_LARGE: (status.HTTP_400_BAD_REQUEST, "Artifact file too large"),
    ErrorCategory.ARTIFACT_PARSING_FAILED: (
        status.HTTP_400_BAD_REQUEST,
        "Cannot parse artifact file",
    ),
}


def _map_app_error_to_http_exception(error: AppError) -> HTTPException:
    """Map application layer errors to appropriate HTTP exceptions."""
    response = ERROR_RESPONSES.get(error.category)
    if response is None:
        # Unknown error category: never expose the underlying detail
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=INTERNAL_ERROR_MESSAGE,
        )

    status_code, message = response
    return HTTPException(status_code=status_code, detail=message or error.message)
