from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from returns.result import Failure, Result, Success

from application.dtos.errors import AppError, ErrorCategory
from domain.exceptions import (
    ArtifactFileTooLargeError,
    ArtifactNotUniqueError,
    ArtifactParsingFailedError,
    DomainError,
    InvalidFilePositionError,
    MalformedBodyError,
    MalformedContentTypeError,
    MissingArtifactError,
    SizeRequiredBeforeFileError,
    TrailingDataAfterFileError,
)
from domain.services.generate_image_form import GenerateImageForm

if TYPE_CHECKING:
    from application.ports.image_generator import ImageGenerator
    from application.ports.section_reader import SectionReader

logger = structlog.get_logger()

# Looked up along the exception MRO, so the most specific entry wins.
ERROR_CATEGORIES: dict[type[DomainError], ErrorCategory] = {
    MalformedContentTypeError: ErrorCategory.MALFORMED_CONTENT_TYPE,
    MalformedBodyError: ErrorCategory.MALFORMED_BODY,
    MissingArtifactError: ErrorCategory.MISSING_ARTIFACT,
    SizeRequiredBeforeFileError: ErrorCategory.SIZE_REQUIRED,
    InvalidFilePositionError: ErrorCategory.INVALID_FILE_POSITION,
    TrailingDataAfterFileError: ErrorCategory.TRAILING_DATA,
    ArtifactNotUniqueError: ErrorCategory.ARTIFACT_NOT_UNIQUE,
    ArtifactFileTooLargeError: ErrorCategory.ARTIFACT_TOO_LARGE,
    ArtifactParsingFailedError: ErrorCategory.ARTIFACT_PARSING_FAILED,
}


def categorize(error: BaseException) -> ErrorCategory:
    """Return the category of an error, or INTERNAL when it has none."""
    for cls in type(error).__mro__:
        category = ERROR_CATEGORIES.get(cls)
        if category is not None:
            return category
    return ErrorCategory.INTERNAL


class GenerateImageUseCase:
    """Validate a streamed generate-image upload and hand it to the generation engine.

    Validation failures are reported without calling the engine. The file
    stream is closed before returning, whatever the outcome.
    """

    def __init__(self, image_generator: ImageGenerator) -> None:
        self.image_generator = image_generator

    async def execute(self, reader: SectionReader) -> Result[str, AppError]:
        """Run one upload through validation and generation.

        Args:
            reader: Reader over the sections of the upload, closed before returning

        Returns:
            Result containing the artifact ID or the categorized error

        """
        try:
            request = await GenerateImageForm.parse(reader)

            logger.info(
                "generate_image_started",
                name=request.name,
                size=request.size,
                content_type=request.content_type,
                device_types=request.device_types,
            )
            artifact_id = await self.image_generator.generate_image(request)
            await request.file.drain()
        except DomainError as e:
            category = categorize(e)
            if category is ErrorCategory.INTERNAL:
                logger.exception("generate_image_failed", error=str(e), error_type=type(e).__name__)
            else:
                logger.warning("generate_image_rejected", category=category.value, error=str(e))
            return Failure(AppError(category, str(e)))
        except Exception as e:
            logger.exception(
                "generate_image_failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            return Failure(AppError(ErrorCategory.INTERNAL, "internal error"))
        finally:
            await reader.aclose()

        logger.info("generate_image_succeeded", artifact_id=artifact_id)
        return Success(artifact_id)
