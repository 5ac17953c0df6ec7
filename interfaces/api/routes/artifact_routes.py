from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, Response, status
from lagom import Container

from application.use_cases.generate_image_use_cases import GenerateImageUseCase
from infrastructure.multipart.stream_reader import MultipartStreamReader
from interfaces.api.middleware import handle_use_case_errors
from interfaces.dependencies import get_container, get_multipart_reader

logger = structlog.get_logger()

router = APIRouter(prefix="/artifacts", tags=["artifacts"])


def _created(artifact_id: str) -> Response:
    return Response(
        status_code=status.HTTP_201_CREATED,
        headers={"Location": f"{router.prefix}/{artifact_id}"},
    )


@router.post(
    "/generate",
    status_code=status.HTTP_201_CREATED,
    response_class=Response,
    response_model=None,
)
@handle_use_case_errors
async def generate_image(
    container: Annotated[Container, Depends(get_container)],
    reader: Annotated[MultipartStreamReader, Depends(get_multipart_reader)],
) -> Response:
    """Generate an artifact from a streamed multipart/form-data upload.

    Parts, in order: optional ``name``, ``description``, ``device_types_compatible``,
    ``type`` and ``args`` fields, a ``size`` field (positive integer) that must
    come before the file, and finally the file part with a content type.

    Returns:
        201 Created: Generation started, ``Location`` names the artifact
        400 Bad Request: Malformed upload, or the artifact file was rejected
        422 Unprocessable Entity: Artifact not unique
        500 Internal Server Error: Any other failure

    """
    logger.info("generate_image_endpoint_called")
    use_case = container[GenerateImageUseCase]
    result = await use_case.execute(reader)
    return result.map(_created)
