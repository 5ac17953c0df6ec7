"""Port for the external artifact generation engine."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from domain.value_objects.generation_request import GenerationRequest


class ImageGenerator(Protocol):
    """Turns a validated generation request into an artifact.

    Implementations own the file stream while the call runs and may read it
    once, up to its end.
    """

    @abstractmethod
    async def generate_image(self, request: GenerationRequest) -> str:
        """Generate an artifact from the request.

        Args:
            request: Validated request including the artifact file stream

        Returns:
            Identifier of the generated artifact

        Raises:
            ArtifactNotUniqueError: An artifact with the same identity exists
            ArtifactFileTooLargeError: The artifact file is above the size limit
            ArtifactParsingFailedError: The artifact file cannot be parsed

        """
        ...
