"""Temporal implementation of the ImageGenerator port.

The artifact file is staged in the blob store, then a generation workflow is
started for it. The workflow itself runs in the generation service's workers.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING
from uuid import uuid4

import structlog
from temporalio.client import Client
from temporalio.exceptions import WorkflowAlreadyStartedError

from application.ports.image_generator import ImageGenerator
from domain.exceptions import ArtifactFileTooLargeError, ArtifactNotUniqueError

if TYPE_CHECKING:
    from application.ports.blob_store import BlobStore
    from domain.value_objects.generation_request import GenerationRequest

logger = structlog.get_logger()


def generation_workflow_id(request: GenerationRequest, artifact_id: str) -> str:
    """Workflow ID identifying the artifact being generated.

    Two generations of the same name for the same device types share an ID,
    so only one of them can run at a time.
    """
    if not request.name:
        return f"generate-artifact-{artifact_id}"
    device_types = ",".join(sorted(request.device_types))
    return f"generate-artifact-{request.name}-{device_types}"


class TemporalImageGenerator(ImageGenerator):
    """Stages uploaded artifact files and starts their generation workflow."""

    def __init__(  # noqa: PLR0913
        self,
        blob_store: BlobStore,
        *,
        address: str,
        namespace: str = "default",
        task_queue: str = "artifact_generation",
        workflow_name: str = "GenerateArtifactWorkflow",
        max_size: int,
        client: Client | None = None,
    ) -> None:
        """Initialize the generator.

        Args:
            blob_store: Store receiving the uploaded artifact file
            address: Temporal frontend address
            namespace: Temporal namespace
            task_queue: Task queue served by the generation workers
            workflow_name: Registered name of the generation workflow
            max_size: Largest accepted artifact file in bytes
            client: Temporal client. If None, connects on first use.

        """
        self.blob_store = blob_store
        self._address = address
        self._namespace = namespace
        self._task_queue = task_queue
        self._workflow_name = workflow_name
        self._max_size = max_size
        self._client = client

    async def _ensure_client(self) -> Client:
        """Lazy-initialize Temporal client on first use."""
        if self._client is None:
            self._client = await Client.connect(self._address, namespace=self._namespace)
        return self._client

    async def generate_image(self, request: GenerationRequest) -> str:
        if request.size > self._max_size:
            msg = f"Declared size {request.size} exceeds {self._max_size} bytes"
            raise ArtifactFileTooLargeError(msg)

        artifact_id = str(uuid4())
        storage_key = f"generate/{artifact_id}"

        stored = await self.blob_store.put_stream(
            storage_key,
            request.file,
            mime_type=request.content_type,
            max_size=request.size,
        )
        logger.info(
            "generate_artifact_file_staged",
            artifact_id=artifact_id,
            storage_key=stored.key,
            size_bytes=stored.size_bytes,
            sha256=stored.sha256,
        )

        workflow_id = generation_workflow_id(request, artifact_id)
        try:
            client = await self._ensure_client()
            await client.start_workflow(
                self._workflow_name,
                {
                    "artifact_id": artifact_id,
                    "artifact_uri": self.blob_store.url(stored.key),
                    "name": request.name,
                    "description": request.description,
                    "device_types_compatible": request.device_types,
                    "type": request.type,
                    "args": request.args,
                    "size": stored.size_bytes,
                    "sha256": stored.sha256,
                },
                id=workflow_id,
                task_queue=self._task_queue,
            )
        except WorkflowAlreadyStartedError as e:
            await asyncio.to_thread(self.blob_store.delete, stored.key)
            msg = f"Generation already running for workflow {workflow_id}"
            raise ArtifactNotUniqueError(msg) from e
        except Exception:
            logger.exception(
                "generate_artifact_workflow_start_failed",
                artifact_id=artifact_id,
                workflow_id=workflow_id,
            )
            await asyncio.to_thread(self.blob_store.delete, stored.key)
            raise

        logger.info(
            "generate_artifact_workflow_started",
            artifact_id=artifact_id,
            workflow_id=workflow_id,
        )
        return artifact_id
