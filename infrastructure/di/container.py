from __future__ import annotations

from lagom import Container

from application.ports.blob_store import BlobStore
from application.ports.image_generator import ImageGenerator
from application.use_cases.generate_image_use_cases import GenerateImageUseCase
from infrastructure.blob_stores.fsspec_blob_store import FsspecBlobStore
from infrastructure.config import settings
from infrastructure.temporal.image_generator import TemporalImageGenerator


def create_container() -> Container:
    container = Container()

    # Blob storage (fsspec)
    blob_store_instance = FsspecBlobStore(
        base_url=settings.blob_base_url,
        storage_options=settings.blob_storage_options,
    )
    container[BlobStore] = blob_store_instance

    # Generation engine (Temporal); one client is shared across requests
    image_generator_instance = TemporalImageGenerator(
        blob_store=blob_store_instance,
        address=settings.temporal_address,
        namespace=settings.temporal_namespace,
        task_queue=settings.generate_task_queue,
        workflow_name=settings.generate_workflow_name,
        max_size=settings.max_generate_data_size,
    )
    container[ImageGenerator] = image_generator_instance

    # Use Cases
    container[GenerateImageUseCase] = lambda c: GenerateImageUseCase(
        image_generator=c[ImageGenerator],
    )

    return container
