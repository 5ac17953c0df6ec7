"""Tests for the Temporal image generator."""

from __future__ import annotations

import pytest

from domain.exceptions import ArtifactFileTooLargeError, ArtifactNotUniqueError
from domain.value_objects.generation_request import GenerationRequest
from infrastructure.temporal.image_generator import TemporalImageGenerator, generation_workflow_id
from tests.mocks import FakeTemporalClient, InMemoryByteStream, MockBlobStore


def _request(
    data: bytes = b"123456790",
    *,
    name: str = "name",
    device_types: str = "raspberrypi4, beaglebone",
    size: int | None = None,
) -> GenerationRequest:
    return GenerationRequest(
        name=name,
        description="description",
        device_types_compatible=device_types,
        type="single_file",
        args="args",
        size=len(data) if size is None else size,
        content_type="application/octet-stream",
        file=InMemoryByteStream(data),
    )


def _generator(
    blob_store: MockBlobStore,
    client: FakeTemporalClient,
    max_size: int = 1024,
) -> TemporalImageGenerator:
    return TemporalImageGenerator(
        blob_store,
        address="localhost:7233",
        task_queue="artifact_generation",
        workflow_name="GenerateArtifactWorkflow",
        max_size=max_size,
        client=client,  # type: ignore[arg-type]
    )


class TestGenerationWorkflowId:
    def test_named_artifact_uses_name_and_sorted_device_types(self) -> None:
        assert (
            generation_workflow_id(_request(), "id")
            == "generate-artifact-name-beaglebone,raspberrypi4"
        )

    def test_unnamed_artifact_uses_artifact_id(self) -> None:
        assert generation_workflow_id(_request(name=""), "abc") == "generate-artifact-abc"


class TestTemporalImageGenerator:
    @pytest.mark.asyncio
    async def test_generate_image_stages_file_and_starts_workflow(self) -> None:
        blob_store = MockBlobStore()
        client = FakeTemporalClient()

        artifact_id = await _generator(blob_store, client).generate_image(_request())

        assert blob_store.blobs == {f"generate/{artifact_id}": b"123456790"}
        started = client.started["generate-artifact-name-beaglebone,raspberrypi4"]
        assert started["workflow"] == "GenerateArtifactWorkflow"
        assert started["task_queue"] == "artifact_generation"
        assert started["arg"]["artifact_id"] == artifact_id
        assert started["arg"]["artifact_uri"] == f"memory://blobs/generate/{artifact_id}"
        assert started["arg"]["device_types_compatible"] == ["raspberrypi4", "beaglebone"]
        assert started["arg"]["size"] == 9

    @pytest.mark.asyncio
    async def test_declared_size_over_limit_is_rejected(self) -> None:
        blob_store = MockBlobStore()
        client = FakeTemporalClient()

        with pytest.raises(ArtifactFileTooLargeError):
            await _generator(blob_store, client, max_size=4).generate_image(_request())

        assert blob_store.blobs == {}
        assert client.started == {}

    @pytest.mark.asyncio
    async def test_file_longer_than_declared_size_is_rejected(self) -> None:
        blob_store = MockBlobStore()
        client = FakeTemporalClient()

        with pytest.raises(ArtifactFileTooLargeError):
            await _generator(blob_store, client).generate_image(_request(size=3))

        assert client.started == {}

    @pytest.mark.asyncio
    async def test_running_generation_makes_artifact_not_unique(self) -> None:
        blob_store = MockBlobStore()
        client = FakeTemporalClient()
        generator = _generator(blob_store, client)
        first_id = await generator.generate_image(_request())

        with pytest.raises(ArtifactNotUniqueError):
            await generator.generate_image(_request())

        assert list(blob_store.blobs) == [f"generate/{first_id}"]
        assert len(blob_store.deleted) == 1

    @pytest.mark.asyncio
    async def test_workflow_start_failure_removes_staged_file(self) -> None:
        blob_store = MockBlobStore()
        client = FakeTemporalClient(error=RuntimeError("temporal unavailable"))

        with pytest.raises(RuntimeError, match="temporal unavailable"):
            await _generator(blob_store, client).generate_image(_request())

        assert blob_store.blobs == {}
        assert len(blob_store.deleted) == 1
