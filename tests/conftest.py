"""Shared test fixtures and configuration."""

from __future__ import annotations

import pytest

from domain.value_objects.upload_section import FieldSection, FileSection
from tests.mocks import InMemoryByteStream, Part

IMAGE_BODY = b"123456790"


@pytest.fixture
def image_body() -> bytes:
    """Return the raw artifact file content used across tests."""
    return IMAGE_BODY


@pytest.fixture
def valid_parts(image_body: bytes) -> list[Part]:
    """Create a complete, well ordered generate-image upload."""
    return [
        Part("name", "name"),
        Part("description", "description"),
        Part("size", str(len(image_body))),
        Part("device_types_compatible", "Beagle Bone"),
        Part("type", "single_file"),
        Part("args", "args"),
        Part("file", content_type="application/octet-stream", data=image_body),
    ]


@pytest.fixture
def file_section(image_body: bytes) -> FileSection:
    """Create a file section carrying the artifact file."""
    return FileSection(
        name="file",
        content_type="application/octet-stream",
        stream=InMemoryByteStream(image_body),
        filename="artifact.bin",
    )


@pytest.fixture
def valid_sections(image_body: bytes, file_section: FileSection) -> list:
    """Create the sections of a complete generate-image upload."""
    return [
        FieldSection("name", "name"),
        FieldSection("description", "description"),
        FieldSection("size", str(len(image_body))),
        FieldSection("device_types_compatible", "Beagle Bone"),
        FieldSection("type", "single_file"),
        FieldSection("args", "args"),
        file_section,
    ]
