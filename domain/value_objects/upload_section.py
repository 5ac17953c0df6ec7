from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


class ByteStream(Protocol):
    """Forward-only async byte stream over the content of a file section."""

    async def read(self, size: int = -1) -> bytes: ...

    async def drain(self) -> None:
        """Consume whatever is left of the stream, then close it."""
        ...

    async def aclose(self) -> None: ...


@dataclass(frozen=True, slots=True)
class FieldSection:
    """A named form field with its decoded string value."""

    name: str
    value: str


@dataclass(frozen=True, slots=True)
class FileSection:
    """A file attachment; its content is read from ``stream`` exactly once."""

    name: str
    content_type: str
    stream: ByteStream
    filename: str | None = None


type UploadSection = FieldSection | FileSection
