"""Port for reading the sections of an upload in arrival order."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from domain.value_objects.upload_section import UploadSection


class SectionReader(Protocol):
    """Single-pass reader over the sections of one upload.

    ``aclose`` releases the underlying body, including the stream of a file
    section that was handed out, and is safe to call more than once.
    """

    def __aiter__(self) -> AsyncIterator[UploadSection]: ...

    async def aclose(self) -> None: ...
