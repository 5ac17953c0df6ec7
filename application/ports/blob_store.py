from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from domain.value_objects.upload_section import ByteStream


@dataclass(frozen=True)
class StoredBlob:
    key: str
    size_bytes: int
    sha256: str
    mime_type: str | None


class BlobStore(Protocol):
    async def put_stream(
        self,
        key: str,
        stream: ByteStream,
        *,
        mime_type: str | None = None,
        max_size: int | None = None,
    ) -> StoredBlob:
        """Copy the stream into the store under ``key``.

        Raises:
            ArtifactFileTooLargeError: If the stream yields more than ``max_size`` bytes

        """
        ...

    def url(self, key: str) -> str: ...
    def exists(self, key: str) -> bool: ...
    def delete(self, key: str) -> None: ...
