from __future__ import annotations

import asyncio
import hashlib
from typing import TYPE_CHECKING

import fsspec

from application.ports.blob_store import BlobStore, StoredBlob
from domain.exceptions import ArtifactFileTooLargeError

if TYPE_CHECKING:
    from domain.value_objects.upload_section import ByteStream

CHUNK_SIZE = 1024 * 1024


class FsspecBlobStore(BlobStore):
    def __init__(self, base_url: str, *, storage_options: dict | None = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.storage_options = storage_options or {}

    def url(self, key: str) -> str:
        return f"{self.base_url}/{key}"

    async def put_stream(
        self,
        key: str,
        stream: ByteStream,
        *,
        mime_type: str | None = None,
        max_size: int | None = None,
    ) -> StoredBlob:
        fs, path = fsspec.core.url_to_fs(self.url(key), **self.storage_options)
        # Blocking store calls run in worker threads
        await asyncio.to_thread(fs.makedirs, fs._parent(path), exist_ok=True)  # noqa: SLF001

        h = hashlib.sha256()
        size = 0

        try:
            out = await asyncio.to_thread(fs.open, path, "wb")
            try:
                while True:
                    chunk = await stream.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    size += len(chunk)
                    if max_size is not None and size > max_size:
                        msg = f"Blob {key} exceeds {max_size} bytes"
                        raise ArtifactFileTooLargeError(msg)
                    await asyncio.to_thread(out.write, chunk)
                    h.update(chunk)
            finally:
                await asyncio.to_thread(out.close)
        except Exception:
            # Partially written blobs are never kept
            await asyncio.to_thread(self.delete, key)
            raise

        return StoredBlob(key=key, size_bytes=size, sha256=h.hexdigest(), mime_type=mime_type)

    def exists(self, key: str) -> bool:
        fs, path = fsspec.core.url_to_fs(self.url(key), **self.storage_options)
        return fs.exists(path)

    def delete(self, key: str) -> None:
        fs, path = fsspec.core.url_to_fs(self.url(key), **self.storage_options)
        if fs.exists(path):
            fs.rm(path)
