"""Tests for the fsspec blob store."""

from __future__ import annotations

import asyncio
import hashlib
import threading
from pathlib import Path

import pytest

from domain.exceptions import ArtifactFileTooLargeError
from infrastructure.blob_stores.fsspec_blob_store import FsspecBlobStore
from tests.mocks import InMemoryByteStream


@pytest.fixture
def blob_store(tmp_path: Path) -> FsspecBlobStore:
    return FsspecBlobStore(tmp_path.as_uri())


class TestFsspecBlobStore:
    @pytest.mark.asyncio
    async def test_put_stream_writes_blob(self, blob_store: FsspecBlobStore, tmp_path: Path) -> None:
        stored = await blob_store.put_stream(
            "generate/abc",
            InMemoryByteStream(b"123456790"),
            mime_type="application/octet-stream",
        )

        assert stored.key == "generate/abc"
        assert stored.size_bytes == 9
        assert stored.sha256 == hashlib.sha256(b"123456790").hexdigest()
        assert stored.mime_type == "application/octet-stream"
        assert (tmp_path / "generate" / "abc").read_bytes() == b"123456790"
        assert blob_store.exists("generate/abc")

    @pytest.mark.asyncio
    async def test_put_stream_within_max_size(self, blob_store: FsspecBlobStore) -> None:
        stored = await blob_store.put_stream("a", InMemoryByteStream(b"1234"), max_size=4)
        assert stored.size_bytes == 4

    @pytest.mark.asyncio
    async def test_put_stream_over_max_size_removes_blob(self, blob_store: FsspecBlobStore) -> None:
        with pytest.raises(ArtifactFileTooLargeError):
            await blob_store.put_stream("generate/big", InMemoryByteStream(b"12345"), max_size=4)

        assert not blob_store.exists("generate/big")

    def test_url_joins_base_and_key(self) -> None:
        store = FsspecBlobStore("s3://bucket/artifacts/")
        assert store.url("generate/abc") == "s3://bucket/artifacts/generate/abc"

    def test_delete_missing_blob_is_a_no_op(self, blob_store: FsspecBlobStore) -> None:
        blob_store.delete("missing")
        assert not blob_store.exists("missing")

    @pytest.mark.asyncio
    async def test_store_calls_run_in_worker_threads(
        self,
        blob_store: FsspecBlobStore,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        loop_thread = threading.get_ident()
        write_threads: list[int] = []
        to_thread = asyncio.to_thread

        async def recording_to_thread(func, /, *args, **kwargs):  # type: ignore[no-untyped-def]
            def call():  # type: ignore[no-untyped-def]
                if getattr(func, "__name__", "") == "write":
                    write_threads.append(threading.get_ident())
                return func(*args, **kwargs)

            return await to_thread(call)

        monkeypatch.setattr(asyncio, "to_thread", recording_to_thread)

        await blob_store.put_stream("generate/abc", InMemoryByteStream(b"123456790"))

        assert write_threads
        assert loop_thread not in write_threads
