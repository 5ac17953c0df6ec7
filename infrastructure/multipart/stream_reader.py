"""Streaming multipart/form-data reader built on python-multipart.

Sections are produced one at a time while the body is read; field values are
buffered (up to a limit) and file content is handed out as a stream.
"""

from __future__ import annotations

from collections import deque
from enum import Enum, auto
from typing import TYPE_CHECKING

import structlog
from python_multipart.exceptions import MultipartParseError
from python_multipart.multipart import MultipartParser, parse_options_header
from starlette.requests import ClientDisconnect

from domain.exceptions import (
    MalformedBodyError,
    MalformedContentTypeError,
    TrailingDataAfterFileError,
)
from domain.value_objects.upload_section import FieldSection, FileSection

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, AsyncIterable, AsyncIterator

    from domain.value_objects.upload_section import UploadSection

logger = structlog.get_logger()

FORM_DATA = b"multipart/form-data"
DEFAULT_MAX_FIELD_SIZE = 1024 * 1024
DEFAULT_READ_CHUNK_SIZE = 64 * 1024


class _Event(Enum):
    PART_BEGIN = auto()
    HEADERS = auto()
    DATA = auto()
    PART_END = auto()
    END = auto()


def parse_boundary(content_type: str | None) -> bytes:
    """Extract the multipart boundary from a Content-Type header value.

    Raises:
        MalformedContentTypeError: If the header is missing, not a form or has no boundary

    """
    if not content_type or not content_type.strip():
        msg = "mime: no media type"
        raise MalformedContentTypeError(msg)

    media_type, params = parse_options_header(content_type)
    if not media_type:
        msg = "mime: no media type"
        raise MalformedContentTypeError(msg)
    if media_type.lower() != FORM_DATA:
        msg = "request Content-Type isn't multipart/form-data"
        raise MalformedContentTypeError(msg)

    boundary = params.get(b"boundary")
    if not boundary:
        msg = "no multipart boundary param in Content-Type"
        raise MalformedContentTypeError(msg)
    return boundary


class FileStream:
    """Async stream over the content of the file section.

    Reading past the end of the part checks what follows it: the closing
    boundary ends the stream, another part raises TrailingDataAfterFileError.
    """

    def __init__(self, reader: MultipartStreamReader, chunk_size: int = DEFAULT_READ_CHUNK_SIZE) -> None:
        self._reader = reader
        self._chunk_size = chunk_size
        self._buffer = bytearray()
        self._finished = False
        self._closed = False
        self.bytes_read = 0

    @property
    def closed(self) -> bool:
        return self._closed

    async def read(self, size: int = -1) -> bytes:
        """Read up to ``size`` bytes; everything that is left when ``size`` is negative."""
        if self._closed:
            msg = "I/O operation on closed file stream"
            raise ValueError(msg)

        while not self._finished and (size < 0 or len(self._buffer) < size):
            await self._fill()

        if size < 0:
            data = bytes(self._buffer)
            self._buffer.clear()
        else:
            data = bytes(self._buffer[:size])
            del self._buffer[:size]

        self.bytes_read += len(data)
        return data

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self._chunks()

    async def _chunks(self) -> AsyncGenerator[bytes, None]:
        while chunk := await self.read(self._chunk_size):
            yield chunk

    async def drain(self) -> None:
        """Discard the unread content, then close the stream."""
        if self._closed:
            return
        try:
            while await self.read(self._chunk_size):
                pass
        finally:
            await self.aclose()

    async def aclose(self) -> None:
        self._closed = True
        self._buffer.clear()

    async def _fill(self) -> None:
        event = await self._reader._next_event()  # noqa: SLF001
        if event is None:
            msg = "multipart: unexpected EOF in file part"
            raise MalformedBodyError(msg)

        kind, payload = event
        if kind is _Event.DATA:
            self._buffer.extend(payload)
        elif kind is _Event.PART_END:
            await self._reader._expect_end()  # noqa: SLF001
            self._finished = True


class MultipartStreamReader:
    """Reads the sections of a multipart/form-data body in arrival order.

    The Content-Type is checked when iteration starts, so header problems
    surface the same way as body problems. The reader is single-pass.
    """

    def __init__(
        self,
        content_type: str | None,
        chunks: AsyncIterable[bytes],
        *,
        max_field_size: int = DEFAULT_MAX_FIELD_SIZE,
        read_chunk_size: int = DEFAULT_READ_CHUNK_SIZE,
    ) -> None:
        self._content_type = content_type
        self._chunks = chunks.__aiter__()
        self._max_field_size = max_field_size
        self._read_chunk_size = read_chunk_size

        self._parser: MultipartParser | None = None
        self._events: deque[tuple[_Event, object]] = deque()
        self._exhausted = False
        self._ended = False
        self._parts_seen = 0

        self._header_field = bytearray()
        self._header_value = bytearray()
        self._headers: dict[str, str] = {}

        self._sections: AsyncGenerator[UploadSection, None] | None = None
        self._file_stream: FileStream | None = None
        self._closed = False

    def __aiter__(self) -> AsyncIterator[UploadSection]:
        if self._sections is not None:
            msg = "Multipart body can only be iterated once"
            raise RuntimeError(msg)
        self._sections = self._iter_sections()
        return self._sections

    async def aclose(self) -> None:
        """Release the body, including a file stream that was handed out."""
        if self._closed:
            return
        self._closed = True
        if self._sections is not None:
            await self._sections.aclose()
        if self._file_stream is not None:
            await self._file_stream.aclose()
        self._events.clear()

    async def _iter_sections(self) -> AsyncGenerator[UploadSection, None]:
        self._parser = MultipartParser(
            parse_boundary(self._content_type),
            callbacks={
                "on_part_begin": self._on_part_begin,
                "on_part_data": self._on_part_data,
                "on_part_end": self._on_part_end,
                "on_header_field": self._on_header_field,
                "on_header_value": self._on_header_value,
                "on_header_end": self._on_header_end,
                "on_headers_finished": self._on_headers_finished,
                "on_end": self._on_end,
            },
        )

        while True:
            event = await self._next_event()
            if event is None:
                if self._parts_seen:
                    msg = "multipart: NextPart: EOF"
                    raise MalformedBodyError(msg)
                return

            kind, payload = event
            if kind is _Event.END:
                return
            if kind is not _Event.HEADERS:
                continue

            section = await self._open_section(payload)  # type: ignore[arg-type]
            yield section
            if isinstance(section, FileSection):
                await section.stream.drain()
                return

    async def _open_section(self, headers: dict[str, str]) -> UploadSection:
        disposition = headers.get("content-disposition")
        if not disposition:
            msg = "multipart: part is missing Content-Disposition header"
            raise MalformedBodyError(msg)

        _, options = parse_options_header(disposition)
        raw_name = options.get(b"name")
        if raw_name is None:
            msg = "multipart: part is missing form field name"
            raise MalformedBodyError(msg)
        name = raw_name.decode("utf-8", errors="replace")

        raw_filename = options.get(b"filename")
        content_type = headers.get("content-type", "").strip()
        if raw_filename is not None or content_type:
            self._file_stream = FileStream(self, chunk_size=self._read_chunk_size)
            logger.debug("multipart_file_section", name=name, content_type=content_type)
            return FileSection(
                name=name,
                content_type=content_type,
                stream=self._file_stream,
                filename=raw_filename.decode("utf-8", errors="replace") if raw_filename else None,
            )

        value = await self._read_field(name)
        logger.debug("multipart_field_section", name=name)
        return FieldSection(name=name, value=value)

    async def _read_field(self, name: str) -> str:
        value = bytearray()
        while True:
            event = await self._next_event()
            if event is None:
                msg = f"multipart: unexpected EOF in field {name!r}"
                raise MalformedBodyError(msg)
            kind, payload = event
            if kind is _Event.PART_END:
                break
            if kind is _Event.DATA:
                value.extend(payload)  # type: ignore[arg-type]
                if len(value) > self._max_field_size:
                    msg = f"multipart: field {name!r} exceeds {self._max_field_size} bytes"
                    raise MalformedBodyError(msg)

        try:
            return value.decode("utf-8")
        except UnicodeDecodeError as e:
            msg = f"multipart: field {name!r} is not valid UTF-8"
            raise MalformedBodyError(msg) from e

    async def _expect_end(self) -> None:
        """Check that the part just finished was the last one."""
        while True:
            event = await self._next_event()
            if event is None:
                msg = "multipart: NextPart: EOF"
                raise MalformedBodyError(msg)
            kind, _ = event
            if kind is _Event.END:
                return
            if kind is _Event.PART_BEGIN:
                raise TrailingDataAfterFileError

    async def _next_event(self) -> tuple[_Event, object] | None:
        while not self._events:
            if self._exhausted or self._closed:
                return None
            await self._feed()
        return self._events.popleft()

    async def _feed(self) -> None:
        if self._ended:
            # Epilogue after the closing boundary is not part of the form
            self._exhausted = True
            return

        try:
            chunk = await anext(self._chunks)
        except StopAsyncIteration:
            self._exhausted = True
            return
        except ClientDisconnect as e:
            msg = "multipart: client disconnected while reading body"
            raise MalformedBodyError(msg) from e

        if not chunk:
            return
        try:
            self._parser.write(chunk)  # type: ignore[union-attr]
        except MultipartParseError as e:
            msg = f"multipart: {e}"
            raise MalformedBodyError(msg) from e

    # python-multipart callbacks

    def _on_part_begin(self) -> None:
        self._parts_seen += 1
        self._headers = {}
        self._events.append((_Event.PART_BEGIN, None))

    def _on_header_field(self, data: bytes, start: int, end: int) -> None:
        self._header_field.extend(data[start:end])

    def _on_header_value(self, data: bytes, start: int, end: int) -> None:
        self._header_value.extend(data[start:end])

    def _on_header_end(self) -> None:
        field = self._header_field.decode("latin-1").strip().lower()
        self._headers[field] = self._header_value.decode("latin-1").strip()
        self._header_field.clear()
        self._header_value.clear()

    def _on_headers_finished(self) -> None:
        self._events.append((_Event.HEADERS, dict(self._headers)))

    def _on_part_data(self, data: bytes, start: int, end: int) -> None:
        self._events.append((_Event.DATA, bytes(data[start:end])))

    def _on_part_end(self) -> None:
        self._events.append((_Event.PART_END, None))

    def _on_end(self) -> None:
        self._ended = True
        self._events.append((_Event.END, None))
