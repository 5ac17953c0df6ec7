"""FastAPI dependencies: the Lagom container and per-request upload readers."""

from collections.abc import AsyncIterator
from functools import lru_cache

from fastapi import Request
from lagom import Container

from infrastructure.config import settings
from infrastructure.di.container import create_container
from infrastructure.multipart.stream_reader import MultipartStreamReader


@lru_cache
def get_container() -> Container:
    """Get the DI container instance.

    Cached to ensure singleton behavior across requests.
    """
    return create_container()


async def get_multipart_reader(request: Request) -> AsyncIterator[MultipartStreamReader]:
    """Wrap the raw request body in a streaming multipart reader.

    The body is not read here; the reader pulls it as sections are consumed.
    The reader is closed when the request is done, however the route exits.
    """
    reader = MultipartStreamReader(
        request.headers.get("content-type"),
        request.stream(),
        max_field_size=settings.multipart_max_field_size,
        read_chunk_size=settings.multipart_read_chunk_size,
    )
    try:
        yield reader
    finally:
        await reader.aclose()
