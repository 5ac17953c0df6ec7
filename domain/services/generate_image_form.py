"""Domain service validating the sections of a generate-image upload in arrival order."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING, NoReturn

from domain.exceptions import (
    InvalidFilePositionError,
    MissingArtifactError,
    MultipartUploadError,
    SizeRequiredBeforeFileError,
    TrailingDataAfterFileError,
)
from domain.value_objects.generation_request import GenerationRequest
from domain.value_objects.upload_section import FileSection

if TYPE_CHECKING:
    from collections.abc import AsyncIterable

    from domain.value_objects.upload_section import UploadSection

FILE_FIELD = "file"
SIZE_FIELD = "size"
TEXT_FIELDS = frozenset({"name", "description", "device_types_compatible", "type", "args"})


class FormState(Enum):
    """States of the generate-image form while sections arrive."""

    COLLECTING_FIELDS = auto()
    AWAITING_FILE = auto()
    COMPLETE = auto()
    FAILED = auto()


@dataclass
class WorkingRecord:
    """Fields collected so far for a single upload."""

    name: str | None = None
    description: str | None = None
    device_types_compatible: str | None = None
    type: str | None = None
    args: str | None = None
    size: int | None = None
    size_invalid: bool = False


def parse_size(raw: str) -> int | None:
    """Return the declared size, or None when it is not a positive integer."""
    value = raw.strip()
    digits = value.removeprefix("+")
    if not digits.isascii() or not digits.isdigit():
        return None
    try:
        size = int(digits)
    except ValueError:
        # More digits than int() converts
        return None
    return size if size > 0 else None


class GenerateImageForm:
    """State machine over the sections of one generate-image upload.

    The body is a forward-only stream: the size has to be known before the
    file section is reached, because nothing before it can be read again.
    The file section ends the form; anything after it is rejected.
    """

    def __init__(self) -> None:
        self.record = WorkingRecord()
        self.state = FormState.COLLECTING_FIELDS
        self._file: FileSection | None = None

    @classmethod
    async def parse(cls, sections: AsyncIterable[UploadSection]) -> GenerationRequest:
        """Consume sections up to the file section and build the request.

        Raises:
            MultipartUploadError: If the sections violate the form rules

        """
        form = cls()
        async for section in sections:
            form.consume(section)
            if form.state is FormState.COMPLETE:
                break
        return form.finish()

    def consume(self, section: UploadSection) -> None:
        """Apply one section to the working record."""
        if self.state is FormState.FAILED:
            msg = "Form already failed; no further sections can be consumed"
            raise RuntimeError(msg)
        if self.state is FormState.COMPLETE:
            self._fail(TrailingDataAfterFileError())

        if isinstance(section, FileSection):
            self._accept_file(section)
        else:
            self._accept_field(section.name, section.value)

    def finish(self) -> GenerationRequest:
        """Close the form once the sections are exhausted.

        Raises:
            MissingArtifactError: If no file section was seen

        """
        if self.state is not FormState.COMPLETE:
            self._fail(MissingArtifactError())
        return self.build()

    def build(self) -> GenerationRequest:
        """Assemble the generation request from a complete form."""
        if self.state is not FormState.COMPLETE or self._file is None or self.record.size is None:
            msg = f"Cannot build a generation request in state {self.state.name}"
            raise RuntimeError(msg)

        record = self.record
        return GenerationRequest(
            name=record.name or "",
            description=record.description or "",
            device_types_compatible=record.device_types_compatible or "",
            type=record.type or "",
            args=record.args or "",
            size=record.size,
            content_type=self._file.content_type,
            file=self._file.stream,
            filename=self._file.filename,
        )

    def _accept_field(self, name: str, value: str) -> None:
        field = name.lower()
        if field == FILE_FIELD:
            # File content sent as a plain field: no filename and no content type
            self._fail(InvalidFilePositionError())
        elif field == SIZE_FIELD:
            size = parse_size(value)
            self.record.size = size
            self.record.size_invalid = size is None
            self.state = FormState.AWAITING_FILE if size else FormState.COLLECTING_FIELDS
        elif field in TEXT_FIELDS:
            setattr(self.record, field, value)

    def _accept_file(self, section: FileSection) -> None:
        if self.state is not FormState.AWAITING_FILE:
            self._fail(SizeRequiredBeforeFileError())
        if not section.content_type:
            self._fail(InvalidFilePositionError())
        self._file = section
        self.state = FormState.COMPLETE

    def _fail(self, error: MultipartUploadError) -> NoReturn:
        self.state = FormState.FAILED
        raise error
