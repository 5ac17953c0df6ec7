from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from domain.value_objects.upload_section import ByteStream


@dataclass(frozen=True, slots=True)
class GenerationRequest:
    """Validated request handed to the generation engine.

    The file stream is consumed once, by the engine.
    """

    name: str
    description: str
    device_types_compatible: str
    type: str
    args: str
    size: int
    content_type: str
    file: ByteStream
    filename: str | None = None

    @property
    def device_types(self) -> list[str]:
        """Compatible device types, split from the comma separated field."""
        return [
            device_type.strip()
            for device_type in self.device_types_compatible.split(",")
            if device_type.strip()
        ]
