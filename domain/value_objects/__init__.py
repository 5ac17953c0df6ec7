from .generation_request import GenerationRequest
from .upload_section import ByteStream, FieldSection, FileSection, UploadSection

__all__ = [
    "ByteStream",
    "FieldSection",
    "FileSection",
    "GenerationRequest",
    "UploadSection",
]
