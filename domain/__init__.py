"""Domain layer exports."""

from domain.exceptions import DomainError, ValidationError
from domain.value_objects import FieldSection, FileSection, GenerationRequest

__all__ = [
    "DomainError",
    "FieldSection",
    "FileSection",
    "GenerationRequest",
    "ValidationError",
]
