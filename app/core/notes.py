"""Free-form notes attached to laboratory orders.

Clients send notes as text, a list, an object or any other JSON value. Each
shape maps to one variant, and every variant is stored as an object (or
null), so ``notes.text`` is always the searchable field for text notes.
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Notes:
    text: str

    def to_document(self) -> dict[str, Any]:
        return {"text": self.text}


@dataclass(frozen=True)
class Items:
    items: list[Any]

    def to_document(self) -> dict[str, Any]:
        return {"items": list(self.items)}


@dataclass(frozen=True)
class Raw:
    data: dict[str, Any]

    def to_document(self) -> dict[str, Any]:
        return dict(self.data)


@dataclass(frozen=True)
class Other:
    value: Any

    def to_document(self) -> dict[str, Any]:
        return {"value": self.value}


NoteVariant = Notes | Items | Raw | Other


def parse_notes(value: Any) -> NoteVariant | None:
    """Classify a raw notes value into its variant."""
    if value is None:
        return None
    if isinstance(value, str):
        return Notes(value.strip())
    if isinstance(value, list):
        return Items(value)
    if isinstance(value, dict):
        return Raw(value)
    return Other(value)


def normalize_notes(value: Any) -> dict[str, Any] | None:
    """Convert a raw notes value into its stored form."""
    variant = parse_notes(value)
    return variant.to_document() if variant is not None else None
