"""Records describing Anki note types, field choices and known vocabulary."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional


@dataclass
class Model:
    """An Anki note type with its fields and how many notes use it."""

    name: str
    id: int
    fields: list[str] = field(default_factory=list)
    note_count: int = 0
    sample_note: Optional[dict[str, str]] = None


@dataclass(frozen=True)
class FieldMapping:
    """Which fields of a note type hold the term and its reading."""

    term_field: str
    reading_field: str

    def to_dict(self) -> dict[str, str]:
        return {"term_field": self.term_field, "reading_field": self.reading_field}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> FieldMapping:
        values = {}
        for key in ("term_field", "reading_field"):
            value = data.get(key)
            if not isinstance(value, str):
                raise ValueError(f"missing or invalid field `{key}`")
            values[key] = value
        return cls(**values)


@dataclass(frozen=True)
class Vocab:
    """A term already present in Anki, with its reading."""

    term: str
    reading: str