"""Frequency entries of Yomitan-format dictionaries and their index metadata."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .errors import MissingVersionError
from .text_utils import number_or_numeric_string

SPECIAL_MARKER = "㋕"
_U8_MAX = 255


@dataclass(frozen=True)
class Frequency:
    """A frequency rank, optionally with the text a dictionary shows for it."""

    value: int
    display_value: Optional[str] = None

    @classmethod
    def from_json(cls, data: Any) -> Frequency:
        """Read a number, numeric string or {"value", "displayValue"} object."""
        if isinstance(data, Mapping):
            if "value" not in data:
                raise ValueError("missing field `value`")
            display = data.get("displayValue")
            if display is not None and not isinstance(display, str):
                raise ValueError(f"displayValue must be a string, got: {display!r}")
            return cls(number_or_numeric_string(data["value"]), display)
        return cls(number_or_numeric_string(data))


@dataclass(frozen=True)
class FrequencyData:
    """A frequency that applies to every reading (reading is None) or to one reading."""

    frequency: Frequency
    reading: Optional[str] = None

    @classmethod
    def from_json(cls, data: Any) -> FrequencyData:
        """Read the data element of a term meta bank "freq" entry."""
        try:
            return cls(Frequency.from_json(data))
        except ValueError:
            pass
        if isinstance(data, Mapping):
            reading = data.get("reading")
            if isinstance(reading, str) and "frequency" in data:
                try:
                    return cls(Frequency.from_json(data["frequency"]), reading)
                except ValueError:
                    pass
        raise ValueError(f"data did not match any frequency variant: {data!r}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "reading": self.reading,
            "value": self.frequency.value,
            "display_value": self.frequency.display_value,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> FrequencyData:
        return cls(
            Frequency(int(data["value"]), data.get("display_value")),
            data.get("reading"),
        )

    def value(self) -> int:
        return self.frequency.value

    def display_value(self) -> Optional[str]:
        return self.frequency.display_value

    def has_special_marker(self) -> bool:
        """Whether the dictionary marks this frequency as belonging to the kana spelling."""
        display = self.display_value()
        return display is not None and SPECIAL_MARKER in display


def _optional_u8(data: Mapping[str, Any], key: str) -> Optional[int]:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= _U8_MAX:
        raise ValueError(f"invalid value for `{key}`: {value!r}")
    return value


def _required_str(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise ValueError(f"missing or invalid field `{key}`")
    return value


@dataclass(frozen=True)
class DictionaryIndex:
    """The index.json of a dictionary."""

    title: str
    revision: str
    format: Optional[int] = None
    version: Optional[int] = None

    @classmethod
    def from_json(cls, data: Any) -> DictionaryIndex:
        if not isinstance(data, Mapping):
            raise ValueError("index.json must hold an object")
        return cls(
            title=_required_str(data, "title"),
            revision=_required_str(data, "revision"),
            format=_optional_u8(data, "format"),
            version=_optional_u8(data, "version"),
        )

    def format_version(self) -> int:
        """The declared format, falling back to the version field."""
        if self.format is not None:
            return self.format
        if self.version is not None:
            return self.version
        raise MissingVersionError()


@dataclass(frozen=True)
class TermMeta:
    """One [term, type, data] entry of a term meta bank."""

    term: str
    data_type: str
    data: Optional[FrequencyData] = None

    @classmethod
    def from_json(cls, raw: Any) -> TermMeta:
        if not isinstance(raw, (list, tuple)) or len(raw) != 3:
            raise ValueError(f"term meta entry must have three elements: {raw!r}")
        term, data_type, data = raw
        if not isinstance(term, str) or not isinstance(data_type, str):
            raise ValueError(f"term and type must be strings: {raw!r}")
        return cls(term, data_type, None if data is None else FrequencyData.from_json(data))