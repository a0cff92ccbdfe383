"""Core records: source files, sentences, timestamps, parts of speech and terms."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import time
from pathlib import PurePath
from typing import ClassVar, Iterable, Optional

EXPRESSION = "Expression"


@dataclass(frozen=True)
class SourceFileType:
    """The format of a source file: SRT, SSA, or another upper-cased extension."""

    label: str

    SRT: ClassVar[SourceFileType]
    SSA: ClassVar[SourceFileType]

    @classmethod
    def from_extension(cls, file_path: str) -> SourceFileType:
        """Pick the file type from a path's extension; no extension means SRT."""
        suffix = PurePath(file_path).suffix
        if not suffix:
            return cls.SRT
        extension = suffix[1:].lower()
        if extension == "srt":
            return cls.SRT
        if extension in ("ass", "ssa"):
            return cls.SSA
        return cls(extension.upper())


SourceFileType.SRT = SourceFileType("SRT")
SourceFileType.SSA = SourceFileType("SSA")


@dataclass
class SourceFile:
    """A file that sentences are read from."""

    id: int = 0
    source: Optional[str] = None
    file_type: SourceFileType = SourceFileType.SRT
    title: str = ""
    creator: Optional[str] = None
    original_file: str = ""


def _seconds(moment: time) -> float:
    millis = moment.microsecond // 1000
    return moment.hour * 3600.0 + moment.minute * 60.0 + moment.second + millis / 1000.0


def _human(moment: time) -> str:
    if moment.hour > 0:
        text = f"{moment.hour}h {moment.minute}m {moment.second}s"
    elif moment.minute > 0:
        text = f"{moment.minute}m {moment.second}s"
    else:
        text = f"{moment.second}s"
    return text.ljust(11)


@dataclass(frozen=True)
class TimeStamp:
    """The span of time during which a sentence is shown."""

    start: time
    end: time

    def to_secs(self) -> tuple[float, float]:
        """Start and end as seconds, at millisecond precision."""
        return _seconds(self.start), _seconds(self.end)

    def to_human_readable(self) -> tuple[str, str]:
        """Start and end as short text such as "1h 2m 3s", padded to 11 characters."""
        return _human(self.start), _human(self.end)


@dataclass
class Sentence:
    """A sentence of a source file, with its segments as (reading, POS, start, end)."""

    id: int
    source_id: int
    text: str
    segments: list[tuple[str, str, int, int]] = field(default_factory=list)
    timestamp: Optional[TimeStamp] = None


@dataclass(frozen=True)
class PartOfSpeech:
    """A tokenizer part-of-speech key with its English description."""

    key: str
    english_name: str
    hint: str = ""
    examples: tuple[str, ...] = ()

    @classmethod
    def from_key(cls, key: str) -> PartOfSpeech:
        """A part of speech named only by its key."""
        return cls(key=key, english_name=key)

    def is_verb(self) -> bool:
        return self.key.startswith("動詞")

    def is_i_adjective(self) -> bool:
        return self.key.startswith("形容詞")


@dataclass
class Term:
    """A word found in the source, with its lemma, readings and frequencies."""

    id: int
    lemma_form: str
    lemma_reading: str
    surface_form: str
    surface_reading: str
    is_kana: bool
    part_of_speech: str
    full_segment: str
    full_segment_reading: str
    frequencies: dict[str, int] = field(default_factory=dict)
    sentence_references: list[tuple[int, int]] = field(default_factory=list)

    @classmethod
    def from_slice(cls, terms: Iterable[Term]) -> Term:
        """Join consecutive terms into a single expression."""
        parts = list(terms)
        full_segment = "".join(term.full_segment for term in parts)
        full_segment_reading = "".join(term.full_segment_reading for term in parts)
        return cls(
            id=1,
            lemma_form=full_segment,
            lemma_reading=full_segment_reading,
            surface_form=full_segment,
            surface_reading=full_segment_reading,
            is_kana=all(term.is_kana for term in parts),
            part_of_speech=EXPRESSION,
            full_segment=full_segment,
            full_segment_reading=full_segment_reading,
        )