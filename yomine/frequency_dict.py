"""A single frequency dictionary keyed by term."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Mapping, Optional

from .frequency import FrequencyData, TermMeta
from .text_utils import normalize_long_vowel


@dataclass
class FrequencyDictionary:
    """Frequency entries of one dictionary, grouped by long-vowel-normalised term."""

    title: str
    revision: str
    terms: dict[str, list[FrequencyData]] = field(default_factory=dict)

    @classmethod
    def from_term_meta(
        cls, title: str, revision: str, term_metas: Iterable[TermMeta]
    ) -> FrequencyDictionary:
        """Build the dictionary, normalising terms and readings once up front."""
        terms: dict[str, list[FrequencyData]] = {}
        for meta in term_metas:
            if meta.data is None:
                continue
            data = meta.data
            if data.reading is not None:
                data = replace(data, reading=normalize_long_vowel(data.reading))
            terms.setdefault(normalize_long_vowel(meta.term), []).append(data)
        return cls(title, revision, terms)

    def get_frequency(
        self, lemma_form: str, lemma_reading: str, is_kana: bool
    ) -> Optional[FrequencyData]:
        """The entry that best fits a lemma and reading, or None."""
        if is_kana:
            found = self._kana_frequency(lemma_form, lemma_reading)
            if found is not None:
                return found
        return self._normal_frequency(lemma_form, lemma_reading)

    def _kana_frequency(self, lemma_form: str, lemma_reading: str) -> Optional[FrequencyData]:
        entries = self.terms.get(lemma_form)
        if entries is None:
            return None
        marked = next(
            (
                entry
                for entry in entries
                if entry.reading is not None
                and entry.has_special_marker()
                and entry.reading == lemma_reading
            ),
            None,
        )
        if marked is not None:
            return marked
        return next((entry for entry in entries if entry.reading is None), None)

    def _normal_frequency(self, lemma_form: str, lemma_reading: str) -> Optional[FrequencyData]:
        entries = self.terms.get(lemma_form)
        if entries is None:
            return None
        matching = [
            entry
            for entry in entries
            if entry.reading is not None
            and not entry.has_special_marker()
            and entry.reading == lemma_reading
        ]
        if matching:
            return min(matching, key=FrequencyData.value)
        return next((entry for entry in entries if entry.reading is None), None)

    def get_frequencies_by_key(self, key: str) -> Optional[list[FrequencyData]]:
        """Every entry stored under exactly this key."""
        return self.terms.get(key)

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "revision": self.revision,
            "terms": {
                term: [entry.to_dict() for entry in entries]
                for term, entries in self.terms.items()
            },
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> FrequencyDictionary:
        return cls(
            title=data["title"],
            revision=data["revision"],
            terms={
                term: [FrequencyData.from_dict(entry) for entry in entries]
                for term, entries in data["terms"].items()
            },
        )