"""Known Anki vocabulary and filtering of mined terms against it."""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Mapping, Optional

import httpx

from ..frequency_manager import FrequencyManager
from ..kana import is_kana
from ..models import Term
from ..text_utils import normalize_long_vowel
from . import api
from .scoring import KEEP_TERM_THRESHOLD, AnkiMatcher
from .types import FieldMapping, Model, Vocab

logger = logging.getLogger(__name__)

ALL_DECKS_QUERY = "deck:*"

_REQUEST_ERRORS = (httpx.HTTPError, ValueError)


class AnkiState:
    """Vocabulary taken from Anki, indexed by term and reading."""

    def __init__(self, vocab: Iterable[Vocab], matcher: AnkiMatcher) -> None:
        self.vocab = list(vocab)
        self.matcher = matcher
        self._relevance: dict[str, list[Vocab]] = {}
        for item in self.vocab:
            self._relevance.setdefault(item.reading, []).append(item)
            self._relevance.setdefault(item.term, []).append(item)

    @classmethod
    async def create(
        cls, model_mapping: Mapping[str, FieldMapping], frequency_manager: FrequencyManager
    ) -> AnkiState:
        """Fetch the vocabulary of the mapped note types from AnkiConnect."""
        vocab = await get_total_vocab(model_mapping)
        return cls(vocab, AnkiMatcher(frequency_manager))

    def _highest_score(self, term: str, reading: str, pos: str) -> float:
        highest = 0.0
        for key in (reading, term):
            for item in self._relevance.get(key, ()):
                score = self.matcher.inclusivity_score(term, reading, item, pos)
                if score == 1.0:
                    return 1.0
                highest = max(highest, score)
        return highest

    def _term_score(self, term: Term) -> float:
        surface = self._highest_score(
            normalize_long_vowel(term.surface_form),
            normalize_long_vowel(term.surface_reading),
            term.part_of_speech,
        )
        lemma = self._highest_score(
            normalize_long_vowel(term.lemma_form),
            normalize_long_vowel(term.lemma_reading),
            term.part_of_speech,
        )
        return max(surface, lemma)

    def filter_existing_terms(self, terms: Iterable[Term]) -> list[Term]:
        """Keep, in order, the terms that do not appear to be in Anki already."""
        return [term for term in terms if self._term_score(term) < KEEP_TERM_THRESHOLD]


def vocab_from_notes(
    notes: Iterable[api.Note], model_mapping: Mapping[str, FieldMapping]
) -> list[Vocab]:
    """Vocabulary from the notes whose note type has a field mapping.

    An empty reading of a kana-only term is filled with the term itself.
    """
    vocab: list[Vocab] = []
    for note in notes:
        mapping = model_mapping.get(note.model_name)
        if mapping is None:
            continue
        term_field = note.fields.get(mapping.term_field)
        reading_field = note.fields.get(mapping.reading_field)
        if term_field is None or reading_field is None:
            continue
        term, reading = term_field.value, reading_field.value
        if not reading.strip() and is_kana(term):
            reading = term
        vocab.append(Vocab(term=term, reading=normalize_long_vowel(reading)))
    return vocab


async def get_total_vocab(model_mapping: Mapping[str, FieldMapping]) -> list[Vocab]:
    """Every mapped term and reading from every deck."""
    note_ids = await api.get_note_ids(ALL_DECKS_QUERY)
    notes = await api.get_notes(note_ids)
    return vocab_from_notes(notes, model_mapping)


async def _load_model(name: str, model_id: int) -> Optional[Model]:
    fields = await api.get_field_names(name)
    try:
        note_count = len(await api.get_note_ids(api.note_query(name)))
    except _REQUEST_ERRORS:
        note_count = 0
    if note_count == 0:
        return None
    return Model(name=name, id=model_id, fields=fields, note_count=note_count)


async def get_models() -> list[Model]:
    """Note types that have at least one note, with their field names."""
    model_ids = await api.get_model_ids()
    results = await asyncio.gather(
        *(_load_model(name, model_id) for name, model_id in model_ids.items()),
        return_exceptions=True,
    )
    models: list[Model] = []
    for result in results:
        if isinstance(result, BaseException):
            if not isinstance(result, _REQUEST_ERRORS):
                raise result
            continue
        if result is not None:
            models.append(result)
    return models


async def wait_awake(wait_time: float, max_attempts: int) -> bool:
    """Poll AnkiConnect until it answers; False if it never does."""
    for attempt in range(1, max_attempts + 1):
        try:
            version = await api.get_version()
        except _REQUEST_ERRORS as exc:
            logger.info(
                "AnkiConnect attempt %d of %d failed. Retrying in %s seconds... Error: %s",
                attempt,
                max_attempts,
                wait_time,
                exc,
            )
            if attempt < max_attempts:
                await asyncio.sleep(wait_time)
            continue
        logger.info("AnkiConnect is online. Version: %s", version)
        return True
    return False


async def get_sample_note_fields(model_name: str) -> Optional[dict[str, str]]:
    """Field values of a sample note of a note type, or None if it has no notes."""
    note = await api.get_sample_note_for_model(model_name)
    if note is None:
        return None
    return {name: field.value for name, field in note.fields.items()}