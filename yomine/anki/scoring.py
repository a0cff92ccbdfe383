"""Scoring how closely a mined word matches vocabulary already in Anki."""

from __future__ import annotations

from typing import Optional

from ..frequency_manager import FrequencyManager
from ..kana import is_kana, to_hiragana
from ..text_utils import normalize_long_vowel
from .types import Vocab

KEEP_TERM_THRESHOLD = 0.60  # Anything above low confidence counts as known.
HIGH_CONFIDENCE_SCORE = 0.85  # Exact word matches, kanji/kana pairs.
MEDIUM_CONFIDENCE_SCORE = 0.70  # Normalised variations.
LOW_CONFIDENCE_SCORE = 0.55  # Same reading only.

PERFECT_SCORE = 1.0
NO_MATCH_SCORE = 0.0
SINGLE_READING_CONFIDENCE = 0.9

CONTENT_WORDS = frozenset(
    {
        "Noun",
        "ProperNoun",
        "CompoundNoun",
        "Verb",
        "SuruVerb",
        "Adjective",
        "AdjectivalNoun",
        "Adverb",
    }
)


def _normalize_japanese_text(text: str) -> str:
    """Convert to hiragana and normalise long vowels, keeping kanji as they are."""
    return normalize_long_vowel(to_hiragana(text))


class AnkiMatcher:
    """Compares mined words with Anki vocabulary, using frequency data for kanji/kana pairs."""

    def __init__(self, frequency_manager: FrequencyManager) -> None:
        self.frequency_manager = frequency_manager

    def is_content_word(self, pos: str) -> bool:
        """Whether a part of speech names a content word rather than a grammatical one."""
        return pos in CONTENT_WORDS

    def inclusivity_score(
        self, yomine_word: str, yomine_reading: str, anki_card: Vocab, pos: str
    ) -> float:
        """Confidence between 0 and 1 that the word is the one on the Anki card."""
        anki_word = anki_card.term
        norm_yomine_word = _normalize_japanese_text(yomine_word)
        norm_anki_word = _normalize_japanese_text(anki_word)
        norm_yomine_reading = to_hiragana(yomine_reading)
        norm_anki_reading = to_hiragana(anki_card.reading)
        same_reading = norm_yomine_reading == norm_anki_reading

        if yomine_word == anki_word and same_reading:
            return PERFECT_SCORE

        # Partial matches on particles and the like are too short to trust.
        if not self.is_content_word(pos):
            return NO_MATCH_SCORE

        if yomine_word == anki_word:
            return HIGH_CONFIDENCE_SCORE

        if same_reading:
            confidence = self._kanji_kana_pair(yomine_word, anki_word, norm_yomine_reading)
            if confidence > 0.0:
                return HIGH_CONFIDENCE_SCORE * confidence

        if norm_yomine_word == norm_anki_word and same_reading:
            return MEDIUM_CONFIDENCE_SCORE

        # Different kanji with the same reading are sometimes the same word with another nuance.
        if not is_kana(yomine_word) and not is_kana(anki_word) and same_reading:
            return LOW_CONFIDENCE_SCORE

        return NO_MATCH_SCORE

    def _kanji_kana_pair(self, word1: str, word2: str, reading: str) -> float:
        """Confidence that a kanji spelling and a kana spelling are the same word.

        The further the reading is from the kanji's most frequent reading, the lower it is.
        """
        if is_kana(word1) == is_kana(word2):
            return 0.0
        kanji_word = word2 if is_kana(word1) else word1

        grouped: dict[str, list[float]] = {}
        for entry in self.frequency_manager.frequency_data_by_term(kanji_word):
            if entry.reading is not None:
                grouped.setdefault(entry.reading, []).append(float(entry.value()))
        if not grouped:
            return 0.0

        averages = {key: sum(values) / len(values) for key, values in grouped.items()}
        matched: Optional[float] = averages.get(reading)
        if matched is None:
            return 0.0
        low, high = min(averages.values()), max(averages.values())
        if high > low:
            normalized = (matched - low) / (high - low)
            return 1.0 - (0.1 + normalized * 0.8)
        return SINGLE_READING_CONFIDENCE