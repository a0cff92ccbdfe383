"""Text helpers: long-vowel normalisation, frequency averaging and deinflection pairing."""

from __future__ import annotations

import math
import re
from typing import Iterable

from .kana import is_char_kana, is_hiragana

_U32_MAX = 2**32 - 1

_LONG_VOWEL_RE = re.compile(r"([おこそとのほもよろごぞどぼぽ])お|([けせてねへめれげぜでべぺ])え")
_NUMERIC_STRING_RE = re.compile(r"\+?[0-9]+")


def _replace_long_vowel(match: re.Match[str]) -> str:
    if match.group(1) is not None:
        return match.group(1) + "う"
    return match.group(2) + "い"


def normalize_long_vowel(text: str) -> str:
    """Spell o- and e-row long vowels of a hiragana string with う and い.

    Strings that are not entirely hiragana are returned unchanged.
    """
    if not is_hiragana(text):
        return text
    return _LONG_VOWEL_RE.sub(_replace_long_vowel, text)


def harmonic_frequency(nums: Iterable[int]) -> int | None:
    """Rounded harmonic mean of the positive values, or None if there are none."""
    positive = [num for num in nums if num > 0]
    if not positive:
        return None
    mean = len(positive) / sum(1.0 / num for num in positive)
    return int(math.floor(mean + 0.5))


def kana_suffix_length(word: str) -> int:
    """Number of trailing kana characters in a word."""
    length = 0
    for ch in reversed(word):
        if not is_char_kana(ch):
            break
        length += 1
    return length


def kanji_mapping(word: str, reading: str) -> tuple[str, str]:
    """Split off the kana ending, returning the word's stem and the matching reading stem."""
    suffix_len = kana_suffix_length(word)
    base = word[: max(0, len(word) - suffix_len)]
    base_reading = reading[: max(0, len(reading) - suffix_len)]
    return base, base_reading


def pairwise_deinflection(
    word: str, reading: str, deinflections: Iterable[str]
) -> list[tuple[str, str]]:
    """Pair the word and each of its deinflected forms with a reading.

    The original pair comes first; each deinflected form gets its reading by
    swapping the word's stem for the reading's stem.
    """
    results = [(word, reading)]
    candidates = list(deinflections)
    if not candidates:
        return results
    base, base_reading = kanji_mapping(word, reading)
    results.extend((form, form.replace(base, base_reading, 1)) for form in candidates)
    return results


def number_or_numeric_string(value: object) -> int:
    """Read an unsigned 32-bit value given either as a JSON number or a numeric string.

    Raises ValueError for anything else.
    """
    if isinstance(value, bool):
        raise ValueError(f"expected a number or numeric string, got: {str(value).lower()}")
    if isinstance(value, int):
        if value < 0:
            raise ValueError("number cannot be converted to u32")
        if value > _U32_MAX:
            raise ValueError(f"number {value} is too large for u32")
        return value
    if isinstance(value, float):
        raise ValueError("number cannot be converted to u32")
    if isinstance(value, str):
        if _NUMERIC_STRING_RE.fullmatch(value) is None or int(value) > _U32_MAX:
            raise ValueError(f"string '{value}' is not a valid number")
        return int(value)
    raise ValueError(f"expected a number or numeric string, got: {value!r}")