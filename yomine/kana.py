"""Classification of kana characters and katakana-to-hiragana conversion."""

from __future__ import annotations

PROLONGED_SOUND_MARK = "ー"

_HIRAGANA_START = 0x3041
_HIRAGANA_END = 0x3096
_KATAKANA_START = 0x30A1
_KATAKANA_END = 0x30FC
_KATAKANA_TO_HIRAGANA_END = 0x30F4
_KATAKANA_OFFSET = 0x60

_VOWEL_ROWS = {
    "あ": "あぁかがさざただなはばぱまやゃらわゎ",
    "い": "いぃきぎしじちぢにひびぴみりゐ",
    "う": "うぅくぐすずつづぬふぶぷむゆゅるゔ",
    "え": "えぇけげせぜてでねへべぺめれゑ",
    # A long "o" is written with う in hiragana.
    "う ": "おぉこごそぞとどのほぼぽもよょろを",
}
_LONG_VOWELS = {
    kana: vowel.strip() for vowel, row in _VOWEL_ROWS.items() for kana in row
}


def is_char_hiragana(ch: str) -> bool:
    """Whether a single character is hiragana (the prolonged sound mark counts)."""
    return ch == PROLONGED_SOUND_MARK or _HIRAGANA_START <= ord(ch) <= _HIRAGANA_END


def is_char_katakana(ch: str) -> bool:
    """Whether a single character is katakana."""
    return _KATAKANA_START <= ord(ch) <= _KATAKANA_END


def is_char_kana(ch: str) -> bool:
    """Whether a single character is hiragana or katakana."""
    return is_char_hiragana(ch) or is_char_katakana(ch)


def is_kana(text: str) -> bool:
    """Whether a non-empty string consists of kana only."""
    return bool(text) and all(is_char_kana(ch) for ch in text)


def is_hiragana(text: str) -> bool:
    """Whether a non-empty string consists of hiragana only."""
    return bool(text) and all(is_char_hiragana(ch) for ch in text)


def _katakana_char_to_hiragana(ch: str) -> str:
    code = ord(ch)
    if _KATAKANA_START <= code <= _KATAKANA_TO_HIRAGANA_END:
        return chr(code - _KATAKANA_OFFSET)
    return ch


def to_hiragana(text: str) -> str:
    """Convert katakana to hiragana, leaving every other character alone.

    A prolonged sound mark inside a word becomes the vowel of the kana before it.
    """
    converted: list[str] = []
    previous_kana: str | None = None
    for index, ch in enumerate(text):
        if ch == PROLONGED_SOUND_MARK:
            vowel = _LONG_VOWELS.get(previous_kana or "") if index > 0 else None
            converted.append(vowel or ch)
            continue
        if is_char_kana(ch):
            hiragana = _katakana_char_to_hiragana(ch)
            previous_kana = hiragana
            converted.append(hiragana)
        else:
            previous_kana = None
            converted.append(ch)
    return "".join(converted)