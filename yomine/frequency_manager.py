"""Loading frequency dictionaries and combining their ranks."""

from __future__ import annotations

import json
import logging
import math
import re
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Union

from .errors import YomineError
from .frequency import DictionaryIndex, FrequencyData, TermMeta
from .frequency_dict import FrequencyDictionary
from .kana import is_kana
from .text_utils import harmonic_frequency

logger = logging.getLogger(__name__)

U32_MAX = 2**32 - 1
HARMONIC_KEY = "HARMONIC"
CACHE_FILE_NAME = "cache.json"
SUPPORTED_FORMAT = 3

_TERM_META_BANK_RE = re.compile(r"^term_meta_bank_\d+\.json$")

PathLike = Union[str, Path]


@dataclass
class DictionaryState:
    """How much a dictionary counts in the combined rank, and whether it counts at all."""

    weight: float = 1.0
    enabled: bool = True


class FrequencyManager:
    """A set of frequency dictionaries with per-dictionary weights."""

    def __init__(self, states: Optional[Mapping[str, DictionaryState]] = None) -> None:
        self._dictionaries: dict[str, FrequencyDictionary] = {}
        self._states: dict[str, DictionaryState] = dict(states or {})

    def add_dictionary(self, name: str, dictionary: FrequencyDictionary) -> None:
        """Register a dictionary, giving it the default state unless it already has one."""
        self._dictionaries[name] = dictionary
        self._states.setdefault(name, DictionaryState())

    def enabled_dictionaries(self) -> list[FrequencyDictionary]:
        """Dictionaries that are enabled and have a positive weight."""
        return [
            dictionary
            for name, dictionary in self._dictionaries.items()
            if (state := self._states.get(name)) is not None
            and state.enabled
            and state.weight > 0.0
        ]

    def build_freq_map(self, lemma_form: str, lemma_reading: str, is_kana: bool) -> dict[str, int]:
        """Rank of a lemma in each dictionary by title, plus the weighted harmonic mean."""
        freq_map: dict[str, int] = {}
        for dictionary in self._dictionaries.values():
            found = dictionary.get_frequency(lemma_form, lemma_reading, is_kana)
            if found is not None:
                freq_map[dictionary.title] = found.value()
        freq_map[HARMONIC_KEY] = self.weighted_harmonic(freq_map)
        return freq_map

    def set_dictionary_state(self, name: str, weight: float, enabled: bool) -> bool:
        """Update a dictionary's state; True when anything changed."""
        state = self._states.get(name)
        if state is None:
            raise YomineError(f"Dictionary '{name}' not found")
        if state.weight == weight and state.enabled == enabled:
            return False
        self._states[name] = DictionaryState(weight=weight, enabled=enabled)
        return True

    def weighted_harmonic(self, freq_map: Mapping[str, int]) -> int:
        """Harmonic mean of the ranks divided by their dictionaries' weights.

        Ranks of unknown, disabled or zero-weighted dictionaries are left out;
        with nothing left the result is the largest 32-bit value.
        """
        weighted: list[int] = []
        for name, freq in freq_map.items():
            state = self._states.get(name)
            if state is None or not state.enabled or freq <= 0 or state.weight <= 0.0:
                continue
            weighted.append(max(1, int(math.floor(freq / state.weight + 0.5))))
        result = harmonic_frequency(weighted)
        return U32_MAX if result is None else result

    def dictionary_state(self, name: str) -> Optional[DictionaryState]:
        return self._states.get(name)

    def dictionary_names(self) -> list[str]:
        return list(self._dictionaries)

    def frequency_data_by_term(self, term: str) -> list[FrequencyData]:
        """Every entry stored under the term in any dictionary, ignoring weights.

        For a term that is not pure kana, entries marked as kana-only are left out.
        """
        kana_term = is_kana(term)
        found: list[FrequencyData] = []
        for dictionary in self._dictionaries.values():
            entries = dictionary.get_frequencies_by_key(term)
            if not entries:
                continue
            if kana_term:
                found.extend(entries)
            else:
                found.extend(entry for entry in entries if not entry.has_special_marker())
        return found

    def harmonic_frequency_for_pair(self, word: str, reading: str) -> Optional[int]:
        """Harmonic rank of an exact word/reading pair across enabled dictionaries.

        If no dictionary has the pair but some list the word under another
        reading, the result is None; otherwise reading-less ranks are used.
        """
        kana_word = is_kana(word)

        def marker_fits(entry: FrequencyData) -> bool:
            return entry.has_special_marker() == kana_word

        enabled = self.enabled_dictionaries()
        exact: list[int] = []
        has_other = False
        simple: list[int] = []
        for dictionary in enabled:
            entries = dictionary.get_frequencies_by_key(word) or []
            matching = [
                entry.value()
                for entry in entries
                if entry.reading is not None and marker_fits(entry) and entry.reading == reading
            ]
            if matching:
                exact.append(min(matching))
            if any(
                entry.reading is not None and marker_fits(entry) and entry.reading != reading
                for entry in entries
            ):
                has_other = True
            first_simple = next((entry for entry in entries if entry.reading is None), None)
            if first_simple is not None:
                simple.append(first_simple.value())

        if exact:
            return harmonic_frequency(exact)
        if has_other:
            return None
        return harmonic_frequency(simple)


def parse_index_json(folder: PathLike) -> Optional[DictionaryIndex]:
    """Read a dictionary's index.json; None if its format is not supported."""
    index_path = Path(folder) / "index.json"
    try:
        data = json.loads(index_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as exc:
        raise YomineError(f"I/O error: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise YomineError(f"JSON error: {exc}") from exc
    try:
        index = DictionaryIndex.from_json(data)
    except ValueError as exc:
        raise YomineError(f"JSON error: {exc}") from exc
    return index if index.format_version() == SUPPORTED_FORMAT else None


def _read_bank(path: Path) -> list[TermMeta]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError):
        return []
    if not isinstance(data, list) or not all(isinstance(raw, list) for raw in data):
        return []
    metas: list[TermMeta] = []
    for raw in data:
        try:
            meta = TermMeta.from_json(raw)
        except ValueError:
            continue
        if meta.data_type == "freq":
            metas.append(meta)
    return metas


def parse_term_meta_bank(folder: PathLike) -> list[TermMeta]:
    """Frequency entries from every term_meta_bank_N.json in a folder.

    Unreadable files and entries that are not frequencies are skipped.
    """
    try:
        paths = sorted(Path(folder).iterdir())
    except OSError as exc:
        raise YomineError(f"I/O error: {exc}") from exc
    metas: list[TermMeta] = []
    for path in paths:
        if _TERM_META_BANK_RE.match(path.name):
            metas.extend(_read_bank(path))
    logger.info("Parsed %d entries from term meta bank files.", len(metas))
    return metas


def load_cached_dict(path: PathLike) -> FrequencyDictionary:
    """Read a dictionary previously written by save_cached_dict."""
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise YomineError(f"Failed to open cache file at {path}: {exc}") from exc
    try:
        return FrequencyDictionary.from_dict(json.loads(content))
    except (ValueError, KeyError, TypeError, AttributeError) as exc:
        raise YomineError(f"Failed to decode cache: {exc}") from exc


def save_cached_dict(dictionary: FrequencyDictionary, path: PathLike) -> None:
    """Write a dictionary so that load_cached_dict can read it back quickly."""
    path = Path(path)
    content = json.dumps(dictionary.to_dict(), ensure_ascii=False)
    try:
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise YomineError(f"Failed to create cache file at {path}: {exc}") from exc


def extract_zip(zip_path: PathLike, extract_to: PathLike) -> None:
    try:
        archive = zipfile.ZipFile(zip_path)
    except OSError as exc:
        raise YomineError(f"Failed to open zip file: {exc}") from exc
    except zipfile.BadZipFile as exc:
        raise YomineError(f"Failed to read zip archive: {exc}") from exc
    with archive:
        try:
            archive.extractall(extract_to)
        except (OSError, zipfile.BadZipFile) as exc:
            raise YomineError(f"Failed to extract zip: {exc}") from exc


def _load_dictionary_folder(folder: Path) -> Optional[tuple[str, FrequencyDictionary]]:
    try:
        index = parse_index_json(folder)
    except YomineError:
        index = None
    if index is None:
        logger.info("Skipping %s due to unsupported format version.", folder)
        return None

    cache_path = folder / CACHE_FILE_NAME
    try:
        cached = load_cached_dict(cache_path)
    except YomineError as exc:
        logger.info("Failed to load cache for '%s': %s, rebuilding from JSON", index.title, exc)
    else:
        if cached.revision == index.revision:
            logger.info("Loaded '%s' from cache: %d entries", index.title, len(cached.terms))
            return index.title, cached
        logger.info(
            "Revision mismatch for '%s': cache=%s, index=%s",
            index.title,
            cached.revision,
            index.revision,
        )

    try:
        term_metas = parse_term_meta_bank(folder)
    except YomineError:
        logger.info("Failed to parse term meta bank for '%s'", index.title)
        return None
    dictionary = FrequencyDictionary.from_term_meta(index.title, index.revision, term_metas)
    logger.info("Built '%s' from JSON", index.title)
    try:
        save_cached_dict(dictionary, cache_path)
    except YomineError as exc:
        logger.info("Failed to save cache for '%s': %s", index.title, exc)
    return index.title, dictionary


def process_frequency_dictionaries(directory: PathLike) -> FrequencyManager:
    """Unpack new dictionary archives in a directory and load every dictionary in it."""
    directory = Path(directory)
    try:
        directory.mkdir(parents=True, exist_ok=True)
        entries = sorted(directory.iterdir())
    except OSError as exc:
        raise YomineError(f"Failed to read directory: {exc}") from exc

    for path in entries:
        if path.is_file() and path.suffix == ".zip":
            extract_dir = directory / path.stem
            if not extract_dir.exists():
                try:
                    extract_dir.mkdir(parents=True)
                except OSError as exc:
                    raise YomineError(f"Failed to create extraction directory: {exc}") from exc
                extract_zip(path, extract_dir)

    manager = FrequencyManager()
    for path in sorted(directory.iterdir()):
        if not path.is_dir():
            continue
        loaded = _load_dictionary_folder(path)
        if loaded is not None:
            manager.add_dictionary(*loaded)
    return manager