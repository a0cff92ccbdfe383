import json
import zipfile

import pytest

from yomine.errors import MissingVersionError, YomineError
from yomine.frequency import SPECIAL_MARKER, Frequency, FrequencyData
from yomine.frequency_dict import FrequencyDictionary
from yomine.frequency_manager import (
    CACHE_FILE_NAME,
    DictionaryState,
    FrequencyManager,
    extract_zip,
    load_cached_dict,
    parse_index_json,
    parse_term_meta_bank,
    process_frequency_dictionaries,
    save_cached_dict,
)


def simple(value):
    return FrequencyData(Frequency(value))


def nested(value, reading, marked=False):
    display = f"{value}{SPECIAL_MARKER}" if marked else None
    return FrequencyData(Frequency(value, display), reading)


def make_dict(title, terms):
    return FrequencyDictionary(title, "1", terms)


def manager_with(*dictionaries):
    manager = FrequencyManager()
    for dictionary in dictionaries:
        manager.add_dictionary(dictionary.title, dictionary)
    return manager


def test_add_dictionary_gives_default_state():
    manager = manager_with(make_dict("A", {}))
    assert manager.dictionary_state("A") == DictionaryState(weight=1.0, enabled=True)
    assert manager.dictionary_names() == ["A"]


def test_add_dictionary_keeps_existing_state():
    manager = FrequencyManager({"A": DictionaryState(weight=0.5, enabled=False)})
    manager.add_dictionary("A", make_dict("A", {}))
    assert manager.dictionary_state("A") == DictionaryState(weight=0.5, enabled=False)


def test_set_dictionary_state_reports_change():
    manager = manager_with(make_dict("A", {}))
    assert manager.set_dictionary_state("A", 1.0, True) is False
    assert manager.set_dictionary_state("A", 2.0, True) is True
    assert manager.dictionary_state("A").weight == 2.0
    assert manager.set_dictionary_state("A", 2.0, False) is True
    assert manager.dictionary_state("A").enabled is False


def test_set_dictionary_state_unknown_raises():
    manager = FrequencyManager()
    with pytest.raises(YomineError, match="Dictionary 'Nope' not found"):
        manager.set_dictionary_state("Nope", 1.0, True)


def test_enabled_dictionaries_skip_disabled_and_zero_weight():
    manager = manager_with(make_dict("A", {}), make_dict("B", {}), make_dict("C", {}))
    manager.set_dictionary_state("B", 1.0, False)
    manager.set_dictionary_state("C", 0.0, True)
    assert [d.title for d in manager.enabled_dictionaries()] == ["A"]


def test_build_freq_map_collects_titles_and_harmonic():
    a = make_dict("A", {"犬": [nested(100, "いぬ")]})
    b = make_dict("B", {"犬": [simple(100)]})
    c = make_dict("C", {"猫": [simple(7)]})
    manager = manager_with(a, b, c)
    assert manager.build_freq_map("犬", "いぬ", False) == {"A": 100, "B": 100, "HARMONIC": 100}


def test_weighted_harmonic_ignores_disabled_zero_and_unknown():
    manager = manager_with(make_dict("A", {}), make_dict("B", {}))
    manager.set_dictionary_state("B", 1.0, False)
    assert manager.weighted_harmonic({"A": 100, "B": 5000, "X": 3, "HARMONIC": 9}) == 100
    assert manager.weighted_harmonic({"A": 0}) == 2**32 - 1
    assert manager.weighted_harmonic({}) == 2**32 - 1


def test_weight_divides_rank():
    manager = manager_with(make_dict("A", {}))
    plain = manager.weighted_harmonic({"A": 200})
    manager.set_dictionary_state("A", 0.5, True)
    assert manager.weighted_harmonic({"A": 100}) == plain


def test_weighted_rank_is_at_least_one():
    manager = manager_with(make_dict("A", {}))
    manager.set_dictionary_state("A", 10.0, True)
    assert manager.weighted_harmonic({"A": 1}) == 1


def test_frequency_data_by_term_filters_marker_for_kanji():
    a = make_dict("A", {"事": [nested(40, "こと"), nested(90, "こと", marked=True)]})
    b = make_dict("B", {"こと": [nested(10, "こと", marked=True), simple(20)]})
    manager = manager_with(a, b)
    assert manager.frequency_data_by_term("事") == [nested(40, "こと")]
    assert manager.frequency_data_by_term("こと") == [nested(10, "こと", marked=True), simple(20)]
    assert manager.frequency_data_by_term("無い") == []


def test_pair_exact_match_uses_unmarked_for_kanji():
    a = make_dict("A", {"食べる": [nested(500, "たべる"), nested(900, "たべる", marked=True)]})
    b = make_dict("B", {"食べる": [nested(500, "たべる")]})
    manager = manager_with(a, b)
    assert manager.harmonic_frequency_for_pair("食べる", "たべる") == 500


def test_pair_kana_word_uses_marked_entries():
    a = make_dict("A", {"こと": [nested(50, "こと", marked=True), nested(70, "こと")]})
    manager = manager_with(a)
    assert manager.harmonic_frequency_for_pair("こと", "こと") == 50


def test_pair_other_reading_gives_none():
    a = make_dict("A", {"食べる": [nested(500, "たべる"), simple(300)]})
    manager = manager_with(a)
    assert manager.harmonic_frequency_for_pair("食べる", "くう") is None


def test_pair_falls_back_to_simple():
    a = make_dict("A", {"犬": [simple(300)]})
    manager = manager_with(a)
    assert manager.harmonic_frequency_for_pair("犬", "いぬ") == 300
    assert manager.harmonic_frequency_for_pair("猫", "ねこ") is None


def test_pair_ignores_disabled_dictionaries():
    a = make_dict("A", {"犬": [simple(300)]})
    b = make_dict("B", {"犬": [nested(800, "いぬ")]})
    manager = manager_with(a, b)
    manager.set_dictionary_state("B", 1.0, False)
    assert manager.harmonic_frequency_for_pair("犬", "いぬ") == 300


def write_index(folder, **fields):
    folder.mkdir(parents=True, exist_ok=True)
    data = {"title": "Test Freq", "revision": "r1", **fields}
    (folder / "index.json").write_text(json.dumps(data), encoding="utf-8")


def test_parse_index_json_accepts_format_three(tmp_path):
    write_index(tmp_path, format=3)
    index = parse_index_json(tmp_path)
    assert (index.title, index.revision) == ("Test Freq", "r1")


def test_parse_index_json_version_fallback_and_unsupported(tmp_path):
    write_index(tmp_path / "v", version=3)
    assert parse_index_json(tmp_path / "v").title == "Test Freq"
    write_index(tmp_path / "old", format=2)
    assert parse_index_json(tmp_path / "old") is None


def test_parse_index_json_errors(tmp_path):
    write_index(tmp_path / "none")
    with pytest.raises(MissingVersionError):
        parse_index_json(tmp_path / "none")
    with pytest.raises(YomineError):
        parse_index_json(tmp_path / "missing")


BANK = [
    ["犬", "freq", 300],
    ["猫", "freq", {"reading": "ねこ", "frequency": {"value": 120, "displayValue": "120"}}],
    ["犬", "pitch", {"reading": "いぬ", "pitches": []}],
]


def test_parse_term_meta_bank_keeps_only_frequencies(tmp_path):
    (tmp_path / "term_meta_bank_1.json").write_text(json.dumps(BANK), encoding="utf-8")
    (tmp_path / "term_meta_bank_2.json").write_text("not json", encoding="utf-8")
    (tmp_path / "other_bank_1.json").write_text(json.dumps(BANK), encoding="utf-8")
    metas = parse_term_meta_bank(tmp_path)
    assert [(m.term, m.data_type) for m in metas] == [("犬", "freq"), ("猫", "freq")]
    assert metas[1].data == FrequencyData(Frequency(120, "120"), "ねこ")


def test_cache_round_trip(tmp_path):
    dictionary = make_dict("A", {"犬": [simple(300), nested(5, "いぬ", marked=True)]})
    path = tmp_path / "cache.json"
    save_cached_dict(dictionary, path)
    assert load_cached_dict(path) == dictionary


def test_load_cached_dict_errors(tmp_path):
    with pytest.raises(YomineError):
        load_cached_dict(tmp_path / "absent.json")
    broken = tmp_path / "broken.json"
    broken.write_text("{}", encoding="utf-8")
    with pytest.raises(YomineError):
        load_cached_dict(broken)


def make_zip(path, index=None, bank=None):
    with zipfile.ZipFile(path, "w") as archive:
        archive.writestr(
            "index.json",
            json.dumps(index or {"title": "Test Freq", "revision": "r1", "format": 3}),
        )
        archive.writestr("term_meta_bank_1.json", json.dumps(bank or BANK))


def test_extract_zip_round_trip(tmp_path):
    archive = tmp_path / "dict.zip"
    make_zip(archive)
    target = tmp_path / "out"
    extract_zip(archive, target)
    assert json.loads((target / "term_meta_bank_1.json").read_text(encoding="utf-8")) == BANK


def test_extract_zip_rejects_bad_archive(tmp_path):
    bad = tmp_path / "bad.zip"
    bad.write_bytes(b"not a zip")
    with pytest.raises(YomineError, match="zip"):
        extract_zip(bad, tmp_path / "out")


def test_process_frequency_dictionaries_builds_and_caches(tmp_path):
    make_zip(tmp_path / "freq.zip")
    manager = process_frequency_dictionaries(tmp_path)
    assert manager.dictionary_names() == ["Test Freq"]
    assert manager.build_freq_map("犬", "いぬ", False)["Test Freq"] == 300
    cache = tmp_path / "freq" / CACHE_FILE_NAME
    assert load_cached_dict(cache).revision == "r1"

    (tmp_path / "freq" / "term_meta_bank_1.json").unlink()
    reloaded = process_frequency_dictionaries(tmp_path)
    assert reloaded.build_freq_map("犬", "いぬ", False)["Test Freq"] == 300


def test_process_rebuilds_on_revision_mismatch(tmp_path):
    make_zip(tmp_path / "freq.zip")
    (tmp_path / "freq").mkdir()
    extract_zip(tmp_path / "freq.zip", tmp_path / "freq")
    save_cached_dict(FrequencyDictionary("Test Freq", "old", {}), tmp_path / "freq" / CACHE_FILE_NAME)
    manager = process_frequency_dictionaries(tmp_path)
    assert manager.build_freq_map("猫", "ねこ", False)["Test Freq"] == 120
    assert load_cached_dict(tmp_path / "freq" / CACHE_FILE_NAME).revision == "r1"


def test_process_skips_unsupported_folders(tmp_path):
    write_index(tmp_path / "old", format=2)
    (tmp_path / "empty").mkdir()
    manager = process_frequency_dictionaries(tmp_path)
    assert manager.dictionary_names() == []