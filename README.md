# yomine

A library of building blocks for mining Japanese vocabulary from subtitle
files. It covers frequency dictionaries in the Yomitan format, kana checks and
long-vowel normalisation, parsing of subtitle and video filenames, a persisted
ignore list, download of a tokenizer system dictionary, and filtering of terms
that are already in your Anki collection through AnkiConnect.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

- `yomine.filename_parser` – `parse_filename(filename)` returns a `TvShow`,
  `Movie` or `Generic` record with a cleaned title, season and episode or
  year, and a streaming source (`Netflix`, `Crunchyroll`, …) when the name
  mentions one. Each record has `display_title()`, `metadata_string()` and
  `is_database_matchable()`. `clean_title` and `parse_source` are available
  on their own.
- `yomine.kana` – `is_char_kana`, `is_kana`, `is_hiragana` and
  `to_hiragana` (katakana to hiragana; a prolonged sound mark becomes the
  vowel of the kana before it).
- `yomine.text_utils` – `normalize_long_vowel` (e.g. `とおい` → `とうい`),
  `harmonic_frequency`, `kana_suffix_length`, `kanji_mapping`,
  `pairwise_deinflection` and `number_or_numeric_string`.
- `yomine.models` – records for `SourceFile`, `SourceFileType`, `Sentence`,
  `TimeStamp`, `PartOfSpeech` and `Term` (`Term.from_slice` joins terms into
  one expression).
- `yomine.frequency` – `Frequency`, `FrequencyData`, `DictionaryIndex` and
  `TermMeta`, read from the JSON of a Yomitan frequency dictionary.
- `yomine.frequency_dict` – `FrequencyDictionary`, one dictionary keyed by
  long-vowel-normalised term, with `get_frequency` and
  `get_frequencies_by_key`.
- `yomine.frequency_manager` – `process_frequency_dictionaries(directory)`
  unpacks new `.zip` archives in a directory, loads every folder whose
  `index.json` declares format 3, and caches each dictionary as `cache.json`
  inside its folder (rebuilt when the revision changes). The returned
  `FrequencyManager` offers `build_freq_map`, `weighted_harmonic`,
  `harmonic_frequency_for_pair`, `frequency_data_by_term` and per-dictionary
  weights through `set_dictionary_state`.
- `yomine.frequency_utils` – `copy_frequency_dictionaries(zip_paths,
  destination_dir)` copies archives into a folder, skipping names already
  present, and returns how many were copied.
- `yomine.ignore_list` – `IgnoreList.load(path)` reads a JSON ignore list,
  creating it with common particles when the file is missing; every change
  is saved immediately.
- `yomine.http` – `http_client()` and `download_with_progress`, a streaming
  download with up to three attempts and progress messages.
- `yomine.token_dictionary` – `ensure_dictionary(dict_type, dict_dir,
  progress_callback)` downloads, decompresses and unpacks the `system.dic`
  of a `DictType` (`UNIDIC` or `IPADIC`) and returns its path.
- `yomine.errors` – `YomineError` and its subclasses.
- `yomine.anki.api` – async AnkiConnect calls (`get_version`,
  `get_note_ids`, `get_notes`, `get_cards`, `get_model_ids`,
  `get_field_names`, `get_sample_note_for_model`, …).
- `yomine.anki.scoring` – `AnkiMatcher.inclusivity_score`, a 0–1 confidence
  that a word is the one on an Anki card.
- `yomine.anki.state` – `AnkiState.create(model_mapping, frequency_manager)`
  fetches known vocabulary, and `filter_existing_terms` keeps only the terms
  not yet in Anki. Also `get_models`, `get_total_vocab`, `vocab_from_notes`,
  `get_sample_note_fields` and `wait_awake`.

Progress and diagnostics go to the standard `logging` module.

## Examples

```python
from yomine.filename_parser import parse_filename

media = parse_filename("Your Name (2016) [1080p] BluRay.mkv")
print(media.display_title())   # Your Name (2016)
```

```python
from yomine.frequency_manager import process_frequency_dictionaries

manager = process_frequency_dictionaries("dictionaries/frequency")
print(manager.build_freq_map("食べる", "たべる", False))
```

```python
import asyncio
from yomine.anki.state import wait_awake

online = asyncio.run(wait_awake(1, 3))
```

AnkiConnect is expected at `http://localhost:8765/`.

## What it does not do

yomine is a library only: it has no command-line tool and no graphical
interface. It does not tokenize text (`ensure_dictionary` only installs the
dictionary file), does not read the sentences of SRT or ASS subtitle files,
and does not deinflect words itself — `pairwise_deinflection` takes the
candidate forms as an argument. There is no single function that runs a
whole file through extraction, ignore-list filtering and Anki filtering; the
pieces above have to be combined by the caller. Paths for dictionaries and
the ignore list are always passed in; no application data directory is
chosen for you.