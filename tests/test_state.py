import json

import httpx
import pytest
import respx

from yomine.anki.api import ANKI_CONNECT_URL, Field, Note
from yomine.anki.scoring import AnkiMatcher
from yomine.anki.state import (
    AnkiState,
    get_models,
    get_sample_note_fields,
    get_total_vocab,
    vocab_from_notes,
    vocab_from_notes as _vocab,
    wait_awake,
)
from yomine.anki.types import FieldMapping, Vocab
from yomine.frequency_manager import FrequencyManager
from yomine.models import Term
from yomine.text_utils import normalize_long_vowel

MAPPING = {"Vocab": FieldMapping(term_field="Word", reading_field="Reading")}


def _note(note_id, model, word, reading):
    return Note(
        note_id=note_id,
        profile="User",
        tags=[],
        fields={"Word": Field(word, 0), "Reading": Field(reading, 1)},
        model_name=model,
        modified=0,
        cards=[],
    )


def _note_json(note_id, model, word, reading):
    return {
        "noteId": note_id,
        "profile": "User",
        "tags": [],
        "fields": {"Word": {"value": word, "order": 0}, "Reading": {"value": reading, "order": 1}},
        "modelName": model,
        "mod": 0,
        "cards": [],
    }


def _term(lemma, lemma_reading, surface=None, surface_reading=None, pos="Verb"):
    surface = surface or lemma
    surface_reading = surface_reading or lemma_reading
    return Term(
        id=0,
        lemma_form=lemma,
        lemma_reading=lemma_reading,
        surface_form=surface,
        surface_reading=surface_reading,
        is_kana=False,
        part_of_speech=pos,
        full_segment=surface,
        full_segment_reading=surface_reading,
    )


def _anki(handlers):
    def handler(request):
        body = json.loads(request.content)
        result = handlers[body["action"]](body.get("params"))
        return httpx.Response(200, json={"result": result, "error": None})

    return handler


def test_vocab_from_notes_uses_mapping_and_normalizes():
    notes = [
        _note(1, "Vocab", "遠い", "とおい"),
        _note(2, "Other", "猫", "ねこ"),
        _note(3, "Vocab", "ねこ", " "),
    ]
    vocab = vocab_from_notes(notes, MAPPING)
    assert vocab == [
        Vocab("遠い", normalize_long_vowel("とおい")),
        Vocab("ねこ", "ねこ"),
    ]


def test_vocab_from_notes_skips_missing_fields():
    note = _note(1, "Vocab", "猫", "ねこ")
    note.fields.pop("Reading")
    assert _vocab([note], MAPPING) == []


def test_empty_reading_of_kanji_term_stays_empty():
    assert vocab_from_notes([_note(1, "Vocab", "猫", "")], MAPPING) == [Vocab("猫", "")]


def test_filter_existing_terms_keeps_unknown_in_order():
    state = AnkiState([Vocab("食べる", "たべる")], AnkiMatcher(FrequencyManager()))
    terms = [_term("飲む", "のむ"), _term("食べる", "たべる"), _term("走る", "はしる")]
    kept = state.filter_existing_terms(terms)
    assert [term.lemma_form for term in kept] == ["飲む", "走る"]


def test_filter_existing_terms_matches_surface_form():
    state = AnkiState([Vocab("食べた", "たべた")], AnkiMatcher(FrequencyManager()))
    term = _term("食べる", "たべる", surface="食べた", surface_reading="たべた")
    assert state.filter_existing_terms([term]) == []


def test_filter_keeps_low_confidence_matches():
    state = AnkiState([Vocab("速い", "はやい")], AnkiMatcher(FrequencyManager()))
    term = _term("早い", "はやい", pos="Adjective")
    assert state.filter_existing_terms([term]) == [term]


@pytest.mark.asyncio
async def test_get_total_vocab_and_create():
    handlers = {
        "findNotes": lambda params: [1, 2],
        "notesInfo": lambda params: [
            _note_json(1, "Vocab", "食べる", "たべる"),
            _note_json(2, "Other", "猫", "ねこ"),
        ],
    }
    with respx.mock() as router:
        router.post(ANKI_CONNECT_URL).mock(side_effect=_anki(handlers))
        vocab = await get_total_vocab(MAPPING)
        state = await AnkiState.create(MAPPING, FrequencyManager())
    assert vocab == [Vocab("食べる", "たべる")]
    assert state.vocab == vocab
    assert state.filter_existing_terms([_term("食べる", "たべる")]) == []


@pytest.mark.asyncio
async def test_get_models_skips_models_without_notes():
    def find_notes(params):
        return [1, 2] if params["query"] == "note:Basic" else []

    handlers = {
        "modelNamesAndIds": lambda params: {"Basic": 1, "Japanese Vocab": 2},
        "modelFieldNames": lambda params: ["Front", "Back"],
        "findNotes": find_notes,
    }
    with respx.mock() as router:
        router.post(ANKI_CONNECT_URL).mock(side_effect=_anki(handlers))
        models = await get_models()
    assert [(m.name, m.id, m.fields, m.note_count) for m in models] == [
        ("Basic", 1, ["Front", "Back"], 2)
    ]
    assert models[0].sample_note is None


@pytest.mark.asyncio
async def test_wait_awake_succeeds():
    handlers = {"version": lambda params: 6}
    with respx.mock() as router:
        router.post(ANKI_CONNECT_URL).mock(side_effect=_anki(handlers))
        assert await wait_awake(0, 3) is True


@pytest.mark.asyncio
async def test_wait_awake_gives_up():
    with respx.mock() as router:
        route = router.post(ANKI_CONNECT_URL).mock(side_effect=httpx.ConnectError)
        assert await wait_awake(0, 2) is False
    assert route.call_count == 2


@pytest.mark.asyncio
async def test_sample_note_fields_uses_middle_note():
    requested = []

    def notes_info(params):
        requested.extend(params["notes"])
        return [_note_json(params["notes"][0], "Vocab", "猫", "ねこ")]

    handlers = {"findNotes": lambda params: [5, 6, 7], "notesInfo": notes_info}
    with respx.mock() as router:
        router.post(ANKI_CONNECT_URL).mock(side_effect=_anki(handlers))
        fields = await get_sample_note_fields("Vocab")
    assert requested == [6]
    assert fields == {"Word": "猫", "Reading": "ねこ"}


@pytest.mark.asyncio
async def test_sample_note_fields_none_without_notes():
    handlers = {"findNotes": lambda params: []}
    with respx.mock() as router:
        router.post(ANKI_CONNECT_URL).mock(side_effect=_anki(handlers))
        assert await get_sample_note_fields("Vocab") is None