"""Requests to the AnkiConnect add-on."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

import httpx

logger = logging.getLogger(__name__)

ANKI_CONNECT_URL = "http://localhost:8765/"
API_VERSION = 6


@dataclass(frozen=True)
class Deck:
    name: str
    id: int


@dataclass(frozen=True)
class Field:
    value: str
    order: int


def _fields_from_json(data: Mapping[str, Any]) -> dict[str, Field]:
    return {
        name: Field(value=str(entry["value"]), order=int(entry["order"]))
        for name, entry in data.items()
    }


@dataclass
class Note:
    """A note as returned by notesInfo."""

    note_id: int
    profile: str
    tags: list[str]
    fields: dict[str, Field]
    model_name: str
    modified: int
    cards: list[int] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> Note:
        try:
            return cls(
                note_id=int(data["noteId"]),
                profile=str(data["profile"]),
                tags=[str(tag) for tag in data["tags"]],
                fields=_fields_from_json(data["fields"]),
                model_name=str(data["modelName"]),
                modified=int(data["mod"]),
                cards=[int(card) for card in data["cards"]],
            )
        except (KeyError, TypeError, AttributeError) as exc:
            raise ValueError(f"invalid note: {exc!r}") from exc


@dataclass
class Card:
    """A card as returned by cardsInfo."""

    answer: str
    question: str
    deck_name: str
    model_name: str
    field_order: int
    fields: dict[str, Field]
    css: str
    card_id: int
    interval: int
    note: int
    ord: int
    type: int
    queue: int
    due: int
    reps: int
    lapses: int
    left: int
    modified: int

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> Card:
        try:
            return cls(
                answer=str(data["answer"]),
                question=str(data["question"]),
                deck_name=str(data["deckName"]),
                model_name=str(data["modelName"]),
                field_order=int(data["fieldOrder"]),
                fields=_fields_from_json(data["fields"]),
                css=str(data["css"]),
                card_id=int(data["cardId"]),
                interval=int(data["interval"]),
                note=int(data["note"]),
                ord=int(data["ord"]),
                type=int(data["type"]),
                queue=int(data["queue"]),
                due=int(data["due"]),
                reps=int(data["reps"]),
                lapses=int(data["lapses"]),
                left=int(data["left"]),
                modified=int(data["mod"]),
            )
        except (KeyError, TypeError, AttributeError) as exc:
            raise ValueError(f"invalid card: {exc!r}") from exc


async def make_request(action: str, params: Optional[Any] = None) -> Any:
    """Send one action and return its result; a reported error is logged and gives None."""
    body: dict[str, Any] = {"action": action, "version": API_VERSION}
    if params is not None:
        body["params"] = params
    async with httpx.AsyncClient(timeout=None) as client:
        response = await client.post(ANKI_CONNECT_URL, json=body)
    try:
        payload = response.json()
    except ValueError as exc:
        raise httpx.DecodingError(
            f"error decoding response body: {exc}", request=response.request
        ) from exc
    if not isinstance(payload, dict):
        raise httpx.DecodingError(
            "error decoding response body: expected an object", request=response.request
        )
    error = payload.get("error")
    if error is not None:
        logger.error("API error: %s", error)
    return payload.get("result")


async def get_version() -> int:
    """The AnkiConnect API version; mainly used to check that Anki is running."""
    result = await make_request("version")
    return int(result) if result is not None else 0


async def get_deck_ids() -> list[Deck]:
    result = await make_request("deckNamesAndIds")
    return [Deck(name=name, id=int(deck_id)) for name, deck_id in (result or {}).items()]


async def get_note_ids(query: str) -> list[int]:
    result = await make_request("findNotes", {"query": query})
    return [int(note_id) for note_id in result or []]


async def get_notes(note_ids: list[int]) -> list[Note]:
    result = await make_request("notesInfo", {"notes": list(note_ids)})
    return [Note.from_json(note) for note in result or []]


async def get_cards(card_ids: list[int]) -> list[Card]:
    result = await make_request("cardsInfo", {"cards": list(card_ids)})
    return [Card.from_json(card) for card in result or []]


async def get_model_ids() -> dict[str, int]:
    result = await make_request("modelNamesAndIds")
    return {name: int(model_id) for name, model_id in (result or {}).items()}


async def get_field_names(model_name: str) -> list[str]:
    result = await make_request("modelFieldNames", {"modelName": model_name})
    return [str(name) for name in result or []]


def note_query(model_name: str) -> str:
    """A search query matching every note of a note type, quoted when needed."""
    if any(ch in model_name for ch in ' :"'):
        escaped = model_name.replace('"', '\\"')
        return f'note:"{escaped}"'
    return f"note:{model_name}"


async def get_sample_note_for_model(model_name: str) -> Optional[Note]:
    """The note in the middle of a note type's search results, if there is any."""
    note_ids = await get_note_ids(note_query(model_name))
    if not note_ids:
        return None
    notes = await get_notes([note_ids[len(note_ids) // 2]])
    return notes[0] if notes else None