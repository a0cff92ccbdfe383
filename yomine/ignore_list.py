"""A persisted list of terms the user never wants to see."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, Iterator, Optional, Union

from .errors import YomineError

DEFAULT_IGNORED_TERMS: tuple[str, ...] = (
    "の", "は", "に", "へ", "を", "て", "が", "だ", "た", "と", "から", "も", "で", "か", "です",
    "ね", "な",
)


class IgnoreList:
    """Ignored terms, newest first, saved as JSON after every change."""

    def __init__(self, path: Union[str, Path], terms: Optional[Iterable[str]] = None) -> None:
        self.path = Path(path)
        self._terms = list(DEFAULT_IGNORED_TERMS if terms is None else terms)

    @classmethod
    def load(cls, path: Union[str, Path]) -> IgnoreList:
        """Read the list from a file, creating it with the default terms if it is absent."""
        path = Path(path)
        if not path.exists():
            ignore_list = cls(path)
            ignore_list.save()
            return ignore_list
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise YomineError(f"Failed to read ignore list: {exc}") from exc
        try:
            data = json.loads(content)
        except json.JSONDecodeError as exc:
            raise YomineError(f"Failed to parse ignore list: {exc}") from exc
        terms = data.get("ignored_terms") if isinstance(data, dict) else None
        if not isinstance(terms, list) or not all(isinstance(term, str) for term in terms):
            raise YomineError("Failed to parse ignore list: expected a list of ignored_terms")
        return cls(path, terms)

    def save(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise YomineError(f"Failed to create ignore list directory: {exc}") from exc
        content = json.dumps({"ignored_terms": self._terms}, ensure_ascii=False, indent=2)
        try:
            self.path.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise YomineError(f"Failed to write ignore list: {exc}") from exc

    def add_term(self, term: str) -> bool:
        """Put a term at the front of the list; False if it was already there."""
        if term in self._terms:
            return False
        self._terms.insert(0, term)
        self.save()
        return True

    def remove_term(self, term: str) -> bool:
        """Drop a term; False if it was not in the list."""
        if term not in self._terms:
            return False
        self._terms.remove(term)
        self.save()
        return True

    def __contains__(self, term: object) -> bool:
        return term in self._terms

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._terms))

    def __len__(self) -> int:
        return len(self._terms)

    def all_terms(self) -> list[str]:
        return list(self._terms)

    def clear_all(self) -> None:
        self._terms.clear()
        self.save()