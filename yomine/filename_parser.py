"""Guessing a title, episode and streaming source from a media file name."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import PurePath
from typing import Optional, Union

_SOURCES = (
    "Netflix",
    "Crunchyroll",
    "Funimation",
    "Amazon",
    "Hulu",
    "Disney",
    "HBO",
    "Paramount",
    "Apple",
    "Peacock",
    "MAX",
)

_TV_PATTERNS = (
    # "Show.Name.S01E02.1080p.mkv"
    re.compile(r"(?i)(.+?)[.\s\-_\[\]]*[Ss](\d{1,2})[Ee](\d{1,3})(?:[.\s\-_]*(.+))?"),
    # "Show Name episode 12"
    re.compile(r"(?i)(.+?)[.\s\-_\[\]]*(?:episode|ep)[.\s\-_]*(\d{1,3})(?:[.\s\-_]*(.+))?"),
    # "Show Name 12 (Special)"
    re.compile(r"(?i)(.+?)[\s\-]+(\d{1,3})(?:\s+\((.+?)\)|\s+(.+?))?\Z"),
)
_MOVIE_PATTERN = re.compile(r"(?i)(.+?)[\s.\-_]*\((\d{4})\)(?:[\s.\-_]*(.+))?")

_BRACKET_RE = re.compile(r"[\[(][^\])]*[\])]")
_LANGUAGE_SUFFIX_RE = re.compile(r"\.(?:ja|en|es|fr|de|it|pt|ru|ko|zh)(?:\[cc\])?\Z")
_SPACE_RE = re.compile(r"\s+")

_MAX_NON_SEASON_EPISODE = 200


@dataclass(frozen=True)
class TvShow:
    title: str
    season: Optional[int] = None
    episode: Optional[int] = None
    source: Optional[str] = None

    def display_title(self) -> str:
        if self.season is not None and self.episode is not None:
            return f"{self.title} - S{self.season:02}E{self.episode:02}"
        if self.episode is not None:
            return f"{self.title} - Episode {self.episode}"
        return self.title

    def metadata_string(self) -> str:
        return self.source or ""

    def is_database_matchable(self) -> bool:
        return self.season is not None and self.episode is not None


@dataclass(frozen=True)
class Movie:
    title: str
    year: Optional[int] = None
    source: Optional[str] = None

    def display_title(self) -> str:
        if self.year is not None:
            return f"{self.title} ({self.year})"
        return self.title

    def metadata_string(self) -> str:
        return self.source or ""

    def is_database_matchable(self) -> bool:
        return self.year is not None


@dataclass(frozen=True)
class Generic:
    title: str
    source: Optional[str] = None

    def display_title(self) -> str:
        return self.title

    def metadata_string(self) -> str:
        return self.source or ""

    def is_database_matchable(self) -> bool:
        return False


MediaType = Union[TvShow, Movie, Generic]


def _parse_u32(text: str) -> Optional[int]:
    if text.isascii() and text.isdigit():
        return int(text)
    return None


def parse_filename(filename: str) -> MediaType:
    """Classify a file name as a TV episode, a movie or something generic."""
    stem = PurePath(filename).stem or filename
    return _parse_tv_show(stem) or _parse_movie(stem) or _parse_generic(stem)


def _parse_tv_show(stem: str) -> Optional[TvShow]:
    for kind, pattern in enumerate(_TV_PATTERNS):
        match = pattern.search(stem)
        if match is None:
            continue
        title = clean_title(match.group(1))
        season: Optional[int] = None
        if kind == 0:
            season = _parse_u32(match.group(2))
            episode = _parse_u32(match.group(3))
            if season is None or episode is None:
                return None
        elif kind == 1:
            episode = _parse_u32(match.group(2))
            if episode is None:
                return None
        else:
            episode_text = match.group(2)
            episode = _parse_u32(episode_text)
            if episode is None:
                return None
            if episode > _MAX_NON_SEASON_EPISODE:
                continue
            trailing = match.group(3) or match.group(4) or ""
            if "x" in trailing and episode_text in trailing:
                continue

        remaining = match.group(pattern.groups) or ""
        source = parse_source(remaining) or parse_source(stem)
        return TvShow(title=title, season=season, episode=episode, source=source)
    return None


def _parse_movie(stem: str) -> Optional[Movie]:
    match = _MOVIE_PATTERN.search(stem)
    if match is None:
        return None
    return Movie(
        title=clean_title(match.group(1)),
        year=_parse_u32(match.group(2)),
        source=parse_source(match.group(3) or ""),
    )


def _parse_generic(stem: str) -> Generic:
    return Generic(title=clean_title(stem), source=parse_source(stem))


def parse_source(text: str) -> Optional[str]:
    """The first known streaming service named in the text, case-insensitively."""
    lowered = text.lower()
    return next((name for name in _SOURCES if name.lower() in lowered), None)


def clean_title(title: str) -> str:
    """Strip bracketed tags, language suffixes and separators from a title.

    A title written wholly in one case is turned into title case.
    """
    cleaned = _BRACKET_RE.sub("", title)
    cleaned = _LANGUAGE_SUFFIX_RE.sub("", cleaned)
    cleaned = cleaned.replace(".", " ").replace("_", " ").replace("-", " ")
    cleaned = _SPACE_RE.sub(" ", cleaned).strip()

    letters = [ch for ch in cleaned if ch.isalpha()]
    if not letters:
        return cleaned
    if all(ch.isupper() for ch in letters) or all(ch.islower() for ch in letters):
        return " ".join(word[:1].upper() + word[1:].lower() for word in cleaned.split())
    return cleaned