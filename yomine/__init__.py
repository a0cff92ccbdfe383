"""Japanese vocabulary mining helpers: frequency dictionaries, kana utilities, filename parsing and Anki filtering."""

__version__ = "0.3.8"