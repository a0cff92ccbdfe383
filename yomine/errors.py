"""Exception types raised by the yomine package."""

from __future__ import annotations


class YomineError(Exception):
    """Base class for every error the package raises on purpose."""


class InvalidTimestampError(YomineError):
    """A subtitle timestamp could not be understood."""

    def __init__(self) -> None:
        super().__init__("Invalid timestamp format")


class MissingVersionError(YomineError):
    """A dictionary index.json declares neither 'format' nor 'version'."""

    def __init__(self) -> None:
        super().__init__("index.json must have either 'format' or 'version'")


class FailedToLoadFileError(YomineError):
    """A source file could not be loaded."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Failed to load file: {detail}")


class UnsupportedFileTypeError(YomineError):
    """A source file has a type that cannot be read."""

    def __init__(self, file_type: str) -> None:
        self.file_type = file_type
        super().__init__(f"Failed to load unsupported file type: {file_type}")