"""Adding frequency dictionary archives to the dictionary folder."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Iterable, Union

from .errors import YomineError

logger = logging.getLogger(__name__)


def copy_frequency_dictionaries(
    zip_paths: Iterable[Union[str, Path]], destination_dir: Union[str, Path]
) -> int:
    """Copy archives into the folder, skipping names already there; return how many were copied."""
    destination_dir = Path(destination_dir)
    try:
        destination_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise YomineError(f"I/O error: {exc}") from exc

    copied = 0
    for zip_path in map(Path, zip_paths):
        if not zip_path.name:
            continue
        destination = destination_dir / zip_path.name
        if destination.exists():
            logger.info(
                "Skipping '%s' - already exists in frequency dictionary folder", zip_path.name
            )
            continue
        try:
            shutil.copy(zip_path, destination)
        except OSError as exc:
            raise YomineError(f"I/O error: {exc}") from exc
        copied += 1
        logger.info("Copied frequency dictionary: %s -> %s", zip_path, destination)
    return copied