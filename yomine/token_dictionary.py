"""Downloading and unpacking the tokenizer's system dictionary."""

from __future__ import annotations

import logging
import lzma
import shutil
import tarfile
from enum import Enum
from pathlib import Path
from typing import BinaryIO, Callable, Iterable, Optional, Union

import zstandard

from .errors import YomineError
from .http import download_with_progress, http_client

logger = logging.getLogger(__name__)

_RELEASE_URL = "https://github.com/daac-tools/vibrato/releases/download/v0.5.0"
SYSTEM_DIC = "system.dic"
KEEP_FILES = (SYSTEM_DIC, "BSD", "NOTICE")

ProgressCallback = Callable[[str], None]
PathLike = Union[str, Path]


class DictType(Enum):
    """The tokenizer dictionaries that can be installed."""

    UNIDIC = "bccwj-suw+unidic-cwj-3_1_1"
    IPADIC = "ipadic-mecab-2_7_0"

    def url(self) -> str:
        return f"{_RELEASE_URL}/{self.value}.tar.xz"

    def folder_name(self) -> str:
        return self.value

    def lemma_indices(self) -> tuple[int, int]:
        """Feature indices of the lemma form and the lemma reading."""
        if self is DictType.UNIDIC:
            return 10, 11
        return 6, 8


def cleanup_files(folder: PathLike, keep_files: Iterable[str]) -> None:
    """Remove everything in a folder except the named entries."""
    folder = Path(folder)
    keep = {folder / name for name in keep_files}
    logger.info("Cleaning up intermediate files...")
    try:
        entries = list(folder.iterdir())
    except OSError as exc:
        raise YomineError(f"Failed to read directory during cleanup: {exc}") from exc
    for path in entries:
        if path in keep:
            continue
        if path.is_dir():
            try:
                shutil.rmtree(path)
            except OSError as exc:
                raise YomineError(
                    f"Failed to remove directory during cleanup: {path} - {exc}"
                ) from exc
        else:
            try:
                path.unlink()
            except OSError as exc:
                raise YomineError(f"Failed to remove file during cleanup: {path} - {exc}") from exc
    logger.info("Cleanup complete. Retained files: %s", sorted(p.name for p in keep))


def _notify(message: str, callback: Optional[ProgressCallback]) -> None:
    logger.info("%s", message)
    if callback is not None:
        callback(message)


def _open(path: Path, mode: str, what: str) -> BinaryIO:
    try:
        return path.open(mode)
    except OSError as exc:
        raise YomineError(f"Failed to {what} {path}: {exc}") from exc


def _decompress_xz(source: Path, destination: Path) -> None:
    with _open(source, "rb", "open downloaded file") as raw, _open(
        destination, "wb", "create TAR file"
    ) as out:
        try:
            with lzma.LZMAFile(raw) as decoded:
                shutil.copyfileobj(decoded, out)
        except (lzma.LZMAError, EOFError, OSError) as exc:
            raise YomineError(
                f"Failed to decompress XZ to TAR: {exc}. Possible corrupt download."
            ) from exc


def _unpack_tar(tar_path: Path, destination: Path, dict_dir: Path) -> None:
    try:
        destination.mkdir(parents=True, exist_ok=True)
        root = destination.resolve()
        with tarfile.open(tar_path) as archive:
            for member in archive.getmembers():
                target = (destination / member.name).resolve()
                if target != root and root not in target.parents:
                    raise YomineError(f"Failed to unpack TAR to {dict_dir}: unsafe path {member.name}.")
            if hasattr(tarfile, "data_filter"):
                archive.extractall(destination, filter="data")
            else:
                archive.extractall(destination)
    except (tarfile.TarError, OSError) as exc:
        raise YomineError(f"Failed to unpack TAR to {dict_dir}: {exc}.") from exc


def _decompress_zst(source: Path, destination: Path) -> None:
    with _open(source, "rb", "open ZST file") as raw, _open(
        destination, "wb", "create .dic file"
    ) as out:
        try:
            zstandard.ZstdDecompressor().copy_stream(raw, out)
        except (zstandard.ZstdError, OSError) as exc:
            raise YomineError(f"Failed to decompress ZST to {destination}: {exc}.") from exc


def _move(source: Path, destination: Path, label: str) -> None:
    try:
        source.rename(destination)
    except OSError as exc:
        raise YomineError(f"Failed to move {label} file: {exc}") from exc


def _remove(path: Path) -> None:
    try:
        path.unlink()
    except OSError as exc:
        raise YomineError(f"I/O error: {exc}") from exc


def ensure_dictionary(
    dict_type: DictType,
    dict_dir: PathLike,
    progress_callback: Optional[ProgressCallback] = None,
) -> Path:
    """Return the path of the system dictionary, downloading and unpacking it if needed."""
    dict_dir = Path(dict_dir)
    folder_name = dict_type.folder_name()
    extract_path = dict_dir / folder_name
    final_dic_path = extract_path / SYSTEM_DIC

    if final_dic_path.exists():
        _notify("Tokenizer model already downloaded, loading...", progress_callback)
        return final_dic_path

    try:
        dict_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise YomineError(f"Failed to create dictionary directory {dict_dir}: {exc}") from exc

    download_path = dict_dir / f"{folder_name}.tar.xz"
    tar_path = dict_dir / f"{folder_name}.tar"
    download_path.unlink(missing_ok=True)
    tar_path.unlink(missing_ok=True)
    shutil.rmtree(extract_path, ignore_errors=True)

    _notify("Downloading tokenizer model...", progress_callback)
    with http_client() as client:
        download_with_progress(client, dict_type.url(), download_path, progress_callback)
    _notify("Downloaded tokenizer model successfully", progress_callback)

    try:
        size = download_path.stat().st_size
    except OSError as exc:
        raise YomineError(
            f"Failed to get metadata for downloaded file {download_path}: {exc}"
        ) from exc
    if size == 0:
        raise YomineError(
            f"Downloaded file {download_path} is empty. Check your internet connection."
        )

    _notify("Extracting tokenizer model...", progress_callback)
    _decompress_xz(download_path, tar_path)
    _notify("Decompressed XZ file successfully", progress_callback)

    _unpack_tar(tar_path, extract_path, dict_dir)
    _notify("Extracted TAR archive successfully", progress_callback)

    inner_path = extract_path / folder_name
    zst_path = inner_path / f"{SYSTEM_DIC}.zst"
    if not zst_path.exists():
        raise YomineError(f"ZST file not found at {zst_path} after extraction.")

    _notify("Finalizing tokenizer setup...", progress_callback)
    _decompress_zst(zst_path, final_dic_path)
    _notify("Tokenizer model ready", progress_callback)

    _move(inner_path / "BSD", extract_path / "BSD", "BSD")
    _move(inner_path / "NOTICE", extract_path / "NOTICE", "NOTICE")

    _notify("Cleaning up temporary files", progress_callback)
    cleanup_files(extract_path, KEEP_FILES)
    logger.info("Removing download %s", download_path)
    _remove(download_path)
    logger.info("Removing tar %s", tar_path)
    _remove(tar_path)

    return final_dic_path


def is_all_kana(word: str) -> bool:
    """Whether every character lies in the hiragana or katakana block."""
    return all("\u3040" <= ch <= "\u309f" or "\u30a0" <= ch <= "\u30ff" for ch in word)