"""Blocking HTTP downloads with retries and progress messages."""

from __future__ import annotations

import time
from pathlib import Path
from typing import BinaryIO, Callable, Optional, Union

import httpx

from .errors import YomineError

REQUEST_TIMEOUT = 120.0
CHUNK_SIZE = 8192
MAX_ATTEMPTS = 3
MEBIBYTE = 1_048_576.0

_HEADERS = {
    "User-Agent": "yomine/1.0 (+httpx)",
    "Accept-Encoding": "identity",
}

MessageCallback = Callable[[str], None]


def http_client() -> httpx.Client:
    """A client with a two-minute timeout that follows redirects."""
    return httpx.Client(timeout=REQUEST_TIMEOUT, follow_redirects=True)


def _backoff(attempt: int) -> None:
    time.sleep(2 * attempt)


def _content_length(response: httpx.Response) -> Optional[int]:
    raw = response.headers.get("content-length")
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


def _progress_message(downloaded: int, total: Optional[int]) -> str:
    if total:
        return (
            f"Downloading Tokenizer Model: {downloaded / MEBIBYTE:.1f}MB/"
            f"{total / MEBIBYTE:.1f}MB ({downloaded / total * 100.0:.1f}%)"
        )
    return f"Downloading Tokenizer Model: {downloaded / MEBIBYTE:.1f}MB"


def _ensure_success(response: httpx.Response) -> None:
    if not response.is_success:
        raise YomineError(
            f"HTTP error {response.status_code} {response.reason_phrase} from {response.url}"
        )


def _open_for_writing(path: Path) -> BinaryIO:
    try:
        return path.open("wb")
    except OSError as exc:
        raise YomineError(f"Create download file {path} failed: {exc}") from exc


def _write_body(
    response: httpx.Response,
    path: Path,
    callback: Optional[MessageCallback],
    attempt: int,
) -> int:
    """Stream the body into the file and return how many bytes were written."""
    total = _content_length(response)
    downloaded = 0
    with _open_for_writing(path) as handle:
        chunks = response.iter_bytes(CHUNK_SIZE)
        while True:
            try:
                chunk = next(chunks, None)
            except httpx.HTTPError as exc:
                if attempt < MAX_ATTEMPTS:
                    _backoff(attempt)
                    break
                raise YomineError(f"Failed to read response: {exc}") from exc
            if chunk is None:
                break
            if not chunk:
                continue
            try:
                handle.write(chunk)
            except OSError as exc:
                raise YomineError(f"Failed to write to file: {exc}") from exc
            downloaded += len(chunk)
            if callback is not None:
                callback(_progress_message(downloaded, total))
    return downloaded


def download_with_progress(
    client: httpx.Client,
    url: str,
    path: Union[str, Path],
    message_callback: Optional[MessageCallback] = None,
) -> None:
    """Download a URL into a file, reporting progress and retrying up to three times."""
    path = Path(path)
    attempt = 0
    while True:
        attempt += 1
        try:
            with client.stream("GET", url, headers=_HEADERS) as response:
                _ensure_success(response)
                downloaded = _write_body(response, path, message_callback, attempt)
        except httpx.HTTPError as exc:
            if attempt < MAX_ATTEMPTS:
                _backoff(attempt)
                continue
            raise YomineError(f"Failed HTTP GET {url}: {exc}") from exc

        if downloaded > 0:
            return
        if attempt < MAX_ATTEMPTS:
            _backoff(attempt)
            continue
        raise YomineError("Failed to download any data")