"""
Downloading and de-obfuscating ev1 video files.

An ev1 file is an FLV stream whose first 100 bytes have been bitwise
inverted. The file is fetched in a single streaming pass, the header is
inverted back on the fly and everything after it is written untouched.
"""

from __future__ import annotations

import logging
import os
import posixpath
from pathlib import Path, PurePosixPath
from typing import Iterable, Iterator, Optional
from urllib.parse import quote, urlparse

from curl_cffi.requests import Session as CurlCffiSession
from curl_cffi.requests.exceptions import RequestException

from .errors import FileOutputFailed, HttpRequestFailed, InvalidDecodedUrl
from .progress import NullProgressReporter, ProgressReporter

log = logging.getLogger(__name__)

# A modern browser User-Agent
USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/117.0.0.0 Safari/537.36"
IMPERSONATE = "chrome110"
CONNECT_TIMEOUT = 20
READ_TIMEOUT = 60

HEADER_SIZE = 100
CHUNK_SIZE = 8192
DEFAULT_FILENAME = "video"
OUTPUT_SUFFIX = ".flv"

_INVERT_TABLE = bytes(range(255, -1, -1))


# ---------------------------------------------------------------------
# Byte transform
# ---------------------------------------------------------------------
def invert_header(chunk: bytes) -> bytes:
    """Return *chunk* with every byte complemented (``b ^ 0xFF``)."""
    return chunk.translate(_INVERT_TABLE)


class _ChunkReader:
    """File-like ``read(size)`` over an iterator of arbitrarily sized chunks.

    ``read`` returns exactly *size* bytes unless the iterator runs dry.
    """

    def __init__(self, chunks: Iterable[bytes]) -> None:
        self._chunks = iter(chunks)
        self._buffer = bytearray()
        self._exhausted = False

    def read(self, size: int) -> bytes:
        while len(self._buffer) < size and not self._exhausted:
            try:
                chunk = next(self._chunks)
            except StopIteration:
                self._exhausted = True
                break
            self._buffer += chunk
        data = bytes(self._buffer[:size])
        del self._buffer[:size]
        return data


def deobfuscate_stream(chunks: Iterable[bytes]) -> Iterator[bytes]:
    """
    Yield the de-obfuscated stream: first the inverted header block of
    ``min(HEADER_SIZE, N)`` bytes, then body blocks of at most
    ``CHUNK_SIZE`` bytes passed through verbatim.
    """
    reader = _ChunkReader(chunks)
    header = reader.read(HEADER_SIZE)
    if not header:
        return
    yield invert_header(header)
    while True:
        block = reader.read(CHUNK_SIZE)
        if not block:
            return
        yield block


# ---------------------------------------------------------------------
# URL & filename
# ---------------------------------------------------------------------
# Characters that may never appear in a host name.
_FORBIDDEN_HOST_CHARS = frozenset(" \t\n\r#/:<>?@[\\]^|%\"`{}")
# Printable ASCII kept as-is in a URL path; everything else is %-encoded.
_PATH_SAFE = "".join(chr(c) for c in range(0x21, 0x7F) if chr(c) not in '"<>`{}')


def _check_host(decoded_url: str, host: str) -> None:
    for ch in host:
        if ch in _FORBIDDEN_HOST_CHARS or ord(ch) < 0x20 or ord(ch) == 0x7F:
            raise InvalidDecodedUrl(decoded_url, f"invalid domain character {ch!r}")
    try:
        host.encode("idna")
    except UnicodeError as exc:
        raise InvalidDecodedUrl(decoded_url, f"invalid international domain name: {exc}") from exc


def _validate_url(decoded_url: str) -> str:
    """
    Check *decoded_url* is an absolute URL with a well-formed host and
    return its path, dot segments resolved and unsafe characters
    percent-encoded.
    """
    try:
        parsed = urlparse(decoded_url)
        parsed.port  # raises on a malformed port
    except ValueError as exc:
        raise InvalidDecodedUrl(decoded_url, str(exc)) from exc
    if not parsed.scheme:
        raise InvalidDecodedUrl(decoded_url, "relative URL without a base")
    if not parsed.hostname:
        raise InvalidDecodedUrl(decoded_url, "empty host")
    # Bracketed IPv6 literals were already checked by urlparse.
    if "[" not in parsed.netloc:
        _check_host(decoded_url, parsed.hostname)

    path = posixpath.normpath(parsed.path) if parsed.path else ""
    return quote(path, safe=_PATH_SAFE)


def resolve_output_filename(decoded_url: str, output_filename: Optional[str] = None) -> str:
    """
    Return the output path for *decoded_url*: ``<name>.flv`` where name is
    *output_filename* if given, else the last segment of the URL path, else
    ``video``.
    """
    url_path = _validate_url(decoded_url)
    if output_filename is not None:
        name = output_filename
    else:
        name = PurePosixPath(url_path).name
        if name in ("", ".", ".."):
            name = DEFAULT_FILENAME
    return f"{name}{OUTPUT_SUFFIX}"


def _content_length(headers) -> Optional[int]:
    value = headers.get("Content-Length")
    if value and value.strip().isdigit():
        return int(value)
    return None


# ---------------------------------------------------------------------
# Networking
# ---------------------------------------------------------------------
def _get_smart_session() -> CurlCffiSession:
    """Return a session that impersonates a modern browser."""
    return CurlCffiSession(impersonate=IMPERSONATE, headers={"User-Agent": USER_AGENT})


def _open_stream(session: CurlCffiSession, url: str):
    try:
        resp = session.get(url, stream=True, timeout=(CONNECT_TIMEOUT, READ_TIMEOUT))
    except RequestException as exc:
        raise HttpRequestFailed(url, exc) from exc
    try:
        resp.raise_for_status()
    except RequestException as exc:
        resp.close()
        raise HttpRequestFailed(url, exc) from exc
    return resp


# ---------------------------------------------------------------------
# Download
# ---------------------------------------------------------------------
def download_ev1_file(
    decoded_url: str,
    output_filename: Optional[str] = None,
    reporter: Optional[ProgressReporter] = None,
    *,
    session: Optional[CurlCffiSession] = None,
) -> Path:
    """
    Download an ev1 video file and save it as a decrypted flv video.

    If not given, the filename is taken from the URL path with a ``.flv``
    suffix appended, e.g. ``http://host/test.ev1`` becomes ``test.ev1.flv``.
    Existing files are never overwritten: if the target already exists the
    call fails with :class:`FileOutputFailed`. A file left behind by a
    failure half way through is not removed.
    """
    out_file = resolve_output_filename(decoded_url, output_filename)
    log.debug("Output filename: %s", out_file)

    # Exclusive creation below is what guarantees no overwrite; checking
    # here just avoids opening a connection for nothing.
    if os.path.exists(out_file):
        raise FileOutputFailed(out_file, FileExistsError(f"File exists: '{out_file}'"))

    if reporter is None:
        reporter = NullProgressReporter()
    own_session = session is None
    if own_session:
        session = _get_smart_session()

    try:
        resp = _open_stream(session, decoded_url)
        try:
            written = _save_stream(resp, decoded_url, out_file, reporter)
        finally:
            resp.close()
    finally:
        if own_session:
            session.close()

    log.info("Saved %d bytes to %s", written, out_file)
    return Path(out_file)


def _save_stream(resp, url: str, out_file: str, reporter: ProgressReporter) -> int:
    total = _content_length(resp.headers)
    log.debug("Content length: %s", total if total is not None else "unknown")

    try:
        fp = open(out_file, "xb")
    # ValueError covers names the OS cannot represent, e.g. an embedded NUL.
    except (OSError, ValueError) as exc:
        raise FileOutputFailed(out_file, exc) from exc

    written = 0
    try:
        with fp:
            track = reporter.register_track(total, Path(out_file).name)
            try:
                for block in deobfuscate_stream(resp.iter_content()):
                    fp.write(block)
                    written += len(block)
                    track.advance(len(block))
            finally:
                track.close()
    # curl_cffi's RequestException is also an OSError, so it goes first.
    except RequestException as exc:
        raise HttpRequestFailed(url, exc) from exc
    except OSError as exc:
        raise FileOutputFailed(out_file, exc) from exc
    return written
