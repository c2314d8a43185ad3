"""
pytest configuration and shared fakes.

FakeSession stands in for a curl_cffi session so downloads run without
any network access; RecordingReporter captures progress calls.
"""

import base64
from typing import List, Optional

import pytest
from curl_cffi.requests.exceptions import RequestException

from bjcloudvod_dl import URL_PREFIX


def encode_bjc_url(plain: bytes, key: int) -> str:
    """Apply the forward obfuscation, used to build realistic links."""
    c = key % 8
    body = bytes(((b + (i % 4) * c + (i % 3) + 1) & 0xFF) for i, b in enumerate(plain))
    encoded = base64.urlsafe_b64encode(bytes([key]) + body).rstrip(b"=")
    return URL_PREFIX + encoded.decode("ascii")


class FakeResponse:
    def __init__(self, body=b"", chunk_size=4096, headers=None, status_code=200, fail_after=None):
        self.body = body
        self.chunk_size = chunk_size
        self.headers = dict(headers or {})
        self.status_code = status_code
        self.fail_after = fail_after
        self.closed = False

    def raise_for_status(self):
        if self.status_code >= 400:
            raise RequestException(f"HTTP Error {self.status_code}")

    def iter_content(self):
        sent = 0
        for start in range(0, len(self.body), self.chunk_size):
            if self.fail_after is not None and sent >= self.fail_after:
                raise RequestException("connection reset by peer")
            chunk = self.body[start:start + self.chunk_size]
            sent += len(chunk)
            yield chunk

    def close(self):
        self.closed = True


class FakeSession:
    def __init__(self, response=None, error=None, on_get=None):
        self.response = response
        self.error = error
        self.on_get = on_get
        self.requests: List[dict] = []

    def get(self, url, **kwargs):
        self.requests.append({"url": url, **kwargs})
        if self.on_get is not None:
            self.on_get()
        if self.error is not None:
            raise self.error
        return self.response

    def close(self):
        pass


class RecordingTrack:
    def __init__(self, total: Optional[int], description: str):
        self.total = total
        self.description = description
        self.advances: List[int] = []
        self.closed = False

    def advance(self, byte_count: int) -> None:
        self.advances.append(byte_count)

    def close(self) -> None:
        self.closed = True


class RecordingReporter:
    def __init__(self):
        self.tracks: List[RecordingTrack] = []

    def register_track(self, total_bytes, description=""):
        track = RecordingTrack(total_bytes, description)
        self.tracks.append(track)
        return track


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Run the test inside an empty directory, since output goes to the cwd."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def reporter():
    return RecordingReporter()
