"""
bjcloudvod downloader

Download videos from Baijiayun ``bjcloudvod://`` links. The link is decoded
into the URL of an ev1 file, which is streamed to ``<name>.flv`` with its
obfuscated header restored.

Example usage:
    from bjcloudvod_dl import download_bjc_url, TqdmProgressReporter

    path = download_bjc_url("bjcloudvod://...", reporter=TqdmProgressReporter())
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from .errors import (
    Base64DecodeError,
    BjcloudvodError,
    BjcUrlDecodeError,
    Ev1DownloadError,
    FileOutputFailed,
    HttpRequestFailed,
    InvalidDecodedUrl,
    InvalidUrl,
)
from .ev1_downloader import download_ev1_file
from .progress import NullProgressReporter, ProgressReporter, ProgressTrack, TqdmProgressReporter
from .url_decoder import URL_PREFIX, decode_bjc_url

__version__ = "0.1.0"


def download_bjc_url(
    url: str,
    output_filename: Optional[str] = None,
    reporter: Optional[ProgressReporter] = None,
) -> Path:
    """Decode *url* and download the video behind it. Never overwrites files."""
    decoded_url = decode_bjc_url(url)
    return download_ev1_file(decoded_url, output_filename, reporter)


__all__ = [
    "download_bjc_url",
    "decode_bjc_url",
    "download_ev1_file",
    "URL_PREFIX",
    # Progress
    "ProgressReporter",
    "ProgressTrack",
    "TqdmProgressReporter",
    "NullProgressReporter",
    # Errors
    "BjcloudvodError",
    "BjcUrlDecodeError",
    "InvalidUrl",
    "Base64DecodeError",
    "Ev1DownloadError",
    "InvalidDecodedUrl",
    "HttpRequestFailed",
    "FileOutputFailed",
]
