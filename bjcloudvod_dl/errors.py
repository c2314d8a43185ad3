"""Exceptions raised while decoding bjcloudvod URLs and downloading ev1 files."""

from __future__ import annotations

from typing import Optional


class BjcloudvodError(Exception):
    """Base class for every failure raised by this package."""


# ---------------------------------------------------------------------
# URL decoding
# ---------------------------------------------------------------------
class BjcUrlDecodeError(BjcloudvodError):
    """Could not decode the given bjcloudvod URL."""


class InvalidUrl(BjcUrlDecodeError):
    """The given string is not a bjcloudvod URL, it might be something else."""

    def __init__(self, url: str, reason: Optional[str] = None) -> None:
        self.url = url
        self.reason = reason
        msg = f"Given str `{url}` is not a valid bjcloudvod URL"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class Base64DecodeError(BjcUrlDecodeError):
    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Could not decode base64 string: {detail}")


# ---------------------------------------------------------------------
# ev1 download
# ---------------------------------------------------------------------
class Ev1DownloadError(BjcloudvodError):
    """Could not download the ev1 file behind a decoded URL."""


class InvalidDecodedUrl(Ev1DownloadError):
    def __init__(self, url: str, detail: str) -> None:
        self.url = url
        self.detail = detail
        super().__init__(f"Could not parse given decoded URL `{url}`: {detail}")


class HttpRequestFailed(Ev1DownloadError):
    def __init__(self, url: str, cause: BaseException) -> None:
        self.url = url
        self.cause = cause
        super().__init__(f"Failed to make http request: {cause}")


class FileOutputFailed(Ev1DownloadError):
    def __init__(self, path: str, cause: BaseException) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to write video file `{path}`: {cause}")
