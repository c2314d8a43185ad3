"""
Progress reporting used by the downloader.

The downloader only talks to the two small protocols below, so it can run
with a tqdm display, with nothing at all, or with a recording fake in tests.
"""

from __future__ import annotations

import sys
import threading
from typing import IO, Callable, Optional, Protocol, Set

from tqdm import tqdm


class ProgressTrack(Protocol):
    def advance(self, byte_count: int) -> None: ...

    def close(self) -> None: ...


class ProgressReporter(Protocol):
    def register_track(
        self, total_bytes: Optional[int], description: str = ""
    ) -> ProgressTrack: ...


# ---------------------------------------------------------------------
# tqdm
# ---------------------------------------------------------------------
class _TqdmTrack:
    def __init__(self, bar: tqdm, release: Callable[[], None]) -> None:
        self.bar = bar
        self._release = release
        self._closed = False

    def advance(self, byte_count: int) -> None:
        self.bar.update(byte_count)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.bar.close()
        self._release()


class TqdmProgressReporter:
    """
    One tqdm bar per track, stacked below each other. A closed track frees
    its row for the next one.

    A track with an unknown total shows tqdm's plain byte counter instead
    of a bar.
    """

    def __init__(self, file: Optional[IO[str]] = None) -> None:
        self._file = file if file is not None else sys.stderr
        self._lock = threading.Lock()
        self._positions: Set[int] = set()

    def _acquire_position(self) -> int:
        with self._lock:
            position = 0
            while position in self._positions:
                position += 1
            self._positions.add(position)
            return position

    def _release_position(self, position: int) -> None:
        with self._lock:
            self._positions.discard(position)

    def register_track(
        self, total_bytes: Optional[int], description: str = ""
    ) -> _TqdmTrack:
        position = self._acquire_position()
        bar = tqdm(
            total=total_bytes,
            desc=description or None,
            unit="B",
            unit_scale=True,
            unit_divisor=1024,
            position=position,
            dynamic_ncols=True,
            file=self._file,
        )
        return _TqdmTrack(bar, lambda: self._release_position(position))


# ---------------------------------------------------------------------
# Silent
# ---------------------------------------------------------------------
class _NullTrack:
    def advance(self, byte_count: int) -> None:
        pass

    def close(self) -> None:
        pass


class NullProgressReporter:
    def register_track(
        self, total_bytes: Optional[int], description: str = ""
    ) -> _NullTrack:
        return _NullTrack()
