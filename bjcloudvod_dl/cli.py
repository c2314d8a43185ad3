#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
bjcloudvod Downloader

Download a video from a Baijiayun ``bjcloudvod://`` link and save it as a
playable ``.flv`` file in the current folder.

Usage
-----
    bjcloudvod-dl 'bjcloudvod://...'
    bjcloudvod-dl 'bjcloudvod://...' -o lecture-01 --debug
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

from tqdm.contrib.logging import logging_redirect_tqdm

from . import __version__
from .errors import BjcUrlDecodeError, Ev1DownloadError
from .ev1_downloader import download_ev1_file
from .progress import TqdmProgressReporter
from .url_decoder import decode_bjc_url

log = logging.getLogger(__name__)


def parse_cli(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="bjcloudvod-dl",
        description="Download videos from Baijiayun bjcloudvod links.",
    )
    p.add_argument("url", help="bjcloudvod URL to download")
    p.add_argument(
        "-o",
        "--output",
        help="Output file name without the .flv suffix (default: taken from the video URL)",
    )
    p.add_argument("-d", "--debug", action="store_true", help="Show debug output")
    p.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")
    return p.parse_args(argv)


def _setup_logging(debug: bool) -> None:
    logging.basicConfig(format="%(levelname)s: %(message)s")
    logging.getLogger(__package__).setLevel(logging.DEBUG if debug else logging.INFO)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_cli(argv)
    _setup_logging(args.debug)
    log.debug("Original URL: %s", args.url)

    with logging_redirect_tqdm():
        try:
            decoded_url = decode_bjc_url(args.url)
        except BjcUrlDecodeError as err:
            log.error("Failed to decode URL: %s", err)
            return 1

        log.debug("Video URL: %s", decoded_url)

        try:
            out_path = download_ev1_file(decoded_url, args.output, TqdmProgressReporter())
        except Ev1DownloadError as err:
            log.error("Failed to download video: %s", err)
            return 1

    print(f"\n✔ Download complete! Saved to: {out_path.resolve()}")
    return 0


def run() -> None:
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n🚫 Download cancelled by user.", file=sys.stderr)
        sys.exit(130)


if __name__ == "__main__":
    run()
