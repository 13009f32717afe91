"""Download a listings summary CSV and save the cleaned copy the app reads.

Usage: python fetch_listings.py [URL] [OUTPUT_PATH]

The URL defaults to ``LAB_LISTINGS_URL``; the output path defaults to the
configured ``Settings.listings_path``.
"""
import io
import logging
import os
import sys

import pandas as pd
import requests

from utils.config import Settings, setup_logging
from utils.listings import clean_listings

log = logging.getLogger("fetch_listings")

TIMEOUT = 120


def fetch_listings(url, timeout=TIMEOUT):
    """GET ``url`` and parse it as CSV (gzip-compressed if the name says so)."""
    log.info("Fetching %s", url)
    resp = requests.get(url, timeout=timeout)
    resp.raise_for_status()
    compression = "gzip" if url.endswith(".gz") else None
    return pd.read_csv(io.BytesIO(resp.content), compression=compression, low_memory=False)


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    settings = Settings.from_env()
    setup_logging(settings.log_level)

    url = argv[0] if argv else os.environ.get("LAB_LISTINGS_URL")
    if not url:
        log.error("No URL given and LAB_LISTINGS_URL is not set")
        return 2
    out_path = argv[1] if len(argv) > 1 else settings.listings_path

    raw = fetch_listings(url)
    listings = clean_listings(raw)
    os.makedirs(os.path.dirname(os.path.abspath(out_path)), exist_ok=True)
    listings.to_csv(out_path, index=False)
    log.info("Wrote %d listing(s) (of %d raw) to %s", len(listings), len(raw), out_path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
