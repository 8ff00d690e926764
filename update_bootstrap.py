#!/usr/bin/env python3
"""
Regenerate the packaged RDAP bootstrap snapshot from IANA.

Usage:
    python update_bootstrap.py                   # Rewrite src/rdap_lookup/data/dns.json
    python update_bootstrap.py --output dns.json # Write somewhere else

This is never run by the lookup code; ship the new snapshot with a release.
"""

import argparse
import json
import os
import sys
import tempfile
from pathlib import Path

import httpx

from rdap_lookup import __version__
from rdap_lookup.rdap_bootstrap import BOOTSTRAP_DATA_PATH, parse_bootstrap_services

# IANA bootstrap URL
IANA_BOOTSTRAP_URL = "https://data.iana.org/rdap/dns.json"


def fetch_bootstrap(client: httpx.Client, url: str = IANA_BOOTSTRAP_URL) -> dict:
    """
    Download and validate the IANA bootstrap file.

    Raises:
        httpx.HTTPError: On network failure or a non-2xx status
        ValueError: If the document is not a usable bootstrap file
    """
    response = client.get(url)
    response.raise_for_status()

    data = response.json()
    if not isinstance(data, dict) or not parse_bootstrap_services(data):
        raise ValueError(f"{url} did not return a usable RDAP bootstrap file")
    return data


def write_snapshot(data: dict, path: Path) -> None:
    """Write the snapshot atomically (temp file + rename)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
            f.write("\n")
        os.replace(tmp_name, path)
    except BaseException:
        os.unlink(tmp_name)
        raise


def main():
    parser = argparse.ArgumentParser(
        description="Regenerate the RDAP bootstrap snapshot from IANA",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=BOOTSTRAP_DATA_PATH,
        help=f"Snapshot path (default: {BOOTSTRAP_DATA_PATH})",
    )
    parser.add_argument(
        "--url",
        default=IANA_BOOTSTRAP_URL,
        help="Bootstrap URL to fetch",
    )
    args = parser.parse_args()

    headers = {
        "Accept": "application/json",
        "User-Agent": f"rdap-lookup/{__version__} (RDAP Bootstrap)",
    }

    try:
        with httpx.Client(headers=headers, timeout=30) as client:
            data = fetch_bootstrap(client, args.url)
    except (httpx.HTTPError, ValueError) as e:
        print(f"✗ Failed to fetch bootstrap: {e}", file=sys.stderr)
        sys.exit(1)

    write_snapshot(data, args.output)
    services = parse_bootstrap_services(data)
    print(f"✓ Wrote {args.output}: {len(services)} TLDs (publication {data.get('publication')})")


if __name__ == "__main__":
    main()
