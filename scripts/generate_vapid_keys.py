#!/usr/bin/env python3
"""Generate a VAPID key pair for Web Push.

Usage:
    python scripts/generate_vapid_keys.py [--env-file secrets/secrets.env]

Prints ``VAPID_PUBLIC_KEY`` / ``VAPID_PRIVATE_KEY`` as URL-safe base64
(the same raw format browsers and other Web Push libraries expect).  With
``--env-file`` they replace any VAPID lines already in that secrets file.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from cryptography.hazmat.primitives import serialization
from py_vapid import Vapid
from py_vapid.utils import b64urlencode


def generate_keys() -> tuple[str, str]:
    """Return ``(public_key, private_key)`` encoded as URL-safe base64."""
    vapid = Vapid()
    vapid.generate_keys()
    public_raw = vapid.public_key.public_bytes(
        serialization.Encoding.X962,
        serialization.PublicFormat.UncompressedPoint,
    )
    private_raw = vapid.private_key.private_numbers().private_value.to_bytes(32, "big")
    return b64urlencode(public_raw), b64urlencode(private_raw)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--env-file", type=Path, help="Write the keys into this secrets file")
    args = parser.parse_args(argv)

    public_key, private_key = generate_keys()
    lines = f"VAPID_PUBLIC_KEY={public_key}\nVAPID_PRIVATE_KEY={private_key}\n"

    if args.env_file is None:
        sys.stdout.write(lines)
        return 0

    existing: list[str] = []
    if args.env_file.is_file():
        existing = [
            line
            for line in args.env_file.read_text(encoding="utf-8").splitlines()
            if not line.startswith(("VAPID_PUBLIC_KEY=", "VAPID_PRIVATE_KEY="))
        ]
    args.env_file.parent.mkdir(parents=True, exist_ok=True)
    body = "\n".join(existing).strip()
    args.env_file.write_text((body + "\n" if body else "") + lines, encoding="utf-8")
    print(f"VAPID keys written to {args.env_file}")
    print(f"Public key: {public_key}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
