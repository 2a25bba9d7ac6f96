from __future__ import annotations

import os
import time
import uuid
from datetime import datetime, timezone


def generate_uuid7() -> str:
    """
    Generate a UUIDv7 string (time-ordered).

    Build ids sort in the order builds were recorded, which keeps the
    history logs readable when they are opened in a spreadsheet.

    UUIDv7 layout per draft:
    - 48-bit Unix timestamp in milliseconds
    - 4-bit version (0b0111)
    - 74-bit randomness
    """
    ts_ms = int(time.time() * 1000)
    raw = bytearray(ts_ms.to_bytes(6, "big", signed=False) + os.urandom(10))
    raw[6] = (raw[6] & 0x0F) | 0x70
    raw[8] = (raw[8] & 0x3F) | 0x80
    return str(uuid.UUID(bytes=bytes(raw)))


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()
