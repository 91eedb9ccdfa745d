"""
Record identifiers

Requests, suppliers and suggestions are keyed by time-ordered UUIDv7-style
strings, so suggestion rows sort by creation order when listed by ID.
"""

import secrets
import time


def generate_id() -> str:
    """
    Generate a UUIDv7-like identifier

    First 48 bits carry the Unix time in milliseconds, followed by the
    version nibble (7), 12 random bits, the RFC 4122 variant and 62 random bits.

    Returns:
        36-character UUID string, e.g. "01908e9a-3b87-7000-8000-123456789abc"
    """
    timestamp_48 = int(time.time() * 1000) & 0xFFFFFFFFFFFF
    rand_a = secrets.randbits(12)
    rand_b = secrets.randbits(62)

    value = (timestamp_48 << 80) | (0x7 << 76) | (rand_a << 64) | (0b10 << 62) | rand_b
    hex_str = f"{value:032x}"
    return f"{hex_str[:8]}-{hex_str[8:12]}-{hex_str[12:16]}-{hex_str[16:20]}-{hex_str[20:]}"
