"""
External identifiers for embedded project entities.

Format: `<prefix>_<unixMillis>_<randomBase36>`, e.g. `area_1718000000000_k3j9x0q2a`.
Clients parse nothing out of these, but existing data uses exactly this shape,
so new ids must keep it.
"""

import secrets
import time

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"

AREA = "area"
HOTSPOT = "hotspot"
INFO = "info"
ITEM = "item"
INSTANCE = "inst"
UPLOAD = "img"


def random_base36(length: int = 11) -> str:
    return "".join(secrets.choice(_BASE36) for _ in range(length))


def generate_id(prefix: str, length: int = 11) -> str:
    return f"{prefix}_{int(time.time() * 1000)}_{random_base36(length)}"
