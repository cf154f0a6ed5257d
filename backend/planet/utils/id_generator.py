"""ID generation utilities.

IDs are stable surrogate keys: a node keeps its ID when a discarded
editing session reinserts it from a backup.
"""

import random
import string
import time

_BASE36 = string.digits + string.ascii_lowercase

# Prefixes in use, one per persisted entity
USER_PREFIX = "user"
PLANET_PREFIX = "planet"
NODE_PREFIX = "node"
SESSION_PREFIX = "edit"
BACKUP_PREFIX = "bak"


def generate_id(prefix: str = "") -> str:
    """Generate a unique ID with optional prefix.

    Format: {prefix}_{timestamp_base36}{random_8chars}
    Example: node_m1a2b3c4d5e6f7g8
    """
    timestamp_b36 = _to_base36(int(time.time() * 1000))
    random_part = "".join(random.choices(_BASE36, k=8))

    if prefix:
        return f"{prefix}_{timestamp_b36}{random_part}"
    return f"{timestamp_b36}{random_part}"


def _to_base36(num: int) -> str:
    if num == 0:
        return "0"

    digits = []
    while num:
        num, rem = divmod(num, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))
