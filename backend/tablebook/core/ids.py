"""
Identifier generation for reservations and users.

Ids only need to be unlikely to collide; nothing enforces uniqueness beyond
the primary key of the backing store.
"""

import random
import string
from datetime import datetime
from typing import Optional

_BASE36 = string.digits + string.ascii_lowercase


class IdGenerator:
    def __init__(self, seed: Optional[int] = None):
        self._rng = random.Random(seed) if seed is not None else random.SystemRandom()

    def reservation_id(self, now: datetime) -> str:
        millis = int(now.timestamp() * 1000)
        suffix = "".join(self._rng.choice(_BASE36) for _ in range(9))
        return f"BK-{millis}-{suffix}"

    def confirmation_code(self, prefix: str, now: datetime) -> str:
        """PREFIX-YYYYMMDD-NNNN, dated by the local calendar day of `now`."""
        number = self._rng.randint(1000, 9999)
        return f"{prefix}-{now.strftime('%Y%m%d')}-{number}"

    def user_id(self) -> str:
        return f"user-{self._rng.getrandbits(48):012x}"


_generator: IdGenerator = None


def get_id_generator() -> IdGenerator:
    global _generator
    if _generator is None:
        _generator = IdGenerator()
    return _generator
