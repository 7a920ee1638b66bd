"""Object ids for events, outcomes, positions, wagers, wallets and quotes.

Ids are 64-bit snowflakes rendered as 16 lowercase hex digits:

    | 41 bits ms since _EPOCH_MS | 10 bits machine | 12 bits sequence |

Fixed-width hex keeps string order equal to creation order, and the alphabet
cannot produce an event code ("DEV-000001") or an outcome code ("A"), so a path
parameter can be told apart by shape alone.
"""

import re
import threading
import time

_OBJECT_ID_RE = re.compile(r"^[0-9a-f]{16}$")


class SnowflakeIdGenerator:
    _EPOCH_MS = 1_700_000_000_000
    _MACHINE_BITS = 10
    _SEQUENCE_BITS = 12
    _SEQUENCE_MASK = (1 << _SEQUENCE_BITS) - 1

    def __init__(self, machine_id: int = 0) -> None:
        limit = 1 << self._MACHINE_BITS
        if not 0 <= machine_id < limit:
            raise ValueError(f"machine_id must be 0-{limit - 1}")
        self._machine_id = machine_id
        self._last_ms = -1
        self._sequence = 0
        self._lock = threading.Lock()

    def next_int(self) -> int:
        with self._lock:
            # a clock that steps backwards is treated as still on the last millisecond
            now_ms = max(self._now_ms(), self._last_ms)
            if now_ms == self._last_ms:
                self._sequence = (self._sequence + 1) & self._SEQUENCE_MASK
                if self._sequence == 0:
                    now_ms = self._next_ms_after(self._last_ms)
            else:
                self._sequence = 0
            self._last_ms = now_ms
            elapsed = now_ms - self._EPOCH_MS
            return (
                elapsed << (self._MACHINE_BITS + self._SEQUENCE_BITS)
                | self._machine_id << self._SEQUENCE_BITS
                | self._sequence
            )

    def next_id(self) -> str:
        return format(self.next_int(), "016x")

    @staticmethod
    def _now_ms() -> int:
        return time.time_ns() // 1_000_000

    def _next_ms_after(self, ms: int) -> int:
        now_ms = self._now_ms()
        while now_ms <= ms:
            now_ms = self._now_ms()
        return now_ms


_generator = SnowflakeIdGenerator()


def generate_id() -> str:
    return _generator.next_id()


def is_object_id(ref: str) -> bool:
    """True for a generated id, False for event/outcome codes and anything else."""
    return _OBJECT_ID_RE.fullmatch(ref) is not None
