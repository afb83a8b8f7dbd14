"""Time-ordered string IDs for auctions, items, bids and notifications.

IDs sort by creation time, which keeps cursor pagination and "earliest bid
wins a tie" cheap to express. Single-process generator; multiple API workers
must be given distinct ``worker_id`` values.
"""

import threading
import time


class SortableIdGenerator:
    """Snowflake-style generator.

    Layout (63 bits):
      - 41 bits: millisecond timestamp since ``_EPOCH_MS``
      - 10 bits: worker_id (0-1023)
      - 12 bits: per-millisecond sequence (0-4095)
    """

    _EPOCH_MS = 1_735_689_600_000  # 2025-01-01T00:00:00Z
    _WORKER_BITS = 10
    _SEQUENCE_BITS = 12
    _SEQUENCE_MASK = (1 << _SEQUENCE_BITS) - 1

    def __init__(self, worker_id: int = 0) -> None:
        if not (0 <= worker_id < (1 << self._WORKER_BITS)):
            raise ValueError(f"worker_id must be 0-{(1 << self._WORKER_BITS) - 1}")
        self._worker_id = worker_id
        self._sequence = 0
        self._last_ms = -1
        self._lock = threading.Lock()

    def next_int(self) -> int:
        with self._lock:
            now_ms = self._now_ms()
            if now_ms < self._last_ms:
                # Clock stepped backwards: keep issuing from the last timestamp
                now_ms = self._last_ms
            if now_ms == self._last_ms:
                self._sequence = (self._sequence + 1) & self._SEQUENCE_MASK
                if self._sequence == 0:
                    now_ms = self._wait_after(now_ms)
            else:
                self._sequence = 0
            self._last_ms = now_ms
            return (
                ((now_ms - self._EPOCH_MS) << (self._WORKER_BITS + self._SEQUENCE_BITS))
                | (self._worker_id << self._SEQUENCE_BITS)
                | self._sequence
            )

    def next_id(self) -> str:
        return str(self.next_int())

    def _now_ms(self) -> int:
        return int(time.time() * 1000)

    def _wait_after(self, last_ms: int) -> int:
        now_ms = self._now_ms()
        while now_ms <= last_ms:
            now_ms = self._now_ms()
        return now_ms


_generator = SortableIdGenerator()


def generate_id() -> str:
    """Next ID from the process-wide generator."""
    return _generator.next_id()
