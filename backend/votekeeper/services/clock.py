"""
Height sources.

The voting core reads the height once per operation and never writes it.
"""
import time
from typing import Callable


class HeightClock:
    """Monotonic height source."""

    def current_height(self) -> int:
        raise NotImplementedError


class BlockClock(HeightClock):
    """Derives a block height from wall time: one block every ``block_seconds``."""

    def __init__(
        self,
        genesis_time: float,
        block_seconds: float,
        time_source: Callable[[], float] = time.time,
    ):
        if block_seconds <= 0:
            raise ValueError("block_seconds must be positive")
        self.genesis_time = genesis_time
        self.block_seconds = block_seconds
        self._time_source = time_source
        self._last_height = 0

    def current_height(self) -> int:
        elapsed = self._time_source() - self.genesis_time
        height = max(int(elapsed // self.block_seconds), 0)
        # Never step backwards if the wall clock does
        self._last_height = max(self._last_height, height)
        return self._last_height


class ManualClock(HeightClock):
    """Height advanced explicitly by the host (simulations, tests)."""

    def __init__(self, height: int = 0):
        self.height = height

    def current_height(self) -> int:
        return self.height

    def advance(self, blocks: int = 1) -> int:
        if blocks < 0:
            raise ValueError("height is monotonic")
        self.height += blocks
        return self.height
