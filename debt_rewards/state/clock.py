"""
Monotonic block-height clock supplied by the environment.

Accrual is keyed to block height, never wall-clock time.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class BlockClock:
    height: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.height, int) or isinstance(self.height, bool) or self.height < 0:
            raise ValueError(f"height must be a non-negative int: {self.height!r}")

    def advance(self, blocks: int = 1) -> int:
        if not isinstance(blocks, int) or isinstance(blocks, bool) or blocks < 0:
            raise ValueError(f"blocks must be a non-negative int: {blocks!r}")
        self.height += blocks
        return self.height

    def set(self, height: int) -> int:
        if not isinstance(height, int) or isinstance(height, bool):
            raise TypeError("height must be an int")
        if height < self.height:
            raise ValueError(f"block height cannot go backwards: {height} < {self.height}")
        self.height = height
        return self.height
