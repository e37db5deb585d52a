"""
Block height sources for the CivicLedger contracts.

Contract code never reads the wall clock directly. Each store receives a
BlockSource at construction and asks it for the current height whenever an
operation records a timestamp.

- SystemBlockSource mirrors the mocked ledger: wall-clock milliseconds.
- ManualBlockSource is a deterministic counter for tests and replays.
"""

import time
from abc import ABC, abstractmethod


class BlockSource(ABC):
    """
    Abstract source of the current block height.

    Guarantees:
        ``height()`` never returns a value lower than a previous call.
    """

    @abstractmethod
    def height(self) -> int:
        """Get the current block height."""
        ...


class SystemBlockSource(BlockSource):
    """Block height derived from wall-clock time in milliseconds."""

    def height(self) -> int:
        return time.time_ns() // 1_000_000


class ManualBlockSource(BlockSource):
    """
    Test block source with controlled height.

    Examples:
        >>> blocks = ManualBlockSource(100)
        >>> blocks.advance(5)
        105
        >>> blocks.height()
        105
    """

    def __init__(self, start: int = 1):
        if start < 1:
            raise ValueError(f"Block height must start at 1 or above: {start}")
        self._height = start

    def height(self) -> int:
        return self._height

    def advance(self, blocks: int = 1) -> int:
        """Move the height forward and return the new height."""
        if blocks < 0:
            raise ValueError(f"Cannot advance by a negative number of blocks: {blocks}")
        self._height += blocks
        return self._height

    def set(self, height: int) -> None:
        """Jump to an absolute height. Heights never move backwards."""
        if height < self._height:
            raise ValueError(
                f"Block height cannot move backwards: {self._height} -> {height}"
            )
        self._height = height


__all__ = [
    "BlockSource",
    "SystemBlockSource",
    "ManualBlockSource",
]
