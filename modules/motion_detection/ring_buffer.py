"""
Fixed-capacity circular store of past grayscale frames.
"""

from typing import List, Optional

import numpy as np


class RingBuffer:
    """Stores frames by sequence number modulo capacity.

    Reads are not checked for staleness: ``read(seq)`` returns whatever was
    last written to slot ``seq % capacity``, which is the frame for ``seq``
    only if no later sequence number with the same residue was written since.
    """

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError(f"Ring buffer capacity must be positive, got {capacity}")
        self._capacity = capacity
        self._slots: List[Optional[np.ndarray]] = [None] * capacity

    @property
    def capacity(self) -> int:
        return self._capacity

    def slot(self, seq: int) -> int:
        if seq < 0:
            raise ValueError(f"Sequence number must be non-negative, got {seq}")
        return seq % self._capacity

    def write(self, seq: int, frame: np.ndarray):
        # Copy so the caller can reuse its frame buffer
        self._slots[self.slot(seq)] = np.array(frame, copy=True)

    def read(self, seq: int) -> Optional[np.ndarray]:
        return self._slots[self.slot(seq)]

    def is_populated(self, seq: int) -> bool:
        return self._slots[self.slot(seq)] is not None

    def clear(self):
        self._slots = [None] * self._capacity

    def __len__(self) -> int:
        """Number of slots written at least once."""
        return sum(1 for frame in self._slots if frame is not None)
