"""
UAV Flight Simulation - Time Series Recording

Append-only (time, vector) series used by the supervisor to capture the
vehicle state and control input histories. Storage is a numpy buffer that
doubles when full, so appends are amortized O(1); reserve() pre-sizes it
when the number of frames is known in advance.
"""

import csv
import os
from typing import Optional, Sequence

import numpy as np

from .errors import ShapeMismatch

_INITIAL_CAPACITY = 64


class TimeSeriesRecord:
    """
    Growable append-only series of (t, values) pairs.

    Timestamps must be strictly increasing.

    Args:
        width: Length of each recorded vector
        capacity: Initial number of rows to allocate
    """

    def __init__(self, width: int, capacity: int = _INITIAL_CAPACITY):
        if width <= 0:
            raise ValueError(f"Record width must be positive, got {width}")
        self.width = width
        self._size = 0
        self._times = np.empty(max(capacity, 1))
        self._values = np.empty((max(capacity, 1), width))

    def __len__(self) -> int:
        return self._size

    @property
    def capacity(self) -> int:
        return self._times.shape[0]

    def reserve(self, n: int):
        """Ensure room for at least n rows in total."""
        if n <= self.capacity:
            return
        times = np.empty(n)
        values = np.empty((n, self.width))
        times[:self._size] = self._times[:self._size]
        values[:self._size] = self._values[:self._size]
        self._times = times
        self._values = values

    def append(self, t: float, values):
        """
        Append one sample.

        Raises:
            ShapeMismatch: If values does not have the record width
            ValueError: If t is not strictly greater than the last timestamp
        """
        row = np.asarray(values, dtype=np.float64).reshape(-1)
        if row.shape[0] != self.width:
            raise ShapeMismatch(self.width, row.shape)
        t = float(t)
        if self._size > 0 and not t > self._times[self._size - 1]:
            raise ValueError(
                f"Non-monotonic timestamp: t={t!r} after t={self._times[self._size - 1]!r}"
            )
        if self._size == self.capacity:
            self.reserve(2 * self.capacity)
        self._times[self._size] = t
        self._values[self._size] = row
        self._size += 1

    @property
    def times(self) -> np.ndarray:
        """Recorded timestamps, shape (N,). Read-only view."""
        view = self._times[:self._size]
        view.flags.writeable = False
        return view

    @property
    def values(self) -> np.ndarray:
        """Recorded vectors, shape (N, width). Read-only view."""
        view = self._values[:self._size]
        view.flags.writeable = False
        return view

    def to_csv(self, filename: str, header: Optional[Sequence[str]] = None):
        """Write the series to CSV, one row per sample with time first."""
        os.makedirs(os.path.dirname(filename) or '.', exist_ok=True)
        if header is None:
            header = [f'x{i}' for i in range(self.width)]
        if len(header) != self.width:
            raise ShapeMismatch(self.width, (len(header),))

        with open(filename, 'w', newline='') as fh:
            writer = csv.writer(fh)
            writer.writerow(['time'] + list(header))
            for i in range(self._size):
                writer.writerow([float(self._times[i])] + self._values[i].tolist())
