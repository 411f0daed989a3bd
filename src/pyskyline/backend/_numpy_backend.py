"""NumPy backend implementation."""

from __future__ import annotations

import numpy as np


class NumpyBackend:
    """Backend wrapping NumPy for skyline value buffers."""

    name = "numpy"
    float64 = np.float64
    float32 = np.float32
    int64 = np.int64

    # --- Array creation ---
    @staticmethod
    def array(data, dtype=None):
        return np.array(data, dtype=dtype)

    @staticmethod
    def zeros(shape, dtype=np.float64):
        return np.zeros(shape, dtype=dtype)

    # --- Array manipulation ---
    @staticmethod
    def copy(a):
        return np.copy(a)

    # --- Math operations ---
    @staticmethod
    def dot(a, b):
        return np.dot(a, b)

    @staticmethod
    def errstate():
        """Let zero pivots propagate as inf/NaN without RuntimeWarnings."""
        return np.errstate(divide="ignore", invalid="ignore")

    # --- Type checking ---
    @staticmethod
    def is_array(x):
        return isinstance(x, np.ndarray)

    @staticmethod
    def to_numpy(x):
        return np.asarray(x)
