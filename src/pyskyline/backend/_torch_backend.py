"""PyTorch backend implementation (optional dependency)."""

from __future__ import annotations

import contextlib
from typing import Any

import numpy as np


def _import_torch():
    """Lazy import of torch."""
    try:
        import torch
        return torch
    except ImportError as e:
        raise ImportError(
            "PyTorch is required for the torch backend. "
            "Install it with: pip install pyskyline[torch]"
        ) from e


class TorchBackend:
    """Backend wrapping PyTorch tensors for skyline value buffers."""

    name = "torch"

    def __init__(self, device: str = "cpu", dtype: Any = None):
        self._torch = _import_torch()
        self.device = device
        self.float64 = self._torch.float64
        self.float32 = self._torch.float32
        self.int64 = self._torch.int64
        self._default_dtype = dtype or self._torch.float64

    # --- Array creation ---
    def array(self, data, dtype=None):
        dtype = dtype or self._default_dtype
        if isinstance(data, self._torch.Tensor):
            return data.to(device=self.device, dtype=dtype).clone()
        if isinstance(data, np.ndarray):
            return self._torch.from_numpy(np.array(data)).to(device=self.device, dtype=dtype)
        return self._torch.tensor(data, dtype=dtype, device=self.device)

    def zeros(self, shape, dtype=None):
        dtype = dtype or self._default_dtype
        return self._torch.zeros(shape, dtype=dtype, device=self.device)

    # --- Array manipulation ---
    def copy(self, a):
        return a.clone()

    # --- Math operations ---
    def dot(self, a, b):
        if a.ndim == 1 and b.ndim == 1:
            return self._torch.dot(a, b)
        return a @ b

    def errstate(self):
        # torch never warns on division by zero
        return contextlib.nullcontext()

    # --- Type checking ---
    def is_array(self, x):
        return isinstance(x, self._torch.Tensor)

    def to_numpy(self, x):
        if isinstance(x, self._torch.Tensor):
            return x.detach().cpu().numpy()
        return np.asarray(x)
