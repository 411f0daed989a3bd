"""Backend abstraction: select NumPy or PyTorch storage for skyline values.

A matrix keeps the backend it was built with. Its value buffers, the
working copy of every right-hand side and the factor kernels all go
through that backend, so a solve never mixes tensors and ndarrays.
"""

from __future__ import annotations

from typing import Any, Literal

import numpy as np

BackendName = Literal["numpy", "torch"]

_DEFAULT_BACKEND: BackendName = "numpy"

# Cached backend instances
_backends: dict[str, Any] = {}


def get_backend(name: BackendName | None = None) -> Any:
    """Return a backend namespace providing array operations.

    Parameters
    ----------
    name : {"numpy", "torch"} or None
        Backend name. If None, returns the current default backend.

    Returns
    -------
    backend : NumpyBackend or TorchBackend
        Object exposing the buffer operations used by the skyline kernels.
    """
    if name is None:
        name = _DEFAULT_BACKEND

    if name not in _backends:
        if name == "numpy":
            from pyskyline.backend._numpy_backend import NumpyBackend
            _backends[name] = NumpyBackend()
        elif name == "torch":
            from pyskyline.backend._torch_backend import TorchBackend
            _backends[name] = TorchBackend()
        else:
            raise ValueError(f"Unknown backend: {name!r}. Use 'numpy' or 'torch'.")

    return _backends[name]


def set_backend(name: BackendName) -> None:
    """Set the default backend globally.

    Parameters
    ----------
    name : {"numpy", "torch"}
        Backend used when a matrix is built without an explicit backend.
    """
    global _DEFAULT_BACKEND
    if name not in ("numpy", "torch"):
        raise ValueError(f"Unknown backend: {name!r}. Use 'numpy' or 'torch'.")
    _DEFAULT_BACKEND = name


def array_namespace(*arrays: Any) -> Any:
    """Infer the backend from the input arrays.

    Used for the dense matrix handed to ``SymmetricMatrix`` and for the
    right-hand sides written back after a solve. A PyTorch tensor selects
    the torch backend and an ndarray the numpy backend. Nested lists and
    other sequences carry no backend of their own and get the default
    one (see ``set_backend``).

    Parameters
    ----------
    *arrays : array-like
        Input arrays to inspect.

    Returns
    -------
    backend : NumpyBackend or TorchBackend
    """
    for arr in arrays:
        if arr is None:
            continue
        module = type(arr).__module__
        if module.startswith("torch"):
            return get_backend("torch")
        if isinstance(arr, np.ndarray):
            return get_backend("numpy")

    return get_backend()
