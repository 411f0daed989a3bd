"""Input validation utilities."""

from __future__ import annotations

import operator

import numpy as np
from numpy.typing import NDArray


def check_symmetric(A: NDArray, tol: float = 1e-10) -> bool:
    """Check if a matrix is symmetric within tolerance."""
    if A.ndim != 2 or A.shape[0] != A.shape[1]:
        return False
    return np.allclose(A, A.T, atol=tol)


def check_2d(A: NDArray, name: str = "A") -> None:
    """Raise ValueError if A is not 2-dimensional."""
    if A.ndim != 2:
        raise ValueError(f"{name} must be 2-dimensional, got shape {A.shape}")


def check_square(A: NDArray, name: str = "A") -> None:
    """Raise ValueError if A is not square."""
    check_2d(A, name)
    if A.shape[0] != A.shape[1]:
        raise ValueError(f"{name} must be square, got shape {A.shape}")


def check_vector(b, n: int, name: str = "b") -> None:
    """Raise ValueError if b is not a sequence of length n."""
    shape = getattr(b, "shape", None)
    if shape is not None and len(shape) != 1:
        raise ValueError(f"{name} must be 1-dimensional, got shape {tuple(shape)}")
    if len(b) != n:
        raise ValueError(f"{name} must have length {n}, got {len(b)}")


def check_index(i: int, n: int, name: str = "index") -> int:
    """Return i as an int, raising IndexError unless 0 <= i < n.

    Negative indices are rejected rather than wrapped, and non-integers
    (floats included) raise TypeError rather than being truncated.
    """
    i = operator.index(i)
    if not 0 <= i < n:
        raise IndexError(f"{name} {i} out of range for size {n}")
    return i


def check_inexact(b, name: str = "b") -> None:
    """Raise TypeError if array b cannot hold a floating-point solution.

    Integer and boolean arrays are rejected, since a solution written back
    into them would be truncated. Plain sequences are accepted.
    """
    dtype = getattr(b, "dtype", None)
    if dtype is None:
        return
    if isinstance(dtype, np.dtype):
        inexact = np.issubdtype(dtype, np.inexact)
    else:
        # torch.dtype
        inexact = dtype.is_floating_point or dtype.is_complex
    if not inexact:
        raise TypeError(f"{name} must have a floating-point dtype, got {dtype}")
