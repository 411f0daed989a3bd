"""Diagonal and packed upper-triangular value buffers.

Two memory layouts are offered with identical behavior:

``"split"``
    separate buffers for the diagonal (length n) and the packed upper
    triangle (length ``size``).
``"single"``
    one buffer of length ``n + size``: the diagonal first, then the
    packed upper triangle.

Both expose ``diag`` and ``upper`` as views, so the factorization and
substitution kernels are written once against the views. Flat addressing
(``storage[k]``) follows the buffer layout: under ``"split"`` it covers
the upper buffer only, under ``"single"`` the whole concatenated buffer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Literal

StorageLayout = Literal["split", "single"]


class SkylineStorage(ABC):
    """Owner of the value buffers of one skyline matrix."""

    layout: str = ""

    def __init__(self, n: int, size: int, xp: Any, dtype: Any = None):
        self.n = n
        self.size = size
        self.xp = xp
        self.dtype = dtype if dtype is not None else xp.float64

    @property
    @abstractmethod
    def diag(self):
        """Diagonal view (length n)."""

    @property
    @abstractmethod
    def upper(self):
        """Packed upper-triangular view (length size)."""

    @property
    @abstractmethod
    def base(self) -> int:
        """Flat address of the first packed upper entry."""

    @property
    @abstractmethod
    def flat_size(self) -> int:
        """Number of flat addresses."""

    @abstractmethod
    def fill(self, value=0.0) -> None:
        """Set every stored value to ``value``."""

    def snapshot(self) -> tuple:
        """Return ``(diag, upper)`` copies for a later ``restore``."""
        return (self.xp.copy(self.diag), self.xp.copy(self.upper))

    def restore(self, saved: tuple) -> None:
        """Copy values from a ``snapshot`` back into the buffers."""
        diag, upper = saved
        self.diag[:] = diag
        self.upper[:] = upper

    @abstractmethod
    def _flat(self):
        ...

    def diagonal_address(self, i: int) -> int | None:
        """Flat address of diagonal entry i, or None if it has none."""
        return None

    def __getitem__(self, k: int):
        return self._flat()[k]

    def __setitem__(self, k: int, value) -> None:
        self._flat()[k] = value

    def __repr__(self) -> str:
        return f"{type(self).__name__}(n={self.n}, size={self.size}, backend={self.xp.name!r})"


class SplitStorage(SkylineStorage):
    """Separate diagonal and upper-triangular buffers."""

    layout = "split"

    def __init__(self, n: int, size: int, xp: Any, dtype: Any = None):
        super().__init__(n, size, xp, dtype)
        self._ad = xp.zeros((n,), dtype=self.dtype)
        self._au = xp.zeros((size,), dtype=self.dtype)

    @property
    def diag(self):
        return self._ad

    @property
    def upper(self):
        return self._au

    @property
    def base(self) -> int:
        return 0

    @property
    def flat_size(self) -> int:
        return self.size

    def fill(self, value=0.0) -> None:
        self._ad[:] = value
        self._au[:] = value

    def _flat(self):
        return self._au


class SingleArrayStorage(SkylineStorage):
    """One buffer: diagonal first, then the packed upper triangle."""

    layout = "single"

    def __init__(self, n: int, size: int, xp: Any, dtype: Any = None):
        super().__init__(n, size, xp, dtype)
        self._am = xp.zeros((n + size,), dtype=self.dtype)

    @property
    def diag(self):
        return self._am[:self.n]

    @property
    def upper(self):
        return self._am[self.n:]

    @property
    def base(self) -> int:
        return self.n

    @property
    def flat_size(self) -> int:
        return self.n + self.size

    def diagonal_address(self, i: int) -> int | None:
        return i

    def fill(self, value=0.0) -> None:
        self._am[:] = value

    def _flat(self):
        return self._am


_LAYOUTS = {
    "split": SplitStorage,
    "single": SingleArrayStorage,
}


def make_storage(
    layout: StorageLayout, n: int, size: int, xp: Any, dtype: Any = None
) -> SkylineStorage:
    """Allocate zeroed storage for n rows and ``size`` packed upper entries.

    Parameters
    ----------
    layout : {"split", "single"}
    n : int
    size : int
    xp : backend
    dtype : backend dtype, optional
        Defaults to the backend's float64.
    """
    try:
        cls = _LAYOUTS[layout]
    except KeyError:
        raise ValueError(
            f"Unknown storage layout: {layout!r}. Use 'split' or 'single'."
        ) from None
    return cls(n, size, xp, dtype)
