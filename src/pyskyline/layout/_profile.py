"""Skyline (envelope/profile) layout of a symmetric matrix.

Column j of the upper triangle is stored as the contiguous run of rows
``minima[j] .. j-1``; everything above that run is structurally zero and
stays zero through factorization. Runs are packed column after column, so
column j starts at ``offsets[j]`` in the upper-triangular buffer.

For the 3x3 matrix::

    [[10, 20, 30],
     [20, 45, 80],
     [30, 80, 171]]

the heights are ``[0, 1, 2]``, the offsets ``[0, 0, 1]`` and the packed
upper buffer holds ``[20, 30, 80]``.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from pyskyline.backend._array_api import array_namespace
from pyskyline.utils._validation import check_index, check_square


class SkylineProfile:
    """Per-row heights and the packed offsets/minima derived from them.

    Parameters
    ----------
    heights : sequence of int, length n
        ``heights[i]`` is the number of stored entries above the diagonal
        in column i. ``heights[0]`` must be 0 and ``heights[i] <= i``.
    check : bool
        Validate ``heights`` before deriving the layout.
    """

    def __init__(self, heights, *, check: bool = True):
        h = np.asarray(heights)
        if check:
            _check_heights(h)
        self._heights = h.astype(np.int64).reshape(-1)
        n = self._heights.shape[0]

        self._offsets = np.zeros(n, dtype=np.int64)
        if n > 1:
            self._offsets[1:] = np.cumsum(self._heights)[:-1]
        self._minima = np.arange(n, dtype=np.int64) - self._heights
        self._size = int(self._heights.sum())

    @classmethod
    def from_dense(cls, M) -> SkylineProfile:
        """Derive the envelope of a dense symmetric matrix.

        Row i is scanned left to right up to the diagonal; the first
        entry that is exactly nonzero fixes the top of column i. Only the
        lower triangle is inspected.

        Parameters
        ----------
        M : array-like, shape (n, n)
            Nested sequence, ndarray or tensor.

        Returns
        -------
        profile : SkylineProfile
        """
        A = dense_values(M)
        n = A.shape[0]
        heights = np.zeros(n, dtype=np.int64)
        for i in range(1, n):
            nz = np.flatnonzero(A[i, :i])
            if nz.size:
                heights[i] = i - nz[0]
        return cls(heights, check=False)

    @classmethod
    def from_sparse(cls, A) -> SkylineProfile:
        """Derive the envelope of a ``scipy.sparse`` symmetric matrix.

        Stored entries holding an exact zero do not widen the envelope.
        """
        import scipy.sparse

        coo = scipy.sparse.coo_array(A)
        n, m = coo.shape
        if n != m:
            raise ValueError(f"A must be square, got shape {coo.shape}")
        rows = np.asarray(coo.row, dtype=np.int64)
        cols = np.asarray(coo.col, dtype=np.int64)
        keep = (rows > cols) & (np.asarray(coo.data) != 0)

        top = np.arange(n, dtype=np.int64)
        np.minimum.at(top, rows[keep], cols[keep])
        return cls(np.arange(n, dtype=np.int64) - top, check=False)

    # --- Layout accessors (snapshots) ---
    @property
    def n(self) -> int:
        """Number of rows (and columns)."""
        return self._heights.shape[0]

    @property
    def size(self) -> int:
        """Number of stored upper-triangular entries."""
        return self._size

    @property
    def bandwidth(self) -> int:
        """Largest column height."""
        return int(self._heights.max()) if self.n else 0

    def heights(self) -> NDArray:
        return self._heights.copy()

    def offsets(self) -> NDArray:
        return self._offsets.copy()

    def minima(self) -> NDArray:
        return self._minima.copy()

    # --- Index mapping ---
    def column(self, j: int) -> slice:
        """Slice of the packed upper buffer holding column j."""
        start = int(self._offsets[j])
        return slice(start, start + int(self._heights[j]))

    def index(self, i: int, j: int) -> int | None:
        """Packed upper-buffer position of entry (i, j), or None.

        The pair may be given in either order. None is returned for the
        diagonal and for pairs above the top of the skyline.
        """
        i = check_index(i, self.n, "row")
        j = check_index(j, self.n, "column")
        if i > j:
            i, j = j, i
        if i == j or i < self._minima[j]:
            return None
        return int(self._offsets[j] + i - self._minima[j])

    def __eq__(self, other) -> bool:
        if not isinstance(other, SkylineProfile):
            return NotImplemented
        return np.array_equal(self._heights, other._heights)

    def __repr__(self) -> str:
        return f"SkylineProfile(n={self.n}, size={self.size}, bandwidth={self.bandwidth})"


def dense_values(M) -> NDArray:
    """Return a square NumPy view of a dense nested sequence, ndarray or tensor."""
    xp = array_namespace(M)
    A = np.asarray(xp.to_numpy(M))
    check_square(A, "M")
    return A


def _check_heights(h: NDArray) -> None:
    if h.ndim != 1:
        raise ValueError(f"heights must be 1-dimensional, got shape {h.shape}")
    if h.size == 0:
        return
    if not np.issubdtype(h.dtype, np.integer):
        if not np.all(np.equal(np.mod(h, 1), 0)):
            raise ValueError("heights must be integers")
    if np.any(h < 0):
        raise ValueError("heights must be non-negative")
    if h[0] != 0:
        raise ValueError(f"heights[0] must be 0, got {h[0]}")
    bad = np.flatnonzero(h > np.arange(h.size))
    if bad.size:
        i = int(bad[0])
        raise ValueError(f"heights[{i}] = {h[i]} exceeds the row index {i}")
