"""Skyline matrix whose equations can be switched off without reallocating.

Rows are marked with ``skip`` while the matrix is unlocked. ``lock`` then
fixes the active set: the stored values are cached, ``ip`` is rebuilt,
and ``utdu`` and the substitutions work on the principal submatrix of the
active rows only. Values stored in skipped rows and columns are never
touched, and right-hand-side entries of skipped rows are left as they are
(they act as prescribed values). ``unlock`` puts the cached values back,
so the same matrix can be locked again with a different skip set.

Skipping the middle row of::

    [[10, 20, 30],
     [20, 45, 80],
     [30, 80, 171]]

factors ``[[10, 30], [30, 171]]``: the diagonal becomes ``[10, 45, 81]``
and the packed upper buffer ``[20, 3, 80]``.
"""

from __future__ import annotations

import logging

import numpy as np
from numpy.typing import NDArray

from pyskyline.matrix._symmetric import SymmetricMatrix
from pyskyline.utils._validation import check_index

logger = logging.getLogger(__name__)


class SymmetricSkipMatrix(SymmetricMatrix):
    """``SymmetricMatrix`` with per-row skip flags and a lock/unlock cycle.

    Parameters
    ----------
    M : array-like, shape (n, n)
        Dense symmetric matrix.
    control : SkylineControl, optional
    """

    def _setup(self, profile, control, xp) -> None:
        super()._setup(profile, control, xp)
        self._skip = np.zeros(profile.n, dtype=bool)
        self._ip = np.arange(profile.n, dtype=np.int64)
        self._locked = False
        self._saved = None

    @property
    def locked(self) -> bool:
        return self._locked

    def skip(self, i: int) -> None:
        """Exclude row i from the next locked factorization."""
        self._require_unlocked("skip")
        self._skip[check_index(i, self.n)] = True

    def unskip(self, i: int) -> None:
        """Include row i again."""
        self._require_unlocked("unskip")
        self._skip[check_index(i, self.n)] = False

    def skipped(self) -> NDArray:
        return self._skip.copy()

    def ip(self) -> NDArray:
        """For each row, the first active row at or after it (n if none).

        The identity while unlocked.
        """
        return self._ip.copy()

    def lock(self) -> None:
        """Fix the skip set and cache the stored values."""
        if self._locked:
            raise RuntimeError("matrix is already locked")
        n = self.n
        ip = np.empty(n, dtype=np.int64)
        nxt = n
        for i in range(n - 1, -1, -1):
            if not self._skip[i]:
                nxt = i
            ip[i] = nxt
        self._ip = ip
        self._saved = self._storage.snapshot()
        self._locked = True
        logger.debug("lock: %d of %d rows active", n - int(self._skip.sum()), n)

    def unlock(self) -> None:
        """Restore the values cached by ``lock``."""
        if not self._locked:
            raise RuntimeError("matrix is not locked")
        self._storage.restore(self._saved)
        self._saved = None
        self._ip = np.arange(self.n, dtype=np.int64)
        self._locked = False
        logger.debug("unlock: values restored")

    def eliminate_skipped(self, b):
        """Move the coupling of skipped unknowns into the right-hand side.

        Skipped entries of ``b`` hold the prescribed values of their
        unknowns. For every active row r coupled to a skipped row s,
        ``b[r] -= A[r, s] * b[s]`` with A the matrix as it was when
        locked. Call before the substitutions; ``b`` is overwritten and
        returned.
        """
        if not self._locked:
            raise RuntimeError("eliminate_skipped requires a locked matrix")
        work = self._rhs(b)
        xp = self._xp
        _, upper = self._saved
        active = self._active()
        weights = xp.array(active, dtype=work.dtype)
        minima = self._profile.minima()
        offsets = self._profile.offsets()

        for s in np.flatnonzero(self._skip):
            value = work[s]
            m = int(minima[s])
            if m < s:
                col = upper[self._profile.column(s)]
                work[m:s] -= col * value * weights[m:s]
            for k in np.flatnonzero(minima[s + 1:] <= s) + (s + 1):
                if active[k]:
                    work[k] -= upper[int(offsets[k] + s - minima[k])] * value
        return self._write_back(b, work)

    def _active(self) -> NDArray | None:
        if not self._locked:
            return None
        return self._ip == np.arange(self.n)

    def _require_unlocked(self, what: str) -> None:
        if self._locked:
            raise RuntimeError(f"cannot {what} rows while the matrix is locked")
