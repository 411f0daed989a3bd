"""Symmetric matrix in skyline storage.

Only the diagonal and, for each column, the run of rows from the top of
the skyline down to the diagonal are stored. ``utdu`` factors the matrix
in place as U^T D U; the substitution methods then solve against the
factors any number of times.
"""

from __future__ import annotations

import logging
from typing import Any

import numpy as np
from numpy.typing import NDArray

from pyskyline.backend._array_api import array_namespace, get_backend
from pyskyline.factor._substitution import back_substitution, forward_substitution
from pyskyline.factor._utdu import utdu
from pyskyline.layout._profile import SkylineProfile, dense_values
from pyskyline.matrix._control import SkylineControl
from pyskyline.storage._storage import make_storage
from pyskyline.utils._validation import (
    check_index,
    check_inexact,
    check_symmetric,
    check_vector,
)

logger = logging.getLogger(__name__)


class SymmetricMatrix:
    """Symmetric matrix stored by skyline, factored as U^T D U.

    Parameters
    ----------
    M : array-like, shape (n, n)
        Dense symmetric matrix (nested sequence, ndarray or tensor). The
        envelope is taken from its lower triangle: in each row, entries
        before the first exact nonzero are not stored.
    control : SkylineControl, optional
        Storage layout, backend, dtype and checking options.

    Examples
    --------
    >>> A = SymmetricMatrix([[10., 20., 30.], [20., 45., 80.], [30., 80., 171.]])
    >>> A.heights()
    array([0, 1, 2])
    >>> A.ldlt_solve([0., 0., 1.])
    [5.0, -4.0, 1.0]
    """

    def __init__(self, M, *, control: SkylineControl | None = None):
        control = control or SkylineControl()
        A = dense_values(M)
        if control.check_symmetric and not check_symmetric(A):
            raise ValueError("M must be symmetric")
        xp = _select_backend(control, M)
        self._setup(SkylineProfile.from_dense(A), control, xp)

        n = self.n
        minima = self._profile.minima()
        packed = np.empty(self.size, dtype=A.dtype)
        for j in range(1, n):
            packed[self._profile.column(j)] = A[j, minima[j]:j]
        self._storage.diag[:] = xp.array(np.diagonal(A), dtype=self._storage.dtype)
        self._storage.upper[:] = xp.array(packed, dtype=self._storage.dtype)

    @classmethod
    def from_heights(cls, heights, *, control: SkylineControl | None = None):
        """Build an all-zero matrix with a known envelope.

        Parameters
        ----------
        heights : sequence of int
            Column heights; see ``SkylineProfile``.
        control : SkylineControl, optional
        """
        control = control or SkylineControl()
        obj = cls.__new__(cls)
        profile = SkylineProfile(heights, check=control.check_inputs)
        obj._setup(profile, control, _select_backend(control, None))
        return obj

    @classmethod
    def from_sparse(cls, A, *, control: SkylineControl | None = None):
        """Build from a ``scipy.sparse`` symmetric matrix (lower triangle used)."""
        import scipy.sparse

        control = control or SkylineControl()
        coo = scipy.sparse.coo_array(A)
        coo.sum_duplicates()
        profile = SkylineProfile.from_sparse(coo)
        xp = _select_backend(control, None)
        obj = cls.__new__(cls)
        obj._setup(profile, control, xp)

        rows = np.asarray(coo.row, dtype=np.int64)
        cols = np.asarray(coo.col, dtype=np.int64)
        data = np.asarray(coo.data)
        minima = profile.minima()
        offsets = profile.offsets()
        lower = (rows > cols) & (cols >= minima[rows])

        packed = np.zeros(profile.size, dtype=data.dtype)
        r, c = rows[lower], cols[lower]
        packed[offsets[r] + c - minima[r]] = data[lower]
        obj._storage.diag[:] = xp.array(coo.diagonal(), dtype=obj._storage.dtype)
        obj._storage.upper[:] = xp.array(packed, dtype=obj._storage.dtype)
        return obj

    def _setup(self, profile: SkylineProfile, control: SkylineControl, xp: Any) -> None:
        self._profile = profile
        self._control = control
        self._xp = xp
        self._storage = make_storage(
            control.storage, profile.n, profile.size, xp, control.dtype
        )
        logger.debug("%s: n=%d, %d stored upper entries, %s storage, %s backend",
                     type(self).__name__, profile.n, profile.size,
                     control.storage, xp.name)

    # --- Layout ---
    @property
    def profile(self) -> SkylineProfile:
        return self._profile

    @property
    def control(self) -> SkylineControl:
        return self._control

    @property
    def n(self) -> int:
        return self._profile.n

    @property
    def size(self) -> int:
        """Number of stored upper-triangular entries."""
        return self._profile.size

    @property
    def shape(self) -> tuple[int, int]:
        return (self.n, self.n)

    def rows(self) -> int:
        return self.n

    def cols(self) -> int:
        return self.n

    def heights(self) -> NDArray:
        return self._profile.heights()

    def offsets(self) -> NDArray:
        return self._profile.offsets()

    def minima(self) -> NDArray:
        return self._profile.minima()

    # --- Values ---
    def fill(self, value=0.0) -> None:
        """Set every stored value, keeping the envelope.

        Used to reassemble a new matrix with the same nonzero pattern.
        """
        self._storage.fill(value)

    def diagonal(self, i: int | None = None):
        """Copy of the diagonal, or the single entry ``i``."""
        if i is None:
            return self._xp.copy(self._storage.diag)
        return self._storage.diag[check_index(i, self.n)]

    def set_diagonal(self, i: int, value) -> None:
        self._storage.diag[check_index(i, self.n)] = value

    def upper(self):
        """Copy of the packed upper triangle, column by column."""
        return self._xp.copy(self._storage.upper)

    def lower(self):
        """Copy of the packed lower triangle, row by row.

        The matrix is symmetric, so this is the same buffer as ``upper``.
        """
        return self._xp.copy(self._storage.upper)

    def index(self, i: int, j: int) -> int | None:
        """Flat address of entry (i, j), or None when it has none.

        None means (i, j) lies outside the envelope, or that it is a
        diagonal entry under split storage, where the diagonal lives in its
        own buffer outside flat addressing; read it with ``diagonal(i)``.
        ``self[self.index(i, j)]`` reads entry (i, j) whenever the address
        is not None.
        """
        i = check_index(i, self.n, "row")
        j = check_index(j, self.n, "column")
        if i == j:
            return self._storage.diagonal_address(i)
        k = self._profile.index(i, j)
        if k is None:
            return None
        return self._storage.base + k

    def __getitem__(self, k: int):
        return self._storage[check_index(k, self._storage.flat_size)]

    def __setitem__(self, k: int, value) -> None:
        self._storage[check_index(k, self._storage.flat_size)] = value

    def get(self, i: int, j: int):
        """Value of entry (i, j); zero outside the envelope."""
        i = check_index(i, self.n, "row")
        j = check_index(j, self.n, "column")
        if i == j:
            return self._storage.diag[i]
        k = self._profile.index(i, j)
        if k is None:
            return 0.0
        return self._storage.upper[k]

    def to_dense(self) -> NDArray:
        """Dense NumPy copy of the stored symmetric values.

        Before ``utdu`` this is the original matrix; afterwards it mixes
        D on the diagonal with U above and U^T below it.
        """
        n = self.n
        diag = self._xp.to_numpy(self._storage.diag)
        upper = self._xp.to_numpy(self._storage.upper)
        minima = self._profile.minima()
        A = np.zeros((n, n), dtype=diag.dtype)
        A[np.arange(n), np.arange(n)] = diag
        for j in range(1, n):
            col = upper[self._profile.column(j)]
            A[minima[j]:j, j] = col
            A[j, minima[j]:j] = col
        return A

    # --- Factorization and solves ---
    def _active(self) -> NDArray | None:
        """Rows of the system being solved; None means all of them."""
        return None

    def utdu(self) -> None:
        """Factor in place: the diagonal becomes D, the upper triangle U.

        Raises
        ------
        numpy.linalg.LinAlgError
            Only when ``control.check_pivots`` is set and a pivot is singular.
        """
        utdu(
            self._profile,
            self._storage.diag,
            self._storage.upper,
            xp=self._xp,
            active=self._active(),
            check_pivots=self._control.check_pivots,
            pivot_tol=self._control.pivot_tol,
        )

    def forward_substitution(self, b):
        """Solve ``U^T z = b`` after ``utdu``; ``b`` is overwritten and returned."""
        work = self._rhs(b)
        forward_substitution(self._profile, self._storage.upper, work,
                             xp=self._xp, active=self._active())
        return self._write_back(b, work)

    def back_substitution(self, z):
        """Solve ``D U x = z`` after ``utdu``; ``z`` is overwritten and returned."""
        work = self._rhs(z)
        back_substitution(self._profile, self._storage.diag, self._storage.upper,
                          work, xp=self._xp, active=self._active())
        return self._write_back(z, work)

    def ldlt_solve(self, b):
        """Factor, then solve for a single right-hand side.

        For repeated solves against the same matrix call ``utdu`` once and
        then only the two substitution methods.
        """
        work = self._rhs(b)
        self.utdu()
        active = self._active()
        forward_substitution(self._profile, self._storage.upper, work,
                             xp=self._xp, active=active)
        back_substitution(self._profile, self._storage.diag, self._storage.upper,
                          work, xp=self._xp, active=active)
        return self._write_back(b, work)

    def _rhs(self, b):
        """Working array for right-hand side ``b``; ``b`` itself when possible."""
        if self._control.check_inputs:
            check_vector(b, self.n)
            check_inexact(b)
        if self._xp.is_array(b) and b.dtype == self._storage.dtype:
            return b
        return self._xp.array(array_namespace(b).to_numpy(b), dtype=self._storage.dtype)

    def _write_back(self, b, work):
        if work is b:
            return b
        values = self._xp.to_numpy(work)
        if isinstance(b, list):
            b[:] = values.tolist()
        else:
            b[:] = array_namespace(b).array(values, dtype=b.dtype)
        return b

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(n={self.n}, size={self.size}, "
                f"storage={self._control.storage!r}, backend={self._xp.name!r})")


def _select_backend(control: SkylineControl, M) -> Any:
    if control.backend is not None:
        return get_backend(control.backend)
    if M is None:
        return get_backend()
    return array_namespace(M)
