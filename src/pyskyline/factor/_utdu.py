"""Skyline-restricted Crout elimination: A = U^T D U.

U is unit upper triangular and overwrites the packed upper buffer, D
overwrites the diagonal. Row j is finished before row j+1 is started:

1. ``v[i] = U[i, j] * D[i]`` for i in column j's run,
2. ``D[j] -= sum_i U[i, j] * v[i]``,
3. for every later column k whose run reaches row j,
   ``U[j, k] = (A[j, k] - sum_i U[i, k] * v[i]) / D[j]``.

Sums only run over stored entries, so the work is bounded by the column
heights rather than n^3. There is no pivoting; a zero pivot yields inf/NaN
unless ``check_pivots`` is set.
"""

from __future__ import annotations

import logging
from typing import Any

import numpy as np
from numpy.typing import NDArray

from pyskyline.layout._profile import SkylineProfile

logger = logging.getLogger(__name__)


def utdu(
    profile: SkylineProfile,
    diag,
    upper,
    *,
    xp: Any,
    active: NDArray | None = None,
    check_pivots: bool = False,
    pivot_tol: float = 0.0,
) -> None:
    """Factor a skyline matrix in place.

    Parameters
    ----------
    profile : SkylineProfile
        Envelope of the matrix.
    diag : array, shape (n,)
        Diagonal; overwritten by D.
    upper : array, shape (profile.size,)
        Packed upper triangle; overwritten by U.
    xp : backend
    active : bool ndarray, shape (n,), optional
        Rows taking part in the elimination. The factorization is then
        that of the principal submatrix of the active rows; values stored
        in inactive rows and columns are left as they are.
    check_pivots : bool
        Raise instead of propagating a singular pivot.
    pivot_tol : float
        Pivots with magnitude ``<= pivot_tol`` count as singular.

    Raises
    ------
    numpy.linalg.LinAlgError
        Only with ``check_pivots``, on the first singular pivot.
    """
    n = profile.n
    minima = profile.minima()
    offsets = profile.offsets()

    v = xp.zeros((n,), dtype=diag.dtype)
    weights = None if active is None else xp.array(active, dtype=diag.dtype)

    rows = 0
    with xp.errstate():
        for j in range(n):
            if active is not None and not active[j]:
                continue
            rows += 1
            m = int(minima[j])
            start = int(offsets[j])

            # v below the top of column j is read by wider columns k
            v[:m] = 0.0
            if m < j:
                col = upper[start:start + j - m]
                v[m:j] = col * diag[m:j]
                if weights is not None:
                    v[m:j] = v[m:j] * weights[m:j]
                diag[j] -= xp.dot(col, v[m:j])

            if check_pivots:
                _check_pivot(diag[j], j, pivot_tol)

            for k in np.flatnonzero(minima[j + 1:] <= j) + (j + 1):
                if active is not None and not active[k]:
                    continue
                mk = int(minima[k])
                ok = int(offsets[k])
                ij = ok + j - mk
                s = xp.dot(upper[ok:ij], v[mk:j])
                upper[ij] = (upper[ij] - s) / diag[j]

    logger.debug("utdu: eliminated %d of %d rows (%d stored entries)",
                 rows, n, profile.size)


def _check_pivot(d, j: int, tol: float) -> None:
    value = float(d)
    if not np.isfinite(value) or abs(value) <= tol:
        raise np.linalg.LinAlgError(f"Singular pivot at row {j}: D[{j}] = {value}")
