"""Forward and back substitution against a UtDU factorization.

Both solves read the factors straight from skyline storage: L = U^T, so
the forward solve walks the same packed columns as the back solve.
"""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import NDArray

from pyskyline.layout._profile import SkylineProfile


def forward_substitution(
    profile: SkylineProfile,
    upper,
    b,
    *,
    xp: Any,
    active: NDArray | None = None,
):
    """Solve ``U^T z = b`` in place.

    Parameters
    ----------
    profile : SkylineProfile
    upper : array, shape (profile.size,)
        Packed unit upper-triangular factor.
    b : array, shape (n,)
        Right-hand side; overwritten by z.
    xp : backend
    active : bool ndarray, shape (n,), optional
        Rows of the reduced system. Entries of inactive rows are neither
        updated nor coupled into active rows.

    Returns
    -------
    b : array
        The same array, now holding z.
    """
    minima = profile.minima()
    offsets = profile.offsets()
    weights = None if active is None else xp.array(active, dtype=b.dtype)

    for i in range(1, profile.n):
        if active is not None and not active[i]:
            continue
        m = int(minima[i])
        if m == i:
            continue
        start = int(offsets[i])
        seg = b[m:i]
        if weights is not None:
            seg = seg * weights[m:i]
        b[i] -= xp.dot(upper[start:start + i - m], seg)
    return b


def back_substitution(
    profile: SkylineProfile,
    diag,
    upper,
    z,
    *,
    xp: Any,
    active: NDArray | None = None,
):
    """Solve ``D U x = z`` in place.

    The diagonal is divided out first, then U is inverted column by
    column from the last row up.

    Parameters
    ----------
    profile : SkylineProfile
    diag : array, shape (n,)
        D from the factorization.
    upper : array, shape (profile.size,)
        Packed unit upper-triangular factor.
    z : array, shape (n,)
        Output of ``forward_substitution``; overwritten by x.
    xp : backend
    active : bool ndarray, shape (n,), optional
        Rows of the reduced system.

    Returns
    -------
    z : array
        The same array, now holding x.
    """
    n = profile.n
    minima = profile.minima()
    offsets = profile.offsets()
    weights = None if active is None else xp.array(active, dtype=z.dtype)

    with xp.errstate():
        if active is None:
            z[:] = z / diag
        else:
            for j in np.flatnonzero(active):
                z[j] = z[j] / diag[j]

        for j in range(n - 1, 0, -1):
            if active is not None and not active[j]:
                continue
            m = int(minima[j])
            if m == j:
                continue
            start = int(offsets[j])
            step = z[j] * upper[start:start + j - m]
            if weights is not None:
                step = step * weights[m:j]
            z[m:j] -= step
    return z
