"""Shared test fixtures for pyskyline."""

from __future__ import annotations

import numpy as np
import pytest

from pyskyline.backend import get_backend
from pyskyline.matrix import SkylineControl


@pytest.fixture
def xp_numpy():
    """NumPy backend fixture."""
    return get_backend("numpy")


@pytest.fixture
def xp_torch():
    """PyTorch backend fixture (skips if torch not installed)."""
    pytest.importorskip("torch")
    return get_backend("torch")


@pytest.fixture(params=["split", "single"])
def control(request):
    """Both storage layouts; every test using it runs once per layout."""
    return SkylineControl(storage=request.param)


@pytest.fixture
def gvl_3x3():
    """Golub & Van Loan, Example 4.1.2: A = U^T D U with U = [[1,2,3],[0,1,4],[0,0,1]]."""
    return np.array([[10.0, 20.0, 30.0],
                     [20.0, 45.0, 80.0],
                     [30.0, 80.0, 171.0]])


@pytest.fixture
def pd_5x5_banded():
    """5x5 positive-definite matrix with a ragged skyline."""
    return np.array([[4.0, 1.0, 0.0, 0.0, 0.0],
                     [1.0, 5.0, 0.0, 2.0, 0.0],
                     [0.0, 0.0, 6.0, 1.0, 0.0],
                     [0.0, 2.0, 1.0, 7.0, 0.5],
                     [0.0, 0.0, 0.0, 0.5, 3.0]])


def poisson_dirichlet(nx, ny, f=None, east=None):
    """Assemble the 5-point Poisson system on the unit square.

    Interior unknowns are numbered row by row (k = j*nx + i) on a grid
    with nx by ny interior nodes. Dirichlet values are zero except on the
    east edge, where ``east(y)`` applies. The discrete equation is
    ``4 u_k - sum(neighbours) = -h^2 f``.

    Returns
    -------
    M : ndarray, shape (nx*ny, nx*ny)
    b : ndarray, shape (nx*ny,)
    x, y : ndarray, shape (nx*ny,)
        Node coordinates of each unknown.
    """
    f = f or (lambda x, y: 0.0)
    east = east or (lambda y: 0.0)
    hx = 1.0 / (nx + 1)
    hy = 1.0 / (ny + 1)
    n = nx * ny
    M = np.zeros((n, n))
    b = np.zeros(n)
    x = np.zeros(n)
    y = np.zeros(n)
    cx = 1.0 / hx**2
    cy = 1.0 / hy**2
    for j in range(ny):
        for i in range(nx):
            k = j * nx + i
            x[k] = (i + 1) * hx
            y[k] = (j + 1) * hy
            M[k, k] = 2.0 * cx + 2.0 * cy
            b[k] = -f(x[k], y[k])
            if i > 0:
                M[k, k - 1] = -cx
            if i < nx - 1:
                M[k, k + 1] = -cx
            else:
                b[k] += cx * east(y[k])
            if j > 0:
                M[k, k - nx] = -cy
            if j < ny - 1:
                M[k, k + nx] = -cy
    return M, b, x, y


@pytest.fixture
def poisson():
    """Factory fixture returning ``poisson_dirichlet``."""
    return poisson_dirichlet
