"""Example: solve a 2D Poisson problem with a skyline UtDU factorization.

The 5-point Laplacian on an m x m interior grid has a skyline of height m,
so only O(m^3) entries are stored instead of the m^4 of a dense matrix.
The right-hand side is chosen so that u = x^3 y (1 - y) is the exact
discrete solution.
"""
import os, sys
import numpy as np
np.set_printoptions(precision=4, suppress=True)
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from pyskyline.matrix import SkylineControl, SymmetricMatrix

m = 8
h = 1.0 / (m + 1)
n = m * m
M = np.zeros((n, n))
b = np.zeros(n)
u_exact = np.zeros(n)
for j in range(m):
    for i in range(m):
        k = j * m + i
        x, y = (i + 1) * h, (j + 1) * h
        u_exact[k] = x**3 * y * (1.0 - y)
        M[k, k] = 4.0
        b[k] = -h * h * (6.0 * x * y * (1.0 - y) - 2.0 * x**3)
        if i > 0:
            M[k, k - 1] = -1.0
        if i < m - 1:
            M[k, k + 1] = -1.0
        else:
            b[k] += y * (1.0 - y)  # east boundary u(1, y)
        if j > 0:
            M[k, k - m] = -1.0
        if j < m - 1:
            M[k, k + m] = -1.0

print("=" * 60)
print("  Skyline layout")
print("=" * 60)
A = SymmetricMatrix(M, control=SkylineControl(storage="single"))
print(f"\n  {A}")
print(f"  heights[:12] = {A.heights()[:12]}")
print(f"  stored upper entries: {A.size} (dense upper triangle: {n * (n - 1) // 2})")

print("\n" + "=" * 60)
print("  Factor and solve")
print("=" * 60)
A.utdu()
A.forward_substitution(b)
A.back_substitution(b)
print(f"\n  max |u - u_exact| = {np.max(np.abs(b - u_exact)):.2e}")
