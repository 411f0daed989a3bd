"""Example: switch equations off and on without rebuilding the skyline.

Rows marked with ``skip`` are held at prescribed values. After ``lock``
the factorization covers only the remaining rows; ``unlock`` restores the
assembled matrix so a different set of rows can be prescribed next.
"""
import os, sys
import numpy as np
np.set_printoptions(precision=4, suppress=True)
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from pyskyline.matrix import SymmetricSkipMatrix

A_dense = np.array([[10.0, 20.0, 30.0],
                    [20.0, 45.0, 80.0],
                    [30.0, 80.0, 171.0]])
x_true = np.array([5.0, 5.0, 1.0])

A = SymmetricSkipMatrix(A_dense)

for fixed in ([1], [0], [2]):
    for i in fixed:
        A.skip(i)
    A.lock()

    b = A_dense @ x_true
    b[fixed] = x_true[fixed]
    A.eliminate_skipped(b)
    A.ldlt_solve(b)

    print(f"  prescribed rows {fixed}: ip = {A.ip()}, x = {b}")
    A.unlock()
    for i in fixed:
        A.unskip(i)
