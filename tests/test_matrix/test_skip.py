"""Tests for SymmetricSkipMatrix and its lock/unlock cycle."""

from __future__ import annotations

import numpy as np
import pytest
import scipy.linalg

from pyskyline.matrix import SymmetricMatrix, SymmetricSkipMatrix


class TestWithoutSkip:
    def test_behaves_like_symmetric_matrix(self, gvl_3x3, control):
        A = SymmetricSkipMatrix(gvl_3x3, control=control)
        np.testing.assert_array_equal(A.heights(), [0, 1, 2])
        np.testing.assert_array_equal(A.ip(), [0, 1, 2])
        A.utdu()
        np.testing.assert_array_equal(A.upper(), [2.0, 3.0, 4.0])
        np.testing.assert_array_equal(A.diagonal(), [10.0, 5.0, 1.0])
        b = [0.0, 0.0, 1.0]
        A.forward_substitution(b)
        A.back_substitution(b)
        np.testing.assert_allclose(b, [5.0, -4.0, 1.0])

    def test_locked_with_nothing_skipped(self, poisson, control):
        M, b, _, _ = poisson(4, 4)
        A = SymmetricSkipMatrix(M, control=control)
        A.lock()
        np.testing.assert_array_equal(A.ip(), np.arange(16))
        x = A.ldlt_solve(b.copy())
        np.testing.assert_allclose(x, scipy.linalg.solve(M, b), atol=1e-12)


class TestSkipMiddleRow:
    def test_layout_unchanged_by_skip(self, gvl_3x3, control):
        A = SymmetricSkipMatrix(gvl_3x3, control=control)
        A.skip(1)
        np.testing.assert_array_equal(A.heights(), [0, 1, 2])
        np.testing.assert_array_equal(A.offsets(), [0, 0, 1])
        np.testing.assert_array_equal(A.minima(), [0, 0, 0])
        np.testing.assert_array_equal(A.upper(), [20.0, 30.0, 80.0])
        np.testing.assert_array_equal(A.diagonal(), [10.0, 45.0, 171.0])
        # ip only changes on lock
        np.testing.assert_array_equal(A.ip(), [0, 1, 2])

    def test_lock_and_factor(self, gvl_3x3, control):
        A = SymmetricSkipMatrix(gvl_3x3, control=control)
        A.skip(1)
        A.lock()
        A.utdu()
        np.testing.assert_array_equal(A.skipped(), [False, True, False])
        np.testing.assert_array_equal(A.ip(), [0, 2, 2])
        # only the (0, 2) coupling is eliminated
        np.testing.assert_array_equal(A.upper(), [20.0, 3.0, 80.0])
        assert A.diagonal(0) == 10.0
        assert A.diagonal(1) == 45.0
        assert A.diagonal(2) == 81.0

    def test_solve_then_unlock(self, gvl_3x3, control):
        A = SymmetricSkipMatrix(gvl_3x3, control=control)
        A.skip(1)
        A.lock()
        A.utdu()
        b = [80.0, 5.0, 321.0]
        A.forward_substitution(b)
        A.back_substitution(b)
        A.unlock()
        np.testing.assert_allclose(b, [5.0, 5.0, 1.0])

    def test_matches_reduced_system(self, gvl_3x3, control):
        A = SymmetricSkipMatrix(gvl_3x3, control=control)
        A.skip(1)
        A.lock()
        b = A.ldlt_solve(np.array([80.0, 5.0, 321.0]))

        R = SymmetricMatrix([[10.0, 30.0], [30.0, 171.0]], control=control)
        r = R.ldlt_solve(np.array([80.0, 321.0]))
        np.testing.assert_allclose(b[[0, 2]], r)
        assert b[1] == 5.0

    def test_unlock_restores_values(self, gvl_3x3, control):
        A = SymmetricSkipMatrix(gvl_3x3, control=control)
        A.skip(1)
        A.lock()
        A.utdu()
        A.unlock()
        np.testing.assert_array_equal(A.upper(), [20.0, 30.0, 80.0])
        np.testing.assert_array_equal(A.diagonal(), [10.0, 45.0, 171.0])
        np.testing.assert_array_equal(A.ip(), [0, 1, 2])
        np.testing.assert_array_equal(A.skipped(), [False, True, False])

    def test_full_solve_after_unskip(self, gvl_3x3, control):
        A = SymmetricSkipMatrix(gvl_3x3, control=control)
        A.skip(1)
        A.lock()
        A.utdu()
        A.unlock()
        A.unskip(1)
        np.testing.assert_allclose(A.ldlt_solve([0.0, 0.0, 1.0]), [5.0, -4.0, 1.0])


class TestEliminateSkipped:
    def test_prescribed_middle_value(self, gvl_3x3, control):
        x_true = np.array([5.0, 5.0, 1.0])
        b = gvl_3x3 @ x_true
        A = SymmetricSkipMatrix(gvl_3x3, control=control)
        A.skip(1)
        A.lock()
        b[1] = 5.0
        A.eliminate_skipped(b)
        np.testing.assert_allclose(b, [80.0, 5.0, 321.0])
        A.ldlt_solve(b)
        A.unlock()
        np.testing.assert_allclose(b, x_true)

    def test_dirichlet_rows_on_poisson(self, poisson, control):
        M, _, _, _ = poisson(5, 4)
        n = M.shape[0]
        rng = np.random.default_rng(3)
        x_true = rng.standard_normal(n)
        b = M @ x_true
        fixed = [0, 5, 11, 19]

        A = SymmetricSkipMatrix(M, control=control)
        for i in fixed:
            A.skip(i)
        A.lock()
        for i in fixed:
            b[i] = x_true[i]
        A.eliminate_skipped(b)
        A.ldlt_solve(b)
        np.testing.assert_allclose(b, x_true, atol=1e-10)

        # a second lock with a different skip set reuses the same storage
        A.unlock()
        A.unskip(5)
        A.skip(7)
        A.lock()
        b = M @ x_true
        for i in (0, 7, 11, 19):
            b[i] = x_true[i]
        A.eliminate_skipped(b)
        A.ldlt_solve(b)
        A.unlock()
        np.testing.assert_allclose(b, x_true, atol=1e-10)
        np.testing.assert_array_equal(A.to_dense(), M)

    def test_requires_lock(self, gvl_3x3):
        A = SymmetricSkipMatrix(gvl_3x3)
        with pytest.raises(RuntimeError):
            A.eliminate_skipped([1.0, 2.0, 3.0])


class TestLockState:
    def test_skip_while_locked(self, gvl_3x3):
        A = SymmetricSkipMatrix(gvl_3x3)
        A.lock()
        with pytest.raises(RuntimeError):
            A.skip(0)
        with pytest.raises(RuntimeError):
            A.unskip(0)

    def test_double_lock(self, gvl_3x3):
        A = SymmetricSkipMatrix(gvl_3x3)
        A.lock()
        assert A.locked
        with pytest.raises(RuntimeError):
            A.lock()

    def test_unlock_when_unlocked(self, gvl_3x3):
        A = SymmetricSkipMatrix(gvl_3x3)
        with pytest.raises(RuntimeError):
            A.unlock()

    def test_skip_out_of_range(self, gvl_3x3):
        A = SymmetricSkipMatrix(gvl_3x3)
        with pytest.raises(IndexError):
            A.skip(3)
        with pytest.raises(IndexError):
            A.skip(-1)

    def test_skip_non_integer(self, gvl_3x3):
        A = SymmetricSkipMatrix(gvl_3x3)
        with pytest.raises(TypeError):
            A.skip(1.5)
        with pytest.raises(TypeError):
            A.unskip(1.9)
        np.testing.assert_array_equal(A.skipped(), [False, False, False])
        A.skip(np.int64(1))
        np.testing.assert_array_equal(A.skipped(), [False, True, False])

    def test_ip_trailing_skips(self):
        A = SymmetricSkipMatrix.from_heights([0, 1, 1, 1])
        A.skip(0)
        A.skip(3)
        A.lock()
        np.testing.assert_array_equal(A.ip(), [1, 1, 2, 4])
