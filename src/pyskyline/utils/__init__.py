"""Utility functions."""

from pyskyline.utils._validation import (
    check_index,
    check_inexact,
    check_square,
    check_symmetric,
    check_vector,
)

__all__ = ["check_index", "check_inexact", "check_square", "check_symmetric", "check_vector"]
