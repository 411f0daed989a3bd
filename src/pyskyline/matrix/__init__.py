"""Symmetric skyline matrices with UtDU factorization and solves."""

from pyskyline.matrix._control import SkylineControl
from pyskyline.matrix._skip import SymmetricSkipMatrix
from pyskyline.matrix._symmetric import SymmetricMatrix

__all__ = ["SkylineControl", "SymmetricMatrix", "SymmetricSkipMatrix"]
