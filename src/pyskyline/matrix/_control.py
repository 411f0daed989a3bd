"""Skyline matrix control structure.

In the spirit of a solver "control" struct, this dataclass configures how
a skyline matrix stores its values and how strictly it checks its inputs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal


@dataclass
class SkylineControl:
    """Control structure for skyline matrices.

    Attributes
    ----------
    storage : str
        Value layout: "split" (separate diagonal and upper buffers) or
        "single" (one buffer, diagonal first). Results are identical.
    backend : str or None
        "numpy" or "torch". None picks the backend from the input matrix,
        falling back to the global default.
    dtype : dtype or None
        Element type of the value buffers. None means the backend float64.
    check_inputs : bool
        Validate heights and right-hand-side lengths.
    check_symmetric : bool
        Reject dense inputs that are not symmetric.
    check_pivots : bool
        Raise numpy.linalg.LinAlgError on a singular pivot instead of
        letting inf/NaN propagate.
    pivot_tol : float
        Pivots with magnitude <= pivot_tol are singular (with check_pivots).
    """

    storage: Literal["split", "single"] = "split"
    backend: str | None = None
    dtype: Any = None
    check_inputs: bool = True
    check_symmetric: bool = False
    check_pivots: bool = False
    pivot_tol: float = 0.0
