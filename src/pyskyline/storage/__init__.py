"""Value storage strategies for skyline matrices."""

from pyskyline.storage._storage import (
    SingleArrayStorage,
    SkylineStorage,
    SplitStorage,
    make_storage,
)

__all__ = ["SkylineStorage", "SplitStorage", "SingleArrayStorage", "make_storage"]
