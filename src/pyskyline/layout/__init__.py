"""Skyline envelope layout: heights, packed offsets and top-of-skyline rows."""

from pyskyline.layout._profile import SkylineProfile

__all__ = ["SkylineProfile"]
