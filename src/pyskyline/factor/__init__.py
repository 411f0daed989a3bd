"""In-place UtDU factorization and triangular solves over skyline storage."""

from pyskyline.factor._substitution import back_substitution, forward_substitution
from pyskyline.factor._utdu import utdu

__all__ = ["utdu", "forward_substitution", "back_substitution"]
