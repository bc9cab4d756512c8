"""External merge sort for binary files of keyed, variable-length records."""

__version__ = "0.1.0"