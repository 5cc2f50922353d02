"""File check toolkit: hashing, sizes, directory comparison and file search."""

__version__ = "0.1.0"

__all__ = ["__version__"]