"""
Sparse vector arithmetic used by the clustering engine.
"""

from .sparse_vector import HashSparseVector

__all__ = ['HashSparseVector']
