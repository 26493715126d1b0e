"""
sparse_kmeans - batch k-means clustering of sparse feature vectors.

Packages:
- vector: hash-backed sparse vectors
- data_loader: data points and loaders
- kmeans: the batch k-means engine
- evaluation: partition scores against reference labels
"""

from .vector import HashSparseVector
from .data_loader import Instance, InstanceLoader, instances_from_matrix
from .kmeans import BatchKMeans, KMeansConfig, KMeansResult

__version__ = "0.1.0"

__all__ = [
    'HashSparseVector',
    'Instance',
    'InstanceLoader',
    'instances_from_matrix',
    'BatchKMeans',
    'KMeansConfig',
    'KMeansResult',
]
