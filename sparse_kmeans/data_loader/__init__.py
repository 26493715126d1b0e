"""
Data points for clustering.

Components:
- Instance: a sparse feature vector with optional target label and name
- instances_from_matrix / instances_to_matrix: numpy and scipy.sparse bridges
- InstanceLoader: reads records from .json or .jsonl files

Example:
    >>> from sparse_kmeans.data_loader import InstanceLoader
    >>> instances = InstanceLoader('docs.jsonl').load()
"""

from .instance import Instance, instances_from_matrix, instances_to_matrix
from .json_loader import InstanceLoader

__all__ = [
    'Instance',
    'instances_from_matrix',
    'instances_to_matrix',
    'InstanceLoader',
]
