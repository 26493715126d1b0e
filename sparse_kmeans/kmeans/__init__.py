"""
Batch k-means clustering of sparse data points.
"""

from .config import KMeansConfig
from .errors import ClusteringError, ConfigurationError, EmptyClusterError
from .events import (
    ClusterObserver,
    LoggingObserver,
    PassCompleted,
    RecordingObserver,
    RunCompleted,
)
from .kmeans import (
    BaseKMeans,
    BatchKMeans,
    CandidateState,
    Cluster,
    KMeansResult,
    SklearnKMeans,
    calculate_centroid,
    calculate_cluster_quality,
    calculate_partition_quality,
    initial_partition,
    nearest_centroid,
    reassignment_pass,
)

__all__ = [
    'KMeansConfig',
    'ClusteringError',
    'ConfigurationError',
    'EmptyClusterError',
    'ClusterObserver',
    'LoggingObserver',
    'PassCompleted',
    'RecordingObserver',
    'RunCompleted',
    'BaseKMeans',
    'BatchKMeans',
    'CandidateState',
    'Cluster',
    'KMeansResult',
    'SklearnKMeans',
    'calculate_centroid',
    'calculate_cluster_quality',
    'calculate_partition_quality',
    'initial_partition',
    'nearest_centroid',
    'reassignment_pass',
]
