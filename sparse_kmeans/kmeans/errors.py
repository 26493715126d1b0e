"""
Exceptions raised by the clustering engine.
"""


class ClusteringError(Exception):
    """Base class for clustering failures."""


class ConfigurationError(ClusteringError, ValueError):
    """Invalid engine configuration, e.g. a non-positive cluster count."""


class EmptyClusterError(ClusteringError):
    """
    A cluster ended up with no members, so its centroid is undefined.

    Raised at initialization when there are fewer data points than clusters,
    and after a reassignment pass that leaves a cluster empty.

    Attributes:
        cluster_index: Index of the empty cluster
        iteration: Pass number, 0 for the initial round-robin partition
    """

    def __init__(self, cluster_index: int, iteration: int):
        self.cluster_index = cluster_index
        self.iteration = iteration

        if iteration == 0:
            message = (
                f"cluster {cluster_index} is empty after initialization; "
                f"n_clusters must not exceed the number of data points"
            )
        else:
            message = f"cluster {cluster_index} became empty during pass {iteration}"
        super().__init__(message)
