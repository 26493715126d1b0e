"""
Configuration for batch k-means.
"""

from dataclasses import dataclass
import numbers

from .errors import ConfigurationError


@dataclass
class KMeansConfig:
    """
    Configuration for batch k-means clustering.

    Attributes:
        n_clusters: Number of clusters (k)
        max_iterations: Upper bound on reassignment passes
        tol: Minimum aggregate quality improvement for a pass to be accepted
    """
    n_clusters: int = 5
    """Number of clusters (k). Fixed for the lifetime of an engine."""

    max_iterations: int = 300
    """Maximum number of reassignment passes before giving up on convergence.
    The best partition found so far is kept when the bound is hit."""

    tol: float = 0.0
    """A candidate partition is rejected when the current quality minus the
    candidate quality falls below this value."""

    def __post_init__(self):
        """Validate configuration parameters."""
        if isinstance(self.n_clusters, bool) or not isinstance(self.n_clusters, numbers.Integral):
            raise ConfigurationError(
                f"n_clusters must be an integer, got {self.n_clusters!r}"
            )
        if self.n_clusters < 1:
            raise ConfigurationError(f"n_clusters must be >= 1, got {self.n_clusters}")
        self.n_clusters = int(self.n_clusters)
        if self.max_iterations < 1:
            raise ConfigurationError(
                f"max_iterations must be >= 1, got {self.max_iterations}"
            )
        if self.tol < 0:
            raise ConfigurationError(f"tol must be >= 0, got {self.tol}")
