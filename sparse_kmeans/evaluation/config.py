"""
Evaluation Configuration

Configuration for comparing a partition with reference labels.
"""

from dataclasses import dataclass


@dataclass
class EvaluationConfig:
    """
    Configuration for Rand index calculation.

    Attributes:
        use_sampling: Whether to use sampled pairs (True) or all pairs (False)
        n_samples: Number of point pairs to sample
        random_seed: Random seed for reproducible sampling
    """
    use_sampling: bool = False
    """Use sampled pairs instead of all pairs (for large inputs)"""

    n_samples: int = 10000
    """Number of point pairs to sample (default: 10,000)"""

    random_seed: int = 42
    """Random seed for reproducible pair sampling"""

    def __post_init__(self):
        """Validate configuration."""
        if self.n_samples <= 0:
            raise ValueError(f"n_samples must be positive, got {self.n_samples}")
