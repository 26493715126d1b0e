"""
Partition Evaluation Module

Scores a clustering against reference labels with the Rand index, the
adjusted Rand index and purity.

Example:
    >>> from sparse_kmeans.evaluation import PartitionEvaluator, EvaluationConfig
    >>>
    >>> evaluator = PartitionEvaluator(EvaluationConfig(use_sampling=True))
    >>> ri = evaluator.rand_index(result.labels, targets)
    >>> print(f"RI: {ri:.4f}")
"""

from .config import EvaluationConfig
from .partition_evaluator import PartitionEvaluator

__all__ = [
    'EvaluationConfig',
    'PartitionEvaluator',
]
