"""
Partition Evaluator

Compares a clustering with reference labels (e.g. document categories):

- Rand index: fraction of point pairs on which the two labelings agree
  (both together or both apart). Exact over all pairs, or estimated from
  sampled pairs for large inputs.
- Adjusted Rand index: Rand index corrected for chance.
- Purity: share of points belonging to the majority reference label of
  their cluster.
"""

from typing import Dict, Hashable, Optional, Sequence
import numpy as np
from sklearn.metrics import adjusted_rand_score, rand_score
from sklearn.metrics.cluster import contingency_matrix

from ..data_loader import Instance
from ..kmeans import KMeansResult
from .config import EvaluationConfig


class PartitionEvaluator:
    """
    Scores a partition against reference labels.

    Example:
        >>> evaluator = PartitionEvaluator(EvaluationConfig())
        >>> result = BatchKMeans(3).cluster(instances)
        >>> scores = evaluator.evaluate(result, instances)
        >>> print(f"ARI: {scores['adjusted_rand_index']:.4f}")
    """

    def __init__(self, config: Optional[EvaluationConfig] = None):
        self.config = config or EvaluationConfig()

    @staticmethod
    def _encode(labels: Sequence[Hashable], targets: Sequence[Hashable]):
        if len(labels) != len(targets):
            raise ValueError(
                f"labels has {len(labels)} entries, targets has {len(targets)}"
            )
        if len(labels) < 2:
            raise ValueError("At least two points required")

        # Map arbitrary hashable labels to integer codes
        label_codes = {}
        target_codes = {}
        encoded_labels = np.array(
            [label_codes.setdefault(x, len(label_codes)) for x in labels], dtype=np.int64
        )
        encoded_targets = np.array(
            [target_codes.setdefault(x, len(target_codes)) for x in targets], dtype=np.int64
        )
        return encoded_labels, encoded_targets

    def _sample_pairs(self, n_points: int) -> np.ndarray:
        """
        Sample n_samples pairs of distinct points, with replacement.

        Uses a fixed random seed so the same input always gets the same pairs.
        """
        rng = np.random.RandomState(seed=self.config.random_seed)
        first = rng.randint(0, n_points, size=self.config.n_samples)
        # Draw the partner from the other n_points - 1 points, skipping over first
        second = rng.randint(0, n_points - 1, size=self.config.n_samples)
        second += second >= first
        return np.column_stack([first, second])

    def rand_index(self, labels: Sequence[Hashable], targets: Sequence[Hashable]) -> float:
        """
        Rand index in [0, 1], 1 meaning identical partitions.

        Raises:
            ValueError: If inputs differ in length or hold fewer than two points
        """
        labels, targets = self._encode(labels, targets)

        if not self.config.use_sampling:
            return float(rand_score(targets, labels))

        pairs = self._sample_pairs(len(labels))
        same_cluster = labels[pairs[:, 0]] == labels[pairs[:, 1]]
        same_target = targets[pairs[:, 0]] == targets[pairs[:, 1]]

        return float(np.mean(same_cluster == same_target))

    def adjusted_rand_index(self, labels: Sequence[Hashable], targets: Sequence[Hashable]) -> float:
        labels, targets = self._encode(labels, targets)
        return float(adjusted_rand_score(targets, labels))

    def purity(self, labels: Sequence[Hashable], targets: Sequence[Hashable]) -> float:
        labels, targets = self._encode(labels, targets)
        contingency = contingency_matrix(targets, labels)
        return float(contingency.max(axis=0).sum() / contingency.sum())

    def evaluate(self, result: KMeansResult, instances: Sequence[Instance]) -> Dict[str, float]:
        """
        Score a clustering result using each instance's target as reference.

        Args:
            result: Output of BatchKMeans.cluster() on instances
            instances: The clustered instances, in the same order

        Returns:
            scores: rand_index, adjusted_rand_index, purity and quality

        Raises:
            ValueError: If an instance has no target
        """
        targets = []
        for position, inst in enumerate(instances):
            if inst.target is None:
                raise ValueError(f"instance {position} has no target label")
            targets.append(inst.target)

        labels = result.labels.tolist()
        return {
            'rand_index': self.rand_index(labels, targets),
            'adjusted_rand_index': self.adjusted_rand_index(labels, targets),
            'purity': self.purity(labels, targets),
            'quality': result.quality,
        }
