"""
Batch K-Means Clustering for Sparse Data Points

Lloyd-style k-means over hash sparse vectors. Points start in a round-robin
partition and are reassigned in batch passes: every point moves to its
nearest centroid as computed at the start of the pass, and only then are the
centroids recomputed.

Objective: Q = Σ_c Σ_{p in c} ||p - centroid_c||²
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple, Union
import logging

import numpy as np
from sklearn.cluster import KMeans as SklearnKMeansAlgorithm

from ..data_loader import Instance, instances_to_matrix
from ..vector import HashSparseVector
from .config import KMeansConfig
from .errors import EmptyClusterError
from .events import ClusterObserver, LoggingObserver, PassCompleted, RunCompleted


logger = logging.getLogger(__name__)


# ============================================================================
# Cluster State
# ============================================================================

@dataclass
class Cluster:
    """
    One cluster of a partition.

    quality is the sum of member distances to the centroid, lower is tighter.
    """
    index: int
    centroid: HashSparseVector = field(default_factory=HashSparseVector.zero)
    members: List[Instance] = field(default_factory=list)
    quality: float = 0.0

    @property
    def size(self) -> int:
        return len(self.members)


@dataclass(frozen=True)
class CandidateState:
    """
    Partition proposed by one reassignment pass.

    It only becomes the engine's current partition when the caller promotes it.
    """
    clusters: Tuple[Cluster, ...]
    reassigned: int

    @property
    def quality(self) -> float:
        return calculate_partition_quality(self.clusters)


def calculate_centroid(members: Sequence[Instance]) -> HashSparseVector:
    """Mean of the member vectors. No members gives the zero vector."""
    centroid = HashSparseVector.zero()
    for inst in members:
        centroid.plus(inst.data)
    return centroid.scale_divide(len(members))


def calculate_cluster_quality(members: Sequence[Instance], centroid: HashSparseVector) -> float:
    quality = 0.0
    for inst in members:
        quality += centroid.distance_euclidean(inst.data)
    return quality


def calculate_partition_quality(clusters: Sequence[Cluster]) -> float:
    return sum(cluster.quality for cluster in clusters)


def nearest_centroid(
    centroids: Sequence[HashSparseVector],
    vector: HashSparseVector,
    known_index: Optional[int] = None,
    known_distance: Optional[float] = None
) -> Tuple[int, float]:
    """
    Find the centroid closest to vector.

    Centroids are scanned in index order and only a strictly smaller distance
    replaces the best so far. When known_index is given the scan starts from
    it, so a point tied with its current cluster stays put; otherwise ties go
    to the lowest index.

    Args:
        centroids: Candidate centroids
        vector: Point to place
        known_index: Centroid whose distance is already known
        known_distance: That distance, reused instead of recomputed

    Returns:
        (index, distance) of the nearest centroid
    """
    if known_index is None:
        best_index = -1
        best_distance = float('inf')
    else:
        best_index = known_index
        best_distance = known_distance

    for i, centroid in enumerate(centroids):
        if i == known_index:
            distance = known_distance
        else:
            distance = centroid.distance_euclidean(vector)

        if distance < best_distance:
            best_distance = distance
            best_index = i

    return best_index, best_distance


def _build_cluster(index: int, members: List[Instance], iteration: int) -> Cluster:
    if not members:
        raise EmptyClusterError(index, iteration)

    centroid = calculate_centroid(members)
    return Cluster(
        index=index,
        centroid=centroid,
        members=members,
        quality=calculate_cluster_quality(members, centroid),
    )


def initial_partition(instances: Sequence[Instance], n_clusters: int) -> Tuple[Cluster, ...]:
    """
    Round-robin partition: instances[i] goes to cluster i mod n_clusters.

    Raises:
        EmptyClusterError: If there are fewer instances than clusters
    """
    members: List[List[Instance]] = [[] for _ in range(n_clusters)]
    for i, inst in enumerate(instances):
        members[i % n_clusters].append(inst)

    return tuple(
        _build_cluster(index, cluster_members, iteration=0)
        for index, cluster_members in enumerate(members)
    )


def reassignment_pass(clusters: Sequence[Cluster], iteration: int = 1) -> CandidateState:
    """
    Perform one pass of batch k-means.

    Every member of every cluster is placed in the cluster whose current
    centroid is nearest. New centroids are computed only after all points are
    placed. The given clusters are not modified.

    Args:
        clusters: Current partition, indexed 0..k-1
        iteration: Pass number, reported in errors

    Returns:
        candidate: Proposed partition and the number of points that moved

    Raises:
        EmptyClusterError: If a cluster receives no points
    """
    k = len(clusters)
    centroids = [cluster.centroid for cluster in clusters]

    new_members: List[List[Instance]] = [[] for _ in range(k)]
    new_sums = [HashSparseVector.zero() for _ in range(k)]
    reassigned = 0

    for cluster in clusters:
        for inst in cluster.members:
            vector = inst.data

            # Distance to the current cluster is computed once and reused
            current_distance = cluster.centroid.distance_euclidean(vector)
            best_index, _ = nearest_centroid(
                centroids,
                vector,
                known_index=cluster.index,
                known_distance=current_distance,
            )

            if best_index != cluster.index:
                reassigned += 1

            new_members[best_index].append(inst)
            new_sums[best_index].plus(vector)

    candidates = []
    for index in range(k):
        members = new_members[index]
        if not members:
            raise EmptyClusterError(index, iteration)

        centroid = new_sums[index].scale_divide(len(members))
        candidates.append(Cluster(
            index=index,
            centroid=centroid,
            members=members,
            quality=calculate_cluster_quality(members, centroid),
        ))

    return CandidateState(clusters=tuple(candidates), reassigned=reassigned)


# ============================================================================
# Results
# ============================================================================

@dataclass
class KMeansResult:
    """
    Results from a clustering run.
    """
    labels: np.ndarray
    """Cluster index of each input point, in input order. Shape: (N,)"""

    clusters: Tuple[Cluster, ...]
    """Final clusters with centroids, members and qualities."""

    n_iter: int
    """Number of reassignment passes performed."""

    converged: bool
    """False when max_iterations was reached before a stop condition held."""

    @property
    def centroids(self) -> List[HashSparseVector]:
        return [cluster.centroid for cluster in self.clusters]

    @property
    def qualities(self) -> List[float]:
        return [cluster.quality for cluster in self.clusters]

    @property
    def quality(self) -> float:
        """Aggregate quality Q. Lower values indicate tighter clusters."""
        return calculate_partition_quality(self.clusters)

    def members(self, index: int) -> List[Instance]:
        return list(self.clusters[index].members)


def _labels_for(instances: Sequence[Instance], clusters: Sequence[Cluster]) -> np.ndarray:
    label_of: Dict[int, int] = {}
    for cluster in clusters:
        for inst in cluster.members:
            label_of[id(inst)] = cluster.index
    return np.array([label_of[id(inst)] for inst in instances], dtype=np.int64)


# ============================================================================
# Abstract Base Class (Interface)
# ============================================================================

class BaseKMeans(ABC):
    """
    Abstract base class for k-means clustering implementations.

    Implementations:
    - BatchKMeans: sparse batch k-means on hash vectors
    - SklearnKMeans: scikit-learn Lloyd iterations from the same starting
      partition, used to cross-check BatchKMeans

    All implementations:
    1. Accept a sequence of Instance objects
    2. Start from the round-robin partition
    3. Return KMeansResult with labels, clusters and convergence info
    """

    def __init__(self, config: Union[KMeansConfig, int]):
        """
        Args:
            config: Configuration, or just the number of clusters
        """
        if not isinstance(config, KMeansConfig):
            config = KMeansConfig(n_clusters=config)

        self.config = config
        self._fitted = False
        self._result: Optional[KMeansResult] = None

    @property
    def k(self) -> int:
        return self.config.n_clusters

    def fit(self, instances: Sequence[Instance]) -> 'BaseKMeans':
        """
        Cluster instances, keeping the result on the model.

        Returns:
            self (for method chaining)
        """
        self.fit_predict(instances)
        return self

    @abstractmethod
    def fit_predict(self, instances: Sequence[Instance]) -> KMeansResult:
        """
        Cluster instances and return complete results.
        """
        pass

    @property
    def result(self) -> KMeansResult:
        if not self._fitted or self._result is None:
            raise RuntimeError("Must call fit() before accessing the result")
        return self._result

    @property
    def labels(self) -> np.ndarray:
        return self.result.labels

    def predict(self, instances: Sequence[Instance]) -> np.ndarray:
        """
        Label each instance with its nearest fitted centroid.

        Returns:
            labels: Cluster assignments, shape (N,)

        Raises:
            RuntimeError: If called before fit()
        """
        if not self._fitted or self._result is None:
            raise RuntimeError(
                "Must call fit() before predict(). "
                "Or use fit_predict() to do both."
            )

        centroids = self._result.centroids
        return np.array(
            [nearest_centroid(centroids, inst.data)[0] for inst in instances],
            dtype=np.int64
        )

    def compute_quality(
        self,
        instances: Sequence[Instance],
        labels: np.ndarray,
        centroids: Optional[Sequence[HashSparseVector]] = None
    ) -> float:
        """
        Sum of squared distances from each instance to its labelled centroid.

        Args:
            instances: Data points
            labels: Cluster index per data point
            centroids: Cluster centers. If None, uses fitted centroids.
        """
        if centroids is None:
            centroids = self.result.centroids

        quality = 0.0
        for inst, label in zip(instances, labels):
            quality += centroids[int(label)].distance_euclidean(inst.data)
        return quality

    def _check_instances(self, instances: Sequence[Instance]) -> None:
        seen = set()
        for position, inst in enumerate(instances):
            if not isinstance(getattr(inst, 'data', None), HashSparseVector):
                raise TypeError(
                    f"item {position} is not an Instance with a HashSparseVector"
                )
            if id(inst) in seen:
                raise ValueError(f"instance at position {position} appears more than once")
            seen.add(id(inst))


# ============================================================================
# Batch Implementation
# ============================================================================

class BatchKMeans(BaseKMeans):
    """
    Batch k-means over sparse vectors.

    Example:
        >>> from sparse_kmeans.data_loader import instances_from_matrix
        >>> points = instances_from_matrix([[0.0], [1.0], [10.0], [11.0]])
        >>> engine = BatchKMeans(2)
        >>> result = engine.cluster(points)
        >>> result.labels
        array([0, 0, 1, 1])

    Not safe for concurrent cluster() calls on the same engine.
    """

    def __init__(
        self,
        config: Union[KMeansConfig, int],
        observer: Optional[ClusterObserver] = None
    ):
        """
        Args:
            config: Configuration, or just the number of clusters
            observer: Receives progress events. Defaults to LoggingObserver.

        Raises:
            ConfigurationError: If the configuration is invalid
        """
        super().__init__(config)
        self.observer = observer if observer is not None else LoggingObserver()
        self.clusters: Tuple[Cluster, ...] = tuple(Cluster(index=i) for i in range(self.k))

    @property
    def centroids(self) -> List[HashSparseVector]:
        return [cluster.centroid for cluster in self.clusters]

    @property
    def qualities(self) -> List[float]:
        return [cluster.quality for cluster in self.clusters]

    @property
    def quality(self) -> float:
        return calculate_partition_quality(self.clusters)

    def cluster(self, instances: Sequence[Instance]) -> KMeansResult:
        """
        Partition instances into k clusters.

        Input order matters: it fixes the initial round-robin partition.
        Passes repeat until a candidate partition fails to improve quality by
        at least tol, no point moves, or max_iterations passes have run.

        Returns:
            result: Final partition. Also kept on the engine (clusters,
                    centroids, labels).

        Raises:
            EmptyClusterError: If there are fewer points than clusters, or a
                               pass leaves a cluster empty
        """
        instances = list(instances)
        self._check_instances(instances)

        # The engine state is only replaced once the whole run succeeds
        current = initial_partition(instances, self.k)
        logger.debug(
            "Initial round-robin partition of %d points into %d clusters, quality %.6g",
            len(instances), self.k, calculate_partition_quality(current)
        )

        converged = False
        iteration = 0

        while iteration < self.config.max_iterations:
            iteration += 1
            candidate = reassignment_pass(current, iteration)

            new_quality = candidate.quality
            quality_delta = calculate_partition_quality(current) - new_quality

            promote = quality_delta >= self.config.tol and candidate.reassigned > 0

            self.observer.on_pass_completed(PassCompleted(
                iteration=iteration,
                reassigned=candidate.reassigned,
                quality_delta=quality_delta,
                quality=new_quality,
                promoted=promote,
                cluster_sizes=tuple(c.size for c in candidate.clusters),
            ))

            if not promote:
                converged = True
                break

            current = candidate.clusters

        self.clusters = current
        self._result = KMeansResult(
            labels=_labels_for(instances, current),
            clusters=current,
            n_iter=iteration,
            converged=converged,
        )
        self._fitted = True

        self.observer.on_run_completed(RunCompleted(
            iterations=iteration,
            quality=self.quality,
            converged=converged,
        ))

        return self._result

    def fit_predict(self, instances: Sequence[Instance]) -> KMeansResult:
        return self.cluster(instances)


# ============================================================================
# Sklearn Implementation
# ============================================================================

class SklearnKMeans(BaseKMeans):
    """
    Lloyd k-means using scikit-learn, seeded with the round-robin centroids.

    Runs on the CSR matrix of the instances. scikit-learn stops on label
    stability or centroid shift instead of aggregate quality, and relocates
    points into clusters that empty out, so results can differ from
    BatchKMeans on degenerate inputs.
    """

    def __init__(self, config: Union[KMeansConfig, int]):
        super().__init__(config)
        self._sklearn_kmeans: Optional[SklearnKMeansAlgorithm] = None

    def fit_predict(self, instances: Sequence[Instance]) -> KMeansResult:
        instances = list(instances)
        self._check_instances(instances)

        start = initial_partition(instances, self.k)
        matrix = instances_to_matrix(instances)
        dim = matrix.shape[1]
        init = np.vstack([cluster.centroid.to_dense(dim) for cluster in start])

        self._sklearn_kmeans = SklearnKMeansAlgorithm(
            n_clusters=self.k,
            init=init,
            n_init=1,
            max_iter=self.config.max_iterations,
            tol=self.config.tol,
            algorithm='lloyd',
        )
        self._sklearn_kmeans.fit(matrix)

        labels = self._sklearn_kmeans.labels_.astype(np.int64)
        members: List[List[Instance]] = [[] for _ in range(self.k)]
        for inst, label in zip(instances, labels):
            members[label].append(inst)

        clusters = []
        for index, center in enumerate(self._sklearn_kmeans.cluster_centers_):
            centroid = HashSparseVector.from_dense(center)
            clusters.append(Cluster(
                index=index,
                centroid=centroid,
                members=members[index],
                quality=calculate_cluster_quality(members[index], centroid),
            ))

        n_iter = int(self._sklearn_kmeans.n_iter_)
        self._result = KMeansResult(
            labels=labels,
            clusters=tuple(clusters),
            n_iter=n_iter,
            # sklearn sets n_iter_ = max_iter if it didn't converge
            converged=n_iter < self.config.max_iterations,
        )
        self._fitted = True

        return self._result
