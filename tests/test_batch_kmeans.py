import numpy as np
import pytest

from sparse_kmeans.data_loader import Instance, instances_from_matrix
from sparse_kmeans.kmeans import (
    BatchKMeans,
    ConfigurationError,
    EmptyClusterError,
    KMeansConfig,
    reassignment_pass,
)
from sparse_kmeans.vector import HashSparseVector


def _names(instances):
    return [inst.name for inst in instances]


def test_construction_allocates_empty_clusters():
    engine = BatchKMeans(3)

    assert engine.k == 3
    assert len(engine.clusters) == 3
    assert all(cluster.size == 0 for cluster in engine.clusters)
    assert all(len(centroid) == 0 for centroid in engine.centroids)
    assert engine.qualities == [0.0, 0.0, 0.0]


@pytest.mark.parametrize("k", [0, -2])
def test_non_positive_k_fails_fast(k):
    with pytest.raises(ConfigurationError):
        BatchKMeans(k)


def test_configuration_error_is_a_value_error():
    with pytest.raises(ValueError):
        BatchKMeans(KMeansConfig(n_clusters=0))


def test_two_groups_on_a_line(line_points, recorder):
    engine = BatchKMeans(2, observer=recorder)
    result = engine.cluster(line_points)

    assert _names(result.members(0)) == ['p0', 'p1']
    assert _names(result.members(1)) == ['p2', 'p3']
    assert result.centroids[0] == HashSparseVector({0: 0.5})
    assert result.centroids[1] == HashSparseVector({0: 10.5})
    assert result.labels.tolist() == [0, 0, 1, 1]
    assert result.converged
    assert result.n_iter == 2

    first, second = recorder.passes
    assert first.reassigned == 2
    assert first.promoted
    assert first.quality_delta == pytest.approx(99.0)
    assert second.reassigned == 0
    assert not second.promoted
    assert result.quality == pytest.approx(1.0)


def test_single_cluster_takes_everything(line_points, recorder):
    result = BatchKMeans(1, observer=recorder).cluster(line_points)

    assert result.labels.tolist() == [0, 0, 0, 0]
    assert result.centroids[0] == HashSparseVector({0: 5.5})
    assert all(event.reassigned == 0 for event in recorder.passes)
    assert result.n_iter == 1


def test_one_point_per_cluster_stops_on_first_pass(line_points, recorder):
    result = BatchKMeans(4, observer=recorder).cluster(line_points)

    assert result.labels.tolist() == [0, 1, 2, 3]
    assert result.n_iter == 1
    assert recorder.passes[0].reassigned == 0
    assert result.quality == 0.0


def test_empty_input_raises_empty_cluster_error():
    with pytest.raises(EmptyClusterError) as excinfo:
        BatchKMeans(1).cluster([])
    assert excinfo.value.iteration == 0
    assert excinfo.value.cluster_index == 0


def test_more_clusters_than_points_raises(line_points):
    with pytest.raises(EmptyClusterError) as excinfo:
        BatchKMeans(5).cluster(line_points)
    assert excinfo.value.cluster_index == 4


def test_duplicate_instance_is_rejected(line_points):
    with pytest.raises(ValueError):
        BatchKMeans(2).cluster(line_points + [line_points[0]])


def test_non_instance_input_is_rejected():
    with pytest.raises(TypeError):
        BatchKMeans(1).cluster([[1.0, 2.0]])


def test_partition_covers_input_exactly(blobs):
    result = BatchKMeans(3).cluster(blobs)

    members = [inst for i in range(3) for inst in result.members(i)]
    assert len(members) == len(blobs)
    assert {id(inst) for inst in members} == {id(inst) for inst in blobs}


def test_blobs_recover_groups(blobs, recorder):
    result = BatchKMeans(3, observer=recorder).cluster(blobs)

    expected = [int(inst.target[1]) for inst in blobs]
    assert result.labels.tolist() == expected
    assert recorder.passes[0].reassigned == 12
    assert result.converged


def test_quality_never_increases_across_promoted_passes(blobs, recorder):
    engine = BatchKMeans(3, observer=recorder)
    engine.cluster(blobs)

    promoted = [event for event in recorder.passes if event.promoted]
    assert promoted
    assert all(event.quality_delta >= 0 for event in promoted)
    qualities = [event.quality for event in promoted]
    assert qualities == sorted(qualities, reverse=True)


def test_extra_pass_at_fixed_point_changes_nothing(blobs):
    engine = BatchKMeans(3)
    engine.cluster(blobs)

    candidate = reassignment_pass(engine.clusters)

    assert candidate.reassigned == 0
    for old, new in zip(engine.centroids, candidate.clusters):
        np.testing.assert_allclose(old.to_dense(2), new.centroid.to_dense(2))


def test_max_iterations_returns_best_so_far(line_points, recorder):
    engine = BatchKMeans(KMeansConfig(n_clusters=2, max_iterations=1), observer=recorder)
    result = engine.cluster(line_points)

    assert not result.converged
    assert result.n_iter == 1
    # The single pass was an improvement and was kept
    assert result.labels.tolist() == [0, 0, 1, 1]
    assert recorder.runs[-1].converged is False


def test_tolerance_rejects_small_improvements(line_points, recorder):
    engine = BatchKMeans(KMeansConfig(n_clusters=2, tol=1000.0), observer=recorder)
    result = engine.cluster(line_points)

    # Round-robin start is kept: the 99.0 improvement is below tol
    assert result.labels.tolist() == [0, 1, 0, 1]
    assert result.converged
    assert not recorder.passes[0].promoted


def test_input_order_changes_start(line_points):
    reordered = [line_points[0], line_points[2], line_points[1], line_points[3]]
    result = BatchKMeans(2).cluster(reordered)

    # Already partitioned by the round-robin start: nothing moves
    assert result.labels.tolist() == [0, 1, 0, 1]
    assert result.n_iter == 1


def test_predict_uses_fitted_centroids(line_points):
    engine = BatchKMeans(2).fit(line_points)
    new_points = instances_from_matrix([[2.0], [9.0]])

    assert engine.predict(new_points).tolist() == [0, 1]
    assert engine.labels.tolist() == [0, 0, 1, 1]


def test_predict_before_fit_raises():
    with pytest.raises(RuntimeError):
        BatchKMeans(2).predict([Instance(HashSparseVector({0: 1.0}))])


def test_compute_quality_matches_result(blobs):
    engine = BatchKMeans(3)
    result = engine.fit_predict(blobs)

    assert engine.compute_quality(blobs, result.labels) == pytest.approx(result.quality)


def test_engine_can_be_rerun(line_points):
    engine = BatchKMeans(2)
    first = engine.cluster(list(reversed(line_points)))
    assert first.labels.tolist() == [0, 0, 1, 1]

    result = engine.cluster(line_points)

    assert result.labels.tolist() == [0, 0, 1, 1]
    assert sum(cluster.size for cluster in engine.clusters) == 4


def test_one_point_per_cluster_with_equal_vectors():
    points = instances_from_matrix([[0.0], [0.0], [5.0]])
    result = BatchKMeans(3).cluster(points)

    assert result.labels.tolist() == [0, 1, 2]
    assert result.n_iter == 1
    assert result.converged


def test_failed_run_leaves_previous_result_in_place(blobs):
    engine = BatchKMeans(3)
    good = engine.cluster(blobs)
    clusters_before = engine.clusters

    # The middle cluster {-1, 1} loses one point to each neighbour on pass 1
    emptying = instances_from_matrix([[-1.5], [-1.0], [1.5], [-1.5], [1.0], [1.5]])
    with pytest.raises(EmptyClusterError) as excinfo:
        engine.cluster(emptying)
    assert excinfo.value.cluster_index == 1
    assert excinfo.value.iteration == 1

    assert engine.clusters is clusters_before
    assert engine.result is good
    assert [cluster.size for cluster in engine.clusters] == [20, 20, 20]
    assert engine.predict(blobs).tolist() == good.labels.tolist()
