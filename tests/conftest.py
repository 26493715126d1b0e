import sys
from pathlib import Path

import numpy as np
import pytest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from sparse_kmeans.data_loader import instances_from_matrix  # noqa: E402
from sparse_kmeans.kmeans import RecordingObserver  # noqa: E402


@pytest.fixture
def line_points():
    """Four 1-D points: two near 0, two near 10."""
    return instances_from_matrix([[0.0], [1.0], [10.0], [11.0]], names=['p0', 'p1', 'p2', 'p3'])


@pytest.fixture
def blobs():
    """
    Three well separated 2-D groups of 20 points each.

    Point i belongs to group i % 3, except every fifth point which belongs to
    the next group, so the round-robin start is mostly but not entirely right.
    """
    rng = np.random.RandomState(0)
    centers = np.array([[0.0, 0.0], [20.0, 0.0], [0.0, 20.0]])
    points, targets = [], []
    for i in range(60):
        group = i % 3 if i % 5 else (i + 1) % 3
        points.append(centers[group] + rng.normal(scale=0.5, size=2))
        targets.append(f"g{group}")
    return instances_from_matrix(np.array(points), targets=targets)


@pytest.fixture
def recorder():
    return RecordingObserver()
