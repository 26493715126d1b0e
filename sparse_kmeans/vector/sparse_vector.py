"""
Hash-backed sparse vector.

Stores only nonzero weights in a dict keyed by feature index. Provides the
arithmetic the k-means engine relies on: accumulation, division by a scalar
and squared Euclidean distance.
"""

from typing import Dict, Iterator, Optional, Tuple
import numpy as np
import scipy.sparse as sp


class HashSparseVector:
    """
    Sparse vector mapping feature index -> weight.

    Example:
        >>> v = HashSparseVector({0: 1.0, 5: 2.0})
        >>> w = HashSparseVector({5: 4.0})
        >>> v.plus(w)
        HashSparseVector({0: 1.0, 5: 6.0})
        >>> v.distance_euclidean(w)  # (1-0)^2 + (6-4)^2
        5.0
    """

    __slots__ = ('_data',)

    def __init__(self, data: Optional[Dict[int, float]] = None):
        self._data: Dict[int, float] = {}
        if data:
            for index, value in data.items():
                if value != 0.0:
                    self._data[int(index)] = float(value)

    @classmethod
    def zero(cls) -> 'HashSparseVector':
        """Empty vector (all weights zero)."""
        return cls()

    @classmethod
    def from_dense(cls, values) -> 'HashSparseVector':
        """
        Build from a 1-D array-like, keeping nonzero entries.

        Raises:
            ValueError: If values is not one-dimensional
        """
        array = np.asarray(values, dtype=np.float64)
        if array.ndim != 1:
            raise ValueError(f"values must be 1D, got shape {array.shape}")

        nonzero = np.flatnonzero(array)
        return cls({int(i): float(array[i]) for i in nonzero})

    @classmethod
    def from_scipy(cls, row) -> 'HashSparseVector':
        """
        Build from a single-row scipy.sparse matrix.

        Raises:
            ValueError: If row has more than one row
        """
        row = sp.csr_matrix(row)
        if row.shape[0] != 1:
            raise ValueError(f"expected a single row, got shape {row.shape}")

        vector = cls()
        # Duplicate entries in non-canonical input are summed
        for index, value in zip(row.indices, row.data):
            vector._add_weight(int(index), float(value))
        return vector

    def to_dense(self, dim: Optional[int] = None) -> np.ndarray:
        """
        Dense copy of the vector.

        Args:
            dim: Output length. Defaults to dimension().

        Raises:
            ValueError: If a stored index does not fit in dim
        """
        if dim is None:
            dim = self.dimension()
        if self._data and max(self._data) >= dim:
            raise ValueError(
                f"index {max(self._data)} does not fit in dimension {dim}"
            )

        dense = np.zeros(dim, dtype=np.float64)
        for index, value in self._data.items():
            dense[index] = value
        return dense

    def dimension(self) -> int:
        """One past the largest stored index, 0 when empty."""
        return max(self._data) + 1 if self._data else 0

    def get(self, index: int, default: float = 0.0) -> float:
        return self._data.get(index, default)

    def __getitem__(self, index: int) -> float:
        return self._data.get(index, 0.0)

    def __setitem__(self, index: int, value: float) -> None:
        if value == 0.0:
            self._data.pop(index, None)
        else:
            self._data[int(index)] = float(value)

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[int]:
        return iter(self._data)

    def items(self) -> Iterator[Tuple[int, float]]:
        return iter(self._data.items())

    def copy(self) -> 'HashSparseVector':
        clone = HashSparseVector()
        clone._data = dict(self._data)
        return clone

    def _add_weight(self, index: int, value: float) -> None:
        total = self._data.get(index, 0.0) + value
        if total == 0.0:
            self._data.pop(index, None)
        else:
            self._data[index] = total

    def plus(self, other: 'HashSparseVector', weight: float = 1.0) -> 'HashSparseVector':
        """
        In-place addition of weight * other.

        Returns:
            self: For chaining
        """
        for index, value in other._data.items():
            self._add_weight(index, weight * value)
        return self

    def add(self, other: 'HashSparseVector') -> 'HashSparseVector':
        """Functional addition; neither operand is modified."""
        return self.copy().plus(other)

    __add__ = add

    def scale_divide(self, n: float) -> 'HashSparseVector':
        """
        In-place division of every weight by n.

        An empty vector has nothing to divide and is left untouched, whatever n is.

        Raises:
            ZeroDivisionError: If n is zero and the vector has entries
        """
        if not self._data:
            return self
        if n == 0:
            raise ZeroDivisionError("cannot divide a nonzero sparse vector by zero")

        for index in self._data:
            self._data[index] /= n
        return self

    def dot(self, other: 'HashSparseVector') -> float:
        # Iterate the smaller of the two
        small, large = (self, other) if len(self) <= len(other) else (other, self)
        return sum(value * large._data.get(index, 0.0) for index, value in small._data.items())

    def l2_norm(self) -> float:
        return float(np.sqrt(sum(value * value for value in self._data.values())))

    def distance_euclidean(self, other: 'HashSparseVector') -> float:
        """
        Squared Euclidean distance to other.

        Computed over the union of stored indices. No square root is taken.
        """
        distance = 0.0
        for index, value in self._data.items():
            diff = value - other._data.get(index, 0.0)
            distance += diff * diff
        for index, value in other._data.items():
            if index not in self._data:
                distance += value * value
        return distance

    def __eq__(self, other) -> bool:
        if not isinstance(other, HashSparseVector):
            return NotImplemented
        return self._data == other._data

    __hash__ = None

    def __repr__(self) -> str:
        entries = ', '.join(f"{i}: {v!r}" for i, v in sorted(self._data.items()))
        return f"HashSparseVector({{{entries}}})"
