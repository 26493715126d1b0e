"""
Data point container and conversions to and from matrices.
"""

from typing import Any, Hashable, List, Optional, Sequence
import numpy as np
import scipy.sparse as sp

from ..vector import HashSparseVector


class Instance:
    """
    One data point: a sparse feature vector plus optional metadata.

    Instances compare and hash by identity, so two points with equal
    features are still two distinct members of a partition.

    Attributes:
        data: Feature vector
        target: Reference label (used by evaluation only)
        name: Free-form identifier, e.g. a document id
    """

    __slots__ = ('data', 'target', 'name')

    def __init__(
        self,
        data: HashSparseVector,
        target: Optional[Hashable] = None,
        name: Optional[str] = None
    ):
        if not isinstance(data, HashSparseVector):
            raise TypeError(
                f"data must be a HashSparseVector, got {type(data).__name__}"
            )
        self.data = data
        self.target = target
        self.name = name

    def __repr__(self) -> str:
        label = self.name if self.name is not None else hex(id(self))
        return f"Instance({label}, nnz={len(self.data)})"


def instances_from_matrix(
    matrix: Any,
    targets: Optional[Sequence[Hashable]] = None,
    names: Optional[Sequence[str]] = None
) -> List[Instance]:
    """
    Wrap every row of a matrix as an Instance.

    Args:
        matrix: Dense array of shape (N, features) or a scipy.sparse matrix
        targets: Optional reference label per row
        names: Optional identifier per row

    Returns:
        instances: One Instance per row, in row order

    Raises:
        ValueError: If matrix is not 2D or targets/names length mismatch
    """
    if sp.issparse(matrix):
        csr = sp.csr_matrix(matrix)
    else:
        array = np.asarray(matrix, dtype=np.float64)
        if array.ndim != 2:
            raise ValueError(f"matrix must be 2D (N, features), got shape {array.shape}")
        csr = sp.csr_matrix(array)

    n_rows = csr.shape[0]
    for label, values in (('targets', targets), ('names', names)):
        if values is not None and len(values) != n_rows:
            raise ValueError(
                f"{label} has {len(values)} entries, matrix has {n_rows} rows"
            )

    instances = []
    for i in range(n_rows):
        instances.append(Instance(
            HashSparseVector.from_scipy(csr.getrow(i)),
            target=targets[i] if targets is not None else None,
            name=names[i] if names is not None else None,
        ))
    return instances


def instances_to_matrix(
    instances: Sequence[Instance],
    dim: Optional[int] = None
) -> sp.csr_matrix:
    """
    Stack instance vectors into a CSR matrix of shape (N, dim).

    Args:
        instances: Data points
        dim: Number of columns. Defaults to the largest dimension present.
    """
    if dim is None:
        dim = max((inst.data.dimension() for inst in instances), default=0)

    rows, cols, values = [], [], []
    for row, inst in enumerate(instances):
        for index, value in inst.data.items():
            if index >= dim:
                raise ValueError(f"feature index {index} does not fit in dimension {dim}")
            rows.append(row)
            cols.append(index)
            values.append(value)

    return sp.csr_matrix(
        (
            np.asarray(values, dtype=np.float64),
            (np.asarray(rows, dtype=np.int64), np.asarray(cols, dtype=np.int64))
        ),
        shape=(len(instances), dim)
    )
