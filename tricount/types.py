import threading
import numpy as np
import scipy.sparse as ss
from typing import Union

from .exceptions import CounterOverflowError, InvariantViolation

INDEX_DTYPE = np.dtype("uint32")
COUNTER_DTYPES = {
    "uint32": np.dtype("uint32"),
    "uint64": np.dtype("uint64"),
}


class CSRGraph:
    """
    CSRGraph stores an undirected graph in Compressed Sparse Row form.

    ``row_ptr`` holds ``num_nodes + 1`` offsets into ``edge_list``; the
    neighbors of node ``i`` are ``edge_list[row_ptr[i]:row_ptr[i + 1]]``.
    Every undirected edge is stored once from each endpoint, every neighbor
    slice is strictly ascending, and no node lists itself. The counting
    kernels rely on that ordering; ``validate`` checks it.

    Both arrays are made read-only on construction.
    """

    def __init__(self, row_ptr, edge_list):
        row_ptr = self._as_index_array(row_ptr, "row_ptr")
        edge_list = self._as_index_array(edge_list, "edge_list")
        self._assert(len(row_ptr) >= 1, "row_ptr must hold at least one offset")
        self._assert(row_ptr[0] == 0, f"row_ptr must start at 0, not {row_ptr[0]}")
        self._assert(
            row_ptr[-1] == len(edge_list),
            f"row_ptr ends at {row_ptr[-1]} but edge_list has {len(edge_list)} entries",
        )
        row_ptr.flags.writeable = False
        edge_list.flags.writeable = False
        self.row_ptr = row_ptr
        self.edge_list = edge_list

    @staticmethod
    def _assert(cond, msg):
        if not cond:
            raise InvariantViolation(msg)

    @classmethod
    def _as_index_array(cls, data, name):
        arr = np.asarray(data)
        cls._assert(arr.ndim == 1, f"{name} must be 1-dimensional, not {arr.ndim}-d")
        if arr.size and arr.dtype.kind not in "ui":
            raise InvariantViolation(f"{name} must hold integers, not {arr.dtype}")
        if arr.size and arr.dtype.kind == "i":
            cls._assert(arr.min() >= 0, f"{name} holds negative values")
        if arr.size:
            cls._assert(
                int(arr.max()) <= np.iinfo(INDEX_DTYPE).max,
                f"{name} holds values wider than {INDEX_DTYPE.name}",
            )
        return np.array(arr, dtype=INDEX_DTYPE, copy=True, order="C")

    @classmethod
    def empty(cls):
        return cls(np.zeros(1, dtype=INDEX_DTYPE), np.zeros(0, dtype=INDEX_DTYPE))

    @property
    def num_nodes(self) -> int:
        return len(self.row_ptr) - 1

    @property
    def num_edges(self) -> int:
        """Number of undirected edges (each is stored twice)."""
        return len(self.edge_list) // 2

    def degrees(self) -> np.ndarray:
        return np.diff(self.row_ptr.astype(np.int64))

    def neighbors(self, node: int) -> np.ndarray:
        if not 0 <= node < self.num_nodes:
            raise IndexError(f"node {node} out of range [0, {self.num_nodes})")
        return self.edge_list[self.row_ptr[node] : self.row_ptr[node + 1]]

    def row_ids(self) -> np.ndarray:
        """The owning node of every position in ``edge_list``."""
        return np.repeat(np.arange(self.num_nodes, dtype=np.int64), self.degrees())

    def validate(self, check_symmetry=True):
        n = self.num_nodes
        degrees = self.degrees()
        bad_rows = np.flatnonzero(degrees < 0)
        if len(bad_rows):
            raise InvariantViolation(
                f"row_ptr decreases after node {bad_rows[0]}: row_ptr must be non-decreasing"
            )
        if len(self.edge_list) == 0:
            return
        rows = self.row_ids()
        cols = self.edge_list.astype(np.int64)

        out_of_range = np.flatnonzero(cols >= n)
        if len(out_of_range):
            pos = out_of_range[0]
            raise InvariantViolation(
                f"node {rows[pos]} lists neighbor {cols[pos]} outside [0, {n})"
            )
        self_loops = np.flatnonzero(cols == rows)
        if len(self_loops):
            raise InvariantViolation(f"node {rows[self_loops[0]]} lists itself")
        same_row = rows[1:] == rows[:-1]
        unordered = np.flatnonzero(same_row & (cols[1:] <= cols[:-1]))
        if len(unordered):
            raise InvariantViolation(
                f"neighbors of node {rows[unordered[0]]} are not strictly ascending"
            )
        if check_symmetry:
            matrix = ss.csr_matrix(
                (np.ones(len(cols), dtype=np.int8), cols, self.row_ptr.astype(np.int64)),
                shape=(n, n),
            )
            asymmetric = (matrix != matrix.T).tocoo()
            if asymmetric.nnz:
                u, v = int(asymmetric.row[0]), int(asymmetric.col[0])
                raise InvariantViolation(
                    f"edge ({u}, {v}) is stored from one endpoint only"
                )

    def copy(self):
        return CSRGraph(self.row_ptr.copy(), self.edge_list.copy())

    def __repr__(self):
        return f"<CSRGraph num_nodes={self.num_nodes} num_edges={self.num_edges}>"

    @classmethod
    def assert_equal(cls, obj1, obj2):
        assert (
            obj1.num_nodes == obj2.num_nodes
        ), f"{obj1.num_nodes} nodes != {obj2.num_nodes} nodes"
        assert np.array_equal(
            obj1.row_ptr, obj2.row_ptr
        ), f"row_ptr mismatch: {obj1.row_ptr} != {obj2.row_ptr}"
        assert np.array_equal(
            obj1.edge_list, obj2.edge_list
        ), f"edge_list mismatch: {obj1.edge_list} != {obj2.edge_list}"


def counter_dtype(dtype: Union[str, np.dtype]) -> np.dtype:
    try:
        return COUNTER_DTYPES[np.dtype(dtype).name]
    except (KeyError, TypeError):
        raise ValueError(
            f"counter dtype must be one of {sorted(COUNTER_DTYPES)}, not {dtype!r}"
        ) from None


class AtomicCounter:
    """
    A shared triangle accumulator with a fixed width.

    All mutation goes through ``fetch_add``. An addition that does not fit in
    the width raises ``CounterOverflowError``; the counter never wraps.
    """

    def __init__(self, dtype="uint64"):
        self.dtype = counter_dtype(dtype)
        self.max_value = int(np.iinfo(self.dtype).max)
        self._value = 0
        self._lock = threading.Lock()

    def fetch_add(self, amount: int) -> int:
        with self._lock:
            previous = self._value
            total = previous + amount
            if total > self.max_value:
                raise CounterOverflowError(
                    f"triangle count exceeds the {self.dtype.name} counter "
                    f"(max {self.max_value})"
                )
            self._value = total
            return previous

    def load(self) -> int:
        with self._lock:
            return self._value
