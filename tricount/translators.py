import logging
import operator
import numpy as np
import scipy.sparse as ss
from typing import Iterable, Tuple

from .exceptions import CSRCapacityError, MalformedRecordError
from .types import CSRGraph, INDEX_DTYPE

logger = logging.getLogger(__name__)

_INT64 = np.iinfo(np.int64)
_MAX_INDEX = int(np.iinfo(INDEX_DTYPE).max)


def coerce_edge(record) -> Tuple[int, int]:
    """
    Read ``record`` as an ``(a, b)`` pair of integers.

    Accepts Python and numpy integers of any size. Bools, floats and strings
    are rejected so that a mis-parsed column never turns into a node id.
    """
    try:
        a, b = record
    except (TypeError, ValueError):
        raise MalformedRecordError(f"{record!r} is not a pair") from None
    endpoints = []
    for value in (a, b):
        if isinstance(value, (bool, np.bool_)):
            raise MalformedRecordError(f"{record!r} has a boolean endpoint")
        try:
            endpoints.append(operator.index(value))
        except TypeError:
            raise MalformedRecordError(f"{record!r} has a non-integer endpoint") from None
    return endpoints[0], endpoints[1]


def _edge_array(pairs: Iterable) -> np.ndarray:
    """
    ``(E, 2)`` array of the well-formed pairs: int64 when every id fits,
    otherwise an object array of Python ints.
    """
    if isinstance(pairs, np.ndarray) and pairs.ndim == 2 and pairs.shape[1] == 2:
        if pairs.dtype.kind in "iu" and pairs.dtype != np.uint64:
            return pairs.astype(np.int64, copy=False)
    good = []
    skipped = 0
    for record in pairs:
        try:
            good.append(coerce_edge(record))
        except MalformedRecordError:
            skipped += 1
    if skipped:
        logger.info("skipped %d malformed edge records", skipped)
    if not good:
        return np.empty((0, 2), dtype=np.int64)
    if all(_INT64.min <= v <= _INT64.max for pair in good for v in pair):
        return np.array(good, dtype=np.int64)
    # ids wider than int64 are only ever ranked, never stored
    return np.array(good, dtype=object).reshape(len(good), 2)


def relabel_nodes(pairs: Iterable) -> np.ndarray:
    """
    Sorted distinct external ids of all well-formed pairs; an external id's
    position in the result is its internal node id.
    """
    return np.unique(_edge_array(pairs))


def translate_edges2csr(pairs: Iterable) -> CSRGraph:
    """
    Build the canonical CSR form of an undirected edge collection.

    ``pairs`` is any iterable of ``(a, b)`` records (or an ``(E, 2)`` integer
    array). Node ids are assigned by rank of the sorted distinct endpoints,
    duplicates collapse, self-loops are dropped (their endpoints still become
    nodes), and malformed records are skipped.
    """
    edges = _edge_array(pairs)
    node_list = np.unique(edges)
    num_nodes = len(node_list)
    if num_nodes == 0:
        return CSRGraph.empty()
    if num_nodes > _MAX_INDEX:
        raise CSRCapacityError(f"{num_nodes} nodes do not fit {INDEX_DTYPE.name} ids")

    src = np.searchsorted(node_list, edges[:, 0])
    dst = np.searchsorted(node_list, edges[:, 1])
    keep = src != dst
    src, dst = src[keep], dst[keep]
    src, dst = np.concatenate([src, dst]), np.concatenate([dst, src])

    # one key per directed edge; unique() both sorts (row-major) and dedups
    keys = np.unique(src.astype(np.uint64) * np.uint64(num_nodes) + dst.astype(np.uint64))
    if len(keys) > _MAX_INDEX:
        raise CSRCapacityError(
            f"{len(keys)} edge endpoints do not fit {INDEX_DTYPE.name} offsets"
        )
    rows = (keys // np.uint64(num_nodes)).astype(np.int64)
    cols = (keys % np.uint64(num_nodes)).astype(INDEX_DTYPE)

    row_ptr = np.zeros(num_nodes + 1, dtype=np.int64)
    np.cumsum(np.bincount(rows, minlength=num_nodes), out=row_ptr[1:])
    graph = CSRGraph(row_ptr.astype(INDEX_DTYPE), cols)
    logger.debug(
        "built CSR graph: %d nodes, %d edges", graph.num_nodes, graph.num_edges
    )
    return graph


build_csr = translate_edges2csr


def translate_csr2scipy(graph: CSRGraph) -> ss.csr_matrix:
    n = graph.num_nodes
    return ss.csr_matrix(
        (
            np.ones(len(graph.edge_list), dtype=bool),
            graph.edge_list.astype(np.int64),
            graph.row_ptr.astype(np.int64),
        ),
        shape=(n, n),
    )


def translate_scipy2csr(matrix) -> CSRGraph:
    """
    CSR form of a square scipy sparse adjacency matrix.

    The matrix is read as undirected: any stored non-zero ``(i, j)`` makes
    ``i`` and ``j`` adjacent. The diagonal is dropped and every row is kept, so
    isolated nodes survive.
    """
    if not ss.issparse(matrix):
        raise TypeError(f"{matrix!r} must be a scipy sparse matrix")
    rows, cols = matrix.shape
    if rows != cols:
        raise ValueError(f"adjacency matrix must be square, not {rows}x{cols}")
    coo = ss.coo_matrix(matrix)
    keep = (coo.data != 0) & (coo.row != coo.col)
    src, dst = coo.row[keep], coo.col[keep]
    pattern = ss.csr_matrix(
        (
            np.ones(2 * len(src), dtype=bool),
            (np.concatenate([src, dst]), np.concatenate([dst, src])),
        ),
        shape=(rows, rows),
    )
    pattern.sum_duplicates()
    pattern.sort_indices()
    if pattern.nnz > _MAX_INDEX:
        raise CSRCapacityError(
            f"{pattern.nnz} edge endpoints do not fit {INDEX_DTYPE.name} offsets"
        )
    return CSRGraph(pattern.indptr, pattern.indices)


csr_to_scipy = translate_csr2scipy
scipy_to_csr = translate_scipy2csr
