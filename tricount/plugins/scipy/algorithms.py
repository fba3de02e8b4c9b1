import logging
import numpy as np
import scipy.sparse as ss

from ...exceptions import CounterOverflowError
from ...registry import concrete_kernel
from ...translators import translate_csr2scipy
from ...types import CSRGraph
from ...algorithms.launch import LaunchConfig

logger = logging.getLogger(__name__)


@concrete_kernel("scipy", strategies=("spgemm",))
def scipy_triangle_count(graph: CSRGraph, launch: LaunchConfig) -> int:
    """
    Masked sparse matrix product: with ``U`` the strictly upper triangle of
    the adjacency matrix, ``(U @ U)[i, j]`` counts the ``k`` with
    ``i < k < j`` adjacent to both, and masking by ``U`` keeps the pairs that
    close a triangle. Sequential; used as the reference result.
    """
    if launch.num_nodes == 0:
        return 0
    upper = ss.triu(translate_csr2scipy(graph).astype(np.int64), k=1, format="csr")
    count = int((upper @ upper).multiply(upper).sum())
    launch.check_deadline()
    limit = int(np.iinfo(launch.counter_dtype).max)
    if count > limit:
        raise CounterOverflowError(
            f"triangle count {count} exceeds the {launch.counter_dtype} counter (max {limit})"
        )
    return count
