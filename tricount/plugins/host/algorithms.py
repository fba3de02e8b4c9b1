import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed

from ...registry import concrete_kernel
from ...types import AtomicCounter, CSRGraph
from ...algorithms.intersection import INTERSECTIONS, vertex_triangles
from ...algorithms.launch import LaunchConfig

logger = logging.getLogger(__name__)


@concrete_kernel("host", strategies=tuple(INTERSECTIONS))
def host_triangle_count(graph: CSRGraph, launch: LaunchConfig) -> int:
    """
    One task per vertex on a thread pool.

    Lanes are grouped into ``launch.block_size`` blocks; each block is one
    executor job. Every lane adds its local count to the shared counter
    with a single fetch-and-add. The pool is drained before the counter is
    read.
    """
    intersect = INTERSECTIONS[launch.strategy]
    num_nodes = launch.num_nodes
    block_size = launch.block_size
    # plain lists: element access on numpy scalars is several times slower
    row_ptr = graph.row_ptr.tolist()
    edges = graph.edge_list.tolist()
    counter = AtomicCounter(launch.counter_dtype)
    stop = threading.Event()

    def run_block(block_id):
        first = block_id * block_size
        for lane in range(block_size):
            u = first + lane
            if u >= num_nodes or stop.is_set():
                return
            launch.check_deadline()
            found = vertex_triangles(u, row_ptr, edges, intersect)
            if found:
                counter.fetch_add(found)

    logger.debug(
        "host launch: %d blocks x %d lanes, strategy=%s",
        launch.num_blocks,
        block_size,
        launch.strategy,
    )
    with ThreadPoolExecutor(max_workers=launch.max_workers) as pool:
        futures = [pool.submit(run_block, b) for b in range(launch.num_blocks)]
        try:
            for future in as_completed(futures):
                future.result()
        except BaseException:
            stop.set()
            for future in futures:
                future.cancel()
            raise
    return counter.load()
