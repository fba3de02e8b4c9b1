import logging
import time
from functools import lru_cache

import numpy as np

from ...exceptions import BackendUnavailableError, CounterOverflowError
from ...registry import concrete_kernel, cuda_device_available, has_cupy
from ...types import CSRGraph
from ...algorithms.launch import LaunchConfig, triangle_upper_bound

logger = logging.getLogger(__name__)

_COUNTER_CTYPES = {
    "uint32": "unsigned int",
    "uint64": "unsigned long long",
}

# One thread per vertex u. Neighbors v > u are intersected with the part of
# u's list that follows v, so every triangle is seen once, from its smallest
# vertex. Matches are summed per thread and published with one atomicAdd.
TRIANGLE_COUNT_KERNEL_CODE = r'''
typedef COUNTER_T counter_t;

extern "C" __global__
void triangle_count_merge(
    const unsigned int* row_ptr,    // [num_nodes + 1] CSR offsets
    const unsigned int* edge_list,  // [row_ptr[num_nodes]] sorted neighbors
    counter_t* count,               // [1] Output: triangle count
    const unsigned int num_nodes
) {
    unsigned int u = blockIdx.x * blockDim.x + threadIdx.x;
    if (u >= num_nodes) return;

    unsigned int end = row_ptr[u + 1];
    counter_t found = 0;

    for (unsigned int i = row_ptr[u]; i < end; i++) {
        unsigned int v = edge_list[i];
        if (v <= u) continue;

        unsigned int a = i + 1;
        unsigned int b = row_ptr[v];
        unsigned int b_end = row_ptr[v + 1];
        while (a < end && b < b_end) {
            unsigned int x = edge_list[a];
            unsigned int y = edge_list[b];
            if (x < y) {
                a++;
            } else if (y < x) {
                b++;
            } else {
                found++;
                a++;
                b++;
            }
        }
    }

    if (found) atomicAdd(count, found);
}

extern "C" __global__
void triangle_count_binary_search(
    const unsigned int* row_ptr,
    const unsigned int* edge_list,
    counter_t* count,
    const unsigned int num_nodes
) {
    unsigned int u = blockIdx.x * blockDim.x + threadIdx.x;
    if (u >= num_nodes) return;

    unsigned int end = row_ptr[u + 1];
    counter_t found = 0;

    for (unsigned int i = row_ptr[u]; i < end; i++) {
        unsigned int v = edge_list[i];
        if (v <= u) continue;

        unsigned int lo = row_ptr[v];
        unsigned int b_end = row_ptr[v + 1];
        for (unsigned int a = i + 1; a < end && lo < b_end; a++) {
            unsigned int w = edge_list[a];
            unsigned int hi = b_end;
            while (lo < hi) {
                unsigned int mid = lo + (hi - lo) / 2;
                if (edge_list[mid] < w) {
                    lo = mid + 1;
                } else {
                    hi = mid;
                }
            }
            if (lo < b_end && edge_list[lo] == w) {
                found++;
                lo++;
            }
        }
    }

    if (found) atomicAdd(count, found);
}
'''

KERNEL_NAMES = {
    "merge": "triangle_count_merge",
    "binary_search": "triangle_count_binary_search",
}


if has_cupy:
    import cupy as cp

    _CUDA_ERRORS = (
        cp.cuda.runtime.CUDARuntimeError,
        cp.cuda.driver.CUDADriverError,
        cp.cuda.memory.OutOfMemoryError,
        cp.cuda.compiler.CompileException,
    )

    @lru_cache(maxsize=None)
    def _compile_kernel(strategy: str, counter_dtype: str):
        code = TRIANGLE_COUNT_KERNEL_CODE.replace(
            "COUNTER_T", _COUNTER_CTYPES[counter_dtype]
        )
        kernel = cp.RawKernel(code, KERNEL_NAMES[strategy])
        # force compilation here so compile errors surface before launch
        kernel.compile()
        logger.info("[TRIANGLE-KERNEL] compiled %s (%s counter)", kernel.name, counter_dtype)
        return kernel

    @concrete_kernel("cupy", strategies=tuple(KERNEL_NAMES))
    def cupy_triangle_count(graph: CSRGraph, launch: LaunchConfig) -> int:
        """
        One CUDA thread per vertex, ``launch.block_size`` threads per block.

        The counter width is checked up front against an upper bound on the
        count, since ``atomicAdd`` on the device wraps silently.
        """
        if launch.num_nodes == 0:
            return 0
        if not cuda_device_available():
            raise BackendUnavailableError("cupy is installed but no CUDA device is available")

        limit = int(np.iinfo(launch.counter_dtype).max)
        bound = triangle_upper_bound(graph)
        if bound > limit:
            raise CounterOverflowError(
                f"graph may hold up to {bound} triangles, more than the "
                f"{launch.counter_dtype} counter can represent (max {limit})"
            )

        try:
            kernel = _compile_kernel(launch.strategy, launch.counter_dtype)
            if launch.block_size > kernel.max_threads_per_block:
                raise ValueError(
                    f"block_size {launch.block_size} exceeds the device limit of "
                    f"{kernel.max_threads_per_block} threads per block"
                )

            row_ptr_gpu = cp.asarray(graph.row_ptr)
            # a zero-size allocation has no device pointer to pass
            edge_list = graph.edge_list
            if len(edge_list) == 0:
                edge_list = np.zeros(1, dtype=np.uint32)
            edge_list_gpu = cp.asarray(edge_list)
            count_gpu = cp.zeros(1, dtype=launch.counter_dtype)

            logger.debug(
                "cupy launch: %d blocks x %d threads, kernel=%s",
                launch.num_blocks,
                launch.block_size,
                kernel.name,
            )
            t0 = time.perf_counter()
            kernel(
                (launch.num_blocks,),
                (launch.block_size,),
                (row_ptr_gpu, edge_list_gpu, count_gpu, np.uint32(launch.num_nodes)),
            )
            cp.cuda.get_current_stream().synchronize()
            elapsed = time.perf_counter() - t0
            count = int(count_gpu.get()[0])
        except _CUDA_ERRORS as e:
            raise BackendUnavailableError(f"CUDA triangle count failed: {e}") from e

        launch.check_deadline()
        logger.info("[TRIANGLE-KERNEL] %d triangles in %.2fms", count, elapsed * 1000)
        return count
