import logging
import time
from dataclasses import dataclass, replace
from typing import Optional

import scipy.sparse as ss

from ..config import KernelSettings, Settings
from ..registry import cuda_device_available, find_plugins, registry
from ..translators import translate_scipy2csr
from ..types import CSRGraph
from .launch import LaunchConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TriangleCountRun:
    count: int
    backend: str
    strategy: str
    num_nodes: int
    num_blocks: int
    elapsed: float


def available_backends():
    return find_plugins().names()


def resolve_backend(name: str) -> str:
    find_plugins()
    if name == "auto":
        return "cupy" if "cupy" in registry and cuda_device_available() else "host"
    registry.get(name)
    return name


def _kernel_settings(settings: Optional[Settings], overrides) -> KernelSettings:
    kernel_settings = settings.kernel if settings is not None else KernelSettings()
    overrides = {k: v for k, v in overrides.items() if v is not None}
    kernel_settings = replace(kernel_settings, **overrides)
    errors = kernel_settings.validate_settings()
    if errors:
        raise ValueError("invalid kernel settings: " + "; ".join(errors))
    return kernel_settings


def run_triangle_count(
    graph,
    *,
    backend: Optional[str] = None,
    strategy: Optional[str] = None,
    block_size: Optional[int] = None,
    counter_dtype: Optional[str] = None,
    timeout: Optional[float] = None,
    max_workers: Optional[int] = None,
    validate: Optional[bool] = None,
    settings: Optional[Settings] = None,
) -> TriangleCountRun:
    """
    Count the triangles of ``graph`` once and describe the run.

    Keyword arguments override the matching field of ``settings.kernel``.
    A run either returns an exact count or raises: backend and device
    failures raise ``BackendUnavailableError``, a run past ``timeout`` raises
    ``KernelTimeoutError``, a count too wide for ``counter_dtype`` raises
    ``CounterOverflowError``. A zero count always means zero triangles.
    """
    kernel_settings = _kernel_settings(
        settings,
        dict(
            backend=backend,
            strategy=strategy,
            block_size=block_size,
            counter_dtype=counter_dtype,
            timeout=timeout,
            max_workers=max_workers,
            validate=validate,
        ),
    )
    if ss.issparse(graph):
        graph = translate_scipy2csr(graph)
    if not isinstance(graph, CSRGraph):
        raise TypeError(f"{graph!r} must be a CSRGraph or a scipy sparse matrix")
    if kernel_settings.validate:
        graph.validate()

    name = resolve_backend(kernel_settings.backend)
    supported = registry.strategies(name)
    chosen = kernel_settings.strategy or supported[0]
    if chosen not in supported:
        raise ValueError(
            f"backend {name!r} does not implement strategy {chosen!r}; choose from {list(supported)}"
        )

    launch = LaunchConfig.create(
        graph.num_nodes,
        block_size=kernel_settings.block_size,
        strategy=chosen,
        counter_dtype=kernel_settings.counter_dtype,
        timeout=kernel_settings.timeout,
        max_workers=kernel_settings.max_workers,
    )
    kernel = registry.get(name)
    t0 = time.perf_counter()
    count = 0 if graph.num_nodes == 0 else kernel(graph, launch)
    elapsed = time.perf_counter() - t0
    # finishing late is still a timeout: no result
    launch.check_deadline()

    logger.info(
        "counted %d triangles on %d nodes with %s/%s in %.3fs",
        count,
        graph.num_nodes,
        name,
        chosen,
        elapsed,
    )
    return TriangleCountRun(
        count=count,
        backend=name,
        strategy=chosen,
        num_nodes=graph.num_nodes,
        num_blocks=launch.num_blocks,
        elapsed=elapsed,
    )


def count_triangles(graph, **kwargs) -> int:
    return run_triangle_count(graph, **kwargs).count
