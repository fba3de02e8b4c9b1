from .exceptions import (
    TricountError,
    MalformedRecordError,
    InvariantViolation,
    CSRCapacityError,
    CounterOverflowError,
    BackendUnavailableError,
    KernelTimeoutError,
)
from .types import CSRGraph, AtomicCounter
from .translators import (
    build_csr,
    relabel_nodes,
    translate_edges2csr,
    translate_csr2scipy,
    translate_scipy2csr,
)
from .loader import load_graph, read_edge_list
from .config import Settings, KernelSettings, LoggingSettings
from .algorithms import (
    TriangleCountRun,
    available_backends,
    count_triangles,
    run_triangle_count,
)

__version__ = "0.1.0"
