import time
import numpy as np
import pytest
from tricount import (
    AtomicCounter,
    BackendUnavailableError,
    CounterOverflowError,
    CSRGraph,
    InvariantViolation,
    KernelTimeoutError,
    build_csr,
    count_triangles,
)
from tricount.registry import find_plugins, registry


@pytest.fixture
def slow_backend():
    calls = []

    def slow_triangle_count(graph, launch):
        calls.append(launch)
        time.sleep(0.2)
        return 7

    registry.register("slow", slow_triangle_count, ("merge",))
    yield calls
    registry.unregister("slow")


def unsorted_graph():
    # triangle 0-1-2 with node 0's neighbors stored out of order
    return CSRGraph([0, 2, 4, 6], [2, 1, 0, 2, 0, 1])


def test_invariant_violation_is_fatal_before_launch(slow_backend):
    with pytest.raises(InvariantViolation):
        count_triangles(unsorted_graph(), backend="slow")
    assert slow_backend == []


def test_validation_can_be_skipped(slow_backend):
    assert count_triangles(unsorted_graph(), backend="slow", validate=False) == 7


def test_unknown_backend():
    with pytest.raises(BackendUnavailableError, match="not available"):
        count_triangles(build_csr([(0, 1)]), backend="no-such-backend")


def test_unsupported_strategy():
    with pytest.raises(ValueError, match="does not implement"):
        count_triangles(build_csr([(0, 1)]), backend="scipy", strategy="merge")


def test_invalid_block_size():
    with pytest.raises(ValueError, match="block_size"):
        count_triangles(build_csr([(0, 1)]), backend="host", block_size=0)


def test_invalid_counter_dtype():
    with pytest.raises(ValueError, match="counter_dtype"):
        count_triangles(build_csr([(0, 1)]), backend="host", counter_dtype="int8")


def test_late_result_is_discarded(slow_backend):
    with pytest.raises(KernelTimeoutError):
        count_triangles(build_csr([(0, 1)]), backend="slow", timeout=0.01)
    assert len(slow_backend) == 1


def test_result_within_timeout_is_kept(slow_backend):
    assert count_triangles(build_csr([(0, 1)]), backend="slow", timeout=30) == 7


def test_empty_graph_does_not_launch(slow_backend):
    assert count_triangles(CSRGraph.empty(), backend="slow") == 0
    assert slow_backend == []


def test_counter_overflow_fails_loudly(monkeypatch):
    import tricount.plugins.host.algorithms as host_algorithms

    class TinyCounter(AtomicCounter):
        def __init__(self, dtype="uint64"):
            super().__init__(dtype)
            self.max_value = 3

    find_plugins()
    monkeypatch.setattr(host_algorithms, "AtomicCounter", TinyCounter)
    k4 = build_csr([(a, b) for a in range(4) for b in range(a)])
    with pytest.raises(CounterOverflowError):
        count_triangles(k4, backend="host", block_size=1)


def test_zero_is_a_result_not_a_failure():
    g = build_csr([(0, 1), (1, 2), (2, 3), (3, 0)])
    assert count_triangles(g, backend="host") == 0
