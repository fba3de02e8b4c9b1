import math
import pytest
from tricount import build_csr, CSRGraph
from tricount.algorithms.launch import LaunchConfig, grid_size, triangle_upper_bound
from tricount.exceptions import KernelTimeoutError


@pytest.mark.parametrize(
    "num_nodes, block_size, expected",
    [(0, 256, 0), (1, 256, 1), (256, 256, 1), (257, 256, 2), (1000, 1, 1000), (10, 3, 4)],
)
def test_grid_size(num_nodes, block_size, expected):
    assert grid_size(num_nodes, block_size) == expected


@pytest.mark.parametrize("block_size", [0, -1])
def test_grid_size_rejects_non_positive_block(block_size):
    with pytest.raises(ValueError):
        grid_size(10, block_size)


def test_launch_config():
    launch = LaunchConfig.create(300, block_size=256, strategy="merge", counter_dtype="uint32")
    assert launch.num_blocks == 2
    assert launch.counter_dtype == "uint32"
    assert launch.deadline is None
    assert not launch.expired()
    launch.check_deadline()


def test_launch_config_deadline():
    launch = LaunchConfig(num_nodes=3, block_size=256, strategy="merge", deadline=0.0)
    assert launch.expired()
    with pytest.raises(KernelTimeoutError):
        launch.check_deadline()


def test_upper_bound_is_exact_for_complete_graphs():
    for n in (3, 4, 7):
        g = build_csr([(a, b) for a in range(n) for b in range(a)])
        assert triangle_upper_bound(g) == sum(math.comb(k, 2) for k in range(n))
        assert triangle_upper_bound(g) == math.comb(n, 3)


def test_upper_bound_of_graphs_without_wedges():
    assert triangle_upper_bound(CSRGraph.empty()) == 0
    assert triangle_upper_bound(build_csr([(0, 1), (2, 3)])) == 0
