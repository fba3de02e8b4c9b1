import time
import numpy as np
from dataclasses import dataclass
from typing import Optional

from ..exceptions import KernelTimeoutError
from ..types import counter_dtype as resolve_counter_dtype


def grid_size(num_nodes: int, block_size: int) -> int:
    """Number of ``block_size`` blocks needed to give every node one lane."""
    if block_size <= 0:
        raise ValueError(f"block_size must be positive, not {block_size}")
    return (num_nodes + block_size - 1) // block_size


@dataclass(frozen=True)
class LaunchConfig:
    """Launch geometry and limits handed to a backend kernel."""
    num_nodes: int
    block_size: int
    strategy: str
    counter_dtype: str = "uint64"
    deadline: Optional[float] = None  # time.monotonic() value
    max_workers: Optional[int] = None

    @classmethod
    def create(
        cls,
        num_nodes,
        *,
        block_size,
        strategy,
        counter_dtype="uint64",
        timeout=None,
        max_workers=None,
    ):
        grid_size(num_nodes, block_size)
        deadline = None if timeout is None else time.monotonic() + timeout
        return cls(
            num_nodes=num_nodes,
            block_size=block_size,
            strategy=strategy,
            counter_dtype=resolve_counter_dtype(counter_dtype).name,
            deadline=deadline,
            max_workers=max_workers,
        )

    @property
    def num_blocks(self) -> int:
        return grid_size(self.num_nodes, self.block_size)

    def expired(self) -> bool:
        return self.deadline is not None and time.monotonic() > self.deadline

    def check_deadline(self):
        if self.expired():
            raise KernelTimeoutError("triangle count did not finish before the timeout")


def triangle_upper_bound(graph) -> int:
    """
    ``sum_u C(d+(u), 2)`` where ``d+(u)`` counts the neighbors of ``u``
    greater than ``u``. Every triangle is a pair of such neighbors of its
    smallest vertex, so the count can never exceed this.
    """
    if len(graph.edge_list) == 0:
        return 0
    rows = graph.row_ids()
    upper = graph.edge_list > rows
    d_plus = np.bincount(rows[upper], minlength=graph.num_nodes).astype(np.uint64)
    pairs = d_plus * (d_plus - np.uint64(1)) // np.uint64(2)
    pairs[d_plus == 0] = 0
    return int(np.sum(pairs, dtype=object))
