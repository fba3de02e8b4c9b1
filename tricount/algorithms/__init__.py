from .launch import LaunchConfig, grid_size, triangle_upper_bound
from .triangle_count import (
    TriangleCountRun,
    available_backends,
    count_triangles,
    resolve_backend,
    run_triangle_count,
)
