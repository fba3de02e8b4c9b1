"""
Sorted-list intersection strategies used by the per-vertex counting task.

Each strategy counts the values common to ``edges[a_lo:a_hi]`` and
``edges[b_lo:b_hi]``, both strictly ascending slices of the same flat
neighbor array.
"""
from bisect import bisect_left


def merge_join_count(edges, a_lo, a_hi, b_lo, b_hi):
    """Two advancing cursors; O(len(a) + len(b)), sequential reads on both lists."""
    found = 0
    while a_lo < a_hi and b_lo < b_hi:
        a = edges[a_lo]
        b = edges[b_lo]
        if a < b:
            a_lo += 1
        elif b < a:
            b_lo += 1
        else:
            found += 1
            a_lo += 1
            b_lo += 1
    return found


def binary_search_count(edges, a_lo, a_hi, b_lo, b_hi):
    """
    Membership test of every ``a`` value in ``b`` by bisection;
    O(len(a) * log len(b)). Faster than the merge-join when ``a`` is much
    shorter than ``b``.
    """
    found = 0
    # the search window only ever shrinks: a is ascending
    for i in range(a_lo, a_hi):
        if b_lo >= b_hi:
            break
        w = edges[i]
        pos = bisect_left(edges, w, b_lo, b_hi)
        if pos < b_hi and edges[pos] == w:
            found += 1
            pos += 1
        b_lo = pos
    return found


INTERSECTIONS = {
    "merge": merge_join_count,
    "binary_search": binary_search_count,
}


def vertex_triangles(u, row_ptr, edges, intersect=merge_join_count):
    """
    Triangles ``{u, v, w}`` with ``u < v < w`` found by the task for ``u``.

    For every neighbor ``v > u`` the suffix of ``u``'s list just past ``v`` is
    intersected with ``v``'s list, so each triangle is found exactly once: at
    its smallest vertex, from its middle vertex.
    """
    start = row_ptr[u]
    end = row_ptr[u + 1]
    found = 0
    for i in range(start, end):
        v = edges[i]
        if v <= u:
            continue
        found += intersect(edges, i + 1, end, row_ptr[v], row_ptr[v + 1])
    return found
