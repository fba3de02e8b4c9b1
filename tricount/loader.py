"""
Edge-list text loader.

Reads whitespace-delimited ``node node`` records, one per line, as found in
SNAP-style ``.txt`` and ``.txt.gz`` graph dumps. Blank lines and ``#``
comment lines are ignored; columns after the second are ignored; records
whose first two columns are not integers are skipped.
"""
import gzip
import io
import logging
import os
from typing import Iterable, Iterator, Tuple, Union

from .translators import translate_edges2csr
from .types import CSRGraph

logger = logging.getLogger(__name__)

Source = Union[str, os.PathLike, io.TextIOBase]


def _is_decimal(token: str) -> bool:
    digits = token[1:] if token[:1] in ("+", "-") else token
    return digits.isascii() and digits.isdigit()


def parse_edge_line(line: str):
    """``(a, b)`` for a data line, ``None`` for blank, comment and malformed lines."""
    fields = line.split()
    if not fields or fields[0].startswith("#"):
        return None
    if len(fields) < 2 or not (_is_decimal(fields[0]) and _is_decimal(fields[1])):
        return None
    try:
        return int(fields[0]), int(fields[1])
    except ValueError:
        # past the interpreter's int string-conversion digit limit
        return None


def parse_edge_lines(lines: Iterable[str]) -> Iterator[Tuple[int, int]]:
    skipped = 0
    for lineno, line in enumerate(lines, 1):
        edge = parse_edge_line(line)
        if edge is not None:
            yield edge
        elif line.strip() and not line.lstrip().startswith("#"):
            skipped += 1
            logger.debug("skipping malformed record on line %d: %r", lineno, line)
    if skipped:
        logger.info("skipped %d malformed edge records", skipped)


def _open_text(path):
    if os.fspath(path).endswith(".gz"):
        return gzip.open(path, "rt", encoding="utf-8", errors="replace")
    return open(path, "r", encoding="utf-8", errors="replace")


def read_edge_list(source: Source) -> Iterator[Tuple[int, int]]:
    if hasattr(source, "read"):
        yield from parse_edge_lines(source)
        return
    with _open_text(source) as f:
        yield from parse_edge_lines(f)


def load_graph(source: Source) -> CSRGraph:
    graph = translate_edges2csr(read_edge_list(source))
    logger.info(
        "Graph parsed: %d nodes, %d edges.", graph.num_nodes, graph.num_edges
    )
    return graph
