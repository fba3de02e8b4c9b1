"""
Command line entry point: count the triangles of an edge-list file.

The count is the only thing written to stdout. A failed run prints no
count and exits non-zero, so it cannot be mistaken for a graph without
triangles.
"""
import argparse
import logging
import sys
import zlib
from dataclasses import replace

from .algorithms.triangle_count import available_backends, run_triangle_count
from .config import BACKENDS, STRATEGIES, Settings
from .exceptions import TricountError
from .loader import load_graph
from .logging_utils import setup_logging

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_RUN_FAILED = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tricount",
        description="Count triangles in an undirected graph given as a 'node node' edge list.",
    )
    parser.add_argument("path", nargs="?", help="edge-list file (.txt or .txt.gz)")
    parser.add_argument("--backend", choices=BACKENDS, help="execution backend")
    parser.add_argument("--strategy", choices=STRATEGIES, help="intersection strategy")
    parser.add_argument("--block-size", type=int, help="tasks per block (default 256)")
    parser.add_argument(
        "--counter-width",
        type=int,
        choices=[32, 64],
        help="bit width of the triangle counter (default 64)",
    )
    parser.add_argument("--timeout", type=float, help="seconds before the run is abandoned")
    parser.add_argument("--workers", type=int, help="host backend thread count")
    parser.add_argument(
        "--no-validate",
        action="store_true",
        help="skip the CSR invariant check before launching",
    )
    parser.add_argument(
        "--verify",
        action="store_true",
        help="recount with the scipy reference backend and fail on mismatch",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="console log level",
    )
    parser.add_argument(
        "--list-backends", action="store_true", help="print available backends and exit"
    )
    return parser


def _settings_from_args(args, environ=None) -> Settings:
    settings = Settings.from_env(environ)
    kernel = settings.kernel
    if args.backend is not None:
        kernel = replace(kernel, backend=args.backend)
    if args.strategy is not None:
        kernel = replace(kernel, strategy=args.strategy)
    if args.block_size is not None:
        kernel = replace(kernel, block_size=args.block_size)
    if args.counter_width is not None:
        kernel = replace(kernel, counter_dtype=f"uint{args.counter_width}")
    if args.timeout is not None:
        kernel = replace(kernel, timeout=args.timeout)
    if args.workers is not None:
        kernel = replace(kernel, max_workers=args.workers)
    if args.no_validate:
        kernel = replace(kernel, validate=False)
    log_settings = settings.logging
    if args.log_level is not None:
        log_settings = replace(log_settings, level=args.log_level)
    return Settings(kernel=kernel, logging=log_settings).check()


def main(argv=None, environ=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.list_backends:
        for name in available_backends():
            print(name)
        return EXIT_OK
    if args.path is None:
        parser.error("the following arguments are required: path")

    try:
        settings = _settings_from_args(args, environ)
    except ValueError as e:
        parser.print_usage(sys.stderr)
        print(f"tricount: error: {e}", file=sys.stderr)
        return EXIT_USAGE
    setup_logging(settings.logging)

    try:
        graph = load_graph(args.path)
    except (OSError, EOFError, zlib.error) as e:
        # truncated or corrupt gzip streams raise EOFError and zlib.error
        logger.error("cannot read %s: %s", args.path, e)
        return EXIT_USAGE
    except TricountError as e:
        logger.error("cannot build a graph from %s: %s", args.path, e)
        return EXIT_RUN_FAILED

    try:
        run = run_triangle_count(graph, settings=settings)
        if args.verify:
            expected = run_triangle_count(
                graph,
                backend="scipy",
                strategy="spgemm",
                validate=False,
                settings=settings,
            ).count
            if expected != run.count:
                logger.error(
                    "verification failed: %s counted %d, scipy counted %d",
                    run.backend,
                    run.count,
                    expected,
                )
                return EXIT_RUN_FAILED
    except TricountError as e:
        logger.error("triangle count failed: %s", e)
        return EXIT_RUN_FAILED
    except ValueError as e:
        logger.error("triangle count failed: %s", e)
        return EXIT_USAGE

    print(run.count)
    return EXIT_OK
