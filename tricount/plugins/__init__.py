############################
# Execution backends
############################

from ..registry import has_cupy


def load():
    # Ensure we import all items we want registered
    from . import host, scipy

    if has_cupy:
        from . import cupy
