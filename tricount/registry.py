import logging
from typing import Callable, Dict, Tuple

from .exceptions import BackendUnavailableError

logger = logging.getLogger(__name__)


class KernelRegistry:
    """
    Named triangle-counting backends.

    Each entry maps a backend name to its launch function and the
    intersection strategies it implements. Backends register themselves on
    import through ``concrete_kernel``; ``find_plugins`` imports them.
    """

    def __init__(self):
        self._kernels: Dict[str, Callable] = {}
        self._strategies: Dict[str, Tuple[str, ...]] = {}

    def register(self, name: str, func: Callable, strategies: Tuple[str, ...]):
        if name in self._kernels and self._kernels[name] is not func:
            raise ValueError(f"backend {name!r} is already registered")
        self._kernels[name] = func
        self._strategies[name] = tuple(strategies)
        logger.debug("registered backend %s (strategies: %s)", name, strategies)

    def unregister(self, name: str):
        self._kernels.pop(name, None)
        self._strategies.pop(name, None)

    def __contains__(self, name):
        return name in self._kernels

    def names(self):
        return sorted(self._kernels)

    def strategies(self, name: str) -> Tuple[str, ...]:
        self.get(name)
        return self._strategies[name]

    def get(self, name: str) -> Callable:
        try:
            return self._kernels[name]
        except KeyError:
            raise BackendUnavailableError(
                f"backend {name!r} is not available; registered backends: {self.names()}"
            ) from None


# Use this as the lookup object for backends
registry = KernelRegistry()


def concrete_kernel(name: str, strategies=("merge", "binary_search")):
    def decorator(func):
        registry.register(name, func, strategies)
        return func

    return decorator


def find_plugins():
    # Ensure we import all items we want registered
    from . import plugins

    plugins.load()
    return registry


################
# Import guards
################
try:
    import cupy as _

    has_cupy = True
except ImportError:
    has_cupy = False


def cuda_device_available() -> bool:
    if not has_cupy:
        return False
    import cupy

    try:
        return cupy.cuda.runtime.getDeviceCount() > 0
    except RuntimeError:
        # CUDARuntimeError: no driver or no device
        return False
