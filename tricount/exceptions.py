class TricountError(Exception):
    pass


class MalformedRecordError(TricountError, ValueError):
    """
    An edge record that cannot be read as a pair of integers.

    Only the strict helpers raise this; the loader and the CSR builder skip
    such records and keep going.
    """


class InvariantViolation(TricountError, AssertionError):
    """
    A CSR structure does not satisfy the ordering or symmetry contract the
    counting kernels depend on. This is a programming error: kernels run on
    such a graph would silently miscount, so nothing is launched.
    """


class CSRCapacityError(TricountError, OverflowError):
    pass


class CounterOverflowError(TricountError, OverflowError):
    pass


class BackendUnavailableError(TricountError, RuntimeError):
    pass


class KernelTimeoutError(TricountError, TimeoutError):
    pass
