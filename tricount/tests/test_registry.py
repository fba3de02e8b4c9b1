import pytest
from tricount.exceptions import BackendUnavailableError
from tricount.registry import KernelRegistry, find_plugins, has_cupy


def dummy_kernel(graph, launch):
    return 0


def other_kernel(graph, launch):
    return 0


def test_register_and_lookup():
    reg = KernelRegistry()
    reg.register("dummy", dummy_kernel, ("merge",))
    assert "dummy" in reg
    assert reg.get("dummy") is dummy_kernel
    assert reg.strategies("dummy") == ("merge",)
    assert reg.names() == ["dummy"]

    # re-registering the same function is harmless
    reg.register("dummy", dummy_kernel, ("merge", "binary_search"))
    assert reg.strategies("dummy") == ("merge", "binary_search")

    with pytest.raises(ValueError, match="already registered"):
        reg.register("dummy", other_kernel, ("merge",))

    reg.unregister("dummy")
    assert "dummy" not in reg


def test_unknown_backend():
    reg = KernelRegistry()
    with pytest.raises(BackendUnavailableError, match="not available"):
        reg.get("missing")
    with pytest.raises(BackendUnavailableError):
        reg.strategies("missing")


def test_find_plugins():
    reg = find_plugins()
    assert {"host", "scipy"} <= set(reg.names())
    assert reg.strategies("host") == ("merge", "binary_search")
    assert reg.strategies("scipy") == ("spgemm",)
    assert ("cupy" in reg) == has_cupy
