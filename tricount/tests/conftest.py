import pytest
from tricount.registry import cuda_device_available

KERNELS = [
    ("host", "merge"),
    ("host", "binary_search"),
    ("scipy", "spgemm"),
]
if cuda_device_available():
    KERNELS += [("cupy", "merge"), ("cupy", "binary_search")]


@pytest.fixture(params=KERNELS, ids=["-".join(k) for k in KERNELS])
def kernel(request):
    backend, strategy = request.param
    return {"backend": backend, "strategy": strategy}
