from setuptools import setup, find_packages

setup(
    name="tricount",
    version="0.1.0",
    description="Parallel CSR triangle counting for undirected graphs",
    packages=find_packages(include=["tricount", "tricount.*"]),
    include_package_data=True,
    python_requires=">=3.8",
    install_requires=["numpy", "scipy"],
    extras_require={
        "cuda": ["cupy-cuda12x"],
        "test": ["pytest", "networkx"],
    },
    entry_points={"console_scripts": ["tricount=tricount.cli:main"]},
)
