from __future__ import annotations

from setuptools import find_packages, setup


setup(
    name="hfcore",
    version="0.1.0",
    description="Closed-shell restricted Hartree-Fock SCF with conventional and density-fitted Fock builds",
    packages=find_packages(include=["hfcore", "hfcore.*"]),
    python_requires=">=3.10",
    install_requires=[
        "numpy",
        "scipy",
        "basis_set_exchange",
    ],
    extras_require={"test": ["pytest"]},
)
