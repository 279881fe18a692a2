#!/usr/bin/env python
from pathlib import Path

from setuptools import find_packages, setup

here = Path(__file__).parent.absolute()
long_description = (here / "README.md").read_text(encoding="utf-8")

setup(
    name="zrxpy",
    version="0.1.0",
    description="""zrxpy: Sign 0x v3 orders and submit exchange transactions""",
    long_description=long_description,
    long_description_content_type="text/markdown",
    include_package_data=True,
    install_requires=[
        "eip712>=0.3.1,<0.4",
        "eth-abi>=5.0.1",
        "eth-account>=0.13,<0.14",
        "eth-keys>=0.4.0",
        "eth-pydantic-types>=0.2.4,<0.3",
        "eth-utils>=5.1.0,<6",
        "hexbytes>=1.3.1,<2",
        "httpx>=0.20",
        "pycryptodome>=3.17.1",
        "pydantic>=2.10.4,<3",
    ],
    python_requires=">=3.10,<4",
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-timeout>=2.2.0,<3",
            "pytest-mock",
            "anyio>=4",
        ],
        "lint": [
            "ruff>=0.11.7",
            "mypy>=1.18.2,<2",
        ],
        "release": [
            "setuptools>=75.6.0",
            "wheel",
            "twine",
        ],
    },
    license="Apache-2.0",
    zip_safe=False,
    keywords="ethereum,0x",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"zrxpy": ["py.typed"]},
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: Apache Software License",
        "Natural Language :: English",
        "Operating System :: MacOS",
        "Operating System :: POSIX",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
    ],
)
