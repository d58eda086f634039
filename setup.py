#!/usr/bin/env python3
"""Setup script for scalebloom - Scalable Bloom Filter for Python 3."""
from setuptools import setup

VERSION = "1.0.0"
DESCRIPTION = "Scalable Bloom filter: a growable probabilistic set"
LONG_DESCRIPTION = """
A thread-safe, pure-Python Scalable Bloom Filter.

Each internal Bloom filter is sized for one capacity and false positive
budget. When the newest filter is saturated, a new one is appended whose
capacity is multiplied by the growth factor and whose false positive rate is
multiplied by the tightening ratio, so the compound error rate stays bounded
however far the data set grows.

This package provides:
- BloomFilter: Fixed-capacity filter for known dataset sizes
- ScalableBloomFilter: Dynamically growing filter that scales automatically
- Config / load_config: Validated parameters, loadable from JSON
- scalebloom: A small command-line driver

Features:
- xxHash 128-bit digests with double hashing for the k bit indexes
- Packed bit array storage
- Reader/writer locking on every filter
"""

CLASSIFIERS = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "License :: OSI Approved :: MIT License",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3.8",
    "Programming Language :: Python :: 3.9",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3 :: Only",
    "Operating System :: OS Independent",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Topic :: Utilities",
]

setup(
    name="scalebloom",
    version=VERSION,
    description=DESCRIPTION,
    long_description=LONG_DESCRIPTION,
    long_description_content_type="text/plain",
    classifiers=CLASSIFIERS,
    keywords=[
        "bloom filter",
        "probabilistic",
        "data structures",
        "set membership",
        "scalable",
        "xxhash",
    ],
    license="MIT License",
    platforms=["any"],
    python_requires=">=3.8",
    install_requires=["bitarray>=1.0.0", "xxhash>=3.0.0"],
    extras_require={"test": ["pytest>=7.0"]},
    packages=["scalebloom"],
    entry_points={
        "console_scripts": ["scalebloom = scalebloom.cli:main"],
    },
    zip_safe=True,
)
