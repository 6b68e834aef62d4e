#!/usr/bin/env python3
"""Setup script for line_grouping package.
"""

from setuptools import find_packages, setup

setup(
    name="line_grouping",
    version="1.0.0",
    description="Group delimited records that share a value in the same column",
    author="Line Grouping Team",
    packages=find_packages(include=["src*"]),
    python_requires=">=3.10",
    install_requires=[
        "pandas>=1.5.0",
        "pyyaml>=6.0",
    ],
    extras_require={
        "progress": [
            "tqdm>=4.60.0",
        ],
        "dev": [
            "pytest>=7.0.0",
            "hypothesis>=6.0.0",
            "tqdm>=4.60.0",
            "black>=23.0.0",
            "ruff>=0.1.0",
            "mypy>=1.5.0",
            "pandas-stubs>=2.0.0",
            "types-PyYAML>=6.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "line-grouping=src.pipeline:main",
        ],
    },
)
