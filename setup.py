#!/usr/bin/env python3
"""Setup script for logstream package."""

from setuptools import find_packages, setup

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="logstream",
    version="0.1.0",
    description="Remote log streams as incrementally loaded text documents",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["logstream", "logstream.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.10",
    install_requires=[
        "mcp>=1.0.0,<2",
        "pydantic>=2.0",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
        ],
    },
    entry_points={
        "console_scripts": [
            "logstream-view=logstream.cli:view_main",
            "logstream-capture=logstream.cli:capture_main",
            "logstream-mcp=logstream.cli:mcp_main",
        ],
    },
    include_package_data=True,
)
