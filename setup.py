"""
Setup script for directory-link.

This file is used for backward compatibility with older build systems.
Modern builds should use pyproject.toml configuration.
"""

from setuptools import setup, find_packages

setup(
    name="directory-link",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.9",
)
