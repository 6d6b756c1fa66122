#!/usr/bin/env python3
"""
Setup script for thinorm.
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read README
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text() if readme_file.exists() else ""

setup(
    name="thinorm",
    version="0.1.0",
    description="Thin async relational mapper for SQLite and MySQL",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="thinorm Contributors",
    packages=find_packages(include=["thinorm", "thinorm.*"]),
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=[
        "aiosqlite>=0.19.0",
        "aiomysql>=0.2.0",
        "PyMySQL>=1.1.0",
        "PyYAML>=6.0",
        "python-dotenv>=1.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.1.0",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Database",
        "Topic :: Software Development :: Libraries",
    ],
    keywords="orm async sqlite mysql database",
)
