#!/usr/bin/env python3
"""
Setup script for wasmseal
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

with open("requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [line.strip() for line in fh if line.strip() and not line.startswith("#")]

setup(
    name="wasmseal",
    version="0.3.0",
    author="wasmseal contributors",
    description="Signed, tamper-evident capability claims for WebAssembly modules",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["wasmseal", "wasmseal.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Security",
        "Topic :: Security :: Cryptography",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
    python_requires=">=3.8",
    install_requires=requirements,
    extras_require={
        'test': ['pytest>=7.0'],
    },
    entry_points={
        'console_scripts': [
            'sealctl=wasmseal.cli.sealctl:main',
        ],
    },
    include_package_data=True,
)
