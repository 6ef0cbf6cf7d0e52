#!/usr/bin/env python3
"""
Setup script for the dclient keystore
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="dclient-keystore",
    version="0.1.0",
    description="Local keystore for named Ed25519 signing keypairs",
    long_description=long_description,
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Security :: Cryptography",
    ],
    python_requires=">=3.10",
    install_requires=[
        "click>=8.1",
        "cryptography>=40.0",
        "pydantic>=2.0",
        "pydantic-settings>=2.0",
        "rich>=13.0",
        "structlog>=23.1",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "dclient=dclient_keystore.cli:main",
            "hetu=dclient_keystore.cli:main",
        ],
    },
    include_package_data=True,
    zip_safe=False,
)
