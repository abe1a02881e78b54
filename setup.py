#!/usr/bin/env python
"""
Setup script for tokenprobe - next-token probability probe for causal language models
"""

from setuptools import setup, find_packages
import os
import re

# Read the version from the tokenprobe/__init__.py file
with open(os.path.join("tokenprobe", "__init__.py"), "r") as f:
    version_match = re.search(r"__version__\s*=\s*['\"]([^'\"]*)['\"]", f.read())
    version = version_match.group(1) if version_match else "0.1.0"

long_description = ""
if os.path.exists("README.md"):
    with open("README.md", "r", encoding="utf-8") as f:
        long_description = f.read()

# Define dependencies
install_requires = [
    "torch>=2.0.0",
    "transformers>=4.30.0",
    "numpy>=1.23.0",
    "fastapi>=0.100.0",
    "uvicorn>=0.22.0",
    "pydantic>=2.0.0",
    "psutil>=5.9.0",
    "pyyaml>=6.0",
]

# Optional dependencies
extras_require = {
    "dev": [
        "pytest>=7.3.1",
        "pytest-cov>=4.1.0",
        "pytest-asyncio>=0.21.0",
        "httpx>=0.24.0",
        "black>=23.3.0",
        "isort>=5.12.0",
    ],
}

setup(
    name="tokenprobe",
    version=version,
    description="Report a causal language model's next-token probability for target strings",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["tokenprobe", "tokenprobe.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: Scientific/Engineering :: Artificial Intelligence",
    ],
    python_requires=">=3.9",
    install_requires=install_requires,
    extras_require=extras_require,
    entry_points={
        "console_scripts": [
            "tokenprobe=tokenprobe.cli.main:main",
            "tokenprobe-server=tokenprobe.api.app:main",
        ],
    },
    include_package_data=True,
    zip_safe=False,
    keywords=[
        "nlp",
        "transformers",
        "language-model",
        "logits",
        "probability",
    ],
)
