# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Setup configuration for raygun-reporter package."""

from pathlib import Path

from setuptools import find_packages, setup

# Read the README file if it exists
this_directory = Path(__file__).parent
readme_path = this_directory / "README.md"
if readme_path.exists():
    long_description = readme_path.read_text(encoding="utf-8")
else:
    long_description = "Error reporting client that delivers crash reports to Raygun"

setup(
    name="raygun-reporter",
    version="0.1.0",
    author="Copilot-for-Consensus Contributors",
    description="Error reporting client that delivers crash reports to Raygun",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/Alan-Jowett/CoPilot-For-Consensus",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.10",
    install_requires=[
        "requests>=2.31.0",  # For report delivery
        "starlette>=0.49.1",  # For the request middleware
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "pylint>=3.0.0",
            "mypy>=1.0.0",
            "fastapi>=0.109.0",  # For middleware tests
            "httpx>=0.27.0",  # Required by starlette's TestClient
            "python-multipart>=0.0.9",  # For form parsing in middleware tests
        ],
    },
    entry_points={
        "console_scripts": [
            "raygun-reporter=raygun_reporter.cli:main",
        ],
    },
)
