"""
Minimal setup.py for the matrix build system

Runtime Requirements:
- CMake >= 3.13 on PATH
- A host C/C++ toolchain (gcc/clang on Linux and macOS, MSVC on Windows)
- Optional: Ninja (used as generator when present)

Cross-Compilation Support:
- linux/aarch64 is built from other hosts when aarch64-linux-gnu-gcc is on PATH,
  otherwise it is skipped
- Set MATRIX_BUILD_JOBS=N to override the number of parallel compile jobs
"""

from pathlib import Path
from setuptools import setup, find_packages

# Read README for long description
readme_path = Path("README.md")
long_description = ""
if readme_path.exists():
    with open(readme_path, "r", encoding="utf-8") as f:
        long_description = f.read()

setup(
    name="matrix-build",
    version="1.0.0",
    description="Multi-platform static/shared library builder driving CMake across a target matrix",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["matrix_build", "matrix_build.*"]),
    package_data={
        "matrix_build": [
            "config/*.yaml",
        ]
    },
    include_package_data=True,
    entry_points={
        "console_scripts": [
            "matrix-build=matrix_build.main:main",
        ],
    },
    zip_safe=False,
    python_requires=">=3.10",
    install_requires=[
        "PyYAML>=6.0",
    ],
    extras_require={
        "dev": [
            "pytest",
            "pytest-cov",
            "black",
            "flake8",
            "mypy",
        ]
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Programming Language :: C++",
        "Operating System :: MacOS",
        "Operating System :: Microsoft :: Windows",
        "Operating System :: POSIX :: Linux",
        "Topic :: Software Development :: Build Tools",
    ],
)
