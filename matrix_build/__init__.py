"""
Matrix Build System
Builds a native library for every platform, architecture and linkage type
Supports darwin, linux and windows targets
"""

__version__ = "1.0.0"
__supported_platforms__ = ["darwin", "linux", "windows"]

from .main import BuildSystem

__all__ = ["BuildSystem", "__version__", "__supported_platforms__"]
