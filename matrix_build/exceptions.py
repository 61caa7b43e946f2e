"""Holds exceptions used by the matrix build system"""

from typing import Optional


class MatrixBuildError(Exception):
    """Base class for all build system errors"""


class MissingDependencyError(MatrixBuildError):
    """Raised when a required host tool (cmake) is not installed"""
    def __init__(self, tool: str, hint: Optional[str] = None):
        self.tool = tool
        self.hint = hint
        message = f"{tool} is required but not installed"
        if hint:
            message += f" ({hint})"
        super().__init__(message)


class UnsupportedTargetError(MatrixBuildError):
    """Raised for a (platform, arch) pair the flag tables do not cover"""
    def __init__(self, platform: str, arch: str):
        self.platform = platform
        self.arch = arch
        super().__init__(f"Unsupported target: {platform}/{arch}")


class ConfigurationError(MatrixBuildError):
    """Raised for invalid configuration values"""
