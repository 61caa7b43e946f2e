"""
Builder components for the platform matrix
"""

from .base_builder import BaseBuilder
from .cmake_builder import CMakeBuilder
from .config_mutator import ConfigMutator
from .executor import BuildExecutor
from .flags import FlagResolver
from .orchestrator import BuildOrchestrator

__all__ = [
    "BaseBuilder",
    "CMakeBuilder",
    "ConfigMutator",
    "BuildExecutor",
    "FlagResolver",
    "BuildOrchestrator"
]
