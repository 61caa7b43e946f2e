"""
Configuration management for the build system
"""

import copy
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Any, Optional

import yaml

from ..exceptions import ConfigurationError
from ..job import LinkageType, PlatformMatrix, Target

DEFAULT_CONFIG_FILE = Path(__file__).parent / "matrix.yaml"

BUILD_TYPES = ("Debug", "Release")


@dataclass(frozen=True)
class ProjectConfig:
    """Library being built and where its pieces live, relative to the source root"""
    library: str
    config_file: Path
    header_dir: Path
    output_dir: Path


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


class ConfigLoader:
    """Loads and manages build system configuration"""

    def __init__(self, config_file: Optional[Path] = None, override_file: Optional[Path] = None):
        """
        Initialize configuration loader

        Args:
            config_file: Base matrix configuration (defaults to the packaged matrix.yaml)
            override_file: Optional project file merged over the base
        """
        self.config_file = Path(config_file or DEFAULT_CONFIG_FILE)
        self.data = self._load(self.config_file)

        if override_file is not None:
            self.data = _deep_merge(self.data, self._load(Path(override_file)))

    @staticmethod
    def _load(path: Path) -> Dict[str, Any]:
        if not path.exists():
            raise FileNotFoundError(f"Matrix config not found: {path}")

        with open(path, 'r', encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Top level of {path} must be a mapping")
        return data

    def get_matrix(self) -> PlatformMatrix:
        """Get the ordered platform matrix"""
        targets: List[Target] = []
        for entry in self.data.get("targets", []):
            platform = entry.get("platform")
            if not platform:
                raise ConfigurationError(f"Target entry without platform: {entry}")
            for arch in entry.get("architectures", []):
                targets.append(Target(platform, arch))

        try:
            linkage_types = tuple(LinkageType(str(t).upper())
                                  for t in self.data.get("linkage_types", ["STATIC", "SHARED"]))
        except ValueError as e:
            raise ConfigurationError(f"Invalid linkage type: {e}") from e

        return PlatformMatrix(tuple(targets), linkage_types)

    def get_project(self) -> ProjectConfig:
        """Get the project description"""
        project = self.data.get("project", {})
        missing = [k for k in ("library", "config_file", "header_dir", "output_dir") if not project.get(k)]
        if missing:
            raise ConfigurationError(f"Project config missing keys: {', '.join(missing)}")

        return ProjectConfig(
            library=project["library"],
            config_file=Path(project["config_file"]),
            header_dir=Path(project["header_dir"]),
            output_dir=Path(project["output_dir"]),
        )

    def get_cross_prefix(self, platform: str, arch: str) -> Optional[str]:
        """
        Get the cross toolchain prefix for a target

        Args:
            platform: Target platform
            arch: Target architecture

        Returns:
            Prefix such as ``aarch64-linux-gnu`` or None if the target has none
        """
        toolchains = self.data.get("cross_toolchains", {}) or {}
        entry = toolchains.get(f"{platform}:{arch}")
        if not entry:
            return None
        return entry.get("prefix")

    def get_option(self, key: str, default: Any = None) -> Any:
        """
        Get a build option

        Args:
            key: Option key
            default: Default value if not found

        Returns:
            Option value
        """
        options = self.data.get("build_options", {}) or {}
        return options.get(key, default)

    def get_build_type(self, override: Optional[str] = None) -> str:
        """
        Resolve the build variant: explicit override, then BUILD_TYPE, then config

        Raises:
            ConfigurationError: If the value is not Debug or Release
        """
        value = override or os.environ.get("BUILD_TYPE") or self.get_option("build_type", "Release")
        if value not in BUILD_TYPES:
            raise ConfigurationError(
                f"Invalid build type: {value}. Supported: {', '.join(BUILD_TYPES)}")
        return value


__all__ = ["ConfigLoader", "ProjectConfig", "BUILD_TYPES", "DEFAULT_CONFIG_FILE"]
