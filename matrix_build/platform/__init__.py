"""
Platform detection and host capability probing
"""

import os
import sys
import platform
import shutil
import subprocess
from dataclasses import dataclass
from typing import Any, Optional

from ..exceptions import MissingDependencyError
from ..job import SkipReason, Target

DEFAULT_PARALLELISM = 4

# Probes run a helper binary; never let one hang the run.
PROBE_TIMEOUT = 5

ARCH_ALIASES = {
    "amd64": "x86_64",
    "x64": "x86_64",
    "arm64": "aarch64",
}


def normalize_arch(arch: str) -> str:
    """Map architecture spellings onto one family name (arm64 == aarch64)"""
    arch = arch.lower()
    return ARCH_ALIASES.get(arch, arch)


@dataclass(frozen=True)
class HostInfo:
    """Facts about the machine running the build"""
    platform: str
    arch: str

    def matches(self, target: Target) -> bool:
        return (self.platform == target.platform
                and normalize_arch(self.arch) == normalize_arch(target.arch))


class PlatformDetector:
    """Detects and provides information about the current platform"""

    def detect(self) -> HostInfo:
        """
        Detect current platform and architecture

        Returns:
            HostInfo with normalized platform (darwin, linux, windows) and arch
        """
        return HostInfo(platform=self._get_platform_name(), arch=self._get_architecture())

    def _get_platform_name(self) -> str:
        """Get normalized platform name"""
        # cygwin and msys report through sys.platform, not platform.system()
        if sys.platform in ("win32", "cygwin", "msys"):
            return "windows"

        system = platform.system().lower()
        if system.startswith(("cygwin", "msys", "mingw")):
            return "windows"
        return system

    def _get_architecture(self) -> str:
        """Get normalized architecture of the host machine"""
        machine = platform.machine().lower()
        if machine in ("aarch64", "arm64"):
            # darwin calls it arm64, everyone else aarch64
            return "arm64" if self._get_platform_name() == "darwin" else "aarch64"
        if machine in ("x86_64", "amd64", "x64"):
            return "x86_64"
        return machine


def requires_cross_toolchain(host: HostInfo, target: Target, cross_prefix: Optional[str]) -> bool:
    """True when the target needs a prefixed cross compiler on this host"""
    return cross_prefix is not None and not host.matches(target)


def platform_skip_reason(host: HostInfo, target_platform: str) -> Optional[SkipReason]:
    """
    Whole-platform skip, decided before any linkage cell is entered

    Apple toolchains only exist on darwin hosts, so darwin targets elsewhere
    are skipped without counting their cells.
    """
    if target_platform == "darwin" and host.platform != "darwin":
        return SkipReason.PLATFORM_UNSUPPORTED_ON_HOST
    return None


def job_skip_reason(host: HostInfo, target: Target, needs_cross: bool,
                    cross_available: bool) -> Optional[SkipReason]:
    """
    Per-cell skip. Pure: all host state comes in as arguments

    Args:
        host: Host facts
        target: Target being built
        needs_cross: Whether the target needs a cross toolchain on this host
        cross_available: Whether that toolchain was found
    """
    if needs_cross and not cross_available:
        return SkipReason.CROSS_TOOLCHAIN_UNAVAILABLE
    if target.platform == "windows" and host.platform != "windows":
        return SkipReason.HOST_TARGET_MISMATCH
    return None


class CapabilityProbe:
    """Answers questions about what the host can build"""

    def __init__(self, config: Any, host: HostInfo, logger: Any):
        """
        Args:
            config: ConfigLoader (for cross toolchain prefixes)
            host: Detected host
            logger: Logger instance
        """
        self.config = config
        self.host = host
        self.logger = logger

    def cross_prefix(self, target: Target) -> Optional[str]:
        return self.config.get_cross_prefix(target.platform, target.arch)

    def needs_cross_toolchain(self, target: Target) -> bool:
        return requires_cross_toolchain(self.host, target, self.cross_prefix(target))

    def has_cross_toolchain(self, platform_name: str, arch: str) -> bool:
        """
        Check for ``<prefix>-gcc`` on PATH

        Targets without a declared prefix need nothing and report True.
        """
        prefix = self.config.get_cross_prefix(platform_name, arch)
        if prefix is None:
            return True
        found = shutil.which(f"{prefix}-gcc") is not None
        self.logger.debug(f"Cross compiler {prefix}-gcc: {'found' if found else 'missing'}")
        return found

    def host_parallelism(self) -> int:
        """
        Number of parallel build workers

        MATRIX_BUILD_JOBS wins when set. Otherwise the OS-specific probe,
        then os.cpu_count(), then DEFAULT_PARALLELISM.
        """
        override = os.environ.get("MATRIX_BUILD_JOBS", "").strip()
        if override:
            try:
                jobs = int(override)
                if jobs > 0:
                    return jobs
            except ValueError:
                pass
            self.logger.warning(f"Ignoring invalid MATRIX_BUILD_JOBS={override!r}")

        jobs = self._primary_cpu_probe()
        if jobs:
            return jobs

        jobs = os.cpu_count()
        if jobs:
            return jobs

        self.logger.debug(f"CPU probes failed, using {DEFAULT_PARALLELISM} jobs")
        return DEFAULT_PARALLELISM

    def _primary_cpu_probe(self) -> Optional[int]:
        if hasattr(os, "sched_getaffinity"):
            try:
                return len(os.sched_getaffinity(0)) or None
            except OSError:
                return None

        if self.host.platform == "darwin":
            try:
                result = subprocess.run(
                    ["sysctl", "-n", "hw.ncpu"],
                    capture_output=True,
                    text=True,
                    timeout=PROBE_TIMEOUT,
                    check=True
                )
                return int(result.stdout.strip()) or None
            except (subprocess.SubprocessError, OSError, ValueError) as e:
                self.logger.debug(f"sysctl hw.ncpu failed: {e}")
        return None

    def select_generator(self, platform_name: str) -> str:
        """Prefer Ninja; otherwise Visual Studio for native Windows, else Makefiles"""
        if shutil.which("ninja"):
            return "Ninja"
        if platform_name == "windows" and self.host.platform == "windows":
            return "Visual Studio 17 2022"
        return "Unix Makefiles"

    def require_tool(self, tool: str) -> str:
        """
        Resolve a required tool on PATH

        Raises:
            MissingDependencyError: If the tool is not installed
        """
        path = shutil.which(tool)
        if not path:
            raise MissingDependencyError(tool)
        return path


__all__ = [
    "PlatformDetector",
    "HostInfo",
    "CapabilityProbe",
    "normalize_arch",
    "requires_cross_toolchain",
    "platform_skip_reason",
    "job_skip_reason",
    "DEFAULT_PARALLELISM",
]
