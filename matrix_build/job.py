"""
Value types shared by the matrix builders
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterator, List, Optional, Tuple


class LinkageType(str, Enum):
    """Library linkage variant"""
    STATIC = "STATIC"
    SHARED = "SHARED"

    @property
    def lower(self) -> str:
        return self.value.lower()


class BuildStatus(str, Enum):
    BUILT = "built"
    SKIPPED = "skipped"
    ABORTED = "aborted"


class SkipReason(str, Enum):
    """Why a cell (or a whole platform) was not built"""
    CROSS_TOOLCHAIN_UNAVAILABLE = "cross toolchain unavailable"
    HOST_TARGET_MISMATCH = "host/target mismatch"
    PLATFORM_UNSUPPORTED_ON_HOST = "platform not buildable on host"


@dataclass(frozen=True)
class Target:
    """A (platform, architecture) pair"""
    platform: str
    arch: str

    def __str__(self) -> str:
        return f"{self.platform}/{self.arch}"


@dataclass(frozen=True)
class PlatformMatrix:
    """Ordered targets crossed with ordered linkage types"""
    targets: Tuple[Target, ...]
    linkage_types: Tuple[LinkageType, ...]

    def jobs(self) -> Iterator[Tuple[Target, LinkageType]]:
        for target in self.targets:
            for linkage in self.linkage_types:
                yield target, linkage

    def __len__(self) -> int:
        return len(self.targets) * len(self.linkage_types)


@dataclass(frozen=True)
class BuildJob:
    """Everything needed to configure, build and harvest one matrix cell"""
    target: Target
    linkage: LinkageType
    source_dir: Path
    work_dir: Path
    output_dir: Path
    lib_extension: str
    optimization_flags: Tuple[str, ...]
    toolchain_args: Tuple[str, ...]
    generator: str
    build_type: str = "Release"

    @property
    def platform(self) -> str:
        return self.target.platform

    @property
    def arch(self) -> str:
        return self.target.arch

    @property
    def label(self) -> str:
        return f"{self.target.platform}/{self.target.arch}/{self.linkage.lower}"


@dataclass(frozen=True)
class BuildResult:
    """Outcome of one job. ABORTED stops the run, SKIPPED does not"""
    status: BuildStatus
    reason: Optional[str] = None

    @classmethod
    def built(cls) -> "BuildResult":
        return cls(BuildStatus.BUILT)

    @classmethod
    def skipped(cls, reason: SkipReason) -> "BuildResult":
        return cls(BuildStatus.SKIPPED, reason.value)

    @classmethod
    def aborted(cls, reason: str) -> "BuildResult":
        return cls(BuildStatus.ABORTED, reason)

    @property
    def ok(self) -> bool:
        return self.status == BuildStatus.BUILT

    @property
    def is_aborted(self) -> bool:
        return self.status == BuildStatus.ABORTED


@dataclass
class RunState:
    """Counters for one orchestrator run"""
    attempted: int = 0
    succeeded: int = 0
    aborted: bool = False
    results: List[Tuple[str, BuildResult]] = field(default_factory=list)

    def record(self, job_label: str, result: BuildResult) -> None:
        self.attempted += 1
        if result.ok:
            self.succeeded += 1
        if result.is_aborted:
            self.aborted = True
        self.results.append((job_label, result))

    @property
    def all_succeeded(self) -> bool:
        return self.attempted == self.succeeded
