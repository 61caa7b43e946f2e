"""Harvesting of built libraries and headers into the output tree."""

from __future__ import annotations

import os
import shutil
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, List, Optional

from ..job import BuildJob, LinkageType

ARTIFACT_EXTENSIONS = (".a", ".so", ".dylib", ".dll", ".lib")


class CopyStatus(str, Enum):
    COPIED = "copied"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class CopyOutcome:
    """Result of one copy attempt"""
    kind: str
    status: CopyStatus
    source: Optional[Path] = None
    destination: Optional[Path] = None

    @property
    def copied(self) -> bool:
        return self.status == CopyStatus.COPIED


@dataclass
class HarvestReport:
    """Every copy attempt made for one job"""
    outcomes: List[CopyOutcome] = field(default_factory=list)

    def add(self, outcome: CopyOutcome) -> CopyOutcome:
        self.outcomes.append(outcome)
        return outcome

    def of_kind(self, kind: str) -> List[CopyOutcome]:
        return [o for o in self.outcomes if o.kind == kind]

    @property
    def binary(self) -> Optional[CopyOutcome]:
        found = self.of_kind("binary")
        return found[0] if found else None

    @property
    def headers_copied(self) -> int:
        return sum(1 for o in self.outcomes if o.kind.startswith("header") and o.copied)


class ArtifactCollector:
    """Copies a job's outputs into ``<output_root>/<platform>/<arch>/<linkage>``.

    Harvesting is best effort: anything missing is recorded as a NOT_FOUND
    outcome and logged, never raised.
    """

    def __init__(self, library: str, header_dir: Path, logger: Any, dry_run: bool = False):
        """
        Args:
            library: Library base name (``yogacore`` -> libyogacore.a / yogacore.lib)
            header_dir: Absolute path of the library's header directory
            logger: Logger instance
            dry_run: If True, record what would be copied without copying
        """
        self.library = library
        self.header_dir = Path(header_dir)
        self.logger = logger
        self.dry_run = dry_run

    def find_file(self, root: Path, names: Iterable[str]) -> Optional[Path]:
        """First file under ``root`` whose name is in ``names``.

        os.walk order is filesystem dependent, so with several matches the
        one picked may differ between hosts.
        """
        wanted = set(names)
        for dirpath, _dirnames, filenames in os.walk(root):
            for filename in filenames:
                if filename in wanted:
                    return Path(dirpath) / filename
        return None

    def _copy(self, kind: str, source: Optional[Path], dest_dir: Path) -> CopyOutcome:
        if source is None:
            return CopyOutcome(kind, CopyStatus.NOT_FOUND)
        destination = dest_dir / source.name
        if not self.dry_run:
            dest_dir.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, destination)
        return CopyOutcome(kind, CopyStatus.COPIED, source, destination)

    def harvest(self, job: BuildJob) -> HarvestReport:
        """Copy the binary, the Windows import library and headers for ``job``"""
        report = HarvestReport()
        if not self.dry_run:
            job.output_dir.mkdir(parents=True, exist_ok=True)

        names = (f"lib{self.library}.{job.lib_extension}", f"{self.library}.{job.lib_extension}")
        binary = report.add(self._copy("binary", self.find_file(job.work_dir, names), job.output_dir))
        if binary.copied:
            self.logger.debug(f"Copied {binary.source} -> {binary.destination}")
        else:
            self.logger.warning(f"No {' or '.join(names)} found in {job.work_dir}")

        if job.platform == "windows" and job.linkage == LinkageType.SHARED:
            import_lib = self.find_file(job.work_dir, [f"{self.library}.lib"])
            outcome = report.add(self._copy("import_library", import_lib, job.output_dir))
            if not outcome.copied:
                self.logger.debug(f"No import library for {job.label}")

        self._copy_headers(job, report)
        return report

    def _copy_headers(self, job: BuildJob, report: HarvestReport) -> None:
        if not self.header_dir.is_dir():
            self.logger.warning(f"Header directory not found: {self.header_dir}")
            report.add(CopyOutcome("header", CopyStatus.NOT_FOUND, self.header_dir))
            return

        # top-level headers go next to the binary
        for header in sorted(self.header_dir.glob("*.h")):
            report.add(self._copy("header", header, job.output_dir))

        # the whole tree is mirrored under <output>/<header_dir name>/
        mirror_root = job.output_dir / self.header_dir.name
        for header in sorted(self.header_dir.rglob("*.h")):
            relative = header.parent.relative_to(self.header_dir)
            report.add(self._copy("header_tree", header, mirror_root / relative))

        if not report.headers_copied:
            self.logger.warning(f"No headers found under {self.header_dir}")


def list_artifacts(output_root: Path) -> List[Path]:
    """Sorted library files under the output root"""
    root = Path(output_root)
    if not root.exists():
        return []
    return sorted(p for p in root.rglob("*") if p.is_file() and p.suffix in ARTIFACT_EXTENSIONS)


__all__ = [
    "ArtifactCollector",
    "CopyOutcome",
    "CopyStatus",
    "HarvestReport",
    "list_artifacts",
    "ARTIFACT_EXTENSIONS",
]
