"""
Build orchestrator that drives the platform matrix
"""

import shutil
from pathlib import Path
from typing import Any

from ..job import BuildJob, LinkageType, PlatformMatrix, RunState, Target
from ..platform import platform_skip_reason
from ..utils.artifacts import list_artifacts
from .config_mutator import ConfigMutator
from .executor import BuildExecutor
from .flags import FlagResolver


class BuildOrchestrator:
    """Runs every matrix cell in order, one at a time, stopping on the first abort"""

    def __init__(self,
                 matrix: PlatformMatrix,
                 source_dir: Path,
                 output_root: Path,
                 probe: Any,
                 flags: FlagResolver,
                 executor: BuildExecutor,
                 mutator: ConfigMutator,
                 logger: Any,
                 build_type: str = "Release",
                 dry_run: bool = False):
        """
        Initialize build orchestrator

        Args:
            matrix: Ordered targets and linkage types
            source_dir: Library source root
            output_root: Root of the structured output tree
            probe: CapabilityProbe
            flags: FlagResolver
            executor: BuildExecutor running single jobs
            mutator: ConfigMutator for the shared CMakeLists.txt
            logger: Logger instance
            build_type: Debug or Release
            dry_run: If True, don't actually build
        """
        self.matrix = matrix
        self.source_dir = Path(source_dir)
        self.output_root = Path(output_root)
        self.probe = probe
        self.flags = flags
        self.executor = executor
        self.mutator = mutator
        self.logger = logger
        self.build_type = build_type
        self.dry_run = dry_run

    def resolve_job(self, target: Target, linkage: LinkageType) -> BuildJob:
        """
        Resolve everything a cell needs. Called fresh for every cell

        Args:
            target: Platform and architecture
            linkage: STATIC or SHARED

        Returns:
            Immutable BuildJob
        """
        return BuildJob(
            target=target,
            linkage=linkage,
            source_dir=self.source_dir,
            work_dir=self.source_dir / f"build_{target.platform}_{target.arch}_{linkage.value}",
            output_dir=self.output_root / target.platform / target.arch / linkage.lower,
            lib_extension=self.flags.library_extension(target.platform, linkage),
            optimization_flags=tuple(self.flags.optimization_flags(target.platform, target.arch)),
            toolchain_args=tuple(self.flags.toolchain_args(target.platform, target.arch)),
            generator=self.probe.select_generator(target.platform),
            build_type=self.build_type,
        )

    def clean_output(self) -> None:
        """Remove and recreate the output root"""
        self.logger.info(f"Cleaning output directory {self.output_root}...")
        if self.dry_run:
            return
        shutil.rmtree(self.output_root, ignore_errors=True)
        self.output_root.mkdir(parents=True, exist_ok=True)

    def run(self) -> RunState:
        """
        Build the whole matrix

        Returns:
            RunState with attempted/succeeded counts; ``aborted`` is set when
            a configure or build step failed and the rest was not attempted
        """
        state = RunState()
        total = len(self.matrix)

        with self.mutator:
            for target in self.matrix.targets:
                reason = platform_skip_reason(self.probe.host, target.platform)
                if reason is not None:
                    self.logger.warning(
                        f"Cannot build {target.platform} targets on {self.probe.host.platform} host, "
                        f"skipping {target}")
                    continue

                for linkage in self.matrix.linkage_types:
                    job = self.resolve_job(target, linkage)
                    self.logger.debug(f"[{state.attempted + 1}/{total}] {job.label}")
                    result = self.executor.run(job)
                    state.record(job.label, result)

                    if result.is_aborted:
                        self.logger.error(f"Stopping matrix after failure in {job.label}")
                        break
                if state.aborted:
                    break

        return state

    def summarize(self, state: RunState) -> None:
        """Log counts and the resulting artifact listing"""
        self.logger.info("Build Summary:")
        self.logger.info(f"Total builds attempted: {state.attempted}")
        self.logger.success(f"Successful builds: {state.succeeded}")

        if state.succeeded < state.attempted:
            self.logger.warning("Some builds failed or were skipped")

        self.logger.info("Output structure:")
        for artifact in list_artifacts(self.output_root):
            self.logger.raw(str(artifact))
