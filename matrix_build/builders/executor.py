"""
Runs a single matrix cell: skip check, configure, build, harvest
"""

import shutil
import subprocess
from typing import Any, Optional

from ..job import BuildJob, BuildResult, SkipReason
from ..platform import job_skip_reason
from .base_builder import BaseBuilder
from .config_mutator import ConfigMutator


class BuildExecutor:
    """Executes one BuildJob at a time"""

    def __init__(self,
                 builder: BaseBuilder,
                 mutator: ConfigMutator,
                 probe: Any,
                 collector: Any,
                 logger: Any):
        """
        Initialize build executor

        Args:
            builder: External build system (CMakeBuilder)
            mutator: Shared config file manager
            probe: CapabilityProbe for host facts
            collector: ArtifactCollector for outputs
            logger: Logger instance
        """
        self.builder = builder
        self.mutator = mutator
        self.probe = probe
        self.collector = collector
        self.logger = logger
        self.last_report = None

    def skip_reason(self, job: BuildJob) -> Optional[SkipReason]:
        needs_cross = self.probe.needs_cross_toolchain(job.target)
        cross_available = (not needs_cross
                           or self.probe.has_cross_toolchain(job.platform, job.arch))
        return job_skip_reason(self.probe.host, job.target, needs_cross, cross_available)

    def run(self, job: BuildJob) -> BuildResult:
        """
        Build one job

        Args:
            job: Resolved job

        Returns:
            BUILT, SKIPPED (nothing created) or ABORTED (stop the run)
        """
        self.last_report = None
        self.logger.info(f"Building {job.linkage.lower} library for {job.target}...")

        reason = self.skip_reason(job)
        if reason is not None:
            if reason == SkipReason.CROSS_TOOLCHAIN_UNAVAILABLE:
                prefix = self.probe.cross_prefix(job.target)
                self.logger.warning(
                    f"Cross-compilation tools for {job.target} not found ({prefix}-gcc), skipping...")
            else:
                self.logger.warning(
                    f"{job.target} cannot be built on a {self.probe.host.platform} host, skipping...")
            return BuildResult.skipped(reason)

        try:
            if job.work_dir.exists():
                shutil.rmtree(job.work_dir)
            job.work_dir.mkdir(parents=True)

            self.mutator.mutate(job.linkage)

            self.logger.info(f"Configuring {job.label} ({job.build_type}, {job.generator})...")
            if not self.builder.configure(job):
                return self._abort(job, "configure failed")

            jobs = self.probe.host_parallelism()
            self.logger.info(f"Compiling {job.label} with {jobs} parallel jobs...")
            if not self.builder.build(job, jobs):
                return self._abort(job, "build failed")

            self.last_report = self.collector.harvest(job)

            self.logger.success(f"Completed {job.linkage.lower} library for {job.target}")
            return BuildResult.built()

        except subprocess.CalledProcessError as e:
            return self._abort(job, f"command exited with status {e.returncode}")
        except OSError as e:
            return self._abort(job, str(e))
        finally:
            shutil.rmtree(job.work_dir, ignore_errors=True)

    def _abort(self, job: BuildJob, reason: str) -> BuildResult:
        self.logger.error(f"{job.label}: {reason}")
        return BuildResult.aborted(reason)


__all__ = ["BuildExecutor"]
