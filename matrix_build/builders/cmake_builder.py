"""
CMake builder implementation
"""

import shutil
from typing import List, Optional

from ..exceptions import MissingDependencyError
from ..job import BuildJob
from .base_builder import BaseBuilder
from .flags import FlagResolver


class CMakeBuilder(BaseBuilder):
    """Builder for CMake-based projects"""

    def __init__(self, *args, cmake: Optional[str] = None, **kwargs):
        super().__init__(*args, **kwargs)

        # Get CMake executable
        self.cmake = cmake or shutil.which("cmake")
        if not self.cmake:
            raise MissingDependencyError("cmake", "install it from https://cmake.org/download/")

    def configure_command(self, job: BuildJob) -> List[str]:
        """Build the ``cmake -S -B`` command line for a job"""
        cmd = [self.cmake, "-S", str(self.source_dir), "-B", str(job.work_dir)]
        cmd.extend(FlagResolver.generator_args(job.generator, job.arch))
        cmd.append(f"-DCMAKE_BUILD_TYPE={job.build_type}")
        cmd.extend(job.toolchain_args)
        cmd.extend(job.optimization_flags)
        cmd.append(f"-DCMAKE_INSTALL_PREFIX={job.output_dir}")
        return cmd

    def build_command(self, job: BuildJob, jobs: int) -> List[str]:
        return [
            self.cmake,
            "--build", str(job.work_dir),
            "--config", job.build_type,
            "--parallel", str(jobs)
        ]

    def configure(self, job: BuildJob) -> bool:
        """Configure using CMake"""
        return self.run_command(self.configure_command(job), cwd=self.source_dir).returncode == 0

    def build(self, job: BuildJob, jobs: int) -> bool:
        """Build using CMake"""
        return self.run_command(self.build_command(job, jobs)).returncode == 0
