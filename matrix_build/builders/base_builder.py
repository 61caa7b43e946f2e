"""
Base builder class that all builders inherit from
"""

import os
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional, Any

from ..job import BuildJob


class BaseBuilder(ABC):
    """Abstract base class for the external build system

    A builder knows how to configure and build one job's working
    directory. It does not decide what to build.
    """

    def __init__(self,
                 source_dir: Path,
                 logger: Any,
                 dry_run: bool = False):
        """
        Initialize base builder

        Args:
            source_dir: Library source root
            logger: Logger instance
            dry_run: If True, don't actually run commands
        """
        self.source_dir = Path(source_dir).resolve()
        self.logger = logger
        self.dry_run = dry_run

        if not self.source_dir.exists():
            raise FileNotFoundError(f"Source directory not found: {self.source_dir}")

        self.env = os.environ.copy()

    def run_command(self,
                   cmd: List[str],
                   cwd: Optional[Path] = None,
                   env: Optional[Dict] = None,
                   check: bool = True,
                   capture_output: bool = False) -> subprocess.CompletedProcess:
        """
        Run a command with logging

        Args:
            cmd: Command and arguments
            cwd: Working directory
            env: Environment variables
            check: Raise exception on non-zero exit
            capture_output: Capture stdout/stderr

        Returns:
            CompletedProcess instance
        """
        if cwd is None:
            cwd = self.source_dir
        if env is None:
            env = self.env

        cmd_str = " ".join(str(c) for c in cmd)
        self.logger.debug(f"Running: {cmd_str}")
        self.logger.debug(f"  in: {cwd}")

        if self.dry_run:
            self.logger.info(f"[DRY RUN] Would run: {cmd_str}")
            return subprocess.CompletedProcess(cmd, 0, "", "")

        try:
            result = subprocess.run(
                [str(c) for c in cmd],
                cwd=cwd,
                env=env,
                check=check,
                capture_output=capture_output,
                text=True
            )

            if capture_output and result.stdout:
                self.logger.debug(f"Output: {result.stdout}")

            return result

        except subprocess.CalledProcessError as e:
            self.logger.error(f"Command failed: {cmd_str}")
            if e.stdout:
                self.logger.error(f"stdout: {e.stdout}")
            if e.stderr:
                self.logger.error(f"stderr: {e.stderr}")
            raise

    @abstractmethod
    def configure(self, job: BuildJob) -> bool:
        """Generate the job's working directory"""
        pass

    @abstractmethod
    def build(self, job: BuildJob, jobs: int) -> bool:
        """Compile inside the job's working directory"""
        pass
