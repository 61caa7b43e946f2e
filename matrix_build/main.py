#!/usr/bin/env python3
"""
Main entry point for the matrix build system
Builds static and shared libraries for darwin, linux and windows targets
"""

import argparse
import shutil
import sys
import traceback
from pathlib import Path
from typing import Optional

from .builders import BuildExecutor, BuildOrchestrator, CMakeBuilder, ConfigMutator, FlagResolver
from .builders.base_builder import BaseBuilder
from .config import BUILD_TYPES, ConfigLoader
from .exceptions import ConfigurationError, MatrixBuildError, MissingDependencyError
from .job import RunState
from .platform import CapabilityProbe, PlatformDetector
from .utils import ArtifactCollector, Logger


class BuildSystem:
    """Main build system class"""

    def __init__(self,
                 source_root: Optional[Path] = None,
                 output_dir: Optional[Path] = None,
                 build_type: Optional[str] = None,
                 config_file: Optional[Path] = None,
                 verbose: bool = False,
                 dry_run: bool = False,
                 logger: Optional[Logger] = None):
        """
        Initialize the build system

        Args:
            source_root: Library source root (contains the CMakeLists.txt tree)
            output_dir: Output root, defaults to the project's output_dir
            build_type: Debug or Release; falls back to BUILD_TYPE, then config
            config_file: Optional project yaml merged over the packaged matrix
            verbose: Enable verbose output
            dry_run: Perform dry run without actual building
        """
        self.source_root = Path(source_root or Path.cwd()).resolve()
        self.verbose = verbose
        self.dry_run = dry_run

        # Setup logging
        self.logger = logger or Logger(verbose=verbose)

        # Load configuration
        self.config = ConfigLoader(override_file=config_file)
        self.project = self.config.get_project()
        self.matrix = self.config.get_matrix()
        self.build_type = self.config.get_build_type(build_type)

        output_dir = Path(output_dir) if output_dir else self.project.output_dir
        self.output_root = output_dir if output_dir.is_absolute() else self.source_root / output_dir

        # Detect host
        self.host = PlatformDetector().detect()
        self.logger.debug(f"Host: {self.host.platform} ({self.host.arch})")

        self.probe = CapabilityProbe(self.config, self.host, self.logger)
        self.flags = FlagResolver(self.host, self.config)
        self.mutator = ConfigMutator(
            self.source_root / self.project.config_file,
            self.project.library,
            self.logger,
            dry_run=dry_run
        )

    def check_prerequisites(self) -> str:
        """
        Check that the required tools are installed

        Returns:
            Path of the cmake executable

        Raises:
            MissingDependencyError: If a required tool is missing
        """
        self.logger.debug("Checking prerequisites...")
        cmake = None
        for tool in self.config.get_option("required_tools", ["cmake"]):
            path = self.probe.require_tool(tool)
            if tool == "cmake":
                cmake = path
        return cmake or self.probe.require_tool("cmake")

    def create_orchestrator(self, builder: Optional[BaseBuilder] = None) -> BuildOrchestrator:
        """Wire the executor and orchestrator around ``builder`` (CMake by default)"""
        if builder is None:
            builder = CMakeBuilder(
                self.source_root,
                self.logger,
                dry_run=self.dry_run,
                cmake=self.check_prerequisites()
            )

        collector = ArtifactCollector(
            self.project.library,
            self.source_root / self.project.header_dir,
            self.logger,
            dry_run=self.dry_run
        )
        executor = BuildExecutor(builder, self.mutator, self.probe, collector, self.logger)

        return BuildOrchestrator(
            matrix=self.matrix,
            source_dir=self.source_root,
            output_root=self.output_root,
            probe=self.probe,
            flags=self.flags,
            executor=executor,
            mutator=self.mutator,
            logger=self.logger,
            build_type=self.build_type,
            dry_run=self.dry_run
        )

    def run(self, builder: Optional[BaseBuilder] = None) -> RunState:
        """
        Build the whole matrix

        Args:
            builder: External build system; CMake when omitted

        Returns:
            Final RunState

        Raises:
            MissingDependencyError: Before any job starts if cmake is absent
        """
        self.logger.info(f"Starting multi-platform {self.project.library} build...")
        self.logger.info(f"Build type: {self.build_type}")
        self.logger.info(f"Output directory: {self.output_root}")

        orchestrator = self.create_orchestrator(builder)

        if self.config.get_option("clean_output_before_run", True):
            orchestrator.clean_output()

        state = orchestrator.run()
        orchestrator.summarize(state)

        if state.aborted:
            self.logger.error("Multi-platform build aborted")
        else:
            self.logger.success("Multi-platform build completed!")
        return state

    def clean(self) -> None:
        """Remove the output tree and restore the config file if a backup exists"""
        self.logger.info("Cleaning output directory...")
        if not self.dry_run:
            shutil.rmtree(self.output_root, ignore_errors=True)
            self.output_root.mkdir(parents=True, exist_ok=True)
            self.mutator.restore()
        self.logger.success("Cleaned build artifacts")


def describe_matrix(config: ConfigLoader) -> str:
    """Help text listing the configured matrix"""
    lines = [f"This tool builds static and shared {config.get_project().library} libraries for:"]
    by_platform = {}
    for target in config.get_matrix().targets:
        by_platform.setdefault(target.platform, []).append(target.arch)
    for platform_name, archs in by_platform.items():
        lines.append(f"  - {platform_name}: {', '.join(archs)}")
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="matrix-build",
        description="Build a native library for every platform, architecture and linkage type",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment variables:
  BUILD_TYPE          Build type (Debug|Release) [default: Release]
  MATRIX_BUILD_JOBS   Parallel compile jobs [default: CPU count]

Examples:
  %(prog)s                   # Build the full matrix
  %(prog)s clean             # Clean all build artifacts
  BUILD_TYPE=Debug %(prog)s  # Debug variant
        """
    )

    parser.add_argument(
        "command",
        nargs="?",
        default="run",
        choices=["run", "clean", "help"],
        help="Command to execute (default: run)"
    )

    parser.add_argument(
        "--source-root",
        type=Path,
        help="Library source root (default: current directory)"
    )

    parser.add_argument(
        "--output-dir",
        type=Path,
        help="Output directory (default: from config, build_output)"
    )

    parser.add_argument(
        "--build-type",
        choices=list(BUILD_TYPES),
        help="Override BUILD_TYPE"
    )

    parser.add_argument(
        "--config",
        type=Path,
        help="Project yaml merged over the default matrix"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output"
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print commands without building"
    )

    return parser


def main(argv=None):
    """Command-line interface"""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Initialize build system
    try:
        if args.command == "help":
            description = describe_matrix(ConfigLoader(override_file=args.config))
            parser.print_help()
            print()
            print(description)
            return 0

        bs = BuildSystem(
            source_root=args.source_root,
            output_dir=args.output_dir,
            build_type=args.build_type,
            config_file=args.config,
            verbose=args.verbose,
            dry_run=args.dry_run
        )
    except (ConfigurationError, FileNotFoundError) as e:
        print(f"Error initializing build system: {e}", file=sys.stderr)
        return 2

    # Execute command
    try:
        if args.command == "clean":
            bs.clean()
            return 0

        state = bs.run()
        return 1 if state.aborted else 0

    except MissingDependencyError as e:
        bs.logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        print("\nBuild interrupted by user", file=sys.stderr)
        return 130
    except MatrixBuildError as e:
        bs.logger.error(f"Build system error: {e}")
        if args.verbose:
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
