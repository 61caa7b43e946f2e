"""
Shared pytest fixtures for the matrix build tests.

Builds a throwaway library source tree under tmp_path and provides a fake
build system that drops library files into the working directory instead
of running cmake.
"""
import sys
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parents[2]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from matrix_build.builders.base_builder import BaseBuilder
from matrix_build.config import ConfigLoader
from matrix_build.job import LinkageType
from matrix_build.main import BuildSystem
from matrix_build.platform import CapabilityProbe, HostInfo, PlatformDetector
from matrix_build.utils import Logger

CMAKE_LISTS = (
    b"cmake_minimum_required(VERSION 3.13...3.26)\r\n"
    b"project(yogacore)\r\n"
    b"\r\n"
    b"file(GLOB SOURCES CONFIGURE_DEPENDS ${CMAKE_CURRENT_SOURCE_DIR}/**/*.cpp)\r\n"
    b"add_library(yogacore STATIC ${SOURCES})\r\n"
    b"target_include_directories(yogacore PUBLIC ${CMAKE_CURRENT_SOURCE_DIR}/..)\r\n"
)


class FakeBuilder(BaseBuilder):
    """Stands in for cmake; fails configure on the Nth call when asked to"""

    def __init__(self, source_dir, logger, config_file, fail_configure_on=None, fail_build_on=None):
        super().__init__(source_dir, logger)
        self.config_file = Path(config_file)
        self.fail_configure_on = fail_configure_on
        self.fail_build_on = fail_build_on
        self.configured = []
        self.built = []
        self.observed = []

    def configure(self, job):
        self.configured.append(job.label)
        self.observed.append({
            "label": job.label,
            "work_dir_exists": job.work_dir.is_dir(),
            "config": self.config_file.read_bytes(),
        })
        return len(self.configured) != self.fail_configure_on

    def build(self, job, jobs):
        self.built.append((job.label, jobs))
        if len(self.built) == self.fail_build_on:
            return False

        lib_dir = job.work_dir / "yoga"
        lib_dir.mkdir(parents=True, exist_ok=True)
        prefix = "" if job.platform == "windows" else "lib"
        (lib_dir / f"{prefix}yogacore.{job.lib_extension}").write_bytes(b"\x7fELF")
        if job.platform == "windows" and job.linkage == LinkageType.SHARED:
            (lib_dir / "yogacore.lib").write_bytes(b"!<arch>")
        return True


@pytest.fixture
def logger():
    return Logger(verbose=True, name="matrix_build.tests")


@pytest.fixture
def source_tree(tmp_path):
    root = (tmp_path / "src").resolve()
    yoga = root / "yoga"
    (yoga / "node").mkdir(parents=True)
    (yoga / "CMakeLists.txt").write_bytes(CMAKE_LISTS)
    (yoga / "Yoga.h").write_text("#pragma once\n")
    (yoga / "YGEnums.h").write_text("#pragma once\n")
    (yoga / "node" / "Node.h").write_text("#pragma once\n")
    (yoga / "node" / "Node.cpp").write_text("int x;\n")
    return root


@pytest.fixture
def config_file(source_tree):
    return source_tree / "yoga" / "CMakeLists.txt"


@pytest.fixture
def config():
    return ConfigLoader()


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    monkeypatch.delenv("BUILD_TYPE", raising=False)
    monkeypatch.setenv("MATRIX_BUILD_JOBS", "2")


def set_tools(monkeypatch, *tools):
    """Only the named executables exist on PATH"""
    available = set(tools)
    monkeypatch.setattr(
        "matrix_build.platform.shutil.which",
        lambda name: f"/usr/bin/{name}" if name in available else None,
    )


def set_host(monkeypatch, platform, arch):
    host = HostInfo(platform, arch)
    monkeypatch.setattr(PlatformDetector, "detect", lambda self: host)
    return host


def make_probe(config, host, logger):
    return CapabilityProbe(config, host, logger)


def make_system(source_tree, logger, **kwargs):
    return BuildSystem(source_root=source_tree, logger=logger, **kwargs)
