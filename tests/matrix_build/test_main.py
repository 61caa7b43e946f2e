import pytest

from conftest import set_host, set_tools
from matrix_build.config import ConfigLoader
from matrix_build.exceptions import ConfigurationError
from matrix_build.job import LinkageType, Target
from matrix_build.main import main


def test_help_lists_matrix(capsys):
    assert main(["help"]) == 0

    out = capsys.readouterr().out
    assert "clean" in out
    assert "BUILD_TYPE" in out
    assert "  - darwin: x86_64, arm64" in out
    assert "  - windows: x86_64, aarch64" in out


def test_unknown_command_is_rejected():
    with pytest.raises(SystemExit) as excinfo:
        main(["deploy"])
    assert excinfo.value.code == 2


def test_invalid_build_type_env(monkeypatch, source_tree, capsys):
    monkeypatch.setenv("BUILD_TYPE", "Fast")

    assert main(["--source-root", str(source_tree)]) == 2
    assert "Invalid build type" in capsys.readouterr().err


def test_missing_cmake_exits_nonzero(monkeypatch, source_tree, config_file):
    original = config_file.read_bytes()
    set_host(monkeypatch, "linux", "x86_64")
    set_tools(monkeypatch)

    assert main(["--source-root", str(source_tree)]) == 1
    assert config_file.read_bytes() == original


def test_clean_command(monkeypatch, source_tree):
    set_host(monkeypatch, "linux", "x86_64")
    out = source_tree / "dist"
    (out / "linux").mkdir(parents=True)

    assert main(["clean", "--source-root", str(source_tree), "--output-dir", str(out)]) == 0
    assert out.is_dir()
    assert list(out.iterdir()) == []


def test_default_matrix_order():
    matrix = ConfigLoader().get_matrix()

    assert matrix.targets == (
        Target("darwin", "x86_64"),
        Target("darwin", "arm64"),
        Target("linux", "x86_64"),
        Target("linux", "aarch64"),
        Target("windows", "x86_64"),
        Target("windows", "aarch64"),
    )
    assert matrix.linkage_types == (LinkageType.STATIC, LinkageType.SHARED)
    assert len(matrix) == 12
    assert list(matrix.jobs())[:2] == [
        (Target("darwin", "x86_64"), LinkageType.STATIC),
        (Target("darwin", "x86_64"), LinkageType.SHARED),
    ]


def test_project_override_is_merged(tmp_path):
    override = tmp_path / "project.yaml"
    override.write_text(
        "project:\n"
        "  library: mylib\n"
        "targets:\n"
        "  - platform: linux\n"
        "    architectures: [x86_64]\n"
    )

    loader = ConfigLoader(override_file=override)

    assert loader.get_project().library == "mylib"
    assert str(loader.get_project().config_file) == "yoga/CMakeLists.txt"
    assert loader.get_matrix().targets == (Target("linux", "x86_64"),)
    assert loader.get_cross_prefix("linux", "aarch64") == "aarch64-linux-gnu"


def test_bad_linkage_type_rejected(tmp_path):
    override = tmp_path / "project.yaml"
    override.write_text("linkage_types: [STATIC, MODULE]\n")

    with pytest.raises(ConfigurationError):
        ConfigLoader(override_file=override).get_matrix()


def test_build_type_precedence(monkeypatch):
    loader = ConfigLoader()

    assert loader.get_build_type() == "Release"
    monkeypatch.setenv("BUILD_TYPE", "Debug")
    assert loader.get_build_type() == "Debug"
    assert loader.get_build_type("Release") == "Release"


def test_help_with_missing_config_exits_2(tmp_path, capsys):
    assert main(["help", "--config", str(tmp_path / "absent.yaml")]) == 2
    assert "Error initializing build system" in capsys.readouterr().err


def test_help_with_malformed_config_exits_2(tmp_path, capsys):
    override = tmp_path / "project.yaml"
    override.write_text("targets: [linux\n")

    assert main(["help", "--config", str(override)]) == 2
    assert "Invalid YAML" in capsys.readouterr().err
