from matrix_build.job import BuildJob, LinkageType, Target
from matrix_build.utils.artifacts import (
    ArtifactCollector,
    CopyStatus,
    list_artifacts,
)


def _make_job(source_tree, tmp_path, platform="linux", arch="x86_64",
              linkage=LinkageType.STATIC, ext="a"):
    work_dir = source_tree / f"build_{platform}_{arch}_{linkage.value}"
    work_dir.mkdir()
    return BuildJob(
        target=Target(platform, arch),
        linkage=linkage,
        source_dir=source_tree,
        work_dir=work_dir,
        output_dir=tmp_path / "out" / platform / arch / linkage.lower,
        lib_extension=ext,
        optimization_flags=(),
        toolchain_args=(),
        generator="Unix Makefiles",
    )


def _make_collector(source_tree, logger):
    return ArtifactCollector("yogacore", source_tree / "yoga", logger)


def test_harvest_copies_binary_and_mirrors_headers(source_tree, tmp_path, logger):
    job = _make_job(source_tree, tmp_path)
    nested = job.work_dir / "yoga" / "CMakeFiles"
    nested.mkdir(parents=True)
    (job.work_dir / "yoga" / "libyogacore.a").write_bytes(b"archive")

    report = _make_collector(source_tree, logger).harvest(job)

    assert report.binary.status == CopyStatus.COPIED
    assert (job.output_dir / "libyogacore.a").read_bytes() == b"archive"
    # top-level headers next to the binary
    assert (job.output_dir / "Yoga.h").is_file()
    assert not (job.output_dir / "Node.h").exists()
    # full tree mirrored under yoga/
    assert (job.output_dir / "yoga" / "Yoga.h").is_file()
    assert (job.output_dir / "yoga" / "node" / "Node.h").is_file()
    assert not (job.output_dir / "yoga" / "node" / "Node.cpp").exists()
    assert report.headers_copied == 5


def test_missing_binary_is_reported_not_raised(source_tree, tmp_path, logger):
    job = _make_job(source_tree, tmp_path)

    report = _make_collector(source_tree, logger).harvest(job)

    assert report.binary.status == CopyStatus.NOT_FOUND
    assert report.binary.destination is None
    assert report.headers_copied > 0


def test_windows_shared_copies_import_library(source_tree, tmp_path, logger):
    job = _make_job(source_tree, tmp_path, "windows", "x86_64", LinkageType.SHARED, "dll")
    release = job.work_dir / "Release"
    release.mkdir()
    (release / "yogacore.dll").write_bytes(b"MZ")
    (release / "yogacore.lib").write_bytes(b"import")

    report = _make_collector(source_tree, logger).harvest(job)

    assert report.binary.copied
    [import_lib] = report.of_kind("import_library")
    assert import_lib.copied
    assert (job.output_dir / "yogacore.dll").is_file()
    assert (job.output_dir / "yogacore.lib").is_file()


def test_windows_shared_without_import_library_is_tolerated(source_tree, tmp_path, logger):
    job = _make_job(source_tree, tmp_path, "windows", "aarch64", LinkageType.SHARED, "dll")
    (job.work_dir / "yogacore.dll").write_bytes(b"MZ")

    report = _make_collector(source_tree, logger).harvest(job)

    [import_lib] = report.of_kind("import_library")
    assert import_lib.status == CopyStatus.NOT_FOUND


def test_import_library_only_looked_for_on_windows_shared(source_tree, tmp_path, logger):
    job = _make_job(source_tree, tmp_path, "windows", "x86_64", LinkageType.STATIC, "lib")
    (job.work_dir / "yogacore.lib").write_bytes(b"lib")

    report = _make_collector(source_tree, logger).harvest(job)

    assert report.binary.copied
    assert report.of_kind("import_library") == []


def test_missing_header_directory_is_tolerated(source_tree, tmp_path, logger):
    job = _make_job(source_tree, tmp_path)
    collector = ArtifactCollector("yogacore", source_tree / "include", logger)

    report = collector.harvest(job)

    assert report.headers_copied == 0
    assert any(o.kind == "header" and o.status == CopyStatus.NOT_FOUND for o in report.outcomes)


def test_list_artifacts_is_sorted_and_filtered(tmp_path):
    out = tmp_path / "out"
    for rel in ["linux/x86_64/static/libyogacore.a",
                "darwin/arm64/shared/libyogacore.dylib",
                "darwin/arm64/shared/Yoga.h"]:
        path = out / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"")

    assert list_artifacts(out) == [
        out / "darwin/arm64/shared/libyogacore.dylib",
        out / "linux/x86_64/static/libyogacore.a",
    ]
    assert list_artifacts(tmp_path / "missing") == []
