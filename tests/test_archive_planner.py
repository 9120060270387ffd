from pathlib import Path

import pytest

from nativebuild.archive import ARCHIVE_STAGES, ArchiveSpec, check_archive_spec, plan_archive
from nativebuild.errors import PreconditionError
from nativebuild.filesystem import ProjectFilesystem, SourcePath, source_paths
from nativebuild.scrub import TimestampScrubber
from nativebuild.steps import MkdirStep, ScrubStep, ShellStep
from nativebuild.toolchain import ArchiveContents, Archiver, Tool, bsd_archiver, llvm_archiver


def _archiver(*, requires_ranlib: bool = False, thin: bool = True) -> Archiver:
    return Archiver(
        flavor="test",
        command=("ar",),
        normal_options=("rcs",),
        thin_options=("rcsT",) if thin else None,
        requires_ranlib=requires_ranlib,
    )


def test_normal_archive_without_ranlib_or_scrubbers(project_fs: ProjectFilesystem) -> None:
    spec = ArchiveSpec(
        archiver=_archiver(),
        filesystem=project_fs,
        output_path=Path("out.a"),
        inputs=source_paths(project_fs, "a.o", "b.o"),
    )

    steps = plan_archive(spec)

    assert steps == (
        MkdirStep(path=project_fs.root),
        ShellStep(
            argv=("ar", "rcs", "out.a", "a.o", "b.o"),
            working_root=project_fs.root,
            environment={},
            short_name="archive",
        ),
    )


def test_thin_archive_with_ranlib_and_scrubber(project_fs: ProjectFilesystem) -> None:
    scrubber = TimestampScrubber()
    spec = ArchiveSpec(
        archiver=_archiver(requires_ranlib=True),
        filesystem=project_fs,
        output_path=Path("lib/out.a"),
        inputs=source_paths(project_fs, "obj/a.o", "obj/b.o"),
        ranlib=Tool(command=("ranlib",), environment={"ZERO_AR_DATE": "1"}),
        ranlib_flags=("-D",),
        contents=ArchiveContents.THIN,
        scrubbers=(scrubber,),
    )

    steps = plan_archive(spec)

    assert [step.short_name for step in steps] == ["mkdir", "archive", "ranlib", "scrub"]
    mkdir, archive, ranlib, scrub = steps
    assert mkdir == MkdirStep(path=project_fs.root / "lib")
    assert isinstance(archive, ShellStep)
    assert archive.argv == ("ar", "rcsT", "lib/out.a", "obj/a.o", "obj/b.o")
    assert isinstance(ranlib, ShellStep)
    assert ranlib.argv == ("ranlib", "-D", "lib/out.a")
    assert ranlib.environment == {"ZERO_AR_DATE": "1"}
    assert scrub == ScrubStep(path=project_fs.root / "lib" / "out.a", scrubbers=(scrubber,))


def test_thin_archive_rejects_inputs_from_another_root(tmp_path: Path) -> None:
    output_fs = ProjectFilesystem(root=tmp_path / "main")
    other_fs = ProjectFilesystem(root=tmp_path / "vendor")
    spec = ArchiveSpec(
        archiver=_archiver(),
        filesystem=output_fs,
        output_path=Path("out.a"),
        inputs=(
            SourcePath(filesystem=output_fs, path=Path("a.o")),
            SourcePath(filesystem=other_fs, path=Path("b.o")),
        ),
        contents=ArchiveContents.THIN,
    )

    steps = None
    with pytest.raises(PreconditionError) as excinfo:
        steps = plan_archive(spec)

    assert steps is None
    assert excinfo.value.code == "E_PRECONDITION"
    assert excinfo.value.context["input"] == str(tmp_path / "vendor" / "b.o")
    assert excinfo.value.context["output"] == str(tmp_path / "main" / "out.a")
    assert str(tmp_path / "vendor" / "b.o") in str(excinfo.value)


@pytest.mark.parametrize("escape", ["absolute", "parent"])
def test_thin_archive_rejects_input_escaping_the_root(
    tmp_path: Path,
    project_fs: ProjectFilesystem,
    escape: str,
) -> None:
    outside = tmp_path / "elsewhere" / "b.o"
    path = outside if escape == "absolute" else Path("..") / "elsewhere" / "b.o"
    spec = ArchiveSpec(
        archiver=llvm_archiver(),
        filesystem=project_fs,
        output_path=Path("out.a"),
        inputs=source_paths(project_fs, path),
        contents=ArchiveContents.THIN,
    )

    with pytest.raises(PreconditionError) as excinfo:
        plan_archive(spec)

    assert excinfo.value.context["input"] == str(project_fs.resolve(path))
    assert excinfo.value.context["output"] == str(project_fs.root / "out.a")


def test_thin_archive_rejects_output_outside_the_root(
    tmp_path: Path,
    project_fs: ProjectFilesystem,
) -> None:
    spec = ArchiveSpec(
        archiver=llvm_archiver(),
        filesystem=project_fs,
        output_path=tmp_path / "dist" / "out.a",
        inputs=source_paths(project_fs, "a.o"),
        contents=ArchiveContents.THIN,
    )

    with pytest.raises(PreconditionError, match="output is not under"):
        plan_archive(spec)


def test_thin_archive_accepts_absolute_input_inside_the_root(project_fs: ProjectFilesystem) -> None:
    spec = ArchiveSpec(
        archiver=llvm_archiver(),
        filesystem=project_fs,
        output_path=Path("out.a"),
        inputs=source_paths(project_fs, project_fs.root / "obj" / "a.o"),
        contents=ArchiveContents.THIN,
    )

    archive = plan_archive(spec)[1]

    assert isinstance(archive, ShellStep)
    assert archive.argv == ("llvm-ar", "rcsDT", "out.a", str(Path("obj") / "a.o"))


def test_normal_archive_accepts_inputs_from_another_root(tmp_path: Path) -> None:
    output_fs = ProjectFilesystem(root=tmp_path / "main")
    other_fs = ProjectFilesystem(root=tmp_path / "vendor")
    spec = ArchiveSpec(
        archiver=_archiver(),
        filesystem=output_fs,
        output_path=Path("out.a"),
        inputs=(SourcePath(filesystem=other_fs, path=Path("b.o")),),
    )

    archive = plan_archive(spec)[1]

    assert isinstance(archive, ShellStep)
    assert archive.argv[-1] == str(Path("..") / "vendor" / "b.o")


def test_thin_request_on_archiver_without_thin_support(project_fs: ProjectFilesystem) -> None:
    spec = ArchiveSpec(
        archiver=_archiver(thin=False),
        filesystem=project_fs,
        output_path=Path("out.a"),
        contents=ArchiveContents.THIN,
    )

    with pytest.raises(PreconditionError, match="does not support thin archives"):
        plan_archive(spec)


def test_missing_ranlib_is_a_precondition_failure(project_fs: ProjectFilesystem) -> None:
    spec = ArchiveSpec(
        archiver=_archiver(requires_ranlib=True),
        filesystem=project_fs,
        output_path=Path("out.a"),
        inputs=source_paths(project_fs, "a.o"),
    )

    with pytest.raises(PreconditionError, match="ranlib is required"):
        check_archive_spec(spec)


def test_ranlib_stage_refuses_spec_without_ranlib(project_fs: ProjectFilesystem) -> None:
    spec = ArchiveSpec(
        archiver=_archiver(requires_ranlib=True),
        filesystem=project_fs,
        output_path=Path("out.a"),
    )
    ranlib_stage = next(stage for stage in ARCHIVE_STAGES if stage.name == "ranlib")

    assert ranlib_stage.applies(spec)
    with pytest.raises(PreconditionError, match="ranlib is required") as excinfo:
        ranlib_stage.build(spec)
    assert excinfo.value.context["output"] == str(project_fs.root / "out.a")


def test_bsd_scrub_step_uses_source_date_epoch(
    project_fs: ProjectFilesystem,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("SOURCE_DATE_EPOCH", "1700000000")
    spec = ArchiveSpec(
        archiver=bsd_archiver(),
        filesystem=project_fs,
        output_path=Path("out.a"),
        inputs=source_paths(project_fs, "a.o"),
        ranlib=Tool(command=("ranlib",)),
    )

    steps = plan_archive(spec)

    assert [step.short_name for step in steps] == ["mkdir", "archive", "ranlib", "scrub"]
    assert steps[-1] == ScrubStep(
        path=project_fs.root / "out.a",
        scrubbers=(TimestampScrubber(epoch=1700000000),),
    )


@pytest.mark.parametrize("count", [0, 1, 5])
def test_ranlib_stage_follows_archiver_requirement_only(
    project_fs: ProjectFilesystem,
    count: int,
) -> None:
    inputs = source_paths(project_fs, *(f"m{i}.o" for i in range(count)))
    without = ArchiveSpec(
        archiver=_archiver(requires_ranlib=False),
        filesystem=project_fs,
        output_path=Path("out.a"),
        inputs=inputs,
        ranlib=Tool(command=("ranlib",)),
    )
    with_ranlib = ArchiveSpec(
        archiver=_archiver(requires_ranlib=True),
        filesystem=project_fs,
        output_path=Path("out.a"),
        inputs=inputs,
        ranlib=Tool(command=("ranlib",)),
    )

    assert "ranlib" not in [step.short_name for step in plan_archive(without)]
    assert [step.short_name for step in plan_archive(with_ranlib)] == ["mkdir", "archive", "ranlib"]


def test_input_order_is_preserved(project_fs: ProjectFilesystem) -> None:
    names = ["z.o", "a.o", "m.o", "a.o"]
    spec = ArchiveSpec(
        archiver=_archiver(),
        filesystem=project_fs,
        output_path=Path("out.a"),
        inputs=source_paths(project_fs, *names),
    )

    archive = plan_archive(spec)[1]

    assert isinstance(archive, ShellStep)
    assert list(archive.argv[-4:]) == names


def test_archiver_scrubbers_run_before_request_scrubbers(project_fs: ProjectFilesystem) -> None:
    own = TimestampScrubber(epoch=1)
    extra = TimestampScrubber(epoch=2)
    archiver = Archiver(
        flavor="test",
        command=("ar",),
        normal_options=("rcs",),
        scrubbers=(own,),
    )
    spec = ArchiveSpec(
        archiver=archiver,
        filesystem=project_fs,
        output_path=Path("out.a"),
        scrubbers=(extra,),
    )

    scrub = plan_archive(spec)[-1]

    assert isinstance(scrub, ScrubStep)
    assert scrub.scrubbers == (own, extra)


def test_archive_step_carries_flags_and_environment(project_fs: ProjectFilesystem) -> None:
    archiver = Archiver(
        flavor="test",
        command=("xcrun", "ar"),
        normal_options=("-q", "-c"),
        environment={"ZERO_AR_DATE": "1"},
    )
    spec = ArchiveSpec(
        archiver=archiver,
        filesystem=project_fs,
        output_path=Path("out.a"),
        inputs=source_paths(project_fs, "a.o"),
        archiver_flags=("-S",),
    )

    archive = plan_archive(spec)[1]

    assert isinstance(archive, ShellStep)
    assert archive.argv == ("xcrun", "ar", "-S", "-q", "-c", "out.a", "a.o")
    assert archive.environment == {"ZERO_AR_DATE": "1"}
    assert archive.working_root == project_fs.root


def test_plan_is_repeatable(project_fs: ProjectFilesystem) -> None:
    spec = ArchiveSpec(
        archiver=_archiver(requires_ranlib=True),
        filesystem=project_fs,
        output_path=Path("out.a"),
        inputs=source_paths(project_fs, "a.o"),
        ranlib=Tool(command=("ranlib",)),
    )

    assert plan_archive(spec) == plan_archive(spec)
