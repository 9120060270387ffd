"""Turn an archive request into the ordered steps that produce it.

Stages always run as mkdir, archive, ranlib, scrub. Scrubbing comes last
because ranlib also writes bytes that need normalizing.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from nativebuild.archive.model import ArchiveSpec
from nativebuild.errors import PreconditionError
from nativebuild.steps import BuildStep, MkdirStep, ScrubStep, ShellStep


@dataclass(frozen=True, slots=True)
class Stage:
    name: str
    applies: Callable[[ArchiveSpec], bool]
    build: Callable[[ArchiveSpec], BuildStep]


def check_archive_spec(spec: ArchiveSpec) -> None:
    """Raise PreconditionError if *spec* cannot produce a valid archive."""
    output = str(spec.resolved_output())
    if spec.thin and not spec.archiver.supports_thin:
        raise PreconditionError(
            "Archive tool for this platform does not support thin archives.",
            hint="Request normal archive contents or switch archiver flavor.",
            context={"archiver": spec.archiver.flavor, "output": output},
        )
    if spec.archiver.requires_ranlib and spec.ranlib is None:
        raise PreconditionError(
            "ranlib is required by this archiver but none was supplied.",
            context={"archiver": spec.archiver.flavor, "output": output},
        )
    if not spec.thin:
        return
    # Thin archives embed paths relative to the output, which are meaningless
    # across filesystem roots.
    for source in spec.inputs:
        if not source.filesystem.same_root(spec.filesystem):
            raise PreconditionError(
                "Thin archive input is not under the output's filesystem root.",
                hint="Build a normal archive or move the input into the same project.",
                context={
                    "input": str(source.absolute()),
                    "output": output,
                    "input_root": str(source.filesystem.root),
                    "output_root": str(spec.filesystem.root),
                },
            )

    root = spec.filesystem.root_identity()
    if not spec.resolved_output().resolve().is_relative_to(root):
        raise PreconditionError(
            "Thin archive output is not under its filesystem root.",
            context={"output": output, "output_root": str(spec.filesystem.root)},
        )
    for source in spec.inputs:
        if not source.absolute().resolve().is_relative_to(root):
            raise PreconditionError(
                "Thin archive input does not resolve under the output's filesystem root.",
                hint="Build a normal archive or move the input into the same project.",
                context={
                    "input": str(source.absolute()),
                    "output": output,
                    "output_root": str(spec.filesystem.root),
                },
            )


def _mkdir_stage(spec: ArchiveSpec) -> BuildStep:
    return MkdirStep(path=spec.resolved_output().parent)


def _archive_stage(spec: ArchiveSpec) -> BuildStep:
    fs = spec.filesystem
    argv = (
        *spec.archiver.command,
        *spec.archiver_flags,
        *spec.archiver.archive_options(spec.thin),
        str(fs.relative_path(spec.output_path)),
        *(str(fs.relative_path(source.absolute())) for source in spec.inputs),
    )
    return ShellStep(
        argv=argv,
        working_root=fs.root,
        environment=dict(spec.archiver.environment),
        short_name="archive",
    )


def _ranlib_stage(spec: ArchiveSpec) -> BuildStep:
    if spec.ranlib is None:
        raise PreconditionError(
            "ranlib is required by this archiver but none was supplied.",
            context={"archiver": spec.archiver.flavor, "output": str(spec.resolved_output())},
        )
    argv = (
        *spec.ranlib.command,
        *spec.ranlib_flags,
        str(spec.filesystem.relative_path(spec.output_path)),
    )
    return ShellStep(
        argv=argv,
        working_root=spec.filesystem.root,
        environment=dict(spec.ranlib.environment),
        short_name="ranlib",
    )


def _scrub_stage(spec: ArchiveSpec) -> BuildStep:
    return ScrubStep(path=spec.resolved_output(), scrubbers=spec.all_scrubbers)


ARCHIVE_STAGES: tuple[Stage, ...] = (
    Stage(name="mkdir", applies=lambda spec: True, build=_mkdir_stage),
    Stage(name="archive", applies=lambda spec: True, build=_archive_stage),
    Stage(name="ranlib", applies=lambda spec: spec.archiver.requires_ranlib, build=_ranlib_stage),
    Stage(name="scrub", applies=lambda spec: bool(spec.all_scrubbers), build=_scrub_stage),
)


def plan_archive(spec: ArchiveSpec) -> tuple[BuildStep, ...]:
    check_archive_spec(spec)
    return tuple(stage.build(spec) for stage in ARCHIVE_STAGES if stage.applies(spec))
