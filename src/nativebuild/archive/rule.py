"""Build-rule wrapper around an archive request."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from nativebuild.archive.model import ArchiveReference, ArchiveSpec
from nativebuild.archive.planner import plan_archive
from nativebuild.archive.reference import build_reference
from nativebuild.errors import PreconditionError
from nativebuild.filesystem import ProjectFilesystem, SourcePath
from nativebuild.scrub import Scrubber
from nativebuild.steps import BuildStep
from nativebuild.toolchain import ArchiveContents, CxxPlatform


@dataclass(frozen=True, slots=True)
class ArchiveRule:
    """A static archive target.

    ``cacheable`` is decided by whoever creates the rule; a caller may clear
    it for thin archives whose relative member paths are unsafe to share.
    """

    target: str
    spec: ArchiveSpec
    cacheable: bool = True

    def __post_init__(self) -> None:
        context = {"target": self.target, "output": str(self.spec.output_path)}
        if self.spec.thin and not self.spec.archiver.supports_thin:
            raise PreconditionError(
                f"{self.target}: archive tool for this platform does not support thin archives.",
                context=context,
            )
        if self.spec.archiver.requires_ranlib and self.spec.ranlib is None:
            raise PreconditionError(f"{self.target}: ranlib is required.", context=context)

    @classmethod
    def from_platform(
        cls,
        *,
        target: str,
        filesystem: ProjectFilesystem,
        platform: CxxPlatform,
        output_path: str | Path,
        inputs: Iterable[SourcePath],
        contents: ArchiveContents | None = None,
        cacheable: bool = True,
        scrubbers: tuple[Scrubber, ...] = (),
    ) -> ArchiveRule:
        spec = ArchiveSpec(
            archiver=platform.ar,
            filesystem=filesystem,
            output_path=Path(output_path),
            inputs=tuple(inputs),
            archiver_flags=platform.arflags,
            ranlib=platform.ranlib,
            ranlib_flags=platform.ranlibflags,
            contents=platform.archive_contents if contents is None else contents,
            scrubbers=scrubbers,
        )
        return cls(target=target, spec=spec, cacheable=cacheable)

    def steps(self) -> tuple[BuildStep, ...]:
        return plan_archive(self.spec)

    def source_path_to_output(self) -> SourcePath:
        return SourcePath(filesystem=self.spec.filesystem, path=self.spec.output_path)

    def to_reference(self) -> ArchiveReference:
        return build_reference(self.spec, self.spec.resolved_output())
