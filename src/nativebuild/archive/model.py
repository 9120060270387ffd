"""Archive request and reference value types."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TypeAlias

from nativebuild.filesystem import ProjectFilesystem, SourcePath
from nativebuild.scrub import Scrubber
from nativebuild.toolchain import ArchiveContents, Archiver, Tool


@dataclass(frozen=True, slots=True)
class ArchiveSpec:
    archiver: Archiver
    filesystem: ProjectFilesystem
    output_path: Path
    inputs: tuple[SourcePath, ...] = ()
    archiver_flags: tuple[str, ...] = ()
    ranlib: Tool | None = None
    ranlib_flags: tuple[str, ...] = ()
    contents: ArchiveContents = ArchiveContents.NORMAL
    scrubbers: tuple[Scrubber, ...] = ()

    @property
    def thin(self) -> bool:
        return self.contents == ArchiveContents.THIN

    @property
    def all_scrubbers(self) -> tuple[Scrubber, ...]:
        return (*self.archiver.scrubbers, *self.scrubbers)

    def resolved_output(self) -> Path:
        return self.filesystem.resolve(self.output_path)


@dataclass(frozen=True, slots=True)
class DirectArchiveRef:
    """A self-contained archive; consumers need only the archive itself."""

    path: Path

    def dependency_paths(self) -> tuple[Path, ...]:
        return (self.path,)


@dataclass(frozen=True, slots=True)
class ThinArchiveRef:
    """A thin archive plus the members it points at.

    Consumers must depend on every member too, since the archive only stores
    their paths.
    """

    path: Path
    inputs: tuple[SourcePath, ...]

    def dependency_paths(self) -> tuple[Path, ...]:
        return (self.path, *(source.absolute() for source in self.inputs))


ArchiveReference: TypeAlias = DirectArchiveRef | ThinArchiveRef
