"""Decide how dependent rules consume an archive."""

from __future__ import annotations

from pathlib import Path

from nativebuild.archive.model import ArchiveReference, ArchiveSpec, DirectArchiveRef, ThinArchiveRef
from nativebuild.toolchain import ArchiveContents


def build_reference(spec: ArchiveSpec, output_path: Path) -> ArchiveReference:
    if spec.contents == ArchiveContents.NORMAL:
        return DirectArchiveRef(path=output_path)
    return ThinArchiveRef(path=output_path, inputs=tuple(spec.inputs))
