"""Project-rooted path resolution.

Every path handed to a planner is either absolute or relative to the root of
the project filesystem that owns it. Planners only ever ask two questions of
a filesystem: "where does this path live on disk" and "do these two paths
share a root".
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class ProjectFilesystem:
    root: Path

    def resolve(self, path: str | Path) -> Path:
        candidate = Path(path)
        if candidate.is_absolute():
            return candidate
        return self.root / candidate

    def relative_path(self, path: str | Path) -> Path:
        """Return *path* relative to the root, walking up with ``..`` if needed."""
        return Path(os.path.relpath(self.resolve(path), self.root))

    def root_identity(self) -> Path:
        return self.root.resolve()

    def same_root(self, other: ProjectFilesystem) -> bool:
        if self.root == other.root:
            return True
        return self.root_identity() == other.root_identity()


@dataclass(frozen=True, slots=True)
class SourcePath:
    """A path paired with the filesystem it belongs to."""

    filesystem: ProjectFilesystem
    path: Path

    def absolute(self) -> Path:
        return self.filesystem.resolve(self.path)

    def __str__(self) -> str:
        return str(self.path)


def source_paths(filesystem: ProjectFilesystem, *paths: str | Path) -> tuple[SourcePath, ...]:
    return tuple(SourcePath(filesystem=filesystem, path=Path(path)) for path in paths)
