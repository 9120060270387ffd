"""Static archive planning."""

from .model import ArchiveReference, ArchiveSpec, DirectArchiveRef, ThinArchiveRef
from .planner import ARCHIVE_STAGES, Stage, check_archive_spec, plan_archive
from .reference import build_reference
from .rule import ArchiveRule

__all__ = [
    "ARCHIVE_STAGES",
    "ArchiveReference",
    "ArchiveRule",
    "ArchiveSpec",
    "DirectArchiveRef",
    "Stage",
    "ThinArchiveRef",
    "build_reference",
    "check_archive_spec",
    "plan_archive",
]
