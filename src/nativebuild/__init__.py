"""Public package entrypoint for native artifact build-step planning."""

from .archive import (
    ArchiveReference,
    ArchiveRule,
    ArchiveSpec,
    DirectArchiveRef,
    ThinArchiveRef,
    build_reference,
    plan_archive,
)
from .dsym import DebugSymbolSpec, plan_debug_symbols
from .errors import (
    ErrorCode,
    ManifestError,
    NativeBuildError,
    PreconditionError,
    StepExecutionError,
    ToolchainError,
    ValidationError,
)
from .filesystem import ProjectFilesystem, SourcePath
from .steps import BuildStep, MkdirStep, ScrubStep, ShellStep, StepResult
from .toolchain import ArchiveContents, Archiver, CxxPlatform, Tool

__all__ = [
    "ArchiveContents",
    "ArchiveReference",
    "ArchiveRule",
    "ArchiveSpec",
    "Archiver",
    "BuildStep",
    "CxxPlatform",
    "DebugSymbolSpec",
    "DirectArchiveRef",
    "ErrorCode",
    "ManifestError",
    "MkdirStep",
    "NativeBuildError",
    "PreconditionError",
    "ProjectFilesystem",
    "ScrubStep",
    "ShellStep",
    "SourcePath",
    "StepExecutionError",
    "StepResult",
    "ThinArchiveRef",
    "Tool",
    "ToolchainError",
    "ValidationError",
    "build_reference",
    "plan_archive",
    "plan_debug_symbols",
]
