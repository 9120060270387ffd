"""Debug-symbol bundle extraction.

The linker does not copy debug information out of object files into an
executable; it only records where the objects live. ``dsymutil`` follows
those references and gathers the DWARF into a ``.dSYM`` bundle next to the
binary. The binary must already exist when this step runs.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from nativebuild.filesystem import ProjectFilesystem
from nativebuild.steps import ShellStep
from nativebuild.toolchain import CxxPlatform, Tool

DSYMUTIL = "dsymutil"


@dataclass(frozen=True, slots=True)
class DebugSymbolSpec:
    tool_command: tuple[str, ...]
    input_binary: Path
    output_bundle: Path
    filesystem: ProjectFilesystem
    extra_flags: tuple[str, ...] = ()
    environment: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_tool(
        cls,
        tool: Tool,
        *,
        input_binary: str | Path,
        output_bundle: str | Path,
        filesystem: ProjectFilesystem,
        extra_flags: tuple[str, ...] = (),
    ) -> DebugSymbolSpec:
        return cls(
            tool_command=tool.command,
            input_binary=Path(input_binary),
            output_bundle=Path(output_bundle),
            filesystem=filesystem,
            extra_flags=extra_flags,
            environment=dict(tool.environment),
        )

    @classmethod
    def from_platform(
        cls,
        platform: CxxPlatform,
        *,
        input_binary: str | Path,
        filesystem: ProjectFilesystem,
        output_bundle: str | Path | None = None,
    ) -> DebugSymbolSpec:
        tool = platform.dsymutil or Tool(command=(DSYMUTIL,))
        binary = Path(input_binary)
        if output_bundle is None:
            output_bundle = binary.with_name(f"{binary.stem}.dSYM")
        return cls.from_tool(
            tool,
            input_binary=binary,
            output_bundle=output_bundle,
            filesystem=filesystem,
            extra_flags=platform.dsymutil_flags,
        )


def plan_debug_symbols(spec: DebugSymbolSpec) -> ShellStep:
    argv = (
        *spec.tool_command,
        *spec.extra_flags,
        "-o",
        str(spec.filesystem.resolve(spec.output_bundle)),
        str(spec.filesystem.resolve(spec.input_binary)),
    )
    return ShellStep(
        argv=argv,
        working_root=spec.filesystem.root,
        environment=dict(spec.environment),
        short_name=DSYMUTIL,
    )
