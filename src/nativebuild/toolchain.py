"""Resolved toolchain values: tool invocations and archiver capabilities."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum

from nativebuild.errors import ToolchainError
from nativebuild.scrub import Scrubber, TimestampScrubber


class ArchiveContents(StrEnum):
    """NORMAL embeds member contents; THIN embeds relative paths to members."""

    NORMAL = "normal"
    THIN = "thin"


@dataclass(frozen=True, slots=True)
class Tool:
    command: tuple[str, ...]
    environment: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.command:
            raise ToolchainError("Tool command must not be empty.")


@dataclass(frozen=True, slots=True)
class Archiver:
    """An archiver and the capability bits a planner needs from it."""

    flavor: str
    command: tuple[str, ...]
    normal_options: tuple[str, ...]
    thin_options: tuple[str, ...] | None = None
    requires_ranlib: bool = False
    environment: Mapping[str, str] = field(default_factory=dict)
    scrubbers: tuple[Scrubber, ...] = ()

    def __post_init__(self) -> None:
        if not self.command:
            raise ToolchainError(
                "Archiver command must not be empty.",
                context={"flavor": self.flavor},
            )

    @property
    def supports_thin(self) -> bool:
        return self.thin_options is not None

    def archive_options(self, thin: bool) -> tuple[str, ...]:
        if not thin:
            return self.normal_options
        if self.thin_options is None:
            raise ToolchainError(
                "Archiver does not support thin archives.",
                context={"flavor": self.flavor},
            )
        return self.thin_options


def gnu_archiver(
    command: tuple[str, ...] = ("ar",),
    environment: Mapping[str, str] | None = None,
) -> Archiver:
    # `qc` leaves the symbol table stale, so ranlib has to follow.
    return Archiver(
        flavor="gnu",
        command=command,
        normal_options=("qc",),
        thin_options=("qcT",),
        requires_ranlib=True,
        environment=dict(environment or {}),
    )


def llvm_archiver(
    command: tuple[str, ...] = ("llvm-ar",),
    environment: Mapping[str, str] | None = None,
) -> Archiver:
    return Archiver(
        flavor="llvm",
        command=command,
        normal_options=("rcsD",),
        thin_options=("rcsDT",),
        requires_ranlib=False,
        environment=dict(environment or {}),
    )


def bsd_archiver(
    command: tuple[str, ...] = ("ar",),
    environment: Mapping[str, str] | None = None,
) -> Archiver:
    return Archiver(
        flavor="bsd",
        command=command,
        normal_options=("-q", "-c"),
        thin_options=None,
        requires_ranlib=True,
        environment=dict(environment or {}),
        scrubbers=(TimestampScrubber.from_source_date_epoch(),),
    )


_ARCHIVER_FACTORIES = {
    "gnu": gnu_archiver,
    "llvm": llvm_archiver,
    "bsd": bsd_archiver,
}

ARCHIVER_FLAVORS = tuple(sorted(_ARCHIVER_FACTORIES))


def archiver_for(
    flavor: str,
    command: tuple[str, ...] | None = None,
    environment: Mapping[str, str] | None = None,
) -> Archiver:
    factory = _ARCHIVER_FACTORIES.get(flavor)
    if factory is None:
        raise ToolchainError(
            f"Unknown archiver flavor {flavor!r}.",
            hint=f"Use one of: {', '.join(ARCHIVER_FLAVORS)}.",
            context={"flavor": flavor},
        )
    if command is None:
        return factory(environment=environment)
    return factory(command=command, environment=environment)


@dataclass(frozen=True, slots=True)
class CxxPlatform:
    """Per-platform archiving and debug-info tools, already resolved."""

    name: str
    ar: Archiver
    arflags: tuple[str, ...] = ()
    ranlib: Tool | None = None
    ranlibflags: tuple[str, ...] = ()
    archive_contents: ArchiveContents = ArchiveContents.NORMAL
    dsymutil: Tool | None = None
    dsymutil_flags: tuple[str, ...] = ()
