"""Command-line entrypoint.

Usage:
    nativebuild archive --output lib/libfoo.a a.o b.o
    nativebuild archive --flavor gnu --thin --dry-run --output lib/libfoo.a a.o b.o
    nativebuild dsym --input App.bin

Archivers that need a symbol-table rebuild get `ranlib` unless --ranlib says otherwise.
"""

from __future__ import annotations

import argparse
import shlex
import sys
from collections.abc import Sequence
from pathlib import Path

from nativebuild.archive import ArchiveRule
from nativebuild.config import ExecutionConfig
from nativebuild.dsym import DebugSymbolSpec, plan_debug_symbols
from nativebuild.errors import NativeBuildError, ValidationError
from nativebuild.executors import LocalStepExecutor, run_plan
from nativebuild.filesystem import ProjectFilesystem, source_paths
from nativebuild.manifest import PlanManifest
from nativebuild.observability import StructuredLogger
from nativebuild.steps import BuildStep
from nativebuild.toolchain import ARCHIVER_FLAVORS, ArchiveContents, CxxPlatform, Tool, archiver_for

DEFAULT_RANLIB = "ranlib"


def _parse_env(pairs: Sequence[str]) -> dict[str, str]:
    env: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValidationError("Environment entries must look like KEY=VALUE.", context={"entry": pair})
        env[key] = value
    return env


def _execute(
    rule: str,
    steps: tuple[BuildStep, ...],
    args: argparse.Namespace,
    *,
    cacheable: bool = True,
    references: Sequence[Path] = (),
) -> int:
    manifest = PlanManifest.from_steps(rule, steps, cacheable=cacheable, references=references)
    if args.manifest is not None:
        if args.manifest.suffix == ".cbor":
            manifest.to_cbor(args.manifest)
        else:
            manifest.to_json(args.manifest)

    if args.dry_run:
        for step in steps:
            print(f"[{step.short_name}] {step.describe()}")
        return 0

    config = ExecutionConfig.from_env()
    logger = StructuredLogger()
    outcome = run_plan(steps, LocalStepExecutor(config=config), logger=logger, rule=rule)
    if config.log_path is not None:
        logger.to_json_lines(config.log_path)
    outcome.check(rule=rule)
    return 0


def cmd_archive(args: argparse.Namespace) -> int:
    fs = ProjectFilesystem(root=args.root.absolute())
    archiver = archiver_for(
        args.flavor,
        command=tuple(shlex.split(args.ar)) if args.ar else None,
        environment=_parse_env(args.env),
    )
    ranlib = None
    if args.ranlib:
        ranlib = Tool(command=tuple(shlex.split(args.ranlib)))
    elif archiver.requires_ranlib:
        ranlib = Tool(command=(DEFAULT_RANLIB,))
    platform = CxxPlatform(
        name=args.flavor,
        ar=archiver,
        arflags=tuple(args.arflag),
        ranlib=ranlib,
        ranlibflags=tuple(args.ranlib_flag),
    )
    rule = ArchiveRule.from_platform(
        target=args.target or str(args.output),
        filesystem=fs,
        platform=platform,
        output_path=args.output,
        inputs=source_paths(fs, *args.inputs),
        contents=ArchiveContents.THIN if args.thin else ArchiveContents.NORMAL,
        cacheable=not args.uncacheable,
    )
    return _execute(
        rule.target,
        rule.steps(),
        args,
        cacheable=rule.cacheable,
        references=rule.to_reference().dependency_paths(),
    )


def cmd_dsym(args: argparse.Namespace) -> int:
    fs = ProjectFilesystem(root=args.root.absolute())
    binary = Path(args.input)
    output = Path(args.output) if args.output else binary.with_name(f"{binary.stem}.dSYM")
    spec = DebugSymbolSpec(
        tool_command=tuple(shlex.split(args.tool)),
        input_binary=binary,
        output_bundle=output,
        filesystem=fs,
        extra_flags=tuple(args.flag),
        environment=_parse_env(args.env),
    )
    return _execute(str(output), (plan_debug_symbols(spec),), args)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="nativebuild", description="Plan and run native artifact build steps")
    sub = parser.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--root", type=Path, default=Path("."), help="Project root")
    common.add_argument("--env", action="append", default=[], metavar="KEY=VALUE")
    common.add_argument("--dry-run", action="store_true", help="Print steps without running them")
    common.add_argument("--manifest", type=Path, help="Write the plan manifest (.json or .cbor)")

    archive_p = sub.add_parser("archive", parents=[common], help="Build a static archive")
    archive_p.add_argument("--flavor", choices=ARCHIVER_FLAVORS, default="gnu")
    archive_p.add_argument("--ar", help="Archiver command prefix, shell-quoted")
    archive_p.add_argument("--arflag", action="append", default=[])
    archive_p.add_argument("--ranlib", help="ranlib command prefix, shell-quoted")
    archive_p.add_argument("--ranlib-flag", action="append", default=[])
    archive_p.add_argument("--thin", action="store_true", help="Build a thin archive")
    archive_p.add_argument("--uncacheable", action="store_true")
    archive_p.add_argument("--target", help="Rule name used in logs and manifests")
    archive_p.add_argument("--output", type=Path, required=True)
    archive_p.add_argument("inputs", nargs="*")

    dsym_p = sub.add_parser("dsym", parents=[common], help="Extract a .dSYM bundle")
    dsym_p.add_argument("--tool", default="dsymutil")
    dsym_p.add_argument("--flag", action="append", default=[])
    dsym_p.add_argument("--input", required=True)
    dsym_p.add_argument("--output")

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        if args.command == "archive":
            return cmd_archive(args)
        return cmd_dsym(args)
    except NativeBuildError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
