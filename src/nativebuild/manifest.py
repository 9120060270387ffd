"""Plan manifests: a canonical, serializable record of planned steps."""

from __future__ import annotations

import hashlib
import json
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import cbor2

from nativebuild.errors import ManifestError
from nativebuild.steps import BuildStep, MkdirStep, ScrubStep, ShellStep

SCHEMA_VERSION = 1


@dataclass(frozen=True, slots=True)
class PlanManifest:
    rule: str
    steps: tuple[dict[str, Any], ...] = ()
    cacheable: bool = True
    schema_version: int = SCHEMA_VERSION
    references: tuple[str, ...] = ()

    @classmethod
    def from_steps(
        cls,
        rule: str,
        steps: Sequence[BuildStep],
        *,
        cacheable: bool = True,
        references: Sequence[Path] = (),
    ) -> PlanManifest:
        return cls(
            rule=rule,
            steps=tuple(step_payload(step) for step in steps),
            cacheable=cacheable,
            references=tuple(str(path) for path in references),
        )

    def to_json(self, path: str | Path | None = None) -> str:
        encoded = json.dumps(self._payload(), indent=2, sort_keys=True) + "\n"
        if path is not None:
            Path(path).write_text(encoded, encoding="utf-8")
        return encoded

    def to_cbor(self, path: str | Path | None = None) -> bytes:
        encoded = cbor2.dumps(self._payload(), canonical=True)
        if path is not None:
            Path(path).write_bytes(encoded)
        return encoded

    def digest(self) -> str:
        canonical = json.dumps(self._payload(), sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(canonical.encode("utf-8")).hexdigest()

    def _payload(self) -> dict[str, Any]:
        return {
            "schema_version": self.schema_version,
            "rule": self.rule,
            "cacheable": self.cacheable,
            "steps": [dict(step) for step in self.steps],
            "references": list(self.references),
        }


def step_payload(step: BuildStep) -> dict[str, Any]:
    if isinstance(step, MkdirStep):
        return {"kind": "mkdir", "short_name": step.short_name, "path": str(step.path)}
    if isinstance(step, ScrubStep):
        return {
            "kind": "scrub",
            "short_name": step.short_name,
            "path": str(step.path),
            "scrubbers": [scrubber.name for scrubber in step.scrubbers],
        }
    if isinstance(step, ShellStep):
        return {
            "kind": "shell",
            "short_name": step.short_name,
            "argv": list(step.argv),
            "environment": dict(sorted(step.environment.items())),
            "working_root": str(step.working_root),
        }
    raise ManifestError(
        "Unsupported step type.",
        context={"type": type(step).__name__},
    )


def read_manifest(path: str | Path) -> PlanManifest:
    manifest_path = Path(path)
    try:
        raw = manifest_path.read_bytes()
    except FileNotFoundError as exc:
        raise ManifestError(
            "Manifest does not exist.",
            context={"path": str(manifest_path)},
        ) from exc

    try:
        if manifest_path.suffix == ".cbor":
            payload = cbor2.loads(raw)
        else:
            payload = json.loads(raw.decode("utf-8"))
    except (cbor2.CBORDecodeError, json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ManifestError(
            "Manifest could not be decoded.",
            hint=str(exc),
            context={"path": str(manifest_path)},
        ) from exc

    if not isinstance(payload, dict):
        raise ManifestError("Invalid manifest payload type.", context={"path": str(manifest_path)})
    version = payload.get("schema_version")
    if version != SCHEMA_VERSION:
        raise ManifestError(
            "Unsupported manifest schema version.",
            context={"path": str(manifest_path), "schema_version": str(version)},
        )
    rule = payload.get("rule")
    steps = payload.get("steps", [])
    if not isinstance(rule, str) or not isinstance(steps, list):
        raise ManifestError("Manifest is missing `rule` or `steps`.", context={"path": str(manifest_path)})
    return PlanManifest(
        rule=rule,
        steps=tuple(dict(step) for step in steps),
        cacheable=bool(payload.get("cacheable", True)),
        schema_version=version,
        references=tuple(str(item) for item in payload.get("references", [])),
    )
