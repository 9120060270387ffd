"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from nativebuild.executors import RecordingStepExecutor
from nativebuild.filesystem import ProjectFilesystem


@pytest.fixture
def project_fs(tmp_path: Path) -> ProjectFilesystem:
    """Provide a project filesystem rooted in a per-test directory."""
    root = tmp_path / "project"
    root.mkdir()
    return ProjectFilesystem(root=root)


@pytest.fixture
def recording_executor() -> RecordingStepExecutor:
    """Provide an executor that records steps without running them."""
    return RecordingStepExecutor()
