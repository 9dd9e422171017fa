from __future__ import annotations

import os
from pathlib import Path

import pytest

from core.log import configure_logging

REPO_ROOT = Path(__file__).resolve().parents[1]
REPO_CHECKLIST = REPO_ROOT / "CHECKLIST.md"

SAMPLE_CHECKLIST = """\
# Sample

## Control Plane

- [x] Check version skew
- [ ] Check free IP count

## Data Plane

- [ ] Check pending node group updates

### Fargate

- [X] Check Fargate profiles

## Addons

- [ ] Check addon versions

## Misc

- [ ] Check service limits
"""


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run every test from an empty directory with no EKSUP_* settings."""

    for key in list(os.environ):
        if key.upper().startswith("EKSUP_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)
    return work


@pytest.fixture
def sample_text() -> str:
    return SAMPLE_CHECKLIST


@pytest.fixture
def sample_file(isolated_env: Path) -> Path:
    path = isolated_env / "CHECKLIST.md"
    path.write_text(SAMPLE_CHECKLIST, encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def quiet_logging():
    configure_logging("WARNING")
    yield
    configure_logging("WARNING")
