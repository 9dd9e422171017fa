"""Loader for bundled resources (Kubernetes release data).

Why a data file:
- Release links change with every Kubernetes minor version, not with the code.
- It is validated into `Release` models once, at the edge.

The release data ships with the package under `core/data/`. A different file
can be used via `EKSUP_RELEASE_DATA_PATH` (or the `path` argument) when newer
releases are needed before a new version of the tool is published.
"""

from __future__ import annotations

from pathlib import Path
from typing import Mapping

import yaml
from pydantic import ValidationError

from core.domain.models import Release
from core.errors import ReleaseDataError
from core.log import get_logger

log = get_logger(__name__)

RELEASE_DATA_FILENAME = "releases.yaml"


def _bundled_data_dir() -> Path:
    # core/resources_loader.py -> core/data
    return Path(__file__).resolve().parent / "data"


def get_release_data_path(override: Path | None = None) -> Path:
    if override is not None:
        return override
    return _bundled_data_dir() / RELEASE_DATA_FILENAME


def load_release_data(path: Path | None = None) -> dict[str, Release]:
    """Load the release data keyed by Kubernetes minor version (`"1.24"`).

    Raises:
        ReleaseDataError: the file is missing, is not valid YAML, or an entry
            does not match the `Release` model.
    """

    data_path = get_release_data_path(path)
    log.debug("loading release data", path=str(data_path))

    try:
        raw = yaml.safe_load(data_path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ReleaseDataError(f"Release data not found: {data_path}") from exc
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as exc:
        raise ReleaseDataError(f"Could not read release data {data_path}: {exc}") from exc

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ReleaseDataError(f"Release data must be a mapping of version -> release: {data_path}")

    releases: dict[str, Release] = {}
    for version, entry in raw.items():
        if not isinstance(version, str):
            raise ReleaseDataError(
                f"Release data keys must be strings, got {version!r} in {data_path}; "
                f'quote the version (e.g. "1.20":)'
            )
        try:
            releases[version] = Release.model_validate(entry)
        except ValidationError as exc:
            raise ReleaseDataError(f"Invalid release entry for {version!r} in {data_path}: {exc}") from exc
    return releases


def get_release(
    version: str,
    *,
    releases: Mapping[str, Release] | None = None,
    path: Path | None = None,
) -> Release:
    """Release data for one Kubernetes minor version.

    Looks `version` up in `releases` when given, otherwise in the file at
    `path` (the bundled data by default).
    """

    if releases is None:
        releases = load_release_data(path)
    try:
        return releases[version]
    except KeyError:
        raise ReleaseDataError(f"No release data for Kubernetes {version}") from None
