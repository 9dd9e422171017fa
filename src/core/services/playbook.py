"""Upgrade playbook creation.

A playbook is the checklist tailored to one cluster: current and target
versions, the compute types used by its data plane and whether its nodes run
a custom AMI. The output is a markdown task list that `eksup lint` accepts.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Sequence

from adapters.playbook_renderer import export_playbook
from core.config import AppSettings
from core.domain.models import PlaybookData, PlaybookFile, Release
from core.domain.versions import Compute, KubernetesVersion, Strategy, get_target_version, is_latest
from core.errors import PlaybookError
from core.log import get_logger
from core.resources_loader import get_release, load_release_data

log = get_logger(__name__)

CLUSTER_NAME_PLACEHOLDER = "<CLUSTER_NAME>"
REGION_PLACEHOLDER = "<REGION>"
DEFAULT_PLAYBOOK_FILENAME = "playbook.md"


@dataclass
class PlaybookRequest:
    """Inputs collected from the CLI."""

    cluster_version: KubernetesVersion
    compute: Sequence[Compute]
    cluster_name: str = CLUSTER_NAME_PLACEHOLDER
    region: str | None = None
    custom_ami: bool = False
    strategy: Strategy = field(default_factory=Strategy.default)
    filename: str | None = None


def sanitize_for_filename(value: str) -> str:
    """Generate a filesystem-friendly slug."""

    out: list[str] = []
    for ch in value.strip():
        if ch.isalnum() or ch in ("-", "_", "."):
            out.append(ch)
        else:
            out.append("-")
    cleaned = "".join(out).strip("-_.")
    return cleaned or "cluster"


def default_playbook_filename(cluster_name: str, target_version: str) -> str:
    if cluster_name == CLUSTER_NAME_PLACEHOLDER:
        return DEFAULT_PLAYBOOK_FILENAME
    return f"{sanitize_for_filename(cluster_name)}_v{target_version}_upgrade.md"


def dedupe_compute(compute: Sequence[Compute]) -> list[Compute]:
    """Remove repeated compute types keeping the first occurrence."""

    seen: set[Compute] = set()
    out: list[Compute] = []
    for value in compute:
        value = Compute(value)
        if value in seen:
            continue
        seen.add(value)
        out.append(value)
    return out


def build_playbook_data(request: PlaybookRequest, releases: dict[str, Release]) -> PlaybookData:
    """Combine CLI inputs with the release data of the target version."""

    compute = dedupe_compute(request.compute)
    if not compute:
        raise PlaybookError("At least one compute type is required (eks, self, fargate)")

    current_version = KubernetesVersion(request.cluster_version).value
    target_version = get_target_version(current_version)

    release = get_release(target_version, releases=releases)

    cluster_name = request.cluster_name.strip() or CLUSTER_NAME_PLACEHOLDER

    return PlaybookData(
        region=(request.region or "").strip() or REGION_PLACEHOLDER,
        cluster_name=cluster_name,
        current_version=current_version,
        target_version=target_version,
        strategy=Strategy(request.strategy).value,
        custom_ami=request.custom_ami,
        k8s_release_url=release.release_url,
        k8s_deprecation_url=release.deprecation_url,
        compute=[c.value for c in compute],
    )


def create_playbook(request: PlaybookRequest, *, settings: AppSettings | None = None) -> PlaybookFile | None:
    """Render and write the playbook.

    Returns `None` without writing anything when the cluster already runs the
    latest supported version.
    """

    settings = settings or AppSettings()

    if is_latest(KubernetesVersion(request.cluster_version).value):
        log.info("cluster already at latest version", version=str(request.cluster_version))
        return None

    if request.region is None and settings.region:
        request = replace(request, region=settings.region)

    releases = load_release_data(settings.release_data_path)
    data = build_playbook_data(request, releases)

    filename = request.filename or default_playbook_filename(data.cluster_name, data.target_version)
    output_path = Path(filename)
    if not output_path.is_absolute():
        output_path = settings.output_dir / output_path

    path = export_playbook(data=data, output_path=output_path)
    log.info(
        "playbook written",
        path=str(path),
        cluster=data.cluster_name,
        current=data.current_version,
        target=data.target_version,
    )
    return PlaybookFile(
        path=path,
        cluster_name=data.cluster_name,
        current_version=data.current_version,
        target_version=data.target_version,
    )
