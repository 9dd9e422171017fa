"""Kubernetes versions, data plane compute types and upgrade strategies."""

from __future__ import annotations

from enum import Enum

from core.errors import VersionError


class KubernetesVersion(str, Enum):
    """Kubernetes versions a playbook can be created for."""

    V1_20 = "1.20"
    V1_21 = "1.21"
    V1_22 = "1.22"
    V1_23 = "1.23"
    V1_24 = "1.24"

    def __str__(self) -> str:
        return self.value


LATEST: str = KubernetesVersion.V1_24.value


class Compute(str, Enum):
    """Compute constructs supported by Amazon EKS for the data plane."""

    EKS_MANAGED = "eks"
    SELF_MANAGED = "self"
    FARGATE_PROFILE = "fargate"

    def label(self) -> str:
        return {
            Compute.EKS_MANAGED: "EKS managed node group",
            Compute.SELF_MANAGED: "Self-managed node group",
            Compute.FARGATE_PROFILE: "Fargate profile",
        }[self]


class Strategy(str, Enum):
    """Cluster upgrade strategy.

    `in-place`: the control plane is updated in-place by Amazon EKS.
    """

    IN_PLACE = "in-place"

    @classmethod
    def default(cls) -> "Strategy":
        return cls.IN_PLACE


def _split(version: str) -> list[str]:
    parts = version.strip().split(".")
    if len(parts) < 2 or not parts[0].lstrip("v").isdigit():
        raise VersionError(f"Invalid Kubernetes version: {version!r}")
    return parts


def parse_minor_version(version: str) -> int:
    """Parse the minor version.

    `v1.20.7-eks-123456` returns 20, `v1.22.7` returns 22.
    """

    minor = _split(version)[1]
    if not minor.isdigit():
        raise VersionError(f"Invalid Kubernetes version: {version!r}")
    return int(minor)


def normalize_version(version: str) -> str:
    """Normalize to `<major>.<minor>`, e.g. `v1.20.7-eks-123456` -> `1.20`."""

    major = _split(version)[0].lstrip("v")
    return f"{major}.{parse_minor_version(version)}"


def get_target_version(version: str) -> str:
    """The next minor version, the only in-place upgrade EKS allows."""

    major = _split(version)[0].lstrip("v")
    return f"{major}.{parse_minor_version(version) + 1}"


def is_latest(version: str) -> bool:
    return normalize_version(version) == LATEST
