"""Configuration management - planning policy constants loaded from .env and
environment variables on top of immutable defaults."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .models import InvalidInputError

logger = logging.getLogger(__name__)


class Target(str, Enum):
    VSI = "vsi"
    CONTAINER_PLATFORM = "container-platform"


def _load_dotenv(path: Path | None = None) -> None:
    """Minimal .env loader (avoids external dependency)."""
    candidates = [
        path,
        Path.cwd() / ".env",
        Path(__file__).resolve().parents[2] / ".env",
    ]
    env_path = None
    for candidate in candidates:
        if candidate and candidate.exists():
            env_path = candidate
            break
    if env_path is None:
        return
    for line in env_path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        key, _, value = line.partition("=")
        key, value = key.strip(), value.strip()
        if key and key not in os.environ:
            os.environ[key] = value


@dataclass(frozen=True)
class ReadinessPolicy:
    snapshot_warning_age_days: int = 7
    snapshot_blocker_age_days: int = 30
    hw_version_minimum: int = 10
    hw_version_recommended: int = 14
    vsi_boot_disk_max_gib: float = 250
    vsi_max_disks_per_vm: int = 12
    memory_warning_gib: float = 512
    memory_blocker_gib: float = 1024


@dataclass(frozen=True)
class ClusterSizingPolicy:
    reference_node_profile: str = "bx2d.metal.96x384"
    cpu_overcommit_ratio: float = 1.8
    system_reserved_memory_gib: float = 4
    min_node_floor: int = 3
    node_redundancy: int = 1
    replication_factor: int = 3
    operational_capacity_fraction: float = 0.75
    storage_overhead_fraction: float = 0.15


@dataclass(frozen=True)
class StoragePricingPolicy:
    boot_volume_gib: float = 100
    boot_cost_per_gib: float = 0.08
    general_purpose_cost_per_gib: float = 0.08
    tier_5iops_cost_per_gib: float = 0.10
    tier_10iops_cost_per_gib: float = 0.13


@dataclass(frozen=True)
class WavePolicy:
    port_group_prefix_length: int = 20
    ip_prefix_length: int = 24


@dataclass(frozen=True)
class PolicyConfig:
    readiness: ReadinessPolicy = field(default_factory=ReadinessPolicy)
    cluster: ClusterSizingPolicy = field(default_factory=ClusterSizingPolicy)
    storage: StoragePricingPolicy = field(default_factory=StoragePricingPolicy)
    waves: WavePolicy = field(default_factory=WavePolicy)

    def validate(self) -> PolicyConfig:
        """Raise InvalidInputError for constants no sizing pass could work with."""
        r, c = self.readiness, self.cluster
        if r.snapshot_warning_age_days > r.snapshot_blocker_age_days:
            raise InvalidInputError("snapshot warning age must not exceed the blocker age")
        if r.memory_warning_gib > r.memory_blocker_gib:
            raise InvalidInputError("memory warning threshold must not exceed the blocker threshold")
        if c.cpu_overcommit_ratio <= 0:
            raise InvalidInputError("cpu_overcommit_ratio must be positive")
        if c.replication_factor <= 0:
            raise InvalidInputError("replication_factor must be positive")
        if not 0 < c.operational_capacity_fraction <= 1:
            raise InvalidInputError("operational_capacity_fraction must be in (0, 1]")
        if not 0 <= c.storage_overhead_fraction < 1:
            raise InvalidInputError("storage_overhead_fraction must be in [0, 1)")
        if c.min_node_floor < 0 or c.node_redundancy < 0:
            raise InvalidInputError("node floor and redundancy must be non-negative")
        return self


DEFAULT_POLICY = PolicyConfig()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r, using %s", name, raw, default)
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring non-numeric %s=%r, using %s", name, raw, default)
        return default


def load_policy(dotenv_path: Path | None = None) -> PolicyConfig:
    """Load policy constants from environment / .env file."""
    _load_dotenv(dotenv_path)
    d = DEFAULT_POLICY

    readiness = ReadinessPolicy(
        snapshot_warning_age_days=_env_int("CMP_SNAPSHOT_WARNING_AGE_DAYS", d.readiness.snapshot_warning_age_days),
        snapshot_blocker_age_days=_env_int("CMP_SNAPSHOT_BLOCKER_AGE_DAYS", d.readiness.snapshot_blocker_age_days),
        hw_version_minimum=_env_int("CMP_HW_VERSION_MINIMUM", d.readiness.hw_version_minimum),
        hw_version_recommended=_env_int("CMP_HW_VERSION_RECOMMENDED", d.readiness.hw_version_recommended),
        vsi_boot_disk_max_gib=_env_float("CMP_VSI_BOOT_DISK_MAX_GIB", d.readiness.vsi_boot_disk_max_gib),
        vsi_max_disks_per_vm=_env_int("CMP_VSI_MAX_DISKS_PER_VM", d.readiness.vsi_max_disks_per_vm),
        memory_warning_gib=_env_float("CMP_MEMORY_WARNING_GIB", d.readiness.memory_warning_gib),
        memory_blocker_gib=_env_float("CMP_MEMORY_BLOCKER_GIB", d.readiness.memory_blocker_gib),
    )

    cluster = ClusterSizingPolicy(
        reference_node_profile=os.getenv("CMP_REFERENCE_NODE_PROFILE", d.cluster.reference_node_profile),
        cpu_overcommit_ratio=_env_float("CMP_CPU_OVERCOMMIT_RATIO", d.cluster.cpu_overcommit_ratio),
        system_reserved_memory_gib=_env_float("CMP_SYSTEM_RESERVED_MEMORY_GIB", d.cluster.system_reserved_memory_gib),
        min_node_floor=_env_int("CMP_MIN_NODE_FLOOR", d.cluster.min_node_floor),
        node_redundancy=_env_int("CMP_NODE_REDUNDANCY", d.cluster.node_redundancy),
        replication_factor=_env_int("CMP_REPLICATION_FACTOR", d.cluster.replication_factor),
        operational_capacity_fraction=_env_float(
            "CMP_OPERATIONAL_CAPACITY_FRACTION", d.cluster.operational_capacity_fraction),
        storage_overhead_fraction=_env_float("CMP_STORAGE_OVERHEAD_FRACTION", d.cluster.storage_overhead_fraction),
    )

    storage = StoragePricingPolicy(
        boot_volume_gib=_env_float("CMP_BOOT_VOLUME_GIB", d.storage.boot_volume_gib),
        boot_cost_per_gib=_env_float("CMP_BOOT_COST_PER_GIB", d.storage.boot_cost_per_gib),
        general_purpose_cost_per_gib=_env_float(
            "CMP_GENERAL_PURPOSE_COST_PER_GIB", d.storage.general_purpose_cost_per_gib),
        tier_5iops_cost_per_gib=_env_float("CMP_TIER_5IOPS_COST_PER_GIB", d.storage.tier_5iops_cost_per_gib),
        tier_10iops_cost_per_gib=_env_float("CMP_TIER_10IOPS_COST_PER_GIB", d.storage.tier_10iops_cost_per_gib),
    )

    waves = WavePolicy(
        port_group_prefix_length=_env_int("CMP_PORT_GROUP_PREFIX_LENGTH", d.waves.port_group_prefix_length),
        ip_prefix_length=_env_int("CMP_IP_PREFIX_LENGTH", d.waves.ip_prefix_length),
    )

    return PolicyConfig(readiness=readiness, cluster=cluster, storage=storage, waves=waves).validate()
