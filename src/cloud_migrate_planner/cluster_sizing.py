"""Bare-metal worker pool sizing for the container platform target.

The pool is homogeneous: every node is the reference profile, and the node
count is driven by whichever of CPU, memory or replicated storage needs the
most nodes.  Individual VMs are not bin-packed onto nodes.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence

from .catalog import BARE_METAL_PROFILES
from .config import DEFAULT_POLICY, ClusterSizingPolicy
from .inventory import NormalizedInventory
from .models import BareMetalProfile, ClusterSizing, InvalidInputError, ProfileFamily

logger = logging.getLogger(__name__)

# Share of hardware threads left for guests after hypervisor / platform pods
USABLE_THREAD_FRACTION = 0.85

LIMIT_CPU = "cpu"
LIMIT_MEMORY = "memory"
LIMIT_STORAGE = "storage"
LIMIT_MINIMUM = "minimum"


def _check_policy(policy: ClusterSizingPolicy) -> None:
    if policy.cpu_overcommit_ratio <= 0:
        raise InvalidInputError("cpu_overcommit_ratio must be positive")
    if policy.replication_factor <= 0:
        raise InvalidInputError("replication_factor must be positive")
    if not 0 < policy.operational_capacity_fraction <= 1:
        raise InvalidInputError("operational_capacity_fraction must be in (0, 1]")
    if not 0 <= policy.storage_overhead_fraction < 1:
        raise InvalidInputError("storage_overhead_fraction must be in [0, 1)")


def plan_cluster(
    total_vcpus: float,
    total_memory_gib: float,
    total_storage_gib: float,
    node_profile: BareMetalProfile,
    policy: ClusterSizingPolicy = DEFAULT_POLICY.cluster,
) -> ClusterSizing:
    """Size a worker pool of *node_profile* nodes for the aggregate demand."""
    _check_policy(policy)

    adjusted_vcpus = math.ceil(total_vcpus / policy.cpu_overcommit_ratio)
    required_raw_storage = math.ceil(
        total_storage_gib * policy.replication_factor
        / policy.operational_capacity_fraction
        / (1 - policy.storage_overhead_fraction)
    )

    usable_threads = math.floor(node_profile.vcpus * USABLE_THREAD_FRACTION)
    usable_memory = node_profile.memory_gib - policy.system_reserved_memory_gib
    usable_nvme = node_profile.total_nvme_gib
    if usable_threads <= 0:
        raise InvalidInputError(f"{node_profile.name} has no usable threads per node")
    if usable_memory <= 0:
        raise InvalidInputError(
            f"{node_profile.name} has no usable memory after reserving "
            f"{policy.system_reserved_memory_gib:g} GiB"
        )

    nodes_for_cpu = math.ceil(adjusted_vcpus / usable_threads)
    nodes_for_memory = math.ceil(total_memory_gib / usable_memory)
    nodes_for_storage = math.ceil(required_raw_storage / usable_nvme) if usable_nvme > 0 else 0

    base_nodes = max(policy.min_node_floor, nodes_for_cpu, nodes_for_memory, nodes_for_storage)
    recommended = base_nodes + policy.node_redundancy

    limiting = LIMIT_MINIMUM
    for name, count in ((LIMIT_CPU, nodes_for_cpu), (LIMIT_MEMORY, nodes_for_memory),
                        (LIMIT_STORAGE, nodes_for_storage)):
        if count == base_nodes and count > policy.min_node_floor:
            limiting = name
            break

    notes: list[str] = []
    if usable_nvme <= 0:
        notes.append(f"{node_profile.name} has no local NVMe; storage must be provided externally")

    total_nvme_gib = recommended * usable_nvme
    usable_storage_tib = (
        total_nvme_gib / policy.replication_factor
        * policy.operational_capacity_fraction
        * (1 - policy.storage_overhead_fraction)
        / 1024
    )

    sizing = ClusterSizing(
        profile_name=node_profile.name,
        recommended_nodes=recommended,
        nodes_for_cpu=nodes_for_cpu,
        nodes_for_memory=nodes_for_memory,
        nodes_for_storage=nodes_for_storage,
        adjusted_vcpus=adjusted_vcpus,
        required_raw_storage_gib=required_raw_storage,
        total_cores=recommended * node_profile.physical_cores,
        total_threads=recommended * node_profile.vcpus,
        total_memory_gib=recommended * node_profile.memory_gib,
        total_nvme_tib=total_nvme_gib / 1024,
        usable_storage_tib=usable_storage_tib,
        limiting_factor=limiting,
        notes=tuple(notes),
    )
    logger.debug(
        "Cluster sizing: cpu=%d memory=%d storage=%d nodes -> %d x %s (%s bound)",
        nodes_for_cpu, nodes_for_memory, nodes_for_storage, recommended, node_profile.name, limiting,
    )
    return sizing


def select_node_profile(
    name: str,
    catalog: Mapping[ProfileFamily, Sequence[BareMetalProfile]] = BARE_METAL_PROFILES,
) -> BareMetalProfile:
    """Bare-metal profile by name; the first balanced profile if the name is unknown."""
    profiles = [p for family in (ProfileFamily.BALANCED, ProfileFamily.COMPUTE, ProfileFamily.MEMORY)
                for p in catalog.get(family, ())]
    if not profiles:
        raise InvalidInputError("bare-metal catalog is empty")
    for profile in profiles:
        if profile.name == name:
            return profile
    logger.warning("Bare-metal profile %r not in catalog; using %s", name, profiles[0].name)
    return profiles[0]


def size_cluster_for_inventory(
    inventory: NormalizedInventory,
    policy: ClusterSizingPolicy = DEFAULT_POLICY.cluster,
    catalog: Mapping[ProfileFamily, Sequence[BareMetalProfile]] = BARE_METAL_PROFILES,
) -> ClusterSizing:
    """Sum demand over the in-scope VMs and size the reference node pool."""
    total_vcpus = sum(vm.vcpus for vm in inventory.vms)
    total_memory = sum(vm.memory_gib for vm in inventory.vms)
    total_storage = sum(vm.provisioned_gib for vm in inventory.vms)
    node_profile = select_node_profile(policy.reference_node_profile, catalog)

    sizing = plan_cluster(total_vcpus, total_memory, total_storage, node_profile, policy)
    logger.info(
        "Sized cluster for %d VM(s): %d vCPU, %.0f GiB memory, %.0f GiB storage -> %d node(s)",
        inventory.vm_count, total_vcpus, total_memory, total_storage, sizing.recommended_nodes,
    )
    return sizing
