"""Migration complexity scoring.

A single scoring function driven by a :class:`ComplexityPreset`.  The two
presets reproduce the two scoring dialects that planners use: a VSI preset
(status-based OS penalty, large-disk and vCPU/memory tiers) and a
container-platform preset (OS penalty proportional to the compatibility
score, hardware version penalty and a flat resource-size penalty).
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from .config import DEFAULT_POLICY, PolicyConfig, Target
from .inventory import NormalizedInventory
from .models import ComplexityScore, DiskRecord, OSCompatibilityEntry, VirtualMachineRecord
from .os_compatibility import PARTIAL, UNSUPPORTED, default_os_table, lookup_os_compatibility, normalized_status
from .units import hardware_version_number, round_half_up

logger = logging.getLogger(__name__)

SIMPLE = "Simple"
MODERATE = "Moderate"
COMPLEX = "Complex"
BLOCKER = "Blocker"

CATEGORY_LABELS = {
    SIMPLE: "Simple (0-25)",
    MODERATE: "Moderate (26-50)",
    COMPLEX: "Complex (51-75)",
    BLOCKER: "Blocker (76-100)",
}


@dataclass(frozen=True)
class ComplexityPreset:
    name: str
    # OS: either fixed points by status, or (100 - compatibility score) * weight
    os_score_weight: float | None = None
    unsupported_os_points: int = 40
    community_os_points: int = 15
    # NICs
    many_nics_threshold: int = 3
    many_nics_points: int = 25
    multi_nic_points: int = 10
    # Disks
    large_disk_gib: float = 2000
    large_disk_points: int = 0
    many_disks_threshold: int = 5
    many_disks_points: int = 20
    several_disks_threshold: int = 2
    several_disks_points: int = 10
    # Memory / vCPU tiers
    memory_tiers: tuple[tuple[float, int], ...] = ()     # (GiB above, points), largest first
    vcpu_tiers: tuple[tuple[int, int], ...] = ()         # (vCPUs above, points), largest first
    # Flat resource-size penalty (applies only when both limits are exceeded)
    flat_resource_vcpus: int | None = None
    flat_resource_memory_gib: float | None = None
    flat_resource_points: int = 0
    # Hardware version
    hw_below_minimum_points: int = 0
    hw_below_recommended_points: int = 0


VSI_COMPLEXITY = ComplexityPreset(
    name="vsi",
    unsupported_os_points=40,
    community_os_points=15,
    many_nics_points=25,
    multi_nic_points=10,
    large_disk_points=30,
    many_disks_points=20,
    several_disks_points=10,
    memory_tiers=((1024, 40), (512, 20)),
    vcpu_tiers=((64, 30), (32, 15)),
)

CONTAINER_PLATFORM_COMPLEXITY = ComplexityPreset(
    name="container-platform",
    os_score_weight=0.3,
    many_nics_points=30,
    multi_nic_points=15,
    many_disks_points=30,
    several_disks_points=15,
    flat_resource_vcpus=16,
    flat_resource_memory_gib=128,
    flat_resource_points=20,
    hw_below_minimum_points=25,
    hw_below_recommended_points=10,
)


def complexity_preset_for(target: Target) -> ComplexityPreset:
    return VSI_COMPLEXITY if target == Target.VSI else CONTAINER_PLATFORM_COMPLEXITY


def get_complexity_category(score: float) -> str:
    if score <= 25:
        return SIMPLE
    if score <= 50:
        return MODERATE
    if score <= 75:
        return COMPLEX
    return BLOCKER


def calculate_complexity_score(
    vm: VirtualMachineRecord,
    disks: Sequence[DiskRecord],
    nic_count: int,
    os_entry: OSCompatibilityEntry,
    preset: ComplexityPreset = VSI_COMPLEXITY,
    policy: PolicyConfig = DEFAULT_POLICY,
) -> ComplexityScore:
    """Score one VM; each factor adds points and the total is clamped to [0, 100]."""
    score = 0.0
    factors: list[str] = []

    def add(points: float, reason: str) -> None:
        nonlocal score
        score += points
        factors.append(f"{reason} (+{points:g})")

    # OS compatibility
    if preset.os_score_weight is not None:
        os_points = round_half_up((100 - os_entry.compatibility_score) * preset.os_score_weight)
        if os_points > 0:
            add(os_points, "OS compatibility")
    elif normalized_status(os_entry) == UNSUPPORTED:
        add(preset.unsupported_os_points, "Unsupported OS")
    elif normalized_status(os_entry) == PARTIAL:
        add(preset.community_os_points, "Community OS")

    # Network
    if nic_count > preset.many_nics_threshold:
        add(preset.many_nics_points, f"{nic_count} NICs")
    elif nic_count > 1:
        add(preset.multi_nic_points, f"{nic_count} NICs")

    # Disks
    if preset.large_disk_points:
        large = sum(1 for d in disks if d.capacity_gib > preset.large_disk_gib)
        if large:
            add(preset.large_disk_points, f"{large} large disk{'s' if large > 1 else ''} >{preset.large_disk_gib:g} GiB")
    if len(disks) > preset.many_disks_threshold:
        add(preset.many_disks_points, f"{len(disks)} disks")
    elif len(disks) > preset.several_disks_threshold:
        add(preset.several_disks_points, f"{len(disks)} disks")

    # Hardware version
    hw_version = None
    if preset.hw_below_minimum_points or preset.hw_below_recommended_points:
        hw_version = hardware_version_number(vm.hardware_version)
        if hw_version < policy.readiness.hw_version_minimum:
            add(preset.hw_below_minimum_points, f"HW v{hw_version} < min")
        elif hw_version < policy.readiness.hw_version_recommended:
            add(preset.hw_below_recommended_points, f"HW v{hw_version} < recommended")

    # Memory and vCPU size
    mem_gib = vm.memory_gib
    for limit, points in preset.memory_tiers:
        if mem_gib > limit:
            add(points, f"{round_half_up(mem_gib)} GiB memory")
            break
    for limit, points in preset.vcpu_tiers:
        if vm.vcpus > limit:
            add(points, f"{vm.vcpus} vCPUs")
            break
    if (
        preset.flat_resource_points
        and preset.flat_resource_vcpus is not None
        and preset.flat_resource_memory_gib is not None
        and vm.vcpus > preset.flat_resource_vcpus
        and mem_gib > preset.flat_resource_memory_gib
    ):
        add(preset.flat_resource_points, f"{vm.vcpus} vCPUs & {round_half_up(mem_gib)} GiB")

    final_score = min(100, max(0, round_half_up(score)))
    return ComplexityScore(
        vm_name=vm.name,
        score=final_score,
        category=get_complexity_category(final_score),
        factors=tuple(factors),
        guest_os=vm.guest_os,
        vcpus=vm.vcpus,
        memory_gib=round_half_up(mem_gib),
        disk_count=len(disks),
        nic_count=nic_count,
        hardware_version=hw_version,
    )


def calculate_complexity_scores(
    inventory: NormalizedInventory,
    target: Target,
    policy: PolicyConfig = DEFAULT_POLICY,
    preset: ComplexityPreset | None = None,
) -> list[ComplexityScore]:
    """Score every in-scope VM with the preset that belongs to *target*."""
    preset = preset or complexity_preset_for(target)
    os_table, os_default = default_os_table(target)
    scores = [
        calculate_complexity_score(
            vm,
            inventory.disks_for(vm.name),
            len(inventory.adapters_for(vm.name)),
            lookup_os_compatibility(vm.guest_os, os_table, os_default),
            preset,
            policy,
        )
        for vm in inventory.vms
    ]
    logger.info("Scored complexity for %d VM(s) with the %s preset", len(scores), preset.name)
    return scores


# ---------------------------------------------------------------------------
# Roll-ups
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AssessmentSummary:
    total_vms: int = 0
    simple_count: int = 0
    moderate_count: int = 0
    complex_count: int = 0
    blocker_count: int = 0
    average_score: int = 0


def get_complexity_distribution(scores: Sequence[ComplexityScore]) -> dict[str, int]:
    distribution: dict[str, int] = {}
    for cs in scores:
        distribution[cs.category] = distribution.get(cs.category, 0) + 1
    return distribution


def get_assessment_summary(scores: Sequence[ComplexityScore]) -> AssessmentSummary:
    distribution = get_complexity_distribution(scores)
    total = sum(s.score for s in scores)
    return AssessmentSummary(
        total_vms=len(scores),
        simple_count=distribution.get(SIMPLE, 0),
        moderate_count=distribution.get(MODERATE, 0),
        complex_count=distribution.get(COMPLEX, 0),
        blocker_count=distribution.get(BLOCKER, 0),
        average_score=round_half_up(total / len(scores)) if scores else 0,
    )


def get_top_complex_vms(scores: Sequence[ComplexityScore], count: int = 10) -> list[ComplexityScore]:
    """Highest scores first; ties keep inventory order."""
    return sorted(scores, key=lambda s: -s.score)[:count]
