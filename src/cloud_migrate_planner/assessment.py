"""Assessment orchestrator - runs every planning pass over one inventory
snapshot for one migration target."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum

from .cluster_sizing import size_cluster_for_inventory
from .complexity import AssessmentSummary, calculate_complexity_scores, get_assessment_summary
from .config import DEFAULT_POLICY, PolicyConfig, Target
from .costs import CostBreakdown, estimate_cluster_cost, estimate_vsi_costs
from .inventory import NormalizedInventory, join_key, normalize_inventory
from .models import ClusterSizing, ComplexityScore, ExclusionRule, InventorySnapshot, WaveAssignment
from .profiles import CustomProfile, VMProfileMapping, create_profile_mappings
from .readiness import ReadinessSummary, assess_readiness
from .waves import GroupBy, WaveGroup, build_vm_wave_data, create_complexity_waves, create_network_waves, wave_assignments

logger = logging.getLogger(__name__)


class WaveMode(str, Enum):
    COMPLEXITY = "complexity"
    NETWORK = "network"


@dataclass(frozen=True)
class MigrationAssessment:
    target: Target
    inventory: NormalizedInventory
    readiness: ReadinessSummary
    complexity: tuple[ComplexityScore, ...]
    complexity_summary: AssessmentSummary
    wave_mode: WaveMode
    waves: tuple[WaveGroup, ...]
    assignments: tuple[WaveAssignment, ...]
    costs: CostBreakdown
    profile_mappings: tuple[VMProfileMapping, ...] = ()
    cluster_sizing: ClusterSizing | None = None
    group_by: GroupBy | None = None
    unmapped_vms: tuple[str, ...] = ()
    notes: tuple[str, ...] = ()


def run_assessment(
    snapshot: InventorySnapshot,
    target: Target = Target.VSI,
    policy: PolicyConfig = DEFAULT_POLICY,
    wave_mode: WaveMode = WaveMode.COMPLEXITY,
    group_by: GroupBy = GroupBy.PORT_GROUP,
    prefix_length: int | None = None,
    cidr: int | None = None,
    exclusion_rules: Sequence[ExclusionRule] = (),
    overrides: Mapping[str, str] | None = None,
    custom_profiles: Sequence[CustomProfile] = (),
) -> MigrationAssessment:
    """Normalise, score, size, price and plan waves for *target*.

    VSI assessments map each VM to an instance profile; container platform
    assessments size a bare-metal worker pool instead.
    """
    target, wave_mode = Target(target), WaveMode(wave_mode)
    inventory = normalize_inventory(snapshot, exclusion_rules)
    readiness = assess_readiness(inventory, target, policy)
    scores = calculate_complexity_scores(inventory, target, policy)

    notes: list[str] = []
    if not inventory.vms:
        notes.append("No powered-on VMs in scope")

    mappings: list[VMProfileMapping] = []
    unmapped: list[str] = []
    sizing = None
    if target == Target.VSI:
        mappings = create_profile_mappings(inventory, overrides, custom_profiles)
        mapped = {join_key(m.vm_name) for m in mappings}
        unmapped = [vm.name for vm in inventory.vms if join_key(vm.name) not in mapped]
        if unmapped:
            notes.append(f"{len(unmapped)} VM(s) without a VSI profile: {', '.join(unmapped)}")
        costs = estimate_vsi_costs(inventory, mappings, pricing=policy.storage)
    else:
        sizing = size_cluster_for_inventory(inventory, policy.cluster)
        costs = estimate_cluster_cost(sizing)
        notes.extend(sizing.notes)

    vm_data = build_vm_wave_data(inventory, scores, target, policy)
    if wave_mode == WaveMode.COMPLEXITY:
        waves = create_complexity_waves(vm_data)
    else:
        waves = create_network_waves(vm_data, group_by, prefix_length, cidr, policy)

    logger.info(
        "Assessment complete (%s): readiness %d, %d wave(s), $%.2f/month",
        target.value, readiness.readiness_score, len(waves), costs.total,
    )
    return MigrationAssessment(
        target=target,
        inventory=inventory,
        readiness=readiness,
        complexity=tuple(scores),
        complexity_summary=get_assessment_summary(scores),
        wave_mode=wave_mode,
        waves=tuple(waves),
        assignments=tuple(wave_assignments(waves)),
        costs=costs,
        profile_mappings=tuple(mappings),
        cluster_sizing=sizing,
        group_by=GroupBy(group_by) if wave_mode == WaveMode.NETWORK else None,
        unmapped_vms=tuple(unmapped),
        notes=tuple(notes),
    )
