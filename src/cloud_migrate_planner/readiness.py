"""Migration readiness - per-VM blocker / warning checks and the aggregate
readiness score for the migration population."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from .config import DEFAULT_POLICY, PolicyConfig, Target
from .inventory import NormalizedInventory
from .models import OSCompatibilityEntry, ReadinessResult, Severity, VirtualMachineRecord
from .os_compatibility import UNSUPPORTED, default_os_table, lookup_os_compatibility, normalized_status
from .units import hardware_version_number, round_half_up

logger = logging.getLogger(__name__)

# Fixed policy weights of the aggregate score
BLOCKER_WEIGHT = 50
WARNING_WEIGHT = 30
UNSUPPORTED_OS_WEIGHT = 20


@dataclass(frozen=True)
class CheckDefinition:
    id: str
    name: str
    severity: Severity
    targets: tuple[Target, ...] = (Target.VSI, Target.CONTAINER_PLATFORM)


TOOLS_MISSING = "tools-missing"
TOOLS_NOT_RUNNING = "tools-not-running"
OLD_SNAPSHOT = "old-snapshot"
AGING_SNAPSHOT = "aging-snapshot"
RDM_DISK = "rdm-disk"
SHARED_DISK = "shared-disk"
BOOT_DISK_TOO_LARGE = "boot-disk-too-large"
TOO_MANY_DISKS = "too-many-disks"
OVERSIZED_MEMORY = "oversized-memory"
LARGE_MEMORY = "large-memory"
UNSUPPORTED_OS = "unsupported-os"
OUTDATED_HW_VERSION = "outdated-hardware-version"

CHECK_DEFINITIONS: dict[str, CheckDefinition] = {
    c.id: c for c in (
        CheckDefinition(TOOLS_MISSING, "VMware Tools not installed", Severity.BLOCKER),
        CheckDefinition(TOOLS_NOT_RUNNING, "VMware Tools not running", Severity.WARNING),
        CheckDefinition(OLD_SNAPSHOT, "Snapshot older than blocker age", Severity.BLOCKER),
        CheckDefinition(AGING_SNAPSHOT, "Snapshot older than warning age", Severity.WARNING),
        CheckDefinition(RDM_DISK, "Raw device mapping disk", Severity.BLOCKER),
        CheckDefinition(SHARED_DISK, "Shared / multi-writer disk", Severity.BLOCKER),
        CheckDefinition(BOOT_DISK_TOO_LARGE, "Boot disk exceeds boot volume limit", Severity.BLOCKER,
                        (Target.VSI,)),
        CheckDefinition(TOO_MANY_DISKS, "More disks than volumes per instance", Severity.BLOCKER,
                        (Target.VSI,)),
        CheckDefinition(OVERSIZED_MEMORY, "Memory above largest supported size", Severity.BLOCKER),
        CheckDefinition(LARGE_MEMORY, "Memory needs a large profile", Severity.WARNING),
        CheckDefinition(UNSUPPORTED_OS, "Unsupported guest OS", Severity.BLOCKER),
        CheckDefinition(OUTDATED_HW_VERSION, "Hardware version below minimum", Severity.WARNING),
    )
}


@dataclass(frozen=True)
class ReadinessSummary:
    target: Target
    total_vms: int
    blocker_count: int
    warning_count: int
    unsupported_os_count: int
    readiness_score: int
    results: tuple[ReadinessResult, ...] = ()
    issue_counts: dict[str, int] = field(default_factory=dict)
    vms_by_issue: dict[str, tuple[str, ...]] = field(default_factory=dict)

    @property
    def vms_with_blockers(self) -> int:
        return sum(1 for r in self.results if r.has_blocker)

    @property
    def vms_with_warnings(self) -> int:
        return sum(1 for r in self.results if r.has_warning)

    @property
    def ready_vms(self) -> int:
        return sum(1 for r in self.results if not r.has_blocker and not r.has_warning)


def calculate_readiness_score(
    blocker_count: int,
    warning_count: int,
    unsupported_os_count: int,
    total_vms: int,
) -> int:
    """Aggregate 0-100 readiness score; counts are (VM, issue) pairs."""
    vm_count = total_vms or 1
    blocker_penalty = blocker_count / vm_count * BLOCKER_WEIGHT
    warning_penalty = warning_count / vm_count * WARNING_WEIGHT
    unsupported_os_penalty = unsupported_os_count / vm_count * UNSUPPORTED_OS_WEIGHT
    return max(0, round_half_up(100 - blocker_penalty - warning_penalty - unsupported_os_penalty))


def assess_vm_readiness(
    vm: VirtualMachineRecord,
    inventory: NormalizedInventory,
    target: Target,
    policy: PolicyConfig = DEFAULT_POLICY,
    os_table: Sequence[OSCompatibilityEntry] | None = None,
    os_default: OSCompatibilityEntry | None = None,
) -> ReadinessResult:
    """Run every check that applies to *target* against one VM."""
    rp = policy.readiness
    if os_table is None or os_default is None:
        os_table, os_default = default_os_table(target)
    issues: list[str] = []

    tools = inventory.tools_for(vm.name)
    if tools is None or not tools.tools_status.is_installed:
        issues.append(TOOLS_MISSING)
    elif not tools.tools_status.is_running:
        issues.append(TOOLS_NOT_RUNNING)

    ages = [s.age_in_days for s in inventory.snapshots_for(vm.name)]
    if any(age > rp.snapshot_blocker_age_days for age in ages):
        issues.append(OLD_SNAPSHOT)
    elif any(age > rp.snapshot_warning_age_days for age in ages):
        issues.append(AGING_SNAPSHOT)

    disks = inventory.disks_for(vm.name)
    if any(d.raw for d in disks):
        issues.append(RDM_DISK)
    if any(d.is_shared for d in disks):
        issues.append(SHARED_DISK)

    if target == Target.VSI:
        if disks and disks[0].capacity_gib > rp.vsi_boot_disk_max_gib:
            issues.append(BOOT_DISK_TOO_LARGE)
        if len(disks) > rp.vsi_max_disks_per_vm:
            issues.append(TOO_MANY_DISKS)

    if vm.memory_gib > rp.memory_blocker_gib:
        issues.append(OVERSIZED_MEMORY)
    elif vm.memory_gib > rp.memory_warning_gib:
        issues.append(LARGE_MEMORY)

    if normalized_status(lookup_os_compatibility(vm.guest_os, os_table, os_default)) == UNSUPPORTED:
        issues.append(UNSUPPORTED_OS)

    if hardware_version_number(vm.hardware_version) < rp.hw_version_minimum:
        issues.append(OUTDATED_HW_VERSION)

    blockers = sum(1 for i in issues if CHECK_DEFINITIONS[i].severity == Severity.BLOCKER)
    warnings = len(issues) - blockers
    return ReadinessResult(
        vm_name=vm.name,
        has_blocker=blockers > 0,
        has_warning=warnings > 0,
        issues=tuple(issues),
        blocker_count=blockers,
        warning_count=warnings,
    )


def assess_readiness(
    inventory: NormalizedInventory,
    target: Target,
    policy: PolicyConfig = DEFAULT_POLICY,
) -> ReadinessSummary:
    """Assess every in-scope VM and roll the results up into a readiness score."""
    os_table, os_default = default_os_table(target)
    results = tuple(
        assess_vm_readiness(vm, inventory, target, policy, os_table, os_default)
        for vm in inventory.vms
    )

    issue_counts: dict[str, int] = {}
    vms_by_issue: dict[str, list[str]] = {}
    for result in results:
        for issue in result.issues:
            issue_counts[issue] = issue_counts.get(issue, 0) + 1
            vms_by_issue.setdefault(issue, []).append(result.vm_name)

    blocker_count = sum(r.blocker_count for r in results)
    warning_count = sum(r.warning_count for r in results)
    unsupported_os_count = issue_counts.get(UNSUPPORTED_OS, 0)
    score = calculate_readiness_score(blocker_count, warning_count, unsupported_os_count, len(results))

    logger.info(
        "Readiness (%s): %d VM(s), %d blocker(s), %d warning(s), score %d",
        target.value, len(results), blocker_count, warning_count, score,
    )
    return ReadinessSummary(
        target=target,
        total_vms=len(results),
        blocker_count=blocker_count,
        warning_count=warning_count,
        unsupported_os_count=unsupported_os_count,
        readiness_score=score,
        results=results,
        issue_counts=issue_counts,
        vms_by_issue={k: tuple(v) for k, v in vms_by_issue.items()},
    )
