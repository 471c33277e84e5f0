"""Tests for per-VM readiness checks and the aggregate readiness score."""

import pytest

from cloud_migrate_planner.config import Target
from cloud_migrate_planner.inventory import normalize_inventory
from cloud_migrate_planner.models import DiskRecord, SnapshotRecord, ToolsStatus, ToolsStatusRecord
from cloud_migrate_planner.readiness import (
    AGING_SNAPSHOT,
    BOOT_DISK_TOO_LARGE,
    LARGE_MEMORY,
    OLD_SNAPSHOT,
    OUTDATED_HW_VERSION,
    OVERSIZED_MEMORY,
    RDM_DISK,
    SHARED_DISK,
    TOO_MANY_DISKS,
    TOOLS_MISSING,
    TOOLS_NOT_RUNNING,
    UNSUPPORTED_OS,
    assess_readiness,
    assess_vm_readiness,
    calculate_readiness_score,
)

GIB = 1024


def _issues(snapshot, target=Target.VSI):
    inv = normalize_inventory(snapshot)
    return assess_vm_readiness(inv.vms[0], inv, target).issues


class TestReadinessScore:
    def test_no_issues_scores_100(self):
        assert calculate_readiness_score(0, 0, 0, 10) == 100

    def test_monotonic_in_blockers(self):
        scores = [calculate_readiness_score(b, 2, 1, 20) for b in range(0, 40)]
        assert all(later <= earlier for earlier, later in zip(scores, scores[1:]))

    def test_clamps_at_zero(self):
        assert calculate_readiness_score(10, 0, 0, 1) == 0

    def test_empty_population_uses_one(self):
        assert calculate_readiness_score(0, 0, 0, 0) == 100
        assert calculate_readiness_score(1, 0, 0, 0) == 50

    def test_rounds_half_up(self):
        # 100 - 30 * 1/4 = 92.5
        assert calculate_readiness_score(0, 1, 0, 4) == 93


class TestVMChecks:
    def test_clean_vm_has_no_issues(self, make_vm, make_snapshot):
        assert _issues(make_snapshot([make_vm("a")])) == ()

    def test_tools(self, make_vm, make_snapshot):
        vm = make_vm("a")
        assert _issues(make_snapshot([vm], tools=[])) == (TOOLS_MISSING,)
        not_installed = [ToolsStatusRecord("a", ToolsStatus.GUEST_NOT_INSTALLED)]
        assert _issues(make_snapshot([vm], tools=not_installed)) == (TOOLS_MISSING,)
        not_running = [ToolsStatusRecord("a", ToolsStatus.NOT_RUNNING)]
        assert _issues(make_snapshot([vm], tools=not_running)) == (TOOLS_NOT_RUNNING,)

    def test_snapshot_age_bands(self, make_vm, make_snapshot):
        vm = make_vm("a")
        assert _issues(make_snapshot([vm], snapshots=[SnapshotRecord("a", 7)])) == ()
        assert _issues(make_snapshot([vm], snapshots=[SnapshotRecord("a", 8)])) == (AGING_SNAPSHOT,)
        both = [SnapshotRecord("a", 10), SnapshotRecord("a", 31)]
        assert _issues(make_snapshot([vm], snapshots=both)) == (OLD_SNAPSHOT,)

    def test_rdm_and_shared_disks(self, make_vm, make_snapshot):
        disks = [
            DiskRecord("a", 10 * GIB, disk_key=2000, raw=True),
            DiskRecord("a", 10 * GIB, disk_key=2001, sharing_mode="sharingMultiWriter"),
        ]
        assert _issues(make_snapshot([make_vm("a")], disks=disks)) == (RDM_DISK, SHARED_DISK)

    def test_vsi_only_disk_limits(self, make_vm, make_snapshot):
        disks = [DiskRecord("a", 300 * GIB, disk_key=2000)]
        disks += [DiskRecord("a", GIB, disk_key=2001 + i) for i in range(12)]
        snap = make_snapshot([make_vm("a")], disks=disks)
        assert _issues(snap, Target.VSI) == (BOOT_DISK_TOO_LARGE, TOO_MANY_DISKS)
        assert _issues(snap, Target.CONTAINER_PLATFORM) == ()

    def test_boot_disk_is_lowest_key(self, make_vm, make_snapshot):
        disks = [
            DiskRecord("a", 500 * GIB, disk_key=2001),
            DiskRecord("a", 40 * GIB, disk_key=2000),
        ]
        assert _issues(make_snapshot([make_vm("a")], disks=disks)) == ()

    def test_memory_bands(self, make_vm, make_snapshot):
        assert _issues(make_snapshot([make_vm("a", vcpus=64, memory_gib=512)])) == ()
        assert _issues(make_snapshot([make_vm("a", vcpus=64, memory_gib=600)])) == (LARGE_MEMORY,)
        assert _issues(make_snapshot([make_vm("a", vcpus=64, memory_gib=1025)])) == (OVERSIZED_MEMORY,)

    @pytest.mark.parametrize("target", [Target.VSI, Target.CONTAINER_PLATFORM])
    def test_unknown_os_is_unsupported(self, make_vm, make_snapshot, target):
        snap = make_snapshot([make_vm("a", guest_os="Solaris 10")])
        assert _issues(snap, target) == (UNSUPPORTED_OS,)

    def test_os_status_depends_on_target(self, make_vm, make_snapshot):
        snap = make_snapshot([make_vm("a", guest_os="Red Hat Enterprise Linux 6 (64-bit)")])
        assert _issues(snap, Target.VSI) == ()
        assert _issues(snap, Target.CONTAINER_PLATFORM) == (UNSUPPORTED_OS,)

    def test_hardware_version(self, make_vm, make_snapshot):
        assert _issues(make_snapshot([make_vm("a", hardware_version="vmx-9")])) == (OUTDATED_HW_VERSION,)
        assert _issues(make_snapshot([make_vm("a", hardware_version="vmx-10")])) == ()
        assert _issues(make_snapshot([make_vm("a", hardware_version="")])) == (OUTDATED_HW_VERSION,)


class TestAssessReadiness:
    def test_regression_inventory(self, regression_inventory):
        summary = assess_readiness(regression_inventory, Target.VSI)
        by_vm = {r.vm_name: r for r in summary.results}

        assert by_vm["vm-a"].issues == ()
        assert by_vm["vm-b"].blocker_count == 2
        assert set(by_vm["vm-b"].issues) == {UNSUPPORTED_OS, RDM_DISK}
        assert by_vm["vm-c"].issues == (OVERSIZED_MEMORY,)

        assert summary.blocker_count == 3
        assert summary.warning_count == 0
        assert summary.unsupported_os_count == 1
        assert summary.readiness_score == 43
        assert summary.vms_with_blockers == 2
        assert summary.ready_vms == 1
        assert summary.vms_by_issue[RDM_DISK] == ("vm-b",)

    def test_counts_pairs_not_vms(self, make_vm, make_snapshot):
        disks = [DiskRecord("a", GIB, raw=True, sharing_mode="sharingMultiWriter")]
        snap = make_snapshot([make_vm("a"), make_vm("b")], disks=disks)
        summary = assess_readiness(normalize_inventory(snap), Target.VSI)
        assert summary.blocker_count == 2
        assert summary.readiness_score == 50

    def test_empty_inventory(self, make_snapshot):
        summary = assess_readiness(normalize_inventory(make_snapshot([])), Target.VSI)
        assert summary.total_vms == 0
        assert summary.readiness_score == 100
