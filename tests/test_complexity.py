"""Tests for complexity scoring under both presets."""

import pytest

from cloud_migrate_planner.complexity import (
    BLOCKER,
    COMPLEX,
    CONTAINER_PLATFORM_COMPLEXITY,
    MODERATE,
    SIMPLE,
    VSI_COMPLEXITY,
    calculate_complexity_score,
    calculate_complexity_scores,
    complexity_preset_for,
    get_assessment_summary,
    get_complexity_category,
    get_complexity_distribution,
    get_top_complex_vms,
)
from cloud_migrate_planner.config import Target
from cloud_migrate_planner.models import DiskRecord
from cloud_migrate_planner.os_compatibility import os_compatibility_for

GIB = 1024


def _score(vm, disks=(), nics=1, preset=VSI_COMPLEXITY, target=Target.VSI):
    return calculate_complexity_score(vm, disks, nics, os_compatibility_for(vm.guest_os, target), preset)


class TestCategories:
    @pytest.mark.parametrize("score, category", [
        (0, SIMPLE), (25, SIMPLE), (26, MODERATE), (50, MODERATE),
        (51, COMPLEX), (75, COMPLEX), (76, BLOCKER), (100, BLOCKER),
    ])
    def test_bucket_bounds(self, score, category):
        assert get_complexity_category(score) == category

    def test_preset_selection(self):
        assert complexity_preset_for(Target.VSI) is VSI_COMPLEXITY
        assert complexity_preset_for(Target.CONTAINER_PLATFORM) is CONTAINER_PLATFORM_COMPLEXITY


class TestVSIPreset:
    def test_simple_vm(self, make_vm):
        cs = _score(make_vm("a"))
        assert cs.score == 0
        assert cs.category == SIMPLE
        assert cs.factors == ()

    def test_os_points(self, make_vm):
        assert _score(make_vm("a", guest_os="FreeBSD 9")).score == 40
        assert _score(make_vm("a", guest_os="CentOS 7 (64-bit)")).score == 15

    def test_nic_points(self, make_vm):
        vm = make_vm("a")
        assert _score(vm, nics=2).score == 10
        assert _score(vm, nics=3).score == 10
        assert _score(vm, nics=4).score == 25

    def test_disk_points(self, make_vm):
        vm = make_vm("a")
        three = [DiskRecord("a", 10 * GIB, disk_key=i) for i in range(3)]
        six = [DiskRecord("a", 10 * GIB, disk_key=i) for i in range(6)]
        huge = [DiskRecord("a", 2100 * GIB)]
        assert _score(vm, three).score == 10
        assert _score(vm, six).score == 20
        assert _score(vm, huge).score == 30

    def test_size_tiers(self, make_vm):
        assert _score(make_vm("a", vcpus=33, memory_gib=100)).score == 15
        assert _score(make_vm("a", vcpus=65, memory_gib=100)).score == 30
        assert _score(make_vm("a", vcpus=8, memory_gib=513)).score == 20
        assert _score(make_vm("a", vcpus=8, memory_gib=1025)).score == 40

    def test_regression_inventory(self, regression_inventory):
        scores = {cs.vm_name: cs.score for cs in calculate_complexity_scores(regression_inventory, Target.VSI)}
        assert scores == {"vm-a": 0, "vm-b": 40, "vm-c": 55}   # vm-c: memory +40, vCPUs +15


class TestContainerPlatformPreset:
    def _score(self, vm, disks=(), nics=1):
        return _score(vm, disks, nics, CONTAINER_PLATFORM_COMPLEXITY, Target.CONTAINER_PLATFORM)

    def test_os_points_follow_compatibility_score(self, make_vm):
        assert self._score(make_vm("a")).score == 0                                        # RHEL 8, 100
        assert self._score(make_vm("a", guest_os="CentOS 7 (64-bit)")).score == 12         # 60
        assert self._score(make_vm("a", guest_os="FreeBSD 9")).score == 30                 # 0

    def test_nic_and_disk_points(self, make_vm):
        vm = make_vm("a")
        six = [DiskRecord("a", 10 * GIB, disk_key=i) for i in range(6)]
        assert self._score(vm, nics=2).score == 15
        assert self._score(vm, nics=4).score == 30
        assert self._score(vm, six).score == 30

    def test_no_large_disk_term(self, make_vm):
        assert self._score(make_vm("a"), [DiskRecord("a", 5000 * GIB)]).score == 0

    def test_flat_resource_penalty_needs_both_limits(self, make_vm):
        assert self._score(make_vm("a", vcpus=17, memory_gib=129)).score == 20
        assert self._score(make_vm("a", vcpus=17, memory_gib=64)).score == 0
        assert self._score(make_vm("a", vcpus=8, memory_gib=256)).score == 0

    def test_hardware_version_points(self, make_vm):
        assert self._score(make_vm("a", hardware_version="vmx-8")).score == 25
        assert self._score(make_vm("a", hardware_version="vmx-13")).score == 10
        assert self._score(make_vm("a", hardware_version="vmx-14")).score == 0


class TestBounds:
    @pytest.mark.parametrize("preset, target", [
        (VSI_COMPLEXITY, Target.VSI),
        (CONTAINER_PLATFORM_COMPLEXITY, Target.CONTAINER_PLATFORM),
    ])
    def test_extremes_stay_in_range(self, make_vm, preset, target):
        disks = [DiskRecord("a", 3000 * GIB, disk_key=i) for i in range(20)]
        worst = make_vm("a", vcpus=256, memory_gib=4096, guest_os="OS/2 Warp", hardware_version="vmx-4")
        empty = make_vm("b", vcpus=0, memory_gib=0, guest_os="", hardware_version="")
        for vm in (worst, empty):
            for nics in (0, 10):
                cs = _score(vm, disks, nics, preset, target)
                assert 0 <= cs.score <= 100
        assert _score(worst, disks, 10, preset, target).score == 100


class TestRollups:
    def test_summary_and_top(self, regression_inventory):
        scores = calculate_complexity_scores(regression_inventory, Target.VSI)
        summary = get_assessment_summary(scores)
        assert summary.total_vms == 3
        assert summary.simple_count == 1
        assert summary.moderate_count == 1
        assert summary.complex_count == 1
        assert summary.average_score == 32
        assert get_complexity_distribution(scores) == {SIMPLE: 1, MODERATE: 1, COMPLEX: 1}
        assert [cs.vm_name for cs in get_top_complex_vms(scores, 2)] == ["vm-c", "vm-b"]

    def test_empty_summary(self):
        assert get_assessment_summary([]).average_score == 0
