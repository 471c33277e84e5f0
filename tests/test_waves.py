"""Tests for complexity and network wave planning."""

import pytest

from cloud_migrate_planner.complexity import calculate_complexity_scores
from cloud_migrate_planner.config import Target
from cloud_migrate_planner.inventory import normalize_inventory
from cloud_migrate_planner.models import NetworkAdapterRecord, ToolsStatusRecord, ToolsStatus
from cloud_migrate_planner.waves import (
    GroupBy,
    VMWaveData,
    build_vm_wave_data,
    create_complexity_waves,
    create_network_waves,
    get_ip_prefix,
    port_group_prefix,
    wave_assignments,
)


def _wave_data(inventory, target=Target.VSI):
    scores = calculate_complexity_scores(inventory, target)
    return build_vm_wave_data(inventory, scores, target)


class TestIpPrefix:
    @pytest.mark.parametrize("ip, length, expected", [
        ("192.168.1.77", 24, "192.168.1.0/24"),
        ("10.0.0.5", 22, "10.0.0.0/22"),
        ("10.0.7.5", 22, "10.0.4.0/22"),
        ("172.31.255.9", 16, "172.31.0.0/16"),
        ("172.31.255.9", 8, "172.0.0.0/8"),
        ("172.31.255.9", 30, "172.31.255.8/30"),
        ("", 24, "Unknown"),
        ("fe80::1", 24, "Unknown"),
        ("10.0.0", 24, "Unknown"),
        ("10.0.0.x", 24, "Unknown"),
    ])
    def test_masking(self, ip, length, expected):
        assert get_ip_prefix(ip, length) == expected

    def test_port_group_prefix(self):
        assert port_group_prefix("Production-Web-Tier-01", 10) == "Production..."
        assert port_group_prefix("Short", 10) == "Short"


class TestBuildWaveData:
    def test_regression_inventory(self, regression_inventory):
        data = {d.vm_name: d for d in _wave_data(regression_inventory)}
        assert not data["vm-a"].has_blocker
        assert data["vm-a"].os_status == "supported"
        assert data["vm-a"].storage_gib == 40          # in-use preferred over provisioned
        assert data["vm-b"].has_blocker                # RDM
        assert data["vm-c"].has_blocker                # > 1024 GiB memory
        assert data["vm-c"].memory_gib == 1100

    def test_missing_tools_and_adapter(self, make_vm, make_snapshot):
        snap = make_snapshot([make_vm("a")], tools=[], networks=[])
        (vm,) = _wave_data(normalize_inventory(snap))
        assert vm.has_blocker
        assert vm.network_name == "No Network"
        assert vm.ip_address == ""
        assert vm.cluster == "No Cluster"

    def test_primary_adapter_is_lowest_device_order(self, make_vm, make_snapshot):
        snap = make_snapshot([make_vm("a")], networks=[
            NetworkAdapterRecord("a", "Backup", "192.168.9.9", device_order=4001),
            NetworkAdapterRecord("a", "Prod", "10.2.3.4", device_order=4000),
        ])
        (vm,) = _wave_data(normalize_inventory(snap))
        assert vm.network_name == "Prod"
        assert vm.ip_address == "10.2.3.4"


class TestComplexityWaves:
    def test_regression_inventory(self, regression_inventory):
        waves = create_complexity_waves(_wave_data(regression_inventory))
        assert [w.name for w in waves] == ["Wave 1: Pilot", "Wave 5: Remediation"]
        assert [vm.vm_name for vm in waves[1].vms] == ["vm-b", "vm-c"]
        assert waves[1].has_blockers

    def test_bucket_precedence(self):
        data = [
            VMWaveData("pilot", complexity=15, os_status="supported"),
            VMWaveData("community", complexity=10, os_status="partial"),
            VMWaveData("quick", complexity=30, os_status="supported"),
            VMWaveData("standard", complexity=55),
            VMWaveData("complex", complexity=56),
            VMWaveData("blocked", complexity=0, os_status="supported", has_blocker=True),
        ]
        assignments = {a.vm_name: a.wave for a in wave_assignments(create_complexity_waves(data))}
        assert assignments == {
            "pilot": "Wave 1: Pilot",
            "community": "Wave 2: Quick Wins",
            "quick": "Wave 2: Quick Wins",
            "standard": "Wave 3: Standard",
            "complex": "Wave 4: Complex",
            "blocked": "Wave 5: Remediation",
        }

    def test_empty_input(self):
        assert create_complexity_waves([]) == []


def _network_data():
    return [
        VMWaveData("web-1", complexity=10, network_name="Prod-Web-Frontend", ip_address="10.1.1.10", vcpus=2),
        VMWaveData("web-2", complexity=20, network_name="Prod-Web-Frontend", ip_address="10.1.1.11", vcpus=2),
        VMWaveData("web-3", complexity=30, network_name="Prod-Web-Backend", ip_address="10.1.2.10", vcpus=4),
        VMWaveData("db-1", complexity=60, network_name="Prod-DB", ip_address="10.2.0.5", has_blocker=True),
        VMWaveData("lonely", network_name="Isolated", cluster="lab"),
    ]


class TestNetworkWaves:
    @pytest.mark.parametrize("group_by", list(GroupBy))
    def test_partition_is_complete(self, group_by):
        data = _network_data()
        waves = create_network_waves(data, group_by)
        names = [vm.vm_name for w in waves for vm in w.vms]
        assert sorted(names) == sorted(d.vm_name for d in data)
        assert sum(w.vm_count for w in waves) == len(data)

    def test_port_group_grouping_and_order(self):
        waves = create_network_waves(_network_data(), GroupBy.PORT_GROUP)
        assert [w.name for w in waves] == ["Prod-Web-Backend", "Isolated", "Prod-Web-Frontend", "Prod-DB"]
        frontend = waves[2]
        assert frontend.vm_count == 2
        assert frontend.vcpus == 4
        assert frontend.avg_complexity == 15
        assert frontend.description == "IPs: 10.1.1.10, 10.1.1.11"
        assert waves[1].description == "No IP addresses detected"
        assert waves[-1].has_blockers

    def test_port_group_prefix(self):
        waves = create_network_waves(_network_data(), GroupBy.PORT_GROUP_PREFIX, prefix_length=8)
        by_name = {w.name: w for w in waves}
        assert by_name["Prod-Web..."].vm_count == 3
        assert by_name["Prod-Web..."].description == "Port Group: Prod-Web-Frontend, Prod-Web-Backend"
        assert "Isolated" in by_name

    def test_ip_prefix(self):
        waves = create_network_waves(_network_data(), GroupBy.IP_PREFIX, cidr=16)
        by_name = {w.name: w for w in waves}
        assert by_name["10.1.0.0/16"].vm_count == 3
        assert by_name["10.2.0.0/16"].has_blockers
        assert by_name["No IP: Isolated"].vm_count == 1

    def test_cluster(self):
        waves = create_network_waves(_network_data(), GroupBy.CLUSTER)
        assert {w.name: w.vm_count for w in waves} == {"lab": 1, "No Cluster": 4}

    def test_out_of_range_lengths_are_clamped(self):
        data = _network_data()
        assert create_network_waves(data, GroupBy.IP_PREFIX, cidr=2) == \
            create_network_waves(data, GroupBy.IP_PREFIX, cidr=8)
        assert create_network_waves(data, GroupBy.PORT_GROUP_PREFIX, prefix_length=99) == \
            create_network_waves(data, GroupBy.PORT_GROUP_PREFIX, prefix_length=50)

    def test_description_caps_at_three(self):
        data = [VMWaveData(f"vm-{i}", network_name="Flat", ip_address=f"10.0.0.{i}") for i in range(5)]
        (wave,) = create_network_waves(data, GroupBy.PORT_GROUP)
        assert wave.description == "IPs: 10.0.0.0, 10.0.0.1, 10.0.0.2 +2 more"

    def test_accepts_string_group_by(self):
        waves = create_network_waves(_network_data(), "cluster")
        assert len(waves) == 2


class TestWaveAssignments:
    @pytest.mark.parametrize("target", [Target.VSI, Target.CONTAINER_PLATFORM])
    def test_every_vm_assigned_once(self, make_vm, make_snapshot, target):
        vms = [make_vm(f"vm-{i}", vcpus=2 + i, memory_gib=4 * (i + 1)) for i in range(8)]
        tools = [ToolsStatusRecord(vm.name, ToolsStatus.OK) for vm in vms[:6]]
        inv = normalize_inventory(make_snapshot(vms, tools=tools))
        data = _wave_data(inv, target)
        for waves in (create_complexity_waves(data), create_network_waves(data, GroupBy.IP_PREFIX)):
            assigned = [a.vm_name for a in wave_assignments(waves)]
            assert sorted(assigned) == sorted(vm.name for vm in vms)
