"""Shared pytest fixtures for the planning engine tests.

The three-VM regression inventory:

* ``vm-a``: RHEL 8, 2 vCPU / 8 GiB, tools ok, one 50 GiB disk.
* ``vm-b``: FreeBSD 9 (matches no OS entry), 4 vCPU / 20 GiB, RDM disk.
* ``vm-c``: RHEL 8, 64 vCPU / 1100 GiB memory.
"""

import json

import pytest

from cloud_migrate_planner.inventory import normalize_inventory
from cloud_migrate_planner.models import (
    DiskRecord,
    InventorySnapshot,
    NetworkAdapterRecord,
    PowerState,
    ToolsStatus,
    ToolsStatusRecord,
    VirtualMachineRecord,
)

GIB = 1024
RHEL8 = "Red Hat Enterprise Linux 8 (64-bit)"


def _vm(name, vcpus=2, memory_gib=8, guest_os=RHEL8, **kwargs):
    kwargs.setdefault("power_state", PowerState.POWERED_ON)
    kwargs.setdefault("hardware_version", "vmx-19")
    kwargs.setdefault("provisioned_mib", 50 * GIB)
    kwargs.setdefault("in_use_mib", 40 * GIB)
    return VirtualMachineRecord(
        name=name, vcpus=vcpus, memory_mib=memory_gib * GIB, guest_os=guest_os, **kwargs
    )


def _snapshot(vms, disks=None, snapshots=(), tools=None, networks=None):
    """Snapshot where every VM gets tools ok, one 50 GiB disk and one NIC unless given."""
    if disks is None:
        disks = [DiskRecord(vm.name, 50 * GIB, disk_key=2000) for vm in vms]
    if tools is None:
        tools = [ToolsStatusRecord(vm.name, ToolsStatus.OK) for vm in vms]
    if networks is None:
        networks = [
            NetworkAdapterRecord(vm.name, "VM Network", f"10.0.0.{i + 10}", device_order=4000)
            for i, vm in enumerate(vms)
        ]
    return InventorySnapshot(
        vms=tuple(vms),
        disks=tuple(disks),
        snapshots=tuple(snapshots),
        tools=tuple(tools),
        networks=tuple(networks),
    )


@pytest.fixture
def make_vm():
    return _vm


@pytest.fixture
def make_snapshot():
    return _snapshot


@pytest.fixture
def regression_snapshot():
    vms = [
        _vm("vm-a", vcpus=2, memory_gib=8),
        _vm("vm-b", vcpus=4, memory_gib=20, guest_os="FreeBSD 9"),
        _vm("vm-c", vcpus=64, memory_gib=1100),
    ]
    disks = [
        DiskRecord("vm-a", 50 * GIB, disk_key=2000),
        DiskRecord("vm-b", 50 * GIB, disk_key=2000, raw=True),
        DiskRecord("vm-c", 100 * GIB, disk_key=2000),
    ]
    return _snapshot(vms, disks=disks)


@pytest.fixture
def regression_inventory(regression_snapshot):
    return normalize_inventory(regression_snapshot)


@pytest.fixture
def inventory_file(tmp_path):
    """The regression inventory as a JSON document on disk."""
    doc = {
        "vms": [
            {"name": "vm-a", "powerState": "poweredOn", "cpus": 2, "memory": 8 * GIB,
             "guestOS": RHEL8, "hardwareVersion": "vmx-19", "provisionedMiB": 51200,
             "inUseMiB": 40960, "cluster": "prod"},
            {"name": "vm-b", "powerState": "poweredOn", "cpus": 4, "memory": 20 * GIB,
             "guestOS": "FreeBSD 9", "hardwareVersion": "vmx-19", "provisionedMiB": 51200,
             "cluster": "prod"},
            {"name": "vm-c", "powerState": "poweredOn", "cpus": 64, "memory": 1100 * GIB,
             "guestOS": RHEL8, "hardwareVersion": "vmx-19", "provisionedMiB": 102400,
             "cluster": "db"},
            {"name": "vm-off", "powerState": "poweredOff", "cpus": 2, "memory": 4096},
        ],
        "disks": [
            {"vmName": "vm-a", "capacityMiB": 51200, "diskKey": 2000},
            {"vmName": "vm-b", "capacityMiB": 51200, "diskKey": 2000, "raw": True},
            {"vmName": "vm-c", "capacityMiB": 102400, "diskKey": 2000},
        ],
        "snapshots": [],
        "tools": [
            {"vmName": "vm-a", "toolsStatus": "toolsOk"},
            {"vmName": "vm-b", "toolsStatus": "toolsOk"},
            {"vmName": "vm-c", "toolsStatus": "toolsOk"},
        ],
        "networks": [
            {"vmName": "vm-a", "networkName": "App-Net", "ipv4Address": "10.1.1.10"},
            {"vmName": "vm-b", "networkName": "App-Net", "ipv4Address": "10.1.1.11"},
            {"vmName": "vm-c", "networkName": "DB-Net", "ipv4Address": "10.1.2.10"},
        ],
    }
    path = tmp_path / "inventory.json"
    path.write_text(json.dumps(doc), encoding="utf-8")
    return path
