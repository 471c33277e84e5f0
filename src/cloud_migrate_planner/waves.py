"""Migration wave planning - partitions the in-scope VMs into ordered waves,
either by complexity or by network locality."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from .config import DEFAULT_POLICY, PolicyConfig, Target
from .inventory import NormalizedInventory, join_key
from .models import ComplexityScore, WaveAssignment
from .os_compatibility import SUPPORTED, normalized_status, os_compatibility_for
from .units import round_half_up

logger = logging.getLogger(__name__)

NO_NETWORK = "No Network"
NO_CLUSTER = "No Cluster"
UNKNOWN_PREFIX = "Unknown"

PORT_GROUP_PREFIX_RANGE = (5, 50)
CIDR_RANGE = (8, 30)
DESCRIPTION_ITEMS = 3


class GroupBy(str, Enum):
    PORT_GROUP = "port-group"
    PORT_GROUP_PREFIX = "port-group-prefix"
    IP_PREFIX = "ip-prefix"
    CLUSTER = "cluster"


@dataclass(frozen=True)
class VMWaveData:
    vm_name: str
    complexity: int = 0
    os_status: str = ""
    has_blocker: bool = False
    vcpus: int = 0
    memory_gib: int = 0
    storage_gib: int = 0
    network_name: str = NO_NETWORK
    ip_address: str = ""
    cluster: str = NO_CLUSTER


@dataclass(frozen=True)
class WaveGroup:
    name: str
    description: str
    vms: tuple[VMWaveData, ...] = ()
    has_blockers: bool = False

    @property
    def vm_count(self) -> int:
        return len(self.vms)

    @property
    def vcpus(self) -> int:
        return sum(vm.vcpus for vm in self.vms)

    @property
    def memory_gib(self) -> int:
        return sum(vm.memory_gib for vm in self.vms)

    @property
    def storage_gib(self) -> int:
        return sum(vm.storage_gib for vm in self.vms)

    @property
    def avg_complexity(self) -> float:
        return sum(vm.complexity for vm in self.vms) / len(self.vms) if self.vms else 0.0


def build_vm_wave_data(
    inventory: NormalizedInventory,
    complexity_scores: Sequence[ComplexityScore],
    target: Target,
    policy: PolicyConfig = DEFAULT_POLICY,
) -> list[VMWaveData]:
    """Collect the per-VM facts both wave strategies need."""
    scores = {join_key(cs.vm_name): cs.score for cs in complexity_scores}
    data: list[VMWaveData] = []
    for vm in inventory.vms:
        disks = inventory.disks_for(vm.name)
        tools = inventory.tools_for(vm.name)
        no_tools = tools is None or not tools.tools_status.is_installed
        rdm_or_shared = any(d.raw or d.is_shared for d in disks)
        oversized = vm.memory_gib > policy.readiness.memory_blocker_gib

        adapter = inventory.primary_adapter(vm.name)
        storage_gib = vm.in_use_gib or vm.provisioned_gib
        data.append(VMWaveData(
            vm_name=vm.name,
            complexity=scores.get(join_key(vm.name), 0),
            os_status=normalized_status(os_compatibility_for(vm.guest_os, target)),
            has_blocker=rdm_or_shared or oversized or no_tools,
            vcpus=vm.vcpus,
            memory_gib=round_half_up(vm.memory_gib),
            storage_gib=round_half_up(storage_gib),
            network_name=(adapter.network_name if adapter else "") or NO_NETWORK,
            ip_address=adapter.ipv4_address if adapter else "",
            cluster=vm.cluster or NO_CLUSTER,
        ))
    return data


# ---------------------------------------------------------------------------
# Complexity-based waves
# ---------------------------------------------------------------------------

COMPLEXITY_WAVES = (
    ("Wave 1: Pilot", "Simple VMs with supported OS for initial validation"),
    ("Wave 2: Quick Wins", "Low complexity VMs ready for migration"),
    ("Wave 3: Standard", "Moderate complexity VMs"),
    ("Wave 4: Complex", "High complexity VMs requiring careful planning"),
    ("Wave 5: Remediation", "VMs with blockers requiring fixes before migration"),
)

PILOT_MAX = 15
QUICK_WINS_MAX = 30
STANDARD_MAX = 55


def _complexity_wave_index(vm: VMWaveData) -> int:
    if vm.has_blocker:
        return 4
    if vm.complexity <= PILOT_MAX and vm.os_status == SUPPORTED:
        return 0
    if vm.complexity <= QUICK_WINS_MAX:
        return 1
    if vm.complexity <= STANDARD_MAX:
        return 2
    return 3


def create_complexity_waves(vm_data: Sequence[VMWaveData]) -> list[WaveGroup]:
    """Five ordered waves; a blocker sends a VM to Remediation regardless of score."""
    buckets: list[list[VMWaveData]] = [[] for _ in COMPLEXITY_WAVES]
    for vm in vm_data:
        buckets[_complexity_wave_index(vm)].append(vm)

    waves = [
        WaveGroup(name=name, description=description, vms=tuple(members),
                  has_blockers=any(m.has_blocker for m in members))
        for (name, description), members in zip(COMPLEXITY_WAVES, buckets)
        if members
    ]
    logger.info("Planned %d complexity wave(s) for %d VM(s)", len(waves), len(vm_data))
    return waves


# ---------------------------------------------------------------------------
# Network-based waves
# ---------------------------------------------------------------------------

def _clamp(value: int, bounds: tuple[int, int], label: str) -> int:
    low, high = bounds
    clamped = min(high, max(low, value))
    if clamped != value:
        logger.warning("%s %d out of range [%d, %d]; using %d", label, value, low, high, clamped)
    return clamped


def get_ip_prefix(ip: str, prefix_length: int) -> str:
    """Mask a dotted-quad IPv4 address to ``a.b.c.d/prefix_length``."""
    if not ip:
        return UNKNOWN_PREFIX
    parts = ip.strip().split(".")
    if len(parts) != 4 or not all(p.isdigit() and int(p) <= 255 for p in parts):
        return UNKNOWN_PREFIX

    whole_octets = prefix_length // 8
    remaining_bits = prefix_length % 8
    prefix = [int(p) for p in parts[:whole_octets]]
    if remaining_bits and whole_octets < 4:
        mask = 256 - 2 ** (8 - remaining_bits)
        prefix.append(int(parts[whole_octets]) & mask)
    prefix.extend([0] * (4 - len(prefix)))
    return f"{'.'.join(str(o) for o in prefix)}/{prefix_length}"


def port_group_prefix(name: str, length: int) -> str:
    return name[:length] + "..." if len(name) > length else name


def _summarize(items: list[str], label: str, empty: str) -> str:
    if not items:
        return empty
    text = f"{label}: {', '.join(items[:DESCRIPTION_ITEMS])}"
    if len(items) > DESCRIPTION_ITEMS:
        text += f" +{len(items) - DESCRIPTION_ITEMS} more"
    return text


def _distinct(values) -> list[str]:
    return list(dict.fromkeys(v for v in values if v))


def create_network_waves(
    vm_data: Sequence[VMWaveData],
    group_by: GroupBy = GroupBy.PORT_GROUP,
    prefix_length: int | None = None,
    cidr: int | None = None,
    policy: PolicyConfig = DEFAULT_POLICY,
) -> list[WaveGroup]:
    """Group VMs by one network key per VM.

    Groups without blockers come first, then groups are ordered by ascending
    member count; ties keep first-seen order.  Out-of-range prefix or CIDR
    lengths are clamped into range.
    """
    group_by = GroupBy(group_by)
    if prefix_length is None:
        prefix_length = policy.waves.port_group_prefix_length
    if cidr is None:
        cidr = policy.waves.ip_prefix_length
    prefix_length = _clamp(prefix_length, PORT_GROUP_PREFIX_RANGE, "Port group prefix length")
    cidr = _clamp(cidr, CIDR_RANGE, "CIDR prefix length")

    groups: dict[str, list[VMWaveData]] = {}
    for vm in vm_data:
        if group_by == GroupBy.PORT_GROUP:
            key = vm.network_name or NO_NETWORK
        elif group_by == GroupBy.PORT_GROUP_PREFIX:
            key = port_group_prefix(vm.network_name or NO_NETWORK, prefix_length)
        elif group_by == GroupBy.IP_PREFIX:
            key = get_ip_prefix(vm.ip_address, cidr) if vm.ip_address else f"No IP: {vm.network_name}"
        else:
            key = vm.cluster or NO_CLUSTER
        groups.setdefault(key, []).append(vm)

    waves: list[WaveGroup] = []
    for name, members in groups.items():
        if group_by == GroupBy.PORT_GROUP:
            description = _summarize(_distinct(m.ip_address for m in members),
                                     "IPs", "No IP addresses detected")
        else:
            port_groups = _distinct(m.network_name for m in members if m.network_name != NO_NETWORK)
            description = _summarize(port_groups, "Port Group", "No port group info")
        waves.append(WaveGroup(
            name=name,
            description=description,
            vms=tuple(members),
            has_blockers=any(m.has_blocker for m in members),
        ))

    waves.sort(key=lambda w: (w.has_blockers, w.vm_count))
    logger.info("Planned %d network group(s) by %s for %d VM(s)", len(waves), group_by.value, len(vm_data))
    return waves


def wave_assignments(waves: Sequence[WaveGroup]) -> list[WaveAssignment]:
    """Flatten waves to one assignment per VM."""
    return [WaveAssignment(vm_name=vm.vm_name, wave=wave.name) for wave in waves for vm in wave.vms]
