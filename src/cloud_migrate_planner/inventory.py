"""Inventory normalisation - joins the per-sheet records to their VMs, filters
the migration population and loads inventory snapshots from JSON.

All joins happen here, on names normalised once with :func:`join_key`.
Downstream modules only ever ask a :class:`NormalizedInventory` for a VM's
related records and never compare raw names themselves.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .models import (
    DiskRecord,
    ExclusionRule,
    InvalidInputError,
    InventorySnapshot,
    NetworkAdapterRecord,
    PowerState,
    SnapshotRecord,
    ToolsStatus,
    ToolsStatusRecord,
    VirtualMachineRecord,
)

logger = logging.getLogger(__name__)


def join_key(name: str) -> str:
    """Canonical form of a VM name for cross-sheet joins."""
    return (name or "").strip().casefold()


# ---------------------------------------------------------------------------
# Auto-exclusion of infrastructure VMs
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ExclusionResult:
    is_excluded: bool = False
    reasons: tuple[str, ...] = ()
    labels: tuple[str, ...] = ()


NO_EXCLUSION = ExclusionResult()


def _matches_name(name_lower: str, rule: ExclusionRule) -> bool:
    if any(ep.lower() in name_lower for ep in rule.exclude_patterns):
        return False

    for pattern in rule.patterns:
        if rule.match == "regex":
            if re.search(pattern, name_lower, re.IGNORECASE):
                return True
            continue
        p = pattern.lower()
        if rule.match == "startsWith" and name_lower.startswith(p):
            return True
        if rule.match == "endsWith" and name_lower.endswith(p):
            return True
        if rule.match == "exact" and name_lower == p:
            return True
        if rule.match == "contains" and p in name_lower:
            return True
    return False


def _matches_rule(vm: VirtualMachineRecord, rule: ExclusionRule) -> bool:
    if _matches_name(vm.name.strip().lower(), rule):
        return True
    os_lower = vm.guest_os.lower()
    return any(p.lower() in os_lower for p in rule.guest_os_patterns)


def evaluate_exclusion(vm: VirtualMachineRecord, rules: Sequence[ExclusionRule]) -> ExclusionResult:
    """Evaluate every rule against *vm*; labels are de-duplicated, reasons are not."""
    reasons: list[str] = []
    labels: list[str] = []
    for rule in rules:
        if _matches_rule(vm, rule):
            reasons.append(rule.id)
            if rule.label not in labels:
                labels.append(rule.label)
    if not reasons:
        return NO_EXCLUSION
    return ExclusionResult(True, tuple(reasons), tuple(labels))


# ---------------------------------------------------------------------------
# Normalised inventory
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class NormalizedInventory:
    """Powered-on, non-template VMs plus O(1) lookups of their related records."""
    vms: tuple[VirtualMachineRecord, ...] = ()
    excluded: dict[str, ExclusionResult] = field(default_factory=dict)
    orphan_record_count: int = 0
    _disks: dict[str, tuple[DiskRecord, ...]] = field(default_factory=dict, repr=False)
    _snapshots: dict[str, tuple[SnapshotRecord, ...]] = field(default_factory=dict, repr=False)
    _tools: dict[str, ToolsStatusRecord] = field(default_factory=dict, repr=False)
    _networks: dict[str, tuple[NetworkAdapterRecord, ...]] = field(default_factory=dict, repr=False)

    def disks_for(self, vm_name: str) -> tuple[DiskRecord, ...]:
        """Disks ordered by disk key; the first one is the boot disk."""
        return self._disks.get(join_key(vm_name), ())

    def snapshots_for(self, vm_name: str) -> tuple[SnapshotRecord, ...]:
        return self._snapshots.get(join_key(vm_name), ())

    def tools_for(self, vm_name: str) -> ToolsStatusRecord | None:
        return self._tools.get(join_key(vm_name))

    def adapters_for(self, vm_name: str) -> tuple[NetworkAdapterRecord, ...]:
        """Network adapters ordered by device order."""
        return self._networks.get(join_key(vm_name), ())

    def primary_adapter(self, vm_name: str) -> NetworkAdapterRecord | None:
        adapters = self.adapters_for(vm_name)
        return adapters[0] if adapters else None

    @property
    def vm_count(self) -> int:
        return len(self.vms)


def _group(records: Iterable, known: set[str]) -> tuple[dict[str, list], int]:
    grouped: dict[str, list] = {}
    orphans = 0
    for rec in records:
        key = join_key(rec.vm_name)
        if key not in known:
            orphans += 1
            continue
        grouped.setdefault(key, []).append(rec)
    return grouped, orphans


def normalize_inventory(
    snapshot: InventorySnapshot,
    exclusion_rules: Sequence[ExclusionRule] = (),
) -> NormalizedInventory:
    """Select the migration population and index related records by VM."""
    in_scope: list[VirtualMachineRecord] = []
    excluded: dict[str, ExclusionResult] = {}
    seen: set[str] = set()

    for vm in snapshot.vms:
        if vm.power_state != PowerState.POWERED_ON or vm.template:
            continue
        if exclusion_rules:
            result = evaluate_exclusion(vm, exclusion_rules)
            if result.is_excluded:
                excluded[vm.name] = result
                continue
        key = join_key(vm.name)
        if key in seen:
            logger.warning("Duplicate VM name %r in inventory; related records are shared", vm.name)
        seen.add(key)
        in_scope.append(vm)

    # Related records may legitimately belong to powered-off or excluded VMs,
    # so the join is against every VM in the snapshot.
    all_keys = {join_key(vm.name) for vm in snapshot.vms}

    disks, disk_orphans = _group(snapshot.disks, all_keys)
    snaps, snap_orphans = _group(snapshot.snapshots, all_keys)
    tools, tool_orphans = _group(snapshot.tools, all_keys)
    nets, net_orphans = _group(snapshot.networks, all_keys)
    orphans = disk_orphans + snap_orphans + tool_orphans + net_orphans
    if orphans:
        logger.debug("%d inventory record(s) reference no known VM", orphans)

    inventory = NormalizedInventory(
        vms=tuple(in_scope),
        excluded=excluded,
        orphan_record_count=orphans,
        _disks={k: tuple(sorted(v, key=lambda d: d.disk_key)) for k, v in disks.items()},
        _snapshots={k: tuple(v) for k, v in snaps.items()},
        _tools={k: v[0] for k, v in tools.items()},
        _networks={k: tuple(sorted(v, key=lambda n: n.device_order)) for k, v in nets.items()},
    )
    logger.info(
        "Normalised inventory: %d of %d VM(s) in scope, %d excluded as infrastructure",
        inventory.vm_count, len(snapshot.vms), len(excluded),
    )
    return inventory


# ---------------------------------------------------------------------------
# JSON loading
# ---------------------------------------------------------------------------

# Canonical field  ->  accepted keys (snake_case first, then RVTools-style names)
FIELD_ALIASES: dict[str, list[str]] = {
    "name":             ["name", "vm_name", "vmName", "VM"],
    "power_state":      ["power_state", "powerState", "Powerstate"],
    "vcpus":            ["vcpus", "cpus", "CPUs"],
    "memory_mib":       ["memory_mib", "memory", "Memory"],
    "provisioned_mib":  ["provisioned_mib", "provisionedMiB", "Provisioned MiB"],
    "in_use_mib":       ["in_use_mib", "inUseMiB", "In Use MiB"],
    "guest_os":         ["guest_os", "guestOS", "OS according to the configuration file"],
    "hardware_version": ["hardware_version", "hardwareVersion", "HW version"],
    "annotation":       ["annotation", "Annotation"],
    "cluster":          ["cluster", "Cluster"],
    "datacenter":       ["datacenter", "Datacenter"],
    "host":             ["host", "Host"],
    "template":         ["template", "Template"],
    "vm_name":          ["vm_name", "vmName", "VM"],
    "capacity_mib":     ["capacity_mib", "capacityMiB", "Capacity MiB"],
    "disk_key":         ["disk_key", "diskKey", "Disk Key"],
    "raw":              ["raw", "Raw"],
    "sharing_mode":     ["sharing_mode", "sharingMode", "Sharing mode"],
    "label":            ["label", "diskLabel", "Disk"],
    "age_in_days":      ["age_in_days", "ageInDays"],
    "size_total_mib":   ["size_total_mib", "sizeTotalMiB", "Size MiB (total)"],
    "snapshot_name":    ["name", "snapshotName", "Name"],
    "tools_status":     ["tools_status", "toolsStatus", "Tools"],
    "network_name":     ["network_name", "networkName", "Network"],
    "ipv4_address":     ["ipv4_address", "ipv4Address", "IPv4 Address"],
    "device_order":     ["device_order", "deviceOrder", "NIC key"],
    "adapter_type":     ["adapter_type", "adapterType", "Adapter"],
}


def _get(row: dict[str, Any], canonical: str, default: Any = None) -> Any:
    for alias in FIELD_ALIASES[canonical]:
        if alias in row and row[alias] is not None:
            return row[alias]
    return default


def _float(row: dict[str, Any], canonical: str) -> float:
    try:
        return float(_get(row, canonical, 0) or 0)
    except (TypeError, ValueError):
        return 0.0


def _int(row: dict[str, Any], canonical: str, default: int = 0) -> int:
    try:
        return int(float(_get(row, canonical, default) or 0))
    except (TypeError, ValueError):
        return default


def _bool(row: dict[str, Any], canonical: str) -> bool:
    value = _get(row, canonical, False)
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "1")
    return bool(value)


def _str(row: dict[str, Any], canonical: str) -> str:
    value = _get(row, canonical, "")
    return str(value).strip() if value is not None else ""


def _rows(data: dict[str, Any], section: str) -> list[dict[str, Any]]:
    """Rows of one sheet; a null section or a non-object row is skipped."""
    rows = data.get(section) or []
    if not isinstance(rows, list):
        logger.warning("Ignoring %s section of type %s", section, type(rows).__name__)
        return []
    skipped = sum(1 for r in rows if not isinstance(r, dict))
    if skipped:
        logger.warning("Skipped %d malformed %s row(s)", skipped, section)
    return [r for r in rows if isinstance(r, dict)]


def _power_state(value: str) -> PowerState:
    try:
        return PowerState(value)
    except ValueError:
        return PowerState.POWERED_OFF


def _tools_status(value: str) -> ToolsStatus:
    try:
        return ToolsStatus(value)
    except ValueError:
        return ToolsStatus.NOT_INSTALLED


def parse_inventory(data: dict[str, Any]) -> InventorySnapshot:
    """Build an :class:`InventorySnapshot` from a decoded JSON document.

    Malformed values fall back to worst-case defaults instead of failing:
    unknown power state -> poweredOff, unknown tools status -> not installed,
    non-numeric sizes -> 0.  Only a document that is not a JSON object fails.
    """
    if not isinstance(data, dict):
        raise InvalidInputError(f"inventory must be a JSON object, got {type(data).__name__}")

    vms = tuple(
        VirtualMachineRecord(
            name=_str(r, "name"),
            power_state=_power_state(_str(r, "power_state")),
            vcpus=_int(r, "vcpus"),
            memory_mib=_float(r, "memory_mib"),
            provisioned_mib=_float(r, "provisioned_mib"),
            in_use_mib=_float(r, "in_use_mib"),
            guest_os=_str(r, "guest_os"),
            hardware_version=_str(r, "hardware_version"),
            annotation=_str(r, "annotation"),
            cluster=_str(r, "cluster"),
            datacenter=_str(r, "datacenter"),
            host=_str(r, "host"),
            template=_bool(r, "template"),
        )
        for r in _rows(data, "vms")
    )
    disks = tuple(
        DiskRecord(
            vm_name=_str(r, "vm_name"),
            capacity_mib=_float(r, "capacity_mib"),
            disk_key=_int(r, "disk_key"),
            raw=_bool(r, "raw"),
            sharing_mode=_str(r, "sharing_mode") or "sharingNone",
            label=_str(r, "label"),
        )
        for r in _rows(data, "disks")
    )
    snapshots = tuple(
        SnapshotRecord(
            vm_name=_str(r, "vm_name"),
            age_in_days=_float(r, "age_in_days"),
            size_total_mib=_float(r, "size_total_mib"),
            name=_str(r, "snapshot_name"),
        )
        for r in _rows(data, "snapshots")
    )
    tools = tuple(
        ToolsStatusRecord(vm_name=_str(r, "vm_name"), tools_status=_tools_status(_str(r, "tools_status")))
        for r in _rows(data, "tools")
    )
    networks = tuple(
        NetworkAdapterRecord(
            vm_name=_str(r, "vm_name"),
            network_name=_str(r, "network_name"),
            ipv4_address=_str(r, "ipv4_address"),
            device_order=_int(r, "device_order", default=idx),
            adapter_type=_str(r, "adapter_type"),
        )
        for idx, r in enumerate(_rows(data, "networks"))
    )
    return InventorySnapshot(vms=vms, disks=disks, snapshots=snapshots, tools=tools, networks=networks)


def load_inventory(path: Path) -> InventorySnapshot:
    """Read an inventory snapshot from a JSON file."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    snapshot = parse_inventory(data)
    logger.info(
        "Loaded %s: %d VM(s), %d disk(s), %d snapshot(s), %d tools row(s), %d NIC(s)",
        path, len(snapshot.vms), len(snapshot.disks), len(snapshot.snapshots),
        len(snapshot.tools), len(snapshot.networks),
    )
    return snapshot
