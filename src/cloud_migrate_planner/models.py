"""Data models for the on-premises inventory snapshot and the planning results
derived from it."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class InvalidInputError(ValueError):
    """Raised when a planning function receives input it cannot size against."""


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class PowerState(str, Enum):
    POWERED_ON = "poweredOn"
    POWERED_OFF = "poweredOff"
    SUSPENDED = "suspended"


class ToolsStatus(str, Enum):
    OK = "toolsOk"
    OLD = "toolsOld"
    NOT_INSTALLED = "toolsNotInstalled"
    NOT_RUNNING = "toolsNotRunning"
    GUEST_NOT_INSTALLED = "guestToolsNotInstalled"
    GUEST_NOT_RUNNING = "guestToolsNotRunning"

    @property
    def is_installed(self) -> bool:
        return self not in (ToolsStatus.NOT_INSTALLED, ToolsStatus.GUEST_NOT_INSTALLED)

    @property
    def is_running(self) -> bool:
        return self not in (ToolsStatus.NOT_RUNNING, ToolsStatus.GUEST_NOT_RUNNING)


class ProfileFamily(str, Enum):
    BALANCED = "balanced"
    COMPUTE = "compute"
    MEMORY = "memory"


class Severity(str, Enum):
    BLOCKER = "blocker"
    WARNING = "warning"


# ---------------------------------------------------------------------------
# Inventory records (one row per RVTools-style sheet entry)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class VirtualMachineRecord:
    name: str
    power_state: PowerState = PowerState.POWERED_OFF
    vcpus: int = 0
    memory_mib: float = 0.0
    provisioned_mib: float = 0.0
    in_use_mib: float = 0.0
    guest_os: str = ""
    hardware_version: str = ""     # e.g. "vmx-13"
    annotation: str = ""
    cluster: str = ""
    datacenter: str = ""
    host: str = ""
    template: bool = False

    @property
    def memory_gib(self) -> float:
        return self.memory_mib / 1024

    @property
    def provisioned_gib(self) -> float:
        return self.provisioned_mib / 1024

    @property
    def in_use_gib(self) -> float:
        return self.in_use_mib / 1024


@dataclass(frozen=True)
class DiskRecord:
    vm_name: str
    capacity_mib: float = 0.0
    disk_key: int = 0
    raw: bool = False              # RDM
    sharing_mode: str = "sharingNone"
    label: str = ""

    @property
    def capacity_gib(self) -> float:
        return self.capacity_mib / 1024

    @property
    def is_shared(self) -> bool:
        return (self.sharing_mode or "").strip().lower() not in ("", "none", "sharingnone")


@dataclass(frozen=True)
class SnapshotRecord:
    vm_name: str
    age_in_days: float = 0.0
    size_total_mib: float = 0.0
    name: str = ""


@dataclass(frozen=True)
class ToolsStatusRecord:
    vm_name: str
    tools_status: ToolsStatus = ToolsStatus.NOT_INSTALLED


@dataclass(frozen=True)
class NetworkAdapterRecord:
    vm_name: str
    network_name: str = ""         # port group
    ipv4_address: str = ""
    device_order: int = 0
    adapter_type: str = ""


@dataclass(frozen=True)
class InventorySnapshot:
    """The raw per-sheet arrays exactly as extracted from the source inventory."""
    vms: tuple[VirtualMachineRecord, ...] = ()
    disks: tuple[DiskRecord, ...] = ()
    snapshots: tuple[SnapshotRecord, ...] = ()
    tools: tuple[ToolsStatusRecord, ...] = ()
    networks: tuple[NetworkAdapterRecord, ...] = ()


# ---------------------------------------------------------------------------
# Cloud catalog entries
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class InstanceProfile:
    name: str
    family: ProfileFamily
    vcpus: int
    memory_gib: float
    bandwidth_gbps: float = 16.0


@dataclass(frozen=True)
class BareMetalProfile:
    name: str
    family: ProfileFamily
    vcpus: int                     # hardware threads
    memory_gib: float
    physical_cores: int = 0
    total_nvme_gib: float = 0.0


@dataclass(frozen=True)
class OSCompatibilityEntry:
    id: str
    display_name: str
    patterns: tuple[str, ...]
    status: str                    # supported | community | unsupported, or the
                                   # fully-supported | supported-with-caveats variants
    compatibility_score: int = 0   # 0-100
    notes: str = ""


# ---------------------------------------------------------------------------
# Planning results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ComplexityScore:
    vm_name: str
    score: int
    category: str                  # Simple | Moderate | Complex | Blocker
    factors: tuple[str, ...] = ()
    guest_os: str = ""
    vcpus: int = 0
    memory_gib: int = 0
    disk_count: int = 0
    nic_count: int = 0
    hardware_version: int | None = None


@dataclass(frozen=True)
class ReadinessResult:
    vm_name: str
    has_blocker: bool = False
    has_warning: bool = False
    issues: tuple[str, ...] = ()
    blocker_count: int = 0
    warning_count: int = 0


@dataclass(frozen=True)
class WaveAssignment:
    vm_name: str
    wave: str


@dataclass(frozen=True)
class ClusterSizing:
    """Aggregate sizing of a homogeneous bare-metal worker pool."""
    profile_name: str
    recommended_nodes: int
    nodes_for_cpu: int = 0
    nodes_for_memory: int = 0
    nodes_for_storage: int = 0
    adjusted_vcpus: int = 0
    required_raw_storage_gib: int = 0
    total_cores: int = 0
    total_threads: int = 0
    total_memory_gib: float = 0.0
    total_nvme_tib: float = 0.0
    usable_storage_tib: float = 0.0
    limiting_factor: str = ""      # cpu | memory | storage | minimum
    notes: tuple[str, ...] = ()


@dataclass(frozen=True)
class ExclusionRule:
    """Name/OS pattern rule that takes a VM out of migration scope."""
    id: str
    label: str
    patterns: tuple[str, ...]
    match: str = "contains"        # contains | startsWith | endsWith | exact | regex
    exclude_patterns: tuple[str, ...] = ()
    guest_os_patterns: tuple[str, ...] = ()
