"""Static reference data - instance profile catalogs, OS compatibility tables,
monthly price tables and infrastructure exclusion rules.

Everything here is plain input data.  Callers that refresh catalogs or prices
from an external source pass their own tables to the planning functions.
"""

from __future__ import annotations

from .models import BareMetalProfile, ExclusionRule, InstanceProfile, OSCompatibilityEntry, ProfileFamily

_B, _C, _M = ProfileFamily.BALANCED, ProfileFamily.COMPUTE, ProfileFamily.MEMORY


# ---------------------------------------------------------------------------
# VSI profile catalog (ascending within each family)
# ---------------------------------------------------------------------------

VSI_PROFILES: dict[ProfileFamily, tuple[InstanceProfile, ...]] = {
    # Balanced (bx2) - 1:4 ratio
    _B: (
        InstanceProfile("bx2-2x8",     _B,   2,    8,  4),
        InstanceProfile("bx2-4x16",    _B,   4,   16,  8),
        InstanceProfile("bx2-8x32",    _B,   8,   32, 16),
        InstanceProfile("bx2-16x64",   _B,  16,   64, 32),
        InstanceProfile("bx2-32x128",  _B,  32,  128, 64),
        InstanceProfile("bx2-48x192",  _B,  48,  192, 80),
        InstanceProfile("bx2-64x256",  _B,  64,  256, 80),
        InstanceProfile("bx2-96x384",  _B,  96,  384, 80),
        InstanceProfile("bx2-128x512", _B, 128,  512, 80),
    ),
    # Compute (cx2) - 1:2 ratio
    _C: (
        InstanceProfile("cx2-2x4",     _C,   2,    4,  4),
        InstanceProfile("cx2-4x8",     _C,   4,    8,  8),
        InstanceProfile("cx2-8x16",    _C,   8,   16, 16),
        InstanceProfile("cx2-16x32",   _C,  16,   32, 32),
        InstanceProfile("cx2-32x64",   _C,  32,   64, 64),
        InstanceProfile("cx2-48x96",   _C,  48,   96, 80),
        InstanceProfile("cx2-64x128",  _C,  64,  128, 80),
        InstanceProfile("cx2-96x192",  _C,  96,  192, 80),
        InstanceProfile("cx2-128x256", _C, 128,  256, 80),
    ),
    # Memory (mx2) - 1:8 ratio
    _M: (
        InstanceProfile("mx2-2x16",     _M,   2,   16,  4),
        InstanceProfile("mx2-4x32",     _M,   4,   32,  8),
        InstanceProfile("mx2-8x64",     _M,   8,   64, 16),
        InstanceProfile("mx2-16x128",   _M,  16,  128, 32),
        InstanceProfile("mx2-32x256",   _M,  32,  256, 64),
        InstanceProfile("mx2-48x384",   _M,  48,  384, 80),
        InstanceProfile("mx2-64x512",   _M,  64,  512, 80),
        InstanceProfile("mx2-96x768",   _M,  96,  768, 80),
        InstanceProfile("mx2-128x1024", _M, 128, 1024, 80),
    ),
}


# ---------------------------------------------------------------------------
# Bare-metal worker node catalog
# ---------------------------------------------------------------------------

BARE_METAL_PROFILES: dict[ProfileFamily, tuple[BareMetalProfile, ...]] = {
    _B: (
        BareMetalProfile("bx2.metal.96x384",  _B, 96, 384, 48, 0),
        BareMetalProfile("bx2d.metal.96x384", _B, 96, 384, 48, 23840),
    ),
    _C: (
        BareMetalProfile("cx2.metal.96x192",  _C, 96, 192, 48, 0),
        BareMetalProfile("cx2d.metal.96x192", _C, 96, 192, 48, 23840),
    ),
    _M: (
        BareMetalProfile("mx2.metal.96x768",  _M, 96, 768, 48, 0),
        BareMetalProfile("mx2d.metal.96x768", _M, 96, 768, 48, 23840),
    ),
}


# ---------------------------------------------------------------------------
# Monthly price tables (USD, list price)
# ---------------------------------------------------------------------------

VSI_MONTHLY_RATES: dict[str, float] = {
    "bx2-2x8": 70.08, "bx2-4x16": 140.16, "bx2-8x32": 280.32,
    "bx2-16x64": 560.64, "bx2-32x128": 1121.28, "bx2-48x192": 1681.92,
    "bx2-64x256": 2242.56, "bx2-96x384": 3363.84, "bx2-128x512": 4485.12,
    "cx2-2x4": 60.59, "cx2-4x8": 121.18, "cx2-8x16": 242.36,
    "cx2-16x32": 484.72, "cx2-32x64": 969.44, "cx2-48x96": 1454.16,
    "cx2-64x128": 1938.88, "cx2-96x192": 2908.32, "cx2-128x256": 3877.76,
    "mx2-2x16": 91.98, "mx2-4x32": 183.96, "mx2-8x64": 367.92,
    "mx2-16x128": 735.84, "mx2-32x256": 1471.68, "mx2-48x384": 2207.52,
    "mx2-64x512": 2943.36, "mx2-96x768": 4415.04, "mx2-128x1024": 5886.72,
}

BARE_METAL_MONTHLY_RATES: dict[str, float] = {
    "bx2.metal.96x384": 4700.00,
    "bx2d.metal.96x384": 5100.00,
    "cx2.metal.96x192": 3950.00,
    "cx2d.metal.96x192": 4350.00,
    "mx2.metal.96x768": 5800.00,
    "mx2d.metal.96x768": 6200.00,
}


# ---------------------------------------------------------------------------
# OS compatibility tables (first matching entry wins, so order matters)
# ---------------------------------------------------------------------------

VSI_OS_COMPATIBILITY: tuple[OSCompatibilityEntry, ...] = (
    OSCompatibilityEntry("rhel", "Red Hat Enterprise Linux", ("red hat enterprise linux", "rhel"),
                         "supported", 100, "RHEL 7.x, 8.x, 9.x supported"),
    OSCompatibilityEntry("centos", "CentOS", ("centos",),
                         "community", 70, "CentOS 7.x, 8.x - community supported"),
    OSCompatibilityEntry("ubuntu", "Ubuntu", ("ubuntu",),
                         "supported", 100, "Ubuntu 18.04, 20.04, 22.04 supported"),
    OSCompatibilityEntry("debian", "Debian", ("debian",),
                         "community", 70, "Debian 10, 11 - community supported"),
    OSCompatibilityEntry("windows-2016", "Windows Server 2016", ("windows server 2016", "windows 2016"),
                         "supported", 100, "Windows Server 2016 supported"),
    OSCompatibilityEntry("windows-2019", "Windows Server 2019", ("windows server 2019", "windows 2019"),
                         "supported", 100, "Windows Server 2019 supported"),
    OSCompatibilityEntry("windows-2022", "Windows Server 2022", ("windows server 2022", "windows 2022"),
                         "supported", 100, "Windows Server 2022 supported"),
    OSCompatibilityEntry("sles", "SUSE Linux Enterprise Server", ("suse linux enterprise", "sles"),
                         "supported", 100, "SUSE Linux Enterprise Server supported"),
    OSCompatibilityEntry("rocky", "Rocky Linux", ("rocky",),
                         "community", 70, "Rocky Linux - community supported"),
    OSCompatibilityEntry("alma", "AlmaLinux", ("alma",),
                         "community", 70, "AlmaLinux - community supported"),
)

VSI_OS_DEFAULT = OSCompatibilityEntry(
    "unknown", "Unknown / Other", (), "unsupported", 0, "Not validated for VPC virtual server instances")

CONTAINER_PLATFORM_OS_COMPATIBILITY: tuple[OSCompatibilityEntry, ...] = (
    OSCompatibilityEntry("rhel9", "RHEL 9", ("red hat enterprise linux 9", "rhel 9", "rhel9"),
                         "fully-supported", 100, "Certified guest"),
    OSCompatibilityEntry("rhel8", "RHEL 8", ("red hat enterprise linux 8", "rhel 8", "rhel8"),
                         "fully-supported", 100, "Certified guest"),
    OSCompatibilityEntry("rhel7", "RHEL 7", ("red hat enterprise linux 7", "rhel 7", "rhel7"),
                         "supported-with-caveats", 80, "Extended life cycle support only"),
    OSCompatibilityEntry("rhel6", "RHEL 6", ("red hat enterprise linux 6", "rhel 6", "rhel6"),
                         "unsupported", 20, "End of life - upgrade before migration"),
    OSCompatibilityEntry("rhel", "RHEL (other)", ("red hat enterprise linux", "rhel"),
                         "supported-with-caveats", 70, "Version could not be determined"),
    OSCompatibilityEntry("windows-2022", "Windows Server 2022", ("windows server 2022",),
                         "fully-supported", 100, "Certified guest with VirtIO drivers"),
    OSCompatibilityEntry("windows-2019", "Windows Server 2019", ("windows server 2019",),
                         "fully-supported", 100, "Certified guest with VirtIO drivers"),
    OSCompatibilityEntry("windows-2016", "Windows Server 2016", ("windows server 2016",),
                         "fully-supported", 100, "Certified guest with VirtIO drivers"),
    OSCompatibilityEntry("windows-2012", "Windows Server 2012", ("windows server 2012",),
                         "supported-with-caveats", 60, "Out of mainstream support"),
    OSCompatibilityEntry("windows-legacy", "Windows Server 2008 / 2003",
                         ("windows server 2008", "windows server 2003"),
                         "unsupported", 10, "End of life - no VirtIO driver support"),
    OSCompatibilityEntry("windows-desktop", "Windows 10 / 11", ("windows 10", "windows 11"),
                         "supported-with-caveats", 80, "Desktop guests need licensing review"),
    OSCompatibilityEntry("sles", "SUSE Linux Enterprise", ("suse linux enterprise", "sles"),
                         "supported-with-caveats", 80, "Vendor-supported, not certified"),
    OSCompatibilityEntry("ubuntu", "Ubuntu", ("ubuntu",),
                         "supported-with-caveats", 75, "Community-validated"),
    OSCompatibilityEntry("centos", "CentOS", ("centos",),
                         "supported-with-caveats", 60, "CentOS Linux is end of life"),
    OSCompatibilityEntry("debian", "Debian", ("debian",),
                         "supported-with-caveats", 70, "Community-validated"),
    OSCompatibilityEntry("rocky-alma", "Rocky Linux / AlmaLinux", ("rocky", "alma"),
                         "supported-with-caveats", 80, "RHEL-compatible rebuild"),
)

CONTAINER_PLATFORM_OS_DEFAULT = OSCompatibilityEntry(
    "unknown", "Unknown / Other", (), "unsupported", 0, "Not a validated guest operating system")


# ---------------------------------------------------------------------------
# Infrastructure VMs that never migrate (appliances managed by the platform)
# ---------------------------------------------------------------------------

DEFAULT_EXCLUSION_RULES: tuple[ExclusionRule, ...] = (
    ExclusionRule("vcenter", "VMware Infrastructure", ("vcenter", "vcsa"), match="contains"),
    ExclusionRule("nsx", "VMware Infrastructure", ("nsx-manager", "nsx-edge", "nsxt-"), match="startsWith"),
    ExclusionRule("vrops", "VMware Infrastructure", (r"^vr(ops|li|a)[-_]",), match="regex"),
    ExclusionRule("hcx", "VMware Infrastructure", ("hcx",), match="contains",
                  exclude_patterns=("hcx-test",)),
    ExclusionRule("photon-appliance", "VMware Infrastructure", (), guest_os_patterns=("vmware photon",)),
)
