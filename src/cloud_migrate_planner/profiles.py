"""VSI profile matching - picks the smallest instance profile of the right
family for each VM, with optional per-VM overrides."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from .catalog import VSI_PROFILES
from .inventory import NormalizedInventory
from .models import InstanceProfile, InvalidInputError, ProfileFamily
from .units import round_half_up

logger = logging.getLogger(__name__)

COMPUTE_RATIO_MAX = 2.5     # GiB per vCPU, inclusive
MEMORY_RATIO_MIN = 6.0      # GiB per vCPU, inclusive

_PREFIX_FAMILIES = {
    "bx2": ProfileFamily.BALANCED, "bx2d": ProfileFamily.BALANCED,
    "cx2": ProfileFamily.COMPUTE, "cx2d": ProfileFamily.COMPUTE,
    "mx2": ProfileFamily.MEMORY, "mx2d": ProfileFamily.MEMORY,
}

Catalog = Mapping[ProfileFamily, Sequence[InstanceProfile]]


def determine_profile_family(vcpus: int, memory_gib: float) -> ProfileFamily:
    """Pick the family from the memory-to-vCPU ratio."""
    if vcpus <= 0:
        raise InvalidInputError(f"vcpus must be positive, got {vcpus}")
    if memory_gib < 0:
        raise InvalidInputError(f"memory_gib must not be negative, got {memory_gib}")
    ratio = memory_gib / vcpus
    if ratio <= COMPUTE_RATIO_MAX:
        return ProfileFamily.COMPUTE
    if ratio >= MEMORY_RATIO_MIN:
        return ProfileFamily.MEMORY
    return ProfileFamily.BALANCED


def map_vm_to_profile(vcpus: int, memory_gib: float, catalog: Catalog = VSI_PROFILES) -> InstanceProfile:
    """First profile in the family that covers both vCPUs and memory.

    Falls back to the family's largest profile when nothing fits, so the
    result is never undefined; it is never taken from another family.
    """
    family = determine_profile_family(vcpus, memory_gib)
    profiles = catalog.get(family)
    if not profiles:
        raise InvalidInputError(f"catalog has no {family.value} profiles")
    for profile in profiles:
        if profile.vcpus >= vcpus and profile.memory_gib >= memory_gib:
            return profile
    logger.debug("No %s profile fits %d vCPU / %.1f GiB; using %s",
                 family.value, vcpus, memory_gib, profiles[-1].name)
    return profiles[-1]


def find_profile_by_name(name: str, catalog: Catalog = VSI_PROFILES) -> InstanceProfile | None:
    for family in (ProfileFamily.BALANCED, ProfileFamily.COMPUTE, ProfileFamily.MEMORY):
        for profile in catalog.get(family, ()):
            if profile.name == name:
                return profile
    return None


def profile_family_from_name(profile_name: str) -> ProfileFamily | None:
    """Family implied by the profile name prefix (``bx2-``, ``cx2d-`` ...)."""
    return _PREFIX_FAMILIES.get(profile_name.split("-")[0].split(".")[0])


# ---------------------------------------------------------------------------
# Bulk mapping
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CustomProfile:
    name: str
    vcpus: int
    memory_gib: float
    bandwidth_gbps: float = 16.0


@dataclass(frozen=True)
class VMProfileMapping:
    vm_name: str
    vcpus: int
    memory_gib: int
    auto_profile: InstanceProfile
    profile: InstanceProfile
    is_overridden: bool = False

    @property
    def effective_profile_name(self) -> str:
        return self.profile.name


def _resolve_override(
    name: str,
    custom_profiles: Sequence[CustomProfile],
    catalog: Catalog,
) -> InstanceProfile | None:
    for custom in custom_profiles:
        if custom.name == name:
            family = profile_family_from_name(name) or determine_profile_family(custom.vcpus, custom.memory_gib)
            return InstanceProfile(custom.name, family, custom.vcpus, custom.memory_gib, custom.bandwidth_gbps)
    return find_profile_by_name(name, catalog)


def create_profile_mappings(
    inventory: NormalizedInventory,
    overrides: Mapping[str, str] | None = None,
    custom_profiles: Sequence[CustomProfile] = (),
    catalog: Catalog = VSI_PROFILES,
) -> list[VMProfileMapping]:
    """Map every in-scope VM to a profile.

    *overrides* maps VM name to a profile name; custom profiles are checked
    before the standard catalog.  An override naming an unknown profile is
    ignored and the automatic choice is kept.  A VM with no vCPUs or negative
    memory is logged and left unmapped; a catalog missing the family still
    raises :class:`InvalidInputError`.
    """
    overrides = overrides or {}
    mappings: list[VMProfileMapping] = []
    for vm in inventory.vms:
        try:
            determine_profile_family(vm.vcpus, vm.memory_gib)
        except InvalidInputError as e:
            logger.warning("No VSI profile for %s: %s", vm.name, e)
            continue
        auto = map_vm_to_profile(vm.vcpus, vm.memory_gib, catalog)
        profile = auto
        overridden = False
        override_name = overrides.get(vm.name)
        if override_name:
            resolved = _resolve_override(override_name, custom_profiles, catalog)
            if resolved is None:
                logger.warning("Unknown profile %r for %s; keeping %s", override_name, vm.name, auto.name)
            else:
                profile = resolved
                overridden = True
        mappings.append(VMProfileMapping(
            vm_name=vm.name,
            vcpus=vm.vcpus,
            memory_gib=round_half_up(vm.memory_gib),
            auto_profile=auto,
            profile=profile,
            is_overridden=overridden,
        ))

    logger.info("Mapped %d VM(s) to VSI profiles (%d overridden)",
                len(mappings), sum(1 for m in mappings if m.is_overridden))
    return mappings


def count_by_profile(mappings: Sequence[VMProfileMapping]) -> dict[str, int]:
    counts: dict[str, int] = {}
    for m in mappings:
        counts[m.profile.name] = counts.get(m.profile.name, 0) + 1
    return counts


def count_by_family(mappings: Sequence[VMProfileMapping]) -> dict[str, int]:
    counts: dict[str, int] = {}
    for m in mappings:
        family = profile_family_from_name(m.profile.name) or m.profile.family
        counts[family.value] = counts.get(family.value, 0) + 1
    return counts


@dataclass(frozen=True)
class ProfileTotals:
    total_instances: int = 0
    unique_profiles: int = 0
    total_vcpus: int = 0
    total_memory_gib: float = 0.0
    overridden_count: int = 0


def calculate_profile_totals(mappings: Sequence[VMProfileMapping]) -> ProfileTotals:
    return ProfileTotals(
        total_instances=len(mappings),
        unique_profiles=len(count_by_profile(mappings)),
        total_vcpus=sum(m.profile.vcpus for m in mappings),
        total_memory_gib=sum(m.profile.memory_gib for m in mappings),
        overridden_count=sum(1 for m in mappings if m.is_overridden),
    )
