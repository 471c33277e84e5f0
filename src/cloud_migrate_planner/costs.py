"""Monthly cost roll-ups from static price tables."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from .catalog import BARE_METAL_MONTHLY_RATES, VSI_MONTHLY_RATES
from .config import DEFAULT_POLICY, StoragePricingPolicy
from .inventory import NormalizedInventory, join_key
from .models import ClusterSizing
from .profiles import VMProfileMapping

logger = logging.getLogger(__name__)

MIN_BOOT_GIB = 10
BOOT_SHARE_OF_STORAGE = 0.2

# Data volume tier mix: general purpose / 5 IOPS per GB / 10 IOPS per GB
DATA_TIER_MIX = (0.5, 0.3, 0.2)


def aggregate_profile_costs(profile_counts: Mapping[str, int], price_table: Mapping[str, float]) -> float:
    """Sum of monthly rate x count; profiles missing from the table price at 0."""
    total = 0.0
    for name, count in profile_counts.items():
        rate = price_table.get(name)
        if rate is None:
            logger.debug("No monthly rate for %s; pricing at 0", name)
            continue
        total += rate * count
    return total


def split_vsi_storage(total_gib: float, pricing: StoragePricingPolicy = DEFAULT_POLICY.storage) -> tuple[float, float]:
    """Split a VM's storage into (boot, data) volume sizes in GiB."""
    boot = min(pricing.boot_volume_gib, max(MIN_BOOT_GIB, BOOT_SHARE_OF_STORAGE * total_gib))
    return boot, max(0.0, total_gib - boot)


def data_storage_rate(pricing: StoragePricingPolicy = DEFAULT_POLICY.storage) -> float:
    gp, tier5, tier10 = DATA_TIER_MIX
    return (gp * pricing.general_purpose_cost_per_gib
            + tier5 * pricing.tier_5iops_cost_per_gib
            + tier10 * pricing.tier_10iops_cost_per_gib)


@dataclass(frozen=True)
class VSICostLine:
    vm_name: str
    profile: str
    storage_gib: float
    boot_gib: float
    data_gib: float
    compute_cost: float
    boot_storage_cost: float
    data_storage_cost: float

    @property
    def total_cost(self) -> float:
        return self.compute_cost + self.boot_storage_cost + self.data_storage_cost


@dataclass(frozen=True)
class CostBreakdown:
    """Monthly costs in USD."""
    compute: float = 0.0
    boot_storage: float = 0.0
    data_storage: float = 0.0
    lines: tuple[VSICostLine, ...] = field(default=(), repr=False)

    @property
    def storage(self) -> float:
        return self.boot_storage + self.data_storage

    @property
    def total(self) -> float:
        return self.compute + self.storage


def estimate_vsi_costs(
    inventory: NormalizedInventory,
    mappings: Sequence[VMProfileMapping],
    price_table: Mapping[str, float] = VSI_MONTHLY_RATES,
    pricing: StoragePricingPolicy = DEFAULT_POLICY.storage,
) -> CostBreakdown:
    """Per-VM compute, boot and data volume costs plus the totals."""
    by_vm = {join_key(m.vm_name): m for m in mappings}
    data_rate = data_storage_rate(pricing)
    lines: list[VSICostLine] = []
    for vm in inventory.vms:
        mapping = by_vm.get(join_key(vm.name))
        if mapping is None:
            continue
        storage = vm.in_use_gib or vm.provisioned_gib
        boot, data = split_vsi_storage(storage, pricing)
        lines.append(VSICostLine(
            vm_name=vm.name,
            profile=mapping.profile.name,
            storage_gib=storage,
            boot_gib=boot,
            data_gib=data,
            compute_cost=price_table.get(mapping.profile.name, 0.0),
            boot_storage_cost=boot * pricing.boot_cost_per_gib,
            data_storage_cost=data * data_rate,
        ))

    breakdown = CostBreakdown(
        compute=sum(line.compute_cost for line in lines),
        boot_storage=sum(line.boot_storage_cost for line in lines),
        data_storage=sum(line.data_storage_cost for line in lines),
        lines=tuple(lines),
    )
    logger.info("Estimated VSI costs for %d VM(s): $%.2f/month", len(lines), breakdown.total)
    return breakdown


def estimate_cluster_cost(
    sizing: ClusterSizing,
    price_table: Mapping[str, float] = BARE_METAL_MONTHLY_RATES,
) -> CostBreakdown:
    compute = aggregate_profile_costs({sizing.profile_name: sizing.recommended_nodes}, price_table)
    logger.info("Estimated cluster cost: %d x %s = $%.2f/month",
                sizing.recommended_nodes, sizing.profile_name, compute)
    return CostBreakdown(compute=compute)
