"""Rich console reporting and JSON export for a migration assessment."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

from .assessment import MigrationAssessment
from .complexity import BLOCKER, CATEGORY_LABELS, COMPLEX, MODERATE, SIMPLE, get_top_complex_vms
from .config import Target
from .models import Severity
from .profiles import calculate_profile_totals, count_by_family
from .readiness import CHECK_DEFINITIONS

logger = logging.getLogger(__name__)
console = Console()

_CATEGORY_STYLES = {SIMPLE: "green", MODERATE: "yellow", COMPLEX: "dark_orange", BLOCKER: "red"}


def _score_style(score: int) -> str:
    if score >= 80:
        return f"[green]{score}[/]"
    if score >= 50:
        return f"[yellow]{score}[/]"
    return f"[red]{score}[/]"


# ---------------------------------------------------------------------------
# Summary banner
# ---------------------------------------------------------------------------

def print_inventory_summary(assessment: MigrationAssessment) -> None:
    """Print a high-level summary of the in-scope population."""
    inv = assessment.inventory
    total_vcpus = sum(vm.vcpus for vm in inv.vms)
    total_memory_gib = sum(vm.memory_gib for vm in inv.vms)
    total_storage_tib = sum(vm.provisioned_gib for vm in inv.vms) / 1024
    clusters = {vm.cluster for vm in inv.vms if vm.cluster}

    summary = (
        f"[bold cyan]Target:[/] {assessment.target.value}\n"
        f"[bold]VMs in scope:[/] {inv.vm_count}    "
        f"[bold]Excluded:[/] {len(inv.excluded)}    "
        f"[bold]Clusters:[/] {len(clusters)}\n"
        f"\n"
        f"[bold]Total vCPUs:[/] {total_vcpus}    "
        f"[bold]Total Memory:[/] {total_memory_gib:,.0f} GiB    "
        f"[bold]Provisioned Storage:[/] {total_storage_tib:,.1f} TiB"
    )
    if inv.orphan_record_count:
        summary += f"\n[dim]{inv.orphan_record_count} record(s) reference no known VM[/]"
    console.print(Panel(summary, title="[bold green]Inventory Summary", border_style="green"))

    if inv.excluded:
        tree = Tree("[bold magenta]Excluded infrastructure VMs")
        for name, result in sorted(inv.excluded.items()):
            tree.add(f"[white]{name}  [dim]({', '.join(result.labels)})")
        console.print(tree)


# ---------------------------------------------------------------------------
# Readiness
# ---------------------------------------------------------------------------

def print_readiness_report(assessment: MigrationAssessment) -> None:
    """Print the readiness score, the issue totals and the VMs that have issues."""
    r = assessment.readiness
    console.print(Panel(
        f"[bold]Readiness score:[/] {_score_style(r.readiness_score)} / 100\n"
        f"[bold]Blockers:[/] [red]{r.blocker_count}[/] ({r.vms_with_blockers} VM(s))    "
        f"[bold]Warnings:[/] [yellow]{r.warning_count}[/] ({r.vms_with_warnings} VM(s))    "
        f"[bold]Ready:[/] [green]{r.ready_vms}[/]",
        title="Migration Readiness",
        border_style="blue",
    ))

    if r.issue_counts:
        totals = Table(title="Readiness Checks")
        totals.add_column("Check", style="bold")
        totals.add_column("Severity", justify="center")
        totals.add_column("VMs", justify="right")
        for issue, count in sorted(r.issue_counts.items(), key=lambda kv: -kv[1]):
            check = CHECK_DEFINITIONS[issue]
            sev = "[red]blocker[/]" if check.severity == Severity.BLOCKER else "[yellow]warning[/]"
            totals.add_row(check.name, sev, str(count))
        console.print(totals)

    flagged = [res for res in r.results if res.issues]
    if not flagged:
        console.print("[bold green]✓ No readiness issues detected.[/]\n")
        return

    table = Table(title="Migration Issues & Blockers", show_lines=True)
    table.add_column("VM Name", style="bold")
    table.add_column("Status")
    table.add_column("Issues", style="yellow")
    for res in flagged:
        status = "[red]Blocked[/]" if res.has_blocker else "[yellow]Warning[/]"
        table.add_row(
            res.vm_name,
            status,
            "\n".join(f"• {CHECK_DEFINITIONS[i].name}" for i in res.issues),
        )
    console.print(table)


# ---------------------------------------------------------------------------
# Complexity
# ---------------------------------------------------------------------------

def print_complexity_table(assessment: MigrationAssessment, top: int = 15) -> None:
    s = assessment.complexity_summary
    console.print(
        f"[bold]Complexity:[/] average {s.average_score}    "
        + "    ".join(
            f"[{_CATEGORY_STYLES[c]}]{CATEGORY_LABELS[c]}: {n}[/]"
            for c, n in ((SIMPLE, s.simple_count), (MODERATE, s.moderate_count),
                         (COMPLEX, s.complex_count), (BLOCKER, s.blocker_count))
        )
    )

    table = Table(title=f"Most Complex VMs (top {top})", show_lines=True)
    table.add_column("VM Name", style="bold", max_width=25)
    table.add_column("Score", justify="right")
    table.add_column("Category", justify="center")
    table.add_column("OS", max_width=30)
    table.add_column("vCPUs", justify="right")
    table.add_column("RAM (GiB)", justify="right")
    table.add_column("Factors", max_width=45)
    for cs in get_top_complex_vms(assessment.complexity, top):
        style = _CATEGORY_STYLES.get(cs.category, "white")
        table.add_row(
            cs.vm_name, str(cs.score), f"[{style}]{cs.category}[/]", cs.guest_os[:30],
            str(cs.vcpus), str(cs.memory_gib), "\n".join(cs.factors) or "—",
        )
    console.print(table)


# ---------------------------------------------------------------------------
# Sizing
# ---------------------------------------------------------------------------

def print_profile_table(assessment: MigrationAssessment) -> None:
    """Print the VSI profile chosen for each VM."""
    mappings = assessment.profile_mappings
    if assessment.unmapped_vms:
        console.print(f"[yellow]No VSI profile for: {', '.join(assessment.unmapped_vms)}[/]")
    if not mappings:
        return
    table = Table(title="VSI Profile Mapping", show_lines=False)
    table.add_column("VM Name", style="bold", max_width=25)
    table.add_column("Source", justify="right")
    table.add_column("Profile", style="cyan")
    table.add_column("Family")
    table.add_column("Override", justify="center")
    for m in sorted(mappings, key=lambda m: m.vm_name):
        table.add_row(
            m.vm_name,
            f"{m.vcpus} vCPU / {m.memory_gib} GiB",
            m.profile.name,
            m.profile.family.value,
            "[yellow]✓[/]" if m.is_overridden else "",
        )
    console.print(table)

    totals = calculate_profile_totals(mappings)
    families = ", ".join(f"{k}: {v}" for k, v in sorted(count_by_family(mappings).items()))
    console.print(
        f"[bold]Instances:[/] {totals.total_instances}    "
        f"[bold]Profiles used:[/] {totals.unique_profiles}    "
        f"[bold]vCPUs:[/] {totals.total_vcpus}    "
        f"[bold]Memory:[/] {totals.total_memory_gib:,.0f} GiB    "
        f"[dim]({families})[/]"
    )


def print_cluster_sizing(assessment: MigrationAssessment) -> None:
    sizing = assessment.cluster_sizing
    if sizing is None:
        return
    body = (
        f"[bold]Worker nodes:[/] {sizing.recommended_nodes} x [cyan]{sizing.profile_name}[/]"
        f"  [dim]({sizing.limiting_factor} bound)[/]\n"
        f"[bold]Nodes needed for CPU / memory / storage:[/] "
        f"{sizing.nodes_for_cpu} / {sizing.nodes_for_memory} / {sizing.nodes_for_storage}\n"
        f"[bold]Capacity:[/] {sizing.total_cores} cores, {sizing.total_threads} threads, "
        f"{sizing.total_memory_gib:,.0f} GiB memory, {sizing.total_nvme_tib:,.1f} TiB NVMe\n"
        f"[bold]Usable replicated storage:[/] {sizing.usable_storage_tib:,.1f} TiB "
        f"(needs {sizing.required_raw_storage_gib:,} GiB raw)"
    )
    for note in sizing.notes:
        body += f"\n[yellow]{note}[/]"
    console.print(Panel(body, title="Cluster Sizing", border_style="cyan"))


# ---------------------------------------------------------------------------
# Waves
# ---------------------------------------------------------------------------

def print_waves(assessment: MigrationAssessment) -> None:
    title = "Migration Waves"
    if assessment.group_by is not None:
        title += f" (by {assessment.group_by.value})"
    table = Table(title=title, show_lines=True)
    table.add_column("Wave", style="bold", max_width=30)
    table.add_column("VMs", justify="right")
    table.add_column("vCPUs", justify="right")
    table.add_column("RAM (GiB)", justify="right")
    table.add_column("Storage (GiB)", justify="right")
    table.add_column("Avg Cx", justify="right")
    table.add_column("Blockers", justify="center")
    table.add_column("Description", max_width=45)
    for wave in assessment.waves:
        table.add_row(
            wave.name, str(wave.vm_count), str(wave.vcpus), f"{wave.memory_gib:,}",
            f"{wave.storage_gib:,}", f"{wave.avg_complexity:.0f}",
            "[red]yes[/]" if wave.has_blockers else "[green]no[/]",
            wave.description,
        )
    console.print(table)


# ---------------------------------------------------------------------------
# Costs
# ---------------------------------------------------------------------------

def print_cost_summary(assessment: MigrationAssessment) -> None:
    costs = assessment.costs
    if assessment.target == Target.VSI:
        body = (
            f"[bold]Compute:[/] ${costs.compute:,.2f}    "
            f"[bold]Boot volumes:[/] ${costs.boot_storage:,.2f}    "
            f"[bold]Data volumes:[/] ${costs.data_storage:,.2f}\n"
        )
    else:
        body = f"[bold]Bare-metal workers:[/] ${costs.compute:,.2f}\n"
    body += (
        f"[bold green]Estimated total monthly cost: ${costs.total:,.2f}[/]\n"
        f"[dim]Estimated annual cost: ${costs.total * 12:,.2f}[/]"
    )
    console.print(Panel(body, title="Cost Summary", border_style="green"))


# ---------------------------------------------------------------------------
# Export to JSON
# ---------------------------------------------------------------------------

def export_report_json(assessment: MigrationAssessment, output_path: Path) -> None:
    """Export the full assessment to a JSON file."""
    inv = assessment.inventory
    r = assessment.readiness
    report = {
        "target": assessment.target.value,
        "summary": {
            "vms_in_scope": inv.vm_count,
            "excluded": {name: list(res.labels) for name, res in inv.excluded.items()},
            "orphan_records": inv.orphan_record_count,
        },
        "readiness": {
            "score": r.readiness_score,
            "blocker_count": r.blocker_count,
            "warning_count": r.warning_count,
            "unsupported_os_count": r.unsupported_os_count,
            "issue_counts": r.issue_counts,
            "vms_by_issue": {k: list(v) for k, v in r.vms_by_issue.items()},
            "results": [asdict(res) for res in r.results],
        },
        "complexity": {
            "summary": asdict(assessment.complexity_summary),
            "scores": [asdict(cs) for cs in assessment.complexity],
        },
        "profiles": [
            {
                "vm_name": m.vm_name,
                "auto_profile": m.auto_profile.name,
                "profile": m.profile.name,
                "is_overridden": m.is_overridden,
            }
            for m in assessment.profile_mappings
        ],
        "unmapped_vms": list(assessment.unmapped_vms),
        "cluster_sizing": asdict(assessment.cluster_sizing) if assessment.cluster_sizing else None,
        "waves": [
            {
                "name": w.name,
                "description": w.description,
                "vm_count": w.vm_count,
                "vcpus": w.vcpus,
                "memory_gib": w.memory_gib,
                "storage_gib": w.storage_gib,
                "avg_complexity": round(w.avg_complexity, 1),
                "has_blockers": w.has_blockers,
                "vms": [vm.vm_name for vm in w.vms],
            }
            for w in assessment.waves
        ],
        "costs": {
            "compute": round(assessment.costs.compute, 2),
            "storage": round(assessment.costs.storage, 2),
            "total_monthly_usd": round(assessment.costs.total, 2),
            "lines": [asdict(line) for line in assessment.costs.lines],
        },
        "notes": list(assessment.notes),
    }

    output_path.write_text(json.dumps(report, indent=2, default=str), encoding="utf-8")
    logger.info("Report exported to %s", output_path)
    console.print(f"\n[bold]Report exported to:[/] {output_path}")
