"""Command line entry point - loads an inventory snapshot, runs the assessment
and prints the reports."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from rich.logging import RichHandler
from rich.panel import Panel

from .assessment import WaveMode, run_assessment
from .catalog import DEFAULT_EXCLUSION_RULES
from .config import Target, load_policy
from .inventory import load_inventory
from .models import InvalidInputError
from .visualization import (
    console,
    export_report_json,
    print_cluster_sizing,
    print_complexity_table,
    print_cost_summary,
    print_inventory_summary,
    print_profile_table,
    print_readiness_report,
    print_waves,
)
from .waves import GroupBy

logger = logging.getLogger("cloud_migrate_planner")


def _setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False, markup=True)],
    )


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="cmp-plan",
        description="Assess a VMware inventory snapshot for migration to VSI or a container platform.",
    )
    parser.add_argument("inventory", type=Path, help="Inventory snapshot JSON file.")
    parser.add_argument(
        "--target",
        choices=[t.value for t in Target],
        default=Target.VSI.value,
        help="Migration target (default: vsi).",
    )
    parser.add_argument(
        "--waves",
        choices=[m.value for m in WaveMode],
        default=WaveMode.COMPLEXITY.value,
        help="Wave planning strategy (default: complexity).",
    )
    parser.add_argument(
        "--group-by",
        choices=[g.value for g in GroupBy],
        default=GroupBy.PORT_GROUP.value,
        help="Grouping key for network waves (default: port-group).",
    )
    parser.add_argument(
        "--prefix-length",
        type=int,
        default=None,
        help="Port group prefix length for --group-by port-group-prefix (5-50).",
    )
    parser.add_argument(
        "--cidr",
        type=int,
        default=None,
        help="CIDR prefix length for --group-by ip-prefix (8-30).",
    )
    parser.add_argument(
        "--exclude-infra",
        action="store_true",
        help="Exclude infrastructure VMs (vCenter, NSX, HCX ...) from the assessment.",
    )
    parser.add_argument(
        "--export",
        type=str,
        default=None,
        help="Path to export the JSON report.",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose/debug logging.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    _setup_logging(args.verbose)

    console.print(Panel(
        "[bold blue]Cloud Migration Planner[/]\n"
        "Readiness, complexity, sizing and wave planning for VMware workloads",
        border_style="blue",
    ))

    try:
        policy = load_policy()
        snapshot = load_inventory(args.inventory)
        assessment = run_assessment(
            snapshot,
            target=Target(args.target),
            policy=policy,
            wave_mode=WaveMode(args.waves),
            group_by=GroupBy(args.group_by),
            prefix_length=args.prefix_length,
            cidr=args.cidr,
            exclusion_rules=DEFAULT_EXCLUSION_RULES if args.exclude_infra else (),
        )
    except (InvalidInputError, OSError, json.JSONDecodeError) as e:
        console.print(f"[bold red]Assessment failed:[/] {e}")
        logger.exception("Assessment error")
        return 1

    print_inventory_summary(assessment)
    if not assessment.inventory.vms:
        console.print("[yellow]No powered-on VMs in scope. Nothing to plan.[/]")
        return 0

    console.print()
    print_readiness_report(assessment)
    console.print()
    print_complexity_table(assessment)
    console.print()
    if assessment.target == Target.VSI:
        print_profile_table(assessment)
    else:
        print_cluster_sizing(assessment)
    console.print()
    print_waves(assessment)
    console.print()
    print_cost_summary(assessment)

    if args.export:
        try:
            export_report_json(assessment, Path(args.export))
        except OSError as e:
            console.print(f"[bold red]Export failed:[/] {e}")
            logger.exception("Export error")
            return 1

    console.print("\n[bold green]Done![/]")
    return 0


if __name__ == "__main__":
    sys.exit(main())
