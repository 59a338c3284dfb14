from __future__ import annotations

import csv
import io
import json

from rich.console import Console
from rich.table import Table

from kube_capacity_sim.calculators.vector import ZERO
from kube_capacity_sim.models.results import SimulationReport
from kube_capacity_sim.utils.units import format_quantity


def render_table(report: SimulationReport) -> None:
    console = Console()

    table = Table(title=f"Node Capacity ({report.strategy} strategy)")
    table.add_column("Node")
    table.add_column("Resource")
    table.add_column("Capacity", justify="right")
    table.add_column("Allocatable", justify="right")
    table.add_column("Requested", justify="right")
    table.add_column("Pods", justify="right")

    for n in report.nodes:
        for i, res in enumerate(n.resource_names):
            table.add_row(
                n.name if i == 0 else "",
                res,
                format_quantity(res, n.capacity.get(res, ZERO)),
                format_quantity(res, n.allocatable.get(res, ZERO)),
                format_quantity(res, n.requested.get(res, ZERO)),
                str(len(n.bound_pods)) if i == 0 else "",
            )

    console.print(table)

    if report.operations:
        op_table = Table(title="Accounted Pods")
        op_table.add_column("Pod")
        op_table.add_column("Node")
        op_table.add_column("Request")
        op_table.add_column("Clamped")
        for op in report.operations:
            op_table.add_row(
                op.pod,
                op.node,
                ", ".join(f"{k}={format_quantity(k, v)}" for k, v in sorted(op.request.items())),
                ", ".join(sorted(op.shortfall)) if op.clamped else "",
            )
        console.print(op_table)

    if report.pending_pods:
        console.print(f"Pending (no nodeName): {', '.join(report.pending_pods)}")
    for a in report.assumptions:
        console.print(f"[dim]assumption:[/dim] {a}")
    for w in report.warnings:
        console.print(f"[yellow]warning:[/yellow] {w}")


def render_json(report: SimulationReport) -> str:
    data = report.model_dump(mode="json")
    return json.dumps(data, indent=2, sort_keys=True)


def render_csv(report: SimulationReport) -> str:
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(["Node", "Resource", "Capacity", "Allocatable", "Requested", "Bound pods"])
    for n in report.nodes:
        for res in n.resource_names:
            writer.writerow(
                [
                    n.name,
                    res,
                    format_quantity(res, n.capacity.get(res, ZERO)),
                    format_quantity(res, n.allocatable.get(res, ZERO)),
                    format_quantity(res, n.requested.get(res, ZERO)),
                    len(n.bound_pods),
                ]
            )
    return output.getvalue()
