from __future__ import annotations

import logging
from pathlib import Path
from typing import List

import typer
from rich.console import Console
from rich.logging import RichHandler

from kube_capacity_sim.core.config import (
    DEFAULT_MAX_CONFLICT_RETRIES,
    DEFAULT_STRATEGY,
    DeletePolicy,
    OvercommitPolicy,
    SimulationConfig,
)
from kube_capacity_sim.core.orchestrator import simulate as run_simulation
from kube_capacity_sim.output.render import render_csv, render_json, render_table


app = typer.Typer(add_completion=False, help="Kubernetes capacity simulator CLI")


@app.callback()
def main(
    log_level: str = typer.Option("WARNING", "--log-level", help="Logging level for stderr"),
):
    """Replay scheduled pods against simulated node capacity."""
    logging.basicConfig(
        level=log_level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


@app.command("simulate")
def simulate(
    files: List[Path] = typer.Argument(..., help="Node and Pod YAML manifest files"),
    strategy: str = typer.Option(
        DEFAULT_STRATEGY, "--strategy", help="Accounting strategy: predictive|counting"
    ),
    overcommit: OvercommitPolicy = typer.Option(
        OvercommitPolicy.CLAMP,
        "--overcommit",
        case_sensitive=False,
        help="What to do when a pod does not fit: clamp allocatable at zero, or fail the pod",
    ),
    delete_policy: DeletePolicy = typer.Option(
        DeletePolicy.UNBIND,
        "--delete-policy",
        case_sensitive=False,
        help="On delete, unbind the pod or remove it from the store",
    ),
    max_conflict_retries: int = typer.Option(
        DEFAULT_MAX_CONFLICT_RETRIES,
        "--max-conflict-retries",
        min=0,
        help="Retries of a node update after a version conflict",
    ),
    count_pod_slots: bool = typer.Option(
        False,
        "--count-pod-slots/--no-count-pod-slots",
        help="Charge one 'pods' slot per pod on top of its container requests",
    ),
    output: str = typer.Option(
        "table",
        "--output",
        case_sensitive=False,
        help="Output format: table|json|csv",
    ),
):
    """Charge every pod with a nodeName against its node and report capacity."""
    try:
        cfg = SimulationConfig(
            strategy=strategy,
            overcommit=overcommit,
            delete_policy=delete_policy,
            max_conflict_retries=max_conflict_retries,
            count_pod_slots=count_pod_slots,
        )
        report = run_simulation([str(p) for p in files], cfg)
    except Exception as exc:  # noqa: BLE001
        typer.echo(f"Fatal error: {exc}", err=True)
        raise typer.Exit(code=1)

    fmt = output.lower()
    if fmt == "table":
        render_table(report)
    elif fmt == "json":
        typer.echo(render_json(report))
    elif fmt == "csv":
        typer.echo(render_csv(report))
    else:
        typer.echo("Unknown output format. Use table|json|csv.", err=True)
        raise typer.Exit(code=2)

    raise typer.Exit(code=0)


if __name__ == "__main__":  # pragma: no cover
    app()
