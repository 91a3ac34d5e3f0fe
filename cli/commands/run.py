"""
Algorithm commands: list, run
"""

import json
from typing import List, Optional

import typer
from rich.table import Table

from algostep.algorithms import AlgorithmRegistry
from algostep.core import AlgostepError, DeterministicClock, dump_events, snapshot_hash
from algostep.player import PlaybackController

from .common import console, fail, parse_params, parse_values, snapshot_table


def list_command(
    category: Optional[str] = typer.Option(None, "--category", "-c", help="Only show this category"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    List built-in algorithms.

    Examples:
        algostep list
        algostep list --category searching
    """
    registry = AlgorithmRegistry.default()
    metas = registry.by_category(category) if category else registry.all()

    if json_output:
        print(json.dumps([m.model_dump(mode="json") for m in metas], indent=2))
        return

    table = Table(title="Algorithms")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Category", style="green")
    table.add_column("Difficulty")
    table.add_column("Average", style="yellow")
    table.add_column("Parameters", style="dim")

    for meta in metas:
        params = ", ".join(f"{p.id}={p.default}" for p in meta.parameters)
        table.add_row(meta.id, meta.name, meta.category, meta.difficulty, meta.time_complexity.average, params)

    console.print(table)


def run_command(
    algorithm_id: str = typer.Argument(..., help="Algorithm id (see `algostep list`)"),
    input_values: str = typer.Option(..., "--input", "-i", help="Comma separated numbers, e.g. 3,1,2"),
    param: Optional[List[str]] = typer.Option(None, "--param", "-p", help="Parameter as key=value (repeatable)"),
    step: Optional[int] = typer.Option(None, "--step", "-s", help="Show this step instead of the final one"),
    show_events: bool = typer.Option(False, "--events", help="Include the event list"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Run an algorithm and show one snapshot of its timeline.

    Examples:
        algostep run bubble-sort --input 3,1,2
        algostep run binary-search --input 1,3,5,7 --param target=5
        algostep run quick-sort --input 5,2,8,1 --step 4 --json
    """
    registry = AlgorithmRegistry.default()
    try:
        algorithm = registry.get(algorithm_id)
        values = parse_values(input_values)
        params = parse_params(algorithm, param)

        controller = PlaybackController(registry=registry, timer=DeterministicClock())
        controller.load_algorithm(algorithm_id, values, params)
        controller.seek(controller.get_total_steps() if step is None else step)
    except (AlgostepError, typer.BadParameter) as e:
        raise fail(str(e), json_output)

    snapshot = controller.current_snapshot
    total = controller.get_total_steps()

    if json_output:
        output = {
            "algorithm": algorithm_id,
            "input": values,
            "params": params,
            "total_steps": total,
            "snapshot": snapshot.to_dict(),
            "snapshot_hash": snapshot_hash(snapshot),
        }
        if show_events:
            output["events"] = dump_events(controller.events)
        print(json.dumps(output, indent=2))
        return

    console.print(f"[bold]{algorithm.name}[/bold] on {values}")
    console.print(snapshot_table(snapshot, total, algorithm.pseudocode_lines))
    console.print(f"  Snapshot hash: [yellow]{snapshot_hash(snapshot)[:16]}[/yellow]")

    if show_events:
        table = Table(title="Events")
        table.add_column("#", style="cyan", justify="right")
        table.add_column("Type", style="green")
        table.add_column("Detail", style="dim")
        for idx, event in enumerate(controller.events):
            detail = json.dumps(event.model_dump(mode="json", by_alias=True, exclude_none=True, exclude={"type"}))
            table.add_row(str(idx + 1), event.type, detail)
        console.print(table)
