"""
Exec command: run a user script in the sandbox
"""

import dataclasses
import json
from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from algostep.config import EngineConfig
from algostep.player import ScriptAnimator
from algostep.sandbox import SandboxEngine

from .common import console, fail, parse_values, render_array


def exec_command(
    script_path: Path = typer.Argument(..., help="Path to a Python script using the visualization hooks"),
    input_values: str = typer.Option(..., "--input", "-i", help="Comma separated numbers, e.g. 3,1,2"),
    timeout_ms: Optional[int] = typer.Option(None, "--timeout-ms", help="Override the execution budget in ms"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Execute a script against an input array.

    The script sees `arr`, `input_array`, `sleep` and the hooks compare,
    swap, set, mark, visit, highlight, message and log.

    Exit code is 1 when the script fails or times out.

    Examples:
        algostep exec sort.py --input 3,1,2
        algostep exec sort.py --input 3,1,2 --json
    """
    try:
        script = script_path.read_text()
        values = parse_values(input_values)
        config = EngineConfig.from_env()
        if timeout_ms is not None:
            config = dataclasses.replace(config, max_execution_ms=timeout_ms)
    except OSError as e:
        raise fail(f"Cannot read script {script_path}: {e.strerror or e}", json_output)
    except (typer.BadParameter, ValueError) as e:
        raise fail(str(e), json_output)

    result = SandboxEngine(config).execute_sync(script, values)

    if json_output:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        animator = ScriptAnimator(config=config)
        animator.load(values, result.events)
        replayed = render_array(animator.run_to_end())

        table = Table(show_header=False, box=None)
        status = "[green]success[/green]" if result.success else "[red]failed[/red]"
        table.add_row("[bold]Status[/bold]", status)
        table.add_row("[bold]Events[/bold]", str(len(result.events)))
        table.add_row("[bold]Time[/bold]", f"{result.execution_time:.1f} ms")
        table.add_row("[bold]Final array[/bold]", str(result.final_array))
        table.add_row("[bold]Replayed[/bold]", replayed)
        console.print(table)

        for line in result.logs:
            console.print(f"  [dim]log:[/dim] {line}")
        if result.error is not None:
            where = f" (line {result.error.line})" if result.error.line is not None else ""
            console.print(f"[red]Error{where}:[/red] {result.error.message}")

    if not result.success:
        raise typer.Exit(1)
