"""
Shared helpers for CLI commands: input parsing and snapshot rendering
"""

import json
from typing import Dict, List, Optional, Union

import typer
from rich.console import Console
from rich.table import Table
from rich.text import Text

from algostep.algorithms import Algorithm, NumberParameter, SelectParameter
from algostep.algorithms.contract import parameters_by_id
from algostep.core import Snapshot

console = Console()

MARK_STYLES = {
    "comparing": "bold yellow",
    "swapping": "bold red",
    "sorted": "green",
    "selected": "bold magenta",
    "pivot": "bold blue",
    "minimum": "cyan",
    "current": "bold cyan",
    "found": "bold green",
    "eliminated": "dim",
}

Number = Union[int, float]


def parse_number(raw: str) -> Number:
    text = raw.strip()
    try:
        return int(text)
    except ValueError:
        return float(text)


def parse_values(raw: str) -> List[Number]:
    """
    Parse a comma separated array ("3,1,2").

    Raises:
        typer.BadParameter: If an element is not a number
    """
    try:
        return [parse_number(part) for part in raw.split(",") if part.strip()]
    except ValueError:
        raise typer.BadParameter(f"Input must be comma separated numbers, got {raw!r}")


def parse_params(algorithm: Algorithm, pairs: Optional[List[str]]) -> Dict[str, Union[int, float, str]]:
    """
    Parse repeated --param key=value options against declared parameters.

    Number parameters are converted; select and text values stay strings.
    """
    declared = parameters_by_id(algorithm.parameters)
    params: Dict[str, Union[int, float, str]] = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep:
            raise typer.BadParameter(f"Parameters must look like key=value, got {pair!r}")
        declaration = declared.get(key)
        if declaration is None:
            raise typer.BadParameter(f"{algorithm.id} has no parameter {key!r}")
        if isinstance(declaration, NumberParameter):
            try:
                params[key] = parse_number(value)
            except ValueError:
                raise typer.BadParameter(f"Parameter {key!r} must be a number")
        elif isinstance(declaration, SelectParameter) and value not in {o.value for o in declaration.options}:
            raise typer.BadParameter(f"Parameter {key!r} must be one of {[o.value for o in declaration.options]}")
        else:
            params[key] = value
    return params


def render_array(snapshot: Snapshot) -> Text:
    text = Text()
    for idx, value in enumerate(snapshot.array_state):
        if idx:
            text.append("  ")
        text.append(str(value), style=MARK_STYLES.get(snapshot.marks.get(idx, ""), ""))
    return text


def snapshot_table(snapshot: Snapshot, total_steps: int, pseudocode=()) -> Table:
    table = Table(show_header=False, box=None)
    table.add_row("[bold]Step[/bold]", f"{snapshot.step} / {total_steps}")
    table.add_row("[bold]Array[/bold]", render_array(snapshot))
    table.add_row("[bold]Message[/bold]", snapshot.message or "")
    if snapshot.highlighted_lines and pseudocode:
        lines = [pseudocode[i] for i in snapshot.highlighted_lines if 0 <= i < len(pseudocode)]
        table.add_row("[bold]Line[/bold]", Text("\n".join(lines), style="cyan"))
    metrics = ", ".join(f"{k}={v}" for k, v in sorted(snapshot.metrics.items()))
    table.add_row("[bold]Metrics[/bold]", metrics)
    if snapshot.variables:
        table.add_row("[bold]Variables[/bold]", ", ".join(f"{v.name}={v.value}" for v in snapshot.variables))
    if snapshot.auxiliary is not None:
        table.add_row("[bold]Auxiliary[/bold]", f"{snapshot.auxiliary.type} ({snapshot.auxiliary.phase or '-'})")
    if snapshot.result is not None:
        table.add_row("[bold]Result[/bold]", f"[green]{snapshot.result.value}[/green] {snapshot.result.label or ''}")
    return table


def fail(message: str, json_output: bool, code: int = 2) -> typer.Exit:
    """Report an error the way every command does and return the Exit to raise."""
    if json_output:
        print(json.dumps({"error": message}))
    else:
        console.print(f"[red]Error:[/red] {message}")
    return typer.Exit(code)
