"""
Play command: animate an algorithm run in the terminal
"""

import asyncio
from typing import List, Optional

import typer
from rich.live import Live

from algostep.algorithms import AlgorithmRegistry
from algostep.config import EngineConfig
from algostep.core import AlgostepError, AsyncioIntervalTimer
from algostep.player import PlaybackController, PlaybackStatus

from .common import console, fail, parse_params, parse_values, snapshot_table

REFRESH_SECONDS = 0.05


async def _play(controller: PlaybackController, pseudocode) -> None:
    controller.play()
    with Live(console=console, refresh_per_second=20) as live:
        while True:
            snapshot = controller.current_snapshot
            live.update(snapshot_table(snapshot, controller.get_total_steps(), pseudocode))
            if controller.status == PlaybackStatus.FINISHED:
                break
            await asyncio.sleep(REFRESH_SECONDS)
    controller.close()


def play_command(
    algorithm_id: str = typer.Argument(..., help="Algorithm id (see `algostep list`)"),
    input_values: str = typer.Option(..., "--input", "-i", help="Comma separated numbers, e.g. 3,1,2"),
    param: Optional[List[str]] = typer.Option(None, "--param", "-p", help="Parameter as key=value (repeatable)"),
    speed: Optional[str] = typer.Option(None, "--speed", help="slow, normal, fast or milliseconds per step"),
):
    """
    Play an algorithm step by step.

    Examples:
        algostep play bubble-sort --input 5,3,8,1
        algostep play heap-sort --input 5,3,8,1 --speed fast
        algostep play merge-sort --input 5,3,8,1 --speed 150
    """
    registry = AlgorithmRegistry.default()
    try:
        algorithm = registry.get(algorithm_id)
        values = parse_values(input_values)
        params = parse_params(algorithm, param)

        controller = PlaybackController(registry=registry, timer=AsyncioIntervalTimer(), config=EngineConfig.from_env())
        if speed is not None:
            controller.set_speed(int(speed) if speed.strip().isdigit() else speed.strip().lower())
        controller.load_algorithm(algorithm_id, values, params)
    except (AlgostepError, typer.BadParameter, ValueError) as e:
        raise fail(str(e), json_output=False)

    asyncio.run(_play(controller, algorithm.pseudocode_lines))
    console.print(f"[green]✓ {algorithm.name} finished in {controller.get_total_steps()} steps[/green]")
