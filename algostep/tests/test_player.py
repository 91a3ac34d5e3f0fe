"""
Tests for the playback controller.

All timing runs on DeterministicClock, so every transition is reproducible.
"""

import asyncio

import pytest

from algostep.config import EngineConfig
from algostep.core import AsyncioIntervalTimer, DeterministicClock
from algostep.core.auxiliary import HeapState
from algostep.core.canonical import canonical_json_str
from algostep.core.errors import InputValidationError, UnknownAlgorithmError
from algostep.player import PlaybackController, PlaybackStatus


def _controller(**kwargs):
    clock = DeterministicClock()
    return PlaybackController(timer=clock, **kwargs), clock


def test_initial_state():
    controller, clock = _controller()

    assert controller.status == PlaybackStatus.IDLE
    assert controller.current_snapshot is None
    assert controller.get_total_steps() == 0
    assert controller.get_progress() == 0
    assert controller.speed == 500
    assert controller.speed_preset == "normal"

    controller.play()
    assert controller.status == PlaybackStatus.IDLE
    assert clock.active == 0


def test_load_resets_to_idle():
    controller, _ = _controller()
    timeline = controller.load_algorithm("bubble-sort", [3, 1, 2])

    assert controller.status == PlaybackStatus.IDLE
    assert controller.current_step == 0
    assert controller.algorithm_id == "bubble-sort"
    assert controller.input_values == (3, 1, 2)
    assert controller.get_total_steps() == len(timeline) - 1 == len(controller.events)
    assert controller.current_snapshot.array_state == (3, 1, 2)


def test_play_advances_one_step_per_tick():
    controller, clock = _controller()
    controller.load_algorithm("bubble-sort", [3, 1, 2])
    controller.play()

    assert controller.status == PlaybackStatus.PLAYING
    clock.advance(499)
    assert controller.current_step == 0
    clock.advance(1)
    assert controller.current_step == 1
    clock.advance(1000)
    assert controller.current_step == 3
    assert clock.active == 1


def test_play_to_end_finishes_and_clears_timer():
    controller, clock = _controller()
    controller.load_algorithm("bubble-sort", [3, 1, 2])
    total = controller.get_total_steps()
    controller.play()

    clock.advance(500 * (total + 5))

    assert controller.status == PlaybackStatus.FINISHED
    assert controller.current_step == total
    assert controller.current_snapshot.array_state == (1, 2, 3)
    assert clock.active == 0
    assert controller.get_progress() == 100


def test_play_at_end_rewinds():
    controller, clock = _controller()
    controller.load_algorithm("bubble-sort", [2, 1])
    controller.seek(controller.get_total_steps())
    controller.play()

    assert controller.current_step == 0
    assert controller.status == PlaybackStatus.PLAYING


def test_play_twice_keeps_single_timer():
    controller, clock = _controller()
    controller.load_algorithm("bubble-sort", [3, 1, 2])
    controller.play()
    controller.play()

    assert clock.active == 1


def test_pause_keeps_position():
    controller, clock = _controller()
    controller.load_algorithm("bubble-sort", [3, 1, 2])
    controller.play()
    clock.advance(1000)
    controller.pause()
    clock.advance(5000)

    assert controller.status == PlaybackStatus.PAUSED
    assert controller.current_step == 2
    assert clock.active == 0


def test_step_and_step_back_clamp():
    controller, clock = _controller()
    controller.load_algorithm("bubble-sort", [2, 1])
    total = controller.get_total_steps()

    controller.step_back()
    assert controller.current_step == 0
    assert controller.status == PlaybackStatus.PAUSED

    controller.play()
    controller.step()
    assert clock.active == 0
    assert controller.current_step == 1

    controller.seek(total)
    controller.step()
    assert controller.current_step == total
    assert controller.status == PlaybackStatus.FINISHED


def test_seek_clamps_and_pauses():
    controller, clock = _controller()
    controller.load_algorithm("bubble-sort", [3, 1, 2])
    controller.play()

    controller.seek(10_000)
    assert controller.current_step == controller.get_total_steps()
    assert controller.status == PlaybackStatus.PAUSED
    assert clock.active == 0

    controller.seek(-5)
    assert controller.current_step == 0


def test_seek_equals_stepping():
    controller, _ = _controller()
    controller.load_algorithm("merge-sort", [4, 1, 3, 2])

    for k in range(controller.get_total_steps() + 1):
        controller.seek(k)
        seeked = canonical_json_str(controller.current_snapshot.to_dict())

        controller.reset()
        for _ in range(k):
            controller.step()
        assert canonical_json_str(controller.current_snapshot.to_dict()) == seeked


def test_reset():
    controller, clock = _controller()
    controller.load_algorithm("bubble-sort", [3, 1, 2])
    controller.play()
    clock.advance(1500)
    controller.reset()

    assert controller.status == PlaybackStatus.IDLE
    assert controller.current_step == 0
    assert clock.active == 0


def test_set_speed_presets_and_clamp():
    controller, _ = _controller()

    controller.set_speed("fast")
    assert controller.speed == 200
    assert controller.speed_preset == "fast"

    controller.set_speed(50)
    assert controller.speed == 100
    assert controller.speed_preset is None

    controller.set_speed_ms(5000)
    assert controller.speed == 2000

    with pytest.raises(ValueError):
        controller.set_speed("warp")


def test_set_speed_while_playing_restarts_timer():
    controller, clock = _controller()
    controller.load_algorithm("bubble-sort", [3, 1, 2])
    controller.play()
    clock.advance(500)
    assert controller.current_step == 1

    controller.set_speed("slow")
    assert clock.active == 1
    assert controller.status == PlaybackStatus.PLAYING

    clock.advance(500)
    assert controller.current_step == 1
    clock.advance(500)
    assert controller.current_step == 2


def test_default_speed_from_config():
    controller, _ = _controller(config=EngineConfig(default_speed="slow"))
    assert controller.speed == 1000


def test_load_mid_playback_clears_timer_and_auxiliary():
    """Loading while playing must not leak the old timer or auxiliary state."""
    controller, clock = _controller()
    controller.load_algorithm("heap-sort", [4, 10, 3, 5, 1])
    controller.play()
    while not isinstance(controller.auxiliary, HeapState):
        clock.advance(500)

    controller.load_algorithm("bubble-sort", [3, 1, 2])

    assert clock.active == 0
    assert controller.status == PlaybackStatus.IDLE
    assert controller.current_step == 0
    assert controller.auxiliary is None
    assert controller.current_snapshot.array_state == (3, 1, 2)

    clock.advance(5000)
    assert controller.current_step == 0


def test_failed_load_keeps_previous_session():
    controller, _ = _controller()
    controller.load_algorithm("bubble-sort", [3, 1, 2])
    controller.seek(2)

    with pytest.raises(UnknownAlgorithmError):
        controller.load_algorithm("bogo-sort", [1, 2])
    with pytest.raises(InputValidationError, match="Array cannot be empty"):
        controller.load_algorithm("selection-sort", [])

    assert controller.algorithm_id == "bubble-sort"
    assert controller.current_step == 2
    assert controller.input_values == (3, 1, 2)


def test_invalid_params_rejected_before_load():
    controller, _ = _controller()
    controller.load_algorithm("linear-search", [4, 2, 7])

    with pytest.raises(InputValidationError, match="must be a number"):
        controller.load_algorithm("binary-search", [1, 2], {"target": "x"})

    assert controller.algorithm_id == "linear-search"
    assert controller.input_values == (4, 2, 7)


def test_params_passed_through():
    controller, _ = _controller()
    controller.load_algorithm("binary-search", [1, 3, 5, 7], {"target": 5})
    controller.seek(controller.get_total_steps())

    assert controller.params == {"target": 5}
    assert controller.current_snapshot.result.value == 2


def test_progress():
    controller, _ = _controller()
    controller.load_algorithm("bubble-sort", [3, 1, 2])
    total = controller.get_total_steps()

    controller.seek(total // 2)
    assert controller.get_progress() == pytest.approx((total // 2) / total * 100)


def test_close_clears_timer():
    controller, clock = _controller()
    controller.load_algorithm("bubble-sort", [3, 1, 2])
    controller.play()
    controller.close()

    assert clock.active == 0


def test_asyncio_interval_timer_fires_and_cancels():
    async def scenario():
        timer = AsyncioIntervalTimer()
        ticks = []
        done = asyncio.Event()

        def tick():
            ticks.append(len(ticks))
            if len(ticks) == 3:
                timer.cancel(handle)
                done.set()

        handle = timer.start(tick, 5)
        await asyncio.wait_for(done.wait(), timeout=2)
        await asyncio.sleep(0.03)
        return ticks, timer.active

    ticks, active = asyncio.run(scenario())
    assert ticks == [0, 1, 2]
    assert active == 0
