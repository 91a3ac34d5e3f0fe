"""
Tests for sandboxed script execution.

Scripts are awaited with asyncio.run inside plain test functions.
"""

import asyncio
import sys
import textwrap
import types

from algostep.config import EngineConfig
from algostep.sandbox import TIMEOUT_MESSAGE, SandboxEngine, execute_script
from algostep.sandbox.engine import DEADLINE_CHECK, WRAPPER_LINES, compile_script, script_line, wrap_script

BUBBLE = textwrap.dedent("""
    n = len(arr)
    for i in range(n):
        for j in range(n - i - 1):
            compare(j, j + 1)
            if arr[j] > arr[j + 1]:
                arr[j], arr[j + 1] = arr[j + 1], arr[j]
                swap(j, j + 1)
        mark(n - i - 1)
""")


def _run(script, values, **config):
    engine = SandboxEngine(EngineConfig(**config))
    return asyncio.run(engine.execute(script, values))


def test_successful_execution():
    result = _run(BUBBLE, [3, 1, 2])

    assert result.success
    assert result.error is None
    assert result.final_array == [1, 2, 3]
    assert any(e.type == "swap" for e in result.events)
    assert result.execution_time >= 0


def test_events_are_timestamped_in_order():
    result = _run(BUBBLE, [4, 3, 2, 1])
    stamps = [e.timestamp for e in result.events]

    assert all(t is not None for t in stamps)
    assert stamps == sorted(stamps)


def test_caller_array_never_mutated():
    values = [3, 1, 2]
    result = _run("arr.append(99)\ninput_array.clear()\narr.sort()", values)

    assert result.success
    assert values == [3, 1, 2]
    assert result.final_array == [1, 2, 3, 99]


def test_bare_return_gives_original_input():
    result = _run("arr.reverse()\nreturn", [1, 2, 3])

    assert result.success
    assert result.final_array == [1, 2, 3]


def test_returned_list_becomes_final_array():
    result = _run("return sorted(arr, reverse=True)", [1, 3, 2])
    assert result.final_array == [3, 2, 1]


def test_rebinding_arr():
    result = _run("arr = [x * 2 for x in arr]", [1, 2])
    assert result.final_array == [2, 4]


def test_hook_mapping():
    script = textwrap.dedent("""
        set(0, 9)
        mark(1)
        mark(2, "pivot")
        visit(1)
        highlight(0, 2)
        message("hello")
        log("debug line")
    """)
    result = _run(script, [1, 2, 3])
    types = [e.type for e in result.events]

    assert types == ["set", "mark", "mark", "visit", "mark", "message", "message"]
    assert result.events[0].index == 0 and result.events[0].value == 9
    assert result.events[1].kind == "sorted"
    assert result.events[2].kind == "pivot"
    assert result.events[3].node_id == 1
    assert result.events[4].indices == (0, 2)
    assert result.events[4].kind == "selected"
    assert result.events[5].level == "info"
    assert result.events[6].level == "log"
    assert result.events[6].text == "debug line"
    assert result.logs == ["debug line"]


def test_event_cap_drops_silently():
    script = "for i in range(50):\n    compare(0, 1)\n    log(i)\narr.sort()"
    result = _run(script, [2, 1], max_events=10)

    assert result.success
    assert len(result.events) == 10
    assert len(result.logs) == 50
    assert result.final_array == [1, 2]


def test_cooperative_timeout():
    script = "while True:\n    await sleep(0)"
    result = _run(script, [1, 2], max_execution_ms=100, preempt_sync_loops=False)

    assert not result.success
    assert result.error.message == TIMEOUT_MESSAGE
    assert result.final_array == [1, 2]


def test_sync_loop_is_preempted():
    script = "compare(0, 1)\nwhile True:\n    pass"
    result = _run(script, [1, 2], max_execution_ms=100)

    assert not result.success
    assert result.error.message == TIMEOUT_MESSAGE
    assert len(result.events) == 1


def test_timeout_not_swallowed_by_script():
    script = textwrap.dedent("""
        while True:
            try:
                x = 1
            except Exception:
                pass
    """)
    result = _run(script, [1], max_execution_ms=100)

    assert not result.success
    assert result.error.message == TIMEOUT_MESSAGE


def test_timeout_not_swallowed_by_bare_except():
    script = textwrap.dedent("""
        while True:
            try:
                while True:
                    pass
            except:
                pass
    """)
    result = _run(script, [1], max_execution_ms=100)

    assert not result.success
    assert result.error.message == TIMEOUT_MESSAGE


def test_timeout_not_swallowed_by_base_exception_handler():
    script = textwrap.dedent("""
        caught = 0
        while True:
            try:
                x = [i for i in range(1000)]
            except BaseException:
                caught += 1
                log(caught)
    """)
    result = _run(script, [1], max_execution_ms=100)

    assert not result.success
    assert result.error.message == TIMEOUT_MESSAGE
    assert result.logs == []


def test_overlapping_runs_restore_the_trace_function():
    cooperative = "for i in range(3):\n    await sleep(0.01)\n    compare(0, 0)"
    engine = SandboxEngine()

    async def both():
        return await asyncio.gather(engine.execute(cooperative, [1]), engine.execute(cooperative, [2]))

    before = sys.gettrace()
    first, second = asyncio.run(both())

    assert first.success and second.success
    assert sys.gettrace() is before

    later = SandboxEngine(EngineConfig(preempt_sync_loops=False)).execute_sync("x = 1", [1])
    assert later.success


def test_overlapping_timeout_leaves_other_run_alone():
    engine = SandboxEngine(EngineConfig(max_execution_ms=100))
    relaxed = SandboxEngine(EngineConfig(max_execution_ms=2000, preempt_sync_loops=False))

    async def both():
        return await asyncio.gather(
            engine.execute("while True:\n    await sleep(0)\n    x = 1", [1]),
            relaxed.execute("for i in range(20):\n    await sleep(0.01)", [2]),
        )

    before = sys.gettrace()
    stuck, slow = asyncio.run(both())

    assert stuck.error.message == TIMEOUT_MESSAGE
    assert slow.success
    assert sys.gettrace() is before


def test_reserved_deadline_name_rejected():
    result = _run(f"{DEADLINE_CHECK} = None", [1])

    assert not result.success
    assert result.error.message.startswith("SyntaxError")


def test_loops_and_handlers_are_instrumented():
    code = compile_script("for i in arr:\n    pass\ntry:\n    pass\nexcept:\n    pass")
    entrypoint = next(c for c in code.co_consts if isinstance(c, types.CodeType))
    assert DEADLINE_CHECK in entrypoint.co_names


def test_exception_reports_line():
    result = _run("x = 1\ny = 2\nz = x / 0\n", [5, 6])

    assert not result.success
    assert result.error.message.startswith("ZeroDivisionError")
    assert result.error.line == 3
    assert result.final_array == [5, 6]


def test_exception_in_nested_function_reports_script_line():
    script = "def boom():\n    return [][1]\n\nboom()\n"
    result = _run(script, [1])

    assert result.error.message.startswith("IndexError")
    assert result.error.line == 2


def test_events_before_failure_are_kept():
    result = _run("compare(0, 1)\nlog('before')\nraise ValueError('bad')", [1, 2])

    assert not result.success
    assert result.error.message == "ValueError: bad"
    assert len(result.events) == 2
    assert result.logs == ["before"]


def test_syntax_error_reports_line():
    result = _run("x = 1\ny = = 2\n", [1])

    assert not result.success
    assert result.error.message.startswith("SyntaxError")
    assert result.error.line == 2


def test_imports_are_blocked():
    result = _run("import os\n", [1])

    assert not result.success
    assert result.error.message.startswith("ImportError")


def test_open_is_not_available():
    result = _run("open('/etc/passwd')\n", [1])

    assert not result.success
    assert result.error.message.startswith("NameError")


def test_bad_hook_arguments_fail_with_one_line_error():
    result = _run("compare(0, 1)\nset(0, None)", [1, 2])

    assert not result.success
    assert result.error.message == "HookArgumentError: set() value must be a number or string, got None"
    assert result.error.line == 2
    assert len(result.events) == 1

    result = _run("compare(0.5, 1)", [1, 2])
    assert result.error.message == "HookArgumentError: compare() index must be an integer, got 0.5"


def test_hook_arguments_are_coerced():
    result = _run("mark(1, 2)\nmessage(3)\nvisit(None)", [1, 2])

    assert result.success
    assert result.events[0].kind == "2"
    assert result.events[1].text == "3"
    assert result.events[2].node_id == "None"


def test_cap_checked_before_arguments():
    result = _run("compare(0, 1)\nset(0, None)\nmark(0.5)", [1, 2], max_events=1)

    assert result.success
    assert [e.type for e in result.events] == ["compare"]


def test_execute_sync_and_helper_agree():
    engine = SandboxEngine()
    sync_result = engine.execute_sync(BUBBLE, [2, 1])
    async_result = asyncio.run(execute_script(BUBBLE, [2, 1]))

    assert sync_result.final_array == async_result.final_array == [1, 2]
    assert [e.type for e in sync_result.events] == [e.type for e in async_result.events]


def test_to_dict():
    failed = _run("x = 1\nraise RuntimeError('x')", [1]).to_dict()

    assert failed["success"] is False
    assert failed["error"] == {"message": "RuntimeError: x", "line": 2}
    assert failed["final_array"] == [1]

    ok = _run("compare(0, 0)", [1]).to_dict()
    assert "error" not in ok
    assert ok["events"][0]["type"] == "compare"


def test_wrapper_line_offset():
    wrapped = wrap_script("a = 1")
    assert wrapped.splitlines()[WRAPPER_LINES] == "    a = 1"


def test_script_line_ignores_host_frames():
    try:
        raise KeyError("host")
    except KeyError as e:
        assert script_line(e) is None
