"""
Sandboxed script execution.

Runs user script text against a private copy of an input array with a fixed
set of instrumentation hooks. Every hook call is recorded as a timestamped
core event, so script runs animate through the same reducer as built-in
producers.

Script surface:
    compare(i, j), swap(i, j), set(i, value), mark(i, kind="sorted"),
    visit(i), highlight(*indices), message(msg), log(msg)
    arr          private working copy of the input
    input_array  another private copy of the input
    sleep        asyncio.sleep, for cooperative yielding (await sleep(0))

Scripts run in-process with a reduced builtins table. That narrows what a
script can reach but is not a security boundary.

With preemption on, a per-thread line tracer and a deadline check compiled
into every loop body and exception handler end a script once its budget is
spent, even when it catches the timeout.
"""

import ast
import asyncio
import builtins
import logging
import sys
import textwrap
import threading
import time
import traceback
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from .. import metrics
from ..config import EngineConfig
from ..core import events as ev
from ..core.events import Event, dump_events

logger = logging.getLogger(__name__)

TIMEOUT_MESSAGE = "Execution timeout exceeded"
SCRIPT_FILENAME = "<script>"
ENTRYPOINT = "__script__"
DEADLINE_CHECK = "__deadline__"

# Lines emitted before the first line of user code.
WRAPPER_LINES = 2
_WRAPPER_HEAD = f"async def {ENTRYPOINT}(input_array):\n    arr = list(input_array)\n"
_WRAPPER_TAIL = "\n    return arr\n"

_BLOCKED_BUILTINS = {
    "__import__",
    "breakpoint",
    "compile",
    "eval",
    "exec",
    "exit",
    "globals",
    "help",
    "input",
    "locals",
    "open",
    "quit",
    "vars",
}

SAFE_BUILTINS: Dict[str, Any] = {
    name: getattr(builtins, name)
    for name in dir(builtins)
    if name not in _BLOCKED_BUILTINS and not name.startswith("_")
}
SAFE_BUILTINS["__build_class__"] = builtins.__build_class__


class ScriptTimeout(BaseException):
    """
    Raised into a script frame once its deadline has passed.

    Derives from BaseException so `except Exception` inside the script
    cannot swallow it.
    """


class HookArgumentError(TypeError):
    """Raised when a script passes a hook an argument it cannot record."""


@dataclass(frozen=True)
class ExecutionError:
    message: str
    line: Optional[int] = None


@dataclass(frozen=True)
class ExecutionResult:
    """
    Outcome of one script execution.

    Fields:
        success: False on timeout or any exception
        events: Recorded hook events (at most max_events)
        logs: Every log() line, uncapped
        execution_time: Wall-clock duration in ms
        final_array: Script result on success, the original input otherwise
        error: Message and best-effort script line on failure
    """
    success: bool
    events: List[Event] = field(default_factory=list)
    logs: List[str] = field(default_factory=list)
    execution_time: float = 0.0
    final_array: List[Any] = field(default_factory=list)
    error: Optional[ExecutionError] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "success": self.success,
            "events": dump_events(self.events),
            "logs": list(self.logs),
            "execution_time": self.execution_time,
            "final_array": list(self.final_array),
        }
        if self.error is not None:
            out["error"] = {"message": self.error.message}
            if self.error.line is not None:
                out["error"]["line"] = self.error.line
        return out


def _index(hook: str, value) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise HookArgumentError(f"{hook}() index must be an integer, got {value!r}")
    return value


def _value(hook: str, value):
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise HookArgumentError(f"{hook}() value must be a number or string, got {value!r}")
    return value


class HookRecorder:
    """
    Hook functions exposed to a script, recording into a capped buffer.

    Events past max_events are dropped silently before their arguments are
    looked at; execution continues and log lines are always kept. Indices
    must be integers and set() values numbers or strings, anything else
    raises HookArgumentError. Mark kinds and message text are stringified.
    """

    def __init__(self, max_events: int) -> None:
        self.max_events = max_events
        self.events: List[Event] = []
        self.logs: List[str] = []
        self.dropped = 0
        self._started = time.perf_counter()

    def _now(self) -> float:
        return (time.perf_counter() - self._started) * 1000

    def _full(self) -> bool:
        if len(self.events) < self.max_events:
            return False
        self.dropped += 1
        return True

    def _record(self, event: Event) -> None:
        self.events.append(event.model_copy(update={"timestamp": self._now()}))

    def compare(self, i: int, j: int) -> None:
        if not self._full():
            self._record(ev.compare(_index("compare", i), _index("compare", j)))

    def swap(self, i: int, j: int) -> None:
        if not self._full():
            self._record(ev.swap(_index("swap", i), _index("swap", j)))

    def set(self, i: int, value) -> None:
        if not self._full():
            self._record(ev.set_value(_index("set", i), _value("set", value)))

    def mark(self, i: int, kind="sorted") -> None:
        if not self._full():
            self._record(ev.mark([_index("mark", i)], str(kind)))

    def visit(self, i) -> None:
        if not self._full():
            node = i if isinstance(i, (int, str)) and not isinstance(i, bool) else str(i)
            self._record(ev.visit(node))

    def highlight(self, *indices: int) -> None:
        if not self._full():
            self._record(ev.mark([_index("highlight", i) for i in indices], "selected"))

    def message(self, msg) -> None:
        if not self._full():
            self._record(ev.message(str(msg), "info"))

    def log(self, msg) -> None:
        text = str(msg)
        self.logs.append(text)
        if not self._full():
            self._record(ev.message(text, "log"))

    def namespace(self) -> Dict[str, Any]:
        return {
            "compare": self.compare,
            "swap": self.swap,
            "set": self.set,
            "mark": self.mark,
            "visit": self.visit,
            "highlight": self.highlight,
            "message": self.message,
            "log": self.log,
        }


def wrap_script(script: str) -> str:
    """Wrap script text into the async entrypoint function source."""
    body = textwrap.indent(textwrap.dedent(script), "    ")
    return _WRAPPER_HEAD + body + _WRAPPER_TAIL


def describe(exc: BaseException) -> str:
    if isinstance(exc, SyntaxError):
        return f"{type(exc).__name__}: {exc.msg}"
    return f"{type(exc).__name__}: {exc}"


def script_line(exc: BaseException) -> Optional[int]:
    """Best-effort 1-based line of the user script where exc was raised."""
    if isinstance(exc, SyntaxError):
        if exc.filename == SCRIPT_FILENAME and exc.lineno is not None:
            line = exc.lineno - WRAPPER_LINES
            return line if line >= 1 else None
        return None

    line = None
    for frame in traceback.extract_tb(exc.__traceback__):
        if frame.filename == SCRIPT_FILENAME and frame.lineno is not None:
            line = frame.lineno - WRAPPER_LINES
    if line is None or line < 1:
        return None
    return line


_deadline: ContextVar[Optional[float]] = ContextVar("script_deadline", default=None)


def check_deadline() -> None:
    """Raise ScriptTimeout if the running script's deadline has passed."""
    deadline = _deadline.get()
    if deadline is not None and time.perf_counter() > deadline:
        raise ScriptTimeout()


def _trace_line(frame, event, arg):
    if event == "line":
        check_deadline()
    return _trace_line


def _trace_call(frame, event, arg):
    if frame.f_code.co_filename == SCRIPT_FILENAME and _deadline.get() is not None:
        return _trace_line
    return None


class _TracerState(threading.local):
    active = 0
    previous = None


_tracer = _TracerState()


def _install_tracer() -> None:
    if _tracer.active == 0:
        _tracer.previous = sys.gettrace()
    _tracer.active += 1
    sys.settrace(_trace_call)


def _remove_tracer() -> None:
    # The interpreter drops a trace function that raised, so re-arm it while
    # other runs on this thread are still active.
    _tracer.active -= 1
    if _tracer.active == 0:
        sys.settrace(_tracer.previous)
        _tracer.previous = None
    else:
        sys.settrace(_trace_call)


class DeadlineChecks(ast.NodeTransformer):
    """Prepend a deadline check to every loop body and exception handler."""

    def _guard(self, node):
        self.generic_visit(node)
        check = ast.Expr(ast.Call(func=ast.Name(id=DEADLINE_CHECK, ctx=ast.Load()), args=[], keywords=[]))
        node.body.insert(0, ast.copy_location(check, node.body[0]))
        return node

    visit_For = _guard
    visit_AsyncFor = _guard
    visit_While = _guard
    visit_ExceptHandler = _guard


def compile_script(script: str):
    """
    Compile script text into the code object defining the entrypoint.

    Raises:
        SyntaxError: If the script does not parse or uses the reserved
            deadline check name
    """
    if DEADLINE_CHECK in script:
        raise SyntaxError(f"{DEADLINE_CHECK} is a reserved name")
    tree = ast.parse(wrap_script(script), filename=SCRIPT_FILENAME)
    tree = ast.fix_missing_locations(DeadlineChecks().visit(tree))
    return compile(tree, SCRIPT_FILENAME, "exec")


class SandboxEngine:
    """
    Executes scripts under a wall-clock budget and an event cap.

    Args:
        config: Limits and preemption switch (defaults if None)
    """

    def __init__(self, config: Optional[EngineConfig] = None) -> None:
        self.config = config or EngineConfig()

    async def execute(self, script: str, input_array: Sequence[Any]) -> ExecutionResult:
        """
        Run a script and report its outcome.

        Never raises for script problems: syntax errors, exceptions and
        timeouts all become an unsuccessful ExecutionResult.
        """
        original = list(input_array)
        recorder = HookRecorder(self.config.max_events)
        started = time.perf_counter()
        budget = self.config.max_execution_ms / 1000.0

        try:
            entrypoint = self._load(script, recorder)
            returned = await asyncio.wait_for(
                self._run(entrypoint, list(original), started + budget),
                timeout=budget,
            )
        except (asyncio.TimeoutError, ScriptTimeout):
            return self._finish(recorder, started, original, "timeout", ExecutionError(TIMEOUT_MESSAGE))
        except Exception as e:
            return self._finish(recorder, started, original, "error", ExecutionError(describe(e), script_line(e)))

        final_array = list(original) if returned is None else list(returned)
        return self._finish(recorder, started, final_array, "success")

    def execute_sync(self, script: str, input_array: Sequence[Any]) -> ExecutionResult:
        """Run execute() on a fresh event loop."""
        return asyncio.run(self.execute(script, input_array))

    def _load(self, script: str, recorder: HookRecorder):
        code = compile_script(script)
        namespace: Dict[str, Any] = {"__builtins__": SAFE_BUILTINS, "__name__": ENTRYPOINT}
        namespace.update(recorder.namespace())
        namespace["sleep"] = asyncio.sleep
        namespace[DEADLINE_CHECK] = check_deadline
        exec(code, namespace)
        return namespace[ENTRYPOINT]

    async def _run(self, entrypoint, arr: List[Any], deadline: float):
        if not self.config.preempt_sync_loops:
            return await entrypoint(arr)

        token = _deadline.set(deadline)
        _install_tracer()
        try:
            return await entrypoint(arr)
        finally:
            _remove_tracer()
            _deadline.reset(token)

    def _finish(
        self,
        recorder: HookRecorder,
        started: float,
        final_array: List[Any],
        outcome: str,
        error: Optional[ExecutionError] = None,
    ) -> ExecutionResult:
        elapsed = time.perf_counter() - started
        metrics.track_sandbox(outcome, elapsed)
        logger.info(
            "Script execution finished",
            extra={
                "outcome": outcome,
                "events": len(recorder.events),
                "dropped_events": recorder.dropped,
                "ms": round(elapsed * 1000, 3),
            },
        )
        return ExecutionResult(
            success=error is None,
            events=list(recorder.events),
            logs=list(recorder.logs),
            execution_time=elapsed * 1000,
            final_array=final_array,
            error=error,
        )


async def execute_script(
    script: str,
    input_array: Sequence[Any],
    config: Optional[EngineConfig] = None,
) -> ExecutionResult:
    """Convenience wrapper: execute one script with a throwaway engine."""
    return await SandboxEngine(config).execute(script, input_array)
