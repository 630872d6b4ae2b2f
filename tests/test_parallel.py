"""
Tests for the dispatch engine.

Real threads, real timing. The execution capability is replaced with a
recorder that tracks how many invocations are in flight; a few tests run
real shell commands.
"""

import threading
import time
from collections import Counter

import pytest

from fanout.infra import CommandTemplate, ConfigurationError, DispatchEngine


class RecordingRunner:
    """Execution capability that records commands and peak concurrency."""

    def __init__(self, delay: float = 0.0, fail_on=None):
        self.delay = delay
        self.fail_on = set(fail_on or [])
        self.lock = threading.Lock()
        self.commands = []
        self.in_flight = 0
        self.max_in_flight = 0

    def __call__(self, command):
        with self.lock:
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)

        try:
            time.sleep(self.delay)
            if command in self.fail_on:
                raise RuntimeError(f"boom: {command}")
            return 0
        finally:
            with self.lock:
                self.in_flight -= 1
                self.commands.append(command)


class CaptureLogger:
    """Minimal stand-in for RunLogger that keeps messages in memory."""

    def __init__(self):
        self.lock = threading.Lock()
        self.records = []

    def _add(self, level, msg, **kwargs):
        with self.lock:
            self.records.append((level, msg, kwargs))

    def debug(self, msg, **kwargs):
        self._add("debug", msg, **kwargs)

    def info(self, msg, **kwargs):
        self._add("info", msg, **kwargs)

    def warning(self, msg, **kwargs):
        self._add("warning", msg, **kwargs)

    def error(self, msg, **kwargs):
        self._add("error", msg, **kwargs)

    def messages(self, level):
        return [msg for lvl, msg, _ in self.records if lvl == level]


@pytest.mark.parametrize("workers", [1, 2, 4, 16])
@pytest.mark.parametrize("count", [1, 5, 37])
def test_every_input_invoked_exactly_once(workers, count):
    """n inputs -> exactly n invocations before run() returns, for any worker count."""
    runner = RecordingRunner(delay=0.001)
    engine = DispatchEngine(max_workers=workers, run_command=runner)

    inputs = [f"item-{i}" for i in range(count)]
    engine.run(inputs, CommandTemplate("process {}"))

    assert len(runner.commands) == count
    assert Counter(runner.commands) == Counter(f"process {i}" for i in inputs)
    assert engine.stats["processed"] == count
    assert runner.in_flight == 0


def test_duplicate_inputs_are_each_invoked():
    """Identical lines are separate records."""
    runner = RecordingRunner()
    engine = DispatchEngine(max_workers=3, run_command=runner)

    engine.run(["a", "a", "b", "a"], CommandTemplate("echo {}"))

    assert Counter(runner.commands) == Counter({"echo a": 3, "echo b": 1})


@pytest.mark.parametrize("workers", [1, 2, 3, 8])
def test_never_more_than_max_workers_in_flight(workers):
    runner = RecordingRunner(delay=0.02)
    engine = DispatchEngine(max_workers=workers, run_command=runner)

    engine.run([str(i) for i in range(20)], CommandTemplate("sleep {}"))

    assert runner.max_in_flight <= workers
    assert len(runner.commands) == 20


def test_pool_fills_every_worker():
    """With more inputs than workers, all workers run at the same time."""
    workers = 4
    barrier = threading.Barrier(workers, timeout=5)
    started = []
    lock = threading.Lock()

    def runner(command):
        with lock:
            started.append(command)
            first_wave = len(started) <= workers
        if first_wave:
            # Raises BrokenBarrierError if the pool never reaches 4 concurrent calls
            barrier.wait()

    errors = CaptureLogger()
    engine = DispatchEngine(max_workers=workers, logger=errors, run_command=runner)
    engine.run([str(i) for i in range(10)], CommandTemplate("run {}"))

    assert len(started) == 10
    assert errors.messages("error") == []


def test_scenario_echo_three_inputs_two_workers():
    runner = RecordingRunner(delay=0.05)
    engine = DispatchEngine(max_workers=2, run_command=runner)

    engine.run(["a", "b", "c"], CommandTemplate("echo {}"))

    assert sorted(runner.commands) == ["echo a", "echo b", "echo c"]
    assert runner.max_in_flight <= 2
    assert runner.in_flight == 0


def test_single_worker_serializes_invocations():
    runner = RecordingRunner(delay=0.02)
    engine = DispatchEngine(max_workers=1, run_command=runner)

    engine.run(["/tmp/x", "/tmp/y"], CommandTemplate("touch {}"))

    assert runner.max_in_flight == 1
    assert sorted(runner.commands) == ["touch /tmp/x", "touch /tmp/y"]


def test_single_worker_with_real_shell(tmp_path):
    """touch {} with one worker creates both files."""
    x = tmp_path / "x"
    y = tmp_path / "y"

    engine = DispatchEngine(max_workers=1)
    engine.run([str(x), str(y)], CommandTemplate("touch {}"))

    assert x.exists()
    assert y.exists()


def test_real_shell_commands_run_concurrently(tmp_path):
    """Four 0.5s sleeps on four workers finish well under the serial 2s."""
    engine = DispatchEngine(max_workers=4)

    start = time.time()
    engine.run([str(i) for i in range(4)], CommandTemplate(f"sleep 0.5 && touch {tmp_path}/done-{{}}"))
    duration = time.time() - start

    assert sorted(p.name for p in tmp_path.iterdir()) == ["done-0", "done-1", "done-2", "done-3"]
    assert duration < 1.8, f"Should run in parallel, took {duration}s"


def test_empty_inputs_return_immediately():
    runner = RecordingRunner()
    logger = CaptureLogger()
    engine = DispatchEngine(max_workers=4, logger=logger, run_command=runner)

    engine.run([], CommandTemplate("echo {}"))

    assert runner.commands == []
    assert engine.stats["processed"] == 0
    assert "no inputs to process" in logger.messages("info")


def test_failing_invocation_does_not_stop_others():
    runner = RecordingRunner(fail_on={"echo b"})
    logger = CaptureLogger()
    engine = DispatchEngine(max_workers=2, logger=logger, run_command=runner)

    # Must not raise
    engine.run(["a", "b", "c", "d"], CommandTemplate("echo {}"))

    assert sorted(runner.commands) == ["echo a", "echo b", "echo c", "echo d"]
    assert engine.stats["processed"] == 4

    errors = [r for r in logger.records if r[0] == "error"]
    assert len(errors) == 1
    assert errors[0][2]["input"] == "b"
    assert errors[0][2]["command"] == "echo b"


def test_nonzero_exit_status_is_not_an_error(tmp_path):
    marker = tmp_path / "after"
    engine = DispatchEngine(max_workers=1)

    engine.run(["exit 3", f"touch {marker}"], CommandTemplate("{}"))

    assert marker.exists()
    assert engine.stats["processed"] == 2


@pytest.mark.parametrize("workers", [0, -1, -8])
def test_rejects_fewer_than_one_worker(workers):
    with pytest.raises(ConfigurationError):
        DispatchEngine(max_workers=workers)


def test_rejects_non_integer_workers():
    with pytest.raises(ConfigurationError):
        DispatchEngine(max_workers=2.5)


def test_progress_reported_at_intervals():
    logger = CaptureLogger()
    engine = DispatchEngine(
        max_workers=2,
        logger=logger,
        run_command=RecordingRunner(delay=0.005),
        progress_interval=10
    )

    engine.run([str(i) for i in range(25)], CommandTemplate("echo {}"))

    counts = [
        kwargs["processed"]
        for level, msg, kwargs in logger.records
        if msg.startswith("Progress:")
    ]
    # Every 10 items, plus the final item
    assert 10 in counts
    assert 20 in counts
    assert 25 in counts
    assert 30 not in counts


def test_engine_can_run_twice():
    runner = RecordingRunner()
    engine = DispatchEngine(max_workers=2, run_command=runner)
    template = CommandTemplate("echo {}")

    engine.run(["a", "b"], template)
    assert engine.stats["processed"] == 2

    engine.run(["c"], template)
    assert engine.stats["processed"] == 1
    assert sorted(runner.commands) == ["echo a", "echo b", "echo c"]
