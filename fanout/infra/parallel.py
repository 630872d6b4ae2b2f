"""
Bounded-concurrency dispatch engine.

Fans an ordered list of inputs out to a fixed pool of worker threads. Every
worker drains one shared queue: it takes the next input, renders the command
template with it, runs the command, waits for it to finish, and only then
takes another input. run() returns once every input has been attempted.

Guarantees:
- each input is invoked exactly once
- at most max_workers invocations are in flight
- a failing invocation never stops the others

No ordering between completions, and no collection of exit statuses.
"""

import queue
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from functools import partial
from typing import Any, Callable, Optional, Sequence

from .errors import ConfigurationError
from .executor import run_shell
from .logger import RunLogger
from .template import CommandTemplate


class DispatchEngine:
    """
    Fixed-size worker pool that runs one command per input line.

    Usage:
        engine = DispatchEngine(max_workers=4, logger=logger)
        engine.run(inputs=["a", "b", "c"], template=CommandTemplate("echo {}"))

    run_command is the execution capability: it receives the substituted
    command string and blocks until that command is done. Its return value
    is ignored. The default runs the string through the system shell.
    """

    def __init__(
        self,
        max_workers: int,
        logger: Optional[RunLogger] = None,
        run_command: Optional[Callable[[str], Any]] = None,
        progress_interval: int = 100
    ):
        """
        Initialize the dispatch engine.

        Args:
            max_workers: Number of concurrent workers (>= 1)
            logger: Optional run logger
            run_command: Optional execution capability (default: run_shell)
            progress_interval: Log progress every N completed inputs

        Raises:
            ConfigurationError: If max_workers is less than 1
        """
        if isinstance(max_workers, bool) or not isinstance(max_workers, int) or max_workers < 1:
            raise ConfigurationError(
                f"invalid number of threads specified: {max_workers} need 1 or more"
            )

        self.max_workers = max_workers
        self.logger = logger
        self.run_command = run_command or partial(run_shell, logger=logger)
        self.progress_interval = max(1, progress_interval)

        # Only "inputs remaining" bookkeeping is shared between workers
        self.stats_lock = threading.Lock()
        self.stats = {"processed": 0}

        if self.logger:
            self.logger.info(f"created pool with {max_workers} workers", workers=max_workers)

    def run(self, inputs: Sequence[str], template: CommandTemplate) -> None:
        """
        Run the template once per input and block until all are done.

        Args:
            inputs: Ordered input records
            template: Command template to render for each input

        Raises:
            KeyboardInterrupt: After in-flight commands finish, if interrupted
        """
        total = len(inputs)
        with self.stats_lock:
            self.stats["processed"] = 0

        if total == 0:
            if self.logger:
                self.logger.info("no inputs to process")
            return

        work = queue.Queue()
        for item in inputs:
            work.put(item)

        stop = threading.Event()
        slots = min(self.max_workers, total)

        if self.logger:
            self.logger.info(
                f"dispatching {total} inputs across {slots} workers",
                total=total,
                workers=slots,
            )

        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="fanout-worker") as executor:
            futures = [
                executor.submit(self._drain, work, template, total, stop, slot)
                for slot in range(slots)
            ]

            try:
                for future in as_completed(futures):
                    future.result()
            except KeyboardInterrupt:
                if self.logger:
                    self.logger.warning("interrupted - waiting for running commands to finish")
                stop.set()
                raise

        if self.logger:
            self.logger.info(
                f"all {self.stats['processed']} inputs processed",
                processed=self.stats["processed"],
                total=total,
            )

    def _drain(
        self,
        work: queue.Queue,
        template: CommandTemplate,
        total: int,
        stop: threading.Event,
        slot: int
    ) -> None:
        """Worker loop: take inputs until the queue is empty."""
        while not stop.is_set():
            try:
                item = work.get_nowait()
            except queue.Empty:
                return

            self._invoke(item, template, slot)
            self._record_processed(total)

    def _invoke(self, item: str, template: CommandTemplate, slot: int) -> None:
        """Run one input. Failures are logged and stay with this input."""
        command = template.render(item)
        try:
            self.run_command(command)
        except Exception as e:
            if self.logger:
                self.logger.error(
                    f"error running command for input {item!r}: {e}",
                    input=item,
                    command=command,
                    worker=slot,
                    error=str(e),
                )

    def _record_processed(self, total: int) -> None:
        with self.stats_lock:
            self.stats["processed"] += 1
            processed = self.stats["processed"]

        if self.logger and (processed % self.progress_interval == 0 or processed == total):
            self.logger.info(
                f"Progress: {processed}/{total} inputs processed",
                processed=processed,
                total=total,
            )
