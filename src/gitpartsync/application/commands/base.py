"""
Command Base - Result type, command interface and a bounded batch runner.
"""

import logging
from abc import ABC, abstractmethod
from concurrent.futures import FIRST_COMPLETED, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Any, Optional

from ...core.exceptions import GitPartSyncError


@dataclass
class CommandResult:
    """Outcome of executing one command."""

    success: bool = True
    data: Any = None
    error: Optional[str] = None
    dry_run: bool = False
    skipped: bool = False
    skip_reason: Optional[str] = None

    @classmethod
    def ok(cls, data: Any = None, dry_run: bool = False) -> "CommandResult":
        return cls(success=True, data=data, dry_run=dry_run)

    @classmethod
    def fail(cls, error: str) -> "CommandResult":
        return cls(success=False, error=error)

    @classmethod
    def skip(cls, reason: str) -> "CommandResult":
        return cls(success=True, skipped=True, skip_reason=reason)


class Command(ABC):
    """
    A single write operation against the bucket.

    Subclasses implement ``validate``, ``_execute`` and ``describe``;
    ``execute`` handles dry-run and turns any error into a failed
    result so one bad item never takes its siblings down.
    """

    def __init__(self, dry_run: bool = True):
        self.dry_run = dry_run
        self.logger = logging.getLogger(self.__class__.__name__)

    @property
    def name(self) -> str:
        return self.__class__.__name__

    @abstractmethod
    def validate(self) -> Optional[str]:
        """Return an error message if the command cannot run."""
        ...

    @abstractmethod
    def describe(self) -> str:
        """Human readable summary of what the command does."""
        ...

    @abstractmethod
    def _execute(self) -> CommandResult:
        ...

    def execute(self) -> CommandResult:
        error = self.validate()
        if error:
            return CommandResult.fail(error)

        if self.dry_run:
            self.logger.info(f"[DRY-RUN] {self.describe()}")
            return CommandResult.ok(self.describe(), dry_run=True)

        try:
            return self._execute()
        except GitPartSyncError as e:
            self.logger.error(f"{self.describe()} failed: {e}")
            return CommandResult.fail(str(e))
        except Exception as e:
            self.logger.exception(f"{self.describe()} failed unexpectedly")
            return CommandResult.fail(f"{type(e).__name__}: {e}")


class CommandBatch:
    """
    Runs a list of commands on a bounded worker pool.

    Results are kept in the order commands were added. With
    ``stop_on_error`` no further command is started after the first failure;
    commands already running are allowed to finish.
    """

    def __init__(self, stop_on_error: bool = False, max_workers: int = 1):
        self.stop_on_error = stop_on_error
        self.max_workers = max(1, max_workers)
        self.commands: list[Command] = []
        self.results: list[CommandResult] = []

    def add(self, command: Command) -> "CommandBatch":
        self.commands.append(command)
        return self

    def __len__(self) -> int:
        return len(self.commands)

    def execute_all(self) -> list[CommandResult]:
        """Execute every command and collect the results."""
        if self.max_workers == 1 or len(self.commands) <= 1:
            self.results = self._run_sequential()
        else:
            self.results = self._run_pooled()
        return self.results

    def _run_sequential(self) -> list[CommandResult]:
        results = []
        for command in self.commands:
            result = command.execute()
            results.append(result)
            if not result.success and self.stop_on_error:
                break
        return results

    def _run_pooled(self) -> list[CommandResult]:
        results: dict[int, CommandResult] = {}
        queue = list(enumerate(self.commands))
        workers = min(self.max_workers, len(queue))

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="command") as pool:
            running = {}
            stopped = False
            while queue or running:
                while queue and not stopped and len(running) < workers:
                    index, command = queue.pop(0)
                    running[pool.submit(command.execute)] = index

                if not running:
                    break

                done, _ = wait(running, return_when=FIRST_COMPLETED)
                for future in done:
                    index = running.pop(future)
                    result = future.result()
                    results[index] = result
                    if not result.success and self.stop_on_error:
                        stopped = True

        return [results[i] for i in sorted(results)]

    @property
    def all_succeeded(self) -> bool:
        return all(r.success for r in self.results)

    @property
    def executed_count(self) -> int:
        return sum(1 for r in self.results if r.success and not r.dry_run and not r.skipped)

    @property
    def failed_count(self) -> int:
        return sum(1 for r in self.results if not r.success)

    @property
    def errors(self) -> list[str]:
        return [r.error for r in self.results if not r.success and r.error]
