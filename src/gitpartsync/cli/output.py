"""
Output - Console reporting of reconciliation cycles.

Planned actions are printed verbatim, one per line, so a dry run can be
diffed or grepped; everything else is decoration around them.
"""

import sys
from typing import Optional, TextIO

from ..application.sync import SyncResult


class Colors:
    """ANSI color codes."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    CYAN = "\033[36m"

    BG_YELLOW = "\033[43m"


class Symbols:
    """Unicode symbols for output."""

    CHECK = "✓"
    CROSS = "✗"
    WARN = "⚠"
    GEAR = "⚙"


class Console:
    """
    Writes cycle reports to a stream.

    Colors are only used on a terminal. Without ``verbose`` long warning
    and error lists are cut to ``preview`` entries.
    """

    def __init__(
        self,
        color: bool = True,
        verbose: bool = False,
        stream: Optional[TextIO] = None,
        preview: int = 5,
    ):
        self.stream = stream or sys.stdout
        self.color = color and self.stream.isatty()
        self.verbose = verbose
        self.preview = preview

    def _paint(self, text: str, *codes: str) -> str:
        if not self.color:
            return text
        return "".join(codes) + text + Colors.RESET

    def print(self, text: str = "") -> None:
        print(text, file=self.stream)

    # -------------------------------------------------------------------------
    # Cycle reports
    # -------------------------------------------------------------------------

    def dry_run_banner(self) -> None:
        """Mark the output as a dry run."""
        banner = f"  {Symbols.GEAR} DRY-RUN MODE - the bucket will not be modified"
        self.print()
        if self.color:
            self.print(f"{Colors.BG_YELLOW}{Colors.BOLD}{banner}{Colors.RESET}")
        else:
            self.print(f"*** {banner} ***")
        self.print()

    def planned_actions(self, lines: list[str]) -> None:
        """Print the dry-run plan, one action per line."""
        for line in lines:
            self.print(line)

    def sync_result(self, result: SyncResult) -> None:
        """Print the cycle summary."""
        self.print()
        mode = "dry-run" if result.dry_run else "live"
        self.print(self._paint(f"Cycle summary ({mode})", Colors.BOLD, Colors.CYAN))

        self._metrics([
            ("sync targets", result.targets),
            ("objects in bucket", result.objects_in_bucket),
            ("destinations to update", len(result.to_rebuild)),
            ("keys to delete", len(result.to_delete)),
            ("archives uploaded", len(result.uploaded)),
            ("objects deleted", len(result.deleted)),
        ])

        self._messages(result.warnings, Symbols.WARN, "warning", Colors.YELLOW)
        self._messages(result.errors, Symbols.CROSS, "error", Colors.RED)

        self.print()
        if not result.success:
            self.print(self._paint(f"{Symbols.CROSS} Cycle finished with errors", Colors.RED))
        elif result.in_sync:
            self.print(self._paint(f"{Symbols.CHECK} Bucket already in sync", Colors.GREEN))
        else:
            self.print(self._paint(f"{Symbols.CHECK} Cycle finished", Colors.GREEN))

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _metrics(self, rows: list[tuple[str, int]]) -> None:
        width = max(len(label) for label, _ in rows)
        for label, value in rows:
            self.print(f"  {label.ljust(width)}  {value:>5}")

    def _messages(self, messages: list[str], symbol: str, noun: str, color: str) -> None:
        if not messages:
            return

        self.print()
        self.print(self._paint(f"{symbol} {len(messages)} {noun}(s):", color))

        shown = messages if self.verbose else messages[:self.preview]
        for message in shown:
            self.print(self._paint(f"    {message}", Colors.DIM))
        if len(messages) > len(shown):
            self.print(self._paint(f"    ... and {len(messages) - len(shown)} more", Colors.DIM))
