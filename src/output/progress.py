"""Registry lookup progress, drawn on stderr while lookups are in flight."""

from __future__ import annotations

import threading
from typing import Optional

from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn


class LookupProgress:
    """Transient progress bar counting finished registry lookups.

    Nothing is drawn when disabled or when stderr is not a terminal, so
    reports on stdout and redirected output stay clean. ``advance`` is called
    from worker threads.
    """

    def __init__(self, enabled: bool = True, console: Optional[Console] = None):
        self._console = console or Console(stderr=True)
        self.enabled = enabled and self._console.is_terminal
        self._progress: Optional[Progress] = None
        self._task = None
        self._lock = threading.Lock()
        self.completed = 0

    def start(self, total: int) -> None:
        if not self.enabled or total <= 0:
            return
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            console=self._console,
            transient=True,
        )
        self._task = self._progress.add_task("Checking registries", total=total)
        self._progress.start()

    def advance(self, name: str) -> None:
        with self._lock:
            self.completed += 1
            if self._progress is not None:
                self._progress.update(self._task, advance=1, description=f"Checked {name}")

    def stop(self) -> None:
        if self._progress is not None:
            self._progress.stop()
            self._progress = None

    def __enter__(self) -> "LookupProgress":
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()
