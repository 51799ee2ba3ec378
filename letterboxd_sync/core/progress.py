"""
Progress display for letterboxd-sync using the Rich library.

Resolving a large folder takes hundreds of film searches. ResolveProgressBar
shows how many candidates were resolved from the cache, resolved through a
search, or dropped:

    Resolving   ✓ 120  ● 300  ✗ 4      ━━━━━━━━━━━━━━━━━━━━━━  57%

Usage:
    with ResolveProgressBar(total=len(names)) as progress:
        resolved = await resolve_candidates(
            names, cache, client, on_result=progress.on_result
        )
"""

from rich import get_console
from rich.progress import BarColumn, Progress, TaskID, TextColumn
from rich.theme import Theme


PROGRESS_THEME = Theme({
    "bar.back": "grey23",
    "bar.complete": "rgb(255,128,0)",  # Letterboxd orange
    "bar.finished": "rgb(0,224,84)",   # Letterboxd green
    "bar.pulse": "rgb(255,128,0)",
    "progress.percentage": "white",
})


class ResolveProgressBar:
    """
    Progress bar for candidate resolution.

    Displays:
    - Description (e.g., "Resolving")
    - Status: ✓ searched and resolved, ● cache hits, ✗ dropped
    - Progress bar and percentage

    The bar is only drawn when the console is a terminal; otherwise the
    counters are still kept so the caller can report them.
    """

    def __init__(self, total: int, description: str = "Resolving") -> None:
        self.total = total
        self.description = description
        self.completed = 0
        self.resolved = 0
        self.cached = 0
        self.dropped = 0

        self.console = get_console()
        self.progress = Progress(
            TextColumn("[white]{task.description:<12}"),
            TextColumn("{task.fields[status]}"),
            BarColumn(bar_width=40),
            "[progress.percentage]{task.percentage:>3.0f}%",
            console=self.console,
            transient=False,
            disable=not self.console.is_terminal,
        )
        self.task_id: TaskID | None = None
        self._started = False

    def __enter__(self) -> "ResolveProgressBar":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()

    def start(self) -> None:
        if not self._started:
            self.console.push_theme(PROGRESS_THEME)
            self.progress.start()
            self.task_id = self.progress.add_task(
                description=self.description,
                total=self.total,
                status=self._get_status_text(),
            )
            self._started = True

    def stop(self) -> None:
        if self._started:
            self.progress.stop()
            self.console.pop_theme()
            self._started = False

    def _get_status_text(self) -> str:
        return "  ".join([
            f"[green]✓ {self.resolved}[/green]",
            f"[blue]● {self.cached}[/blue]",
            f"[red]✗ {self.dropped}[/red]",
        ])

    def on_result(self, name: str, film_id: str | None, cached: bool) -> None:
        """
        Record one finished candidate.

        Matches the resolver's on_result callback signature.

        Args:
            name: Candidate name (unused, part of the callback signature).
            film_id: Resolved film ID, or None if the candidate was dropped.
            cached: True if the ID came from the cache.
        """
        self.completed += 1
        if film_id is None:
            self.dropped += 1
        elif cached:
            self.cached += 1
        else:
            self.resolved += 1

        if self.task_id is not None:
            self.progress.update(
                self.task_id,
                completed=self.completed,
                status=self._get_status_text(),
            )
