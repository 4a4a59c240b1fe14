"""Rich console output for activity summaries."""

from rich.console import Console
from rich.table import Table

from .activities import Activity, summarize


class ActivityConsolePrinter:
    """Prints activity statistics to the terminal."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console()

    def display_stats(self, activities: list[Activity]) -> None:
        summary = summarize(activities)
        self.console.print()
        self.console.print(f"[bold]Activities:[/bold] {summary.count}")
        self.console.print(f"[bold]Total distance:[/bold] {summary.total_distance_km:.2f} km")
        self.console.print(f"[bold]Activity types:[/bold] {len(summary.types)}")

    def display_type_breakdown(self, activities: list[Activity]) -> None:
        table = Table(title="Activities by type")
        table.add_column("Type")
        table.add_column("Count", justify="right")
        table.add_column("Distance (km)", justify="right")

        for activity_type in summarize(activities).types:
            matching = [a for a in activities if a.type == activity_type]
            distance = sum(a.distance_meters for a in matching) / 1000
            table.add_row(activity_type, str(len(matching)), f"{distance:.2f}")

        self.console.print(table)
