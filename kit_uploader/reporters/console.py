"""Console reporter using Rich library for formatted CLI output.

Shows each upload stage as it runs and a summary panel at the end.
"""

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich import box

from kit_uploader.reporters.base import Reporter
from kit_uploader.models import UploadResult, UploadStage


STAGE_LABELS = {
    UploadStage.AUTHENTICATING: "Requesting access token",
    UploadStage.FETCHING_UPLOAD_INFO: "Fetching upload URL",
    UploadStage.UPLOADING: "Uploading file",
    UploadStage.NOTIFYING: "Notifying project update",
}


class ConsoleReporter(Reporter):
    """Rich-based console reporter for CLI output.

    Args:
        quiet: If True, suppress per-stage output (only show summary)
        console: Rich console to print to
    """

    def __init__(self, quiet: bool = False, console: Console = None):
        # Use legacy_windows=True for ASCII-safe output on Windows consoles
        self.console = console or Console(legacy_windows=True)
        self.quiet = quiet

    def on_stage_start(self, stage: UploadStage) -> None:
        if self.quiet:
            return
        label = STAGE_LABELS.get(stage, stage.value)
        self.console.print(f"[cyan]...[/cyan] {label}")

    def on_stage_complete(self, stage: UploadStage) -> None:
        if self.quiet:
            return
        label = STAGE_LABELS.get(stage, stage.value)
        self.console.print(f"  [green][OK][/green] {label}")

    def on_upload_complete(self, result: UploadResult) -> None:
        """Display a summary panel for the run."""
        table = Table(show_header=False, box=box.ASCII, border_style="dim")
        table.add_column("Field", style="cyan", no_wrap=True)
        table.add_column("Value")

        table.add_row("File", Text(result.file_path))
        table.add_row("Project", str(result.project_id or "-"))
        if result.batch:
            table.add_row("Batch", result.batch)
        if result.uploaded_path:
            table.add_row("Uploaded path", Text(result.uploaded_path))
        table.add_row("Duration", f"{result.duration_seconds:.1f}s")

        if result.succeeded:
            title = "[bold green]UPLOADED[/bold green]"
            border = "green"
        else:
            failed_at = STAGE_LABELS.get(result.failed_stage, "upload")
            title = "[bold red]FAILED[/bold red]"
            border = "red"
            table.add_row("Failed at", failed_at)
            if result.error_message:
                table.add_row("Error", Text(result.error_message, style="red"))

        self.console.print()
        self.console.print(Panel(table, title=title, border_style=border, box=box.ASCII))
