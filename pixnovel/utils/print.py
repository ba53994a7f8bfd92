"""Printing utilities."""
from typing import Any, Dict, Iterable
from rich.console import Console
from rich.pretty import Pretty
from rich.table import Table


def shorten(text: str, max_len: int) -> str:
    if len(text) > max_len:
        return text[:max_len] + "..."
    return text


def result_summary(result, max_len: int = 80) -> Dict[str, Any]:
    """
    Dump a TranslationResult for display.

    The translated HTML is replaced by its length and a preview of at most
    max_len characters; long error messages are shortened the same way.
    """
    summary = result.model_dump(exclude={"content"})
    summary["duration"] = round(result.duration, 3)
    summary["length"] = len(result.content)
    summary["preview"] = shorten(result.content, max_len)
    if result.error:
        summary["error"] = shorten(result.error, max_len)
    return summary


def print_result_details(results: Iterable, max_len: int = 80, max_width: int = 90) -> None:
    """Pretty print every TranslationResult with Rich, one summary each."""
    summaries = [result_summary(result, max_len) for result in results]
    Console(width=max_width).print(Pretty(summaries, expand_all=True))


def print_results(results: Iterable, max_width: int = 120) -> None:
    """Print one row per TranslationResult."""
    table = Table(title="Translated novels")
    table.add_column("Novel")
    table.add_column("Status")
    table.add_column("Length", justify="right")
    table.add_column("Seconds", justify="right")
    table.add_column("Error")
    for result in results:
        if not result.success:
            status = "[red]error[/red]"
        elif not result.content:
            status = "[yellow]empty[/yellow]"
        else:
            status = "[green]ok[/green]"
        table.add_row(
            result.novel_id, status, str(len(result.content)),
            f"{result.duration:.3f}", result.error or ""
        )
    Console(width=max_width).print(table)
