"""
콘솔 출력 헬퍼
"""

from rich.console import Console
from rich.markup import escape

from .results import CheckResult, Summary

console = Console()

ICONS = {
    "pass": "[green]✔[/green]",
    "warn": "[yellow]![/yellow]",
    "fail": "[red]✘[/red]",
}


def print_header(title: str):
    console.print(f"\n[cyan]── {escape(title)} ──[/cyan]")


def print_result(result: CheckResult):
    console.print(f"  {ICONS[result.status]} {escape(result.message)}")
    for line in result.details:
        console.print(f"      {escape(line)}")


def print_summary(summary: Summary):
    console.print(f"  [green]Passed:[/green]   {summary.passed}")
    console.print(f"  [yellow]Warnings:[/yellow] {summary.warnings}")
    console.print(f"  [red]Failed:[/red]   {summary.failed}")
