# -*- coding: utf-8 -*-
"""Command line for drafting, checking and viewing training agendas.

Agendas, requirements and modules are read from and written to JSON files in
their stored record shape.
"""
import asyncio
import json
import sys
import typing as t
from pathlib import Path

import click
from rich.console import Console
from rich.json import JSON
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from agenda_builder.config import DEFAULT_SETTINGS
from agenda_builder.converter import (from_record, module_from_record, module_to_record, requirement_from_record,
                                      to_record)
from agenda_builder.draft import compute_total_duration, describe_errors, duration_status, new_draft, validate
from agenda_builder.errors import GenerationError
from agenda_builder.generator import generate_agenda_async, generate_modules
from agenda_builder.logger import setup_logger
from agenda_builder.models import AgendaDraft, DurationStatus, ParseError
from agenda_builder.timeslots import activity_title
from training_store.models import TrainingModule, TrainingRequirement

console = Console()

STATUS_STYLES = {
    DurationStatus.GOOD: ("green", "On Track"),
    DurationStatus.SHORT: ("yellow", "Too Short"),
    DurationStatus.LONG: ("red", "Too Long"),
}

ACTIVITY_ICONS = {
    "module": "📘",
    "formality": "🕒",
    "speaker": "🎤",
    "discussion": "💬",
    "break": "☕",
}


def _read_json(path: str) -> t.Any:
    try:
        return json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        console.print(f"[red]Error:[/red] '{path}' is not valid JSON: {e}")
        raise SystemExit(1)


def _write_json(data: t.Any, output: t.Optional[str]) -> None:
    text = json.dumps(data, indent=2, ensure_ascii=False)
    if output:
        Path(output).write_text(text + "\n", encoding="utf-8")
        console.print(f"[green]✓ Written to {output}[/green]")
    else:
        console.print(JSON(text))


def _load_agenda(path: str) -> AgendaDraft:
    try:
        record = _read_json(path)
        if not isinstance(record, dict):
            raise TypeError(f"expected a JSON object, got {type(record).__name__}")
        return from_record(record)
    except (ValueError, TypeError, AttributeError) as e:
        console.print(f"[red]Error:[/red] '{path}' is not a valid agenda: {e}")
        raise SystemExit(1)


def _load_requirement(path: str) -> TrainingRequirement:
    try:
        record = _read_json(path)
        if not isinstance(record, dict):
            raise TypeError(f"expected a JSON object, got {type(record).__name__}")
        return requirement_from_record(record)
    except (ValueError, TypeError, AttributeError) as e:
        console.print(f"[red]Error:[/red] '{path}' is not a valid training requirement: {e}")
        raise SystemExit(1)


def _load_modules(path: str) -> list[TrainingModule]:
    try:
        records = _read_json(path)
        if not isinstance(records, list):
            raise TypeError(f"expected a JSON array, got {type(records).__name__}")
        return [module_from_record(record) for record in records]
    except (ValueError, TypeError, AttributeError) as e:
        console.print(f"[red]Error:[/red] '{path}' is not a valid module list: {e}")
        raise SystemExit(1)


def create_timeline_table(draft: AgendaDraft) -> Table:
    """Create a table with one row per time slot."""
    table = Table(title=f"🗓️ {draft.title or 'Training Agenda'}", show_header=True, header_style="bold magenta")
    table.add_column("#", style="cyan", width=3)
    table.add_column("", width=3)
    table.add_column("Start", style="yellow")
    table.add_column("Min", style="green", justify="right")
    table.add_column("Activity", style="white")
    table.add_column("Notes", style="dim")

    for slot in draft.time_slots:
        table.add_row(
            str(slot.sequence_number),
            ACTIVITY_ICONS.get(slot.activity_type, ""),
            slot.start_time or "—",
            str(slot.duration_minutes),
            activity_title(slot),
            slot.notes or "",
        )
    return table


def print_duration_status(draft: AgendaDraft, target: int) -> None:
    total = compute_total_duration(draft)
    style, label = STATUS_STYLES[duration_status(draft, target)]
    console.print(
        f"Total Duration: [bold]{total}[/bold] minutes  •  Target: {target} minutes  •  "
        f"[{style}]{label}[/{style}]"
    )


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def main(verbose: bool) -> None:
    """Training agenda builder."""
    setup_logger(level="DEBUG" if verbose else "WARNING")


@main.command()
@click.argument("title")
@click.option("--description", default="", help="Agenda description.")
@click.option("--training-id", default="", help="Training the agenda belongs to.")
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write the agenda record to this file.")
def new(title: str, description: str, training_id: str, output: t.Optional[str]) -> None:
    """Start a new agenda with the opening slot."""
    draft = new_draft(title=title, description=description)
    _write_json(to_record(draft, training_id), output)


@main.command("validate")
@click.argument("agenda_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--target", type=int, default=DEFAULT_SETTINGS.default_target_minutes, show_default=True,
              help="Target duration in minutes.")
def validate_command(agenda_file: str, target: int) -> None:
    """Check an agenda against its target duration."""
    draft = _load_agenda(agenda_file)
    print_duration_status(draft, target)
    errors = validate(draft, target)
    if errors:
        console.print("[red]❌ Validation errors:[/red]")
        for message in describe_errors(errors, compute_total_duration(draft), target):
            console.print(f"  • {message}")
        raise SystemExit(1)
    console.print("[green]✓ Agenda is ready to save[/green]")


@main.command()
@click.argument("agenda_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--target", type=int, default=DEFAULT_SETTINGS.default_target_minutes, show_default=True,
              help="Target duration in minutes.")
def show(agenda_file: str, target: int) -> None:
    """Display an agenda's timeline."""
    draft = _load_agenda(agenda_file)
    if not draft.time_slots:
        console.print("[yellow]No activities yet. Add one to get started.[/yellow]")
        return
    console.print(create_timeline_table(draft))
    print_duration_status(draft, target)
    for heading, items in (
            ("Materials", draft.materials_needed),
            ("Pre-reading", draft.pre_reading),
            ("Follow-up", draft.post_follow_up),
    ):
        if items:
            console.print(Panel("\n".join(f"• {item}" for item in items), title=heading, expand=False))


@main.command()
@click.argument("requirement_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--modules", "modules_file", type=click.Path(exists=True, dir_okay=False),
              help="JSON file with the module records the agenda may use.")
@click.option("--model", default=None, help="Model id (defaults to AGENDA_LLM_MODEL).")
@click.option("--temperature", type=float, default=None, help="Sampling temperature.")
@click.option("--timeout", type=float, default=None, help="Seconds to wait for the model before giving up.")
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write the agenda record to this file.")
def generate(
        requirement_file: str,
        modules_file: t.Optional[str],
        model: t.Optional[str],
        temperature: t.Optional[float],
        timeout: t.Optional[float],
        output: t.Optional[str],
) -> None:
    """Draft an agenda for a training requirement with an LLM."""
    requirement = _load_requirement(requirement_file)
    modules = _load_modules(modules_file) if modules_file else []

    console.print(
        Panel.fit(
            f"[bold blue]🤖 Generating agenda[/bold blue]\n"
            f"Training: [bold]{requirement.training_title or requirement.training_id}[/bold]\n"
            f"Modules available: [cyan]{len(modules)}[/cyan]",
            border_style="blue",
        )
    )

    try:
        with console.status("Waiting for the model..."):
            result = asyncio.run(
                generate_agenda_async(requirement, modules, model=model, temperature=temperature, timeout=timeout)
            )
    except GenerationError as e:
        console.print(f"[red]Generation Failed:[/red] {e}")
        raise SystemExit(1)

    if isinstance(result, ParseError):
        console.print(f"[red]Invalid Response:[/red] The AI response is not valid JSON: {result.message}")
        console.print(Panel(Text(result.raw_text), title="Raw response", border_style="red"))
        raise SystemExit(1)

    console.print(create_timeline_table(result))
    print_duration_status(result, requirement.target_duration())
    _write_json(to_record(result, requirement.training_id), output)


@main.command()
@click.argument("topic")
@click.option("--model", default=None, help="Model id (defaults to AGENDA_LLM_MODEL).")
@click.option("--temperature", type=float, default=None, help="Sampling temperature.")
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write the module records to this file.")
def modules(topic: str, model: t.Optional[str], temperature: t.Optional[float], output: t.Optional[str]) -> None:
    """Research training modules for a topic with an LLM."""
    try:
        with console.status(f"Researching modules for {topic}..."):
            result = generate_modules(topic, model=model, temperature=temperature)
    except (GenerationError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)

    if isinstance(result, ParseError):
        console.print(f"[red]Invalid Response:[/red] {result.message}")
        console.print(Panel(Text(result.raw_text), title="Raw response", border_style="red"))
        raise SystemExit(1)

    table = Table(title="📚 Generated Modules", show_header=True, header_style="bold cyan")
    table.add_column("Title", style="green")
    table.add_column("Min", justify="right")
    table.add_column("Category")
    for module in result:
        table.add_row(module.module_title, str(module.duration), module.category)
    console.print(table)
    _write_json([module_to_record(m) for m in result], output)


if __name__ == "__main__":
    sys.exit(main())
