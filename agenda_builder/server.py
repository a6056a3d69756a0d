# -*- coding: utf-8 -*-
import typing as t

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from loguru import logger

from agenda_builder.config import DEFAULT_SETTINGS
from agenda_builder.converter import from_generated_text, from_record, requirement_from_record, module_from_record, \
    to_record
from agenda_builder.draft import compute_total_duration, describe_errors, duration_status, validate
from agenda_builder.errors import GenerationError
from agenda_builder.generator import generate_agenda
from agenda_builder.models import AgendaDraft, ParseError
from agenda_builder.timeslots import activity_title

mcp = FastMCP("AgendaBuilder")


@mcp.tool()
def validate_agenda(agenda: dict[str, t.Any], target_minutes: int = DEFAULT_SETTINGS.default_target_minutes) -> dict:
    """Check an agenda record against a target duration.

    :param agenda: Agenda record (stored or generated shape).
    :param target_minutes: Target duration in minutes.
    :return: Total duration, duration status and any blocking errors.
    """
    draft = from_record(agenda)
    total = compute_total_duration(draft)
    errors = validate(draft, target_minutes)
    return {
        "total_duration": total,
        "target_duration": target_minutes,
        "status": duration_status(draft, target_minutes).value,
        "errors": [e.value for e in errors],
        "messages": describe_errors(errors, total, target_minutes),
    }


@mcp.tool()
def show_agenda_summary(agenda: dict[str, t.Any]) -> str:
    """Display an agenda's timeline as a formatted table.

    :param agenda: Agenda record (stored or generated shape).
    :return: Formatted string showing the timeline.
    """
    return format_agenda(from_record(agenda))


@mcp.tool()
def parse_generated_agenda(raw_text: str, training_id: str = "") -> dict:
    """Turn a model's reply into an agenda record.

    :param raw_text: The reply text, optionally wrapped in a code fence.
    :param training_id: Training the agenda belongs to.
    :return: The agenda record, or {"error", "raw_text"} if the reply is not valid JSON.
    """
    result = from_generated_text(raw_text)
    if isinstance(result, ParseError):
        return {"error": f"The AI response is not valid JSON: {result.message}", "raw_text": result.raw_text}
    return to_record(result, training_id)


@mcp.tool()
def generate_agenda_draft(
        requirement: dict[str, t.Any],
        modules: list[dict[str, t.Any]],
        model: str = "",
        temperature: t.Optional[float] = None,
) -> dict:
    """Draft an agenda for a training requirement with an LLM.

    :param requirement: Training requirement record.
    :param modules: Training module records the agenda may use.
    :param model: Model id; empty for the configured default.
    :param temperature: Sampling temperature; None for the configured default.
    :return: The drafted agenda record, or {"error", "raw_text"} if the reply could not be parsed.
    """
    training_requirement = requirement_from_record(requirement)
    try:
        result = generate_agenda(
            training_requirement,
            [module_from_record(m) for m in modules],
            model=model or None,
            temperature=temperature,
        )
    except GenerationError as e:
        logger.error(f"Agenda generation failed: {e}")
        raise ToolError(f"Generation Failed: {e}") from e
    if isinstance(result, ParseError):
        return {"error": f"The AI response is not valid JSON: {result.message}", "raw_text": result.raw_text}
    return to_record(result, training_requirement.training_id)


def format_agenda(draft: AgendaDraft) -> str:
    """Format an agenda's time slots as a plain-text table."""
    if not draft.time_slots:
        return "🗓️ No activities scheduled."

    lines = []
    lines.append(f"🗓️ {draft.title or 'TRAINING AGENDA'}")
    lines.append("=" * 100)
    lines.append(f"{'#':<4} {'Start':<7} {'Min':<5} {'Type':<12} {'Activity':<40} {'Notes':<30}")
    lines.append("-" * 100)

    for slot in draft.time_slots:
        title = activity_title(slot)
        title = title[:39] if len(title) > 39 else title
        notes = slot.notes[:29] if slot.notes and len(slot.notes) > 29 else (slot.notes or "—")
        lines.append(
            f"{slot.sequence_number:<4} {slot.start_time or '—':<7} {slot.duration_minutes:<5} "
            f"{slot.activity_type:<12} {title:<40} {notes:<30}"
        )

    lines.append("=" * 100)
    lines.append(f"Total: {len(draft.time_slots)} activity(ies), {compute_total_duration(draft)} min")
    return "\n".join(lines)


if __name__ == "__main__":
    # Run as an MCP server over stdio
    mcp.run()
