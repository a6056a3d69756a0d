# -*- coding: utf-8 -*-
"""Agenda draft construction, duration accounting and validation."""
from __future__ import annotations

import typing as t

from loguru import logger

from agenda_builder.config import DEFAULT_SETTINGS, AgendaSettings
from agenda_builder.errors import AgendaValidationError
from agenda_builder.models import AgendaDraft, BreakPayload, DurationStatus, TimeSlot, ValidationError


def opening_slot() -> TimeSlot:
    """The arrival slot every new agenda starts with."""
    return TimeSlot(
        sequence_number=1,
        start_time="09:00",
        duration_minutes=15,
        activity_type="break",
        activity_details=BreakPayload(
            break_kind="tea",
            location="Main venue",
            description="Welcome and networking",
        ),
        notes="Arrival and informal networking",
    )


def new_draft(
        title: str = "",
        description: str = "",
        materials_needed: t.Optional[list[str]] = None,
) -> AgendaDraft:
    """Creates an empty agenda seeded with the opening slot.

    :param title: Agenda title, usually the training title.
    :param description: Agenda description.
    :param materials_needed: Initial materials list.
    :return: A new AgendaDraft.
    """
    return AgendaDraft(
        title=title,
        description=description,
        time_slots=[opening_slot()],
        materials_needed=list(materials_needed or []),
    )


def compute_total_duration(agenda: t.Union[AgendaDraft, t.Sequence[TimeSlot]]) -> int:
    """Sum of slot durations; 0 for an agenda without slots."""
    slots = agenda.time_slots if isinstance(agenda, AgendaDraft) else agenda
    return sum(slot.duration_minutes for slot in slots)


def duration_status(
        agenda: AgendaDraft,
        target: int,
        settings: t.Optional[AgendaSettings] = None,
) -> DurationStatus:
    """Compare the agenda's total duration with the target duration."""
    settings = settings or DEFAULT_SETTINGS
    total = compute_total_duration(agenda)
    if total < target * settings.short_threshold_ratio:
        return DurationStatus.SHORT
    if total > target * settings.long_threshold_ratio:
        return DurationStatus.LONG
    return DurationStatus.GOOD


def validate(
        agenda: AgendaDraft,
        target: int,
        settings: t.Optional[AgendaSettings] = None,
) -> list[ValidationError]:
    """Collect the reasons the agenda cannot be saved yet.

    Never raises and never touches the agenda; an empty list means the agenda
    can be handed off for saving.
    """
    errors: list[ValidationError] = []
    status = duration_status(agenda, target, settings)
    if status is DurationStatus.SHORT:
        errors.append(ValidationError.TOO_SHORT)
    elif status is DurationStatus.LONG:
        errors.append(ValidationError.TOO_LONG)
    if not agenda.time_slots:
        errors.append(ValidationError.EMPTY)
    return errors


def describe_errors(errors: t.Iterable[ValidationError], total: int, target: int) -> list[str]:
    """Turn validation errors into messages for the user."""
    messages = []
    for error in errors:
        if error is ValidationError.TOO_SHORT:
            messages.append(f"Agenda is too short ({total} min vs target {target} min)")
        elif error is ValidationError.TOO_LONG:
            messages.append(f"Agenda is too long ({total} min vs target {target} min)")
        elif error is ValidationError.EMPTY:
            messages.append("No timeslots defined")
    return messages


def ensure_savable(
        agenda: AgendaDraft,
        target: int,
        settings: t.Optional[AgendaSettings] = None,
) -> None:
    """Block the save hand-off when the agenda has validation errors.

    :raises AgendaValidationError: carrying the errors and their messages.
    """
    errors = validate(agenda, target, settings)
    if errors:
        messages = describe_errors(errors, compute_total_duration(agenda), target)
        logger.warning("Agenda failed validation", title=agenda.title, errors=[e.value for e in errors])
        raise AgendaValidationError(errors, messages)
