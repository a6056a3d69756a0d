# -*- coding: utf-8 -*-
"""
Time-slot collection editing.

Every operation returns a new list and leaves its input untouched. Structural
edits (insert, delete, reorder, move) leave sequence numbers dense, 1..N in
list order.
"""
from __future__ import annotations

import typing as t
from dataclasses import fields, replace

from agenda_builder.config import DEFAULT_SETTINGS, AgendaSettings
from agenda_builder.models import (ActivityPayload, BreakPayload, DiscussionPayload, FormalityPayload,
                                   ModulePayload, SpeakerPayload, TimeSlot, empty_payload,
                                   normalize_activity_type)

if t.TYPE_CHECKING:
    from training_store.models import TrainingModule


# Durations used by the "Add Activity" buttons
PRESET_DURATIONS: dict[str, int] = {
    "module": 90,
    "formality": 10,
    "speaker": 45,
    "discussion": 30,
    "break": 15,
}

SLOT_FIELDS = ("start_time", "duration_minutes", "notes")


def resequence(slots: t.Sequence[TimeSlot]) -> list[TimeSlot]:
    """Renumber slots densely from 1 in their current order."""
    return [replace(slot, sequence_number=i) for i, slot in enumerate(slots, 1)]


def insert(slots: t.Sequence[TimeSlot], slot: TimeSlot) -> list[TimeSlot]:
    """Append a slot to the end of the schedule.

    Any sequence number on the incoming slot is overwritten.
    """
    max_sequence = max((s.sequence_number for s in slots), default=0)
    return [*slots, replace(slot, sequence_number=max_sequence + 1)]


def update(slots: t.Sequence[TimeSlot], index: int, new_slot: TimeSlot) -> list[TimeSlot]:
    """Replace the slot at `index` wholesale. Does not renumber."""
    _check_index(slots, index)
    updated = list(slots)
    updated[index] = new_slot
    return updated


def delete(slots: t.Sequence[TimeSlot], index: int) -> list[TimeSlot]:
    """Remove the slot at `index` and renumber the rest."""
    _check_index(slots, index)
    return resequence([s for i, s in enumerate(slots) if i != index])


def reorder(slots: t.Sequence[TimeSlot], new_order: t.Sequence[TimeSlot]) -> list[TimeSlot]:
    """Adopt a new ordering of the existing slots and renumber.

    Any permutation is accepted, including the current order.

    :raises ValueError: if `new_order` is not a permutation of `slots`.
    """
    remaining = list(slots)
    for slot in new_order:
        for i, candidate in enumerate(remaining):
            if candidate is slot or candidate == slot:
                del remaining[i]
                break
        else:
            raise ValueError("Reordered slots must be a permutation of the current slots")
    if remaining:
        raise ValueError("Reordered slots must be a permutation of the current slots")
    return resequence(new_order)


def move(slots: t.Sequence[TimeSlot], old_index: int, new_index: int) -> list[TimeSlot]:
    """Move one slot to another position, as a drag-and-drop does."""
    _check_index(slots, old_index)
    _check_index(slots, new_index)
    new_order = list(slots)
    new_order.insert(new_index, new_order.pop(old_index))
    return reorder(slots, new_order)


def change_activity_type(slot: TimeSlot, activity_type: str) -> TimeSlot:
    """Switch a slot to another activity type with a fresh, empty payload.

    Nothing from the previous payload is carried over.
    """
    activity_type = normalize_activity_type(activity_type)
    return replace(slot, activity_type=activity_type, activity_details=empty_payload(activity_type))


def edit_payload(payload: ActivityPayload, field_name: str, value: t.Any) -> ActivityPayload:
    """Set one field of an activity payload, keeping every other field.

    :raises ValueError: if the payload has no such field.
    """
    names = {f.name for f in fields(payload)}
    if field_name not in names:
        raise ValueError(f"{type(payload).__name__} has no field {field_name!r}")
    return replace(payload, **{field_name: value})


def edit_slot(slot: TimeSlot, field_name: str, value: t.Any) -> TimeSlot:
    """Set a slot-level field.

    Changing `activity_type` goes through `change_activity_type`.
    """
    if field_name == "activity_type":
        return change_activity_type(slot, value)
    if field_name not in SLOT_FIELDS:
        raise ValueError(f"TimeSlot field {field_name!r} cannot be edited directly")
    return replace(slot, **{field_name: value})


def edit_details(slot: TimeSlot, field_name: str, value: t.Any) -> TimeSlot:
    """Edit one payload field of a slot."""
    return replace(slot, activity_details=edit_payload(slot.activity_details, field_name, value))


def select_module(
        slot: TimeSlot,
        module: TrainingModule,
        settings: t.Optional[AgendaSettings] = None,
) -> TimeSlot:
    """Fill a module slot from a training module record.

    The slot's own duration follows the module's declared duration. The
    facilitator and notes already entered on the slot are kept.
    """
    settings = settings or DEFAULT_SETTINGS
    if slot.activity_type != "module":
        raise ValueError(f"Cannot select a module for a {slot.activity_type!r} slot")
    duration = module.duration or settings.default_duration_minutes
    details = replace(
        slot.activity_details,
        module_id=module.module_id,
        title=module.module_title,
        duration=duration,
    )
    return replace(slot, duration_minutes=duration, activity_details=details)


def new_slot(activity_type: str, settings: t.Optional[AgendaSettings] = None) -> TimeSlot:
    """A preset slot of the given type, ready to be inserted."""
    settings = settings or DEFAULT_SETTINGS
    activity_type = normalize_activity_type(activity_type)
    details = empty_payload(activity_type)
    if isinstance(details, FormalityPayload):
        details = replace(details, formality_kind="opening")
    elif isinstance(details, DiscussionPayload):
        details = replace(details, discussion_kind="plenary")
    elif isinstance(details, BreakPayload):
        details = replace(details, break_kind="tea")
    return TimeSlot(
        start_time=settings.default_start_time,
        duration_minutes=PRESET_DURATIONS[activity_type],
        activity_type=activity_type,
        activity_details=details,
    )


def slot_from_module(module: TrainingModule, settings: t.Optional[AgendaSettings] = None) -> TimeSlot:
    """A module slot for a module picked from the library."""
    settings = settings or DEFAULT_SETTINGS
    duration = module.duration or settings.default_duration_minutes
    return TimeSlot(
        start_time=settings.default_start_time,
        duration_minutes=duration,
        activity_type="module",
        activity_details=ModulePayload(
            module_id=module.module_id,
            title=module.module_title,
            duration=duration,
            facilitator=module.facilitator,
        ),
    )


def activity_title(slot: TimeSlot) -> str:
    """Short label for a slot, as shown in the timeline."""
    details = slot.activity_details
    if isinstance(details, ModulePayload):
        return details.title or "Module Activity"
    if isinstance(details, FormalityPayload):
        return details.formality_kind or "Formality"
    if isinstance(details, SpeakerPayload):
        if details.speaker_name or details.topic:
            return f"{details.speaker_name}: {details.topic}"
        return "Speaker Session"
    if isinstance(details, DiscussionPayload):
        return details.topic or "Discussion"
    if isinstance(details, BreakPayload):
        return f"{details.break_kind} break" if details.break_kind else "Break"
    return "Activity"


def _check_index(slots: t.Sequence[TimeSlot], index: int) -> None:
    if not 0 <= index < len(slots):
        raise IndexError(f"Time slot index {index} out of range for {len(slots)} slot(s)")
