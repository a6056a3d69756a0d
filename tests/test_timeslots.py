"""Tests for time-slot collection editing.

This module tests sequencing after structural edits, activity type changes,
payload edits and module selection.
"""
import pytest

from agenda_builder.config import AgendaSettings
from agenda_builder.draft import compute_total_duration, new_draft
from agenda_builder.models import BreakPayload, DiscussionPayload, ModulePayload, SpeakerPayload, TimeSlot
from agenda_builder.timeslots import (activity_title, change_activity_type, delete, edit_details, edit_payload,
                                      edit_slot, insert, move, new_slot, reorder, resequence, select_module,
                                      slot_from_module, update)
from training_store.models import TrainingModule


def make_slots(*durations: int) -> list[TimeSlot]:
    """Module slots with the given durations, numbered 1..N."""
    return resequence([
        TimeSlot(duration_minutes=d, activity_type="module", activity_details=ModulePayload(title=f"M{i}"))
        for i, d in enumerate(durations, 1)
    ])


def sequence_numbers(slots: list[TimeSlot]) -> list[int]:
    return [s.sequence_number for s in slots]


def test_insert_appends_after_highest_sequence_number() -> None:
    """A new slot gets max + 1, whatever number it came with."""
    slots = make_slots(30, 45)
    result = insert(slots, TimeSlot(sequence_number=99, duration_minutes=15, activity_type="break",
                                    activity_details=BreakPayload()))

    assert sequence_numbers(result) == [1, 2, 3]
    assert result[-1].activity_type == "break"
    assert len(slots) == 2  # input untouched


def test_insert_into_empty_schedule_starts_at_one() -> None:
    result = insert([], new_slot("discussion"))
    assert sequence_numbers(result) == [1]


def test_delete_renumbers_densely() -> None:
    slots = make_slots(10, 20, 30, 40)
    result = delete(slots, 1)

    assert sequence_numbers(result) == [1, 2, 3]
    assert [s.duration_minutes for s in result] == [10, 30, 40]


def test_delete_out_of_range_raises() -> None:
    with pytest.raises(IndexError):
        delete(make_slots(10), 3)


def test_update_replaces_slot_without_renumbering() -> None:
    slots = make_slots(10, 20)
    replacement = TimeSlot(sequence_number=7, duration_minutes=60, activity_type="speaker",
                           activity_details=SpeakerPayload(speaker_name="Ada"))
    result = update(slots, 0, replacement)

    assert result[0] is replacement
    assert sequence_numbers(result) == [7, 2]
    assert slots[0].duration_minutes == 10


def test_reorder_with_identity_permutation_is_allowed() -> None:
    """Re-submitting the current order is valid and keeps numbering dense."""
    slots = make_slots(10, 20, 30)
    result = reorder(slots, list(slots))

    assert sequence_numbers(result) == [1, 2, 3]
    assert [s.duration_minutes for s in result] == [10, 20, 30]


def test_reorder_renumbers_in_new_order() -> None:
    slots = make_slots(10, 20, 30)
    result = reorder(slots, [slots[2], slots[0], slots[1]])

    assert sequence_numbers(result) == [1, 2, 3]
    assert [s.duration_minutes for s in result] == [30, 10, 20]


def test_reorder_rejects_non_permutation() -> None:
    slots = make_slots(10, 20, 30)
    with pytest.raises(ValueError):
        reorder(slots, [slots[0], slots[1]])
    with pytest.raises(ValueError):
        reorder(slots, [slots[0], slots[1], slots[1]])


def test_move_places_slot_at_new_index() -> None:
    slots = make_slots(10, 20, 30)
    result = move(slots, 0, 2)

    assert [s.duration_minutes for s in result] == [20, 30, 10]
    assert sequence_numbers(result) == [1, 2, 3]


def test_change_activity_type_allocates_fresh_payload() -> None:
    """Nothing from a module payload survives a switch to a break."""
    slot = TimeSlot(sequence_number=2, start_time="11:00", duration_minutes=90, activity_type="module",
                    activity_details=ModulePayload(module_id="m1", title="Negotiation", duration=90))
    changed = change_activity_type(slot, "break")

    assert changed.activity_type == "break"
    assert changed.activity_details == BreakPayload()
    assert changed.start_time == "11:00"
    assert changed.duration_minutes == 90
    assert changed.sequence_number == 2


def test_change_activity_type_accepts_legacy_sharing() -> None:
    changed = change_activity_type(new_slot("module"), "sharing")
    assert changed.activity_type == "speaker"
    assert isinstance(changed.activity_details, SpeakerPayload)


def test_change_activity_type_rejects_unknown_type() -> None:
    with pytest.raises(ValueError):
        change_activity_type(new_slot("module"), "lecture")


def test_edit_payload_preserves_sibling_fields() -> None:
    payload = DiscussionPayload(topic="Pricing", discussion_kind="breakout", group_size=4)
    edited = edit_payload(payload, "topic", "Scoping")

    assert edited == DiscussionPayload(topic="Scoping", discussion_kind="breakout", group_size=4)
    assert payload.topic == "Pricing"


def test_edit_payload_rejects_unknown_field() -> None:
    with pytest.raises(ValueError):
        edit_payload(BreakPayload(), "topic", "x")


def test_edit_slot_routes_activity_type_change() -> None:
    slot = edit_slot(new_slot("module"), "activity_type", "discussion")
    assert isinstance(slot.activity_details, DiscussionPayload)

    slot = edit_slot(slot, "notes", "Bring flipcharts")
    assert slot.notes == "Bring flipcharts"

    with pytest.raises(ValueError):
        edit_slot(slot, "sequence_number", 5)


def test_edit_details_changes_one_payload_field() -> None:
    slot = edit_details(new_slot("break"), "location", "Atrium")
    assert slot.activity_details == BreakPayload(break_kind="tea", location="Atrium")


def test_select_module_copies_duration_onto_slot() -> None:
    module = TrainingModule(module_id="neg-101", module_title="Negotiation Basics", duration=75)
    slot = edit_details(new_slot("module"), "facilitator", "Sam")
    selected = select_module(slot, module)

    assert selected.duration_minutes == 75
    assert selected.activity_details.module_id == "neg-101"
    assert selected.activity_details.title == "Negotiation Basics"
    assert selected.activity_details.duration == 75
    assert selected.activity_details.facilitator == "Sam"


def test_select_module_without_duration_uses_default() -> None:
    module = TrainingModule(module_id="x", module_title="Open Space")
    selected = select_module(new_slot("module"), module, AgendaSettings(default_duration_minutes=50))
    assert selected.duration_minutes == 50


def test_select_module_on_break_slot_raises() -> None:
    with pytest.raises(ValueError):
        select_module(new_slot("break"), TrainingModule(module_id="x"))


def test_new_slot_presets() -> None:
    assert new_slot("module").duration_minutes == 90
    assert new_slot("formality").activity_details.formality_kind == "opening"
    assert new_slot("speaker").duration_minutes == 45
    assert new_slot("discussion").activity_details.discussion_kind == "plenary"
    assert new_slot("break").duration_minutes == 15
    assert new_slot("break").start_time == "10:00"


def test_slot_from_module_carries_module_fields() -> None:
    module = TrainingModule(module_id="m7", module_title="Feedback", facilitator="Lee", duration=40)
    slot = slot_from_module(module)

    assert slot.duration_minutes == 40
    assert slot.activity_details == ModulePayload(module_id="m7", title="Feedback", duration=40, facilitator="Lee")


def test_activity_title_labels() -> None:
    assert activity_title(new_slot("module")) == "Module Activity"
    assert activity_title(new_slot("break")) == "tea break"
    speaker = edit_details(edit_details(new_slot("speaker"), "speaker_name", "Ada"), "topic", "Ethics")
    assert activity_title(speaker) == "Ada: Ethics"


def test_building_and_trimming_an_agenda() -> None:
    """Opening slot, a 90 minute module and a discussion, then drop the module."""
    draft = new_draft(title="Sales Workshop")
    slots = insert(draft.time_slots, new_slot("module"))
    slots = insert(slots, new_slot("discussion"))

    assert compute_total_duration(slots) == 135
    assert sequence_numbers(slots) == [1, 2, 3]

    slots = delete(slots, 1)
    assert sequence_numbers(slots) == [1, 2]
    assert compute_total_duration(slots) == 45


EDIT_SEQUENCES = [
    [("insert", "module"), ("insert", "break"), ("delete", 0), ("move", 1, 0), ("reorder", [1, 0])],
    [("delete", 0), ("insert", "speaker"), ("insert", "discussion"), ("insert", "formality"), ("move", 0, 2),
     ("delete", 1), ("reorder", [1, 0])],
    [("insert", "module"), ("insert", "module"), ("insert", "break"), ("reorder", [3, 2, 1, 0]), ("delete", 3),
     ("move", 2, 0), ("delete", 0), ("delete", 0), ("insert", "discussion")],
]


def apply_edit(slots: list[TimeSlot], step: tuple) -> list[TimeSlot]:
    op, *args = step
    if op == "insert":
        return insert(slots, new_slot(args[0]))
    if op == "delete":
        return delete(slots, args[0])
    if op == "move":
        return move(slots, args[0], args[1])
    return reorder(slots, [slots[i] for i in args[0]])


@pytest.mark.parametrize("steps", EDIT_SEQUENCES)
def test_sequence_numbers_stay_dense_through_mixed_edits(steps) -> None:
    """After every structural edit, slot i carries sequence number i + 1."""
    slots = new_draft().time_slots
    for step in steps:
        slots = apply_edit(slots, step)
        assert [s.sequence_number for s in slots] == list(range(1, len(slots) + 1)), step
