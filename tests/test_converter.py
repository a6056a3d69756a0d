"""Tests for converting between agenda drafts and stored or generated records."""
import json

import pytest

from agenda_builder.converter import (FieldMap, from_generated_text, from_record, module_from_record,
                                      module_to_record, modules_from_generated_text, requirement_from_record,
                                      requirement_to_record, strip_code_fences, time_slot_from_record, to_camel,
                                      to_record, to_snake)
from agenda_builder.draft import new_draft
from agenda_builder.models import (AgendaDraft, BreakPayload, DiscussionPayload, FormalityPayload, ModulePayload,
                                   ParseError, SpeakerPayload, TimeSlot)
from agenda_builder.timeslots import insert, new_slot
from training_store.models import GroupSize, SampleMaterial, TrainingModule


GENERATED_AGENDA = {
    "title": "Consultative Selling",
    "overview": {
        "description": "A one day workshop",
        "trainingObjectives": ["Ask better questions"],
        "totalDuration": 135,
        "groupSize": 16,
    },
    "timeSlots": [
        {
            "sequenceNumber": 1,
            "startTime": "09:00",
            "duration": 15,
            "activityType": "formality",
            "activityDetails": {"formality": {"formalityType": "opening", "description": "Welcome"}},
        },
        {
            "sequenceNumber": 2,
            "startTime": "09:15",
            "duration": "90",
            "activityType": "module",
            "activityDetails": {"module": {"moduleID": "sell-1", "moduleTitle": "Discovery Calls", "duration": 90}},
            "notes": "Use role cards",
        },
        {
            "sequenceNumber": 3,
            "startTime": "10:45",
            "duration": 30,
            "activityType": "discussion",
            "activityDetails": {"discussion": {"discussionTopic": "Objections", "discussionType": "breakout"}},
        },
    ],
    "preReading": ["Chapter 1"],
    "materialsList": ["Role cards"],
}


def test_casing_helpers() -> None:
    assert to_snake("moduleID") == "module_id"
    assert to_snake("trainingTitle") == "training_title"
    assert to_camel("post_workshop_follow_up") == "postWorkshopFollowUp"


def test_field_map_loads_either_casing_and_aliases() -> None:
    field_map = FieldMap(entity="demo", keys=(("group_size", "groupSize"),), aliases={"group_size": ("size",)})

    assert field_map.load({"groupSize": 4}) == {"group_size": 4}
    assert field_map.load({"group_size": 5}) == {"group_size": 5}
    assert field_map.load({"size": 6}) == {"group_size": 6}
    assert field_map.load({}) == {}
    assert field_map.dump({"group_size": 7, "other": 1}) == {"groupSize": 7}


def test_to_record_shape() -> None:
    draft = new_draft(title="Sales Workshop", description="Intro day")
    draft.time_slots = insert(draft.time_slots, new_slot("module"))
    record = to_record(draft, "train-1")

    assert record["training_id"] == "train-1"
    assert record["training_title"] == "Sales Workshop"
    assert record["overview"] == {
        "description": "Intro day",
        "trainingObjectives": [],
        "totalDuration": 105,
        "groupSize": 12,
    }
    assert record["timeslots"][0] == {
        "sequenceNumber": 1,
        "startTime": "09:00",
        "duration": 15,
        "activityType": "break",
        "activityDetails": {
            "break": {"breakType": "tea", "location": "Main venue", "description": "Welcome and networking"}
        },
        "notes": "Arrival and informal networking",
    }
    assert record["timeslots"][1]["activityDetails"] == {
        "module": {"moduleID": "", "moduleTitle": "", "duration": 0, "facilitator": "", "notes": ""}
    }
    assert set(record) >= {"pre_reading", "post_workshop_follow_up", "facilitator_notes", "materials_list"}
    json.dumps(record)


def test_record_round_trip_keeps_every_activity_type() -> None:
    draft = AgendaDraft(
        title="Full Day",
        description="All activity types",
        time_slots=[
            TimeSlot(1, "09:00", 10, "formality", FormalityPayload("opening", "Hello")),
            TimeSlot(2, "09:10", 60, "module", ModulePayload("m1", "Listening", 60, "Kim", "Pairs")),
            TimeSlot(3, "10:10", 45, "speaker", SpeakerPayload("Ada", "CTO", "Ethics", "Talk", "Bio")),
            TimeSlot(4, "10:55", 30, "discussion", DiscussionPayload("Risks", "group", 5)),
            TimeSlot(5, "11:25", 60, "break", BreakPayload("lunch", "Cafe", "Buffet"), "Vegetarian options"),
        ],
        materials_needed=["Flipchart"],
        pre_reading=["Article"],
        post_follow_up=["Survey"],
        facilitator_notes="Keep time",
        training_objectives=["Listen"],
        group_size=20,
    )

    assert from_record(to_record(draft, "t-9")) == draft


def test_from_record_accepts_camel_case_top_level_keys() -> None:
    draft = from_record({
        "trainingTitle": "Coaching",
        "timeslots": [],
        "postWorkshopFollowUp": ["Check-in call"],
        "facilitatorNotes": "Notes",
    })
    assert draft.title == "Coaching"
    assert draft.post_follow_up == ["Check-in call"]
    assert draft.facilitator_notes == "Notes"


def test_from_record_renumbers_slots_in_stored_order() -> None:
    record = to_record(new_draft(), "t")
    record["timeslots"].append(dict(record["timeslots"][0], sequenceNumber=7))
    record["timeslots"][0]["sequenceNumber"] = 4

    draft = from_record(record)
    assert [s.sequence_number for s in draft.time_slots] == [1, 2]


def test_legacy_sharing_slot_loads_as_speaker() -> None:
    slot = time_slot_from_record({
        "sequenceNumber": 3,
        "startTime": "13:00",
        "duration": 40,
        "activityType": "sharing",
        "activityDetails": {"sharing": {"speaker": "Grace", "topic": "Compilers"}},
    })

    assert slot.activity_type == "speaker"
    assert slot.activity_details == SpeakerPayload(speaker_name="Grace", topic="Compilers")


def test_details_for_other_types_are_discarded() -> None:
    slot = time_slot_from_record({
        "activityType": "break",
        "duration": 15,
        "activityDetails": {"module": {"moduleTitle": "Leftover"}, "break": {"breakType": "stretch"}},
    })
    assert slot.activity_details == BreakPayload(break_kind="stretch")

    slot = time_slot_from_record({
        "activityType": "break",
        "duration": 15,
        "activityDetails": {"module": {"moduleTitle": "Leftover"}},
    })
    assert slot.activity_details == BreakPayload()


def test_flat_details_and_unknown_kinds() -> None:
    slot = time_slot_from_record({
        "activityType": "discussion",
        "duration": 20,
        "activityDetails": {"topic": "Wins", "discussionType": "fishbowl", "groupSize": "6"},
    })
    assert slot.activity_details == DiscussionPayload(topic="Wins", discussion_kind=None, group_size=6)


def test_strip_code_fences() -> None:
    assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fences('```\n[1]\n```') == "[1]"
    assert strip_code_fences('  {"a": 1}  ') == '{"a": 1}'


def test_fenced_and_unfenced_replies_parse_the_same() -> None:
    raw = json.dumps(GENERATED_AGENDA)
    fenced = f"```json\n{raw}\n```"

    unwrapped = from_generated_text(raw)
    assert isinstance(unwrapped, AgendaDraft)
    assert from_generated_text(fenced) == unwrapped


def test_generated_agenda_fields() -> None:
    draft = from_generated_text(json.dumps(GENERATED_AGENDA))

    assert isinstance(draft, AgendaDraft)
    assert draft.title == "Consultative Selling"
    assert draft.description == "A one day workshop"
    assert draft.training_objectives == ["Ask better questions"]
    assert draft.group_size == 16
    assert draft.pre_reading == ["Chapter 1"]
    assert draft.materials_needed == ["Role cards"]
    assert draft.facilitator_notes == "Generated by AI"
    assert [s.duration_minutes for s in draft.time_slots] == [15, 90, 30]
    assert draft.time_slots[1].activity_details.module_id == "sell-1"
    assert draft.time_slots[2].activity_details.discussion_kind == "breakout"


def test_generated_array_is_read_as_time_slots() -> None:
    raw = json.dumps(GENERATED_AGENDA["timeSlots"])
    draft = from_generated_text(raw)

    assert isinstance(draft, AgendaDraft)
    assert draft.title == ""
    assert len(draft.time_slots) == 3


def test_non_json_reply_is_a_parse_error() -> None:
    result = from_generated_text("Sure! Here is your agenda: ...")
    assert isinstance(result, ParseError)
    assert result.raw_text == "Sure! Here is your agenda: ..."
    assert result.message


def test_empty_reply_is_a_parse_error() -> None:
    result = from_generated_text("   ")
    assert isinstance(result, ParseError)
    assert result.message == "No content generated"


def test_reply_with_unknown_activity_type_is_a_parse_error() -> None:
    raw = json.dumps([{"activityType": "karaoke", "duration": 30}])
    assert isinstance(from_generated_text(raw), ParseError)


def test_reply_with_bad_number_is_a_parse_error() -> None:
    raw = json.dumps([{"activityType": "break", "duration": "a while"}])
    assert isinstance(from_generated_text(raw), ParseError)


def test_requirement_record_round_trip() -> None:
    record = {
        "training_id": "t-1",
        "training_title": "Negotiation",
        "description": "For account managers",
        "target_audience": {"experienceLevel": "advanced", "industryContext": "SaaS"},
        "constraints": {"duration": 360, "interactionLevel": "high"},
        "mindset_focus": {"learningObjectives": ["Anchor"], "primaryTopics": ["BATNA"], "secondaryTopics": []},
        "delivery_preferences": {"format": "virtual", "groupSize": 10},
    }
    requirement = requirement_from_record(record)

    assert requirement.target_duration() == 360
    assert requirement.group_size() == 10
    assert requirement.target_audience.experience_level == "advanced"
    assert requirement_to_record(requirement) == record


def test_requirement_defaults() -> None:
    requirement = requirement_from_record({"training_id": "t-2"})
    assert requirement.target_duration() == 480
    assert requirement.group_size() == 12
    assert requirement.constraints.interaction_level == "medium"


def test_module_record_round_trip() -> None:
    module = TrainingModule(
        module_id="neg-1",
        module_title="Anchoring",
        description="Setting the first number",
        category="Negotiation",
        tags=["pricing"],
        duration=45,
        group_size=GroupSize(min=4, max=30, optimal=12, optimal_breakout_size=3),
        sample_materials=[SampleMaterial("handout", "anchoring.pdf", "pdf", "")],
    )
    record = module_to_record(module)

    assert "id" not in record
    assert record["group_size"]["optimal breakout size"] == 3
    assert record["sample_materials"][0]["materialType"] == "handout"
    assert module_from_record(record) == module


def test_modules_from_generated_text_slices_array() -> None:
    raw = (
        "Here are the modules:\n"
        '[{"module_title": "Active Listening", "duration": "30", "category": "Communication"},'
        ' {"moduleID": "m2", "title": "Summarising", "duration": 20}]\n'
        "Let me know if you need more."
    )
    modules = modules_from_generated_text(raw)

    assert isinstance(modules, list)
    assert [m.module_title for m in modules] == ["Active Listening", "Summarising"]
    assert modules[0].duration == 30
    assert modules[1].module_id == "m2"


def test_modules_from_generated_text_errors() -> None:
    assert isinstance(modules_from_generated_text(""), ParseError)
    assert isinstance(modules_from_generated_text("[not json]"), ParseError)


@pytest.mark.parametrize(
    "raw",
    [
        '[{"activityType": "break", "duration": 1e400}]',
        '[{"activityType": "break", "duration": "Infinity"}]',
        '[{"activityType": "break", "duration": Infinity}]',
        '{"overview": {"groupSize": 1e999}, "timeslots": []}',
        "[" * 100000,
    ],
)
def test_out_of_range_replies_are_parse_errors(raw) -> None:
    result = from_generated_text(raw)
    assert isinstance(result, ParseError)
    assert result.raw_text == raw


@pytest.mark.parametrize(
    "raw",
    ['[{"module_title": "Huge", "duration": 1e400}]', "[" * 100000],
)
def test_out_of_range_module_replies_are_parse_errors(raw) -> None:
    assert isinstance(modules_from_generated_text(raw), ParseError)
