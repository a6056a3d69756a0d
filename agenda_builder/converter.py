# -*- coding: utf-8 -*-
"""
Conversion between agenda drafts and stored records.

Stored records use snake_case column names at the top level and camelCase
keys inside the JSON columns (overview, timeslots, activity details). One
declared FieldMap per entity drives both directions, and loading accepts
either casing for every key.
"""
from __future__ import annotations

import json
import math
import re
import typing as t
from dataclasses import asdict, dataclass, field, fields

from loguru import logger

from agenda_builder.config import DEFAULT_SETTINGS, AgendaSettings
from agenda_builder.draft import compute_total_duration
from agenda_builder.models import (BREAK_KINDS, DISCUSSION_KINDS, FORMALITY_KINDS, LEGACY_ACTIVITY_TYPES,
                                   PAYLOAD_TYPES, ActivityPayload, AgendaDraft, ParseError, TimeSlot,
                                   normalize_activity_type)
from agenda_builder.timeslots import resequence
from training_store.models import (Constraints, DeliveryMethod, DeliveryPreferences, GroupSize, MindsetFocus,
                                   SampleMaterial, TargetAudience, TrainingModule, TrainingRequirement)


_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])")


def to_snake(name: str) -> str:
    """moduleID -> module_id, trainingTitle -> training_title"""
    return _CAMEL_BOUNDARY.sub(r"_\1", name).lower()


def to_camel(name: str) -> str:
    """training_title -> trainingTitle"""
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


@dataclass(frozen=True)
class FieldMap:
    """
    Declared mapping from attribute names to stored key names for one entity.

    `aliases` lists extra keys accepted on load, e.g. names used by older
    records or by generated output.
    """
    entity: str
    keys: tuple[tuple[str, str], ...]
    aliases: dict[str, tuple[str, ...]] = field(default_factory=dict)

    def dump(self, values: t.Mapping[str, t.Any]) -> dict[str, t.Any]:
        """Rename attribute keys to stored keys. Unmapped keys are dropped."""
        return {stored: values[attr] for attr, stored in self.keys if attr in values}

    def load(self, data: t.Mapping[str, t.Any]) -> dict[str, t.Any]:
        """Rename stored keys (in either casing) to attribute keys.

        Only keys present in `data` appear in the result.
        """
        loaded: dict[str, t.Any] = {}
        for attr, stored in self.keys:
            for candidate in self._candidates(attr, stored):
                if candidate in data:
                    loaded[attr] = data[candidate]
                    break
        return loaded

    def _candidates(self, attr: str, stored: str) -> list[str]:
        names = [stored, to_snake(stored), to_camel(stored), attr, to_camel(attr)]
        names.extend(self.aliases.get(attr, ()))
        return list(dict.fromkeys(names))


# -----------------------------
# Field tables
# -----------------------------

AGENDA_FIELDS = FieldMap(
    entity="training_agenda",
    keys=(
        ("id", "id"),
        ("training_id", "training_id"),
        ("title", "training_title"),
        ("overview", "overview"),
        ("time_slots", "timeslots"),
        ("pre_reading", "pre_reading"),
        ("post_follow_up", "post_workshop_follow_up"),
        ("facilitator_notes", "facilitator_notes"),
        ("materials_needed", "materials_list"),
        ("user_id", "user_id"),
        ("created_at", "created_at"),
        ("updated_at", "updated_at"),
    ),
    aliases={
        "training_id": ("trainingID",),
        "time_slots": ("timeSlots",),
        "post_follow_up": ("postFollowUp",),
        "user_id": ("userID",),
        "title": ("title",),
    },
)

OVERVIEW_FIELDS = FieldMap(
    entity="agenda_overview",
    keys=(
        ("description", "description"),
        ("training_objectives", "trainingObjectives"),
        ("total_duration", "totalDuration"),
        ("group_size", "groupSize"),
    ),
)

TIME_SLOT_FIELDS = FieldMap(
    entity="timeslot",
    keys=(
        ("sequence_number", "sequenceNumber"),
        ("start_time", "startTime"),
        ("duration_minutes", "duration"),
        ("activity_type", "activityType"),
        ("activity_details", "activityDetails"),
        ("notes", "notes"),
    ),
)

PAYLOAD_FIELDS: dict[str, FieldMap] = {
    "module": FieldMap(
        entity="module_activity",
        keys=(
            ("module_id", "moduleID"),
            ("title", "moduleTitle"),
            ("duration", "duration"),
            ("facilitator", "facilitator"),
            ("notes", "notes"),
        ),
        aliases={"module_id": ("moduleId",), "title": ("title",)},
    ),
    "formality": FieldMap(
        entity="formality_activity",
        keys=(
            ("formality_kind", "formalityType"),
            ("description", "description"),
        ),
        aliases={"formality_kind": ("formalityKind",)},
    ),
    "speaker": FieldMap(
        entity="speaker_activity",
        keys=(
            ("speaker_name", "speakerName"),
            ("speaker_title", "speakerTitle"),
            ("topic", "topic"),
            ("description", "description"),
            ("speaker_bio", "speakerBio"),
        ),
        # "sharing" sessions stored the speaker's name under "speaker"
        aliases={"speaker_name": ("speaker",)},
    ),
    "discussion": FieldMap(
        entity="discussion_activity",
        keys=(
            ("topic", "discussionTopic"),
            ("discussion_kind", "discussionType"),
            ("group_size", "groupSize"),
        ),
        aliases={"topic": ("topic",), "discussion_kind": ("discussionKind",)},
    ),
    "break": FieldMap(
        entity="break_activity",
        keys=(
            ("break_kind", "breakType"),
            ("location", "location"),
            ("description", "description"),
        ),
        aliases={"break_kind": ("breakKind",)},
    ),
}

REQUIREMENT_FIELDS = FieldMap(
    entity="training_requirement",
    keys=(
        ("id", "id"),
        ("training_id", "training_id"),
        ("training_title", "training_title"),
        ("description", "description"),
        ("target_audience", "target_audience"),
        ("constraints", "constraints"),
        ("mindset_focus", "mindset_focus"),
        ("delivery_preferences", "delivery_preferences"),
    ),
    aliases={"training_id": ("trainingID",)},
)

TARGET_AUDIENCE_FIELDS = FieldMap(
    entity="target_audience",
    keys=(("experience_level", "experienceLevel"), ("industry_context", "industryContext")),
)

CONSTRAINTS_FIELDS = FieldMap(
    entity="constraints",
    keys=(("duration", "duration"), ("interaction_level", "interactionLevel")),
)

MINDSET_FOCUS_FIELDS = FieldMap(
    entity="mindset_focus",
    keys=(
        ("learning_objectives", "learningObjectives"),
        ("primary_topics", "primaryTopics"),
        ("secondary_topics", "secondaryTopics"),
    ),
)

DELIVERY_PREFERENCES_FIELDS = FieldMap(
    entity="delivery_preferences",
    keys=(("format", "format"), ("group_size", "groupSize")),
)

MODULE_FIELDS = FieldMap(
    entity="training_module",
    keys=(
        ("id", "id"),
        ("module_id", "module_id"),
        ("module_title", "module_title"),
        ("description", "description"),
        ("facilitator", "facilitator"),
        ("participant", "participant"),
        ("category", "category"),
        ("tags", "tags"),
        ("duration", "duration"),
        ("delivery_method", "delivery_method"),
        ("group_size", "group_size"),
        ("mindset_topics", "mindset_topics"),
        ("delivery_notes", "delivery_notes"),
        ("sample_materials", "sample_materials"),
    ),
    aliases={"module_id": ("moduleID",), "module_title": ("title",)},
)

DELIVERY_METHOD_FIELDS = FieldMap(
    entity="delivery_method",
    keys=(("format", "format"), ("breakout", "breakout")),
)

GROUP_SIZE_FIELDS = FieldMap(
    entity="group_size",
    keys=(
        ("min", "min"),
        ("max", "max"),
        ("optimal", "optimal"),
        ("optimal_breakout_size", "optimal breakout size"),
    ),
    aliases={"optimal_breakout_size": ("optimalBreakoutSize",)},
)

SAMPLE_MATERIAL_FIELDS = FieldMap(
    entity="sample_material",
    keys=(
        ("material_type", "materialType"),
        ("filename", "filename"),
        ("file_format", "fileFormat"),
        ("file_url", "fileUrl"),
    ),
)

_ALLOWED_KINDS: dict[str, tuple[str, ...]] = {
    "formality_kind": FORMALITY_KINDS,
    "discussion_kind": DISCUSSION_KINDS,
    "break_kind": BREAK_KINDS,
}


# -----------------------------
# Coercion helpers
# -----------------------------

def _as_int(value: t.Any, default: t.Optional[int] = 0) -> t.Optional[int]:
    """Generated output often quotes numbers ("90")."""
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        raise TypeError(f"Expected a number, got {value!r}")
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"Expected a finite number, got {value!r}")
    return int(number)


def _as_str(value: t.Any) -> str:
    return "" if value is None else str(value)


def _as_str_list(value: t.Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return [_as_str(item) for item in value]


# -----------------------------
# Time slots
# -----------------------------

def payload_to_record(payload: ActivityPayload) -> dict[str, t.Any]:
    """Serialise one activity payload with its stored key names."""
    return PAYLOAD_FIELDS[payload.activity_type].dump(asdict(payload))


def payload_from_record(activity_type: str, data: t.Mapping[str, t.Any]) -> ActivityPayload:
    """Build the payload for `activity_type` from a stored or generated mapping."""
    values = PAYLOAD_FIELDS[activity_type].load(data)
    payload_cls = PAYLOAD_TYPES[activity_type]
    kwargs: dict[str, t.Any] = {}
    for f in fields(payload_cls):
        if f.name not in values:
            continue
        value = values[f.name]
        if f.name in _ALLOWED_KINDS:
            kind = _as_str(value).strip().lower() or None
            if kind is not None and kind not in _ALLOWED_KINDS[f.name]:
                logger.debug("Dropping unknown activity kind", field=f.name, value=value)
                kind = None
            kwargs[f.name] = kind
        elif f.name == "duration":
            kwargs[f.name] = _as_int(value)
        elif f.name == "group_size":
            kwargs[f.name] = _as_int(value, default=None)
        else:
            kwargs[f.name] = _as_str(value)
    return payload_cls(**kwargs)


def _select_details(activity_type: str, details: t.Any) -> t.Mapping[str, t.Any]:
    """Find the payload for `activity_type` inside stored activity details.

    Details are normally keyed by activity type ({"module": {...}}), may list
    payloads for several types (generated output does), or may be flat.
    Payloads for other types are discarded.
    """
    if not details:
        return {}
    if not isinstance(details, t.Mapping):
        raise TypeError(f"activityDetails must be an object, got {type(details).__name__}")
    type_keys = set(PAYLOAD_TYPES) | set(LEGACY_ACTIVITY_TYPES)
    legacy_names = [old for old, new in LEGACY_ACTIVITY_TYPES.items() if new == activity_type]
    for key in (activity_type, *legacy_names):
        if isinstance(details.get(key), t.Mapping):
            return details[key]
    if any(isinstance(details.get(key), t.Mapping) for key in type_keys):
        return {}
    return details


def time_slot_to_record(slot: TimeSlot) -> dict[str, t.Any]:
    values = asdict(slot)
    values["activity_details"] = {slot.activity_type: payload_to_record(slot.activity_details)}
    return TIME_SLOT_FIELDS.dump(values)


def time_slot_from_record(data: t.Mapping[str, t.Any]) -> TimeSlot:
    """Hydrate one time slot, normalising legacy activity types."""
    if not isinstance(data, t.Mapping):
        raise TypeError(f"Time slot must be an object, got {type(data).__name__}")
    values = TIME_SLOT_FIELDS.load(data)
    activity_type = normalize_activity_type(_as_str(values.get("activity_type", "module")))
    details = _select_details(activity_type, values.get("activity_details"))
    return TimeSlot(
        sequence_number=_as_int(values.get("sequence_number")),
        start_time=_as_str(values.get("start_time")),
        duration_minutes=_as_int(values.get("duration_minutes")),
        activity_type=activity_type,
        activity_details=payload_from_record(activity_type, details),
        notes=_as_str(values.get("notes")),
    )


# -----------------------------
# Agendas
# -----------------------------

def to_record(
        draft: AgendaDraft,
        training_id: str,
        settings: t.Optional[AgendaSettings] = None,
) -> dict[str, t.Any]:
    """Map a draft to the stored training agenda record.

    Call only once `validate` has returned no errors.

    :param draft: The agenda being saved.
    :param training_id: The training requirement this agenda belongs to.
    :return: A record for the training_agendas table.
    """
    settings = settings or DEFAULT_SETTINGS
    overview = OVERVIEW_FIELDS.dump({
        "description": draft.description,
        "training_objectives": list(draft.training_objectives),
        "total_duration": compute_total_duration(draft),
        "group_size": draft.group_size or settings.default_group_size,
    })
    return AGENDA_FIELDS.dump({
        "training_id": training_id,
        "title": draft.title,
        "overview": overview,
        "time_slots": [time_slot_to_record(slot) for slot in draft.time_slots],
        "pre_reading": list(draft.pre_reading),
        "post_follow_up": list(draft.post_follow_up),
        "facilitator_notes": draft.facilitator_notes,
        "materials_needed": list(draft.materials_needed),
    })


def from_record(record: t.Mapping[str, t.Any]) -> AgendaDraft:
    """Hydrate a draft from a stored agenda record.

    Accepts snake_case or camelCase keys and legacy "sharing" slots. Slots
    are renumbered 1..N in stored order.
    """
    values = AGENDA_FIELDS.load(record)
    overview = OVERVIEW_FIELDS.load(values.get("overview") or {})
    slots = [time_slot_from_record(slot) for slot in values.get("time_slots") or []]
    return AgendaDraft(
        title=_as_str(values.get("title")),
        description=_as_str(overview.get("description")),
        time_slots=resequence(slots),
        materials_needed=_as_str_list(values.get("materials_needed")),
        pre_reading=_as_str_list(values.get("pre_reading")),
        post_follow_up=_as_str_list(values.get("post_follow_up")),
        facilitator_notes=_as_str(values.get("facilitator_notes")),
        training_objectives=_as_str_list(overview.get("training_objectives")),
        group_size=_as_int(overview.get("group_size"), default=None),
    )


def strip_code_fences(raw_text: str) -> str:
    """Remove a surrounding ``` or ```json fence from generated text."""
    text = raw_text.strip()
    if text.startswith("```json"):
        text = text[len("```json"):]
    elif text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]
    return text.strip()


def from_generated_text(raw_text: t.Optional[str]) -> t.Union[AgendaDraft, ParseError]:
    """Parse a chat-completion reply into a draft.

    An object is read as a whole agenda; an array is read as its time slots.
    Any failure is returned as a ParseError rather than raised.
    """
    if not raw_text or not raw_text.strip():
        return ParseError(raw_text=raw_text or "", message="No content generated")
    try:
        data = json.loads(strip_code_fences(raw_text))
        if isinstance(data, list):
            return AgendaDraft(time_slots=resequence([time_slot_from_record(slot) for slot in data]))
        if not isinstance(data, dict):
            raise TypeError(f"Expected a JSON object or array, got {type(data).__name__}")
        draft = from_record(data)
        if not draft.facilitator_notes:
            draft.facilitator_notes = "Generated by AI"
        return draft
    except (ValueError, TypeError, AttributeError, OverflowError, RecursionError) as e:
        # json.JSONDecodeError is a ValueError
        logger.warning("Generated agenda could not be parsed", error=str(e))
        return ParseError(raw_text=raw_text, message=str(e))


# -----------------------------
# Requirements and modules
# -----------------------------

def requirement_to_record(requirement: TrainingRequirement) -> dict[str, t.Any]:
    return REQUIREMENT_FIELDS.dump({
        "training_id": requirement.training_id,
        "training_title": requirement.training_title,
        "description": requirement.description,
        "target_audience": TARGET_AUDIENCE_FIELDS.dump(asdict(requirement.target_audience)),
        "constraints": CONSTRAINTS_FIELDS.dump(asdict(requirement.constraints)),
        "mindset_focus": MINDSET_FOCUS_FIELDS.dump(asdict(requirement.mindset_focus)),
        "delivery_preferences": DELIVERY_PREFERENCES_FIELDS.dump(asdict(requirement.delivery_preferences)),
    })


def requirement_from_record(record: t.Mapping[str, t.Any]) -> TrainingRequirement:
    values = REQUIREMENT_FIELDS.load(record)
    audience = TARGET_AUDIENCE_FIELDS.load(values.get("target_audience") or {})
    constraints = CONSTRAINTS_FIELDS.load(values.get("constraints") or {})
    focus = MINDSET_FOCUS_FIELDS.load(values.get("mindset_focus") or {})
    preferences = DELIVERY_PREFERENCES_FIELDS.load(values.get("delivery_preferences") or {})
    return TrainingRequirement(
        id=_as_str(values.get("id")),
        training_id=_as_str(values.get("training_id")),
        training_title=_as_str(values.get("training_title")),
        description=_as_str(values.get("description")),
        target_audience=TargetAudience(
            experience_level=_as_str(audience.get("experience_level")) or "intermediate",
            industry_context=_as_str(audience.get("industry_context")),
        ),
        constraints=Constraints(
            duration=_as_int(constraints.get("duration"), default=None),
            interaction_level=_as_str(constraints.get("interaction_level")) or "medium",
        ),
        mindset_focus=MindsetFocus(
            learning_objectives=_as_str_list(focus.get("learning_objectives")),
            primary_topics=_as_str_list(focus.get("primary_topics")),
            secondary_topics=_as_str_list(focus.get("secondary_topics")),
        ),
        delivery_preferences=DeliveryPreferences(
            format=_as_str(preferences.get("format")) or "in-person",
            group_size=_as_int(preferences.get("group_size"), default=None),
        ),
    )


def module_to_record(module: TrainingModule) -> dict[str, t.Any]:
    values = asdict(module)
    values.pop("id")
    values["delivery_method"] = DELIVERY_METHOD_FIELDS.dump(asdict(module.delivery_method))
    values["group_size"] = GROUP_SIZE_FIELDS.dump(asdict(module.group_size))
    values["sample_materials"] = [SAMPLE_MATERIAL_FIELDS.dump(asdict(m)) for m in module.sample_materials]
    return MODULE_FIELDS.dump(values)


def module_from_record(record: t.Mapping[str, t.Any]) -> TrainingModule:
    values = MODULE_FIELDS.load(record)
    method = DELIVERY_METHOD_FIELDS.load(values.get("delivery_method") or {})
    size = GROUP_SIZE_FIELDS.load(values.get("group_size") or {})
    materials = []
    for item in values.get("sample_materials") or []:
        if isinstance(item, str):
            materials.append(SampleMaterial(filename=item))
            continue
        material = SAMPLE_MATERIAL_FIELDS.load(item)
        materials.append(SampleMaterial(**{k: _as_str(v) for k, v in material.items()}))
    return TrainingModule(
        id=_as_str(values.get("id")),
        module_id=_as_str(values.get("module_id")),
        module_title=_as_str(values.get("module_title")),
        description=_as_str(values.get("description")),
        facilitator=_as_str(values.get("facilitator")),
        participant=_as_str(values.get("participant")),
        category=_as_str(values.get("category")),
        tags=_as_str_list(values.get("tags")),
        duration=_as_int(values.get("duration")),
        delivery_method=DeliveryMethod(
            format=_as_str(method.get("format")),
            breakout=_as_str(method.get("breakout")) or "no",
        ),
        group_size=GroupSize(**{k: _as_int(v, default=None) for k, v in size.items()}),
        mindset_topics=_as_str_list(values.get("mindset_topics")),
        delivery_notes=_as_str(values.get("delivery_notes")),
        sample_materials=materials,
    )


def modules_from_generated_text(raw_text: t.Optional[str]) -> t.Union[list[TrainingModule], ParseError]:
    """Parse a module-research reply into training modules.

    The reply should hold a JSON array; text around it is ignored. A single
    object is accepted as one module.
    """
    if not raw_text or not raw_text.strip():
        return ParseError(raw_text=raw_text or "", message="No content received from AI")
    text = strip_code_fences(raw_text)
    start, end = text.find("["), text.rfind("]")
    if start != -1 and end > start:
        text = text[start:end + 1]
    try:
        data = json.loads(text)
        items = data if isinstance(data, list) else [data]
        return [module_from_record(item) for item in items]
    except (ValueError, TypeError, AttributeError, OverflowError, RecursionError) as e:
        logger.warning("Generated modules could not be parsed", error=str(e))
        return ParseError(raw_text=raw_text, message=str(e))
