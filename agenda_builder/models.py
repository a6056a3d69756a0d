"""
Data models for training agendas.

This module contains the dataclasses used to represent an agenda while it is
being edited: the time slots, their activity payloads, and the draft that
holds them together.
"""
from __future__ import annotations

import typing as t
from dataclasses import dataclass, field
from enum import Enum


# Type literals for commonly used values
ActivityType = t.Literal["module", "formality", "speaker", "discussion", "break"]
FormalityKind = t.Literal["opening", "intro", "review", "qa", "nextsteps", "closing"]
DiscussionKind = t.Literal["plenary", "breakout", "group"]
BreakKind = t.Literal["tea", "lunch", "stretch", "mingling", "long"]

ACTIVITY_TYPES: tuple[str, ...] = ("module", "formality", "speaker", "discussion", "break")
FORMALITY_KINDS: tuple[str, ...] = ("opening", "intro", "review", "qa", "nextsteps", "closing")
DISCUSSION_KINDS: tuple[str, ...] = ("plenary", "breakout", "group")
BREAK_KINDS: tuple[str, ...] = ("tea", "lunch", "stretch", "mingling", "long")

# Older agendas call speaker sessions "sharing".
LEGACY_ACTIVITY_TYPES: dict[str, str] = {"sharing": "speaker"}


@dataclass
class ModulePayload:
    """A training module scheduled into a slot."""
    activity_type: t.ClassVar[str] = "module"

    module_id: str = ""
    title: str = ""
    duration: int = 0
    facilitator: str = ""
    notes: str = ""


@dataclass
class FormalityPayload:
    """Opening, intro, review, Q&A, next steps or closing."""
    activity_type: t.ClassVar[str] = "formality"

    formality_kind: t.Optional[FormalityKind] = None
    description: str = ""


@dataclass
class SpeakerPayload:
    """A guest speaker or sharing session."""
    activity_type: t.ClassVar[str] = "speaker"

    speaker_name: str = ""
    speaker_title: str = ""
    topic: str = ""
    description: str = ""
    speaker_bio: str = ""


@dataclass
class DiscussionPayload:
    """
    A facilitated discussion.
    `group_size` only matters for breakout and group discussions.
    """
    activity_type: t.ClassVar[str] = "discussion"

    topic: str = ""
    discussion_kind: t.Optional[DiscussionKind] = None
    group_size: t.Optional[int] = None


@dataclass
class BreakPayload:
    """Tea, lunch, stretch, mingling or long break."""
    activity_type: t.ClassVar[str] = "break"

    break_kind: t.Optional[BreakKind] = None
    location: str = ""
    description: str = ""


ActivityPayload = t.Union[ModulePayload, FormalityPayload, SpeakerPayload, DiscussionPayload, BreakPayload]

PAYLOAD_TYPES: dict[str, type] = {
    "module": ModulePayload,
    "formality": FormalityPayload,
    "speaker": SpeakerPayload,
    "discussion": DiscussionPayload,
    "break": BreakPayload,
}


def normalize_activity_type(activity_type: str) -> str:
    """Map legacy names onto the canonical activity type.

    :raises ValueError: if the name is not a known activity type.
    """
    name = (activity_type or "").strip().lower()
    name = LEGACY_ACTIVITY_TYPES.get(name, name)
    if name not in PAYLOAD_TYPES:
        raise ValueError(f"Unknown activity type: {activity_type!r}")
    return name


def empty_payload(activity_type: str) -> ActivityPayload:
    """Allocate a fresh, empty payload for the given activity type."""
    return PAYLOAD_TYPES[normalize_activity_type(activity_type)]()


@dataclass
class TimeSlot:
    """
    One scheduled entry in an agenda.

    `start_time` is advisory ("HH:MM"); it is never recomputed from the
    durations of earlier slots.
    """
    sequence_number: int = 0
    start_time: str = ""
    duration_minutes: int = 0
    activity_type: ActivityType = "module"
    activity_details: ActivityPayload = field(default_factory=ModulePayload)
    notes: str = ""

    def __post_init__(self) -> None:
        self.activity_type = normalize_activity_type(self.activity_type)
        expected = PAYLOAD_TYPES[self.activity_type]
        if not isinstance(self.activity_details, expected):
            raise ValueError(
                f"{self.activity_type!r} slot cannot carry a "
                f"{type(self.activity_details).__name__}"
            )


@dataclass
class AgendaDraft:
    """
    The agenda under edit.

    The total duration is derived from the time slots on every read.
    """
    title: str = ""
    description: str = ""
    time_slots: list[TimeSlot] = field(default_factory=list)
    materials_needed: list[str] = field(default_factory=list)
    pre_reading: list[str] = field(default_factory=list)
    post_follow_up: list[str] = field(default_factory=list)
    facilitator_notes: str = ""
    training_objectives: list[str] = field(default_factory=list)
    group_size: t.Optional[int] = None

    @property
    def total_duration_minutes(self) -> int:
        return sum(slot.duration_minutes for slot in self.time_slots)


class ValidationError(Enum):
    """Reasons an agenda cannot be saved yet."""
    TOO_SHORT = "too_short"
    TOO_LONG = "too_long"
    EMPTY = "empty"


class DurationStatus(Enum):
    """How the agenda's total duration compares to its target."""
    SHORT = "short"
    GOOD = "good"
    LONG = "long"


@dataclass
class ParseError:
    """Generated text that could not be turned into a draft."""
    raw_text: str
    message: str
