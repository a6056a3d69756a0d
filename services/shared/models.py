"""
Shared Pydantic models for REST API serialization.

Agenda records keep the stored shape: snake_case columns at the top level,
camelCase keys inside the overview and time slot JSON.
"""
from __future__ import annotations

import typing as t
from pydantic import BaseModel, ConfigDict, Field


class Overview(BaseModel):
    """Summary block of an agenda record."""
    description: str = ""
    trainingObjectives: list[str] = Field(default_factory=list)
    totalDuration: int = 0
    groupSize: t.Optional[int] = None


class TimeSlotRecord(BaseModel):
    """
    One stored time slot. Activity details are keyed by activity type:
    {"module": {"moduleID": ..., "moduleTitle": ..., "duration": ...}}
    """
    sequenceNumber: int
    startTime: str = ""
    duration: int
    activityType: str
    activityDetails: dict[str, dict[str, t.Any]] = Field(default_factory=dict)
    notes: str = ""


class AgendaRecord(BaseModel):
    """A training agenda as stored in the training_agendas table."""
    model_config = ConfigDict(extra="allow")

    id: t.Optional[str] = None
    training_id: str = ""
    training_title: str = ""
    overview: Overview = Field(default_factory=Overview)
    timeslots: list[TimeSlotRecord] = Field(default_factory=list)
    pre_reading: list[str] = Field(default_factory=list)
    post_workshop_follow_up: list[str] = Field(default_factory=list)
    facilitator_notes: str = ""
    materials_list: list[str] = Field(default_factory=list)
    created_at: t.Optional[str] = None
    updated_at: t.Optional[str] = None


# Request/Response Models for API endpoints
class ValidateAgendaRequest(BaseModel):
    """Request model for checking an agenda against its target duration."""
    agenda: dict[str, t.Any]
    target_minutes: int = 480


class ValidateAgendaResponse(BaseModel):
    """Response model for agenda validation."""
    total_duration: int
    target_duration: int
    status: t.Literal["short", "good", "long"]
    errors: list[t.Literal["too_short", "too_long", "empty"]] = Field(default_factory=list)
    messages: list[str] = Field(default_factory=list)


class ParseGeneratedRequest(BaseModel):
    """Request model for turning a model reply into an agenda."""
    raw_text: str
    training_id: str = ""


class ParseGeneratedResponse(BaseModel):
    """Either the parsed agenda or the parse error with the raw text."""
    agenda: t.Optional[AgendaRecord] = None
    error: t.Optional[str] = None
    raw_text: t.Optional[str] = None


class SaveAgendaRequest(BaseModel):
    """Request model for validating and saving an agenda."""
    agenda: dict[str, t.Any]
    training_id: str
    target_minutes: int = 480
