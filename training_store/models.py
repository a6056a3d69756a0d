"""
Data models for training requirements and training modules.

These are the records agendas are built from: a requirement describes the
session to design, modules are the reusable activities that fill it.
"""
from __future__ import annotations

import typing as t
from dataclasses import dataclass, field

from agenda_builder.config import DEFAULT_SETTINGS, AgendaSettings


# Table names in the record store
REQUIREMENTS_TABLE = "training_requirements"
MODULES_TABLE = "training_modules"
AGENDAS_TABLE = "training_agendas"
TABLES = (REQUIREMENTS_TABLE, MODULES_TABLE, AGENDAS_TABLE)

DeliveryFormat = t.Literal["presentation", "exercise", "discussion", "game", "reflection"]


@dataclass
class TargetAudience:
    experience_level: str = "intermediate"
    industry_context: str = ""


@dataclass
class Constraints:
    duration: t.Optional[int] = None  # minutes
    interaction_level: str = "medium"


@dataclass
class MindsetFocus:
    learning_objectives: list[str] = field(default_factory=list)
    primary_topics: list[str] = field(default_factory=list)
    secondary_topics: list[str] = field(default_factory=list)


@dataclass
class DeliveryPreferences:
    format: str = "in-person"
    group_size: t.Optional[int] = None


@dataclass
class TrainingRequirement:
    """
    What a training session has to achieve, for whom, and in how long.
    """
    training_id: str = ""
    training_title: str = ""
    description: str = ""
    target_audience: TargetAudience = field(default_factory=TargetAudience)
    constraints: Constraints = field(default_factory=Constraints)
    mindset_focus: MindsetFocus = field(default_factory=MindsetFocus)
    delivery_preferences: DeliveryPreferences = field(default_factory=DeliveryPreferences)
    id: str = ""

    def target_duration(self, settings: t.Optional[AgendaSettings] = None) -> int:
        """Target agenda length in minutes, falling back to the configured default."""
        settings = settings or DEFAULT_SETTINGS
        return self.constraints.duration or settings.default_target_minutes

    def group_size(self, settings: t.Optional[AgendaSettings] = None) -> int:
        settings = settings or DEFAULT_SETTINGS
        return self.delivery_preferences.group_size or settings.default_group_size


@dataclass
class DeliveryMethod:
    format: str = ""
    breakout: str = "no"  # "yes" | "no"


@dataclass
class GroupSize:
    min: t.Optional[int] = None
    max: t.Optional[int] = None
    optimal: t.Optional[int] = None
    optimal_breakout_size: t.Optional[int] = None


@dataclass
class SampleMaterial:
    material_type: str = ""  # presentation, facilitator_guide, handout, worksheet, ...
    filename: str = ""
    file_format: str = ""    # pptx, pdf, jpeg
    file_url: str = ""


@dataclass
class TrainingModule:
    """
    A reusable training activity from the module library.
    """
    module_id: str = ""
    module_title: str = ""
    description: str = ""
    facilitator: str = ""
    participant: str = ""
    category: str = ""
    tags: list[str] = field(default_factory=list)
    duration: int = 0  # minutes
    delivery_method: DeliveryMethod = field(default_factory=DeliveryMethod)
    group_size: GroupSize = field(default_factory=GroupSize)
    mindset_topics: list[str] = field(default_factory=list)
    delivery_notes: str = ""
    sample_materials: list[SampleMaterial] = field(default_factory=list)
    id: str = ""
