# -*- coding: utf-8 -*-
"""Typed access to the record store for agendas, modules and requirements."""
from __future__ import annotations

import typing as t

from loguru import logger

from agenda_builder.config import AgendaSettings
from agenda_builder.converter import (from_record, module_from_record, module_to_record, requirement_from_record,
                                      requirement_to_record, to_record)
from agenda_builder.draft import ensure_savable
from agenda_builder.errors import PersistenceError
from agenda_builder.models import AgendaDraft
from training_store.models import (AGENDAS_TABLE, MODULES_TABLE, REQUIREMENTS_TABLE, TrainingModule,
                                   TrainingRequirement)

if t.TYPE_CHECKING:
    from training_store.http_store import HttpRecordStore
    from training_store.store import RecordStore

    Store = t.Union[RecordStore, HttpRecordStore]


def save_agenda(
        store: Store,
        draft: AgendaDraft,
        training_id: str,
        target: int,
        agenda_id: t.Optional[str] = None,
        settings: t.Optional[AgendaSettings] = None,
) -> dict[str, t.Any]:
    """Validate a draft and create or update its agenda record.

    The draft itself is never modified, so a failed save can be retried.

    Raises:
        AgendaValidationError: If the draft does not pass validation.
        PersistenceError: If the store rejects the write.
    """
    ensure_savable(draft, target, settings)
    record = to_record(draft, training_id, settings)
    if agenda_id:
        saved = store.update(AGENDAS_TABLE, agenda_id, record)
    else:
        saved = store.create(AGENDAS_TABLE, record)
    logger.info("Saved agenda", agenda_id=saved.get("id"), training_id=training_id)
    return saved


def load_agenda(store: Store, agenda_id: str) -> AgendaDraft:
    """Hydrate a draft for editing.

    Raises:
        PersistenceError: If there is no such agenda.
    """
    record = store.read(AGENDAS_TABLE, agenda_id)
    if record is None:
        raise PersistenceError(f"Agenda not found: {agenda_id}", status_code=404)
    return from_record(record)


def add_module(store: Store, module: TrainingModule) -> TrainingModule:
    return module_from_record(store.create(MODULES_TABLE, module_to_record(module)))


def list_modules(store: Store) -> list[TrainingModule]:
    return [module_from_record(r) for r in store.list(MODULES_TABLE)]


def add_requirement(store: Store, requirement: TrainingRequirement) -> TrainingRequirement:
    return requirement_from_record(store.create(REQUIREMENTS_TABLE, requirement_to_record(requirement)))


def get_requirement(store: Store, requirement_id: str) -> TrainingRequirement:
    """
    Raises:
        PersistenceError: If there is no such requirement.
    """
    record = store.read(REQUIREMENTS_TABLE, requirement_id)
    if record is None:
        raise PersistenceError(f"Training requirement not found: {requirement_id}", status_code=404)
    return requirement_from_record(record)
