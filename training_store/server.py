# -*- coding: utf-8 -*-
import os
import typing as t

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError

from agenda_builder.converter import from_record, module_from_record, module_to_record, requirement_from_record, \
    requirement_to_record, to_record
from agenda_builder.errors import AgendaValidationError, PersistenceError
from training_store import repository
from training_store.models import AGENDAS_TABLE
from training_store.http_store import HttpRecordStore
from training_store.store import store as local_store

mcp = FastMCP("TrainingStore")

# Talk to the training service when one is configured, otherwise keep records in process
store = HttpRecordStore() if os.getenv("TRAINING_SERVICE_URL") else local_store


@mcp.tool()
def create_training_module(module: dict[str, t.Any]) -> dict:
    """Adds a module to the module library.

    :param module: Training module record (snake_case or camelCase keys).
    :return: The stored module record with its id.
    """
    try:
        created = repository.add_module(store, module_from_record(module))
    except PersistenceError as e:
        raise ToolError(f"Failed to save training module: {e}") from e
    return {**module_to_record(created), "id": created.id}


@mcp.tool()
def list_training_modules() -> list[dict]:
    """Lists all training modules, newest first.

    :return: A list of training module records.
    """
    try:
        modules = repository.list_modules(store)
    except PersistenceError as e:
        raise ToolError(f"Failed to fetch training modules: {e}") from e
    return [{**module_to_record(m), "id": m.id} for m in modules]


@mcp.tool()
def create_training_requirement(requirement: dict[str, t.Any]) -> dict:
    """Records a training requirement.

    :param requirement: Training requirement record.
    :return: The stored requirement record with its id.
    """
    try:
        created = repository.add_requirement(store, requirement_from_record(requirement))
    except PersistenceError as e:
        raise ToolError(f"Failed to save training requirement: {e}") from e
    return {**requirement_to_record(created), "id": created.id}


@mcp.tool()
def save_agenda(
        agenda: dict[str, t.Any],
        training_id: str,
        target_minutes: int,
        agenda_id: str = "",
) -> dict:
    """Validates an agenda and saves it.

    :param agenda: Agenda record (stored or generated shape).
    :param training_id: Training the agenda belongs to.
    :param target_minutes: Target duration used for validation.
    :param agenda_id: Existing agenda to update; empty to create a new one.
    :return: The saved agenda record.
    """
    try:
        return repository.save_agenda(store, from_record(agenda), training_id, target_minutes, agenda_id or None)
    except AgendaValidationError as e:
        raise ToolError(str(e)) from e
    except PersistenceError as e:
        raise ToolError(f"Failed to save training agenda: {e}") from e


@mcp.tool()
def load_agenda(agenda_id: str) -> dict:
    """Loads an agenda for editing, with legacy fields normalised.

    :param agenda_id: Id of the stored agenda.
    :return: The normalised agenda record.
    """
    try:
        record = store.read(AGENDAS_TABLE, agenda_id)
    except PersistenceError as e:
        raise ToolError(f"Failed to load training agenda: {e}") from e
    if record is None:
        raise ToolError(f"Agenda not found: {agenda_id}")
    return {**to_record(from_record(record), record.get("training_id", "")), "id": agenda_id}


if __name__ == "__main__":
    mcp.run()
