"""
FastAPI service for training records.

Exposes the record store (training requirements, training modules, training
agendas) as REST endpoints, plus agenda validation and parsing of generated
agenda text. No LLM calls are made here.
"""
from __future__ import annotations

import typing as t
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from loguru import logger

from agenda_builder.converter import from_generated_text, from_record, to_record
from agenda_builder.draft import compute_total_duration, describe_errors, duration_status, validate
from agenda_builder.errors import AgendaValidationError, PersistenceError
from agenda_builder.models import ParseError
from services.shared.models import (
    AgendaRecord,
    ParseGeneratedRequest,
    ParseGeneratedResponse,
    SaveAgendaRequest,
    ValidateAgendaRequest,
    ValidateAgendaResponse,
)
from training_store import repository
from training_store.store import RecordStore, store


def get_store() -> RecordStore:
    return store


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize resources on startup and cleanup on shutdown."""
    logger.info("Training service starting", tables=get_store().tables)
    yield


app = FastAPI(
    title="Training Service",
    description="REST API for training requirements, modules and agendas",
    version="1.0.0",
    lifespan=lifespan,
)


def _http_error(e: PersistenceError) -> HTTPException:
    return HTTPException(status_code=e.status_code or 500, detail=str(e))


@app.get("/health")
async def health_check():
    """Health check endpoint for container orchestration."""
    return {"status": "healthy", "service": "training-service"}


@app.post("/agendas/validate", response_model=ValidateAgendaResponse)
async def validate_agenda(request: ValidateAgendaRequest) -> ValidateAgendaResponse:
    """
    Check an agenda against a target duration.

    Validation never blocks editing; it only reports what would block a save.
    """
    try:
        draft = from_record(request.agenda)
    except (ValueError, TypeError) as e:
        raise HTTPException(status_code=422, detail=f"Invalid agenda record: {e}")
    total = compute_total_duration(draft)
    errors = validate(draft, request.target_minutes)
    return ValidateAgendaResponse(
        total_duration=total,
        target_duration=request.target_minutes,
        status=duration_status(draft, request.target_minutes).value,
        errors=[e.value for e in errors],
        messages=describe_errors(errors, total, request.target_minutes),
    )


@app.post("/agendas/parse-generated", response_model=ParseGeneratedResponse)
async def parse_generated(request: ParseGeneratedRequest) -> ParseGeneratedResponse:
    """
    Turn a model reply into an agenda record.

    A reply that is not valid JSON is reported in the response body, not as an
    HTTP error, so the client can show the raw text for editing.
    """
    result = from_generated_text(request.raw_text)
    if isinstance(result, ParseError):
        return ParseGeneratedResponse(
            error=f"The AI response is not valid JSON: {result.message}",
            raw_text=result.raw_text,
        )
    return ParseGeneratedResponse(agenda=AgendaRecord(**to_record(result, request.training_id)))


@app.post("/agendas/save", response_model=AgendaRecord)
async def save_agenda(request: SaveAgendaRequest) -> AgendaRecord:
    """Validate an agenda and create its record."""
    try:
        draft = from_record(request.agenda)
        saved = repository.save_agenda(get_store(), draft, request.training_id, request.target_minutes)
    except AgendaValidationError as e:
        raise HTTPException(status_code=422, detail=e.messages)
    except PersistenceError as e:
        raise _http_error(e)
    except (ValueError, TypeError) as e:
        raise HTTPException(status_code=422, detail=f"Invalid agenda record: {e}")
    return AgendaRecord(**saved)


@app.get("/{table}")
async def list_records(table: str, order_by: str = "created_at", descending: bool = True) -> list[dict[str, t.Any]]:
    """List all records in a table."""
    try:
        return get_store().list(table, order_by=order_by, descending=descending)
    except PersistenceError as e:
        raise _http_error(e)


@app.post("/{table}", status_code=201)
async def create_record(table: str, record: dict[str, t.Any]) -> dict[str, t.Any]:
    """Create a record and return it with its id and timestamps."""
    try:
        return get_store().create(table, record)
    except PersistenceError as e:
        raise _http_error(e)


@app.get("/{table}/{record_id}")
async def read_record(table: str, record_id: str) -> dict[str, t.Any]:
    """Fetch one record. Missing records are a 404, never sample data."""
    try:
        record = get_store().read(table, record_id)
    except PersistenceError as e:
        raise _http_error(e)
    if record is None:
        raise HTTPException(status_code=404, detail=f"No record {record_id} in {table}")
    return record


@app.patch("/{table}/{record_id}")
async def update_record(table: str, record_id: str, patch: dict[str, t.Any]) -> dict[str, t.Any]:
    """Merge a partial update into a record."""
    try:
        return get_store().update(table, record_id, patch)
    except PersistenceError as e:
        raise _http_error(e)


@app.delete("/{table}/{record_id}", status_code=204)
async def delete_record(table: str, record_id: str) -> None:
    try:
        get_store().delete(table, record_id)
    except PersistenceError as e:
        raise _http_error(e)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8004)
