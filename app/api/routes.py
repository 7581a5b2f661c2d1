from __future__ import annotations

import math
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import (
    SprintNotFoundError,
    TicketNotFoundError,
    WorkflowError,
    WorkflowNotConfiguredError,
)
from app.models.sprint import Sprint
from app.schemas import (
    TICKET_STATUSES,
    BoardResponse,
    SprintRead,
    StartSprintPayload,
    TicketCreate,
    TicketRead,
    TicketStatusUpdate,
    TicketUpdate,
)
from app.services.board import build_board
from app.services.db import get_db
from app.services.sprints import SprintService
from app.services.tickets import TicketService
from app.services.workflows import WorkflowClient, get_workflow_client

router = APIRouter()


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def _json_body(request: Request) -> Any:
    try:
        return await request.json()
    except ValueError:
        return {}


def _check_statuses(statuses: list[str] | None) -> list[str]:
    wanted = [value.strip().lower() for value in statuses or [] if value.strip()]
    unknown = [value for value in wanted if value not in TICKET_STATUSES]
    if unknown:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown status filter: {', '.join(unknown)}",
        )
    return wanted


# Tickets


@router.get("/api/tickets", response_model=list[TicketRead])
def list_tickets(
    statuses: list[str] | None = Query(default=None, alias="status"),
    session: Session = Depends(get_db),
):
    return TicketService(session=session).list_tickets(statuses=_check_statuses(statuses))


@router.post("/api/tickets", response_model=TicketRead, status_code=status.HTTP_201_CREATED)
def create_ticket(payload: TicketCreate, session: Session = Depends(get_db)):
    ticket = TicketService(session=session).create_ticket(**payload.model_dump())
    return TicketRead.model_validate(ticket)


@router.get("/api/tickets/{ticket_id}", response_model=TicketRead)
def get_ticket(ticket_id: str, session: Session = Depends(get_db)):
    ticket = TicketService(session=session).get_ticket(ticket_id=ticket_id)
    if ticket is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Ticket {ticket_id} not found")
    return TicketRead.model_validate(ticket)


@router.patch("/api/tickets/{ticket_id}", response_model=TicketRead)
def update_ticket(ticket_id: str, payload: TicketUpdate, session: Session = Depends(get_db)):
    try:
        ticket = TicketService(session=session).update_ticket(
            ticket_id=ticket_id,
            fields=payload.model_dump(exclude_unset=True),
        )
    except TicketNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return TicketRead.model_validate(ticket)


@router.patch("/api/tickets/{ticket_id}/status", response_model=TicketRead)
def move_ticket(ticket_id: str, payload: TicketStatusUpdate, session: Session = Depends(get_db)):
    try:
        ticket = TicketService(session=session).set_status(ticket_id=ticket_id, status=payload.status)
    except TicketNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return TicketRead.model_validate(ticket)


@router.delete("/api/tickets/")
@router.delete("/api/tickets/{ticket_id}")
def delete_ticket(ticket_id: str = "", session: Session = Depends(get_db)):
    ticket_id = ticket_id.strip()
    if not ticket_id or ticket_id == "undefined":
        return _error(status.HTTP_400_BAD_REQUEST, "Invalid ticket ID")

    try:
        TicketService(session=session).delete_ticket(ticket_id=ticket_id)
    except SQLAlchemyError as exc:
        logger.exception("Failed to delete ticket id={ticket_id}", ticket_id=ticket_id)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))

    return JSONResponse(status_code=status.HTTP_200_OK, content={"success": True})


@router.get("/api/board", response_model=BoardResponse)
def board(session: Session = Depends(get_db)):
    return build_board(TicketService(session=session).list_tickets())


# Sprints


def _sprint_read(service: SprintService, sprint: Sprint) -> SprintRead:
    return SprintRead(
        id=sprint.id,
        capacity=sprint.capacity,
        total_story_points=sprint.total_story_points,
        created_at=sprint.created_at,
        updated_at=sprint.updated_at,
        tickets=[TicketRead.model_validate(t) for t in service.sprint_tickets(sprint_id=sprint.id)],
    )


@router.post("/api/sprints", response_model=SprintRead, status_code=status.HTTP_201_CREATED)
def start_sprint(payload: StartSprintPayload, session: Session = Depends(get_db)):
    service = SprintService(session=session)
    try:
        sprint = service.start_sprint(capacity=payload.capacity, ticket_ids=payload.ticket_ids)
    except TicketNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    return _sprint_read(service, sprint)


@router.get("/api/sprints/{sprint_id}", response_model=SprintRead)
def get_sprint(sprint_id: str, session: Session = Depends(get_db)):
    service = SprintService(session=session)
    try:
        sprint = service.require_sprint(sprint_id=sprint_id)
    except SprintNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return _sprint_read(service, sprint)


# n8n workflow proxies


@router.post("/api/generate")
async def generate_tickets(request: Request, workflows: WorkflowClient = Depends(get_workflow_client)):
    body = await _json_body(request)
    spec = body.get("spec") if isinstance(body, dict) else None
    if not isinstance(spec, str) or not spec.strip():
        return _error(status.HTTP_400_BAD_REQUEST, "Spec is required")

    try:
        upstream = await workflows.generate_tickets(spec)
    except WorkflowNotConfiguredError as exc:
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))
    except WorkflowError as exc:
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc) or "Internal server error in /api/generate")

    data = upstream.body if upstream.is_json else {}
    if not upstream.ok:
        message = data.get("error") if isinstance(data, dict) else None
        return _error(upstream.status_code, message or f"n8n returned {upstream.status_code} from {upstream.url}")

    return JSONResponse(status_code=status.HTTP_200_OK, content=data)


@router.post("/api/ai/plan-sprint")
async def plan_sprint(request: Request, workflows: WorkflowClient = Depends(get_workflow_client)):
    body = await _json_body(request)
    if not isinstance(body, dict):
        body = {}
    tickets = body.get("tickets")
    capacity = body.get("capacity")

    if not isinstance(tickets, list):
        return _error(status.HTTP_400_BAD_REQUEST, "Tickets must be an array")
    if (
        isinstance(capacity, bool)
        or not isinstance(capacity, (int, float))
        or not math.isfinite(capacity)
        or capacity <= 0
    ):
        return _error(status.HTTP_400_BAD_REQUEST, "Capacity must be a positive number")

    try:
        upstream = await workflows.plan_sprint(tickets, capacity)
    except (WorkflowNotConfiguredError, WorkflowError):
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")

    # Non-JSON bodies go back as a JSON string; the planner client decodes them.
    return JSONResponse(status_code=upstream.status_code, content=upstream.body)


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}
