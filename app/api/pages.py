from __future__ import annotations

import math
from pathlib import Path

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import SprintPlanFormatError, TicketNotFoundError, WorkflowError, WorkflowNotConfiguredError
from app.schemas import TICKET_STATUSES
from app.services.board import LANES, group_into_lanes, priority_color, priority_label
from app.services.db import get_db
from app.services.sprint_plan import parse_sprint_plan
from app.services.sprints import SprintService
from app.services.tickets import TicketService
from app.services.workflows import WorkflowClient, get_workflow_client

router = APIRouter()

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))
templates.env.globals.update(priority_label=priority_label, priority_color=priority_color, lane_choices=LANES)


def _error_page(request: Request, message: str, status_code: int) -> HTMLResponse:
    return templates.TemplateResponse(request, "error.html", {"message": message}, status_code=status_code)


def _parse_capacity(raw: str) -> int | None:
    """Whole story points from a form field; fractions are floored."""
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value) or math.floor(value) <= 0:
        return None
    return math.floor(value)


@router.get("/", response_class=HTMLResponse)
def board_page(request: Request, session: Session = Depends(get_db)):
    try:
        tickets = TicketService(session=session).list_tickets()
    except SQLAlchemyError as exc:
        logger.exception("Error fetching tickets")
        return _error_page(request, f"Error loading tickets: {exc}", status.HTTP_500_INTERNAL_SERVER_ERROR)

    lanes, unplaced = group_into_lanes(tickets)
    return templates.TemplateResponse(
        request,
        "board.html",
        {"lanes": [(lane_id, title, lanes[lane_id]) for lane_id, title in LANES], "unplaced": unplaced},
    )


@router.post("/generate", response_class=HTMLResponse)
async def generate_page(
    request: Request,
    spec: str = Form(""),
    workflows: WorkflowClient = Depends(get_workflow_client),
):
    if not spec.strip():
        return _error_page(request, "Please enter a spec", status.HTTP_400_BAD_REQUEST)

    try:
        upstream = await workflows.generate_tickets(spec)
    except (WorkflowNotConfiguredError, WorkflowError) as exc:
        return _error_page(request, f"Ticket generation failed: {exc}", status.HTTP_500_INTERNAL_SERVER_ERROR)

    if not upstream.ok:
        error = upstream.body.get("error") if isinstance(upstream.body, dict) else None
        return _error_page(
            request,
            error or f"n8n returned {upstream.status_code} from {upstream.url}",
            status.HTTP_502_BAD_GATEWAY,
        )

    # The workflow writes the generated tickets itself; reloading the board shows them.
    return RedirectResponse(url="/", status_code=status.HTTP_303_SEE_OTHER)


@router.post("/tickets/{ticket_id}/move", response_class=HTMLResponse)
def move_ticket_page(
    request: Request,
    ticket_id: str,
    new_status: str = Form(..., alias="status"),
    session: Session = Depends(get_db),
):
    new_status = new_status.strip().lower()
    if new_status not in TICKET_STATUSES:
        return _error_page(request, f"Unknown status: {new_status}", status.HTTP_400_BAD_REQUEST)

    try:
        TicketService(session=session).set_status(ticket_id=ticket_id, status=new_status)
    except TicketNotFoundError as exc:
        return _error_page(request, str(exc), status.HTTP_404_NOT_FOUND)

    return RedirectResponse(url="/", status_code=status.HTTP_303_SEE_OTHER)


@router.get("/sprint", response_class=HTMLResponse)
def sprint_page(request: Request, session: Session = Depends(get_db)):
    try:
        tickets = TicketService(session=session).list_tickets(statuses=["backlog"])
    except SQLAlchemyError as exc:
        logger.exception("Error fetching backlog tickets")
        return _error_page(request, f"Error loading tickets: {exc}", status.HTTP_500_INTERNAL_SERVER_ERROR)

    return templates.TemplateResponse(request, "sprint.html", {"tickets": tickets})


@router.post("/sprint/plan", response_class=HTMLResponse)
async def plan_sprint_page(
    request: Request,
    capacity: str = Form(""),
    session: Session = Depends(get_db),
    workflows: WorkflowClient = Depends(get_workflow_client),
):
    tickets = TicketService(session=session).list_tickets(statuses=["backlog"])
    points = _parse_capacity(capacity)
    if points is None:
        return templates.TemplateResponse(
            request,
            "sprint.html",
            {"tickets": tickets, "error": "Please enter a valid capacity (greater than 0)"},
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    try:
        upstream = await workflows.plan_sprint(jsonable_encoder(tickets), points)
        if not upstream.ok:
            error = upstream.body.get("error") if isinstance(upstream.body, dict) else None
            raise WorkflowError(error or "Failed to plan sprint", status_code=upstream.status_code, body=upstream.body)
        plan = parse_sprint_plan(upstream.body)
    except (WorkflowNotConfiguredError, WorkflowError, SprintPlanFormatError) as exc:
        logger.warning("Sprint planning failed: {error}", error=exc)
        return templates.TemplateResponse(
            request,
            "sprint.html",
            {"tickets": tickets, "capacity": points, "error": str(exc)},
            status_code=status.HTTP_502_BAD_GATEWAY,
        )

    return templates.TemplateResponse(request, "sprint.html", {"tickets": tickets, "capacity": points, "plan": plan})


@router.post("/sprint/start", response_class=HTMLResponse)
def start_sprint_page(
    request: Request,
    capacity: int = Form(...),
    ticket_ids: list[str] = Form(...),
    session: Session = Depends(get_db),
):
    try:
        SprintService(session=session).start_sprint(capacity=capacity, ticket_ids=ticket_ids)
    except TicketNotFoundError as exc:
        return _error_page(request, str(exc), status.HTTP_404_NOT_FOUND)
    except ValueError as exc:
        return _error_page(request, str(exc), status.HTTP_400_BAD_REQUEST)

    return RedirectResponse(url="/sprint", status_code=status.HTTP_303_SEE_OTHER)
