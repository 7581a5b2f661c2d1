from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import httpx
from loguru import logger

from app.client.editor import TicketEditor
from app.core.errors import BoardSyncError, MomentumError, WorkflowError
from app.services.board import LANE_IDS, group_into_lanes
from app.utils.pdf import extract_pdf_text


@dataclass(frozen=True)
class DropLocation:
    lane_id: str
    index: int


class BoardClient:
    """Local state of the Kanban board, kept in sync with the service over HTTP.

    The ticket list is replaced wholesale on every load. Moves are applied
    locally first; if the store rejects the write the list is re-read rather
    than patched back, so the store always has the final word.
    """

    def __init__(self, http: httpx.Client) -> None:
        self._http = http
        self.tickets: list[dict[str, Any]] = []

    def load(self) -> list[dict[str, Any]]:
        response = self._http.get("/api/tickets")
        response.raise_for_status()
        self.tickets = response.json()
        return self.tickets

    def lanes(self) -> dict[str, list[dict[str, Any]]]:
        lanes, _ = group_into_lanes(self.tickets)
        return lanes

    def find(self, ticket_id: str) -> dict[str, Any] | None:
        return next((ticket for ticket in self.tickets if ticket["id"] == ticket_id), None)

    def move(self, ticket_id: str, source: DropLocation, destination: DropLocation | None) -> bool:
        """Handle a card drop. Returns False when the drop changes nothing."""
        if destination is None or destination == source:
            return False
        if destination.lane_id not in LANE_IDS:
            raise ValueError(f"Unknown lane: {destination.lane_id}")

        new_status = destination.lane_id
        self.tickets = [
            {**ticket, "status": new_status} if ticket["id"] == ticket_id else ticket for ticket in self.tickets
        ]

        try:
            response = self._http.patch(f"/api/tickets/{ticket_id}/status", json={"status": new_status})
            failed = response.is_error
            detail = _error_message(response) if failed else None
        except httpx.HTTPError as exc:
            failed, detail = True, str(exc)

        if failed:
            logger.error("Failed to update status of {ticket_id}: {detail}", ticket_id=ticket_id, detail=detail)
            self._resync()
            raise BoardSyncError(f"Failed to move ticket {ticket_id}: {detail}")
        return True

    def generate(self, spec: str) -> Any:
        if not spec or not spec.strip():
            raise ValueError("Please enter a spec")

        response = self._http.post("/api/generate", json={"spec": spec})
        data = _json_or_empty(response)
        if response.is_error or (isinstance(data, dict) and data.get("error")):
            message = data.get("error") if isinstance(data, dict) else None
            raise WorkflowError(message or "Failed to generate tickets", status_code=response.status_code, body=data)

        self.load()
        return data

    def generate_from_pdf(self, source: str | Path | bytes) -> Any:
        return self.generate(extract_pdf_text(source))

    def open_editor(self, ticket: dict[str, Any] | None = None) -> TicketEditor:
        return TicketEditor(self._http, ticket=ticket, on_close=self.load)

    def delete_ticket(self, ticket_id: str) -> None:
        response = self._http.delete(f"/api/tickets/{ticket_id}")
        if response.is_error:
            raise MomentumError(_error_message(response))
        self.load()

    def _resync(self) -> None:
        try:
            self.load()
        except httpx.HTTPError as exc:
            logger.error("Error fetching tickets: {error}", error=exc)


def _json_or_empty(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return {}


def _error_message(response: httpx.Response) -> str:
    data = _json_or_empty(response)
    if isinstance(data, dict) and data.get("error"):
        return str(data["error"])
    return f"HTTP {response.status_code}"
