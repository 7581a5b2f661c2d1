from __future__ import annotations

from typing import Any, Callable

import httpx
from loguru import logger

from app.core.errors import MomentumError

FORM_FIELDS = ("title", "description", "type", "priority", "story_points")
REQUIRED_FIELDS = ("title", "type", "priority")


class TicketEditor:
    """The create/edit ticket form.

    Field values are kept as text, like form inputs. Only required-field checks
    happen here; the service validates the rest.
    """

    def __init__(
        self,
        http: httpx.Client,
        *,
        ticket: dict[str, Any] | None = None,
        on_close: Callable[[], Any] | None = None,
    ) -> None:
        self._http = http
        self._on_close = on_close
        self.ticket_id = ticket["id"] if ticket else None
        self.mode = "edit" if ticket else "create"
        self.form = self._initial_form(ticket)

    @staticmethod
    def _initial_form(ticket: dict[str, Any] | None) -> dict[str, str]:
        form = {field: "" for field in FORM_FIELDS}
        if ticket:
            for field in FORM_FIELDS:
                value = ticket.get(field)
                form[field] = "" if value is None else str(value)
        return form

    def missing_fields(self) -> list[str]:
        return [field for field in REQUIRED_FIELDS if not self.form.get(field, "").strip()]

    def payload(self) -> dict[str, Any]:
        points = self.form.get("story_points", "").strip()
        try:
            story_points = int(points) if points else None
        except ValueError:
            raise ValueError("Story points must be a whole number") from None
        return {
            "title": self.form["title"],
            "description": self.form["description"],
            "type": self.form["type"],
            "priority": self.form["priority"],
            "story_points": story_points,
        }

    def submit(self) -> dict[str, Any]:
        missing = self.missing_fields()
        if missing:
            raise ValueError(f"Missing required fields: {', '.join(missing)}")

        payload = self.payload()
        if self.mode == "edit":
            response = self._http.patch(f"/api/tickets/{self.ticket_id}", json=payload)
        else:
            response = self._http.post("/api/tickets", json=payload)

        if response.is_error:
            action = "update" if self.mode == "edit" else "create"
            logger.error("Failed to {action} ticket: {body}", action=action, body=response.text)
            raise MomentumError(f"Failed to {action} ticket. Please try again.")

        saved = response.json()
        self.form = self._initial_form(None)
        self.close()
        return saved

    def close(self) -> None:
        if self._on_close is not None:
            self._on_close()
