from __future__ import annotations

import math
from typing import Any

import httpx
from loguru import logger

from app.core.errors import MomentumError, WorkflowError
from app.schemas.sprint import SprintPlan
from app.services.sprint_plan import parse_sprint_plan


class SprintPlanner:
    """Drives the sprint-planning page: propose a sprint, then commit it."""

    def __init__(self, http: httpx.Client) -> None:
        self._http = http
        self.backlog: list[dict[str, Any]] = []
        self.capacity: int = 0
        self.proposal: SprintPlan | None = None

    def load_backlog(self) -> list[dict[str, Any]]:
        response = self._http.get("/api/tickets", params={"status": "backlog"})
        response.raise_for_status()
        self.backlog = response.json()
        return self.backlog

    def plan(self, capacity: int | float) -> SprintPlan:
        # Sprint capacity is stored in whole points, so fractions are floored before planning.
        if isinstance(capacity, bool) or not math.isfinite(capacity) or math.floor(capacity) <= 0:
            raise ValueError("Please enter a valid capacity (greater than 0)")
        capacity = math.floor(capacity)
        if not self.backlog:
            self.load_backlog()

        response = self._http.post("/api/ai/plan-sprint", json={"tickets": self.backlog, "capacity": capacity})
        try:
            body = response.json()
        except ValueError:
            body = response.text

        if response.is_error:
            message = body.get("error") if isinstance(body, dict) else None
            raise WorkflowError(message or "Failed to plan sprint", status_code=response.status_code, body=body)

        self.capacity = capacity
        self.proposal = parse_sprint_plan(body)
        logger.info(
            "Proposed sprint with {count} tickets ({points} points)",
            count=len(self.proposal.tickets),
            points=self.proposal.total_points,
        )
        return self.proposal

    def start_sprint(self) -> dict[str, Any]:
        if self.proposal is None or not self.proposal.ticket_ids:
            raise ValueError("No proposed tickets to start a sprint with")

        response = self._http.post(
            "/api/sprints",
            json={"capacity": self.capacity, "ticket_ids": self.proposal.ticket_ids},
        )
        if response.is_error:
            try:
                data = response.json()
            except ValueError:
                data = None
            message = data.get("error") if isinstance(data, dict) else None
            raise MomentumError(message or f"Failed to start sprint (HTTP {response.status_code})")

        sprint = response.json()
        self.proposal = None
        self.load_backlog()
        return sprint
