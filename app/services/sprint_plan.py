"""Normalization of the sprint-planning workflow's response.

The n8n workflow has answered in several shapes over time:

    {"sprint_tickets": [...], "total_points": 13}
    {"tickets": [...], "total_points": 13}
    [...]

and any of those may arrive JSON-encoded inside a string, or wrapped in a
one-item list (n8n's item array). Shapes are tried in that fixed order; a body
that matches none of them is an error, never an empty plan.
"""

from __future__ import annotations

import json
import math
from typing import Any

from loguru import logger

from app.core.errors import SprintPlanFormatError
from app.schemas.sprint import SprintPlan

WRAPPED_KEYS = ("sprint_tickets", "tickets")
TOTAL_KEYS = ("total_points", "total_story_points")
_MAX_DECODE_DEPTH = 3


def parse_sprint_plan(raw: Any) -> SprintPlan:
    body = _decode(raw)

    # n8n "respond with all items" wraps the object in a one-element array
    if isinstance(body, list) and len(body) == 1 and _is_wrapped(body[0]):
        body = body[0]

    for key in WRAPPED_KEYS:
        if isinstance(body, dict) and key in body:
            tickets = _ticket_list(_decode(body[key]), source=key)
            return _build(tickets, upstream_total=_upstream_total(body), shape=key)

    if isinstance(body, list):
        tickets = _ticket_list(body, source="array")
        return _build(tickets, upstream_total=None, shape="array")

    logger.warning("Unrecognized sprint plan response: {body}", body=body)
    raise SprintPlanFormatError(
        "Unrecognized sprint plan response: expected 'sprint_tickets', 'tickets' or an array of tickets, "
        f"got {_describe(body)}"
    )


def sum_story_points(tickets: list[dict[str, Any]]) -> int:
    return sum(_points(ticket.get("story_points")) for ticket in tickets)


def _decode(value: Any) -> Any:
    depth = 0
    while isinstance(value, str):
        if depth >= _MAX_DECODE_DEPTH:
            raise SprintPlanFormatError("Sprint plan response is nested too deeply in JSON strings")
        try:
            value = json.loads(value)
        except json.JSONDecodeError as exc:
            raise SprintPlanFormatError(f"Sprint plan response is not valid JSON: {exc.msg}") from exc
        depth += 1
    return value


def _is_wrapped(value: Any) -> bool:
    return isinstance(value, dict) and any(key in value for key in WRAPPED_KEYS)


def _ticket_list(value: Any, *, source: str) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        raise SprintPlanFormatError(f"Expected '{source}' to be an array, got {_describe(value)}")
    for index, item in enumerate(value):
        if not isinstance(item, dict):
            raise SprintPlanFormatError(f"Entry {index} of '{source}' is not a ticket object: {_describe(item)}")
    return value


def _upstream_total(body: dict[str, Any]) -> int | None:
    for key in TOTAL_KEYS:
        value = body.get(key)
        if value is None or isinstance(value, bool):
            continue
        if isinstance(value, (int, float)):
            if not math.isfinite(value):
                raise SprintPlanFormatError(f"Sprint plan {key} is not a finite number: {value}")
            return int(value)
        if isinstance(value, str) and value.strip().lstrip("-").isdigit():
            return int(value.strip())
    return None


def _points(value: Any) -> int:
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            raise SprintPlanFormatError(f"Ticket story points are not a finite number: {value}")
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return 0


def _build(tickets: list[dict[str, Any]], *, upstream_total: int | None, shape: str) -> SprintPlan:
    total = upstream_total if upstream_total is not None else sum_story_points(tickets)
    logger.debug("Parsed sprint plan shape={shape} tickets={count} total={total}", shape=shape, count=len(tickets), total=total)
    return SprintPlan(tickets=tickets, total_points=total, source_shape=shape)


def _describe(value: Any) -> str:
    if isinstance(value, dict):
        keys = ", ".join(sorted(map(str, value))) or "no keys"
        return f"object with {keys}"
    return type(value).__name__
