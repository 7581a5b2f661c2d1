from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx
from loguru import logger

from app.core.config import WorkflowConfig, get_workflow_settings
from app.core.errors import WorkflowError, WorkflowNotConfiguredError


@dataclass
class WorkflowResponse:
    url: str
    status_code: int
    body: Any
    is_json: bool

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class WorkflowClient:
    """Forwards request bodies to the n8n webhooks and hands back what they answer.

    The workflows are opaque: no retries, no reshaping. Only the configured
    timeout bounds a call.
    """

    def __init__(self, settings: WorkflowConfig, *, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.settings = settings
        self._transport = transport

    async def generate_tickets(self, spec: str) -> WorkflowResponse:
        url = self._require(self.settings.generate_tickets_url, "N8N_GENERATE_TICKETS_URL")
        return await self._post(url, {"spec": spec})

    async def plan_sprint(self, tickets: list[Any], capacity: int | float) -> WorkflowResponse:
        url = self._require(self.settings.plan_sprint_url, "N8N_PLAN_SPRINT_URL")
        return await self._post(url, {"tickets": tickets, "capacity": capacity})

    @staticmethod
    def _require(url: str | None, setting: str) -> str:
        if not url:
            logger.error("{setting} is not set", setting=setting)
            raise WorkflowNotConfiguredError(setting)
        return url

    async def _post(self, url: str, payload: dict[str, Any]) -> WorkflowResponse:
        logger.info("Calling n8n workflow url={url}", url=url)
        try:
            async with httpx.AsyncClient(timeout=self.settings.timeout_sec, transport=self._transport) as client:
                response = await client.post(url, json=payload)
        except httpx.HTTPError as exc:
            logger.error("n8n request to {url} failed: {error}", url=url, error=exc)
            raise WorkflowError(str(exc) or f"Request to {url} failed") from exc

        try:
            body, is_json = response.json(), True
        except ValueError:
            body, is_json = response.text, False

        if response.is_error:
            logger.warning("n8n error status={status} body={body}", status=response.status_code, body=body)
        return WorkflowResponse(url=url, status_code=response.status_code, body=body, is_json=is_json)


def get_workflow_client() -> WorkflowClient:
    return WorkflowClient(get_workflow_settings())
