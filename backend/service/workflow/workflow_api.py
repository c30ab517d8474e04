"""
Workflow API Client — ``WorkflowBackend`` over the dashboard REST API.

Endpoints (relative to the configured base URL)::

    GET    /organizations/{org}/workflows
    GET    /organizations/{org}/workflows/{id}
    POST   /organizations/{org}/workflows
    PATCH  /organizations/{org}/workflows/{id}
    DELETE /organizations/{org}/workflows/{id}
    POST   /organizations/{org}/workflows/{id}/activate
    POST   /organizations/{org}/workflows/{id}/deactivate
    POST   /organizations/{org}/workflows/{id}/test
    GET    /organizations/{org}/workflows/{id}/runs

Responses wrapped as ``{"data": ...}`` are unwrapped. HTTP and network
failures, and bodies that are not JSON or do not match the expected
model, are mapped onto the ``WorkflowBackendError`` hierarchy.
"""

from __future__ import annotations

from logging import getLogger
from typing import Any, Dict, List, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from service.workflow.workflow_backend import (
    ActivationRejected,
    WorkflowBackendError,
    WorkflowNotFound,
)
from service.workflow.workflow_model import (
    CreateWorkflowData,
    UpdateWorkflowData,
    WorkflowDefinition,
    WorkflowRun,
    dump_payload,
)

logger = getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        message = body.get("message") or body.get("error")
        if isinstance(message, list):
            return "; ".join(str(m) for m in message)
        if message:
            return str(message)
    return response.reason_phrase


def _unwrap(body: Any) -> Any:
    if isinstance(body, dict) and "data" in body and "id" not in body:
        return body["data"]
    return body


def _parse(model: Type[M], body: Any) -> M:
    try:
        return model.model_validate(body)
    except ValidationError as e:
        logger.error(f"Unexpected {model.__name__} response: {e}")
        raise WorkflowBackendError(f"Unexpected {model.__name__} response from server") from e


def _parse_list(model: Type[M], body: Any) -> List[M]:
    if body is None:
        return []
    if not isinstance(body, list):
        raise WorkflowBackendError(f"Expected a list of {model.__name__}, got {type(body).__name__}")
    return [_parse(model, item) for item in body]


class WorkflowApiClient:
    """Async REST client for organization workflows."""

    def __init__(
        self,
        base_url: str,
        access_token: Optional[str] = None,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        headers = {"Accept": "application/json"}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_config(cls, transport: Optional[httpx.AsyncBaseTransport] = None) -> "WorkflowApiClient":
        from service.config import get_config
        from service.config.sub_config.general.api_config import DashboardAPIConfig
        cfg = get_config(DashboardAPIConfig)
        return cls(
            base_url=cfg.api_base_url,
            access_token=cfg.access_token or None,
            timeout=cfg.request_timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "WorkflowApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # ── WorkflowBackend ──

    async def list_all(self, organization_id: str) -> List[WorkflowDefinition]:
        body = await self._request("GET", self._collection(organization_id))
        return _parse_list(WorkflowDefinition, body)

    async def get(self, organization_id: str, workflow_id: str) -> WorkflowDefinition:
        body = await self._request("GET", self._item(organization_id, workflow_id), workflow_id=workflow_id)
        return _parse(WorkflowDefinition, body)

    async def create(self, organization_id: str, data: CreateWorkflowData) -> WorkflowDefinition:
        body = await self._request("POST", self._collection(organization_id), json=dump_payload(data))
        return _parse(WorkflowDefinition, body)

    async def update(
        self, organization_id: str, workflow_id: str, data: UpdateWorkflowData,
    ) -> WorkflowDefinition:
        body = await self._request(
            "PATCH", self._item(organization_id, workflow_id),
            json=dump_payload(data), workflow_id=workflow_id,
        )
        return _parse(WorkflowDefinition, body)

    async def delete(self, organization_id: str, workflow_id: str) -> None:
        await self._request("DELETE", self._item(organization_id, workflow_id), workflow_id=workflow_id)

    async def activate(self, organization_id: str, workflow_id: str) -> WorkflowDefinition:
        try:
            body = await self._request(
                "POST", f"{self._item(organization_id, workflow_id)}/activate",
                workflow_id=workflow_id,
            )
        except WorkflowNotFound:
            raise
        except WorkflowBackendError as e:
            if e.status_code is not None and 400 <= e.status_code < 500:
                raise ActivationRejected(e.message, status_code=e.status_code) from e
            raise
        return _parse(WorkflowDefinition, body)

    async def deactivate(self, organization_id: str, workflow_id: str) -> WorkflowDefinition:
        body = await self._request(
            "POST", f"{self._item(organization_id, workflow_id)}/deactivate",
            workflow_id=workflow_id,
        )
        return _parse(WorkflowDefinition, body)

    async def test_run(
        self, organization_id: str, workflow_id: str,
        test_data: Optional[Dict[str, Any]] = None,
    ) -> WorkflowRun:
        body = await self._request(
            "POST", f"{self._item(organization_id, workflow_id)}/test",
            json={"testData": test_data}, workflow_id=workflow_id,
        )
        return _parse(WorkflowRun, body)

    async def list_runs(self, organization_id: str, workflow_id: str) -> List[WorkflowRun]:
        body = await self._request(
            "GET", f"{self._item(organization_id, workflow_id)}/runs", workflow_id=workflow_id,
        )
        return _parse_list(WorkflowRun, body)

    # ── Internals ──

    @staticmethod
    def _collection(organization_id: str) -> str:
        return f"/organizations/{organization_id}/workflows"

    def _item(self, organization_id: str, workflow_id: str) -> str:
        return f"{self._collection(organization_id)}/{workflow_id}"

    async def _request(
        self,
        method: str,
        url: str,
        json: Optional[Dict[str, Any]] = None,
        workflow_id: Optional[str] = None,
    ) -> Any:
        try:
            response = await self._client.request(method, url, json=json)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 404 and workflow_id:
                raise WorkflowNotFound(workflow_id) from e
            message = _error_message(e.response)
            logger.error(f"{method} {url} failed with {status}: {message}")
            raise WorkflowBackendError(message, status_code=status) from e
        except httpx.RequestError as e:
            logger.error(f"{method} {url} failed: {e}")
            raise WorkflowBackendError(f"Request failed: {e}") from e

        if response.status_code == 204 or not response.content:
            return None
        try:
            body = response.json()
        except ValueError as e:
            logger.error(f"{method} {url} returned a non-JSON body")
            raise WorkflowBackendError(
                "Invalid JSON response from server", status_code=response.status_code,
            ) from e
        return _unwrap(body)
