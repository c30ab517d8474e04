# tests/workflow/test_api_client.py

import json

import httpx
import pytest

from service.workflow.workflow_api import WorkflowApiClient
from service.workflow.workflow_backend import (
    ActivationRejected,
    WorkflowBackendError,
    WorkflowNotFound,
)
from service.workflow.workflow_editor import SaveRequestFailed, WorkflowEditor
from service.workflow.workflow_model import (
    CreateWorkflowData,
    RunStepStatus,
    UpdateWorkflowData,
    WorkflowEdge,
    WorkflowNode,
    WorkflowRunStatus,
)

pytestmark = pytest.mark.asyncio

BASE = "https://api.test/api/v1"

WORKFLOW = {
    "id": "wf-1",
    "organizationId": "org-1",
    "name": "Print",
    "triggerType": "trigger.order.created",
    "nodes": [{"id": "n1", "type": "trigger.order.created", "data": {}, "position": {"x": 0, "y": 0}}],
    "edges": [],
    "isActive": False,
    "isSystem": False,
}


def _client(handler, **kwargs):
    return WorkflowApiClient(BASE, transport=httpx.MockTransport(handler), **kwargs)


async def test_list_unwraps_data_envelope():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["auth"] = request.headers.get("authorization")
        return httpx.Response(200, json={"data": [WORKFLOW]})

    async with _client(handler, access_token="tok") as client:
        workflows = await client.list_all("org-1")

    assert seen["url"] == f"{BASE}/organizations/org-1/workflows"
    assert seen["auth"] == "Bearer tok"
    assert [w.id for w in workflows] == ["wf-1"]


async def test_get_plain_body():
    async with _client(lambda r: httpx.Response(200, json=WORKFLOW)) as client:
        wf = await client.get("org-1", "wf-1")
    assert wf.trigger_type == "trigger.order.created"
    assert wf.nodes[0].type == "trigger.order.created"


async def test_get_not_found():
    async with _client(lambda r: httpx.Response(404, json={"message": "nope"})) as client:
        with pytest.raises(WorkflowNotFound) as exc:
            await client.get("org-1", "wf-x")
    assert exc.value.workflow_id == "wf-x"


async def test_create_sends_wire_payload():
    captured = {}

    def handler(request):
        captured["method"] = request.method
        captured["body"] = json.loads(request.content)
        return httpx.Response(201, json={**WORKFLOW, "id": "wf-new"})

    data = CreateWorkflowData(
        name="Print",
        description="",
        trigger_type="trigger.order.created",
        nodes=[
            WorkflowNode(id="n1", type="condition.expression", config={"expression": "x"}),
            WorkflowNode(id="n2", type="action.flow.log"),
        ],
        edges=[WorkflowEdge(id="e1", source="n1", target="n2", source_handle="true")],
    )
    async with _client(handler) as client:
        wf = await client.create("org-1", data)

    body = captured["body"]
    assert captured["method"] == "POST"
    assert wf.id == "wf-new"
    assert body["isActive"] is False
    assert body["triggerType"] == "trigger.order.created"
    assert body["nodes"][0]["data"] == {"expression": "x"}
    assert body["edges"] == [{"id": "e1", "source": "n1", "target": "n2", "sourceHandle": "true"}]


async def test_update_uses_patch():
    captured = {}

    def handler(request):
        captured["method"] = request.method
        captured["path"] = request.url.path
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json=WORKFLOW)

    async with _client(handler) as client:
        await client.update("org-1", "wf-1", UpdateWorkflowData(name="Print", trigger_type="trigger.manual"))

    assert captured["method"] == "PATCH"
    assert captured["path"].endswith("/organizations/org-1/workflows/wf-1")
    assert captured["body"]["description"] is None
    assert "isActive" not in captured["body"]


async def test_delete_accepts_no_content():
    async with _client(lambda r: httpx.Response(204)) as client:
        assert await client.delete("org-1", "wf-1") is None


async def test_server_error_maps_to_backend_error():
    async with _client(lambda r: httpx.Response(500, json={"error": "boom"})) as client:
        with pytest.raises(WorkflowBackendError) as exc:
            await client.create("org-1", CreateWorkflowData(name="x", trigger_type="trigger.manual"))
    assert exc.value.status_code == 500
    assert exc.value.message == "boom"


async def test_network_error_maps_to_backend_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as client:
        with pytest.raises(WorkflowBackendError) as exc:
            await client.list_all("org-1")
    assert exc.value.status_code is None


async def test_activate_rejection():
    def handler(request):
        assert request.url.path.endswith("/wf-1/activate")
        return httpx.Response(400, json={"message": ["Workflow has no nodes"]})

    async with _client(handler) as client:
        with pytest.raises(ActivationRejected) as exc:
            await client.activate("org-1", "wf-1")
    assert exc.value.message == "Workflow has no nodes"


async def test_deactivate():
    def handler(request):
        assert request.url.path.endswith("/wf-1/deactivate")
        return httpx.Response(200, json={"data": {**WORKFLOW, "isActive": False}})

    async with _client(handler) as client:
        wf = await client.deactivate("org-1", "wf-1")
    assert wf.is_active is False


async def test_from_config_reads_environment(monkeypatch):
    monkeypatch.setenv("DASHBOARD_API_URL", "https://env.test/v2/")
    monkeypatch.setenv("DASHBOARD_API_TOKEN", "env-token")
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["auth"] = request.headers.get("authorization")
        return httpx.Response(200, json=[])

    async with WorkflowApiClient.from_config(transport=httpx.MockTransport(handler)) as client:
        await client.list_all("org-1")

    assert seen["url"] == "https://env.test/v2/organizations/org-1/workflows"
    assert seen["auth"] == "Bearer env-token"


RUN = {
    "id": "run-1",
    "workflowId": "wf-1",
    "triggerEvent": "trigger.order.created",
    "triggerData": {"order": {"total": 80}},
    "status": "completed",
    "startedAt": "2026-01-01T10:00:00Z",
    "completedAt": "2026-01-01T10:00:02Z",
    "executionLog": [
        {"nodeId": "n1", "status": "completed", "startedAt": "2026-01-01T10:00:00Z"},
        {"nodeId": "n2", "status": "skipped", "startedAt": "2026-01-01T10:00:01Z"},
    ],
    "error": None,
}


async def test_test_run_posts_test_data():
    captured = {}

    def handler(request):
        captured["path"] = request.url.path
        captured["body"] = json.loads(request.content)
        return httpx.Response(201, json={"data": {**RUN, "status": "pending", "executionLog": []}})

    async with _client(handler) as client:
        run = await client.test_run("org-1", "wf-1", {"order": {"total": 80}})

    assert captured["path"].endswith("/organizations/org-1/workflows/wf-1/test")
    assert captured["body"] == {"testData": {"order": {"total": 80}}}
    assert run.status == WorkflowRunStatus.PENDING
    assert not run.is_finished


async def test_list_runs():
    def handler(request):
        assert request.method == "GET"
        assert request.url.path.endswith("/wf-1/runs")
        return httpx.Response(200, json={"data": [RUN]})

    async with _client(handler) as client:
        runs = await client.list_runs("org-1", "wf-1")

    assert len(runs) == 1
    run = runs[0]
    assert run.is_finished
    assert [(e.node_id, e.status) for e in run.execution_log] == [
        ("n1", RunStepStatus.COMPLETED), ("n2", RunStepStatus.SKIPPED),
    ]


async def test_runs_of_missing_workflow():
    async with _client(lambda r: httpx.Response(404, json={"message": "nope"})) as client:
        with pytest.raises(WorkflowNotFound):
            await client.list_runs("org-1", "wf-x")


async def test_non_json_body_maps_to_backend_error():
    async with _client(lambda r: httpx.Response(200, text="<html>proxy error</html>")) as client:
        with pytest.raises(WorkflowBackendError) as exc:
            await client.get("org-1", "wf-1")
    assert exc.value.status_code == 200


async def test_unexpected_body_maps_to_backend_error():
    async with _client(lambda r: httpx.Response(200, json={"data": {"name": "no id"}})) as client:
        with pytest.raises(WorkflowBackendError):
            await client.create("org-1", CreateWorkflowData(name="x", trigger_type="trigger.manual"))


async def test_empty_create_response_maps_to_backend_error():
    async with _client(lambda r: httpx.Response(204)) as client:
        with pytest.raises(WorkflowBackendError):
            await client.create("org-1", CreateWorkflowData(name="x", trigger_type="trigger.manual"))


async def test_list_with_object_body_maps_to_backend_error():
    async with _client(lambda r: httpx.Response(200, json={"data": {"unexpected": True}})) as client:
        with pytest.raises(WorkflowBackendError):
            await client.list_all("org-1")


async def test_malformed_save_response_fails_the_save(registry):
    async with _client(lambda r: httpx.Response(201, text="not json")) as client:
        editor = WorkflowEditor(client, "org-1", registry=registry)
        editor.canvas.add_node("trigger.manual", (0, 0))
        editor.name = "Proxy down"
        with pytest.raises(SaveRequestFailed):
            await editor.save()
    assert not editor.closed
    assert len(editor.canvas.nodes) == 1
