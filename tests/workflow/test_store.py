# tests/workflow/test_store.py

import json

import pytest

from service.workflow.workflow_backend import ActivationRejected, WorkflowBackend, WorkflowNotFound
from service.workflow.workflow_model import (
    CreateWorkflowData,
    UpdateWorkflowData,
    WorkflowEdge,
    WorkflowNode,
    WorkflowRunStatus,
)
from service.workflow.workflow_store import WorkflowStore

pytestmark = pytest.mark.asyncio

ORG = "org-1"


def _create_data(name="Store test", with_nodes=True):
    nodes = [
        WorkflowNode(id="n1", type="trigger.order.created", position={"x": 10, "y": 20}),
        WorkflowNode(id="n2", type="action.flow.log"),
    ] if with_nodes else []
    edges = [WorkflowEdge(id="e1", source="n1", target="n2")] if with_nodes else []
    return CreateWorkflowData(
        name=name, description="desc", trigger_type="trigger.order.created",
        nodes=nodes, edges=edges,
    )


async def test_store_satisfies_backend_contract(store):
    assert isinstance(store, WorkflowBackend)


async def test_create_and_get(store):
    created = await store.create(ORG, _create_data())
    assert created.id
    assert created.organization_id == ORG
    assert created.is_active is False
    assert created.is_system is False
    assert created.created_at

    loaded = await store.get(ORG, created.id)
    assert loaded.name == "Store test"
    assert [n.id for n in loaded.nodes] == ["n1", "n2"]
    assert loaded.nodes[0].position.x == 10
    assert loaded.edges[0].source_handle is None


async def test_file_uses_wire_shape(store, tmp_path):
    created = await store.create(ORG, _create_data())
    raw = json.loads((tmp_path / "workflows" / ORG / f"{created.id}.json").read_text())
    assert raw["triggerType"] == "trigger.order.created"
    assert raw["isActive"] is False
    assert "data" in raw["nodes"][0]
    assert "sourceHandle" not in raw["edges"][0]


async def test_update_replaces_graph(store):
    created = await store.create(ORG, _create_data())
    updated = await store.update(ORG, created.id, UpdateWorkflowData(
        name="Renamed", description=None, trigger_type="trigger.manual",
        nodes=[WorkflowNode(id="n9", type="trigger.manual")], edges=[],
    ))
    assert updated.name == "Renamed"
    assert updated.description is None
    assert [n.id for n in updated.nodes] == ["n9"]
    assert updated.created_at == created.created_at


async def test_update_missing_workflow(store):
    with pytest.raises(WorkflowNotFound):
        await store.update(ORG, "missing", UpdateWorkflowData(name="x", trigger_type="trigger.manual"))


async def test_list_is_scoped_to_organization(store):
    await store.create(ORG, _create_data("a"))
    await store.create(ORG, _create_data("b"))
    await store.create("org-2", _create_data("c"))
    assert sorted(w.name for w in await store.list_all(ORG)) == ["a", "b"]
    assert await store.list_all("org-3") == []


async def test_list_skips_malformed_files(store, tmp_path):
    await store.create(ORG, _create_data())
    (tmp_path / "workflows" / ORG / "broken.json").write_text("{not json")
    assert len(await store.list_all(ORG)) == 1


async def test_soft_delete_hides_workflow(store, tmp_path):
    created = await store.create(ORG, _create_data())
    await store.delete(ORG, created.id)
    assert await store.list_all(ORG) == []
    with pytest.raises(WorkflowNotFound):
        await store.get(ORG, created.id)
    raw = json.loads((tmp_path / "workflows" / ORG / f"{created.id}.json").read_text())
    assert raw["deletedAt"]
    assert raw["isActive"] is False


async def test_activate_and_deactivate_are_idempotent(store):
    created = await store.create(ORG, _create_data())
    first = await store.activate(ORG, created.id)
    second = await store.activate(ORG, created.id)
    assert first.is_active and second.is_active
    assert second.updated_at == first.updated_at

    off = await store.deactivate(ORG, created.id)
    again = await store.deactivate(ORG, created.id)
    assert not off.is_active and not again.is_active


async def test_activate_without_nodes_is_rejected(store):
    created = await store.create(ORG, _create_data(with_nodes=False))
    with pytest.raises(ActivationRejected) as exc:
        await store.activate(ORG, created.id)
    assert exc.value.status_code == 400
    assert (await store.get(ORG, created.id)).is_active is False


async def test_default_storage_dir_comes_from_config(tmp_path, monkeypatch):
    monkeypatch.setenv("WORKFLOW_STORAGE_DIR", str(tmp_path / "from-env"))
    store = WorkflowStore()
    await store.create(ORG, _create_data())
    assert (tmp_path / "from-env" / ORG).is_dir()


async def test_test_run_is_recorded_as_pending(store):
    created = await store.create(ORG, _create_data())
    first = await store.test_run(ORG, created.id, {"order": {"total": 80}})
    second = await store.test_run(ORG, created.id)
    assert first.status == WorkflowRunStatus.PENDING
    assert first.trigger_event == "trigger.order.created"
    assert first.trigger_data == {"order": {"total": 80}}
    assert second.trigger_data == {}
    assert [r.id for r in await store.list_runs(ORG, created.id)] == [second.id, first.id]


async def test_runs_do_not_show_up_as_workflows(store):
    created = await store.create(ORG, _create_data())
    await store.test_run(ORG, created.id)
    assert [w.id for w in await store.list_all(ORG)] == [created.id]


async def test_run_history_of_new_workflow_is_empty(store):
    created = await store.create(ORG, _create_data())
    assert await store.list_runs(ORG, created.id) == []


async def test_runs_require_existing_workflow(store):
    with pytest.raises(WorkflowNotFound):
        await store.test_run(ORG, "missing")
    with pytest.raises(WorkflowNotFound):
        await store.list_runs(ORG, "missing")


async def test_corrupt_node_does_not_block_loading(store, tmp_path):
    created = await store.create(ORG, _create_data())
    path = tmp_path / "workflows" / ORG / f"{created.id}.json"
    raw = json.loads(path.read_text())
    raw["nodes"][0]["data"] = "oops"
    raw["nodes"][1]["position"] = {"x": "left"}
    path.write_text(json.dumps(raw))

    loaded = await store.get(ORG, created.id)
    assert [n.id for n in loaded.nodes] == ["n1", "n2"]
    assert loaded.nodes[0].config == {}
    assert loaded.nodes[1].position is None
