# tests/workflow/test_actions.py

import pytest

from service.workflow.templates import create_receipt_template
from service.workflow.workflow_actions import (
    SystemWorkflowProtected,
    activate_workflow,
    deactivate_workflow,
    delete_workflow,
    request_test_run,
    toggle_active,
)
from service.workflow.workflow_backend import ActivationRejected
from service.workflow.workflow_model import CreateWorkflowData, WorkflowNode

pytestmark = pytest.mark.asyncio

ORG = "org-1"


async def _saved(backend, with_nodes=True):
    nodes = [WorkflowNode(id="n1", type="trigger.manual")] if with_nodes else []
    return await backend.create(ORG, CreateWorkflowData(
        name="Listed", trigger_type="trigger.manual", nodes=nodes,
    ))


async def test_toggle_flips_state(backend):
    wf = await _saved(backend)
    on = await toggle_active(backend, ORG, wf)
    assert on.is_active
    off = await toggle_active(backend, ORG, on)
    assert not off.is_active
    assert [c[0] for c in backend.calls[1:]] == ["activate", "deactivate"]


async def test_activate_rejection_propagates(backend):
    wf = await _saved(backend, with_nodes=False)
    with pytest.raises(ActivationRejected):
        await activate_workflow(backend, ORG, wf)
    assert backend.workflows[wf.id].is_active is False


async def test_system_workflow_cannot_be_deleted_or_deactivated(backend):
    system = create_receipt_template().model_copy(update={"is_active": True})
    with pytest.raises(SystemWorkflowProtected) as exc:
        await delete_workflow(backend, ORG, system)
    assert exc.value.action == "deleted"
    with pytest.raises(SystemWorkflowProtected):
        await deactivate_workflow(backend, ORG, system)
    with pytest.raises(SystemWorkflowProtected):
        await toggle_active(backend, ORG, system)
    assert backend.calls == []


async def test_delete_regular_workflow(backend):
    wf = await _saved(backend)
    await delete_workflow(backend, ORG, wf)
    assert wf.id not in backend.workflows


async def test_request_test_run_passes_test_data(backend):
    wf = await _saved(backend)
    run = await request_test_run(backend, ORG, wf, {"order": {"total": 10}})
    assert run.workflow_id == wf.id
    assert run.trigger_data == {"order": {"total": 10}}
    assert backend.calls[-1] == ("test_run", (wf.id, {"order": {"total": 10}}))
    assert await backend.list_runs(ORG, wf.id) == [run]


async def test_request_test_run_needs_nodes(backend):
    wf = await _saved(backend, with_nodes=False)
    with pytest.raises(ValueError):
        await request_test_run(backend, ORG, wf)
    assert [c[0] for c in backend.calls] == ["create"]
