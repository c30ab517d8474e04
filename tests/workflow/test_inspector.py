# tests/workflow/test_inspector.py

from service.workflow.templates import create_low_stock_template, create_receipt_template
from service.workflow.workflow_inspector import inspect_workflow
from service.workflow.workflow_model import WorkflowDefinition, WorkflowEdge, WorkflowNode


def _workflow(nodes, edges):
    return WorkflowDefinition(id="wf", name="Inspect", trigger_type="trigger.manual",
                              nodes=nodes, edges=edges)


def test_complete_branching_graph_is_valid(registry):
    wf = _workflow(
        [
            WorkflowNode(id="t", type="trigger.manual"),
            WorkflowNode(id="c", type="condition.expression", config={"expression": "order.total > 5"}),
            WorkflowNode(id="a", type="action.flow.log"),
            WorkflowNode(id="b", type="action.flow.log"),
        ],
        [
            WorkflowEdge(id="e1", source="t", target="c"),
            WorkflowEdge(id="e2", source="c", target="a", source_handle="true"),
            WorkflowEdge(id="e3", source="c", target="b", source_handle="false"),
        ],
    )
    report = inspect_workflow(wf, registry=registry)
    assert report["validation"]["valid"], report["validation"]["warnings"]
    summary = report["summary"]
    assert summary["branch_edges"] == 2
    assert summary["default_edges"] == 1
    assert summary["categories"] == {"trigger": 1, "condition": 1, "action": 2}
    node = next(n for n in report["nodes"] if n["id"] == "c")
    assert node["output_handles"] == ["true", "false"]
    assert node["incoming"] == 1 and node["outgoing"] == 2


def test_structural_warnings(registry):
    wf = _workflow(
        [
            WorkflowNode(id="t1", type="trigger.manual"),
            WorkflowNode(id="t2", type="trigger.order.created"),
            WorkflowNode(id="c", type="condition.expression", config={"expression": "x"}),
            WorkflowNode(id="a", type="action.flow.log"),
            WorkflowNode(id="lonely", type="loyalty.points.add"),
        ],
        [
            WorkflowEdge(id="e1", source="t1", target="c"),
            WorkflowEdge(id="e2", source="c", target="a"),
            WorkflowEdge(id="e3", source="a", target="t2"),
            WorkflowEdge(id="e4", source="a", target="ghost"),
            WorkflowEdge(id="e5", source="t1", target="a", source_handle="true"),
        ],
    )
    warnings = inspect_workflow(wf, registry=registry)["validation"]["warnings"]
    text = "\n".join(warnings)
    assert "unknown target node: ghost" in text
    assert "(t2) has 1 incoming edge" in text
    assert "edge e2 has no true/false handle" in text
    assert "no 'true' branch" in text
    assert "no 'false' branch" in text
    assert "Edge e5 uses handle 'true'" in text
    assert "unknown type loyalty.points.add" in text
    assert "(lonely) is disconnected" in text
    assert "2 trigger nodes" in text


def test_missing_required_field_respects_defaults(registry):
    wf = _workflow(
        [
            WorkflowNode(id="t", type="trigger.stock.low"),
            WorkflowNode(id="m", type="action.notification.email", config={"to": "a@b.c"}),
        ],
        [WorkflowEdge(id="e1", source="t", target="m")],
    )
    warnings = inspect_workflow(wf, registry=registry)["validation"]["warnings"]
    assert warnings == ["Node 'Send Email' (m) is missing required field 'Subject'."]


def test_fan_out_is_info_not_warning(registry):
    wf = _workflow(
        [
            WorkflowNode(id="t", type="trigger.manual"),
            WorkflowNode(id="a", type="action.flow.log"),
            WorkflowNode(id="b", type="action.flow.log"),
        ],
        [
            WorkflowEdge(id="e1", source="t", target="a"),
            WorkflowEdge(id="e2", source="t", target="b"),
        ],
    )
    validation = inspect_workflow(wf, registry=registry)["validation"]
    assert validation["valid"]
    assert len(validation["info"]) == 1
    assert "fans out to 2 targets" in validation["info"][0]


def test_system_templates_inspect_cleanly(registry):
    receipt = inspect_workflow(create_receipt_template(), registry=registry)
    # the receipt template only handles the POS branch
    assert receipt["validation"]["warnings"] == [
        "Condition 'Order Source Is' (is_pos) has no 'false' branch."
    ]
    low_stock = inspect_workflow(create_low_stock_template(), registry=registry)
    assert low_stock["validation"]["warnings"] == [
        "Node 'Send Email' (mail) is missing required field 'Recipient'."
    ]
