"""
Workflow Inspector — structural report for a persisted workflow graph.

Produces per-node and per-edge detail plus a list of warnings about
graph shapes the execution engine cannot interpret as intended:

* edges into a trigger (triggers have no input handle)
* condition edges without a ``"true"`` / ``"false"`` handle
* conditions with a missing branch
* edges referencing nodes that do not exist
* unknown node types, missing required config values
* disconnected nodes, more than one trigger

Warnings never block saving; the backend decides what it accepts.
Fan-out (several edges leaving one default handle) is allowed and
listed under ``info``: every target runs. A condition's ``"true"`` and
``"false"`` branches stay mutually exclusive per firing, but each
branch may itself fan out.
"""

from __future__ import annotations

from logging import getLogger
from typing import Any, Dict, List, Optional

from service.workflow.nodes.base import (
    NodeCategory,
    NodeDefinition,
    NodeRegistry,
    get_node_registry,
    handle_rules,
)
from service.workflow.workflow_model import WorkflowDefinition, WorkflowEdge, WorkflowNode

logger = getLogger(__name__)


# ====================================================================
# Public API
# ====================================================================


def inspect_workflow(
    workflow: WorkflowDefinition,
    registry: Optional[NodeRegistry] = None,
) -> Dict[str, Any]:
    """Inspect a workflow graph.

    Returns a dict containing:
        - ``nodes``      : Per-node detail list
        - ``edges``      : Per-edge detail list
        - ``summary``    : High-level stats
        - ``validation`` : ``{"valid", "warnings", "info"}``
    """
    reg = registry or get_node_registry()

    nodes = [n for n in workflow.nodes if n.id and n.type]
    definitions: Dict[str, NodeDefinition] = {
        n.id: reg.resolve(n.type) for n in nodes
    }

    edges_by_source: Dict[str, List[WorkflowEdge]] = {}
    edges_by_target: Dict[str, List[WorkflowEdge]] = {}
    for edge in workflow.edges:
        if edge.source:
            edges_by_source.setdefault(edge.source, []).append(edge)
        if edge.target:
            edges_by_target.setdefault(edge.target, []).append(edge)

    warnings: List[str] = []
    info: List[str] = []

    warnings.extend(_check_edges(workflow.edges, definitions))
    for node in nodes:
        definition = definitions[node.id]
        warnings.extend(_check_node(
            node, definition,
            edges_by_source.get(node.id, []),
            edges_by_target.get(node.id, []),
        ))
        info.extend(_fan_out_notes(node, definition, edges_by_source.get(node.id, [])))

    triggers = [n for n in nodes if definitions[n.id].category == NodeCategory.TRIGGER]
    if len(triggers) > 1:
        warnings.append(
            f"Workflow has {len(triggers)} trigger nodes; only the first "
            f"({triggers[0].type}) sets the trigger type."
        )

    node_details = [
        _node_detail(n, definitions[n.id], edges_by_source, edges_by_target)
        for n in nodes
    ]
    edge_details = [_edge_detail(e, definitions) for e in workflow.edges]

    counts = {c.value: 0 for c in NodeCategory}
    for d in definitions.values():
        counts[d.category.value] += 1

    if warnings:
        logger.debug(f"Workflow {workflow.id}: {len(warnings)} structural warning(s)")

    return {
        "nodes": node_details,
        "edges": edge_details,
        "summary": {
            "workflow_name": workflow.name,
            "workflow_id": workflow.id,
            "trigger_type": workflow.trigger_type,
            "total_nodes": len(nodes),
            "total_edges": len(workflow.edges),
            "branch_edges": sum(1 for d in edge_details if d["wiring"] == "branch"),
            "default_edges": sum(1 for d in edge_details if d["wiring"] == "default"),
            "categories": counts,
            "is_valid": not warnings,
        },
        "validation": {
            "valid": not warnings,
            "warnings": warnings,
            "info": info,
        },
    }


# ====================================================================
# Checks
# ====================================================================


def _check_edges(edges: List[WorkflowEdge], definitions: Dict[str, NodeDefinition]) -> List[str]:
    warnings: List[str] = []
    for edge in edges:
        if edge.source not in definitions:
            warnings.append(f"Edge {edge.id} references unknown source node: {edge.source}")
        if edge.target not in definitions:
            warnings.append(f"Edge {edge.id} references unknown target node: {edge.target}")
    return warnings


def _check_node(
    node: WorkflowNode,
    definition: NodeDefinition,
    outgoing: List[WorkflowEdge],
    incoming: List[WorkflowEdge],
) -> List[str]:
    warnings: List[str] = []
    rules = handle_rules(definition.category)
    name = f"'{definition.label}' ({node.id})"

    if not definition.known:
        warnings.append(f"Node {name} has unknown type {node.type}.")

    if not rules.has_input and incoming:
        warnings.append(f"Trigger {name} has {len(incoming)} incoming edge(s).")

    if rules.is_branching:
        stray = [e for e in outgoing if e.source_handle not in rules.output_handles]
        for e in stray:
            warnings.append(
                f"Condition {name} edge {e.id} has no true/false handle "
                f"({e.source_handle!r})."
            )
        used = {e.source_handle for e in outgoing}
        for handle in rules.output_handles:
            if handle not in used:
                warnings.append(f"Condition {name} has no '{handle}' branch.")
    else:
        for e in outgoing:
            if e.source_handle is not None:
                warnings.append(f"Edge {e.id} uses handle {e.source_handle!r} on non-branching {name}.")

    if not incoming and not outgoing:
        warnings.append(f"Node {name} is disconnected (no edges).")

    for f in definition.config_fields:
        if not f.required:
            continue
        value = node.config.get(f.name, f.default_value)
        if value is None or value == "":
            warnings.append(f"Node {name} is missing required field '{f.label}'.")

    return warnings


def _fan_out_notes(
    node: WorkflowNode,
    definition: NodeDefinition,
    outgoing: List[WorkflowEdge],
) -> List[str]:
    per_handle: Dict[Optional[str], int] = {}
    for e in outgoing:
        per_handle[e.source_handle] = per_handle.get(e.source_handle, 0) + 1
    return [
        f"Node '{definition.label}' ({node.id}) fans out to {count} targets "
        f"from handle {handle or 'default'}; all run."
        for handle, count in per_handle.items() if count > 1
    ]


# ====================================================================
# Detail builders
# ====================================================================


def _node_detail(
    node: WorkflowNode,
    definition: NodeDefinition,
    edges_by_source: Dict[str, List[WorkflowEdge]],
    edges_by_target: Dict[str, List[WorkflowEdge]],
) -> Dict[str, Any]:
    rules = handle_rules(definition.category)
    return {
        "id": node.id,
        "type": node.type,
        "label": definition.label,
        "category": definition.category.value,
        "known": definition.known,
        "inputs": rules.input_count,
        "output_handles": [h or "default" for h in rules.output_handles],
        "incoming": len(edges_by_target.get(node.id, [])),
        "outgoing": len(edges_by_source.get(node.id, [])),
        "config": dict(node.config),
    }


def _edge_detail(edge: WorkflowEdge, definitions: Dict[str, NodeDefinition]) -> Dict[str, Any]:
    source_def = definitions.get(edge.source or "")
    branching = source_def is not None and handle_rules(source_def.category).is_branching
    return {
        "id": edge.id,
        "source": edge.source,
        "target": edge.target,
        "source_handle": edge.source_handle,
        "label": edge.label,
        "wiring": "branch" if branching else "default",
    }
