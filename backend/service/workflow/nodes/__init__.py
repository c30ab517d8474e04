"""
Workflow Nodes Package.

Collects the declarative node tables of every category into
``ALL_NODE_DEFINITIONS``, from which the global NodeRegistry is built.
"""

from typing import List

from service.workflow.nodes.action_nodes import ACTION_NODES
from service.workflow.nodes.base import NodeDefinition
from service.workflow.nodes.condition_nodes import CONDITION_NODES
from service.workflow.nodes.trigger_nodes import MANUAL_TRIGGER_TYPE, TRIGGER_NODES

ALL_NODE_DEFINITIONS: List[NodeDefinition] = [
    *TRIGGER_NODES,
    *CONDITION_NODES,
    *ACTION_NODES,
]

__all__ = ["ALL_NODE_DEFINITIONS", "MANUAL_TRIGGER_TYPE"]
