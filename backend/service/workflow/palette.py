"""
Node Palette — the draggable node list beside the canvas.

Groups registry definitions by category and subcategory and applies
the sidebar search.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from service.workflow.nodes.base import (
    CATEGORY_ORDER,
    NodeCategory,
    NodeDefinition,
    NodeRegistry,
    get_node_registry,
)


@dataclass
class PaletteGroup:
    subcategory: str
    nodes: List[NodeDefinition] = field(default_factory=list)


@dataclass
class PaletteSection:
    category: NodeCategory
    groups: List[PaletteGroup] = field(default_factory=list)

    @property
    def node_count(self) -> int:
        return sum(len(g.nodes) for g in self.groups)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category.value,
            "groups": [
                {"subcategory": g.subcategory, "nodes": [n.to_dict() for n in g.nodes]}
                for g in self.groups
            ],
        }


def _matches(definition: NodeDefinition, query: str) -> bool:
    return (
        query in definition.label.lower()
        or query in definition.description.lower()
        or query in definition.subcategory.lower()
    )


def build_palette(query: str = "", registry: Optional[NodeRegistry] = None) -> List[PaletteSection]:
    """Palette sections in category order, filtered by ``query``."""
    reg = registry or get_node_registry()
    needle = query.strip().lower()
    sections: List[PaletteSection] = []
    for category in CATEGORY_ORDER:
        section = PaletteSection(category=category)
        for subcategory in reg.subcategories(category):
            group = PaletteGroup(subcategory=subcategory)
            for definition in reg.list_by_category(category):
                if definition.subcategory != subcategory:
                    continue
                if needle and not _matches(definition, needle):
                    continue
                group.nodes.append(definition)
            if group.nodes:
                section.groups.append(group)
        if section.groups:
            sections.append(section)
    return sections
