# tests/workflow/test_palette.py

from service.workflow.nodes.base import NodeCategory
from service.workflow.palette import build_palette


def test_palette_covers_registry_in_category_order(registry):
    sections = build_palette(registry=registry)
    assert [s.category for s in sections] == [
        NodeCategory.TRIGGER, NodeCategory.CONDITION, NodeCategory.ACTION,
    ]
    assert sum(s.node_count for s in sections) == len(registry)


def test_palette_search_filters_and_drops_empty_groups(registry):
    sections = build_palette("printer", registry=registry)
    assert [s.category for s in sections] == [NodeCategory.ACTION]
    types = [n.node_type for g in sections[0].groups for n in g.nodes]
    assert "action.printer.print_receipt" in types
    assert all("printer" in t for t in types)


def test_palette_search_is_case_insensitive(registry):
    assert build_palette("  LOW STOCK ", registry=registry)[0].groups[0].nodes[0].node_type == "trigger.stock.low"


def test_palette_search_without_hits(registry):
    assert build_palette("zzz-nothing", registry=registry) == []


def test_palette_serializes(registry):
    data = build_palette(registry=registry)[0].to_dict()
    assert data["category"] == "trigger"
    assert data["groups"][0]["subcategory"] == "manual"
    assert data["groups"][0]["nodes"][0]["type"] == "trigger.manual"
