"""
Unit Tests for NodeRegistry

Tests for lookups, copy-on-write updates and construction from documents.
"""

import pytest

from cv_toolkit.planning import NodeRegistry, Operation, OperationCategory, PlanNode


class TestLookups:
    """Tests for the PlanContext lookups."""

    def test_create_when_duplicate_id_then_raises(self):
        """Ids are unique within a registry."""
        with pytest.raises(ValueError, match="duplicate node id"):
            NodeRegistry([PlanNode("a", "TextNode"), PlanNode("a", "TextNode")])

    def test_get_parent_of_when_child_then_parent(self, registry):
        """Parents are looked up through parent_id."""
        assert registry.get_parent_of("stack-1").id == "repeat-1"
        assert registry.get_parent_of("page-1") is None
        assert registry.get_parent_of("ghost") is None

    def test_resolve_group_owner_when_repeat_prefix_then_repeat_node(self, registry):
        """``repeat-<id>`` strips the prefix when ``<id>`` exists."""
        assert registry.resolve_group_owner("repeat-repeat-1").id == "repeat-1"
        assert registry.resolve_group_owner("repeat-1").id == "repeat-1"
        assert registry.resolve_group_owner("repeat-ghost") is None

    def test_container_protocol_when_called_then_len_iter_contains(self, registry):
        """Registries behave like read-only collections."""
        assert len(registry) == 5
        assert "text-1" in registry
        assert [node.id for node in registry][0] == "page-1"


class TestUpdates:
    """Tests for copy-on-write updates."""

    def test_with_props_when_called_then_new_registry(self, registry):
        """with_props never changes the original."""
        updated = registry.with_props("repeat-1", {"widows": 3})

        assert updated.get_node("repeat-1").props["widows"] == 3
        assert registry.get_node("repeat-1").props["widows"] == 1
        assert updated.get_node("repeat-1").display_name == "Postes"

    def test_with_props_when_node_missing_then_raises(self, registry):
        """Updating an unknown node is a caller bug."""
        with pytest.raises(KeyError):
            registry.with_props("ghost", {"widows": 3})

    def test_apply_when_unknown_prop_or_node_then_skipped(self, registry):
        """apply() sets recognized props only."""
        operations = [
            Operation("op-1", "repeat-1", OperationCategory.PAGINATION, "", "",
                      {"widows": 2, "imaginaryProp": 1}),
            Operation("op-2", "ghost", OperationCategory.PAGINATION, "", "", {"widows": 2}),
        ]

        updated = registry.apply(operations)

        props = updated.get_node("repeat-1").props
        assert props["widows"] == 2
        assert "imaginaryProp" not in props
        assert "ghost" not in updated


class TestFromDocument:
    """Tests for NodeRegistry.from_document."""

    def test_from_document_when_typed_nodes_then_policy_overlays_defaults(self, doc_builder):
        """Capability defaults are overlaid with the canvas policy."""
        builder = doc_builder()
        builder.block("section", 300, type_name="SectionNode", break_before="before",
                      attributes={"data-display-name": "Expérience"})
        builder.group("jobs", [100, 100], parent="section", type_name="RepeatNode",
                      allow_split=False, orphans=2, widows=3)

        registry = NodeRegistry.from_document(builder.build())

        section = registry.get_node("section")
        assert section.props["breakBefore"] == "before"
        assert section.props["showDivider"] is True
        assert section.label == "Expérience"
        jobs = registry.get_node("jobs")
        assert jobs.props["allowItemSplit"] is False
        assert (jobs.props["orphans"], jobs.props["widows"]) == (2, 3)
        assert jobs.parent_id == "section"

    def test_from_document_when_untyped_node_then_no_props(self, doc_builder):
        """Nodes without a known type take nothing."""
        builder = doc_builder()
        builder.block("a", 100)

        node = NodeRegistry.from_document(builder.build()).get_node("a")

        assert node.type == ""
        assert node.props == {}
        assert node.label == "a"


class TestPlanNodeSerialization:
    """Tests for PlanNode and Operation dict forms."""

    def test_plan_node_from_dict_when_camel_case_then_fields(self):
        """Editor payloads use camelCase keys."""
        node = PlanNode.from_dict({
            "id": "r1", "type": "RepeatNode", "displayName": "Postes",
            "parentId": "s1", "props": {"widows": 2},
        })

        assert node.parent_id == "s1"
        assert PlanNode.from_dict(node.to_dict()) == node

    def test_operation_from_dict_when_to_dict_then_equal(self):
        """Operations survive a trip through the editor payload."""
        operation = Operation("op-1:r1:widows:2", "r1", OperationCategory.PAGINATION,
                              "label", "reason", {"widows": 2})

        assert Operation.from_dict(operation.to_dict()) == operation
