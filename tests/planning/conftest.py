import pytest

from cv_toolkit.planning import NodeRegistry, PlanNode


@pytest.fixture
def registry() -> NodeRegistry:
    """Page > section > repeat > stack > text, as the editor lays out an experience list."""
    return NodeRegistry([
        PlanNode("page-1", "PageNode", props={"pageBreak": "auto"}),
        PlanNode("section-1", "SectionNode", display_name="Expérience", parent_id="page-1",
                 props={"breakBefore": "auto", "keepWithNext": False}),
        PlanNode("repeat-1", "RepeatNode", display_name="Postes", parent_id="section-1",
                 props={"allowItemSplit": False, "orphans": 1, "widows": 1}),
        PlanNode("stack-1", "StackNode", parent_id="repeat-1", props={"direction": "vertical"}),
        PlanNode("text-1", "TextNode", parent_id="stack-1", props={"text": "Développeur"}),
    ])
