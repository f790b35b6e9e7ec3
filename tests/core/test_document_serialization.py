"""
Unit Tests for Document Serialization

Tests for document_to_dict / document_from_dict and file I/O.
"""

import json

import pytest

from cv_toolkit.core.models import BlockKind, BreakBefore, GroupPolicy
from cv_toolkit.core.schemas import InvalidDocumentError
from cv_toolkit.core.utils import document_from_dict, document_to_dict, load_document, save_document


@pytest.fixture
def sample_doc(doc_builder):
    builder = doc_builder(usable=1000)
    builder.block("intro", 120, type_name="SectionNode", break_before="before",
                  attributes={"data-display-name": "Intro"})
    builder.plain("wrap")
    builder.group("skills", [40, 50, 60], parent="wrap", orphans=2, widows=1)
    return builder.build()


class TestDocumentToDict:
    """Tests for document_to_dict."""

    def test_to_dict_when_nested_then_children_inline(self, sample_doc):
        """Blocks nest their children instead of listing ids."""
        data = document_to_dict(sample_doc)

        assert [b["id"] for b in data["blocks"]] == ["intro", "wrap"]
        skills = data["blocks"][1]["children"][0]
        assert skills["group_policy"] == {"allow_split": True, "orphans": 2, "widows": 1}
        assert len(skills["children"]) == 3

    def test_to_dict_when_default_policy_then_omitted(self, sample_doc):
        """Default policies are not written."""
        data = document_to_dict(sample_doc)

        assert "policy" not in data["blocks"][1]
        assert data["blocks"][0]["policy"]["break_before"] == "before"

    def test_to_dict_when_dumped_then_json_compatible(self, sample_doc):
        """The dictionary is JSON-serializable."""
        json.dumps(document_to_dict(sample_doc))

    def test_to_dict_when_single_template_then_templates_omitted(self, sample_doc):
        """Single-template documents keep the compact form."""
        assert "templates" not in document_to_dict(sample_doc)


class TestDocumentFromDict:
    """Tests for document_from_dict."""

    def test_from_dict_when_round_tripped_then_equal(self, sample_doc):
        """to_dict -> from_dict restores the arena."""
        restored = document_from_dict(document_to_dict(sample_doc))

        assert restored.roots == sample_doc.roots
        assert [n.id for n in restored.nodes] == [n.id for n in sample_doc.nodes]
        assert restored.get("intro").policy.break_before is BreakBefore.BEFORE
        assert restored.get("skills-item-2").parent_id == "skills"
        assert restored.get("intro").attributes == {"data-display-name": "Intro"}

    def test_from_dict_when_group_without_policy_then_default_policy(self):
        """Groups always end up with a group policy."""
        data = {
            "schema_version": 1,
            "template": {"width": 800, "height": 1000},
            "blocks": [{"id": "g", "kind": "group", "height": 0}],
        }

        doc = document_from_dict(data)

        assert doc.get("g").kind is BlockKind.GROUP
        assert doc.get("g").group_policy == GroupPolicy()

    def test_from_dict_when_invalid_then_raises(self):
        """Schema errors surface as InvalidDocumentError."""
        with pytest.raises(InvalidDocumentError):
            document_from_dict({"schema_version": 1, "blocks": []})

    def test_from_dict_when_unknown_kind_and_no_validation_then_raises(self):
        """Bad enum values are still caught without the schema."""
        data = {
            "schema_version": 1,
            "template": {"width": 800, "height": 1000},
            "blocks": [{"id": "x", "kind": "sidebar", "height": 1}],
        }

        with pytest.raises(InvalidDocumentError, match=r"blocks\[0\]"):
            document_from_dict(data, validate=False)

    def test_from_dict_when_templates_and_styles_then_restored(self, doc_builder):
        """Extra page templates, block styles and root template ids survive."""
        builder = doc_builder(usable=1000)
        builder.template("body", 1200)
        builder.block("cover", 300, style={"color": "rgb(255, 0, 0)"})
        builder.block("experience", 900, template_id="body")
        doc = builder.build()

        restored = document_from_dict(document_to_dict(doc))

        assert restored.templates == doc.templates
        assert restored.template_for("body").usable_height == 1200
        assert restored.get("cover").style == {"color": "rgb(255, 0, 0)"}
        assert restored.get("experience").template_id == "body"

    def test_from_dict_when_style_value_not_string_then_raises(self):
        """Style maps hold strings only."""
        data = {
            "schema_version": 1,
            "template": {"width": 800, "height": 1000},
            "blocks": [{"id": "x", "kind": "root-block", "height": 1, "style": {"font-size": 14}}],
        }

        with pytest.raises(InvalidDocumentError):
            document_from_dict(data)


class TestDocumentFileIO:
    """Tests for save_document / load_document."""

    def test_save_then_load_when_tmp_path_then_equal(self, sample_doc, tmp_path):
        """Documents survive a trip through disk."""
        path = tmp_path / "nested" / "doc.json"

        save_document(sample_doc, path)
        loaded = load_document(path)

        assert path.exists()
        assert loaded.nodes == sample_doc.nodes
        assert loaded.template == sample_doc.template
