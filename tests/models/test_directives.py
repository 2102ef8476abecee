"""Tests for directive recognition and project templates."""

import json

import pytest

from models.directives import Directive, recognize
from models.file_tree import Directory, FileLeaf, serialize_file_tree
from models.templates import (
    TEMPLATES,
    build_express_server_tree,
    build_react_app_tree,
    get_template,
    match_template,
)


class TestRecognize:
    """Tests for recognize()."""

    def test_phrase_inside_surrounding_text(self):
        """Test that a trigger phrase is found inside surrounding text."""
        assert recognize(False, "please @ai create react app now") == Directive.CREATE_REACT_APP

    def test_case_insensitive(self):
        """Test that matching ignores case."""
        assert recognize(False, "CREATE Express Server!") == Directive.CREATE_EXPRESS_SERVER

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("create a react app", Directive.CREATE_REACT_APP),
            ("could you create an express server?", Directive.CREATE_EXPRESS_SERVER),
            ("create   react\napp", Directive.CREATE_REACT_APP),
        ],
    )
    def test_phrase_variants(self, text, expected):
        """Test every trigger phrase, including extra whitespace."""
        assert recognize(False, text) == expected

    def test_first_match_wins(self):
        """Test that the first trigger phrase in table order wins."""
        text = "create express server and then create react app"
        assert recognize(False, text) == Directive.CREATE_REACT_APP

    def test_automated_sender_never_matches(self):
        """Test that automated senders never issue directives."""
        assert recognize(True, "create react app") is None

    def test_no_match(self):
        """Test that text without a trigger phrase yields None."""
        assert recognize(False, "let's write a react component") is None

    def test_non_string_text(self):
        """Test that non-string text yields None."""
        assert recognize(False, None) is None


class TestTemplates:
    """Tests for template lookup and materialization."""

    def test_every_directive_has_a_template(self):
        """Test that every Directive maps to its own template."""
        assert set(TEMPLATES) == set(Directive)
        for directive in Directive:
            assert get_template(directive).directive == directive

    def test_react_tree_layout(self):
        """Test the files and directories of the React template."""
        tree = build_react_app_tree()

        assert isinstance(tree["package.json"], FileLeaf)
        assert isinstance(tree["src"], Directory)
        assert set(tree["src"].children) == {"index.js", "App.js", "App.css"}
        assert "index.html" in tree["public"].children
        assert json.loads(tree["package.json"].contents)["dependencies"]["react-scripts"]

    def test_express_tree_layout(self):
        """Test the files and directories of the Express template."""
        tree = build_express_server_tree()

        assert set(tree) == {"package.json", "app.js", "routes"}
        assert "require('express')" in tree["app.js"].contents
        assert "index.js" in tree["routes"].children

    def test_builds_are_independent(self):
        """Each build returns a fresh tree."""
        template = get_template(Directive.CREATE_REACT_APP)
        first = template.build()
        first.pop("src")

        assert "src" in template.build()

    def test_trees_stay_within_two_levels(self):
        """Test that template directories contain only files."""
        for template in TEMPLATES.values():
            for node in template.build().values():
                if isinstance(node, Directory):
                    assert all(isinstance(child, FileLeaf) for child in node.children.values())

    def test_match_template_on_own_serialized_tree(self):
        """Test that each template recognizes its own serialized tree."""
        for directive, template in TEMPLATES.items():
            raw = json.dumps(serialize_file_tree(template.build()))
            assert match_template(raw).directive == directive

    def test_match_template_none(self):
        """Test that text with no template keyword matches nothing."""
        assert match_template('{"body": "hello"}') is None
