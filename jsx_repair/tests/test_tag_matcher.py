"""
Tests for TagMatcher: closing tag repair and unclosed tag reporting.
"""

from jsx_repair.contracts.errors import FixType
from jsx_repair.fixers.tag_matcher import TagMatcher


class TestTagMatcher:
    """Closing tags follow their opening tags."""

    def setup_method(self):
        self.stage = TagMatcher()

    def test_matching_tags_produce_no_fixes(self, parse, context):
        tree = parse(
            "const x = (\n"
            "  <Card>\n"
            "    <CardHeader>Title</CardHeader>\n"
            "    <Badge />\n"
            "    <>text</>\n"
            "  </Card>\n"
            ");\n"
        )
        fixes = self.stage.apply(tree, context)
        assert fixes == []
        assert context.unclosed_tags == []

    def test_crossed_tags(self, parse, context):
        tree = parse("const x = <Card><CardTitle>Hi</Card></CardTitle>;")
        fixes = self.stage.apply(tree, context)

        assert tree.regenerate() == "const x = <Card><CardTitle>Hi</CardTitle></Card>;"
        assert len(fixes) == 2
        assert all(f.type is FixType.TAG_MISMATCH for f in fixes)
        # children are repaired before their parents
        assert (fixes[0].from_value, fixes[0].to_value) == ("Card", "CardTitle")
        assert (fixes[1].from_value, fixes[1].to_value) == ("CardTitle", "Card")

    def test_typo_in_closing_tag(self, parse, context):
        tree = parse("const x = (\n  <CardHeader>\n    t\n  </CardHeaderr>\n);")
        fixes = self.stage.apply(tree, context)

        assert "</CardHeader>" in tree.regenerate()
        assert len(fixes) == 1
        assert fixes[0].from_value == "CardHeaderr"
        assert fixes[0].to_value == "CardHeader"
        assert fixes[0].location == {"open_line": 2, "close_line": 4}

    def test_dot_qualified_names(self, parse, context):
        tree = parse("const x = <Dialog.Content>x</Dialog.Contnt>;")
        fixes = self.stage.apply(tree, context)
        assert tree.regenerate() == "const x = <Dialog.Content>x</Dialog.Content>;"
        assert fixes[0].to_value == "Dialog.Content"

    def test_unclosed_tag_is_recorded_not_fixed(self, parse, context):
        source = "const x = <div><span>hi</span>;"
        tree = parse(source)
        fixes = self.stage.apply(tree, context)

        assert fixes == []
        assert tree.regenerate() == source
        assert len(context.unclosed_tags) == 1
        assert context.unclosed_tags[0].tag_name == "div"
        assert context.unclosed_tags[0].line == 1
        assert "never closed" in context.unclosed_tags[0].message

    def test_fragment_closed_by_named_tag(self, parse, context):
        tree = parse("const x = <><p>a</p></div>;")
        fixes = self.stage.apply(tree, context)
        assert tree.regenerate() == "const x = <><p>a</p></>;"
        assert fixes[0].from_value == "div"
        assert fixes[0].to_value == ""

    def test_element_closed_by_fragment_closer(self, parse, context):
        tree = parse("const x = <div>x</>;")
        fixes = self.stage.apply(tree, context)
        assert tree.regenerate() == "const x = <div>x</div>;"
        assert fixes[0].from_value == ""

    def test_repair_is_a_fixed_point(self, parse, context):
        tree = parse("const x = <Card><CardTitle>Hi</Card></CardTitle>;")
        self.stage.apply(tree, context)

        again = parse(tree.regenerate())
        assert self.stage.apply(again, context) == []
