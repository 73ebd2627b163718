"""
Tests for BindingCollector.
"""

from jsx_repair.analyzers.bindings import BindingCollector, is_valid_identifier


class TestBindingCollector:
    """Names bound anywhere in a module."""

    def setup_method(self):
        self.collector = BindingCollector()

    def test_import_bindings(self, parse):
        tree = parse(
            'import React, { useState as useS } from "react";\n'
            'import * as Icons from "lucide-react";\n'
        )
        names = self.collector.collect(tree)
        assert {"React", "useS", "Icons"} <= names
        assert "useState" not in names

    def test_declarations(self, parse):
        tree = parse(
            "function Hero() {}\n"
            "class Panel {}\n"
            "interface Props {}\n"
            "type Size = 'sm';\n"
            "enum Tone { Calm }\n"
            "const Badge = () => null;\n"
        )
        names = self.collector.collect(tree)
        assert {"Hero", "Panel", "Props", "Size", "Tone", "Badge"} <= names

    def test_destructuring(self, parse):
        tree = parse(
            "const { a, b: c, ...rest } = props;\n"
            "const [x, setX] = useState(0);\n"
        )
        names = self.collector.collect(tree)
        assert {"a", "c", "rest", "x", "setX"} <= names
        assert "b" not in names

    def test_function_parameters(self, parse):
        tree = parse(
            'function Card({ title = "x", children }: Props) {\n'
            "  return <div>{title}{children}</div>;\n"
            "}\n"
        )
        names = self.collector.collect(tree)
        assert {"Card", "title", "children"} <= names
        assert "Props" not in names

    def test_arrow_parameters(self, parse):
        tree = parse(
            "const f = (value, { id }) => value;\n"
            "const g = (a: number): string => String(a);\n"
            "const rows = items.map(item => <Row key={item.id} />);\n"
        )
        names = self.collector.collect(tree)
        assert {"f", "value", "id", "g", "a", "rows", "item"} <= names
        assert "Row" not in names

    def test_catch_parameter(self, parse):
        tree = parse("try { run(); } catch (err) { log(err); }\n")
        assert "err" in self.collector.collect(tree)

    def test_jsx_usage_is_not_a_binding(self, parse):
        tree = parse("const page = <StatCard value={1} />;\n")
        names = self.collector.collect(tree)
        assert "StatCard" not in names
        assert "page" in names

    def test_member_access_is_not_a_binding(self, parse):
        tree = parse("const v = config.class;\n")
        names = self.collector.collect(tree)
        assert "v" in names
        assert "class" not in names


class TestIdentifierValidity:
    """Guard against garbage tag names."""

    def test_valid(self):
        assert is_valid_identifier("StatCard")
        assert is_valid_identifier("$Icon")

    def test_invalid(self):
        assert not is_valid_identifier("Foo-Bar")
        assert not is_valid_identifier("svg:path")
        assert not is_valid_identifier("class")
        assert not is_valid_identifier("")
