"""
Tests for TypeChecker diagnostics.
"""

from jsx_repair.contracts.errors import Severity
from jsx_repair.validators.type_checker import CheckerOptions, TypeChecker, flatten_message


def codes(diagnostics):
    return [d.code for d in diagnostics]


class TestSyntaxDiagnostics:
    """Brackets and unterminated literals."""

    def setup_method(self):
        self.checker = TypeChecker()

    def test_clean_component(self):
        code = (
            '"use client";\n'
            "\n"
            'import { useState } from "react";\n'
            'import { Button } from "@/components/ui/button";\n'
            "\n"
            "export default function Counter() {\n"
            "  const [n, setN] = useState(0);\n"
            "  return <Button onClick={() => setN(n + 1)}>{n}</Button>;\n"
            "}\n"
        )
        assert self.checker.check(code, "counter.tsx") == []

    def test_unclosed_bracket(self):
        diagnostics = self.checker.check("const a = [1, 2;\n")
        assert codes(diagnostics) == [1005]
        assert diagnostics[0].message == "']' expected."

    def test_stray_closer(self):
        diagnostics = self.checker.check("const a = 1;\n}\n")
        assert codes(diagnostics) == [1128]
        assert diagnostics[0].line == 2

    def test_unterminated_string(self):
        diagnostics = self.checker.check('const a = "oops\n')
        assert codes(diagnostics) == [1002]
        assert diagnostics[0].message == "Unterminated string literal."
        assert diagnostics[0].is_error


class TestStatementDiagnostics:
    """Malformed statements the lexer accepts."""

    def setup_method(self):
        self.checker = TypeChecker()

    def test_missing_separator(self):
        diagnostics = self.checker.check("export const a = 1;\nconst label = \"a\" \"b\";\n")
        assert codes(diagnostics) == [1005]
        assert diagnostics[0].message == "';' expected."
        assert diagnostics[0].line == 2

    def test_operands_on_separate_lines(self):
        assert self.checker.check("const a = 1\nconst b = a\nexport default b\n") == []

    def test_missing_declarator(self):
        diagnostics = self.checker.check("const = 5;\n")
        assert codes(diagnostics) == [1134]
        assert diagnostics[0].message == "Variable declaration expected."

    def test_missing_expression(self):
        diagnostics = self.checker.check("export const a = ;\n")
        assert codes(diagnostics) == [1109]
        assert diagnostics[0].message == "Expression expected."

    def test_truncated_declaration(self):
        diagnostics = self.checker.check("export default function A() {\n  const = ")
        assert {1134, 1109, 1005} <= set(codes(diagnostics))
        assert all(d.is_error for d in diagnostics)

    def test_typescript_keywords_are_not_operands(self):
        code = (
            'import type { FC } from "react";\n'
            "type Size = keyof typeof sizes;\n"
            "const sizes = { sm: 1, lg: 2 } as const;\n"
            "const flags = { var: true, let: false };\n"
            "export const Badge: FC<{ size: Size }> = ({ size }) => {\n"
            "  const value = sizes[size] satisfies number;\n"
            "  return <span title={size}>{value}</span>;\n"
            "};\n"
        )
        assert self.checker.check(code, "badge.tsx") == []


class TestJsxDiagnostics:
    """Tag structure."""

    def setup_method(self):
        self.checker = TypeChecker()

    def test_closing_tag_mismatch(self):
        diagnostics = self.checker.check("const x = <div>\n</span>;\n")
        assert codes(diagnostics) == [17002]
        assert diagnostics[0].line == 2
        assert "'div'" in diagnostics[0].message

    def test_missing_closing_tag(self):
        diagnostics = self.checker.check("const x = <div>;\n")
        assert 17008 in codes(diagnostics)

    def test_fragment_mismatch(self):
        diagnostics = self.checker.check("const x = <>a</b>;\n")
        assert codes(diagnostics) == [17015]

    def test_jsx_disabled(self):
        checker = TypeChecker(CheckerOptions(jsx=False))
        diagnostics = checker.check("const x = <div />;\n", "x.ts")
        assert codes(diagnostics) == [17004]


class TestBindingDiagnostics:
    """Imports and TypeScript-only syntax."""

    def test_duplicate_import_binding(self):
        diagnostics = TypeChecker().check(
            'import { Button } from "a";\nimport { Button } from "b";\n'
        )
        assert codes(diagnostics) == [2300, 2300]
        assert [d.line for d in diagnostics] == [1, 2]

    def test_typescript_only_in_jsx_file(self):
        diagnostics = TypeChecker().check(
            "interface P { a: string }\ntype T = string;\n", "page.jsx"
        )
        assert codes(diagnostics) == [8006, 8008]

    def test_typescript_allowed_in_tsx_file(self):
        assert TypeChecker().check("interface P { a: string }\ntype T = string;\n", "page.tsx") == []

    def test_implicit_any_needs_typescript_file(self):
        code = "function f(a) { return a; }\n"
        checker = TypeChecker(CheckerOptions(strict=True))
        assert codes(checker.check(code, "util.ts")) == [7006]
        assert checker.check(code, "util.jsx") == []
        assert checker.check(code, "snippet.txt") == []

    def test_implicit_any_only_when_strict(self):
        code = "function f(a, b: number, c = 1, ...rest) { return a; }\n"
        assert TypeChecker().check(code) == []

        diagnostics = TypeChecker(CheckerOptions(strict=True)).check(code)
        assert codes(diagnostics) == [7006, 7019]
        assert all(d.severity is Severity.WARNING for d in diagnostics)
        assert "'a'" in diagnostics[0].message


class TestClientModuleDiagnostics:
    """Server-only imports and pragma placement."""

    def setup_method(self):
        self.checker = TypeChecker()

    def test_environment_leak(self):
        diagnostics = self.checker.check('"use client";\nimport fs from "fs";\nimport { join } from "node:path";\n')
        assert codes(diagnostics) == ["ENVIRONMENT_LEAK", "ENVIRONMENT_LEAK"]
        assert all(d.is_error for d in diagnostics)

    def test_server_module_allowed_without_pragma(self):
        assert self.checker.check('import fs from "fs";\n') == []

    def test_misplaced_pragma(self):
        diagnostics = self.checker.check('import React from "react";\n"use client";\n')
        assert codes(diagnostics) == ["DIRECTIVE_POSITION"]
        assert diagnostics[0].severity is Severity.WARNING


class TestCheckerRobustness:
    """check() never raises."""

    def test_internal_failure_yields_no_diagnostics(self):
        class BrokenParser:
            def parse(self, code, filename):
                raise RuntimeError("boom")

        checker = TypeChecker()
        checker._parser = BrokenParser()
        assert checker.check("const a = 1;\n") == []

    def test_flatten_message(self):
        assert flatten_message("a\n  b\tc") == "a b c"
