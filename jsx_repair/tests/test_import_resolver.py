"""
Tests for import synthesis and on-disk import verification.
"""

import pytest

from jsx_repair.config import DEFAULT_TABLES
from jsx_repair.contracts.errors import FixType, Severity
from jsx_repair.contracts.pipeline import StageContext
from jsx_repair.fixers.import_resolver import (
    ImportPathVerifier,
    ImportSynthesizer,
    used_component_names,
)


class TestImportSynthesizer:
    """Imports added for unbound components."""

    def setup_method(self):
        self.stage = ImportSynthesizer()

    def test_single_missing_import_without_existing_imports(self, parse, context):
        tree = parse(
            "export default function Dashboard() {\n"
            "  return <StatCard value={1} />;\n"
            "}\n"
        )
        fixes = self.stage.apply(tree, context)

        assert len(fixes) == 1
        assert fixes[0].type is FixType.IMPORT_ADDED
        assert fixes[0].from_value == "StatCard"
        assert fixes[0].to_value == "@/components/ui/stat-card"
        assert fixes[0].location == {"line": 1}
        assert tree.regenerate().startswith(
            'import { StatCard } from "@/components/ui/stat-card";\n\nexport default function'
        )

    def test_inserted_after_last_import(self, parse, context):
        tree = parse(
            'import React from "react";\n'
            'import { Button } from "@/components/ui/button";\n'
            "\n"
            "export default function Hero() {\n"
            "  return <div><Button>Go</Button><StatCard /></div>;\n"
            "}\n"
        )
        fixes = self.stage.apply(tree, context)

        assert len(fixes) == 1
        assert fixes[0].location == {"line": 3}
        assert tree.regenerate().startswith(
            'import React from "react";\n'
            'import { Button } from "@/components/ui/button";\n'
            'import { StatCard } from "@/components/ui/stat-card";\n'
            "\n"
            "export default function Hero()"
        )

    def test_order_of_first_use(self, parse, context):
        tree = parse("const x = (<><Hero /><FeatureGrid /><Hero /></>);\n")
        fixes = self.stage.apply(tree, context)

        assert [f.from_value for f in fixes] == ["Hero", "FeatureGrid"]
        assert tree.regenerate() == (
            'import { Hero } from "@/components/ui/hero";\n'
            'import { FeatureGrid } from "@/components/ui/feature-grid";\n'
            "\n"
            "const x = (<><Hero /><FeatureGrid /><Hero /></>);\n"
        )

    def test_framework_component(self, parse, context):
        tree = parse('const nav = <Link href="/">Home</Link>;\n')
        fixes = self.stage.apply(tree, context)
        assert fixes[0].to_value == "next/link"
        assert tree.regenerate().startswith('import Link from "next/link";\n')

    def test_after_directive_prologue(self, parse, context):
        tree = parse('"use client";\n\nconst x = <Badge />;\n')
        self.stage.apply(tree, context)
        assert tree.regenerate() == (
            '"use client";\n'
            "\n"
            'import { Badge } from "@/components/ui/badge";\n'
            "\n"
            "const x = <Badge />;\n"
        )

    def test_locally_bound_component_is_left_alone(self, parse, context):
        source = (
            "function StatCard() { return <div />; }\n"
            "const x = <StatCard />;\n"
        )
        tree = parse(source)
        assert self.stage.apply(tree, context) == []
        assert tree.regenerate() == source

    def test_no_duplicate_binding(self, parse, context):
        tree = parse(
            'import { Card } from "@/components/ui/card";\n'
            "const x = <Card>t</Card>;\n"
        )
        assert self.stage.apply(tree, context) == []

    def test_member_tag_uses_root_identifier(self, parse, context):
        tree = parse("const x = <Card.Header>t</Card.Header>;\n")
        fixes = self.stage.apply(tree, context)
        assert [f.from_value for f in fixes] == ["Card"]

    def test_intrinsic_and_lowercase_member_tags_ignored(self, parse, context):
        tree = parse("const x = <motion.div><span /></motion.div>;\n")
        assert self.stage.apply(tree, context) == []

    def test_new_import_is_visible_to_later_stages(self, parse, context):
        tree = parse("const x = <StatCard />;\n")
        self.stage.apply(tree, context)
        records = tree.import_records()
        assert records[0].bound_names == ["StatCard"]
        assert records[0].module_path == "@/components/ui/stat-card"

    def test_empty_import_removed(self, parse, context):
        tree = parse(
            'import {} from "@/lib/utils";\n'
            'import "./globals.css";\n'
            "const x = 1;\n"
        )
        fixes = self.stage.apply(tree, context)

        assert [f.type for f in fixes] == [FixType.EMPTY_IMPORT_REMOVED]
        assert fixes[0].from_value == "@/lib/utils"
        assert tree.regenerate() == 'import "./globals.css";\nconst x = 1;\n'

    def test_synthesis_is_a_fixed_point(self, parse, context):
        tree = parse("const x = <><Hero /><StatCard /></>;\n")
        self.stage.apply(tree, context)
        again = parse(tree.regenerate())
        assert self.stage.apply(again, context) == []


class TestUsedComponentNames:
    """Component usage collection."""

    def test_capitalized_roots_only(self, parse):
        tree = parse("const x = <Layout><div /><Nav.Item /><ui.Button /></Layout>;\n")
        assert used_component_names(tree) == ["Layout", "Nav"]


class TestImportPathVerifier:
    """On-disk resolution of `@/` imports."""

    def setup_method(self):
        self.verifier = ImportPathVerifier()

    def _context(self, tree):
        return StageContext(tables=DEFAULT_TABLES, unit=tree.source)

    @pytest.mark.asyncio
    async def test_resolved_and_unresolved(self, parse, tmp_path):
        (tmp_path / "components" / "ui").mkdir(parents=True)
        (tmp_path / "components" / "ui" / "button.tsx").write_text("export {}")
        tree = parse(
            'import { Button } from "@/components/ui/button";\n'
            'import { Missing } from "@/components/ui/missing";\n'
            'import React from "react";\n',
            project_root=str(tmp_path),
        )
        context = self._context(tree)

        unresolved = await self.verifier.verify(tree, context)

        assert unresolved == ["@/components/ui/missing"]
        assert context.unresolved_imports == ["@/components/ui/missing"]
        assert len(context.diagnostics) == 1
        assert context.diagnostics[0].severity is Severity.WARNING
        assert context.diagnostics[0].code == "UNRESOLVED_IMPORT"
        assert context.diagnostics[0].line == 2

    @pytest.mark.asyncio
    async def test_directory_index(self, parse, tmp_path):
        (tmp_path / "components" / "ui" / "card").mkdir(parents=True)
        (tmp_path / "components" / "ui" / "card" / "index.ts").write_text("export {}")
        tree = parse('import { Card } from "@/components/ui/card";\n', project_root=str(tmp_path))

        assert await self.verifier.verify(tree, self._context(tree)) == []

    @pytest.mark.asyncio
    async def test_specifier_with_extension(self, parse, tmp_path):
        (tmp_path / "styles").mkdir()
        (tmp_path / "styles" / "theme.css").write_text("")
        tree = parse('import "@/styles/theme.css";\n', project_root=str(tmp_path))

        assert await self.verifier.verify(tree, self._context(tree)) == []

    @pytest.mark.asyncio
    async def test_skipped_without_project_root(self, parse):
        tree = parse('import { Ghost } from "@/components/ui/ghost";\n')
        context = self._context(tree)
        assert await self.verifier.verify(tree, context) == []
        assert context.diagnostics == []

    @pytest.mark.asyncio
    async def test_missing_project_root_counts_as_not_found(self, parse, tmp_path):
        root = tmp_path / "does-not-exist"
        tree = parse('import { Ghost } from "@/components/ui/ghost";\n', project_root=str(root))
        unresolved = await self.verifier.verify(tree, self._context(tree))
        assert unresolved == ["@/components/ui/ghost"]

    def test_candidates(self, parse):
        tree = parse("const a = 1;\n")
        context = self._context(tree)
        assert ImportPathVerifier.candidates("@/components/ui/card", context) == [
            "components/ui/card.tsx",
            "components/ui/card.ts",
            "components/ui/card/index.tsx",
            "components/ui/card/index.ts",
        ]
