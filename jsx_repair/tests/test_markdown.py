"""
Tests for code block extraction.
"""

from jsx_repair.analyzers.markdown import extract_code


class TestExtractCode:
    """Fenced generator output."""

    def test_plain_source_unchanged(self):
        source = "const a = 1;\n"
        assert extract_code(source) == source

    def test_tagged_block(self):
        text = "Here you go:\n```tsx\nconst a = 1;\n```\nEnjoy!"
        assert extract_code(text) == "const a = 1;\n"

    def test_untagged_block(self):
        assert extract_code("```\nconst b = 2;\n```") == "const b = 2;\n"

    def test_largest_block_wins(self):
        text = (
            "```ts\ntype A = 1;\n```\n"
            "```jsx\nexport default function Page() {\n  return <main />;\n}\n```\n"
        )
        assert extract_code(text) == "export default function Page() {\n  return <main />;\n}\n"

    def test_other_languages_ignored(self):
        text = "```css\n.a { color: red; } .b { color: blue; } .c {}\n```\n```tsx\nconst x = 1;\n```"
        assert extract_code(text) == "const x = 1;\n"

    def test_unclosed_fence(self):
        assert extract_code("```tsx\nconst a = 1;\n") == "const a = 1;\n"
