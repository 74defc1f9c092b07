"""Tests for the restricted front-matter grammar."""

from __future__ import annotations

from modrules.catalog.parser import parse_frontmatter


def _doc(block: str, body: str = "Body text") -> str:
    return f"---\n{block}\n---\n{body}"


class TestBlockDetection:
    def test_no_block_returns_original(self):
        text = "# Title\n\nno front-matter here"
        meta, body = parse_frontmatter(text)
        assert meta == {}
        assert body == text

    def test_block_must_open_document(self):
        text = "\n---\nname: x\n---\nbody"
        meta, body = parse_frontmatter(text)
        assert meta == {}
        assert body == text

    def test_unterminated_block(self):
        text = "---\nname: x\nbody without closing delimiter"
        meta, body = parse_frontmatter(text)
        assert meta == {}
        assert body == text

    def test_body_is_stripped(self):
        meta, body = parse_frontmatter(_doc("name: x", "\n\n  # Heading\n\ntext\n\n"))
        assert meta == {"name": "x"}
        assert body == "# Heading\n\ntext"

    def test_block_at_end_of_file(self):
        meta, body = parse_frontmatter("---\nname: x\n---")
        assert meta == {"name": "x"}
        assert body == ""

    def test_crlf_line_endings(self):
        meta, body = parse_frontmatter("---\r\nname: x\r\npriority: 5\r\n---\r\nbody\r\n")
        assert meta == {"name": "x", "priority": 5}
        assert body == "body"


class TestScalars:
    def test_strings_and_quotes(self):
        meta, _ = parse_frontmatter(_doc('name: "Auth"\ndescription: \'OAuth: flows\'\nplain: hi there'))
        assert meta["name"] == "Auth"
        assert meta["description"] == "OAuth: flows"
        assert meta["plain"] == "hi there"

    def test_booleans(self):
        meta, _ = parse_frontmatter(_doc("disabled: true\noverrideTriggers: false\nother: True"))
        assert meta["disabled"] is True
        assert meta["overrideTriggers"] is False
        assert meta["other"] == "True"

    def test_numbers(self):
        meta, _ = parse_frontmatter(_doc("priority: 80\nmaxTokens: '1500'\nratio: 0.5\nversion: 1.2.3"))
        assert meta["priority"] == 80
        assert meta["maxTokens"] == 1500
        assert meta["ratio"] == 0.5
        assert meta["version"] == "1.2.3"

    def test_inline_array(self):
        meta, _ = parse_frontmatter(_doc('tags: [a, "b", \'c\']\nempty: []'))
        assert meta["tags"] == ["a", "b", "c"]
        assert meta["empty"] == []

    def test_quoted_brackets_stay_scalar(self):
        meta, _ = parse_frontmatter(_doc(
            "description: '[beta] notes'\nlabel: \"[x, y]\"\nkeywords: '[not, a, list]'"
        ))
        assert meta["description"] == "[beta] notes"
        assert meta["label"] == "[x, y]"
        assert meta["triggers"] == {"keywords": ["[not, a, list]"]}

    def test_only_matching_quote_pairs_are_removed(self):
        meta, _ = parse_frontmatter(_doc("a: Say 'hi'\nb: \"mixed'\nc: 'it''s'"))
        assert meta["a"] == "Say 'hi'"
        assert meta["b"] == "\"mixed'"
        assert meta["c"] == "it's"

    def test_comments_and_blank_lines_ignored(self):
        meta, _ = parse_frontmatter(_doc("# a comment\n\nname: x\n   # indented comment"))
        assert meta == {"name": "x"}

    def test_lines_without_colon_ignored(self):
        meta, _ = parse_frontmatter(_doc("just some words\nname: x\n: no key"))
        assert meta == {"name": "x"}


class TestTriggers:
    def test_nested_arrays(self):
        block = (
            "name: Supabase\n"
            "triggers:\n"
            "  filePatterns:\n"
            "    - supabase/**\n"
            "    - '**/supabase.ts'\n"
            "  keywords:\n"
            '    - "database"\n'
            "    - rls\n"
            "priority: 70"
        )
        meta, _ = parse_frontmatter(_doc(block))
        assert meta["triggers"] == {
            "filePatterns": ["supabase/**", "**/supabase.ts"],
            "keywords": ["database", "rls"],
        }
        assert meta["priority"] == 70

    def test_inline_trigger_arrays(self):
        meta, _ = parse_frontmatter(_doc("triggers:\n  imports: [\"@supabase/supabase-js\", supabase]"))
        assert meta["triggers"] == {"imports": ["@supabase/supabase-js", "supabase"]}

    def test_trigger_kinds_nest_without_triggers_line(self):
        meta, _ = parse_frontmatter(_doc("name: x\nkeywords:\n  - oauth\ndependencies: [jose]"))
        assert "keywords" not in meta
        assert meta["triggers"] == {"keywords": ["oauth"], "dependencies": ["jose"]}

    def test_scalar_trigger_value_becomes_list(self):
        meta, _ = parse_frontmatter(_doc("triggers:\n  keywords: oauth"))
        assert meta["triggers"] == {"keywords": ["oauth"]}

    def test_empty_triggers_object(self):
        meta, _ = parse_frontmatter(_doc("name: x\ntriggers:"))
        assert meta["triggers"] == {}

    def test_scalar_line_closes_array(self):
        meta, _ = parse_frontmatter(_doc("keywords:\n  - a\npriority: 10\n  - b"))
        assert meta["triggers"] == {"keywords": ["a"]}
        assert meta["priority"] == 10

    def test_unknown_key_closes_array(self):
        meta, _ = parse_frontmatter(_doc("keywords:\n  - a\naliases:\n  - b"))
        assert meta["triggers"] == {"keywords": ["a"]}
        assert "aliases" not in meta

    def test_dash_item_outside_array_ignored(self):
        meta, _ = parse_frontmatter(_doc("- orphan\nname: x"))
        assert meta == {"name": "x"}

    def test_later_triggers_line_keeps_earlier_kinds(self):
        meta, _ = parse_frontmatter(_doc("keywords: [a]\ntriggers:\n  imports: [b]"))
        assert meta["triggers"] == {"keywords": ["a"], "imports": ["b"]}
