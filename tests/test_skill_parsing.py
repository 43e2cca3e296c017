# tests/test_skill_parsing.py
"""
Unit tests for the SKILL.md parsing primitives: frontmatter, rule links and
numbered sections.
"""

from skill_ingestor import extract_rule_references, parse_frontmatter, split_sections
from utils import render_frontmatter


# ---------- frontmatter ----------

def test_frontmatter_absent_returns_text_unchanged():
    text = "# Title\n\nNo metadata here.\n"
    fm, body = parse_frontmatter(text)
    assert fm == {}
    assert body == text


def test_frontmatter_unclosed_is_not_frontmatter():
    text = "---\nname: x\n\nbody without closing delimiter\n"
    fm, body = parse_frontmatter(text)
    assert fm == {}
    assert body == text


def test_frontmatter_splits_on_first_colon_and_keeps_strings():
    text = (
        "---\n"
        "title: Use Sessions\n"
        "url: https://example.com:8443/path\n"
        "tags: [sessions, auth]\n"
        "impact:   HIGH  \n"
        "this line has no colon\n"
        "---\n"
        "Body line.\n"
    )
    fm, body = parse_frontmatter(text)
    assert fm == {
        "title": "Use Sessions",
        "url": "https://example.com:8443/path",
        "tags": "[sessions, auth]",
        "impact": "HIGH",
    }
    assert body == "Body line.\n"


def test_frontmatter_keeps_authored_key_order():
    text = "---\nzeta: 1\nalpha: 2\nmid: 3\n---\n"
    fm, body = parse_frontmatter(text)
    assert list(fm) == ["zeta", "alpha", "mid"]
    assert body == ""


def test_frontmatter_reserialized_parses_to_same_pairs():
    fm, _ = parse_frontmatter("---\nname: composio\ndescription: a: b\nversion: 1.0\n---\nbody\n")
    again, body = parse_frontmatter(render_frontmatter(fm) + "rest\n")
    assert again == fm
    assert list(again) == list(fm)
    assert body == "rest\n"


def test_frontmatter_handles_crlf_lines():
    fm, body = parse_frontmatter("---\r\nname: demo\r\n---\r\ntext\r\n")
    assert fm == {"name": "demo"}
    assert body == "text\r\n"


# ---------- rule references ----------

def test_references_empty_input():
    assert extract_rule_references("") == []


def test_references_in_order_with_duplicates():
    text = (
        "- [Create Sessions](rules/session-create.md)\n"
        "- [Docs](https://docs.example.com)\n"
        "- [Other dir](guides/setup.md)\n"
        "- [Not markdown](rules/diagram.png)\n"
        "See [Auth](rules/auth.md) and again [Create Sessions](rules/session-create.md).\n"
    )
    refs = extract_rule_references(text)
    assert [(r.title, r.file) for r in refs] == [
        ("Create Sessions", "session-create.md"),
        ("Auth", "auth.md"),
        ("Create Sessions", "session-create.md"),
    ]


def test_references_custom_prefix_and_nested_files():
    refs = extract_rule_references("[Deep](docs/rules/triggers/webhook.md)", prefix="docs/rules/")
    assert len(refs) == 1
    assert refs[0].file == "triggers/webhook.md"


# ---------- sections ----------

def test_sections_none_found():
    body = "# Skill\n\n## Overview\n\nNo numbered sections.\n#### 1. Too deep\n## 2. Too shallow\n"
    assert split_sections(body) == []


def test_sections_spans_are_contiguous_and_cover_the_tail():
    body = (
        "Intro text\n\n"
        "### 1. Sessions\n- [A](rules/a.md)\n\n"
        "### 2. Auth\n- [B](rules/b.md)\n\n"
        "### 10. Triggers & Webhooks  \n- [C](rules/c.md)\n"
    )
    sections = split_sections(body)
    assert [s.number for s in sections] == ["1", "2", "10"]
    assert [s.title for s in sections] == ["Sessions", "Auth", "Triggers & Webhooks"]
    assert [s.anchor for s in sections] == ["sessions", "auth", "triggers-webhooks"]

    assert sections[0].start == body.index("### 1.")
    for prev, nxt in zip(sections, sections[1:]):
        assert prev.end == nxt.start
    assert sections[-1].end == len(body)
    assert body[sections[1].start:sections[1].end].startswith("### 2. Auth")
    assert "rules/c.md" not in body[sections[1].start:sections[1].end]


def test_sections_keep_source_order():
    body = "### 3. Third\n### 1. First\n### 2. Second\n"
    assert [s.title for s in split_sections(body)] == ["Third", "First", "Second"]
