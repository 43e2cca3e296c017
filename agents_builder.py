# agents_builder.py
"""
AGENTS.md Composer

Turns a parsed SKILL.md and its resolved rule files into one consolidated
Markdown document with a table of contents, and writes it next to SKILL.md.
"""

from datetime import datetime, timezone
from typing import List, Optional

from config import DEFAULTS, BuildConfig
from models import BuildResult, Document, RuleEntry, Section
from skill_ingestor import SkillIngestor
from utils import (
    find_heading_block,
    impact_badge,
    iso_timestamp,
    render_frontmatter,
    write_text_atomic,
)


# ==========================
# Rendering
# ==========================

def render_toc(sections: List[Section]) -> str:
    """Table of contents with positional numbering: sections N., rules N.M."""
    lines = ["## Table of Contents", ""]
    for s_idx, section in enumerate(sections, 1):
        lines.append(f"{s_idx}. [{section.title}](#{section.anchor})")
        for r_idx, rule in enumerate(section.rules, 1):
            lines.append(f"   {s_idx}.{r_idx}. [{rule.title}](#{rule.anchor})")
        lines.append("")
    return "\n".join(lines) + "\n"


def render_rule_markdown(rule: RuleEntry, number: str) -> str:
    """
    Render one rule under its `### N.M.` heading.

    Missing rules keep their heading and anchor, so table of contents links
    still land somewhere, and carry a not-found notice instead of content.
    Every rule, found or not, ends with a horizontal rule.
    """
    parts = [f"### {number}. {rule.title}", "", f'<a name="{rule.anchor}"></a>', ""]

    if not rule.found:
        parts += [f"_Rule file not found: {rule.path}_", ""]
    else:
        if rule.impact:
            parts += [f"**Impact:** {impact_badge(rule.impact)}", ""]
        if rule.description:
            parts += [f"> {rule.description}", ""]
        parts += [rule.content, ""]

    parts += ["---", ""]
    return "\n".join(parts) + "\n"


def render_section_markdown(section: Section, index: int) -> str:
    parts = [f"## {index}. {section.title}\n\n", f'<a name="{section.anchor}"></a>\n\n']
    for r_idx, rule in enumerate(section.rules, 1):
        parts.append(render_rule_markdown(rule, f"{index}.{r_idx}"))
    return "".join(parts)


def render_heading_block(label: str, content: str) -> str:
    if not content:
        return f"## {label}\n\n"
    return f"## {label}\n\n{content}\n\n"


def compose_agents_md(
    document: Document,
    sections: List[Section],
    cfg: Optional[BuildConfig] = None,
    generated_at: Optional[datetime] = None,
) -> str:
    """
    Assemble the consolidated AGENTS.md text.

    Order: frontmatter, title and description, the preamble block, table of
    contents, every section with its rules, the trailing blocks in
    configured order, and the auto-generation footer. Pure: the inputs are
    not modified and nothing is written.
    """
    cfg = cfg or DEFAULTS.build
    frontmatter = document.frontmatter
    out: List[str] = []

    out.append(render_frontmatter(frontmatter) + "\n")
    out.append(f"# {frontmatter.get('name') or cfg.default_title}\n\n")
    out.append(f"{frontmatter.get('description', '')}\n\n")

    if cfg.preamble_heading:
        preamble = find_heading_block(document.body, cfg.preamble_heading)
        if preamble is not None:
            out.append(render_heading_block(cfg.preamble_heading, preamble))

    out.append(render_toc(sections))
    out.append("---\n\n")

    for idx, section in enumerate(sections, 1):
        out.append(render_section_markdown(section, idx))

    # Fixed emission order, wherever the blocks sit in SKILL.md
    for label in cfg.trailing_headings:
        block = find_heading_block(document.body, label)
        if block is not None:
            out.append(render_heading_block(label, block))

    out.append("\n---\n\n")
    out.append(
        f"_This file was automatically generated from individual rule files on {iso_timestamp(generated_at)}_\n"
    )
    out.append(f"_To update, run: `{cfg.regenerate_command}`_\n")
    return "".join(out)


# ==========================
# Build Pipeline
# ==========================

def build_agents(cfg: Optional[BuildConfig] = None, generated_at: Optional[datetime] = None) -> BuildResult:
    """
    Read SKILL.md, resolve its rules and write AGENTS.md.

    Raises FileNotFoundError when SKILL.md is missing. Missing rule files are
    reported in BuildResult.warnings. The output is only replaced once the
    whole document has been composed.
    """
    cfg = cfg or DEFAULTS.build
    generated_at = generated_at or datetime.now(timezone.utc)

    ingestor = SkillIngestor(cfg)
    document, sections = ingestor.ingest()
    text = compose_agents_md(document, sections, cfg, generated_at)
    size = write_text_atomic(cfg.output_path, text)

    return BuildResult(
        output_path=cfg.output_path,
        sections=sections,
        warnings=list(ingestor.warnings),
        size_bytes=size,
        generated_at=generated_at,
    )
