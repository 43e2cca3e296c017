# skill_ingestor.py
"""
Skill Ingestor

Parses a SKILL.md file, splits it into numbered sections and resolves the
rule files each section links to.
"""

import re
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from jsonschema import Draft202012Validator

from config import DEFAULTS, BuildConfig
from models import Document, MissingRule, Rule, RuleEntry, RuleReference, Section
from utils import create_anchor

IMPACT_LEVELS = ["CRITICAL", "HIGH", "MEDIUM", "LOW"]

RULE_FRONTMATTER_SCHEMA = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "properties": {
        "title": {"type": "string", "minLength": 1},
        "impact": {"enum": IMPACT_LEVELS},
        "description": {"type": "string"},
        "tags": {"type": "string"},
    },
    "additionalProperties": {"type": "string"},
}

SKILL_FRONTMATTER_SCHEMA = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["name", "description"],
    "properties": {
        "name": {"type": "string", "minLength": 1},
        "description": {"type": "string", "minLength": 1},
    },
    "additionalProperties": {"type": "string"},
}


# ---------- Parsing primitives ----------

def parse_frontmatter(text: str) -> Tuple[Dict[str, str], str]:
    """
    Split a leading --- delimited block off text.

    Returns (frontmatter, body). Values stay strings exactly as written
    (trimmed); lines without a colon are skipped. Without an opening and a
    closing --- line the frontmatter is empty and the body is text unchanged.
    """
    lines = text.splitlines(keepends=True)
    if not lines or lines[0].rstrip("\r\n") != "---":
        return {}, text

    for close_idx in range(1, len(lines)):
        if lines[close_idx].rstrip("\r\n") == "---":
            break
    else:
        return {}, text

    frontmatter: Dict[str, str] = {}
    for line in lines[1:close_idx]:
        key, sep, value = line.partition(":")
        key = key.strip()
        if not sep or not key:
            continue
        frontmatter[key] = value.strip()
    return frontmatter, "".join(lines[close_idx + 1:])


def extract_rule_references(text: str, prefix: str = "rules/") -> List[RuleReference]:
    """Return every [title](<prefix>file.md) link in text, in order, duplicates kept."""
    pattern = re.compile(r"\[([^\]]+)\]\(" + re.escape(prefix) + r"([^)]+\.md)\)")
    return [RuleReference(title=m.group(1), file=m.group(2)) for m in pattern.finditer(text or "")]


def split_sections(body: str, pattern: Union[str, "re.Pattern[str]"] = DEFAULTS.build.section_heading_regex) -> List[Section]:
    """
    Partition body at every heading matching pattern.

    The pattern needs two groups, the section number and the title. Each
    section spans from its heading to the next match (or end of body), so
    spans are contiguous and never overlap. No match yields no sections.
    """
    regex = re.compile(pattern, re.MULTILINE) if isinstance(pattern, str) else pattern
    matches = list(regex.finditer(body))
    sections: List[Section] = []
    for idx, m in enumerate(matches):
        end = matches[idx + 1].start() if idx + 1 < len(matches) else len(body)
        title = m.group(2).strip()
        sections.append(Section(
            number=m.group(1),
            title=title,
            anchor=create_anchor(title),
            start=m.start(),
            end=end,
        ))
    return sections


class SkillIngestor:
    """Loads SKILL.md and the rule files it references, collecting warnings on the way."""

    def __init__(self, cfg: Optional[BuildConfig] = None):
        self.cfg = cfg or DEFAULTS.build
        self.section_pattern = re.compile(self.cfg.section_heading_regex, re.MULTILINE)
        self.warnings: List[str] = []
        self._skill_validator = Draft202012Validator(SKILL_FRONTMATTER_SCHEMA)
        self._rule_validator = Draft202012Validator(RULE_FRONTMATTER_SCHEMA)

    # ---------- Public API ----------

    def ingest(self, path: Optional[Union[str, Path]] = None) -> Tuple[Document, List[Section]]:
        """Load SKILL.md, split it into sections and resolve every rule."""
        document = self.load_skill(path)
        sections = self.extract_sections(document.body)
        self.resolve_rules(sections)
        return document, sections

    def load_skill(self, path: Optional[Union[str, Path]] = None) -> Document:
        path = Path(path) if path else self.cfg.source_path
        if not path.is_file():
            raise FileNotFoundError(f"{self.cfg.source_file} not found: {path}")

        frontmatter, body = parse_frontmatter(path.read_text(encoding="utf-8"))
        for problem in self._validate(self._skill_validator, frontmatter):
            self._warn(f"{path.name}: {problem}")
        return Document(frontmatter=frontmatter, body=body, path=path)

    def extract_sections(self, body: str) -> List[Section]:
        sections = split_sections(body, self.section_pattern)
        for section in sections:
            section.references = extract_rule_references(
                body[section.start:section.end], self.cfg.rule_link_prefix
            )
        return sections

    def resolve_rules(self, sections: List[Section]) -> List[Section]:
        # One entry per reference: repeated links are resolved and rendered again
        for section in sections:
            section.rules = [self.read_rule(ref) for ref in section.references]
        return sections

    def read_rule(self, ref: RuleReference) -> RuleEntry:
        anchor = create_anchor(ref.title)
        full_path = self.cfg.rules_dir / ref.file
        if not full_path.is_file():
            self._warn(f"Rule file not found: {ref.file}")
            return MissingRule(title=ref.title, path=ref.file, anchor=anchor)

        frontmatter, content = parse_frontmatter(full_path.read_text(encoding="utf-8"))
        problems = [f"{ref.file}: {p}" for p in self._validate(self._rule_validator, frontmatter)]
        for problem in problems:
            self._warn(problem)
        return Rule(
            title=ref.title,
            path=ref.file,
            anchor=anchor,
            frontmatter=frontmatter,
            content=content.strip(),
            warnings=problems,
        )

    # ---------- Internal methods ----------

    def _warn(self, message: str):
        self.warnings.append(message)

    @staticmethod
    def _validate(validator: Draft202012Validator, data: Dict[str, str]) -> List[str]:
        problems: List[str] = []
        for err in sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.path]):
            where = ".".join(str(p) for p in err.path) or "frontmatter"
            problems.append(f"{where}: {err.message}")
        return problems
