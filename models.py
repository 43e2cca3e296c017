# models.py
"""
Data structures for the AGENTS.md build pipeline.
Contains the core data models shared by the ingestor, composer and CLI.
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Union


@dataclass
class Document:
    """A markdown file split into its frontmatter and body."""
    frontmatter: Dict[str, str]
    body: str
    path: Optional[Path] = None


@dataclass
class RuleReference:
    """A markdown link into the rules directory, e.g. [Title](rules/file.md)."""
    title: str
    file: str                    # relative to the rules directory


@dataclass
class Rule:
    """A rule file that was found and parsed."""
    title: str                   # link text from SKILL.md, used for the heading
    path: str
    anchor: str
    frontmatter: Dict[str, str] = field(default_factory=dict)
    content: str = ""
    warnings: List[str] = field(default_factory=list)

    found = True

    @property
    def impact(self) -> Optional[str]:
        return self.frontmatter.get("impact") or None

    @property
    def description(self) -> Optional[str]:
        return self.frontmatter.get("description") or None

    @property
    def tags(self) -> List[str]:
        """Frontmatter tags, accepting both `[a, b]` and `a, b`."""
        raw = self.frontmatter.get("tags", "").strip()
        if raw.startswith("[") and raw.endswith("]"):
            raw = raw[1:-1]
        return [t.strip().strip("'\"") for t in raw.split(",") if t.strip()]


@dataclass
class MissingRule:
    """Placeholder for a reference whose rule file does not exist."""
    title: str
    path: str
    anchor: str

    found = False


RuleEntry = Union[Rule, MissingRule]


@dataclass
class Section:
    """A numbered section of SKILL.md and the rules it links to."""
    number: str                  # as authored; output numbering is positional
    title: str
    anchor: str
    start: int
    end: int
    references: List[RuleReference] = field(default_factory=list)
    rules: List[RuleEntry] = field(default_factory=list)


@dataclass
class BuildResult:
    """Outcome of one build, used by the reporting shell."""
    output_path: Path
    sections: List[Section]
    warnings: List[str]
    size_bytes: int
    generated_at: datetime

    @property
    def rule_count(self) -> int:
        return sum(len(s.rules) for s in self.sections)

    @property
    def missing_count(self) -> int:
        return sum(1 for s in self.sections for r in s.rules if not r.found)
