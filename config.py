# config.py
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

# Repository root: this file lives at the top of the checkout
PROJECT_ROOT = Path(__file__).resolve().parent


@dataclass
class BuildConfig:
    # Locations, resolved as <root>/<skills_dir>/<skill_name>/...
    root: Path = PROJECT_ROOT
    skills_dir: str = "skills"
    skill_name: str = "composio"
    source_file: str = "SKILL.md"
    rules_dir_name: str = "rules"
    output_file: str = "AGENTS.md"
    # Parsing behavior
    # e.g. "### 1. Session Management"
    section_heading_regex: str = r"^### (\d+)\. (.+)$"
    rule_link_prefix: str = "rules/"
    # Composition
    preamble_heading: Optional[str] = "When to Apply"
    trailing_headings: Tuple[str, ...] = ("Quick Start", "References")
    default_title: str = "Composio Agent Skills"
    regenerate_command: str = "python run.py build"

    @property
    def skill_dir(self) -> Path:
        return Path(self.root) / self.skills_dir / self.skill_name

    @property
    def source_path(self) -> Path:
        return self.skill_dir / self.source_file

    @property
    def rules_dir(self) -> Path:
        return self.skill_dir / self.rules_dir_name

    @property
    def output_path(self) -> Path:
        return self.skill_dir / self.output_file


@dataclass
class WatchConfig:
    # 0 rebuilds on every qualifying event
    debounce_seconds: float = 0.0
    # sleep granularity of the blocking loop
    poll_interval: float = 1.0
    rule_suffix: str = ".md"


@dataclass
class AppConfig:
    build: BuildConfig = field(default_factory=BuildConfig)
    watch: WatchConfig = field(default_factory=WatchConfig)


# Global defaults used across modules
DEFAULTS = AppConfig()
