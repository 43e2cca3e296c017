"""
Build AGENTS.md from SKILL.md and its rule files.

    python run.py build     # one build, exit 1 if SKILL.md is missing
    python run.py watch     # build, then rebuild on every change
"""

import argparse
import sys
import traceback
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from agents_builder import build_agents
from config import DEFAULTS, AppConfig, BuildConfig
from models import BuildResult
from utils import log_error, log_info, log_warn
from watcher import AgentsWatcher

SEPARATOR = "━" * 50

# ---------- reporting ----------

def report_build(result: BuildResult) -> None:
    log_info(f"Found {len(result.sections)} sections")
    for section in result.sections:
        print(f"  • {section.title}: {len(section.rules)} rules")
    for warning in result.warnings:
        log_warn(warning)
    found = result.rule_count - result.missing_count
    log_info(f"Processed {found} rules ({result.missing_count} missing)")
    log_info(f"Output: {result.output_path}")
    log_info(f"Size: {result.size_bytes / 1024:.2f} KB")


def run_build(cfg: BuildConfig) -> BuildResult:
    """Build once and print the summary. Errors propagate to the caller."""
    print(SEPARATOR)
    log_info(f"Building {cfg.output_file} from {cfg.source_path}")
    result = build_agents(cfg)
    report_build(result)
    print(SEPARATOR)
    return result


# ---------- commands ----------

def cmd_build(app: AppConfig) -> int:
    try:
        run_build(app.build)
    except FileNotFoundError as e:
        log_error(str(e))
        return 1
    except Exception as e:
        log_error(f"Build failed: {e}")
        traceback.print_exc()
        return 1
    return 0


def cmd_watch(app: AppConfig) -> int:
    watcher = AgentsWatcher(
        rebuild=lambda: run_build(app.build),
        cfg=app.build,
        watch_cfg=app.watch,
    )
    try:
        watcher.serve_forever()
    except OSError as e:
        log_error(f"Cannot watch {app.build.skill_dir}: {e}")
        return 1
    return 0


def make_config(args: argparse.Namespace) -> AppConfig:
    build = DEFAULTS.build
    if args.root:
        build = replace(build, root=Path(args.root))
    if args.skill:
        build = replace(build, skill_name=args.skill)
    return AppConfig(build=build, watch=replace(DEFAULTS.watch))


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Generate AGENTS.md from SKILL.md and rule files")
    ap.add_argument("--root", default=None, help="repository root (default: this checkout)")
    ap.add_argument("--skill", default=None, help=f"skill directory name (default: {DEFAULTS.build.skill_name})")
    sub = ap.add_subparsers(dest="command", required=True)
    sub.add_parser("build", help="build AGENTS.md once")
    sub.add_parser("watch", help="rebuild AGENTS.md whenever SKILL.md or a rule changes")
    args = ap.parse_args(argv)

    app = make_config(args)
    if args.command == "watch":
        return cmd_watch(app)
    return cmd_build(app)


if __name__ == "__main__":
    sys.exit(main())
