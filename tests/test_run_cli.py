# tests/test_run_cli.py
"""
Smoke tests for the command line entry point (build command exit codes and
console reporting).
"""

from pathlib import Path

from run import main


def _write_skill(root: Path, with_rule: bool) -> Path:
    skill_dir = root / "skills" / "demo"
    (skill_dir / "rules").mkdir(parents=True)
    (skill_dir / "SKILL.md").write_text(
        "---\nname: demo\ndescription: cli test\n---\n### 1. Example\n- [My Rule](rules/my-rule.md)\n",
        encoding="utf-8",
    )
    if with_rule:
        (skill_dir / "rules" / "my-rule.md").write_text("---\nimpact: LOW\n---\nHello.\n", encoding="utf-8")
    return skill_dir


def test_build_succeeds(tmp_path, capsys):
    skill_dir = _write_skill(tmp_path, with_rule=True)

    assert main(["--root", str(tmp_path), "--skill", "demo", "build"]) == 0
    assert (skill_dir / "AGENTS.md").exists()
    out = capsys.readouterr().out
    assert "[INFO] Found 1 sections" in out
    assert "Processed 1 rules (0 missing)" in out


def test_build_with_missing_rule_still_exits_zero(tmp_path, capsys):
    skill_dir = _write_skill(tmp_path, with_rule=False)

    assert main(["--root", str(tmp_path), "--skill", "demo", "build"]) == 0
    assert "_Rule file not found: my-rule.md_" in (skill_dir / "AGENTS.md").read_text(encoding="utf-8")
    assert "[WARN] Rule file not found: my-rule.md" in capsys.readouterr().out


def test_build_without_skill_md_exits_nonzero(tmp_path, capsys):
    assert main(["--root", str(tmp_path), "--skill", "missing", "build"]) == 1
    err = capsys.readouterr().err
    assert "[ERROR]" in err
    assert "SKILL.md not found" in err
