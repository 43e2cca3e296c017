# utils.py
"""
Shared utility functions for the AGENTS.md build pipeline.
Consolidates anchor, heading, badge and file helpers used by the builder.
"""

import os
import re
import sys
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterator, Optional, Tuple, Union


# ==========================
# String & Formatting Utilities
# ==========================

def create_anchor(title: str) -> str:
    """Convert a heading title to an in-document anchor ("User ID" -> "user-id")."""
    text = re.sub(r"[^\w\s-]", "", title.lower())
    return re.sub(r"\s+", "-", text)


IMPACT_BADGES = {
    "CRITICAL": "🔴 CRITICAL",
    "HIGH": "🟠 HIGH",
    "MEDIUM": "🟡 MEDIUM",
}
DEFAULT_BADGE = "🟢 LOW"


def impact_badge(impact: str) -> str:
    """Map a rule impact level to its badge; unknown levels render as LOW."""
    return IMPACT_BADGES.get((impact or "").strip().upper(), DEFAULT_BADGE)


def render_frontmatter(frontmatter: Dict[str, str]) -> str:
    """Serialize a flat frontmatter mapping back to a --- block, keeping key order."""
    lines = ["---"]
    lines.extend(f"{key}: {value}" for key, value in frontmatter.items())
    lines.append("---")
    return "\n".join(lines) + "\n"


def iso_timestamp(moment: Optional[datetime] = None) -> str:
    """UTC ISO-8601 timestamp with millisecond precision, e.g. 2025-01-01T12:00:00.000Z"""
    moment = moment or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# ==========================
# Markdown Heading Utilities
# ==========================

ATX_HEADING_RE = re.compile(r"^(#{1,6})[ \t]+(.+?)(?:[ \t]+#+)?[ \t]*$")
FENCE_RE = re.compile(r"^ {0,3}(`{3,}|~{3,})")


def iter_headings(text: str) -> Iterator[Tuple[int, str, int, int]]:
    """
    Yield (level, title, line_start, line_end) for every ATX heading in text.

    Lines inside fenced code blocks are skipped, so `# comment` lines in
    shell or python samples are not mistaken for headings. Offsets are
    character positions into text; line_end includes the newline.
    """
    pos = 0
    fence: Optional[str] = None
    for line in text.splitlines(keepends=True):
        stripped = line.rstrip("\r\n")
        fence_match = FENCE_RE.match(stripped)
        if fence:
            marker = fence_match.group(1) if fence_match else ""
            if marker and marker[0] == fence[0] and len(marker) >= len(fence):
                fence = None
        elif fence_match:
            fence = fence_match.group(1)
        else:
            m = ATX_HEADING_RE.match(stripped)
            if m:
                yield len(m.group(1)), m.group(2).strip(), pos, pos + len(line)
        pos += len(line)


def find_heading_block(text: str, heading: str) -> Optional[str]:
    """
    Return the stripped content under the first heading whose text is `heading`.

    The block runs until the next heading of the same or a higher level, or
    to the end of the document. Returns None when no such heading exists.
    """
    headings = list(iter_headings(text))
    for idx, (level, title, _, body_start) in enumerate(headings):
        if title != heading:
            continue
        body_end = len(text)
        for next_level, _, next_start, _ in headings[idx + 1:]:
            if next_level <= level:
                body_end = next_start
                break
        return text[body_start:body_end].strip()
    return None


# ==========================
# File Utilities
# ==========================

def write_text_atomic(path: Union[str, Path], text: str) -> int:
    """
    Write text to path through a temporary sibling file and os.replace.

    Readers never observe a half-written file, and the previous content
    stays in place if writing fails. Returns the number of bytes written.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = text.encode("utf-8")
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        # mkstemp creates 0600 files
        os.chmod(tmp_name, 0o644)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise
    return len(data)


# ==========================
# Console Reporting
# ==========================

def log_info(message: str) -> None:
    print(f"[INFO] {message}", flush=True)


def log_warn(message: str) -> None:
    print(f"[WARN] {message}", flush=True)


def log_error(message: str) -> None:
    print(f"[ERROR] {message}", file=sys.stderr, flush=True)
