"""Read rendered workout text back into sections, effort zones and time estimates."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from swimcore.services.pool_math import body_distance, body_rest_seconds, pace_multiplier_for_label

FOOTER_PREFIXES = (
    "Requested:",
    "Total distance:",
    "Total lengths:",
    "Ends at start end:",
    "Est total time:",
)

ZONE_ORDER = ("easy", "moderate", "strong", "hard", "full_gas")

_HEADER = re.compile(r"^([^:]{2,30}):\s*(.+)$")
_STRIATED = re.compile(
    r"\b(build|descend|negative split|odds|evens|alternate|every other)\b|\d+\s*-\s*\d+",
    re.I,
)

_LINE_ZONE_WORDS = (
    ("full_gas", ("sprint", "all out", "max effort", "race pace", "full gas", "100%")),
    ("hard", ("fast", "strong", "hard", "threshold", "best average")),
    ("strong", ("push", "moderate", "build", "descend", "negative split")),
    ("moderate", ("steady", "smooth", "drill", "technique", "focus", "form", "choice", "relaxed")),
    ("easy", ("easy", "recovery", "loosen", "warm", "cool")),
)


@dataclass(frozen=True)
class ParsedSection:
    label: str
    body: str


def is_footer_line(line: str) -> bool:
    return str(line or "").strip().startswith(FOOTER_PREFIXES)


def parse_workout_text(text: str) -> list[ParsedSection]:
    """Split ``Label: first line`` blocks; footer lines are dropped."""
    sections: list[ParsedSection] = []
    label: Optional[str] = None
    lines: list[str] = []

    def flush():
        if label is not None and lines:
            sections.append(ParsedSection(label=label, body="\n".join(lines)))

    for raw in str(text or "").splitlines():
        line = raw.strip()
        if not line or is_footer_line(line):
            continue
        header = _HEADER.match(line)
        if header and not line[0].isdigit():
            flush()
            label = header.group(1).strip()
            lines = [header.group(2).strip()]
        elif label is not None:
            lines.append(line)
    flush()
    return sections


def line_zone(line: str) -> Optional[str]:
    lowered = str(line or "").lower()
    for zone, words in _LINE_ZONE_WORDS:
        if any(word in lowered for word in words):
            return zone
    return None


def infer_zone(body: str, label: str = "") -> str:
    """Hardest zone named anywhere in the body.

    Warm-up and cool-down are always easy. Main sets never read easier than strong.
    """
    key = str(label or "").lower()
    if "warm" in key or "cool" in key:
        return "easy"
    zones = [z for z in (line_zone(line) for line in str(body or "").splitlines()) if z]
    zone = max(zones, key=ZONE_ORDER.index) if zones else "moderate"
    if "main" in key and ZONE_ORDER.index(zone) < ZONE_ORDER.index("strong"):
        return "strong"
    return zone


def infer_is_striated(body: str) -> bool:
    """True when effort changes within the set (build, descend, odds/evens, multi-zone)."""
    text = str(body or "")
    if _STRIATED.search(text):
        return True
    zones = {z for z in (line_zone(line) for line in text.splitlines()) if z}
    return len(zones) > 1


def estimate_workout_seconds(text: str, pace_seconds_per_100) -> Optional[float]:
    """Swim time at threshold pace scaled per section kind, plus annotated rest."""
    try:
        pace = float(pace_seconds_per_100)
    except (TypeError, ValueError):
        return None
    if pace <= 0:
        return None
    total = 0.0
    for section in parse_workout_text(text):
        dist = body_distance(section.body)
        if not dist:
            continue
        total += (dist / 100.0) * pace * pace_multiplier_for_label(section.label)
        total += body_rest_seconds(section.body)
    return total
