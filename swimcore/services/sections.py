"""Section label classification.

Labels are free text ("Warm up", "Main 2", "Kick w/ fins"), so classification is
an ordered keyword scan. Order matters: "Warm-up swim kick" is a warm-up because
"warm" is checked before "kick".
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class SectionKind(str, Enum):
    WARMUP = "warmup"
    BUILD = "build"
    DRILL = "drill"
    KICK = "kick"
    PULL = "pull"
    MAIN = "main"
    COOLDOWN = "cooldown"
    UNKNOWN = "unknown"


# Precedence: warm > build > drill > kick > pull > cool > main.
_KEYWORD_ORDER: tuple[tuple[str, SectionKind], ...] = (
    ("warm", SectionKind.WARMUP),
    ("build", SectionKind.BUILD),
    ("drill", SectionKind.DRILL),
    ("kick", SectionKind.KICK),
    ("pull", SectionKind.PULL),
    ("cool", SectionKind.COOLDOWN),
    ("main", SectionKind.MAIN),
)

# The exact-distance template store has no pull entries.
TEMPLATE_KINDS = frozenset(
    {SectionKind.WARMUP, SectionKind.BUILD, SectionKind.DRILL, SectionKind.KICK, SectionKind.COOLDOWN, SectionKind.MAIN}
)

_CANONICAL_LABELS = {
    "warm-up": "Warm up",
    "warm up": "Warm up",
    "warmup": "Warm up",
    "build": "Build",
    "drill": "Drill",
    "kick": "Kick",
    "pull": "Pull",
    "main": "Main",
    "main 1": "Main 1",
    "main 2": "Main 2",
    "cooldown": "Cool down",
    "cool down": "Cool down",
    "cool-down": "Cool down",
}


def section_category(label: str) -> SectionKind:
    key = str(label or "").lower()
    for token, kind in _KEYWORD_ORDER:
        if token in key:
            return kind
    return SectionKind.UNKNOWN


def generator_branch(label: str) -> SectionKind:
    """Branch used by the set generator; anything unrecognised is treated as main."""
    kind = section_category(label)
    return SectionKind.MAIN if kind == SectionKind.UNKNOWN else kind


def template_category(label: str) -> Optional[SectionKind]:
    """Template-store key; same precedence with pull skipped."""
    key = str(label or "").lower()
    for token, kind in _KEYWORD_ORDER:
        if kind in TEMPLATE_KINDS and token in key:
            return kind
    return None


def is_easy_section(label: str) -> bool:
    return section_category(label) in (SectionKind.WARMUP, SectionKind.COOLDOWN)


def canonical_label(raw: str) -> str:
    text = str(raw or "").strip()
    key = " ".join(text.lower().split())
    return _CANONICAL_LABELS.get(key, text)
