"""Coach-plausibility rules for generated set bodies.

The predicates here are total: they take primitives, return booleans or small
result objects, and never raise. ``pick_even_rep_scheme`` is the even-rep search
shared by drill and kick sections.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Optional, Sequence

from swimcore.services.pool_math import (
    STANDARD_POOL_LENGTHS,
    clean_distance,
    ends_at_home_end,
    exact_reps,
    format_distance,
    parse_nxd,
    round_half_up,
)
from swimcore.services.sections import SectionKind, section_category

ALLOWED_REP_COUNTS = frozenset({2, 3, 4, 5, 6, 8, 9, 10, 12, 16, 20})
COACH_EVEN_REP_COUNTS = (4, 6, 8, 10, 12, 16, 20)
FORBIDDEN_DRILL_REP_COUNTS = frozenset({7, 9, 11, 13, 14, 15, 17, 18, 19})
FORBIDDEN_EASY_WORDS = ("hard", "threshold", "sprint", "max", "full gas", "fullgas", "fast", "race pace", "all out")
FULL_GAS_WORDS = ("sprint", "all out", "full gas", "max effort")

EVEN_REP_PREFERENCES: dict[str, tuple[int, ...]] = {
    "drill": (50, 25, 75, 100),
    "kick": (50, 25, 100),
}

# Coach-normal section totals in 25/50 pools.
WARM_COOL_TOTALS = frozenset({100, 200, 300, 400, 500, 600, 800, 1000})
KICK_TOTALS = frozenset({200, 300, 400, 500, 600, 800})

_NUMBERED_LINE = re.compile(r"^\d+\.\s+\w")
_SINGLE_LINE = re.compile(r"^(\d+(?:\.\d+)?)\s+(.+)$")


@dataclass(frozen=True)
class EvenRepScheme:
    reps: int
    rep_distance: float
    search_pass: int


@dataclass(frozen=True)
class SetBodyCheck:
    valid: bool
    reason: str = ""


def is_allowed_rep_count(reps, rep_distance) -> bool:
    try:
        r = float(reps)
        d = float(rep_distance)
    except (TypeError, ValueError):
        return False
    if not math.isfinite(r) or not math.isfinite(d):
        return False
    if r < 1 or d <= 0 or r != int(r):
        return False
    if r == 1:
        return True
    return int(r) in ALLOWED_REP_COUNTS


def is_valid_warmup_cool_line(text: str) -> bool:
    lowered = str(text or "").lower()
    return not any(word in lowered for word in FORBIDDEN_EASY_WORDS)


def is_valid_drill_rep_count(reps) -> bool:
    try:
        return int(reps) not in FORBIDDEN_DRILL_REP_COUNTS
    except (TypeError, ValueError, OverflowError):
        return False


def is_valid_kick_line(text: str, rep_distance) -> bool:
    """Short kick repeats are never described as relaxed or easy."""
    lowered = str(text or "").lower()
    try:
        d = float(rep_distance)
    except (TypeError, ValueError):
        return True
    if d <= 50 and ("relaxed" in lowered or "easy" in lowered):
        return False
    return True


def _snap_preferred(distance: float, pool_length: float):
    # Unlike snap_rep_distance, never collapses to zero: short preferences become one length.
    return clean_distance(round_half_up(distance / pool_length) * pool_length or pool_length)


def _scan(target, candidates: Sequence, accept, search_pass: int) -> Optional[EvenRepScheme]:
    for rep_distance in candidates:
        if rep_distance <= 0:
            continue
        reps = exact_reps(target, rep_distance)
        if reps is None or reps % 2 != 0:
            continue
        if accept(reps):
            return EvenRepScheme(reps=reps, rep_distance=clean_distance(rep_distance), search_pass=search_pass)
    return None


def pick_even_rep_scheme(target_distance, pool_length, kind: str) -> Optional[EvenRepScheme]:
    """Even rep count for drill/kick sets, relaxing acceptance over four passes.

    1. preferred distances, reps in the coach set {4, 6, 8, 10, 12, 16, 20}
    2. preferred distances, any even reps in [4, 24]
    3. pool length x 1..4, even reps in [4, 24]
    4. preferred distances, even reps in [2, 30]
    """
    try:
        target = float(target_distance)
        base = float(pool_length)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(target) or not math.isfinite(base):
        return None
    if target <= 0 or base <= 0:
        return None

    prefs = EVEN_REP_PREFERENCES["drill" if kind == "drill" else "kick"]
    preferred = [_snap_preferred(p, base) for p in prefs]
    multiples = [clean_distance(base * mult) for mult in range(1, 5)]

    passes = (
        (preferred, lambda reps: reps in COACH_EVEN_REP_COUNTS),
        (preferred, lambda reps: 4 <= reps <= 24),
        (multiples, lambda reps: 4 <= reps <= 24),
        (preferred, lambda reps: 2 <= reps <= 30),
    )
    for idx, (candidates, accept) in enumerate(passes, start=1):
        found = _scan(target, candidates, accept, idx)
        if found:
            return found
    return None


def _contains_full_gas(text: str) -> bool:
    lowered = text.lower()
    return any(word in lowered for word in FULL_GAS_WORDS)


def validate_set_body(body: str, target_distance, pool_length, section_label: str) -> SetBodyCheck:
    """Check a rendered body before the assembler accepts it for a section."""
    lines = [line.strip() for line in str(body or "").split("\n") if line.strip()]
    if not lines:
        return SetBodyCheck(False, "empty body")

    kind = section_category(section_label)
    standard = pool_length in STANDARD_POOL_LENGTHS
    target = clean_distance(float(target_distance))

    if standard and kind in (SectionKind.WARMUP, SectionKind.COOLDOWN) and target not in WARM_COOL_TOTALS:
        return SetBodyCheck(False, f"section distance not coach-normal: {format_distance(target)}")
    if standard and kind == SectionKind.KICK and target not in KICK_TOTALS:
        return SetBodyCheck(False, f"kick distance not coach-normal: {format_distance(target)}")

    total = 0.0
    for line in lines:
        parsed = parse_nxd(line)
        if parsed is None:
            if _NUMBERED_LINE.match(line):
                continue
            single = _SINGLE_LINE.match(line)
            if not single:
                return SetBodyCheck(False, f"unparseable line: {line}")
            if _contains_full_gas(single.group(2)):
                return SetBodyCheck(False, f"single distance cannot be sprint: {line}")
            total += float(single.group(1))
            continue
        reps, dist = parsed
        if not is_allowed_rep_count(reps, dist):
            return SetBodyCheck(False, f"rep count not allowed: {reps}x{format_distance(dist)}")
        if kind == SectionKind.DRILL and not is_valid_drill_rep_count(reps):
            return SetBodyCheck(False, f"drill rep count not clean: {reps}")
        if "sprint" in line.lower() and reps * dist > 600:
            return SetBodyCheck(False, f"sprint volume too large: {line}")
        total += reps * dist

    if clean_distance(total) != target:
        return SetBodyCheck(False, f"distance mismatch: got {format_distance(total)}, expected {format_distance(target)}")
    if not ends_at_home_end(total, pool_length):
        return SetBodyCheck(False, "odd number of lengths")
    return SetBodyCheck(True)


def validate_workout(sections: Sequence, pool_length) -> Optional[str]:
    """Whole-workout plausibility. Returns a rejection reason, or None when acceptable.

    ``sections`` are objects with ``label``, ``body`` and ``target_distance``.
    """
    has_warmup = has_main = has_cooldown = False
    cooldown_distance = 0.0

    for section in sections:
        kind = section_category(section.label)
        if kind == SectionKind.WARMUP:
            has_warmup = True
        elif kind == SectionKind.MAIN:
            has_main = True
        elif kind == SectionKind.COOLDOWN:
            has_cooldown = True
            cooldown_distance = float(section.target_distance or 0)

        for line in str(section.body or "").split("\n"):
            parsed = parse_nxd(line)
            if not parsed:
                continue
            reps, rep_dist = parsed
            lowered = line.lower()

            if pool_length == 25:
                if kind == SectionKind.MAIN and rep_dist == 50 and reps > 16:
                    return "main 50s reps cap exceeded (max 16 for 25m/25yd)"
                if kind == SectionKind.DRILL and rep_dist == 25 and reps > 12:
                    return "drill 25s reps cap exceeded (max 12 for 25m/25yd)"
                if kind == SectionKind.DRILL and rep_dist == 50 and reps > 10:
                    return "drill 50s reps cap exceeded (max 10 for 25m/25yd)"

            if exact_reps(rep_dist, pool_length) is None:
                return "odd-length repeat distance"
            if ("build" in lowered or "descend" in lowered) and reps < 2:
                return "build requires at least 2 reps"

            caps = {
                SectionKind.WARMUP: 30,
                SectionKind.BUILD: 24,
                SectionKind.DRILL: 24,
                SectionKind.KICK: 30,
                SectionKind.MAIN: 30,
            }
            if kind in caps and reps > caps[kind]:
                return f"{kind.value} reps too high (max {caps[kind]})"
            if kind == SectionKind.DRILL and rep_dist > 200:
                return "drill repeat too long (max 200)"

            if "all out" in lowered or "max effort" in lowered or "sprint" in lowered:
                volume = reps * rep_dist
                is_kick = kind == SectionKind.KICK or "kick" in lowered
                if is_kick and volume > 300:
                    return "kick full gas cap exceeded (max 300)"
                if not is_kick and volume > 600:
                    return "swim full gas cap exceeded (max 600)"
                per_distance_caps = {25: 12, 50: 10, 100: 6}
                if rep_dist in per_distance_caps and reps > per_distance_caps[rep_dist]:
                    return f"full gas {format_distance(rep_dist)}s: reps must be <= {per_distance_caps[rep_dist]}"
                if reps > 10:
                    return "full gas needs grouping"

    if not has_warmup:
        return "missing warmup section"
    if not has_main:
        return "missing main section"
    if not has_cooldown:
        return "missing cooldown section"
    min_cooldown = float(pool_length) * 4
    if cooldown_distance < min_cooldown:
        return f"cooldown too short (min {format_distance(min_cooldown)})"
    return None
