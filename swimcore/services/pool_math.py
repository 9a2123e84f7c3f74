"""Pool-length arithmetic: snapping, home-wall parity and body parsing.

Section totals snap to multiples of 2 x pool length so a swimmer finishes at the
wall they started from; individual repeats snap to single lengths. Rounding is
half-up throughout, matching how distances were historically rounded.
"""

from __future__ import annotations

import math
import re
from typing import Optional

STANDARD_POOL_LENGTHS = (25, 50)

_NXD_LINE = re.compile(r"^(\d+)x(\d+(?:\.\d+)?)", re.I)
_NUMBERED_LINE = re.compile(r"^\d+\.\s")
_SINGLE_DISTANCE = re.compile(r"^(\d{2,5}(?:\.\d+)?)(?:\s*(?:m|yd))?(?:\s|$)", re.I)
_REST_SEGMENT = re.compile(r"(\d+)\s*[x×]\s*(\d+(?:\.\d+)?)[^\n]*?rest\s*(\d+)\s*s", re.I)
_PACE_MM_SS = re.compile(r"^\d{1,2}:\d{2}$")
_PACE_SECONDS = re.compile(r"^\d{2,3}$")

_PACE_MULTIPLIERS = (
    ("warm", 1.25),
    ("build", 1.18),
    ("drill", 1.30),
    ("kick", 1.38),
    ("pull", 1.25),
    ("main", 1.05),
    ("cool", 1.35),
)


def _as_number(value) -> Optional[float]:
    try:
        num = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(num):
        return None
    return num


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clean_distance(value: float):
    """Collapse float noise: integral values become ``int``, others keep 6 decimals."""
    rounded = round(float(value), 6)
    if rounded == int(rounded):
        return int(rounded)
    return rounded


def format_distance(value) -> str:
    return str(clean_distance(value))


def is_standard_pool(pool_length) -> bool:
    return pool_length in STANDARD_POOL_LENGTHS


def snap_to_wall_safe(distance, pool_length):
    """Nearest multiple of 2 x pool length, never below one round trip."""
    d = _as_number(distance)
    if d is None or d <= 0:
        return 0
    base = _as_number(pool_length)
    if base is None or base <= 0:
        return clean_distance(round_half_up(d))
    unit = base * 2
    snapped = round_half_up(d / unit) * unit
    return clean_distance(max(unit, snapped))


def snap_rep_distance(distance, pool_length):
    """Nearest single multiple of pool length."""
    d = _as_number(distance)
    if d is None or d <= 0:
        return 0
    base = _as_number(pool_length)
    if base is None or base <= 0:
        return clean_distance(round_half_up(d))
    return clean_distance(round_half_up(d / base) * base)


def exact_reps(total, rep_distance) -> Optional[int]:
    """Rep count when ``rep_distance`` divides ``total`` exactly, else None."""
    t = _as_number(total)
    d = _as_number(rep_distance)
    if t is None or d is None or d <= 0 or t <= 0:
        return None
    q = t / d
    nearest = round_half_up(q)
    if nearest <= 0 or abs(q - nearest) > 1e-9 * max(1.0, q):
        return None
    return nearest


def ends_at_home_end(total_distance, pool_length) -> bool:
    """True when the distance is an even whole number of lengths."""
    lengths = exact_reps(total_distance, pool_length)
    return lengths is not None and lengths % 2 == 0


def parse_pace_to_seconds_per_100(text) -> Optional[int]:
    t = str(text or "").strip()
    if not t:
        return None
    if _PACE_MM_SS.match(t):
        mm, ss = t.split(":")
        return int(mm) * 60 + int(ss)
    if _PACE_SECONDS.match(t):
        v = int(t)
        return v if v > 0 else None
    return None


def format_mm_ss(total_seconds) -> str:
    s = max(0, round_half_up(_as_number(total_seconds) or 0))
    return f"{s // 60}:{s % 60:02d}"


def pace_multiplier_for_label(label: str) -> float:
    key = str(label or "").lower()
    for token, mult in _PACE_MULTIPLIERS:
        if token in key:
            return mult
    return 1.15


def parse_nxd(line: str) -> Optional[tuple[int, float]]:
    """Leading ``{reps}x{dist}`` of a rendered line."""
    match = _NXD_LINE.match(str(line or "").strip())
    if not match:
        return None
    return int(match.group(1)), clean_distance(float(match.group(2)))


def body_distance(body: str):
    """Total distance described by a set body, or None when nothing parses."""
    total = 0.0
    for line in str(body or "").split("\n"):
        stripped = line.strip()
        if not stripped or _NUMBERED_LINE.match(stripped):
            continue
        nxd = parse_nxd(stripped)
        if nxd:
            total += nxd[0] * nxd[1]
            continue
        # Continuous lines ("300 easy swim") count once each.
        single = _SINGLE_DISTANCE.match(stripped)
        if single:
            total += float(single.group(1))
    return clean_distance(total) if total > 0 else None


def body_rest_seconds(body: str) -> int:
    """Rest between repeats: (reps - 1) x rest for each annotated line."""
    total = 0
    for m in _REST_SEGMENT.finditer(str(body or "")):
        reps = int(m.group(1))
        rest = int(m.group(3))
        if reps >= 2:
            total += (reps - 1) * rest
    return total
