"""Workout assembler: split a total distance into sections and fill each one.

The assembler is the only caller that turns a ``None`` from the set generator
into either a retry or a surfaced ``WorkoutGenerationError``. Section targets are
wall-safe and main absorbs whatever the other sections leave, so the section sum
always equals the (even-length) workout total.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace
from typing import Optional, Sequence

from swimcore.models import GeneratedWorkout, Pool, Section
from swimcore.services.pool_math import (
    clean_distance,
    exact_reps,
    format_distance,
    format_mm_ss,
    parse_pace_to_seconds_per_100,
    round_half_up,
    snap_to_wall_safe,
)
from swimcore.services.prng import MASK32, fingerprint_workout_text, hash32, mulberry32, now_seed
from swimcore.services.sections import SectionKind, section_category
from swimcore.services.set_generator import generate_set_body
from swimcore.services.set_rules import validate_set_body, validate_workout
from swimcore.services.workout_text import estimate_workout_seconds, infer_is_striated, infer_zone
from swimcore.validators import SwimOptions

logger = logging.getLogger(__name__)

OPTIONAL_SECTION_MIN_TOTAL = 1500
SPLIT_MAIN_MIN = 2400
MAIN_SPLIT_FRACTION = 0.55
FULL_GAS_PROBABILITY = 0.6
GOLDEN_RATIO_MIX = 0x9E3779B9

ALLOC_RANGES = {
    "warmup": (0.10, 0.25),
    "build": (0.00, 0.20),
    "drill": (0.00, 0.20),
    "kick": (0.00, 0.20),
    "pull": (0.00, 0.20),
}
WARMUP_PLUS_BUILD_MAX = 0.30

SECTION_TARGET_BUCKETS = {
    SectionKind.WARMUP: (200, 300, 400, 500, 600),
    SectionKind.BUILD: (200, 300, 400, 500),
    SectionKind.KICK: (200, 300, 400, 500),
    SectionKind.DRILL: (200, 300, 400),
    SectionKind.PULL: (200, 300, 400, 500),
    SectionKind.MAIN: (400, 600, 800, 1000, 1200, 1600),
    SectionKind.COOLDOWN: (100, 200, 300, 400, 500),
}
COOL_DOWN_CHOICES = (100, 200, 300, 400, 500)

FALLBACK_PHRASES = {
    SectionKind.WARMUP: "easy",
    SectionKind.COOLDOWN: "easy",
    SectionKind.DRILL: "choice drill easy",
    SectionKind.KICK: "moderate",
    SectionKind.PULL: "moderate",
    SectionKind.MAIN: "strong",
}

WORKOUT_NAMES = {
    "short": ("Quick Dip", "Fast Lane", "Starter Set", "Warm Welcome", "Pool Opener", "Light Laps", "Easy Does It", "Swim Snack"),
    "medium": ("Steady State", "Lane Lines", "Rhythm & Flow", "Cruise Control", "Smooth Sailing", "Pool Party", "Stroke & Glide", "Lap Stack"),
    "long": ("Distance Dash", "Long Haul", "Mile Maker", "Endurance Engine", "Big Swim", "Full Tank", "Deep Dive", "Marathon Mode"),
}
FOCUS_NAMES = {
    "sprint": ("Speed Demon", "Fast Finish", "Sprint Session", "Power Push", "Quick Burst"),
    "threshold": ("Threshold Test", "Pace Pusher", "T-Time", "Race Ready", "Tempo Tune"),
    "endurance": ("Distance Day", "Steady Strong", "Long & Smooth", "Endurance Hour"),
    "technique": ("Drill Time", "Form Focus", "Technique Tune", "Perfect Stroke"),
    "allround": ("Mixed Bag", "Full Spectrum", "Variety Pack", "All-Rounder", "Balanced Swim"),
}
EQUIPMENT_NAMES = {
    "fins": ("Fin Frenzy", "Flipper Time", "Turbo Kick"),
    "paddles": ("Power Paddles", "Arm Amplifier", "Pull Power"),
}
FALLBACK_NAMES = ("Swim Session", "Pool Workout", "Lap Time")


class WorkoutGenerationError(Exception):
    """No attempt produced a workout that passes the plausibility checks."""

    def __init__(self, message: str, attempts: int = 0):
        super().__init__(message)
        self.attempts = attempts


@dataclass(frozen=True)
class SectionPlan:
    label: str
    distance: float


@dataclass
class _BuildState:
    sections: list[Section] = field(default_factory=list)
    fallbacks: int = 0


# ---------------------------------------------------------------------------
# Allocation
# ---------------------------------------------------------------------------

def even_length_total(distance, pool_length):
    """Whole lengths, rounded half-up and bumped to the next even count."""
    base = float(pool_length)
    lengths = round_half_up(float(distance) / base)
    if lengths % 2:
        lengths += 1
    return clean_distance(max(2, lengths) * base)


def resolve_section_target(label: str, desired, pool_length):
    """Nearest coach-normal bucket for the section kind, snapped wall-safe."""
    kind = section_category(label)
    buckets = SECTION_TARGET_BUCKETS.get(kind, SECTION_TARGET_BUCKETS[SectionKind.MAIN])
    snapped = [b for b in (snap_to_wall_safe(b, pool_length) for b in buckets) if b > 0]
    if not snapped:
        return snap_to_wall_safe(desired, pool_length)
    best = snapped[0]
    for candidate in snapped:
        if abs(candidate - desired) < abs(best - desired):
            best = candidate
    return best


def sensible_cool_down(total, pool_length):
    target = total * 0.1
    closest = COOL_DOWN_CHOICES[0]
    for choice in COOL_DOWN_CHOICES:
        if abs(choice - target) < abs(closest - target):
            closest = choice
    closest = min(closest, pool_length * 16)
    return max(snap_to_wall_safe(closest, pool_length), clean_distance(pool_length * 4))


def allocate_sections(total, pool_length, options: SwimOptions, seed: int) -> Optional[list[SectionPlan]]:
    """Ranged percentage split drawn from a seeded stream.

    Returns None when main would be left shorter than four lengths.
    """
    rng = mulberry32(seed)
    base = float(pool_length)
    min_section = clean_distance(base * 4)
    optional_ok = total >= snap_to_wall_safe(OPTIONAL_SECTION_MIN_TOTAL, pool_length)

    want = {
        "build": optional_ok,
        "drill": optional_ok,
        "kick": options.include_kick and optional_ok,
        "pull": options.include_pull and optional_ok,
    }
    if total < 1000:
        want["kick"] = want["drill"] = False
    elif total < 1200:
        want["drill"] = False

    def pick_pct(name: str) -> float:
        low, high = ALLOC_RANGES[name]
        return low + (high - low) * rng()

    pct = {"warmup": pick_pct("warmup")}
    for name in ("build", "drill", "kick", "pull"):
        pct[name] = pick_pct(name) if want[name] else 0.0
    if pct["warmup"] + pct["build"] > WARMUP_PLUS_BUILD_MAX:
        pct["build"] = max(0.0, WARMUP_PLUS_BUILD_MAX - pct["warmup"])

    def jitter() -> int:
        r = rng()
        if r < 0.33:
            return -2
        if r < 0.67:
            return 0
        return 2

    raw = {}
    for name in ("warmup", "build", "drill", "kick", "pull"):
        raw[name] = snap_to_wall_safe(round_half_up(total * pct[name]) + jitter() * base, pool_length)

    plans = [SectionPlan("Warm up", resolve_section_target("Warm up", max(raw["warmup"], min_section), pool_length))]
    for name, label in (("build", "Build"), ("drill", "Drill"), ("kick", "Kick"), ("pull", "Pull")):
        if want[name] and raw[name] >= min_section:
            plans.append(SectionPlan(label, resolve_section_target(label, raw[name], pool_length)))

    cool = sensible_cool_down(total, pool_length)
    main = clean_distance(total - sum(p.distance for p in plans) - cool)
    if main < min_section or exact_reps(main, base * 2) is None:
        return None

    if main >= snap_to_wall_safe(SPLIT_MAIN_MIN, pool_length):
        first = snap_to_wall_safe(main * MAIN_SPLIT_FRACTION, pool_length)
        plans.append(SectionPlan("Main 1", first))
        plans.append(SectionPlan("Main 2", clean_distance(main - first)))
    else:
        plans.append(SectionPlan("Main", main))
    plans.append(SectionPlan("Cool down", cool))
    return plans


# ---------------------------------------------------------------------------
# Post-processing
# ---------------------------------------------------------------------------

def is_full_gas_body(body: str) -> bool:
    lowered = str(body or "").lower()
    return any(word in lowered for word in ("sprint", "all out", "full gas", "max effort"))


def _sprintify(lines: list[str]) -> bool:
    for i, line in enumerate(lines):
        for word in ("strong", "fast", "hard"):
            if re.search(word, line, re.I):
                lines[i] = re.sub(word, "sprint", line, count=1, flags=re.I)
                return True
    for i, line in enumerate(lines):
        if re.search(r"sprint", line, re.I):
            continue
        if re.search(r"\bbuild\b", line, re.I):
            lines[i] = re.sub(r"\bbuild\b", "build to sprint", line, count=1, flags=re.I)
            return True
        if re.search(r"\bdescend\b", line, re.I):
            if re.search(r"\bdescend\b.*\bto\b", line, re.I):
                lines[i] = re.sub(r"\bto\b\s+\w+", "to sprint", line, count=1, flags=re.I)
            else:
                lines[i] = re.sub(r"\bdescend\b", "descend to sprint", line, count=1, flags=re.I)
            return True
    return False


def inject_one_full_gas(sections: Sequence[Section], seed: int) -> list[Section]:
    """With probability 0.6, turn one effort word in one main section into a sprint."""
    result = list(sections)
    if any(is_full_gas_body(s.body) for s in result):
        return result
    if mulberry32(seed)() >= FULL_GAS_PROBABILITY:
        return result
    candidates = [i for i, s in enumerate(result) if "main" in s.label.lower()]
    if not candidates:
        return result
    idx = candidates[int(mulberry32((int(seed) ^ GOLDEN_RATIO_MIX) & MASK32)() * len(candidates))]
    lines = [line for line in result[idx].body.split("\n") if line]
    if lines and _sprintify(lines):
        result[idx] = Section(
            label=result[idx].label,
            target_distance=result[idx].target_distance,
            body="\n".join(lines),
        )
    return result


def generate_workout_name(total, options: SwimOptions, seed: int) -> str:
    names: list[str] = list(FOCUS_NAMES.get(options.focus, ()))
    if options.fins:
        names.extend(EQUIPMENT_NAMES["fins"])
    if options.paddles:
        names.extend(EQUIPMENT_NAMES["paddles"])
    if total <= 1000:
        names.extend(WORKOUT_NAMES["short"])
    elif total <= 2500:
        names.extend(WORKOUT_NAMES["medium"])
    else:
        names.extend(WORKOUT_NAMES["long"])
    if not names:
        names = list(FALLBACK_NAMES)
    return names[(int(seed) & MASK32) % len(names)]


def _fallback_body(label: str, distance) -> str:
    phrase = FALLBACK_PHRASES.get(section_category(label), "steady")
    return f"{format_distance(distance)} {phrase}"


def _first_line_with_lengths(body: str, pool: Pool) -> str:
    first = body.split("\n")[0]
    if pool.is_standard or re.search(r"\(\d+\s+length", first):
        return first
    nxd = re.match(r"^(\d+)x(\d+(?:\.\d+)?)\b", first)
    single = re.match(r"^(\d+(?:\.\d+)?)\s+\w+", first)
    total = 0.0
    if nxd:
        total = int(nxd.group(1)) * float(nxd.group(2))
    elif single:
        total = float(single.group(1))
    lengths = exact_reps(total, pool.length) if total else None
    if lengths:
        return f"{first} ({lengths} length{'' if lengths == 1 else 's'})"
    return first


def render_workout_text(sections: Sequence[Section], requested, pool: Pool, pace_seconds: Optional[int]) -> str:
    blocks = []
    for section in sections:
        lines = section.body.split("\n")
        head = f"{section.label}: {_first_line_with_lengths(section.body, pool)}"
        blocks.append("\n".join([head, *lines[1:]]))
    body = "\n\n".join(blocks)

    total = clean_distance(sum(s.target_distance for s in sections))
    lengths = exact_reps(total, pool.length) or 0
    units = pool.units_label
    footer = [
        f"Requested: {format_distance(requested)}{units}",
        f"Total lengths: {lengths} lengths",
        f"Ends at start end: {'yes' if lengths % 2 == 0 else 'no'}",
        f"Total distance: {format_distance(total)}{units} (pool: {pool.display})",
    ]
    if pace_seconds:
        est = estimate_workout_seconds(body, pace_seconds)
        if est is not None:
            footer.append(f"Est total time: {format_mm_ss(est)}")
    return body + "\n\n" + "\n".join(footer)


def _section_meta(sections: Sequence[Section]) -> list[dict]:
    return [
        {
            "label": s.label,
            "distance": s.target_distance,
            "zone": infer_zone(s.body, s.label),
            "striated": infer_is_striated(s.body),
        }
        for s in sections
    ]


def with_sections(workout: GeneratedWorkout, sections: Sequence[Section]) -> GeneratedWorkout:
    """Copy of ``workout`` re-rendered around new section bodies (after a reroll)."""
    sections = tuple(sections)
    pace = workout.pace_seconds
    text = render_workout_text(sections, workout.requested_distance, workout.pool, pace)
    return replace(
        workout,
        text=text,
        sections=sections,
        total_distance=clean_distance(sum(s.target_distance for s in sections)),
        fingerprint=fingerprint_workout_text(text),
        estimated_seconds=estimate_workout_seconds(text, pace) if pace else None,
        meta={**workout.meta, "sections": _section_meta(sections)},
    )


# ---------------------------------------------------------------------------
# Assembly
# ---------------------------------------------------------------------------

def _fill_section(plan: SectionPlan, pool: Pool, options: SwimOptions, seed: int, attempts: int, state: _BuildState) -> None:
    for attempt in range(attempts):
        body = generate_set_body(
            plan.label,
            plan.distance,
            pool.length,
            units_label=pool.units_label,
            options=options,
            seed=(seed + hash32(plan.label) + attempt) & MASK32,
            reroll_count=attempt,
        )
        if not body:
            continue
        check = validate_set_body(body, plan.distance, pool.length, plan.label)
        if check.valid:
            state.sections.append(Section(label=plan.label, target_distance=plan.distance, body=body))
            return
        logger.debug("set body rejected", extra={"ctx_label": plan.label, "ctx_reason": check.reason})
    state.fallbacks += 1
    state.sections.append(Section(label=plan.label, target_distance=plan.distance, body=_fallback_body(plan.label, plan.distance)))


def build_workout(
    total_distance,
    pool: Pool,
    options: Optional[SwimOptions] = None,
    seed: int = 0,
    section_attempts: int = 5,
) -> Optional[GeneratedWorkout]:
    """One assembly attempt. None means this seed produced an implausible workout."""
    options = options or SwimOptions()
    seed = int(seed) & MASK32
    total = even_length_total(total_distance, pool.length)
    plans = allocate_sections(total, pool.length, options, seed)
    if plans is None:
        logger.info("allocation left no room for main", extra={"ctx_total": total, "ctx_seed": seed})
        return None

    state = _BuildState()
    for plan in plans:
        _fill_section(plan, pool, options, seed, section_attempts, state)

    sections = inject_one_full_gas(state.sections, seed)
    reason = validate_workout(sections, pool.length)
    if reason is not None and sections != state.sections:
        logger.debug("full gas injection rejected", extra={"ctx_reason": reason, "ctx_seed": seed})
        sections = state.sections
        reason = validate_workout(sections, pool.length)
    if reason is not None:
        logger.info("workout rejected", extra={"ctx_reason": reason, "ctx_seed": seed})
        return None

    pace = parse_pace_to_seconds_per_100(options.threshold_pace)
    text = render_workout_text(sections, total_distance, pool, pace)
    return GeneratedWorkout(
        text=text,
        name=generate_workout_name(total, options, seed),
        sections=tuple(sections),
        total_distance=clean_distance(sum(s.target_distance for s in sections)),
        requested_distance=total_distance,
        pool=pool,
        seed=seed,
        fingerprint=fingerprint_workout_text(text),
        estimated_seconds=estimate_workout_seconds(text, pace) if pace else None,
        pace_seconds=pace,
        meta={"sections": _section_meta(sections), "fallback_sections": state.fallbacks},
    )


def generate_workout(
    total_distance,
    pool: Pool,
    options: Optional[SwimOptions] = None,
    seed: Optional[int] = None,
    last_fingerprint: str = "",
    max_attempts: int = 8,
    section_attempts: int = 5,
) -> GeneratedWorkout:
    """Retry ``build_workout`` with perturbed seeds until one passes.

    A result identical to ``last_fingerprint`` is regenerated once.
    """
    base_seed = now_seed() if seed is None else int(seed) & MASK32
    avoided = False
    for attempt in range(max_attempts):
        attempt_seed = (base_seed + attempt * 7919) & MASK32
        workout = build_workout(total_distance, pool, options, attempt_seed, section_attempts)
        if workout is None:
            continue
        if last_fingerprint and workout.fingerprint == last_fingerprint and not avoided:
            avoided = True
            continue
        return workout
    raise WorkoutGenerationError(
        f"could not build a {format_distance(total_distance)}{pool.units_label} workout",
        attempts=max_attempts,
    )
