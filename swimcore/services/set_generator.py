"""Set-body generator: one coach-plausible body for one workout section.

``generate_set_body`` is a pure function of its inputs. Order of preference:

1. an exact-distance template from ``set_catalog.SECTION_TEMPLATES``
2. (warm-up only) a parametric catalogue shape that reconstructs the target exactly
3. procedural composition per section kind: fit finder + phrase picker

Every decision draws from one of four derived seeds (see ``prng.derive_seeds``):
``a`` picks phrases and templates, ``b`` picks stroke and multi-part strategy
order, ``c`` shuffles preferred distances, ``d`` jitters rest.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from swimcore.services.pool_math import (
    STANDARD_POOL_LENGTHS,
    body_distance,
    clean_distance,
    ends_at_home_end,
    exact_reps,
    format_distance,
    snap_rep_distance,
    snap_to_wall_safe,
)
from swimcore.services.prng import MASK32, DerivedSeeds, derive_seeds, now_seed, shuffle_with_seed
from swimcore.services.sections import SectionKind, generator_branch, is_easy_section, template_category
from swimcore.services.set_catalog import pick_catalogue_body, pick_template
from swimcore.services.set_rules import is_valid_kick_line, is_valid_warmup_cool_line, pick_even_rep_scheme
from swimcore.validators import SwimOptions

logger = logging.getLogger(__name__)

MAX_REALISTIC_REPS = 20
MAX_SHORT_REPS = 8
MIN_DISTANCE_FOR_HIGH_REPS = 50

KICK_PULL_EFFORTS = ("moderate", "strong", "hard", "fullgas")
MAIN_EFFORTS = ("moderate", "strong", "hard", "fullgas", "easy")

DRILL_MOVES = (
    "Fist",
    "Catch-up",
    "DPS",
    "Jazz Hands",
    "Long Dog",
    "Scull Front",
    "Scull Rear",
    "Torpedo Glide",
    "Single Arm",
    "3-3-3",
    "Finger Drag",
    "25 Drill / 25 Swim",
)

BUILD_SUFFIXES = (
    "build to strong",
    "descend 1-4",
    "build to fast",
    "negative split",
    "descend to hard",
    "build with last one sprint",
)

KICK_BY_EFFORT = {
    "moderate": ("kick steady", "kick on side", "streamline kick", "flutter kick"),
    "strong": ("kick build", "kick descend", "kick descend 1-4"),
    "hard": ("kick strong", "kick fast", "kick hard"),
    "fullgas": ("kick sprint", "kick max effort"),
}

PULL_BY_EFFORT = {
    "moderate": ("pull steady", "pull smooth", "pull focus DPS", "pull relaxed", "pull technique"),
    "strong": ("pull build", "pull descend", "pull descend 1-4"),
    "hard": ("pull strong", "pull hard", "pull hold pace"),
    "fullgas": ("pull fast", "pull sprint"),
}

MAIN_BY_EFFORT = {
    "easy": ("easy", "recovery", "relaxed pace", "loosen up"),
    "moderate": ("steady", "smooth", "aerobic", "hold pace"),
    "strong": ("build", "descend 1-4", "negative split", "build to strong"),
    "hard": ("hard", "strong hold", "threshold", "fast hold", "descend to hard"),
    "fullgas": ("sprint", "max effort", "race pace", "all out", "build to sprint"),
}

# Non-allround focuses hold one phrase family and rest as a hard set.
MAIN_BY_FOCUS = {
    "sprint": ("fast", "build to sprint", "max effort", "race pace", "all out", "descend with final sprint"),
    "threshold": ("maintain strong pace", "threshold hold", "threshold pace", "controlled fast", "tempo hold"),
    "endurance": ("steady", "smooth", "hold pace", "aerobic", "consistent"),
    "technique": ("perfect form", "focus DPS", "count strokes", "smooth technique", "efficient"),
}


@dataclass(frozen=True)
class Fit:
    reps: int
    dist: float

    @property
    def total(self):
        return clean_distance(self.reps * self.dist)


@dataclass(frozen=True)
class PreferredDistances:
    d25: float
    d50: float
    d75: float
    d100: float
    d200: float


def preferred_distances(pool_length) -> PreferredDistances:
    """Coach-familiar repeat distances expressed in whole lengths of this pool."""
    base = float(pool_length)

    def near(value: float) -> float:
        return snap_rep_distance(value, base)

    d25 = base if base <= 50 else near(25)
    d50 = near(50) if base <= 50 else base
    d75 = near(75) if base <= 75 else base
    d100 = near(100) if base <= 100 else base * 2
    d200 = near(200) if base <= 200 else base * 4
    return PreferredDistances(
        d25=clean_distance(d25),
        d50=clean_distance(d50),
        d75=clean_distance(d75),
        d100=clean_distance(d100),
        d200=clean_distance(d200),
    )


def make_line(reps, dist, phrase: str, rest_seconds=0, *, pool_length=25, show_rest: bool = False) -> str:
    """Render ``{reps}x{dist}[ (N lengths)] {phrase}[ rest Ns]``."""
    length_info = ""
    if pool_length not in STANDARD_POOL_LENGTHS:
        lengths = exact_reps(dist, pool_length)
        if lengths is not None and lengths > 1:
            length_info = f" ({lengths} lengths)"
    suffix = ""
    if show_rest and rest_seconds and rest_seconds > 0:
        suffix = f" rest {int(rest_seconds)}s"
    return f"{reps}x{format_distance(dist)}{length_info} {(phrase or '').strip()}{suffix}"


def rest_for(rep_distance, intensity: str, label: str, rest_pref: str, seed_d: int) -> int:
    key = str(label or "").lower()
    rest = 15
    if "warm" in key or "cool" in key:
        rest = 0
    elif "drill" in key:
        rest = 20
    elif "kick" in key or "pull" in key:
        rest = 15
    elif "main" in key:
        rest = 20
    if rep_distance >= 200:
        rest = max(10, rest - 5)
    if intensity in ("hard", "fast"):
        rest += 5
    if rest_pref == "short":
        rest = max(0, rest - 5)
    if rest_pref == "more":
        rest += 10
    rest += (seed_d % 3) - 1
    return max(0, rest)


def _rep_cap(dist) -> int:
    return MAX_SHORT_REPS if dist < MIN_DISTANCE_FOR_HIGH_REPS else MAX_REALISTIC_REPS


def find_best_fit(target, preferred: Sequence, pool_length, shuffle_seed: Optional[int] = None) -> Optional[Fit]:
    """First distance that divides ``target`` into a realistic rep count.

    Realistic means 2..20 reps, or 2..8 when the repeat is shorter than 50.
    Falls back to one pool length, then two.
    """
    dists = [d for d in preferred if d > 0]
    if shuffle_seed is not None:
        dists = shuffle_with_seed(dists, shuffle_seed)

    for dist in dists:
        reps = exact_reps(target, dist)
        if reps is not None and 2 <= reps <= _rep_cap(dist):
            return Fit(reps=reps, dist=dist)

    base = clean_distance(pool_length)
    reps = exact_reps(target, base)
    if reps is not None and 2 <= reps <= _rep_cap(base):
        return Fit(reps=reps, dist=base)

    double = clean_distance(base * 2)
    reps = exact_reps(target, double)
    if reps is not None and 2 <= reps <= MAX_REALISTIC_REPS:
        return Fit(reps=reps, dist=double)
    return None


class _SetContext:
    """Per-call state shared by the section branches."""

    def __init__(self, label: str, target, pool_length, options: SwimOptions, seeds: DerivedSeeds, reroll_num: int):
        self.label = label
        self.key = str(label or "").lower()
        self.target = target
        self.base = pool_length
        self.options = options
        self.seeds = seeds
        self.reroll_num = reroll_num
        self.prefs = preferred_distances(pool_length)
        self.stroke = self._pick_stroke()

    def _pick_stroke(self) -> str:
        allowed = self.options.strokes.enabled()
        if not allowed:
            return "freestyle"
        if is_easy_section(self.label) and "freestyle" in allowed:
            return "freestyle"
        return allowed[self.seeds.b % len(allowed)]

    def line(self, reps, dist, phrase: str, rest_seconds=0) -> str:
        return make_line(
            reps,
            dist,
            phrase,
            rest_seconds,
            pool_length=self.base,
            show_rest=self.options.has_threshold_pace,
        )

    def rest(self, rep_distance, intensity: str) -> int:
        return rest_for(rep_distance, intensity, self.label, self.options.rest_pref, self.seeds.d)

    def fit(self, preferred: Sequence) -> Optional[Fit]:
        return find_best_fit(self.target, preferred, self.base, shuffle_seed=self.seeds.c)

    def pick(self, phrases: Sequence[str]) -> str:
        return phrases[self.seeds.a % len(phrases)]


# ── Section branches ─────────────────────────────────────────────────────

def _easy_block(ctx: _SetContext, phrases: Sequence[str], preferred: Sequence) -> str:
    phrase = ctx.pick(phrases)
    if not is_valid_warmup_cool_line(phrase):
        return ctx.line(4, ctx.prefs.d100 or ctx.prefs.d50, f"{ctx.stroke} easy")
    fit = ctx.fit(preferred)
    if not fit:
        return ctx.line(1, ctx.target, phrase)
    if not ends_at_home_end(fit.total, ctx.base):
        reps = fit.reps if fit.reps % 2 == 0 else fit.reps + 1
        return ctx.line(reps, fit.dist, phrase)
    return ctx.line(fit.reps, fit.dist, phrase)


def _catalogue_warmup(ctx: _SetContext) -> Optional[str]:
    pick = pick_catalogue_body("Warm-up", ctx.target, ctx.base, ctx.seeds.a)
    if pick is None:
        return None
    if not is_valid_warmup_cool_line(pick.body):
        return None
    if body_distance(pick.body) != ctx.target or not ends_at_home_end(ctx.target, ctx.base):
        return None
    return pick.body


def _warmup(ctx: _SetContext) -> str:
    body = _catalogue_warmup(ctx)
    if body:
        return body
    s = ctx.stroke
    p = ctx.prefs
    phrases = (f"{s} easy", f"{s} relaxed", "easy swim", "choice easy", f"{s} loosen up")
    return _easy_block(ctx, phrases, (p.d100, p.d50, p.d200, p.d75, p.d25))


def _cooldown(ctx: _SetContext) -> str:
    s = ctx.stroke
    p = ctx.prefs
    phrases = ("easy choice", f"{s} easy", "easy swim", "choice loosen up", "relaxed swim")
    return _easy_block(ctx, phrases, (p.d100, p.d200, p.d50))


def _build(ctx: _SetContext) -> str:
    p = ctx.prefs
    phrase = f"{ctx.stroke} {ctx.pick(BUILD_SUFFIXES)}"
    fit = ctx.fit((p.d50, p.d100, p.d75, p.d25))
    if not fit:
        return ctx.line(1, ctx.target, f"{ctx.stroke} build")
    return ctx.line(fit.reps, fit.dist, phrase, ctx.rest(fit.dist, "moderate"))


def _drill(ctx: _SetContext) -> str:
    scheme = pick_even_rep_scheme(ctx.target, ctx.base, "drill")
    if scheme is None:
        logger.debug("no even drill scheme", extra={"ctx_target": ctx.target, "ctx_pool": ctx.base})
        return f"{format_distance(ctx.target)} drill easy"
    moves = shuffle_with_seed(DRILL_MOVES, ctx.seeds.a)
    lines = [f"{scheme.reps}x{format_distance(scheme.rep_distance)} Drill FC"]
    lines.extend(f"{i + 1}. {moves[i % len(moves)]}" for i in range(scheme.reps))
    return "\n".join(lines)


def _kick(ctx: _SetContext) -> str:
    fin_note = " with fins" if ctx.options.fins else ""
    effort = KICK_PULL_EFFORTS[ctx.reroll_num % len(KICK_PULL_EFFORTS)]
    phrase = ctx.pick(KICK_BY_EFFORT[effort]) + fin_note

    scheme = pick_even_rep_scheme(ctx.target, ctx.base, "kick")
    if scheme is None:
        logger.debug("no even kick scheme", extra={"ctx_target": ctx.target, "ctx_pool": ctx.base})
        return ctx.line(1, ctx.target, "kick" + fin_note)
    if not is_valid_kick_line(phrase, scheme.rep_distance):
        phrase = "kick steady" + fin_note
    return ctx.line(scheme.reps, scheme.rep_distance, phrase, ctx.rest(scheme.rep_distance, effort))


def _pull(ctx: _SetContext) -> str:
    p = ctx.prefs
    pad_note = " with paddles" if ctx.options.paddles else ""
    effort = KICK_PULL_EFFORTS[ctx.reroll_num % len(KICK_PULL_EFFORTS)]
    phrase = ctx.pick(PULL_BY_EFFORT[effort]) + pad_note
    fit = ctx.fit((p.d100, p.d50, p.d200, p.d75))
    if not fit:
        return ctx.line(1, ctx.target, "pull" + pad_note)
    return ctx.line(fit.reps, fit.dist, phrase, ctx.rest(fit.dist, effort))


# ── Multi-part main sets ─────────────────────────────────────────────────

def _main_rep_distance(ctx: _SetContext):
    return ctx.prefs.d100 if ctx.prefs.d100 > 0 else ctx.prefs.d50


def _build_fast_split(ctx: _SetContext) -> Optional[str]:
    rep = _main_rep_distance(ctx)
    if rep <= 0:
        return None
    total_reps = exact_reps(ctx.target, rep)
    if total_reps is None or total_reps < 4:
        return None
    first = total_reps // 2
    second = total_reps - first
    if first < 2 or second < 2 or clean_distance((first + second) * rep) != ctx.target:
        return None
    s = ctx.stroke
    return "\n".join((
        ctx.line(first, rep, f"{s} build", ctx.rest(rep, "moderate")),
        ctx.line(second, rep, f"{s} fast", ctx.rest(rep, "hard")),
    ))


def _three_part_ladder(ctx: _SetContext) -> Optional[str]:
    rep = _main_rep_distance(ctx)
    if rep <= 0:
        return None
    total_reps = exact_reps(ctx.target, rep)
    if total_reps is None or total_reps < 6 or total_reps % 3 != 0:
        return None
    third = total_reps // 3
    if third < 2 or clean_distance(third * rep * 3) != ctx.target:
        return None
    s = ctx.stroke
    return "\n".join((
        ctx.line(third, rep, f"{s} steady", ctx.rest(rep, "easy")),
        ctx.line(third, rep, f"{s} strong", ctx.rest(rep, "moderate")),
        ctx.line(third, rep, f"{s} fast", ctx.rest(rep, "hard")),
    ))


def _mixed_fifty_hundred(ctx: _SetContext) -> Optional[str]:
    d50, d100 = ctx.prefs.d50, ctx.prefs.d100
    if d50 <= 0 or d100 <= 0:
        return None
    s = ctx.stroke
    for hundreds in range(2, 11):
        remaining = ctx.target - hundreds * d100
        if remaining <= 0:
            continue
        fifties = exact_reps(remaining, d50)
        if fifties is None or not 2 <= fifties <= 12:
            continue
        if clean_distance(fifties * d50 + hundreds * d100) == ctx.target:
            return "\n".join((
                ctx.line(fifties, d50, f"{s} build", ctx.rest(d50, "moderate")),
                ctx.line(hundreds, d100, f"{s} strong", ctx.rest(d100, "hard")),
            ))
    return None


MULTI_PART_STRATEGIES: tuple[Callable[[_SetContext], Optional[str]], ...] = (
    _build_fast_split,
    _three_part_ladder,
    _mixed_fifty_hundred,
)


def _multi_part(ctx: _SetContext) -> Optional[str]:
    start = ctx.seeds.b % len(MULTI_PART_STRATEGIES)
    for offset in range(len(MULTI_PART_STRATEGIES)):
        body = MULTI_PART_STRATEGIES[(start + offset) % len(MULTI_PART_STRATEGIES)](ctx)
        if body:
            return body
    return None


def _main(ctx: _SetContext) -> str:
    if ctx.seeds.a % 5 == 0 and ctx.target >= 400 and "main" in ctx.key:
        body = _multi_part(ctx)
        if body:
            return body

    p = ctx.prefs
    focus_phrases = MAIN_BY_FOCUS.get(ctx.options.focus.lower())
    if focus_phrases is None:
        effort = MAIN_EFFORTS[ctx.reroll_num % len(MAIN_EFFORTS)]
        phrase = f"{ctx.stroke} {ctx.pick(MAIN_BY_EFFORT[effort])}"
        rest_intensity = effort if effort in ("easy", "moderate") else "hard"
    else:
        phrase = f"{ctx.stroke} {ctx.pick(focus_phrases)}"
        rest_intensity = "hard"
    fit = ctx.fit((p.d100, p.d50, p.d200, p.d75))
    if not fit:
        return ctx.line(1, ctx.target, f"{ctx.stroke} swim")
    return ctx.line(fit.reps, fit.dist, phrase, ctx.rest(fit.dist, rest_intensity))


_BRANCHES: dict[SectionKind, Callable[[_SetContext], str]] = {
    SectionKind.WARMUP: _warmup,
    SectionKind.BUILD: _build,
    SectionKind.DRILL: _drill,
    SectionKind.KICK: _kick,
    SectionKind.PULL: _pull,
    SectionKind.COOLDOWN: _cooldown,
    SectionKind.MAIN: _main,
}


# ── Public API ───────────────────────────────────────────────────────────

def generate_set_body(
    label: str,
    target_distance,
    pool_length,
    units_label: str = "m",
    options: Optional[SwimOptions] = None,
    seed: int = 0,
    reroll_count: Optional[int] = None,
) -> Optional[str]:
    """Body text for one section, or None when the target snaps to nothing
    or the pool length is not a positive finite number.

    ``reroll_count`` > 0 cycles effort tiers deterministically instead of
    deriving them from the seed.
    """
    try:
        base = float(pool_length)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(base) or base <= 0:
        return None
    target = snap_to_wall_safe(target_distance, pool_length)
    if target <= 0:
        return None
    options = options or SwimOptions()
    seeds = derive_seeds(seed)
    reroll_num = reroll_count if isinstance(reroll_count, int) and reroll_count > 0 else seeds.a

    category = template_category(label)
    if category is not None:
        template = pick_template(category, target, seeds.a, pool_length)
        if template is not None:
            return template.body

    ctx = _SetContext(label, target, pool_length, options, seeds, reroll_num)
    return _BRANCHES[generator_branch(label)](ctx)


def reroll_set_body(
    label: str,
    target_distance,
    pool_length,
    units_label: str = "m",
    options: Optional[SwimOptions] = None,
    reroll_count: int = 1,
    avoid_text: str = "",
    base_seed: Optional[int] = None,
    max_attempts: int = 10,
) -> Optional[str]:
    """Replacement body that differs from ``avoid_text``; None when every attempt fails."""
    base = now_seed() if base_seed is None else int(base_seed)
    avoid = (avoid_text or "").strip()
    count = max(0, int(reroll_count or 0))
    for attempt in range(1, max_attempts + 1):
        seed = (count * 7919 + attempt * 9973 + base) & MASK32
        body = generate_set_body(
            label,
            target_distance,
            pool_length,
            units_label=units_label,
            options=options,
            seed=seed,
            reroll_count=count,
        )
        if body and body.strip() != avoid:
            return body
    logger.info(
        "reroll exhausted",
        extra={"ctx_label": label, "ctx_target": target_distance, "ctx_attempts": max_attempts},
    )
    return None
