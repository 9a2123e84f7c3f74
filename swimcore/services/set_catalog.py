"""Coach-authored set shapes consulted before procedural generation.

Two stores:
- ``SECTION_TEMPLATES``: literal bodies keyed by section kind and exact total
  distance. Used verbatim when the numbers line up.
- ``BASE_SET_CATALOGUE``: parametric shapes keyed by canonical label that compute
  a body from ``(target, pool length, seed)``.

Both are read-only after import and shared by every caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Mapping, Optional, Union

from swimcore.services.pool_math import (
    STANDARD_POOL_LENGTHS,
    clean_distance,
    ends_at_home_end,
    exact_reps,
    parse_nxd,
    round_half_up,
    snap_to_wall_safe,
)
from swimcore.services.prng import MASK32, hash32, pick_from, seeded_index, shuffle_with_seed
from swimcore.services.sections import SectionKind

CATALOG_VERSION = "2"


@dataclass(frozen=True)
class SectionTemplate:
    body: str
    distance: int


def _templates(*pairs: tuple[str, int]) -> tuple[SectionTemplate, ...]:
    return tuple(SectionTemplate(body=body, distance=dist) for body, dist in pairs)


# ── Exact-distance templates ─────────────────────────────────────────────

_WARMUP = _templates(
    ("300 easy", 300),
    ("400 easy", 400),
    ("4x100 easy", 400),
    ("8x50 easy", 400),
    ("200 easy\n4x50 easy choice", 400),
    ("6x50 easy choice", 300),
    ("4x75 easy", 300),
    ("200 easy\n2x100 moderate", 400),
    ("500 easy", 500),
    ("2x200 easy", 400),
    ("10x50 easy", 500),
    ("600 easy", 600),
    ("6x100 easy", 600),
    ("3x200 easy", 600),
    ("12x50 easy", 600),
    ("800 easy", 800),
    ("8x100 easy", 800),
    ("4x200 easy", 800),
    ("500 easy\n6x50 easy choice", 800),
)

_BUILD = _templates(
    ("4x50 build", 200),
    ("6x50 build", 300),
    ("2x100 negative split", 200),
    ("4x100 build", 400),
    ("8x50 build", 400),
    ("3x100 descend", 300),
    ("2x150 build", 300),
    ("6x50 descend 1-3 twice", 300),
)

_DRILL = _templates(
    ("6x50 Drill FC\n1. Fist\n2. Catch-up\n3. DPS\n4. Jazz Hands\n5. Long Dog\n6. Scull Front", 300),
    ("8x25 Drill FC\n1. Scull Front\n2. Scull Rear\n3. Torpedo Glide\n4. Fist\n5. Finger Drag\n6. Catch-up\n7. DPS\n8. Single Arm", 200),
    ("4x50 Drill FC\n1. Catch-up\n2. DPS\n3. Fist\n4. 25 Drill / 25 Swim", 200),
    ("6x50 Drill FC\n1. Finger Drag\n2. Long Dog\n3. 3-3-3\n4. Catch-up\n5. Single Arm\n6. DPS", 300),
    ("8x50 Drill FC\n1. Fist\n2. Catch-up\n3. DPS\n4. Jazz Hands\n5. Long Dog\n6. Scull Front\n7. Finger Drag\n8. Torpedo Glide", 400),
    ("4x50 Drill FC\n1. Single Arm\n2. Torpedo Glide\n3. 3-3-3\n4. Scull Rear", 200),
    ("6x50 Drill FC\n1. Torpedo Glide\n2. Scull Front\n3. Scull Rear\n4. Fist\n5. DPS\n6. Catch-up", 300),
    ("8x25 Drill FC\n1. Fist\n2. Catch-up\n3. DPS\n4. Jazz Hands\n5. Long Dog\n6. Scull Front\n7. Finger Drag\n8. Single Arm", 200),
    ("4x100 Drill FC\n1. 50 Drill / 50 Swim\n2. Catch-up\n3. DPS\n4. Fist", 400),
    ("6x50 Drill FC\n1. Jazz Hands\n2. 3-3-3\n3. Single Arm\n4. Finger Drag\n5. Torpedo Glide\n6. Long Dog", 300),
    ("4x50 Drill FC\n1. Fist\n2. DPS\n3. Catch-up\n4. Scull Front", 200),
    ("4x50 Drill FC\n1. Long Dog\n2. Finger Drag\n3. 3-3-3\n4. Jazz Hands", 200),
    ("6x50 Drill FC\n1. Single Arm\n2. Fist\n3. Catch-up\n4. DPS\n5. Scull Front\n6. Torpedo Glide", 300),
    ("4x75 Drill FC\n1. Catch-up\n2. Fist\n3. DPS\n4. 25 Drill / 25 Swim", 300),
    ("6x50 Drill FC\n1. Jazz Hands\n2. Long Dog\n3. 3-3-3\n4. Finger Drag\n5. Single Arm\n6. Fist", 300),
    ("6x50 Drill FC\n1. DPS\n2. Fist\n3. Catch-up\n4. Single Arm\n5. Finger Drag\n6. Scull Rear", 300),
    (
        "10x50 Drill FC\n1. Fist\n2. Catch-up\n3. DPS\n4. Jazz Hands\n5. Long Dog\n6. Scull Front\n"
        "7. Finger Drag\n8. Single Arm\n9. Torpedo Glide\n10. Scull Rear",
        500,
    ),
    ("6x100 Drill FC\n1. 50 Drill / 50 Swim\n2. Catch-up\n3. DPS\n4. Fist\n5. Single Arm\n6. Long Dog", 600),
    (
        "12x50 Drill FC\n1. Fist\n2. Catch-up\n3. DPS\n4. Jazz Hands\n5. Long Dog\n6. Scull Front\n"
        "7. Finger Drag\n8. Single Arm\n9. Torpedo Glide\n10. Scull Rear\n11. 3-3-3\n12. 25 Drill / 25 Swim",
        600,
    ),
    (
        "8x100 Drill FC\n1. 50 Drill / 50 Swim\n2. Catch-up\n3. DPS\n4. Fist\n5. Single Arm\n6. Long Dog\n"
        "7. Torpedo Glide\n8. Scull Front",
        800,
    ),
)

# Single-line, even-rep kick sets only; short reps never say easy or relaxed.
_KICK = _templates(
    ("4x100 kick steady", 400),
    ("6x50 kick moderate", 300),
    ("4x50 kick moderate", 200),
    ("8x25 kick fast", 200),
    ("8x50 kick steady", 400),
    ("6x50 kick steady", 300),
    ("6x50 kick strong", 300),
    ("4x50 kick strong", 200),
    ("6x50 kick descend 1-3 twice", 300),
    ("4x100 kick build", 400),
    ("4x100 kick descend 1-4", 400),
    ("8x50 kick (25 moderate / 25 fast)", 400),
    ("4x100 kick (50 steady / 50 fast)", 400),
    ("10x50 kick steady", 500),
    ("6x100 kick moderate", 600),
    ("12x50 kick steady", 600),
)

_COOLDOWN = _templates(
    ("200 easy", 200),
    ("300 easy", 300),
    ("4x100 loosen", 400),
    ("4x50 easy", 200),
    ("5x50 easy", 250),
    ("6x50 easy", 300),
    ("300 easy choice", 300),
    ("2x150 easy", 300),
    ("400 easy", 400),
    ("8x50 easy", 400),
    ("500 easy", 500),
    ("10x50 easy", 500),
    ("5x100 easy", 500),
    ("3x100 easy\n4x50 loosen", 500),
)

_MAIN = _templates(
    ("4x100 hard", 400),
    ("8x50 fast", 400),
    ("5x100 hard", 500),
    ("10x50 fast", 500),
    ("6x100 strong", 600),
    ("6x100 threshold", 600),
    ("12x50 steady", 600),
    ("8x75 strong", 600),
    ("3x200 build", 600),
    ("4x150 build", 600),
    ("8x100 moderate", 800),
    ("4x200 strong", 800),
    ("8x100 negative split", 800),
    ("6x150 strong", 900),
    ("10x100 steady", 1000),
    ("5x200 moderate", 1000),
    ("20x50 strong", 1000),
    ("8x150 moderate", 1200),
    ("12x100 steady", 1200),
    ("6x200 strong", 1200),
    ("10x150 moderate", 1500),
    ("16x100 moderate", 1600),
    ("8x200 strong", 1600),
    ("20x100 moderate", 2000),
    ("10x200 steady", 2000),
    ("5x100 descend 1-5", 500),
    ("6x100 descend 1-3 twice", 600),
    ("8x100 descend 1-4 twice", 800),
    ("10x100 descend 1-5 twice", 1000),
    ("8x50 fast\n4x100 moderate", 800),
    ("400 strong\n4x100 descend 1-4", 800),
    ("4x150 build\n4x50 fast", 800),
    ("6x100 steady\n6x50 fast", 900),
    ("300 easy\n6x100 hard", 900),
    ("5x100 strong\n5x100 threshold", 1000),
    ("6x100 steady\n8x50 fast", 1000),
    ("8x100 moderate\n4x100 hard", 1200),
    ("10x100 steady\n4x50 fast", 1200),
    ("6x150 moderate\n6x50 fast", 1200),
    ("10x100 moderate\n8x50 fast", 1400),
    ("8x150 steady\n4x50 fast", 1400),
    ("10x100 threshold\n10x50 fast", 1500),
    ("12x100 steady\n6x50 fast", 1500),
    ("10x100 strong\n12x50 fast", 1600),
    ("8x200 moderate", 1600),
    ("12x100 moderate\n8x50 fast", 1600),
    ("10x150 moderate\n6x50 fast", 1800),
    ("12x100 strong\n12x50 fast", 1800),
    ("12x100 moderate\n16x50 fast", 2000),
)

SECTION_TEMPLATES: Mapping[str, tuple[SectionTemplate, ...]] = MappingProxyType({
    SectionKind.WARMUP.value: _WARMUP,
    SectionKind.BUILD.value: _BUILD,
    SectionKind.DRILL.value: _DRILL,
    SectionKind.KICK.value: _KICK,
    SectionKind.COOLDOWN.value: _COOLDOWN,
    SectionKind.MAIN.value: _MAIN,
})


def _reps_fit_pool(body: str, pool_length) -> bool:
    for line in body.split("\n"):
        parsed = parse_nxd(line)
        if parsed and exact_reps(parsed[1], pool_length) is None:
            return False
    return True


def pick_template(
    category: Union[SectionKind, str],
    target_distance,
    seed: int,
    pool_length,
    templates: Mapping[str, tuple[SectionTemplate, ...]] = SECTION_TEMPLATES,
) -> Optional[SectionTemplate]:
    """Exact-distance template for ``category``, or None when nothing fits exactly.

    Candidates are shuffled with ``seed ^ hash32(category)`` and one is taken at
    ``(seed * 7919) mod n``.
    """
    key = category.value if isinstance(category, SectionKind) else str(category or "")
    entries = templates.get(key)
    if not entries:
        return None
    target = clean_distance(target_distance)
    standard = pool_length in STANDARD_POOL_LENGTHS

    fits = [
        t for t in entries
        if t.distance == target
        and (not standard or ends_at_home_end(t.distance, pool_length))
        and _reps_fit_pool(t.body, pool_length)
    ]
    if not fits:
        return None

    seed = int(seed) & MASK32
    shuffled = shuffle_with_seed(fits, (seed ^ hash32(key)) & MASK32)
    idx = ((seed * 7919) & MASK32) % len(shuffled)
    return shuffled[idx]


# ── Parametric set shapes ────────────────────────────────────────────────

@dataclass(frozen=True)
class CatalogueContext:
    section_label: str
    target_distance: float
    pool_length: float
    seed: int


@dataclass(frozen=True)
class CatalogueShape:
    id: str
    kind: str  # continuous, block3, repeats
    make: Callable[[CatalogueContext], str]


@dataclass(frozen=True)
class CataloguePick:
    shape_id: str
    body: str


def clamp_to_bucket(target_distance, buckets: tuple[int, ...], pool_length):
    """Nearest bucket (first wins on ties), snapped wall-safe."""
    best = buckets[0]
    best_delta = abs(target_distance - best)
    for bucket in buckets:
        delta = abs(target_distance - bucket)
        if delta < best_delta:
            best, best_delta = bucket, delta
    return snap_to_wall_safe(best, pool_length)


def fit_repeats_to_target(n: int, rep_distance, target_distance) -> int:
    """Cap ``n`` so the repeats do not overshoot the target; never below 2."""
    if rep_distance <= 0:
        return n
    max_n = int(target_distance // rep_distance)
    return max(2, min(n, max_n))


def _repeats(rep: int, counts: tuple[int, ...], phrase: Callable[[int], str]) -> Callable[[CatalogueContext], str]:
    def make(ctx: CatalogueContext) -> str:
        rep_dist = snap_to_wall_safe(rep, ctx.pool_length)
        n = fit_repeats_to_target(pick_from(counts, ctx.seed), rep_dist, ctx.target_distance)
        return f"{n}x{rep_dist} {phrase(n)}"
    return make


def _continuous(buckets: tuple[int, ...], phrase: str) -> Callable[[CatalogueContext], str]:
    def make(ctx: CatalogueContext) -> str:
        dist = clamp_to_bucket(ctx.target_distance, buckets, ctx.pool_length)
        return f"{dist} {phrase}"
    return make


def _swim_kick_swim(ctx: CatalogueContext) -> str:
    unit = clamp_to_bucket(ctx.target_distance, (300, 400, 500, 600), ctx.pool_length)
    a = snap_to_wall_safe(round_half_up(unit * 0.5), ctx.pool_length)
    b = snap_to_wall_safe(round_half_up(unit * 0.25), ctx.pool_length)
    c = snap_to_wall_safe(unit - a - b, ctx.pool_length)
    return f"{a} easy swim\n{b} kick easy\n{c} easy swim"


BASE_SET_CATALOGUE: Mapping[str, tuple[CatalogueShape, ...]] = MappingProxyType({
    "Warm-up": (
        CatalogueShape("WU_CONTINUOUS_SWIM", "continuous", _continuous((200, 300, 400, 500, 600), "easy swim (choice)")),
        CatalogueShape("WU_SWIM_KICK_SWIM", "block3", _swim_kick_swim),
        CatalogueShape("WU_6_10x50_BUILD", "repeats", _repeats(50, (6, 8, 10), lambda n: "build (smooth to strong)")),
        CatalogueShape("WU_8_12x25_BUILD", "repeats", _repeats(25, (8, 10, 12), lambda n: "build (easy to fast)")),
    ),
    "Build": (
        CatalogueShape(
            "BLD_6_10x50_PROGRESS",
            "repeats",
            _repeats(50, (6, 8, 10), lambda n: f"build 1 to {min(4, max(2, n // 2))} (last strong)"),
        ),
        CatalogueShape("BLD_4_6x100_PROGRESS", "repeats", _repeats(100, (4, 5, 6), lambda n: "descend (hold form)")),
    ),
    "Kick": (
        CatalogueShape("K_8_12x50_KICK", "repeats", _repeats(50, (8, 10, 12), lambda n: "kick (odds easy, evens strong)")),
        CatalogueShape("K_8_16x25_KICK", "repeats", _repeats(25, (8, 12, 16), lambda n: "kick (25 smooth, 25 strong)")),
    ),
    "Drill": (
        CatalogueShape("D_6_10x50_DRILL_SWIM", "repeats", _repeats(50, (6, 8, 10), lambda n: "drill to swim (25 drill, 25 swim)")),
        CatalogueShape("D_8_12x25_DRILL", "repeats", _repeats(25, (8, 10, 12), lambda n: "drill (choice)")),
    ),
    "Main": (
        CatalogueShape("M_10x100_HOLD", "repeats", _repeats(100, (10,), lambda n: "hold strong (steady effort)")),
        CatalogueShape("M_5x200_STEADY", "repeats", _repeats(200, (3, 4, 5), lambda n: "steady to strong")),
        CatalogueShape("M_16x50_ODD_EVEN", "repeats", _repeats(50, (12, 16, 20), lambda n: "odds easy, evens fast")),
    ),
    "Cool-down": (
        CatalogueShape("CD_200_400_EASY", "continuous", _continuous((100, 200, 300, 400, 500), "easy swim")),
        CatalogueShape("CD_4x50_EASY", "repeats", _repeats(50, (4, 6, 8), lambda n: "very easy")),
    ),
})


def pick_catalogue_body(
    section_label: str,
    target_distance,
    pool_length,
    seed: int,
    catalogue: Mapping[str, tuple[CatalogueShape, ...]] = BASE_SET_CATALOGUE,
) -> Optional[CataloguePick]:
    shapes = catalogue.get(section_label)
    if not shapes:
        return None
    shape = shapes[seeded_index(seed, len(shapes))]
    ctx = CatalogueContext(
        section_label=section_label,
        target_distance=target_distance,
        pool_length=pool_length,
        seed=seed,
    )
    return CataloguePick(shape_id=shape.id, body=shape.make(ctx))
