"""Tests for the set-body generator."""

from __future__ import annotations

import re

from swimcore.services.pool_math import body_distance, parse_nxd
from swimcore.services.prng import DerivedSeeds
from swimcore.services.set_catalog import SECTION_TEMPLATES
from swimcore.services.set_generator import (
    Fit,
    MAIN_BY_FOCUS,
    _build_fast_split,
    _mixed_fifty_hundred,
    _multi_part,
    _SetContext,
    _three_part_ladder,
    find_best_fit,
    generate_set_body,
    make_line,
    preferred_distances,
    reroll_set_body,
    rest_for,
)
from swimcore.services.set_rules import FORBIDDEN_EASY_WORDS
from swimcore.validators import StrokeSelection, SwimOptions


# --- helpers ---

def test_make_line_standard_pool():
    assert make_line(4, 100, "freestyle easy") == "4x100 freestyle easy"
    assert make_line(4, 100, "freestyle hard", 20, show_rest=True) == "4x100 freestyle hard rest 20s"
    assert make_line(4, 100, "freestyle hard", 20) == "4x100 freestyle hard"


def test_make_line_custom_pool_adds_lengths():
    assert make_line(4, 66, "freestyle easy", pool_length=33) == "4x66 (2 lengths) freestyle easy"
    assert make_line(8, 33, "kick", pool_length=33) == "8x33 kick"


def test_preferred_distances():
    p25 = preferred_distances(25)
    assert (p25.d25, p25.d50, p25.d75, p25.d100, p25.d200) == (25, 50, 75, 100, 200)
    p50 = preferred_distances(50)
    assert (p50.d25, p50.d50, p50.d75, p50.d100, p50.d200) == (50, 50, 100, 100, 200)
    p33 = preferred_distances(33)
    assert (p33.d25, p33.d50, p33.d75, p33.d100, p33.d200) == (33, 66, 66, 99, 198)


def test_rest_for():
    assert rest_for(100, "hard", "Main", "balanced", 1) == 25
    assert rest_for(200, "moderate", "Kick", "short", 0) == 4
    assert rest_for(100, "easy", "Warm up", "balanced", 0) == 0
    assert rest_for(100, "moderate", "Drill", "more", 2) == 31


def test_find_best_fit():
    assert find_best_fit(300, (100, 50), 25) == Fit(reps=3, dist=100)
    assert find_best_fit(200, (75,), 25) == Fit(reps=8, dist=25)
    assert find_best_fit(30, (100,), 25) is None
    assert Fit(reps=3, dist=100).total == 300


# --- generate_set_body ---

def test_generate_is_deterministic():
    first = generate_set_body("Main", 1000, 25, seed=123)
    assert first == generate_set_body("Main", 1000, 25, seed=123)


def test_zero_target_returns_none():
    assert generate_set_body("Main", 0, 25) is None


def test_unusable_pool_length_returns_none():
    assert generate_set_body("Main", 400, float("nan"), seed=1) is None
    assert generate_set_body("Main", 400, float("inf"), seed=1) is None
    assert generate_set_body("Kick", 400, 0, seed=1) is None
    assert generate_set_body("Drill", 400, "deep end", seed=1) is None


def test_kick_uses_template_when_distance_matches():
    body = generate_set_body("Kick", 400, 25, seed=99)
    assert body in {t.body for t in SECTION_TEMPLATES["kick"]}
    assert re.match(r"^\d+x\d+ kick", body)
    reps, _ = parse_nxd(body)
    assert reps % 2 == 0
    assert body_distance(body) == 400


def test_warmup_snaps_to_home_wall():
    body = generate_set_body("Warm up", 301, 25, seed=5)
    assert body_distance(body) == 300
    assert not any(word in body.lower() for word in FORBIDDEN_EASY_WORDS)


def test_easy_sections_never_use_hard_words():
    for seed in range(40):
        for label, target, pool in (("Warm up", 400, 25), ("Cool down", 200, 50), ("Warm up", 400, 33), ("Cool down", 300, 33)):
            body = generate_set_body(label, target, pool, seed=seed)
            assert not any(word in body.lower() for word in FORBIDDEN_EASY_WORDS), body


def test_drill_falls_back_when_no_even_scheme():
    assert generate_set_body("Drill", 6000, 50, seed=1) == "6000 drill easy"


def test_drill_two_reps_in_long_pool():
    body = generate_set_body("Drill", 100, 50, seed=4)
    lines = body.split("\n")
    assert lines[0] == "2x50 Drill FC"
    assert len(lines) == 3
    assert lines[1].startswith("1. ")
    assert lines[2].startswith("2. ")


def test_drill_numbers_every_rep():
    body = generate_set_body("Drill", 700, 25, seed=11)
    lines = body.split("\n")
    assert lines[0] == "14x50 Drill FC"
    assert len(lines) == 15
    assert lines[-1].startswith("14. ")


def test_drill_and_kick_reps_are_even():
    for seed in range(20):
        for label in ("Drill", "Kick"):
            for target in (200, 300, 400, 600, 800):
                body = generate_set_body(label, target, 25, seed=seed)
                parsed = parse_nxd(body.split("\n")[0])
                assert parsed is not None, body
                assert parsed[0] % 2 == 0, body
                assert body_distance(body) == target


def test_kick_procedural_with_fins():
    body = generate_set_body("Kick", 1000, 25, options=SwimOptions(fins=True), seed=8)
    assert body.startswith("20x50 ")
    assert "kick" in body
    assert body.endswith(" with fins")


def test_kick_shows_rest_with_threshold_pace():
    body = generate_set_body("Kick", 1000, 25, options=SwimOptions(threshold_pace="1:40"), seed=8)
    assert re.search(r" rest \d+s$", body)


def test_kick_reroll_count_cycles_effort():
    moderate = generate_set_body("Kick", 1000, 25, seed=3, reroll_count=4)
    assert any(p in moderate for p in ("kick steady", "kick on side", "streamline kick", "flutter kick"))
    full_gas = generate_set_body("Kick", 1000, 25, seed=3, reroll_count=3)
    assert "sprint" in full_gas or "max effort" in full_gas


def test_pull_with_paddles():
    body = generate_set_body("Pull", 1000, 25, options=SwimOptions(paddles=True), seed=2)
    assert re.match(r"^\d+x\d+ ", body)
    assert "pull" in body
    assert "with paddles" in body
    assert body_distance(body) == 1000


def test_main_reconstructs_target_in_custom_pool():
    for seed in range(30):
        body = generate_set_body("Main", 1000, 33, seed=seed)
        assert body_distance(body) == 990, body


def test_main_rep_counts_stay_realistic():
    for seed in range(30):
        body = generate_set_body("Main", 2000, 25, seed=seed)
        assert body_distance(body) == 2000
        for line in body.split("\n"):
            parsed = parse_nxd(line)
            if parsed:
                assert parsed[0] <= 20, body


def test_stroke_choice_uses_enabled_strokes():
    options = SwimOptions(strokes=StrokeSelection(freestyle=False, backstroke=True))
    body = generate_set_body("Main", 1000, 33, options=options, seed=6)
    assert "backstroke" in body
    assert "freestyle" not in body


# --- main set focus ---

def test_main_phrase_follows_focus():
    for focus, phrases in MAIN_BY_FOCUS.items():
        body = generate_set_body("Main", 990, 33, options=SwimOptions(focus=focus), seed=1)
        assert "\n" not in body
        assert any(body.endswith(f"freestyle {phrase}") for phrase in phrases), (focus, body)


def test_technique_focus_differs_from_allround():
    allround = generate_set_body("Main", 990, 33, options=SwimOptions(focus="allround"), seed=1)
    technique = generate_set_body("Main", 990, 33, options=SwimOptions(focus="technique"), seed=1)
    assert allround == "15x66 (2 lengths) freestyle descend 1-4"
    assert technique == "15x66 (2 lengths) freestyle focus DPS"


def test_unknown_focus_cycles_effort_like_allround():
    other = generate_set_body("Main", 990, 33, options=SwimOptions(focus="open water"), seed=1)
    assert other == generate_set_body("Main", 990, 33, options=SwimOptions(focus="allround"), seed=1)


# --- multi-part main sets ---

def _main_context(target, pool_length=25, b=0):
    return _SetContext("Main", target, pool_length, SwimOptions(), DerivedSeeds(a=0, b=b, c=0, d=0), 0)


def test_build_fast_split_halves_the_reps():
    assert _build_fast_split(_main_context(800)) == "4x100 freestyle build\n4x100 freestyle fast"
    assert _build_fast_split(_main_context(300)) is None
    assert _build_fast_split(_main_context(450)) is None


def test_three_part_ladder_splits_into_thirds():
    body = _three_part_ladder(_main_context(600))
    assert body == "2x100 freestyle steady\n2x100 freestyle strong\n2x100 freestyle fast"
    assert _three_part_ladder(_main_context(800)) is None


def test_mixed_fifty_hundred_covers_odd_hundreds():
    assert _mixed_fifty_hundred(_main_context(450)) == "5x50 freestyle build\n2x100 freestyle strong"
    assert _mixed_fifty_hundred(_main_context(250)) is None


def test_multi_part_rotation_starts_at_seed_b():
    assert _multi_part(_main_context(600, b=0)) == "3x100 freestyle build\n3x100 freestyle fast"
    assert _multi_part(_main_context(600, b=1)) == "2x100 freestyle steady\n2x100 freestyle strong\n2x100 freestyle fast"
    assert _multi_part(_main_context(600, b=2)) == "8x50 freestyle build\n2x100 freestyle strong"


def test_multi_part_falls_through_to_next_strategy():
    assert _multi_part(_main_context(450, b=0)) == "5x50 freestyle build\n2x100 freestyle strong"


def test_multi_part_none_when_target_cannot_be_rebuilt():
    assert _multi_part(_main_context(250, b=0)) is None


def test_multi_part_gate_end_to_end():
    # seed 5: a % 5 == 0 and b % 3 == 1, so the ladder is tried first
    body = generate_set_body("Main", 594, 33, seed=5)
    assert body == (
        "2x99 (3 lengths) freestyle steady\n"
        "2x99 (3 lengths) freestyle strong\n"
        "2x99 (3 lengths) freestyle fast"
    )
    assert body_distance(body) == 594

    assert "\n" not in generate_set_body("Main", 594, 33, seed=1)
    assert "\n" not in generate_set_body("Main", 396, 33, seed=5)
    assert "\n" not in generate_set_body("Swim", 594, 33, seed=5)


# --- reroll ---

def test_reroll_avoids_previous_body():
    first = generate_set_body("Main", 1000, 25, seed=(7919 + 9973 + 5), reroll_count=1)
    rerolled = reroll_set_body("Main", 1000, 25, reroll_count=1, avoid_text=first, base_seed=5)
    assert rerolled is not None
    assert rerolled.strip() != first.strip()
    assert body_distance(rerolled) == 1000


def test_reroll_is_deterministic_with_base_seed():
    a = reroll_set_body("Build", 400, 25, reroll_count=2, base_seed=77)
    b = reroll_set_body("Build", 400, 25, reroll_count=2, base_seed=77)
    assert a == b


def test_reroll_exhausted_returns_none():
    assert reroll_set_body("Drill", 6000, 50, avoid_text="6000 drill easy", base_seed=1, max_attempts=3) is None
