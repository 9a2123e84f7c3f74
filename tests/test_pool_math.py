"""Tests for pool-length arithmetic and body parsing."""

from __future__ import annotations

from swimcore.services.pool_math import (
    body_distance,
    body_rest_seconds,
    clean_distance,
    ends_at_home_end,
    exact_reps,
    format_distance,
    format_mm_ss,
    is_standard_pool,
    pace_multiplier_for_label,
    parse_nxd,
    parse_pace_to_seconds_per_100,
    round_half_up,
    snap_rep_distance,
    snap_to_wall_safe,
)


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(2.49) == 2


def test_clean_distance_collapses_integral_floats():
    assert clean_distance(100.0) == 100
    assert isinstance(clean_distance(100.0), int)
    assert clean_distance(100 / 3) == 33.333333
    assert format_distance(66.0) == "66"


def test_is_standard_pool():
    assert is_standard_pool(25)
    assert is_standard_pool(50)
    assert not is_standard_pool(33)


def test_snap_to_wall_safe():
    assert snap_to_wall_safe(301, 25) == 300
    assert snap_to_wall_safe(1000, 33) == 990
    assert snap_to_wall_safe(10, 25) == 50
    assert snap_to_wall_safe(0, 25) == 0
    assert snap_to_wall_safe(-50, 25) == 0
    assert snap_to_wall_safe("abc", 25) == 0


def test_snap_rep_distance():
    assert snap_rep_distance(60, 25) == 50
    assert snap_rep_distance(100, 33) == 99
    assert snap_rep_distance(0, 25) == 0


def test_exact_reps():
    assert exact_reps(1848, 132) == 14
    assert exact_reps(100, 30) is None
    assert exact_reps(0, 25) is None
    assert exact_reps(100, 0) is None


def test_exact_reps_tolerates_float_pools():
    length = 100 / 3
    assert exact_reps(length * 6, length) == 6


def test_ends_at_home_end():
    assert ends_at_home_end(100, 25)
    assert not ends_at_home_end(75, 25)
    assert not ends_at_home_end(100, 33)
    assert ends_at_home_end(132, 33)


def test_parse_pace_to_seconds_per_100():
    assert parse_pace_to_seconds_per_100("1:45") == 105
    assert parse_pace_to_seconds_per_100("95") == 95
    assert parse_pace_to_seconds_per_100("") is None
    assert parse_pace_to_seconds_per_100("fast") is None
    assert parse_pace_to_seconds_per_100("00") is None


def test_format_mm_ss():
    assert format_mm_ss(125) == "2:05"
    assert format_mm_ss(0) == "0:00"
    assert format_mm_ss(-4) == "0:00"


def test_pace_multiplier_for_label():
    assert pace_multiplier_for_label("Main 1") == 1.05
    assert pace_multiplier_for_label("Cool down") == 1.35
    assert pace_multiplier_for_label("Intervals") == 1.15


def test_parse_nxd():
    assert parse_nxd("8x50 kick steady") == (8, 50)
    assert parse_nxd("10x99 (3 lengths) freestyle strong") == (10, 99)
    assert parse_nxd("300 easy") is None
    assert parse_nxd("") is None


def test_body_distance_mixed_lines():
    assert body_distance("4x100 easy\n200 kick") == 600
    assert body_distance("8x25 Drill FC\n1. Fist\n2. DPS") == 200
    assert body_distance("300 easy swim\n4x50 build") == 500


def test_body_distance_nothing_parses():
    assert body_distance("") is None
    assert body_distance("easy swim") is None


def test_body_rest_seconds():
    assert body_rest_seconds("4x100 free rest 20s") == 60
    assert body_rest_seconds("4x100 free rest 20s\n6x50 kick rest 15s") == 60 + 75
    assert body_rest_seconds("400 easy") == 0
