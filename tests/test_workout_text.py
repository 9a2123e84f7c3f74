"""Tests for reading rendered workout text back into sections."""

from __future__ import annotations

from swimcore.services.workout_text import (
    ParsedSection,
    estimate_workout_seconds,
    infer_is_striated,
    infer_zone,
    is_footer_line,
    line_zone,
    parse_workout_text,
)

TEXT = (
    "Warm up: 300 easy\n\n"
    "Drill: 4x50 Drill FC\n1. Fist\n2. DPS\n3. Catch-up\n4. Scull Front\n\n"
    "Main: 10x100 steady rest 20s\n\n"
    "Cool down: 200 easy\n\n"
    "Requested: 900m\n"
    "Total lengths: 36 lengths\n"
    "Ends at start end: yes\n"
    "Total distance: 900m (pool: 25m)"
)


def test_is_footer_line():
    assert is_footer_line("Total distance: 900m (pool: 25m)")
    assert is_footer_line("  Est total time: 20:00")
    assert not is_footer_line("Main: 10x100 steady")


def test_parse_workout_text_sections():
    sections = parse_workout_text(TEXT)
    assert [s.label for s in sections] == ["Warm up", "Drill", "Main", "Cool down"]
    assert sections[1] == ParsedSection(
        label="Drill",
        body="4x50 Drill FC\n1. Fist\n2. DPS\n3. Catch-up\n4. Scull Front",
    )


def test_parse_workout_text_empty():
    assert parse_workout_text("") == []
    assert parse_workout_text(None) == []


def test_line_zone():
    assert line_zone("8x50 sprint") == "full_gas"
    assert line_zone("4x100 threshold") == "hard"
    assert line_zone("4x100 descend 1-4") == "strong"
    assert line_zone("4x100 steady") == "moderate"
    assert line_zone("200 loosen") == "easy"
    assert line_zone("4x100") is None


def test_infer_zone_easy_sections():
    assert infer_zone("8x50 fast", "Warm up") == "easy"
    assert infer_zone("200 easy", "Cool down") == "easy"


def test_infer_zone_main_is_at_least_strong():
    assert infer_zone("10x100 steady", "Main") == "strong"
    assert infer_zone("10x100 steady\n4x50 sprint", "Main") == "full_gas"
    assert infer_zone("6x50 kick steady", "Kick") == "moderate"
    assert infer_zone("", "Pull") == "moderate"


def test_infer_is_striated():
    assert infer_is_striated("4x100 build")
    assert infer_is_striated("6x100 descend 1-3 twice")
    assert infer_is_striated("8x50 odds easy, evens fast")
    assert infer_is_striated("10x100 steady\n4x50 sprint")
    assert not infer_is_striated("10x100 steady")


def test_estimate_workout_seconds():
    # warm 3 x 100 x 1.25 + drill 2 x 100 x 1.30 + main 10 x 100 x 1.05 + 9 x 20 rest + cool 2 x 100 x 1.35
    expected = 375 + 260 + 1050 + 180 + 270
    assert round(estimate_workout_seconds(TEXT, 100)) == expected


def test_estimate_workout_seconds_bad_pace():
    assert estimate_workout_seconds(TEXT, 0) is None
    assert estimate_workout_seconds(TEXT, "fast") is None
