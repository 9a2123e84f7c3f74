"""Pydantic validation models for workout generation inputs."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from swimcore.models import Pool

STROKE_ORDER = ("freestyle", "backstroke", "breaststroke", "butterfly")
REST_PREFS = {"short", "balanced", "more"}
STANDARD_POOLS = {
    "25m": Pool(length=25, units_label="m", label="25m"),
    "50m": Pool(length=50, units_label="m", label="50m"),
    "25yd": Pool(length=25, units_label="yd", label="25yd"),
}


class StrokeSelection(BaseModel):
    freestyle: bool = True
    backstroke: bool = False
    breaststroke: bool = False
    butterfly: bool = False

    @model_validator(mode="after")
    def at_least_one(self):
        if not any(getattr(self, name) for name in STROKE_ORDER):
            raise ValueError("at least one stroke must be enabled")
        return self

    def enabled(self) -> list[str]:
        return [name for name in STROKE_ORDER if getattr(self, name)]


class SwimOptions(BaseModel):
    strokes: StrokeSelection = Field(default_factory=StrokeSelection)
    fins: bool = False
    paddles: bool = False
    rest_pref: str = "balanced"
    threshold_pace: str = Field(default="", max_length=16)
    focus: str = Field(default="allround", max_length=40)
    include_kick: bool = True
    include_pull: bool = False
    notes: str = Field(default="", max_length=500)

    @field_validator("rest_pref")
    @classmethod
    def valid_rest_pref(cls, v):
        v = (v or "balanced").strip().lower()
        if v not in REST_PREFS:
            raise ValueError(f"rest_pref must be one of {REST_PREFS}")
        return v

    @field_validator("threshold_pace", "focus", "notes")
    @classmethod
    def strip_text(cls, v):
        return (v or "").strip()

    @property
    def has_threshold_pace(self) -> bool:
        return bool(self.threshold_pace)


class PoolSpec(BaseModel):
    pool: str = "25m"
    custom_length: Optional[float] = Field(default=None, gt=0, le=1000)
    custom_unit: str = "m"

    @field_validator("pool")
    @classmethod
    def valid_pool(cls, v):
        v = (v or "").strip().lower()
        if v not in STANDARD_POOLS and v != "custom":
            raise ValueError(f"pool must be one of {sorted(STANDARD_POOLS)} or 'custom'")
        return v

    @field_validator("custom_unit")
    @classmethod
    def valid_unit(cls, v):
        v = (v or "m").strip().lower()
        if v in {"yards", "yard", "yd"}:
            return "yd"
        if v in {"meters", "metres", "m"}:
            return "m"
        raise ValueError("custom_unit must be 'm' or 'yd'")

    @model_validator(mode="after")
    def custom_needs_length(self):
        if self.pool == "custom" and not self.custom_length:
            raise ValueError("custom pool requires custom_length")
        return self

    def resolve(self) -> Pool:
        if self.pool in STANDARD_POOLS:
            return STANDARD_POOLS[self.pool]
        length = self.custom_length
        if length == int(length):
            length = int(length)
        return Pool(length=length, units_label=self.custom_unit, label=f"{length}{self.custom_unit} custom")
