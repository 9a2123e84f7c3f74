from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field

from swimcore.config import get_settings
from swimcore.models import GeneratedWorkout
from swimcore.validators import PoolSpec, SwimOptions


def _default_pool() -> PoolSpec:
    return PoolSpec(pool=get_settings().default_pool)


class GenerateWorkoutRequest(BaseModel):
    distance: int = Field(gt=0)
    pool: PoolSpec = Field(default_factory=_default_pool)
    options: SwimOptions = Field(default_factory=SwimOptions)
    seed: Optional[int] = Field(default=None, ge=0, le=0xFFFFFFFF)
    last_workout_fingerprint: str = Field(default="", max_length=32)


class RerollSetRequest(BaseModel):
    label: str = Field(min_length=1, max_length=40)
    target_distance: float = Field(gt=0)
    pool: PoolSpec = Field(default_factory=_default_pool)
    options: SwimOptions = Field(default_factory=SwimOptions)
    avoid_text: str = Field(default="", max_length=4000)
    reroll_count: int = Field(default=1, ge=0, le=10000)
    section_index: Optional[int] = Field(default=None, ge=0)


class RerollSetResponse(BaseModel):
    ok: bool = True
    set_body: str
    label: str
    target_distance: float


class SectionOut(BaseModel):
    label: str
    target_distance: float
    body: str
    modified: bool = False


class PoolOut(BaseModel):
    length: float
    units: str
    label: str


class WorkoutOut(BaseModel):
    name: str
    text: str
    sections: list[SectionOut]
    section_meta: list[dict[str, Any]] = Field(default_factory=list)
    workout_meta: dict[str, Any] = Field(default_factory=dict)
    total_distance: float
    total_lengths: int
    requested_distance: float
    pool: PoolOut
    seed: int
    fingerprint: str
    estimated_seconds: Optional[float] = None

    @classmethod
    def from_workout(cls, workout: GeneratedWorkout) -> "WorkoutOut":
        meta = dict(workout.meta)
        section_meta = meta.pop("sections", [])
        return cls(
            name=workout.name,
            text=workout.text,
            sections=[
                SectionOut(label=s.label, target_distance=s.target_distance, body=s.body, modified=s.modified)
                for s in workout.sections
            ],
            section_meta=section_meta,
            workout_meta=meta,
            total_distance=workout.total_distance,
            total_lengths=workout.total_lengths,
            requested_distance=workout.requested_distance,
            pool=PoolOut(length=workout.pool.length, units=workout.pool.units_label, label=workout.pool.display),
            seed=workout.seed,
            fingerprint=workout.fingerprint,
            estimated_seconds=workout.estimated_seconds,
        )


class RecentWorkoutsOut(BaseModel):
    items: list[WorkoutOut]
    total: int


class HealthOut(BaseModel):
    status: str = "ok"
    catalog_version: str
    app_env: str
