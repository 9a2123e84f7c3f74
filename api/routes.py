from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status

from api.deps import get_history
from api.ratelimit import error_detail, limiter
from api.schemas import (
    GenerateWorkoutRequest,
    HealthOut,
    RecentWorkoutsOut,
    RerollSetRequest,
    RerollSetResponse,
    WorkoutOut,
)
from swimcore.config import get_settings
from swimcore.services.history import WorkoutHistory
from swimcore.services.sections import canonical_label
from swimcore.services.set_catalog import CATALOG_VERSION
from swimcore.services.set_generator import reroll_set_body
from swimcore.services.workout_builder import WorkoutGenerationError, generate_workout

logger = logging.getLogger(__name__)
settings = get_settings()
router = APIRouter(prefix="/api/v1")


def _unprocessable(code: str, message: str, **extra) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail=error_detail(code, message, **extra)["detail"],
    )


@router.get("/health", response_model=HealthOut, tags=["meta"])
def health():
    return HealthOut(catalog_version=CATALOG_VERSION, app_env=get_settings().app_env)


@router.post("/generate-workout", response_model=WorkoutOut, tags=["workouts"])
@limiter.limit(settings.generate_rate_limit)
def generate(
    request: Request,
    response: Response,
    body: GenerateWorkoutRequest,
    history: Annotated[WorkoutHistory, Depends(get_history)],
):
    del request, response
    cfg = get_settings()
    if not cfg.min_workout_distance <= body.distance <= cfg.max_workout_distance:
        raise _unprocessable(
            "DISTANCE_OUT_OF_RANGE",
            f"distance must be between {cfg.min_workout_distance} and {cfg.max_workout_distance}",
        )
    pool = body.pool.resolve()
    try:
        workout = generate_workout(
            body.distance,
            pool,
            body.options,
            seed=body.seed,
            last_fingerprint=body.last_workout_fingerprint,
            max_attempts=cfg.workout_build_attempts,
            section_attempts=cfg.section_body_attempts,
        )
    except WorkoutGenerationError as exc:
        logger.warning(
            "workout_generation_failed",
            extra={"ctx_distance": body.distance, "ctx_pool": pool.display, "ctx_attempts": exc.attempts},
        )
        raise _unprocessable("GENERATION_FAILED", str(exc)) from exc

    history.store(workout)
    logger.info(
        "workout_generated",
        extra={"ctx_distance": workout.total_distance, "ctx_pool": pool.display, "ctx_sections": len(workout.sections)},
    )
    return WorkoutOut.from_workout(workout)


@router.post("/reroll-set", response_model=RerollSetResponse, tags=["workouts"])
@limiter.limit(settings.reroll_rate_limit)
def reroll(
    request: Request,
    response: Response,
    body: RerollSetRequest,
    history: Annotated[WorkoutHistory, Depends(get_history)],
):
    del request, response
    pool = body.pool.resolve()
    label = canonical_label(body.label)
    new_body = reroll_set_body(
        label,
        body.target_distance,
        pool.length,
        units_label=pool.units_label,
        options=body.options,
        reroll_count=body.reroll_count,
        avoid_text=body.avoid_text,
        max_attempts=get_settings().reroll_max_attempts,
    )
    if not new_body:
        raise _unprocessable("REROLL_FAILED", "could not produce a different set for this section")

    if body.section_index is not None:
        history.update_section(body.section_index, new_body, body.target_distance)
    return RerollSetResponse(set_body=new_body, label=label, target_distance=body.target_distance)


@router.get("/workouts/recent", response_model=RecentWorkoutsOut, tags=["workouts"])
def recent_workouts(
    history: Annotated[WorkoutHistory, Depends(get_history)],
    limit: int = Query(10, ge=1, le=50),
):
    items = history.recent(limit)
    return RecentWorkoutsOut(items=[WorkoutOut.from_workout(w) for w in items], total=len(history))


@router.get("/workouts/current", response_model=WorkoutOut, tags=["workouts"])
def current_workout(history: Annotated[WorkoutHistory, Depends(get_history)]):
    workout = history.current()
    if workout is None:
        raise HTTPException(status_code=404, detail=error_detail("NOT_FOUND", "no workout generated yet")["detail"])
    return WorkoutOut.from_workout(workout)
