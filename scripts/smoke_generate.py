from __future__ import annotations

from swimcore.services.pool_math import body_distance, ends_at_home_end
from swimcore.services.set_rules import validate_workout
from swimcore.services.workout_builder import WorkoutGenerationError, generate_workout
from swimcore.validators import PoolSpec

DISTANCES = (1000, 1500, 2000, 2500, 3000, 4000)
POOLS = ("25m", "50m", "25yd")
SEEDS = range(1, 6)


def main() -> int:
    failures = 0
    for pool_name in POOLS:
        pool = PoolSpec(pool=pool_name).resolve()
        for distance in DISTANCES:
            for seed in SEEDS:
                try:
                    workout = generate_workout(distance, pool, seed=seed)
                except WorkoutGenerationError as exc:
                    print(f"FAIL pool={pool_name} distance={distance} seed={seed} error={exc}")
                    failures += 1
                    continue
                problems = []
                if not ends_at_home_end(workout.total_distance, pool.length):
                    problems.append("odd lengths")
                for section in workout.sections:
                    if body_distance(section.body) != section.target_distance:
                        problems.append(f"{section.label} distance mismatch")
                reason = validate_workout(workout.sections, pool.length)
                if reason:
                    problems.append(reason)
                status = "ok" if not problems else "FAIL " + "; ".join(problems)
                failures += bool(problems)
                print(f"{status} pool={pool_name} distance={distance} seed={seed} total={workout.total_distance} name={workout.name!r}")

    print(f"failures={failures}")
    return 0 if failures == 0 else 1


if __name__ == "__main__":
    raise SystemExit(main())
