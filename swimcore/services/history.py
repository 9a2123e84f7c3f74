"""Recent-workout store shared by request handlers."""

from __future__ import annotations

import threading
from collections import deque
from typing import Optional

from swimcore.models import GeneratedWorkout
from swimcore.services.workout_builder import with_sections


class WorkoutHistory:
    """Last-N generated workouts, newest last. All access goes through one lock."""

    def __init__(self, max_items: int = 10):
        self._items: deque[GeneratedWorkout] = deque(maxlen=max(1, int(max_items)))
        self._lock = threading.Lock()

    def store(self, workout: GeneratedWorkout) -> None:
        with self._lock:
            self._items.append(workout)

    def current(self) -> Optional[GeneratedWorkout]:
        with self._lock:
            return self._items[-1] if self._items else None

    def recent(self, limit: Optional[int] = None) -> list[GeneratedWorkout]:
        """Newest first."""
        with self._lock:
            items = list(reversed(self._items))
        return items if limit is None else items[: max(0, limit)]

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def update_section(self, index: int, body: str, distance=None) -> Optional[GeneratedWorkout]:
        """Swap one section body of the current workout and re-render its text."""
        with self._lock:
            if not self._items:
                return None
            workout = self._items[-1]
            if not 0 <= index < len(workout.sections):
                return None
            sections = list(workout.sections)
            sections[index] = sections[index].rerolled(body, distance)
            updated = with_sections(workout, sections)
            self._items[-1] = updated
            return updated
