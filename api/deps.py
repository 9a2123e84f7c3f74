from __future__ import annotations

from functools import lru_cache

from swimcore.config import get_settings
from swimcore.services.history import WorkoutHistory


@lru_cache(maxsize=1)
def get_history() -> WorkoutHistory:
    return WorkoutHistory(max_items=get_settings().history_size)
