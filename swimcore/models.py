"""Shared value types passed between the generator, the assembler and the API."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Optional

from swimcore.services.pool_math import format_distance, is_standard_pool
from swimcore.services.sections import SectionKind, section_category


@dataclass(frozen=True)
class Pool:
    length: float
    units_label: str = "m"
    label: str = ""

    @property
    def is_standard(self) -> bool:
        return is_standard_pool(self.length)

    @property
    def display(self) -> str:
        if self.label:
            return self.label
        return f"{format_distance(self.length)}{self.units_label} custom"


@dataclass(frozen=True)
class Section:
    """One labelled workout block. Replaced wholesale on reroll, never edited in place."""

    label: str
    target_distance: float
    body: str
    modified: bool = False

    @property
    def category(self) -> SectionKind:
        return section_category(self.label)

    def rerolled(self, body: str, target_distance: Optional[float] = None) -> "Section":
        return replace(
            self,
            body=body,
            target_distance=self.target_distance if target_distance is None else target_distance,
            modified=True,
        )


@dataclass(frozen=True)
class GeneratedWorkout:
    text: str
    name: str
    sections: tuple[Section, ...]
    total_distance: float
    requested_distance: float
    pool: Pool
    seed: int
    fingerprint: str = ""
    estimated_seconds: Optional[float] = None
    pace_seconds: Optional[int] = None
    meta: dict = field(default_factory=dict)

    @property
    def total_lengths(self) -> int:
        return int(round(self.total_distance / self.pool.length))
