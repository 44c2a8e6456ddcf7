"""Pairwise crew bonds on a 0-10 scale."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from enum import Enum

import polars as pl
from polars._typing import PolarsDataType

MIN_LEVEL = 0.0
MAX_LEVEL = 10.0


class RelationshipLevel(str, Enum):
    HOSTILE = "hostile"
    TENSE = "tense"
    NEUTRAL = "neutral"
    FRIENDLY = "friendly"
    CLOSE = "close"
    INTIMATE = "intimate"

    @staticmethod
    def from_score(value: float) -> RelationshipLevel:
        if value <= 1:
            return RelationshipLevel.HOSTILE
        if value <= 3:
            return RelationshipLevel.TENSE
        if value <= 5:
            return RelationshipLevel.NEUTRAL
        if value <= 7:
            return RelationshipLevel.FRIENDLY
        if value <= 9:
            return RelationshipLevel.CLOSE
        return RelationshipLevel.INTIMATE


RELATIONSHIP_MORALE_BONUS: dict[RelationshipLevel, int] = {
    RelationshipLevel.INTIMATE: 5,
    RelationshipLevel.CLOSE: 2,
    RelationshipLevel.FRIENDLY: 1,
    RelationshipLevel.NEUTRAL: 0,
    RelationshipLevel.TENSE: -1,
    RelationshipLevel.HOSTILE: -3,
}

_RELATIONSHIP_FRAME_SCHEMA: dict[str, PolarsDataType] = {
    "crew_a": pl.String,
    "crew_b": pl.String,
    "level": pl.Float64,
    "label": pl.String,
}


def relationship_key(first: str, second: str) -> tuple[str, str]:
    """Return the canonical unordered key for a pair of crew ids."""

    return (first, second) if first < second else (second, first)


@dataclass
class CrewRelationship:
    crew_a: str
    crew_b: str
    level: float
    history: list[str] = field(default_factory=list)

    @property
    def label(self) -> RelationshipLevel:
        return RelationshipLevel.from_score(self.level)

    def involves(self, crew_id: str) -> bool:
        return crew_id in (self.crew_a, self.crew_b)

    def other(self, crew_id: str) -> str:
        return self.crew_b if crew_id == self.crew_a else self.crew_a


@dataclass(frozen=True)
class RelationshipChange:
    crew_a: str
    crew_b: str
    delta: float
    reason: str


class RelationshipLedger:
    """Stores every pairwise bond, created lazily on first interaction.

    Levels are clamped to ``[0, 10]`` on every write. Each bond keeps the most
    recent ``history_limit`` reasons, newest first.
    """

    def __init__(
        self,
        *,
        starting_level: float = 5.0,
        history_limit: int = 5,
        relationships: Iterable[CrewRelationship] = (),
    ) -> None:
        self.starting_level = float(starting_level)
        self.history_limit = int(history_limit)
        self._relationships: dict[tuple[str, str], CrewRelationship] = {}
        for relationship in relationships:
            key = relationship_key(relationship.crew_a, relationship.crew_b)
            relationship.level = _clamp(relationship.level)
            self._relationships[key] = relationship

    def __iter__(self) -> Iterator[CrewRelationship]:
        return iter(self._relationships.values())

    def __len__(self) -> int:
        return len(self._relationships)

    def get(self, first: str, second: str) -> CrewRelationship | None:
        return self._relationships.get(relationship_key(first, second))

    def level(self, first: str, second: str) -> float:
        """Return the bond level, or the starting level if the pair never met."""

        relationship = self.get(first, second)
        return self.starting_level if relationship is None else relationship.level

    def introduce(self, new_crew_id: str, existing_crew_ids: Iterable[str]) -> None:
        """Create neutral bonds between a new hire and everyone already aboard."""

        for other in existing_crew_ids:
            if other == new_crew_id:
                continue
            key = relationship_key(new_crew_id, other)
            if key not in self._relationships:
                self._relationships[key] = CrewRelationship(
                    crew_a=key[0],
                    crew_b=key[1],
                    level=self.starting_level,
                    history=["First met"],
                )

    def change(self, first: str, second: str, delta: float, reason: str) -> RelationshipChange:
        """Shift the bond between two crew members by ``delta``."""

        if first == second:
            raise ValueError("a crew member has no relationship with themselves")
        key = relationship_key(first, second)
        existing = self._relationships.get(key)
        if existing is None:
            old_level = self.starting_level
            existing = CrewRelationship(crew_a=key[0], crew_b=key[1], level=old_level)
            self._relationships[key] = existing
        else:
            old_level = existing.level
        existing.level = _clamp(old_level + delta)
        existing.history = [reason, *existing.history][: self.history_limit]
        return RelationshipChange(
            crew_a=key[0],
            crew_b=key[1],
            delta=existing.level - old_level,
            reason=reason,
        )

    def work_together(self, crew_ids: Sequence[str], delta: float) -> list[RelationshipChange]:
        """Apply ``delta`` to every pair among ``crew_ids``."""

        changes: list[RelationshipChange] = []
        for index, first in enumerate(crew_ids):
            for second in crew_ids[index + 1 :]:
                changes.append(self.change(first, second, delta, "Worked together on salvage"))
        return changes

    def remove_crew(self, crew_id: str) -> int:
        """Drop every bond involving ``crew_id`` and return how many were removed."""

        doomed = [key for key in self._relationships if crew_id in key]
        for key in doomed:
            del self._relationships[key]
        return len(doomed)

    def for_crew(self, crew_id: str) -> list[CrewRelationship]:
        return [rel for rel in self._relationships.values() if rel.involves(crew_id)]

    def morale_bonus(self, crew_id: str) -> int:
        """Sum the morale contribution of every bond ``crew_id`` has."""

        return sum(RELATIONSHIP_MORALE_BONUS[rel.label] for rel in self.for_crew(crew_id))

    # ------------------------------------------------------------------
    def to_frame(self) -> pl.DataFrame:
        """Return one row per bond."""

        rows = [
            {
                "crew_a": rel.crew_a,
                "crew_b": rel.crew_b,
                "level": float(rel.level),
                "label": rel.label.value,
            }
            for rel in self._relationships.values()
        ]
        if not rows:
            return pl.DataFrame(schema=_RELATIONSHIP_FRAME_SCHEMA)
        return pl.DataFrame(rows, schema=_RELATIONSHIP_FRAME_SCHEMA)

    def morale_bonus_frame(self) -> pl.DataFrame:
        """Return ``crew_id``/``bonus`` rows summing each member's bond bonuses."""

        frame = self.to_frame()
        if frame.is_empty():
            return pl.DataFrame(schema={"crew_id": pl.String, "bonus": pl.Int64})
        bonuses = {level.value: bonus for level, bonus in RELATIONSHIP_MORALE_BONUS.items()}
        frame = frame.with_columns(
            pl.col("label").replace_strict(bonuses, return_dtype=pl.Int64).alias("bonus")
        )
        stacked = pl.concat(
            [
                frame.select(pl.col("crew_a").alias("crew_id"), "bonus"),
                frame.select(pl.col("crew_b").alias("crew_id"), "bonus"),
            ]
        )
        return stacked.group_by("crew_id").agg(pl.col("bonus").sum()).sort("crew_id")

    def close_pairs(self, min_level: float = 8.0) -> list[tuple[str, str, float]]:
        frame = self.to_frame().filter(pl.col("level") >= min_level)
        return [(row["crew_a"], row["crew_b"], row["level"]) for row in frame.iter_rows(named=True)]

    def rival_pairs(self, max_level: float = 3.0) -> list[tuple[str, str, float]]:
        frame = self.to_frame().filter(pl.col("level") <= max_level)
        return [(row["crew_a"], row["crew_b"], row["level"]) for row in frame.iter_rows(named=True)]


def _clamp(value: float) -> float:
    return max(MIN_LEVEL, min(MAX_LEVEL, float(value)))


__all__ = [
    "CrewRelationship",
    "RELATIONSHIP_MORALE_BONUS",
    "RelationshipChange",
    "RelationshipLedger",
    "RelationshipLevel",
    "relationship_key",
]
