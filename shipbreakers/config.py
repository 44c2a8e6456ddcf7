"""Validated tunables for hazard resolution, crew upkeep, and expeditions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .wreck.models import LootRarity

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .rng import SalvageRandomness


class CrewThresholds(BaseModel):
    """Minimum condition a crew member needs before being sent into a room."""

    model_config = ConfigDict(extra="forbid")

    min_hp_percent: float = Field(default=50.0, ge=0.0, le=100.0)
    min_stamina: int = Field(default=20, ge=0, le=100)
    min_sanity: int = Field(default=20, ge=0, le=100)

    def tightened(self, *, min_stamina: int, min_sanity: int) -> CrewThresholds:
        """Return thresholds no looser than ``self`` and the given minimums."""

        return self.model_copy(
            update={
                "min_stamina": max(self.min_stamina, min_stamina),
                "min_sanity": max(self.min_sanity, min_sanity),
            }
        )


class SalvageConstants(BaseModel):
    """Numeric constants shared by every resolution step."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    # Hazard resolution
    skill_success_multiplier: int = Field(default=22, ge=0)
    hazard_level_penalty: int = Field(default=8, ge=0)
    specialization_bonus: int = Field(default=5, ge=0)
    specialization_min_skill: int = Field(default=3, ge=1)
    mismatch_tier_threshold: int = Field(default=3, ge=1)
    mismatch_skill_threshold: int = Field(default=3, ge=1)
    mismatch_penalty: int = Field(default=15, ge=0)
    damage_per_hazard_level: int = Field(default=10, ge=0)

    # Loot and time
    salvage_value_bonus_per_level: float = Field(default=0.10, ge=0.0)
    rarity_time_cost: dict[LootRarity, int] = Field(
        default_factory=lambda: {
            LootRarity.COMMON: 1,
            LootRarity.UNCOMMON: 2,
            LootRarity.RARE: 3,
            LootRarity.LEGENDARY: 5,
        }
    )
    starting_time: int = Field(default=20, ge=1)
    breach_time_cost: int = Field(default=1, ge=1)

    # Experience
    xp_base_success: int = Field(default=5, ge=0)
    xp_base_fail: int = Field(default=2, ge=0)
    xp_per_hazard_level: int = Field(default=3, ge=0)
    xp_per_tier: int = Field(default=2, ge=0)
    skill_xp_thresholds: tuple[int, ...] = (100, 250, 500, 1000)
    max_skill_level: int = Field(default=5, ge=1)

    # Crew upkeep per attempt
    stamina_per_salvage: int = Field(default=10, ge=0)
    sanity_loss_base: int = Field(default=5, ge=0)
    sanity_loss_hazard_threshold: int = Field(default=3, ge=0)

    # Behaviour probabilities
    salvage_event_chance: float = Field(default=0.2, ge=0.0, le=1.0)
    travel_event_chance: float = Field(default=0.4, ge=0.0, le=1.0)
    coward_flee_chance: float = Field(default=0.2, ge=0.0, le=1.0)
    coward_flee_hazard_threshold: int = Field(default=3, ge=0)
    greedy_steal_chance: float = Field(default=0.05, ge=0.0, le=1.0)

    # Injury and death
    death_chance_on_zero_hp: float = Field(default=0.30, ge=0.0, le=1.0)
    critical_injury_chance: float = Field(default=0.5, ge=0.0, le=1.0)
    major_injury_chance: float = Field(default=0.7, ge=0.0, le=1.0)
    injured_hp_threshold: int = Field(default=20, ge=0)
    recovery_hp_fraction: float = Field(default=0.5, ge=0.0, le=1.0)

    # Morale and relationships
    base_morale: int = Field(default=75, ge=0, le=100)
    morale_loss_on_death: int = Field(default=25, ge=0)
    morale_loss_close_friend: int = Field(default=15, ge=0)
    close_friend_level: float = Field(default=8.0, ge=0.0, le=10.0)
    morale_recovery_per_day: int = Field(default=5, ge=0)
    starting_relationship: float = Field(default=5.0, ge=0.0, le=10.0)
    relationship_work_together: float = Field(default=0.3, ge=0.0)
    relationship_history_limit: int = Field(default=5, ge=1)

    # Station and resting recovery
    station_stamina_recovery: int = Field(default=20, ge=0)
    station_sanity_recovery: int = Field(default=5, ge=0)
    rest_hp_recovery: int = Field(default=10, ge=0)
    rest_stamina_recovery: int = Field(default=30, ge=0)
    rest_sanity_recovery: int = Field(default=20, ge=0)
    rest_ready_hp: int = Field(default=80, ge=0)
    rest_ready_stamina: int = Field(default=70, ge=0)
    rest_ready_sanity: int = Field(default=70, ge=0)

    # Travel and provisions
    fuel_cost_per_au: float = Field(default=2.0, ge=0.0)
    piloting_fuel_reduction_per_level: float = Field(default=0.05, ge=0.0)
    days_per_10_au: float = Field(default=10.0, gt=0.0)
    daily_food_per_crew: int = Field(default=1, ge=0)
    daily_drink_per_crew: int = Field(default=1, ge=0)
    starvation_days_threshold: int = Field(default=3, ge=1)
    starvation_hp_loss: int = Field(default=5, ge=0)
    dehydration_sanity_loss: int = Field(default=10, ge=0)

    @field_validator("skill_xp_thresholds")
    @classmethod
    def _ensure_ascending(cls, value: tuple[int, ...]) -> tuple[int, ...]:
        if any(later <= earlier for earlier, later in zip(value, value[1:])):
            raise ValueError("skill_xp_thresholds must be strictly ascending")
        return tuple(int(entry) for entry in value)

    @field_validator("rarity_time_cost")
    @classmethod
    def _ensure_every_rarity(cls, value: dict[LootRarity, int]) -> dict[LootRarity, int]:
        missing = [rarity.value for rarity in LootRarity if rarity not in value]
        if missing:
            raise ValueError(f"rarity_time_cost is missing {', '.join(missing)}")
        if any(cost < 0 for cost in value.values()):
            raise ValueError("rarity_time_cost entries must be non-negative")
        return value

    def time_cost_for(self, rarity: LootRarity | str) -> int:
        """Return the base extraction time for ``rarity``."""

        return self.rarity_time_cost[LootRarity.from_value(rarity)]


class RandomnessSettings(BaseModel):
    """Configuration for deterministic RNG streams."""

    model_config = ConfigDict(extra="forbid")

    seed: int = Field(default=0, ge=0)

    def factory(self) -> SalvageRandomness:
        """Instantiate a :class:`~shipbreakers.rng.SalvageRandomness` helper."""

        from .rng import SalvageRandomness

        return SalvageRandomness(seed=self.seed)


class ExpeditionConfig(BaseModel):
    """Top-level configuration payload for a salvage campaign."""

    model_config = ConfigDict(extra="forbid")

    constants: SalvageConstants = Field(default_factory=SalvageConstants)
    thresholds: CrewThresholds = Field(default_factory=CrewThresholds)
    randomness: RandomnessSettings = Field(default_factory=RandomnessSettings)
    cargo_capacity: int = Field(default=10, ge=1)
    starting_fuel: int = Field(default=100, ge=0)
    starting_credits: int = Field(default=0, ge=0)
    auto_salvage_delay: float = Field(default=0.5, ge=0.0)
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("metadata", mode="before")
    @classmethod
    def _ensure_metadata_mapping(cls, value: object) -> dict[str, Any]:
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise TypeError("metadata must be a mapping")
        return {str(key): item for key, item in value.items()}

    @property
    def seed(self) -> int:
        return self.randomness.seed


DEFAULT_CONSTANTS = SalvageConstants()
DEFAULT_THRESHOLDS = CrewThresholds()


__all__ = [
    "CrewThresholds",
    "DEFAULT_CONSTANTS",
    "DEFAULT_THRESHOLDS",
    "ExpeditionConfig",
    "RandomnessSettings",
    "SalvageConstants",
]
