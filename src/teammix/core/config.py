from __future__ import annotations

from dataclasses import dataclass

from teammix.contracts import Position

DEFAULT_FORMATION = "seven_a_side"


@dataclass(slots=True)
class DistributionConfig:
    team_size: int = 7
    skill_min: int = 1
    skill_max: int = 5

    def validate(self) -> None:
        if self.team_size <= 0:
            raise ValueError("team_size must be positive")
        if self.skill_min <= 0:
            raise ValueError("skill_min must be positive; 0 is reserved for unrated players")
        if self.skill_max < self.skill_min:
            raise ValueError("skill_max must not be lower than skill_min")

    def skill_in_range(self, skill: int) -> bool:
        return self.skill_min <= skill <= self.skill_max


def default_distribution_config() -> DistributionConfig:
    return DistributionConfig()


def formation_presets() -> dict[str, dict[Position, int]]:
    return {
        "five_a_side": {
            Position.CENTRAL_DEFENDER: 1,
            Position.LATERAL_DEFENDER: 0,
            Position.MIDFIELDER: 2,
            Position.FORWARD: 1,
            Position.GOALKEEPER: 1,
        },
        "seven_a_side": {
            Position.CENTRAL_DEFENDER: 1,
            Position.LATERAL_DEFENDER: 2,
            Position.MIDFIELDER: 2,
            Position.FORWARD: 1,
            Position.GOALKEEPER: 1,
        },
        "eleven_a_side": {
            Position.CENTRAL_DEFENDER: 2,
            Position.LATERAL_DEFENDER: 2,
            Position.MIDFIELDER: 4,
            Position.FORWARD: 2,
            Position.GOALKEEPER: 1,
        },
    }


def validate_formation(capacities: dict[Position, int], config: DistributionConfig) -> None:
    if any(count < 0 for count in capacities.values()):
        raise ValueError("formation capacities must not be negative")
    unknown = set(capacities) - set(Position)
    if unknown:
        raise ValueError(f"formation contains unknown positions: {sorted(unknown)}")
    if sum(capacities.values()) != config.team_size:
        raise ValueError(
            f"formation capacities sum to {sum(capacities.values())}, expected team size {config.team_size}"
        )


def config_for_formation(name: str) -> tuple[DistributionConfig, dict[Position, int]]:
    presets = formation_presets()
    if name not in presets:
        raise ValueError(f"unknown formation '{name}'")
    capacities = presets[name]
    config = DistributionConfig(team_size=sum(capacities.values()))
    config.validate()
    validate_formation(capacities, config)
    return config, capacities
