from .contracts import DistributionResult, DistributionStrategy, Position
from .core import DistributionIntegrityError, InfeasibleAnchorage, PreconditionViolation, seeded_random
from .distribution import DistributionEngine
from .roster import Player, Roster, Team

__all__ = [
    "DistributionEngine",
    "DistributionIntegrityError",
    "DistributionResult",
    "DistributionStrategy",
    "InfeasibleAnchorage",
    "Player",
    "Position",
    "PreconditionViolation",
    "Roster",
    "Team",
    "seeded_random",
]
