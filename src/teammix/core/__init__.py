from .config import (
    DEFAULT_FORMATION,
    DistributionConfig,
    config_for_formation,
    default_distribution_config,
    formation_presets,
    validate_formation,
)
from .errors import (
    DistributionIntegrityError,
    InfeasibleAnchorage,
    PreconditionViolation,
    build_forensic_artifact,
    persist_forensic_artifact,
    precondition_violation,
)
from .ids import make_id, now_utc
from .randomness import PythonRandomSource, mix_random, seeded_random

__all__ = [
    "DEFAULT_FORMATION",
    "DistributionConfig",
    "DistributionIntegrityError",
    "InfeasibleAnchorage",
    "PreconditionViolation",
    "PythonRandomSource",
    "build_forensic_artifact",
    "config_for_formation",
    "default_distribution_config",
    "formation_presets",
    "make_id",
    "mix_random",
    "now_utc",
    "persist_forensic_artifact",
    "precondition_violation",
    "seeded_random",
    "validate_formation",
]
