from .types import (
    DistributionResult,
    DistributionStrategy,
    FairnessCalibrationRequest,
    FairnessCalibrationResult,
    ForensicArtifact,
    Position,
    RandomSource,
    ValidationError,
    ValidationIssue,
    ValidationResult,
)

__all__ = [
    "DistributionResult",
    "DistributionStrategy",
    "FairnessCalibrationRequest",
    "FairnessCalibrationResult",
    "ForensicArtifact",
    "Position",
    "RandomSource",
    "ValidationError",
    "ValidationIssue",
    "ValidationResult",
]
