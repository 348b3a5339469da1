from .anchorage import AnchorageGroup, AnchorageGrouper
from .context import DistributionContext, Distributor
from .engine import DistributionEngine
from .random_mixer import RandomDistributor
from .skill_mixer import SkillBalancedDistributor

__all__ = [
    "AnchorageGroup",
    "AnchorageGrouper",
    "DistributionContext",
    "DistributionEngine",
    "Distributor",
    "RandomDistributor",
    "SkillBalancedDistributor",
]
