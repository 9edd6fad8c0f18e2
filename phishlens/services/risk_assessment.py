"""
Risk aggregation: six framework scores in, one risk verdict out.

The verdict is a pure function of the unweighted mean score. The only
optional twist is the borderline reclassification policy, which is
injected explicitly and defaults to doing nothing.
"""

import random
from typing import Callable, Optional

from phishlens.config.logging import get_logger
from phishlens.models.analysis import Classification, FrameworkResultSet, RiskAssessment, RiskLevel

logger = get_logger(__name__)

HIGH_THRESHOLD = 70.0
MEDIUM_THRESHOLD = 40.0
BORDERLINE_LOW = 35.0
BORDERLINE_HIGH = 45.0
MAX_CONFIDENCE = 0.99
LOW_TIER_MAX_CONFIDENCE = 0.90

# Called with the average score inside the borderline band; True relabels as FP.
ReclassificationPolicy = Callable[[float], bool]


def never_relabel(average_score: float) -> bool:
    """Default policy: borderline results keep their tier classification."""
    return False


class SeededBorderlinePolicy:
    """Relabel a share of borderline results as false positives, reproducibly.

    Useful only for generating demo data with some FP variety. The decision
    depends on the seed and the average score alone, so the same input
    always gets the same label.
    """

    def __init__(self, seed: int, probability: float = 0.3):
        if not 0.0 <= probability <= 1.0:
            raise ValueError("probability must be between 0 and 1")
        self.seed = seed
        self.probability = probability

    def __call__(self, average_score: float) -> bool:
        rng = random.Random(hash((self.seed, round(average_score, 3))))
        return rng.random() < self.probability


def risk_level_for(average_score: float) -> RiskLevel:
    """Tier an average framework score."""
    if average_score >= HIGH_THRESHOLD:
        return RiskLevel.HIGH
    if average_score >= MEDIUM_THRESHOLD:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def _clamp(value: float, lower: float = 0.0, upper: float = MAX_CONFIDENCE) -> float:
    return max(lower, min(upper, value))


class RiskAggregator:
    """Reduce a FrameworkResultSet to a RiskAssessment."""

    def __init__(self, reclassification_policy: Optional[ReclassificationPolicy] = None):
        self.reclassification_policy = reclassification_policy or never_relabel

    def assess(self, frameworks: FrameworkResultSet) -> RiskAssessment:
        average = frameworks.average_score()
        risk_level = risk_level_for(average)

        if risk_level == RiskLevel.HIGH:
            confidence = 0.85 + (average - HIGH_THRESHOLD) / 100
            is_phishing = True
            classification = Classification.TP
        elif risk_level == RiskLevel.MEDIUM:
            confidence = 0.60 + (average - MEDIUM_THRESHOLD) / 100
            is_phishing = True
            classification = Classification.TP
        else:
            confidence = min(LOW_TIER_MAX_CONFIDENCE, 0.80 + (30 - average) / 100)
            is_phishing = False
            classification = Classification.TN

        if BORDERLINE_LOW <= average <= BORDERLINE_HIGH and self.reclassification_policy(average):
            logger.info("borderline_relabelled", average_score=round(average, 1))
            classification = Classification.FP
            is_phishing = False

        return RiskAssessment(
            risk_level=risk_level,
            confidence=_clamp(confidence),
            is_phishing=is_phishing,
            classification=classification,
            average_score=average,
        )
