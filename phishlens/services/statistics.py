"""Offline evaluation bookkeeping over many analysis records."""

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable

from phishlens.models.analysis import FRAMEWORK_KEYS, AnalysisRecord, Classification, RiskLevel


def _percent(numerator: int, denominator: int) -> float:
    return round(numerator / denominator * 100, 1) if denominator else 0.0


@dataclass(frozen=True)
class AnalysisStatistics:
    total: int
    risk_distribution: Dict[str, int]
    classification: Dict[str, int]
    accuracy: float  # percentages, one decimal
    precision: float
    recall: float
    f1_score: float
    framework_averages: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "riskDistribution": dict(self.risk_distribution),
            "classification": dict(self.classification),
            "metrics": {
                "accuracy": self.accuracy,
                "precision": self.precision,
                "recall": self.recall,
                "f1Score": self.f1_score,
            },
            "frameworkComparison": dict(self.framework_averages),
        }


def summarize(records: Iterable[AnalysisRecord]) -> AnalysisStatistics:
    """Risk distribution, confusion counts, derived metrics and per-framework means."""
    records = list(records)
    total = len(records)

    levels = Counter(record.risk.risk_level for record in records)
    labels = Counter(record.risk.classification for record in records)
    tp, tn = labels[Classification.TP], labels[Classification.TN]
    fp, fn = labels[Classification.FP], labels[Classification.FN]

    precision = _percent(tp, tp + fp)
    recall = _percent(tp, tp + fn)
    f1 = round(2 * precision * recall / (precision + recall), 1) if precision + recall else 0.0

    divisor = max(1, total)
    framework_averages = {
        key: round(sum(record.frameworks[key].score for record in records) / divisor, 1)
        for key in FRAMEWORK_KEYS
    }

    return AnalysisStatistics(
        total=total,
        risk_distribution={
            "high": levels[RiskLevel.HIGH],
            "medium": levels[RiskLevel.MEDIUM],
            "low": levels[RiskLevel.LOW],
        },
        classification={"tp": tp, "tn": tn, "fp": fp, "fn": fn},
        accuracy=_percent(tp + tn, total),
        precision=precision,
        recall=recall,
        f1_score=f1,
        framework_averages=framework_averages,
    )
