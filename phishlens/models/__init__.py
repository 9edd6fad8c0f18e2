"""Result models for the scoring engine."""

from phishlens.models.analysis import (
    ANALYSIS_VERSION,
    FRAMEWORK_KEYS,
    FRAMEWORK_ORDER,
    AnalysisRecord,
    Classification,
    FrameworkKind,
    FrameworkResult,
    FrameworkResultSet,
    Indicator,
    IndicatorType,
    Narrative,
    RiskAssessment,
    RiskLevel,
    Severity,
)

__all__ = [
    "ANALYSIS_VERSION",
    "FRAMEWORK_KEYS",
    "FRAMEWORK_ORDER",
    "AnalysisRecord",
    "Classification",
    "FrameworkKind",
    "FrameworkResult",
    "FrameworkResultSet",
    "Indicator",
    "IndicatorType",
    "Narrative",
    "RiskAssessment",
    "RiskLevel",
    "Severity",
]
