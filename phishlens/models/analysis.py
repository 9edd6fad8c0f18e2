"""Result types produced by the scoring engine.

Everything here is derived data: framework results, the aggregated risk
assessment, indicators, the narrative and the assembled analysis record.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple

from phishlens.schemas.email import EmailInput
from phishlens.services.interfaces import MalformedInputError

ANALYSIS_VERSION = "1.0.0"


class FrameworkKind(Enum):
    """The six framework analyzers. Values are the result-set keys."""
    ML_CLASSIFIER = "mlClassifier"
    OWASP = "owasp"
    NIST = "nist"
    ISO27001 = "iso27001"
    NESSUS = "nessus"
    OPENVAS = "openvas"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES = {
    FrameworkKind.ML_CLASSIFIER: "ML Classifier",
    FrameworkKind.OWASP: "OWASP",
    FrameworkKind.NIST: "NIST CSF",
    FrameworkKind.ISO27001: "ISO/IEC 27001",
    FrameworkKind.NESSUS: "Nessus",
    FrameworkKind.OPENVAS: "OpenVAS",
}

# Fixed iteration order for result sets, prompts and indicator extraction.
FRAMEWORK_ORDER: Tuple[FrameworkKind, ...] = tuple(FrameworkKind)
FRAMEWORK_KEYS: Tuple[str, ...] = tuple(kind.value for kind in FRAMEWORK_ORDER)


class RiskLevel(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class Classification(str, Enum):
    """Ground-truth bookkeeping label (true/false positive/negative)."""
    TP = "TP"
    TN = "TN"
    FP = "FP"
    FN = "FN"


class IndicatorType(str, Enum):
    URGENCY = "urgency"
    AUTHORITY = "authority"
    SUSPICIOUS_LINK = "suspicious_link"
    GRAMMAR_ERROR = "grammar_error"
    SPOOFING = "spoofing"
    CREDENTIAL_REQUEST = "credential_request"
    OTHER = "other"


class Severity(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class FrameworkResult:
    """Outcome of one analyzer on one email."""
    score: int  # 0 - 100
    patterns: List[str] = field(default_factory=list)
    evidence: List[str] = field(default_factory=list)

    def __post_init__(self):
        if isinstance(self.score, bool) or not isinstance(self.score, int):
            raise MalformedInputError(f"Framework score must be an integer, got {self.score!r}")
        if not 0 <= self.score <= 100:
            raise MalformedInputError(f"Framework score out of range: {self.score}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "patterns": list(self.patterns),
            "evidence": list(self.evidence),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FrameworkResult":
        return cls(
            score=data["score"],
            patterns=list(data.get("patterns") or []),
            evidence=list(data.get("evidence") or []),
        )


class FrameworkResultSet(Mapping):
    """Read-only mapping of all six framework keys to their results.

    Iteration order is fixed (``FRAMEWORK_KEYS``). Construction fails if any
    framework is missing or an unknown key is present, so partial result
    sets never reach the aggregator.
    """

    def __init__(self, results: Mapping):
        normalized: Dict[str, FrameworkResult] = {}
        for key, result in results.items():
            if isinstance(key, FrameworkKind):
                key = key.value
            if key not in FRAMEWORK_KEYS:
                raise MalformedInputError(f"Unexpected framework key: {key}")
            if not isinstance(result, FrameworkResult):
                raise MalformedInputError(f"Result for {key} is not a FrameworkResult")
            normalized[key] = result

        missing = [key for key in FRAMEWORK_KEYS if key not in normalized]
        if missing:
            raise MalformedInputError(f"Incomplete framework results, missing: {', '.join(missing)}")

        self._results = {key: normalized[key] for key in FRAMEWORK_KEYS}

    def __getitem__(self, key) -> FrameworkResult:
        if isinstance(key, FrameworkKind):
            key = key.value
        return self._results[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._results)

    def __len__(self) -> int:
        return len(self._results)

    def __repr__(self) -> str:
        scores = ", ".join(f"{k}={r.score}" for k, r in self._results.items())
        return f"FrameworkResultSet({scores})"

    def scores(self) -> List[int]:
        return [result.score for result in self._results.values()]

    def average_score(self) -> float:
        scores = self.scores()
        return sum(scores) / len(scores)

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return {key: result.to_dict() for key, result in self._results.items()}

    @classmethod
    def from_dict(cls, data: Dict[str, Dict[str, Any]]) -> "FrameworkResultSet":
        if data is None:
            raise MalformedInputError("Framework results are missing")
        try:
            return cls({key: FrameworkResult.from_dict(value) for key, value in data.items()})
        except (KeyError, TypeError) as e:
            raise MalformedInputError(f"Invalid framework results: {e}") from e


@dataclass(frozen=True)
class RiskAssessment:
    risk_level: RiskLevel
    confidence: float  # 0.0 - 0.99
    is_phishing: bool
    classification: Classification
    average_score: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "riskLevel": self.risk_level.value,
            "confidence": self.confidence,
            "isPhishing": self.is_phishing,
            "classification": self.classification.value,
        }


@dataclass(frozen=True)
class Indicator:
    type: IndicatorType
    description: str
    severity: Severity

    def to_dict(self) -> Dict[str, str]:
        return {
            "type": self.type.value,
            "description": self.description,
            "severity": self.severity.value,
        }


@dataclass(frozen=True)
class Narrative:
    """Human-readable commentary on an analysis."""
    summary: str
    reasoning: str
    recommendations: List[str]
    raw_response: Optional[str] = None
    processing_time_ms: int = 0
    is_fallback: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": self.summary,
            "reasoning": self.reasoning,
            "recommendations": list(self.recommendations),
            "processingTime": self.processing_time_ms,
        }


@dataclass(frozen=True)
class AnalysisRecord:
    """Assembled output of one pipeline run. Storage is the caller's concern."""
    email: EmailInput
    risk: RiskAssessment
    frameworks: FrameworkResultSet
    indicators: List[Indicator]
    narrative: Narrative
    processing_time_ms: int
    version: str = ANALYSIS_VERSION

    @property
    def average_score(self) -> float:
        return self.frameworks.average_score()

    def high_risk_indicators(self) -> List[Indicator]:
        return [ind for ind in self.indicators if ind.severity == Severity.HIGH]

    def to_dict(self) -> Dict[str, Any]:
        data = self.risk.to_dict()
        data.update({
            "frameworks": self.frameworks.to_dict(),
            "ollamaAnalysis": self.narrative.to_dict(),
            "indicators": [ind.to_dict() for ind in self.indicators],
            "processingTime": self.processing_time_ms,
            "version": self.version,
        })
        return data


__all__ = [
    "ANALYSIS_VERSION",
    "FRAMEWORK_KEYS",
    "FRAMEWORK_ORDER",
    "FrameworkKind",
    "FrameworkResult",
    "FrameworkResultSet",
    "RiskLevel",
    "Classification",
    "RiskAssessment",
    "IndicatorType",
    "Severity",
    "Indicator",
    "Narrative",
    "AnalysisRecord",
]
