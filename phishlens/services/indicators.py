"""Map matched framework patterns onto the coarse indicator taxonomy."""

from typing import List, Tuple

from phishlens.models.analysis import FrameworkResultSet, Indicator, IndicatorType, Severity

# Checked in order, first match wins.
CATEGORY_RULES: Tuple[Tuple[Tuple[str, ...], IndicatorType], ...] = (
    (("urgent", "immediate"), IndicatorType.URGENCY),
    (("url", "link"), IndicatorType.SUSPICIOUS_LINK),
    (("spoof", "domain"), IndicatorType.SPOOFING),
    (("password", "credential"), IndicatorType.CREDENTIAL_REQUEST),
    (("grammar", "spelling"), IndicatorType.GRAMMAR_ERROR),
    (("dmarc", "spf", "dkim"), IndicatorType.AUTHORITY),
)


def categorize_pattern(pattern: str) -> IndicatorType:
    pattern = pattern.lower()
    for needles, indicator_type in CATEGORY_RULES:
        if any(needle in pattern for needle in needles):
            return indicator_type
    return IndicatorType.OTHER


def severity_for(score: int) -> Severity:
    if score >= 70:
        return Severity.HIGH
    if score >= 40:
        return Severity.MEDIUM
    return Severity.LOW


class IndicatorExtractor:
    """Derive indicators from every pattern of every framework, in order."""

    def extract(self, frameworks: FrameworkResultSet) -> List[Indicator]:
        indicators = []
        for result in frameworks.values():
            severity = severity_for(result.score)
            for pattern in result.patterns:
                indicators.append(Indicator(
                    type=categorize_pattern(pattern),
                    description=pattern,
                    severity=severity,
                ))
        return indicators
