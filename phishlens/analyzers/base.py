"""
Base class and shared helpers for the framework analyzers.

Every analyzer is a pure function of the email: it yields
``(pattern, evidence)`` pairs from ``_inspect`` and the base class turns
them into a bounded ``FrameworkResult``.
"""

import math
import re
from typing import Iterable, List, Tuple

from phishlens.config.logging import get_logger
from phishlens.models.analysis import FrameworkKind, FrameworkResult
from phishlens.schemas.email import EmailInput
from phishlens.services.interfaces import MalformedInputError

logger = get_logger(__name__)

URL_PATTERN = re.compile(r"https?://[^\s]+")

# Disposable / free TLDs frequently used for throwaway phishing domains
DISPOSABLE_TLDS = (".tk", ".ml", ".ga", ".cf", ".gq")

Finding = Tuple[str, str]


def extract_urls(text: str) -> List[str]:
    """Extract http(s) URLs, each running up to the next whitespace."""
    return URL_PATTERN.findall(text or "")


def ensure_email_input(email: object) -> EmailInput:
    """Fail fast on input that cannot be evaluated."""
    if email is None:
        raise MalformedInputError("Email input is missing")
    if not isinstance(email, EmailInput):
        raise MalformedInputError(f"Expected EmailInput, got {type(email).__name__}")
    return email


def calculate_score(patterns: List[str], max_checks: int) -> int:
    """Fraction of the rule set that fired, as an integer percentage.

    Repeated identical patterns (one per URL, attachment, ...) count once;
    the denominator is the analyzer's fixed rule count. Halves round up.
    """
    if max_checks <= 0:
        return 0
    matched = len(set(patterns))
    return min(100, int(math.floor(matched * 100 / max_checks + 0.5)))


class BaseFrameworkAnalyzer:
    """Base class for all framework analyzers."""

    kind: FrameworkKind
    max_checks: int

    @property
    def name(self) -> str:
        return self.kind.display_name

    def analyze(self, email: EmailInput) -> FrameworkResult:
        """Analyze an email and return its score, patterns and evidence."""
        email = ensure_email_input(email)

        patterns: List[str] = []
        evidence: List[str] = []
        for pattern, detail in self._inspect(email):
            patterns.append(pattern)
            evidence.append(detail)

        score = calculate_score(patterns, self.max_checks)
        logger.debug("framework_analyzed", framework=self.kind.value, score=score, matches=len(patterns))
        return FrameworkResult(score=score, patterns=patterns, evidence=evidence)

    def _inspect(self, email: EmailInput) -> Iterable[Finding]:
        raise NotImplementedError("_inspect() must be implemented by subclass")

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
