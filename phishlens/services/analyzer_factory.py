"""
Analyzer factory for creating framework analyzers and running all of them.

Framework names are resolved through a single closed mapping onto
``FrameworkKind``; every kind has exactly one analyzer class.
"""

from typing import Dict, Optional, Type, Union

from phishlens.analyzers import (
    BaseFrameworkAnalyzer,
    ISO27001Analyzer,
    MLClassifierAnalyzer,
    NessusAnalyzer,
    NISTAnalyzer,
    OpenVASAnalyzer,
    OWASPAnalyzer,
)
from phishlens.analyzers.base import ensure_email_input
from phishlens.config.logging import get_logger
from phishlens.models.analysis import FRAMEWORK_ORDER, FrameworkKind, FrameworkResultSet
from phishlens.schemas.email import EmailInput
from phishlens.services.interfaces import UnknownFrameworkError

logger = get_logger(__name__)

ANALYZER_CLASSES: Dict[FrameworkKind, Type[BaseFrameworkAnalyzer]] = {
    FrameworkKind.ML_CLASSIFIER: MLClassifierAnalyzer,
    FrameworkKind.OWASP: OWASPAnalyzer,
    FrameworkKind.NIST: NISTAnalyzer,
    FrameworkKind.ISO27001: ISO27001Analyzer,
    FrameworkKind.NESSUS: NessusAnalyzer,
    FrameworkKind.OPENVAS: OpenVASAnalyzer,
}

# Lower-case tokens accepted from configuration and callers
FRAMEWORK_TOKENS: Dict[str, FrameworkKind] = {
    "ml": FrameworkKind.ML_CLASSIFIER,
    "mlclassifier": FrameworkKind.ML_CLASSIFIER,
    "owasp": FrameworkKind.OWASP,
    "nist": FrameworkKind.NIST,
    "iso27001": FrameworkKind.ISO27001,
    "nessus": FrameworkKind.NESSUS,
    "openvas": FrameworkKind.OPENVAS,
}


def resolve_framework(name: Union[str, FrameworkKind]) -> FrameworkKind:
    """Map a case-insensitive framework token onto its kind."""
    if isinstance(name, FrameworkKind):
        return name
    if not isinstance(name, str):
        raise UnknownFrameworkError(name)
    try:
        return FRAMEWORK_TOKENS[name.strip().lower()]
    except KeyError:
        raise UnknownFrameworkError(name) from None


class AnalyzerFactory:
    """
    Factory for framework analyzers.

    Analyzers hold only immutable rule tables, so one instance per kind is
    shared across calls and threads.
    """

    def __init__(self, analyzer_classes: Optional[Dict[FrameworkKind, Type[BaseFrameworkAnalyzer]]] = None):
        classes = analyzer_classes or ANALYZER_CLASSES
        missing = [kind.value for kind in FRAMEWORK_ORDER if kind not in classes]
        if missing:
            raise ValueError(f"No analyzer registered for: {', '.join(missing)}")
        self._analyzers = {kind: classes[kind]() for kind in FRAMEWORK_ORDER}

    def create(self, name: Union[str, FrameworkKind]) -> BaseFrameworkAnalyzer:
        """Return the analyzer for a framework token such as ``"ml"`` or ``"OWASP"``."""
        return self._analyzers[resolve_framework(name)]

    def run_all(self, email: EmailInput) -> FrameworkResultSet:
        """Run all six analyzers against the same email."""
        email = ensure_email_input(email)
        results = {kind.value: self._analyzers[kind].analyze(email) for kind in FRAMEWORK_ORDER}
        result_set = FrameworkResultSet(results)
        logger.debug("frameworks_completed", scores=dict(zip(result_set.keys(), result_set.scores())))
        return result_set

    @staticmethod
    def supported_frameworks() -> Dict[str, str]:
        """Accepted tokens mapped to the result key they produce."""
        return {token: kind.value for token, kind in FRAMEWORK_TOKENS.items()}


def create_analyzer(name: Union[str, FrameworkKind]) -> BaseFrameworkAnalyzer:
    """Create a fresh analyzer instance for a framework token."""
    return ANALYZER_CLASSES[resolve_framework(name)]()
