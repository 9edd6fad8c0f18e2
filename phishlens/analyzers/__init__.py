"""Framework analyzers: six independent rule-based lenses over one email."""

from phishlens.analyzers.base import BaseFrameworkAnalyzer, calculate_score, extract_urls
from phishlens.analyzers.iso27001 import ISO27001Analyzer
from phishlens.analyzers.ml_classifier import MLClassifierAnalyzer
from phishlens.analyzers.nessus import NessusAnalyzer
from phishlens.analyzers.nist import NISTAnalyzer
from phishlens.analyzers.openvas import OpenVASAnalyzer
from phishlens.analyzers.owasp import OWASPAnalyzer

__all__ = [
    "BaseFrameworkAnalyzer",
    "calculate_score",
    "extract_urls",
    "MLClassifierAnalyzer",
    "OWASPAnalyzer",
    "NISTAnalyzer",
    "ISO27001Analyzer",
    "NessusAnalyzer",
    "OpenVASAnalyzer",
]
