"""
Lexical/behavioural analyzer ("ML Classifier").

Despite the name this is a keyword and URL heuristic, not a trained model.
"""

import re
from typing import Iterable

from phishlens.analyzers.base import BaseFrameworkAnalyzer, Finding, extract_urls
from phishlens.models.analysis import FrameworkKind
from phishlens.schemas.email import EmailInput

PHISHING_KEYWORDS = (
    "urgent", "verify", "suspended", "locked", "confirm", "click here",
    "account", "security", "update", "immediately", "expire", "limited time",
)

SUSPICIOUS_URL_PATTERNS = (
    re.compile(r"\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3}"),  # IP address host
    re.compile(r"[a-z0-9-]+\.(tk|ml|ga|cf|gq)"),  # disposable TLDs
    re.compile(r"-verify|-secure|-login|-account"),  # lure word in domain
    re.compile(r"@"),  # credentials-in-URL trick
)

CAPS_RUN = re.compile(r"[A-Z]{2,}")
PUNCTUATION_RUN = re.compile(r"[!?]{2,}")
MAX_CAPS_RUNS = 3
MAX_PUNCTUATION_RUNS = 2


def extract_context(text: str, keyword: str, context_length: int = 50) -> str:
    index = text.find(keyword)
    if index == -1:
        return ""
    start = max(0, index - context_length)
    end = min(len(text), index + len(keyword) + context_length)
    return text[start:end].strip()


def is_suspicious_url(url: str) -> bool:
    return any(pattern.search(url) for pattern in SUSPICIOUS_URL_PATTERNS)


def has_grammar_errors(text: str) -> bool:
    """Shouting and stacked punctuation as a cheap proxy for sloppy writing."""
    caps_runs = len(CAPS_RUN.findall(text))
    punctuation_runs = len(PUNCTUATION_RUN.findall(text))
    return caps_runs > MAX_CAPS_RUNS or punctuation_runs > MAX_PUNCTUATION_RUNS


class MLClassifierAnalyzer(BaseFrameworkAnalyzer):
    kind = FrameworkKind.ML_CLASSIFIER
    max_checks = 10

    def _inspect(self, email: EmailInput) -> Iterable[Finding]:
        raw_text = email.combined_text
        text = raw_text.lower()

        for keyword in PHISHING_KEYWORDS:
            if keyword in text:
                context = extract_context(text, keyword)
                yield f'Urgency keyword: "{keyword}"', f'Found "{keyword}" in context: "{context}"'

        for url in extract_urls(email.body.text):
            if is_suspicious_url(url):
                yield "Suspicious URL detected", f"Suspicious URL: {url}"

        # Case matters here, so the original text is scanned
        if has_grammar_errors(raw_text):
            yield "Grammar/spelling errors detected", "Multiple grammar or spelling errors found"
