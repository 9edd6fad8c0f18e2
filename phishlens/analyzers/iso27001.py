"""Data-handling analyzer (ISO/IEC 27001 lens)."""

from typing import Iterable

from phishlens.analyzers.base import BaseFrameworkAnalyzer, Finding, extract_urls
from phishlens.models.analysis import FrameworkKind
from phishlens.schemas.email import EmailInput

SENSITIVE_TERMS = ("password", "credit card", "ssn", "social security", "pin", "account number")
POLICY_BYPASS_TERMS = ("bypass", "skip verification")


class ISO27001Analyzer(BaseFrameworkAnalyzer):
    kind = FrameworkKind.ISO27001
    max_checks = 6

    def _inspect(self, email: EmailInput) -> Iterable[Finding]:
        text = email.combined_text.lower()

        for term in SENSITIVE_TERMS:
            if term in text:
                yield "Sensitive data request detected", f'Request for sensitive information: "{term}"'

        for url in extract_urls(email.body.text):
            if url.startswith("http://"):
                yield "Unencrypted link detected", f"Insecure HTTP link: {url}"

        if any(term in text for term in POLICY_BYPASS_TERMS):
            yield "Security policy violation", "Email suggests bypassing security procedures"
