"""Sender authentication and domain analyzer (NIST CSF lens)."""

from typing import Iterable, Optional

from phishlens.analyzers.base import DISPOSABLE_TLDS, BaseFrameworkAnalyzer, Finding
from phishlens.models.analysis import FrameworkKind
from phishlens.schemas.email import AuthStatus, EmailInput

KNOWN_BRANDS = ("paypal", "amazon", "microsoft", "apple", "google", "bank")


def is_suspicious_domain(domain: str) -> bool:
    return bool(domain) and domain.lower().endswith(DISPOSABLE_TLDS)


def impersonated_brand(domain: str, subject: str) -> Optional[str]:
    """Brand named in the subject but absent from the sender domain, if any."""
    domain = domain.lower()
    subject = subject.lower()
    for brand in KNOWN_BRANDS:
        if brand in subject and brand not in domain:
            return brand
    return None


class NISTAnalyzer(BaseFrameworkAnalyzer):
    kind = FrameworkKind.NIST
    max_checks = 7

    def _inspect(self, email: EmailInput) -> Iterable[Finding]:
        auth = email.authentication

        # unknown never counts as a failure
        if auth.dmarc == AuthStatus.FAIL:
            yield "DMARC authentication failed", "DMARC: Sender domain authentication failed"
        if auth.spf == AuthStatus.FAIL:
            yield "SPF authentication failed", "SPF: Sender IP not authorized"
        if auth.dkim == AuthStatus.FAIL:
            yield "DKIM authentication failed", "DKIM: Email signature verification failed"

        domain = email.sender.domain
        if is_suspicious_domain(domain):
            yield "Suspicious sender domain", f'Domain "{domain}" appears suspicious'

        brand = impersonated_brand(domain, email.subject)
        if brand:
            yield (
                "Possible domain spoofing",
                f'Sender domain "{domain}" does not match claimed organization "{brand}"',
            )
