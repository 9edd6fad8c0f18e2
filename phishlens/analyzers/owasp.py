"""Injection and redirect analyzer (OWASP lens)."""

import re
from typing import Iterable

from phishlens.analyzers.base import BaseFrameworkAnalyzer, Finding, extract_urls
from phishlens.models.analysis import FrameworkKind
from phishlens.schemas.email import EmailInput

SCRIPT_INJECTION = re.compile(r"<script|javascript:|onerror=", re.IGNORECASE)
SQL_METACHARACTERS = re.compile(r"'|--|;|union|select|drop", re.IGNORECASE)
HTML_FORM = re.compile(r"<form|<input", re.IGNORECASE)
REDIRECT_MARKERS = ("redirect", "%2F")


class OWASPAnalyzer(BaseFrameworkAnalyzer):
    kind = FrameworkKind.OWASP
    max_checks = 8

    def _inspect(self, email: EmailInput) -> Iterable[Finding]:
        text = email.body.text

        if SCRIPT_INJECTION.search(text):
            yield "XSS attempt detected", "Script tags or JavaScript protocol found in email"

        if SQL_METACHARACTERS.search(text):
            yield "SQL injection patterns detected", "SQL keywords found in email content"

        for url in extract_urls(text):
            if any(marker in url for marker in REDIRECT_MARKERS):
                yield "Malicious redirect detected", f"Suspicious redirect URL: {url}"

        if HTML_FORM.search(text):
            yield "HTML form detected", "Email contains HTML form elements"
