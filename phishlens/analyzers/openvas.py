"""Exploit-structure analyzer (OpenVAS lens)."""

import re
from typing import Iterable

from phishlens.analyzers.base import BaseFrameworkAnalyzer, Finding, extract_urls
from phishlens.models.analysis import FrameworkKind
from phishlens.schemas.email import EmailInput

ZERO_DAY_TERMS = ("new", "update", "urgent")
EXTENSION_TOKEN = re.compile(r"\.[a-z]{2,4}\b")
EXECUTABLE_EXTENSIONS = frozenset({".exe", ".scr", ".bat", ".vbs"})
MAX_URL_LENGTH = 200
URL_EXPLOIT_MARKERS = ("%00", "../")


def is_exploit_url(url: str) -> bool:
    return len(url) > MAX_URL_LENGTH or any(marker in url for marker in URL_EXPLOIT_MARKERS)


class OpenVASAnalyzer(BaseFrameworkAnalyzer):
    kind = FrameworkKind.OPENVAS
    max_checks = 5

    def _inspect(self, email: EmailInput) -> Iterable[Finding]:
        text = email.combined_text.lower()

        if all(term in text for term in ZERO_DAY_TERMS):
            yield "Zero-day threat indicators", "Combination of urgency and update request detected"

        for extension in EXTENSION_TOKEN.findall(text):
            if extension in EXECUTABLE_EXTENSIONS:
                yield "Suspicious file type mentioned", f"Executable file type mentioned: {extension}"

        for url in extract_urls(email.body.text):
            if is_exploit_url(url):
                yield "Exploit attempt in URL", f"Suspicious URL structure: {url[:50]}..."
