"""Attachment and malware vocabulary analyzer (Nessus lens)."""

import re
from typing import Iterable

from phishlens.analyzers.base import BaseFrameworkAnalyzer, Finding
from phishlens.models.analysis import FrameworkKind
from phishlens.schemas.email import EmailInput

DANGEROUS_ATTACHMENT_EXTENSIONS = (".exe", ".scr", ".bat", ".cmd", ".vbs", ".js", ".jar", ".zip")
EXPLOIT_VOCABULARY = re.compile(r"exploit|payload|shellcode|metasploit", re.IGNORECASE)
MALWARE_KEYWORDS = ("ransomware", "trojan", "virus", "malware", "backdoor")


def is_suspicious_attachment(filename: str) -> bool:
    return filename.lower().endswith(DANGEROUS_ATTACHMENT_EXTENSIONS)


def has_malware_signature(text: str) -> bool:
    text = text.lower()
    return any(keyword in text for keyword in MALWARE_KEYWORDS)


class NessusAnalyzer(BaseFrameworkAnalyzer):
    kind = FrameworkKind.NESSUS
    max_checks = 5

    def _inspect(self, email: EmailInput) -> Iterable[Finding]:
        for attachment in email.attachments:
            if is_suspicious_attachment(attachment.filename):
                yield "Suspicious attachment detected", f"Suspicious file: {attachment.filename}"

        text = email.body.text
        if EXPLOIT_VOCABULARY.search(text):
            yield "Exploit kit indicators", "Exploit-related keywords found"

        if has_malware_signature(text):
            yield "Malware signature detected", "Known malware patterns found in email"
