"""Shared fixtures for the PhishLens test suite."""

import asyncio
import os

# Settings are read at import time; keep test runs quiet and offline.
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("OLLAMA_API_URL", "http://ollama.test:11434")

import pytest  # noqa: E402

from phishlens.models.analysis import FRAMEWORK_KEYS, FrameworkResult, FrameworkResultSet  # noqa: E402
from phishlens.schemas.email import Attachment, Authentication, EmailBody, EmailInput, Sender  # noqa: E402
from phishlens.services.interfaces import NarrativeUnavailableError  # noqa: E402

WELL_FORMED_REPLY = """SUMMARY: This email is a credential phishing attempt impersonating PayPal.
REASONING: Authentication failed on all three checks and the link points to a raw IP address.
RECOMMENDATIONS:
1. Delete immediately
2. Report to IT
3. Verify sender through an official channel"""


class FakeGenerator:
    """Stand-in for the text-generation client."""

    def __init__(self, reply=WELL_FORMED_REPLY, error=None, delay=0.0):
        self.reply = reply
        self.error = error
        self.delay = delay
        self.prompts = []
        self.active = 0
        self.peak = 0

    async def generate(self, prompt):
        self.prompts.append(prompt)
        self.active += 1
        self.peak = max(self.peak, self.active)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.error is not None:
                raise self.error
            return self.reply
        finally:
            self.active -= 1


@pytest.fixture
def make_email():
    """Factory for EmailInput with benign defaults."""
    def _make(subject="", text="", sender="alice@example.com", html=None, attachments=(),
              dmarc="unknown", spf="unknown", dkim="unknown"):
        return EmailInput(
            subject=subject,
            sender=Sender(address=sender),
            body=EmailBody(text=text, html=html),
            attachments=[Attachment(filename=name) for name in attachments],
            authentication=Authentication(dmarc=dmarc, spf=spf, dkim=dkim),
        )
    return _make


@pytest.fixture
def make_results():
    """Factory for a complete FrameworkResultSet; unspecified frameworks score 0."""
    def _make(scores=None, patterns=None):
        scores = scores or {}
        patterns = patterns or {}
        return FrameworkResultSet({
            key: FrameworkResult(score=scores.get(key, 0), patterns=list(patterns.get(key, [])))
            for key in FRAMEWORK_KEYS
        })
    return _make


@pytest.fixture
def uniform_results(make_results):
    """Result set where every framework has the same score."""
    def _make(score):
        return make_results({key: score for key in FRAMEWORK_KEYS})
    return _make


@pytest.fixture
def phishing_email(make_email):
    """A message that trips most of the framework rules."""
    return make_email(
        subject="URGENT: PayPal account suspended - verify immediately",
        sender="security@paypa1-secure.tk",
        text=(
            "Click here to confirm your password and credit card: "
            "http://192.168.10.5/paypal-login/redirect?next=%2Fhome . "
            "Your account will expire in limited time. Download the new security update.exe attached. "
            "Do not bypass this; skip verification and you get ransomware. "
            "<script>steal()</script> <form><input name='pin'></form>"
        ),
        attachments=("update.exe",),
        dmarc="fail",
        spf="fail",
        dkim="fail",
    )


@pytest.fixture
def fake_generator():
    return FakeGenerator


@pytest.fixture
def failing_generator():
    return FakeGenerator(error=NarrativeUnavailableError("connection refused"))
