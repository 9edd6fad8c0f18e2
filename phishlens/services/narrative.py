"""
Narrative explanations for framework results.

Builds a prompt from the email and its framework results, asks an external
text-generation model for commentary and parses the reply into
summary/reasoning/recommendations. Any failure along the way yields a fixed
fallback narrative so the surrounding analysis always completes.
"""

import asyncio
import re
import time
from dataclasses import dataclass
from typing import List, Optional, Protocol

from phishlens.config.logging import get_logger
from phishlens.config.settings import Settings, get_settings
from phishlens.models.analysis import FRAMEWORK_ORDER, FrameworkResultSet, Narrative
from phishlens.schemas.email import EmailInput
from phishlens.services.interfaces import NarrativeParseError, NarrativeUnavailableError
from phishlens.services.risk_assessment import risk_level_for

logger = get_logger(__name__)

FALLBACK_SUMMARY = "Narrative analysis unavailable, framework-only assessment used."
FALLBACK_REASONING = (
    "The text-generation service did not return a usable reply. "
    "The verdict is based on the detection frameworks only."
)
FALLBACK_RECOMMENDATIONS = (
    "Verify the text-generation service is running",
    "Review the email manually",
)


class TextGenerator(Protocol):
    async def generate(self, prompt: str) -> str:
        ...


def fallback_narrative(processing_time_ms: int = 0) -> Narrative:
    return Narrative(
        summary=FALLBACK_SUMMARY,
        reasoning=FALLBACK_REASONING,
        recommendations=list(FALLBACK_RECOMMENDATIONS),
        raw_response=None,
        processing_time_ms=processing_time_ms,
        is_fallback=True,
    )


def build_prompt(email: EmailInput, frameworks: FrameworkResultSet, body_chars: int = 1000) -> str:
    """Build the analysis prompt. Deterministic for identical input."""
    average = frameworks.average_score()
    preliminary = risk_level_for(average)
    auth = email.authentication

    framework_lines = "\n".join(
        f"- {kind.display_name}: {frameworks[kind].score}% "
        f"(Patterns: {', '.join(frameworks[kind].patterns)})"
        for kind in FRAMEWORK_ORDER
    )

    return f"""You are a cybersecurity expert analyzing an email for phishing threats.

EMAIL DETAILS:
Subject: {email.subject}
From: {email.sender.address}
Body: {email.body.text[:body_chars]}

DETECTION FRAMEWORK RESULTS:
{framework_lines}

Average Detection Score: {average:.1f}%
Preliminary Risk Level: {preliminary.value}

AUTHENTICATION:
- DMARC: {auth.dmarc.value}
- SPF: {auth.spf.value}
- DKIM: {auth.dkim.value}

TASK:
Analyze this email and provide:
1. SUMMARY: A 2-3 sentence assessment of whether this is phishing
2. REASONING: Explain why based on the framework results and email content
3. RECOMMENDATIONS: List 3-5 specific actions (e.g., "Delete immediately", "Report to IT", "Verify sender")

Format your response as:
SUMMARY: [your summary]
REASONING: [your reasoning]
RECOMMENDATIONS: [numbered list]"""


@dataclass(frozen=True)
class ParsedReply:
    summary: str
    reasoning: str
    recommendations: List[str]


class NarrativeParser:
    """Parse a reply made of three labelled sections, in this order::

        SUMMARY: <text>
        REASONING: <text>
        RECOMMENDATIONS: <one item per line, optionally numbered>

    Labels must start a line, are case-insensitive and may be wrapped in
    markdown emphasis.
    A missing, out-of-order or empty section is a parse failure.
    """

    REPLY_GRAMMAR = re.compile(
        r"^[*#\s]*SUMMARY[*\s]*:[*\s]*(?P<summary>.*?)"
        r"^[*#\s]*REASONING[*\s]*:[*\s]*(?P<reasoning>.*?)"
        r"^[*#\s]*RECOMMENDATIONS[*\s]*:[*\s]*(?P<recommendations>.*)\Z",
        re.IGNORECASE | re.DOTALL | re.MULTILINE,
    )
    ITEM_PREFIX = re.compile(r"^\s*(?:\d+[.)]|[-*•])\s*")

    def parse(self, reply: str) -> ParsedReply:
        if not reply or not reply.strip():
            raise NarrativeParseError("Empty reply")

        match = self.REPLY_GRAMMAR.search(reply)
        if not match:
            raise NarrativeParseError("Reply does not contain SUMMARY/REASONING/RECOMMENDATIONS sections")

        summary = match.group("summary").strip()
        reasoning = match.group("reasoning").strip()
        recommendations = self._split_items(match.group("recommendations"))

        if not summary:
            raise NarrativeParseError("SUMMARY section is empty")
        if not reasoning:
            raise NarrativeParseError("REASONING section is empty")
        if not recommendations:
            raise NarrativeParseError("RECOMMENDATIONS section is empty")

        return ParsedReply(summary=summary, reasoning=reasoning, recommendations=recommendations)

    def _split_items(self, section: str) -> List[str]:
        items = []
        for line in section.splitlines():
            item = self.ITEM_PREFIX.sub("", line).strip()
            if item:
                items.append(item)
        return items


class NarrativeExplainer:
    """Produce a Narrative for an analysed email, never raising on service failure."""

    def __init__(
        self,
        client: Optional[TextGenerator] = None,
        parser: Optional[NarrativeParser] = None,
        timeout: Optional[float] = None,
        body_chars: Optional[int] = None,
        enabled: Optional[bool] = None,
        settings: Optional[Settings] = None,
    ):
        settings = settings or get_settings()
        self.client = client
        self.parser = parser or NarrativeParser()
        self.timeout = timeout if timeout is not None else settings.OLLAMA_TIMEOUT
        self.body_chars = body_chars if body_chars is not None else settings.NARRATIVE_BODY_CHARS
        self.enabled = settings.ENABLE_AI_ANALYSIS if enabled is None else enabled

    async def explain(self, email: EmailInput, frameworks: FrameworkResultSet) -> Narrative:
        start_time = time.monotonic()

        if self.client is None or not self.enabled:
            return fallback_narrative()

        prompt = build_prompt(email, frameworks, self.body_chars)
        try:
            reply = await asyncio.wait_for(self.client.generate(prompt), timeout=self.timeout)
            parsed = self.parser.parse(reply)
        except asyncio.TimeoutError:
            logger.warning("narrative_fallback", reason=f"timed out after {self.timeout}s")
            return fallback_narrative(self._elapsed_ms(start_time))
        except NarrativeUnavailableError as e:
            logger.warning("narrative_fallback", reason=str(e))
            return fallback_narrative(self._elapsed_ms(start_time))
        except Exception:
            logger.exception("narrative_fallback", reason="unexpected text-generation error")
            return fallback_narrative(self._elapsed_ms(start_time))

        return Narrative(
            summary=parsed.summary,
            reasoning=parsed.reasoning,
            recommendations=parsed.recommendations,
            raw_response=reply,
            processing_time_ms=self._elapsed_ms(start_time),
        )

    @staticmethod
    def _elapsed_ms(start_time: float) -> int:
        return int((time.monotonic() - start_time) * 1000)
