"""
Analysis orchestrator: runs the full pipeline for one email or a batch.

frameworks -> risk assessment -> indicators -> narrative -> AnalysisRecord.
Only the narrative step does I/O; it is time-bounded and degrades to a
fallback, so a record is always produced for valid input.
"""

import asyncio
import time
from typing import List, Optional, Sequence

from phishlens.analyzers.base import ensure_email_input
from phishlens.config.logging import get_logger
from phishlens.config.settings import Settings, get_settings
from phishlens.integrations.ollama import create_ollama_client
from phishlens.models.analysis import AnalysisRecord
from phishlens.schemas.email import EmailInput
from phishlens.services.analyzer_factory import AnalyzerFactory
from phishlens.services.indicators import IndicatorExtractor
from phishlens.services.narrative import NarrativeExplainer
from phishlens.services.risk_assessment import RiskAggregator

logger = get_logger(__name__)


class AnalysisOrchestrator:
    """Wire the engine's stages together. All collaborators are injected."""

    def __init__(
        self,
        factory: Optional[AnalyzerFactory] = None,
        aggregator: Optional[RiskAggregator] = None,
        extractor: Optional[IndicatorExtractor] = None,
        explainer: Optional[NarrativeExplainer] = None,
        max_concurrency: int = 5,
    ):
        self.factory = factory or AnalyzerFactory()
        self.aggregator = aggregator or RiskAggregator()
        self.extractor = extractor or IndicatorExtractor()
        # Without a text-generation client every narrative is the fallback
        self.explainer = explainer or NarrativeExplainer(client=None)
        self.max_concurrency = max_concurrency

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.aclose()

    async def aclose(self):
        """Release the text-generation client, if it has anything to release."""
        close = getattr(self.explainer.client, "close", None)
        if close is not None:
            await close()

    async def analyze(self, email: EmailInput) -> AnalysisRecord:
        """Run every stage for one email and assemble the record."""
        email = ensure_email_input(email)
        start = time.monotonic()

        frameworks = self.factory.run_all(email)
        risk = self.aggregator.assess(frameworks)
        indicators = self.extractor.extract(frameworks)
        narrative = await self.explainer.explain(email, frameworks)

        processing_time_ms = int((time.monotonic() - start) * 1000)
        logger.info(
            "analysis_complete",
            risk_level=risk.risk_level.value,
            average_score=round(risk.average_score, 1),
            classification=risk.classification.value,
            narrative_fallback=narrative.is_fallback,
            processing_time_ms=processing_time_ms,
        )

        return AnalysisRecord(
            email=email,
            risk=risk,
            frameworks=frameworks,
            indicators=indicators,
            narrative=narrative,
            processing_time_ms=processing_time_ms,
        )

    async def analyze_many(self, emails: Sequence[EmailInput],
                           max_concurrency: Optional[int] = None) -> List[AnalysisRecord]:
        """Re-analyse a batch. Pipelines run concurrently; results keep input order."""
        limit = max_concurrency or self.max_concurrency
        if limit < 1:
            raise ValueError("max_concurrency must be at least 1")

        # Validate everything up front so a bad entry fails before any work starts
        emails = [ensure_email_input(email) for email in emails]
        semaphore = asyncio.Semaphore(limit)

        async def _bounded(email: EmailInput) -> AnalysisRecord:
            async with semaphore:
                return await self.analyze(email)

        records = await asyncio.gather(*(_bounded(email) for email in emails))
        logger.info("batch_analysis_complete", count=len(records), max_concurrency=limit)
        return list(records)


def create_orchestrator(settings: Optional[Settings] = None, enable_ai: Optional[bool] = None) -> AnalysisOrchestrator:
    """Build an orchestrator with defaults taken from configuration."""
    settings = settings or get_settings()
    enabled = settings.ENABLE_AI_ANALYSIS if enable_ai is None else enable_ai
    client = create_ollama_client(settings) if enabled else None
    explainer = NarrativeExplainer(client=client, enabled=enabled, settings=settings)
    return AnalysisOrchestrator(
        explainer=explainer,
        max_concurrency=settings.MAX_CONCURRENT_ANALYSES,
    )
