"""
Tests for AnalysisOrchestrator - the full pipeline from email to record.
"""

import pytest

from phishlens.config.settings import Settings
from phishlens.integrations.ollama import OllamaClient
from phishlens.models.analysis import FRAMEWORK_KEYS, AnalysisRecord, Classification, IndicatorType, RiskLevel
from phishlens.orchestrator.analysis_orchestrator import AnalysisOrchestrator, create_orchestrator
from phishlens.services.interfaces import MalformedInputError
from phishlens.services.narrative import FALLBACK_SUMMARY, NarrativeExplainer
from phishlens.services.risk_assessment import RiskAggregator


class TestAnalysisOrchestrator:

    @pytest.fixture
    def orchestrator(self):
        return AnalysisOrchestrator()

    @pytest.mark.asyncio
    async def test_phishing_email_end_to_end(self, orchestrator, phishing_email):
        record = await orchestrator.analyze(phishing_email)

        assert isinstance(record, AnalysisRecord)
        assert record.frameworks.scores() == [100, 50, 71, 50, 40, 40]
        assert record.average_score == pytest.approx(58.5)
        assert record.risk.risk_level == RiskLevel.MEDIUM
        assert record.risk.classification == Classification.TP
        assert record.risk.is_phishing is True
        assert record.risk.confidence == pytest.approx(0.785)
        assert len(record.indicators) == sum(len(r.patterns) for r in record.frameworks.values())
        assert IndicatorType.AUTHORITY in {i.type for i in record.indicators}
        assert record.processing_time_ms >= 0

    @pytest.mark.asyncio
    async def test_benign_email(self, orchestrator, make_email):
        record = await orchestrator.analyze(make_email(subject="Lunch", text="See you at noon"))

        assert record.frameworks.scores() == [0] * 6
        assert record.risk.risk_level == RiskLevel.LOW
        assert record.risk.classification == Classification.TN
        assert record.risk.confidence == pytest.approx(0.90)
        assert record.indicators == []

    @pytest.mark.asyncio
    async def test_unreachable_generator_still_produces_record(self, make_email, failing_generator):
        explainer = NarrativeExplainer(client=failing_generator, enabled=True, timeout=5)
        orchestrator = AnalysisOrchestrator(explainer=explainer)

        record = await orchestrator.analyze(make_email(text="Click http://10.1.1.1/x"))

        assert record.narrative.is_fallback is True
        assert record.narrative.summary == FALLBACK_SUMMARY
        assert list(record.frameworks) == list(FRAMEWORK_KEYS)
        assert record.frameworks["mlClassifier"].score == 10
        assert len(failing_generator.prompts) == 1

    @pytest.mark.asyncio
    async def test_generated_narrative_attached(self, phishing_email, fake_generator):
        client = fake_generator()
        orchestrator = AnalysisOrchestrator(explainer=NarrativeExplainer(client=client, enabled=True, timeout=5))

        record = await orchestrator.analyze(phishing_email)

        assert record.narrative.is_fallback is False
        assert record.narrative.raw_response == client.reply
        assert "Average Detection Score: 58.5%" in client.prompts[0]
        assert "Preliminary Risk Level: MEDIUM" in client.prompts[0]

    @pytest.mark.asyncio
    async def test_repeatable(self, orchestrator, phishing_email):
        first = await orchestrator.analyze(phishing_email)
        second = await orchestrator.analyze(phishing_email)

        assert first.risk == second.risk
        assert first.frameworks.to_dict() == second.frameworks.to_dict()
        assert first.indicators == second.indicators

    @pytest.mark.asyncio
    async def test_injected_policy(self, make_email):
        orchestrator = AnalysisOrchestrator(aggregator=RiskAggregator(lambda average: True))

        # authentication failures alone stay LOW and outside the borderline band
        record = await orchestrator.analyze(make_email(dmarc="fail", spf="fail", dkim="fail"))

        assert record.risk.classification == Classification.TN

    @pytest.mark.asyncio
    @pytest.mark.parametrize("bad_input", [None, {"subject": "x"}])
    async def test_malformed_input(self, orchestrator, bad_input):
        with pytest.raises(MalformedInputError):
            await orchestrator.analyze(bad_input)


class TestAnalyzeMany:

    @pytest.mark.asyncio
    async def test_order_preserved(self, make_email, phishing_email):
        emails = [make_email(subject=f"message {i}") for i in range(5)] + [phishing_email]

        records = await AnalysisOrchestrator().analyze_many(emails)

        assert [r.email for r in records] == emails
        assert records[-1].risk.is_phishing is True

    @pytest.mark.asyncio
    async def test_concurrency_limit(self, make_email, fake_generator):
        client = fake_generator(delay=0.02)
        orchestrator = AnalysisOrchestrator(explainer=NarrativeExplainer(client=client, enabled=True, timeout=5))

        records = await orchestrator.analyze_many([make_email(subject=str(i)) for i in range(8)], max_concurrency=2)

        assert len(records) == 8
        assert client.peak <= 2
        assert all(not r.narrative.is_fallback for r in records)

    @pytest.mark.asyncio
    async def test_bad_entry_fails_before_work(self, make_email, fake_generator):
        client = fake_generator()
        orchestrator = AnalysisOrchestrator(explainer=NarrativeExplainer(client=client, enabled=True, timeout=5))

        with pytest.raises(MalformedInputError):
            await orchestrator.analyze_many([make_email(), None])

        assert client.prompts == []

    @pytest.mark.asyncio
    async def test_invalid_limit(self, make_email):
        with pytest.raises(ValueError):
            await AnalysisOrchestrator().analyze_many([make_email()], max_concurrency=-1)

    @pytest.mark.asyncio
    async def test_empty_batch(self):
        assert await AnalysisOrchestrator().analyze_many([]) == []


class TestCreateOrchestrator:

    def test_ai_disabled(self):
        orchestrator = create_orchestrator(Settings(ENABLE_AI_ANALYSIS=False, MAX_CONCURRENT_ANALYSES=3))

        assert orchestrator.explainer.client is None
        assert orchestrator.max_concurrency == 3

    @pytest.mark.asyncio
    async def test_ai_enabled(self):
        orchestrator = create_orchestrator(Settings(ENABLE_AI_ANALYSIS=True, OLLAMA_TIMEOUT=45))

        assert isinstance(orchestrator.explainer.client, OllamaClient)
        assert orchestrator.explainer.timeout == 45
        await orchestrator.aclose()
        assert orchestrator.explainer.client.client.is_closed

    @pytest.mark.asyncio
    async def test_context_manager_closes_owned_client(self):
        async with create_orchestrator(Settings(ENABLE_AI_ANALYSIS=True)) as orchestrator:
            client = orchestrator.explainer.client
            assert not client.client.is_closed

        assert client.client.is_closed

    @pytest.mark.asyncio
    async def test_context_manager_without_client(self, make_email):
        async with create_orchestrator(Settings(ENABLE_AI_ANALYSIS=False)) as orchestrator:
            record = await orchestrator.analyze(make_email(subject="hi"))

        assert record.narrative.is_fallback is True

    def test_override_disables(self):
        orchestrator = create_orchestrator(Settings(ENABLE_AI_ANALYSIS=True), enable_ai=False)
        assert orchestrator.explainer.client is None
