"""Pipeline orchestration."""

from phishlens.orchestrator.analysis_orchestrator import AnalysisOrchestrator, create_orchestrator

__all__ = ["AnalysisOrchestrator", "create_orchestrator"]
