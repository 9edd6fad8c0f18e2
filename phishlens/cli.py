#!/usr/bin/env python3
"""
PhishLens CLI - Command Line Interface

Analyze a single email from a file, list the recognised frameworks, or
check that the text-generation service answers.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Optional, Sequence

from phishlens.config.logging import configure_logging
from phishlens.config.settings import get_settings
from phishlens.integrations.mail_parser import parse_eml
from phishlens.integrations.ollama import create_ollama_client
from phishlens.models.analysis import AnalysisRecord
from phishlens.orchestrator.analysis_orchestrator import create_orchestrator
from phishlens.schemas.email import EmailInput
from phishlens.services.analyzer_factory import AnalyzerFactory
from phishlens.services.interfaces import MalformedInputError, UnknownFrameworkError

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


def load_email(path: Path) -> EmailInput:
    """Load an EmailInput from a ``.json`` document or a raw ``.eml`` message."""
    if path.suffix.lower() == ".json":
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise MalformedInputError(f"{path} is not valid JSON: {e}") from e
        return EmailInput.from_dict(data)
    return parse_eml(path.read_bytes())


def format_record(record: AnalysisRecord) -> str:
    risk = record.risk
    lines = [
        "",
        "=== PHISHLENS RESULT ===",
        f"Subject: {record.email.subject}",
        f"From: {record.email.sender.address}",
        f"Risk Level: {risk.risk_level.value} (confidence {risk.confidence:.2f})",
        f"Phishing: {'yes' if risk.is_phishing else 'no'} [{risk.classification.value}]",
        f"Average Score: {record.average_score:.1f}",
        "",
        "Frameworks:",
    ]
    for key, result in record.frameworks.items():
        lines.append(f"  {key:<13} {result.score:>3}  {', '.join(result.patterns)}")

    if record.indicators:
        lines.append("")
        lines.append("Indicators:")
        for indicator in record.indicators:
            lines.append(f"  [{indicator.severity.value.upper()}] {indicator.type.value}: {indicator.description}")

    narrative = record.narrative
    lines.extend(["", f"Summary: {narrative.summary}", f"Reasoning: {narrative.reasoning}", "Recommendations:"])
    lines.extend(f"  - {item}" for item in narrative.recommendations)
    lines.append(f"\nProcessing time: {record.processing_time_ms} ms")
    return "\n".join(lines)


async def analyze_command(args) -> int:
    email = load_email(Path(args.path))

    if args.framework:
        result = AnalyzerFactory().create(args.framework).analyze(email)
        print(json.dumps(result.to_dict(), indent=2))
        return EXIT_OK

    async with create_orchestrator(enable_ai=False if args.no_ai else None) as orchestrator:
        record = await orchestrator.analyze(email)

    if args.json:
        print(json.dumps(record.to_dict(), indent=2))
    else:
        print(format_record(record))
    return EXIT_OK


def frameworks_command(args) -> int:
    for token, key in AnalyzerFactory.supported_frameworks().items():
        print(f"{token:<13} -> {key}")
    return EXIT_OK


async def health_command(args) -> int:
    settings = get_settings()
    async with create_ollama_client(settings) as client:
        healthy = await client.health_check()
        models = await client.list_models() if healthy else []

    status = "available" if healthy else "unavailable"
    print(f"Text generation at {settings.OLLAMA_API_URL}: {status}")
    for model in models:
        print(f"  - {model.get('name', model)}")
    return EXIT_OK if healthy else EXIT_FAILURE


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="phishlens",
        description="Multi-framework phishing assessment for email messages",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  phishlens analyze suspicious.eml
  phishlens analyze message.json --json --no-ai
  phishlens analyze suspicious.eml --framework nist
  phishlens frameworks
  phishlens health
        """,
    )
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze = subparsers.add_parser("analyze", help="Analyze an .eml or .json email")
    analyze.add_argument("path", help="Path to the email file")
    analyze.add_argument("--json", action="store_true", help="Print the analysis record as JSON")
    analyze.add_argument("--no-ai", action="store_true", help="Skip the text-generation narrative")
    analyze.add_argument("--framework", help="Run a single framework (e.g. ml, owasp, nist)")

    subparsers.add_parser("frameworks", help="List recognised framework names")
    subparsers.add_parser("health", help="Check the text-generation service")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(log_level=args.log_level)

    try:
        if args.command == "analyze":
            return asyncio.run(analyze_command(args))
        if args.command == "frameworks":
            return frameworks_command(args)
        if args.command == "health":
            return asyncio.run(health_command(args))
    except (UnknownFrameworkError, MalformedInputError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE

    parser.print_help()
    return EXIT_USAGE


if __name__ == "__main__":
    sys.exit(main())
