"""Tests for the phishlens command line entry point."""

import json
from unittest.mock import AsyncMock, patch

import pytest

from phishlens.cli import EXIT_FAILURE, EXIT_OK, EXIT_USAGE, load_email, main


@pytest.fixture
def email_document(tmp_path):
    path = tmp_path / "message.json"
    path.write_text(json.dumps({
        "subject": "URGENT: verify your PayPal account",
        "from": {"address": "security@paypa1-secure.tk"},
        "body": {"text": "Click http://192.168.1.1/login"},
        "authentication": {"dmarc": {"status": "fail"}, "spf": {"status": "fail"}, "dkim": {"status": "fail"}},
    }), encoding="utf-8")
    return path


@pytest.fixture
def eml_file(tmp_path):
    path = tmp_path / "message.eml"
    path.write_bytes(b"From: a@example.com\nSubject: Lunch\n\nSee you at noon\n")
    return path


class TestCLI:

    def test_frameworks(self, capsys):
        assert main(["frameworks"]) == EXIT_OK

        out = capsys.readouterr().out
        assert "mlclassifier" in out
        assert "-> openvas" in out

    def test_analyze_json_output(self, email_document, capsys):
        assert main(["analyze", str(email_document), "--json", "--no-ai"]) == EXIT_OK

        document = json.loads(capsys.readouterr().out)
        assert document["frameworks"]["nist"]["score"] == 71
        assert document["frameworks"]["mlClassifier"]["score"] == 40
        assert document["ollamaAnalysis"]["recommendations"] == [
            "Verify the text-generation service is running",
            "Review the email manually",
        ]

    def test_analyze_text_output(self, eml_file, capsys):
        assert main(["analyze", str(eml_file), "--no-ai"]) == EXIT_OK

        out = capsys.readouterr().out
        assert "Risk Level: LOW" in out
        assert "Subject: Lunch" in out

    def test_single_framework(self, email_document, capsys):
        assert main(["analyze", str(email_document), "--framework", "NIST"]) == EXIT_OK

        result = json.loads(capsys.readouterr().out)
        assert result["score"] == 71
        assert "Possible domain spoofing" in result["patterns"]

    def test_unknown_framework(self, email_document, capsys):
        assert main(["analyze", str(email_document), "--framework", "snort"]) == EXIT_USAGE
        assert "Unknown framework type: snort" in capsys.readouterr().err

    def test_invalid_json(self, tmp_path, capsys):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        assert main(["analyze", str(path), "--no-ai"]) == EXIT_USAGE

    def test_invalid_eml_is_usage_error(self, tmp_path, capsys):
        path = tmp_path / "long.eml"
        path.write_bytes(b"From: " + b"a" * 330 + b"@example.com\nSubject: hi\n\nbody\n")

        assert main(["analyze", str(path), "--no-ai"]) == EXIT_USAGE
        assert "Error:" in capsys.readouterr().err

    def test_missing_file(self, tmp_path):
        assert main(["analyze", str(tmp_path / "absent.eml"), "--no-ai"]) == EXIT_FAILURE

    def test_load_email_dispatches_on_suffix(self, email_document, eml_file):
        assert load_email(email_document).sender.address == "security@paypa1-secure.tk"
        assert load_email(eml_file).subject == "Lunch"


class TestHealthCommand:

    @pytest.fixture
    def ollama(self):
        client = AsyncMock()
        client.__aenter__.return_value = client
        return client

    def test_service_up(self, ollama, capsys):
        ollama.health_check.return_value = True
        ollama.list_models.return_value = [{"name": "llama3.2:3b"}]

        with patch("phishlens.cli.create_ollama_client", return_value=ollama):
            assert main(["health"]) == EXIT_OK

        out = capsys.readouterr().out
        assert "available" in out
        assert "llama3.2:3b" in out

    def test_service_down(self, ollama, capsys):
        ollama.health_check.return_value = False

        with patch("phishlens.cli.create_ollama_client", return_value=ollama):
            assert main(["health"]) == EXIT_FAILURE

        assert "unavailable" in capsys.readouterr().out
        ollama.list_models.assert_not_called()
