"""
Smoke Tests for CLI Commands.

These tests verify that CLI commands run without errors and produce output.
They don't validate correctness deeply - just that commands work against an
unreachable backend.

Usage:
    pytest tests/smoke/test_cli_commands.py -v
    pytest tests/smoke/test_cli_commands.py -v -m smoke
"""

import httpx
import pytest
from typer.testing import CliRunner

from entprep.cli import app
from entprep.service import ContentService

# Mark all tests in this module as smoke tests
pytestmark = pytest.mark.smoke

runner = CliRunner()


def refuse(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection refused", request=request)


@pytest.fixture(autouse=True)
def offline_cli(monkeypatch, settings):
    """Point every CLI command at test settings and a dead backend."""
    build = ContentService.from_settings.__func__

    def from_settings(cls, _settings=None, **kwargs):
        kwargs.setdefault("transport", httpx.MockTransport(refuse))
        return build(cls, settings, **kwargs)

    monkeypatch.setattr(ContentService, "from_settings", classmethod(from_settings))
    monkeypatch.setattr("entprep.cli.get_settings", lambda: settings)


def invoke(*args: str):
    result = runner.invoke(app, list(args))
    return result.exit_code, result.output


class TestCLIHelp:
    """Test that help commands work."""

    def test_main_help(self):
        """Main help should list every command."""
        code, output = invoke("--help")

        assert code == 0, output
        for command in ("health", "tests", "quiz", "generate", "chat"):
            assert command in output

    def test_version(self):
        code, output = invoke("version")

        assert code == 0
        assert "entprep" in output


class TestCLICommands:
    """Commands served by the local fallback."""

    def test_health_reports_unreachable(self):
        code, output = invoke("health")

        assert code == 0
        assert "unreachable" in output

    def test_tests(self):
        code, output = invoke("tests")

        assert code == 0, output
        assert "test-1" in output
        assert "local fallback" in output

    def test_quiz_capped(self):
        code, output = invoke("quiz", "--track", "physics", "--cap", "1", "--seed", "7")

        assert code == 0, output
        assert "3 questions" in output
        assert "local fallback" in output

    def test_quiz_unknown_track(self):
        code, output = invoke("quiz", "--track", "chemistry")

        assert code == 1
        assert "Unknown track" in output

    def test_generate(self):
        code, output = invoke("generate", "биология", "--count", "2")

        assert code == 0, output
        assert "биология" in output

    def test_chat(self):
        code, output = invoke("chat", "Сәлем!", "--language", "kz")

        assert code == 0, output
        assert "local fallback" in output

    def test_chat_rejects_language(self):
        code, output = invoke("chat", "hello", "--language", "en")

        assert code == 1
        assert "Unsupported language" in output
