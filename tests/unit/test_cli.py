"""Unit tests for the bidi-console command line."""

import logging
from unittest.mock import AsyncMock, patch

import pytest
from click.testing import CliRunner
from conftest import MAIN_TAB, log_event_params

from bidi_console.cli.main import cli
from bidi_console.exceptions import (
    BrowserNotAvailableError,
    CorrelationFailure,
    NoSuchElementError,
)
from bidi_console.models import ConsoleLogEntry


@pytest.fixture(autouse=True)
def quiet_logging():
    # keep the package logger propagating so caplog works in other tests
    with patch(
        "bidi_console.cli.commands.run.configure_logging",
        return_value=logging.getLogger("tests.cli"),
    ):
        yield


def invoke(args, tmp_path):
    runner = CliRunner()
    config_args = ["--config", str(tmp_path / "config.json")]
    return runner.invoke(
        cli, args + config_args, env={"BIDI_CONSOLE_TIMEOUT": "", "BIDI_CONSOLE_REMOTE_URL": ""}
    )


class TestRunCommand:
    """Test the run command's exit codes and option handling."""

    def test_run_passes(self, tmp_path):
        """A verified entry exits 0 and shows the entry."""
        entry = ConsoleLogEntry.from_bidi_params(log_event_params(MAIN_TAB))

        with patch(
            "bidi_console.cli.commands.run.run_scenario", AsyncMock(return_value=entry)
        ) as run_scenario:
            result = invoke(
                ["run", "--timeout", "2", "--headed", "--remote-url", "http://grid:4444"],
                tmp_path,
            )

        assert result.exit_code == 0, result.output
        assert "Hello, Console!" in result.output
        config = run_scenario.call_args[0][0]
        assert config.timeout == 2.0
        assert config.headless is False
        assert config.remote_url == "http://grid:4444"

    def test_run_assertion_failure_exits_1(self, tmp_path):
        """A correlation failure exits 1."""
        failure = CorrelationFailure("Timed out after 5s waiting for a console entry")

        with patch(
            "bidi_console.cli.commands.run.run_scenario", AsyncMock(side_effect=failure)
        ):
            result = invoke(["run"], tmp_path)

        assert result.exit_code == 1
        assert "Timed out" in result.output

    def test_run_test_error_exits_2(self, tmp_path):
        """Any other error exits 2."""
        error = NoSuchElementError("hello", MAIN_TAB)

        with patch(
            "bidi_console.cli.commands.run.run_scenario", AsyncMock(side_effect=error)
        ):
            result = invoke(["run"], tmp_path)

        assert result.exit_code == 2
        assert "NoSuchElementError" in result.output

    def test_run_invalid_config_exits_2(self, tmp_path):
        """A config file that is not an object exits 2."""
        (tmp_path / "config.json").write_text("[]")

        result = invoke(["run"], tmp_path)

        assert result.exit_code == 2
        assert "Invalid configuration" in result.output


class TestDoctorCommand:
    """Test the doctor command."""

    def test_doctor_reports_browser(self, tmp_path):
        """Resolved browser and driver paths are shown."""
        paths = {"browser_path": "/usr/bin/firefox", "driver_path": "/usr/bin/geckodriver"}
        with patch(
            "bidi_console.cli.commands.doctor.locate_browser", return_value=paths
        ):
            result = invoke(["doctor", "-v"], tmp_path)

        assert result.exit_code == 0, result.output
        assert "/usr/bin/firefox" in result.output
        assert "element_id" in result.output

    def test_doctor_fails_without_browser(self, tmp_path):
        """A missing browser is a failed check and exits 1."""
        with patch(
            "bidi_console.cli.commands.doctor.locate_browser",
            side_effect=BrowserNotAvailableError("Firefox not found"),
        ):
            result = invoke(["doctor"], tmp_path)

        assert result.exit_code == 1
        assert "Firefox not found" in result.output
