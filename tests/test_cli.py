"""Tests for rps CLI."""

from collections.abc import Iterator
import os
from pathlib import Path
import tempfile
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from rps import __version__
from rps.__main__ import main as entry_main
from rps.cli import app, build_cli_overrides

runner = CliRunner()


@pytest.fixture
def isolated_home() -> Iterator[Path]:
    """Empty home directory so no user config file is picked up."""
    with tempfile.TemporaryDirectory() as tmpdir:
        env = os.environ.copy()
        env.pop("RPS_CONFIG_PATH", None)
        with (
            patch.object(Path, "home", return_value=Path(tmpdir)),
            patch.dict(os.environ, env, clear=True),
        ):
            yield Path(tmpdir)


@pytest.fixture
def mock_run() -> Iterator[MagicMock]:
    """Replace the report runner; returns exit code 0."""
    with patch("rps.cli_runner.run_cli_mode", return_value=0) as mock:
        yield mock


class TestBuildCliOverrides:
    """Tests for building CLI overrides."""

    def test_no_overrides_empty_dict(self) -> None:
        """Test no flags gives no overrides."""
        assert build_cli_overrides() == {}

    def test_hosts_override(self) -> None:
        """Test hosts are passed through."""
        assert build_cli_overrides(hosts=["a", "b:1"]) == {"hosts": ["a", "b:1"]}

    def test_empty_hosts_not_overridden(self) -> None:
        """Test an empty host list leaves the config file's hosts alone."""
        assert "hosts" not in build_cli_overrides(hosts=[])

    def test_agent_overrides(self) -> None:
        """Test timeout and retries go into the agent section."""
        overrides = build_cli_overrides(timeout=2.5, retries=3)
        assert overrides == {"agent": {"timeout": 2.5, "retries": 3}}

    def test_output_overrides(self) -> None:
        """Test --json and --no-pretty go into the output section."""
        overrides = build_cli_overrides(json_format=True, pretty=False)
        assert overrides == {"output": {"format": "json", "pretty_print": False}}


class TestCLIVersion:
    """Tests for version flag."""

    @pytest.mark.parametrize("flag", ["--version", "-v", "-V"])
    def test_version_flags(self, flag: str, mock_run: MagicMock) -> None:
        """Test every version flag prints the version and exits 0."""
        result = runner.invoke(app, [flag])
        assert result.exit_code == 0
        assert f"rps version {__version__}" in result.output
        mock_run.assert_not_called()


class TestCLIHosts:
    """Tests for host handling."""

    def test_host_required(self, isolated_home: Path, mock_run: MagicMock) -> None:
        """Test running without hosts prints usage and exits 1."""
        result = runner.invoke(app, [])
        assert result.exit_code == 1
        assert "host required" in result.output
        assert "--hosts" in result.output
        mock_run.assert_not_called()

    def test_blank_hosts_flag(self, isolated_home: Path, mock_run: MagicMock) -> None:
        """Test a host list of only commas counts as no hosts."""
        result = runner.invoke(app, ["--hosts", ",,"])
        assert result.exit_code == 1
        assert "host required" in result.output

    def test_hosts_passed_in_order(self, isolated_home: Path, mock_run: MagicMock) -> None:
        """Test -H hosts reach the runner in the order given."""
        result = runner.invoke(app, ["-H", "web02:8080,web01"])
        assert result.exit_code == 0
        hosts, config = mock_run.call_args.args
        assert hosts == ["web02:8080", "web01"]
        assert config.hosts == ["web02:8080", "web01"]
        assert mock_run.call_args.kwargs == {"debug": False}

    def test_hosts_from_config_file(self, isolated_home: Path, mock_run: MagicMock) -> None:
        """Test hosts may come from the config file."""
        path = isolated_home / "rps.yaml"
        path.write_text("hosts:\n  - db01:9000\n")
        result = runner.invoke(app, ["--config", str(path)])
        assert result.exit_code == 0
        assert mock_run.call_args.args[0] == ["db01:9000"]

    def test_flag_overrides_config_hosts(self, isolated_home: Path, mock_run: MagicMock) -> None:
        """Test --hosts replaces the config file's hosts."""
        path = isolated_home / "rps.yaml"
        path.write_text("hosts: [db01]\n")
        result = runner.invoke(app, ["--config", str(path), "-H", "web01"])
        assert result.exit_code == 0
        assert mock_run.call_args.args[0] == ["web01"]


class TestCLIOptions:
    """Tests for output and agent options."""

    def test_json_flags(self, isolated_home: Path, mock_run: MagicMock) -> None:
        """Test --json --no-pretty select compact JSON."""
        result = runner.invoke(app, ["-H", "web01", "--json", "--no-pretty"])
        assert result.exit_code == 0
        config = mock_run.call_args.args[1]
        assert config.output.format == "json"
        assert config.output.pretty_print is False

    def test_agent_flags(self, isolated_home: Path, mock_run: MagicMock) -> None:
        """Test --timeout and --retries reach the agent config."""
        result = runner.invoke(app, ["-H", "web01", "-t", "3", "--retries", "2"])
        assert result.exit_code == 0
        config = mock_run.call_args.args[1]
        assert config.agent.timeout == 3.0
        assert config.agent.retries == 2

    def test_debug_flag(self, isolated_home: Path, mock_run: MagicMock) -> None:
        """Test --debug is forwarded."""
        runner.invoke(app, ["-H", "web01", "--debug"])
        assert mock_run.call_args.kwargs == {"debug": True}

    def test_timeout_out_of_range(self, isolated_home: Path, mock_run: MagicMock) -> None:
        """Test option bounds are enforced by the parser."""
        result = runner.invoke(app, ["-H", "web01", "--timeout", "0"])
        assert result.exit_code == 2
        mock_run.assert_not_called()

    def test_unknown_flag(self, mock_run: MagicMock) -> None:
        """Test unknown flags are usage errors."""
        result = runner.invoke(app, ["--bogus"])
        assert result.exit_code == 2

    def test_help(self) -> None:
        """Test -h shows help."""
        result = runner.invoke(app, ["-h"])
        assert result.exit_code == 0
        assert "Remote ps" in result.output


class TestCLIErrors:
    """Tests for configuration and runner failures."""

    def test_missing_config_file(self, isolated_home: Path, mock_run: MagicMock) -> None:
        """Test a missing --config file is an error."""
        result = runner.invoke(app, ["--config", "/nonexistent/rps.yaml", "-H", "web01"])
        assert result.exit_code == 1
        assert "Config file not found" in result.output

    def test_invalid_config_file(self, isolated_home: Path, mock_run: MagicMock) -> None:
        """Test invalid config values are reported, not raised."""
        path = isolated_home / "rps.yaml"
        path.write_text("agent:\n  retries: 0\n")
        result = runner.invoke(app, ["--config", str(path), "-H", "web01"])
        assert result.exit_code == 1
        assert "Configuration error" in result.output
        assert "agent.retries" in result.output
        mock_run.assert_not_called()

    def test_runner_failure_exit_code(self, isolated_home: Path, mock_run: MagicMock) -> None:
        """Test the runner's exit code becomes the process exit code."""
        mock_run.return_value = 1
        result = runner.invoke(app, ["-H", "down:9000"])
        assert result.exit_code == 1


class TestEntryPoint:
    """Tests for python -m rps."""

    def test_exit_code_from_system_exit(self) -> None:
        """Test SystemExit codes are returned."""
        with patch("rps.__main__.cli_main", side_effect=SystemExit(3)):
            assert entry_main() == 3

    def test_success(self) -> None:
        """Test a normal return is exit code 0."""
        with patch("rps.__main__.cli_main", return_value=None):
            assert entry_main() == 0

    def test_keyboard_interrupt(self) -> None:
        """Test Ctrl+C maps to 130."""
        with patch("rps.__main__.cli_main", side_effect=KeyboardInterrupt):
            assert entry_main() == 130
