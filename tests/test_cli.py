"""Tests for CLI module."""

from unittest.mock import AsyncMock, patch

import pytest
import yaml
from click.testing import CliRunner

from rendezvous import __version__
from rendezvous.cli import main


@pytest.fixture
def runner():
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def config_file(tmp_path):
    """Write a config file with non-default values."""
    path = tmp_path / "config.yaml"
    path.write_text(
        yaml.dump(
            {
                "port": 4100,
                "bind_address": "0.0.0.0",
                "debug_endpoint": False,
                "store": {"capacity": 5, "ttl_seconds": 20},
            }
        )
    )
    return path


class TestCLIHelp:
    """Test CLI help output."""

    def test_cli_help(self, runner):
        """rendezvous --help shows usage."""
        result = runner.invoke(main, ["--help"])

        assert result.exit_code == 0
        assert "serve" in result.output
        assert "version" in result.output

    def test_version(self, runner, tmp_path):
        """rendezvous version prints the package version."""
        result = runner.invoke(main, ["-c", str(tmp_path / "none.yaml"), "version"])

        assert result.exit_code == 0
        assert __version__ in result.output


class TestServe:
    """Test the serve command."""

    def test_serve_uses_config(self, runner, config_file):
        """Store and server are built from the config file."""
        with patch("rendezvous.server.RelayServer") as server_class, patch(
            "rendezvous.store.PairingStore"
        ) as store_class:
            server_class.return_value.serve = AsyncMock()

            result = runner.invoke(main, ["-c", str(config_file), "serve"])

        assert result.exit_code == 0, result.output
        store_class.assert_called_once_with(capacity=5, ttl_seconds=20.0)
        server_class.assert_called_once_with(
            store_class.return_value, debug_endpoint=False
        )
        server_class.return_value.serve.assert_awaited_once_with("0.0.0.0", 4100)

    def test_serve_options_override_config(self, runner, config_file):
        """--host and --port win over the config file."""
        with patch("rendezvous.server.RelayServer") as server_class:
            server_class.return_value.serve = AsyncMock()

            result = runner.invoke(
                main,
                ["-c", str(config_file), "serve", "--host", "10.0.0.1", "--port", "8080"],
            )

        assert result.exit_code == 0, result.output
        server_class.return_value.serve.assert_awaited_once_with("10.0.0.1", 8080)

    def test_serve_bind_failure(self, runner, config_file):
        """Bind errors exit non-zero."""
        with patch("rendezvous.server.RelayServer") as server_class:
            server_class.return_value.serve = AsyncMock(
                side_effect=OSError("address already in use")
            )

            result = runner.invoke(main, ["-c", str(config_file), "serve"])

        assert result.exit_code == 1
        assert "address already in use" in result.output
