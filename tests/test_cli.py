"""Tests for the CLI module.

Copyright (C) 2025 Tim Waugh

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.

This program is distributed in the hope that it will be useful,
but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
GNU General Public License for more details.

You should have received a copy of the GNU General Public License
along with this program. If not, see <https://www.gnu.org/licenses/>.
"""

import logging
import tempfile
from pathlib import Path
from unittest.mock import Mock, patch

import pytest
import yaml
from click.testing import CliRunner

from binance_parqet import __version__
from binance_parqet.cli import cli, main, setup_logging
from binance_parqet.models import PARQET_HEADER


@pytest.fixture
def runner():
    """Click test runner."""
    return CliRunner()


@pytest.fixture
def sample_csv_content():
    """Sample Binance export for testing."""
    return (
        '"Transaction ID",Date(UTC),Side,"Trading total","Trading total",'
        '"Order Amount","Order Amount","Average Price",Status\n'
        "T1,2022-07-02 09:19:36,BUY,500.00EUR,500.00EUR,0.01BTC,0.01BTC,50000,FILLED\n"
        "T2,2022-07-03 10:00:00,SELL,20.00EUR,20.00EUR,1ETH,1ETH,20,NEW\n"
    )


def write_temp_csv(content):
    with tempfile.NamedTemporaryFile(mode="w", suffix=".csv", delete=False) as f:
        f.write(content)
        return Path(f.name)


@pytest.fixture
def temp_csv_file(sample_csv_content):
    """Create a temporary CSV file with sample content."""
    temp_path = write_temp_csv(sample_csv_content)

    yield temp_path

    # Cleanup
    if temp_path.exists():
        temp_path.unlink()


@pytest.fixture
def temp_config_file():
    """Create a temporary config file path."""
    with tempfile.NamedTemporaryFile(suffix=".yaml", delete=False) as f:
        temp_path = Path(f.name)

    # Remove the file so tests can create it
    temp_path.unlink()

    yield temp_path

    # Cleanup
    if temp_path.exists():
        temp_path.unlink()


class TestSetupLogging:
    """Test logging setup functionality."""

    def test_setup_logging_default(self):
        with patch("binance_parqet.cli.logging.basicConfig") as mock_config:
            setup_logging()
            mock_config.assert_called_once()
            args, kwargs = mock_config.call_args
            assert kwargs["level"] == logging.INFO

    def test_setup_logging_verbose(self):
        with patch("binance_parqet.cli.logging.basicConfig") as mock_config:
            setup_logging(verbose=True)
            args, kwargs = mock_config.call_args
            assert kwargs["level"] == logging.DEBUG

    def test_logging_goes_to_stderr(self):
        with patch("binance_parqet.cli.logging.basicConfig") as mock_config:
            setup_logging()
            handler = mock_config.call_args.kwargs["handlers"][0]
            assert handler.console.stderr


class TestMainCLI:
    """Test top-level CLI behaviour."""

    def test_version_flag(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert f"binance-parqet {__version__}" in result.output

    def test_help(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "Binance to Parqet converter" in result.output

    def test_no_input_path(self, runner):
        result = runner.invoke(cli, [])
        assert result.exit_code == 1
        assert "No input path specified" in result.stderr
        assert result.stdout == ""

    def test_main_function(self):
        with patch("binance_parqet.cli.cli") as mock_cli:
            main()
            mock_cli.assert_called_once()


class TestConvert:
    """Test conversion through the CLI."""

    def test_convert_success(self, runner, temp_csv_file):
        result = runner.invoke(cli, [str(temp_csv_file)])

        assert result.exit_code == 0
        assert '"Venue: Bitpanda"' in result.output
        assert PARQET_HEADER in result.output
        assert (
            ",2022-07-02 09:19:36,buy,,500.00000000000000000000,EUR,"
            "0.01000000000000000000,BTC,50000.00000000000000000000,,"
            "Cryptocurrency,,-,,,"
        ) in result.output
        assert "2022-07-03 10:00:00" not in result.output

    def test_convert_writes_only_csv_to_stdout(self, runner, temp_csv_file):
        result = runner.invoke(cli, [str(temp_csv_file)])

        assert result.exit_code == 0
        assert result.stdout.startswith(
            '\n"Disclaimer: All data is without guarantee'
        )
        assert result.stdout.endswith("Cryptocurrency,,-,,,")
        assert len(result.stdout.split("\n")) == 9

    def test_convert_relative_path(self, runner, sample_csv_content):
        with runner.isolated_filesystem():
            Path("orders.csv").write_text(sample_csv_content, encoding="utf-8")
            result = runner.invoke(cli, ["orders.csv"])

        assert result.exit_code == 0
        assert PARQET_HEADER in result.output

    def test_convert_logs_skipped_order(self, runner, temp_csv_file, caplog):
        with caplog.at_level(logging.WARNING):
            result = runner.invoke(cli, [str(temp_csv_file)])

        assert result.exit_code == 0
        assert "Order not filled. Skipping NEW" in caplog.text

    def test_convert_missing_file(self, runner):
        result = runner.invoke(cli, ["nonexistent.csv"])
        assert result.exit_code == 1
        assert result.stdout == ""

    def test_convert_directory(self, runner, caplog):
        with tempfile.TemporaryDirectory() as directory:
            with caplog.at_level(logging.ERROR):
                result = runner.invoke(cli, [directory])

        assert result.exit_code == 1
        assert result.stdout == ""
        assert "FileAccessError" in caplog.text

    def test_convert_unknown_side_aborts(self, runner, sample_csv_content, caplog):
        temp_path = write_temp_csv(sample_csv_content.replace("BUY", "HOLD"))

        try:
            with caplog.at_level(logging.ERROR):
                result = runner.invoke(cli, [str(temp_path)])
        finally:
            temp_path.unlink()

        assert result.exit_code == 1
        assert PARQET_HEADER not in result.output
        assert "UnknownTransactionTypeError" in caplog.text

    def test_convert_missing_status_column(self, runner, caplog):
        temp_path = write_temp_csv("Date(UTC),Side\n2022-01-01,BUY\n")

        try:
            with caplog.at_level(logging.ERROR):
                result = runner.invoke(cli, [str(temp_path)])
        finally:
            temp_path.unlink()

        assert result.exit_code == 1
        assert "Could not find status column" in caplog.text

    def test_convert_problematic_currency_not_fatal(self, runner, sample_csv_content):
        temp_path = write_temp_csv(sample_csv_content.replace("500.00EUR", "500.00JPYXX"))

        try:
            result = runner.invoke(cli, [str(temp_path)])
        finally:
            temp_path.unlink()

        assert result.exit_code == 0
        assert PARQET_HEADER in result.output
        assert "JPYXX" not in result.output

    def test_convert_with_config(self, runner, temp_csv_file, temp_config_file):
        with open(temp_config_file, "w", encoding="utf-8") as f:
            yaml.dump({"account": {"email": "custom@example.com"}}, f)

        result = runner.invoke(cli, ["-c", str(temp_config_file), str(temp_csv_file)])

        assert result.exit_code == 0
        assert "custom@example.com" in result.output

    def test_convert_with_env_override(self, runner, temp_csv_file):
        result = runner.invoke(
            cli,
            [str(temp_csv_file)],
            env={"BINANCE_PARQET_VENUE": "Somewhere"},
        )

        assert result.exit_code == 0
        assert '"Venue: Somewhere"' in result.output

    def test_convert_invalid_config(self, runner, temp_csv_file, temp_config_file):
        with open(temp_config_file, "w", encoding="utf-8") as f:
            f.write("invalid: yaml: content: [")

        result = runner.invoke(cli, ["-c", str(temp_config_file), str(temp_csv_file)])
        assert result.exit_code == 1

    def test_convert_verbose(self, runner, temp_csv_file):
        with patch("binance_parqet.cli.setup_logging") as mock_setup_logging:
            result = runner.invoke(cli, [str(temp_csv_file), "--verbose"])

        assert result.exit_code == 0
        mock_setup_logging.assert_called_with(True)

    def test_convert_error_verbose_prints_traceback(self, runner):
        with patch("binance_parqet.cli.console.print_exception") as mock_print_exc:
            result = runner.invoke(cli, ["nonexistent.csv", "--verbose"])

        assert result.exit_code == 1
        mock_print_exc.assert_called_once()


class TestInfo:
    """Test the --info summary."""

    def test_info_summary(self, runner, temp_csv_file):
        result = runner.invoke(cli, ["--info", str(temp_csv_file)])

        assert result.exit_code == 0
        assert "File Summary" in result.stderr
        assert "not_filled" in result.stderr
        assert "BTC" in result.stderr
        assert result.stdout == ""

    @patch("binance_parqet.cli.BinanceConverter")
    def test_info_does_not_write_csv(self, mock_converter_class, runner, temp_csv_file):
        mock_converter = Mock()
        mock_converter_class.return_value = mock_converter

        with patch("binance_parqet.cli.print_summary") as mock_summary:
            result = runner.invoke(cli, ["--info", str(temp_csv_file)])

        assert result.exit_code == 0
        mock_converter.convert_file.assert_called_once_with(temp_csv_file)
        mock_summary.assert_called_once()


class TestInitConfig:
    """Test --init-config."""

    @patch("binance_parqet.cli.create_sample_config")
    def test_init_config_success(self, mock_create_config, runner, temp_config_file):
        result = runner.invoke(cli, ["--init-config", str(temp_config_file)])

        assert result.exit_code == 0
        assert "Sample configuration created" in result.output
        mock_create_config.assert_called_once_with(temp_config_file)

    def test_init_config_writes_file(self, runner, temp_config_file):
        result = runner.invoke(cli, ["--init-config", str(temp_config_file)])

        assert result.exit_code == 0
        assert temp_config_file.exists()

    def test_init_config_exists_no_force(self, runner, temp_config_file):
        temp_config_file.touch()

        result = runner.invoke(cli, ["--init-config", str(temp_config_file)])

        assert result.exit_code == 0
        assert "Configuration file already exists" in result.output
        assert temp_config_file.read_text() == ""

    @patch("binance_parqet.cli.create_sample_config")
    def test_init_config_exists_with_force(
        self, mock_create_config, runner, temp_config_file
    ):
        temp_config_file.touch()

        result = runner.invoke(
            cli, ["--init-config", str(temp_config_file), "--force"]
        )

        assert result.exit_code == 0
        mock_create_config.assert_called_once_with(temp_config_file)
