"""Command-line interface for the Binance to Parqet converter.

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
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from . import __version__
from .config import DEFAULT_CONFIG_PATH, Config, create_sample_config
from .converter import BinanceConverter
from .errors import ConverterError
from .models import ConversionReport

# Standard output carries the converted CSV, so diagnostics go to stderr.
console = Console(stderr=True)


def setup_logging(verbose: bool = False) -> None:
    """Set up rich logging."""
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def load_config(config: Optional[Path]) -> Config:
    """Load the file configuration, then apply environment overrides."""
    return Config.load_from_env(Config.load_from_file(config))


def print_summary(input_file: Path, report: ConversionReport) -> None:
    """Display a summary of a converted export."""
    summary_table = Table(title="File Summary")
    summary_table.add_column("Metric", style="cyan")
    summary_table.add_column("Value", style="green")

    summary_table.add_row("File", str(input_file))
    summary_table.add_row("Total Orders", str(report.total))
    summary_table.add_row("Converted", str(len(report.rows)))
    for reason, count in sorted(report.skip_counts().items()):
        summary_table.add_row(f"Skipped ({reason.value})", str(count))

    console.print(summary_table)

    asset_counts = report.asset_counts()
    if asset_counts:
        asset_table = Table(title="Assets")
        asset_table.add_column("Asset", style="yellow")
        asset_table.add_column("Orders", style="green")

        for asset, count in sorted(
            asset_counts.items(), key=lambda x: x[1], reverse=True
        ):
            asset_table.add_row(asset, str(count))

        console.print(asset_table)


@click.command()
@click.argument(
    "input_file", required=False, type=click.Path(path_type=Path)
)
@click.option(
    "-c",
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Configuration file path",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose logging")
@click.option(
    "--info", is_flag=True, help="Summarise the export instead of converting it"
)
@click.option(
    "--init-config",
    type=click.Path(path_type=Path),
    help="Create a sample configuration file at this path and exit",
)
@click.option("--force", is_flag=True, help="Overwrite an existing configuration file")
@click.option("--version", is_flag=True, help="Show version and exit")
@click.pass_context
def cli(
    ctx: click.Context,
    input_file: Optional[Path],
    config: Optional[Path],
    verbose: bool,
    info: bool,
    init_config: Optional[Path],
    force: bool,
    version: bool,
) -> None:
    """Binance to Parqet converter.

    Converts a Binance order history CSV export into the Bitpanda trade
    history layout that Parqet imports, writing the result to standard output.

    INPUT_FILE: Path to the Binance order history export
    """
    if version:
        click.echo(f"binance-parqet {__version__}")
        ctx.exit()

    setup_logging(verbose)
    logger = logging.getLogger(__name__)

    if init_config is not None:
        write_sample_config(init_config, force)
        return

    if input_file is None:
        click.echo("No input path specified", err=True)
        sys.exit(1)

    input_file = Path.cwd() / input_file

    try:
        app_config = load_config(config)
        if config:
            logger.debug(f"Loaded configuration from {config}")

        converter = BinanceConverter(app_config)

        if info:
            print_summary(input_file, converter.convert_file(input_file))
            return

        converter.convert_file(input_file, sys.stdout)

    except (ConverterError, ValueError) as e:
        logger.error(f"{type(e).__name__}: {e}")
        if verbose:
            console.print_exception()
        sys.exit(1)


def write_sample_config(config: Path, force: bool) -> None:
    """Create a sample configuration file unless one already exists."""
    if config.exists() and not force:
        console.print(f"[yellow]Configuration file already exists: {config}[/yellow]")
        console.print("Use --force to overwrite")
        return

    try:
        create_sample_config(config)
    except OSError as e:
        console.print(f"[red]❌ Error creating configuration: {e}[/red]")
        sys.exit(1)

    console.print(f"[green]✅ Sample configuration created: {config}[/green]")
    if config == DEFAULT_CONFIG_PATH.expanduser():
        console.print("Configuration will be loaded automatically")
    else:
        console.print(f"Run: [bold]binance-parqet -c {config} input.csv[/bold]")


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
