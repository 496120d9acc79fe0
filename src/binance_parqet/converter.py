"""Core converter functionality for Binance to Parqet conversion.

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

import csv
import io
import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Optional, TextIO, Union

from .config import Config
from .errors import FileAccessError, ParseError, SchemaError
from .mapping import BINANCE_MAP, STATUS_PATTERN
from .models import (
    PARQET_HEADER,
    ConversionReport,
    MappingRule,
    ParqetColumn,
    ParqetRow,
    RowResult,
    SkipReason,
)

FILLED_STATUS = "FILLED"

# Stablecoin and fiat legs that would double-count in the import.
EXCLUDED_ASSETS = ("USDT", "USDC", "EUR")

USD_STABLECOINS = ("USDT", "USDC")

ASSET_CLASS = "Cryptocurrency"
NO_FEE = "-"


def has_stray_quote(record: str, delimiter: str, quotechar: str = '"') -> bool:
    """Check a raw CSV record for a quote that does not open a field.

    The csv module keeps such quotes as literal text, e.g. ``b"c``.
    """
    in_quotes = False
    just_closed = False
    field_start = True

    for char in record:
        if in_quotes:
            if char == quotechar:
                in_quotes = False
                just_closed = True
            continue

        if char == quotechar:
            # A quote right after a closing quote is an escaped ("") quote.
            if field_start or just_closed:
                in_quotes = True
                just_closed = False
                field_start = False
                continue
            return True

        just_closed = False
        field_start = char in (delimiter, "\r", "\n")

    return False


class BinanceConverter:
    """Main converter class for Binance order history CSV files."""

    def __init__(
        self,
        config: Optional[Config] = None,
        rules: Optional[list[MappingRule]] = None,
    ):
        """Initialize the converter with configuration."""
        self.logger = logging.getLogger(__name__)
        self.config = config or Config()
        self.rules = rules if rules is not None else BINANCE_MAP

    def read_file(self, input_file: Union[str, Path]) -> str:
        """Read the whole export into memory."""
        input_file = Path(input_file)

        try:
            return input_file.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as e:
            raise FileAccessError(f"Cannot read input file {input_file}: {e}")

    def parse_csv(self, text: str, delimiter: str = ",") -> list[list[str]]:
        """Split raw CSV text into rows of string fields."""
        consumed: list[str] = []

        def lines() -> Iterator[str]:
            for line in io.StringIO(text, newline=""):
                consumed.append(line)
                yield line

        reader = csv.reader(lines(), delimiter=delimiter, strict=True)
        rows = []

        try:
            for row in reader:
                record = "".join(consumed)
                consumed.clear()
                if has_stray_quote(record, delimiter):
                    raise ParseError(
                        f"Malformed CSV at line {reader.line_num}: "
                        "quote inside an unquoted field"
                    )
                if not row:
                    continue
                rows.append(row)
        except csv.Error as e:
            raise ParseError(f"Malformed CSV at line {reader.line_num}: {e}")

        self.logger.debug(f"Parsed {len(rows)} rows")
        return rows

    def find_status_column(self, header: list[str]) -> int:
        """Locate the order status column in the header row."""
        for index, name in enumerate(header):
            if STATUS_PATTERN.search(name):
                return index
        raise SchemaError("Could not find status column.")

    def map_row(self, row: list[str], header: list[str]) -> ParqetRow:
        """Build an output row from a Binance row using the mapping rules."""
        result = ParqetRow()

        for index, value in enumerate(row):
            name = header[index] if index < len(header) else ""
            for rule in self.rules:
                if rule.matches(name):
                    result[rule.into_index] = rule.apply(value)

        return result

    def process_row(
        self, row: list[str], header: list[str], status_index: int
    ) -> RowResult:
        """Convert one order, or explain why it is left out."""
        status = row[status_index] if status_index < len(row) else ""
        if status != FILLED_STATUS:
            self.logger.warning(f"Order not filled. Skipping {status}")
            return RowResult.skip(SkipReason.NOT_FILLED, status)

        result = self.map_row(row, header)

        if result.asset in EXCLUDED_ASSETS:
            self.logger.debug(f"Skipping {result.asset} order")
            return RowResult.skip(SkipReason.EXCLUDED_ASSET, result.asset)

        currency = result.fiat
        if len(currency) > 3:
            if currency in USD_STABLECOINS:
                result[ParqetColumn.FIAT] = "USD"
            else:
                identifier = row[1] if len(row) > 1 else ""
                self.logger.warning(
                    f"Skipping transaction id; problematic currency. {identifier}"
                )
                return RowResult.skip(
                    SkipReason.PROBLEMATIC_CURRENCY, f"{identifier} ({currency})"
                )

        result[ParqetColumn.ASSET_CLASS] = ASSET_CLASS
        result[ParqetColumn.FEE] = NO_FEE  # fees are not converted

        return RowResult.accept(result)

    def convert_rows(self, rows: list[list[str]]) -> ConversionReport:
        """Convert parsed rows, the first of which is the header."""
        report = ConversionReport()

        if not rows:
            raise SchemaError("Could not find status column.")

        header, data = rows[0], rows[1:]
        status_index = self.find_status_column(header)
        self.logger.debug(f"Headers: {', '.join(header)}")

        for row in data:
            result = self.process_row(row, header, status_index)
            if result.accepted:
                report.rows.append(result.row)
            else:
                report.skipped.append(result)

        self.logger.info(
            f"Converted {len(report.rows)} of {report.total} orders"
        )
        if report.skipped:
            self.logger.info(f"Skipped {len(report.skipped)} orders")

        return report

    def render(self, report: ConversionReport) -> str:
        """Render the report in the Bitpanda trade history layout."""
        lines = self.config.preamble_lines()
        lines.append(PARQET_HEADER)
        body = "\n".join(row.to_line() for row in report.rows)
        return "\n".join(lines) + "\n" + body

    def write_output(self, report: ConversionReport, stream: TextIO) -> None:
        """Write the rendered report to a text stream."""
        stream.write(self.render(report))

    def convert_text(self, text: str) -> ConversionReport:
        """Parse and convert CSV text."""
        return self.convert_rows(self.parse_csv(text))

    def convert_file(
        self, input_file: Union[str, Path], stream: Optional[TextIO] = None
    ) -> ConversionReport:
        """Convert a Binance export, writing the result to ``stream`` if given."""
        input_file = Path(input_file)
        self.logger.debug(f"Reading {input_file}")

        report = self.convert_text(self.read_file(input_file))

        if stream is not None:
            self.write_output(report, stream)

        return report
