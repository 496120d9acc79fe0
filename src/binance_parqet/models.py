"""Data models for Binance order rows and Parqet (Bitpanda format) output.

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

from enum import Enum, IntEnum
from re import Pattern
from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ParqetColumn(IntEnum):
    """Positions of the Bitpanda trade history columns read by Parqet."""

    TRANSACTION_ID = 0
    TIMESTAMP = 1
    TRANSACTION_TYPE = 2
    IN_OUT = 3
    AMOUNT_FIAT = 4
    FIAT = 5
    AMOUNT_ASSET = 6
    ASSET = 7
    ASSET_MARKET_PRICE = 8
    ASSET_MARKET_PRICE_CURRENCY = 9
    ASSET_CLASS = 10
    PRODUCT_ID = 11
    FEE = 12
    FEE_ASSET = 13
    SPREAD = 14
    SPREAD_CURRENCY = 15


PARQET_COLUMNS = [
    "Transaction ID",
    "Timestamp",
    "Transaction Type",
    "In/Out",
    "Amount Fiat",
    "Fiat",
    "Amount Asset",
    "Asset",
    "Asset market price",
    "Asset market price currency",
    "Asset class",
    "Product ID",
    "Fee",
    "Fee asset",
    "Spread",
    "Spread Currency",
]

# Quoted exactly as Bitpanda exports it.
PARQET_HEADER = (
    '"Transaction ID",Timestamp,"Transaction Type",In/Out,"Amount Fiat",Fiat,'
    '"Amount Asset",Asset,"Asset market price","Asset market price currency",'
    '"Asset class","Product ID",Fee,"Fee asset",Spread,"Spread Currency"'
)


class MappingRule(BaseModel):
    """Maps a Binance column, selected by header name, onto a Parqet column."""

    pattern: Pattern[str] = Field(
        ..., description="Regular expression searched in the source header name"
    )
    into_index: ParqetColumn = Field(..., description="Target column position")
    into: str = Field(..., description="Target column name")
    coerce: Optional[Callable[[str], str]] = Field(
        None, description="Conversion applied to the raw cell value"
    )

    model_config = ConfigDict(frozen=True)

    def matches(self, column_name: str) -> bool:
        """Check if this rule applies to the given header name."""
        return self.pattern.search(column_name) is not None

    def apply(self, value: str) -> str:
        """Produce the output value for a raw cell."""
        if self.coerce is None:
            return value
        return self.coerce(value)


class ParqetRow(BaseModel):
    """A single row of the Bitpanda trade history layout."""

    cells: list[str] = Field(
        default_factory=lambda: [""] * len(PARQET_COLUMNS),
        description="Cell values in column order",
    )

    @field_validator("cells")
    @classmethod
    def validate_width(cls, v):
        """Rows always carry every target column."""
        if len(v) != len(PARQET_COLUMNS):
            raise ValueError(
                f"Expected {len(PARQET_COLUMNS)} cells, got {len(v)}"
            )
        return v

    def __getitem__(self, index: int) -> str:
        return self.cells[index]

    def __setitem__(self, index: int, value: str) -> None:
        self.cells[index] = value

    @property
    def transaction_type(self) -> str:
        return self.cells[ParqetColumn.TRANSACTION_TYPE]

    @property
    def fiat(self) -> str:
        return self.cells[ParqetColumn.FIAT]

    @property
    def asset(self) -> str:
        return self.cells[ParqetColumn.ASSET]

    def to_line(self) -> str:
        """Join the cells into an output line (no quoting is applied)."""
        return ",".join(self.cells)

    def to_dict(self) -> dict:
        """Convert to a column name keyed dictionary."""
        return dict(zip(PARQET_COLUMNS, self.cells))


class SkipReason(str, Enum):
    """Why a Binance order was left out of the output."""

    NOT_FILLED = "not_filled"
    EXCLUDED_ASSET = "excluded_asset"
    PROBLEMATIC_CURRENCY = "problematic_currency"


class RowResult(BaseModel):
    """Outcome of processing one Binance order row."""

    row: Optional[ParqetRow] = Field(None, description="Converted row, if accepted")
    skip_reason: Optional[SkipReason] = Field(
        None, description="Reason the row was skipped"
    )
    detail: str = Field(default="", description="Human-readable skip detail")

    @classmethod
    def accept(cls, row: ParqetRow) -> "RowResult":
        return cls(row=row)

    @classmethod
    def skip(cls, reason: SkipReason, detail: str = "") -> "RowResult":
        return cls(skip_reason=reason, detail=detail)

    @property
    def accepted(self) -> bool:
        """Check if the row made it into the output."""
        return self.row is not None


class ConversionReport(BaseModel):
    """Result of converting a whole Binance export."""

    rows: list[ParqetRow] = Field(
        default_factory=list, description="Accepted rows in input order"
    )
    skipped: list[RowResult] = Field(
        default_factory=list, description="Rows left out of the output"
    )

    @property
    def total(self) -> int:
        """Number of data rows processed."""
        return len(self.rows) + len(self.skipped)

    def skip_counts(self) -> dict[SkipReason, int]:
        counts: dict[SkipReason, int] = {}
        for result in self.skipped:
            if result.skip_reason is not None:
                counts[result.skip_reason] = counts.get(result.skip_reason, 0) + 1
        return counts

    def asset_counts(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for row in self.rows:
            counts[row.asset] = counts.get(row.asset, 0) + 1
        return counts
