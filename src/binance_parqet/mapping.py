"""Column mapping from Binance order history to the Bitpanda layout.

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

Example target row, as exported by Bitpanda:

    T8123f94c-2580-4129-ae62-***,2022-07-02T09:19:36+02:00,buy,outgoing,
    250.00,EUR,0.01329013,BTC,18810.95,EUR,Cryptocurrency,1,-,-,-,-
"""

import re
from decimal import Decimal, InvalidOperation

from .errors import CoercionError, UnknownTransactionTypeError
from .models import MappingRule, ParqetColumn

DECIMAL_PLACES = 20

STATUS_PATTERN = re.compile(r"Status")

_TRAILING_LETTERS = re.compile(r"[a-zA-Z]+$")
_LEADING_NON_LETTERS = re.compile(r"^[^a-zA-Z]+")
# Digits with an optional fraction and exponent; no "1_000", "NaN" or "Infinity".
_PLAIN_DECIMAL = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")


def fixed_decimal(value: str) -> str:
    """Render a plain decimal string with exactly 20 fractional digits."""
    value = value.strip()
    if not _PLAIN_DECIMAL.match(value):
        raise CoercionError(f"Invalid decimal value: {value!r}")
    try:
        number = Decimal(value)
    except InvalidOperation:
        raise CoercionError(f"Invalid decimal value: {value!r}")
    return f"{number:.{DECIMAL_PLACES}f}"


def strip_unit_amount(value: str) -> str:
    """Parse an amount with a unit suffix such as ``500.00EUR``."""
    return fixed_decimal(_TRAILING_LETTERS.sub("", value))


def extract_ticker(value: str) -> str:
    """Extract the ticker from an amount such as ``0.01BTC``.

    Pairs (``0.01BTCUSDT``) are hard to split and come back unchanged.
    """
    return _LEADING_NON_LETTERS.sub("", value)


def transaction_type(value: str) -> str:
    """Map the Binance order side to a Bitpanda transaction type."""
    if value == "BUY":
        return "buy"
    elif value == "SELL":
        return "sell"
    raise UnknownTransactionTypeError(f"Unknown transaction type: {value!r}")


BINANCE_MAP = [
    MappingRule(
        pattern=re.compile(r"Date.*UTC"),
        into_index=ParqetColumn.TIMESTAMP,
        into="Timestamp",
    ),
    MappingRule(
        pattern=re.compile(r"Trading total"),
        into_index=ParqetColumn.AMOUNT_FIAT,
        into="Amount Fiat",
        coerce=strip_unit_amount,
    ),
    MappingRule(
        pattern=re.compile(r"Trading total"),
        into_index=ParqetColumn.FIAT,
        into="Fiat",
        coerce=extract_ticker,
    ),
    MappingRule(
        pattern=re.compile(r"Order Amount"),
        into_index=ParqetColumn.AMOUNT_ASSET,
        into="Amount Asset",
        coerce=strip_unit_amount,
    ),
    MappingRule(
        pattern=re.compile(r"Order Amount"),
        into_index=ParqetColumn.ASSET,
        into="Asset",
        coerce=extract_ticker,
    ),
    MappingRule(
        pattern=re.compile(r"Average Price"),
        into_index=ParqetColumn.ASSET_MARKET_PRICE,
        into="Asset market price",
        coerce=fixed_decimal,
    ),
    MappingRule(
        pattern=re.compile(r"Side"),
        into_index=ParqetColumn.TRANSACTION_TYPE,
        into="Transaction Type",
        coerce=transaction_type,
    ),
]
