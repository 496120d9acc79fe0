"""Exceptions raised by the Binance to Parqet converter.

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


class ConverterError(Exception):
    """Base class for errors that abort a conversion run."""


class FileAccessError(ConverterError):
    """The input file does not exist or cannot be read."""


class ParseError(ConverterError):
    """The input is not well-formed CSV."""


class SchemaError(ConverterError):
    """The header row lacks a column the conversion depends on."""


class CoercionError(ConverterError):
    """A cell value could not be converted to the target format."""


class UnknownTransactionTypeError(CoercionError):
    """The order side is neither BUY nor SELL."""
