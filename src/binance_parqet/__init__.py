"""Binance to Parqet Converter.

Converts Binance order history CSV exports into the Bitpanda trade history
layout that Parqet can import.

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

__version__ = "1.0.0"

from .config import Config
from .converter import BinanceConverter
from .errors import ConverterError

__all__ = ["BinanceConverter", "Config", "ConverterError"]
