"""Configuration management for the Binance to Parqet converter.

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

import os
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, Field

DEFAULT_CONFIG_PATH = Path("~/.config/binance-parqet/config.yaml")

ENV_PREFIX = "BINANCE_PARQET_"


class AccountMetadata(BaseModel):
    """Account details written into the Bitpanda export preamble.

    Parqet does not check these, so the defaults are placeholders.
    """

    account_holder: str = Field(
        default="Robot, 2000-27-04", description="Account holder name and birth date"
    )
    email: str = Field(default="robot@gmail.com", description="Account e-mail")
    account_opened: str = Field(
        default="3/1/22, 4:46 PM", description="Account opening timestamp"
    )
    venue: str = Field(default="Bitpanda", description="Trading venue")
    reported_by: str = Field(
        default="Bitpanda GmbH", description="Reporting entity"
    )


class Config(BaseModel):
    """Main configuration model."""

    account: AccountMetadata = Field(
        default_factory=AccountMetadata,
        description="Account metadata for the output preamble",
    )

    @classmethod
    def load_from_file(cls, config_path: Optional[Union[str, Path]] = None) -> "Config":
        """Load configuration from file with fallback to defaults."""
        if config_path is None:
            possible_paths = [
                DEFAULT_CONFIG_PATH.expanduser(),
                Path("~/.config/binance-parqet/config.yml").expanduser(),
                Path("binance_parqet_config.yaml"),
                Path("binance_parqet_config.yml"),
            ]

            for path in possible_paths:
                if path.exists():
                    config_path = path
                    break

        if config_path is None:
            return cls()

        config_path = Path(config_path)

        if not config_path.exists():
            return cls()

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)

            if data is None:
                return cls()

            return cls(**data)

        except (yaml.YAMLError, ValueError, TypeError) as e:
            raise ValueError(f"Error loading config file {config_path}: {e}")

    @classmethod
    def load_from_env(cls, base: Optional["Config"] = None) -> "Config":
        """Load configuration from environment variables.

        Variables override the matching fields of ``base`` (or the defaults),
        e.g. ``BINANCE_PARQET_EMAIL``.
        """
        account = (base or cls()).account.model_dump()

        for field in AccountMetadata.model_fields:
            value = os.getenv(f"{ENV_PREFIX}{field.upper()}")
            if value:
                account[field] = value

        return cls(account=AccountMetadata(**account))

    def save_to_file(self, config_path: Union[str, Path]) -> None:
        """Save configuration to file."""
        config_path = Path(config_path)
        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = self.model_dump()

        with open(config_path, "w", encoding="utf-8") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    def preamble_lines(self) -> list[str]:
        """Lines that precede the column header in a Bitpanda export."""
        account = self.account
        return [
            "",
            '"Disclaimer: All data is without guarantee, errors and changes are reserved."',
            f'"{account.account_holder}"',
            account.email,
            f'"Account opened at: {account.account_opened}"',
            f'"Venue: {account.venue}"',
            f'"Reported by {account.reported_by}"',
        ]


def create_sample_config(config_path: Union[str, Path]) -> None:
    """Create a sample configuration file."""
    config_path = Path(config_path)

    Config().save_to_file(config_path)

    with open(config_path, "r", encoding="utf-8") as f:
        content = f.read()

    commented_content = f"""# Binance to Parqet Converter Configuration
# Edit this file to change the account details written to the output preamble

{content}
#
# Configuration Notes:
# - account: Metadata lines Bitpanda puts above the column header.
#   Parqet ignores them, so placeholders are fine.
#
# Environment variables BINANCE_PARQET_<FIELD> (e.g. BINANCE_PARQET_EMAIL)
# override values from this file.
"""

    with open(config_path, "w", encoding="utf-8") as f:
        f.write(commented_content)
