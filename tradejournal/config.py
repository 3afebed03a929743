"""Configuration for TradeJournal.

Built-in defaults live here as constants. An optional TOML file can
override the user-facing ones:

    [defaults]
    currency = "USD"
    asset_class = "stock"

    [display]
    currency_symbol = "$"
"""

import logging
import os
from pathlib import Path
from typing import Optional

import toml
from pydantic import BaseModel, Field, ValidationError

from tradejournal.models.enums import AssetClass, TradeStatus

logger = logging.getLogger(__name__)

DEFAULT_CURRENCY = "USD"
DEFAULT_ASSET_CLASS = AssetClass.STOCK
DEFAULT_CURRENCY_SYMBOL = "$"
DEFAULT_TRADE_STATUS = TradeStatus.CLOSED

CONFIG_ENV_VAR = "TRADEJOURNAL_CONFIG"


class Settings(BaseModel):
    """Resolved user settings."""

    currency: str = Field(default=DEFAULT_CURRENCY, min_length=1)
    asset_class: AssetClass = Field(default=DEFAULT_ASSET_CLASS)
    currency_symbol: str = Field(default=DEFAULT_CURRENCY_SYMBOL)

    model_config = {"frozen": True}


def get_config_path() -> Path:
    """Location of the config file, honouring TRADEJOURNAL_CONFIG."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override)
    return Path.home() / ".config" / "tradejournal" / "config.toml"


def load_settings(config_path: Optional[Path] = None) -> Settings:
    """Load settings, falling back to defaults.

    A missing, unreadable or invalid file is not an error; the defaults
    are used and the problem is logged.

    Args:
        config_path: Explicit file to read. Defaults to ``get_config_path()``.
    """
    path = config_path or get_config_path()

    if not path.exists():
        return Settings()

    try:
        raw = toml.load(path)
    except (OSError, toml.TomlDecodeError) as e:
        logger.warning("Could not read config %s: %s", path, e)
        return Settings()

    defaults = raw.get("defaults", {})
    display = raw.get("display", {})
    values = {
        "currency": defaults.get("currency", DEFAULT_CURRENCY),
        "asset_class": defaults.get("asset_class", DEFAULT_ASSET_CLASS),
        "currency_symbol": display.get("currency_symbol", DEFAULT_CURRENCY_SYMBOL),
    }

    try:
        return Settings(**values)
    except ValidationError as e:
        logger.warning("Ignoring invalid config %s: %s", path, e)
        return Settings()
