"""Import settings.

Settings are resolved from the environment (optionally seeded from a ``.env``
by the CLI) and validated with pydantic:

- ``LEDGER_IMPORT_LEDGER_CURRENCY``: ISO code of the report's ledger currency
  (default ``USD``). It must appear in
  :data:`ledger_import.cells.CURRENCY_SYMBOLS` so its printed symbol is known.
"""

from __future__ import annotations

import os

from pydantic import BaseModel, ConfigDict, field_validator

from .cells import symbol_for_currency

LEDGER_CURRENCY_ENV_VAR = "LEDGER_IMPORT_LEDGER_CURRENCY"
DEFAULT_LEDGER_CURRENCY = "USD"


class ImportSettings(BaseModel):
    model_config = ConfigDict(strict=True, frozen=True, str_strip_whitespace=True)

    ledger_currency: str = DEFAULT_LEDGER_CURRENCY

    @field_validator("ledger_currency")
    @classmethod
    def _known_currency(cls, v: str) -> str:
        code = v.upper()
        if symbol_for_currency(code) is None:
            raise ValueError(f"unsupported ledger currency: {v!r}")
        return code

    @property
    def ledger_currency_symbol(self) -> str:
        symbol = symbol_for_currency(self.ledger_currency)
        if symbol is None:
            raise RuntimeError(f"no symbol known for {self.ledger_currency!r}")
        return symbol


def load_settings() -> ImportSettings:
    """Build settings from the environment."""

    env_val = os.getenv(LEDGER_CURRENCY_ENV_VAR)
    if env_val and env_val.strip():
        return ImportSettings(ledger_currency=env_val)
    return ImportSettings()


__all__ = ["DEFAULT_LEDGER_CURRENCY", "ImportSettings", "LEDGER_CURRENCY_ENV_VAR", "load_settings"]
