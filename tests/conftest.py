"""Pytest configuration and shared export fixtures.

Settings are read from ``LEDGER_IMPORT_*`` environment variables (and the CLI
additionally seeds them from a ``.env`` in the working directory). To keep
tests hermetic, an autouse fixture removes any such variables and moves each
test into its own temporary working directory.
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from tests.helpers.exports import GLOBAL_EXPORT, PER_ACCOUNT_EXPORT


@pytest.fixture(autouse=True)
def _isolate_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop ``LEDGER_IMPORT_*`` variables and run from a scratch directory.

    The CLI loads ``.env`` from the current working directory; running from the
    test's own temporary directory keeps a developer's ``.env`` out of the way.
    """

    for name in list(os.environ):
        if name.startswith("LEDGER_IMPORT_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def global_export() -> str:
    return GLOBAL_EXPORT


@pytest.fixture
def per_account_export() -> str:
    return PER_ACCOUNT_EXPORT


@pytest.fixture
def write_export(tmp_path: Path):
    """Write export text to a file under ``tmp_path`` and return its path."""

    def _write(text: str | bytes, name: str = "export.csv") -> Path:
        path = tmp_path / name
        if isinstance(text, bytes):
            path.write_bytes(text)
        else:
            path.write_text(text, encoding="utf-8", newline="")
        return path

    return _write
