"""Shared pytest fixtures for cclip tests."""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

import pytest

from cclip.config import get_settings

if TYPE_CHECKING:
    from collections.abc import Generator
    from pathlib import Path


@pytest.fixture(autouse=True)
def isolated_settings(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> Generator[None]:
    """Run every test away from real .env files and CCLIP_ variables.

    Settings are cached, so the cache is cleared before and after.
    """
    for name in list(os.environ):
        if name.startswith("CCLIP_"):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def _reset_cclip_log_handlers() -> Generator[None]:
    """Remove handlers installed by cclip.setup_logging during a test."""
    yield
    root = logging.getLogger()
    for handler in list(root.handlers):
        if handler.get_name() == "cclip":
            root.removeHandler(handler)
            handler.close()
