"""Pytest fixtures and helpers for roadkill-config tests."""
from __future__ import annotations

import os
from typing import Any, Dict

import pytest

from roadkill_config.config import loader as config_loader
from roadkill_config.config.loader import load_config


def installed_store() -> Dict[str, Any]:
    """A store with every required setting and no optional ones."""
    return {
        "ConnectionString": "Server=x",
        "Installed": True,
        "AdminRoleName": "Admins",
        "EditorRoleName": "Editors",
        "UseWindowsAuthentication": False,
        "ApiKeys": "",
    }


@pytest.fixture
def store_values() -> Dict[str, Any]:
    return installed_store()


@pytest.fixture(autouse=True)
def _reset_config_env(monkeypatch):
    """Drop ROADKILL_* variables and clear the load_config cache around every test.

    Keeps a developer's own environment (or a previous test) from leaking
    overrides into the settings under test.
    """
    for name in list(os.environ):
        if name.upper().startswith("ROADKILL_"):
            monkeypatch.delenv(name, raising=False)
    load_config.cache_clear()
    monkeypatch.setattr(config_loader, "_env", None)
    yield
    load_config.cache_clear()
