"""Startup gate: decide between normal operation and the setup workflow.

The host calls ``resolve_startup()`` once after ``load_config()``.  A site
that is not installed, or whose backing store lacks a required setting, must
be routed to setup instead of serving pages.  The setup workflow writes
``Installed`` back through ``mark_installed()``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List

from roadkill_config.application.ports import RoadkillConfiguration, SettingsStore
from roadkill_config.config.loader import load_configuration, save_configuration
from roadkill_config.config.schema import RoadkillSettings
from roadkill_config.domain.errors import SetupRequiredError

logger = logging.getLogger(__name__)


class StartupMode(str, Enum):
    NORMAL = "normal"
    SETUP = "setup"


@dataclass(frozen=True)
class StartupDecision:
    """Outcome of the startup gate.

    Fields:
        mode: ``NORMAL`` or ``SETUP``.
        missing: Store keys of required settings absent from the backing store.
        reason: Why setup is needed; empty in normal mode.
    """

    mode: StartupMode
    missing: List[str] = field(default_factory=list)
    reason: str = ""

    @property
    def requires_setup(self) -> bool:
        return self.mode is StartupMode.SETUP


def resolve_startup(config: RoadkillConfiguration) -> StartupDecision:
    missing = config.missing_required()
    if not config.get("Installed"):
        return StartupDecision(StartupMode.SETUP, missing, "Site is not installed yet.")
    if missing:
        return StartupDecision(
            StartupMode.SETUP,
            missing,
            "Required settings missing: " + ", ".join(missing),
        )
    return StartupDecision(StartupMode.NORMAL)


def require_normal_operation(config: RoadkillConfiguration) -> None:
    """Raise ``SetupRequiredError`` unless *config* allows normal operation."""
    decision = resolve_startup(config)
    if decision.requires_setup:
        logger.warning("Setup required: %s", decision.reason)
        raise SetupRequiredError(decision.reason, decision.missing)


def _write_installed(config: RoadkillSettings, store: SettingsStore, installed: bool) -> RoadkillSettings:
    config.set("Installed", installed)
    save_configuration(config, store)
    return load_configuration(store)


def mark_installed(config: RoadkillSettings, store: SettingsStore) -> RoadkillSettings:
    """Finish setup: persist ``Installed = true`` and return the re-loaded settings."""
    logger.info("Marking site as installed")
    return _write_installed(config, store, True)


def reset_installed_state(config: RoadkillSettings, store: SettingsStore) -> RoadkillSettings:
    """Send the site back to setup on next start: persist ``Installed = false``."""
    logger.info("Resetting installed state")
    return _write_installed(config, store, False)
