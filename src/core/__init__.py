"""Core module — config, types, logging."""

from src.core.config import Settings, get_settings, load_settings, reset_settings
from src.core.logging import setup_logging
from src.core.types import (
    DEFAULT_BRANCH_NAME,
    Branch,
    BuildContext,
    BuildTypeRef,
    CIEvent,
    CIEventType,
    ProjectRef,
)

__all__ = [
    "DEFAULT_BRANCH_NAME",
    "Branch",
    "BuildContext",
    "BuildTypeRef",
    "CIEvent",
    "CIEventType",
    "ProjectRef",
    "Settings",
    "get_settings",
    "load_settings",
    "reset_settings",
    "setup_logging",
]
