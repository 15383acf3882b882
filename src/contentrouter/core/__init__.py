"""Core models and constants for content-router."""

from contentrouter.core.display_state import DisplayModeState
from contentrouter.core.modes import ContentVariant, DisplayMode, ModeKind, VariantKind

__all__ = [
    "ContentVariant",
    "DisplayMode",
    "DisplayModeState",
    "ModeKind",
    "VariantKind",
]
