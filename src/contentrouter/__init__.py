"""
content-router: launch-time display mode resolution

Decides whether a host application shows its native UI or remote content,
resolving redirect chains and caching what later launches need.
"""

from contentrouter.core import ContentVariant, DisplayMode, DisplayModeState
from contentrouter.services import ContentCoordinator, PreferencesStore

__version__ = "0.1.0"

__all__ = [
    "ContentCoordinator",
    "ContentVariant",
    "DisplayMode",
    "DisplayModeState",
    "PreferencesStore",
]
