"""Service layer for content-router.

This module provides the resolution coordinator and the services it relies
on: configuration, persistence and analytics.
"""

from .analytics import AnalyticsTracker
from .config_service import ConfigService
from .coordinator import ContentCoordinator
from .preferences_store import PreferencesStore

__all__ = [
    "AnalyticsTracker",
    "ConfigService",
    "ContentCoordinator",
    "PreferencesStore",
]
