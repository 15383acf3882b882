"""Core constants for content-router.

This module defines the persisted key names and the default values shared
by the coordinator, the configuration schema and the CLI.
"""

from datetime import date

# Persisted keys (stable across releases, never renamed)
CONTENT_IDENTIFIER_KEY = "contentIdentifier"
"""Cached resolved destination URL, stored without the pathid parameter."""

DISPLAY_MODE_FLAG_KEY = "displayModeFlag"
"""Set once basic mode has been shown; forces basic on later launches."""

DROPBOX_FAILED_KEY = "dropboxFailedKey"
"""Set once the remote JSON document variant has failed."""

ACCESS_COUNT_KEY = "accessCountKey"
"""Number of launches that reached enhanced mode."""

CLASSIC_PATH_ID_KEY = "classicPathIdKey"
PRIVACY_PATH_ID_KEY = "privacyPathIdKey"

PRIVACY_VALIDATED_ONCE_KEY = "privacyValidatedOnceKey"
"""Set after the first successful validation of the privacy variant."""

PERSISTED_KEYS = (
    CONTENT_IDENTIFIER_KEY,
    DISPLAY_MODE_FLAG_KEY,
    DROPBOX_FAILED_KEY,
    ACCESS_COUNT_KEY,
    CLASSIC_PATH_ID_KEY,
    PRIVACY_PATH_ID_KEY,
    PRIVACY_VALIDATED_ONCE_KEY,
)

# URL handling
PATH_ID_PARAM = "pathid"
BLANK_PAGE = "about:blank"

# Status acceptance
ACCEPTED_STATUS_MIN = 200
ACCEPTED_STATUS_MAX = 403
FIRST_VALIDATION_EXTRA_STATUS = 405
STRICT_ACCEPTED_STATUS = 200
UNREACHABLE_STATUS = 0
"""Returned by the endpoint validator when no HTTP status is available."""

# Timing defaults (seconds)
DEFAULT_DISPLAY_DELAY = 1.5
DEFAULT_RATING_PROMPT_DELAY = 2.0
DEFAULT_REDIRECT_TIMEOUT = 15.0
DEFAULT_VALIDATION_TIMEOUT = 10.0

RATING_PROMPT_ACCESS_COUNT = 2
"""Enhanced access count at which the rating prompt is requested."""

DEFAULT_ENHANCED_AVAILABLE_FROM = date(2025, 9, 1)

# Reachability probe
DEFAULT_PROBE_HOST = "8.8.8.8"
DEFAULT_PROBE_PORT = 80
DEFAULT_PROBE_INTERVAL = 1.0

# Device classification
LARGE_SCREEN_IDIOM = "pad"
DEFAULT_LARGE_SCREEN_MARKER = "iPad"

# Analytics
BASIC_LAUNCH_EVENT = "onboarding_launch"
