"""
Pytest configuration and shared fixtures.
"""

from datetime import datetime
from typing import Optional
from unittest.mock import AsyncMock, Mock

import pytest

from contentrouter.core.modes import ContentVariant
from contentrouter.services.analytics import AnalyticsTracker
from contentrouter.services.coordinator import ContentCoordinator
from contentrouter.services.preferences_store import PreferencesStore

SOURCE_URL = "https://start.example.com/rk6YvX"

# ============================================================================
# Persistence Fixtures
# ============================================================================


@pytest.fixture
def state_file(tmp_path):
    """Path of a not-yet-created state file."""
    return tmp_path / "state.json"


@pytest.fixture
def store(state_file):
    """Empty preferences store backed by a temp file."""
    return PreferencesStore(state_file)


# ============================================================================
# Coordinator Fixtures
# ============================================================================


@pytest.fixture
def make_coordinator(store):
    """Factory for coordinators wired to mock collaborators.

    Collaborators default to "network reachable, everything else fails".
    Every mock is exposed on the returned coordinator as ``mocks``.
    """

    def _make(
        variant: Optional[ContentVariant] = None,
        source_url: str = SOURCE_URL,
        reachable: bool = True,
        resolver: Optional[AsyncMock] = None,
        validator: Optional[AsyncMock] = None,
        fetcher: Optional[AsyncMock] = None,
        now: datetime = datetime(2026, 1, 15, 12, 0),
        **kwargs,
    ) -> ContentCoordinator:
        mocks = Mock()
        mocks.reachability = AsyncMock(return_value=reachable)
        mocks.resolver = resolver or AsyncMock(return_value=None)
        mocks.validator = validator or AsyncMock(return_value=0)
        mocks.fetcher = fetcher or AsyncMock(return_value=None)
        mocks.rating_prompt = Mock()
        mocks.sleep = AsyncMock()

        coordinator = ContentCoordinator(
            source_url,
            store,
            variant or ContentVariant.source_b(),
            reachability=mocks.reachability,
            redirect_resolver=mocks.resolver,
            endpoint_validator=mocks.validator,
            document_fetcher=mocks.fetcher,
            analytics=AnalyticsTracker(),
            rating_prompt=mocks.rating_prompt,
            clock=lambda: now,
            sleep=mocks.sleep,
            **kwargs,
        )
        coordinator.mocks = mocks
        return coordinator

    return _make


# ============================================================================
# aiohttp Mock Helpers
# ============================================================================


def _make_response(status=200, url="https://example.com/", history=(), headers=None):
    """Create a mock aiohttp response."""
    response = AsyncMock()
    response.status = status
    response.url = url
    response.history = [Mock(url=hop) for hop in history]
    response.headers = headers or {}
    return response


def _make_session(method: str, response=None, side_effect=None):
    """Create a mock session whose ``method`` returns an async context manager."""
    # Use Mock (not AsyncMock) for the context manager itself
    mock_cm = Mock()
    mock_cm.__aenter__ = AsyncMock(return_value=response)
    mock_cm.__aexit__ = AsyncMock(return_value=None)

    session = Mock()
    request = getattr(session, method)
    if side_effect is not None:
        request.side_effect = side_effect
    else:
        request.return_value = mock_cm
    return session


@pytest.fixture
def mock_response():
    """Factory for mock aiohttp responses."""
    return _make_response


@pytest.fixture
def mock_session():
    """Factory for mock aiohttp sessions."""
    return _make_session
