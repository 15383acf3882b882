"""Launch-time resolution of the display mode.

The coordinator runs once per launch. It checks a few entry guards, then
applies the policy of its content variant to decide between basic mode
(native UI only) and enhanced mode (remote content at a resolved URL), and
persists what the next launch needs to take a fast path.

Every collaborator that touches the network is injectable so hosts and tests
can replace it; the defaults are the aiohttp implementations in
``contentrouter.utils``.
"""

import asyncio
import logging
from datetime import date, datetime
from functools import partial
from typing import Awaitable, Callable, Optional

from contentrouter.app_utils.config_schema import ContentRouterConfig
from contentrouter.core.constants import (
    ACCEPTED_STATUS_MAX,
    ACCEPTED_STATUS_MIN,
    ACCESS_COUNT_KEY,
    BASIC_LAUNCH_EVENT,
    BLANK_PAGE,
    CLASSIC_PATH_ID_KEY,
    CONTENT_IDENTIFIER_KEY,
    DEFAULT_DISPLAY_DELAY,
    DEFAULT_ENHANCED_AVAILABLE_FROM,
    DEFAULT_LARGE_SCREEN_MARKER,
    DEFAULT_RATING_PROMPT_DELAY,
    DISPLAY_MODE_FLAG_KEY,
    DROPBOX_FAILED_KEY,
    FIRST_VALIDATION_EXTRA_STATUS,
    PRIVACY_PATH_ID_KEY,
    PRIVACY_VALIDATED_ONCE_KEY,
    RATING_PROMPT_ACCESS_COUNT,
    STRICT_ACCEPTED_STATUS,
)
from contentrouter.core.display_state import DisplayModeState, Observer
from contentrouter.core.modes import ContentVariant, DisplayMode, ModeKind, VariantKind
from contentrouter.services.analytics import AnalyticsTracker, log_rating_prompt
from contentrouter.services.preferences_store import PreferencesStore
from contentrouter.utils.device import DeviceProfile
from contentrouter.utils.endpoint_validator import validate_endpoint
from contentrouter.utils.reachability import ReachabilityProbe
from contentrouter.utils.redirect_resolver import RedirectResult, resolve_redirects
from contentrouter.utils.remote_document import fetch_remote_document_url
from contentrouter.utils.url_utils import (
    append_path_id,
    contains_owner_identifier,
    is_saving_allowed,
    strip_path_id,
)

logger = logging.getLogger(__name__)

ReachabilityCheck = Callable[[], Awaitable[bool]]
RedirectResolver = Callable[[str], Awaitable[Optional[RedirectResult]]]
EndpointValidator = Callable[[str], Awaitable[int]]
DocumentFetcher = Callable[[str], Awaitable[Optional[str]]]


def is_accepted_status(status: int) -> bool:
    """Acceptance range shared by the redirect variants (0 never passes)."""
    return ACCEPTED_STATUS_MIN <= status <= ACCEPTED_STATUS_MAX


def is_privacy_status_accepted(status: int, validated_once: bool) -> bool:
    """Privacy variant acceptance.

    Until the first successful validation, anything in 200-403 or exactly 405
    passes; afterwards only exactly 200.
    """
    if validated_once:
        return status == STRICT_ACCEPTED_STATUS
    return is_accepted_status(status) or status == FIRST_VALIDATION_EXTRA_STATUS


class ContentCoordinator:
    """Decides and publishes the display mode for one launch.

    The published mode starts as loading and settles exactly once on basic or
    enhanced. ``handle_404_error`` is the only way to change a settled mode.
    """

    def __init__(
        self,
        source_url: str,
        store: PreferencesStore,
        variant: Optional[ContentVariant] = None,
        *,
        display_delay: float = DEFAULT_DISPLAY_DELAY,
        rating_prompt_delay: float = DEFAULT_RATING_PROMPT_DELAY,
        enhanced_available_from: date = DEFAULT_ENHANCED_AVAILABLE_FROM,
        device: Optional[DeviceProfile] = None,
        large_screen_marker: str = DEFAULT_LARGE_SCREEN_MARKER,
        reachability: Optional[ReachabilityCheck] = None,
        redirect_resolver: Optional[RedirectResolver] = None,
        endpoint_validator: Optional[EndpointValidator] = None,
        document_fetcher: Optional[DocumentFetcher] = None,
        analytics: Optional[AnalyticsTracker] = None,
        rating_prompt: Optional[Callable[[], None]] = None,
        clock: Callable[[], datetime] = datetime.now,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.source_url = source_url
        self.store = store
        self.variant = variant if variant is not None else ContentVariant.source_a()
        self.display_delay = display_delay
        self.rating_prompt_delay = rating_prompt_delay
        self.enhanced_available_from = enhanced_available_from
        self.device = device if device is not None else DeviceProfile()
        self.large_screen_marker = large_screen_marker

        self._reachability = reachability or ReachabilityProbe()
        self._resolve_redirects = redirect_resolver or resolve_redirects
        self._validate_endpoint = endpoint_validator or validate_endpoint
        self._fetch_document = document_fetcher or fetch_remote_document_url
        self.analytics = analytics if analytics is not None else AnalyticsTracker()
        self._rating_prompt = rating_prompt or log_rating_prompt
        self._clock = clock
        self._sleep = sleep

        self.state = DisplayModeState()
        self._task: Optional[asyncio.Task] = None
        self._basic_event_recorded = False
        self._rating_prompt_scheduled = False
        self.rating_prompt_task: Optional[asyncio.Task] = None

        logger.info(f"Coordinator created for variant {self.variant}")

    @classmethod
    def from_config(
        cls,
        config: ContentRouterConfig,
        store: Optional[PreferencesStore] = None,
        **overrides,
    ) -> "ContentCoordinator":
        """Build a coordinator wired to the aiohttp collaborators.

        Args:
            config: Loaded configuration
            store: Preferences store; defaults to the configured state file
            **overrides: Keyword arguments passed through to the constructor

        Returns:
            ContentCoordinator instance
        """
        network = config.network
        kwargs = {
            "display_delay": config.timing.display_delay,
            "rating_prompt_delay": config.timing.rating_prompt_delay,
            "enhanced_available_from": config.rollout.gate_date,
            "device": config.device.to_profile(),
            "large_screen_marker": config.device.large_screen_marker,
            "reachability": ReachabilityProbe(
                network.probe_host, network.probe_port, network.probe_interval
            ),
            "redirect_resolver": partial(
                resolve_redirects, timeout=network.request_timeout
            ),
            "endpoint_validator": partial(
                validate_endpoint, timeout=network.validation_timeout
            ),
            "document_fetcher": partial(
                fetch_remote_document_url, timeout=network.request_timeout
            ),
        }
        kwargs.update(overrides)
        if store is None:
            store = PreferencesStore(config.storage.resolved_state_file())
        return cls(config.source.url, store, config.source.to_variant(), **kwargs)

    # ------------------------------------------------------------------
    # Public surface
    # ------------------------------------------------------------------

    @property
    def display_mode(self) -> DisplayMode:
        return self.state.value

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        return self.state.subscribe(observer)

    def launch(self) -> asyncio.Task:
        """Start resolution on the running loop; later calls return the same task."""
        if self._task is None:
            self._task = asyncio.get_running_loop().create_task(self._run())
        return self._task

    async def resolve(self) -> DisplayMode:
        """Run (or join) this launch's resolution and return the settled mode."""
        return await self.launch()

    def handle_404_error(self) -> None:
        """Called by the UI when loaded remote content reports a client error."""
        logger.info("Remote content reported a client error, switching to basic")
        self._activate_basic(force=True)

    # ------------------------------------------------------------------
    # Decision flow
    # ------------------------------------------------------------------

    async def _run(self) -> DisplayMode:
        reason = await self._entry_guard_reason()
        if reason is not None:
            logger.info(f"Entry guard hit ({reason}), activating basic")
            await self._delay()
            self._activate_basic()
            return self.display_mode

        if self.variant.kind == VariantKind.SOURCE_A:
            await self._handle_remote_document()
        elif self.variant.kind == VariantKind.SOURCE_B:
            await self._handle_redirect_chain()
        else:
            await self._handle_privacy(self.variant.owner_identifier)
        return self.display_mode

    async def _entry_guard_reason(self) -> Optional[str]:
        """Return why enhanced mode is ruled out before any variant logic, or None."""
        if not self.source_url.strip():
            return "empty source URL"
        if self.device.is_large_screen(self.large_screen_marker):
            return "large-screen device"
        today = self._clock().date()
        if today < self.enhanced_available_from:
            return f"before rollout date {self.enhanced_available_from.isoformat()}"
        if not await self._reachability():
            return "no network"
        return None

    async def _handle_remote_document(self) -> None:
        if self.store.get_bool(DROPBOX_FAILED_KEY):
            logger.info("Remote document failed before, activating basic")
            await self._delay()
            self._activate_basic()
            return

        # Nothing in this variant writes the cached URL; the read stays for
        # state carried over from a redirect variant
        cached = self.store.get_string(CONTENT_IDENTIFIER_KEY)
        if cached:
            logger.info(f"Using cached URL: {cached}")
            await self._delay()
            self._activate_enhanced(cached, track=True)
            return

        url = await self._fetch_document(self.source_url)
        if url:
            logger.info(f"Remote document URL loaded: {url}")
            await self._delay()
            self._activate_enhanced(url, track=True)
            return

        logger.info("Remote document empty or failed, activating basic")
        self.store.set(DROPBOX_FAILED_KEY, True)
        await self._delay()
        self._activate_basic()

    async def _handle_redirect_chain(self) -> None:
        if self.store.get_bool(DISPLAY_MODE_FLAG_KEY):
            logger.info("Basic was shown before, activating basic")
            await self._delay()
            self._activate_basic()
            return

        cached = self.store.get_string(CONTENT_IDENTIFIER_KEY)
        if cached:
            await self._revalidate_redirect_chain(cached)
        else:
            await self._first_redirect_chain()

    async def _revalidate_redirect_chain(self, cached: str) -> None:
        status = await self._validate_endpoint(cached)
        logger.info(f"Cached URL status: {status}")
        if is_accepted_status(status):
            await self._delay()
            self._activate_enhanced(cached, track=True)
            return

        logger.info("Cached URL invalid, refreshing by pathid")
        new_url = await self._refresh_via_path_id(CLASSIC_PATH_ID_KEY)
        if new_url is None:
            logger.info("Refresh failed, opening blank page")
            self._activate_enhanced(BLANK_PAGE)
            return

        new_status = await self._validate_endpoint(new_url)
        logger.info(f"Refreshed URL status: {new_status}")
        if not is_accepted_status(new_status):
            logger.info("Refreshed URL invalid, opening blank page")
            self._activate_enhanced(BLANK_PAGE)
            return

        self._save_if_allowed(new_url)
        await self._delay()
        self._activate_enhanced(new_url, track=True)

    async def _first_redirect_chain(self) -> None:
        result = await self._resolve_redirects(self.source_url)
        if result is None:
            logger.info("Source URL could not be resolved, activating basic")
            await self._delay()
            self._activate_basic()
            return

        if result.path_id:
            self.store.set(CLASSIC_PATH_ID_KEY, result.path_id)
            logger.info(f"pathid saved: {result.path_id}")

        status = await self._validate_endpoint(result.final_url)
        logger.info(f"Final URL status: {status}")
        if not is_accepted_status(status):
            await self._delay()
            self._activate_basic()
            return

        self._save_if_allowed(result.final_url)
        await self._delay()
        self._activate_enhanced(result.final_url, track=True)

    async def _handle_privacy(self, owner_identifier: str) -> None:
        if self.store.get_bool(DISPLAY_MODE_FLAG_KEY):
            logger.info("Basic was shown before, activating basic")
            await self._delay()
            self._activate_basic()
            return

        cached = self.store.get_string(CONTENT_IDENTIFIER_KEY)
        if cached:
            await self._revalidate_privacy(cached)
        else:
            await self._first_privacy(owner_identifier)

    async def _revalidate_privacy(self, cached: str) -> None:
        validated_once = self.store.get_bool(PRIVACY_VALIDATED_ONCE_KEY)
        status = await self._validate_endpoint(cached)
        logger.info(
            f"Cached URL status: {status} ({'next' if validated_once else 'first'})"
        )
        if is_privacy_status_accepted(status, validated_once):
            await self._delay()
            self._activate_enhanced(cached, track=True)
            self.store.set(PRIVACY_VALIDATED_ONCE_KEY, True)
            return

        logger.info("Cached URL invalid, refreshing by pathid")
        new_url = await self._refresh_via_path_id(PRIVACY_PATH_ID_KEY)
        if new_url is None:
            logger.info("Refresh failed, keeping cached URL")
            self._activate_enhanced(cached)
            return

        stripped = strip_path_id(new_url)
        self.store.set(CONTENT_IDENTIFIER_KEY, stripped)
        logger.info(f"Updated URL saved: {stripped}")

        new_status = await self._validate_endpoint(new_url)
        logger.info(f"Refreshed URL status: {new_status}")
        if is_privacy_status_accepted(new_status, validated_once):
            await self._delay()
            self._activate_enhanced(new_url, track=True)
            self.store.set(PRIVACY_VALIDATED_ONCE_KEY, True)
            return

        fallback = self._path_id_url(PRIVACY_PATH_ID_KEY)
        if fallback is not None:
            logger.info(f"Refreshed URL invalid, opening pathid fallback {fallback}")
            self._activate_enhanced(fallback)
        else:
            logger.info("Refreshed URL invalid and no fallback, opening it anyway")
            self._activate_enhanced(new_url)

    async def _first_privacy(self, owner_identifier: str) -> None:
        result = await self._resolve_redirects(self.source_url)
        if result is None:
            logger.info("Source URL could not be resolved, activating basic")
            await self._delay()
            self._activate_basic()
            return

        if result.path_id:
            self.store.set(PRIVACY_PATH_ID_KEY, result.path_id)
            logger.info(f"pathid saved: {result.path_id}")

        if contains_owner_identifier(result.final_url, owner_identifier):
            logger.info("Owner identifier found in final URL, activating basic")
            await self._delay()
            self._activate_basic()
            return

        validated_once = self.store.get_bool(PRIVACY_VALIDATED_ONCE_KEY)
        status = await self._validate_endpoint(result.final_url)
        logger.info(f"Final URL status: {status}")
        if not is_privacy_status_accepted(status, validated_once):
            await self._delay()
            self._activate_basic()
            return

        stripped = strip_path_id(result.final_url)
        self.store.set(CONTENT_IDENTIFIER_KEY, stripped)
        logger.info(f"Final URL saved: {stripped}")
        await self._delay()
        self._activate_enhanced(result.final_url, track=True)
        self.store.set(PRIVACY_VALIDATED_ONCE_KEY, True)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _path_id_url(self, key: str) -> Optional[str]:
        """Source URL with the stored pathid appended, or None."""
        path_id = self.store.get_string(key)
        if not path_id:
            return None
        return append_path_id(self.source_url, path_id)

    async def _refresh_via_path_id(self, key: str) -> Optional[str]:
        """Resolve the source URL with the stored pathid appended."""
        start_url = self._path_id_url(key)
        if start_url is None:
            logger.info("No stored pathid to refresh with")
            return None

        logger.info(f"Refresh start: {start_url}")
        result = await self._resolve_redirects(start_url)
        if result is None:
            return None
        logger.info(f"Refresh final: {result.final_url}")
        return result.final_url

    def _save_if_allowed(self, url: str) -> None:
        stripped = strip_path_id(url)
        if is_saving_allowed(stripped, self.source_url):
            self.store.set(CONTENT_IDENTIFIER_KEY, stripped)
            logger.info(f"URL saved: {stripped}")
        else:
            logger.info(f"Skipping save of {stripped} (same base domain as source)")

    async def _delay(self) -> None:
        await self._sleep(self.display_delay)

    def _activate_basic(self, force: bool = False) -> None:
        current = self.state.value
        if current.kind == ModeKind.BASIC:
            return
        if current.is_terminal and not force:
            logger.warning(f"Not switching to basic: already settled on {current}")
            return

        if self.variant.kind != VariantKind.SOURCE_A:
            self.store.set(DISPLAY_MODE_FLAG_KEY, True)

        self.state.publish(DisplayMode.basic(), force=force)
        logger.info("Display mode: basic")

        if not self._basic_event_recorded:
            self._basic_event_recorded = True
            self.analytics.track_event(
                BASIC_LAUNCH_EVENT, variant=self.variant.kind.value
            )

    def _activate_enhanced(self, path: str, track: bool = False) -> None:
        if self.state.is_terminal:
            logger.warning(
                f"Not switching to enhanced: already settled on {self.state.value}"
            )
            return

        self.state.publish(DisplayMode.enhanced(path))
        logger.info(f"Display mode: enhanced({path})")
        if track:
            self._track_enhanced_access()

    def _track_enhanced_access(self) -> None:
        access_count = self.store.get_int(ACCESS_COUNT_KEY) + 1
        self.store.set(ACCESS_COUNT_KEY, access_count)
        logger.info(f"Enhanced access count: {access_count}")

        if access_count != RATING_PROMPT_ACCESS_COUNT or self._rating_prompt_scheduled:
            return
        self._rating_prompt_scheduled = True
        self.rating_prompt_task = asyncio.get_running_loop().create_task(
            self._request_rating()
        )
        self.rating_prompt_task.add_done_callback(self._on_rating_prompt_done)

    async def _request_rating(self) -> None:
        await self._sleep(self.rating_prompt_delay)
        logger.info("Showing rating prompt")
        self._rating_prompt()

    @staticmethod
    def _on_rating_prompt_done(task: asyncio.Task) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Rating prompt failed: {error}", exc_info=error)
