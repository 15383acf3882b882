"""Configuration schema and default values for content-router."""

from dataclasses import asdict, dataclass, field, fields
from datetime import date
from typing import Optional

from contentrouter.app_utils.paths import get_default_state_file
from contentrouter.core.constants import (
    DEFAULT_DISPLAY_DELAY,
    DEFAULT_ENHANCED_AVAILABLE_FROM,
    DEFAULT_LARGE_SCREEN_MARKER,
    DEFAULT_PROBE_HOST,
    DEFAULT_PROBE_INTERVAL,
    DEFAULT_PROBE_PORT,
    DEFAULT_RATING_PROMPT_DELAY,
    DEFAULT_REDIRECT_TIMEOUT,
    DEFAULT_VALIDATION_TIMEOUT,
)
from contentrouter.core.modes import ContentVariant
from contentrouter.utils.device import DeviceProfile


@dataclass
class SourceConfig:
    """Where remote content comes from and which policy resolves it."""

    url: str = ""
    variant: str = "dropbox"
    # Only used by the privacy variant
    owner_identifier: str = ""

    def __post_init__(self):
        # Raises ValueError for unknown names
        ContentVariant.from_name(self.variant, self.owner_identifier)

    def to_variant(self) -> ContentVariant:
        return ContentVariant.from_name(self.variant, self.owner_identifier)


@dataclass
class TimingConfig:
    """Artificial delays, in seconds."""

    # Loading screen duration before a freshly resolved mode is shown
    display_delay: float = DEFAULT_DISPLAY_DELAY
    # Wait before the rating prompt after the second enhanced launch
    rating_prompt_delay: float = DEFAULT_RATING_PROMPT_DELAY

    def __post_init__(self):
        if self.display_delay < 0:
            raise ValueError(
                f"display_delay must be non-negative, got {self.display_delay}"
            )
        if self.rating_prompt_delay < 0:
            raise ValueError(
                "rating_prompt_delay must be non-negative, "
                f"got {self.rating_prompt_delay}"
            )


@dataclass
class RolloutConfig:
    """Date gate for enhanced mode."""

    # ISO date; enhanced mode is never shown before this day
    enhanced_available_from: str = DEFAULT_ENHANCED_AVAILABLE_FROM.isoformat()

    def __post_init__(self):
        if isinstance(self.enhanced_available_from, date):
            self.enhanced_available_from = self.enhanced_available_from.isoformat()
        try:
            date.fromisoformat(self.enhanced_available_from)
        except (TypeError, ValueError):
            raise ValueError(
                "enhanced_available_from must be an ISO date (YYYY-MM-DD), "
                f"got {self.enhanced_available_from!r}"
            )

    @property
    def gate_date(self) -> date:
        return date.fromisoformat(self.enhanced_available_from)


@dataclass
class NetworkConfig:
    """Timeouts and reachability probe settings."""

    # Redirect resolution and remote document fetch
    request_timeout: float = DEFAULT_REDIRECT_TIMEOUT
    # HEAD validation of resolved URLs
    validation_timeout: float = DEFAULT_VALIDATION_TIMEOUT
    probe_host: str = DEFAULT_PROBE_HOST
    probe_port: int = DEFAULT_PROBE_PORT
    probe_interval: float = DEFAULT_PROBE_INTERVAL

    def __post_init__(self):
        for name in ("request_timeout", "validation_timeout", "probe_interval"):
            value = getattr(self, name)
            if value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")
        if not 0 <= self.probe_port <= 65535:
            raise ValueError(f"probe_port must be in 0-65535, got {self.probe_port}")


@dataclass
class DeviceConfig:
    """Device description used by the large-screen guard."""

    idiom: str = "phone"
    model: str = ""
    name: str = ""
    large_screen_marker: str = DEFAULT_LARGE_SCREEN_MARKER

    def to_profile(self) -> DeviceProfile:
        return DeviceProfile(idiom=self.idiom, model=self.model, name=self.name)


@dataclass
class StorageConfig:
    """Persistence settings."""

    # Empty means the default location under the user data directory
    state_file: str = ""

    def resolved_state_file(self) -> str:
        return self.state_file or str(get_default_state_file())


@dataclass
class ContentRouterConfig:
    """Main configuration for content-router."""

    source: SourceConfig = field(default_factory=SourceConfig)
    timing: TimingConfig = field(default_factory=TimingConfig)
    rollout: RolloutConfig = field(default_factory=RolloutConfig)
    network: NetworkConfig = field(default_factory=NetworkConfig)
    device: DeviceConfig = field(default_factory=DeviceConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)

    def to_dict(self) -> dict:
        """Convert config to dictionary for YAML serialization."""
        return {
            "source": asdict(self.source),
            "timing": asdict(self.timing),
            "rollout": asdict(self.rollout),
            "network": asdict(self.network),
            "device": asdict(self.device),
            "storage": asdict(self.storage),
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "ContentRouterConfig":
        """Create config from dictionary (loaded from YAML)."""
        data = data or {}

        def _filter(cls_, data_):
            """Filter dict to only include known dataclass fields."""
            known = {f.name for f in fields(cls_)}
            return {k: v for k, v in (data_ or {}).items() if k in known}

        return cls(
            source=SourceConfig(**_filter(SourceConfig, data.get("source"))),
            timing=TimingConfig(**_filter(TimingConfig, data.get("timing"))),
            rollout=RolloutConfig(**_filter(RolloutConfig, data.get("rollout"))),
            network=NetworkConfig(**_filter(NetworkConfig, data.get("network"))),
            device=DeviceConfig(**_filter(DeviceConfig, data.get("device"))),
            storage=StorageConfig(**_filter(StorageConfig, data.get("storage"))),
        )

    @classmethod
    def create_default(cls) -> "ContentRouterConfig":
        return cls()
