"""Network collaborators and helpers used by the coordinator."""

from .device import DeviceProfile
from .endpoint_validator import validate_endpoint
from .reachability import PathMonitor, ReachabilityProbe, is_network_available
from .redirect_resolver import RedirectResult, RedirectTrace, resolve_redirects
from .remote_document import fetch_remote_document_url

__all__ = [
    "DeviceProfile",
    "PathMonitor",
    "ReachabilityProbe",
    "RedirectResult",
    "RedirectTrace",
    "fetch_remote_document_url",
    "is_network_available",
    "resolve_redirects",
    "validate_endpoint",
]
