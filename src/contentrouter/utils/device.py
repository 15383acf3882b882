"""Device form-factor classification."""

import platform
from dataclasses import dataclass

from contentrouter.core.constants import DEFAULT_LARGE_SCREEN_MARKER, LARGE_SCREEN_IDIOM


@dataclass(frozen=True)
class DeviceProfile:
    """Description of the device the host application runs on.

    ``idiom`` follows the host platform's interface idiom naming, e.g.
    "phone" or "pad".
    """

    idiom: str = "phone"
    model: str = ""
    name: str = ""

    @classmethod
    def detect(cls) -> "DeviceProfile":
        """Best-effort profile of the current machine."""
        return cls(idiom="phone", model=platform.machine(), name=platform.node())

    def is_large_screen(self, marker: str = DEFAULT_LARGE_SCREEN_MARKER) -> bool:
        """A device counts as large-screen if any one of the three checks hits."""
        if self.idiom.lower() == LARGE_SCREEN_IDIOM:
            return True
        if not marker:
            return False
        return marker in self.model or marker in self.name
