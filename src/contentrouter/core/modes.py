"""Display mode and content variant models.

``DisplayMode`` is the single value published by the coordinator and
``ContentVariant`` selects which resolution policy it applies.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class ModeKind(str, Enum):
    """Kind of display mode."""

    LOADING = "loading"
    BASIC = "basic"
    ENHANCED = "enhanced"


@dataclass(frozen=True)
class DisplayMode:
    """Display mode published to the UI layer.

    ``path`` is only set for enhanced mode and holds either the remote URL
    to render or the blank-page sentinel.
    """

    kind: ModeKind
    path: Optional[str] = None

    @classmethod
    def loading(cls) -> "DisplayMode":
        return cls(ModeKind.LOADING)

    @classmethod
    def basic(cls) -> "DisplayMode":
        return cls(ModeKind.BASIC)

    @classmethod
    def enhanced(cls, path: str) -> "DisplayMode":
        return cls(ModeKind.ENHANCED, path)

    @property
    def is_terminal(self) -> bool:
        """Basic and enhanced are final for a launch."""
        return self.kind != ModeKind.LOADING

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {"mode": self.kind.value, "path": self.path}

    def __str__(self) -> str:
        if self.kind == ModeKind.ENHANCED:
            return f"enhanced({self.path})"
        return self.kind.value


class VariantKind(str, Enum):
    """Content source policy."""

    SOURCE_A = "source_a"  # remote JSON document carrying the destination URL
    SOURCE_B = "source_b"  # redirect chain with pathid refresh
    SOURCE_C = "source_c"  # like SOURCE_B, stricter validation and owner carve-out


# Names accepted in configuration files, including the legacy host names
VARIANT_ALIASES: Dict[str, VariantKind] = {
    "source_a": VariantKind.SOURCE_A,
    "dropbox": VariantKind.SOURCE_A,
    "source_b": VariantKind.SOURCE_B,
    "classic": VariantKind.SOURCE_B,
    "withoutlibandtest": VariantKind.SOURCE_B,
    "source_c": VariantKind.SOURCE_C,
    "privacy": VariantKind.SOURCE_C,
}


@dataclass(frozen=True)
class ContentVariant:
    """Content variant chosen once per coordinator.

    Only ``SOURCE_C`` carries an owner identifier.
    """

    kind: VariantKind
    owner_identifier: str = ""

    @classmethod
    def source_a(cls) -> "ContentVariant":
        return cls(VariantKind.SOURCE_A)

    @classmethod
    def source_b(cls) -> "ContentVariant":
        return cls(VariantKind.SOURCE_B)

    @classmethod
    def source_c(cls, owner_identifier: str) -> "ContentVariant":
        return cls(VariantKind.SOURCE_C, owner_identifier)

    @classmethod
    def from_name(cls, name: str, owner_identifier: str = "") -> "ContentVariant":
        """Build a variant from its configuration name.

        Args:
            name: Variant name, e.g. "dropbox", "classic" or "privacy"
            owner_identifier: Owner identifier, kept only for SOURCE_C

        Returns:
            ContentVariant instance

        Raises:
            ValueError: If the name is not a known variant
        """
        kind = VARIANT_ALIASES.get(name.strip().lower())
        if kind is None:
            raise ValueError(
                f"Unknown content variant '{name}' "
                f"(expected one of: {', '.join(sorted(VARIANT_ALIASES))})"
            )
        if kind == VariantKind.SOURCE_C:
            return cls(kind, owner_identifier)
        return cls(kind)

    def __str__(self) -> str:
        if self.kind == VariantKind.SOURCE_C:
            return f"{self.kind.value}({self.owner_identifier})"
        return self.kind.value
