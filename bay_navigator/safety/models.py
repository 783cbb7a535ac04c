"""
Data types for the Bay Navigator safety layer.

Covers the static catalog entries (quick exit destinations, disguised
icons, safety tips), the derived network privacy status, results returned
by the disguise operations, and the closed variant sets used for
classification.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class SafetyError(Exception):
    """Base exception for the safety layer's collaborators."""
    pass


class Platform(str, Enum):
    """Host platform the app is running on."""

    ANDROID = "android"
    IOS = "ios"
    WEB = "web"
    DESKTOP = "desktop"



class ConnectionKind(str, Enum):
    """A single transport reported by the connectivity signal."""

    WIFI = "wifi"
    MOBILE = "mobile"
    VPN = "vpn"
    ETHERNET = "ethernet"
    BLUETOOTH = "bluetooth"
    OTHER = "other"
    NONE = "none"


class SensitiveCategory(str, Enum):
    """Program categories that warrant safety guidance before contact."""

    CRISIS = "crisis"
    DOMESTIC_VIOLENCE = "domestic-violence"
    MENTAL_HEALTH = "mental-health"
    LGBTQ = "lgbtq"
    TEEN_HEALTH = "teen-health"
    SUBSTANCE_ABUSE = "substance-abuse"
    HOUSING_EMERGENCY = "housing-emergency"

    @classmethod
    def parse(cls, value: str | None) -> "SensitiveCategory | None":
        """Return the matching member (case-insensitive), or None."""
        if value is None:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


class SensitiveEligibility(str, Enum):
    """Eligibility groups whose members may be at risk if observed."""

    LGBTQ = "lgbtq"
    YOUTH = "youth"
    IMMIGRANTS = "immigrants"
    UNHOUSED = "unhoused"
    REENTRY = "reentry"

    @classmethod
    def parse(cls, value: str | None) -> "SensitiveEligibility | None":
        """Return the matching member (case-insensitive), or None."""
        if value is None:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


class NetworkPrivacyLevel(str, Enum):
    """How private the current network connection is."""

    GOOD = "good"
    MODERATE = "moderate"
    CAUTION = "caution"
    OFFLINE = "offline"
    UNKNOWN = "unknown"


_LEVEL_COLORS: dict[NetworkPrivacyLevel, str] = {
    NetworkPrivacyLevel.GOOD: "#4CAF50",
    NetworkPrivacyLevel.MODERATE: "#2196F3",
    NetworkPrivacyLevel.CAUTION: "#FF9800",
    NetworkPrivacyLevel.OFFLINE: "#9E9E9E",
    NetworkPrivacyLevel.UNKNOWN: "#9E9E9E",
}


@dataclass(frozen=True)
class QuickExitDestination:
    """A neutral website the quick exit can navigate to."""

    id: str
    name: str
    url: str
    description: str


@dataclass(frozen=True)
class SafetyTip:
    """
    A safety tip shown before contacting a sensitive program.

    Attributes:
        icon: Symbolic icon name for the UI layer.
        title: Short headline.
        description: One-sentence explanation.
    """

    icon: str
    title: str
    description: str


@dataclass(frozen=True)
class NetworkPrivacyStatus:
    """
    Privacy classification of the current network connection.

    Attributes:
        level: Privacy level.
        connection_type: Human-readable transport name.
        warning: Warning to show the user, if any.
        suggestion: Advice for the user, if any.
    """

    level: NetworkPrivacyLevel
    connection_type: str
    warning: str | None = None
    suggestion: str | None = None

    @property
    def indicator_color(self) -> str:
        """Hex colour for the status indicator."""
        return _LEVEL_COLORS[self.level]

    @property
    def has_warning(self) -> bool:
        return self.warning is not None

    @classmethod
    def unknown(cls) -> "NetworkPrivacyStatus":
        return cls(level=NetworkPrivacyLevel.UNKNOWN, connection_type="Unknown")

    def to_dict(self) -> dict[str, Any]:
        """Convert status to a dictionary for serialization."""
        return {
            "level": self.level.value,
            "connection_type": self.connection_type,
            "warning": self.warning,
            "suggestion": self.suggestion,
            "indicator_color": self.indicator_color,
        }


@dataclass(frozen=True)
class DisguisedAppIcon:
    """
    An alternate app identity that blends in as a utility app.

    Switching the real launcher icon is done by the platform integration
    (activity-alias on Android, alternate icons on iOS); this type only
    names the pieces that integration needs.
    """

    id: str
    name: str
    android_activity_alias: str
    ios_icon_name: str
    glyph: str
    background_color: str


@dataclass(frozen=True)
class SafetySettings:
    """The persisted safety settings, with their defaults applied."""

    quick_exit_enabled: bool
    quick_exit_url: str
    incognito_mode_enabled: bool
    show_safety_tips: bool
    network_warnings_enabled: bool
    disguised_mode_enabled: bool
    disguised_icon_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "quick_exit_enabled": self.quick_exit_enabled,
            "quick_exit_url": self.quick_exit_url,
            "incognito_mode_enabled": self.incognito_mode_enabled,
            "show_safety_tips": self.show_safety_tips,
            "network_warnings_enabled": self.network_warnings_enabled,
            "disguised_mode_enabled": self.disguised_mode_enabled,
            "disguised_icon_id": self.disguised_icon_id,
        }


@dataclass(frozen=True)
class DisguiseResult:
    """Outcome of applying or resetting a disguised icon."""

    success: bool
    message: str
    requires_restart: bool = False
