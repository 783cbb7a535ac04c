"""
Safety layer for Bay Navigator.

This package protects vulnerable users of the resource directory: a quick
exit (panic button), incognito history, safety tips for sensitive
programs, network privacy warnings and a disguised app mode.

Public API:
    - SafetyService: Engine owning persisted settings and session history
    - SafetyProvider: Observable facade for reactive UIs
    - SafetyState: Immutable snapshot published to listeners
    - Subscription: Listener registration handle

    - PreferenceStore: Abstract durable key-value store
    - InMemoryPreferenceStore: Non-persistent store
    - JsonFilePreferenceStore: JSON-file store with atomic writes
    - PreferenceKey: Stored preference names
    - PreferenceStoreError: Storage exception

    - ConnectivitySignal: Abstract connectivity source
    - StaticConnectivitySignal: Caller-driven signal
    - InterfaceConnectivitySignal: psutil-backed signal
    - ConnectivityError: Connectivity exception
    - classify_network: Reading -> NetworkPrivacyStatus

    - UrlLauncher, AppBackgrounder, HapticFeedback: Platform capabilities

    - QuickExitDetector, GestureConfig: Panic gesture detection
    - SafetyTipsPrompt, prepare_contact: Pre-contact safety tips
"""

from .capabilities import (
    AppBackgrounder,
    HapticFeedback,
    LoggingAppBackgrounder,
    NullHapticFeedback,
    UrlLauncher,
    WebBrowserUrlLauncher,
)

from .catalog import (
    BASE_SAFETY_TIPS,
    DEFAULT_DESTINATIONS,
    DEFAULT_QUICK_EXIT_URL,
    DISCREET_CONTACT_TIPS,
    DISGUISED_ICONS,
    find_destination,
    find_icon,
)

from .connectivity import (
    ConnectivityError,
    ConnectivitySignal,
    InterfaceConnectivitySignal,
    StaticConnectivitySignal,
    classify_network,
    parse_reading,
)

from .models import (
    ConnectionKind,
    DisguisedAppIcon,
    DisguiseResult,
    NetworkPrivacyLevel,
    NetworkPrivacyStatus,
    Platform,
    QuickExitDestination,
    SafetyError,
    SafetySettings,
    SafetyTip,
    SensitiveCategory,
    SensitiveEligibility,
)

from .preferences import (
    InMemoryPreferenceStore,
    JsonFilePreferenceStore,
    PreferenceKey,
    PreferenceStore,
    PreferenceStoreError,
)

from .service import NetworkPrivacyStream, SafetyService
from .provider import SafetyProvider, SafetyState, Subscription
from .gestures import GestureConfig, QuickExitDetector
from .guidance import SafetyTipsPrompt, prepare_contact


__all__ = [
    # Engine and facade
    "SafetyService",
    "NetworkPrivacyStream",
    "SafetyProvider",
    "SafetyState",
    "Subscription",

    # Data types
    "ConnectionKind",
    "DisguisedAppIcon",
    "DisguiseResult",
    "NetworkPrivacyLevel",
    "NetworkPrivacyStatus",
    "Platform",
    "QuickExitDestination",
    "SafetyError",
    "SafetySettings",
    "SafetyTip",
    "SensitiveCategory",
    "SensitiveEligibility",

    # Catalogs
    "BASE_SAFETY_TIPS",
    "DEFAULT_DESTINATIONS",
    "DEFAULT_QUICK_EXIT_URL",
    "DISCREET_CONTACT_TIPS",
    "DISGUISED_ICONS",
    "find_destination",
    "find_icon",

    # Preferences
    "InMemoryPreferenceStore",
    "JsonFilePreferenceStore",
    "PreferenceKey",
    "PreferenceStore",
    "PreferenceStoreError",

    # Connectivity
    "ConnectivityError",
    "ConnectivitySignal",
    "InterfaceConnectivitySignal",
    "StaticConnectivitySignal",
    "classify_network",
    "parse_reading",

    # Capabilities
    "AppBackgrounder",
    "HapticFeedback",
    "LoggingAppBackgrounder",
    "NullHapticFeedback",
    "UrlLauncher",
    "WebBrowserUrlLauncher",

    # Gestures and guidance
    "GestureConfig",
    "QuickExitDetector",
    "SafetyTipsPrompt",
    "prepare_contact",
]
