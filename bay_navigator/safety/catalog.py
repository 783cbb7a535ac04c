"""Static catalogs: quick exit destinations, disguised icons and safety tips."""

from __future__ import annotations

from .models import DisguisedAppIcon, QuickExitDestination, SafetyTip


DEFAULT_DESTINATIONS: tuple[QuickExitDestination, ...] = (
    QuickExitDestination(
        id="google",
        name="Google",
        url="https://www.google.com",
        description="Opens Google search",
    ),
    QuickExitDestination(
        id="weather",
        name="Weather.gov",
        url="https://www.weather.gov",
        description="Opens weather forecast",
    ),
    QuickExitDestination(
        id="news",
        name="AP News",
        url="https://apnews.com",
        description="Opens news website",
    ),
    QuickExitDestination(
        id="recipes",
        name="AllRecipes",
        url="https://www.allrecipes.com",
        description="Opens recipe website",
    ),
)

DEFAULT_QUICK_EXIT_URL = DEFAULT_DESTINATIONS[0].url


DISGUISED_ICONS: tuple[DisguisedAppIcon, ...] = (
    DisguisedAppIcon(
        id="calculator",
        name="Calculator",
        android_activity_alias=".CalculatorAlias",
        ios_icon_name="CalculatorIcon",
        glyph="calculate_outlined",
        background_color="#424242",
    ),
    DisguisedAppIcon(
        id="notes",
        name="My Notes",
        android_activity_alias=".NotesAlias",
        ios_icon_name="NotesIcon",
        glyph="note_outlined",
        background_color="#FFC107",
    ),
    DisguisedAppIcon(
        id="weather",
        name="Weather",
        android_activity_alias=".WeatherAlias",
        ios_icon_name="WeatherIcon",
        glyph="wb_sunny_outlined",
        background_color="#2196F3",
    ),
    DisguisedAppIcon(
        id="utilities",
        name="Utilities",
        android_activity_alias=".UtilitiesAlias",
        ios_icon_name="UtilitiesIcon",
        glyph="build_outlined",
        background_color="#607D8B",
    ),
    DisguisedAppIcon(
        id="files",
        name="Files",
        android_activity_alias=".FilesAlias",
        ios_icon_name="FilesIcon",
        glyph="folder_outlined",
        background_color="#4CAF50",
    ),
)


BASE_SAFETY_TIPS: tuple[SafetyTip, ...] = (
    SafetyTip(
        icon="security",
        title="Check your surroundings",
        description="Make sure you're in a private, safe location before making calls.",
    ),
    SafetyTip(
        icon="phone_android",
        title="Consider using a different phone",
        description="If your phone is monitored, use a friend's phone or a public phone.",
    ),
    SafetyTip(
        icon="history",
        title="Clear your history",
        description="Use Incognito Mode or clear your browser/app history after visiting.",
    ),
)

# Appended, in this order, for domestic-violence and crisis programs.
DISCREET_CONTACT_TIPS: tuple[SafetyTip, ...] = (
    SafetyTip(
        icon="dialpad",
        title="Use *67 to hide your number",
        description="Dial *67 before the number to block your caller ID.",
    ),
    SafetyTip(
        icon="schedule",
        title="Plan your call",
        description="Choose a time when you know you'll have privacy.",
    ),
)


def find_destination(destination_id: str) -> QuickExitDestination | None:
    """Look up a quick exit destination by id."""
    for destination in DEFAULT_DESTINATIONS:
        if destination.id == destination_id:
            return destination
    return None


def find_icon(icon_id: str) -> DisguisedAppIcon | None:
    """Look up a disguised icon by id."""
    for icon in DISGUISED_ICONS:
        if icon.id == icon_id:
            return icon
    return None
