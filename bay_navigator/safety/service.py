"""
Safety service for Bay Navigator.

The single source of truth for the features that protect vulnerable users:

- Quick Exit (panic button) that wipes sensitive state and leaves the app
- Incognito Mode, persisted or per-session, that keeps history in memory only
- Safety tips for sensitive programs
- Network privacy warnings
- Disguised app mode

Every public operation is best-effort. Storage and connectivity failures
are logged and replaced by documented defaults; nothing raises to the
caller.

Thread Safety:
    Not safe for concurrent callers. The service expects a single logical
    caller (UI event handlers on one event loop) at a time.

Example:
    service = SafetyService(InMemoryPreferenceStore(), StaticConnectivitySignal())
    await service.set_quick_exit_enabled(True)
    await service.add_recent_program("sf-food-bank")
    await service.execute_quick_exit()
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Sequence

from bay_navigator.config.settings import Settings, settings as default_settings

from .capabilities import AppBackgrounder, LoggingAppBackgrounder, UrlLauncher, WebBrowserUrlLauncher
from .catalog import (
    BASE_SAFETY_TIPS,
    DEFAULT_QUICK_EXIT_URL,
    DISCREET_CONTACT_TIPS,
    DISGUISED_ICONS,
    find_icon,
)
from .connectivity import ConnectivitySignal, classify_network
from .models import (
    DisguisedAppIcon,
    DisguiseResult,
    NetworkPrivacyStatus,
    Platform,
    SafetySettings,
    SafetyTip,
    SensitiveCategory,
    SensitiveEligibility,
)
from .preferences import PreferenceKey, PreferenceStore

logger = logging.getLogger(__name__)

# Categories that get the discreet-contact tips on top of the base set.
_DISCREET_CONTACT_CATEGORIES = frozenset({
    SensitiveCategory.DOMESTIC_VIOLENCE,
    SensitiveCategory.CRISIS,
})


def push_front(items: list[str], value: str, limit: int) -> list[str]:
    """Move *value* to the front of *items*, dropping the oldest past *limit*.

    Mutates and returns *items*.
    """
    if value in items:
        items.remove(value)
    items.insert(0, value)
    del items[limit:]
    return items


class NetworkPrivacyStream:
    """Async iterator of privacy statuses, one per connectivity change.

    Each change triggers a fresh :meth:`SafetyService.get_network_privacy_status`
    call; the next change is not read until that evaluation has finished.
    """

    def __init__(self, service: "SafetyService", changes: AsyncIterator) -> None:
        self._service = service
        self._changes = changes

    def __aiter__(self) -> "NetworkPrivacyStream":
        return self

    async def __anext__(self) -> NetworkPrivacyStatus:
        await self._changes.__anext__()
        return await self._service.get_network_privacy_status()

    async def aclose(self) -> None:
        """Unsubscribe from the underlying connectivity signal."""
        aclose = getattr(self._changes, "aclose", None)
        if aclose is not None:
            await aclose()


class SafetyService:
    """
    Owns persisted safety settings and session-scoped history.

    Args:
        store: Durable key-value store for settings and persisted history.
        connectivity: Source of network readings.
        url_launcher: Opens the quick exit destination. Defaults to the
            system web browser.
        app_backgrounder: Hides the app after a quick exit.
        settings: Namespace, platform and history limits.
    """

    def __init__(
        self,
        store: PreferenceStore,
        connectivity: ConnectivitySignal,
        url_launcher: UrlLauncher | None = None,
        app_backgrounder: AppBackgrounder | None = None,
        settings: Settings | None = None,
    ) -> None:
        settings = settings or default_settings
        self._store = store
        self._connectivity = connectivity
        self._launcher = url_launcher or WebBrowserUrlLauncher()
        self._backgrounder = app_backgrounder or LoggingAppBackgrounder()
        self._namespace = settings.PREFERENCE_NAMESPACE
        self._persisted_limit = settings.PERSISTED_HISTORY_LIMIT
        self._session_limit = settings.SESSION_HISTORY_LIMIT
        self.platform = Platform(settings.PLATFORM)

        self._is_incognito_session = False
        self._session_recent_programs: list[str] = []
        self._session_search_history: list[str] = []
        self._navigation: asyncio.Task[bool] | None = None
        self._navigations: set[asyncio.Task[bool]] = set()

    # ------------------------------------------------------------------
    # Storage helpers
    # ------------------------------------------------------------------

    def _key(self, key: PreferenceKey) -> str:
        return key.qualified(self._namespace)

    async def _read_bool(self, key: PreferenceKey, default: bool) -> bool:
        try:
            value = await self._store.get_bool(self._key(key))
        except Exception as exc:
            logger.warning("Reading %s failed, using default %s: %s", key.value, default, exc)
            return default
        return default if value is None else value

    async def _read_string(self, key: PreferenceKey) -> str | None:
        try:
            return await self._store.get_string(self._key(key))
        except Exception as exc:
            logger.warning("Reading %s failed: %s", key.value, exc)
            return None

    async def _read_list(self, key: PreferenceKey) -> list[str]:
        try:
            value = await self._store.get_string_list(self._key(key))
        except Exception as exc:
            logger.warning("Reading %s failed: %s", key.value, exc)
            return []
        return list(value or [])

    async def _write_bool(self, key: PreferenceKey, value: bool) -> bool:
        try:
            await self._store.set_bool(self._key(key), value)
        except Exception as exc:
            logger.warning("Writing %s failed: %s", key.value, exc)
            return False
        return True

    async def _write_string(self, key: PreferenceKey, value: str) -> bool:
        try:
            await self._store.set_string(self._key(key), value)
        except Exception as exc:
            logger.warning("Writing %s failed: %s", key.value, exc)
            return False
        return True

    async def _write_list(self, key: PreferenceKey, value: list[str]) -> bool:
        try:
            await self._store.set_string_list(self._key(key), value)
        except Exception as exc:
            logger.warning("Writing %s failed: %s", key.value, exc)
            return False
        return True

    async def _remove(self, key: PreferenceKey) -> bool:
        try:
            await self._store.remove(self._key(key))
        except Exception as exc:
            logger.warning("Removing %s failed: %s", key.value, exc)
            return False
        return True

    async def get_settings(self) -> SafetySettings:
        """Load every persisted setting, defaults applied."""
        return SafetySettings(
            quick_exit_enabled=await self.is_quick_exit_enabled(),
            quick_exit_url=await self.get_quick_exit_url(),
            incognito_mode_enabled=await self.is_incognito_mode_enabled(),
            show_safety_tips=await self.should_show_safety_tips(),
            network_warnings_enabled=await self.is_network_warnings_enabled(),
            disguised_mode_enabled=await self.is_disguised_mode_enabled(),
            disguised_icon_id=await self.get_disguised_icon_id(),
        )

    # ------------------------------------------------------------------
    # Quick exit (panic button)
    # ------------------------------------------------------------------

    async def is_quick_exit_enabled(self) -> bool:
        return await self._read_bool(PreferenceKey.QUICK_EXIT_ENABLED, False)

    async def set_quick_exit_enabled(self, enabled: bool) -> None:
        await self._write_bool(PreferenceKey.QUICK_EXIT_ENABLED, enabled)

    async def get_quick_exit_url(self) -> str:
        """Return the stored destination, or the first catalog URL if unset."""
        url = await self._read_string(PreferenceKey.QUICK_EXIT_URL)
        return url or DEFAULT_QUICK_EXIT_URL

    async def set_quick_exit_url(self, url: str) -> None:
        """Store *url* verbatim. No scheme or host validation is done."""
        await self._write_string(PreferenceKey.QUICK_EXIT_URL, url)

    async def execute_quick_exit(self) -> None:
        """Wipe session data, then leave for the safe destination.

        History is cleared before navigation is attempted, whether or not
        navigation later succeeds. Navigation runs as a background task and
        is not awaited before the app is backgrounded.
        """
        url = await self.get_quick_exit_url()

        await self.clear_session_data()
        logger.info("Quick exit: session data cleared")

        task = asyncio.create_task(self._navigate_away(url))
        self._navigations.add(task)
        task.add_done_callback(self._navigations.discard)
        self._navigation = task

        try:
            self._backgrounder.send_to_background()
        except Exception as exc:
            logger.warning("Quick exit: backgrounding failed: %s", exc)

    async def _navigate_away(self, url: str) -> bool:
        try:
            if not await self._launcher.can_open(url):
                logger.warning("Quick exit: no handler for %s", url)
                return False
            await self._launcher.open(url)
        except Exception as exc:
            logger.warning("Quick exit: opening %s failed: %s", url, exc)
            return False
        logger.debug("Quick exit: opened %s", url)
        return True

    async def wait_for_navigation(self) -> bool | None:
        """Wait for the last quick exit's navigation.

        Returns:
            True if the URL was opened, False if it could not be, None if
            no quick exit has run.
        """
        if self._navigation is None:
            return None
        return await self._navigation

    # ------------------------------------------------------------------
    # Incognito mode
    # ------------------------------------------------------------------

    async def is_incognito_mode_enabled(self) -> bool:
        return await self._read_bool(PreferenceKey.INCOGNITO_MODE, False)

    async def set_incognito_mode_enabled(self, enabled: bool) -> None:
        """Persist the incognito setting and mirror it into the session flag.

        Enabling purges persisted history as part of this call.
        """
        await self._write_bool(PreferenceKey.INCOGNITO_MODE, enabled)
        self._is_incognito_session = enabled

        if enabled:
            await self.clear_all_history()
        else:
            self._clear_session_lists()

    @property
    def is_incognito_session(self) -> bool:
        return self._is_incognito_session

    def start_incognito_session(self) -> None:
        """Start a temporary incognito session with empty session history."""
        self._is_incognito_session = True
        self._clear_session_lists()

    async def end_incognito_session(self) -> None:
        """End the session and drop everything recorded during it."""
        self._is_incognito_session = False
        self._clear_session_lists()

    def _clear_session_lists(self) -> None:
        self._session_recent_programs.clear()
        self._session_search_history.clear()

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    async def add_recent_program(self, program_id: str) -> None:
        await self._record(PreferenceKey.RECENT_PROGRAMS, self._session_recent_programs, program_id)

    async def get_recent_programs(self) -> list[str]:
        if self._is_incognito_session:
            return list(self._session_recent_programs)
        return await self._read_list(PreferenceKey.RECENT_PROGRAMS)

    async def add_search_query(self, query: str) -> None:
        await self._record(PreferenceKey.SEARCH_HISTORY, self._session_search_history, query)

    async def get_search_history(self) -> list[str]:
        if self._is_incognito_session:
            return list(self._session_search_history)
        return await self._read_list(PreferenceKey.SEARCH_HISTORY)

    async def _record(self, key: PreferenceKey, session_list: list[str], value: str) -> None:
        if self._is_incognito_session:
            push_front(session_list, value, self._session_limit)
            return

        history = await self._read_list(key)
        push_front(history, value, self._persisted_limit)
        await self._write_list(key, history)

    async def clear_all_history(self) -> None:
        """Purge persisted and session history unconditionally."""
        await self._remove(PreferenceKey.RECENT_PROGRAMS)
        await self._remove(PreferenceKey.SEARCH_HISTORY)
        self._clear_session_lists()

    async def clear_session_data(self) -> None:
        """Clear session history, and persisted history when incognito applies."""
        self._clear_session_lists()

        if self._is_incognito_session or await self.is_incognito_mode_enabled():
            await self.clear_all_history()

    # ------------------------------------------------------------------
    # Safety tips
    # ------------------------------------------------------------------

    async def should_show_safety_tips(self) -> bool:
        return await self._read_bool(PreferenceKey.SHOW_SAFETY_TIPS, True)

    async def set_show_safety_tips(self, show: bool) -> None:
        await self._write_bool(PreferenceKey.SHOW_SAFETY_TIPS, show)

    def is_program_sensitive(
        self,
        category: str | None,
        eligibility: Sequence[str] | None,
    ) -> bool:
        """True if the category or any eligibility tag is sensitive."""
        if SensitiveCategory.parse(category) is not None:
            return True
        for tag in eligibility or ():
            if SensitiveEligibility.parse(tag) is not None:
                return True
        return False

    def get_safety_tips(self, category: str | None) -> list[SafetyTip]:
        """Base tips, plus discreet-contact tips for crisis programs."""
        tips = list(BASE_SAFETY_TIPS)
        if SensitiveCategory.parse(category) in _DISCREET_CONTACT_CATEGORIES:
            tips.extend(DISCREET_CONTACT_TIPS)
        return tips

    # ------------------------------------------------------------------
    # Network privacy warnings
    # ------------------------------------------------------------------

    async def is_network_warnings_enabled(self) -> bool:
        return await self._read_bool(PreferenceKey.NETWORK_WARNINGS, True)

    async def set_network_warnings_enabled(self, enabled: bool) -> None:
        await self._write_bool(PreferenceKey.NETWORK_WARNINGS, enabled)

    async def get_network_privacy_status(self) -> NetworkPrivacyStatus:
        try:
            reading = await self._connectivity.check_connectivity()
        except Exception as exc:
            logger.warning("Connectivity check failed: %s", exc)
            return NetworkPrivacyStatus.unknown()
        return classify_network(reading)

    def network_privacy_stream(self) -> NetworkPrivacyStream:
        """Subscribe to connectivity changes.

        The subscription is registered immediately; call ``aclose()`` on
        the returned stream to release it.
        """
        return NetworkPrivacyStream(self, self._connectivity.changes())

    # ------------------------------------------------------------------
    # Disguised app mode
    # ------------------------------------------------------------------

    async def is_disguised_mode_enabled(self) -> bool:
        return await self._read_bool(PreferenceKey.DISGUISED_MODE, False)

    async def set_disguised_mode_enabled(self, enabled: bool) -> None:
        await self._write_bool(PreferenceKey.DISGUISED_MODE, enabled)

    async def get_disguised_icon_id(self) -> str | None:
        return await self._read_string(PreferenceKey.DISGUISED_ICON)

    async def set_disguised_icon(self, icon_id: str) -> None:
        await self._write_string(PreferenceKey.DISGUISED_ICON, icon_id)

    async def get_current_disguised_icon(self) -> DisguisedAppIcon | None:
        """Resolve the stored icon id; unknown ids fall back to the first icon."""
        icon_id = await self.get_disguised_icon_id()
        if icon_id is None:
            return None
        return find_icon(icon_id) or DISGUISED_ICONS[0]

    async def apply_disguised_icon(self, icon_id: str) -> DisguiseResult:
        """Store the icon choice and enable disguised mode.

        The launcher icon itself is switched by the platform integration;
        the result tells the user what to expect on their platform.
        """
        try:
            await self._store.set_string(self._key(PreferenceKey.DISGUISED_ICON), icon_id)
            await self._store.set_bool(self._key(PreferenceKey.DISGUISED_MODE), True)
        except Exception as exc:
            logger.warning("Applying disguised icon %s failed: %s", icon_id, exc)
            return DisguiseResult(
                success=False,
                message=f"Failed to change app icon: {exc}",
                requires_restart=False,
            )

        if self.platform is Platform.IOS:
            return DisguiseResult(
                success=True,
                message="App icon changed. iOS will show a confirmation alert.",
                requires_restart=False,
            )
        if self.platform is Platform.ANDROID:
            return DisguiseResult(
                success=True,
                message=(
                    "App icon changed. You may need to restart the app for "
                    "changes to appear on some devices."
                ),
                requires_restart=True,
            )
        return DisguiseResult(success=True, message="Disguised mode enabled.", requires_restart=False)

    async def reset_to_default_icon(self) -> DisguiseResult:
        """Disable disguised mode and forget the stored icon."""
        try:
            await self._store.set_bool(self._key(PreferenceKey.DISGUISED_MODE), False)
            await self._store.remove(self._key(PreferenceKey.DISGUISED_ICON))
        except Exception as exc:
            logger.warning("Resetting disguised icon failed: %s", exc)
            return DisguiseResult(
                success=False,
                message=f"Failed to reset app icon: {exc}",
                requires_restart=False,
            )
        return DisguiseResult(
            success=True,
            message="App icon reset to default.",
            requires_restart=self.platform is Platform.ANDROID,
        )
