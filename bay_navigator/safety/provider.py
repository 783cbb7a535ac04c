"""
Observable facade over the safety service for reactive UIs.

The provider caches the service's state, publishes an immutable
:class:`SafetyState` snapshot to every listener after each change, and keeps
the cached network status current by consuming the service's network
privacy stream.

Example:
    provider = SafetyProvider(service)
    subscription = provider.add_listener(lambda state: render(state))
    await provider.initialize()
    await provider.set_quick_exit_enabled(True)
    ...
    subscription.cancel()
    await provider.dispose()
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from .catalog import DEFAULT_DESTINATIONS, DEFAULT_QUICK_EXIT_URL, DISGUISED_ICONS, find_icon
from .models import (
    DisguisedAppIcon,
    DisguiseResult,
    NetworkPrivacyStatus,
    QuickExitDestination,
    SafetyTip,
)
from .service import NetworkPrivacyStream, SafetyService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SafetyState:
    """Snapshot of everything the safety UI renders."""

    initialized: bool = False
    quick_exit_enabled: bool = False
    quick_exit_url: str = DEFAULT_QUICK_EXIT_URL
    incognito_mode_enabled: bool = False
    is_incognito_session: bool = False
    show_safety_tips: bool = True
    network_warnings_enabled: bool = True
    network_status: NetworkPrivacyStatus | None = None
    disguised_mode_enabled: bool = False
    current_disguised_icon: DisguisedAppIcon | None = None


Listener = Callable[[SafetyState], Any]


class Subscription:
    """Handle returned by :meth:`SafetyProvider.add_listener`."""

    def __init__(self, provider: "SafetyProvider", listener: Listener) -> None:
        self._provider = provider
        self._listener = listener
        self.active = True

    def cancel(self) -> None:
        if self.active:
            self._provider._remove_listener(self._listener)
            self.active = False


class SafetyProvider:
    """
    Notification-emitting wrapper around :class:`SafetyService`.

    Mutations update the cached state first, then delegate to the service,
    then notify. A failed durable write is not rolled back in the cache.

    Args:
        service: The safety service this provider fronts.
    """

    def __init__(self, service: SafetyService) -> None:
        self._service = service
        self._listeners: list[Listener] = []
        self._init_lock = asyncio.Lock()
        self._network_stream: NetworkPrivacyStream | None = None
        self._network_task: asyncio.Task[None] | None = None
        self._disposed = False

        self._initialized = False
        self._quick_exit_enabled = False
        self._quick_exit_url = DEFAULT_QUICK_EXIT_URL
        self._incognito_mode_enabled = False
        self._is_incognito_session = False
        self._show_safety_tips = True
        self._network_warnings_enabled = True
        self._network_status: NetworkPrivacyStatus | None = None
        self._disguised_mode_enabled = False
        self._current_disguised_icon: DisguisedAppIcon | None = None

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def service(self) -> SafetyService:
        return self._service

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def quick_exit_enabled(self) -> bool:
        return self._quick_exit_enabled

    @property
    def quick_exit_url(self) -> str:
        return self._quick_exit_url

    @property
    def incognito_mode_enabled(self) -> bool:
        return self._incognito_mode_enabled

    @property
    def is_incognito_session(self) -> bool:
        return self._is_incognito_session

    @property
    def show_safety_tips(self) -> bool:
        return self._show_safety_tips

    @property
    def network_warnings_enabled(self) -> bool:
        return self._network_warnings_enabled

    @property
    def network_status(self) -> NetworkPrivacyStatus | None:
        return self._network_status

    @property
    def disguised_mode_enabled(self) -> bool:
        return self._disguised_mode_enabled

    @property
    def current_disguised_icon(self) -> DisguisedAppIcon | None:
        return self._current_disguised_icon

    @property
    def quick_exit_destinations(self) -> tuple[QuickExitDestination, ...]:
        return DEFAULT_DESTINATIONS

    @property
    def disguised_icons(self) -> tuple[DisguisedAppIcon, ...]:
        return DISGUISED_ICONS

    @property
    def state(self) -> SafetyState:
        return SafetyState(
            initialized=self._initialized,
            quick_exit_enabled=self._quick_exit_enabled,
            quick_exit_url=self._quick_exit_url,
            incognito_mode_enabled=self._incognito_mode_enabled,
            is_incognito_session=self._is_incognito_session,
            show_safety_tips=self._show_safety_tips,
            network_warnings_enabled=self._network_warnings_enabled,
            network_status=self._network_status,
            disguised_mode_enabled=self._disguised_mode_enabled,
            current_disguised_icon=self._current_disguised_icon,
        )

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_listener(self, listener: Listener) -> Subscription:
        """Register *listener* to receive a state snapshot after each change."""
        self._listeners.append(listener)
        return Subscription(self, listener)

    def _remove_listener(self, listener: Listener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def _notify(self) -> None:
        if self._disposed:
            return
        state = self.state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("Safety listener %r failed", listener)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def initialize(self) -> None:
        """Load persisted state and start watching the network.

        Only the first call does any work. If the persisted incognito
        setting is on, an incognito session is started before the network
        is touched. A network subscription failure is logged and leaves
        the remaining state loaded.
        """
        async with self._init_lock:
            if self._initialized:
                return

            try:
                loaded = await self._service.get_settings()
                self._quick_exit_enabled = loaded.quick_exit_enabled
                self._quick_exit_url = loaded.quick_exit_url
                self._incognito_mode_enabled = loaded.incognito_mode_enabled
                self._show_safety_tips = loaded.show_safety_tips
                self._network_warnings_enabled = loaded.network_warnings_enabled
                self._disguised_mode_enabled = loaded.disguised_mode_enabled

                # Must precede any network call.
                if self._incognito_mode_enabled:
                    self._service.start_incognito_session()
                self._is_incognito_session = self._service.is_incognito_session

                self._current_disguised_icon = await self._service.get_current_disguised_icon()
            except Exception:
                logger.exception("Safety provider initialization failed, using defaults")

            self._network_status = await self._service.get_network_privacy_status()
            try:
                self._network_stream = self._service.network_privacy_stream()
                self._network_task = asyncio.create_task(self._watch_network(self._network_stream))
            except Exception:
                logger.exception("Network privacy stream unavailable, status will not update")

            self._initialized = True
            logger.debug("Safety provider initialized")
            self._notify()

    async def _watch_network(self, stream: NetworkPrivacyStream) -> None:
        try:
            async for status in stream:
                self._network_status = status
                self._notify()
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Network privacy stream failed")

    async def dispose(self) -> None:
        """Stop watching the network and drop all listeners."""
        if self._disposed:
            logger.warning("SafetyProvider.dispose() called more than once")
            return
        self._disposed = True

        if self._network_task is not None:
            self._network_task.cancel()
            try:
                await self._network_task
            except asyncio.CancelledError:
                pass
            self._network_task = None
        if self._network_stream is not None:
            await self._network_stream.aclose()
            self._network_stream = None
        self._listeners.clear()

    # ------------------------------------------------------------------
    # Quick exit
    # ------------------------------------------------------------------

    async def set_quick_exit_enabled(self, enabled: bool) -> None:
        self._quick_exit_enabled = enabled
        await self._service.set_quick_exit_enabled(enabled)
        self._notify()

    async def set_quick_exit_url(self, url: str) -> None:
        self._quick_exit_url = url
        await self._service.set_quick_exit_url(url)
        self._notify()

    async def execute_quick_exit(self) -> None:
        await self._service.execute_quick_exit()

    # ------------------------------------------------------------------
    # Incognito mode
    # ------------------------------------------------------------------

    async def set_incognito_mode_enabled(self, enabled: bool) -> None:
        self._incognito_mode_enabled = enabled
        self._is_incognito_session = enabled
        await self._service.set_incognito_mode_enabled(enabled)
        self._notify()

    def start_incognito_session(self) -> None:
        self._is_incognito_session = True
        self._service.start_incognito_session()
        self._notify()

    async def end_incognito_session(self) -> None:
        self._is_incognito_session = False
        await self._service.end_incognito_session()
        self._notify()

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    async def add_recent_program(self, program_id: str) -> None:
        await self._service.add_recent_program(program_id)

    async def get_recent_programs(self) -> list[str]:
        return await self._service.get_recent_programs()

    async def add_search_query(self, query: str) -> None:
        await self._service.add_search_query(query)

    async def get_search_history(self) -> list[str]:
        return await self._service.get_search_history()

    async def clear_all_history(self) -> None:
        await self._service.clear_all_history()
        self._notify()

    # ------------------------------------------------------------------
    # Safety tips
    # ------------------------------------------------------------------

    async def set_show_safety_tips(self, show: bool) -> None:
        self._show_safety_tips = show
        await self._service.set_show_safety_tips(show)
        self._notify()

    def is_program_sensitive(self, category: str | None, eligibility: Sequence[str] | None) -> bool:
        return self._service.is_program_sensitive(category, eligibility)

    def get_safety_tips(self, category: str | None) -> list[SafetyTip]:
        return self._service.get_safety_tips(category)

    # ------------------------------------------------------------------
    # Network warnings
    # ------------------------------------------------------------------

    async def set_network_warnings_enabled(self, enabled: bool) -> None:
        self._network_warnings_enabled = enabled
        await self._service.set_network_warnings_enabled(enabled)
        self._notify()

    async def refresh_network_status(self) -> None:
        self._network_status = await self._service.get_network_privacy_status()
        self._notify()

    # ------------------------------------------------------------------
    # Disguised app mode
    # ------------------------------------------------------------------

    async def apply_disguised_icon(self, icon: DisguisedAppIcon | str) -> DisguiseResult:
        """Apply a disguised icon; cached icon state changes only on success."""
        icon_id = icon if isinstance(icon, str) else icon.id
        result = await self._service.apply_disguised_icon(icon_id)
        if result.success:
            self._disguised_mode_enabled = True
            if isinstance(icon, str):
                self._current_disguised_icon = find_icon(icon_id) or DISGUISED_ICONS[0]
            else:
                self._current_disguised_icon = icon
        self._notify()
        return result

    async def reset_to_default_icon(self) -> DisguiseResult:
        result = await self._service.reset_to_default_icon()
        if result.success:
            self._disguised_mode_enabled = False
            self._current_disguised_icon = None
        self._notify()
        return result
