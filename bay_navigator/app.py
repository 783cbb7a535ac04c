"""Composition root: wires the safety layer's collaborators together."""

from __future__ import annotations

from collections.abc import Iterable

from bay_navigator.config.settings import Settings, settings as default_settings
from bay_navigator.safety import (
    AppBackgrounder,
    ConnectionKind,
    ConnectivitySignal,
    InterfaceConnectivitySignal,
    JsonFilePreferenceStore,
    LoggingAppBackgrounder,
    PreferenceStore,
    SafetyProvider,
    SafetyService,
    StaticConnectivitySignal,
    UrlLauncher,
    WebBrowserUrlLauncher,
)


def build_service(
    settings: Settings | None = None,
    store: PreferenceStore | None = None,
    connectivity: ConnectivitySignal | None = None,
    url_launcher: UrlLauncher | None = None,
    app_backgrounder: AppBackgrounder | None = None,
    network: Iterable[ConnectionKind] | None = None,
) -> SafetyService:
    """Build a SafetyService, filling in production collaborators.

    Args:
        network: If given, report this fixed reading instead of inspecting
            the host's interfaces.
    """
    settings = settings or default_settings
    if store is None:
        store = JsonFilePreferenceStore(settings.PREFERENCES_PATH)
    if connectivity is None:
        if network is not None:
            connectivity = StaticConnectivitySignal(network)
        else:
            connectivity = InterfaceConnectivitySignal(settings.CONNECTIVITY_POLL_SECONDS)
    return SafetyService(
        store,
        connectivity,
        url_launcher=url_launcher or WebBrowserUrlLauncher(),
        app_backgrounder=app_backgrounder or LoggingAppBackgrounder(),
        settings=settings,
    )


def build_provider(settings: Settings | None = None, **kwargs) -> SafetyProvider:
    """Build a SafetyProvider around a freshly built service."""
    return SafetyProvider(build_service(settings, **kwargs))
