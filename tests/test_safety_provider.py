"""Tests for bay_navigator.safety.provider (SafetyProvider facade)."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from bay_navigator.config.settings import Settings
from bay_navigator.safety import (
    AppBackgrounder,
    ConnectionKind,
    DISGUISED_ICONS,
    InMemoryPreferenceStore,
    NetworkPrivacyLevel,
    PreferenceKey,
    PreferenceStoreError,
    SafetyProvider,
    SafetyService,
    SafetyState,
    StaticConnectivitySignal,
    UrlLauncher,
)


NAMESPACE = "bay_navigator"


def key(k: PreferenceKey) -> str:
    return k.qualified(NAMESPACE)


# ===========================================================================
# Helpers / Fixtures
# ===========================================================================


class CountingStore(InMemoryPreferenceStore):
    """In-memory store that counts reads."""

    def __init__(self, initial: dict[str, Any] | None = None):
        super().__init__(initial)
        self.reads = 0

    async def get(self, key: str) -> Any:
        self.reads += 1
        return await super().get(key)


class FailingWriteStore(InMemoryPreferenceStore):
    async def set(self, key: str, value: Any) -> None:
        raise PreferenceStoreError("read-only")


class UnsubscribableSignal(StaticConnectivitySignal):
    """Signal that answers checks but cannot be subscribed to."""

    def changes(self):
        raise RuntimeError("change notifications unavailable")


class StubLauncher(UrlLauncher):
    async def can_open(self, url: str) -> bool:
        return False

    async def open(self, url: str) -> None:
        raise AssertionError("should not be called")


class StubBackgrounder(AppBackgrounder):
    def __init__(self) -> None:
        self.calls = 0

    def send_to_background(self) -> None:
        self.calls += 1


def make_provider(
    store: InMemoryPreferenceStore | None = None,
    signal: StaticConnectivitySignal | None = None,
) -> SafetyProvider:
    service = SafetyService(
        store if store is not None else InMemoryPreferenceStore(),
        signal if signal is not None else StaticConnectivitySignal({ConnectionKind.WIFI}),
        url_launcher=StubLauncher(),
        app_backgrounder=StubBackgrounder(),
        settings=Settings(PREFERENCE_NAMESPACE=NAMESPACE),
    )
    return SafetyProvider(service)


class StateRecorder:
    """Listener that keeps every snapshot it receives."""

    def __init__(self) -> None:
        self.states: list[SafetyState] = []
        self.changed = asyncio.Event()

    def __call__(self, state: SafetyState) -> None:
        self.states.append(state)
        self.changed.set()

    async def wait(self, timeout: float = 1.0) -> SafetyState:
        await asyncio.wait_for(self.changed.wait(), timeout)
        self.changed.clear()
        return self.states[-1]


# ===========================================================================
# Initialization
# ===========================================================================


class TestInitialize:

    @pytest.mark.asyncio
    async def test_defaults_before_initialize(self):
        provider = make_provider()
        assert provider.initialized is False
        assert provider.quick_exit_url == "https://www.google.com"
        assert provider.show_safety_tips is True
        assert provider.network_status is None

    @pytest.mark.asyncio
    async def test_loads_persisted_settings(self):
        store = InMemoryPreferenceStore({
            key(PreferenceKey.QUICK_EXIT_ENABLED): True,
            key(PreferenceKey.QUICK_EXIT_URL): "https://www.weather.gov",
            key(PreferenceKey.SHOW_SAFETY_TIPS): False,
            key(PreferenceKey.DISGUISED_MODE): True,
            key(PreferenceKey.DISGUISED_ICON): "notes",
        })
        provider = make_provider(store)
        await provider.initialize()
        try:
            assert provider.initialized is True
            assert provider.quick_exit_enabled is True
            assert provider.quick_exit_url == "https://www.weather.gov"
            assert provider.show_safety_tips is False
            assert provider.disguised_mode_enabled is True
            assert provider.current_disguised_icon.id == "notes"
            assert provider.network_status.level is NetworkPrivacyLevel.CAUTION
        finally:
            await provider.dispose()

    @pytest.mark.asyncio
    async def test_second_call_is_noop(self):
        store = CountingStore()
        provider = make_provider(store)
        recorder = StateRecorder()
        provider.add_listener(recorder)

        await provider.initialize()
        reads_after_first = store.reads
        await provider.initialize()

        assert reads_after_first > 0
        assert store.reads == reads_after_first
        assert len(recorder.states) == 1
        await provider.dispose()

    @pytest.mark.asyncio
    async def test_concurrent_calls_load_once(self):
        store = CountingStore()
        provider = make_provider(store)
        await provider.initialize()
        reads = store.reads
        await asyncio.gather(provider.initialize(), provider.initialize())
        assert store.reads == reads
        await provider.dispose()

    @pytest.mark.asyncio
    async def test_persisted_incognito_starts_session(self):
        store = InMemoryPreferenceStore({key(PreferenceKey.INCOGNITO_MODE): True})
        provider = make_provider(store)
        recorder = StateRecorder()
        provider.add_listener(recorder)

        await provider.initialize()

        assert provider.is_incognito_session is True
        assert provider.service.is_incognito_session is True
        assert recorder.states[0].is_incognito_session is True
        await provider.dispose()

    @pytest.mark.asyncio
    async def test_notifies_once_with_initialized_state(self):
        provider = make_provider()
        recorder = StateRecorder()
        provider.add_listener(recorder)
        await provider.initialize()
        assert len(recorder.states) == 1
        assert recorder.states[0].initialized is True
        await provider.dispose()

    @pytest.mark.asyncio
    async def test_incognito_session_survives_failed_subscription(self):
        store = InMemoryPreferenceStore({key(PreferenceKey.INCOGNITO_MODE): True})
        provider = make_provider(store, signal=UnsubscribableSignal({ConnectionKind.WIFI}))

        await provider.initialize()
        await provider.add_recent_program("dv-shelter")

        assert provider.initialized is True
        assert provider.is_incognito_session is True
        assert provider.service.is_incognito_session is True
        assert await store.get(key(PreferenceKey.RECENT_PROGRAMS)) is None
        assert await provider.get_recent_programs() == ["dv-shelter"]
        assert provider.network_status.level is NetworkPrivacyLevel.CAUTION
        await provider.dispose()

    @pytest.mark.asyncio
    async def test_broken_connectivity_still_initializes(self):
        provider = make_provider(signal=StaticConnectivitySignal(fail=True))
        await provider.initialize()
        assert provider.initialized is True
        assert provider.network_status.level is NetworkPrivacyLevel.UNKNOWN
        await provider.dispose()


# ===========================================================================
# Network updates
# ===========================================================================


class TestNetworkUpdates:

    @pytest.mark.asyncio
    async def test_stream_updates_cached_status(self):
        signal = StaticConnectivitySignal({ConnectionKind.WIFI})
        provider = make_provider(signal=signal)
        await provider.initialize()
        recorder = StateRecorder()
        provider.add_listener(recorder)

        await signal.emit({ConnectionKind.VPN})
        state = await recorder.wait()

        assert state.network_status.level is NetworkPrivacyLevel.GOOD
        assert provider.network_status.level is NetworkPrivacyLevel.GOOD
        await provider.dispose()

    @pytest.mark.asyncio
    async def test_refresh_network_status(self):
        signal = StaticConnectivitySignal({ConnectionKind.WIFI})
        provider = make_provider(signal=signal)
        await provider.initialize()
        await provider.dispose()

        signal._reading = frozenset({ConnectionKind.MOBILE})
        await provider.refresh_network_status()
        assert provider.network_status.level is NetworkPrivacyLevel.MODERATE

    @pytest.mark.asyncio
    async def test_dispose_unsubscribes(self):
        signal = StaticConnectivitySignal({ConnectionKind.WIFI})
        provider = make_provider(signal=signal)
        await provider.initialize()
        assert signal.subscriber_count == 1

        await provider.dispose()

        assert signal.subscriber_count == 0

    @pytest.mark.asyncio
    async def test_second_dispose_is_noop(self):
        provider = make_provider()
        await provider.initialize()
        await provider.dispose()
        await provider.dispose()

    @pytest.mark.asyncio
    async def test_no_notifications_after_dispose(self):
        provider = make_provider()
        await provider.initialize()
        recorder = StateRecorder()
        provider.add_listener(recorder)
        await provider.dispose()

        await provider.set_quick_exit_enabled(True)
        assert recorder.states == []


# ===========================================================================
# Mutations
# ===========================================================================


@pytest.fixture
def provider() -> SafetyProvider:
    return make_provider()


class TestMutations:

    @pytest.mark.asyncio
    async def test_set_quick_exit_enabled(self, provider):
        recorder = StateRecorder()
        provider.add_listener(recorder)
        await provider.set_quick_exit_enabled(True)
        assert provider.quick_exit_enabled is True
        assert await provider.service.is_quick_exit_enabled() is True
        assert recorder.states[-1].quick_exit_enabled is True

    @pytest.mark.asyncio
    async def test_set_quick_exit_url(self, provider):
        await provider.set_quick_exit_url("https://apnews.com")
        assert provider.quick_exit_url == "https://apnews.com"
        assert await provider.service.get_quick_exit_url() == "https://apnews.com"

    @pytest.mark.asyncio
    async def test_set_incognito_mode(self, provider):
        await provider.add_recent_program("p1")
        await provider.set_incognito_mode_enabled(True)
        assert provider.incognito_mode_enabled is True
        assert provider.is_incognito_session is True
        assert await provider.get_recent_programs() == []

    @pytest.mark.asyncio
    async def test_temporary_session(self, provider):
        recorder = StateRecorder()
        provider.add_listener(recorder)

        provider.start_incognito_session()
        await provider.add_search_query("legal aid")
        assert provider.is_incognito_session is True
        assert await provider.get_search_history() == ["legal aid"]

        await provider.end_incognito_session()
        assert provider.is_incognito_session is False
        assert await provider.get_search_history() == []
        assert [s.is_incognito_session for s in recorder.states] == [True, False]

    @pytest.mark.asyncio
    async def test_clear_all_history_notifies(self, provider):
        recorder = StateRecorder()
        provider.add_listener(recorder)
        await provider.add_recent_program("p1")
        await provider.clear_all_history()
        assert await provider.get_recent_programs() == []
        assert len(recorder.states) == 1

    @pytest.mark.asyncio
    async def test_tips_and_warnings(self, provider):
        await provider.set_show_safety_tips(False)
        await provider.set_network_warnings_enabled(False)
        assert provider.show_safety_tips is False
        assert provider.network_warnings_enabled is False

    @pytest.mark.asyncio
    async def test_cache_not_rolled_back_on_write_failure(self):
        provider = make_provider(FailingWriteStore())
        recorder = StateRecorder()
        provider.add_listener(recorder)

        await provider.set_quick_exit_enabled(True)

        assert provider.quick_exit_enabled is True
        assert recorder.states[-1].quick_exit_enabled is True
        assert await provider.service.is_quick_exit_enabled() is False

    @pytest.mark.asyncio
    async def test_execute_quick_exit_delegates(self, provider):
        provider.start_incognito_session()
        await provider.add_recent_program("shelter")
        await provider.execute_quick_exit()
        assert await provider.get_recent_programs() == []
        assert await provider.service.wait_for_navigation() is False

    def test_pass_throughs(self, provider):
        assert provider.is_program_sensitive("lgbtq", None) is True
        assert len(provider.get_safety_tips("crisis")) == 5
        assert provider.quick_exit_destinations[0].id == "google"
        assert provider.disguised_icons == DISGUISED_ICONS


class TestDisguise:

    @pytest.mark.asyncio
    async def test_apply_with_icon(self, provider):
        icon = DISGUISED_ICONS[2]
        result = await provider.apply_disguised_icon(icon)
        assert result.success is True
        assert provider.disguised_mode_enabled is True
        assert provider.current_disguised_icon == icon

    @pytest.mark.asyncio
    async def test_apply_with_id(self, provider):
        await provider.apply_disguised_icon("files")
        assert provider.current_disguised_icon.name == "Files"

    @pytest.mark.asyncio
    async def test_failed_apply_leaves_cache_but_notifies(self):
        provider = make_provider(FailingWriteStore())
        recorder = StateRecorder()
        provider.add_listener(recorder)

        result = await provider.apply_disguised_icon("notes")

        assert result.success is False
        assert provider.disguised_mode_enabled is False
        assert provider.current_disguised_icon is None
        assert len(recorder.states) == 1

    @pytest.mark.asyncio
    async def test_reset(self, provider):
        await provider.apply_disguised_icon("notes")
        result = await provider.reset_to_default_icon()
        assert result.success is True
        assert provider.disguised_mode_enabled is False
        assert provider.current_disguised_icon is None


# ===========================================================================
# Listeners
# ===========================================================================


class TestListeners:

    @pytest.mark.asyncio
    async def test_cancelled_subscription_stops_updates(self, provider):
        recorder = StateRecorder()
        subscription = provider.add_listener(recorder)
        subscription.cancel()
        assert subscription.active is False

        await provider.set_show_safety_tips(False)
        assert recorder.states == []

    @pytest.mark.asyncio
    async def test_cancel_twice_is_safe(self, provider):
        subscription = provider.add_listener(lambda state: None)
        subscription.cancel()
        subscription.cancel()

    @pytest.mark.asyncio
    async def test_failing_listener_does_not_block_others(self, provider):
        def broken(state: SafetyState) -> None:
            raise RuntimeError("render failed")

        recorder = StateRecorder()
        provider.add_listener(broken)
        provider.add_listener(recorder)

        await provider.set_quick_exit_enabled(True)

        assert len(recorder.states) == 1

    def test_state_is_immutable(self, provider):
        state = provider.state
        with pytest.raises(AttributeError):
            state.quick_exit_enabled = True
