"""
Connectivity signals and network privacy classification.

A connectivity signal reports which transports are currently active and
pushes a notification whenever that changes. ``classify_network`` turns a
reading into a :class:`NetworkPrivacyStatus`.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Iterable

import psutil

from .models import ConnectionKind, NetworkPrivacyLevel, NetworkPrivacyStatus, SafetyError

logger = logging.getLogger(__name__)

Reading = frozenset[ConnectionKind]


class ConnectivityError(SafetyError):
    """Raised when the connectivity state cannot be determined."""
    pass


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

_WIFI = NetworkPrivacyStatus(
    level=NetworkPrivacyLevel.CAUTION,
    connection_type="WiFi",
    warning="You're on WiFi. Network owner may be able to see your activity.",
    suggestion="Consider using mobile data for sensitive lookups.",
)
_MOBILE = NetworkPrivacyStatus(
    level=NetworkPrivacyLevel.MODERATE,
    connection_type="Mobile Data",
    suggestion="Mobile data is generally more private than public WiFi.",
)
_VPN = NetworkPrivacyStatus(
    level=NetworkPrivacyLevel.GOOD,
    connection_type="VPN",
    suggestion="VPN detected. Your traffic is encrypted.",
)
_OFFLINE = NetworkPrivacyStatus(
    level=NetworkPrivacyLevel.OFFLINE,
    connection_type="Offline",
    warning="You're offline.",
    suggestion="Some features may not work without internet.",
)

# First match wins.
_PRIORITY: tuple[tuple[ConnectionKind, NetworkPrivacyStatus], ...] = (
    (ConnectionKind.WIFI, _WIFI),
    (ConnectionKind.MOBILE, _MOBILE),
    (ConnectionKind.VPN, _VPN),
    (ConnectionKind.NONE, _OFFLINE),
)


def classify_network(reading: Iterable[ConnectionKind]) -> NetworkPrivacyStatus:
    """Map a connectivity reading to its privacy status.

    WiFi outranks mobile data, which outranks VPN, which outranks offline.
    Anything else (including an empty reading) is unknown.
    """
    kinds = frozenset(reading)
    for kind, status in _PRIORITY:
        if kind in kinds:
            return status
    return NetworkPrivacyStatus.unknown()


def parse_reading(values: Iterable[str]) -> Reading:
    """Parse transport names such as ``"wifi"`` or ``"VPN"`` into a reading.

    Raises:
        ValueError: If a name is not a known transport.
    """
    kinds = set()
    for value in values:
        value = value.strip().lower()
        if not value:
            continue
        if value == "cellular":
            value = ConnectionKind.MOBILE.value
        kinds.add(ConnectionKind(value))
    return frozenset(kinds)


# ---------------------------------------------------------------------------
# Signals
# ---------------------------------------------------------------------------


class ConnectivitySignal(ABC):
    """Source of connectivity readings and change notifications."""

    @abstractmethod
    async def check_connectivity(self) -> Reading:
        """
        Return the transports that are currently active.

        Raises:
            ConnectivityError: If the state cannot be determined.
        """
        pass

    @abstractmethod
    def changes(self) -> AsyncIterator[Reading]:
        """Yield a reading each time connectivity changes."""
        pass


class _ReadingQueue:
    """Subscriber side of a StaticConnectivitySignal.

    Registers on construction, so readings emitted before the first
    ``__anext__`` are not lost.
    """

    def __init__(self, subscribers: list[asyncio.Queue[Reading]]) -> None:
        self._subscribers = subscribers
        self._queue: asyncio.Queue[Reading] = asyncio.Queue()
        self._closed = False
        subscribers.append(self._queue)

    def __aiter__(self) -> "_ReadingQueue":
        return self

    async def __anext__(self) -> Reading:
        if self._closed:
            raise StopAsyncIteration
        return await self._queue.get()

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._subscribers.remove(self._queue)


class StaticConnectivitySignal(ConnectivitySignal):
    """
    Connectivity signal driven by the caller.

    Holds a fixed reading until :meth:`emit` replaces it, at which point
    every open :meth:`changes` iterator receives the new reading. Used in
    tests and when the host reports connectivity itself.

    Example:
        signal = StaticConnectivitySignal({ConnectionKind.WIFI})
        await signal.emit({ConnectionKind.VPN})
    """

    def __init__(self, reading: Iterable[ConnectionKind] = (), fail: bool = False) -> None:
        self._reading: Reading = frozenset(reading)
        self._subscribers: list[asyncio.Queue[Reading]] = []
        self.fail = fail

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    async def check_connectivity(self) -> Reading:
        if self.fail:
            raise ConnectivityError("connectivity unavailable")
        return self._reading

    async def emit(self, reading: Iterable[ConnectionKind]) -> None:
        """Replace the current reading and notify subscribers."""
        self._reading = frozenset(reading)
        for queue in list(self._subscribers):
            queue.put_nowait(self._reading)

    def changes(self) -> _ReadingQueue:
        return _ReadingQueue(self._subscribers)


# Interface name prefixes, checked in order.
_INTERFACE_PREFIXES: tuple[tuple[ConnectionKind, tuple[str, ...]], ...] = (
    (ConnectionKind.VPN, ("tun", "tap", "wg", "ppp", "ipsec", "tailscale", "zt")),
    (ConnectionKind.WIFI, ("wlan", "wlp", "wl", "wifi", "wi-fi", "ath")),
    (ConnectionKind.MOBILE, ("wwan", "rmnet", "ccmni", "pdp_ip", "cellular")),
    (ConnectionKind.BLUETOOTH, ("bnep", "bt-pan", "bluetooth")),
    (ConnectionKind.ETHERNET, ("eth", "enp", "eno", "ens", "en", "ethernet")),
)

# macOS keeps utun interfaces up for system services whether or not a VPN
# is connected, so they say nothing about the transport.
_IGNORED_PREFIXES = (
    "lo", "docker", "br-", "veth", "virbr", "awdl", "llw", "anpi", "bridge", "gif", "stf", "utun",
)


def kind_for_interface(name: str) -> ConnectionKind | None:
    """Guess the transport of a network interface from its name.

    Returns None for loopback, virtual bridge and macOS utun interfaces.
    """
    lowered = name.lower()
    if lowered.startswith(_IGNORED_PREFIXES):
        return None
    for kind, prefixes in _INTERFACE_PREFIXES:
        if lowered.startswith(prefixes):
            return kind
    return ConnectionKind.OTHER


class InterfaceConnectivitySignal(ConnectivitySignal):
    """
    Connectivity signal that inspects the host's network interfaces.

    Uses ``psutil.net_if_stats`` to find interfaces that are up and
    classifies them by name. :meth:`changes` polls at a fixed interval and
    yields only when the reading differs from the previous one.

    Parameters:
        poll_interval: Seconds between polls.
    """

    def __init__(self, poll_interval: float = 5.0) -> None:
        self.poll_interval = poll_interval

    async def check_connectivity(self) -> Reading:
        try:
            stats = psutil.net_if_stats()
        except (OSError, RuntimeError) as exc:
            raise ConnectivityError(f"Cannot read network interfaces: {exc}") from exc

        kinds = set()
        for name, stat in stats.items():
            if not stat.isup:
                continue
            kind = kind_for_interface(name)
            if kind is not None:
                kinds.add(kind)
        if not kinds:
            kinds.add(ConnectionKind.NONE)
        return frozenset(kinds)

    async def changes(self) -> AsyncIterator[Reading]:
        previous: Reading | None = None
        while True:
            try:
                reading = await self.check_connectivity()
            except ConnectivityError as exc:
                logger.warning("Connectivity poll failed: %s", exc)
                reading = None
            if reading is not None and previous is not None and reading != previous:
                yield reading
            if reading is not None:
                previous = reading
            await asyncio.sleep(self.poll_interval)
