"""Tests for bay_navigator.safety.connectivity.

Tests cover:
- classify_network priority and statuses
- parse_reading
- kind_for_interface
- StaticConnectivitySignal subscriptions
- InterfaceConnectivitySignal with psutil patched
"""

from __future__ import annotations

import asyncio
from collections import namedtuple
from unittest.mock import patch

import pytest

from bay_navigator.safety.connectivity import (
    ConnectivityError,
    InterfaceConnectivitySignal,
    StaticConnectivitySignal,
    classify_network,
    kind_for_interface,
    parse_reading,
)
from bay_navigator.safety.models import ConnectionKind, NetworkPrivacyLevel


IfStats = namedtuple("IfStats", ["isup"])

K = ConnectionKind


# ===========================================================================
# classify_network
# ===========================================================================


class TestClassifyNetwork:

    @pytest.mark.parametrize(
        "reading, level, connection_type",
        [
            ({K.WIFI}, NetworkPrivacyLevel.CAUTION, "WiFi"),
            ({K.MOBILE}, NetworkPrivacyLevel.MODERATE, "Mobile Data"),
            ({K.VPN}, NetworkPrivacyLevel.GOOD, "VPN"),
            ({K.NONE}, NetworkPrivacyLevel.OFFLINE, "Offline"),
            ({K.ETHERNET}, NetworkPrivacyLevel.UNKNOWN, "Unknown"),
            (set(), NetworkPrivacyLevel.UNKNOWN, "Unknown"),
            ({K.WIFI, K.VPN}, NetworkPrivacyLevel.CAUTION, "WiFi"),
            ({K.MOBILE, K.VPN}, NetworkPrivacyLevel.MODERATE, "Mobile Data"),
            ({K.VPN, K.ETHERNET}, NetworkPrivacyLevel.GOOD, "VPN"),
        ],
    )
    def test_classification(self, reading, level, connection_type):
        status = classify_network(reading)
        assert status.level is level
        assert status.connection_type == connection_type

    def test_wifi_warns(self):
        status = classify_network({K.WIFI})
        assert status.has_warning
        assert "Network owner" in status.warning
        assert status.suggestion == "Consider using mobile data for sensitive lookups."

    def test_mobile_and_vpn_do_not_warn(self):
        assert classify_network({K.MOBILE}).warning is None
        assert classify_network({K.VPN}).warning is None

    def test_offline_warns(self):
        status = classify_network({K.NONE})
        assert status.warning == "You're offline."


# ===========================================================================
# parse_reading / kind_for_interface
# ===========================================================================


class TestParseReading:

    def test_names(self):
        assert parse_reading(["WiFi", " vpn "]) == frozenset({K.WIFI, K.VPN})

    def test_cellular_alias(self):
        assert parse_reading(["cellular"]) == frozenset({K.MOBILE})

    def test_blank_entries_skipped(self):
        assert parse_reading(["", "none"]) == frozenset({K.NONE})

    def test_unknown_name_raises(self):
        with pytest.raises(ValueError):
            parse_reading(["carrier-pigeon"])


class TestKindForInterface:

    @pytest.mark.parametrize(
        "name, kind",
        [
            ("wlan0", K.WIFI),
            ("wlp3s0", K.WIFI),
            ("eth0", K.ETHERNET),
            ("enp0s31f6", K.ETHERNET),
            ("tun0", K.VPN),
            ("wg0", K.VPN),
            ("rmnet_data0", K.MOBILE),
            ("pdp_ip0", K.MOBILE),
            ("bnep0", K.BLUETOOTH),
            ("mystery0", K.OTHER),
        ],
    )
    def test_known_prefixes(self, name, kind):
        assert kind_for_interface(name) is kind

    @pytest.mark.parametrize(
        "name", ["lo", "lo0", "docker0", "veth12ab", "virbr0", "br-1234", "utun0", "utun3"]
    )
    def test_virtual_interfaces_ignored(self, name):
        assert kind_for_interface(name) is None


# ===========================================================================
# StaticConnectivitySignal
# ===========================================================================


class TestStaticConnectivitySignal:

    @pytest.mark.asyncio
    async def test_check_returns_reading(self):
        signal = StaticConnectivitySignal({K.MOBILE})
        assert await signal.check_connectivity() == frozenset({K.MOBILE})

    @pytest.mark.asyncio
    async def test_fail_raises(self):
        signal = StaticConnectivitySignal(fail=True)
        with pytest.raises(ConnectivityError):
            await signal.check_connectivity()

    @pytest.mark.asyncio
    async def test_subscription_receives_emits_made_before_first_read(self):
        signal = StaticConnectivitySignal({K.WIFI})
        changes = signal.changes()
        await signal.emit({K.VPN})
        await signal.emit({K.NONE})

        assert await changes.__anext__() == frozenset({K.VPN})
        assert await changes.__anext__() == frozenset({K.NONE})
        await changes.aclose()

    @pytest.mark.asyncio
    async def test_aclose_unsubscribes(self):
        signal = StaticConnectivitySignal()
        changes = signal.changes()
        assert signal.subscriber_count == 1
        await changes.aclose()
        await changes.aclose()
        assert signal.subscriber_count == 0
        with pytest.raises(StopAsyncIteration):
            await changes.__anext__()


# ===========================================================================
# InterfaceConnectivitySignal
# ===========================================================================


class TestInterfaceConnectivitySignal:

    @pytest.mark.asyncio
    async def test_reads_up_interfaces(self):
        stats = {
            "lo": IfStats(True),
            "wlan0": IfStats(True),
            "eth0": IfStats(False),
            "tun0": IfStats(True),
        }
        with patch("bay_navigator.safety.connectivity.psutil.net_if_stats", return_value=stats):
            reading = await InterfaceConnectivitySignal().check_connectivity()
        assert reading == frozenset({K.WIFI, K.VPN})

    @pytest.mark.asyncio
    async def test_nothing_up_is_none(self):
        stats = {"lo": IfStats(True), "eth0": IfStats(False)}
        with patch("bay_navigator.safety.connectivity.psutil.net_if_stats", return_value=stats):
            reading = await InterfaceConnectivitySignal().check_connectivity()
        assert reading == frozenset({K.NONE})

    @pytest.mark.asyncio
    async def test_macos_system_utun_is_not_a_vpn(self):
        stats = {
            "lo0": IfStats(True),
            "en0": IfStats(True),
            "awdl0": IfStats(True),
            "utun0": IfStats(True),
            "utun1": IfStats(True),
        }
        with patch("bay_navigator.safety.connectivity.psutil.net_if_stats", return_value=stats):
            reading = await InterfaceConnectivitySignal().check_connectivity()

        assert K.VPN not in reading
        assert classify_network(reading).level is not NetworkPrivacyLevel.GOOD

    @pytest.mark.asyncio
    async def test_os_error_becomes_connectivity_error(self):
        with patch(
            "bay_navigator.safety.connectivity.psutil.net_if_stats",
            side_effect=OSError("denied"),
        ):
            with pytest.raises(ConnectivityError):
                await InterfaceConnectivitySignal().check_connectivity()

    @pytest.mark.asyncio
    async def test_changes_yields_only_on_change(self):
        readings = iter([
            {"wlan0": IfStats(True)},
            {"wlan0": IfStats(True)},
            {"wlan0": IfStats(False), "rmnet0": IfStats(True)},
        ])
        with patch(
            "bay_navigator.safety.connectivity.psutil.net_if_stats",
            side_effect=lambda: next(readings),
        ):
            changes = InterfaceConnectivitySignal(poll_interval=0.001).changes()
            reading = await asyncio.wait_for(changes.__anext__(), 1.0)
            await changes.aclose()
        assert reading == frozenset({K.MOBILE})
