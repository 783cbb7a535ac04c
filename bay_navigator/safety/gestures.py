"""
Panic gesture detection.

Lets a user trigger the quick exit without finding a button: shaking the
phone hard three times, or tapping anywhere three times in quick
succession. The host UI feeds raw accelerometer samples and taps in; the
detector decides when a gesture is complete.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable

from .capabilities import HapticFeedback, NullHapticFeedback
from .provider import SafetyProvider

logger = logging.getLogger(__name__)

STANDARD_GRAVITY = 9.8


@dataclass
class GestureConfig:
    """
    Thresholds for panic gesture detection.

    Attributes:
        shake_threshold: Acceleration above gravity (m/s^2) that counts as
            a shake.
        shake_count: Shakes needed to trigger.
        shake_reset_seconds: Max gap between shakes before the count restarts.
        tap_count: Taps needed to trigger.
        tap_reset_seconds: Max gap between taps before the count restarts.
    """

    shake_threshold: float = 15.0
    shake_count: int = 3
    shake_reset_seconds: float = 0.5
    tap_count: int = 3
    tap_reset_seconds: float = 0.4

    def __post_init__(self) -> None:
        if self.shake_threshold <= 0:
            raise ValueError("shake_threshold must be positive")
        if self.shake_count < 1:
            raise ValueError("shake_count must be at least 1")
        if self.tap_count < 2:
            raise ValueError("tap_count must be at least 2 so a single tap never exits")
        if self.shake_reset_seconds <= 0 or self.tap_reset_seconds <= 0:
            raise ValueError("reset windows must be positive")


class QuickExitDetector:
    """
    Turns shakes and taps into a quick exit.

    Gestures are ignored while quick exit is disabled on the provider.

    Args:
        provider: Facade whose quick exit is triggered.
        haptics: Feedback fired just before the quick exit.
        config: Detection thresholds.
        clock: Monotonic time source in seconds.
    """

    def __init__(
        self,
        provider: SafetyProvider,
        haptics: HapticFeedback | None = None,
        config: GestureConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._provider = provider
        self._haptics = haptics or NullHapticFeedback()
        self.config = config or GestureConfig()
        self._clock = clock

        self._shake_count = 0
        self._last_shake: float | None = None
        self._tap_count = 0
        self._last_tap: float | None = None

    async def on_accelerometer(self, x: float, y: float, z: float) -> bool:
        """Feed one accelerometer sample. Returns True if quick exit ran."""
        acceleration = abs(x) + abs(y) + abs(z) - STANDARD_GRAVITY
        if acceleration <= self.config.shake_threshold:
            return False

        now = self._clock()
        if self._last_shake is None or now - self._last_shake > self.config.shake_reset_seconds:
            self._shake_count = 1
        else:
            self._shake_count += 1
        self._last_shake = now

        if self._shake_count >= self.config.shake_count:
            self._shake_count = 0
            return await self._trigger("shake")
        return False

    async def on_tap(self) -> bool:
        """Feed one tap. Returns True if quick exit ran."""
        now = self._clock()
        if self._last_tap is not None and now - self._last_tap > self.config.tap_reset_seconds:
            self._tap_count = 0
        self._tap_count += 1
        self._last_tap = now

        if self._tap_count >= self.config.tap_count:
            self._tap_count = 0
            self._last_tap = None
            return await self._trigger("tap")
        return False

    async def _trigger(self, gesture: str) -> bool:
        if not self._provider.quick_exit_enabled:
            return False

        logger.info("Quick exit triggered by %s gesture", gesture)
        try:
            self._haptics.heavy_impact()
        except Exception as exc:
            logger.debug("Haptic feedback failed: %s", exc)

        await self._provider.execute_quick_exit()
        return True
