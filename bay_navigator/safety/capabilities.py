"""
Platform capabilities the safety engine calls out to.

Opening a URL in an external browser, sending the app to the background
and haptic feedback are all best-effort: callers never depend on them
succeeding.
"""

from __future__ import annotations

import asyncio
import logging
import webbrowser
from abc import ABC, abstractmethod
from urllib.parse import urlparse

logger = logging.getLogger(__name__)


class UrlLauncher(ABC):
    """Opens URLs outside the app."""

    @abstractmethod
    async def can_open(self, url: str) -> bool:
        """Return True if some handler can open *url*."""
        pass

    @abstractmethod
    async def open(self, url: str) -> None:
        """Open *url* in an external application."""
        pass


class AppBackgrounder(ABC):
    """Moves the foreground app out of sight."""

    @abstractmethod
    def send_to_background(self) -> None:
        """Fire-and-forget request to background or close the app."""
        pass


class HapticFeedback(ABC):
    """Physical feedback for panic gestures."""

    @abstractmethod
    def heavy_impact(self) -> None:
        pass


class WebBrowserUrlLauncher(UrlLauncher):
    """Opens URLs with the system's default web browser."""

    async def can_open(self, url: str) -> bool:
        parsed = urlparse(url)
        if not parsed.scheme:
            return False
        try:
            webbrowser.get()
        except webbrowser.Error:
            return False
        return True

    async def open(self, url: str) -> None:
        opened = await asyncio.to_thread(webbrowser.open, url, 2)
        if not opened:
            logger.warning("Browser refused to open %s", url)


class LoggingAppBackgrounder(AppBackgrounder):
    """Backgrounder for hosts with nothing to background (CLI, tests)."""

    def __init__(self) -> None:
        self.calls = 0

    def send_to_background(self) -> None:
        self.calls += 1
        logger.info("App backgrounding requested")


class NullHapticFeedback(HapticFeedback):
    """Haptics for hosts without a vibration motor."""

    def heavy_impact(self) -> None:
        pass
