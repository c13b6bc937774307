import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

from playwright.async_api import async_playwright, Browser, BrowserContext, Page, Playwright

from ..core.exceptions import ConfigurationError, SessionError

logger = logging.getLogger(__name__)

SUPPORTED_BROWSERS = ['chromium', 'firefox', 'webkit']


class BrowserProvider(ABC):
    """Launches browser instances for journeys"""

    @abstractmethod
    async def launch(self, browser_type: str, options: Optional[Dict[str, Any]] = None) -> Any:
        """Launch a browser exposing ``new_context()`` and ``close()``"""
        pass

    async def stop(self) -> None:
        """Release provider-wide resources"""
        pass


class PlaywrightProvider(BrowserProvider):
    """Browser provider backed by Playwright's async API"""

    def __init__(self):
        self._manager = None
        self._playwright: Optional[Playwright] = None

    async def _ensure_started(self) -> Playwright:
        if self._playwright is None:
            self._manager = async_playwright()
            self._playwright = await self._manager.start()
            logger.debug("Playwright started")
        return self._playwright

    async def launch(self, browser_type: str, options: Optional[Dict[str, Any]] = None) -> Browser:
        if browser_type not in SUPPORTED_BROWSERS:
            raise ConfigurationError(f"Unsupported browser: {browser_type}")

        playwright = await self._ensure_started()
        launch_args = dict(options or {})
        logger.debug(f"Launching {browser_type} with {launch_args}")
        return await getattr(playwright, browser_type).launch(**launch_args)

    async def stop(self) -> None:
        if self._playwright is not None:
            await self._playwright.stop()
            logger.debug("Playwright stopped")
        self._manager = None
        self._playwright = None


@dataclass
class BrowserSession:
    """The browser, isolated context and page owned by one journey"""
    browser: Browser
    context: BrowserContext
    page: Page

    @classmethod
    async def acquire(
            cls,
            provider: BrowserProvider,
            browser_type: str,
            options: Optional[Dict[str, Any]] = None,
            context_options: Optional[Dict[str, Any]] = None
    ) -> "BrowserSession":
        """
        Launch a browser and open one context and one page in it.

        Raises:
            SessionError: if any of the three could not be created. A browser
                that was launched is closed before the error is raised.
        """
        try:
            browser = await provider.launch(browser_type, options)
        except Exception as e:
            raise SessionError(f"Could not launch {browser_type}: {e}") from e

        try:
            context = await browser.new_context(**(context_options or {}))
            page = await context.new_page()
        except Exception as e:
            try:
                await browser.close()
            except Exception as close_error:
                logger.error(f"Failed to close browser after session error: {close_error}")
            raise SessionError(f"Could not open page in {browser_type}: {e}") from e

        return cls(browser=browser, context=context, page=page)

    async def close(self) -> None:
        await self.browser.close()
