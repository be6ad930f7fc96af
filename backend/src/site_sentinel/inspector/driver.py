from __future__ import annotations

from typing import Any, Callable, Protocol

from playwright.async_api import Browser, Playwright, async_playwright


class NavigationRequest(Protocol):
    @property
    def url(self) -> str: ...

    @property
    def redirected_from(self) -> "NavigationRequest | None": ...


class NavigationResponse(Protocol):
    @property
    def status(self) -> int: ...

    @property
    def url(self) -> str: ...

    @property
    def request(self) -> NavigationRequest: ...


class PageHandle(Protocol):
    def on(self, event: str, handler: Callable[[Any], Any]) -> None: ...

    async def goto(
        self, url: str, *, wait_until: str, timeout: float
    ) -> NavigationResponse | None: ...


class ContextHandle(Protocol):
    async def new_page(self) -> PageHandle: ...


class BrowserSession(Protocol):
    async def new_context(self, *, user_agent: str, ignore_https_errors: bool) -> ContextHandle: ...

    async def close(self) -> None: ...


class BrowserDriver(Protocol):
    """Starts one isolated browser session per inspection."""

    async def launch(self) -> BrowserSession: ...


class PlaywrightSession:
    """A chromium browser plus the Playwright runtime that started it."""

    def __init__(self, playwright: Playwright, browser: Browser) -> None:
        self._playwright = playwright
        self._browser = browser

    async def new_context(self, *, user_agent: str, ignore_https_errors: bool) -> ContextHandle:
        return await self._browser.new_context(
            user_agent=user_agent,
            ignore_https_errors=ignore_https_errors,
        )

    async def close(self) -> None:
        # Closing the browser tears down its contexts, pages and listeners.
        try:
            await self._browser.close()
        finally:
            await self._playwright.stop()


class PlaywrightDriver:
    def __init__(self, headless: bool = True) -> None:
        self._headless = headless

    async def launch(self) -> PlaywrightSession:
        playwright = await async_playwright().start()
        try:
            browser = await playwright.chromium.launch(headless=self._headless)
        except BaseException:
            await playwright.stop()
            raise
        return PlaywrightSession(playwright, browser)
