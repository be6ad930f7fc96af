"""Scripted stand-in for the Playwright driver used by the inspector tests."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable


@dataclass
class FakeRequest:
    url: str
    redirected_from: "FakeRequest | None" = None


@dataclass
class FakeResponse:
    status: int
    url: str
    request: FakeRequest


@dataclass
class FakeConsoleMessage:
    type: str
    text: str
    location: dict[str, Any] = field(default_factory=dict)


@dataclass
class FakePageError:
    message: str
    stack: str | None = None


class NavigationFailure(Exception):
    """Mimics playwright.async_api.Error, which exposes `.message`."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


def redirected_response(urls: list[str], status: int = 200) -> FakeResponse:
    """Build a final response whose request was reached through `urls` in order."""
    request: FakeRequest | None = None
    for url in urls:
        request = FakeRequest(url=url, redirected_from=request)
    assert request is not None
    return FakeResponse(status=status, url=request.url, request=request)


@dataclass
class PageScript:
    events: list[tuple[str, Any]] = field(default_factory=list)
    response: FakeResponse | None = None
    error: BaseException | None = None
    late_events: list[tuple[str, Any]] = field(default_factory=list)


class FakePage:
    def __init__(self, script: PageScript) -> None:
        self._script = script
        self.handlers: dict[str, list[Callable[[Any], Any]]] = defaultdict(list)
        self.goto_calls: list[tuple[str, str, float]] = []

    def on(self, event: str, handler: Callable[[Any], Any]) -> None:
        self.handlers[event].append(handler)

    def emit(self, event: str, payload: Any) -> None:
        for handler in self.handlers[event]:
            handler(payload)

    async def goto(self, url: str, *, wait_until: str, timeout: float) -> FakeResponse | None:
        self.goto_calls.append((url, wait_until, timeout))
        for event, payload in self._script.events:
            self.emit(event, payload)
        if self._script.error is not None:
            raise self._script.error
        return self._script.response


class FakeContext:
    def __init__(self, page: FakePage) -> None:
        self.page = page

    async def new_page(self) -> FakePage:
        return self.page


class FakeSession:
    def __init__(self, script: PageScript, close_error: BaseException | None = None) -> None:
        self.page = FakePage(script)
        self.context_options: dict[str, Any] | None = None
        self.close_calls = 0
        self._script = script
        self._close_error = close_error

    async def new_context(self, *, user_agent: str, ignore_https_errors: bool) -> FakeContext:
        self.context_options = {"user_agent": user_agent, "ignore_https_errors": ignore_https_errors}
        return FakeContext(self.page)

    async def close(self) -> None:
        self.close_calls += 1
        # Events that arrive while the browser shuts down.
        for event, payload in self._script.late_events:
            self.page.emit(event, payload)
        if self._close_error is not None:
            raise self._close_error


class FakeDriver:
    def __init__(
        self,
        script: PageScript | None = None,
        launch_error: BaseException | None = None,
        close_error: BaseException | None = None,
    ) -> None:
        self.script = script or PageScript()
        self.launch_error = launch_error
        self.close_error = close_error
        self.sessions: list[FakeSession] = []

    async def launch(self) -> FakeSession:
        if self.launch_error is not None:
            raise self.launch_error
        session = FakeSession(self.script, close_error=self.close_error)
        self.sessions.append(session)
        return session
