from __future__ import annotations

import logging
from typing import Any
from urllib.parse import urlsplit

from site_sentinel.config import DEFAULT_NAVIGATION_TIMEOUT_MS, DEFAULT_USER_AGENT
from site_sentinel.errors import InspectionError
from site_sentinel.inspector.driver import (
    BrowserDriver,
    BrowserSession,
    NavigationRequest,
    NavigationResponse,
    PageHandle,
)
from site_sentinel.inspector.models import Category, Finding, Severity

logger = logging.getLogger(__name__)

WAIT_UNTIL = "domcontentloaded"
NETWORK_SCHEMES = frozenset({"http", "https"})


class FindingAccumulator:
    """Append-only findings buffer owned by a single inspection run.

    Observer callbacks run on the session's event loop and may fire before
    or after navigation settles. Once the session is closed the buffer is
    sealed and late events are dropped.
    """

    def __init__(self) -> None:
        self._items: list[Finding] = []
        self._sealed = False

    def add(self, finding: Finding) -> None:
        if self._sealed:
            logger.debug("Dropping finding after session close: %s", finding.title)
            return
        self._items.append(finding)

    def extend(self, findings: list[Finding]) -> None:
        for finding in findings:
            self.add(finding)

    def seal(self) -> None:
        self._sealed = True

    def snapshot(self) -> list[Finding]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)


def _severity_from_status(status: int) -> Severity:
    return Severity.ERROR if status >= 500 else Severity.WARNING


def _is_network_url(url: str) -> bool:
    return urlsplit(url).scheme.lower() in NETWORK_SCHEMES


def console_finding(message: Any, project_id: str, target_url: str) -> Finding | None:
    level = message.type
    if level not in ("error", "warning"):
        return None
    location = message.location or {}
    return Finding(
        title="Console Error" if level == "error" else "Console Warning",
        description=f"Message: {message.text}\nLocation: {location.get('url') or 'N/A'}",
        severity=Severity.ERROR if level == "error" else Severity.WARNING,
        category=Category.CONSOLE,
        url=target_url,
        project_id=project_id,
    )


def page_error_finding(error: Any, project_id: str, target_url: str) -> Finding:
    message = getattr(error, "message", None) or str(error)
    stack = getattr(error, "stack", None) or "N/A"
    return Finding(
        title="JavaScript Exception",
        description=f"Error: {message}\nStack: {stack}",
        severity=Severity.ERROR,
        category=Category.CONSOLE,
        url=target_url,
        project_id=project_id,
    )


def response_finding(response: Any, project_id: str) -> Finding | None:
    status = response.status
    url = response.url
    if status < 400 or not _is_network_url(url):
        return None
    return Finding(
        title=f"Resource Load Error ({status})",
        description=f"Failed to load resource: {url}",
        severity=_severity_from_status(status),
        category=Category.RESOURCE,
        url=url,
        project_id=project_id,
    )


def _is_ssl_failure(error_text: str) -> bool:
    text = error_text.upper()
    return "CERT" in text or "SSL" in text


def navigation_failure_finding(exc: BaseException, project_id: str, target_url: str) -> Finding:
    """Classify a failed `goto` by substring heuristics on the error text."""
    error_text = getattr(exc, "message", None) or str(exc) or type(exc).__name__
    is_ssl = _is_ssl_failure(error_text)
    return Finding(
        title="Potential SSL Error" if is_ssl else "Navigation Error",
        description=f"Failed to navigate to {target_url}. Error: {error_text}",
        severity=Severity.ERROR,
        category=Category.SSL if is_ssl else Category.STATUS_CODE,
        url=target_url,
        project_id=project_id,
    )


def redirect_chain(request: NavigationRequest) -> list[str]:
    """Return the URLs that redirected to `request`, oldest first."""
    chain: list[str] = []
    current = request.redirected_from
    while current is not None:
        chain.append(current.url)
        current = current.redirected_from
    chain.reverse()
    return chain


def navigation_response_findings(
    response: NavigationResponse, project_id: str, target_url: str
) -> list[Finding]:
    findings: list[Finding] = []
    status = response.status

    if status >= 400:
        findings.append(
            Finding(
                title=f"Page Status Code Error ({status})",
                description=f"Page {target_url} returned status {status}.",
                severity=_severity_from_status(status),
                category=Category.STATUS_CODE,
                url=target_url,
                project_id=project_id,
            )
        )

    chain = redirect_chain(response.request)
    if chain:
        logger.debug("Redirect chain detected: %s", " -> ".join(chain))
        findings.append(
            Finding(
                title="Redirection Detected",
                description=(
                    f"Page loaded via redirect: {' -> '.join(chain)} -> {target_url} (Status: {status})"
                ),
                severity=Severity.INFO,
                category=Category.REDIRECT,
                url=chain[0],
                project_id=project_id,
            )
        )

    return findings


class Inspector:
    """Drives one browser session through one page load and returns findings."""

    def __init__(
        self,
        driver: BrowserDriver,
        user_agent: str = DEFAULT_USER_AGENT,
        navigation_timeout_ms: int = DEFAULT_NAVIGATION_TIMEOUT_MS,
    ) -> None:
        self._driver = driver
        self._user_agent = user_agent
        self._navigation_timeout_ms = navigation_timeout_ms

    async def inspect(self, project_id: str, target_url: str) -> list[Finding]:
        logger.info("Starting inspection of %s for project %s", target_url, project_id)
        try:
            session = await self._driver.launch()
        except Exception as exc:
            raise InspectionError(f"Failed to launch browser: {exc}") from exc

        findings = FindingAccumulator()
        try:
            context = await session.new_context(
                user_agent=self._user_agent,
                # Certificate errors must surface so SSL problems become findings.
                ignore_https_errors=False,
            )
            page = await context.new_page()
            self._attach_observers(page, findings, project_id, target_url)

            response = await self._navigate(page, findings, project_id, target_url)
            if response is not None:
                logger.info("Main page status for %s: %s", target_url, response.status)
                findings.extend(navigation_response_findings(response, project_id, target_url))
        except Exception as exc:
            raise InspectionError(f"Inspection of {target_url} failed: {exc}") from exc
        finally:
            findings.seal()
            await self._close(session)

        logger.info("Inspection of %s finished with %d finding(s)", target_url, len(findings))
        return findings.snapshot()

    def _attach_observers(
        self, page: PageHandle, findings: FindingAccumulator, project_id: str, target_url: str
    ) -> None:
        def on_console(message: Any) -> None:
            try:
                finding = console_finding(message, project_id, target_url)
            except Exception:
                logger.exception("Skipping malformed console event")
                return
            if finding is not None:
                logger.debug("Console [%s]: %s", finding.severity.value, finding.description)
                findings.add(finding)

        def on_page_error(error: Any) -> None:
            try:
                finding = page_error_finding(error, project_id, target_url)
            except Exception:
                logger.exception("Skipping malformed pageerror event")
                return
            logger.debug("Page error: %s", finding.description)
            findings.add(finding)

        def on_response(response: Any) -> None:
            try:
                finding = response_finding(response, project_id)
            except Exception:
                logger.exception("Skipping malformed response event")
                return
            if finding is not None:
                logger.debug("Network response error: %s", finding.title)
                findings.add(finding)

        page.on("console", on_console)
        page.on("pageerror", on_page_error)
        page.on("response", on_response)

    async def _navigate(
        self, page: PageHandle, findings: FindingAccumulator, project_id: str, target_url: str
    ) -> NavigationResponse | None:
        try:
            return await page.goto(
                target_url,
                wait_until=WAIT_UNTIL,
                timeout=self._navigation_timeout_ms,
            )
        except Exception as exc:
            logger.warning("Navigation to %s failed: %s", target_url, exc)
            findings.add(navigation_failure_finding(exc, project_id, target_url))
            return None

    async def _close(self, session: BrowserSession) -> None:
        try:
            await session.close()
        except Exception:
            logger.exception("Failed to close browser session")
        else:
            logger.debug("Browser session closed")
