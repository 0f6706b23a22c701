"""Page capture using a Playwright headless browser.

A capture produces everything the analyzers need from one page load: a
full-page PNG screenshot, the rendered markup, and the visible text.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

import structlog
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeout
from playwright.async_api import async_playwright

from api.exceptions import CaptureError
from worker.capture.url import validate_url

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class PageCapture:
    """Snapshot of a rendered page."""

    url: str
    screenshot: bytes  # PNG
    html: str
    text: str

    def to_dict(self) -> dict:
        """Summary for logging; content itself is omitted."""
        return {
            "url": self.url,
            "screenshot_bytes": len(self.screenshot),
            "html_chars": len(self.html),
            "text_chars": len(self.text),
        }


@dataclass
class CaptureConfig:
    """Configuration for the browser capturer."""

    timeout: int = 30000  # ms navigation timeout
    viewport_width: int = 1280
    viewport_height: int = 800
    full_page: bool = True
    wait_until: str = "networkidle"
    launch_args: tuple[str, ...] = (
        "--no-sandbox",
        "--disable-setuid-sandbox",
        "--disable-dev-shm-usage",
    )


class PageCapturer(ABC):
    """Abstract page capture collaborator."""

    @abstractmethod
    async def capture(self, url: str) -> PageCapture:
        """Capture a page or raise CaptureError."""
        ...


class BrowserCapturer(PageCapturer):
    """Captures pages with headless Chromium. Each capture uses its own browser."""

    def __init__(self, config: CaptureConfig | None = None):
        self.config = config or CaptureConfig()

    async def capture(self, url: str) -> PageCapture:
        """
        Load a page and snapshot it.

        Args:
            url: Absolute http(s) URL

        Returns:
            PageCapture with screenshot, markup and visible text

        Raises:
            ValidationError: If the URL is not http(s)
            CaptureError: On network failure, navigation timeout, or any
                other browser error
        """
        url = validate_url(url)

        try:
            async with async_playwright() as pw:
                browser = await pw.chromium.launch(
                    headless=True,
                    args=list(self.config.launch_args),
                )
                try:
                    page = await browser.new_page(
                        viewport={
                            "width": self.config.viewport_width,
                            "height": self.config.viewport_height,
                        }
                    )
                    await page.goto(
                        url,
                        timeout=self.config.timeout,
                        wait_until=self.config.wait_until,
                    )
                    screenshot = await page.screenshot(
                        full_page=self.config.full_page,
                        type="png",
                    )
                    html = await page.content()
                    text = await page.evaluate("() => document.body ? document.body.innerText : ''")
                finally:
                    await browser.close()

        except PlaywrightTimeout as e:
            logger.warning("capture_timeout", url=url, timeout_ms=self.config.timeout)
            raise CaptureError.timeout(url, self.config.timeout) from e
        except PlaywrightError as e:
            message = str(e)
            if "net::ERR_" in message:
                logger.warning("capture_network_error", url=url, error=message)
                raise CaptureError.network(url) from e
            logger.warning("capture_failed", url=url, error=message)
            raise CaptureError(f"Failed to capture page: {_first_line(message)}", url=url) from e

        capture = PageCapture(url=url, screenshot=screenshot, html=html, text=text or "")
        logger.info("page_captured", **capture.to_dict())
        return capture


def _first_line(message: str) -> str:
    """Playwright errors carry a multi-line call log; keep only the summary."""
    return message.strip().splitlines()[0] if message.strip() else "unknown error"


def get_capturer(
    timeout_ms: int = 30000,
    viewport_width: int = 1280,
    viewport_height: int = 800,
    full_page: bool = True,
) -> PageCapturer:
    """Factory for the default browser capturer."""
    return BrowserCapturer(
        CaptureConfig(
            timeout=timeout_ms,
            viewport_width=viewport_width,
            viewport_height=viewport_height,
            full_page=full_page,
        )
    )
